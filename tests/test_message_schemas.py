import pytest
from pydantic import ValidationError

from voice_relay.config.instructions import SYSTEM_MESSAGE
from voice_relay.models.openai_schemas import (
    InputAudioBufferAppendMessage,
    RealtimeSessionConfig,
    SessionUpdateMessage,
    find_response_transcript,
)
from voice_relay.models.twilio_schemas import (
    MediaPayload,
    OutboundMediaMessage,
    TwilioMediaMessage,
    TwilioStartMessage,
)


class TestTwilioSchemas:
    def test_start_message(self):
        message = TwilioStartMessage(**{
            "event": "start",
            "sequenceNumber": "1",
            "start": {"streamSid": "MZ123", "callSid": "CA123", "tracks": ["inbound"]},
            "streamSid": "MZ123",
        })
        assert message.start.streamSid == "MZ123"
        assert message.start.callSid == "CA123"

    def test_start_message_requires_stream_sid(self):
        with pytest.raises(ValidationError):
            TwilioStartMessage(event="start", start={})

    def test_media_message(self):
        message = TwilioMediaMessage(**{
            "event": "media",
            "media": {"track": "inbound", "chunk": "1", "timestamp": "5", "payload": "AAAA"},
        })
        assert message.media.payload == "AAAA"

    def test_media_message_requires_payload(self):
        with pytest.raises(ValidationError):
            TwilioMediaMessage(event="media", media={})

    def test_media_message_rejects_other_event(self):
        with pytest.raises(ValidationError):
            TwilioMediaMessage(event="start", media={"payload": "AAAA"})

    def test_outbound_media_message(self):
        message = OutboundMediaMessage(streamSid="MZ123", media=MediaPayload(payload="BBBB"))
        assert message.model_dump() == {
            "event": "media",
            "streamSid": "MZ123",
            "media": {"payload": "BBBB"},
        }


class TestOpenAISchemas:
    def test_session_update_defaults(self):
        message = SessionUpdateMessage(
            session=RealtimeSessionConfig(instructions=SYSTEM_MESSAGE)
        ).model_dump()

        assert message["type"] == "session.update"
        session = message["session"]
        assert session["turn_detection"] == {"type": "server_vad"}
        assert session["input_audio_format"] == "g711_ulaw"
        assert session["output_audio_format"] == "g711_ulaw"
        assert session["voice"] == "alloy"
        assert session["instructions"] == SYSTEM_MESSAGE
        assert session["modalities"] == ["text", "audio"]
        assert session["temperature"] == 0.8
        assert session["input_audio_transcription"] == {"model": "whisper-1"}

    def test_input_audio_buffer_append(self):
        message = InputAudioBufferAppendMessage(audio="AAAA").model_dump()
        assert message == {"type": "input_audio_buffer.append", "audio": "AAAA"}

    def test_find_response_transcript_first_match(self):
        event = {
            "type": "response.done",
            "response": {
                "output": [
                    {"content": [{"type": "audio"}, {"type": "audio", "transcript": "Hello there"}]},
                    {"content": [{"transcript": "Second item"}]},
                ]
            },
        }
        assert find_response_transcript(event) == "Hello there"

    def test_find_response_transcript_searches_later_items(self):
        event = {"response": {"output": [{"type": "function_call"}, {"content": [{"transcript": "Later"}]}]}}
        assert find_response_transcript(event) == "Later"

    @pytest.mark.parametrize("event", [
        {},
        {"response": None},
        {"response": {"output": []}},
        {"response": {"output": [{"content": [{"type": "text", "text": "no transcript"}]}]}},
        {"response": {"output": [{"content": [{"transcript": ""}]}]}},
    ])
    def test_find_response_transcript_none(self, event):
        assert find_response_transcript(event) is None
