"""
Unit tests for the CallCoordinator.

These tests verify how one call's caller frames, provider events and teardown
are routed between the session, the relay and the transcript processor.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from voice_relay.bot.call_coordinator import CallCoordinator, CallState
from voice_relay.models.session import SessionStore
from voice_relay.services.transcript_processor import TranscriptProcessor


class RecordingWebSocket:
    """A simple websocket mock that records sent messages."""

    def __init__(self):
        self.sent_messages = []

    async def send_text(self, text):
        self.sent_messages.append(json.loads(text))


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def processor():
    return AsyncMock(spec=TranscriptProcessor)


@pytest.fixture
def websocket():
    return RecordingWebSocket()


@pytest.fixture
def coordinator(store, processor, websocket, fake_relay_cls):
    return CallCoordinator("CA123", websocket, store, processor, fake_relay_cls)


async def started(coordinator):
    await coordinator.start()
    await coordinator._connect_task
    return coordinator


@pytest.mark.asyncio
async def test_initialization_creates_session(coordinator, store):
    assert coordinator.state is CallState.ACTIVE
    assert store.get("CA123") is coordinator.session
    assert coordinator.relay.event_handler == coordinator.on_provider_event


@pytest.mark.asyncio
async def test_reuses_existing_session(store, processor, websocket, fake_relay_cls):
    existing = store.get_or_create("CA123")
    existing.add_user_line("earlier")

    coordinator = CallCoordinator("CA123", websocket, store, processor, fake_relay_cls)

    assert coordinator.session is existing


@pytest.mark.asyncio
async def test_start_event_sets_stream_sid(coordinator):
    await coordinator.on_caller_event({"event": "start", "start": {"streamSid": "SS1"}})

    assert coordinator.session.stream_sid == "SS1"


@pytest.mark.asyncio
async def test_media_forwarded_when_relay_open(coordinator):
    await started(coordinator)

    await coordinator.on_caller_event({"event": "media", "media": {"payload": "AAAA"}})

    assert coordinator.relay.sent_audio == ["AAAA"]


@pytest.mark.asyncio
async def test_media_dropped_before_relay_open(coordinator):
    await coordinator.on_caller_event({"event": "media", "media": {"payload": "AAAA"}})

    assert coordinator.relay.sent_audio == []


@pytest.mark.asyncio
async def test_media_dropped_after_relay_closed(coordinator):
    await started(coordinator)
    await coordinator.relay.close()

    await coordinator.on_caller_event({"event": "media", "media": {"payload": "AAAA"}})

    assert coordinator.relay.sent_audio == []


@pytest.mark.asyncio
async def test_unknown_caller_events_ignored(coordinator):
    await coordinator.on_caller_event({"event": "mark", "mark": {"name": "x"}})
    await coordinator.on_caller_event({"event": "stop"})
    await coordinator.on_caller_event({"no_event": True})

    assert coordinator.session.transcript == ""
    assert coordinator.session.stream_sid is None


@pytest.mark.asyncio
async def test_provider_events_build_transcript(coordinator, websocket):
    await coordinator.on_caller_event({"event": "start", "start": {"streamSid": "SS1"}})

    await coordinator.on_provider_event({
        "type": "conversation.item.input_audio_transcription.completed", "transcript": " hi "})
    await coordinator.on_provider_event({
        "type": "response.done", "response": {"output": [{"content": [{"transcript": "Hello!"}]}]}})
    await coordinator.on_provider_event({"type": "response.audio.delta", "delta": "BBBB"})
    await coordinator.on_provider_event({"type": "session.created"})

    assert coordinator.session.transcript == "User: hi\nAgent: Hello!\n"
    assert websocket.sent_messages == [
        {"event": "media", "streamSid": "SS1", "media": {"payload": "BBBB"}}
    ]


@pytest.mark.asyncio
async def test_audio_delta_without_delta_sends_nothing(coordinator, websocket):
    await coordinator.on_provider_event({"type": "response.audio.delta"})

    assert websocket.sent_messages == []


@pytest.mark.asyncio
async def test_caller_close_tears_down_once(coordinator, store, processor):
    await started(coordinator)
    coordinator.session.add_user_line("hello")

    await coordinator.on_caller_close()
    await coordinator.on_caller_close()

    processor.process.assert_awaited_once_with("User: hello\n", "CA123")
    assert coordinator.relay.close_count == 1
    assert "CA123" not in store
    assert coordinator.state is CallState.CLOSED


@pytest.mark.asyncio
async def test_caller_close_before_start_event(coordinator, store, processor):
    await coordinator.on_caller_close()

    processor.process.assert_awaited_once_with("", "CA123")
    assert "CA123" not in store


@pytest.mark.asyncio
async def test_relay_closed_before_post_processing(coordinator, processor):
    await started(coordinator)
    relay_open_during_processing = []

    async def record(transcript, call_id):
        relay_open_during_processing.append(coordinator.relay.is_open)

    processor.process.side_effect = record

    await coordinator.on_caller_close()

    assert relay_open_during_processing == [False]


@pytest.mark.asyncio
async def test_events_after_close_are_dropped(coordinator, websocket):
    await coordinator.on_caller_event({"event": "start", "start": {"streamSid": "SS1"}})
    await coordinator.on_caller_close()

    await coordinator.on_provider_event({"type": "response.audio.delta", "delta": "BBBB"})
    await coordinator.on_provider_event({
        "type": "conversation.item.input_audio_transcription.completed", "transcript": "late"})
    await coordinator.on_caller_event({"event": "start", "start": {"streamSid": "SS2"}})

    assert websocket.sent_messages == []
    assert coordinator.session.transcript == ""
    assert coordinator.session.stream_sid == "SS1"


@pytest.mark.asyncio
async def test_session_removed_when_post_processing_fails(coordinator, store, processor):
    processor.process.side_effect = RuntimeError("network down")

    await coordinator.on_caller_close()

    assert "CA123" not in store
    assert coordinator.state is CallState.CLOSED


@pytest.mark.asyncio
async def test_close_cancels_pending_connect(store, processor, websocket, fake_relay_cls):
    class SlowRelay(fake_relay_cls):
        async def connect(self):
            await asyncio.sleep(10)
            return True

    coordinator = CallCoordinator("CA123", websocket, store, processor, SlowRelay)
    await coordinator.start()

    await coordinator.on_caller_close()

    assert coordinator._connect_task.cancelled()
    assert coordinator.relay.is_open is False
    processor.process.assert_awaited_once()
