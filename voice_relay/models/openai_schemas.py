"""
Pydantic models for OpenAI Realtime API message structures.

This module provides type-safe models for the client events the relay sends to the
Realtime API and helpers for reading the server events it consumes.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from voice_relay.config.constants import (
    AUDIO_FORMAT_G711_ULAW,
    DEFAULT_TEMPERATURE,
    DEFAULT_VOICE,
    INPUT_TRANSCRIPTION_MODEL,
)


class TurnDetection(BaseModel):
    """Turn detection settings; server_vad lets the provider detect end of speech."""
    type: str = "server_vad"


class InputAudioTranscription(BaseModel):
    """Enables transcripts of the caller's speech."""
    model: str = INPUT_TRANSCRIPTION_MODEL


class RealtimeSessionConfig(BaseModel):
    """Session configuration pushed once after connecting."""
    turn_detection: TurnDetection = Field(default_factory=TurnDetection)
    input_audio_format: str = AUDIO_FORMAT_G711_ULAW
    output_audio_format: str = AUDIO_FORMAT_G711_ULAW
    voice: str = DEFAULT_VOICE
    instructions: str
    modalities: List[str] = Field(default_factory=lambda: ["text", "audio"])
    temperature: float = DEFAULT_TEMPERATURE
    input_audio_transcription: InputAudioTranscription = Field(
        default_factory=InputAudioTranscription
    )


class SessionUpdateMessage(BaseModel):
    """session.update client event."""
    type: Literal["session.update"] = "session.update"
    session: RealtimeSessionConfig


class InputAudioBufferAppendMessage(BaseModel):
    """input_audio_buffer.append client event carrying base64 caller audio."""
    type: Literal["input_audio_buffer.append"] = "input_audio_buffer.append"
    audio: str


def find_response_transcript(event: Dict[str, Any]) -> Optional[str]:
    """
    Find the first content transcript in a response.done event.

    Output items are searched in order and the first content entry with a
    non-empty transcript wins.

    Args:
        event: Decoded response.done server event

    Returns:
        The transcript text, or None if no content entry carries one
    """
    response = event.get("response") or {}
    for item in response.get("output") or []:
        if not isinstance(item, dict):
            continue
        for content in item.get("content") or []:
            if isinstance(content, dict) and content.get("transcript"):
                return content["transcript"]
    return None
