"""
Pydantic models for Twilio Media Streams message schemas.

This module defines structured data models for the JSON frames exchanged over a
Twilio bidirectional media stream, providing type validation and documentation.
Only the fields the relay reads are declared; unknown fields are ignored so newer
Twilio frames still validate.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class TwilioBaseMessage(BaseModel):
    """Base model for all Twilio Media Streams frames."""

    event: str = Field(..., description="Event type identifier")


class StreamStart(BaseModel):
    """Metadata carried by a start event."""

    streamSid: str = Field(..., description="Identifier of the media stream")
    callSid: Optional[str] = Field(None, description="Identifier of the call")


class TwilioStartMessage(TwilioBaseMessage):
    """Model for the start event sent once the media stream begins."""

    event: Literal["start"]
    start: StreamStart


class MediaPayload(BaseModel):
    """Audio carried by a media frame."""

    payload: str = Field(..., description="Base64 encoded mu-law audio")


class TwilioMediaMessage(TwilioBaseMessage):
    """Model for an inbound media frame containing caller audio."""

    event: Literal["media"]
    media: MediaPayload


class OutboundMediaMessage(TwilioBaseMessage):
    """Model for a media frame sent back to Twilio for playback to the caller."""

    event: Literal["media"] = "media"
    streamSid: Optional[str] = Field(..., description="Stream the audio is addressed to")
    media: MediaPayload
