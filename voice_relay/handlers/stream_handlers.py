"""
Handles audio streaming between the caller and the relay over Twilio Media Streams.

This module processes the start and media frames Twilio sends on the bidirectional
media stream and provides the function used to stream provider audio back to the
caller. Audio payloads are passed through untouched in both directions.
"""

import json
import logging
import time
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from fastapi import WebSocket
from pydantic import ValidationError

from voice_relay.config.constants import (
    CALL_SID_HEADER,
    FALLBACK_CALL_ID_PREFIX,
    LOGGER_NAME,
)
from voice_relay.models.session import CallSession
from voice_relay.models.twilio_schemas import (
    MediaPayload,
    OutboundMediaMessage,
    TwilioMediaMessage,
    TwilioStartMessage,
)

if TYPE_CHECKING:
    from voice_relay.bot.realtime_api import RealtimeRelay

logger = logging.getLogger(LOGGER_NAME)


def resolve_call_id(headers: Mapping[str, str]) -> str:
    """
    Derive the call ID for a media stream connection.

    Uses the Twilio call SID header when present. Otherwise a timestamp based
    ID is generated; two header-less calls connecting in the same millisecond
    would share it.
    """
    call_sid = headers.get(CALL_SID_HEADER)
    if call_sid:
        return call_sid
    return f"{FALLBACK_CALL_ID_PREFIX}{int(time.time() * 1000)}"


async def handle_start(message: Dict[str, Any], session: CallSession) -> None:
    """
    Handle the start frame sent once Twilio begins streaming.

    Args:
        message: The start frame
        session: Session of the call the stream belongs to
    """
    try:
        start = TwilioStartMessage(**message)
    except ValidationError as e:
        logger.error(f"Invalid start message: {e}")
        return

    session.stream_sid = start.start.streamSid
    logger.info(f"Incoming stream has started {session.stream_sid} for call: {session.call_id}")


async def handle_media(message: Dict[str, Any], relay: "RealtimeRelay") -> bool:
    """
    Forward caller audio from a media frame to the provider.

    Frames arriving while the relay is not open are dropped, not queued.

    Args:
        message: The media frame containing the base64 payload
        relay: The call's provider relay

    Returns:
        bool: True if the audio was forwarded
    """
    if not relay.is_open:
        return False

    try:
        media = TwilioMediaMessage(**message)
    except ValidationError as e:
        logger.error(f"Invalid media message: {e}")
        return False

    return await relay.send_audio(media.media.payload)


def build_media_frame(stream_sid: Optional[str], payload: str) -> Dict[str, Any]:
    """Wrap an audio payload in a Twilio media frame addressed to stream_sid."""
    return OutboundMediaMessage(
        streamSid=stream_sid, media=MediaPayload(payload=payload)
    ).model_dump()


async def send_audio_to_caller(
    websocket: WebSocket, stream_sid: Optional[str], payload: str
) -> None:
    """
    Send provider audio to the caller.

    Args:
        websocket: The caller's media stream connection
        stream_sid: The Twilio stream SID, None if start has not arrived yet
        payload: Base64 audio, sent unchanged
    """
    if stream_sid is None:
        logger.debug("Sending audio before the stream has started")
    await websocket.send_text(json.dumps(build_media_frame(stream_sid, payload)))
