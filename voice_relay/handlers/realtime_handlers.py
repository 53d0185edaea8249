"""
Handles server events received from the OpenAI Realtime API.

Transcription and response events are turned into transcript lines on the call
session; audio deltas are relayed to the caller.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from voice_relay.config.constants import AGENT_MESSAGE_NOT_FOUND, LOGGER_NAME
from voice_relay.models.openai_schemas import find_response_transcript
from voice_relay.models.session import CallSession

logger = logging.getLogger(LOGGER_NAME)

# Sends a base64 audio payload to the caller, addressed to a stream SID
AudioSender = Callable[[Optional[str], str], Awaitable[None]]


async def handle_transcription_completed(event: Dict[str, Any], session: CallSession) -> None:
    """Append the caller's recognized speech as a User line."""
    transcript = event.get("transcript")
    if not isinstance(transcript, str):
        logger.error(f"Transcription event without transcript text for call {session.call_id}: {event}")
        return
    user_message = transcript.strip()
    session.add_user_line(user_message)
    logger.info(f"User ({session.call_id}): {user_message}")


async def handle_response_done(event: Dict[str, Any], session: CallSession) -> None:
    """Append the agent's spoken response as an Agent line."""
    agent_message = find_response_transcript(event) or AGENT_MESSAGE_NOT_FOUND
    session.add_agent_line(agent_message)
    logger.info(f"Agent ({session.call_id}): {agent_message}")


async def handle_audio_delta(
    event: Dict[str, Any], session: CallSession, send_audio: AudioSender
) -> bool:
    """
    Relay an audio delta to the caller.

    Returns:
        bool: True if a frame was sent, False if the event carried no delta
    """
    delta = event.get("delta")
    if not delta:
        return False
    await send_audio(session.stream_sid, delta)
    return True


async def handle_error(event: Dict[str, Any], session: CallSession) -> None:
    logger.error(f"Received error from OpenAI for call {session.call_id}: {event.get('error')}")
