"""
Per-call coordination between the Twilio media stream and the OpenAI Realtime API.

A CallCoordinator owns one call: its session in the SessionStore, the caller's
WebSocket and the provider relay. Caller frames, provider events and the caller
hang-up all enter through its three handler methods, which keeps every mutation of
the call's session on one sequential path.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import WebSocket

from voice_relay.bot.realtime_api import EventHandler, RealtimeRelay
from voice_relay.config.constants import (
    EVENT_AUDIO_DELTA,
    EVENT_ERROR,
    EVENT_RESPONSE_DONE,
    EVENT_TRANSCRIPTION_COMPLETED,
    LOGGER_NAME,
    TWILIO_EVENT_MEDIA,
    TWILIO_EVENT_START,
)
from voice_relay.handlers.realtime_handlers import (
    handle_audio_delta,
    handle_error,
    handle_response_done,
    handle_transcription_completed,
)
from voice_relay.handlers.stream_handlers import (
    handle_media,
    handle_start,
    send_audio_to_caller,
)
from voice_relay.models.session import SessionStore
from voice_relay.services.transcript_processor import TranscriptProcessor

logger = logging.getLogger(LOGGER_NAME)

RelayFactory = Callable[[EventHandler], RealtimeRelay]


class CallState(str, Enum):
    """Lifecycle of a call. Transitions only move forward."""
    ACTIVE = "active"
    CLOSING = "closing"
    CLOSED = "closed"


class CallCoordinator:
    """
    Ties the caller connection and the provider relay together for one call.

    This class handles:
    - Routing Twilio frames (start, media) to the session and the relay
    - Turning provider events into transcript lines and caller audio
    - Tearing the call down exactly once when the caller disconnects
    """

    def __init__(self, call_id: str, websocket: WebSocket, store: SessionStore,
                 processor: TranscriptProcessor, relay_factory: RelayFactory):
        self.call_id = call_id
        self.websocket = websocket
        self.store = store
        self.processor = processor
        self.session = store.get_or_create(call_id)
        self.relay = relay_factory(self.on_provider_event)
        self.state = CallState.ACTIVE
        self._connect_task: Optional[asyncio.Task] = None

        self.caller_handlers: Dict[str, Callable[[Dict[str, Any]], Awaitable[Any]]] = {
            TWILIO_EVENT_START: lambda message: handle_start(message, self.session),
            TWILIO_EVENT_MEDIA: lambda message: handle_media(message, self.relay),
        }
        self.provider_handlers: Dict[str, Callable[[Dict[str, Any]], Awaitable[Any]]] = {
            EVENT_TRANSCRIPTION_COMPLETED: lambda event: handle_transcription_completed(event, self.session),
            EVENT_RESPONSE_DONE: lambda event: handle_response_done(event, self.session),
            EVENT_AUDIO_DELTA: lambda event: handle_audio_delta(event, self.session, self.send_to_caller),
            EVENT_ERROR: lambda event: handle_error(event, self.session),
        }

    async def start(self) -> None:
        """Start connecting the provider relay without blocking caller frames."""
        self._connect_task = asyncio.create_task(self.relay.connect())
        logger.info(f"Started call: {self.call_id}")

    async def send_to_caller(self, stream_sid: Optional[str], payload: str) -> None:
        if self.state is not CallState.ACTIVE:
            return
        await send_audio_to_caller(self.websocket, stream_sid, payload)

    async def on_caller_event(self, message: Dict[str, Any]) -> None:
        """
        Handle one decoded Twilio frame.

        Unknown event types are ignored so new Twilio events do not break calls.
        """
        if self.state is not CallState.ACTIVE:
            return
        handler = self.caller_handlers.get(message.get("event"))
        if handler is None:
            logger.debug(f"Ignoring Twilio event: {message.get('event')}")
            return
        await handler(message)

    async def on_provider_event(self, event: Dict[str, Any]) -> None:
        """Handle one decoded OpenAI Realtime server event."""
        if self.state is not CallState.ACTIVE:
            logger.debug(f"Dropping {event.get('type')} for closing call: {self.call_id}")
            return
        handler = self.provider_handlers.get(event.get("type"))
        if handler is None:
            return
        await handler(event)

    async def _close_relay(self) -> None:
        if self._connect_task and not self._connect_task.done():
            self._connect_task.cancel()
            try:
                await self._connect_task
            except asyncio.CancelledError:
                pass
        await self.relay.close()

    async def on_caller_close(self) -> None:
        """
        Tear the call down after the caller's connection has closed.

        Closes the relay, runs transcript post-processing once and removes the
        session. Later calls are no-ops.
        """
        if self.state is not CallState.ACTIVE:
            return
        self.state = CallState.CLOSING
        logger.info(f"Client disconnected ({self.call_id}).")

        try:
            await self._close_relay()
        except Exception as e:
            logger.error(f"Error closing relay for call {self.call_id}: {e}", exc_info=True)

        try:
            transcript = self.session.transcript
            logger.info(f"Full Transcript ({self.call_id}):\n{transcript}")
            await self.processor.process(transcript, self.call_id)
        except Exception as e:
            logger.error(f"Error post-processing call {self.call_id}: {e}", exc_info=True)
        finally:
            self.store.remove(self.call_id)
            self.state = CallState.CLOSED
            logger.info(f"Call closed: {self.call_id}")
