"""
WebSocket connection manager for Twilio Media Streams.

This module implements the server side of a Twilio bidirectional media stream:
- Accept the caller's media stream connection
- Resolve the call ID and set up a CallCoordinator for the call
- Decode each inbound frame and hand it to the coordinator
- Trigger call teardown when the connection ends, however it ends

The MediaStreamManager is shared by all calls; per-call state lives in the
SessionStore and in each call's CallCoordinator.
"""

import json
import logging
from functools import partial
from typing import Dict, Optional

from fastapi import WebSocket, WebSocketDisconnect

from voice_relay.bot.call_coordinator import CallCoordinator, RelayFactory
from voice_relay.bot.realtime_api import RealtimeRelay
from voice_relay.config.constants import LOGGER_NAME
from voice_relay.handlers.stream_handlers import resolve_call_id
from voice_relay.models.session import SessionStore
from voice_relay.services.transcript_processor import TranscriptProcessor

logger = logging.getLogger(LOGGER_NAME)


class MediaStreamManager:
    """Manages Twilio media stream connections and the calls they carry.

    Args:
        store: Registry of active call sessions
        processor: Post-call transcript processor
        relay_factory: Builds the provider relay for a call from its event handler
    """

    def __init__(self, store: SessionStore, processor: TranscriptProcessor,
                 relay_factory: RelayFactory):
        self.store = store
        self.processor = processor
        self.relay_factory = relay_factory
        self.calls: Dict[str, CallCoordinator] = {}

    @classmethod
    def for_openai(cls, store: SessionStore, processor: TranscriptProcessor, api_key: str,
                   model: Optional[str] = None, voice: Optional[str] = None) -> "MediaStreamManager":
        """Build a manager whose calls relay to the OpenAI Realtime API."""
        options = {}
        if model:
            options["model"] = model
        if voice:
            options["voice"] = voice
        factory = partial(RealtimeRelay, api_key, **options)
        return cls(store, processor, lambda handler: factory(event_handler=handler))

    async def handle_websocket(self, websocket: WebSocket):
        """Handle a media stream connection throughout its lifecycle.

        Args:
            websocket (WebSocket): The FastAPI WebSocket connection object

        Frames that cannot be decoded or handled are logged and dropped; only the
        connection closing ends the call.
        """
        await websocket.accept()
        logger.info("Client connected")

        call_id = resolve_call_id(websocket.headers)
        coordinator = CallCoordinator(
            call_id, websocket, self.store, self.processor, self.relay_factory
        )
        self.calls[call_id] = coordinator

        try:
            await coordinator.start()
            while True:
                frame = await websocket.receive()
                if frame["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(frame.get("code", 1000))
                data = frame.get("text")
                if data is None:
                    logger.warning(f"Ignoring non-text frame for call: {call_id}")
                    continue
                try:
                    message = json.loads(data)
                    if not isinstance(message, dict):
                        raise ValueError("frame is not a JSON object")
                    await coordinator.on_caller_event(message)
                except Exception as e:
                    logger.error(f"Error parsing message: {e}")

        except WebSocketDisconnect:
            logger.info(f"Media stream disconnected for call: {call_id}")
        except Exception as e:
            logger.error(f"Error in media stream connection: {e}", exc_info=True)
        finally:
            await coordinator.on_caller_close()
            if self.calls.get(call_id) is coordinator:
                del self.calls[call_id]
            logger.info("WebSocket connection closed")
