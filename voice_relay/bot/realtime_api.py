import asyncio
import json
import logging
import time
import traceback
from typing import Any, Awaitable, Callable, Dict, Optional

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, ConnectionClosedOK

from voice_relay.config.constants import (
    DEFAULT_REALTIME_MODEL,
    DEFAULT_VOICE,
    LOGGER_NAME,
    OPENAI_REALTIME_URL,
    SESSION_UPDATE_DELAY,
)
from voice_relay.config.instructions import SYSTEM_MESSAGE
from voice_relay.models.openai_schemas import (
    InputAudioBufferAppendMessage,
    RealtimeSessionConfig,
    SessionUpdateMessage,
)

logger = logging.getLogger(LOGGER_NAME)

CONNECTION_TIMEOUT = 30  # seconds

# WebSocket configuration for low latency
WS_MAX_SIZE = 16 * 1024 * 1024  # 16MB - large enough for audio chunks
WS_PING_INTERVAL = 5  # 5 seconds between pings

EventHandler = Callable[[Dict[str, Any]], Awaitable[None]]


class RealtimeRelay:
    """
    Connection to the OpenAI Realtime API for one call.

    The relay opens the provider socket, configures the session once the provider
    is ready, and hands every decoded server event to ``event_handler``. It never
    reconnects: once the provider side closes, sends become no-ops.
    """
    def __init__(self, api_key: str, event_handler: Optional[EventHandler] = None,
                 model: str = DEFAULT_REALTIME_MODEL, voice: str = DEFAULT_VOICE,
                 instructions: str = SYSTEM_MESSAGE, url: str = OPENAI_REALTIME_URL,
                 settle_delay: float = SESSION_UPDATE_DELAY):
        self.api_key = api_key
        self.event_handler = event_handler
        self.model = model
        self.voice = voice
        self.instructions = instructions
        self.url = url
        self.settle_delay = settle_delay
        self.ws = None
        self._recv_task: Optional[asyncio.Task] = None
        self._configure_task: Optional[asyncio.Task] = None
        self._connection_active = False
        self._is_closing = False

    @property
    def is_open(self) -> bool:
        """True while the provider socket is connected and not closing."""
        return self._connection_active and self.ws is not None and not self._is_closing

    async def connect(self) -> bool:
        """
        Connect to the OpenAI Realtime WebSocket endpoint.

        On success the receive loop starts immediately and the session.update
        message is scheduled after the settling delay.

        Returns:
            bool: True if connection was successful, False otherwise
        """
        if self._is_closing:
            logger.warning("Cannot connect - relay is closing")
            return False

        url = f"{self.url}?model={self.model}"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "OpenAI-Beta": "realtime=v1",
        }

        try:
            logger.info(f"Connecting to OpenAI Realtime API with model: {self.model}")
            connection_start = time.time()
            ws = await asyncio.wait_for(
                websockets.connect(
                    url,
                    max_size=WS_MAX_SIZE,
                    ping_interval=WS_PING_INTERVAL,
                    ping_timeout=10,
                    compression=None,
                    additional_headers=headers
                ),
                timeout=CONNECTION_TIMEOUT
            )
            logger.debug(f"WebSocket connection established in {time.time() - connection_start:.2f} seconds")
        except asyncio.TimeoutError:
            logger.error(f"Timeout while connecting to OpenAI Realtime API (after {CONNECTION_TIMEOUT}s)")
            return False
        except Exception as e:
            logger.error(f"Failed to connect to OpenAI Realtime API: {e}")
            logger.debug(f"Connection error details: {traceback.format_exc()}")
            return False

        # The call may have ended while the handshake was in flight
        if self._is_closing:
            logger.info("Relay closed during connection, discarding provider socket")
            await ws.close()
            return False

        self.ws = ws
        self._connection_active = True
        logger.info("Connected to the OpenAI Realtime API")

        self._recv_task = asyncio.create_task(self._recv_loop())
        self._configure_task = asyncio.create_task(self._send_session_update())
        return True

    def build_session_update(self) -> Dict[str, Any]:
        """Build the one-time session.update event for this relay."""
        message = SessionUpdateMessage(
            session=RealtimeSessionConfig(voice=self.voice, instructions=self.instructions)
        )
        return message.model_dump()

    async def _send_session_update(self) -> None:
        await asyncio.sleep(self.settle_delay)
        if await self.send_event(self.build_session_update()):
            logger.info("Sent session.update to OpenAI Realtime API")

    async def send_event(self, event: Dict[str, Any]) -> bool:
        """
        Send a client event to the provider.

        Args:
            event: JSON-serializable client event

        Returns:
            bool: True if the event was written, False if the relay is not open
            or the write failed
        """
        if not self.is_open:
            logger.debug(f"Dropping {event.get('type')} - relay not open")
            return False

        try:
            await self.ws.send(json.dumps(event))
            return True
        except ConnectionClosed as e:
            logger.warning(f"Connection closed while sending {event.get('type')}: {e}")
            self._connection_active = False
            return False
        except Exception as e:
            logger.error(f"Error sending {event.get('type')}: {e}")
            return False

    async def send_audio(self, payload: str) -> bool:
        """
        Append base64 caller audio to the provider's input buffer.

        The payload is forwarded exactly as received from Twilio.
        """
        return await self.send_event(InputAudioBufferAppendMessage(audio=payload).model_dump())

    async def handle_message(self, message: Any) -> None:
        """Decode one provider frame and pass it to the event handler."""
        if isinstance(message, bytes):
            logger.debug(f"Ignoring binary frame of size {len(message)} bytes")
            return

        try:
            event = json.loads(message)
        except json.JSONDecodeError:
            logger.error(f"Error processing OpenAI message, invalid JSON: {message[:100]}")
            return

        if not isinstance(event, dict):
            logger.error(f"Error processing OpenAI message, expected an object: {message[:100]}")
            return

        if self.event_handler is None:
            return

        try:
            await self.event_handler(event)
        except Exception as e:
            logger.error(f"Error processing OpenAI message {event.get('type')}: {e}", exc_info=True)

    async def _recv_loop(self) -> None:
        """
        Receive provider events in arrival order until the socket closes.
        """
        try:
            while self._connection_active and not self._is_closing:
                message = await self.ws.recv()
                await self.handle_message(message)
        except asyncio.CancelledError:
            logger.debug("Receive loop cancelled")
            raise
        except ConnectionClosedOK:
            logger.info("Disconnected from the OpenAI Realtime API")
        except ConnectionClosedError as e:
            logger.error(f"Error in the OpenAI WebSocket: {e}")
        except Exception as e:
            logger.error(f"Error in the OpenAI WebSocket: {e}")
            logger.debug(f"Receive loop error details: {traceback.format_exc()}")
        finally:
            self._connection_active = False

    async def close(self) -> None:
        """
        Close the provider socket and cancel pending tasks.

        Calling close more than once is a no-op.
        """
        if self._is_closing:
            return
        self._is_closing = True
        self._connection_active = False
        logger.info("Closing OpenAI Realtime relay")

        current = asyncio.current_task()
        for task in (self._configure_task, self._recv_task):
            if task and task is not current and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                except Exception as e:
                    logger.warning(f"Error while cancelling relay task: {e}")

        if self.ws:
            try:
                await self.ws.close()
            except Exception as e:
                logger.warning(f"Error closing OpenAI WebSocket: {e}")

        logger.info("OpenAI Realtime relay closed")
