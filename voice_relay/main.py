"""
FastAPI server relaying Twilio phone calls to the OpenAI Realtime API.

This module initializes and configures the FastAPI application. Twilio requests
the incoming-call webhook when a call arrives and is told to open a bidirectional
media stream to the /media-stream WebSocket, where each call is relayed to the
OpenAI Realtime API until the caller hangs up.
"""

import sys

from fastapi import FastAPI, Request, WebSocket
from fastapi.responses import JSONResponse, Response

from voice_relay.config.constants import INCOMING_CALL_PATH, MEDIA_STREAM_PATH
from voice_relay.config.logging_config import configure_logging
from voice_relay.config.settings import ConfigurationError, load_settings
from voice_relay.handlers.call_handlers import authenticate_webhook, build_connect_twiml
from voice_relay.models.session import SessionStore
from voice_relay.services.transcript_processor import TranscriptProcessor
from voice_relay.websocket_manager import MediaStreamManager

# Configure logging
logger = configure_logging()

try:
    settings = load_settings()
except ConfigurationError as e:
    logger.error(f"{e}. Please set them in the .env file.")
    sys.exit(1)

# Create FastAPI application
app = FastAPI(
    title="Voice Relay",
    description="Relay between Twilio Media Streams and the OpenAI Realtime API",
    version="1.0.0",
)

session_store = SessionStore()
transcript_processor = TranscriptProcessor(settings.openai_api_key, settings.webhook_url)
media_stream_manager = MediaStreamManager.for_openai(
    session_store,
    transcript_processor,
    settings.openai_api_key,
    model=settings.realtime_model,
    voice=settings.voice,
)


@app.get("/")
async def root():
    """Root endpoint to display basic information about the API."""
    return {
        "message": "Twilio Media Stream Server is running!",
        "endpoints": {
            INCOMING_CALL_PATH: "Twilio voice webhook",
            MEDIA_STREAM_PATH: "WebSocket endpoint for Twilio Media Streams",
            "/health": "Health check endpoint",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring system status.

    Returns:
        dict: Status information including the number of calls in progress.
    """
    return {
        "status": "healthy",
        "openai_api_key_configured": bool(settings.openai_api_key),
        "active_calls": len(session_store),
    }


@app.api_route(INCOMING_CALL_PATH, methods=["GET", "POST"])
async def incoming_call(request: Request):
    """Twilio voice webhook.

    Rejects requests that fail authentication, otherwise answers with TwiML that
    connects the call to the media stream endpoint on this host.
    """
    logger.info("Incoming call")

    status_code = await authenticate_webhook(request, settings)
    if status_code == 401:
        return JSONResponse(
            status_code=401, content={"error": "Invalid username or password"}
        )
    if status_code == 403:
        return JSONResponse(status_code=403, content={"error": "Invalid Twilio signature"})

    host = request.headers.get("host", request.url.netloc)
    return Response(content=build_connect_twiml(host), media_type="text/xml")


@app.websocket(MEDIA_STREAM_PATH)
async def media_stream(websocket: WebSocket):
    """WebSocket endpoint for Twilio bidirectional media streams."""
    await media_stream_manager.handle_websocket(websocket)


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Server is listening on port {settings.port}")
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        websocket_ping_interval=5,
        websocket_max_size=16777216,  # 16MB - large enough for audio chunks
        websocket_ping_timeout=20,
        http="h11"
    )
