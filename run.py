"""
Run script for starting the voice relay server.

This script validates the environment and starts the FastAPI server with
WebSocket settings suited to streaming call audio.

Usage:
    python run.py [--port PORT] [--host HOST] [--log-level LEVEL]
"""

import argparse
import os
import sys

import uvicorn

from voice_relay.config.logging_config import configure_logging
from voice_relay.config.settings import ConfigurationError, load_settings

logger = configure_logging()


def parse_args(settings):
    """Parse command line arguments, defaulting to the loaded settings."""
    parser = argparse.ArgumentParser(
        description="Start the voice relay server"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help="Port to run the server on (default: PORT env var or 8000)",
    )
    parser.add_argument(
        "--host",
        default=settings.host,
        help="Host to bind the server to (default: HOST env var or 0.0.0.0)",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO").upper(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO or LOG_LEVEL env var)",
    )
    return parser.parse_args()


def main():
    """Main entry point: fail fast on missing configuration, then serve."""
    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error(str(e))
        print(f"Error: {e}")
        print("Please set them in the environment or the .env file.")
        sys.exit(1)

    args = parse_args(settings)
    configure_logging(args.log_level)

    logger.info(f"Server is listening on port {args.port}")
    logger.info(f"Log level: {args.log_level}")

    uvicorn.run(
        "voice_relay.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
        http="h11",
        # Our own logging covers requests
        access_log=False,
        websocket_ping_interval=5,
        websocket_ping_timeout=20,
        reload=os.getenv("ENV", "production").lower() == "development",
    )


if __name__ == "__main__":
    main()
