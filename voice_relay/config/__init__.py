"""
Configuration module for the voice relay application.

This module provides centralized configuration management for the entire application,
including constants, logging setup, and environment-based settings.

Key components:
- constants: Protocol event names, provider endpoints and timing values shared by
  the Twilio and OpenAI sides of the relay.
- instructions: The system instructions sent to the realtime model and the greeting
  spoken before the media stream is connected.
- logging_config: Console and rotating file logging for the "voice_relay" logger.
- settings: Loading and validation of required environment variables.

Usage examples:
```python
from voice_relay.config.settings import load_settings
from voice_relay.config.logging_config import configure_logging

logger = configure_logging()
settings = load_settings()
logger.info(f"Listening on port {settings.port}")
```
"""
