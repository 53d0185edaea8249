"""
Constants and configuration values used throughout the application.

This module defines constants that are used across different parts of the application,
providing a centralized location for protocol identifiers and tuning values so that
the Twilio and OpenAI sides of the relay use consistent naming.
"""

# Logger name used throughout the application
LOGGER_NAME = "voice_relay"

# OpenAI Realtime API
DEFAULT_REALTIME_MODEL = "gpt-4o-realtime-preview-2024-10-01"
OPENAI_REALTIME_URL = "wss://api.openai.com/v1/realtime"
DEFAULT_VOICE = "alloy"
DEFAULT_TEMPERATURE = 0.8
INPUT_TRANSCRIPTION_MODEL = "whisper-1"

# Twilio Media Streams carry 8kHz mu-law, which the provider accepts as-is
AUDIO_FORMAT_G711_ULAW = "g711_ulaw"

# The provider drops a session.update sent immediately after the handshake.
# Waiting this long (seconds) before configuring works around it.
SESSION_UPDATE_DELAY = 0.25

# Post-call summarization
OPENAI_CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_SUMMARY_MODEL = "gpt-4o-2024-08-06"
HTTP_TIMEOUT = 30.0  # seconds

# Transcript roles
ROLE_USER = "User"
ROLE_AGENT = "Agent"
AGENT_MESSAGE_NOT_FOUND = "Agent message not found"

# Header carrying the Twilio call SID on the media stream upgrade request
CALL_SID_HEADER = "x-twilio-call-sid"
FALLBACK_CALL_ID_PREFIX = "session_"

# Twilio Media Streams event types
TWILIO_EVENT_START = "start"
TWILIO_EVENT_MEDIA = "media"

# OpenAI Realtime event types
EVENT_TRANSCRIPTION_COMPLETED = "conversation.item.input_audio_transcription.completed"
EVENT_RESPONSE_DONE = "response.done"
EVENT_AUDIO_DELTA = "response.audio.delta"
EVENT_ERROR = "error"

# HTTP routes
MEDIA_STREAM_PATH = "/media-stream"
INCOMING_CALL_PATH = "/incoming-call"
