"""
Models module for data structures and state management in the voice relay.

Key components:
- session: Per-call state (transcript and Twilio stream SID) and the SessionStore
  registry that owns it for the duration of each call.
- twilio_schemas: Pydantic models for Twilio Media Streams frames.
- openai_schemas: Pydantic models for the OpenAI Realtime API client events and
  helpers for reading its server events.

Usage examples:
```python
from voice_relay.models.session import SessionStore

store = SessionStore()
session = store.get_or_create("CA123")
session.add_user_line("hello")
store.remove("CA123")
```
"""

from voice_relay.models.openai_schemas import (
    InputAudioBufferAppendMessage,
    RealtimeSessionConfig,
    SessionUpdateMessage,
    find_response_transcript,
)
from voice_relay.models.session import CallSession, SessionStore
from voice_relay.models.twilio_schemas import (
    OutboundMediaMessage,
    TwilioMediaMessage,
    TwilioStartMessage,
)
