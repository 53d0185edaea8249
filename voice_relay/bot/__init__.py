"""
Bot module connecting Twilio calls to the OpenAI Realtime API.

Key components:
- RealtimeRelay: Connection to the OpenAI Realtime API for one call. Configures the
  session after connecting, forwards caller audio and hands server events to the
  call's coordinator.
- CallCoordinator: Owns one call, routing caller frames and provider events and
  tearing the call down exactly once when the caller hangs up.

Usage examples:
```python
from voice_relay.bot import CallCoordinator, RealtimeRelay
from voice_relay.models.session import SessionStore

coordinator = CallCoordinator(
    call_id,
    websocket,
    SessionStore(),
    processor,
    lambda handler: RealtimeRelay(api_key, event_handler=handler),
)
await coordinator.start()
await coordinator.on_caller_event({"event": "start", "start": {"streamSid": "MZ1"}})
await coordinator.on_caller_close()
```
"""

from voice_relay.bot.call_coordinator import CallCoordinator, CallState
from voice_relay.bot.realtime_api import RealtimeRelay

__all__ = ["RealtimeRelay", "CallCoordinator", "CallState"]
