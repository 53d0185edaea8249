"""
Handlers module for the two sides of each relayed call and the voice webhook.

Key components:
- stream_handlers: Processes Twilio Media Streams frames (start, media) and
  streams provider audio back to the caller.
- realtime_handlers: Processes OpenAI Realtime server events, turning
  transcriptions and completed responses into transcript lines and relaying
  audio deltas.
- call_handlers: Authenticates the Twilio voice webhook and builds the TwiML
  that connects a call to the media stream.

The handlers are wired together per call by
voice_relay.bot.call_coordinator.CallCoordinator.
"""
