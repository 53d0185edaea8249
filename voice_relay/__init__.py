"""
Voice Relay - Twilio Media Streams to OpenAI Realtime API Bridge

This application answers phone calls through Twilio and relays the call audio to
OpenAI's Realtime API, so a speech-to-speech model can hold the conversation. When
the caller hangs up, the accumulated transcript is summarized and the extracted
caller details are posted to a notification webhook.

Architecture Overview:
- FastAPI server exposing the Twilio voice webhook and the media stream WebSocket
- One OpenAI Realtime connection per call, configured once it is ready
- Bidirectional audio streaming with payloads passed through unchanged
- In-memory per-call sessions holding the transcript and Twilio stream SID

Key Components:
- bot: The provider relay and the per-call coordinator
- config: Constants, system instructions, settings and logging setup
- handlers: Twilio frame, OpenAI event and webhook handlers
- models: Session state and wire message schemas
- services: Post-call transcript processing
- websocket_manager: Accepts media stream connections and drives each call

Getting Started:
1. Set up environment variables (or a .env file):
   - OPENAI_API_KEY, TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN, WEBHOOK_URL (required)
   - PORT, HOST, BASIC_AUTH_USERNAME, BASIC_AUTH_PASSWORD, LOG_LEVEL (optional)

2. Start the server:
   ```bash
   python run.py
   ```

3. Point the Twilio phone number's voice webhook at https://your-host/incoming-call
"""
