"""
Services module for external API integrations in the voice relay.

Key components:
- transcript_processor: After a call ends, summarizes its transcript with a chat
  completion and posts the extracted caller details to the notification webhook.

Usage examples:
```python
from voice_relay.services.transcript_processor import TranscriptProcessor

processor = TranscriptProcessor(api_key, "https://hooks.example.com/calls")
details = await processor.process("User: hi, this is Ann\\n", "CA123")
```
"""
