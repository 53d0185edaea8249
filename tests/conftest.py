import os
import logging

import pytest

# Required settings must exist before voice_relay.main is imported
os.environ.setdefault("OPENAI_API_KEY", "test-api-key")
os.environ.setdefault("TWILIO_ACCOUNT_SID", "ACtest")
os.environ.setdefault("TWILIO_AUTH_TOKEN", "test-auth-token")
os.environ.setdefault("WEBHOOK_URL", "https://hooks.example.com/calls")


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.basicConfig(level=logging.NOTSET)
    yield


class FakeRelay:
    """Stands in for RealtimeRelay and records what the call sends to the provider."""

    def __init__(self, event_handler, connect_result=True):
        self.event_handler = event_handler
        self.is_open = False
        self.connect_result = connect_result
        self.sent_audio = []
        self.close_count = 0

    async def connect(self):
        self.is_open = self.connect_result
        return self.connect_result

    async def send_audio(self, payload):
        if not self.is_open:
            return False
        self.sent_audio.append(payload)
        return True

    async def close(self):
        self.close_count += 1
        self.is_open = False

    async def emit(self, event):
        await self.event_handler(event)


@pytest.fixture
def fake_relay_cls():
    return FakeRelay
