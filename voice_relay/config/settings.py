"""
Environment-based settings for the voice relay.

Settings are read from the process environment, optionally seeded from a
``.env`` file in the working directory. Required values are checked up front so
that a misconfigured deployment fails at startup instead of mid-call.
"""

import os
from pathlib import Path
from typing import List, Mapping, Optional

import dotenv
from pydantic import BaseModel

from voice_relay.config.constants import DEFAULT_REALTIME_MODEL, DEFAULT_VOICE

REQUIRED_ENV_VARS = (
    "OPENAI_API_KEY",
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "WEBHOOK_URL",
)


class ConfigurationError(Exception):
    """Raised when the environment holds an unusable configuration value."""


class MissingConfigurationError(ConfigurationError):
    """Raised when one or more required environment variables are unset."""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(
            f"Missing required environment variables: {', '.join(missing)}"
        )


class Settings(BaseModel):
    """Runtime configuration for the relay service."""

    openai_api_key: str
    twilio_account_sid: str
    twilio_auth_token: str
    webhook_url: str
    host: str = "0.0.0.0"
    port: int = 8000
    basic_auth_username: Optional[str] = None
    basic_auth_password: Optional[str] = None
    realtime_model: str = DEFAULT_REALTIME_MODEL
    voice: str = DEFAULT_VOICE

    @property
    def basic_auth_enabled(self) -> bool:
        return bool(self.basic_auth_username and self.basic_auth_password)


def load_dotenv_file(path: Path = Path(".") / ".env") -> None:
    """Load environment variables from a .env file if it exists."""
    if path.exists():
        dotenv.load_dotenv(path)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment.

    Args:
        environ: Mapping to read from, defaults to os.environ (after loading .env)

    Returns:
        Settings: The validated settings

    Raises:
        MissingConfigurationError: If a required variable is unset or empty
        ConfigurationError: If PORT is not an integer
    """
    if environ is None:
        load_dotenv_file()
        environ = os.environ

    missing = [name for name in REQUIRED_ENV_VARS if not environ.get(name)]
    if missing:
        raise MissingConfigurationError(missing)

    raw_port = environ.get("PORT") or "8000"
    try:
        port = int(raw_port)
    except ValueError:
        raise ConfigurationError(f"PORT must be an integer, got {raw_port!r}")

    return Settings(
        openai_api_key=environ["OPENAI_API_KEY"],
        twilio_account_sid=environ["TWILIO_ACCOUNT_SID"],
        twilio_auth_token=environ["TWILIO_AUTH_TOKEN"],
        webhook_url=environ["WEBHOOK_URL"],
        host=environ.get("HOST") or "0.0.0.0",
        port=port,
        basic_auth_username=environ.get("BASIC_AUTH_USERNAME") or None,
        basic_auth_password=environ.get("BASIC_AUTH_PASSWORD") or None,
        realtime_model=environ.get("OPENAI_REALTIME_MODEL") or DEFAULT_REALTIME_MODEL,
        voice=environ.get("OPENAI_VOICE") or DEFAULT_VOICE,
    )
