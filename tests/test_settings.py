import pytest

from voice_relay.config.constants import DEFAULT_REALTIME_MODEL, DEFAULT_VOICE
from voice_relay.config.settings import (
    ConfigurationError,
    MissingConfigurationError,
    Settings,
    load_settings,
)


@pytest.fixture
def environ():
    return {
        "OPENAI_API_KEY": "sk-test",
        "TWILIO_ACCOUNT_SID": "AC123",
        "TWILIO_AUTH_TOKEN": "secret",
        "WEBHOOK_URL": "https://hooks.example.com/calls",
    }


def test_load_settings_defaults(environ):
    settings = load_settings(environ)

    assert isinstance(settings, Settings)
    assert settings.openai_api_key == "sk-test"
    assert settings.twilio_account_sid == "AC123"
    assert settings.twilio_auth_token == "secret"
    assert settings.webhook_url == "https://hooks.example.com/calls"
    assert settings.port == 8000
    assert settings.host == "0.0.0.0"
    assert settings.realtime_model == DEFAULT_REALTIME_MODEL
    assert settings.voice == DEFAULT_VOICE
    assert settings.basic_auth_enabled is False


def test_load_settings_optional_values(environ):
    environ.update({
        "PORT": "5050",
        "HOST": "127.0.0.1",
        "BASIC_AUTH_USERNAME": "admin",
        "BASIC_AUTH_PASSWORD": "hunter2",
        "OPENAI_VOICE": "verse",
    })

    settings = load_settings(environ)

    assert settings.port == 5050
    assert settings.host == "127.0.0.1"
    assert settings.voice == "verse"
    assert settings.basic_auth_enabled is True


@pytest.mark.parametrize("name", [
    "OPENAI_API_KEY", "TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "WEBHOOK_URL",
])
def test_load_settings_missing_required(environ, name):
    del environ[name]

    with pytest.raises(MissingConfigurationError) as exc_info:
        load_settings(environ)

    assert exc_info.value.missing == [name]
    assert name in str(exc_info.value)


def test_load_settings_reports_every_missing_value():
    with pytest.raises(MissingConfigurationError) as exc_info:
        load_settings({"OPENAI_API_KEY": ""})

    assert exc_info.value.missing == [
        "OPENAI_API_KEY", "TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "WEBHOOK_URL",
    ]


def test_load_settings_invalid_port(environ):
    environ["PORT"] = "eighty"

    with pytest.raises(ConfigurationError, match="PORT must be an integer"):
        load_settings(environ)
