"""
Handles the Twilio voice webhook that starts each call.

Twilio requests the webhook when a call comes in. The request is authenticated
(optional HTTP Basic credentials, then the X-Twilio-Signature header) and answered
with TwiML that greets the caller and connects the call to the media stream.
"""

import base64
import binascii
import logging
import secrets
from typing import Dict, Optional

from fastapi import Request
from twilio.request_validator import RequestValidator
from twilio.twiml.voice_response import Connect, VoiceResponse

from voice_relay.config.constants import LOGGER_NAME, MEDIA_STREAM_PATH
from voice_relay.config.instructions import GREETING
from voice_relay.config.settings import Settings

logger = logging.getLogger(LOGGER_NAME)

SIGNATURE_HEADER = "x-twilio-signature"


def check_basic_auth(authorization: Optional[str], username: str, password: str) -> bool:
    """
    Check an Authorization header against the configured Basic credentials.

    Args:
        authorization: Raw Authorization header value, if any
        username: Expected user name
        password: Expected password

    Returns:
        bool: True if the header carries matching credentials
    """
    if not authorization or not authorization.startswith("Basic "):
        return False
    try:
        decoded = base64.b64decode(authorization.split(" ", 1)[1]).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return False
    supplied_user, _, supplied_password = decoded.partition(":")
    return secrets.compare_digest(supplied_user, username) and secrets.compare_digest(
        supplied_password, password
    )


def public_url(request: Request) -> str:
    """Reconstruct the URL Twilio signed, honouring a TLS-terminating proxy."""
    url = request.url
    forwarded_proto = request.headers.get("x-forwarded-proto")
    if forwarded_proto:
        url = url.replace(scheme=forwarded_proto.split(",")[0].strip())
    return str(url)


async def request_params(request: Request) -> Dict[str, str]:
    """Form parameters of a POST webhook; GET parameters are signed as part of the URL."""
    if request.method != "POST":
        return {}
    form = await request.form()
    return {key: str(value) for key, value in form.items()}


async def validate_twilio_signature(request: Request, auth_token: str) -> bool:
    """
    Validate the X-Twilio-Signature header of a webhook request.

    Args:
        request: Incoming webhook request
        auth_token: Twilio auth token the signature was computed with

    Returns:
        bool: True if the signature matches the request URL and parameters
    """
    signature = request.headers.get(SIGNATURE_HEADER)
    if not signature:
        logger.warning("Webhook request without Twilio signature")
        return False

    validator = RequestValidator(auth_token)
    return validator.validate(public_url(request), await request_params(request), signature)


def build_connect_twiml(host: str, greeting: str = GREETING) -> str:
    """
    Build TwiML that greets the caller and opens a bidirectional media stream.

    Args:
        host: Public host name of this service
        greeting: Text spoken before the stream connects
    """
    response = VoiceResponse()
    response.say(greeting)
    connect = Connect()
    connect.stream(url=f"wss://{host}{MEDIA_STREAM_PATH}")
    response.append(connect)
    return str(response)


async def authenticate_webhook(request: Request, settings: Settings) -> Optional[int]:
    """
    Run the webhook authentication checks.

    Returns:
        The HTTP status to reject the request with, or None if it is authentic
    """
    if settings.basic_auth_enabled and not check_basic_auth(
        request.headers.get("authorization"),
        settings.basic_auth_username,
        settings.basic_auth_password,
    ):
        logger.warning("Rejected webhook request with missing or invalid Basic credentials")
        return 401

    if not await validate_twilio_signature(request, settings.twilio_auth_token):
        logger.warning("Rejected webhook request with invalid Twilio signature")
        return 403

    return None
