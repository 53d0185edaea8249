"""
Per-call session state for the Twilio to OpenAI Realtime relay.

This module provides the CallSession model holding the accumulated transcript and
Twilio stream SID of one call, and the SessionStore registry that owns every active
CallSession. A store instance is created by the application and handed to the media
stream manager; there is no module-level session map.
"""

from typing import Dict, Optional

from pydantic import BaseModel

from voice_relay.config.constants import ROLE_AGENT, ROLE_USER


class CallSession(BaseModel):
    """
    State for one active call.

    The transcript is append-only: lines are added in the order the provider
    emitted them, each prefixed with the speaker role.
    """

    call_id: str
    transcript: str = ""
    stream_sid: Optional[str] = None

    def append_line(self, role: str, text: str) -> None:
        self.transcript += f"{role}: {text}\n"

    def add_user_line(self, text: str) -> None:
        self.append_line(ROLE_USER, text)

    def add_agent_line(self, text: str) -> None:
        self.append_line(ROLE_AGENT, text)


class SessionStore:
    """
    Registry of active call sessions keyed by call ID.

    All access happens from the asyncio event loop serving the calls, so the
    store takes no lock.
    """

    def __init__(self):
        """Initialize an empty dictionary of active sessions."""
        self.active_sessions: Dict[str, CallSession] = {}

    def get_or_create(self, call_id: str) -> CallSession:
        """
        Return the session for a call, creating it on first use.

        Args:
            call_id: Twilio call SID or generated fallback identifier

        Returns:
            The existing session for call_id, or a new empty one
        """
        session = self.active_sessions.get(call_id)
        if session is None:
            session = CallSession(call_id=call_id)
            self.active_sessions[call_id] = session
        return session

    def get(self, call_id: str) -> Optional[CallSession]:
        """Get an active session by its call ID, or None."""
        return self.active_sessions.get(call_id)

    def remove(self, call_id: str) -> Optional[CallSession]:
        """
        Remove a session from the registry.

        Removing an unknown or already removed call ID is a no-op.

        Args:
            call_id: Identifier of the session to remove

        Returns:
            The removed session, or None if it was not present
        """
        return self.active_sessions.pop(call_id, None)

    def get_all_sessions(self) -> Dict[str, CallSession]:
        return self.active_sessions

    def __len__(self) -> int:
        return len(self.active_sessions)

    def __contains__(self, call_id: object) -> bool:
        return call_id in self.active_sessions
