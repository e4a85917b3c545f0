"""Gmail connection state, driven through the copilot agent.

There is no local mail access: "connected" means the agent reached the
mailbox. An unrelated successful agent call is also taken as evidence of a
live connection, which can over-report connectivity.
"""

from __future__ import annotations

import enum
import logging
import webbrowser
from typing import Callable

from mail_hub.agent.auth import (
    error_suggests_authorization,
    find_auth_url,
    find_auth_url_in,
    mentions_authorization,
)
from mail_hub.agent.client import AgentClient
from mail_hub.agent.parser import parse_result
from mail_hub.agent.session import SessionManager
from mail_hub.config import COPILOT_AGENT_ID
from mail_hub.exceptions import MailHubError
from mail_hub.status import StatusBoard

logger = logging.getLogger(__name__)

VERIFY_INSTRUCTION = "Fetch my most recent email from Gmail inbox to verify the connection is working."
AUTH_WINDOW_NOTICE = (
    "Opening Gmail authorization window. "
    'Please authorize access, then click "Connect Gmail" again.'
)
AUTH_RETRY_ERROR = (
    'Gmail authorization is required. Please try clicking "Connect Gmail" again -- '
    "the agent should provide an authorization link."
)


class ConnectionState(enum.Enum):
    UNKNOWN = "unknown"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


def open_in_browser(url: str) -> bool:
    return webbrowser.open_new_tab(url)


class GmailConnection:
    """Connect/verify flow for the mail account behind the agents.

    Args:
        agent: Agent client used for the verification call.
        sessions: Session manager; the check runs in a one-off session.
        status: Shared status board.
        opener: Callable that opens an authorization URL for the user.
    """

    def __init__(
        self,
        agent: AgentClient,
        sessions: SessionManager,
        status: StatusBoard,
        agent_id: str = COPILOT_AGENT_ID,
        opener: Callable[[str], object] = open_in_browser,
    ):
        self._agent = agent
        self._sessions = sessions
        self._status = status
        self.agent_id = agent_id
        self._opener = opener
        self.state = ConnectionState.UNKNOWN
        self.error: str | None = None
        self.connecting = False

    def _set(self, state: ConnectionState, error: str | None = None) -> None:
        if state != self.state:
            logger.info(f"Gmail connection {self.state.value} -> {state.value}")
        self.state = state
        self.error = error

    def mark_connected(self) -> None:
        """A successful agent call elsewhere counts as evidence of a connection."""
        self._set(ConnectionState.CONNECTED)

    def open_authorization(self, url: str, notice: str) -> None:
        """Send the user to ``url`` and wait for them to retry."""
        self._set(ConnectionState.UNKNOWN)
        self._status.post(notice, "info")
        self._opener(url)

    async def connect(self) -> ConnectionState:
        """Run the verification call and settle on a state."""
        self.connecting = True
        self._set(ConnectionState.CONNECTING)
        self._status.post("Initiating Gmail connection...", "info")
        try:
            result = await self._agent.invoke(
                VERIFY_INSTRUCTION, self.agent_id, self._sessions.one_off()
            )
        except MailHubError as e:
            self._set(ConnectionState.ERROR, str(e) or "Connection failed")
            self._status.post(self.error, "error")
            return self.state
        finally:
            self.connecting = False

        auth_url = find_auth_url_in(result)
        if auth_url:
            self.open_authorization(auth_url, AUTH_WINDOW_NOTICE)
            return self.state

        data = parse_result(result)
        if data is not None or result.success:
            fields = data if isinstance(data, dict) else {}
            reported = _first_text(fields.get("message"), fields.get("text"), result.response_message)
            if mentions_authorization(reported):
                self._set(
                    ConnectionState.UNKNOWN,
                    "Gmail authorization may be needed. The agent reported: "
                    + (_first_text(fields.get("message"), fields.get("text")) or "authorization required"),
                )
                self._status.post("Gmail needs authorization. Check the message below.", "info")
            else:
                self._set(ConnectionState.CONNECTED)
                self._status.post(
                    _first_text(fields.get("message")) or "Gmail connected successfully", "success"
                )
            return self.state

        error_text = result.error or result.response_message or ""
        raw_auth_url = find_auth_url(f"{error_text} {result.raw_response or ''}")
        if raw_auth_url:
            self._set(ConnectionState.UNKNOWN)
            self._opener(raw_auth_url)
        elif error_suggests_authorization(error_text):
            self._set(ConnectionState.UNKNOWN, AUTH_RETRY_ERROR)
        else:
            self._set(ConnectionState.ERROR, error_text or "Failed to connect. Please try again.")
        self._status.post(error_text or "Gmail connection issue detected", "error")
        return self.state


def _first_text(*values) -> str:
    for value in values:
        if isinstance(value, str) and value:
            return value
    return ""
