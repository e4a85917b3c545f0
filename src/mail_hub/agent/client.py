"""Conversational agent service client with sync and async interfaces."""

from __future__ import annotations

import logging
import os

import httpx

from mail_hub.agent.models import AgentResult
from mail_hub.config import AGENT_API_URL, resolve_api_key
from mail_hub.exceptions import AgentTransportError, ConfigurationError

logger = logging.getLogger(__name__)


class AgentClient:
    """Send free-text instructions to a remote agent within a session.

    Args:
        api_key: Agent service key. Falls back to ``MAIL_HUB_API_KEY``.
        base_url: Inference endpoint.
        user_id: Caller identity forwarded to the service.
        timeout: Transport timeout in seconds. ``None`` waits indefinitely.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = AGENT_API_URL,
        user_id: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | httpx.BaseTransport | None = None,
    ):
        if not base_url:
            raise ConfigurationError("Agent service URL is required.")
        self.api_key = resolve_api_key(api_key)
        self.base_url = base_url
        self.user_id = user_id or os.environ.get("MAIL_HUB_USER_ID", "mail-hub")
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "x-api-key": self.api_key,
        }

    def _body(self, message: str, agent_id: str, session_id: str) -> dict:
        return {
            "user_id": self.user_id,
            "agent_id": agent_id,
            "session_id": session_id,
            "message": message,
        }

    async def invoke(self, message: str, agent_id: str, session_id: str) -> AgentResult:
        """Async agent call. Raises ``AgentTransportError`` if the call itself fails."""
        logger.debug(f"Invoking agent {agent_id} in {session_id}: {message[:200]}")
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.base_url,
                    json=self._body(message, agent_id, session_id),
                    headers=self._headers(),
                )
        except httpx.HTTPError as e:
            raise AgentTransportError(f"Agent call failed: {e}") from e

        result = AgentResult.from_http(response.status_code, response.text)
        if not result.success:
            logger.warning(f"Agent {agent_id} returned failure: {result.error}")
        return result

    def invoke_sync(self, message: str, agent_id: str, session_id: str) -> AgentResult:
        """Synchronous agent call."""
        logger.debug(f"Invoking agent {agent_id} in {session_id}: {message[:200]}")
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(
                    self.base_url,
                    json=self._body(message, agent_id, session_id),
                    headers=self._headers(),
                )
        except httpx.HTTPError as e:
            raise AgentTransportError(f"Agent call failed: {e}") from e

        result = AgentResult.from_http(response.status_code, response.text)
        if not result.success:
            logger.warning(f"Agent {agent_id} returned failure: {result.error}")
        return result
