"""Data models for the agent module."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


@dataclass
class AgentResult:
    """Envelope returned by the conversational agent service.

    ``result`` is whatever the agent put in ``response.result``: usually a
    JSON-encoded string, sometimes an already-decoded object, sometimes absent.
    ``response_message`` carries ``response.message`` when the service sends one.
    """

    success: bool
    result: Any = None
    error: str | None = None
    raw_response: str | None = None
    response_message: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> AgentResult:
        response = data.get("response")
        if not isinstance(response, dict):
            response = {}
        return cls(
            success=bool(data.get("success")),
            result=response.get("result"),
            error=_as_text(data.get("error")),
            raw_response=_as_text(data.get("raw_response")),
            response_message=_as_text(response.get("message")),
        )

    @classmethod
    def from_http(cls, status_code: int, body: str) -> AgentResult:
        """Normalize an HTTP reply into an envelope.

        Bodies that already carry ``success`` are taken as envelopes. Other
        2xx JSON bodies are wrapped, using their ``response`` field as the
        result when present. Non-2xx replies become failed envelopes that keep
        the body as ``raw_response``.
        """
        try:
            data = json.loads(body) if body else None
        except json.JSONDecodeError:
            data = None

        if isinstance(data, dict) and "success" in data:
            return cls.from_dict(data)

        if 200 <= status_code < 300:
            if isinstance(data, dict):
                return cls(success=True, result=data.get("response", data))
            return cls(success=True, result=body)

        error = None
        if isinstance(data, dict):
            error = _as_text(data.get("error") or data.get("detail") or data.get("message"))
        return cls(
            success=False,
            error=error or f"Agent service returned HTTP {status_code}",
            raw_response=body or None,
        )

    def to_dict(self) -> dict:
        response: dict[str, Any] = {"result": self.result}
        if self.response_message is not None:
            response["message"] = self.response_message
        data: dict[str, Any] = {"success": self.success, "response": response}
        if self.error is not None:
            data["error"] = self.error
        if self.raw_response is not None:
            data["raw_response"] = self.raw_response
        return data

    def to_json(self) -> str:
        """Serialize the whole envelope, used for deep URL scanning."""
        return json.dumps(self.to_dict(), default=str)


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)
