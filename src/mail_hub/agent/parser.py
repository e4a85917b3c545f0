"""Normalize agent envelopes into payloads.

Pure parsing, no network calls. ``parse_result`` never
raises: a JSON decode failure is an expected path and turns the text into a
``{"message": ...}`` payload.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Union

from mail_hub.agent.models import AgentResult

_TEXT_KEYS = ("message", "text")


def _reject_constant(name: str):
    raise ValueError(f"Non-standard JSON constant: {name}")


@dataclass(frozen=True)
class NoPayload:
    """The envelope carried nothing usable."""


@dataclass(frozen=True)
class TextOnly:
    """The agent answered with prose only."""

    text: str


@dataclass(frozen=True)
class Structured:
    """The agent answered with named fields."""

    fields: dict = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    @property
    def message(self) -> str:
        value = self.fields.get("message")
        return value if isinstance(value, str) else ""


Payload = Union[NoPayload, TextOnly, Structured]


def parse_result(result: AgentResult | dict | None) -> Any:
    """Return the structured payload of an envelope, or ``None``.

    ``None`` means "no usable structured data"; callers decide whether that
    is an error.
    """
    if result is None:
        return None
    if isinstance(result, dict):
        result = AgentResult.from_dict(result)
    if not result.success:
        return None

    data = result.result
    if isinstance(data, str):
        try:
            return json.loads(data, parse_constant=_reject_constant)
        except (json.JSONDecodeError, ValueError):
            return {"message": data}
    return data


def classify(result: AgentResult | dict | None) -> Payload:
    """Parse an envelope into ``NoPayload``, ``TextOnly`` or ``Structured``."""
    data = parse_result(result)
    if data is None:
        return NoPayload()
    if isinstance(data, dict):
        text_only = all(k in _TEXT_KEYS for k in data) and all(
            isinstance(v, str) for v in data.values()
        )
        if text_only and data:
            return TextOnly(data.get("message") or data.get("text") or "")
        return Structured(dict(data))
    if isinstance(data, str):
        return TextOnly(data)
    return TextOnly(json.dumps(data, default=str))


def payload_fields(payload: Payload) -> dict:
    """Flatten any payload variant into a field dict for reconciliation."""
    if isinstance(payload, Structured):
        return payload.fields
    if isinstance(payload, TextOnly):
        return {"message": payload.text}
    return {}
