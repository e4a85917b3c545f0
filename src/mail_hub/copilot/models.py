"""Data models for the copilot module."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class EmailItem:
    """An inbox entry the user can select."""

    id: str
    thread_id: str
    subject: str
    sender: str
    snippet: str = ""
    timestamp: str = ""
    is_unread: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> EmailItem:
        thread_id = str(data.get("thread_id") or data.get("threadId") or "")
        return cls(
            id=str(data.get("id") or thread_id),
            thread_id=thread_id,
            subject=str(data.get("subject") or ""),
            sender=str(data.get("sender") or ""),
            snippet=str(data.get("snippet") or ""),
            timestamp=str(data.get("timestamp") or ""),
            is_unread=bool(data.get("is_unread", data.get("isUnread", False))),
        )


@dataclass(frozen=True)
class Draft:
    """The agent-proposed reply."""

    subject: str = ""
    body: str = ""
    thread_summary: str = ""
    suggested_actions: tuple[str, ...] = ()
    tone: str = ""
    status: str = ""
    message: str = ""


@dataclass(frozen=True)
class ChatMessage:
    """One transcript turn. Never mutated after it is appended."""

    role: str  # "user" or "assistant"
    content: str
    draft: Draft | None = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
