"""Data models for the follow-ups module."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

CATEGORIES = ("unanswered", "commitments", "questions", "flagged")
ALL = "all"

_CATEGORY_LABELS = {
    "unanswered": "Unanswered",
    "commitments": "Commitments",
    "questions": "Questions",
    "flagged": "Flagged",
}


def _str(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _days(value: Any) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class FollowUpItem:
    """One email the scan agent flagged as needing action."""

    email_subject: str = ""
    sender: str = ""
    last_activity: str = ""
    category: str = ""
    reason: str = ""
    days_waiting: int = 0
    thread_id: str = ""
    has_reminder: bool = False
    reminder_date: str = ""
    draft_content: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> FollowUpItem:
        return cls(
            email_subject=_str(data.get("email_subject")),
            sender=_str(data.get("sender")),
            last_activity=_str(data.get("last_activity")),
            category=_str(data.get("category")),
            reason=_str(data.get("reason")),
            days_waiting=_days(data.get("days_waiting")),
            thread_id=_str(data.get("thread_id")),
            has_reminder=bool(data.get("has_reminder")),
            reminder_date=_str(data.get("reminder_date")),
            draft_content=_str(data.get("draft_content")),
        )

    @property
    def display_category(self) -> str:
        """Known categories by name; anything else is "General"."""
        return _CATEGORY_LABELS.get(self.category.lower(), "General")


@dataclass
class ScanResult:
    """Outcome of one follow-up scan."""

    items: list[FollowUpItem] = field(default_factory=list)
    total_count: int = 0
    categories_summary: dict[str, int] = field(default_factory=dict)
    scan_timestamp: str = ""
    status: str = "completed"
    message: str = ""

    @classmethod
    def from_payload(cls, data: dict) -> ScanResult:
        raw_items = data.get("follow_up_items")
        if not isinstance(raw_items, list):
            raw_items = []
        items = [FollowUpItem.from_dict(i) for i in raw_items if isinstance(i, dict)]

        summary = data.get("categories_summary")
        if not isinstance(summary, dict):
            summary = {}

        counts: dict[str, int] = {}
        for key, value in summary.items():
            key = str(key).lower()
            counts[key] = counts.get(key, 0) + _days(value)

        total = data.get("total_count")
        return cls(
            items=items,
            total_count=_days(total) if total is not None else len(items),
            categories_summary=counts,
            scan_timestamp=_str(data.get("scan_timestamp")) or datetime.now(timezone.utc).isoformat(),
            status=_str(data.get("status")) or "completed",
            message=_str(data.get("message")),
        )
