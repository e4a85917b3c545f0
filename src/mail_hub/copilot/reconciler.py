"""Merge successive agent payloads into one current draft plus a transcript.

Agent output is loosely shaped: sometimes a full draft, sometimes only a
message. Reconciliation is additive, so a field missing from a payload keeps
its previous value instead of being blanked.
"""

from __future__ import annotations

import enum
import logging
from typing import Any

from mail_hub.copilot.models import ChatMessage, Draft

logger = logging.getLogger(__name__)

DRAFTED_NOTE = "I have drafted a reply for you. You can edit it directly or ask me to refine it."
FALLBACK_REPLY = "Here is my response."


class DraftState(enum.Enum):
    NO_DRAFT = "no_draft"
    PENDING = "pending"
    READY = "ready"


def _text(fields: dict, key: str) -> str | None:
    """Return a non-empty string field, else ``None``."""
    value = fields.get(key)
    if isinstance(value, str) and value:
        return value
    if value is not None and not isinstance(value, (str, dict, list)):
        return str(value)
    return None


def _first(*values: str | None, default: str = "") -> str:
    for value in values:
        if value:
            return value
    return default


def merge_draft(
    previous: Draft | None,
    fields: dict[str, Any],
    default_subject: str = "",
    default_tone: str = "",
    default_status: str = "",
    body_from_message: bool = False,
) -> Draft:
    """Build a draft where every incoming field wins and every absent one falls back."""
    prev = previous or Draft()
    message = _text(fields, "message")
    body = _text(fields, "draft_body")
    if body is None and body_from_message:
        body = message

    actions = fields.get("suggested_actions")
    if isinstance(actions, list):
        suggested = tuple(str(a) for a in actions)
    else:
        suggested = prev.suggested_actions

    return Draft(
        subject=_first(_text(fields, "draft_subject"), prev.subject, default=default_subject),
        body=_first(body, prev.body),
        thread_summary=_first(_text(fields, "thread_summary"), prev.thread_summary),
        suggested_actions=suggested,
        tone=_first(_text(fields, "tone"), prev.tone, default=default_tone),
        status=_first(_text(fields, "status"), prev.status, default=default_status),
        message=message or "",
    )


class DraftReconciler:
    """State machine over ``no draft -> pending -> ready`` with edit mode."""

    def __init__(self):
        self.draft: Draft | None = None
        self.loading = False
        self.editing = False
        self.edit_buffer = ""
        self._pending = False
        self._transcript: list[ChatMessage] = []

    @property
    def state(self) -> DraftState:
        if self._pending:
            return DraftState.PENDING
        if self.draft is not None:
            return DraftState.READY
        return DraftState.NO_DRAFT

    @property
    def transcript(self) -> tuple[ChatMessage, ...]:
        return tuple(self._transcript)

    def _append(self, message: ChatMessage) -> ChatMessage:
        self._transcript.append(message)
        return message

    def begin(self) -> None:
        """A generation or refinement request is in flight."""
        self._pending = True
        self.loading = True

    def _settle(self) -> None:
        self._pending = False
        self.loading = False

    def add_user_message(self, text: str) -> ChatMessage:
        return self._append(ChatMessage(role="user", content=text))

    def apply_generated(
        self,
        fields: dict[str, Any],
        email_subject: str,
        default_tone: str = "",
    ) -> Draft:
        """Adopt a freshly generated draft."""
        draft = merge_draft(
            self.draft,
            fields,
            default_subject=f"Re: {email_subject}",
            default_tone=default_tone,
            default_status="draft_ready",
            body_from_message=True,
        )
        self.draft = draft
        self._append(ChatMessage(role="assistant", content=DRAFTED_NOTE, draft=draft))
        self._settle()
        logger.info(f"Draft ready: {draft.subject!r} ({len(draft.body)} chars)")
        return draft

    def apply_refinement(self, fields: dict[str, Any]) -> ChatMessage:
        """Apply a chat reply; only a non-empty ``draft_body`` replaces the draft."""
        body = _text(fields, "draft_body")
        snapshot = None
        if body:
            snapshot = merge_draft(self.draft, fields)
            self.draft = snapshot
            logger.info(f"Draft refined ({len(body)} chars)")
        content = _first(_text(fields, "message"), body, default=FALLBACK_REPLY)
        message = self._append(ChatMessage(role="assistant", content=content, draft=snapshot))
        self._settle()
        return message

    def fail(self) -> None:
        """The request produced nothing usable; prior state stays as it was."""
        self._settle()

    def seed(self, draft: Draft, note: str) -> None:
        """Start a conversation from an existing draft without a remote call."""
        self.reset()
        self.draft = draft
        self._append(ChatMessage(role="assistant", content=note, draft=draft))

    def reset(self) -> None:
        self.draft = None
        self._transcript = []
        self.editing = False
        self.edit_buffer = ""
        self._settle()

    def start_editing(self) -> None:
        self.edit_buffer = self.draft.body if self.draft else ""
        self.editing = True

    def update_edit(self, text: str) -> None:
        self.edit_buffer = text

    def stop_editing(self) -> None:
        self.editing = False

    @property
    def outgoing_body(self) -> str:
        """Body used by send and copy: the edit buffer while editing."""
        if self.editing:
            return self.edit_buffer
        return self.draft.body if self.draft else ""
