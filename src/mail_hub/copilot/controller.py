"""Inbox and reply-copilot flows on top of the copilot agent."""

from __future__ import annotations

import logging
import time
from typing import Callable

from mail_hub.agent.auth import find_auth_url_in
from mail_hub.agent.client import AgentClient
from mail_hub.agent.parser import NoPayload, classify, parse_result, payload_fields
from mail_hub.agent.session import SessionManager
from mail_hub.clipboard import copy_to_clipboard
from mail_hub.config import COPIED_TTL_SECONDS, COPILOT_AGENT_ID, HubSettings
from mail_hub.copilot.models import ChatMessage, Draft, EmailItem
from mail_hub.copilot.reconciler import DraftReconciler
from mail_hub.exceptions import MailHubError
from mail_hub.followups.models import FollowUpItem
from mail_hub.gmail.connection import GmailConnection
from mail_hub.status import AgentActivity, StatusBoard

logger = logging.getLogger(__name__)

SEEDED_NOTE = "Here is the follow-up draft. You can refine it by sending me instructions."
AUTH_NEEDED_NOTICE = "Gmail authorization needed. Opening authorization window..."


class CopilotController:
    """Owns the selected email, its thread text and the draft conversation."""

    def __init__(
        self,
        agent: AgentClient,
        sessions: SessionManager,
        status: StatusBoard,
        activity: AgentActivity,
        connection: GmailConnection,
        settings: HubSettings,
        agent_id: str = COPILOT_AGENT_ID,
        copier: Callable[[str], bool] = copy_to_clipboard,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._agent = agent
        self._sessions = sessions
        self._status = status
        self._activity = activity
        self._connection = connection
        self.settings = settings
        self.agent_id = agent_id
        self._copier = copier
        self._clock = clock

        self.reconciler = DraftReconciler()
        self.emails: list[EmailItem] = []
        self.selected: EmailItem | None = None
        self.thread_content = ""
        self.open = False
        self.fetching_emails = False
        self.fetching_thread = False
        self._copied_at: float | None = None

    @property
    def draft(self) -> Draft | None:
        return self.reconciler.draft

    @property
    def transcript(self) -> tuple[ChatMessage, ...]:
        return self.reconciler.transcript

    async def _call(self, message: str, session_id: str):
        """Invoke the copilot agent with the activity marker held for the call."""
        with self._activity.running(self.agent_id):
            return await self._agent.invoke(message, self.agent_id, session_id)

    # ---- Inbox ----

    def load_emails(self, emails: list[EmailItem]) -> None:
        self.emails = list(emails)

    async def fetch_emails(self, query: str = "") -> bool:
        """Ask the agent to fetch or search the inbox."""
        self.fetching_emails = True
        instruction = (
            f"Search my Gmail inbox for: {query}" if query else "Fetch my recent emails from Gmail"
        )
        try:
            result = await self._call(instruction, self._sessions.current)
        except MailHubError as e:
            logger.warning(f"Fetching emails failed: {e}")
            self._status.post(
                "Error fetching emails. Please check your Gmail connection in Settings.", "error"
            )
            return False
        finally:
            self.fetching_emails = False

        auth_url = find_auth_url_in(result)
        if auth_url:
            self._connection.open_authorization(auth_url, AUTH_NEEDED_NOTICE)
            return False

        payload = classify(result)
        if isinstance(payload, NoPayload):
            self._status.post(
                result.error
                or "Failed to fetch emails. You may need to connect Gmail first via Settings.",
                "error",
            )
            return False

        self._connection.mark_connected()
        fields = payload_fields(payload)
        if isinstance(fields.get("message"), str) and fields["message"]:
            self._status.post(fields["message"], "info")
        summary = fields.get("thread_summary") or fields.get("draft_body")
        if isinstance(summary, str) and summary:
            self.thread_content = summary
        return True

    async def select_email(self, email: EmailItem) -> str:
        """Select ``email`` and load its thread text through the current session."""
        self.selected = email
        self.open = False
        self.thread_content = ""
        self.fetching_thread = True
        try:
            result = await self._call(
                f"Fetch the full email thread for thread ID: {email.thread_id}. "
                f'Subject: "{email.subject}" from {email.sender}',
                self._sessions.current,
            )
        except MailHubError as e:
            logger.warning(f"Loading thread {email.thread_id} failed: {e}")
            self._status.post("Error loading thread", "error")
            return self.thread_content
        finally:
            self.fetching_thread = False

        data = parse_result(result)
        if data is None and not result.success:
            self._status.post(result.error or "Error loading thread", "error")
            return self.thread_content
        if isinstance(data, dict):
            for key in ("thread_summary", "message", "draft_body"):
                value = data.get(key)
                if isinstance(value, str) and value:
                    self.thread_content = value
                    break
        return self.thread_content

    # ---- Copilot ----

    async def open_copilot(self) -> Draft | None:
        """Start a new conversation about the selected email and draft a reply."""
        if self.selected is None:
            return None
        self.open = True
        self.reconciler.reset()
        return await self.generate_draft()

    async def generate_draft(self) -> Draft | None:
        """(Re)generate a draft in a fresh session."""
        email = self.selected
        if email is None:
            return None
        self.reconciler.begin()
        session_id = self._sessions.rotate()
        instruction = (
            f"Draft a {self.settings.tone} reply to this email thread. "
            f'Subject: "{email.subject}". From: {email.sender}. '
            f"Context: {self.thread_content or email.snippet}"
        )
        try:
            result = await self._call(instruction, session_id)
        except MailHubError as e:
            logger.warning(f"Draft generation failed: {e}")
            self.reconciler.fail()
            self._status.post("Error generating draft", "error")
            return None

        payload = classify(result)
        if isinstance(payload, NoPayload):
            self.reconciler.fail()
            self._status.post("Failed to generate draft", "error")
            return None
        return self.reconciler.apply_generated(
            payload_fields(payload), email.subject, default_tone=self.settings.tone
        )

    async def send_chat(self, text: str) -> ChatMessage | None:
        """Send a refinement turn within the current session."""
        text = text.strip()
        if not text or self.reconciler.loading:
            return None
        self.reconciler.add_user_message(text)
        self.reconciler.begin()
        try:
            result = await self._call(text, self._sessions.current)
        except MailHubError as e:
            logger.warning(f"Copilot chat turn failed: {e}")
            self.reconciler.fail()
            self._status.post("Error sending message", "error")
            return None

        payload = classify(result)
        if isinstance(payload, NoPayload):
            self.reconciler.fail()
            self._status.post(result.error or "Failed to get a response", "error")
            return None
        return self.reconciler.apply_refinement(payload_fields(payload))

    async def send_reply(self) -> bool:
        """Ask the agent to send the current (or edited) draft."""
        draft = self.reconciler.draft
        email = self.selected
        if draft is None or not draft.body or email is None:
            return False

        body = self.reconciler.outgoing_body
        subject = draft.subject or f"Re: {email.subject}"
        self.reconciler.loading = True
        try:
            result = await self._call(
                f'Send this reply to thread {email.thread_id}: Subject: "{subject}" Body: {body}',
                self._sessions.current,
            )
        except MailHubError as e:
            logger.warning(f"Sending reply failed: {e}")
            self._status.post("Error sending reply", "error")
            return False
        finally:
            self.reconciler.loading = False

        data = parse_result(result)
        if data is None and not result.success:
            self._status.post(result.error or "Failed to send reply", "error")
            return False
        fields = data if isinstance(data, dict) else {}
        failed = fields.get("status") == "error"
        message = fields.get("message")
        self._status.post(
            message if isinstance(message, str) and message else "Reply sent successfully",
            "error" if failed else "success",
        )
        self.reconciler.stop_editing()
        return not failed

    def copy_draft(self) -> bool:
        """Copy the outgoing body; flips ``copied`` on for a short while."""
        if not self._copier(self.reconciler.outgoing_body):
            return False
        self._copied_at = self._clock()
        return True

    @property
    def copied(self) -> bool:
        if self._copied_at is None:
            return False
        return self._clock() - self._copied_at < COPIED_TTL_SECONDS

    def refine_follow_up(self, item: FollowUpItem) -> Draft:
        """Open the copilot on a follow-up's drafted content, without a remote call."""
        self.selected = EmailItem(
            id=item.thread_id,
            thread_id=item.thread_id,
            subject=item.email_subject,
            sender=item.sender,
            snippet=item.reason,
            timestamp=item.last_activity,
        )
        self.thread_content = item.reason
        self.open = True
        self._sessions.rotate()
        draft = Draft(
            subject=f"Re: {item.email_subject}",
            body=item.draft_content,
            tone=self.settings.tone,
            status="draft_ready",
        )
        self.reconciler.seed(draft, SEEDED_NOTE)
        return draft

    def reset(self) -> None:
        self.emails = []
        self.selected = None
        self.open = False
        self.thread_content = ""
        self.reconciler.reset()
