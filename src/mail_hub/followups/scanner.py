"""Follow-up scan: ask the scan agent for items, store them, filter them."""

from __future__ import annotations

import logging

from dateutil import parser as date_parser

from mail_hub.agent.auth import find_auth_url_in
from mail_hub.agent.client import AgentClient
from mail_hub.agent.parser import NoPayload, Structured, TextOnly, classify, parse_result
from mail_hub.agent.session import SessionManager
from mail_hub.config import COPILOT_AGENT_ID, FOLLOW_UP_AGENT_ID, HubSettings
from mail_hub.exceptions import MailHubError
from mail_hub.followups.models import ALL, CATEGORIES, FollowUpItem, ScanResult
from mail_hub.gmail.connection import GmailConnection
from mail_hub.status import AgentActivity, StatusBoard

logger = logging.getLogger(__name__)

AUTH_NEEDED_NOTICE = "Gmail authorization needed. Opening authorization window..."


def build_scan_instruction(settings: HubSettings) -> str:
    """Compose the scan instruction from the threshold and detection toggles."""
    checks = [f"unanswered emails older than {settings.unanswered_days} days"]
    if settings.commitment_detection:
        checks.append("pending commitments")
    if settings.question_detection:
        checks.append("open questions")
    checks.append("flagged items")
    listed = ", ".join(checks[:-1]) + ", and " + checks[-1]
    return f"Scan my inbox for emails that need follow-up. Check for {listed}."


def filter_items(items: list[FollowUpItem], category: str) -> list[FollowUpItem]:
    """Order-preserving, case-insensitive category filter; ``"all"`` keeps everything."""
    wanted = (category or ALL).lower()
    if wanted == ALL:
        return list(items)
    return [item for item in items if item.category.lower() == wanted]


class FollowUpScanController:
    """Runs scans, holds their results and the user's category filter."""

    def __init__(
        self,
        agent: AgentClient,
        sessions: SessionManager,
        status: StatusBoard,
        activity: AgentActivity,
        connection: GmailConnection,
        settings: HubSettings,
        scan_agent_id: str = FOLLOW_UP_AGENT_ID,
        send_agent_id: str = COPILOT_AGENT_ID,
    ):
        self._agent = agent
        self._sessions = sessions
        self._status = status
        self._activity = activity
        self._connection = connection
        self.settings = settings
        self.scan_agent_id = scan_agent_id
        self.send_agent_id = send_agent_id

        self.items: list[FollowUpItem] = []
        self.result: ScanResult | None = None
        self.category_filter = ALL
        self.scanning = False
        self.sending: str | None = None
        self.reminder_dates: dict[str, str] = {}

    # ---- Scanning ----

    async def scan(self) -> ScanResult | None:
        """Ask the scan agent for follow-ups. Returns ``None`` when nothing was stored."""
        self.scanning = True
        try:
            with self._activity.running(self.scan_agent_id):
                result = await self._agent.invoke(
                    build_scan_instruction(self.settings),
                    self.scan_agent_id,
                    self._sessions.current,
                )
        except MailHubError as e:
            logger.warning(f"Follow-up scan failed: {e}")
            self._status.post("Error scanning for follow-ups", "error")
            return None
        finally:
            self.scanning = False

        auth_url = find_auth_url_in(result)
        if auth_url:
            self._connection.open_authorization(auth_url, AUTH_NEEDED_NOTICE)
            return None

        payload = classify(result)
        if isinstance(payload, NoPayload):
            self._status.post(result.error or "Failed to scan inbox", "error")
            return None

        self._connection.mark_connected()
        if isinstance(payload, Structured):
            scan = ScanResult.from_payload(payload.fields)
        elif isinstance(payload, TextOnly):
            scan = ScanResult.from_payload({"message": payload.text})
        self.load_result(scan)
        logger.info(f"Follow-up scan stored {len(scan.items)} items")
        self._status.post(scan.message or f"Found {len(scan.items)} items needing follow-up", "success")
        return scan

    def load_result(self, scan: ScanResult) -> None:
        self.result = scan
        self.items = list(scan.items)

    def clear(self) -> None:
        self.result = None
        self.items = []
        self.reminder_dates = {}

    # ---- Filtering ----

    def set_filter(self, category: str) -> list[FollowUpItem]:
        category = (category or ALL).lower()
        if category != ALL and category not in CATEGORIES:
            raise ValueError(f"Unknown follow-up category: {category}")
        self.category_filter = category
        return self.visible_items

    @property
    def visible_items(self) -> list[FollowUpItem]:
        return filter_items(self.items, self.category_filter)

    @property
    def category_counts(self) -> dict[str, int]:
        """Per-category counts from the scan summary, else counted from the items."""
        summary = self.result.categories_summary if self.result else {}
        if summary:
            return {c: summary.get(c, 0) for c in CATEGORIES}
        return {c: len(filter_items(self.items, c)) for c in CATEGORIES}

    # ---- Actions ----

    async def send_follow_up(self, item: FollowUpItem) -> bool:
        """Ask the copilot agent to send ``item``'s drafted follow-up."""
        if not item.draft_content:
            self._status.post("No draft content available for this follow-up", "error")
            return False

        self.sending = item.thread_id or None
        try:
            with self._activity.running(self.send_agent_id):
                result = await self._agent.invoke(
                    f"Send this follow-up email for thread {item.thread_id}: "
                    f'Subject: "Re: {item.email_subject}" Body: {item.draft_content}',
                    self.send_agent_id,
                    self._sessions.current,
                )
        except MailHubError as e:
            logger.warning(f"Sending follow-up for {item.thread_id} failed: {e}")
            self._status.post("Error sending follow-up", "error")
            return False
        finally:
            self.sending = None

        data = parse_result(result)
        if data is None and not result.success:
            self._status.post(result.error or "Failed to send follow-up", "error")
            return False
        message = data.get("message") if isinstance(data, dict) else None
        self._status.post(message if isinstance(message, str) and message else "Follow-up sent", "success")
        return True

    def set_reminder(self, thread_id: str, date: str) -> None:
        self.reminder_dates[thread_id] = date

    def confirm_reminder(self, thread_id: str) -> str | None:
        """Announce the reminder chosen for ``thread_id``; returns the formatted date."""
        raw = self.reminder_dates.get(thread_id)
        if not raw:
            return None
        try:
            when = date_parser.parse(raw)
        except (ValueError, OverflowError):
            self._status.post(f"Invalid reminder date: {raw}", "error")
            return None
        formatted = when.strftime("%b %d, %Y")
        self._status.post(f"Reminder set for {formatted}", "success")
        return formatted
