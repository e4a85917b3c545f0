"""One in-memory hub per process: every controller wired to shared state."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from mail_hub.agent.client import AgentClient
from mail_hub.agent.session import SessionManager
from mail_hub.config import COPILOT_AGENT_ID, FOLLOW_UP_AGENT_ID, SCHEDULE_ID, HubSettings
from mail_hub.copilot.controller import CopilotController
from mail_hub.copilot.models import EmailItem
from mail_hub.followups.models import FollowUpItem, ScanResult
from mail_hub.followups.scanner import FollowUpScanController
from mail_hub.gmail.connection import GmailConnection, open_in_browser
from mail_hub.scheduler.client import SchedulerClient
from mail_hub.scheduler.panel import SchedulePanel
from mail_hub.status import AgentActivity, StatusBoard

logger = logging.getLogger(__name__)

SAMPLE_EMAILS = [
    EmailItem("1", "thread_001", "Q4 Revenue Projections Review", "Sarah Chen <sarah.chen@acmecorp.com>",
              "Hi team, I have compiled the Q4 revenue projections and would love to get your feedback before...",
              "2:34 PM", True),
    EmailItem("2", "thread_002", "Partnership Proposal - CloudSync Inc", "Michael Torres <m.torres@cloudsync.io>",
              "Following up on our call yesterday, I wanted to share the updated partnership terms that we...",
              "11:15 AM", True),
    EmailItem("3", "thread_003", "Re: Marketing Campaign Assets", "Lisa Wang <lisa@brandforge.com>",
              "Thanks for the feedback! I have made the revisions to the banner designs. Please find attached...",
              "Yesterday", False),
    EmailItem("4", "thread_004", "Meeting Notes - Product Roadmap", "David Park <dpark@internalteam.com>",
              "Here are the key takeaways from today's product roadmap session. Action items are listed below...",
              "Yesterday", False),
    EmailItem("5", "thread_005", "Invoice #4892 - Overdue Payment", "Accounts <accounts@vendorplus.com>",
              "This is a reminder that invoice #4892 dated Nov 15 remains unpaid. The amount of $12,450 was...",
              "Mon", True),
]

SAMPLE_FOLLOW_UPS = [
    FollowUpItem(
        email_subject="Q4 Revenue Projections Review", sender="sarah.chen@acmecorp.com",
        last_activity="2024-02-15T14:34:00Z", category="unanswered",
        reason="No response sent in 4 days. Sarah is waiting for feedback on projections.",
        days_waiting=4, thread_id="thread_001",
        draft_content="Hi Sarah, Thank you for putting together the Q4 revenue projections. "
                      "I have reviewed them and have a few comments...",
    ),
    FollowUpItem(
        email_subject="Partnership Proposal - CloudSync Inc", sender="m.torres@cloudsync.io",
        last_activity="2024-02-14T11:15:00Z", category="commitments",
        reason="You committed to reviewing the partnership terms by end of week.",
        days_waiting=5, thread_id="thread_002", has_reminder=True, reminder_date="2024-02-19",
        draft_content="Hi Michael, Following up on the CloudSync partnership proposal. "
                      "I have completed my review of the terms and here are my thoughts...",
    ),
    FollowUpItem(
        email_subject="Invoice #4892 - Overdue Payment", sender="accounts@vendorplus.com",
        last_activity="2024-02-12T09:00:00Z", category="flagged",
        reason="Overdue invoice requires immediate attention. Payment was due 7 days ago.",
        days_waiting=7, thread_id="thread_005",
        draft_content="Hi Accounts team, I apologize for the delay. I have escalated invoice #4892 "
                      "to our finance department for immediate processing...",
    ),
    FollowUpItem(
        email_subject="Re: Marketing Campaign Assets", sender="lisa@brandforge.com",
        last_activity="2024-02-14T16:45:00Z", category="questions",
        reason="Lisa asked if the revised designs meet your requirements. Awaiting your confirmation.",
        days_waiting=5, thread_id="thread_003",
        draft_content="Hi Lisa, The revised banner designs look great! I especially like the updated "
                      "color palette. A couple of minor tweaks...",
    ),
]


class MailHub:
    """Wires agent and scheduler clients into the copilot, scan and schedule controllers.

    Args:
        agent: Client for the conversational agent service.
        scheduler: Client for the scheduler service.
        settings: User preferences shared by every controller.
        opener: Opens authorization URLs for the user.
    """

    def __init__(
        self,
        agent: AgentClient,
        scheduler: SchedulerClient,
        settings: HubSettings | None = None,
        copilot_agent_id: str = COPILOT_AGENT_ID,
        follow_up_agent_id: str = FOLLOW_UP_AGENT_ID,
        schedule_id: str = SCHEDULE_ID,
        opener: Callable[[str], object] = open_in_browser,
    ):
        self.settings = settings or HubSettings()
        self.sessions = SessionManager()
        self.status = StatusBoard()
        self.activity = AgentActivity()
        self.connection = GmailConnection(
            agent, self.sessions, self.status, agent_id=copilot_agent_id, opener=opener
        )
        self.copilot = CopilotController(
            agent, self.sessions, self.status, self.activity, self.connection,
            self.settings, agent_id=copilot_agent_id,
        )
        self.followups = FollowUpScanController(
            agent, self.sessions, self.status, self.activity, self.connection,
            self.settings, scan_agent_id=follow_up_agent_id, send_agent_id=copilot_agent_id,
        )
        self.schedule = SchedulePanel(scheduler, self.status, schedule_id=schedule_id)

    @classmethod
    def from_env(cls, api_key: str | None = None, **kwargs) -> MailHub:
        """Build both clients from ``MAIL_HUB_*`` environment settings."""
        return cls(AgentClient(api_key=api_key), SchedulerClient(api_key=api_key), **kwargs)

    def refine_follow_up(self, item: FollowUpItem):
        """Hand a follow-up's draft to the copilot for refinement."""
        return self.copilot.refine_follow_up(item)

    def load_sample_data(self) -> None:
        self.copilot.load_emails(SAMPLE_EMAILS)
        self.followups.load_result(ScanResult(
            items=list(SAMPLE_FOLLOW_UPS),
            total_count=len(SAMPLE_FOLLOW_UPS),
            categories_summary={"unanswered": 1, "commitments": 1, "questions": 1, "flagged": 1},
            scan_timestamp=datetime.now(timezone.utc).isoformat(),
            status="completed",
            message=f"{len(SAMPLE_FOLLOW_UPS)} emails need follow-up",
        ))

    def reset(self) -> None:
        """Drop inbox, copilot and follow-up state; connection and schedule are kept."""
        self.copilot.reset()
        self.followups.clear()
        self.status.dismiss()
        logger.info("Hub state reset")
