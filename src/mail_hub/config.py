"""Agent identities, service endpoints and user preferences."""

from __future__ import annotations

import os
from dataclasses import dataclass

from mail_hub.exceptions import ConfigurationError

AGENT_API_URL = os.environ.get(
    "MAIL_HUB_AGENT_API_URL", "https://agent-prod.studio.lyzr.ai/v3/inference/chat/"
)
SCHEDULER_API_URL = os.environ.get(
    "MAIL_HUB_SCHEDULER_API_URL", "https://agent-prod.studio.lyzr.ai/v3/schedules"
)

# Drafting, sending and summarizing
COPILOT_AGENT_ID = os.environ.get("MAIL_HUB_COPILOT_AGENT_ID", "69976a22d3c472bb58ec2613")
# Follow-up scanning
FOLLOW_UP_AGENT_ID = os.environ.get("MAIL_HUB_FOLLOW_UP_AGENT_ID", "69976a212d97052a26fc9891")
# Recurring follow-up scan job
SCHEDULE_ID = os.environ.get("MAIL_HUB_SCHEDULE_ID", "69976a2d399dfadeac37bbbc")

STATUS_TTL_SECONDS = 5.0
COPIED_TTL_SECONDS = 2.0
SCHEDULE_LOG_LIMIT = 5
SCHEDULE_TIMEZONE = "America/New_York"

TONES = ("professional", "assertive", "friendly", "casual")


def resolve_api_key(api_key: str | None = None) -> str:
    """Return the explicit key or ``MAIL_HUB_API_KEY``; raise if neither is set."""
    key = api_key or os.environ.get("MAIL_HUB_API_KEY")
    if not key:
        raise ConfigurationError(
            "mail-hub API key is required. "
            "Pass it directly or set MAIL_HUB_API_KEY in your environment."
        )
    return key


@dataclass
class HubSettings:
    """User-adjustable preferences."""

    tone: str = "professional"
    auto_save_draft: bool = True
    unanswered_days: int = 3
    commitment_detection: bool = True
    question_detection: bool = True

    def __post_init__(self):
        if self.tone not in TONES:
            raise ConfigurationError(f"Unknown tone {self.tone!r}; expected one of {TONES}")
        self.unanswered_days = max(1, int(self.unanswered_days))
