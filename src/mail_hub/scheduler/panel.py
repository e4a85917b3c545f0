"""Settings-panel facade over the scheduler service."""

from __future__ import annotations

import asyncio
import logging

from mail_hub.config import SCHEDULE_ID, SCHEDULE_LOG_LIMIT, SCHEDULE_TIMEZONE
from mail_hub.exceptions import MailHubError
from mail_hub.scheduler.client import SchedulerClient
from mail_hub.scheduler.cron import cron_to_human
from mail_hub.scheduler.models import ExecutionLog, Schedule
from mail_hub.status import StatusBoard

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Every day at 8:00"


class SchedulePanel:
    """Shows the scan schedule and its recent runs; pauses, resumes, triggers.

    Local state only ever mirrors what the service last returned; a toggle is
    always followed by a re-fetch.
    """

    def __init__(
        self,
        client: SchedulerClient,
        status: StatusBoard,
        schedule_id: str = SCHEDULE_ID,
        log_limit: int = SCHEDULE_LOG_LIMIT,
        timezone: str = SCHEDULE_TIMEZONE,
    ):
        self._client = client
        self._status = status
        self.schedule_id = schedule_id
        self.log_limit = log_limit
        self.timezone = timezone
        self.schedule: Schedule | None = None
        self.logs: list[ExecutionLog] = []
        self.loading = False
        self.action_loading = False

    async def load(self) -> Schedule | None:
        """Fetch the schedule and its recent executions in parallel."""
        self.loading = True
        try:
            schedule_result, logs_result = await asyncio.gather(
                self._client.get_schedule(self.schedule_id),
                self._client.get_schedule_logs(self.schedule_id, limit=self.log_limit),
            )
        except MailHubError as e:
            logger.warning(f"Loading schedule failed: {e}")
            self._status.post("Error loading schedule", "error")
            return self.schedule
        finally:
            self.loading = False

        if schedule_result.success and schedule_result.schedule:
            self.schedule = schedule_result.schedule
        if logs_result.success:
            self.logs = list(logs_result.executions)
        return self.schedule

    async def refresh(self) -> Schedule | None:
        result = await self._client.get_schedule(self.schedule_id)
        if result.success and result.schedule:
            self.schedule = result.schedule
        return self.schedule

    async def toggle(self) -> Schedule | None:
        """Pause an active schedule or resume a paused one, then re-fetch."""
        if self.schedule is None:
            return None
        was_active = self.schedule.is_active
        self.action_loading = True
        try:
            if was_active:
                result = await self._client.pause_schedule(self.schedule_id)
            else:
                result = await self._client.resume_schedule(self.schedule_id)
            await self.refresh()
            if result.success:
                self._status.post("Schedule paused" if was_active else "Schedule resumed", "success")
            else:
                self._status.post(result.error or "Failed to update schedule", "error")
        except MailHubError as e:
            logger.warning(f"Toggling schedule failed: {e}")
            self._status.post("Error toggling schedule", "error")
        finally:
            self.action_loading = False
        return self.schedule

    async def trigger_now(self) -> bool:
        """Run the scan job immediately; only reports, never changes local state."""
        self.action_loading = True
        try:
            result = await self._client.trigger_schedule_now(self.schedule_id)
        except MailHubError as e:
            logger.warning(f"Triggering schedule failed: {e}")
            self._status.post("Error triggering schedule", "error")
            return False
        finally:
            self.action_loading = False

        if result.success:
            self._status.post("Schedule triggered! Check Follow-Up Hub for results.", "success")
        else:
            self._status.post(result.error or "Failed to trigger", "error")
        return result.success

    def describe(self) -> str:
        expression = self.schedule.cron_expression if self.schedule else ""
        text = cron_to_human(expression) if expression else DEFAULT_DESCRIPTION
        timezone = (self.schedule.timezone if self.schedule else "") or self.timezone
        return f"{text} ({timezone})"
