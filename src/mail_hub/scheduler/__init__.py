"""Scheduler client and settings-panel facade for the recurring scan job."""

from mail_hub.scheduler.client import SchedulerClient
from mail_hub.scheduler.cron import cron_to_human
from mail_hub.scheduler.models import ExecutionLog, Schedule, SchedulerResult
from mail_hub.scheduler.panel import SchedulePanel

__all__ = [
    "ExecutionLog",
    "Schedule",
    "SchedulePanel",
    "SchedulerClient",
    "SchedulerResult",
    "cron_to_human",
]
