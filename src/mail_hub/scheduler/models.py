"""Data models for the scheduler module."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Schedule:
    """The recurring scan job as the scheduler reports it."""

    id: str
    cron_expression: str = ""
    is_active: bool = False
    next_run_time: str | None = None
    timezone: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Schedule:
        return cls(
            id=str(data.get("id") or data.get("_id") or data.get("schedule_id") or ""),
            cron_expression=str(data.get("cron_expression") or ""),
            is_active=bool(data.get("is_active")),
            next_run_time=data.get("next_run_time") or None,
            timezone=str(data.get("timezone") or ""),
        )


@dataclass(frozen=True)
class ExecutionLog:
    """One past run of the schedule."""

    id: str
    executed_at: str
    success: bool

    @classmethod
    def from_dict(cls, data: dict) -> ExecutionLog:
        return cls(
            id=str(data.get("id") or data.get("_id") or ""),
            executed_at=str(data.get("executed_at") or ""),
            success=bool(data.get("success")),
        )


@dataclass
class SchedulerResult:
    """Outcome of one scheduler call."""

    success: bool
    schedule: Schedule | None = None
    executions: list[ExecutionLog] = field(default_factory=list)
    error: str | None = None
