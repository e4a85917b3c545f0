"""Scheduler service client for the recurring follow-up scan."""

from __future__ import annotations

import logging

import httpx

from mail_hub.config import SCHEDULER_API_URL, resolve_api_key
from mail_hub.exceptions import ConfigurationError, SchedulerTransportError
from mail_hub.scheduler.models import ExecutionLog, Schedule, SchedulerResult

logger = logging.getLogger(__name__)


class SchedulerClient:
    """Get, pause, resume and trigger one schedule; list its recent runs.

    Service-side failures come back as ``SchedulerResult(success=False)``;
    only a failed call raises ``SchedulerTransportError``.

    Args:
        api_key: Scheduler key. Falls back to ``MAIL_HUB_API_KEY``.
        base_url: Schedules endpoint root.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = SCHEDULER_API_URL,
        timeout: float | None = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not base_url:
            raise ConfigurationError("Scheduler service URL is required.")
        self.api_key = resolve_api_key(api_key)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _request(self, method: str, path: str, params: dict | None = None) -> tuple[bool, object, str | None]:
        url = f"{self.base_url}/{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    headers={"Accept": "application/json", "x-api-key": self.api_key},
                )
        except httpx.HTTPError as e:
            raise SchedulerTransportError(f"Scheduler call {method} {path} failed: {e}") from e

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}

        if response.is_success:
            return True, data, None

        error = None
        if isinstance(data, dict):
            error = data.get("error") or data.get("detail") or data.get("message")
        error = str(error) if error else f"Scheduler returned HTTP {response.status_code}"
        logger.warning(f"Scheduler {method} {path}: {error}")
        return False, data, error

    @staticmethod
    def _schedule_from(data: object) -> Schedule | None:
        if not isinstance(data, dict):
            return None
        inner = data.get("schedule", data)
        if isinstance(inner, dict) and ("cron_expression" in inner or "is_active" in inner):
            return Schedule.from_dict(inner)
        return None

    async def get_schedule(self, schedule_id: str) -> SchedulerResult:
        ok, data, error = await self._request("GET", schedule_id)
        return SchedulerResult(success=ok, schedule=self._schedule_from(data) if ok else None, error=error)

    async def get_schedule_logs(self, schedule_id: str, limit: int = 5) -> SchedulerResult:
        ok, data, error = await self._request("GET", f"{schedule_id}/executions", params={"limit": limit})
        executions: list[ExecutionLog] = []
        if ok:
            raw = data.get("executions", []) if isinstance(data, dict) else data
            if isinstance(raw, list):
                executions = [ExecutionLog.from_dict(e) for e in raw if isinstance(e, dict)]
        return SchedulerResult(success=ok, executions=executions, error=error)

    async def _action(self, schedule_id: str, action: str) -> SchedulerResult:
        ok, data, error = await self._request("POST", f"{schedule_id}/{action}")
        if ok:
            logger.info(f"Schedule {schedule_id}: {action} accepted")
        return SchedulerResult(success=ok, schedule=self._schedule_from(data) if ok else None, error=error)

    async def pause_schedule(self, schedule_id: str) -> SchedulerResult:
        return await self._action(schedule_id, "pause")

    async def resume_schedule(self, schedule_id: str) -> SchedulerResult:
        return await self._action(schedule_id, "resume")

    async def trigger_schedule_now(self, schedule_id: str) -> SchedulerResult:
        return await self._action(schedule_id, "trigger")
