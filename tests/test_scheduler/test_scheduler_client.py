"""Tests for the scheduler service client."""

import asyncio

import httpx
import pytest

from mail_hub.exceptions import ConfigurationError, SchedulerTransportError
from mail_hub.scheduler.client import SchedulerClient

SCHEDULE = {"id": "sched-1", "cron_expression": "0 8 * * *", "is_active": True, "next_run_time": "2024-02-16T13:00:00Z"}


def _client(handler):
    return SchedulerClient(
        api_key="test-key",
        base_url="https://scheduler.test/schedules/",
        transport=httpx.MockTransport(handler),
    )


def test_init_requires_api_key(monkeypatch):
    monkeypatch.delenv("MAIL_HUB_API_KEY", raising=False)
    with pytest.raises(ConfigurationError):
        SchedulerClient(api_key=None)


def test_get_schedule():
    def handler(request):
        assert request.url.path == "/schedules/sched-1"
        assert request.headers["x-api-key"] == "test-key"
        return httpx.Response(200, json={"schedule": SCHEDULE})

    result = asyncio.run(_client(handler).get_schedule("sched-1"))
    assert result.success is True
    assert result.schedule.cron_expression == "0 8 * * *"
    assert result.schedule.is_active is True


def test_get_schedule_flat_body():
    result = asyncio.run(_client(lambda r: httpx.Response(200, json=SCHEDULE)).get_schedule("sched-1"))
    assert result.schedule.id == "sched-1"


def test_get_schedule_logs():
    def handler(request):
        assert request.url.path == "/schedules/sched-1/executions"
        assert request.url.params["limit"] == "5"
        return httpx.Response(200, json={"executions": [
            {"id": "e1", "executed_at": "2024-02-15T13:00:00Z", "success": True},
            {"id": "e2", "executed_at": "2024-02-14T13:00:00Z", "success": False},
        ]})

    result = asyncio.run(_client(handler).get_schedule_logs("sched-1", limit=5))
    assert [e.id for e in result.executions] == ["e1", "e2"]
    assert result.executions[1].success is False


def test_pause_posts():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        return httpx.Response(200, json={"message": "paused"})

    result = asyncio.run(_client(handler).pause_schedule("sched-1"))
    assert result.success is True
    assert result.schedule is None
    assert seen == {"method": "POST", "path": "/schedules/sched-1/pause"}


def test_service_error_is_result():
    def handler(request):
        return httpx.Response(409, json={"error": "Schedule already paused"})

    result = asyncio.run(_client(handler).pause_schedule("sched-1"))
    assert result.success is False
    assert result.error == "Schedule already paused"


def test_service_error_without_body():
    result = asyncio.run(_client(lambda r: httpx.Response(503)).trigger_schedule_now("sched-1"))
    assert result.success is False
    assert result.error == "Scheduler returned HTTP 503"


def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectTimeout("timed out")

    with pytest.raises(SchedulerTransportError):
        asyncio.run(_client(handler).resume_schedule("sched-1"))
