"""
Tests for the background job registry.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.core import scheduler
from app.core.scheduler import RegisteredJob, register_job, trigger_job_manually


@pytest.fixture(autouse=True)
def empty_registry():
    with patch.dict(scheduler._job_registry, clear=True):
        yield


def test_add_without_running_scheduler_raises():
    job = RegisteredJob(func=AsyncMock(), trigger=MagicMock())

    with patch("app.core.scheduler._scheduler", None):
        with pytest.raises(RuntimeError, match="not running"):
            scheduler._add_to_scheduler("expire_notifications", job)


def test_register_before_start_is_deferred():
    with patch("app.core.scheduler._scheduler", None):
        register_job("expire_notifications", AsyncMock(), MagicMock())

    assert "expire_notifications" in scheduler._job_registry


def test_register_while_running_adds_job():
    running = MagicMock()
    func = AsyncMock()
    trigger = MagicMock()

    with patch("app.core.scheduler._scheduler", running):
        register_job("expire_notifications", func, trigger)

    running.add_job.assert_called_once_with(
        func, trigger=trigger, id="expire_notifications", replace_existing=True
    )


@pytest.mark.asyncio
async def test_manual_trigger_reports_failure():
    register_job("broken", AsyncMock(side_effect=ValueError("boom")), MagicMock())

    result = await trigger_job_manually("broken")

    assert result["status"] == "error"
    assert result["error"] == "boom"
