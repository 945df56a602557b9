"""
Tests for the notification background jobs.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.modules.notifications.jobs import (
    JOB_ID_CLEANUP_EXPIRED,
    cleanup_expired_notifications,
    register_notification_jobs,
)


@pytest.mark.asyncio
async def test_cleanup_expired_notifications():
    session = AsyncMock()
    session_maker = MagicMock()
    session_maker.return_value.__aenter__ = AsyncMock(return_value=session)
    session_maker.return_value.__aexit__ = AsyncMock(return_value=None)

    with (
        patch("app.modules.notifications.jobs.async_session_maker", session_maker),
        patch("app.modules.notifications.jobs.repository") as mock_repo,
    ):
        mock_repo.delete_expired = AsyncMock(return_value=3)

        result = await cleanup_expired_notifications()

    assert result["deleted"] == 3
    assert "executed_at" in result
    assert mock_repo.delete_expired.call_args.args[0] is session


def test_register_notification_jobs():
    with patch("app.modules.notifications.jobs.register_job") as mock_register:
        register_notification_jobs()

    kwargs = mock_register.call_args.kwargs
    assert kwargs["job_id"] == JOB_ID_CLEANUP_EXPIRED
    assert kwargs["func"] is cleanup_expired_notifications
    assert kwargs["trigger"].interval.total_seconds() == 3600
