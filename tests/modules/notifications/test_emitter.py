"""
Tests for the notification emitters.
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from app.modules.notifications.emitter import (
    CompositeNotificationEmitter,
    DatabaseNotificationEmitter,
    EmailNotificationEmitter,
    NotificationMessage,
    RecordingNotificationEmitter,
    get_notification_emitter,
)
from app.modules.notifications.models import NotificationType


@pytest.fixture
def messages():
    return [
        NotificationMessage(
            user_id=uuid4(),
            title="Application Approved",
            message="Your application APP25000001 has been approved.",
            type=NotificationType.SUCCESS,
            action_url="/applications/1",
            recipient_email="student@test.edu",
        ),
        NotificationMessage(
            user_id=uuid4(),
            title="New Application Submitted",
            message="Application APP25000001 was submitted.",
        ),
    ]


class FailingEmitter:
    async def emit(self, db, messages):
        raise RuntimeError("smtp down")


def test_to_row_drops_recipient_email(messages):
    row = messages[0].to_row()

    assert "recipient_email" not in row
    assert row["type"] == NotificationType.SUCCESS
    assert row["action_url"] == "/applications/1"


@pytest.mark.asyncio
async def test_database_emitter_stores_rows(messages):
    db = AsyncMock()
    with patch("app.modules.notifications.emitter.repository") as mock_repo:
        mock_repo.create_many = AsyncMock()

        await DatabaseNotificationEmitter().emit(db, messages)

    rows = mock_repo.create_many.call_args.args[1]
    assert [r["title"] for r in rows] == ["Application Approved", "New Application Submitted"]


@pytest.mark.asyncio
async def test_database_emitter_ignores_empty_batch():
    with patch("app.modules.notifications.emitter.repository") as mock_repo:
        mock_repo.create_many = AsyncMock()

        await DatabaseNotificationEmitter().emit(AsyncMock(), [])

    mock_repo.create_many.assert_not_called()


@pytest.mark.asyncio
async def test_email_emitter_skips_messages_without_address(messages):
    with patch(
        "app.modules.notifications.emitter.send_notification_email",
        new_callable=AsyncMock,
        return_value=True,
    ) as mock_send:
        await EmailNotificationEmitter().emit(AsyncMock(), messages)

    mock_send.assert_awaited_once_with(
        to_email="student@test.edu",
        title="Application Approved",
        message="Your application APP25000001 has been approved.",
        action_url="/applications/1",
    )


@pytest.mark.asyncio
async def test_composite_keeps_going_after_failure(messages):
    recorder = RecordingNotificationEmitter()
    composite = CompositeNotificationEmitter(FailingEmitter(), recorder)

    await composite.emit(AsyncMock(), messages)

    assert recorder.messages == messages


@pytest.mark.asyncio
async def test_recording_emitter_clear(messages):
    recorder = RecordingNotificationEmitter()
    await recorder.emit(AsyncMock(), messages)
    recorder.clear()

    assert recorder.messages == []


def test_default_emitter_depends_on_email_setting():
    with patch("app.modules.notifications.emitter.settings") as mock_settings:
        mock_settings.notification_email_enabled = False
        assert isinstance(get_notification_emitter(), DatabaseNotificationEmitter)

        mock_settings.notification_email_enabled = True
        emitter = get_notification_emitter()

    assert isinstance(emitter, CompositeNotificationEmitter)
    assert [type(e) for e in emitter.emitters] == [
        DatabaseNotificationEmitter,
        EmailNotificationEmitter,
    ]
