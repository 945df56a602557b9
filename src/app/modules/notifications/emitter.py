"""
Notification Emitter

Narrow interface the application lifecycle hands its notifications to.

Implementations:
- DatabaseNotificationEmitter: persists Notification rows
- EmailNotificationEmitter: mails each message through Resend
- CompositeNotificationEmitter: fans out to several emitters
- RecordingNotificationEmitter: keeps messages in memory

get_notification_emitter() is the FastAPI dependency; tests override it
with a recording emitter.
"""

import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Protocol
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.email import send_notification_email

from . import repository
from .models import NotificationType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationMessage:
    """One notification addressed to one user."""

    user_id: UUID
    title: str
    message: str
    type: NotificationType = NotificationType.INFO
    action_url: str | None = None
    recipient_email: str | None = None

    def to_row(self) -> dict:
        row = asdict(self)
        row.pop("recipient_email")
        return row


class NotificationEmitter(Protocol):
    async def emit(self, db: AsyncSession, messages: Sequence[NotificationMessage]) -> None: ...


class DatabaseNotificationEmitter:
    """Stores messages as in-app notifications."""

    async def emit(self, db: AsyncSession, messages: Sequence[NotificationMessage]) -> None:
        if not messages:
            return
        await repository.create_many(db, [m.to_row() for m in messages])
        logger.info(f"Stored {len(messages)} notification(s)")


class EmailNotificationEmitter:
    """Sends each message with a recipient email address as an email."""

    async def emit(self, db: AsyncSession, messages: Sequence[NotificationMessage]) -> None:
        for m in messages:
            if not m.recipient_email:
                continue
            sent = await send_notification_email(
                to_email=m.recipient_email,
                title=m.title,
                message=m.message,
                action_url=m.action_url,
            )
            if not sent:
                logger.warning(f"Notification email to user {m.user_id} was not sent")


class CompositeNotificationEmitter:
    """
    Forwards messages to every wrapped emitter in order.

    A failing emitter is logged and does not stop the ones after it.
    """

    def __init__(self, *emitters: NotificationEmitter):
        self.emitters = list(emitters)

    async def emit(self, db: AsyncSession, messages: Sequence[NotificationMessage]) -> None:
        for emitter in self.emitters:
            try:
                await emitter.emit(db, messages)
            except Exception as e:
                logger.exception(f"{type(emitter).__name__} failed: {e}")


class RecordingNotificationEmitter:
    """Collects emitted messages in memory instead of delivering them."""

    def __init__(self):
        self.messages: list[NotificationMessage] = []

    async def emit(self, db: AsyncSession, messages: Sequence[NotificationMessage]) -> None:
        self.messages.extend(messages)

    def clear(self) -> None:
        self.messages.clear()


def get_notification_emitter() -> NotificationEmitter:
    """Default emitter: database, plus email when enabled."""
    if settings.notification_email_enabled:
        return CompositeNotificationEmitter(
            DatabaseNotificationEmitter(),
            EmailNotificationEmitter(),
        )
    return DatabaseNotificationEmitter()


__all__ = [
    "NotificationMessage",
    "NotificationEmitter",
    "DatabaseNotificationEmitter",
    "EmailNotificationEmitter",
    "CompositeNotificationEmitter",
    "RecordingNotificationEmitter",
    "get_notification_emitter",
]
