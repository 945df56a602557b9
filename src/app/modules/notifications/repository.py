"""
Notifications Repository

Database operations for in-app notifications. Listing and counting only
consider notifications that have not expired.
"""

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Notification, NotificationType


def _not_expired(now: datetime):
    return or_(Notification.expires_at.is_(None), Notification.expires_at > now)


def _visible_filter(
    user_id: UUID,
    *,
    is_read: bool | None = None,
    notification_type: NotificationType | None = None,
) -> list:
    conditions = [Notification.user_id == user_id, _not_expired(datetime.now(UTC))]
    if is_read is not None:
        conditions.append(Notification.is_read == is_read)
    if notification_type is not None:
        conditions.append(Notification.type == notification_type)
    return conditions


async def list_for_user(
    db: AsyncSession,
    user_id: UUID,
    *,
    is_read: bool | None = None,
    notification_type: NotificationType | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Notification], int]:
    """
    List a user's unexpired notifications, newest first.

    Returns:
        Tuple of (notifications on the page, total matching count)
    """
    conditions = _visible_filter(user_id, is_read=is_read, notification_type=notification_type)

    total = await db.scalar(select(func.count(Notification.id)).where(*conditions))
    result = await db.execute(
        select(Notification)
        .where(*conditions)
        .order_by(Notification.created_at.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def count_unread(db: AsyncSession, user_id: UUID) -> int:
    total = await db.scalar(
        select(func.count(Notification.id)).where(*_visible_filter(user_id, is_read=False))
    )
    return total or 0


async def get_by_id(db: AsyncSession, notification_id: UUID) -> Notification | None:
    return await db.get(Notification, notification_id)


async def mark_read(db: AsyncSession, notification: Notification) -> Notification:
    """Mark one notification read. read_at is kept if already set."""
    notification.is_read = True
    if notification.read_at is None:
        notification.read_at = datetime.now(UTC)
    await db.commit()
    await db.refresh(notification)
    return notification


async def mark_all_read(db: AsyncSession, user_id: UUID) -> int:
    """
    Mark every unread, unexpired notification of a user read.

    Returns:
        Number of notifications updated
    """
    result = await db.execute(
        update(Notification)
        .where(*_visible_filter(user_id, is_read=False))
        .values(is_read=True, read_at=datetime.now(UTC))
    )
    await db.commit()
    return result.rowcount or 0


async def create(db: AsyncSession, values: dict[str, Any]) -> Notification:
    notification = Notification(**values)
    db.add(notification)
    await db.commit()
    await db.refresh(notification)
    return notification


async def create_many(db: AsyncSession, rows: Sequence[dict[str, Any]]) -> list[Notification]:
    """Insert several notifications in one commit."""
    notifications = [Notification(**values) for values in rows]
    if not notifications:
        return []
    db.add_all(notifications)
    await db.commit()
    return notifications


async def delete_notification(db: AsyncSession, notification: Notification) -> None:
    await db.delete(notification)
    await db.commit()


async def delete_read(db: AsyncSession, user_id: UUID) -> int:
    """Delete a user's read notifications. Returns the number deleted."""
    result = await db.execute(
        delete(Notification).where(
            Notification.user_id == user_id,
            Notification.is_read == True,  # noqa: E712
        )
    )
    await db.commit()
    return result.rowcount or 0


async def delete_expired(db: AsyncSession, now: datetime | None = None) -> int:
    """Delete notifications whose expires_at has passed. Returns the number deleted."""
    now = now or datetime.now(UTC)
    result = await db.execute(
        delete(Notification).where(
            Notification.expires_at.is_not(None),
            Notification.expires_at <= now,
        )
    )
    await db.commit()
    return result.rowcount or 0
