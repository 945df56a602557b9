"""
Notifications Service Layer

Reading and managing a user's in-app notifications, and admin-authored
notifications. Lifecycle notifications are produced by the emitter, not here.
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import Actor
from app.core.errors import NotFoundError
from app.core.permissions import Action, ensure_can
from app.modules.shared import PageParams, build_page
from app.modules.users.repository import UserRepository

from . import repository
from .models import Notification, NotificationType
from .schemas import BulkNotificationCreate, NotificationCreate

logger = logging.getLogger(__name__)


class NotificationNotFoundError(NotFoundError):
    def __init__(self, notification_id: UUID):
        super().__init__(
            message=f"Notification {notification_id} not found",
            error_code="NOTIFICATION_NOT_FOUND",
        )


class RecipientNotFoundError(NotFoundError):
    def __init__(self, user_id: UUID):
        super().__init__(message=f"User {user_id} not found", error_code="USER_NOT_FOUND")


async def _get_own(
    db: AsyncSession, actor: Actor, notification_id: UUID, message: str
) -> Notification:
    notification = await repository.get_by_id(db, notification_id)
    if not notification:
        raise NotificationNotFoundError(notification_id)
    ensure_can(actor, Action.NOTIFICATION_READ, notification, message)
    return notification


async def list_notifications(
    db: AsyncSession,
    actor: Actor,
    *,
    is_read: bool | None = None,
    notification_type: NotificationType | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> dict[str, Any]:
    """
    The actor's unexpired notifications, newest first, with their unread count.

    Returns:
        Paginated envelope plus unread_count
    """
    params = PageParams.create(page, limit)
    items, total = await repository.list_for_user(
        db,
        actor.id,
        is_read=is_read,
        notification_type=notification_type,
        skip=params.skip,
        limit=params.limit,
    )
    result = build_page(items, total, params)
    result["unread_count"] = await repository.count_unread(db, actor.id)
    return result


async def get_unread_count(db: AsyncSession, actor: Actor) -> int:
    return await repository.count_unread(db, actor.id)


async def mark_as_read(db: AsyncSession, actor: Actor, notification_id: UUID) -> Notification:
    """
    Raises:
        NotificationNotFoundError: If the notification doesn't exist
        ForbiddenError: If it belongs to someone else
    """
    notification = await _get_own(
        db, actor, notification_id, "Not authorized to update this notification"
    )
    return await repository.mark_read(db, notification)


async def mark_all_as_read(db: AsyncSession, actor: Actor) -> int:
    count = await repository.mark_all_read(db, actor.id)
    logger.info(f"Marked {count} notification(s) read for {actor.id}")
    return count


async def create_notification(
    db: AsyncSession, actor: Actor, data: NotificationCreate
) -> Notification:
    """
    Create a notification for one user (admin only).

    Raises:
        ForbiddenError: If the actor is not an admin
        RecipientNotFoundError: If the user doesn't exist
    """
    ensure_can(actor, Action.NOTIFICATION_MANAGE)

    if not await UserRepository.get_by_id(db, data.user_id):
        raise RecipientNotFoundError(data.user_id)

    notification = await repository.create(db, data.model_dump())
    logger.info(f"Notification {notification.id} created for {data.user_id} by {actor.id}")
    return notification


async def create_bulk_notifications(
    db: AsyncSession, actor: Actor, data: BulkNotificationCreate
) -> dict[str, Any]:
    """
    Send the same notification to several users (admin only).

    Each recipient is handled on its own; unknown users and failed inserts
    are reported instead of aborting the batch.
    """
    ensure_can(actor, Action.NOTIFICATION_MANAGE)

    values = data.model_dump(exclude={"user_ids"})
    user_ids = list(dict.fromkeys(data.user_ids))
    users = await UserRepository.get_by_ids(db, user_ids)

    created = 0
    failed = []
    for user_id in user_ids:
        if user_id not in users:
            failed.append(
                {"user_id": user_id, "error": "USER_NOT_FOUND", "message": "User not found"}
            )
            continue
        try:
            await repository.create(db, {**values, "user_id": user_id})
            created += 1
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Bulk notification for {user_id} failed: {e}")
            failed.append(
                {
                    "user_id": user_id,
                    "error": "CREATE_FAILED",
                    "message": "Could not create notification",
                }
            )

    logger.info(f"Bulk notification by {actor.id}: {created} created, {len(failed)} failed")
    return {
        "message": f"Created {created} notification(s)",
        "created": created,
        "failed": failed,
    }


async def delete_notification(db: AsyncSession, actor: Actor, notification_id: UUID) -> None:
    """Delete one notification (its recipient or an admin)."""
    notification = await _get_own(
        db, actor, notification_id, "Not authorized to delete this notification"
    )
    await repository.delete_notification(db, notification)
    logger.info(f"Notification {notification_id} deleted by {actor.id}")


async def clear_read(db: AsyncSession, actor: Actor) -> int:
    count = await repository.delete_read(db, actor.id)
    logger.info(f"Cleared {count} read notification(s) for {actor.id}")
    return count


async def cleanup_expired(db: AsyncSession, actor: Actor) -> int:
    """Purge expired notifications of every user (admin only)."""
    ensure_can(actor, Action.NOTIFICATION_MANAGE)
    count = await repository.delete_expired(db)
    logger.info(f"Cleaned up {count} expired notification(s)")
    return count
