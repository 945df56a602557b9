"""
Notifications Router

Endpoints:
- GET /notifications - The caller's notifications with unread count
- GET /notifications/unread-count - Unread count only
- PUT /notifications/mark-all-read - Mark all of the caller's notifications read
- POST /notifications - Create a notification (admin)
- POST /notifications/bulk - Same notification to many users (admin)
- DELETE /notifications/clear-read - Delete the caller's read notifications
- DELETE /notifications/cleanup-expired - Purge expired notifications (admin)
- PUT /notifications/{id}/read - Mark one notification read
- DELETE /notifications/{id} - Delete one notification
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import Actor, get_current_actor
from app.core.database import get_db
from app.core.errors import ServiceError, raise_http_error, raise_internal_error
from app.core.rate_limit import enforce_rate_limit
from app.modules.notifications import service
from app.modules.notifications.models import NotificationType
from app.modules.notifications.schemas import (
    BulkNotificationCreate,
    BulkNotificationResponse,
    CountResponse,
    MessageResponse,
    NotificationCreate,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Bulk creation: 5 per minute per actor
BULK_CREATE_LIMIT = 5
BULK_CREATE_WINDOW_SECONDS = 60


@router.get("", response_model=NotificationListResponse, summary="List Notifications")
async def list_notifications(
    is_read: bool | None = Query(None),
    notification_type: NotificationType | None = Query(None, alias="type"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> NotificationListResponse:
    try:
        result = await service.list_notifications(
            db,
            actor,
            is_read=is_read,
            notification_type=notification_type,
            page=page,
            limit=limit,
        )
        result["docs"] = [NotificationResponse.model_validate(n) for n in result["docs"]]
        return NotificationListResponse.model_validate(result)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, "listing notifications")


@router.get("/unread-count", response_model=UnreadCountResponse, summary="Unread Count")
async def unread_count(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> UnreadCountResponse:
    try:
        return UnreadCountResponse(unread_count=await service.get_unread_count(db, actor))
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, "counting unread notifications")


@router.put("/mark-all-read", response_model=CountResponse, summary="Mark All Read")
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> CountResponse:
    try:
        count = await service.mark_all_as_read(db, actor)
        return CountResponse(message=f"Marked {count} notification(s) as read", count=count)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, "marking all notifications read")


@router.post(
    "",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Notification",
    responses={403: {"description": "Admin only"}, 404: {"description": "User not found"}},
)
async def create_notification(
    data: NotificationCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> NotificationResponse:
    try:
        notification = await service.create_notification(db, actor, data)
        return NotificationResponse.model_validate(notification)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, "creating notification")


@router.post(
    "/bulk",
    response_model=BulkNotificationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Notifications In Bulk",
)
async def create_bulk_notifications(
    data: BulkNotificationCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> BulkNotificationResponse:
    await enforce_rate_limit(
        actor.id, "notifications_bulk_create", BULK_CREATE_LIMIT, BULK_CREATE_WINDOW_SECONDS
    )

    try:
        result = await service.create_bulk_notifications(db, actor, data)
        return BulkNotificationResponse.model_validate(result)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, "creating bulk notifications")


@router.delete("/clear-read", response_model=CountResponse, summary="Clear Read Notifications")
async def clear_read(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> CountResponse:
    try:
        count = await service.clear_read(db, actor)
        return CountResponse(message=f"Deleted {count} read notification(s)", count=count)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, "clearing read notifications")


@router.delete(
    "/cleanup-expired",
    response_model=CountResponse,
    summary="Delete Expired Notifications",
)
async def cleanup_expired(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> CountResponse:
    try:
        count = await service.cleanup_expired(db, actor)
        return CountResponse(message=f"Deleted {count} expired notification(s)", count=count)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, "cleaning up expired notifications")


@router.put(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    summary="Mark Notification Read",
)
async def mark_read(
    notification_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> NotificationResponse:
    try:
        notification = await service.mark_as_read(db, actor, notification_id)
        return NotificationResponse.model_validate(notification)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"marking notification {notification_id} read")


@router.delete("/{notification_id}", response_model=MessageResponse, summary="Delete Notification")
async def delete_notification(
    notification_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> MessageResponse:
    try:
        await service.delete_notification(db, actor, notification_id)
        return MessageResponse(message="Notification deleted")
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise_internal_error(e, f"deleting notification {notification_id}")
