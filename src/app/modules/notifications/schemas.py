"""
Notification Schemas
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .models import NotificationType


class NotificationBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    type: NotificationType = NotificationType.INFO
    action_url: str | None = Field(None, max_length=500)
    expires_at: datetime | None = None


class NotificationCreate(NotificationBase):
    """Request body for POST /notifications."""

    user_id: UUID


class BulkNotificationCreate(NotificationBase):
    """Request body for POST /notifications/bulk: the same message to several users."""

    user_ids: list[UUID] = Field(..., min_length=1, max_length=1000)


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    title: str
    message: str
    type: NotificationType
    is_read: bool
    read_at: datetime | None = None
    action_url: str | None = None
    expires_at: datetime | None = None
    created_at: datetime


class NotificationListResponse(BaseModel):
    docs: list[NotificationResponse]
    total_docs: int
    limit: int
    page: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool
    next_page: int | None = None
    prev_page: int | None = None
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int


class BulkNotificationFailure(BaseModel):
    user_id: UUID
    error: str
    message: str


class BulkNotificationResponse(BaseModel):
    message: str
    created: int
    failed: list[BulkNotificationFailure]


class CountResponse(BaseModel):
    """Result of a mass mark-read or delete."""

    message: str
    count: int


class MessageResponse(BaseModel):
    message: str
