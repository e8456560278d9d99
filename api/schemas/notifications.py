"""Notification API schemas."""

from typing import Any, Optional
from pydantic import BaseModel

from api.schemas.common import Pagination, TimestampMixin
from database.models.notifications import NotificationType


class NotificationResponse(TimestampMixin):
    id: int
    recipient_id: int
    type: NotificationType
    title: str
    message: str
    data: dict[str, Any]
    read: bool
    action_url: Optional[str] = None

    class Config:
        from_attributes = True


class NotificationPage(BaseModel):
    """A page of the inbox plus the caller's total unread count."""

    success: bool = True
    data: list[NotificationResponse]
    unread_count: int
    pagination: Pagination


class UnreadCountResponse(BaseModel):
    success: bool = True
    unread_count: int
