"""
Notification inbox endpoints.

Notifications are created by the system; recipients can only list, flag and
delete their own.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_current_user, get_pagination_params
from api.schemas.common import Envelope, MessageResponse, Pagination, PaginationParams
from api.schemas.notifications import NotificationPage, NotificationResponse, UnreadCountResponse
from api.services import notifications as notification_service
from database.engine import get_db
from database.models.users import User

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationPage, summary="List Notifications")
async def list_notifications(
    read: Optional[bool] = Query(None, description="Only read (true) or unread (false)"),
    pagination: PaginationParams = Depends(get_pagination_params),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    notifications, total = await notification_service.list_notifications(
        db, current_user.id, offset=pagination.offset, limit=pagination.limit, read=read
    )
    return NotificationPage(
        data=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=await notification_service.count_unread(db, current_user.id),
        pagination=Pagination.create(total, pagination),
    )


@router.get("/unread-count", response_model=UnreadCountResponse, summary="Unread Count")
async def unread_count(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    count = await notification_service.count_unread(db, current_user.id)
    return UnreadCountResponse(unread_count=count)


@router.put("/read-all", response_model=MessageResponse, summary="Mark All Read")
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await notification_service.mark_all_read(db, current_user.id)
    return MessageResponse(message="All notifications marked as read")


@router.delete("/read", response_model=MessageResponse, summary="Clear Read Notifications")
async def delete_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    removed = await notification_service.delete_read(db, current_user.id)
    return MessageResponse(message=f"All read notifications deleted ({removed})")


@router.put(
    "/{notification_id}/read",
    response_model=Envelope[NotificationResponse],
    summary="Mark Read",
)
async def mark_read(
    notification_id: int = Path(..., description="Notification ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    notification = await notification_service.set_read(db, notification_id, current_user.id, True)
    return Envelope(data=NotificationResponse.model_validate(notification))


@router.put(
    "/{notification_id}/unread",
    response_model=Envelope[NotificationResponse],
    summary="Mark Unread",
)
async def mark_unread(
    notification_id: int = Path(..., description="Notification ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    notification = await notification_service.set_read(db, notification_id, current_user.id, False)
    return Envelope(data=NotificationResponse.model_validate(notification))


@router.delete(
    "/{notification_id}",
    response_model=MessageResponse,
    summary="Delete Notification",
)
async def delete_notification(
    notification_id: int = Path(..., description="Notification ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await notification_service.delete_notification(db, notification_id, current_user.id)
    return MessageResponse(message="Notification deleted successfully")
