# buzzly/api/routers/notifications.py
from fastapi import APIRouter, Depends, status
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from buzzly.db.session import get_session
from buzzly.core.auth import get_current_user
from buzzly.core.config import settings
from buzzly.schemas.auth import TokenUser, MessageResponseModel
from buzzly.schemas.notifications import NotificationPublic, UnreadCount
from buzzly.services.notification_service import notification_service

router = APIRouter()

@router.get("", response_model=List[NotificationPublic])
async def get_my_notifications(
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    """
    Get the current user's notifications, most recent first.
    """
    return await notification_service.list_for_user(
        session, user_id=current_user.id, limit=settings.NOTIFICATIONS_LIMIT
    )


@router.get("/unread-count", response_model=UnreadCount)
async def get_unread_count(
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    return UnreadCount(count=await notification_service.unread_count(session, user_id=current_user.id))


@router.patch("/mark-all-read", response_model=MessageResponseModel)
async def mark_all_notifications_as_read(
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    updated = await notification_service.mark_all_as_read(session, user_id=current_user.id)
    return MessageResponseModel(status=True, message=f"{updated} notifications marked as read")


@router.patch("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_notification_as_read(
    notification_id: str,
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    """
    Mark a single notification as read.
    """
    await notification_service.mark_as_read(session, notification_id=notification_id, user_id=current_user.id)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: str,
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    await notification_service.delete(session, notification_id=notification_id, user_id=current_user.id)
