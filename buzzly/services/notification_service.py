# buzzly/services/notification_service.py
import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import delete
from sqlmodel import select, update, func

from buzzly.db.models import Notification, NotificationType
from buzzly.db.repositories.base import BaseRepository
from buzzly.errors import NotificationNotFound

logger = logging.getLogger(__name__)

class NotificationService:
    def __init__(self, repository: BaseRepository[Notification]):
        self.repository = repository

    async def create_notification(
        self,
        session: AsyncSession,
        *,
        recipient_id: str,
        sender_id: Optional[str],
        notification_type: NotificationType,
        content: str,
        reference_id: Optional[str] = None,
    ) -> Optional[Notification]:
        """
        Creates a notification in the DB. Actions a user takes on their own
        content never notify themselves.
        """
        if sender_id == recipient_id:
            return None
        notification = Notification(
            recipient_id=recipient_id,
            sender_id=sender_id,
            notification_type=notification_type,
            content=content,
            reference_id=reference_id,
        )
        await self.repository.create(session, obj_in=notification)
        logger.info(f"{notification_type.value} notification created for user {recipient_id}")
        return notification

    async def list_for_user(self, session: AsyncSession, *, user_id: str, limit: int = 20) -> List[Notification]:
        statement = (
            select(Notification)
            .where(Notification.recipient_id == user_id)
            .options(selectinload(Notification.sender))
            .order_by(Notification.created_at.desc())
            .limit(limit)
        )
        result = await session.execute(statement)
        return result.scalars().all()

    async def unread_count(self, session: AsyncSession, *, user_id: str) -> int:
        statement = (
            select(func.count())
            .select_from(Notification)
            .where(Notification.recipient_id == user_id, Notification.is_read == False)  # noqa: E712
        )
        return (await session.execute(statement)).scalar_one()

    async def mark_as_read(self, session: AsyncSession, *, notification_id: str, user_id: str) -> None:
        statement = (
            update(Notification)
            .where(Notification.id == notification_id, Notification.recipient_id == user_id)
            .values(is_read=True)
        )
        result = await session.execute(statement)
        await session.commit()
        if result.rowcount == 0:
            raise NotificationNotFound()

    async def mark_all_as_read(self, session: AsyncSession, *, user_id: str) -> int:
        statement = (
            update(Notification)
            .where(Notification.recipient_id == user_id, Notification.is_read == False)  # noqa: E712
            .values(is_read=True)
        )
        result = await session.execute(statement)
        await session.commit()
        return result.rowcount

    async def delete(self, session: AsyncSession, *, notification_id: str, user_id: str) -> None:
        statement = delete(Notification).where(
            Notification.id == notification_id, Notification.recipient_id == user_id
        )
        result = await session.execute(statement)
        await session.commit()
        if result.rowcount == 0:
            raise NotificationNotFound()

notification_service = NotificationService(BaseRepository(Notification))
