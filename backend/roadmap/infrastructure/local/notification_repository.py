"""
SQLite implementation of notification repository.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import desc, select

from roadmap.infrastructure.local.database import NotificationORM, get_session_factory, session_scope
from roadmap.interfaces.notification_repository import INotificationRepository
from roadmap.models.notification import Notification, NotificationCreate, NotificationType
from roadmap.utils.datetime_utils import now_utc


class SqliteNotificationRepository(INotificationRepository):
    """Stores activity alerts as notification rows."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: NotificationORM) -> Notification:
        return Notification(
            id=UUID(orm.id),
            user_id=orm.user_id,
            type=NotificationType(orm.type),
            title=orm.title,
            message=orm.message,
            link_type=orm.link_type,
            link_id=orm.link_id,
            project_id=UUID(orm.project_id) if orm.project_id else None,
            is_read=orm.is_read,
            read_at=orm.read_at,
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    async def create(self, notification: NotificationCreate) -> Notification:
        now = now_utc()
        async with session_scope(self._session_factory) as session:
            # Column widths: title 200, message 500
            orm = NotificationORM(
                id=str(uuid4()),
                user_id=notification.user_id,
                type=notification.type.value,
                title=notification.title[:200],
                message=notification.message[:500],
                link_type=notification.link_type,
                link_id=notification.link_id,
                project_id=str(notification.project_id) if notification.project_id else None,
                is_read=False,
                read_at=None,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.flush()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def list(self, user_id: str, limit: int = 50, offset: int = 0) -> list[Notification]:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(NotificationORM)
                .where(NotificationORM.user_id == user_id)
                .order_by(desc(NotificationORM.created_at))
                .offset(offset)
                .limit(limit)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]
