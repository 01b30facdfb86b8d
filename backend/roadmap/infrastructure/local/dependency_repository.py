"""
SQLite implementation of milestone dependency repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, select

from roadmap.core.exceptions import NotFoundError
from roadmap.infrastructure.local.database import (
    MilestoneDependencyORM,
    get_session_factory,
    session_scope,
)
from roadmap.interfaces.dependency_repository import IMilestoneDependencyRepository
from roadmap.models.dependency import MilestoneDependency, MilestoneDependencyCreate
from roadmap.models.enums import DependencyType
from roadmap.utils.datetime_utils import now_utc


class SqliteMilestoneDependencyRepository(IMilestoneDependencyRepository):
    """SQLite implementation of dependency edge storage."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: MilestoneDependencyORM) -> MilestoneDependency:
        return MilestoneDependency(
            id=UUID(orm.id),
            predecessor_id=UUID(orm.predecessor_id),
            successor_id=UUID(orm.successor_id),
            dependency_type=DependencyType(orm.dependency_type),
            lag_days=orm.lag_days or 0,
            is_active=bool(orm.is_active),
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    async def _get_orm(self, session, dependency_id: UUID) -> MilestoneDependencyORM:
        result = await session.execute(
            select(MilestoneDependencyORM).where(MilestoneDependencyORM.id == str(dependency_id))
        )
        orm = result.scalar_one_or_none()
        if not orm:
            raise NotFoundError(f"Dependency {dependency_id} not found")
        return orm

    async def create(self, dependency: MilestoneDependencyCreate) -> MilestoneDependency:
        async with session_scope(self._session_factory) as session:
            now = now_utc()
            orm = MilestoneDependencyORM(
                id=str(uuid4()),
                predecessor_id=str(dependency.predecessor_id),
                successor_id=str(dependency.successor_id),
                dependency_type=dependency.dependency_type.value,
                lag_days=dependency.lag_days,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.flush()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, dependency_id: UUID) -> Optional[MilestoneDependency]:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(MilestoneDependencyORM).where(
                    MilestoneDependencyORM.id == str(dependency_id)
                )
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def find_between(
        self, predecessor_id: UUID, successor_id: UUID
    ) -> Optional[MilestoneDependency]:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(MilestoneDependencyORM).where(
                    and_(
                        MilestoneDependencyORM.predecessor_id == str(predecessor_id),
                        MilestoneDependencyORM.successor_id == str(successor_id),
                    )
                )
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def list_active_by_successor(self, successor_id: UUID) -> list[MilestoneDependency]:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(MilestoneDependencyORM)
                .where(
                    and_(
                        MilestoneDependencyORM.successor_id == str(successor_id),
                        MilestoneDependencyORM.is_active == True,  # noqa: E712
                    )
                )
                .order_by(MilestoneDependencyORM.created_at)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def list_active_by_predecessor(self, predecessor_id: UUID) -> list[MilestoneDependency]:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(MilestoneDependencyORM)
                .where(
                    and_(
                        MilestoneDependencyORM.predecessor_id == str(predecessor_id),
                        MilestoneDependencyORM.is_active == True,  # noqa: E712
                    )
                )
                .order_by(MilestoneDependencyORM.created_at)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def deactivate(self, dependency_id: UUID) -> MilestoneDependency:
        async with session_scope(self._session_factory) as session:
            orm = await self._get_orm(session, dependency_id)
            orm.is_active = False
            orm.updated_at = now_utc()
            await session.flush()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def reactivate(
        self, dependency_id: UUID, dependency_type: DependencyType, lag_days: int
    ) -> MilestoneDependency:
        async with session_scope(self._session_factory) as session:
            orm = await self._get_orm(session, dependency_id)
            orm.is_active = True
            orm.dependency_type = dependency_type.value
            orm.lag_days = lag_days
            orm.updated_at = now_utc()
            await session.flush()
            await session.refresh(orm)
            return self._orm_to_model(orm)
