"""
SQLite implementation of progress snapshot repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import literal_column, select

from roadmap.infrastructure.local.database import (
    MilestoneProgressSnapshotORM,
    get_session_factory,
    session_scope,
)
from roadmap.interfaces.progress_snapshot_repository import IProgressSnapshotRepository
from roadmap.models.progress_snapshot import ProgressSnapshot, ProgressSnapshotCreate
from roadmap.utils.datetime_utils import now_utc

# Insertion order; created_at alone ties when several snapshots share a timestamp
_INSERT_ORDER = literal_column("milestone_progress_snapshots.rowid")


class SqliteProgressSnapshotRepository(IProgressSnapshotRepository):
    """Append-only snapshot storage."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: MilestoneProgressSnapshotORM) -> ProgressSnapshot:
        return ProgressSnapshot(
            id=UUID(orm.id),
            milestone_id=UUID(orm.milestone_id),
            completion_percentage=orm.completion_percentage,
            schedule_variance_days=orm.schedule_variance_days,
            remaining_tasks_count=orm.remaining_tasks_count or 0,
            blocked_tasks_count=orm.blocked_tasks_count or 0,
            created_at=orm.created_at,
        )

    async def create(self, snapshot: ProgressSnapshotCreate) -> ProgressSnapshot:
        async with session_scope(self._session_factory) as session:
            orm = MilestoneProgressSnapshotORM(
                id=str(uuid4()),
                milestone_id=str(snapshot.milestone_id),
                completion_percentage=snapshot.completion_percentage,
                schedule_variance_days=snapshot.schedule_variance_days,
                remaining_tasks_count=snapshot.remaining_tasks_count,
                blocked_tasks_count=snapshot.blocked_tasks_count,
                created_at=now_utc(),
            )
            session.add(orm)
            await session.flush()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def list_by_milestone(
        self, milestone_id: UUID, limit: Optional[int] = None
    ) -> list[ProgressSnapshot]:
        async with session_scope(self._session_factory) as session:
            query = (
                select(MilestoneProgressSnapshotORM)
                .where(MilestoneProgressSnapshotORM.milestone_id == str(milestone_id))
                .order_by(MilestoneProgressSnapshotORM.created_at.desc(), _INSERT_ORDER.desc())
            )
            if limit is not None:
                query = query.limit(limit)
            result = await session.execute(query)
            return [self._orm_to_model(orm) for orm in result.scalars().all()]
