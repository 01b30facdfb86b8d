"""
SQLite implementation of Milestone repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select

from roadmap.core.exceptions import NotFoundError
from roadmap.infrastructure.local.database import MilestoneORM, get_session_factory, session_scope
from roadmap.interfaces.milestone_repository import IMilestoneRepository
from roadmap.models.enums import MilestoneStatus
from roadmap.models.milestone import Milestone, MilestoneCreate, MilestoneUpdate
from roadmap.utils.datetime_utils import now_utc

_TERMINAL_STATUSES = [MilestoneStatus.COMPLETED.value, MilestoneStatus.CANCELLED.value]


class SqliteMilestoneRepository(IMilestoneRepository):
    """SQLite implementation of milestone repository."""

    def __init__(self, session_factory=None):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
        """
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: MilestoneORM) -> Milestone:
        """Convert ORM object to Pydantic model."""
        return Milestone(
            id=UUID(orm.id),
            project_id=UUID(orm.project_id),
            owner_id=orm.owner_id,
            title=orm.title,
            description=orm.description,
            target_date=orm.target_date,
            actual_completion_date=orm.actual_completion_date,
            milestone_type=orm.milestone_type,
            priority_level=orm.priority_level,
            status=MilestoneStatus(orm.status),
            completion_percentage=orm.completion_percentage or 0.0,
            schedule_variance_days=orm.schedule_variance_days or 0,
            is_critical=bool(orm.is_critical),
            is_at_risk=bool(orm.is_at_risk),
            requires_approval=bool(orm.requires_approval),
            last_progress_threshold_notified=orm.last_progress_threshold_notified or 0,
            stakeholder_ids=orm.stakeholder_ids or [],
            submitted_for_approval_at=orm.submitted_for_approval_at,
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    async def create(self, milestone: MilestoneCreate) -> Milestone:
        """Create a new milestone."""
        async with session_scope(self._session_factory) as session:
            now = now_utc()
            orm = MilestoneORM(
                id=str(uuid4()),
                project_id=str(milestone.project_id),
                owner_id=milestone.owner_id,
                title=milestone.title,
                description=milestone.description,
                target_date=milestone.target_date,
                milestone_type=milestone.milestone_type.value,
                priority_level=milestone.priority_level.value,
                status=MilestoneStatus.NOT_STARTED.value,
                completion_percentage=0.0,
                schedule_variance_days=0,
                is_critical=milestone.is_critical,
                is_at_risk=False,
                requires_approval=milestone.requires_approval,
                last_progress_threshold_notified=0,
                stakeholder_ids=list(milestone.stakeholder_ids),
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.flush()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, milestone_id: UUID) -> Optional[Milestone]:
        """Get a milestone by ID."""
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(MilestoneORM).where(MilestoneORM.id == str(milestone_id))
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def list_by_project(self, project_id: UUID) -> list[Milestone]:
        """List milestones for a project."""
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(MilestoneORM)
                .where(MilestoneORM.project_id == str(project_id))
                .order_by(MilestoneORM.target_date, MilestoneORM.created_at)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def list_open(self) -> list[Milestone]:
        """List milestones that still need progress tracking."""
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(MilestoneORM)
                .where(MilestoneORM.status.not_in(_TERMINAL_STATUSES))
                .order_by(MilestoneORM.target_date)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def update(self, milestone_id: UUID, update: MilestoneUpdate) -> Milestone:
        """Update a milestone."""
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(MilestoneORM).where(MilestoneORM.id == str(milestone_id))
            )
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"Milestone {milestone_id} not found")

            update_data = update.model_dump(exclude_unset=True)
            for field, value in update_data.items():
                if hasattr(value, "value"):
                    value = value.value
                setattr(orm, field, value)

            orm.updated_at = now_utc()
            await session.flush()
            await session.refresh(orm)
            return self._orm_to_model(orm)
