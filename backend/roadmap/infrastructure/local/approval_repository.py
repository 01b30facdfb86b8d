"""
SQLite implementation of milestone approval repository.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import delete, select

from roadmap.core.exceptions import NotFoundError
from roadmap.infrastructure.local.database import (
    MilestoneApprovalORM,
    get_session_factory,
    session_scope,
)
from roadmap.interfaces.approval_repository import IMilestoneApprovalRepository
from roadmap.models.approval import ApprovalStep, MilestoneApproval
from roadmap.models.enums import ApprovalStatus


class SqliteMilestoneApprovalRepository(IMilestoneApprovalRepository):
    """SQLite implementation of approval step storage."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: MilestoneApprovalORM) -> MilestoneApproval:
        return MilestoneApproval(
            id=UUID(orm.id),
            milestone_id=UUID(orm.milestone_id),
            step_order=orm.step_order,
            approver_id=orm.approver_id,
            approval_criteria=orm.approval_criteria,
            status=ApprovalStatus(orm.status),
            requested_at=orm.requested_at,
            decided_at=orm.decided_at,
            decision_comment=orm.decision_comment,
        )

    async def replace_for_milestone(
        self,
        milestone_id: UUID,
        steps: list[ApprovalStep],
        requested_at: datetime,
    ) -> list[MilestoneApproval]:
        async with session_scope(self._session_factory) as session:
            await session.execute(
                delete(MilestoneApprovalORM).where(
                    MilestoneApprovalORM.milestone_id == str(milestone_id)
                )
            )

            orms = []
            for order, step in enumerate(steps, start=1):
                orm = MilestoneApprovalORM(
                    id=str(uuid4()),
                    milestone_id=str(milestone_id),
                    step_order=order,
                    approver_id=step.approver_id,
                    approval_criteria=step.approval_criteria,
                    status=ApprovalStatus.PENDING.value,
                    requested_at=requested_at,
                )
                session.add(orm)
                orms.append(orm)

            await session.flush()
            for orm in orms:
                await session.refresh(orm)
            return [self._orm_to_model(orm) for orm in orms]

    async def get(self, approval_id: UUID) -> Optional[MilestoneApproval]:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(MilestoneApprovalORM).where(MilestoneApprovalORM.id == str(approval_id))
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def list_by_milestone(self, milestone_id: UUID) -> list[MilestoneApproval]:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(MilestoneApprovalORM)
                .where(MilestoneApprovalORM.milestone_id == str(milestone_id))
                .order_by(MilestoneApprovalORM.step_order)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def record_decision(
        self,
        approval_id: UUID,
        status: ApprovalStatus,
        comment: Optional[str],
        decided_at: datetime,
    ) -> MilestoneApproval:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(MilestoneApprovalORM).where(MilestoneApprovalORM.id == str(approval_id))
            )
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"Approval {approval_id} not found")

            orm.status = status.value
            orm.decision_comment = comment
            orm.decided_at = decided_at
            await session.flush()
            await session.refresh(orm)
            return self._orm_to_model(orm)
