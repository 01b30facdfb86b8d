"""
Milestone dependency service.

Owns the dependency graph rules: edge creation with cycle checks,
readiness gating (``can_start``) and cascading target-date shifts.
"""

from __future__ import annotations

from collections import deque
from datetime import date, timedelta
from typing import Optional
from uuid import UUID

from roadmap.core.exceptions import DuplicateError, ValidationError
from roadmap.core.logger import setup_logger
from roadmap.interfaces.clock import IClock
from roadmap.interfaces.dependency_repository import IMilestoneDependencyRepository
from roadmap.interfaces.milestone_repository import IMilestoneRepository
from roadmap.interfaces.notification_sink import INotificationSink
from roadmap.interfaces.transaction_manager import ITransactionManager
from roadmap.models.dependency import MilestoneDependency, MilestoneDependencyCreate
from roadmap.models.enums import DependencyType, MilestoneStatus
from roadmap.models.milestone import Milestone, MilestoneUpdate
from roadmap.services.notification_service import notify_target_date_shifted
from roadmap.utils.datetime_utils import days_between
from roadmap.utils.dependency_validator import DependencyGraphValidator

logger = setup_logger(__name__)


class DependencyService:
    """Service for milestone dependency edges and the rules built on them."""

    def __init__(
        self,
        dependency_repo: IMilestoneDependencyRepository,
        milestone_repo: IMilestoneRepository,
        notification_sink: INotificationSink,
        clock: IClock,
        transaction_manager: ITransactionManager,
    ):
        self.dependency_repo = dependency_repo
        self.milestone_repo = milestone_repo
        self.notification_sink = notification_sink
        self.clock = clock
        self.transaction_manager = transaction_manager
        self.validator = DependencyGraphValidator(dependency_repo)

    async def create_dependency(
        self,
        predecessor: Milestone,
        successor: Milestone,
        dependency_type: DependencyType = DependencyType.FINISH_TO_START,
        lag_days: int = 0,
    ) -> MilestoneDependency:
        """
        Create an active predecessor -> successor edge.

        Raises:
            ValidationError: If lag_days is negative
            CircularDependencyError: On a self-dependency or if the edge closes a cycle
            DuplicateError: If an active edge already links the pair
        """
        if lag_days < 0:
            raise ValidationError("lag_days must not be negative", details={"lag_days": lag_days})

        async with self.transaction_manager.transaction():
            await self.validator.validate_new_edge(predecessor.id, successor.id)
            existing = await self.dependency_repo.find_between(predecessor.id, successor.id)
            if existing and existing.is_active:
                raise DuplicateError(
                    f"Milestone {successor.id} already depends on {predecessor.id}",
                    details={"dependency_id": str(existing.id)},
                )
            if existing:
                edge = await self.dependency_repo.reactivate(existing.id, dependency_type, lag_days)
            else:
                edge = await self.dependency_repo.create(
                    MilestoneDependencyCreate(
                        predecessor_id=predecessor.id,
                        successor_id=successor.id,
                        dependency_type=dependency_type,
                        lag_days=lag_days,
                    )
                )

        logger.info(
            f"Dependency {edge.id} created: {predecessor.id} -> {successor.id} "
            f"({dependency_type.value}, lag {lag_days})"
        )
        return edge

    async def deactivate_dependency(self, dependency_id: UUID) -> MilestoneDependency:
        edge = await self.dependency_repo.deactivate(dependency_id)
        logger.info(f"Dependency {dependency_id} deactivated")
        return edge

    async def list_predecessors(self, milestone_id: UUID) -> list[MilestoneDependency]:
        return await self.dependency_repo.list_active_by_successor(milestone_id)

    async def list_successors(self, milestone_id: UUID) -> list[MilestoneDependency]:
        return await self.dependency_repo.list_active_by_predecessor(milestone_id)

    async def can_start(self, milestone: Milestone, as_of: Optional[date] = None) -> bool:
        """True when every active incoming dependency is satisfied."""
        blocking = await self.get_unsatisfied_dependencies(milestone, as_of)
        return not blocking

    async def get_unsatisfied_dependencies(
        self, milestone: Milestone, as_of: Optional[date] = None
    ) -> list[MilestoneDependency]:
        """Active incoming edges that currently keep the milestone from starting."""
        as_of = as_of or self.clock.today()
        blocking = []
        for edge in await self.dependency_repo.list_active_by_successor(milestone.id):
            predecessor = await self.milestone_repo.get(edge.predecessor_id)
            if predecessor is None:
                logger.warning(
                    f"Dependency {edge.id} points at missing milestone {edge.predecessor_id}"
                )
                blocking.append(edge)
                continue
            if not self._is_satisfied(edge, predecessor, as_of):
                blocking.append(edge)
        return blocking

    @staticmethod
    def _is_satisfied(edge: MilestoneDependency, predecessor: Milestone, as_of: date) -> bool:
        if edge.dependency_type.requires_finished_predecessor:
            satisfied = predecessor.status == MilestoneStatus.COMPLETED
        else:
            satisfied = predecessor.status.has_started

        if (
            satisfied
            and edge.dependency_type == DependencyType.FINISH_TO_START
            and edge.lag_days > 0
        ):
            reference = predecessor.actual_completion_date or predecessor.target_date
            try:
                satisfied = reference + timedelta(days=edge.lag_days) <= as_of
            except OverflowError:
                # Lag runs past the last representable date
                satisfied = False

        return satisfied

    async def cascade_target_date_change(
        self,
        predecessor: Milestone,
        old_target_date: date,
        new_target_date: date,
    ) -> list[Milestone]:
        """
        Push every milestone downstream of ``predecessor`` back by the slip.

        Only a later date cascades. Each reachable successor is shifted once,
        in breadth-first order, and its owner gets one notification.

        Returns:
            The shifted milestones, in the order they were updated
        """
        delta = days_between(old_target_date, new_target_date)
        if delta <= 0:
            return []

        shifted: list[Milestone] = []
        async with self.transaction_manager.transaction():
            visited: set[UUID] = {predecessor.id}
            queue: deque[UUID] = deque([predecessor.id])

            while queue:
                current_id = queue.popleft()
                for edge in await self.dependency_repo.list_active_by_predecessor(current_id):
                    successor_id = edge.successor_id
                    if successor_id in visited:
                        continue
                    visited.add(successor_id)

                    successor = await self.milestone_repo.get(successor_id)
                    if successor is None:
                        continue

                    updated = await self.milestone_repo.update(
                        successor_id,
                        MilestoneUpdate(target_date=successor.target_date + timedelta(days=delta)),
                    )
                    shifted.append(updated)
                    await notify_target_date_shifted(
                        self.notification_sink,
                        updated,
                        successor.target_date,
                        delta,
                        predecessor.title,
                    )
                    queue.append(successor_id)

        if shifted:
            logger.info(
                f"Cascaded +{delta} days from milestone {predecessor.id} "
                f"to {len(shifted)} successor(s)"
            )
        return shifted
