"""
Milestone progress tracking.

Rolls task progress up into milestone completion, derives schedule variance
from a linear plan between the project start and the target date, raises
threshold alerts and records a progress snapshot on every recomputation.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Optional

from roadmap.core.config import Settings, get_settings
from roadmap.core.exceptions import NotFoundError
from roadmap.core.logger import setup_logger
from roadmap.interfaces.clock import IClock
from roadmap.interfaces.milestone_repository import IMilestoneRepository
from roadmap.interfaces.notification_sink import INotificationSink
from roadmap.interfaces.progress_snapshot_repository import IProgressSnapshotRepository
from roadmap.interfaces.project_repository import IProjectRepository
from roadmap.interfaces.task_repository import ITaskRepository
from roadmap.interfaces.transaction_manager import ITransactionManager
from roadmap.models.enums import MilestoneStatus
from roadmap.models.milestone import Milestone, MilestoneUpdate
from roadmap.models.progress_snapshot import ProgressSnapshotCreate, ProgressTrend
from roadmap.models.task import MilestoneTaskProgress
from roadmap.services.notification_service import notify_progress_threshold
from roadmap.utils.datetime_utils import days_between

logger = setup_logger(__name__)


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def weighted_completion(stored_completion: float, tasks: list[MilestoneTaskProgress]) -> float:
    """
    Weighted mean of task completion.

    Weight defaults to 1. With no tasks the stored completion is returned
    unchanged; a non-positive total weight yields 0.
    """
    if not tasks:
        return stored_completion

    total_weight = sum(task.weight if task.weight is not None else 1.0 for task in tasks)
    if total_weight <= 0:
        return 0.0

    weighted = sum(
        task.percent_complete * (task.weight if task.weight is not None else 1.0)
        for task in tasks
    )
    return round(min(100.0, max(0.0, weighted / total_weight)), 2)


class ProgressTrackingService:
    """Service for milestone completion, schedule variance and snapshots."""

    def __init__(
        self,
        milestone_repo: IMilestoneRepository,
        project_repo: IProjectRepository,
        task_repo: ITaskRepository,
        snapshot_repo: IProgressSnapshotRepository,
        notification_sink: INotificationSink,
        clock: IClock,
        transaction_manager: ITransactionManager,
        settings: Optional[Settings] = None,
    ):
        self.milestone_repo = milestone_repo
        self.project_repo = project_repo
        self.task_repo = task_repo
        self.snapshot_repo = snapshot_repo
        self.notification_sink = notification_sink
        self.clock = clock
        self.transaction_manager = transaction_manager
        self.settings = settings or get_settings()

    async def calculate_progress_from_tasks(self, milestone: Milestone) -> float:
        tasks = await self.task_repo.list_for_milestone(milestone.id)
        return weighted_completion(milestone.completion_percentage, tasks)

    async def calculate_schedule_variance_days(
        self, milestone: Milestone, as_of: Optional[date] = None
    ) -> int:
        """
        Signed schedule variance in days; negative means behind schedule.

        The plan runs linearly from the project start (falling back to the
        milestone's creation date) to the target date.
        """
        as_of = as_of or self.clock.today()

        project = await self.project_repo.get(milestone.project_id)
        if project and project.start_date:
            start = project.start_date
        elif milestone.created_at:
            start = milestone.created_at.date()
        else:
            start = as_of

        planned_days = max(1, days_between(start, milestone.target_date))
        rate_per_day = 100 / planned_days

        elapsed_days = min(planned_days, max(0, days_between(start, as_of)))
        expected = min(100.0, round(elapsed_days * rate_per_day, 2))

        return round_half_away_from_zero(
            (milestone.completion_percentage - expected) / rate_per_day
        )

    async def update_from_tasks(self, milestone: Milestone) -> Milestone:
        """
        Recompute and persist completion, variance, risk and status.

        Threshold alerts go out for every newly crossed threshold and one
        snapshot is appended, all in one transaction.
        """
        current = await self.milestone_repo.get(milestone.id)
        if current is None:
            raise NotFoundError(f"Milestone {milestone.id} not found")

        today = self.clock.today()
        tasks = await self.task_repo.list_for_milestone(current.id)
        completion = weighted_completion(current.completion_percentage, tasks)
        remaining_count = sum(1 for task in tasks if not task.is_completed)
        blocked_count = sum(1 for task in tasks if task.is_blocked)

        projected = current.model_copy(update={"completion_percentage": completion})
        variance = await self.calculate_schedule_variance_days(projected, today)

        update = MilestoneUpdate(
            completion_percentage=completion,
            schedule_variance_days=variance,
            is_at_risk=variance <= -self.settings.MILESTONE_RISK_BEHIND_SCHEDULE_DAYS,
        )
        if (
            not current.status.is_terminal
            and current.target_date < today
            and completion < 100
            and current.status != MilestoneStatus.OVERDUE
        ):
            update.status = MilestoneStatus.OVERDUE

        async with self.transaction_manager.transaction():
            update.last_progress_threshold_notified = await self._notify_thresholds(projected)
            updated = await self.milestone_repo.update(current.id, update)
            await self.snapshot_repo.create(
                ProgressSnapshotCreate(
                    milestone_id=current.id,
                    completion_percentage=completion,
                    schedule_variance_days=variance,
                    remaining_tasks_count=remaining_count,
                    blocked_tasks_count=blocked_count,
                )
            )

        if update.status == MilestoneStatus.OVERDUE:
            logger.info(f"Milestone {current.id} is overdue (target {current.target_date})")
        return updated

    async def _notify_thresholds(self, milestone: Milestone) -> int:
        """Alert on each newly crossed threshold and return the new marker."""
        last_notified = milestone.last_progress_threshold_notified
        for threshold in sorted(self.settings.MILESTONE_PROGRESS_THRESHOLDS):
            if threshold <= last_notified or milestone.completion_percentage < threshold:
                continue
            await notify_progress_threshold(self.notification_sink, milestone, threshold)
            last_notified = threshold
        return last_notified

    async def generate_trend_data(self, milestone: Milestone) -> ProgressTrend:
        snapshots = await self.snapshot_repo.list_by_milestone(milestone.id, limit=2)
        if not snapshots:
            return ProgressTrend()
        latest = snapshots[0]
        if len(snapshots) < 2:
            return ProgressTrend(latest=latest)

        delta = latest.completion_percentage - snapshots[1].completion_percentage
        if delta > 0:
            trend = "improving"
        elif delta < 0:
            trend = "declining"
        else:
            trend = "stable"
        return ProgressTrend(trend=trend, latest=latest)

    async def recompute_open_milestones(self) -> dict[str, int]:
        """Recompute every non-terminal milestone; one failure does not stop the rest."""
        milestones = await self.milestone_repo.list_open()
        updated_count = 0
        error_count = 0

        for milestone in milestones:
            try:
                await self.update_from_tasks(milestone)
                updated_count += 1
            except Exception as e:
                error_count += 1
                logger.error(f"Progress recompute failed for milestone {milestone.id}: {e}")

        logger.info(
            f"Progress recompute completed: {updated_count} updated, {error_count} errors"
        )
        return {"updated": updated_count, "failed": error_count}
