"""
Unit tests for ProgressTrackingService.

Covers the weighted rollup, schedule variance, risk and overdue flags,
threshold alerts, snapshots and trend.
"""

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from roadmap.core.exceptions import NotFoundError
from roadmap.models.enums import MilestoneStatus, TaskStatus
from roadmap.models.milestone import Milestone, MilestoneUpdate
from roadmap.models.project import ProjectCreate
from roadmap.models.task import MilestoneTaskProgress, TaskCreate, TaskUpdate
from roadmap.services.progress_tracking_service import (
    round_half_away_from_zero,
    weighted_completion,
)

# 40 planned days from the project start, so each day is worth 2.5%
TARGET = date(2024, 6, 10)


def _task(percent: float, weight=None) -> MilestoneTaskProgress:
    return MilestoneTaskProgress(
        task_id=uuid4(), title="t", percent_complete=percent, weight=weight
    )


async def _attach(task_repo, project, milestone, status=TaskStatus.TODO, progress=0, weight=None, **kwargs):
    task = await task_repo.create(
        TaskCreate(title="Task", project_id=project.id, status=status, progress=progress, **kwargs)
    )
    await task_repo.attach_to_milestone(milestone.id, task.id, weight=weight)
    return task


class TestRounding:
    """Tests for round_half_away_from_zero."""

    @pytest.mark.parametrize(
        "value,expected",
        [(2.5, 3), (-2.5, -3), (0.5, 1), (-0.5, -1), (2.49, 2), (-2.49, -2), (0.0, 0), (-4.0, -4)],
    )
    def test_ties_away_from_zero(self, value, expected):
        assert round_half_away_from_zero(value) == expected


class TestWeightedCompletion:
    """Tests for the weighted task rollup."""

    def test_no_tasks_keeps_stored_value(self):
        assert weighted_completion(37.5, []) == 37.5

    def test_weighted_mean(self):
        assert weighted_completion(0, [_task(100, 1), _task(0, 3)]) == 25.0

    def test_missing_weight_counts_as_one(self):
        assert weighted_completion(0, [_task(100), _task(50, 2)]) == pytest.approx(66.67)

    def test_zero_total_weight(self):
        assert weighted_completion(80, [_task(100, 0), _task(50, 0)]) == 0.0

    def test_rounded_to_two_decimals(self):
        assert weighted_completion(0, [_task(100), _task(0), _task(0)]) == 33.33


# ============================================
# Schedule variance
# ============================================


class TestScheduleVariance:
    """Tests for calculate_schedule_variance_days."""

    async def _variance(self, progress_service, make_milestone, completion, as_of=None):
        milestone = await make_milestone("A", target_date=TARGET)
        projected = milestone.model_copy(update={"completion_percentage": completion})
        return await progress_service.calculate_schedule_variance_days(projected, as_of)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "completion,expected",
        [
            (47.5, 0),  # exactly on plan on day 19
            (40.0, -3),
            (45.0, -1),
            (41.25, -3),  # -2.5 rounds away from zero
            (53.75, 3),  # +2.5 rounds away from zero
            (100.0, 21),
        ],
    )
    async def test_linear_plan(self, progress_service, make_milestone, completion, expected):
        assert await self._variance(progress_service, make_milestone, completion) == expected

    @pytest.mark.asyncio
    async def test_elapsed_clamped_after_target(self, progress_service, make_milestone):
        variance = await self._variance(
            progress_service, make_milestone, 80.0, as_of=date(2024, 7, 1)
        )
        assert variance == -8

    @pytest.mark.asyncio
    async def test_before_project_start(self, progress_service, make_milestone):
        variance = await self._variance(
            progress_service, make_milestone, 0.0, as_of=date(2024, 4, 20)
        )
        assert variance == 0

    @pytest.mark.asyncio
    async def test_falls_back_to_creation_date(self, progress_service, project_repo, test_user_id):
        open_project = await project_repo.create(test_user_id, ProjectCreate(name="No start"))
        created = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)
        milestone = Milestone(
            id=uuid4(),
            project_id=open_project.id,
            title="A",
            target_date=date(2024, 5, 30),
            completion_percentage=40.0,
            created_at=created,
            updated_at=created,
        )

        # 20 planned days, 10 elapsed: 50% expected, 10% behind = 2 days
        assert await progress_service.calculate_schedule_variance_days(milestone) == -2

    @pytest.mark.asyncio
    async def test_target_on_start_date(self, progress_service, make_milestone, project):
        milestone = await make_milestone("A", target_date=project.start_date)
        assert await progress_service.calculate_schedule_variance_days(milestone) == -1


# ============================================
# update_from_tasks
# ============================================


class TestUpdateFromTasks:
    """Tests for the full recomputation."""

    @pytest.mark.asyncio
    async def test_rollup_variance_and_snapshot(
        self, progress_service, task_repo, snapshot_repo, make_milestone, project
    ):
        milestone = await make_milestone("A", target_date=TARGET)
        await _attach(task_repo, project, milestone, status=TaskStatus.DONE, weight=1)
        await _attach(task_repo, project, milestone, status=TaskStatus.IN_PROGRESS, progress=50, weight=2)
        await _attach(task_repo, project, milestone, weight=1)

        updated = await progress_service.update_from_tasks(milestone)

        assert updated.completion_percentage == 50.0
        assert updated.schedule_variance_days == 1
        assert updated.is_at_risk is False
        assert updated.status == MilestoneStatus.NOT_STARTED
        [snapshot] = await snapshot_repo.list_by_milestone(milestone.id)
        assert snapshot.completion_percentage == 50.0
        assert snapshot.schedule_variance_days == 1
        assert snapshot.remaining_tasks_count == 2
        assert snapshot.blocked_tasks_count == 0

    @pytest.mark.asyncio
    async def test_unknown_milestone(self, progress_service, make_milestone):
        milestone = await make_milestone("A")
        ghost = milestone.model_copy(update={"id": uuid4()})

        with pytest.raises(NotFoundError):
            await progress_service.update_from_tasks(ghost)

    @pytest.mark.asyncio
    async def test_without_tasks_keeps_stored_completion(
        self, progress_service, milestone_repo, make_milestone
    ):
        milestone = await make_milestone("A", target_date=TARGET)
        await milestone_repo.update(milestone.id, MilestoneUpdate(completion_percentage=30.0))

        updated = await progress_service.update_from_tasks(milestone)

        assert updated.completion_percentage == 30.0
        assert updated.schedule_variance_days == -7
        assert updated.is_at_risk is True

    @pytest.mark.asyncio
    async def test_at_risk_boundary(self, progress_service, task_repo, make_milestone, project):
        milestone = await make_milestone("A", target_date=TARGET)
        await _attach(task_repo, project, milestone, status=TaskStatus.IN_PROGRESS, progress=40)

        updated = await progress_service.update_from_tasks(milestone)

        assert updated.schedule_variance_days == -3
        assert updated.is_at_risk is True

    @pytest.mark.asyncio
    async def test_blocked_tasks_counted(
        self, progress_service, task_repo, snapshot_repo, make_milestone, project
    ):
        milestone = await make_milestone("A", target_date=TARGET)
        blocker = await task_repo.create(TaskCreate(title="Blocker", project_id=project.id))
        await _attach(task_repo, project, milestone, dependency_ids=[blocker.id])

        await progress_service.update_from_tasks(milestone)

        [snapshot] = await snapshot_repo.list_by_milestone(milestone.id)
        assert snapshot.blocked_tasks_count == 1

    @pytest.mark.asyncio
    async def test_past_target_becomes_overdue(
        self, progress_service, task_repo, make_milestone, project
    ):
        milestone = await make_milestone("A", target_date=date(2024, 5, 15))
        await _attach(task_repo, project, milestone, status=TaskStatus.IN_PROGRESS, progress=60)

        updated = await progress_service.update_from_tasks(milestone)

        assert updated.status == MilestoneStatus.OVERDUE

    @pytest.mark.asyncio
    async def test_finished_work_is_not_overdue(
        self, progress_service, task_repo, make_milestone, project
    ):
        milestone = await make_milestone("A", target_date=date(2024, 5, 15))
        await _attach(task_repo, project, milestone, status=TaskStatus.DONE)

        updated = await progress_service.update_from_tasks(milestone)

        assert updated.completion_percentage == 100.0
        assert updated.status == MilestoneStatus.NOT_STARTED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("terminal", [MilestoneStatus.COMPLETED, MilestoneStatus.CANCELLED])
    async def test_terminal_never_overdue(
        self, progress_service, milestone_repo, make_milestone, terminal
    ):
        milestone = await make_milestone("A", target_date=date(2024, 5, 15))
        await milestone_repo.update(milestone.id, MilestoneUpdate(status=terminal))

        updated = await progress_service.update_from_tasks(milestone)

        assert updated.status == terminal

    @pytest.mark.asyncio
    async def test_due_today_is_not_overdue(self, progress_service, make_milestone):
        milestone = await make_milestone("A", target_date=date(2024, 5, 20))

        updated = await progress_service.update_from_tasks(milestone)

        assert updated.status == MilestoneStatus.NOT_STARTED


class TestProgressThresholds:
    """Tests for one-off threshold alerts."""

    @pytest.mark.asyncio
    async def test_each_crossed_threshold_alerted_once(
        self, progress_service, task_repo, make_milestone, project, sink
    ):
        milestone = await make_milestone("A", target_date=TARGET, stakeholder_ids=["pm"])
        await _attach(task_repo, project, milestone, status=TaskStatus.DONE)
        await _attach(task_repo, project, milestone, status=TaskStatus.IN_PROGRESS, progress=20)

        updated = await progress_service.update_from_tasks(milestone)

        assert updated.completion_percentage == 60.0
        assert updated.last_progress_threshold_notified == 50
        assert sink.titles() == [
            "Milestone 25% complete",
            "Milestone 25% complete",
            "Milestone 50% complete",
            "Milestone 50% complete",
        ]

        sink.clear()
        await progress_service.update_from_tasks(updated)
        assert sink.alerts == []

    @pytest.mark.asyncio
    async def test_next_threshold_after_more_progress(
        self, progress_service, task_repo, make_milestone, project, sink
    ):
        milestone = await make_milestone("A", target_date=TARGET)
        task = await _attach(task_repo, project, milestone, status=TaskStatus.IN_PROGRESS, progress=30)
        await progress_service.update_from_tasks(milestone)
        sink.clear()


        await task_repo.update(task.id, TaskUpdate(status=TaskStatus.DONE))
        updated = await progress_service.update_from_tasks(milestone)

        assert updated.last_progress_threshold_notified == 100
        assert sink.titles() == [
            "Milestone 50% complete",
            "Milestone 75% complete",
            "Milestone 100% complete",
        ]

    @pytest.mark.asyncio
    async def test_below_first_threshold(self, progress_service, task_repo, make_milestone, project, sink):
        milestone = await make_milestone("A", target_date=TARGET)
        await _attach(task_repo, project, milestone, status=TaskStatus.IN_PROGRESS, progress=10)

        updated = await progress_service.update_from_tasks(milestone)

        assert updated.last_progress_threshold_notified == 0
        assert sink.alerts == []


# ============================================
# Trend and batch recompute
# ============================================


class TestTrend:
    """Tests for generate_trend_data."""

    @pytest.mark.asyncio
    async def test_no_snapshots(self, progress_service, make_milestone):
        milestone = await make_milestone("A")

        trend = await progress_service.generate_trend_data(milestone)

        assert trend.trend == "stable"
        assert trend.latest is None

    @pytest.mark.asyncio
    async def test_single_snapshot_is_stable(self, progress_service, make_milestone):
        milestone = await make_milestone("A", target_date=TARGET)
        await progress_service.update_from_tasks(milestone)

        trend = await progress_service.generate_trend_data(milestone)

        assert trend.trend == "stable"
        assert trend.latest is not None

    @pytest.mark.asyncio
    async def test_improving_then_declining(
        self, progress_service, task_repo, make_milestone, project
    ):

        milestone = await make_milestone("A", target_date=TARGET)
        task = await _attach(task_repo, project, milestone, status=TaskStatus.IN_PROGRESS, progress=10)
        await progress_service.update_from_tasks(milestone)

        await task_repo.update(task.id, TaskUpdate(progress=40))
        await progress_service.update_from_tasks(milestone)
        improving = await progress_service.generate_trend_data(milestone)

        await task_repo.update(task.id, TaskUpdate(progress=20))
        await progress_service.update_from_tasks(milestone)
        declining = await progress_service.generate_trend_data(milestone)

        assert improving.trend == "improving"
        assert improving.latest.completion_percentage == 40.0
        assert declining.trend == "declining"
        assert declining.latest.completion_percentage == 20.0


class TestRecomputeOpenMilestones:
    """Tests for the batch recompute."""

    @pytest.mark.asyncio
    async def test_recomputes_only_open_milestones(
        self, progress_service, milestone_repo, snapshot_repo, make_milestone
    ):
        open_a = await make_milestone("A", target_date=TARGET)
        open_b = await make_milestone("B", target_date=TARGET)
        done = await make_milestone("Done", target_date=TARGET)
        await milestone_repo.update(done.id, MilestoneUpdate(status=MilestoneStatus.COMPLETED))

        results = await progress_service.recompute_open_milestones()

        assert results == {"updated": 2, "failed": 0}
        assert len(await snapshot_repo.list_by_milestone(open_a.id)) == 1
        assert len(await snapshot_repo.list_by_milestone(open_b.id)) == 1
        assert await snapshot_repo.list_by_milestone(done.id) == []

    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_the_rest(self, progress_service, make_milestone):
        await make_milestone("A", target_date=TARGET)
        await make_milestone("B", target_date=TARGET)
        progress_service.update_from_tasks = AsyncMock(side_effect=[RuntimeError("boom"), None])

        results = await progress_service.recompute_open_milestones()

        assert results == {"updated": 1, "failed": 1}
        assert progress_service.update_from_tasks.await_count == 2
