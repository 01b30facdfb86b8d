"""
SQLite implementation of Task repository.

Besides plain task storage this repository rolls task state up into the
``MilestoneTaskProgress`` view consumed by progress tracking.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, select

from roadmap.core.exceptions import NotFoundError
from roadmap.infrastructure.local.database import (
    MilestoneTaskORM,
    TaskORM,
    get_session_factory,
    session_scope,
)
from roadmap.interfaces.task_repository import ITaskRepository
from roadmap.models.enums import TaskStatus
from roadmap.models.task import MilestoneTaskProgress, Task, TaskCreate, TaskUpdate
from roadmap.utils.datetime_utils import now_utc


def _normalized_progress(orm: TaskORM) -> float:
    if orm.status == TaskStatus.DONE.value:
        return 100.0
    progress = orm.progress if orm.progress is not None else 0
    return float(max(0, min(progress, 100)))


class SqliteTaskRepository(ITaskRepository):
    """SQLite implementation of task repository."""

    def __init__(self, session_factory=None):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
        """
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: TaskORM) -> Task:
        """Convert ORM object to Pydantic model."""
        return Task(
            id=UUID(orm.id),
            project_id=UUID(orm.project_id) if orm.project_id else None,
            title=orm.title,
            status=TaskStatus(orm.status),
            progress=orm.progress or 0,
            parent_id=UUID(orm.parent_id) if orm.parent_id else None,
            dependency_ids=[UUID(dep_id) for dep_id in (orm.dependency_ids or [])],
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    async def create(self, task: TaskCreate) -> Task:
        async with session_scope(self._session_factory) as session:
            now = now_utc()
            orm = TaskORM(
                id=str(uuid4()),
                project_id=str(task.project_id) if task.project_id else None,
                title=task.title,
                status=task.status.value,
                progress=task.progress,
                parent_id=str(task.parent_id) if task.parent_id else None,
                dependency_ids=[str(dep_id) for dep_id in task.dependency_ids],
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.flush()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, task_id: UUID) -> Optional[Task]:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(select(TaskORM).where(TaskORM.id == str(task_id)))
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def update(self, task_id: UUID, update: TaskUpdate) -> Task:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(select(TaskORM).where(TaskORM.id == str(task_id)))
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"Task {task_id} not found")

            update_data = update.model_dump(exclude_unset=True)
            for field, value in update_data.items():
                if field == "status" and value is not None:
                    value = TaskStatus(value).value
                elif field == "dependency_ids" and value is not None:
                    value = [str(dep_id) for dep_id in value]
                setattr(orm, field, value)

            orm.updated_at = now_utc()
            await session.flush()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def attach_to_milestone(
        self, milestone_id: UUID, task_id: UUID, weight: Optional[float] = None
    ) -> None:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(MilestoneTaskORM).where(
                    and_(
                        MilestoneTaskORM.milestone_id == str(milestone_id),
                        MilestoneTaskORM.task_id == str(task_id),
                    )
                )
            )
            link = result.scalar_one_or_none()
            if link:
                link.weight = weight
            else:
                session.add(
                    MilestoneTaskORM(
                        id=str(uuid4()),
                        milestone_id=str(milestone_id),
                        task_id=str(task_id),
                        weight=weight,
                        created_at=now_utc(),
                    )
                )
            await session.flush()

    async def list_for_milestone(self, milestone_id: UUID) -> list[MilestoneTaskProgress]:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(TaskORM, MilestoneTaskORM.weight)
                .join(MilestoneTaskORM, MilestoneTaskORM.task_id == TaskORM.id)
                .where(MilestoneTaskORM.milestone_id == str(milestone_id))
                .order_by(MilestoneTaskORM.created_at)
            )
            rows = result.all()
            if not rows:
                return []

            task_ids = [orm.id for orm, _ in rows]
            subtask_result = await session.execute(
                select(TaskORM).where(TaskORM.parent_id.in_(task_ids))
            )
            subtasks_by_parent: dict[str, list[TaskORM]] = {}
            for sub in subtask_result.scalars().all():
                subtasks_by_parent.setdefault(sub.parent_id, []).append(sub)

            dependency_ids = {
                dep_id for orm, _ in rows for dep_id in (orm.dependency_ids or [])
            }
            dependency_status: dict[str, str] = {}
            if dependency_ids:
                dep_result = await session.execute(
                    select(TaskORM.id, TaskORM.status).where(TaskORM.id.in_(dependency_ids))
                )
                dependency_status = {dep_id: status for dep_id, status in dep_result.all()}

            progress_rows = []
            for orm, weight in rows:
                subtasks = subtasks_by_parent.get(orm.id, [])
                is_completed = orm.status == TaskStatus.DONE.value
                if is_completed or not subtasks:
                    percent = _normalized_progress(orm)
                else:
                    percent = sum(_normalized_progress(sub) for sub in subtasks) / len(subtasks)

                # Dependencies that no longer exist do not block
                is_blocked = not is_completed and any(
                    dependency_status.get(dep_id, TaskStatus.DONE.value) != TaskStatus.DONE.value
                    for dep_id in (orm.dependency_ids or [])
                )

                progress_rows.append(
                    MilestoneTaskProgress(
                        task_id=UUID(orm.id),
                        title=orm.title,
                        percent_complete=round(percent, 2),
                        weight=weight,
                        is_completed=is_completed,
                        is_blocked=is_blocked,
                    )
                )
            return progress_rows
