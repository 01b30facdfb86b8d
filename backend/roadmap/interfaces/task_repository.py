"""
Task repository interface.

Tasks are the progress source for milestones.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from roadmap.models.task import MilestoneTaskProgress, Task, TaskCreate, TaskUpdate


class ITaskRepository(ABC):
    """Interface for task persistence."""

    @abstractmethod
    async def create(self, task: TaskCreate) -> Task:
        """Create a task."""
        pass

    @abstractmethod
    async def get(self, task_id: UUID) -> Optional[Task]:
        """Get a task by ID."""
        pass

    @abstractmethod
    async def update(self, task_id: UUID, update: TaskUpdate) -> Task:
        """Update a task. Raises NotFoundError if it does not exist."""
        pass

    @abstractmethod
    async def attach_to_milestone(
        self, milestone_id: UUID, task_id: UUID, weight: Optional[float] = None
    ) -> None:
        """Link a task to a milestone with an optional weight."""
        pass

    @abstractmethod
    async def list_for_milestone(self, milestone_id: UUID) -> list[MilestoneTaskProgress]:
        """List the tasks linked to a milestone with their rolled-up progress."""
        pass
