"""
Task model definitions.

Tasks are the units of work whose progress rolls up into milestones.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from roadmap.models.enums import TaskStatus


class TaskBase(BaseModel):
    """Base task fields shared across create/read."""

    title: str = Field(..., min_length=1, max_length=500, description="Task title")
    project_id: Optional[UUID] = Field(None, description="Owning project")
    status: TaskStatus = Field(TaskStatus.TODO)
    progress: int = Field(default=0, ge=0, le=100, description="Progress (0-100%)")
    parent_id: Optional[UUID] = Field(None, description="Parent task ID (for subtasks)")
    dependency_ids: list[UUID] = Field(
        default_factory=list, description="Tasks that must be DONE before this one"
    )


class TaskCreate(TaskBase):
    """Schema for creating a task."""

    pass


class TaskUpdate(BaseModel):
    """Schema for updating a task."""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    status: Optional[TaskStatus] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    dependency_ids: Optional[list[UUID]] = None


class Task(TaskBase):
    """Complete task model."""

    id: UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MilestoneTaskProgress(BaseModel):
    """A task as seen from a milestone: its rolled-up progress and link weight."""

    task_id: UUID
    title: str
    percent_complete: float = Field(0.0, ge=0, le=100)
    weight: Optional[float] = Field(None, description="Link weight; None means 1")
    is_completed: bool = False
    is_blocked: bool = False
