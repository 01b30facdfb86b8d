"""
Milestone model definitions.

Milestones belong to projects and mark key dated outcomes. They are linked
to each other by dependencies and to tasks and deliverables that feed
their progress.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from roadmap.models.enums import MilestonePriority, MilestoneStatus, MilestoneType


class MilestoneBase(BaseModel):
    """Base milestone fields."""

    project_id: UUID = Field(..., description="Project ID")
    title: str = Field(..., min_length=1, max_length=200, description="Milestone title")
    description: Optional[str] = Field(None, max_length=2000, description="Milestone description")
    target_date: date = Field(..., description="Target date (no time component)")
    owner_id: Optional[str] = Field(None, description="Responsible user ID")
    milestone_type: MilestoneType = Field(MilestoneType.PHASE_COMPLETION)
    priority_level: MilestonePriority = Field(MilestonePriority.MEDIUM)
    is_critical: bool = Field(False, description="On the project's critical path")
    requires_approval: bool = Field(False, description="Completion goes through approval steps")
    stakeholder_ids: list[str] = Field(
        default_factory=list, description="Users notified alongside the owner"
    )


class MilestoneCreate(MilestoneBase):
    """Schema for creating a milestone."""

    pass


class MilestoneUpdate(BaseModel):
    """Schema for updating a milestone. Only explicitly set fields are written."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    target_date: Optional[date] = None
    actual_completion_date: Optional[date] = None
    owner_id: Optional[str] = None
    status: Optional[MilestoneStatus] = None
    completion_percentage: Optional[float] = Field(None, ge=0, le=100)
    schedule_variance_days: Optional[int] = None
    is_critical: Optional[bool] = None
    is_at_risk: Optional[bool] = None
    requires_approval: Optional[bool] = None
    last_progress_threshold_notified: Optional[int] = Field(None, ge=0)
    stakeholder_ids: Optional[list[str]] = None
    submitted_for_approval_at: Optional[datetime] = None


class Milestone(MilestoneBase):
    """Complete milestone model."""

    id: UUID
    status: MilestoneStatus = Field(MilestoneStatus.NOT_STARTED)
    actual_completion_date: Optional[date] = None
    completion_percentage: float = Field(0.0, ge=0, le=100)
    schedule_variance_days: int = Field(0, description="Negative means behind schedule")
    is_at_risk: bool = False
    last_progress_threshold_notified: int = Field(0, ge=0)
    submitted_for_approval_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TargetDateCheck(BaseModel):
    """Result of checking a target date against the project timeline."""

    within_timeline: bool = True
    warnings: list[str] = Field(default_factory=list)
