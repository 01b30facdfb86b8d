"""
Milestone progress snapshot models.

Snapshots are append-only records written on every progress recomputation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ProgressSnapshotCreate(BaseModel):
    """Schema for appending a snapshot."""

    milestone_id: UUID
    completion_percentage: float = Field(..., ge=0, le=100)
    schedule_variance_days: int
    remaining_tasks_count: int = Field(0, ge=0)
    blocked_tasks_count: int = Field(0, ge=0)


class ProgressSnapshot(ProgressSnapshotCreate):
    """Persisted snapshot."""

    id: UUID
    created_at: datetime

    class Config:
        from_attributes = True


class ProgressTrend(BaseModel):
    """Direction of the last two snapshots."""

    trend: Literal["improving", "stable", "declining"] = "stable"
    latest: Optional[ProgressSnapshot] = None
