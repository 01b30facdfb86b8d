"""
Milestone dependency model definitions.

A dependency is a directed edge predecessor -> successor with a type and a lag.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from roadmap.models.enums import DependencyType


class MilestoneDependencyCreate(BaseModel):
    """Schema for creating a dependency edge."""

    predecessor_id: UUID
    successor_id: UUID
    dependency_type: DependencyType = DependencyType.FINISH_TO_START
    lag_days: int = Field(0, ge=0, description="Days to wait after the predecessor's date")


class MilestoneDependency(MilestoneDependencyCreate):
    """Persisted dependency edge."""

    id: UUID
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
