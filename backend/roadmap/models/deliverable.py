"""
Deliverable model definitions.

Deliverables are concrete outputs owed by a milestone.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from roadmap.models.enums import DeliverableStatus


class DeliverableCreate(BaseModel):
    """Schema for creating a deliverable."""

    milestone_id: UUID
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    owner_id: Optional[str] = None
    due_date: Optional[date] = None
    acceptance_criteria: Optional[str] = Field(None, max_length=2000)
    status: DeliverableStatus = DeliverableStatus.PENDING
    requires_approval: bool = False


class Deliverable(DeliverableCreate):
    """Persisted deliverable."""

    id: UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
