"""
Milestone approval model definitions.

Approvals are ordered steps; a milestone is approved once every step is APPROVED.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from roadmap.models.enums import ApprovalStatus


class ApprovalStep(BaseModel):
    """One requested approval step, in submission order."""

    approver_id: str = Field(..., min_length=1)
    approval_criteria: Optional[str] = Field(None, max_length=2000)


class MilestoneApproval(BaseModel):
    """Persisted approval step."""

    id: UUID
    milestone_id: UUID
    step_order: int = Field(..., ge=1)
    approver_id: str
    approval_criteria: Optional[str] = None
    status: ApprovalStatus = ApprovalStatus.PENDING
    requested_at: datetime
    decided_at: Optional[datetime] = None
    decision_comment: Optional[str] = None

    class Config:
        from_attributes = True
