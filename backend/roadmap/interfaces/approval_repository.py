"""
Milestone approval repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from roadmap.models.approval import ApprovalStep, MilestoneApproval
from roadmap.models.enums import ApprovalStatus


class IMilestoneApprovalRepository(ABC):
    """Abstract interface for approval step persistence."""

    @abstractmethod
    async def replace_for_milestone(
        self,
        milestone_id: UUID,
        steps: list[ApprovalStep],
        requested_at: datetime,
    ) -> list[MilestoneApproval]:
        """Delete existing steps and create PENDING steps numbered 1..N in the given order."""
        pass

    @abstractmethod
    async def get(self, approval_id: UUID) -> Optional[MilestoneApproval]:
        """Get an approval step by ID."""
        pass

    @abstractmethod
    async def list_by_milestone(self, milestone_id: UUID) -> list[MilestoneApproval]:
        """List approval steps ordered by step_order."""
        pass

    @abstractmethod
    async def record_decision(
        self,
        approval_id: UUID,
        status: ApprovalStatus,
        comment: Optional[str],
        decided_at: datetime,
    ) -> MilestoneApproval:
        """Store the approver's decision on a step."""
        pass
