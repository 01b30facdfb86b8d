"""
Milestone repository interface.

Defines the contract for milestone data operations.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from roadmap.models.milestone import Milestone, MilestoneCreate, MilestoneUpdate


class IMilestoneRepository(ABC):
    """Interface for milestone repository operations."""

    @abstractmethod
    async def create(self, milestone: MilestoneCreate) -> Milestone:
        """Create a new milestone in NOT_STARTED status."""
        pass

    @abstractmethod
    async def get(self, milestone_id: UUID) -> Optional[Milestone]:
        """Get a milestone by ID."""
        pass

    @abstractmethod
    async def list_by_project(self, project_id: UUID) -> list[Milestone]:
        """List milestones for a project ordered by target date."""
        pass

    @abstractmethod
    async def list_open(self) -> list[Milestone]:
        """List milestones that are not COMPLETED or CANCELLED."""
        pass

    @abstractmethod
    async def update(self, milestone_id: UUID, update: MilestoneUpdate) -> Milestone:
        """Update a milestone. Raises NotFoundError if it does not exist."""
        pass
