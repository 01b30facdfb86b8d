"""
Deliverable repository interface.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from roadmap.models.deliverable import Deliverable, DeliverableCreate
from roadmap.models.enums import DeliverableStatus


class IDeliverableRepository(ABC):
    """Interface for deliverable persistence."""

    @abstractmethod
    async def create(self, deliverable: DeliverableCreate) -> Deliverable:
        """Create a deliverable."""
        pass

    @abstractmethod
    async def list_by_milestone(self, milestone_id: UUID) -> list[Deliverable]:
        """List deliverables of a milestone."""
        pass

    @abstractmethod
    async def update_status(self, deliverable_id: UUID, status: DeliverableStatus) -> Deliverable:
        """Change a deliverable's status. Raises NotFoundError if it does not exist."""
        pass
