"""
Milestone dependency repository interface.

Stores the directed predecessor -> successor edges between milestones.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from roadmap.models.dependency import MilestoneDependency, MilestoneDependencyCreate
from roadmap.models.enums import DependencyType


class IMilestoneDependencyRepository(ABC):
    """Interface for dependency edge persistence."""

    @abstractmethod
    async def create(self, dependency: MilestoneDependencyCreate) -> MilestoneDependency:
        """Create a new active edge."""
        pass

    @abstractmethod
    async def get(self, dependency_id: UUID) -> Optional[MilestoneDependency]:
        """Get an edge by ID."""
        pass

    @abstractmethod
    async def find_between(
        self, predecessor_id: UUID, successor_id: UUID
    ) -> Optional[MilestoneDependency]:
        """Get the edge for a predecessor/successor pair, active or not."""
        pass

    @abstractmethod
    async def list_active_by_successor(self, successor_id: UUID) -> list[MilestoneDependency]:
        """List active edges pointing into a milestone (its predecessors)."""
        pass

    @abstractmethod
    async def list_active_by_predecessor(self, predecessor_id: UUID) -> list[MilestoneDependency]:
        """List active edges leaving a milestone (its successors)."""
        pass

    @abstractmethod
    async def deactivate(self, dependency_id: UUID) -> MilestoneDependency:
        """Mark an edge inactive. Raises NotFoundError if it does not exist."""
        pass

    @abstractmethod
    async def reactivate(
        self, dependency_id: UUID, dependency_type: DependencyType, lag_days: int
    ) -> MilestoneDependency:
        """Mark an edge active again with a new type and lag."""
        pass
