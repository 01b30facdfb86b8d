"""
Milestone dependency validation utilities.

Validates new dependency edges so that the graph of active edges stays acyclic.
"""

from collections import deque
from uuid import UUID

from roadmap.core.exceptions import CircularDependencyError
from roadmap.interfaces.dependency_repository import IMilestoneDependencyRepository


class DependencyGraphValidator:
    """Validator for milestone dependency edges."""

    def __init__(self, dependency_repo: IMilestoneDependencyRepository):
        """
        Initialize validator with dependency repository.

        Args:
            dependency_repo: Repository used to walk the active edges
        """
        self.dependency_repo = dependency_repo

    async def validate_new_edge(self, predecessor_id: UUID, successor_id: UUID) -> None:
        """
        Validate a predecessor -> successor edge before it is stored.

        Raises:
            CircularDependencyError: On a self-dependency, or when the
                predecessor is already reachable from the successor
        """
        if predecessor_id == successor_id:
            raise CircularDependencyError(
                "A milestone cannot depend on itself",
                details={"milestone_id": str(predecessor_id)},
            )

        if await self.is_reachable(successor_id, predecessor_id):
            raise CircularDependencyError(
                f"Dependency {predecessor_id} -> {successor_id} would create a cycle",
                details={
                    "predecessor_id": str(predecessor_id),
                    "successor_id": str(successor_id),
                },
            )

    async def is_reachable(self, start_id: UUID, target_id: UUID) -> bool:
        """
        Check whether ``target_id`` can be reached from ``start_id``.

        Walks active successor edges breadth first with an explicit queue.
        """
        visited: set[UUID] = {start_id}
        queue: deque[UUID] = deque([start_id])

        while queue:
            current = queue.popleft()
            for edge in await self.dependency_repo.list_active_by_predecessor(current):
                if edge.successor_id == target_id:
                    return True
                if edge.successor_id not in visited:
                    visited.add(edge.successor_id)
                    queue.append(edge.successor_id)

        return False
