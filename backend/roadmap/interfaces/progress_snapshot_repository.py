"""
Progress snapshot repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from roadmap.models.progress_snapshot import ProgressSnapshot, ProgressSnapshotCreate


class IProgressSnapshotRepository(ABC):
    """Append-only store of milestone progress snapshots."""

    @abstractmethod
    async def create(self, snapshot: ProgressSnapshotCreate) -> ProgressSnapshot:
        """Append a snapshot."""
        pass

    @abstractmethod
    async def list_by_milestone(
        self, milestone_id: UUID, limit: Optional[int] = None
    ) -> list[ProgressSnapshot]:
        """List snapshots for a milestone, newest first."""
        pass
