"""
Project repository interface.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from roadmap.models.project import Project, ProjectCreate


class IProjectRepository(ABC):
    """Interface for project persistence."""

    @abstractmethod
    async def create(self, user_id: str, project: ProjectCreate) -> Project:
        """Create a project and register the creator as its OWNER member."""
        pass

    @abstractmethod
    async def get(self, project_id: UUID) -> Optional[Project]:
        """Get a project by ID."""
        pass
