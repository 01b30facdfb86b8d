"""
Project member repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from uuid import UUID

from roadmap.models.enums import ProjectRole
from roadmap.models.project import ProjectMember


class IProjectMemberRepository(ABC):
    """Abstract interface for project member persistence."""

    @abstractmethod
    async def add(
        self, project_id: UUID, member_user_id: str, role: ProjectRole = ProjectRole.MEMBER
    ) -> ProjectMember:
        """Add a member to a project."""
        pass

    @abstractmethod
    async def list_by_project(self, project_id: UUID) -> list[ProjectMember]:
        """List members for a project."""
        pass

    @abstractmethod
    async def has_access(self, project_id: UUID, user_id: str) -> bool:
        """Whether the user is a member of the project."""
        pass
