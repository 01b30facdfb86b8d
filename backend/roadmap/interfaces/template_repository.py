"""
Milestone template repository interface.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from roadmap.models.template import MilestoneTemplate, MilestoneTemplateCreate


class IMilestoneTemplateRepository(ABC):
    """Interface for milestone template persistence."""

    @abstractmethod
    async def create(self, template: MilestoneTemplateCreate) -> MilestoneTemplate:
        """Create a template."""
        pass

    @abstractmethod
    async def get(self, template_id: UUID) -> Optional[MilestoneTemplate]:
        """Get a template by ID."""
        pass

    @abstractmethod
    async def increment_usage(self, template_id: UUID) -> MilestoneTemplate:
        """Bump usage_count by one."""
        pass
