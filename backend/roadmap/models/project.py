"""
Project model definitions.

Projects own milestones and tasks and define the scheduling window.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from roadmap.models.enums import ProjectRole, ProjectStatus


class ProjectBase(BaseModel):
    """Base project fields."""

    name: str = Field(..., min_length=1, max_length=200, description="Project name")
    description: Optional[str] = Field(None, max_length=2000)
    start_date: Optional[date] = Field(None, description="Planned start of the project")
    end_date: Optional[date] = Field(None, description="Planned end of the project")

    @model_validator(mode="after")
    def validate_window(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ProjectCreate(ProjectBase):
    """Schema for creating a new project."""

    pass


class Project(ProjectBase):
    """Complete project model."""

    id: UUID
    user_id: str = Field(..., description="Creator user ID")
    status: ProjectStatus = ProjectStatus.ACTIVE
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProjectMember(BaseModel):
    """Membership of a user in a project."""

    id: UUID
    project_id: UUID
    member_user_id: str
    role: ProjectRole = ProjectRole.MEMBER
    created_at: datetime

    class Config:
        from_attributes = True
