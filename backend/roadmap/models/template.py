"""
Milestone template model definitions.

A template stores a list of milestone definitions (with date offsets and
nested deliverables) plus dependency definitions that reference milestones
by their position in that list. ``template_data`` is kept as raw JSON so
that a malformed definition only affects itself when the template is applied.

Example ``template_data``::

    {
        "milestones": [
            {"title": "Design", "target_offset_days": 14,
             "deliverables": [{"name": "Design doc", "due_offset_days": 10}]},
            {"title": "Build", "target_offset_days": 45, "is_critical": true}
        ],
        "dependencies": [
            {"predecessor_index": 0, "successor_index": 1,
             "dependency_type": "FINISH_TO_START", "lag_days": 2}
        ]
    }
"""

from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class MilestoneTemplateCreate(BaseModel):
    """Schema for creating a template."""

    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    template_data: dict[str, Any] = Field(default_factory=dict)


class MilestoneTemplate(MilestoneTemplateCreate):
    """Persisted template."""

    id: UUID
    usage_count: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MilestoneDefinitionOverride(BaseModel):
    """Per-definition override applied when instantiating a template."""

    title: Optional[str] = None
    target_date: Optional[date] = None
    owner_id: Optional[str] = None


class TemplateOverrides(BaseModel):
    """Overrides for a template application."""

    base_date: Optional[date] = None
    milestones: dict[int, MilestoneDefinitionOverride] = Field(
        default_factory=dict, description="Overrides keyed by definition index"
    )
