"""
Notification model definitions.

Notifications inform users about milestone lifecycle events.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    """Types of notifications."""

    ACTIVITY_ALERT = "activity_alert"


class Notification(BaseModel):
    """User notification model."""

    id: UUID
    user_id: str = Field(..., description="Recipient user ID")
    type: NotificationType = Field(..., description="Notification type")
    title: str = Field(..., max_length=200, description="Notification title")
    message: str = Field(..., max_length=500, description="Notification body")

    # Navigation
    link_type: Optional[str] = Field(None, description="Target type (milestone)")
    link_id: Optional[str] = Field(None, description="Target ID")

    # Context
    project_id: Optional[UUID] = Field(None, description="Related project ID")

    # Status
    is_read: bool = Field(False, description="Read flag")
    read_at: Optional[datetime] = Field(None, description="Read timestamp")

    # Timestamps
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class NotificationCreate(BaseModel):
    """Schema for creating a notification."""

    user_id: str
    type: NotificationType
    title: str
    message: str
    link_type: Optional[str] = None
    link_id: Optional[str] = None
    project_id: Optional[UUID] = None
