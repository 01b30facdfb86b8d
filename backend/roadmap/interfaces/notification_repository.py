"""
Notification repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from roadmap.models.notification import Notification, NotificationCreate


class INotificationRepository(ABC):
    """Abstract interface for notification persistence."""

    @abstractmethod
    async def create(self, notification: NotificationCreate) -> Notification:
        """Create a new notification."""
        pass

    @abstractmethod
    async def list(self, user_id: str, limit: int = 50, offset: int = 0) -> list[Notification]:
        """List a user's notifications, newest first."""
        pass
