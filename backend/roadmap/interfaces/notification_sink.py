"""
Notification sink interface.

The milestone services hand alerts to a sink and do not wait for delivery.
"""

from abc import ABC, abstractmethod
from typing import Optional

from roadmap.models.milestone import Milestone


class INotificationSink(ABC):
    """Destination for activity alerts."""

    @abstractmethod
    async def send_activity_alert(
        self,
        recipient_id: str,
        title: str,
        body: str,
        milestone: Optional[Milestone] = None,
    ) -> None:
        """Queue an alert for a single recipient."""
        pass
