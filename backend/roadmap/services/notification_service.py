"""
Notification helper functions for milestone lifecycle events.

Each function builds the alert text for one event and hands it to the
notification sink, one alert per recipient. Recipient resolution
(owner plus stakeholders) lives here as well.
"""

from datetime import date
from typing import Iterable, Optional

from roadmap.interfaces.notification_repository import INotificationRepository
from roadmap.interfaces.notification_sink import INotificationSink
from roadmap.models.enums import MilestoneStatus
from roadmap.models.milestone import Milestone
from roadmap.models.notification import NotificationCreate, NotificationType


def notification_recipients(milestone: Milestone) -> list[str]:
    """Owner followed by stakeholders, without duplicates or blanks."""
    recipients: list[str] = []
    for user_id in [milestone.owner_id, *milestone.stakeholder_ids]:
        if user_id and user_id not in recipients:
            recipients.append(user_id)
    return recipients


class RepositoryNotificationSink(INotificationSink):
    """Stores each alert as an ACTIVITY_ALERT notification row."""

    def __init__(self, notification_repo: INotificationRepository):
        self._notification_repo = notification_repo

    async def send_activity_alert(
        self,
        recipient_id: str,
        title: str,
        body: str,
        milestone: Optional[Milestone] = None,
    ) -> None:
        await self._notification_repo.create(
            NotificationCreate(
                user_id=recipient_id,
                type=NotificationType.ACTIVITY_ALERT,
                title=title,
                message=body,
                link_type="milestone" if milestone else None,
                link_id=str(milestone.id) if milestone else None,
                project_id=milestone.project_id if milestone else None,
            )
        )


async def _send_to_all(
    sink: INotificationSink,
    recipients: Iterable[str],
    title: str,
    body: str,
    milestone: Milestone,
) -> None:
    for recipient_id in recipients:
        await sink.send_activity_alert(recipient_id, title, body, milestone)


async def notify_milestone_assigned(sink: INotificationSink, milestone: Milestone) -> None:
    """Tell the owner a milestone was assigned to them."""
    if not milestone.owner_id:
        return
    await sink.send_activity_alert(
        milestone.owner_id,
        "Milestone assigned",
        f"You are the owner of \"{milestone.title}\" due {milestone.target_date.isoformat()}",
        milestone,
    )


async def notify_status_changed(
    sink: INotificationSink,
    milestone: Milestone,
    old_status: MilestoneStatus,
    new_status: MilestoneStatus,
) -> None:
    """Notify every recipient about a status transition."""
    await _send_to_all(
        sink,
        notification_recipients(milestone),
        "Milestone status changed",
        f"\"{milestone.title}\" moved from {old_status.label} to {new_status.label}",
        milestone,
    )


async def notify_target_date_shifted(
    sink: INotificationSink,
    milestone: Milestone,
    old_target_date: date,
    delta_days: int,
    predecessor_title: str,
) -> None:
    """Tell the owner a dependency cascade pushed their milestone back."""
    if not milestone.owner_id:
        return
    await sink.send_activity_alert(
        milestone.owner_id,
        "Milestone rescheduled",
        (
            f"\"{milestone.title}\" moved from {old_target_date.isoformat()} to "
            f"{milestone.target_date.isoformat()} (+{delta_days} days) because "
            f"\"{predecessor_title}\" slipped"
        ),
        milestone,
    )


async def notify_ready_for_review(sink: INotificationSink, milestone: Milestone) -> None:
    if not milestone.owner_id:
        return
    await sink.send_activity_alert(
        milestone.owner_id,
        "Milestone ready for review",
        f"All deliverables of \"{milestone.title}\" are completed",
        milestone,
    )


async def notify_approval_requested(
    sink: INotificationSink, milestone: Milestone, approver_ids: Iterable[str]
) -> None:
    await _send_to_all(
        sink,
        approver_ids,
        "Approval requested",
        f"Please review \"{milestone.title}\"",
        milestone,
    )


async def notify_approval_rejected(
    sink: INotificationSink, milestone: Milestone, comment: Optional[str]
) -> None:
    if not milestone.owner_id:
        return
    body = f"\"{milestone.title}\" was rejected"
    if comment:
        body = f"{body}: {comment}"
    await sink.send_activity_alert(milestone.owner_id, "Approval rejected", body, milestone)


async def notify_milestone_completed(sink: INotificationSink, milestone: Milestone) -> None:
    await _send_to_all(
        sink,
        notification_recipients(milestone),
        "Milestone completed",
        f"\"{milestone.title}\" has been approved and completed",
        milestone,
    )


async def notify_progress_threshold(
    sink: INotificationSink, milestone: Milestone, threshold: int
) -> None:
    await _send_to_all(
        sink,
        notification_recipients(milestone),
        f"Milestone {threshold}% complete",
        f"\"{milestone.title}\" reached {threshold}% completion",
        milestone,
    )
