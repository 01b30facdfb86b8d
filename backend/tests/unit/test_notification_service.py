"""
Tests for milestone notification helpers and the repository-backed sink.
"""

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from roadmap.models.enums import MilestoneStatus
from roadmap.models.milestone import Milestone
from roadmap.models.notification import NotificationType
from roadmap.services import notification_service
from roadmap.services.notification_service import (
    RepositoryNotificationSink,
    notification_recipients,
)


def _milestone(owner_id="owner", stakeholder_ids=None) -> Milestone:
    now = datetime(2024, 5, 20, tzinfo=timezone.utc)
    return Milestone(
        id=uuid4(),
        project_id=uuid4(),
        title="Beta launch",
        target_date=date(2024, 6, 1),
        owner_id=owner_id,
        stakeholder_ids=stakeholder_ids or [],
        created_at=now,
        updated_at=now,
    )


class TestNotificationRecipients:
    """Tests for recipient resolution."""

    def test_owner_first_then_stakeholders(self):
        milestone = _milestone("owner", ["pm", "qa"])
        assert notification_recipients(milestone) == ["owner", "pm", "qa"]

    def test_duplicates_and_blanks_dropped(self):
        milestone = _milestone("owner", ["pm", "owner", "", "pm"])
        assert notification_recipients(milestone) == ["owner", "pm"]

    def test_no_owner(self):
        milestone = _milestone(None, ["pm"])
        assert notification_recipients(milestone) == ["pm"]


class TestNotificationHelpers:
    """Tests for the per-event helpers."""

    @pytest.mark.asyncio
    async def test_status_change_goes_to_every_recipient(self, sink):
        milestone = _milestone("owner", ["pm"])

        await notification_service.notify_status_changed(
            sink, milestone, MilestoneStatus.IN_PROGRESS, MilestoneStatus.UNDER_REVIEW
        )

        assert sink.recipients() == ["owner", "pm"]
        assert sink.alerts[0]["body"] == '"Beta launch" moved from In Progress to Under Review'

    @pytest.mark.asyncio
    async def test_owner_only_helpers_skip_unowned(self, sink):
        milestone = _milestone(None, ["pm"])

        await notification_service.notify_milestone_assigned(sink, milestone)
        await notification_service.notify_target_date_shifted(
            sink, milestone, date(2024, 5, 30), 2, "Design"
        )
        await notification_service.notify_ready_for_review(sink, milestone)
        await notification_service.notify_approval_rejected(sink, milestone, "No")

        assert sink.alerts == []

    @pytest.mark.asyncio
    async def test_shift_message(self, sink):
        milestone = _milestone()

        await notification_service.notify_target_date_shifted(
            sink, milestone, date(2024, 5, 30), 2, "Design"
        )

        [alert] = sink.alerts
        assert alert["title"] == "Milestone rescheduled"
        assert "2024-05-30" in alert["body"]
        assert "2024-06-01" in alert["body"]
        assert "+2 days" in alert["body"]
        assert '"Design" slipped' in alert["body"]

    @pytest.mark.asyncio
    async def test_rejection_without_comment(self, sink):
        await notification_service.notify_approval_rejected(sink, _milestone(), None)
        assert sink.alerts[0]["body"] == '"Beta launch" was rejected'

    @pytest.mark.asyncio
    async def test_approval_request_per_approver(self, sink):
        await notification_service.notify_approval_requested(sink, _milestone(), ["lead", "cto"])
        assert sink.recipients() == ["lead", "cto"]

    @pytest.mark.asyncio
    async def test_threshold_title(self, sink):
        await notification_service.notify_progress_threshold(sink, _milestone(), 75)
        assert sink.titles() == ["Milestone 75% complete"]


class TestRepositoryNotificationSink:
    """Tests for the sink that stores notifications."""

    @pytest.mark.asyncio
    async def test_builds_activity_alert(self):
        repo = AsyncMock()
        sink = RepositoryNotificationSink(repo)
        milestone = _milestone()

        await sink.send_activity_alert("owner", "Title", "Body", milestone)

        repo.create.assert_awaited_once()
        created = repo.create.await_args.args[0]
        assert created.user_id == "owner"
        assert created.type == NotificationType.ACTIVITY_ALERT
        assert created.link_type == "milestone"
        assert created.link_id == str(milestone.id)
        assert created.project_id == milestone.project_id

    @pytest.mark.asyncio
    async def test_alert_without_milestone(self):
        repo = AsyncMock()
        sink = RepositoryNotificationSink(repo)

        await sink.send_activity_alert("owner", "Title", "Body")

        created = repo.create.await_args.args[0]
        assert created.link_type is None
        assert created.link_id is None
        assert created.project_id is None

    @pytest.mark.asyncio
    async def test_stored_in_database(self, notification_repo):
        sink = RepositoryNotificationSink(notification_repo)
        milestone = _milestone()

        await sink.send_activity_alert("owner", "Milestone assigned", "You own it", milestone)

        [stored] = await notification_repo.list("owner")
        assert stored.title == "Milestone assigned"
        assert stored.link_id == str(milestone.id)
        assert stored.is_read is False
