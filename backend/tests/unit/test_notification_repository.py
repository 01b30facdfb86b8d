"""
Tests for the SQLite notification repository.
"""

import pytest

from roadmap.models.notification import NotificationCreate, NotificationType


def _notification(user_id="user_1", title="Title", message="Message") -> NotificationCreate:
    return NotificationCreate(
        user_id=user_id,
        type=NotificationType.ACTIVITY_ALERT,
        title=title,
        message=message,
    )


@pytest.mark.asyncio
async def test_create_truncates_long_text(notification_repo):
    stored = await notification_repo.create(_notification(title="t" * 250, message="m" * 600))

    assert len(stored.title) == 200
    assert len(stored.message) == 500
    assert stored.is_read is False


@pytest.mark.asyncio
async def test_list_is_per_user(notification_repo):
    for user_id in ("user_1", "user_1", "user_2"):
        await notification_repo.create(_notification(user_id))

    assert len(await notification_repo.list("user_1")) == 2
    assert len(await notification_repo.list("user_2")) == 1
    assert await notification_repo.list("nobody") == []


@pytest.mark.asyncio
async def test_list_paginates(notification_repo):
    for _ in range(5):
        await notification_repo.create(_notification())

    page = await notification_repo.list("user_1", limit=2, offset=4)

    assert len(page) == 1
