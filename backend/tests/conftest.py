"""
Shared fixtures.

Every test gets its own SQLite file database, a fixed clock and a sink that
records alerts instead of storing them.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")

from datetime import date, timedelta
from typing import Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from roadmap.core.config import Settings
from roadmap.infrastructure.local.approval_repository import SqliteMilestoneApprovalRepository
from roadmap.infrastructure.local.database import Base, SqliteTransactionManager
from roadmap.infrastructure.local.deliverable_repository import SqliteDeliverableRepository
from roadmap.infrastructure.local.dependency_repository import SqliteMilestoneDependencyRepository
from roadmap.infrastructure.local.milestone_repository import SqliteMilestoneRepository
from roadmap.infrastructure.local.notification_repository import SqliteNotificationRepository
from roadmap.infrastructure.local.progress_snapshot_repository import (
    SqliteProgressSnapshotRepository,
)
from roadmap.infrastructure.local.project_member_repository import SqliteProjectMemberRepository
from roadmap.infrastructure.local.project_repository import SqliteProjectRepository
from roadmap.infrastructure.local.task_repository import SqliteTaskRepository
from roadmap.infrastructure.local.template_repository import SqliteMilestoneTemplateRepository
from roadmap.interfaces.notification_sink import INotificationSink
from roadmap.models.milestone import Milestone, MilestoneCreate
from roadmap.models.project import ProjectCreate
from roadmap.services.dependency_service import DependencyService
from roadmap.services.milestone_service import MilestoneService
from roadmap.services.progress_tracking_service import ProgressTrackingService
from roadmap.utils.clock import FixedClock

TODAY = date(2024, 5, 20)
PROJECT_START = date(2024, 5, 1)


class RecordingNotificationSink(INotificationSink):
    """Keeps every alert in memory."""

    def __init__(self):
        self.alerts: list[dict] = []

    async def send_activity_alert(
        self,
        recipient_id: str,
        title: str,
        body: str,
        milestone: Optional[Milestone] = None,
    ) -> None:
        self.alerts.append(
            {
                "recipient_id": recipient_id,
                "title": title,
                "body": body,
                "milestone_id": milestone.id if milestone else None,
            }
        )

    def recipients(self) -> list[str]:
        return [alert["recipient_id"] for alert in self.alerts]

    def titles(self) -> list[str]:
        return [alert["title"] for alert in self.alerts]

    def clear(self) -> None:
        self.alerts.clear()


# ===========================================
# Database
# ===========================================


@pytest.fixture
async def session_factory(tmp_path):
    """Session factory bound to a fresh SQLite file database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'roadmap_test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def tx_manager(session_factory):
    return SqliteTransactionManager(session_factory)


# ===========================================
# Collaborators
# ===========================================


@pytest.fixture
def test_user_id():
    return "test_user_123"


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def sink():
    return RecordingNotificationSink()


@pytest.fixture
def settings():
    return Settings(
        ENVIRONMENT="test",
        MILESTONE_PROGRESS_THRESHOLDS=[25, 50, 75, 100],
        MILESTONE_RISK_BEHIND_SCHEDULE_DAYS=3,
    )


# ===========================================
# Repositories
# ===========================================


@pytest.fixture
def milestone_repo(session_factory):
    return SqliteMilestoneRepository(session_factory)


@pytest.fixture
def dependency_repo(session_factory):
    return SqliteMilestoneDependencyRepository(session_factory)


@pytest.fixture
def approval_repo(session_factory):
    return SqliteMilestoneApprovalRepository(session_factory)


@pytest.fixture
def snapshot_repo(session_factory):
    return SqliteProgressSnapshotRepository(session_factory)


@pytest.fixture
def deliverable_repo(session_factory):
    return SqliteDeliverableRepository(session_factory)


@pytest.fixture
def template_repo(session_factory):
    return SqliteMilestoneTemplateRepository(session_factory)


@pytest.fixture
def project_repo(session_factory):
    return SqliteProjectRepository(session_factory)


@pytest.fixture
def member_repo(session_factory):
    return SqliteProjectMemberRepository(session_factory)


@pytest.fixture
def task_repo(session_factory):
    return SqliteTaskRepository(session_factory)


@pytest.fixture
def notification_repo(session_factory):
    return SqliteNotificationRepository(session_factory)


# ===========================================
# Services
# ===========================================


@pytest.fixture
def dependency_service(dependency_repo, milestone_repo, sink, clock, tx_manager):
    return DependencyService(
        dependency_repo=dependency_repo,
        milestone_repo=milestone_repo,
        notification_sink=sink,
        clock=clock,
        transaction_manager=tx_manager,
    )


@pytest.fixture
def progress_service(
    milestone_repo, project_repo, task_repo, snapshot_repo, sink, clock, tx_manager, settings
):
    return ProgressTrackingService(
        milestone_repo=milestone_repo,
        project_repo=project_repo,
        task_repo=task_repo,
        snapshot_repo=snapshot_repo,
        notification_sink=sink,
        clock=clock,
        transaction_manager=tx_manager,
        settings=settings,
    )


@pytest.fixture
def milestone_service(
    milestone_repo,
    project_repo,
    member_repo,
    deliverable_repo,
    approval_repo,
    template_repo,
    dependency_service,
    progress_service,
    sink,
    clock,
    tx_manager,
):
    return MilestoneService(
        milestone_repo=milestone_repo,
        project_repo=project_repo,
        project_member_repo=member_repo,
        deliverable_repo=deliverable_repo,
        approval_repo=approval_repo,
        template_repo=template_repo,
        dependency_service=dependency_service,
        progress_service=progress_service,
        notification_sink=sink,
        clock=clock,
        transaction_manager=tx_manager,
    )


# ===========================================
# Data
# ===========================================


@pytest.fixture
async def project(project_repo, test_user_id):
    """Project running from PROJECT_START for 90 days, owned by test_user_id."""
    return await project_repo.create(
        test_user_id,
        ProjectCreate(
            name="Roadmap test project",
            start_date=PROJECT_START,
            end_date=PROJECT_START + timedelta(days=90),
        ),
    )


@pytest.fixture
def make_milestone(milestone_repo, project, test_user_id):
    """Create milestones straight through the repository (no notifications)."""

    async def _make(title: str = "Milestone", target_date: date = TODAY, **kwargs) -> Milestone:
        kwargs.setdefault("owner_id", test_user_id)
        return await milestone_repo.create(
            MilestoneCreate(project_id=project.id, title=title, target_date=target_date, **kwargs)
        )

    return _make
