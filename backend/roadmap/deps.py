"""
Dependency wiring.

Provides cached infrastructure implementations and builds the services on
top of them. Every repository shares one session factory so that they all
join the same transaction scope.
"""

from functools import lru_cache

from roadmap.interfaces.approval_repository import IMilestoneApprovalRepository
from roadmap.interfaces.clock import IClock
from roadmap.interfaces.deliverable_repository import IDeliverableRepository
from roadmap.interfaces.dependency_repository import IMilestoneDependencyRepository
from roadmap.interfaces.milestone_repository import IMilestoneRepository
from roadmap.interfaces.notification_repository import INotificationRepository
from roadmap.interfaces.notification_sink import INotificationSink
from roadmap.interfaces.progress_snapshot_repository import IProgressSnapshotRepository
from roadmap.interfaces.project_member_repository import IProjectMemberRepository
from roadmap.interfaces.project_repository import IProjectRepository
from roadmap.interfaces.task_repository import ITaskRepository
from roadmap.interfaces.template_repository import IMilestoneTemplateRepository
from roadmap.interfaces.transaction_manager import ITransactionManager
from roadmap.services.dependency_service import DependencyService
from roadmap.services.milestone_service import MilestoneService
from roadmap.services.progress_tracking_service import ProgressTrackingService


# ===========================================
# Infrastructure
# ===========================================


@lru_cache()
def get_db_engine():
    """Get the shared async engine."""
    from roadmap.infrastructure.local.database import get_engine
    return get_engine()


@lru_cache()
def get_session_factory():
    """Get the shared async session factory."""
    from roadmap.infrastructure.local.database import get_session_factory as build_factory
    return build_factory(get_db_engine())


@lru_cache()
def get_transaction_manager() -> ITransactionManager:
    from roadmap.infrastructure.local.database import SqliteTransactionManager
    return SqliteTransactionManager(get_session_factory())


@lru_cache()
def get_clock() -> IClock:
    from roadmap.utils.clock import SystemClock
    return SystemClock()


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_milestone_repository() -> IMilestoneRepository:
    """Get milestone repository instance."""
    from roadmap.infrastructure.local.milestone_repository import SqliteMilestoneRepository
    return SqliteMilestoneRepository(get_session_factory())


@lru_cache()
def get_dependency_repository() -> IMilestoneDependencyRepository:
    """Get milestone dependency repository instance."""
    from roadmap.infrastructure.local.dependency_repository import (
        SqliteMilestoneDependencyRepository,
    )
    return SqliteMilestoneDependencyRepository(get_session_factory())


@lru_cache()
def get_approval_repository() -> IMilestoneApprovalRepository:
    """Get approval repository instance."""
    from roadmap.infrastructure.local.approval_repository import SqliteMilestoneApprovalRepository
    return SqliteMilestoneApprovalRepository(get_session_factory())


@lru_cache()
def get_progress_snapshot_repository() -> IProgressSnapshotRepository:
    """Get progress snapshot repository instance."""
    from roadmap.infrastructure.local.progress_snapshot_repository import (
        SqliteProgressSnapshotRepository,
    )
    return SqliteProgressSnapshotRepository(get_session_factory())


@lru_cache()
def get_deliverable_repository() -> IDeliverableRepository:
    """Get deliverable repository instance."""
    from roadmap.infrastructure.local.deliverable_repository import SqliteDeliverableRepository
    return SqliteDeliverableRepository(get_session_factory())


@lru_cache()
def get_template_repository() -> IMilestoneTemplateRepository:
    """Get milestone template repository instance."""
    from roadmap.infrastructure.local.template_repository import SqliteMilestoneTemplateRepository
    return SqliteMilestoneTemplateRepository(get_session_factory())


@lru_cache()
def get_project_repository() -> IProjectRepository:
    """Get project repository instance."""
    from roadmap.infrastructure.local.project_repository import SqliteProjectRepository
    return SqliteProjectRepository(get_session_factory())


@lru_cache()
def get_project_member_repository() -> IProjectMemberRepository:
    """Get project member repository instance."""
    from roadmap.infrastructure.local.project_member_repository import (
        SqliteProjectMemberRepository,
    )
    return SqliteProjectMemberRepository(get_session_factory())


@lru_cache()
def get_task_repository() -> ITaskRepository:
    """Get task repository instance."""
    from roadmap.infrastructure.local.task_repository import SqliteTaskRepository
    return SqliteTaskRepository(get_session_factory())


@lru_cache()
def get_notification_repository() -> INotificationRepository:
    """Get notification repository instance."""
    from roadmap.infrastructure.local.notification_repository import SqliteNotificationRepository
    return SqliteNotificationRepository(get_session_factory())


@lru_cache()
def get_notification_sink() -> INotificationSink:
    from roadmap.services.notification_service import RepositoryNotificationSink
    return RepositoryNotificationSink(get_notification_repository())


# ===========================================
# Services
# ===========================================


def get_dependency_service() -> DependencyService:
    return DependencyService(
        dependency_repo=get_dependency_repository(),
        milestone_repo=get_milestone_repository(),
        notification_sink=get_notification_sink(),
        clock=get_clock(),
        transaction_manager=get_transaction_manager(),
    )


def get_progress_tracking_service() -> ProgressTrackingService:
    return ProgressTrackingService(
        milestone_repo=get_milestone_repository(),
        project_repo=get_project_repository(),
        task_repo=get_task_repository(),
        snapshot_repo=get_progress_snapshot_repository(),
        notification_sink=get_notification_sink(),
        clock=get_clock(),
        transaction_manager=get_transaction_manager(),
    )


def get_milestone_service() -> MilestoneService:
    return MilestoneService(
        milestone_repo=get_milestone_repository(),
        project_repo=get_project_repository(),
        project_member_repo=get_project_member_repository(),
        deliverable_repo=get_deliverable_repository(),
        approval_repo=get_approval_repository(),
        template_repo=get_template_repository(),
        dependency_service=get_dependency_service(),
        progress_service=get_progress_tracking_service(),
        notification_sink=get_notification_sink(),
        clock=get_clock(),
        transaction_manager=get_transaction_manager(),
    )
