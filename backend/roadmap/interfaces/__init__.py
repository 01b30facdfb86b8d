"""Abstract interfaces for infrastructure abstraction."""

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

__all__ = [
    "IClock",
    "IDeliverableRepository",
    "IMilestoneApprovalRepository",
    "IMilestoneDependencyRepository",
    "IMilestoneRepository",
    "IMilestoneTemplateRepository",
    "INotificationRepository",
    "INotificationSink",
    "IProgressSnapshotRepository",
    "IProjectMemberRepository",
    "IProjectRepository",
    "ITaskRepository",
    "ITransactionManager",
]
