"""Pydantic models (schemas) for the application."""

from roadmap.models.enums import (
    ApprovalStatus,
    DeliverableStatus,
    DependencyType,
    MilestonePriority,
    MilestoneStatus,
    MilestoneType,
    ProjectRole,
    ProjectStatus,
    TaskStatus,
)
from roadmap.models.approval import ApprovalStep, MilestoneApproval
from roadmap.models.deliverable import Deliverable, DeliverableCreate
from roadmap.models.dependency import MilestoneDependency, MilestoneDependencyCreate
from roadmap.models.milestone import Milestone, MilestoneCreate, MilestoneUpdate, TargetDateCheck
from roadmap.models.notification import Notification, NotificationCreate, NotificationType
from roadmap.models.progress_snapshot import ProgressSnapshot, ProgressSnapshotCreate, ProgressTrend
from roadmap.models.project import Project, ProjectCreate, ProjectMember
from roadmap.models.task import MilestoneTaskProgress, Task, TaskCreate, TaskUpdate
from roadmap.models.template import (
    MilestoneDefinitionOverride,
    MilestoneTemplate,
    MilestoneTemplateCreate,
    TemplateOverrides,
)

__all__ = [
    # Enums
    "ApprovalStatus",
    "DeliverableStatus",
    "DependencyType",
    "MilestonePriority",
    "MilestoneStatus",
    "MilestoneType",
    "ProjectRole",
    "ProjectStatus",
    "TaskStatus",
    # Milestones
    "Milestone",
    "MilestoneCreate",
    "MilestoneUpdate",
    "TargetDateCheck",
    "MilestoneDependency",
    "MilestoneDependencyCreate",
    "ApprovalStep",
    "MilestoneApproval",
    "Deliverable",
    "DeliverableCreate",
    "ProgressSnapshot",
    "ProgressSnapshotCreate",
    "ProgressTrend",
    "MilestoneTemplate",
    "MilestoneTemplateCreate",
    "MilestoneDefinitionOverride",
    "TemplateOverrides",
    # Projects & tasks
    "Project",
    "ProjectCreate",
    "ProjectMember",
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "MilestoneTaskProgress",
    # Notifications
    "Notification",
    "NotificationCreate",
    "NotificationType",
]
