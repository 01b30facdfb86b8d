"""
Enum definitions for the application.

These enums are used across models and provide type-safe status/type values.
"""

from enum import Enum


class TaskStatus(str, Enum):
    """Task status."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    WAITING = "WAITING"
    DONE = "DONE"


class ProjectStatus(str, Enum):
    """Project status."""

    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class ProjectRole(str, Enum):
    """Role of a member within a project."""

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class MilestoneStatus(str, Enum):
    """Milestone lifecycle status."""

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    READY_FOR_REVIEW = "READY_FOR_REVIEW"
    UNDER_REVIEW = "UNDER_REVIEW"
    COMPLETED = "COMPLETED"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"

    @property
    def label(self) -> str:
        return _MILESTONE_STATUS_LABELS[self]

    @property
    def is_terminal(self) -> bool:
        return self in (MilestoneStatus.COMPLETED, MilestoneStatus.CANCELLED)

    @property
    def has_started(self) -> bool:
        """True once work on the milestone has begun (used by start-based dependencies)."""
        return self in (
            MilestoneStatus.IN_PROGRESS,
            MilestoneStatus.READY_FOR_REVIEW,
            MilestoneStatus.UNDER_REVIEW,
            MilestoneStatus.COMPLETED,
        )


_MILESTONE_STATUS_LABELS = {
    MilestoneStatus.NOT_STARTED: "Not Started",
    MilestoneStatus.IN_PROGRESS: "In Progress",
    MilestoneStatus.READY_FOR_REVIEW: "Ready for Review",
    MilestoneStatus.UNDER_REVIEW: "Under Review",
    MilestoneStatus.COMPLETED: "Completed",
    MilestoneStatus.OVERDUE: "Overdue",
    MilestoneStatus.CANCELLED: "Cancelled",
}


class MilestoneType(str, Enum):
    """Kind of milestone."""

    PHASE_COMPLETION = "PHASE_COMPLETION"
    DELIVERABLE = "DELIVERABLE"
    DECISION_GATE = "DECISION_GATE"
    EXTERNAL_DEPENDENCY = "EXTERNAL_DEPENDENCY"
    RELEASE = "RELEASE"


class MilestonePriority(str, Enum):
    """Milestone priority level."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class DependencyType(str, Enum):
    """
    How a predecessor milestone gates its successor.

    FINISH_TO_START  = successor starts after predecessor finishes
    FINISH_TO_FINISH = successor finishes after predecessor finishes
    START_TO_START   = successor starts after predecessor starts
    START_TO_FINISH  = successor finishes after predecessor starts
    """

    FINISH_TO_START = "FINISH_TO_START"
    FINISH_TO_FINISH = "FINISH_TO_FINISH"
    START_TO_START = "START_TO_START"
    START_TO_FINISH = "START_TO_FINISH"

    @property
    def requires_finished_predecessor(self) -> bool:
        return self in (DependencyType.FINISH_TO_START, DependencyType.FINISH_TO_FINISH)


class ApprovalStatus(str, Enum):
    """Decision state of a single approval step."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class DeliverableStatus(str, Enum):
    """Deliverable status."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
