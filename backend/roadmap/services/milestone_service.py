"""
Milestone lifecycle service.

Creation, status transitions, deliverable sync, multi-step approval,
rescheduling and template instantiation. Readiness and cascade rules are
delegated to DependencyService, progress to ProgressTrackingService.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Optional, Union
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from roadmap.core.exceptions import (
    CircularDependencyError,
    DependencyNotSatisfiedError,
    DuplicateError,
    ForbiddenError,
    InvalidApprovalStepsError,
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)
from roadmap.core.logger import setup_logger
from roadmap.interfaces.approval_repository import IMilestoneApprovalRepository
from roadmap.interfaces.clock import IClock
from roadmap.interfaces.deliverable_repository import IDeliverableRepository
from roadmap.interfaces.milestone_repository import IMilestoneRepository
from roadmap.interfaces.notification_sink import INotificationSink
from roadmap.interfaces.project_member_repository import IProjectMemberRepository
from roadmap.interfaces.project_repository import IProjectRepository
from roadmap.interfaces.template_repository import IMilestoneTemplateRepository
from roadmap.interfaces.transaction_manager import ITransactionManager
from roadmap.models.approval import ApprovalStep, MilestoneApproval
from roadmap.models.deliverable import DeliverableCreate
from roadmap.models.enums import ApprovalStatus, DeliverableStatus, DependencyType, MilestoneStatus
from roadmap.models.milestone import Milestone, MilestoneCreate, MilestoneUpdate, TargetDateCheck
from roadmap.models.project import Project
from roadmap.models.template import MilestoneDefinitionOverride, MilestoneTemplate, TemplateOverrides
from roadmap.services import notification_service
from roadmap.services.dependency_service import DependencyService
from roadmap.services.progress_tracking_service import ProgressTrackingService
from roadmap.utils.datetime_utils import parse_date

logger = setup_logger(__name__)

TARGET_DATE_OUTSIDE_TIMELINE = "Target date is outside the project timeline"

ALLOWED_TRANSITIONS: dict[MilestoneStatus, frozenset[MilestoneStatus]] = {
    MilestoneStatus.NOT_STARTED: frozenset(
        {MilestoneStatus.IN_PROGRESS, MilestoneStatus.OVERDUE, MilestoneStatus.CANCELLED}
    ),
    MilestoneStatus.IN_PROGRESS: frozenset(
        {
            MilestoneStatus.READY_FOR_REVIEW,
            MilestoneStatus.UNDER_REVIEW,
            MilestoneStatus.COMPLETED,
            MilestoneStatus.OVERDUE,
            MilestoneStatus.CANCELLED,
        }
    ),
    MilestoneStatus.READY_FOR_REVIEW: frozenset(
        {
            MilestoneStatus.IN_PROGRESS,
            MilestoneStatus.UNDER_REVIEW,
            MilestoneStatus.COMPLETED,
            MilestoneStatus.OVERDUE,
            MilestoneStatus.CANCELLED,
        }
    ),
    MilestoneStatus.UNDER_REVIEW: frozenset(
        {
            MilestoneStatus.IN_PROGRESS,
            MilestoneStatus.COMPLETED,
            MilestoneStatus.OVERDUE,
            MilestoneStatus.CANCELLED,
        }
    ),
    MilestoneStatus.OVERDUE: frozenset(
        {
            MilestoneStatus.IN_PROGRESS,
            MilestoneStatus.READY_FOR_REVIEW,
            MilestoneStatus.UNDER_REVIEW,
            MilestoneStatus.COMPLETED,
            MilestoneStatus.CANCELLED,
        }
    ),
    MilestoneStatus.COMPLETED: frozenset(),
    MilestoneStatus.CANCELLED: frozenset(),
}


def _is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class MilestoneService:
    """Service orchestrating the milestone lifecycle."""

    def __init__(
        self,
        milestone_repo: IMilestoneRepository,
        project_repo: IProjectRepository,
        project_member_repo: IProjectMemberRepository,
        deliverable_repo: IDeliverableRepository,
        approval_repo: IMilestoneApprovalRepository,
        template_repo: IMilestoneTemplateRepository,
        dependency_service: DependencyService,
        progress_service: ProgressTrackingService,
        notification_sink: INotificationSink,
        clock: IClock,
        transaction_manager: ITransactionManager,
    ):
        self.milestone_repo = milestone_repo
        self.project_repo = project_repo
        self.project_member_repo = project_member_repo
        self.deliverable_repo = deliverable_repo
        self.approval_repo = approval_repo
        self.template_repo = template_repo
        self.dependency_service = dependency_service
        self.progress_service = progress_service
        self.notification_sink = notification_sink
        self.clock = clock
        self.transaction_manager = transaction_manager

    async def _get_milestone(self, milestone_id: UUID) -> Milestone:
        milestone = await self.milestone_repo.get(milestone_id)
        if milestone is None:
            raise NotFoundError(f"Milestone {milestone_id} not found")
        return milestone

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_milestone(self, data: MilestoneCreate) -> Milestone:
        """
        Create a milestone in NOT_STARTED and notify its owner.

        Raises:
            NotFoundError: If the project does not exist
            ValidationError: If no owner is given
            ForbiddenError: If the owner is not a member of the project
        """
        project = await self.project_repo.get(data.project_id)
        if project is None:
            raise NotFoundError(f"Project {data.project_id} not found")

        if not data.owner_id:
            raise ValidationError("A milestone needs an owner")

        if not await self.project_member_repo.has_access(project.id, data.owner_id):
            raise ForbiddenError(
                f"User {data.owner_id} has no access to project {project.id}",
                details={"owner_id": data.owner_id, "project_id": str(project.id)},
            )

        check = self.validate_target_date(project, data.target_date)
        for warning in check.warnings:
            logger.warning(f"{warning}: '{data.title}' due {data.target_date} in project {project.id}")

        async with self.transaction_manager.transaction():
            milestone = await self.milestone_repo.create(data)
            await notification_service.notify_milestone_assigned(self.notification_sink, milestone)

        logger.info(f"Milestone {milestone.id} created in project {project.id}")
        return milestone

    def validate_target_date(
        self, project: Project, target_date: Union[date, datetime, str]
    ) -> TargetDateCheck:
        """Check a target date against the project's start/end window."""
        target = parse_date(target_date)
        warnings = []
        if project.start_date and target < project.start_date:
            warnings.append(TARGET_DATE_OUTSIDE_TIMELINE)
        if project.end_date and target > project.end_date:
            warnings.append(TARGET_DATE_OUTSIDE_TIMELINE)
        return TargetDateCheck(within_timeline=not warnings, warnings=warnings)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    async def update_status(self, milestone: Milestone, new_status: MilestoneStatus) -> Milestone:
        """
        Move a milestone to ``new_status`` and notify its recipients.

        Raises:
            InvalidStatusTransitionError: If the transition table forbids the move
            DependencyNotSatisfiedError: If IN_PROGRESS is requested while
                predecessors still block the milestone
        """
        current = await self._get_milestone(milestone.id)
        old_status = current.status
        if new_status == old_status:
            return current

        if new_status not in ALLOWED_TRANSITIONS[old_status]:
            raise InvalidStatusTransitionError(
                f"Cannot move milestone from {old_status.value} to {new_status.value}",
                details={"from": old_status.value, "to": new_status.value},
            )

        if new_status == MilestoneStatus.IN_PROGRESS:
            blocking = await self.dependency_service.get_unsatisfied_dependencies(current)
            if blocking:
                raise DependencyNotSatisfiedError(
                    f"Milestone {current.id} has unsatisfied dependencies",
                    blocking_dependency_ids=[edge.id for edge in blocking],
                )

        update = MilestoneUpdate(status=new_status)
        if new_status == MilestoneStatus.COMPLETED and current.actual_completion_date is None:
            update.actual_completion_date = self.clock.today()

        async with self.transaction_manager.transaction():
            updated = await self.milestone_repo.update(current.id, update)
            await notification_service.notify_status_changed(
                self.notification_sink, updated, old_status, new_status
            )

        logger.info(f"Milestone {current.id} status {old_status.value} -> {new_status.value}")
        return updated

    async def sync_status_from_deliverables(self, milestone: Milestone) -> Milestone:
        """Move to READY_FOR_REVIEW once every deliverable is COMPLETED."""
        current = await self._get_milestone(milestone.id)
        deliverables = await self.deliverable_repo.list_by_milestone(current.id)
        if not deliverables:
            return current
        if any(d.status != DeliverableStatus.COMPLETED for d in deliverables):
            return current
        if current.status.is_terminal or current.status == MilestoneStatus.READY_FOR_REVIEW:
            return current

        async with self.transaction_manager.transaction():
            updated = await self.milestone_repo.update(
                current.id, MilestoneUpdate(status=MilestoneStatus.READY_FOR_REVIEW)
            )
            await notification_service.notify_ready_for_review(self.notification_sink, updated)
        return updated

    # ------------------------------------------------------------------
    # Approval
    # ------------------------------------------------------------------

    async def submit_for_approval(
        self, milestone: Milestone, steps: list[ApprovalStep]
    ) -> list[MilestoneApproval]:
        """
        Replace the milestone's approval steps and put it UNDER_REVIEW.

        Raises:
            InvalidApprovalStepsError: If ``steps`` is empty
        """
        if not steps:
            raise InvalidApprovalStepsError("Approval steps are required")

        current = await self._get_milestone(milestone.id)
        now = self.clock.now()

        async with self.transaction_manager.transaction():
            approvals = await self.approval_repo.replace_for_milestone(current.id, steps, now)
            updated = await self.milestone_repo.update(
                current.id,
                MilestoneUpdate(
                    status=MilestoneStatus.UNDER_REVIEW,
                    requires_approval=True,
                    submitted_for_approval_at=now,
                ),
            )
            await notification_service.notify_approval_requested(
                self.notification_sink, updated, [a.approver_id for a in approvals]
            )

        logger.info(f"Milestone {current.id} submitted for approval ({len(approvals)} steps)")
        return approvals

    async def record_approval_decision(
        self,
        approval: MilestoneApproval,
        decision: ApprovalStatus,
        comment: Optional[str] = None,
    ) -> Milestone:
        """
        Record an approver's decision.

        A rejection sends the milestone back to IN_PROGRESS. The approval that
        completes the set of steps marks the milestone COMPLETED at 100%;
        earlier approvals change nothing else.
        """
        if decision == ApprovalStatus.PENDING:
            raise ValidationError("PENDING is not a decision")

        async with self.transaction_manager.transaction():
            await self.approval_repo.record_decision(
                approval.id, decision, comment, self.clock.now()
            )
            milestone = await self._get_milestone(approval.milestone_id)

            if decision == ApprovalStatus.REJECTED:
                updated = await self.milestone_repo.update(
                    milestone.id, MilestoneUpdate(status=MilestoneStatus.IN_PROGRESS)
                )
                await notification_service.notify_approval_rejected(
                    self.notification_sink, updated, comment
                )
                return updated

            steps = await self.approval_repo.list_by_milestone(milestone.id)
            if not steps or any(step.status != ApprovalStatus.APPROVED for step in steps):
                return milestone

            updated = await self.milestone_repo.update(
                milestone.id,
                MilestoneUpdate(
                    status=MilestoneStatus.COMPLETED,
                    actual_completion_date=self.clock.today(),
                    completion_percentage=100.0,
                ),
            )
            await notification_service.notify_milestone_completed(self.notification_sink, updated)

        logger.info(f"Milestone {updated.id} approved and completed")
        return updated

    # ------------------------------------------------------------------
    # Scheduling & progress
    # ------------------------------------------------------------------

    async def reschedule(
        self, milestone: Milestone, new_target_date: Union[date, datetime, str]
    ) -> tuple[Milestone, list[Milestone]]:
        """
        Change the target date and cascade a slip to dependent milestones.

        Returns:
            The updated milestone and the successors that were shifted
        """
        new_date = parse_date(new_target_date)
        current = await self._get_milestone(milestone.id)
        if new_date == current.target_date:
            return current, []

        async with self.transaction_manager.transaction():
            updated = await self.milestone_repo.update(
                current.id, MilestoneUpdate(target_date=new_date)
            )
            shifted = await self.dependency_service.cascade_target_date_change(
                updated, current.target_date, new_date
            )
        return updated, shifted

    async def update_progress(self, milestone: Milestone) -> Milestone:
        return await self.progress_service.update_from_tasks(milestone)

    async def calculate_critical_path(self, project_id: UUID) -> list[Milestone]:
        """Critical milestones of a project, earliest target date first."""
        milestones = await self.milestone_repo.list_by_project(project_id)
        return [m for m in milestones if m.is_critical]

    def notification_recipients(self, milestone: Milestone) -> list[str]:
        return notification_service.notification_recipients(milestone)

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    async def apply_template(
        self,
        template: MilestoneTemplate,
        project: Project,
        overrides: Optional[TemplateOverrides] = None,
    ) -> list[Milestone]:
        """
        Instantiate a template's milestones, deliverables and dependencies.

        Milestones (with their deliverables) are created first and remembered
        by definition index; dependency definitions are then resolved against
        that index. Malformed definitions are skipped with a warning.
        """
        overrides = overrides or TemplateOverrides()
        data = template.template_data or {}
        definitions = data.get("milestones")
        if not isinstance(definitions, list) or not definitions:
            return []

        base_date = overrides.base_date or project.start_date or self.clock.today()

        async with self.transaction_manager.transaction():
            created: list[Milestone] = []
            milestone_map: dict[int, Milestone] = {}

            for index, definition in enumerate(definitions):
                milestone = await self._create_from_definition(
                    template, project, index, definition, base_date, overrides
                )
                if milestone is not None:
                    milestone_map[index] = milestone
                    created.append(milestone)

            dependency_definitions = data.get("dependencies") or []
            if isinstance(dependency_definitions, list):
                for definition in dependency_definitions:
                    await self._create_dependency_from_definition(
                        template, definition, milestone_map
                    )

            await self.template_repo.increment_usage(template.id)

        logger.info(
            f"Template {template.id} applied to project {project.id}: "
            f"{len(created)} milestone(s) created"
        )
        return created

    async def _create_from_definition(
        self,
        template: MilestoneTemplate,
        project: Project,
        index: int,
        definition: Any,
        base_date: date,
        overrides: TemplateOverrides,
    ) -> Optional[Milestone]:
        if not isinstance(definition, dict):
            logger.warning(f"Template {template.id}: milestone definition {index} is not a mapping")
            return None

        override = overrides.milestones.get(index) or MilestoneDefinitionOverride()
        try:
            offset_days = int(definition.get("target_offset_days") or 0)
            milestone_data = MilestoneCreate(
                project_id=project.id,
                title=override.title or definition.get("title") or f"Milestone {index + 1}",
                description=definition.get("description"),
                target_date=override.target_date or base_date + timedelta(days=offset_days),
                owner_id=override.owner_id or definition.get("owner_id") or project.user_id,
                milestone_type=definition.get("milestone_type") or "PHASE_COMPLETION",
                priority_level=definition.get("priority_level") or "MEDIUM",
                is_critical=bool(definition.get("is_critical", False)),
                requires_approval=bool(definition.get("requires_approval", False)),
                stakeholder_ids=definition.get("stakeholder_ids") or [],
            )
        except (TypeError, ValueError, OverflowError, PydanticValidationError) as e:
            logger.warning(f"Template {template.id}: skipping milestone definition {index}: {e}")
            return None

        milestone = await self.milestone_repo.create(milestone_data)

        deliverables = definition.get("deliverables") or []
        if isinstance(deliverables, list):
            for deliverable_definition in deliverables:
                await self._create_deliverable_from_definition(
                    template, milestone, deliverable_definition, base_date, offset_days
                )
        return milestone

    async def _create_deliverable_from_definition(
        self,
        template: MilestoneTemplate,
        milestone: Milestone,
        definition: Any,
        base_date: date,
        milestone_offset_days: int,
    ) -> None:
        if not isinstance(definition, dict):
            logger.warning(f"Template {template.id}: deliverable definition is not a mapping")
            return

        try:
            due_offset = definition.get("due_offset_days")
            due_offset_days = milestone_offset_days if due_offset is None else int(due_offset)
            deliverable_data = DeliverableCreate(
                milestone_id=milestone.id,
                name=definition.get("name") or "Deliverable",
                description=definition.get("description"),
                owner_id=definition.get("owner_id") or milestone.owner_id,
                due_date=base_date + timedelta(days=due_offset_days),
                acceptance_criteria=definition.get("acceptance_criteria"),
                requires_approval=bool(definition.get("requires_approval", False)),
            )
        except (TypeError, ValueError, OverflowError, PydanticValidationError) as e:
            logger.warning(f"Template {template.id}: skipping deliverable definition: {e}")
            return

        await self.deliverable_repo.create(deliverable_data)

    async def _create_dependency_from_definition(
        self,
        template: MilestoneTemplate,
        definition: Any,
        milestone_map: dict[int, Milestone],
    ) -> None:
        if not isinstance(definition, dict):
            logger.warning(f"Template {template.id}: dependency definition is not a mapping")
            return

        pre_index = definition.get("predecessor_index")
        suc_index = definition.get("successor_index")
        if not _is_index(pre_index) or not _is_index(suc_index):
            logger.warning(f"Template {template.id}: dependency indices must be integers: {definition}")
            return
        if pre_index not in milestone_map or suc_index not in milestone_map:
            logger.warning(f"Template {template.id}: dependency references unknown milestone: {definition}")
            return

        try:
            dependency_type = DependencyType(
                definition.get("dependency_type") or DependencyType.FINISH_TO_START.value
            )
            lag_days = int(definition.get("lag_days") or 0)
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning(f"Template {template.id}: skipping dependency definition: {e}")
            return

        try:
            await self.dependency_service.create_dependency(
                milestone_map[pre_index], milestone_map[suc_index], dependency_type, lag_days
            )
        except (CircularDependencyError, DuplicateError, ValidationError) as e:
            logger.warning(f"Template {template.id}: skipping dependency {pre_index} -> {suc_index}: {e}")
