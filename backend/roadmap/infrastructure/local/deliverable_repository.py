"""
SQLite implementation of deliverable repository.
"""

from uuid import UUID, uuid4

from sqlalchemy import select

from roadmap.core.exceptions import NotFoundError
from roadmap.infrastructure.local.database import DeliverableORM, get_session_factory, session_scope
from roadmap.interfaces.deliverable_repository import IDeliverableRepository
from roadmap.models.deliverable import Deliverable, DeliverableCreate
from roadmap.models.enums import DeliverableStatus
from roadmap.utils.datetime_utils import now_utc


class SqliteDeliverableRepository(IDeliverableRepository):
    """SQLite implementation of deliverable repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: DeliverableORM) -> Deliverable:
        return Deliverable(
            id=UUID(orm.id),
            milestone_id=UUID(orm.milestone_id),
            name=orm.name,
            description=orm.description,
            owner_id=orm.owner_id,
            due_date=orm.due_date,
            acceptance_criteria=orm.acceptance_criteria,
            status=DeliverableStatus(orm.status),
            requires_approval=bool(orm.requires_approval),
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    async def create(self, deliverable: DeliverableCreate) -> Deliverable:
        async with session_scope(self._session_factory) as session:
            now = now_utc()
            orm = DeliverableORM(
                id=str(uuid4()),
                milestone_id=str(deliverable.milestone_id),
                name=deliverable.name,
                description=deliverable.description,
                owner_id=deliverable.owner_id,
                due_date=deliverable.due_date,
                acceptance_criteria=deliverable.acceptance_criteria,
                status=deliverable.status.value,
                requires_approval=deliverable.requires_approval,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.flush()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def list_by_milestone(self, milestone_id: UUID) -> list[Deliverable]:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(DeliverableORM)
                .where(DeliverableORM.milestone_id == str(milestone_id))
                .order_by(DeliverableORM.created_at)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def update_status(self, deliverable_id: UUID, status: DeliverableStatus) -> Deliverable:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(DeliverableORM).where(DeliverableORM.id == str(deliverable_id))
            )
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"Deliverable {deliverable_id} not found")

            orm.status = status.value
            orm.updated_at = now_utc()
            await session.flush()
            await session.refresh(orm)
            return self._orm_to_model(orm)
