"""
SQLite implementation of milestone template repository.
"""

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select

from roadmap.core.exceptions import NotFoundError
from roadmap.infrastructure.local.database import (
    MilestoneTemplateORM,
    get_session_factory,
    session_scope,
)
from roadmap.interfaces.template_repository import IMilestoneTemplateRepository
from roadmap.models.template import MilestoneTemplate, MilestoneTemplateCreate
from roadmap.utils.datetime_utils import now_utc


class SqliteMilestoneTemplateRepository(IMilestoneTemplateRepository):
    """SQLite implementation of template repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: MilestoneTemplateORM) -> MilestoneTemplate:
        return MilestoneTemplate(
            id=UUID(orm.id),
            name=orm.name,
            description=orm.description,
            template_data=orm.template_data or {},
            usage_count=orm.usage_count or 0,
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    async def create(self, template: MilestoneTemplateCreate) -> MilestoneTemplate:
        async with session_scope(self._session_factory) as session:
            now = now_utc()
            orm = MilestoneTemplateORM(
                id=str(uuid4()),
                name=template.name,
                description=template.description,
                template_data=template.template_data,
                usage_count=0,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.flush()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, template_id: UUID) -> Optional[MilestoneTemplate]:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(MilestoneTemplateORM).where(MilestoneTemplateORM.id == str(template_id))
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def increment_usage(self, template_id: UUID) -> MilestoneTemplate:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(MilestoneTemplateORM).where(MilestoneTemplateORM.id == str(template_id))
            )
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"Template {template_id} not found")

            orm.usage_count = (orm.usage_count or 0) + 1
            orm.updated_at = now_utc()
            await session.flush()
            await session.refresh(orm)
            return self._orm_to_model(orm)
