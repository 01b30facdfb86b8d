"""
SQLite implementation of Project repository.
"""

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select

from roadmap.infrastructure.local.database import (
    ProjectMemberORM,
    ProjectORM,
    get_session_factory,
    session_scope,
)
from roadmap.interfaces.project_repository import IProjectRepository
from roadmap.models.enums import ProjectRole, ProjectStatus
from roadmap.models.project import Project, ProjectCreate
from roadmap.utils.datetime_utils import now_utc


class SqliteProjectRepository(IProjectRepository):
    """SQLite implementation of project repository."""

    def __init__(self, session_factory=None):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
        """
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: ProjectORM) -> Project:
        """Convert ORM object to Pydantic model."""
        return Project(
            id=UUID(orm.id),
            user_id=orm.user_id,
            name=orm.name,
            description=orm.description,
            status=ProjectStatus(orm.status),
            start_date=orm.start_date,
            end_date=orm.end_date,
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    async def create(self, user_id: str, project: ProjectCreate) -> Project:
        """Create a new project owned by ``user_id``."""
        async with session_scope(self._session_factory) as session:
            now = now_utc()
            orm = ProjectORM(
                id=str(uuid4()),
                user_id=user_id,
                name=project.name,
                description=project.description,
                status=ProjectStatus.ACTIVE.value,
                start_date=project.start_date,
                end_date=project.end_date,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.flush()

            # The creator is always a member of their own project
            session.add(
                ProjectMemberORM(
                    id=str(uuid4()),
                    project_id=orm.id,
                    member_user_id=user_id,
                    role=ProjectRole.OWNER.value,
                    created_at=now,
                )
            )
            await session.flush()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, project_id: UUID) -> Optional[Project]:
        """Get a project by ID."""
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(ProjectORM).where(ProjectORM.id == str(project_id))
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None
