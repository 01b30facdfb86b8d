"""
SQLite implementation of project member repository.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import and_, func, select

from roadmap.core.exceptions import DuplicateError
from roadmap.infrastructure.local.database import ProjectMemberORM, get_session_factory, session_scope
from roadmap.interfaces.project_member_repository import IProjectMemberRepository
from roadmap.models.enums import ProjectRole
from roadmap.models.project import ProjectMember
from roadmap.utils.datetime_utils import now_utc


class SqliteProjectMemberRepository(IProjectMemberRepository):
    """SQLite implementation of project member repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: ProjectMemberORM) -> ProjectMember:
        return ProjectMember(
            id=UUID(orm.id),
            project_id=UUID(orm.project_id),
            member_user_id=orm.member_user_id,
            role=ProjectRole(orm.role),
            created_at=orm.created_at,
        )

    async def add(
        self, project_id: UUID, member_user_id: str, role: ProjectRole = ProjectRole.MEMBER
    ) -> ProjectMember:
        async with session_scope(self._session_factory) as session:
            existing = await session.execute(
                select(ProjectMemberORM).where(
                    and_(
                        ProjectMemberORM.project_id == str(project_id),
                        ProjectMemberORM.member_user_id == member_user_id,
                    )
                )
            )
            if existing.scalar_one_or_none():
                raise DuplicateError(
                    f"User {member_user_id} is already a member of project {project_id}"
                )

            orm = ProjectMemberORM(
                id=str(uuid4()),
                project_id=str(project_id),
                member_user_id=member_user_id,
                role=role.value,
                created_at=now_utc(),
            )
            session.add(orm)
            await session.flush()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def list_by_project(self, project_id: UUID) -> list[ProjectMember]:
        """List members for a project (for system/background processes)."""
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(ProjectMemberORM)
                .where(ProjectMemberORM.project_id == str(project_id))
                .order_by(ProjectMemberORM.created_at)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def has_access(self, project_id: UUID, user_id: str) -> bool:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(func.count(ProjectMemberORM.id)).where(
                    and_(
                        ProjectMemberORM.project_id == str(project_id),
                        ProjectMemberORM.member_user_id == user_id,
                    )
                )
            )
            return (result.scalar() or 0) > 0
