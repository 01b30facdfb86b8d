"""
SQLite database configuration and ORM models.

This module defines the SQLAlchemy ORM models, session management and the
transaction scope shared by the local repositories.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import datetime
from typing import AsyncIterator, Optional
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from roadmap.core.config import get_settings
from roadmap.interfaces.transaction_manager import ITransactionManager
from roadmap.utils.datetime_utils import now_utc


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


# ===========================================
# ORM Models
# ===========================================


class ProjectORM(Base):
    """Project ORM model."""

    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="ACTIVE")
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class ProjectMemberORM(Base):
    """Project member ORM model."""

    __tablename__ = "project_members"
    __table_args__ = (UniqueConstraint("project_id", "member_user_id"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    member_user_id = Column(String(255), nullable=False, index=True)
    role = Column(String(20), default="MEMBER")
    created_at = Column(DateTime(timezone=True), default=now_utc)


class MilestoneORM(Base):
    """Milestone ORM model."""

    __tablename__ = "milestones"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    owner_id = Column(String(255), nullable=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    target_date = Column(Date, nullable=False, index=True)
    actual_completion_date = Column(Date, nullable=True)
    milestone_type = Column(String(30), default="PHASE_COMPLETION")
    priority_level = Column(String(20), default="MEDIUM")
    status = Column(String(20), default="NOT_STARTED", index=True)
    completion_percentage = Column(Float, default=0.0)
    schedule_variance_days = Column(Integer, default=0)
    is_critical = Column(Boolean, default=False)
    is_at_risk = Column(Boolean, default=False)
    requires_approval = Column(Boolean, default=False)
    last_progress_threshold_notified = Column(Integer, default=0)
    stakeholder_ids = Column(JSON, nullable=True, default=list)
    submitted_for_approval_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class MilestoneDependencyORM(Base):
    """Directed milestone dependency edge (predecessor -> successor)."""

    __tablename__ = "milestone_dependencies"
    __table_args__ = (UniqueConstraint("predecessor_id", "successor_id"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    predecessor_id = Column(String(36), ForeignKey("milestones.id"), nullable=False, index=True)
    successor_id = Column(String(36), ForeignKey("milestones.id"), nullable=False, index=True)
    dependency_type = Column(String(20), default="FINISH_TO_START")
    lag_days = Column(Integer, default=0)
    is_active = Column(Boolean, default=True, index=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class MilestoneApprovalORM(Base):
    """Milestone approval step ORM model."""

    __tablename__ = "milestone_approvals"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    milestone_id = Column(String(36), ForeignKey("milestones.id"), nullable=False, index=True)
    step_order = Column(Integer, nullable=False)
    approver_id = Column(String(255), nullable=False)
    approval_criteria = Column(Text, nullable=True)
    status = Column(String(20), default="PENDING")
    requested_at = Column(DateTime(timezone=True), nullable=False)
    decided_at = Column(DateTime(timezone=True), nullable=True)
    decision_comment = Column(Text, nullable=True)


class MilestoneProgressSnapshotORM(Base):
    """Append-only milestone progress snapshot."""

    __tablename__ = "milestone_progress_snapshots"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    milestone_id = Column(String(36), ForeignKey("milestones.id"), nullable=False, index=True)
    completion_percentage = Column(Float, nullable=False)
    schedule_variance_days = Column(Integer, nullable=False)
    remaining_tasks_count = Column(Integer, default=0)
    blocked_tasks_count = Column(Integer, default=0)
    created_at = Column(DateTime(timezone=True), default=now_utc, index=True)


class DeliverableORM(Base):
    """Deliverable ORM model."""

    __tablename__ = "deliverables"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    milestone_id = Column(String(36), ForeignKey("milestones.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    owner_id = Column(String(255), nullable=True)
    due_date = Column(Date, nullable=True)
    acceptance_criteria = Column(Text, nullable=True)
    status = Column(String(20), default="PENDING")
    requires_approval = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class MilestoneTemplateORM(Base):
    """Milestone template ORM model."""

    __tablename__ = "milestone_templates"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    template_data = Column(JSON, nullable=False, default=dict)
    usage_count = Column(Integer, default=0)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class TaskORM(Base):
    """Task ORM model."""

    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    project_id = Column(String(36), nullable=True, index=True)
    title = Column(String(500), nullable=False)
    status = Column(String(20), default="TODO", index=True)
    progress = Column(Integer, default=0)
    parent_id = Column(String(36), nullable=True, index=True)
    dependency_ids = Column(JSON, nullable=True, default=list)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class MilestoneTaskORM(Base):
    """Link between a milestone and a task, carrying the task's weight."""

    __tablename__ = "milestone_tasks"
    __table_args__ = (UniqueConstraint("milestone_id", "task_id"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    milestone_id = Column(String(36), ForeignKey("milestones.id"), nullable=False, index=True)
    task_id = Column(String(36), ForeignKey("tasks.id"), nullable=False, index=True)
    weight = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)


class NotificationORM(Base):
    """Notification ORM model."""

    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    type = Column(String(30), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(String(500), nullable=False)
    link_type = Column(String(30), nullable=True)
    link_id = Column(String(36), nullable=True)
    project_id = Column(String(36), nullable=True)
    is_read = Column(Boolean, default=False, index=True)
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, index=True)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


# ===========================================
# Database Session Management
# ===========================================

# Session bound to the transaction currently running in this task, if any
_current_session: ContextVar[Optional[AsyncSession]] = ContextVar(
    "roadmap_current_session", default=None
)


def get_engine(database_url: Optional[str] = None):
    """Get async engine instance."""
    settings = get_settings()
    return create_async_engine(database_url or settings.DATABASE_URL, echo=settings.DEBUG)


def get_session_factory(engine=None):
    """Get async session factory."""
    engine = engine or get_engine()
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine=None):
    """Initialize database tables."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def session_scope(session_factory) -> AsyncIterator[AsyncSession]:
    """
    Yield the session for a single repository call.

    Inside an open transaction the transaction's session is reused and only
    flushed, leaving commit/rollback to the transaction. Otherwise a fresh
    session is opened and committed when the call finishes.
    """
    session = _current_session.get()
    if session is not None:
        yield session
        await session.flush()
        return

    async with session_factory() as session:
        yield session
        await session.commit()


class SqliteTransactionManager(ITransactionManager):
    """Transaction scope spanning every repository call made inside it."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        existing = _current_session.get()
        if existing is not None:
            yield existing
            return

        async with self._session_factory() as session:
            token = _current_session.set(session)
            try:
                yield session
                await session.commit()
            except BaseException:
                await session.rollback()
                raise
            finally:
                _current_session.reset(token)
