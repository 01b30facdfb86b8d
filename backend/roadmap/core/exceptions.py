"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class RoadmapError(Exception):
    """Base exception for roadmap."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(RoadmapError):
    """Resource not found."""

    pass


class DuplicateError(RoadmapError):
    """Duplicate resource detected."""

    pass


class ValidationError(RoadmapError):
    """Validation error."""

    pass


class AuthorizationError(RoadmapError):
    """Authorization failed."""

    pass


class ForbiddenError(AuthorizationError):
    """Forbidden operation (authorization denied)."""

    pass


class BusinessLogicError(RoadmapError):
    """Business logic constraint violation."""

    pass


class CircularDependencyError(BusinessLogicError):
    """Adding a milestone dependency would close a cycle."""

    pass


class DependencyNotSatisfiedError(BusinessLogicError):
    """A milestone cannot start while its predecessors block it."""

    def __init__(self, message: str, blocking_dependency_ids: Optional[list] = None):
        blocking = list(blocking_dependency_ids or [])
        super().__init__(message, details={"blocking_dependency_ids": blocking})
        self.blocking_dependency_ids = blocking


class InvalidStatusTransitionError(BusinessLogicError):
    """Requested milestone status change is not allowed from the current status."""

    pass


class InvalidApprovalStepsError(ValidationError):
    """Approval submission without any steps."""

    pass
