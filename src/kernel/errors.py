"""
Domain error taxonomy.

Every failure raised by a rule, an action or a use case is a DomainError
carrying one ErrorKind. Callers map kinds to their own protocol codes.
"""

from enum import Enum
from typing import List, Optional, Sequence


class ErrorKind(str, Enum):
    """Kinds of failure surfaced across the core boundary."""
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    NOT_ALLOWED = "not_allowed"
    NOT_MEMBER = "not_member"
    CANNOT_PERFORM = "cannot_perform"
    VALIDATION_FAILED = "validation_failed"
    CONFLICT = "conflict"


class DomainError(Exception):
    """Base class for all core failures."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"<{type(self).__name__} kind={self.kind.value} message={self.message!r}>"


class NotFoundError(DomainError):
    """A referenced entity does not exist."""
    kind = ErrorKind.NOT_FOUND


class ForbiddenError(DomainError):
    """The actor's account state disallows any action."""
    kind = ErrorKind.FORBIDDEN


class NotAllowedError(DomainError):
    """A role or ownership check failed."""
    kind = ErrorKind.NOT_ALLOWED


class NotMemberError(DomainError):
    """The circle membership gate failed."""
    kind = ErrorKind.NOT_MEMBER


class CannotPerformError(DomainError):
    """A state-machine precondition was violated."""
    kind = ErrorKind.CANNOT_PERFORM


class ConflictError(DomainError):
    """A concurrent writer changed the row first. Safe to retry."""
    kind = ErrorKind.CONFLICT


class ValidationFailedError(DomainError):
    """
    Structural constraint violation.

    Unlike the other kinds this one may carry several field-level
    messages at once, one per violated constraint.
    """
    kind = ErrorKind.VALIDATION_FAILED

    def __init__(self, errors: Sequence[str], message: Optional[str] = None):
        self.errors: List[str] = list(errors)
        super().__init__(message or "; ".join(self.errors))
