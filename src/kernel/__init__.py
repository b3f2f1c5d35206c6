"""
Stable Kernel Layer

This layer contains the foundational components the use cases build on:
- Domain models (actors, circles, boards, lockers)
- Error taxonomy (one ErrorKind per failure)
- Validation core (rules and ordered rule sets)
- Storage ports (protocols implemented by the persistence adapters)

Architectural Invariants:
- Rules read only the facts they were built with; they never fetch
- A use case evaluates its rules before any persisting call
"""

from src.kernel.errors import (
    CannotPerformError,
    ConflictError,
    DomainError,
    ErrorKind,
    ForbiddenError,
    NotAllowedError,
    NotFoundError,
    NotMemberError,
    ValidationFailedError,
)
from src.kernel.models import (
    Board,
    Circle,
    CircleMember,
    Comment,
    Locker,
    LockerLog,
    Post,
    Role,
    User,
    UserState,
)

__all__ = [
    # Errors
    "CannotPerformError",
    "ConflictError",
    "DomainError",
    "ErrorKind",
    "ForbiddenError",
    "NotAllowedError",
    "NotFoundError",
    "NotMemberError",
    "ValidationFailedError",
    # Actors
    "Role",
    "User",
    "UserState",
    # Circles
    "Circle",
    "CircleMember",
    # Boards
    "Board",
    "Comment",
    "Post",
    # Lockers
    "Locker",
    "LockerLog",
]
