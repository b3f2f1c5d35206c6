"""
Storage adapters implementing src.kernel.ports.

SQLAlchemy repositories for a real database, in-memory ones for tests and
embedding.
"""

from src.persistence.memory import (
    InMemoryBoardRepository,
    InMemoryCircleMemberRepository,
    InMemoryCircleRepository,
    InMemoryCommentRepository,
    InMemoryLockerLogRepository,
    InMemoryLockerRepository,
    InMemoryPostRepository,
    InMemoryUserRepository,
)
from src.persistence.repositories import (
    SqlBoardRepository,
    SqlCircleMemberRepository,
    SqlCircleRepository,
    SqlCommentRepository,
    SqlLockerLogRepository,
    SqlLockerRepository,
    SqlPostRepository,
    SqlUserRepository,
)

__all__ = [
    # In-memory
    "InMemoryBoardRepository",
    "InMemoryCircleMemberRepository",
    "InMemoryCircleRepository",
    "InMemoryCommentRepository",
    "InMemoryLockerLogRepository",
    "InMemoryLockerRepository",
    "InMemoryPostRepository",
    "InMemoryUserRepository",
    # SQLAlchemy
    "SqlBoardRepository",
    "SqlCircleMemberRepository",
    "SqlCircleRepository",
    "SqlCommentRepository",
    "SqlLockerLogRepository",
    "SqlLockerRepository",
    "SqlPostRepository",
    "SqlUserRepository",
]
