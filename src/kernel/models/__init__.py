"""
Kernel Data Models

Domain entities consumed by the rule engine. They carry no storage
concerns; persistence adapters map them to and from rows.
"""

from src.kernel.models.base import DomainModel, EntityKind, SoftDeleteMixin, generate_uuid
from src.kernel.models.user import (
    ADMINISTRATIVE_ROLES,
    Role,
    User,
    UserState,
    has_no_role,
    has_override,
    join_roles,
    parse_roles,
)
from src.kernel.models.circle import Circle, CircleMember, CircleMemberStatus
from src.kernel.models.board import BOARD_CATEGORY_APP_NOTICE, Board, Comment, Post
from src.kernel.models.locker import Locker, LockerLog, LockerLogAction, LockerState

__all__ = [
    # Base
    "DomainModel",
    "EntityKind",
    "SoftDeleteMixin",
    "generate_uuid",
    # User
    "ADMINISTRATIVE_ROLES",
    "Role",
    "User",
    "UserState",
    "has_no_role",
    "has_override",
    "join_roles",
    "parse_roles",
    # Circle
    "Circle",
    "CircleMember",
    "CircleMemberStatus",
    # Boards
    "BOARD_CATEGORY_APP_NOTICE",
    "Board",
    "Comment",
    "Post",
    # Lockers
    "Locker",
    "LockerLog",
    "LockerLogAction",
    "LockerState",
]
