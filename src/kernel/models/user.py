"""
User (actor) model and role tags.
"""

from enum import Enum
from typing import FrozenSet, Iterable

from pydantic import Field

from src.kernel.models.base import DomainModel


class Role(str, Enum):
    """
    Flat role tags. An actor holds a set of them; there is no hierarchy,
    checks test set membership or intersection only.
    """
    ADMIN = "admin"
    PRESIDENT = "president"
    VICE_PRESIDENT = "vice_president"
    COUNCIL = "council"
    LEADER_CIRCLE = "leader_circle"
    LEADER_ALUMNI = "leader_alumni"
    PROFESSOR = "professor"
    COMMON = "common"
    NONE = "none"


class UserState(str, Enum):
    """Account state. Only ACTIVE accounts may act."""
    AWAIT = "await"
    ACTIVE = "active"
    INACTIVE = "inactive"
    REJECT = "reject"
    DROP = "drop"


# Roles that bypass role and ownership checks
ADMINISTRATIVE_ROLES: FrozenSet[Role] = frozenset({
    Role.ADMIN,
    Role.PRESIDENT,
    Role.VICE_PRESIDENT,
})


def has_override(roles: Iterable[Role]) -> bool:
    """True if the role set carries the administrative override."""
    return not ADMINISTRATIVE_ROLES.isdisjoint(roles)


def has_no_role(roles: Iterable[Role]) -> bool:
    """True for not-yet-approved accounts: no roles, or only NONE."""
    return not (set(roles) - {Role.NONE})


def parse_roles(value: str) -> FrozenSet[Role]:
    """Parse a comma-joined role list, as stored by the persistence layer."""
    return frozenset(Role(part.strip()) for part in value.split(",") if part.strip())


def join_roles(roles: Iterable[Role]) -> str:
    return ",".join(sorted(role.value for role in roles))


class User(DomainModel):
    """Authenticated actor."""

    email: str = Field(..., min_length=3, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    roles: FrozenSet[Role] = frozenset()
    state: UserState = UserState.AWAIT

    def __repr__(self) -> str:
        return f"<User {self.email} state={self.state.value}>"
