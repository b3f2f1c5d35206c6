"""
Circle (sub-organization) and membership models.
"""

import uuid
from enum import Enum
from typing import Optional

from pydantic import Field

from src.kernel.models.base import DomainModel, SoftDeleteMixin


class CircleMemberStatus(str, Enum):
    """An actor's standing within one circle."""
    AWAIT = "await"
    MEMBER = "member"
    REJECT = "reject"
    LEAVE = "leave"
    DROP = "drop"


class Circle(DomainModel, SoftDeleteMixin):
    """Sub-organization with its own leader and roster."""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=5000)
    leader_id: Optional[uuid.UUID] = None

    def __repr__(self) -> str:
        return f"<Circle {self.name} deleted={self.is_deleted}>"


class CircleMember(DomainModel):
    """
    Membership row. At most one exists per (user, circle) pair; only
    MEMBER status grants rights scoped to the circle.
    """

    user_id: uuid.UUID
    circle_id: uuid.UUID
    status: CircleMemberStatus = CircleMemberStatus.AWAIT

    def __repr__(self) -> str:
        return f"<CircleMember user={self.user_id} circle={self.circle_id} status={self.status.value}>"
