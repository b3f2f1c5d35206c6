"""
Locker and locker log models.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import Field, model_validator

from src.kernel.errors import ValidationFailedError
from src.kernel.models.base import DomainModel


class LockerState(str, Enum):
    """Occupancy state of a locker."""
    AVAILABLE = "available"
    USED = "used"


class LockerLogAction(str, Enum):
    """Actions that move a locker between states."""
    ENABLE = "enable"
    DISABLE = "disable"
    REGISTER = "register"
    RETURN = "return"

    @classmethod
    def of(cls, value: str) -> "LockerLogAction":
        """Parse an action tag case-insensitively."""
        normalized = (value or "").strip().lower()
        for action in cls:
            if action.value == normalized:
                return action
        raise ValidationFailedError([f"action: '{value}' is invalid : not supported"])


class Locker(DomainModel):
    """
    A physical locker.

    USED implies an owner, AVAILABLE implies none. `version` is bumped by
    the store on every successful update.
    """

    locker_number: int = Field(..., gt=0)
    is_active: bool = True
    state: LockerState = LockerState.AVAILABLE
    owner_id: Optional[uuid.UUID] = None
    version: int = 0

    @model_validator(mode="after")
    def _check_occupancy(self) -> "Locker":
        if (self.state == LockerState.USED) != (self.owner_id is not None):
            raise ValueError("state and owner must agree: USED requires an owner, AVAILABLE forbids one")
        return self

    def register(self, owner_id: uuid.UUID) -> None:
        self.owner_id = owner_id
        self.state = LockerState.USED

    def release(self) -> None:
        self.owner_id = None
        self.state = LockerState.AVAILABLE

    def enable(self) -> None:
        self.is_active = True

    def disable(self) -> None:
        self.is_active = False

    def __repr__(self) -> str:
        return f"<Locker #{self.locker_number} state={self.state.value} active={self.is_active}>"


class LockerLog(DomainModel):
    """Append-only record of one effective locker action."""

    locker_number: int
    user_id: uuid.UUID
    action: LockerLogAction
    message: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
