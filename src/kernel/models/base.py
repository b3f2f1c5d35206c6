"""
Base model with common fields and utilities.
"""

import uuid
from enum import Enum
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class EntityKind(str, Enum):
    """Entity kinds, used to tag rule failures."""
    USER = "user"
    CIRCLE = "circle"
    CIRCLE_MEMBER = "circle_member"
    BOARD = "board"
    POST = "post"
    COMMENT = "comment"
    LOCKER = "locker"


def generate_uuid() -> uuid.UUID:
    """Generate a new UUID."""
    return uuid.uuid4()


T = TypeVar("T", bound="DomainModel")


class DomainModel(BaseModel):
    """
    Base class for all domain entities.

    Assignments are not validated: entities are mutated freely inside a use
    case and re-checked as a whole by SchemaConstraintRule before persisting.
    """

    model_config = ConfigDict(validate_assignment=False, use_enum_values=False)

    id: uuid.UUID = Field(default_factory=generate_uuid)

    @classmethod
    def draft(cls: Type[T], **fields: Any) -> T:
        """Build an entity without validating it yet."""
        return cls.model_construct(**fields)


class SoftDeleteMixin(BaseModel):
    """Mixin for the boolean soft-delete lifecycle."""

    is_deleted: bool = False

    def mark_deleted(self) -> None:
        self.is_deleted = True

    def mark_restored(self) -> None:
        self.is_deleted = False
