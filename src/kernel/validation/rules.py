"""
Authorization and state rules.

Each rule is an immutable value built from already-resolved facts. `check()`
returns None when the rule holds and raises the rule's DomainError otherwise.
Rules never read anything beyond their own fields.
"""

import uuid
from dataclasses import dataclass, field
from typing import AbstractSet, FrozenSet, Optional, Union

from pydantic import BaseModel, ValidationError

from src.kernel.errors import (
    CannotPerformError,
    ForbiddenError,
    NotAllowedError,
    NotMemberError,
    ValidationFailedError,
)
from src.kernel.models.base import EntityKind
from src.kernel.models.circle import CircleMemberStatus
from src.kernel.models.locker import LockerState
from src.kernel.models.user import ADMINISTRATIVE_ROLES, Role, UserState, has_no_role, has_override


@dataclass(frozen=True)
class ActorStateRule:
    """Fails unless the actor's account is active."""

    state: UserState

    def check(self) -> None:
        if self.state != UserState.ACTIVE:
            raise ForbiddenError(f"Account state '{self.state.value}' cannot perform this action")


@dataclass(frozen=True)
class ActorHasNoRoleRule:
    """Rejects accounts that have not been granted any role yet."""

    roles: FrozenSet[Role]

    def check(self) -> None:
        if has_no_role(self.roles):
            raise ForbiddenError("Account has no granted role yet")


@dataclass(frozen=True)
class ActorRoleRule:
    """
    Passes if the actor holds one of `allowed` or the administrative
    override. An empty `allowed` set means administrators only.
    """

    roles: FrozenSet[Role]
    allowed: FrozenSet[Role] = frozenset()

    def check(self) -> None:
        if has_override(self.roles):
            return
        if not self.allowed.isdisjoint(self.roles):
            return
        raise NotAllowedError("Actor role is not allowed to perform this action")


@dataclass(frozen=True)
class ActorIdentityEqualsRule:
    """Fails unless both ids are present and equal."""

    expected: Optional[uuid.UUID]
    actual: uuid.UUID

    def check(self) -> None:
        if self.expected is None or self.expected != self.actual:
            raise NotAllowedError("Actor is not the owner of this resource")


@dataclass(frozen=True)
class EntityIsDeletedRule:
    """Fails when the target has been soft-deleted."""

    is_deleted: bool
    kind: EntityKind

    def check(self) -> None:
        if self.is_deleted:
            raise CannotPerformError(f"This {self.kind.value} has been deleted")


@dataclass(frozen=True)
class EntityIsNotDeletedRule:
    """Fails when the target is live; guards restore."""

    is_deleted: bool
    kind: EntityKind

    def check(self) -> None:
        if not self.is_deleted:
            raise CannotPerformError(f"This {self.kind.value} is not deleted")


@dataclass(frozen=True)
class CircleMembershipStatusRule:
    """
    Fails unless the membership status is one of `allowed`. A None status
    stands for a missing membership row.
    """

    status: Optional[CircleMemberStatus]
    allowed: FrozenSet[CircleMemberStatus] = frozenset({CircleMemberStatus.MEMBER})

    def check(self) -> None:
        if self.status is None:
            raise NotMemberError("The user is not a member of this circle")
        if self.status not in self.allowed:
            raise NotMemberError(f"Circle membership status '{self.status.value}' is not allowed")


@dataclass(frozen=True)
class ContentsAdminRule:
    """Passes for the content owner or for any holder of `override_roles`."""

    actor_roles: FrozenSet[Role]
    actor_id: uuid.UUID
    owner_id: uuid.UUID
    override_roles: AbstractSet[Role] = field(default=ADMINISTRATIVE_ROLES)

    def check(self) -> None:
        if self.actor_id == self.owner_id:
            return
        if not frozenset(self.override_roles).isdisjoint(self.actor_roles):
            return
        raise NotAllowedError("Only the owner or an administrator can manage this content")


@dataclass(frozen=True)
class CommentParentRule:
    """Fails when a reply's parent comment sits under a different post."""

    parent_post_id: Optional[uuid.UUID]
    post_id: uuid.UUID

    def check(self) -> None:
        if self.parent_post_id is not None and self.parent_post_id != self.post_id:
            raise CannotPerformError("The parent comment belongs to another post")


@dataclass(frozen=True)
class SchemaConstraintRule:
    """
    Re-validates an entity against its declared field constraints.

    Every violated field is reported, not just the first.
    """

    entity: BaseModel

    def check(self) -> None:
        model = type(self.entity)
        try:
            model.model_validate(dict(self.entity))
        except ValidationError as exc:
            raise ValidationFailedError([
                f"{'.'.join(str(loc) for loc in error['loc']) or model.__name__}: {error['msg']}"
                for error in exc.errors()
            ]) from exc


@dataclass(frozen=True)
class LockerStateRule:
    """Fails unless the locker is in the expected occupancy state."""

    state: LockerState
    expected: LockerState

    def check(self) -> None:
        if self.state != self.expected:
            if self.state == LockerState.USED:
                raise CannotPerformError("This locker is already in use")
            raise CannotPerformError("This locker is not currently in use")


@dataclass(frozen=True)
class LockerActivityRule:
    """Fails unless the locker's enabled flag matches `expected`."""

    is_active: bool
    expected: bool = True

    def check(self) -> None:
        if self.is_active != self.expected:
            if self.is_active:
                raise CannotPerformError("This locker is already enabled")
            raise CannotPerformError("This locker is disabled")


Rule = Union[
    ActorStateRule,
    ActorHasNoRoleRule,
    ActorRoleRule,
    ActorIdentityEqualsRule,
    EntityIsDeletedRule,
    EntityIsNotDeletedRule,
    CircleMembershipStatusRule,
    ContentsAdminRule,
    CommentParentRule,
    SchemaConstraintRule,
    LockerStateRule,
    LockerActivityRule,
]
