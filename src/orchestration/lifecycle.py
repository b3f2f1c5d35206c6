"""
Soft-delete lifecycle and circle-scope rule builders.

Boards, circles, posts and comments share a two-state lifecycle
(ACTIVE <-> DELETED) tracked by `is_deleted`. The builders here assemble
the rules every use case starts from; the use case appends its own
authority rules and evaluates once.
"""

from enum import Enum
from typing import List, Optional, Set

from src.kernel.models import (
    ADMINISTRATIVE_ROLES,
    Circle,
    CircleMemberStatus,
    EntityKind,
    Role,
    SoftDeleteMixin,
    User,
    has_override,
)
from src.kernel.ports import CircleMemberPort
from src.kernel.validation import (
    ActorHasNoRoleRule,
    ActorIdentityEqualsRule,
    ActorRoleRule,
    ActorStateRule,
    CircleMembershipStatusRule,
    EntityIsDeletedRule,
    EntityIsNotDeletedRule,
    Rule,
    RuleSet,
)


class Transition(str, Enum):
    """Soft-delete transitions."""
    DELETE = "delete"
    RESTORE = "restore"


def actor_rules(actor: User) -> RuleSet:
    """Account-state and granted-role checks every operation starts with."""
    return RuleSet.of(
        ActorStateRule(actor.state),
        ActorHasNoRoleRule(actor.roles),
    )


def transition_rules(
    actor: User,
    target: SoftDeleteMixin,
    kind: EntityKind,
    transition: Transition,
) -> RuleSet:
    """
    Actor checks followed by the target's lifecycle precondition.

    DELETE requires a live target, RESTORE a deleted one.
    """
    rules = actor_rules(actor)
    if transition == Transition.DELETE:
        return rules.add(EntityIsDeletedRule(target.is_deleted, kind))
    return rules.add(EntityIsNotDeletedRule(target.is_deleted, kind))


def apply_transition(target: SoftDeleteMixin, transition: Transition) -> None:
    """Flip the flag. Call only after the transition's rules passed."""
    if transition == Transition.DELETE:
        target.mark_deleted()
    else:
        target.mark_restored()


def leader_rules(actor: User, circle: Circle) -> List[Rule]:
    """
    Circle leader or administrator.

    A leader without the administrative override must lead this very
    circle; a circle without a leader matches nobody.
    """
    rules: List[Rule] = [ActorRoleRule(actor.roles, frozenset({Role.LEADER_CIRCLE}))]
    if Role.LEADER_CIRCLE in actor.roles and not has_override(actor.roles):
        rules.append(ActorIdentityEqualsRule(circle.leader_id, actor.id))
    return rules


def circle_authority_rules(actor: User, circle: Optional[Circle]) -> List[Rule]:
    """
    Authority over a board or other circle-scoped structure.

    Circle-owned: the circle must be live and the actor its leader or an
    administrator. Global: administrators only.
    """
    if circle is None:
        return [ActorRoleRule(actor.roles, frozenset())]
    return [EntityIsDeletedRule(circle.is_deleted, EntityKind.CIRCLE), *leader_rules(actor, circle)]


async def membership_rules(
    actor: User,
    circle: Optional[Circle],
    members: CircleMemberPort,
) -> List[Rule]:
    """
    Membership gate for content inside a circle.

    Global boards and administrators skip the gate. A missing membership
    row becomes a failing rule, so it is reported in its place in the
    evaluation order.
    """
    if circle is None or has_override(actor.roles):
        return []
    member = await members.find_by_user_and_circle(actor.id, circle.id)
    status = member.status if member is not None else None
    return [CircleMembershipStatusRule(status, frozenset({CircleMemberStatus.MEMBER}))]


def content_override_roles(actor: User, circle: Optional[Circle]) -> Set[Role]:
    """Roles that may manage someone else's post or comment."""
    roles = set(ADMINISTRATIVE_ROLES)
    if circle is not None and circle.leader_id == actor.id:
        roles.add(Role.LEADER_CIRCLE)
    return roles
