"""
Circle membership status transitions.

Valid transitions and who may trigger them are defined here. A fresh
application creates an AWAIT row; every later change moves the same row.
"""

from enum import Enum
from typing import Dict, FrozenSet, Tuple

from src.kernel.errors import CannotPerformError
from src.kernel.models import CircleMember, CircleMemberStatus


class MembershipActor(str, Enum):
    """Who triggers a membership transition."""
    APPLICANT = "applicant"
    LEADER = "leader"


# (from_status, to_status) -> who may trigger it
_TRANSITIONS: Dict[Tuple[CircleMemberStatus, CircleMemberStatus], FrozenSet[MembershipActor]] = {
    # Re-applying after a rejection or after leaving
    (CircleMemberStatus.REJECT, CircleMemberStatus.AWAIT): frozenset({MembershipActor.APPLICANT}),
    (CircleMemberStatus.LEAVE, CircleMemberStatus.AWAIT): frozenset({MembershipActor.APPLICANT}),
    (CircleMemberStatus.MEMBER, CircleMemberStatus.LEAVE): frozenset({MembershipActor.APPLICANT}),
    # Leader decisions
    (CircleMemberStatus.AWAIT, CircleMemberStatus.MEMBER): frozenset({MembershipActor.LEADER}),
    (CircleMemberStatus.AWAIT, CircleMemberStatus.REJECT): frozenset({MembershipActor.LEADER}),
    (CircleMemberStatus.MEMBER, CircleMemberStatus.DROP): frozenset({MembershipActor.LEADER}),
}


def can_transition(
    actor: MembershipActor,
    from_status: CircleMemberStatus,
    to_status: CircleMemberStatus,
) -> bool:
    """Check if `actor` may move a membership from_status -> to_status."""
    return actor in _TRANSITIONS.get((from_status, to_status), frozenset())


def transition_member(
    member: CircleMember,
    to_status: CircleMemberStatus,
    actor: MembershipActor,
) -> CircleMember:
    """Move a membership to a new status or raise CannotPerformError."""
    if not can_transition(actor, member.status, to_status):
        raise CannotPerformError(
            f"Invalid membership transition: {member.status.value} -> {to_status.value}"
        )
    member.status = to_status
    return member
