"""
Circle lifecycle and membership use cases.
"""

import uuid

from src.kernel.errors import CannotPerformError, NotFoundError
from src.kernel.models import (
    Circle,
    CircleMember,
    CircleMemberStatus,
    EntityKind,
    User,
)
from src.kernel.ports import CircleMemberPort, CirclePort
from src.kernel.validation import EntityIsDeletedRule
from src.logging_config import get_logger, logged_operation
from src.orchestration.lifecycle import (
    Transition,
    actor_rules,
    apply_transition,
    leader_rules,
    transition_rules,
)
from src.orchestration.membership import MembershipActor, transition_member

logger = get_logger(__name__)


class CircleService:
    """
    Service for circle operations.

    Circles are deleted and restored by their leader or an administrator.
    Membership moves through the transition table in
    src.orchestration.membership.
    """

    def __init__(self, circles: CirclePort, members: CircleMemberPort):
        self.circles = circles
        self.members = members

    async def get_circle(self, circle_id: uuid.UUID) -> Circle:
        circle = await self.circles.find_by_id(circle_id)
        if circle is None:
            raise NotFoundError("Circle not found")
        return circle

    async def get_member(self, member_id: uuid.UUID) -> CircleMember:
        member = await self.members.find_by_id(member_id)
        if member is None:
            raise NotFoundError("Circle member not found")
        return member

    @logged_operation("circle.delete")
    async def delete_circle(self, actor: User, circle_id: uuid.UUID) -> Circle:
        return await self._transition(actor, circle_id, Transition.DELETE)

    @logged_operation("circle.restore")
    async def restore_circle(self, actor: User, circle_id: uuid.UUID) -> Circle:
        return await self._transition(actor, circle_id, Transition.RESTORE)

    async def _transition(
        self,
        actor: User,
        circle_id: uuid.UUID,
        transition: Transition,
    ) -> Circle:
        circle = await self.get_circle(circle_id)

        (
            transition_rules(actor, circle, EntityKind.CIRCLE, transition)
            .extend(leader_rules(actor, circle))
            .evaluate()
        )

        apply_transition(circle, transition)
        saved = await self.circles.save(circle)
        logger.info(
            "Circle lifecycle changed",
            extra={"circle_id": str(saved.id), "actor_id": str(actor.id), "transition": transition.value},
        )
        return saved

    @logged_operation("circle.apply")
    async def apply(self, actor: User, circle_id: uuid.UUID) -> CircleMember:
        """Apply to join a circle, or re-apply after a rejection or leaving."""
        circle = await self.get_circle(circle_id)

        (
            actor_rules(actor)
            .add(EntityIsDeletedRule(circle.is_deleted, EntityKind.CIRCLE))
            .evaluate()
        )

        member = await self.members.find_by_user_and_circle(actor.id, circle.id)
        if member is None:
            member = CircleMember(user_id=actor.id, circle_id=circle.id)
        else:
            transition_member(member, CircleMemberStatus.AWAIT, MembershipActor.APPLICANT)

        saved = await self.members.save(member)
        logger.info(
            "Circle application submitted",
            extra={"circle_id": str(circle.id), "actor_id": str(actor.id)},
        )
        return saved

    @logged_operation("circle.leave")
    async def leave(self, actor: User, circle_id: uuid.UUID) -> CircleMember:
        """Leave a circle. The leader cannot leave their own circle."""
        circle = await self.get_circle(circle_id)

        (
            actor_rules(actor)
            .add(EntityIsDeletedRule(circle.is_deleted, EntityKind.CIRCLE))
            .evaluate()
        )

        if circle.leader_id == actor.id:
            raise CannotPerformError("The circle leader cannot leave the circle")

        member = await self.members.find_by_user_and_circle(actor.id, circle.id)
        if member is None:
            raise NotFoundError("Circle member not found")

        transition_member(member, CircleMemberStatus.LEAVE, MembershipActor.APPLICANT)
        return await self.members.save(member)

    @logged_operation("circle.accept")
    async def accept(self, actor: User, member_id: uuid.UUID) -> CircleMember:
        return await self._decide(actor, member_id, CircleMemberStatus.MEMBER)

    @logged_operation("circle.reject")
    async def reject(self, actor: User, member_id: uuid.UUID) -> CircleMember:
        return await self._decide(actor, member_id, CircleMemberStatus.REJECT)

    @logged_operation("circle.drop")
    async def drop(self, actor: User, member_id: uuid.UUID) -> CircleMember:
        return await self._decide(actor, member_id, CircleMemberStatus.DROP)

    async def _decide(
        self,
        actor: User,
        member_id: uuid.UUID,
        to_status: CircleMemberStatus,
    ) -> CircleMember:
        member = await self.get_member(member_id)
        circle = await self.get_circle(member.circle_id)

        (
            actor_rules(actor)
            .add(EntityIsDeletedRule(circle.is_deleted, EntityKind.CIRCLE))
            .extend(leader_rules(actor, circle))
            .evaluate()
        )

        if to_status == CircleMemberStatus.DROP and member.user_id == circle.leader_id:
            raise CannotPerformError("The circle leader cannot be dropped")

        transition_member(member, to_status, MembershipActor.LEADER)
        saved = await self.members.save(member)
        logger.info(
            "Circle membership changed",
            extra={
                "circle_id": str(circle.id),
                "member_id": str(saved.id),
                "status": saved.status.value,
                "actor_id": str(actor.id),
            },
        )
        return saved
