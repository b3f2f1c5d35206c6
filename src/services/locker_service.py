"""
Locker use cases.
"""

import uuid
from typing import Optional

from src.kernel.errors import NotFoundError
from src.kernel.models import Locker, LockerLog, LockerLogAction, User
from src.kernel.ports import LockerLogPort, LockerPort, UserPort
from src.logging_config import get_logger, logged_operation
from src.orchestration.lifecycle import actor_rules
from src.orchestration.locker_actions import apply_locker_action

logger = get_logger(__name__)


class LockerService:
    """
    Front for the locker state machine.

    Resolves the locker and its current owner, checks the requester's
    account, dispatches the action and records a log entry when the
    action took effect.
    """

    def __init__(self, lockers: LockerPort, users: UserPort, logs: LockerLogPort):
        self.lockers = lockers
        self.users = users
        self.logs = logs

    async def find_locker(self, locker_id: uuid.UUID) -> Locker:
        locker = await self.lockers.find_by_id(locker_id)
        if locker is None:
            raise NotFoundError("Locker not found")
        return locker

    @logged_operation("locker.update")
    async def update_locker(
        self,
        actor: User,
        locker_id: uuid.UUID,
        action: str,
    ) -> Optional[Locker]:
        """
        Apply one action to a locker.

        Returns:
            The updated locker, or None when the store reported no matching
            row (the action had no effect)

        Raises:
            ValidationFailedError: If `action` is not a known action tag
            ConflictError: If another writer updated the locker first
        """
        locker_action = LockerLogAction.of(action)
        locker = await self.find_locker(locker_id)

        owner: Optional[User] = None
        if locker.owner_id is not None:
            owner = await self.users.find_by_id(locker.owner_id)
            if owner is None:
                raise NotFoundError("Locker owner not found")

        actor_rules(actor).evaluate()

        updated = await apply_locker_action(locker_action, locker, owner, actor, self.lockers)
        if updated is None:
            logger.warning(
                "Locker action had no effect",
                extra={"locker_id": str(locker_id), "action": locker_action.value},
            )
            return None

        await self.logs.create(LockerLog(
            locker_number=updated.locker_number,
            user_id=actor.id,
            action=locker_action,
            message=_log_message(locker_action, owner, actor),
        ))
        logger.info(
            "Locker updated",
            extra={
                "locker_id": str(updated.id),
                "action": locker_action.value,
                "actor_id": str(actor.id),
            },
        )
        return updated


def _log_message(action: LockerLogAction, owner: Optional[User], actor: User) -> str:
    if action == LockerLogAction.RETURN and owner is not None and owner.id != actor.id:
        return f"Returned on behalf of {owner.email}"
    return ""
