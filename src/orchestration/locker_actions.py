"""
Locker state machine.

A locker is AVAILABLE (no owner) or USED (owner present), and separately
enabled or disabled for maintenance. It only changes through one of the
actions below. Each action checks its own rules, mutates, and persists
through the locker port:

    REGISTER  AVAILABLE -> USED       requester becomes owner
    RETURN    USED -> AVAILABLE       owner or administrator
    ENABLE    disabled -> enabled     administrators only
    DISABLE   enabled -> disabled     administrators only

An action returns the stored locker, or None when the store no longer has
the row. The fetched locker is never mutated; a copy is persisted. Version
conflicts surface as ConflictError from the port.
"""

from typing import Awaitable, Callable, Dict, Optional

from src.kernel.errors import CannotPerformError
from src.kernel.models import ADMINISTRATIVE_ROLES, Locker, LockerLogAction, LockerState, User
from src.kernel.ports import LockerPort
from src.kernel.validation import (
    ActorRoleRule,
    ContentsAdminRule,
    LockerActivityRule,
    LockerStateRule,
    RuleSet,
)

LockerActionHandler = Callable[
    [Locker, Optional[User], User, LockerPort],
    Awaitable[Optional[Locker]],
]


async def _register(
    locker: Locker,
    owner: Optional[User],
    requester: User,
    lockers: LockerPort,
) -> Optional[Locker]:
    RuleSet.of(
        LockerActivityRule(locker.is_active, expected=True),
        LockerStateRule(locker.state, LockerState.AVAILABLE),
    ).evaluate()

    held = await lockers.find_by_owner(requester.id)
    if held is not None and held.id != locker.id:
        raise CannotPerformError(f"User already holds locker #{held.locker_number}")

    updated = locker.model_copy()
    updated.register(requester.id)
    return await lockers.update(updated)


async def _return(
    locker: Locker,
    owner: Optional[User],
    requester: User,
    lockers: LockerPort,
) -> Optional[Locker]:
    if owner is None:
        raise CannotPerformError("This locker is not currently in use")

    RuleSet.of(
        ContentsAdminRule(
            requester.roles,
            requester.id,
            owner.id,
            ADMINISTRATIVE_ROLES,
        ),
    ).evaluate()

    updated = locker.model_copy()
    updated.release()
    return await lockers.update(updated)


async def _enable(
    locker: Locker,
    owner: Optional[User],
    requester: User,
    lockers: LockerPort,
) -> Optional[Locker]:
    RuleSet.of(
        ActorRoleRule(requester.roles, frozenset()),
        LockerActivityRule(locker.is_active, expected=False),
    ).evaluate()

    updated = locker.model_copy()
    updated.enable()
    return await lockers.update(updated)


async def _disable(
    locker: Locker,
    owner: Optional[User],
    requester: User,
    lockers: LockerPort,
) -> Optional[Locker]:
    RuleSet.of(
        ActorRoleRule(requester.roles, frozenset()),
        LockerActivityRule(locker.is_active, expected=True),
    ).evaluate()

    updated = locker.model_copy()
    updated.disable()
    return await lockers.update(updated)


_ACTIONS: Dict[LockerLogAction, LockerActionHandler] = {
    LockerLogAction.REGISTER: _register,
    LockerLogAction.RETURN: _return,
    LockerLogAction.ENABLE: _enable,
    LockerLogAction.DISABLE: _disable,
}


async def apply_locker_action(
    action: LockerLogAction,
    locker: Locker,
    owner: Optional[User],
    requester: User,
    lockers: LockerPort,
) -> Optional[Locker]:
    """Dispatch one action by tag. Raises on any failed precondition."""
    return await _ACTIONS[action](locker, owner, requester, lockers)
