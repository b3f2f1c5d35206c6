"""Unit tests for the locker state machine."""

import pytest
import pytest_asyncio

from src.kernel.errors import CannotPerformError, ConflictError, NotAllowedError
from src.kernel.models import Locker, LockerLogAction, LockerState, Role
from src.orchestration.locker_actions import apply_locker_action


@pytest_asyncio.fixture
async def locker(lockers) -> Locker:
    return await lockers.save(Locker(locker_number=12))


@pytest_asyncio.fixture
async def used_locker(lockers, common) -> Locker:
    return await lockers.save(Locker(locker_number=13, state=LockerState.USED, owner_id=common.id))


class TestRegister:
    """Registering a locker."""

    async def test_register_available_locker(self, lockers, locker, common):
        """An available locker is taken by the requester."""
        updated = await apply_locker_action(LockerLogAction.REGISTER, locker, None, common, lockers)

        assert updated.owner_id == common.id
        assert updated.state == LockerState.USED
        assert updated.version == locker.version + 1
        # The fetched locker is left untouched
        assert locker.state == LockerState.AVAILABLE
        assert (await lockers.find_by_id(locker.id)).owner_id == common.id

    async def test_register_used_locker_fails(self, lockers, used_locker, common, make_user):
        """A used locker is already in use."""
        requester = make_user(Role.COMMON)

        with pytest.raises(CannotPerformError, match="already in use"):
            await apply_locker_action(LockerLogAction.REGISTER, used_locker, common, requester, lockers)

    async def test_register_disabled_locker_fails(self, lockers, common):
        """A disabled locker cannot be registered."""
        disabled = await lockers.save(Locker(locker_number=14, is_active=False))

        with pytest.raises(CannotPerformError, match="disabled"):
            await apply_locker_action(LockerLogAction.REGISTER, disabled, None, common, lockers)

    async def test_requester_may_hold_one_locker(self, lockers, locker, used_locker, common):
        """A requester already holding a locker is refused."""
        with pytest.raises(CannotPerformError, match="already holds"):
            await apply_locker_action(LockerLogAction.REGISTER, locker, None, common, lockers)

        assert (await lockers.find_by_id(locker.id)).state == LockerState.AVAILABLE


class TestReturn:
    """Returning a locker."""

    async def test_register_then_return_by_owner(self, lockers, locker, common):
        """The owner can return what they registered."""
        registered = await apply_locker_action(LockerLogAction.REGISTER, locker, None, common, lockers)

        returned = await apply_locker_action(LockerLogAction.RETURN, registered, common, common, lockers)

        assert returned.owner_id is None
        assert returned.state == LockerState.AVAILABLE

    async def test_return_available_locker_fails_before_role_check(self, lockers, locker, admin):
        """State is checked before the actor's authority."""
        with pytest.raises(CannotPerformError, match="not currently in use"):
            await apply_locker_action(LockerLogAction.RETURN, locker, None, admin, lockers)

        stored = await lockers.find_by_id(locker.id)
        assert stored.state == LockerState.AVAILABLE
        assert stored.version == locker.version

    async def test_return_by_stranger_not_allowed(self, lockers, used_locker, common, make_user):
        """Someone else's locker cannot be returned by a non-admin."""
        stranger = make_user(Role.COUNCIL)

        with pytest.raises(NotAllowedError):
            await apply_locker_action(LockerLogAction.RETURN, used_locker, common, stranger, lockers)

        stored = await lockers.find_by_id(used_locker.id)
        assert stored.state == LockerState.USED
        assert stored.owner_id == common.id

    async def test_admin_returns_on_behalf_of_owner(self, lockers, used_locker, common, admin):
        """Administrators may return on the owner's behalf."""
        returned = await apply_locker_action(LockerLogAction.RETURN, used_locker, common, admin, lockers)
        assert returned.state == LockerState.AVAILABLE


class TestEnableDisable:
    """Administrative activation switches."""

    async def test_disable_keeps_occupancy(self, lockers, used_locker, common, admin):
        """Disabling keeps the owner and state."""
        disabled = await apply_locker_action(LockerLogAction.DISABLE, used_locker, common, admin, lockers)

        assert not disabled.is_active
        assert disabled.state == LockerState.USED
        assert disabled.owner_id == common.id

    async def test_enable_disabled_locker(self, lockers, admin):
        """A disabled locker can be enabled."""
        disabled = await lockers.save(Locker(locker_number=20, is_active=False))

        enabled = await apply_locker_action(LockerLogAction.ENABLE, disabled, None, admin, lockers)
        assert enabled.is_active

    async def test_enable_enabled_locker_fails(self, lockers, locker, admin):
        """Enabling twice cannot be performed."""
        with pytest.raises(CannotPerformError, match="already enabled"):
            await apply_locker_action(LockerLogAction.ENABLE, locker, None, admin, lockers)

    @pytest.mark.parametrize("action", [LockerLogAction.ENABLE, LockerLogAction.DISABLE])
    async def test_administrators_only(self, lockers, locker, make_user, action):
        """Non-administrators cannot switch lockers."""
        council = make_user(Role.COUNCIL, Role.LEADER_CIRCLE)

        with pytest.raises(NotAllowedError):
            await apply_locker_action(action, locker, None, council, lockers)


class TestPersistence:
    """Outcomes of the versioned store write."""

    async def test_vanished_row_has_no_effect(self, lockers, locker, common):
        """A vanished row returns None."""
        lockers.delete(locker.id)

        result = await apply_locker_action(LockerLogAction.REGISTER, locker, None, common, lockers)

        assert result is None
        assert await lockers.find_by_id(locker.id) is None

    async def test_second_concurrent_register_conflicts(self, lockers, locker, common, make_user):
        """A register from a stale copy conflicts."""
        rival = make_user(Role.COMMON)
        stale = await lockers.find_by_id(locker.id)

        await apply_locker_action(LockerLogAction.REGISTER, locker, None, common, lockers)

        with pytest.raises(ConflictError):
            await apply_locker_action(LockerLogAction.REGISTER, stale, None, rival, lockers)

        assert (await lockers.find_by_id(locker.id)).owner_id == common.id
