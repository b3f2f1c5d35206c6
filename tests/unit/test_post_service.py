"""Unit tests for PostService."""

import uuid

import pytest
import pytest_asyncio

from src.kernel.errors import (
    CannotPerformError,
    ForbiddenError,
    NotAllowedError,
    NotFoundError,
    NotMemberError,
    ValidationFailedError,
)
from src.kernel.models import Board, CircleMemberStatus, Post, Role, UserState


@pytest_asyncio.fixture
async def post(posts, common, circle_board, join, circle) -> Post:
    await join(common, circle, CircleMemberStatus.MEMBER)
    return await posts.save(Post(title="Hello", content="First post", writer_id=common.id, board_id=circle_board.id))


class TestCreatePost:
    """Creating posts."""

    async def test_member_posts_on_circle_board(self, post_service, posts, join, common, circle, circle_board):
        """A circle member may post on the circle's board."""
        await join(common, circle, CircleMemberStatus.MEMBER)

        post = await post_service.create_post(common, circle_board.id, "Hello", "World")

        assert post.writer_id == common.id
        assert await posts.find_by_id(post.id) is not None

    @pytest.mark.parametrize("status", [CircleMemberStatus.AWAIT, CircleMemberStatus.LEAVE])
    async def test_non_member_status_rejected(self, post_service, posts, join, common, circle, circle_board, status):
        """Pending or former members are not members."""
        await join(common, circle, status)

        with pytest.raises(NotMemberError):
            await post_service.create_post(common, circle_board.id, "Hello", "World")
        assert len(posts) == 0

    async def test_missing_membership_row(self, post_service, common, circle_board):
        """A user with no membership row is not a member."""
        with pytest.raises(NotMemberError):
            await post_service.create_post(common, circle_board.id, "Hello", "World")

    async def test_roleless_actor_forbidden_before_membership(self, post_service, posts, make_user, circle_board):
        """A roleless actor is forbidden, not reported as a non-member."""
        with pytest.raises(ForbiddenError):
            await post_service.create_post(make_user(), circle_board.id, "Hello", "World")
        assert len(posts) == 0

    async def test_inactive_actor_forbidden_before_membership(self, post_service, make_user, circle_board):
        """A suspended actor is forbidden, not reported as a non-member."""
        suspended = make_user(Role.COMMON, state=UserState.INACTIVE)

        with pytest.raises(ForbiddenError):
            await post_service.create_post(suspended, circle_board.id, "Hello", "World")

    async def test_admin_skips_membership_gate(self, post_service, admin, circle_board):
        """Administrators post without membership."""
        post = await post_service.create_post(admin, circle_board.id, "Hello", "World")
        assert post.board_id == circle_board.id

    async def test_global_board_needs_no_membership(self, post_service, common, global_board):
        """Global boards have no membership gate."""
        post = await post_service.create_post(common, global_board.id, "Hello", "World")
        assert post.board_id == global_board.id

    async def test_author_roles_enforced(self, post_service, boards, common):
        """The board's author roles are enforced."""
        council_only = await boards.save(Board(name="Council", create_roles=frozenset({Role.COUNCIL}), category="FREE"))

        with pytest.raises(NotAllowedError):
            await post_service.create_post(common, council_only.id, "Hello", "World")

    async def test_deleted_board(self, post_service, boards, common, global_board):
        """Deleted boards take no posts."""
        global_board.mark_deleted()
        await boards.save(global_board)

        with pytest.raises(CannotPerformError, match="board"):
            await post_service.create_post(common, global_board.id, "Hello", "World")

    async def test_invalid_title(self, post_service, common, global_board):
        """Field constraints are checked last."""
        with pytest.raises(ValidationFailedError) as exc_info:
            await post_service.create_post(common, global_board.id, "T" * 256, "World")
        assert exc_info.value.errors[0].startswith("title")

    async def test_missing_board(self, post_service, common):
        """An unknown board is not found."""
        with pytest.raises(NotFoundError):
            await post_service.create_post(common, uuid.uuid4(), "Hello", "World")


class TestReadAndUpdatePost:
    """Reading and editing posts."""

    async def test_deleted_post_stays_readable(self, post_service, posts, common, post):
        """Deleted posts can still be read."""
        post.mark_deleted()
        await posts.save(post)

        found = await post_service.find_post(common, post.id)
        assert found.is_deleted

    async def test_non_member_cannot_read(self, post_service, make_user, post):
        """Circle posts are readable by members only."""
        with pytest.raises(NotMemberError):
            await post_service.find_post(make_user(Role.COMMON), post.id)

    async def test_writer_updates(self, post_service, common, post):
        """The writer may edit their post."""
        updated = await post_service.update_post(common, post.id, "Edited", "Changed")
        assert updated.title == "Edited"

    async def test_admin_cannot_edit_someone_elses_post(self, post_service, posts, admin, post):
        """Editing is for the writer only and nothing changes on refusal."""
        with pytest.raises(NotAllowedError):
            await post_service.update_post(admin, post.id, "Edited", "Changed")
        assert (await posts.find_by_id(post.id)).title == "Hello"

    async def test_update_deleted_post(self, post_service, posts, common, post):
        """A deleted post cannot be edited."""
        post.mark_deleted()
        await posts.save(post)

        with pytest.raises(CannotPerformError):
            await post_service.update_post(common, post.id, "Edited", "Changed")


class TestPostLifecycle:
    """Deleting and restoring posts."""

    async def test_writer_deletes_and_restores(self, post_service, common, post):
        """The writer may delete and restore."""
        assert (await post_service.delete_post(common, post.id)).is_deleted
        assert not (await post_service.restore_post(common, post.id)).is_deleted

    async def test_circle_leader_deletes_members_post(self, post_service, leader, leader_member, post):
        """The circle leader manages members' posts."""
        deleted = await post_service.delete_post(leader, post.id)
        assert deleted.is_deleted

    async def test_other_member_not_allowed(self, post_service, posts, join, make_user, circle, post):
        """Another member cannot delete the post."""
        other = make_user(Role.COMMON)
        await join(other, circle, CircleMemberStatus.MEMBER)

        with pytest.raises(NotAllowedError):
            await post_service.delete_post(other, post.id)
        assert not (await posts.find_by_id(post.id)).is_deleted

    async def test_leader_of_another_circle_not_allowed(self, post_service, join, other_leader, circle, post):
        """Leading another circle grants nothing here."""
        await join(other_leader, circle, CircleMemberStatus.MEMBER)

        with pytest.raises(NotAllowedError):
            await post_service.delete_post(other_leader, post.id)

    async def test_admin_deletes_without_membership(self, post_service, admin, post):
        """Administrators need no membership."""
        assert (await post_service.delete_post(admin, post.id)).is_deleted

    async def test_restore_live_post(self, post_service, common, post):
        """A live post cannot be restored."""
        with pytest.raises(CannotPerformError):
            await post_service.restore_post(common, post.id)

    async def test_deleted_circle(self, post_service, circles, common, circle, post):
        """Posts in a deleted circle cannot be deleted."""
        circle.mark_deleted()
        await circles.save(circle)

        with pytest.raises(CannotPerformError, match="circle"):
            await post_service.delete_post(common, post.id)

    async def test_restore_in_deleted_circle_by_non_member(
        self, post_service, posts, circles, make_user, circle, post,
    ):
        """The deleted circle is reported before missing membership."""
        post.mark_deleted()
        await posts.save(post)
        circle.mark_deleted()
        await circles.save(circle)

        with pytest.raises(CannotPerformError, match="circle"):
            await post_service.restore_post(make_user(Role.COMMON), post.id)
        assert (await posts.find_by_id(post.id)).is_deleted
