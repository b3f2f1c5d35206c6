"""Unit tests for CommentService."""

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
from src.kernel.models import CircleMemberStatus, Comment, Post, Role, UserState


@pytest_asyncio.fixture
async def post(posts, join, common, circle, circle_board) -> Post:
    await join(common, circle, CircleMemberStatus.MEMBER)
    return await posts.save(Post(title="Hello", content="First post", writer_id=common.id, board_id=circle_board.id))


@pytest_asyncio.fixture
async def comment(comments, common, post) -> Comment:
    return await comments.save(Comment(content="Nice", writer_id=common.id, post_id=post.id))


class TestCreateComment:
    """Creating comments and replies."""

    async def test_member_comments(self, comment_service, comments, common, post):
        """A circle member may comment."""
        created = await comment_service.create_comment(common, post.id, "Agreed")

        assert created.post_id == post.id
        assert await comments.find_by_id(created.id) is not None

    async def test_reply_to_deleted_parent_allowed(self, comment_service, comments, common, post, comment):
        """Replying under a deleted parent is allowed."""
        comment.mark_deleted()
        await comments.save(comment)

        reply = await comment_service.create_comment(common, post.id, "Reply", parent_comment_id=comment.id)
        assert reply.parent_comment_id == comment.id

    async def test_reply_to_parent_on_other_post_fails(
        self, comment_service, posts, comments, common, circle_board, post,
    ):
        """A parent comment from another post is refused."""
        other_post = await posts.save(
            Post(title="Other", content="Second post", writer_id=common.id, board_id=circle_board.id),
        )
        foreign = await comments.save(Comment(content="Elsewhere", writer_id=common.id, post_id=other_post.id))

        with pytest.raises(CannotPerformError, match="another post"):
            await comment_service.create_comment(common, post.id, "Reply", parent_comment_id=foreign.id)
        assert len(comments) == 1

    async def test_comment_on_deleted_post_fails(self, comment_service, posts, common, post):
        """A deleted post takes no comments."""
        post.mark_deleted()
        await posts.save(post)

        with pytest.raises(CannotPerformError, match="post"):
            await comment_service.create_comment(common, post.id, "Too late")

    async def test_missing_parent(self, comment_service, common, post):
        """An unknown parent is not found."""
        with pytest.raises(NotFoundError):
            await comment_service.create_comment(common, post.id, "Reply", parent_comment_id=uuid.uuid4())

    async def test_missing_post(self, comment_service, common):
        """An unknown post is not found."""
        with pytest.raises(NotFoundError):
            await comment_service.create_comment(common, uuid.uuid4(), "Hello")

    async def test_non_member_rejected(self, comment_service, join, make_user, circle, post):
        """Applicants cannot comment yet."""
        applicant = make_user(Role.COMMON)
        await join(applicant, circle, CircleMemberStatus.AWAIT)

        with pytest.raises(NotMemberError):
            await comment_service.create_comment(applicant, post.id, "Hi")

    async def test_suspended_actor_forbidden_before_membership(self, comment_service, make_user, post):
        """A suspended non-member is forbidden, not reported as a non-member."""
        suspended = make_user(Role.COMMON, state=UserState.INACTIVE)

        with pytest.raises(ForbiddenError):
            await comment_service.create_comment(suspended, post.id, "Hi")

    async def test_content_too_long(self, comment_service, comments, common, post):
        """Overlong content fails validation and nothing is saved."""
        with pytest.raises(ValidationFailedError):
            await comment_service.create_comment(common, post.id, "x" * 5001)
        assert len(comments) == 0


class TestUpdateComment:
    """Editing comments."""

    async def test_writer_updates(self, comment_service, common, comment):
        """The writer may edit."""
        updated = await comment_service.update_comment(common, comment.id, "Edited")
        assert updated.content == "Edited"

    async def test_non_writer_not_allowed(self, comment_service, comments, admin, comment):
        """Nobody else may edit and the stored text is unchanged."""
        with pytest.raises(NotAllowedError):
            await comment_service.update_comment(admin, comment.id, "Edited")
        assert (await comments.find_by_id(comment.id)).content == "Nice"

    async def test_deleted_comment(self, comment_service, comments, common, comment):
        """A deleted comment cannot be edited."""
        comment.mark_deleted()
        await comments.save(comment)

        with pytest.raises(CannotPerformError, match="comment"):
            await comment_service.update_comment(common, comment.id, "Edited")


class TestCommentLifecycle:
    """Deleting, restoring and finding comments."""

    async def test_admin_deletes_and_restores(self, comment_service, admin, comment):
        """Administrators may delete and restore."""
        assert (await comment_service.delete_comment(admin, comment.id)).is_deleted
        assert not (await comment_service.restore_comment(admin, comment.id)).is_deleted

    async def test_leader_deletes_in_own_circle(self, comment_service, leader, leader_member, comment):
        """The circle leader manages comments in the circle."""
        assert (await comment_service.delete_comment(leader, comment.id)).is_deleted

    async def test_restore_live_comment(self, comment_service, common, comment):
        """A live comment cannot be restored."""
        with pytest.raises(CannotPerformError, match="not deleted"):
            await comment_service.restore_comment(common, comment.id)

    async def test_other_member_not_allowed(self, comment_service, join, make_user, circle, comment):
        """Another member cannot delete the comment."""
        other = make_user(Role.COMMON)
        await join(other, circle, CircleMemberStatus.MEMBER)

        with pytest.raises(NotAllowedError):
            await comment_service.delete_comment(other, comment.id)

    async def test_find_comment(self, comment_service, comment):
        """A stored comment is found."""
        assert (await comment_service.find_comment(comment.id)).content == "Nice"

    async def test_find_missing_comment(self, comment_service):
        """An unknown comment is not found."""
        with pytest.raises(NotFoundError):
            await comment_service.find_comment(uuid.uuid4())
