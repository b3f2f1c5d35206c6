"""
Comment use cases.
"""

import uuid
from typing import Optional, Tuple

from src.kernel.errors import NotFoundError
from src.kernel.models import Board, Circle, Comment, EntityKind, Post, User
from src.kernel.ports import BoardPort, CircleMemberPort, CirclePort, CommentPort, PostPort
from src.kernel.validation import (
    CommentParentRule,
    ContentsAdminRule,
    EntityIsDeletedRule,
    RuleSet,
    SchemaConstraintRule,
)
from src.logging_config import get_logger, logged_operation
from src.orchestration.lifecycle import (
    Transition,
    actor_rules,
    apply_transition,
    content_override_roles,
    membership_rules,
    transition_rules,
)

logger = get_logger(__name__)


class CommentService:
    """Service for comment operations."""

    def __init__(
        self,
        comments: CommentPort,
        posts: PostPort,
        boards: BoardPort,
        circles: CirclePort,
        members: CircleMemberPort,
    ):
        self.comments = comments
        self.posts = posts
        self.boards = boards
        self.circles = circles
        self.members = members

    async def find_comment(self, comment_id: uuid.UUID) -> Comment:
        comment = await self.comments.find_by_id(comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment

    async def _post_context(self, post_id: uuid.UUID) -> Tuple[Post, Board, Optional[Circle]]:
        post = await self.posts.find_by_id(post_id)
        if post is None:
            raise NotFoundError("Post not found")
        board = await self.boards.find_by_id(post.board_id)
        if board is None:
            raise NotFoundError("Board not found")
        circle = None
        if board.circle_id is not None:
            circle = await self.circles.find_by_id(board.circle_id)
            if circle is None:
                raise NotFoundError("Circle not found")
        return post, board, circle

    async def _scope_rules(self, actor: User, circle: Optional[Circle]) -> RuleSet:
        rules = actor_rules(actor)
        if circle is not None:
            rules.add(EntityIsDeletedRule(circle.is_deleted, EntityKind.CIRCLE))
        return rules.extend(await membership_rules(actor, circle, self.members))

    @logged_operation("comment.create")
    async def create_comment(
        self,
        actor: User,
        post_id: uuid.UUID,
        content: str,
        parent_comment_id: Optional[uuid.UUID] = None,
    ) -> Comment:
        """
        Comment on a post.

        The parent comment may itself be deleted; the post may not.
        """
        post, _, circle = await self._post_context(post_id)

        parent_post_id = None
        if parent_comment_id is not None:
            # A deleted parent is fine; one under another post is not
            parent_post_id = (await self.find_comment(parent_comment_id)).post_id

        comment = Comment.draft(
            content=content,
            writer_id=actor.id,
            post_id=post.id,
            parent_comment_id=parent_comment_id,
        )

        (
            (await self._scope_rules(actor, circle))
            .add(EntityIsDeletedRule(post.is_deleted, EntityKind.POST))
            .add(CommentParentRule(parent_post_id, post.id))
            .add(SchemaConstraintRule(comment))
            .evaluate()
        )

        saved = await self.comments.save(comment)
        logger.info(
            "Comment created",
            extra={"comment_id": str(saved.id), "post_id": str(post.id), "actor_id": str(actor.id)},
        )
        return saved

    @logged_operation("comment.update")
    async def update_comment(
        self,
        actor: User,
        comment_id: uuid.UUID,
        content: str,
    ) -> Comment:
        """Only the writer may edit a comment."""
        comment = await self.find_comment(comment_id)
        post, _, circle = await self._post_context(comment.post_id)

        rules = (
            (await self._scope_rules(actor, circle))
            .add(EntityIsDeletedRule(post.is_deleted, EntityKind.POST))
            .add(EntityIsDeletedRule(comment.is_deleted, EntityKind.COMMENT))
            .add(ContentsAdminRule(actor.roles, actor.id, comment.writer_id, frozenset()))
        )

        edited = comment.model_copy(update={"content": content})

        rules.add(SchemaConstraintRule(edited)).evaluate()

        saved = await self.comments.save(edited)
        logger.info(
            "Comment updated",
            extra={"comment_id": str(saved.id), "actor_id": str(actor.id)},
        )
        return saved

    @logged_operation("comment.delete")
    async def delete_comment(self, actor: User, comment_id: uuid.UUID) -> Comment:
        return await self._transition(actor, comment_id, Transition.DELETE)

    @logged_operation("comment.restore")
    async def restore_comment(self, actor: User, comment_id: uuid.UUID) -> Comment:
        return await self._transition(actor, comment_id, Transition.RESTORE)

    async def _transition(
        self,
        actor: User,
        comment_id: uuid.UUID,
        transition: Transition,
    ) -> Comment:
        comment = await self.find_comment(comment_id)
        post, _, circle = await self._post_context(comment.post_id)

        rules = transition_rules(actor, comment, EntityKind.COMMENT, transition)
        rules.add(EntityIsDeletedRule(post.is_deleted, EntityKind.POST))
        if circle is not None:
            rules.add(EntityIsDeletedRule(circle.is_deleted, EntityKind.CIRCLE))
        rules.extend(await membership_rules(actor, circle, self.members))
        rules.add(ContentsAdminRule(
            actor.roles,
            actor.id,
            comment.writer_id,
            content_override_roles(actor, circle),
        ))
        rules.evaluate()

        apply_transition(comment, transition)
        saved = await self.comments.save(comment)
        logger.info(
            "Comment lifecycle changed",
            extra={"comment_id": str(saved.id), "actor_id": str(actor.id), "transition": transition.value},
        )
        return saved
