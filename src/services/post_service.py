"""
Post use cases.
"""

import uuid
from typing import Optional, Tuple

from src.kernel.errors import NotFoundError
from src.kernel.models import Board, Circle, EntityKind, Post, User
from src.kernel.ports import BoardPort, CircleMemberPort, CirclePort, PostPort
from src.kernel.validation import (
    ActorRoleRule,
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


class PostService:
    """
    Service for post operations.

    Posts on a circle board additionally require MEMBER status in that
    circle unless the actor carries the administrative override.
    """

    def __init__(
        self,
        posts: PostPort,
        boards: BoardPort,
        circles: CirclePort,
        members: CircleMemberPort,
    ):
        self.posts = posts
        self.boards = boards
        self.circles = circles
        self.members = members

    async def get_post(self, post_id: uuid.UUID) -> Post:
        post = await self.posts.find_by_id(post_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    async def _board_and_circle(self, board_id: uuid.UUID) -> Tuple[Board, Optional[Circle]]:
        board = await self.boards.find_by_id(board_id)
        if board is None:
            raise NotFoundError("Board not found")
        if board.circle_id is None:
            return board, None
        circle = await self.circles.find_by_id(board.circle_id)
        if circle is None:
            raise NotFoundError("Circle not found")
        return board, circle

    async def _scope_rules(self, actor: User, board: Board, circle: Optional[Circle]) -> RuleSet:
        """Actor checks, live board, then live circle and membership for circle boards."""
        rules = actor_rules(actor).add(EntityIsDeletedRule(board.is_deleted, EntityKind.BOARD))
        if circle is not None:
            rules.add(EntityIsDeletedRule(circle.is_deleted, EntityKind.CIRCLE))
        return rules.extend(await membership_rules(actor, circle, self.members))

    @logged_operation("post.find")
    async def find_post(self, actor: User, post_id: uuid.UUID) -> Post:
        """Read a post. Deleted posts stay readable."""
        post = await self.get_post(post_id)
        board, circle = await self._board_and_circle(post.board_id)

        (await self._scope_rules(actor, board, circle)).evaluate()
        return post

    @logged_operation("post.create")
    async def create_post(
        self,
        actor: User,
        board_id: uuid.UUID,
        title: str,
        content: str,
    ) -> Post:
        """
        Create a post on a board.

        Raises:
            NotFoundError: If the board or its circle does not exist
            NotMemberError: If the actor is not a member of the board's circle
            NotAllowedError: If the actor's roles may not author on this board
        """
        board, circle = await self._board_and_circle(board_id)

        post = Post.draft(
            title=title,
            content=content,
            writer_id=actor.id,
            board_id=board.id,
        )

        (
            (await self._scope_rules(actor, board, circle))
            .add(ActorRoleRule(actor.roles, board.create_roles))
            .add(SchemaConstraintRule(post))
            .evaluate()
        )

        saved = await self.posts.save(post)
        logger.info(
            "Post created",
            extra={"post_id": str(saved.id), "board_id": str(board.id), "actor_id": str(actor.id)},
        )
        return saved

    @logged_operation("post.update")
    async def update_post(
        self,
        actor: User,
        post_id: uuid.UUID,
        title: str,
        content: str,
    ) -> Post:
        """Only the writer may edit a post."""
        post = await self.get_post(post_id)
        board, circle = await self._board_and_circle(post.board_id)

        rules = (
            (await self._scope_rules(actor, board, circle))
            .add(EntityIsDeletedRule(post.is_deleted, EntityKind.POST))
            .add(ContentsAdminRule(actor.roles, actor.id, post.writer_id, frozenset()))
        )

        edited = post.model_copy(update={"title": title, "content": content})

        rules.add(SchemaConstraintRule(edited)).evaluate()

        saved = await self.posts.save(edited)
        logger.info(
            "Post updated",
            extra={"post_id": str(saved.id), "actor_id": str(actor.id)},
        )
        return saved

    @logged_operation("post.delete")
    async def delete_post(self, actor: User, post_id: uuid.UUID) -> Post:
        return await self._transition(actor, post_id, Transition.DELETE)

    @logged_operation("post.restore")
    async def restore_post(self, actor: User, post_id: uuid.UUID) -> Post:
        return await self._transition(actor, post_id, Transition.RESTORE)

    async def _transition(
        self,
        actor: User,
        post_id: uuid.UUID,
        transition: Transition,
    ) -> Post:
        post = await self.get_post(post_id)
        board, circle = await self._board_and_circle(post.board_id)

        rules = transition_rules(actor, post, EntityKind.POST, transition)
        rules.add(EntityIsDeletedRule(board.is_deleted, EntityKind.BOARD))
        if circle is not None:
            rules.add(EntityIsDeletedRule(circle.is_deleted, EntityKind.CIRCLE))
        rules.extend(await membership_rules(actor, circle, self.members))
        rules.add(ContentsAdminRule(
            actor.roles,
            actor.id,
            post.writer_id,
            content_override_roles(actor, circle),
        ))
        rules.evaluate()

        apply_transition(post, transition)
        saved = await self.posts.save(post)
        logger.info(
            "Post lifecycle changed",
            extra={"post_id": str(saved.id), "actor_id": str(actor.id), "transition": transition.value},
        )
        return saved
