"""
Board use cases.
"""

import uuid
from typing import FrozenSet, List, Optional

from src.kernel.errors import NotFoundError
from src.kernel.models import (
    Board,
    Circle,
    CircleMemberStatus,
    EntityKind,
    Post,
    Role,
    User,
)
from src.kernel.ports import BoardPort, CircleMemberPort, CirclePort, PostPort
from src.kernel.validation import (
    ActorRoleRule,
    EntityIsDeletedRule,
    SchemaConstraintRule,
)
from src.logging_config import get_logger, logged_operation
from src.orchestration.lifecycle import (
    Transition,
    actor_rules,
    apply_transition,
    circle_authority_rules,
    transition_rules,
)

logger = get_logger(__name__)

RECENT_POST_LIMIT = 3


class BoardService:
    """
    Service for board operations.

    Global boards are managed by administrators; circle boards by the
    circle's leader or an administrator. The notice board is
    administrators only.
    """

    def __init__(
        self,
        boards: BoardPort,
        circles: CirclePort,
        members: CircleMemberPort,
        posts: PostPort,
    ):
        self.boards = boards
        self.circles = circles
        self.members = members
        self.posts = posts

    async def get_board(self, board_id: uuid.UUID) -> Board:
        board = await self.boards.find_by_id(board_id)
        if board is None:
            raise NotFoundError("Board not found")
        return board

    async def get_circle(self, circle_id: uuid.UUID) -> Circle:
        circle = await self.circles.find_by_id(circle_id)
        if circle is None:
            raise NotFoundError("Circle not found")
        return circle

    async def _owning_circle(self, board: Board) -> Optional[Circle]:
        if board.circle_id is None:
            return None
        return await self.get_circle(board.circle_id)

    @logged_operation("board.find_all")
    async def find_all_boards(self, actor: User) -> List[Board]:
        """Global boards followed by the boards of every circle the actor is a member of."""
        actor_rules(actor).evaluate()

        joined = [
            member.circle_id
            for member in await self.members.find_by_user(actor.id)
            if member.status == CircleMemberStatus.MEMBER
        ]
        boards = await self.boards.find_global()
        if joined:
            boards.extend(await self.boards.find_by_circle_ids(joined))
        return boards

    @logged_operation("board.create")
    async def create_board(
        self,
        actor: User,
        name: str,
        category: str,
        create_roles: FrozenSet[Role],
        description: Optional[str] = None,
        circle_id: Optional[uuid.UUID] = None,
    ) -> Board:
        """
        Create a board.

        Raises:
            NotFoundError: If the circle does not exist
            ForbiddenError / NotAllowedError / CannotPerformError /
            ValidationFailedError: If a rule fails
        """
        circle = await self.get_circle(circle_id) if circle_id is not None else None

        board = Board.draft(
            name=name,
            description=description,
            create_roles=frozenset(create_roles),
            category=category,
            circle_id=circle_id,
        )

        (
            actor_rules(actor)
            .extend(circle_authority_rules(actor, circle))
            .add(SchemaConstraintRule(board))
            .evaluate()
        )

        saved = await self.boards.save(board)
        logger.info(
            "Board created",
            extra={"board_id": str(saved.id), "actor_id": str(actor.id)},
        )
        return saved

    @logged_operation("board.update")
    async def update_board(
        self,
        actor: User,
        board_id: uuid.UUID,
        name: str,
        category: str,
        create_roles: FrozenSet[Role],
        description: Optional[str] = None,
    ) -> Board:
        board = await self.get_board(board_id)
        circle = await self._owning_circle(board)

        rules = (
            actor_rules(actor)
            .add(EntityIsDeletedRule(board.is_deleted, EntityKind.BOARD))
            .extend(circle_authority_rules(actor, circle))
        )

        edited = board.model_copy(update={
            "name": name,
            "description": description,
            "create_roles": frozenset(create_roles),
            "category": category,
        })

        rules.add(SchemaConstraintRule(edited)).evaluate()

        saved = await self.boards.save(edited)
        logger.info(
            "Board updated",
            extra={"board_id": str(saved.id), "actor_id": str(actor.id)},
        )
        return saved

    @logged_operation("board.delete")
    async def delete_board(self, actor: User, board_id: uuid.UUID) -> Board:
        return await self._transition(actor, board_id, Transition.DELETE)

    @logged_operation("board.restore")
    async def restore_board(self, actor: User, board_id: uuid.UUID) -> Board:
        return await self._transition(actor, board_id, Transition.RESTORE)

    async def _transition(
        self,
        actor: User,
        board_id: uuid.UUID,
        transition: Transition,
    ) -> Board:
        board = await self.get_board(board_id)
        circle = await self._owning_circle(board)

        rules = transition_rules(actor, board, EntityKind.BOARD, transition)
        rules.extend(circle_authority_rules(actor, circle))
        if board.is_notice:
            rules.add(ActorRoleRule(actor.roles, frozenset()))
        rules.evaluate()

        apply_transition(board, transition)
        saved = await self.boards.save(board)
        logger.info(
            "Board lifecycle changed",
            extra={"board_id": str(saved.id), "actor_id": str(actor.id), "transition": transition.value},
        )
        return saved

    @logged_operation("board.recent_posts")
    async def find_recent_posts(
        self,
        actor: User,
        board_id: uuid.UUID,
        limit: int = RECENT_POST_LIMIT,
    ) -> List[Post]:
        """Latest live posts of a board the actor may manage."""
        board = await self.get_board(board_id)
        circle = await self._owning_circle(board)

        (
            actor_rules(actor)
            .add(EntityIsDeletedRule(board.is_deleted, EntityKind.BOARD))
            .extend(circle_authority_rules(actor, circle))
            .evaluate()
        )

        return await self.posts.find_recent_by_board(board.id, limit)
