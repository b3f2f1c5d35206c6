"""
Board, post and comment models.
"""

import uuid
from typing import FrozenSet, Optional

from pydantic import Field

from src.kernel.models.base import DomainModel, SoftDeleteMixin
from src.kernel.models.user import Role

# Organization-wide notice board; only administrators may delete or restore it
BOARD_CATEGORY_APP_NOTICE = "APP_NOTICE"


class Board(DomainModel, SoftDeleteMixin):
    """A board, either global (no circle) or owned by one circle."""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=5000)
    create_roles: FrozenSet[Role] = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=50)
    circle_id: Optional[uuid.UUID] = None

    @property
    def is_notice(self) -> bool:
        return self.category == BOARD_CATEGORY_APP_NOTICE

    def __repr__(self) -> str:
        return f"<Board {self.name} category={self.category} deleted={self.is_deleted}>"


class Post(DomainModel, SoftDeleteMixin):
    """A post written on a board."""

    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1, max_length=20000)
    writer_id: uuid.UUID
    board_id: uuid.UUID

    def __repr__(self) -> str:
        return f"<Post {self.id} board={self.board_id} deleted={self.is_deleted}>"


class Comment(DomainModel, SoftDeleteMixin):
    """A comment on a post, optionally nested under a parent comment."""

    content: str = Field(..., min_length=1, max_length=5000)
    writer_id: uuid.UUID
    post_id: uuid.UUID
    parent_comment_id: Optional[uuid.UUID] = None

    def __repr__(self) -> str:
        return f"<Comment {self.id} by {self.writer_id}>"
