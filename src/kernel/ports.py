"""
Storage ports consumed by the use cases.

One protocol per entity kind. The core depends only on these; concrete
adapters live in src.persistence.
"""

import uuid
from typing import List, Optional, Protocol, Sequence

from src.kernel.models import (
    Board,
    Circle,
    CircleMember,
    Comment,
    Locker,
    LockerLog,
    Post,
    User,
)


class UserPort(Protocol):
    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]: ...

    async def save(self, user: User) -> User: ...


class CirclePort(Protocol):
    async def find_by_id(self, circle_id: uuid.UUID) -> Optional[Circle]: ...

    async def save(self, circle: Circle) -> Circle: ...


class CircleMemberPort(Protocol):
    async def find_by_id(self, member_id: uuid.UUID) -> Optional[CircleMember]: ...

    async def find_by_user_and_circle(
        self, user_id: uuid.UUID, circle_id: uuid.UUID
    ) -> Optional[CircleMember]: ...

    async def find_by_user(self, user_id: uuid.UUID) -> List[CircleMember]: ...

    async def save(self, member: CircleMember) -> CircleMember: ...


class BoardPort(Protocol):
    async def find_by_id(self, board_id: uuid.UUID) -> Optional[Board]: ...

    async def find_global(self) -> List[Board]:
        """Live boards that belong to no circle."""
        ...

    async def find_by_circle_ids(self, circle_ids: Sequence[uuid.UUID]) -> List[Board]:
        """Live boards owned by any of the given circles."""
        ...

    async def save(self, board: Board) -> Board: ...


class PostPort(Protocol):
    async def find_by_id(self, post_id: uuid.UUID) -> Optional[Post]: ...

    async def find_recent_by_board(self, board_id: uuid.UUID, limit: int) -> List[Post]:
        """Live posts of a board, newest first."""
        ...

    async def save(self, post: Post) -> Post: ...


class CommentPort(Protocol):
    async def find_by_id(self, comment_id: uuid.UUID) -> Optional[Comment]: ...

    async def save(self, comment: Comment) -> Comment: ...


class LockerPort(Protocol):
    async def find_by_id(self, locker_id: uuid.UUID) -> Optional[Locker]: ...

    async def find_by_owner(self, owner_id: uuid.UUID) -> Optional[Locker]: ...

    async def save(self, locker: Locker) -> Locker: ...

    async def update(self, locker: Locker) -> Optional[Locker]:
        """
        Persist a mutated locker if its stored version still matches.

        Returns the stored locker with its version bumped, or None when the
        row no longer exists. Raises ConflictError when another writer
        updated the row since it was fetched.
        """
        ...


class LockerLogPort(Protocol):
    async def create(self, log: LockerLog) -> LockerLog: ...

    async def find_by_locker_number(self, locker_number: int) -> List[LockerLog]: ...
