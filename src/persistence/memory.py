"""
In-memory adapters for the storage ports.

Entities are copied on the way in and on the way out, so a use case that
mutates a fetched entity changes nothing until it calls `save`, just like
a real store.

Example:
    users = InMemoryUserRepository()
    await users.save(user)
    fetched = await users.find_by_id(user.id)
    users.clear()  # Reset between tests
"""

import uuid
from typing import Dict, Generic, List, Optional, Sequence, TypeVar

from src.kernel.errors import ConflictError
from src.kernel.models import (
    Board,
    Circle,
    CircleMember,
    Comment,
    DomainModel,
    Locker,
    LockerLog,
    Post,
    User,
)

EntityT = TypeVar("EntityT", bound=DomainModel)


class _InMemoryRepository(Generic[EntityT]):
    """Keyed store shared by every in-memory adapter."""

    def __init__(self) -> None:
        self._items: Dict[uuid.UUID, EntityT] = {}

    async def find_by_id(self, entity_id: uuid.UUID) -> Optional[EntityT]:
        item = self._items.get(entity_id)
        return item.model_copy(deep=True) if item is not None else None

    async def save(self, entity: EntityT) -> EntityT:
        self._items[entity.id] = entity.model_copy(deep=True)
        return entity.model_copy(deep=True)

    def _all(self) -> List[EntityT]:
        return [item.model_copy(deep=True) for item in self._items.values()]

    def delete(self, entity_id: uuid.UUID) -> None:
        """Remove a row outright, as a concurrent hard delete would."""
        self._items.pop(entity_id, None)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


class InMemoryUserRepository(_InMemoryRepository[User]):
    pass


class InMemoryCircleRepository(_InMemoryRepository[Circle]):
    pass


class InMemoryCircleMemberRepository(_InMemoryRepository[CircleMember]):
    async def find_by_user_and_circle(
        self,
        user_id: uuid.UUID,
        circle_id: uuid.UUID,
    ) -> Optional[CircleMember]:
        for member in self._all():
            if member.user_id == user_id and member.circle_id == circle_id:
                return member
        return None

    async def find_by_user(self, user_id: uuid.UUID) -> List[CircleMember]:
        return [member for member in self._all() if member.user_id == user_id]


class InMemoryBoardRepository(_InMemoryRepository[Board]):
    async def find_global(self) -> List[Board]:
        return [b for b in self._all() if b.circle_id is None and not b.is_deleted]

    async def find_by_circle_ids(self, circle_ids: Sequence[uuid.UUID]) -> List[Board]:
        wanted = set(circle_ids)
        return [b for b in self._all() if b.circle_id in wanted and not b.is_deleted]


class InMemoryPostRepository(_InMemoryRepository[Post]):
    async def find_recent_by_board(self, board_id: uuid.UUID, limit: int) -> List[Post]:
        # Insertion order stands in for creation time
        posts = [p for p in self._all() if p.board_id == board_id and not p.is_deleted]
        return list(reversed(posts))[:limit]


class InMemoryCommentRepository(_InMemoryRepository[Comment]):
    pass


class InMemoryLockerRepository(_InMemoryRepository[Locker]):
    async def find_by_owner(self, owner_id: uuid.UUID) -> Optional[Locker]:
        for locker in self._all():
            if locker.owner_id == owner_id:
                return locker
        return None

    async def update(self, locker: Locker) -> Optional[Locker]:
        stored = self._items.get(locker.id)
        if stored is None:
            return None
        if stored.version != locker.version:
            raise ConflictError(f"Locker #{locker.locker_number} was modified concurrently")
        updated = locker.model_copy(update={"version": locker.version + 1}, deep=True)
        self._items[locker.id] = updated
        return updated.model_copy(deep=True)


class InMemoryLockerLogRepository:
    def __init__(self) -> None:
        self._logs: List[LockerLog] = []

    async def create(self, log: LockerLog) -> LockerLog:
        self._logs.append(log.model_copy())
        return log

    async def find_by_locker_number(self, locker_number: int) -> List[LockerLog]:
        return [log.model_copy() for log in self._logs if log.locker_number == locker_number]

    def clear(self) -> None:
        self._logs.clear()

    def __len__(self) -> int:
        return len(self._logs)
