"""
SQLAlchemy adapters for the storage ports.

Each repository works inside the caller's AsyncSession and flushes, never
commits; the transaction boundary belongs to the caller.
"""

import uuid
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.kernel.errors import ConflictError
from src.kernel.models import (
    Board,
    Circle,
    CircleMember,
    CircleMemberStatus,
    Comment,
    Locker,
    LockerLog,
    LockerLogAction,
    LockerState,
    Post,
    User,
    UserState,
    join_roles,
    parse_roles,
)
from src.logging_config import get_logger
from src.persistence.models import (
    Base,
    BoardRow,
    CircleMemberRow,
    CircleRow,
    CommentRow,
    LockerLogRow,
    LockerRow,
    PostRow,
    UserRow,
)

logger = get_logger(__name__)

RowT = TypeVar("RowT", bound=Base)


async def _upsert(
    session: AsyncSession,
    row_cls: Type[RowT],
    row_id: uuid.UUID,
    values: Dict[str, Any],
) -> RowT:
    """Insert or update one row by primary key and flush."""
    row = await session.get(row_cls, row_id)
    if row is None:
        row = row_cls(id=row_id, **values)
        session.add(row)
    else:
        for key, value in values.items():
            setattr(row, key, value)
    await session.flush()
    return row


def _user(row: UserRow) -> User:
    return User(
        id=row.id,
        email=row.email,
        name=row.name,
        roles=parse_roles(row.roles),
        state=UserState(row.state),
    )


def _circle(row: CircleRow) -> Circle:
    return Circle(
        id=row.id,
        name=row.name,
        description=row.description,
        leader_id=row.leader_id,
        is_deleted=row.is_deleted,
    )


def _member(row: CircleMemberRow) -> CircleMember:
    return CircleMember(
        id=row.id,
        user_id=row.user_id,
        circle_id=row.circle_id,
        status=CircleMemberStatus(row.status),
    )


def _board(row: BoardRow) -> Board:
    return Board(
        id=row.id,
        name=row.name,
        description=row.description,
        create_roles=parse_roles(row.create_roles),
        category=row.category,
        circle_id=row.circle_id,
        is_deleted=row.is_deleted,
    )


def _post(row: PostRow) -> Post:
    return Post(
        id=row.id,
        title=row.title,
        content=row.content,
        writer_id=row.writer_id,
        board_id=row.board_id,
        is_deleted=row.is_deleted,
    )


def _comment(row: CommentRow) -> Comment:
    return Comment(
        id=row.id,
        content=row.content,
        writer_id=row.writer_id,
        post_id=row.post_id,
        parent_comment_id=row.parent_comment_id,
        is_deleted=row.is_deleted,
    )


def _locker(row: LockerRow) -> Locker:
    return Locker(
        id=row.id,
        locker_number=row.locker_number,
        is_active=row.is_active,
        state=LockerState(row.state),
        owner_id=row.owner_id,
        version=row.version,
    )


def _locker_log(row: LockerLogRow) -> LockerLog:
    return LockerLog(
        id=row.id,
        locker_number=row.locker_number,
        user_id=row.user_id,
        action=LockerLogAction(row.action),
        message=row.message,
        created_at=row.created_at,
    )


class SqlUserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        row = await self.session.get(UserRow, user_id)
        return _user(row) if row else None

    async def save(self, user: User) -> User:
        row = await _upsert(self.session, UserRow, user.id, {
            "email": user.email,
            "name": user.name,
            "roles": join_roles(user.roles),
            "state": user.state.value,
        })
        return _user(row)


class SqlCircleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, circle_id: uuid.UUID) -> Optional[Circle]:
        row = await self.session.get(CircleRow, circle_id)
        return _circle(row) if row else None

    async def save(self, circle: Circle) -> Circle:
        row = await _upsert(self.session, CircleRow, circle.id, {
            "name": circle.name,
            "description": circle.description,
            "leader_id": circle.leader_id,
            "is_deleted": circle.is_deleted,
        })
        return _circle(row)


class SqlCircleMemberRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, member_id: uuid.UUID) -> Optional[CircleMember]:
        row = await self.session.get(CircleMemberRow, member_id)
        return _member(row) if row else None

    async def find_by_user_and_circle(
        self,
        user_id: uuid.UUID,
        circle_id: uuid.UUID,
    ) -> Optional[CircleMember]:
        query = select(CircleMemberRow).where(
            CircleMemberRow.user_id == user_id,
            CircleMemberRow.circle_id == circle_id,
        )
        row = (await self.session.execute(query)).scalar_one_or_none()
        return _member(row) if row else None

    async def find_by_user(self, user_id: uuid.UUID) -> List[CircleMember]:
        query = select(CircleMemberRow).where(CircleMemberRow.user_id == user_id)
        result = await self.session.execute(query)
        return [_member(row) for row in result.scalars().all()]

    async def save(self, member: CircleMember) -> CircleMember:
        row = await _upsert(self.session, CircleMemberRow, member.id, {
            "user_id": member.user_id,
            "circle_id": member.circle_id,
            "status": member.status.value,
        })
        return _member(row)


class SqlBoardRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, board_id: uuid.UUID) -> Optional[Board]:
        row = await self.session.get(BoardRow, board_id)
        return _board(row) if row else None

    async def find_global(self) -> List[Board]:
        query = select(BoardRow).where(
            BoardRow.circle_id.is_(None),
            BoardRow.is_deleted.is_(False),
        ).order_by(BoardRow.created_at.asc())
        result = await self.session.execute(query)
        return [_board(row) for row in result.scalars().all()]

    async def find_by_circle_ids(self, circle_ids: Sequence[uuid.UUID]) -> List[Board]:
        if not circle_ids:
            return []
        query = select(BoardRow).where(
            BoardRow.circle_id.in_(list(circle_ids)),
            BoardRow.is_deleted.is_(False),
        ).order_by(BoardRow.created_at.asc())
        result = await self.session.execute(query)
        return [_board(row) for row in result.scalars().all()]

    async def save(self, board: Board) -> Board:
        row = await _upsert(self.session, BoardRow, board.id, {
            "name": board.name,
            "description": board.description,
            "create_roles": join_roles(board.create_roles),
            "category": board.category,
            "circle_id": board.circle_id,
            "is_deleted": board.is_deleted,
        })
        return _board(row)


class SqlPostRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, post_id: uuid.UUID) -> Optional[Post]:
        row = await self.session.get(PostRow, post_id)
        return _post(row) if row else None

    async def find_recent_by_board(self, board_id: uuid.UUID, limit: int) -> List[Post]:
        query = select(PostRow).where(
            PostRow.board_id == board_id,
            PostRow.is_deleted.is_(False),
        ).order_by(PostRow.created_at.desc()).limit(limit)
        result = await self.session.execute(query)
        return [_post(row) for row in result.scalars().all()]

    async def save(self, post: Post) -> Post:
        row = await _upsert(self.session, PostRow, post.id, {
            "title": post.title,
            "content": post.content,
            "writer_id": post.writer_id,
            "board_id": post.board_id,
            "is_deleted": post.is_deleted,
        })
        return _post(row)


class SqlCommentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, comment_id: uuid.UUID) -> Optional[Comment]:
        row = await self.session.get(CommentRow, comment_id)
        return _comment(row) if row else None

    async def save(self, comment: Comment) -> Comment:
        row = await _upsert(self.session, CommentRow, comment.id, {
            "content": comment.content,
            "writer_id": comment.writer_id,
            "post_id": comment.post_id,
            "parent_comment_id": comment.parent_comment_id,
            "is_deleted": comment.is_deleted,
        })
        return _comment(row)


class SqlLockerRepository:
    """
    Locker adapter with an optimistic row-version check.

    `update` only writes when the stored version equals the one the locker
    was read with, so two requesters racing for the same locker cannot
    both succeed.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, locker_id: uuid.UUID) -> Optional[Locker]:
        row = await self.session.get(LockerRow, locker_id, populate_existing=True)
        return _locker(row) if row else None

    async def find_by_owner(self, owner_id: uuid.UUID) -> Optional[Locker]:
        query = (
            select(LockerRow)
            .where(LockerRow.owner_id == owner_id)
            .execution_options(populate_existing=True)
        )
        row = (await self.session.execute(query)).scalars().first()
        return _locker(row) if row else None

    async def save(self, locker: Locker) -> Locker:
        row = await _upsert(self.session, LockerRow, locker.id, {
            "locker_number": locker.locker_number,
            "is_active": locker.is_active,
            "state": locker.state.value,
            "owner_id": locker.owner_id,
            "version": locker.version,
        })
        return _locker(row)

    async def update(self, locker: Locker) -> Optional[Locker]:
        next_version = locker.version + 1
        stmt = (
            update(LockerRow)
            .where(LockerRow.id == locker.id, LockerRow.version == locker.version)
            .values(
                is_active=locker.is_active,
                state=locker.state.value,
                owner_id=locker.owner_id,
                version=next_version,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            exists = await self.session.scalar(select(LockerRow.id).where(LockerRow.id == locker.id))
            if exists is None:
                return None
            logger.info(
                "Locker version conflict",
                extra={"locker_id": str(locker.id), "expected_version": locker.version},
            )
            raise ConflictError(f"Locker #{locker.locker_number} was modified concurrently")
        return locker.model_copy(update={"version": next_version})


class SqlLockerLogRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, log: LockerLog) -> LockerLog:
        row = LockerLogRow(
            id=log.id,
            locker_number=log.locker_number,
            user_id=log.user_id,
            action=log.action.value,
            message=log.message,
            created_at=log.created_at,
        )
        self.session.add(row)
        await self.session.flush()
        return log

    async def find_by_locker_number(self, locker_number: int) -> List[LockerLog]:
        query = select(LockerLogRow).where(
            LockerLogRow.locker_number == locker_number,
        ).order_by(LockerLogRow.created_at.asc())
        result = await self.session.execute(query)
        return [_locker_log(row) for row in result.scalars().all()]
