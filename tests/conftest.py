"""
Pytest fixtures for Circlegate tests.

Unit tests run the use cases against the in-memory adapters; integration
tests get a throwaway SQLite database.
"""

import uuid
from typing import AsyncGenerator, Awaitable, Callable, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from src.database import create_engine, create_session_maker, init_db
from src.kernel.models import (
    Board,
    Circle,
    CircleMember,
    CircleMemberStatus,
    Role,
    User,
    UserState,
)
from src.persistence.memory import (
    InMemoryBoardRepository,
    InMemoryCircleMemberRepository,
    InMemoryCircleRepository,
    InMemoryCommentRepository,
    InMemoryLockerLogRepository,
    InMemoryLockerRepository,
    InMemoryPostRepository,
    InMemoryUserRepository,
)
from src.services import (
    BoardService,
    CircleService,
    CommentService,
    LockerService,
    PostService,
)

UserFactory = Callable[..., User]
MemberFactory = Callable[[User, Circle, CircleMemberStatus], Awaitable[CircleMember]]


# In-memory repositories

@pytest.fixture
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def circles() -> InMemoryCircleRepository:
    return InMemoryCircleRepository()


@pytest.fixture
def members() -> InMemoryCircleMemberRepository:
    return InMemoryCircleMemberRepository()


@pytest.fixture
def boards() -> InMemoryBoardRepository:
    return InMemoryBoardRepository()


@pytest.fixture
def posts() -> InMemoryPostRepository:
    return InMemoryPostRepository()


@pytest.fixture
def comments() -> InMemoryCommentRepository:
    return InMemoryCommentRepository()


@pytest.fixture
def lockers() -> InMemoryLockerRepository:
    return InMemoryLockerRepository()


@pytest.fixture
def locker_logs() -> InMemoryLockerLogRepository:
    return InMemoryLockerLogRepository()


# Actors

@pytest.fixture
def make_user() -> UserFactory:
    """Build an actor; ACTIVE with the given roles unless told otherwise."""

    def _make(*roles: Role, state: UserState = UserState.ACTIVE, email: Optional[str] = None) -> User:
        user_id = uuid.uuid4()
        return User(
            id=user_id,
            email=email or f"{user_id.hex[:8]}@example.com",
            name="Test User",
            roles=frozenset(roles),
            state=state,
        )

    return _make


@pytest.fixture
def admin(make_user: UserFactory) -> User:
    return make_user(Role.ADMIN)


@pytest.fixture
def common(make_user: UserFactory) -> User:
    return make_user(Role.COMMON)


@pytest.fixture
def leader(make_user: UserFactory) -> User:
    return make_user(Role.LEADER_CIRCLE, Role.COMMON)


@pytest.fixture
def other_leader(make_user: UserFactory) -> User:
    return make_user(Role.LEADER_CIRCLE, Role.COMMON)


# Circles and boards

@pytest_asyncio.fixture
async def circle(circles: InMemoryCircleRepository, leader: User) -> Circle:
    return await circles.save(Circle(name="Robotics", leader_id=leader.id))


@pytest.fixture
def join(members: InMemoryCircleMemberRepository) -> MemberFactory:
    """Store a membership row for (user, circle) with the given status."""

    async def _join(user: User, circle: Circle, status: CircleMemberStatus) -> CircleMember:
        return await members.save(CircleMember(user_id=user.id, circle_id=circle.id, status=status))

    return _join


@pytest_asyncio.fixture
async def leader_member(join: MemberFactory, leader: User, circle: Circle) -> CircleMember:
    return await join(leader, circle, CircleMemberStatus.MEMBER)


@pytest_asyncio.fixture
async def global_board(boards: InMemoryBoardRepository) -> Board:
    return await boards.save(Board(
        name="Free board",
        create_roles=frozenset({Role.COMMON}),
        category="FREE",
    ))


@pytest_asyncio.fixture
async def circle_board(boards: InMemoryBoardRepository, circle: Circle) -> Board:
    return await boards.save(Board(
        name="Robotics board",
        create_roles=frozenset({Role.COMMON}),
        category="CIRCLE",
        circle_id=circle.id,
    ))


# Services

@pytest.fixture
def board_service(boards, circles, members, posts) -> BoardService:
    return BoardService(boards, circles, members, posts)


@pytest.fixture
def post_service(posts, boards, circles, members) -> PostService:
    return PostService(posts, boards, circles, members)


@pytest.fixture
def comment_service(comments, posts, boards, circles, members) -> CommentService:
    return CommentService(comments, posts, boards, circles, members)


@pytest.fixture
def circle_service(circles, members) -> CircleService:
    return CircleService(circles, members)


@pytest.fixture
def locker_service(lockers, users, locker_logs) -> LockerService:
    return LockerService(lockers, users, locker_logs)


# SQLite

@pytest_asyncio.fixture
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a file-backed SQLite engine with all tables."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'circlegate_test.db'}", echo=False)
    await init_db(bind=engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_maker = create_session_maker(db_engine)

    async with session_maker() as session:
        yield session
        await session.rollback()
