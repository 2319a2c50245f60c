"""Test config and shared fixtures."""
import pytest
from typing import AsyncGenerator, List
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from sqlrepo.cache import MemoryCache
from sqlrepo.config import Settings
from sqlrepo.repository import EntityFactory, Repository
from tests.models import Membership, Post, User, UserRead


# In-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class RecordingCache(MemoryCache):
    """MemoryCache that remembers every key passed to put() and forget()."""

    def __init__(self):
        super().__init__()
        self.stored: List[str] = []
        self.forgotten: List[str] = []

    async def put(self, key: str, value, ttl: int) -> None:
        self.stored.append(key)
        await super().put(key, value, ttl)

    async def forget(self, key: str) -> bool:
        self.forgotten.append(key)
        return await super().forget(key)


@pytest.fixture(scope="function")
async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """Create async test database session."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async_session_maker = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(CACHE_ENABLED=True, CACHE_TTL=3600, DEFAULT_PER_PAGE=15)


@pytest.fixture
def cache() -> RecordingCache:
    return RecordingCache()


@pytest.fixture
def factory() -> EntityFactory:
    """Factory with the test models bound by name."""
    return EntityFactory({
        "User": User,
        "Post": Post,
        "Membership": Membership,
        "UserRead": UserRead,
    })


@pytest.fixture
def repository(async_session, cache, factory, test_settings) -> Repository:
    """Unbound repository with a recording cache."""
    return Repository(async_session, cache=cache, factory=factory, settings=test_settings)


@pytest.fixture
async def sample_users(async_session: AsyncSession) -> List[User]:
    """Three users inserted directly through the session."""
    users = [
        User(id=1, name="alice", email="alice@example.com"),
        User(id=2, name="bob", email="bob@example.com"),
        User(id=3, name="carol", email="carol@example.com"),
    ]
    async_session.add_all(users)
    await async_session.commit()
    return users


@pytest.fixture
async def sample_posts(async_session: AsyncSession, sample_users: List[User]) -> List[Post]:
    """Posts for alice (3) and bob (1)."""
    posts = [
        Post(id=1, title="first", views=10, published=True, user_id=1),
        Post(id=2, title="second", views=30, published=False, user_id=1),
        Post(id=3, title="third", views=20, published=True, user_id=1),
        Post(id=4, title="bobs", views=5, published=True, user_id=2),
    ]
    async_session.add_all(posts)
    await async_session.commit()
    return posts
