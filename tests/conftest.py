"""Pytest fixtures for testing."""
import os
import tempfile
from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from datetime import timedelta
from pathlib import Path

# Must be set before any app imports that trigger Settings validation
# (db.session builds its engine at import time)
_DB_DIR = Path(tempfile.mkdtemp(prefix="prompt-feed-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR / 'test.db'}"
os.environ["DEV_MODE"] = "false"
os.environ["REDIS_ENABLED"] = "false"
os.environ["AUTH_JWT_SECRET"] = "test-secret-key-with-at-least-32-bytes"
os.environ.pop("AUTH_JWT_AUDIENCE", None)

import jwt  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncConnection,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core.config import get_settings  # noqa: E402
from core.feed_cache import set_feed_cache  # noqa: E402
from core.redis import RedisClient, set_redis_client  # noqa: E402
from models.base import Base, utcnow  # noqa: E402
from models.enums import AiTool, Category, Difficulty  # noqa: E402
from models.interaction import Bookmark, Upvote  # noqa: E402
from models.prompt import Prompt  # noqa: E402
from models.user import User  # noqa: E402


class FakeRedis:
    """In-memory stand-in for redis.asyncio.Redis covering the commands RedisClient uses."""

    def __init__(self) -> None:
        self.store: dict[str, bytes] = {}
        self.ttls: dict[str, int] = {}

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> bytes | None:
        return self.store.get(key)

    async def setex(self, key: str, seconds: int, value: str | bytes) -> None:
        self.store[key] = value.encode() if isinstance(value, str) else value
        self.ttls[key] = seconds

    async def incr(self, key: str) -> int:
        value = int(self.store.get(key, b"0")) + 1
        self.store[key] = str(value).encode()
        return value

    async def aclose(self) -> None:
        pass


@pytest.fixture(scope="session")
def database_url() -> Generator[str]:
    """
    Database URL for the test session.

    SQLite by default; set TEST_DATABASE=postgres to run against a PostgreSQL
    container instead.
    """
    if os.environ.get("TEST_DATABASE") == "postgres":
        from testcontainers.postgres import PostgresContainer  # noqa: PLC0415

        with PostgresContainer("postgres:16", driver="asyncpg") as postgres:
            yield postgres.get_connection_url()
        return
    yield os.environ["DATABASE_URL"]


@pytest.fixture
async def async_engine(database_url: str) -> AsyncGenerator[AsyncEngine]:
    """Create an async engine for testing."""
    from db.session import configure_sqlite  # noqa: PLC0415

    engine = create_async_engine(database_url, echo=False)
    if database_url.startswith("sqlite"):
        configure_sqlite(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_connection(async_engine: AsyncEngine) -> AsyncGenerator[AsyncConnection]:
    """
    Create a connection with a transaction that will be rolled back after the test.

    This provides test isolation - each test runs in its own transaction
    that is rolled back, so tests don't affect each other.
    """
    async with async_engine.connect() as connection:
        transaction = await connection.begin()
        try:
            yield connection
        finally:
            await transaction.rollback()


@pytest.fixture
async def db_session(db_connection: AsyncConnection) -> AsyncGenerator[AsyncSession]:
    """
    Create an async session bound to the test transaction.

    Uses savepoints, allowing the session's flush/commit and begin_nested()
    to work within our outer test transaction.
    """
    session_factory = async_sessionmaker(
        bind=db_connection,
        class_=AsyncSession,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )

    async with session_factory() as session:
        yield session


@pytest.fixture
def redis_client() -> Generator[RedisClient]:
    """A RedisClient wired to an in-memory Redis, installed as the global client."""
    client = RedisClient("redis://fake:6379")
    client._client = FakeRedis()
    set_redis_client(client)
    yield client
    set_redis_client(None)


@pytest.fixture(autouse=True)
def _reset_feed_cache() -> Generator[None]:
    """Tests start without a global feed cache unless they install one."""
    set_feed_cache(None)
    yield
    set_feed_cache(None)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient]:
    """Create a test client with database session override."""
    # Clear the settings cache so it picks up the test environment
    get_settings.cache_clear()

    from api.main import app  # noqa: PLC0415
    from db.session import get_async_session  # noqa: PLC0415

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_async_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Build a signed session token for an external (identity provider) id."""

    def _make(external_id: str, expires_in: timedelta = timedelta(hours=1), **claims: str) -> str:
        settings = get_settings()
        payload = {"sub": external_id, "exp": utcnow() + expires_in, **claims}
        return jwt.encode(payload, settings.auth_jwt_secret, algorithm=settings.auth_jwt_algorithm)

    return _make


@pytest.fixture
def auth_headers(make_token: Callable[..., str]) -> Callable[[User], dict[str, str]]:
    """Authorization headers authenticating as an existing user."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user.external_id)}"}

    return _headers


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory for persisted users."""
    counter = {"n": 0}

    async def _make(name: str | None = None, **fields: object) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            external_id=f"test|user-{n}",
            email=f"user{n}@example.com",
            name=name or f"User {n}",
            **fields,
        )
        db_session.add(user)
        await db_session.flush()
        return user

    return _make


@pytest.fixture
async def user(make_user: Callable[..., Awaitable[User]]) -> User:
    """A default persisted user."""
    return await make_user(name="Alice")


@pytest.fixture
async def other_user(make_user: Callable[..., Awaitable[User]]) -> User:
    """A second persisted user."""
    return await make_user(name="Bob")


@pytest.fixture
def make_prompt(db_session: AsyncSession) -> Callable[..., Awaitable[Prompt]]:
    """
    Factory for persisted prompts.

    ``age_minutes`` sets created_at that far in the past, so tests control
    newest/oldest ordering explicitly.
    """

    async def _make(
        author: User,
        title: str = "A prompt",
        *,
        content: str = "Prompt content",
        description: str | None = None,
        category: Category = Category.CODING,
        ai_tools: list[AiTool] | None = None,
        tags: list[str] | None = None,
        difficulty: Difficulty = Difficulty.BEGINNER,
        published: bool = True,
        views: int = 0,
        copy_count: int = 0,
        age_minutes: int = 0,
    ) -> Prompt:
        created = utcnow() - timedelta(minutes=age_minutes)
        prompt = Prompt(
            author_id=author.id,
            title=title,
            content=content,
            description=description,
            category=category,
            difficulty=difficulty,
            published=published,
            views=views,
            copy_count=copy_count,
            created_at=created,
            updated_at=created,
        )
        prompt.set_tags(tags or [])
        prompt.set_ai_tools(ai_tools or [])
        db_session.add(prompt)
        await db_session.flush()
        return prompt

    return _make


@pytest.fixture
def add_upvotes(db_session: AsyncSession) -> Callable[..., Awaitable[None]]:
    """Upvote a prompt from each of the given users."""

    async def _add(prompt: Prompt, *users: User) -> None:
        for voter in users:
            db_session.add(Upvote(user_id=voter.id, prompt_id=prompt.id))
        await db_session.flush()

    return _add


@pytest.fixture
def add_bookmarks(db_session: AsyncSession) -> Callable[..., Awaitable[None]]:
    """Bookmark a prompt for each of the given users."""

    async def _add(prompt: Prompt, *users: User) -> None:
        for saver in users:
            db_session.add(Bookmark(user_id=saver.id, prompt_id=prompt.id))
        await db_session.flush()

    return _add
