"""Async SQLAlchemy session factory."""
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core.config import get_settings
from core.feed_cache import FEED_STALE_KEY, invalidate_feed_cache


settings = get_settings()

_engine_kwargs: dict[str, Any] = {"echo": False, "pool_pre_ping": True}
if not settings.is_sqlite:
    _engine_kwargs["pool_size"] = settings.db_pool_size
    _engine_kwargs["max_overflow"] = settings.db_max_overflow

engine = create_async_engine(settings.database_url, **_engine_kwargs)


def configure_sqlite(async_engine: AsyncEngine) -> None:
    """
    Make a SQLite engine behave like the production database.

    Enables foreign keys (SQLite ignores ON DELETE CASCADE otherwise) and takes
    over transaction control from the pysqlite driver so SAVEPOINTs used by
    begin_nested() work.
    """

    @event.listens_for(async_engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, _connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(async_engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")


if settings.is_sqlite:
    configure_sqlite(engine)


async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def commit_session(session: AsyncSession) -> None:
    """
    Commit the session, then invalidate the feed cache if the committed changes
    touched the feed.

    Mutating routes call this before returning so the response is only sent once
    the write is durable, and a commit failure reaches the client as an error.
    """
    await session.commit()
    if session.info.pop(FEED_STALE_KEY, False):
        await invalidate_feed_cache()


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """
    Yield an async database session.

    Uses unit-of-work pattern: services use flush() for refreshing objects and
    routes that write call commit_session() before responding. The commit here
    covers anything left pending and is a no-op otherwise. If anything fails,
    all changes are rolled back.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await commit_session(session)
        except Exception:
            await session.rollback()
            session.info.pop(FEED_STALE_KEY, None)
            raise
