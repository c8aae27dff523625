"""
Redis client backing the feed page cache.

Only the commands FeedCache needs are exposed: GET and SETEX for page entries,
INCR for the generation counter that invalidates them, and PING for /health.
When Redis is down the feed is served straight from the database.
"""
import logging

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class RedisClient:
    """
    Async Redis client with connection pooling and graceful fallback.

    Every operation returns a safe default (None / False) when Redis is disabled,
    unreachable, or raises mid-operation, which FeedCache reads as a miss (GET)
    or a skipped write (SETEX, INCR). Redis is an accelerator for feed reads,
    never a source of truth.
    """

    def __init__(self, url: str, enabled: bool = True, pool_size: int = 20) -> None:
        self._url = url
        self._enabled = enabled
        self._pool_size = pool_size
        self._pool: ConnectionPool | None = None
        self._client: Redis | None = None

    async def connect(self) -> None:
        """Initialize connection pool and verify connectivity."""
        if not self._enabled:
            logger.info("Redis disabled by configuration")
            return
        try:
            self._pool = ConnectionPool.from_url(self._url, max_connections=self._pool_size)
            self._client = Redis(connection_pool=self._pool)
            await self._client.ping()
            logger.info("Redis connected successfully")
        except (RedisError, OSError) as e:
            logger.warning("Redis connection failed: %s", e)
            self._client = None
            self._pool = None

    async def close(self) -> None:
        """Close connection pool."""
        if self._client:
            await self._client.aclose()
            self._client = None
            self._pool = None
            logger.info("Redis connection closed")

    @property
    def is_connected(self) -> bool:
        """Check if client is connected."""
        return self._client is not None

    async def ping(self) -> bool:
        """Check Redis connectivity."""
        if not self._client:
            return False
        try:
            return await self._client.ping()
        except RedisError:
            return False

    async def get(self, key: str) -> bytes | None:
        """Get a cached value, or None on a miss or when Redis is unavailable."""
        if not self._client:
            return None
        try:
            return await self._client.get(key)
        except RedisError as e:
            logger.warning("redis_get_failed key=%s error=%s", key, e)
            return None

    async def setex(self, key: str, seconds: int, value: str | bytes) -> bool:
        """Store a value that expires after ``seconds``; False if it was not stored."""
        if not self._client:
            return False
        try:
            await self._client.setex(key, seconds, value)
            return True
        except RedisError as e:
            logger.warning("redis_setex_failed key=%s error=%s", key, e)
            return False

    async def incr(self, key: str) -> int | None:
        """
        Atomically increment a counter, returning the new value.

        Returns None when Redis is unavailable; for the feed generation counter
        that means cached pages live out their TTL instead of being dropped.
        """
        if not self._client:
            return None
        try:
            return await self._client.incr(key)
        except RedisError as e:
            logger.warning("redis_incr_failed key=%s error=%s", key, e)
            return None


# Global Redis client state using a container to avoid global statement
class _RedisState:
    """Container for global Redis client state."""

    client: RedisClient | None = None


_state = _RedisState()


def get_redis_client() -> RedisClient | None:
    """Get the global Redis client instance."""
    return _state.client


def set_redis_client(client: RedisClient | None) -> None:
    """Set the global Redis client instance."""
    _state.client = client
