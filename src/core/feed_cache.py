"""Short-lived feed page cache with whole-namespace invalidation."""
import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from schemas.feed import FeedPage, FeedQuery

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from core.redis import RedisClient

logger = logging.getLogger(__name__)

# Session.info flag set by services whose pending changes alter feed contents
FEED_STALE_KEY = "feed_stale"

# Cache schema version - included in all cache keys (e.g., "feed:v1:g3:...")
#
# Bump this version when FeedPage or PromptSummary fields are added, removed, or
# renamed. Old "feed:v1:..." entries are then never read and expire via TTL.
CACHE_SCHEMA_VERSION = 1


class FeedCache:
    """
    Cache for feed pages keyed by the full query specification.

    Invalidation bumps a single generation counter instead of deleting keys.
    Every key embeds the generation it was written under, so after a bump all
    existing entries become unreachable at once and expire on their own TTL.
    INCR is atomic, which makes concurrent invalidators and readers safe without
    any locking.
    """

    def __init__(self, redis_client: "RedisClient", ttl_seconds: int = 60) -> None:
        """Initialize feed cache with Redis client and entry lifetime."""
        self._redis = redis_client
        self._ttl = ttl_seconds

    @property
    def _generation_key(self) -> str:
        return f"feed:v{CACHE_SCHEMA_VERSION}:generation"

    async def generation(self) -> int | None:
        """Current generation, or None if Redis is unavailable."""
        if not self._redis.is_connected:
            return None
        raw = await self._redis.get(self._generation_key)
        if raw is None:
            # Unset counter is generation 0; a failed GET also lands here and only
            # risks a miss, since entries are written under the value read.
            return 0
        try:
            return int(raw)
        except ValueError:
            logger.warning("feed_cache_bad_generation value=%r", raw)
            return None

    def _cache_key(self, generation: int, query: FeedQuery) -> str:
        return f"feed:v{CACHE_SCHEMA_VERSION}:g{generation}:{query.cache_key()}"

    async def get(self, query: FeedQuery, generation: int | None = None) -> FeedPage | None:
        """
        Get a cached page for the exact query.

        Args:
            query: The feed query.
            generation: Generation to look under; read from Redis when omitted.

        Returns:
            FeedPage on hit, None on miss or when Redis is unavailable.
        """
        if generation is None:
            generation = await self.generation()
        if generation is None:
            return None
        key = self._cache_key(generation, query)
        data = await self._redis.get(key)
        if data is None:
            logger.debug("feed_cache_miss key=%s", key)
            return None
        try:
            page = FeedPage.model_validate_json(data)
        except ValidationError:
            logger.warning("feed_cache_corrupt key=%s", key)
            return None
        logger.debug("feed_cache_hit key=%s", key)
        return page

    async def set(self, query: FeedQuery, page: FeedPage, generation: int | None = None) -> None:
        """
        Store a page under a generation.

        Callers that read storage pass the generation they saw before the read,
        so a page built from data older than an invalidation lands under the
        orphaned generation instead of the new one.
        """
        if generation is None:
            generation = await self.generation()
        if generation is None:
            return
        key = self._cache_key(generation, query)
        await self._redis.setex(key, self._ttl, page.model_dump_json(by_alias=True))
        logger.debug("feed_cache_set key=%s ttl=%s", key, self._ttl)

    async def invalidate(self) -> None:
        """Drop every cached page by advancing the generation counter."""
        generation = await self._redis.incr(self._generation_key)
        logger.debug("feed_cache_invalidate generation=%s", generation)


# Global feed cache instance (set during app startup)
_feed_cache: FeedCache | None = None


def get_feed_cache() -> FeedCache | None:
    """Get the global feed cache instance."""
    return _feed_cache


def set_feed_cache(cache: FeedCache | None) -> None:
    """Set the global feed cache instance."""
    global _feed_cache  # noqa: PLW0603
    _feed_cache = cache


async def invalidate_feed_cache() -> None:
    """Invalidate the global feed cache, if one is configured."""
    cache = get_feed_cache()
    if cache is not None:
        await cache.invalidate()


def mark_feed_stale(db: "AsyncSession") -> None:
    """
    Record that the session's pending changes alter feed contents.

    The cache is invalidated by commit_session() once those changes commit,
    never before, so a concurrent reader cannot re-cache pre-commit rows.
    """
    db.info[FEED_STALE_KEY] = True
