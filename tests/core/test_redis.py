"""
Tests for the Redis client wrapper.

Basic pass-through of get/setex/incr is covered by the feed cache tests; here we
test the fallback behavior, which is the wrapper's actual logic.
"""
from unittest.mock import AsyncMock, patch

from redis.exceptions import RedisError

from core.redis import RedisClient


class TestRedisFallback:
    """Operations degrade to safe defaults when Redis is missing or failing."""

    async def test__disabled_client__returns_defaults(self) -> None:
        client = RedisClient("redis://localhost:6379", enabled=False)
        await client.connect()

        assert client.is_connected is False
        assert await client.ping() is False
        assert await client.get("k") is None
        assert await client.setex("k", 10, "v") is False
        assert await client.incr("k") is None

    async def test__connect__failure_leaves_client_disconnected(self) -> None:
        client = RedisClient("redis://unreachable:6379")

        with patch("core.redis.Redis.ping", new=AsyncMock(side_effect=RedisError("refused"))):
            await client.connect()

        assert client.is_connected is False

    async def test__operations__swallow_redis_errors(self, redis_client: RedisClient) -> None:
        failing = AsyncMock(side_effect=RedisError("connection reset"))
        redis_client._client.get = failing
        redis_client._client.setex = failing
        redis_client._client.incr = failing

        assert await redis_client.get("k") is None
        assert await redis_client.setex("k", 10, "v") is False
        assert await redis_client.incr("k") is None

    async def test__incr__counts_up(self, redis_client: RedisClient) -> None:
        assert await redis_client.incr("counter") == 1
        assert await redis_client.incr("counter") == 2
        assert await redis_client.get("counter") == b"2"
