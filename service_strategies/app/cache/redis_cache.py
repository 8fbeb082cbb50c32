"""
Redis caching layer for the strategy service.
"""

from contextlib import asynccontextmanager
from typing import Any, List, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.errors import CacheError
from shared.logging import get_logger
from . import serialization
from .base import CacheStore


class RedisCacheStore(CacheStore):
    """Redis-backed cache store."""

    def __init__(self, redis_url: str, *, socket_timeout: float = 5.0, scan_count: int = 500):
        self.redis_url = redis_url
        self.socket_timeout = socket_timeout
        self.scan_count = scan_count
        self.logger = get_logger("strategies.cache.redis")
        self.redis: Optional[redis.Redis] = None

    async def start(self):
        """Start the Redis cache."""
        self.redis = redis.from_url(
            self.redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=self.socket_timeout,
            socket_timeout=self.socket_timeout,
            retry_on_timeout=True,
            health_check_interval=30
        )

        try:
            await self.redis.ping()
        except (RedisError, OSError) as e:
            self.logger.error("Failed to start Redis cache", error=str(e))
            raise CacheError("Failed to connect to Redis", {"error": str(e), "url": self.redis_url})

        self.logger.info("Redis cache started")

    async def stop(self):
        """Stop the Redis cache."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self.logger.info("Redis cache stopped")

    @asynccontextmanager
    async def _client(self, operation: str, key: Optional[str] = None):
        """Yield the client, translating Redis failures to CacheError."""
        if self.redis is None:
            raise CacheError("Redis cache is not started", {"operation": operation})
        try:
            yield self.redis
        except (RedisError, OSError) as e:
            raise CacheError(
                f"Redis {operation} failed",
                {"operation": operation, "key": key, "error": str(e)}
            )

    async def get(self, key: str) -> Optional[Any]:
        async with self._client("get", key) as client:
            data = await client.get(key)
        return serialization.loads(data)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        data = serialization.dumps(value)
        async with self._client("set", key) as client:
            await client.setex(key, ttl_seconds, data)
        self.logger.debug("Cached value", cache_key=key, ttl=ttl_seconds)
        return True

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        async with self._client("delete", keys[0]) as client:
            return await client.delete(*keys)

    async def keys(self, pattern: str) -> List[str]:
        """List matching keys with SCAN so large keyspaces do not block Redis."""
        async with self._client("scan", pattern) as client:
            return [key async for key in client.scan_iter(match=pattern, count=self.scan_count)]

    async def clear(self) -> bool:
        """Flush the selected Redis database."""
        async with self._client("flushdb") as client:
            await client.flushdb()
        self.logger.info("Redis cache flushed")
        return True

    async def health_check(self) -> bool:
        """Check Redis health."""
        if self.redis is None:
            return False
        try:
            await self.redis.ping()
            return True
        except (RedisError, OSError):
            return False
