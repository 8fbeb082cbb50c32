"""
Fail-open cache wrapper.

Every strategy talks to its cache through this wrapper. A cache call that
errors or exceeds the timeout is logged, counted and answered with the
"nothing cached" default, so the operation carries on against the record
store as if the cache had missed.
"""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional

from shared.errors import CacheError
from shared.logging import get_logger
from .base import CacheStore


class FailOpenCache(CacheStore):
    """Cache decorator giving uniform degrade-to-miss semantics."""

    def __init__(
        self,
        inner: CacheStore,
        timeout_seconds: float = 0.5,
        on_error: Optional[Callable[[str], None]] = None,
    ):
        self.inner = inner
        self.timeout_seconds = timeout_seconds
        self.on_error = on_error
        self.logger = get_logger("strategies.cache.fail_open")

    async def _guard(self, operation: str, call: Awaitable[Any], default: Any, key: Optional[str] = None) -> Any:
        try:
            return await asyncio.wait_for(call, timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            self.logger.warning("Cache call timed out, treating as miss",
                                operation=operation, cache_key=key, timeout=self.timeout_seconds)
        except CacheError as e:
            self.logger.warning("Cache call failed, treating as miss",
                                operation=operation, cache_key=key, error=e.message, details=e.details)

        if self.on_error:
            self.on_error(operation)
        return default

    async def start(self):
        """Start the inner cache; a cache that cannot start leaves the strategy degraded, not down."""
        try:
            await self.inner.start()
        except CacheError as e:
            self.logger.error("Cache unavailable at startup, continuing without it", error=e.message)
            if self.on_error:
                self.on_error("start")

    async def stop(self):
        await self.inner.stop()

    async def health_check(self) -> bool:
        return await self._guard("health_check", self.inner.health_check(), False)

    async def get(self, key: str) -> Optional[Any]:
        return await self._guard("get", self.inner.get(key), None, key)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        return await self._guard("set", self.inner.set(key, value, ttl_seconds), False, key)

    async def delete(self, *keys: str) -> int:
        return await self._guard("delete", self.inner.delete(*keys), 0, keys[0] if keys else None)

    async def keys(self, pattern: str) -> List[str]:
        return await self._guard("keys", self.inner.keys(pattern), [], pattern)

    async def delete_pattern(self, pattern: str) -> int:
        return await self._guard("delete_pattern", self.inner.delete_pattern(pattern), 0, pattern)

    async def clear(self) -> bool:
        return await self._guard("clear", self.inner.clear(), False)
