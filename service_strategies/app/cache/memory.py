"""
In-memory cache store.
"""

import asyncio
import time
from fnmatch import fnmatchcase
from typing import Any, Callable, Dict, List, Optional, Tuple

from . import serialization
from .base import CacheStore


class MemoryCacheStore(CacheStore):
    """Process-local cache with Redis-like TTL and glob semantics.

    Values are held serialized, so callers never share objects with the
    cache. Expired entries are dropped lazily on access and enumeration.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        now = self._clock()
        return sum(1 for _, expires_at in self._entries.values() if expires_at > now)

    def ttl(self, key: str) -> Optional[float]:
        """Seconds until ``key`` expires, or None when absent."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        remaining = entry[1] - self._clock()
        return remaining if remaining > 0 else None

    async def get(self, key: str) -> Optional[Any]:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            data, expires_at = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
        return serialization.loads(data)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        data = serialization.dumps(value)
        async with self._lock:
            self._entries[key] = (data, self._clock() + ttl_seconds)
        return True

    async def delete(self, *keys: str) -> int:
        async with self._lock:
            now = self._clock()
            deleted = 0
            for key in keys:
                entry = self._entries.pop(key, None)
                if entry is not None and entry[1] > now:
                    deleted += 1
            return deleted

    async def keys(self, pattern: str) -> List[str]:
        async with self._lock:
            self._purge_expired()
            return [key for key in self._entries if fnmatchcase(key, pattern)]

    async def clear(self) -> bool:
        async with self._lock:
            self._entries.clear()
        return True

    def _purge_expired(self):
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
