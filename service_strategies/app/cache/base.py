"""
Cache store interface.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional


class CacheStore(ABC):
    """Key-value store with per-entry TTL, glob enumeration and bulk clear.

    Values are JSON-serializable objects; backends store them serialized,
    so every ``get`` returns a fresh copy. Backends raise ``CacheError`` on
    failure and leave absorbing it to ``FailOpenCache``.
    """

    async def start(self) -> None:
        """Open connections."""

    async def stop(self) -> None:
        """Close connections."""

    async def health_check(self) -> bool:
        return True

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when absent or expired."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        """Store a value with a time-to-live."""

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """Delete keys, returning how many existed."""

    @abstractmethod
    async def keys(self, pattern: str) -> List[str]:
        """List keys matching a glob pattern."""

    @abstractmethod
    async def clear(self) -> bool:
        """Remove every entry."""

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern."""
        matching = await self.keys(pattern)
        if not matching:
            return 0
        return await self.delete(*matching)
