"""
Cache-aside strategy.
"""

from typing import Any, Dict

from ..records import RecordKind
from .base import StrategyName, WriteResult, WriteStatus
from .cached import CachedStrategy


class CacheAsideStrategy(CachedStrategy):
    """Caller-managed cache.

    Reads populate the cache on a miss. Writes go to the store first and,
    once the store accepts them, evict the record's entry and every list
    entry of its kind. A write that finds no record leaves the cache alone.
    """

    name = StrategyName.CACHE_ASIDE

    async def _create(self, kind: RecordKind, payload: Dict[str, Any]) -> WriteResult:
        record = await self.store.create(kind, payload)
        await self.invalidate_lists(kind)
        return WriteResult(WriteStatus.OK, kind, self._key_of(kind, record))

    async def _update(self, kind: RecordKind, key: Any, payload: Dict[str, Any]) -> WriteResult:
        if not await self.store.update(kind, key, payload):
            return WriteResult(WriteStatus.NOT_FOUND, kind, key)
        await self._evict(kind, key)
        return WriteResult(WriteStatus.OK, kind, key)

    async def _delete(self, kind: RecordKind, key: Any) -> WriteResult:
        if not await self.store.delete(kind, key):
            return WriteResult(WriteStatus.NOT_FOUND, kind, key)
        await self._evict(kind, key)
        return WriteResult(WriteStatus.OK, kind, key)

    async def _evict(self, kind: RecordKind, key: Any):
        await self.invalidate_record(kind, key)
        await self.invalidate_lists(kind)
