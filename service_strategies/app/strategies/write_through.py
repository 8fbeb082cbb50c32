"""
Write-through strategy.
"""

from typing import Any, Dict

from ..records import RecordKind, get_schema
from .base import StrategyName, WriteResult, WriteStatus
from .cached import CachedStrategy


class WriteThroughStrategy(CachedStrategy):
    """Cache and store change together within the same request.

    After a write is acknowledged, reading the record is a cache hit that
    returns the new value. List entries are evicted, not rebuilt.
    """

    name = StrategyName.WRITE_THROUGH

    async def _create(self, kind: RecordKind, payload: Dict[str, Any]) -> WriteResult:
        record = await self.store.create(kind, payload)
        await self.cache_record(kind, record)
        await self.invalidate_lists(kind)
        return WriteResult(WriteStatus.OK, kind, self._key_of(kind, record))

    async def _update(self, kind: RecordKind, key: Any, payload: Dict[str, Any]) -> WriteResult:
        current = await self.store.get(kind, key)
        if current is None:
            return WriteResult(WriteStatus.NOT_FOUND, kind, key)

        if not await self.store.update(kind, key, payload):
            # deleted between the read and the update
            await self.invalidate_record(kind, key)
            return WriteResult(WriteStatus.NOT_FOUND, kind, key)

        await self.cache_record(kind, get_schema(kind).merge(current, payload))
        await self.invalidate_lists(kind)
        return WriteResult(WriteStatus.OK, kind, key)

    async def _delete(self, kind: RecordKind, key: Any) -> WriteResult:
        if not await self.store.delete(kind, key):
            return WriteResult(WriteStatus.NOT_FOUND, kind, key)
        await self.invalidate_record(kind, key)
        await self.invalidate_lists(kind)
        return WriteResult(WriteStatus.OK, kind, key)
