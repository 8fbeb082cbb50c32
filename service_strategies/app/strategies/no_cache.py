"""
No-caching strategy: the performance baseline.
"""

from typing import Any, Dict

from ..records import RecordKind, get_schema
from .base import CachingStrategy, ListResult, Provenance, ReadResult, StrategyName, WriteResult, WriteStatus


class NoCachingStrategy(CachingStrategy):
    """Every read and write goes straight to the record store.

    Reads are counted as cache misses so hit rates stay comparable across
    strategies.
    """

    name = StrategyName.NO_CACHING

    async def _read_one(self, kind: RecordKind, key: Any) -> ReadResult:
        self.stats.record_read_miss()
        return ReadResult(await self.store.get(kind, key), Provenance.DATABASE)

    async def _read_all(self, kind: RecordKind, limit: int) -> ListResult:
        self.stats.record_read_miss()
        return ListResult(await self.store.get_all(kind, limit), Provenance.DATABASE)

    async def _create(self, kind: RecordKind, payload: Dict[str, Any]) -> WriteResult:
        record = await self.store.create(kind, payload)
        return WriteResult(WriteStatus.OK, kind, record[get_schema(kind).key.name])

    async def _update(self, kind: RecordKind, key: Any, payload: Dict[str, Any]) -> WriteResult:
        updated = await self.store.update(kind, key, payload)
        return WriteResult(WriteStatus.OK if updated else WriteStatus.NOT_FOUND, kind, key)

    async def _delete(self, kind: RecordKind, key: Any) -> WriteResult:
        deleted = await self.store.delete(kind, key)
        return WriteResult(WriteStatus.OK if deleted else WriteStatus.NOT_FOUND, kind, key)
