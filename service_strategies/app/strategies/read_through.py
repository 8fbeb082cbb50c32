"""
Read-through strategy.
"""

from typing import Any, Awaitable, Callable, Tuple

from ..records import RecordKind
from .base import ListResult, Provenance, ReadResult, StrategyName
from .write_through import WriteThroughStrategy


class ReadThroughStrategy(WriteThroughStrategy):
    """All reads go through one ``get_or_load`` primitive.

    The caching decision lives in a single place shared by every record
    kind and by list reads. Writes are write-through so a write is visible
    to the next read without a reload.
    """

    name = StrategyName.READ_THROUGH

    async def get_or_load(self, cache_key: str, loader: Callable[[], Awaitable[Any]]) -> Tuple[Any, Provenance]:
        """Return the cached value for ``cache_key``, loading and caching it on a miss.

        ``None`` from the loader means "no such record" and is not cached.
        """
        cached = await self.cache.get(cache_key)
        if cached is not None:
            self.stats.record_read_hit()
            return cached, Provenance.CACHE

        self.stats.record_read_miss()
        loaded = await loader()
        if loaded is not None:
            await self.cache.set(cache_key, loaded, self.cache_ttl_seconds)
        return loaded, Provenance.DATABASE

    async def _read_one(self, kind: RecordKind, key: Any) -> ReadResult:
        value, source = await self.get_or_load(
            self.keys.record(kind, key),
            lambda: self.store.get(kind, key)
        )
        return ReadResult(value, source)

    async def _read_all(self, kind: RecordKind, limit: int) -> ListResult:
        values, source = await self.get_or_load(
            self.keys.listing(kind, limit),
            lambda: self.store.get_all(kind, limit)
        )
        return ListResult(values or [], source)
