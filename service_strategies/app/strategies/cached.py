"""
Common machinery for strategies that sit a cache in front of the store.
"""

from typing import Any, Dict, Optional

from ..cache import CacheKeyBuilder, CacheStore, FailOpenCache
from ..persistence import RecordStore
from ..records import RecordKind, get_schema
from ..stats import StatsCollector
from .base import CachingStrategy, ListResult, Provenance, ReadResult

TOMBSTONE_FIELD = "__deleted__"


def is_tombstone(value: Any) -> bool:
    """True for the cache marker of a deleted record."""
    return isinstance(value, dict) and value.get(TOMBSTONE_FIELD) is True


class CachedStrategy(CachingStrategy):
    """Cache-aside reads plus helpers for populating and invalidating entries.

    The cache is wrapped in ``FailOpenCache``: any cache failure or timeout
    behaves exactly like a miss, and cache writes that fail are skipped.
    """

    def __init__(
        self,
        store: RecordStore,
        cache: CacheStore,
        stats: Optional[StatsCollector] = None,
        *,
        cache_ttl_seconds: int = 3600,
        cache_timeout_seconds: float = 0.5,
        default_list_limit: int = 100,
    ):
        super().__init__(store, stats, default_list_limit=default_list_limit)
        self.cache = FailOpenCache(cache, cache_timeout_seconds, on_error=self.stats.record_cache_error)
        self.cache_ttl_seconds = cache_ttl_seconds
        self.keys = CacheKeyBuilder(self.name.value)

    async def start(self):
        await self.store.start()
        await self.cache.start()
        self.logger.info("Strategy started", strategy=self.name.value, cache_ttl=self.cache_ttl_seconds)

    async def stop(self):
        await self.cache.stop()
        await self.store.stop()
        self.logger.info("Strategy stopped", strategy=self.name.value)

    async def health(self) -> Dict[str, Any]:
        report = await super().health()
        report["cache"] = await self.cache.health_check()
        if report["status"] == "healthy" and not report["cache"]:
            report["status"] = "degraded"
        return report

    async def _read_one(self, kind: RecordKind, key: Any) -> ReadResult:
        cache_key = self.keys.record(kind, key)

        cached = await self.cache.get(cache_key)
        if cached is not None:
            self.stats.record_read_hit()
            return ReadResult(None if is_tombstone(cached) else cached, Provenance.CACHE)

        self.stats.record_read_miss()
        record = await self.store.get(kind, key)
        if record is not None:
            await self.cache.set(cache_key, record, self.cache_ttl_seconds)
        return ReadResult(record, Provenance.DATABASE)

    async def _read_all(self, kind: RecordKind, limit: int) -> ListResult:
        cache_key = self.keys.listing(kind, limit)

        cached = await self.cache.get(cache_key)
        if cached is not None:
            self.stats.record_read_hit()
            return ListResult(cached, Provenance.CACHE)

        self.stats.record_read_miss()
        records = await self.store.get_all(kind, limit)
        await self.cache.set(cache_key, records, self.cache_ttl_seconds)
        return ListResult(records, Provenance.DATABASE)

    async def cache_record(self, kind: RecordKind, record: Dict[str, Any]):
        """Write a record into its single-record cache entry."""
        await self.cache.set(self.keys.record(kind, self._key_of(kind, record)), record, self.cache_ttl_seconds)

    async def invalidate_record(self, kind: RecordKind, key: Any):
        await self.cache.delete(self.keys.record(kind, key))

    async def invalidate_lists(self, kind: RecordKind) -> int:
        """Drop every cached list read of a kind."""
        return await self.cache.delete_pattern(self.keys.listing_pattern(kind))

    async def _clear_cache(self):
        await self.cache.clear()

    def _key_of(self, kind: RecordKind, record: Dict[str, Any]) -> Any:
        return record[get_schema(kind).key.name]
