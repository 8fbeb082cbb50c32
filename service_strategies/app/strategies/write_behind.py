"""
Write-behind (write-back) strategy.
"""

from typing import Any, Dict, Optional

from shared.errors import RecordConflictError
from ..cache import CacheStore
from ..persistence import RecordStore
from ..queue import PendingWrite, WriteBehindQueue, WriteOperation
from ..records import RecordKind, get_schema
from ..stats import StatsCollector
from .base import Provenance, ReadResult, StrategyName, WriteResult, WriteStatus
from .cached import TOMBSTONE_FIELD, CachedStrategy, is_tombstone


class WriteBehindStrategy(CachedStrategy):
    """Writes land in the cache now and in the store later.

    A write sets the post-write value in the cache, buffers a pending write
    and returns without touching the store. A background task drains the
    buffer every ``write_behind_interval_seconds``. Deletes leave a
    tombstone in the cache so the record reads as absent until the drain
    removes it from the store.

    Reads that miss the cache are answered from the buffer when it holds
    a write for the record, so an expired or evicted entry never exposes
    the older stored value.

    Buffered writes are lost if the process dies before a drain, and a
    write that fails during a drain is dropped.
    """

    name = StrategyName.WRITE_BEHIND

    def __init__(
        self,
        store: RecordStore,
        cache: CacheStore,
        stats: Optional[StatsCollector] = None,
        *,
        write_behind_interval_seconds: float = 5.0,
        **kwargs
    ):
        super().__init__(store, cache, stats, **kwargs)
        self.queue = WriteBehindQueue(
            self._apply_pending_write,
            stats=self.stats,
            interval_seconds=write_behind_interval_seconds
        )

    async def start(self):
        await super().start()
        await self.queue.start()

    async def stop(self):
        await self.queue.stop()
        await super().stop()

    @property
    def pending_writes(self) -> int:
        return self.queue.size

    async def flush_pending_writes(self) -> int:
        report = await self.queue.flush()
        return report.applied

    async def reset_stats(self):
        """Drain buffered writes, then zero counters and clear the cache."""
        await self.queue.flush()
        await super().reset_stats()

    async def _read_one(self, kind: RecordKind, key: Any) -> ReadResult:
        """Cache first, then buffered writes, then the store.

        A store value is cached only when no write for the record is
        buffered, before or after the load.
        """
        cache_key = self.keys.record(kind, key)

        cached = await self.cache.get(cache_key)
        if cached is not None:
            self.stats.record_read_hit()
            return ReadResult(None if is_tombstone(cached) else cached, Provenance.CACHE)

        pending = self.queue.peek(kind, key)
        if pending is not None:
            self.stats.record_read_hit()
            return ReadResult(self._pending_value(pending), Provenance.CACHE)

        self.stats.record_read_miss()
        record = await self.store.get(kind, key)
        pending = self.queue.peek(kind, key)
        if pending is not None:
            return ReadResult(self._pending_value(pending), Provenance.CACHE)

        if record is not None:
            await self.cache.set(cache_key, record, self.cache_ttl_seconds)
        return ReadResult(record, Provenance.DATABASE)

    @staticmethod
    def _pending_value(pending: PendingWrite) -> Optional[Dict[str, Any]]:
        if pending.operation is WriteOperation.DELETE:
            return None
        return dict(pending.payload)

    async def _current(self, kind: RecordKind, key: Any) -> Optional[Dict[str, Any]]:
        """The record as the next read will see it, pending writes included."""
        pending = self.queue.peek(kind, key)
        if pending is not None:
            return self._pending_value(pending)

        cached = await self.cache.get(self.keys.record(kind, key))
        if cached is not None:
            return None if is_tombstone(cached) else cached

        return await self.store.get(kind, key)

    async def _create(self, kind: RecordKind, payload: Dict[str, Any]) -> WriteResult:
        record = get_schema(kind).build_record(payload)
        key = self._key_of(kind, record)

        if await self._current(kind, key) is not None:
            raise RecordConflictError(f"{kind.value} {key} already exists", {"kind": kind.value, "key": key})

        await self.cache_record(kind, record)
        await self.queue.enqueue(PendingWrite(WriteOperation.CREATE, kind, key, record))
        await self.invalidate_lists(kind)
        return WriteResult(WriteStatus.OK, kind, key, queued=True)

    async def _update(self, kind: RecordKind, key: Any, payload: Dict[str, Any]) -> WriteResult:
        current = await self._current(kind, key)
        if current is None:
            return WriteResult(WriteStatus.NOT_FOUND, kind, key)

        merged = get_schema(kind).merge(current, payload)
        await self.cache_record(kind, merged)
        await self.queue.enqueue(PendingWrite(WriteOperation.UPDATE, kind, key, merged))
        await self.invalidate_lists(kind)
        return WriteResult(WriteStatus.OK, kind, key, queued=True)

    async def _delete(self, kind: RecordKind, key: Any) -> WriteResult:
        if await self._current(kind, key) is None:
            return WriteResult(WriteStatus.NOT_FOUND, kind, key)

        await self.cache.set(self.keys.record(kind, key), {TOMBSTONE_FIELD: True}, self.cache_ttl_seconds)
        await self.queue.enqueue(PendingWrite(WriteOperation.DELETE, kind, key))
        await self.invalidate_lists(kind)
        return WriteResult(WriteStatus.OK, kind, key, queued=True)

    async def _apply_pending_write(self, write: PendingWrite) -> bool:
        """Apply one buffered write to the record store."""
        if write.operation is WriteOperation.CREATE:
            await self.store.create(write.kind, write.payload)
            return True
        if write.operation is WriteOperation.UPDATE:
            return await self.store.update(write.kind, write.key, write.payload)

        # a record that is already gone counts as deleted
        if write.row_stored:
            await self.store.delete(write.kind, write.key)
        return True
