"""
Write-behind queue.

Pending writes live in an ordered map keyed by ``(kind, key)``: a newer
write for the same record replaces the older one and moves to the back
of the flush order. A drain swaps the whole map for an empty one under
the insert lock and then applies the detached batch, so writes arriving
mid-drain accumulate in the fresh map. Drains are serialized among
themselves so two batches never apply writes for one key out of order.

The buffer is volatile and delivery is at-most-once: a write that fails
during a drain is logged, counted and discarded.
"""

import asyncio
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from shared.logging import get_logger
from ..records import RecordKind
from ..stats import StatsCollector


class WriteOperation(str, Enum):
    """Kinds of buffered writes."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class PendingWrite:
    """A write acknowledged to the caller but not yet applied to the store."""
    operation: WriteOperation
    kind: RecordKind
    key: Any
    payload: Optional[Dict[str, Any]] = None
    enqueued_at: float = field(default_factory=time.time)
    # whether the store held the row before the first buffered write for it
    row_stored: Optional[bool] = None

    def __post_init__(self):
        if self.row_stored is None:
            self.row_stored = self.operation is not WriteOperation.CREATE

    @property
    def identity(self) -> Tuple[RecordKind, Any]:
        return (self.kind, self.key)

    def coalesce(self, newer: "PendingWrite") -> "PendingWrite":
        """Collapse this write and a newer one for the same record into one.

        The operation follows from whether the store already holds the row:
        a delete stays a delete, anything else becomes an update of a stored
        row or a create of a row the store has never seen.
        """
        if newer.operation is WriteOperation.DELETE:
            operation = WriteOperation.DELETE
        elif self.row_stored:
            operation = WriteOperation.UPDATE
        else:
            operation = WriteOperation.CREATE

        return PendingWrite(
            operation=operation,
            kind=newer.kind,
            key=newer.key,
            payload=newer.payload,
            enqueued_at=newer.enqueued_at,
            row_stored=self.row_stored,
        )


@dataclass
class FlushReport:
    """Outcome of one drain."""
    attempted: int = 0
    applied: int = 0
    dropped: int = 0


WriteApplier = Callable[[PendingWrite], Awaitable[bool]]


class WriteBehindQueue:
    """Coalescing buffer of pending writes with a periodic flusher."""

    def __init__(
        self,
        applier: WriteApplier,
        stats: Optional[StatsCollector] = None,
        interval_seconds: float = 5.0,
    ):
        self.applier = applier
        self.stats = stats
        self.interval_seconds = interval_seconds
        self.logger = get_logger("strategies.queue.write_behind")

        self._pending: "OrderedDict[Tuple[RecordKind, Any], PendingWrite]" = OrderedDict()
        self._in_flight: Dict[Tuple[RecordKind, Any], PendingWrite] = {}
        self._swap_lock = asyncio.Lock()
        self._drain_lock = asyncio.Lock()

        self.flush_task: Optional[asyncio.Task] = None
        self.running = False

    @property
    def size(self) -> int:
        return len(self._pending)

    def peek(self, kind: RecordKind, key: Any) -> Optional[PendingWrite]:
        """Return the pending write for a record, if any.

        Writes detached by a running drain stay visible until it finishes.
        """
        identity = (kind, key)
        return self._pending.get(identity) or self._in_flight.get(identity)

    async def enqueue(self, write: PendingWrite) -> PendingWrite:
        """Buffer a write, coalescing with any pending write for the same record."""
        async with self._swap_lock:
            prior = self._pending.pop(write.identity, None)
            if prior is not None:
                write = prior.coalesce(write)
            self._pending[write.identity] = write
            size = len(self._pending)

        if self.stats:
            self.stats.record_queued(size)
        self.logger.debug(
            "Write queued",
            operation=write.operation.value,
            kind=write.kind.value,
            key=write.key,
            coalesced=prior is not None,
            queue_size=size
        )
        return write

    async def flush(self) -> FlushReport:
        """Drain the queue into the record store."""
        async with self._drain_lock:
            async with self._swap_lock:
                if not self._pending:
                    return FlushReport()
                batch, self._pending = self._pending, OrderedDict()
                self._in_flight = batch

            if self.stats:
                self.stats.record_queue_size(self.size)
            self.logger.info("Flushing queued writes", count=len(batch))

            report = FlushReport(attempted=len(batch))
            try:
                for write in batch.values():
                    if await self._apply(write):
                        report.applied += 1
                        if self.stats:
                            self.stats.record_flushed()
                    else:
                        report.dropped += 1
                        if self.stats:
                            self.stats.record_dropped()
            finally:
                self._in_flight = {}

            self.logger.info(
                "Flush complete",
                applied=report.applied,
                dropped=report.dropped,
                queue_size=self.size
            )
            return report

    async def _apply(self, write: PendingWrite) -> bool:
        try:
            applied = await self.applier(write)
        except Exception as e:
            self.logger.error(
                "Queued write failed, dropping",
                operation=write.operation.value,
                kind=write.kind.value,
                key=write.key,
                error=str(e)
            )
            return False

        if not applied:
            self.logger.error(
                "Queued write not applied, dropping",
                operation=write.operation.value,
                kind=write.kind.value,
                key=write.key
            )
        return applied

    async def start(self):
        """Start the periodic flusher."""
        if self.running:
            return
        self.running = True
        self.flush_task = asyncio.create_task(self._flush_loop())
        self.logger.info("Write-behind flusher started", interval=self.interval_seconds)

    async def stop(self) -> FlushReport:
        """Cancel the flusher and drain whatever is still buffered."""
        self.running = False
        if self.flush_task:
            self.flush_task.cancel()
            try:
                await self.flush_task
            except asyncio.CancelledError:
                pass
            self.flush_task = None

        report = await self.flush()
        self.logger.info("Write-behind flusher stopped", final_applied=report.applied, final_dropped=report.dropped)
        return report

    async def _flush_loop(self):
        """Flush on a fixed interval until stopped."""
        while self.running:
            try:
                await asyncio.sleep(self.interval_seconds)
                # a detached batch always runs to completion
                await asyncio.shield(self.flush())
            except asyncio.CancelledError:
                break
            except Exception as e:
                self.logger.error("Error in flush loop", error=str(e))
