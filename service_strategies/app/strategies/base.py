"""
Uniform operation contract shared by every caching strategy.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Dict, List, Optional, TypeVar, Union

from shared.errors import StoreError, ValidationError
from shared.logging import get_logger
from ..persistence import RecordStore
from ..records import RecordKind, get_schema
from ..stats import StatsCollector, StatsSnapshot

T = TypeVar("T")


class StrategyName(str, Enum):
    """The fixed set of caching policies."""
    NO_CACHING = "no-caching"
    CACHE_ASIDE = "cache-aside"
    WRITE_THROUGH = "write-through"
    WRITE_BEHIND = "write-behind"
    READ_THROUGH = "read-through"
    WRITE_AROUND = "write-around"


class Provenance(str, Enum):
    """Where a read was served from."""
    CACHE = "cache"
    DATABASE = "database"


class WriteStatus(str, Enum):
    """Outcome of a write."""
    OK = "ok"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ReadResult:
    """A single-record read; ``value`` is None when the record does not exist."""
    value: Optional[Dict[str, Any]]
    source: Provenance

    @property
    def found(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class ListResult:
    """A bounded list read."""
    values: List[Dict[str, Any]] = field(default_factory=list)
    source: Provenance = Provenance.DATABASE

    @property
    def count(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class WriteResult:
    """A write acknowledgement."""
    status: WriteStatus
    kind: RecordKind
    key: Any
    queued: bool = False

    @property
    def ok(self) -> bool:
        return self.status is WriteStatus.OK


class CachingStrategy(ABC):
    """Base class for caching policies.

    The public operations validate input, count the request and time it;
    subclasses implement the underscored hooks. Store failures propagate
    as ``StoreError`` after being counted.
    """

    name: StrategyName

    def __init__(
        self,
        store: RecordStore,
        stats: Optional[StatsCollector] = None,
        *,
        default_list_limit: int = 100,
    ):
        self.store = store
        self.stats = stats or StatsCollector(self.name.value)
        self.default_list_limit = default_list_limit
        self.logger = get_logger(f"strategies.{self.name.value}")

    async def start(self):
        """Open backing connections."""
        await self.store.start()
        self.logger.info("Strategy started", strategy=self.name.value)

    async def stop(self):
        """Close backing connections."""
        await self.store.stop()
        self.logger.info("Strategy stopped", strategy=self.name.value)

    @property
    def pending_writes(self) -> int:
        return 0

    async def read_one(self, kind: Union[RecordKind, str], key: Any) -> ReadResult:
        """Read one record by key."""
        kind = RecordKind.parse(kind)
        key = get_schema(kind).coerce_key(key)
        return await self._timed("read_one", self._read_one(kind, key))

    async def read_all(self, kind: Union[RecordKind, str], limit: Optional[int] = None) -> ListResult:
        """Read up to ``limit`` records of a kind."""
        kind = RecordKind.parse(kind)
        limit = self._coerce_limit(limit)
        return await self._timed("read_all", self._read_all(kind, limit))

    async def create(self, kind: Union[RecordKind, str], payload: Dict[str, Any]) -> WriteResult:
        """Create a record."""
        kind = RecordKind.parse(kind)
        get_schema(kind).build_record(payload)
        self.stats.record_write()
        return await self._timed("create", self._create(kind, payload))

    async def update(self, kind: Union[RecordKind, str], key: Any, payload: Dict[str, Any]) -> WriteResult:
        """Update fields of an existing record."""
        kind = RecordKind.parse(kind)
        schema = get_schema(kind)
        key = schema.coerce_key(key)
        schema.normalize(payload)
        self.stats.record_write()
        return await self._timed("update", self._update(kind, key, payload))

    async def delete(self, kind: Union[RecordKind, str], key: Any) -> WriteResult:
        """Delete a record."""
        kind = RecordKind.parse(kind)
        key = get_schema(kind).coerce_key(key)
        self.stats.record_write()
        return await self._timed("delete", self._delete(kind, key))

    async def flush_pending_writes(self) -> int:
        """Apply buffered writes now; only write-behind buffers any."""
        return 0

    def get_stats(self) -> StatsSnapshot:
        """Snapshot of this strategy's counters."""
        return self.stats.snapshot(current_queue_size=self.pending_writes)

    async def reset_stats(self):
        """Zero the counters and empty the cache."""
        self.stats.reset()
        await self._clear_cache()
        self.logger.info("Stats reset", strategy=self.name.value)

    async def health(self) -> Dict[str, Any]:
        """Report backend health."""
        store_ok = await self.store.health_check()
        return {
            "status": "healthy" if store_ok else "unhealthy",
            "strategy": self.name.value,
            "store": store_ok,
            "queue_size": self.pending_writes,
        }

    async def _timed(self, operation: str, call: Awaitable[T]) -> T:
        started = time.perf_counter()
        try:
            return await call
        except StoreError as e:
            self.stats.record_error()
            self.logger.error("Store operation failed", operation=operation, code=e.code, error=e.message)
            raise
        finally:
            self.stats.record_duration(operation, (time.perf_counter() - started) * 1000)

    def _coerce_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.default_list_limit
        try:
            limit = int(limit)
        except (TypeError, ValueError):
            raise ValidationError("Limit must be an integer", {"limit": str(limit)})
        if limit <= 0:
            raise ValidationError("Limit must be positive", {"limit": limit})
        return limit

    async def _clear_cache(self):
        """Empty the cache, if the strategy has one."""

    @abstractmethod
    async def _read_one(self, kind: RecordKind, key: Any) -> ReadResult:
        ...

    @abstractmethod
    async def _read_all(self, kind: RecordKind, limit: int) -> ListResult:
        ...

    @abstractmethod
    async def _create(self, kind: RecordKind, payload: Dict[str, Any]) -> WriteResult:
        ...

    @abstractmethod
    async def _update(self, kind: RecordKind, key: Any, payload: Dict[str, Any]) -> WriteResult:
        ...

    @abstractmethod
    async def _delete(self, kind: RecordKind, key: Any) -> WriteResult:
        ...
