"""
In-memory record store.
"""

import asyncio
import copy
from typing import Any, Dict, Iterable, List, Optional

from shared.errors import RecordConflictError
from shared.logging import get_logger
from ..records import RecordKind, get_schema
from .base import RecordStore


class MemoryRecordStore(RecordStore):
    """Process-local record store with the same semantics as PostgreSQL.

    ``latency_seconds`` adds an artificial round-trip delay to every call so
    cache strategies can be compared without a database.
    """

    def __init__(self, latency_seconds: float = 0.0):
        self.latency_seconds = latency_seconds
        self.logger = get_logger("strategies.persistence.memory")
        self._tables: Dict[RecordKind, Dict[Any, Dict[str, Any]]] = {kind: {} for kind in RecordKind}
        self._lock = asyncio.Lock()

    def seed(self, kind: RecordKind, records: Iterable[Dict[str, Any]]) -> int:
        """Load records directly, replacing any with the same key."""
        schema = get_schema(kind)
        count = 0
        for payload in records:
            record = schema.build_record(payload)
            self._tables[schema.kind][record[schema.key.name]] = record
            count += 1
        return count

    def count(self, kind: RecordKind) -> int:
        return len(self._tables[RecordKind.parse(kind)])

    async def _round_trip(self):
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)

    async def get(self, kind: RecordKind, key: Any) -> Optional[Dict[str, Any]]:
        schema = get_schema(kind)
        await self._round_trip()
        record = self._tables[schema.kind].get(schema.coerce_key(key))
        return copy.deepcopy(record) if record is not None else None

    async def get_all(self, kind: RecordKind, limit: int) -> List[Dict[str, Any]]:
        schema = get_schema(kind)
        await self._round_trip()
        table = self._tables[schema.kind]
        records = []
        for key in sorted(table)[:max(0, limit)]:
            record = copy.deepcopy(table[key])
            if schema.items:
                record.pop(schema.items.field, None)
            records.append(record)
        return records

    async def create(self, kind: RecordKind, payload: Dict[str, Any]) -> Dict[str, Any]:
        schema = get_schema(kind)
        record = schema.build_record(payload)
        key = record[schema.key.name]
        await self._round_trip()
        async with self._lock:
            table = self._tables[schema.kind]
            if key in table:
                raise RecordConflictError(
                    f"{schema.kind.value} {key} already exists",
                    {"kind": schema.kind.value, "key": key}
                )
            table[key] = record
        self.logger.debug("Record created", kind=schema.kind.value, key=key)
        return copy.deepcopy(record)

    async def update(self, kind: RecordKind, key: Any, payload: Dict[str, Any]) -> bool:
        schema = get_schema(kind)
        key = schema.coerce_key(key)
        changes = schema.normalize(payload)
        await self._round_trip()
        async with self._lock:
            table = self._tables[schema.kind]
            if key not in table:
                return False
            table[key] = schema.merge(table[key], changes)
        return True

    async def delete(self, kind: RecordKind, key: Any) -> bool:
        schema = get_schema(kind)
        key = schema.coerce_key(key)
        await self._round_trip()
        async with self._lock:
            return self._tables[schema.kind].pop(key, None) is not None
