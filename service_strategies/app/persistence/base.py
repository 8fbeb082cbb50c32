"""
Record store interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..records import RecordKind


class RecordStore(ABC):
    """Authoritative keyed storage for products, customers and orders.

    Implementations return copies, never references to internal state,
    and raise ``StoreError`` on connectivity or query failures. A missing
    record is reported as ``None``/``False``, not as an exception.
    """

    async def start(self) -> None:
        """Open connections."""

    async def stop(self) -> None:
        """Close connections."""

    async def health_check(self) -> bool:
        return True

    @abstractmethod
    async def get(self, kind: RecordKind, key: Any) -> Optional[Dict[str, Any]]:
        """Fetch one record by key."""

    @abstractmethod
    async def get_all(self, kind: RecordKind, limit: int) -> List[Dict[str, Any]]:
        """Fetch up to ``limit`` records ordered by key."""

    @abstractmethod
    async def create(self, kind: RecordKind, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a record and return it as stored."""

    @abstractmethod
    async def update(self, kind: RecordKind, key: Any, payload: Dict[str, Any]) -> bool:
        """Apply a partial update; False if the record does not exist."""

    @abstractmethod
    async def delete(self, kind: RecordKind, key: Any) -> bool:
        """Delete a record; False if it did not exist."""
