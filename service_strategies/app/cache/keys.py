"""
Cache key namespacing.

Keys are ``<strategy>:<kind>:<key>`` for single records and
``<strategy>:<kinds>:all:<limit>`` for bounded list reads. List
invalidation relies on the plural segment: ``<strategy>:<kinds>:*``
matches every list entry of a kind and never a single-record entry.
"""

from typing import Any

from ..records import RecordKind


class CacheKeyBuilder:
    """Builds cache keys for one strategy namespace."""

    def __init__(self, namespace: str):
        self.namespace = namespace

    def record(self, kind: RecordKind, key: Any) -> str:
        return f"{self.namespace}:{kind.value}:{key}"

    def listing(self, kind: RecordKind, limit: int) -> str:
        return f"{self.namespace}:{kind.plural}:all:{limit}"

    def listing_pattern(self, kind: RecordKind) -> str:
        return f"{self.namespace}:{kind.plural}:*"
