"""
Cache package for the strategy service.

Provides a Redis-backed cache store, an in-memory equivalent, the
namespaced key scheme shared by every strategy, and a fail-open wrapper
that turns cache trouble into cache misses.
"""

from .base import CacheStore
from .fail_open import FailOpenCache
from .keys import CacheKeyBuilder
from .memory import MemoryCacheStore
from .redis_cache import RedisCacheStore

__all__ = [
    "CacheStore",
    "CacheKeyBuilder",
    "FailOpenCache",
    "MemoryCacheStore",
    "RedisCacheStore",
]
