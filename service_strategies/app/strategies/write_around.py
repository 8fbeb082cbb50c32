"""
Write-around strategy.
"""

from .base import StrategyName
from .cache_aside import CacheAsideStrategy


class WriteAroundStrategy(CacheAsideStrategy):
    """Writes bypass the cache entirely and only evict.

    Nothing is ever cached on the write path, so the first read after a
    write is always a miss and the cache holds only data that was read.
    The write path is cache-aside's: store first, then evict the record
    and list entries.
    """

    name = StrategyName.WRITE_AROUND
