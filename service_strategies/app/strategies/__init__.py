"""
Strategy engine.

Six interchangeable caching policies behind one operation contract:
read_one, read_all, create, update, delete, flush_pending_writes,
get_stats and reset_stats.
"""

from .base import (
    CachingStrategy,
    ListResult,
    Provenance,
    ReadResult,
    StrategyName,
    WriteResult,
    WriteStatus,
)
from .cache_aside import CacheAsideStrategy
from .factory import STRATEGIES, build_strategy, create_strategy_from_settings, parse_strategy_name
from .no_cache import NoCachingStrategy
from .read_through import ReadThroughStrategy
from .write_around import WriteAroundStrategy
from .write_behind import WriteBehindStrategy
from .write_through import WriteThroughStrategy

__all__ = [
    "CachingStrategy",
    "CacheAsideStrategy",
    "ListResult",
    "NoCachingStrategy",
    "Provenance",
    "ReadResult",
    "ReadThroughStrategy",
    "STRATEGIES",
    "StrategyName",
    "WriteAroundStrategy",
    "WriteBehindStrategy",
    "WriteResult",
    "WriteStatus",
    "WriteThroughStrategy",
    "build_strategy",
    "create_strategy_from_settings",
    "parse_strategy_name",
]
