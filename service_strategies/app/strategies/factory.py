"""
Strategy construction.

Strategies are built once at startup from ``StrategyName``; every name
maps to exactly one class.
"""

from typing import Dict, Optional, Type, Union

from prometheus_client import CollectorRegistry

from shared.config import StrategySettings
from shared.errors import ConfigurationError
from shared.metrics import get_metrics_collector
from ..cache import CacheStore, RedisCacheStore
from ..persistence import PostgreSQLRecordStore, RecordStore
from ..stats import StatsCollector
from .base import CachingStrategy, StrategyName
from .cache_aside import CacheAsideStrategy
from .cached import CachedStrategy
from .no_cache import NoCachingStrategy
from .read_through import ReadThroughStrategy
from .write_around import WriteAroundStrategy
from .write_behind import WriteBehindStrategy
from .write_through import WriteThroughStrategy

STRATEGIES: Dict[StrategyName, Type[CachingStrategy]] = {
    StrategyName.NO_CACHING: NoCachingStrategy,
    StrategyName.CACHE_ASIDE: CacheAsideStrategy,
    StrategyName.WRITE_THROUGH: WriteThroughStrategy,
    StrategyName.WRITE_BEHIND: WriteBehindStrategy,
    StrategyName.READ_THROUGH: ReadThroughStrategy,
    StrategyName.WRITE_AROUND: WriteAroundStrategy,
}


def parse_strategy_name(name: Union[StrategyName, str]) -> StrategyName:
    """Resolve a strategy name, rejecting unknown ones."""
    if isinstance(name, StrategyName):
        return name
    try:
        return StrategyName(str(name).strip().lower())
    except ValueError:
        raise ConfigurationError(
            f"Unknown strategy: {name}",
            {"strategy": str(name), "known": [member.value for member in StrategyName]}
        )


def build_strategy(
    name: Union[StrategyName, str],
    store: RecordStore,
    cache: Optional[CacheStore] = None,
    *,
    stats: Optional[StatsCollector] = None,
    cache_ttl_seconds: int = 3600,
    cache_timeout_seconds: float = 0.5,
    write_behind_interval_seconds: float = 5.0,
    default_list_limit: int = 100,
) -> CachingStrategy:
    """Build one strategy around the given stores."""
    strategy_name = parse_strategy_name(name)
    strategy_class = STRATEGIES[strategy_name]

    if not issubclass(strategy_class, CachedStrategy):
        return strategy_class(store, stats, default_list_limit=default_list_limit)

    if cache is None:
        raise ConfigurationError(f"Strategy {strategy_name.value} requires a cache store")

    options = {
        "cache_ttl_seconds": cache_ttl_seconds,
        "cache_timeout_seconds": cache_timeout_seconds,
        "default_list_limit": default_list_limit,
    }
    if strategy_class is WriteBehindStrategy:
        options["write_behind_interval_seconds"] = write_behind_interval_seconds

    return strategy_class(store, cache, stats, **options)


def create_strategy_from_settings(
    settings: StrategySettings,
    registry: Optional[CollectorRegistry] = None,
) -> CachingStrategy:
    """Build the configured strategy against PostgreSQL and Redis."""
    strategy_name = parse_strategy_name(settings.strategy)

    store = PostgreSQLRecordStore(
        settings.postgres_dsn,
        min_size=settings.store_pool_min_size,
        max_size=settings.store_pool_max_size,
        command_timeout=settings.store_command_timeout_seconds,
    )
    cache = None
    if strategy_name is not StrategyName.NO_CACHING:
        cache = RedisCacheStore(settings.redis_url)

    stats = StatsCollector(
        strategy_name.value,
        latency_sample_limit=settings.latency_sample_limit,
        metrics=get_metrics_collector(strategy_name.value, registry),
    )

    return build_strategy(
        strategy_name,
        store,
        cache,
        stats=stats,
        cache_ttl_seconds=settings.cache_ttl_seconds,
        cache_timeout_seconds=settings.cache_timeout_seconds,
        write_behind_interval_seconds=settings.write_behind_interval_seconds,
        default_list_limit=settings.default_list_limit,
    )
