"""
Unit tests for strategy construction and the service lifecycle.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from prometheus_client import CollectorRegistry

from shared.config import get_settings
from shared.errors import ConfigurationError
from shared.logging import strategy_var
from service_strategies.app.cache import RedisCacheStore
from service_strategies.app.persistence import PostgreSQLRecordStore
from service_strategies.app.service import StrategyService
from service_strategies.app.strategies import (
    STRATEGIES,
    CacheAsideStrategy,
    NoCachingStrategy,
    StrategyName,
    WriteBehindStrategy,
    build_strategy,
    create_strategy_from_settings,
    parse_strategy_name,
)


class TestFactory:
    """Test cases for strategy construction."""

    def test_every_name_has_a_class(self):
        assert set(STRATEGIES) == set(StrategyName)
        for name, strategy_class in STRATEGIES.items():
            assert strategy_class.name is name

    @pytest.mark.parametrize("value", ["cache-aside", " Cache-Aside ", StrategyName.CACHE_ASIDE])
    def test_parse_strategy_name(self, value):
        assert parse_strategy_name(value) is StrategyName.CACHE_ASIDE

    def test_parse_unknown_strategy(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_strategy_name("refresh-ahead")

        assert exc_info.value.code == "CONFIGURATION_ERROR"
        assert "write-behind" in exc_info.value.details["known"]

    def test_cached_strategy_requires_cache(self, record_store):
        with pytest.raises(ConfigurationError):
            build_strategy("write-through", record_store)

    def test_no_caching_needs_no_cache(self, record_store):
        strategy = build_strategy("no-caching", record_store)

        assert isinstance(strategy, NoCachingStrategy)

    def test_options_are_applied(self, record_store, cache_store):
        strategy = build_strategy(
            StrategyName.WRITE_BEHIND,
            record_store,
            cache_store,
            cache_ttl_seconds=30,
            cache_timeout_seconds=0.2,
            write_behind_interval_seconds=1.5,
            default_list_limit=7,
        )

        assert isinstance(strategy, WriteBehindStrategy)
        assert strategy.cache_ttl_seconds == 30
        assert strategy.cache.timeout_seconds == 0.2
        assert strategy.queue.interval_seconds == 1.5
        assert strategy.default_list_limit == 7

    def test_from_settings(self):
        settings = get_settings(strategy="cache-aside", cache_ttl_seconds=120)
        registry = CollectorRegistry()

        strategy = create_strategy_from_settings(settings, registry)

        assert isinstance(strategy, CacheAsideStrategy)
        assert isinstance(strategy.store, PostgreSQLRecordStore)
        assert isinstance(strategy.cache.inner, RedisCacheStore)
        assert strategy.cache_ttl_seconds == 120

        strategy.stats.record_read_hit()
        assert registry.get_sample_value("cache_hits_total", {"service": "cache-aside"}) == 1

    def test_from_settings_no_caching(self):
        strategy = create_strategy_from_settings(get_settings(strategy="no-caching"), CollectorRegistry())

        assert isinstance(strategy, NoCachingStrategy)
        assert not hasattr(strategy, "cache")


class TestSettings:
    """Test cases for StrategySettings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("CACHE_LAB_STRATEGY", raising=False)
        settings = get_settings()

        assert settings.strategy == "no-caching"
        assert settings.cache_ttl_seconds == 3600
        assert settings.write_behind_interval_seconds == 5.0
        assert settings.cache_timeout_seconds == 0.5

    def test_environment_prefix(self, monkeypatch):
        monkeypatch.setenv("CACHE_LAB_STRATEGY", "write-behind")
        monkeypatch.setenv("CACHE_LAB_WRITE_BEHIND_INTERVAL_SECONDS", "2.5")

        settings = get_settings()

        assert settings.strategy == "write-behind"
        assert settings.write_behind_interval_seconds == 2.5


class TestStrategyService:
    """Test cases for StrategyService."""

    @pytest.fixture
    def strategy(self):
        strategy = MagicMock()
        strategy.name = StrategyName.WRITE_BEHIND
        strategy.start = AsyncMock()
        strategy.stop = AsyncMock()
        return strategy

    @pytest.fixture
    def service(self, strategy):
        return StrategyService(get_settings(strategy="write-behind"), strategy=strategy)

    @pytest.mark.asyncio
    async def test_context_manager_lifecycle(self, service, strategy):
        async with service as running:
            assert running.started is True
            assert strategy_var.get() == "write-behind"
            strategy.start.assert_called_once()

        strategy.stop.assert_called_once()
        assert service.started is False
        assert strategy_var.get() is None

    @pytest.mark.asyncio
    async def test_stop_without_start(self, service, strategy):
        await service.stop()

        strategy.stop.assert_not_called()

    def test_builds_strategy_from_settings(self):
        service = StrategyService(get_settings(strategy="write-around"), registry=CollectorRegistry())

        assert service.strategy.name is StrategyName.WRITE_AROUND
