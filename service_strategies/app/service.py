"""
Strategy service lifecycle.

Wires settings, logging and metrics to one strategy instance and owns its
start/stop. Request routing lives with whatever hosts this service.
"""

from typing import Optional

from prometheus_client import CollectorRegistry

from shared.config import StrategySettings, get_settings
from shared.logging import clear_context, configure_logging, get_logger, set_strategy_context
from .strategies import CachingStrategy, create_strategy_from_settings

SERVICE_NAME = "cache-strategies"


class StrategyService:
    """Owns the lifecycle of the configured strategy."""

    def __init__(
        self,
        settings: Optional[StrategySettings] = None,
        *,
        strategy: Optional[CachingStrategy] = None,
        registry: Optional[CollectorRegistry] = None,
    ):
        self.settings = settings or get_settings()
        configure_logging(SERVICE_NAME, self.settings.log_level)
        self.logger = get_logger("strategies.service")

        self.registry = registry if registry is not None else CollectorRegistry()
        self.strategy = strategy or create_strategy_from_settings(self.settings, self.registry)
        self.started = False

    async def start(self):
        """Connect backends and start background work."""
        set_strategy_context(self.strategy.name.value)
        await self.strategy.start()
        self.started = True
        self.logger.info(
            "Strategy service started",
            strategy=self.strategy.name.value,
            env=self.settings.env
        )

    async def stop(self):
        """Stop background work, drain buffered writes and disconnect."""
        if not self.started:
            return
        await self.strategy.stop()
        self.started = False
        self.logger.info("Strategy service stopped", strategy=self.strategy.name.value)
        clear_context()

    async def __aenter__(self) -> "StrategyService":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()
