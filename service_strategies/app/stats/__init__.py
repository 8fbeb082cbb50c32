"""Per-strategy statistics."""

from .collector import StatsCollector, StatsSnapshot

__all__ = ["StatsCollector", "StatsSnapshot"]
