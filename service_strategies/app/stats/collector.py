"""
Statistics collector for a strategy instance.

Each strategy owns one collector; nothing here is module-global, so two
strategies (or two tests) never share counters. Counters are mirrored into
Prometheus collectors when a ``MetricsCollector`` is supplied. Prometheus
counters are monotonic, so ``reset`` only zeroes the local view.
"""

import threading
from collections import deque
from typing import Deque, Dict, Optional

from pydantic import BaseModel, Field

from shared.metrics import MetricsCollector


COUNTERS = (
    "reads",
    "writes",
    "cache_hits",
    "cache_misses",
    "errors",
    "cache_errors",
    "queued_writes",
    "flushed_writes",
    "dropped_writes",
)

PROMETHEUS_COUNTERS = {
    "reads": "cache_reads_total",
    "writes": "cache_writes_total",
    "cache_hits": "cache_hits_total",
    "cache_misses": "cache_misses_total",
    "errors": "cache_errors_total",
    "cache_errors": "cache_backend_errors_total",
    "dropped_writes": "cache_dropped_writes_total",
}


class StatsSnapshot(BaseModel):
    """Point-in-time copy of a strategy's counters."""

    strategy: str
    reads: int = 0
    writes: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    errors: int = 0
    cache_errors: int = 0
    queued_writes: int = 0
    flushed_writes: int = 0
    dropped_writes: int = 0
    current_queue_size: int = 0
    cache_hit_rate: float = Field(default=0.0, description="Hit percentage of all reads")
    avg_response_time_ms: float = 0.0
    p95_response_time_ms: float = 0.0
    latency_samples: int = 0


class StatsCollector:
    """Counters and bounded latency samples for one strategy."""

    def __init__(
        self,
        strategy_name: str,
        latency_sample_limit: int = 10000,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.strategy_name = strategy_name
        self.metrics = metrics
        self._lock = threading.Lock()
        self._counters: Dict[str, int] = dict.fromkeys(COUNTERS, 0)
        self._latencies: Deque[float] = deque(maxlen=latency_sample_limit)

    def _increment(self, name: str, amount: int = 1):
        with self._lock:
            self._counters[name] += amount
        if self.metrics and name in PROMETHEUS_COUNTERS:
            self.metrics.increment_counter(PROMETHEUS_COUNTERS[name], amount)

    def get(self, name: str) -> int:
        with self._lock:
            return self._counters[name]

    def record_read_hit(self):
        self._increment("reads")
        self._increment("cache_hits")

    def record_read_miss(self):
        self._increment("reads")
        self._increment("cache_misses")

    def record_write(self):
        self._increment("writes")

    def record_error(self):
        self._increment("errors")

    def record_cache_error(self, operation: str = ""):
        self._increment("cache_errors")

    def record_queued(self, queue_size: int):
        self._increment("queued_writes")
        self.record_queue_size(queue_size)

    def record_flushed(self):
        self._increment("flushed_writes")
        if self.metrics:
            self.metrics.set_gauge("cache_flushed_writes", self.get("flushed_writes"))

    def record_dropped(self):
        self._increment("dropped_writes")

    def record_queue_size(self, queue_size: int):
        if self.metrics:
            self.metrics.set_gauge("cache_queued_writes", queue_size)

    def record_duration(self, operation: str, duration_ms: float):
        with self._lock:
            self._latencies.append(duration_ms)
        if self.metrics:
            self.metrics.observe_duration(operation, duration_ms)

    def snapshot(self, current_queue_size: int = 0) -> StatsSnapshot:
        """Copy the counters and derive hit rate and latency figures."""
        with self._lock:
            counters = dict(self._counters)
            latencies = sorted(self._latencies)

        hit_rate = 0.0
        if counters["reads"] > 0:
            hit_rate = round(counters["cache_hits"] / counters["reads"] * 100, 2)

        avg = sum(latencies) / len(latencies) if latencies else 0.0
        p95 = latencies[min(len(latencies) - 1, int(len(latencies) * 0.95))] if latencies else 0.0

        return StatsSnapshot(
            strategy=self.strategy_name,
            current_queue_size=current_queue_size,
            cache_hit_rate=hit_rate,
            avg_response_time_ms=avg,
            p95_response_time_ms=p95,
            latency_samples=len(latencies),
            **counters
        )

    def reset(self):
        """Zero every counter and drop latency samples."""
        with self._lock:
            self._counters = dict.fromkeys(COUNTERS, 0)
            self._latencies.clear()
        if self.metrics:
            self.metrics.set_gauge("cache_flushed_writes", 0)
