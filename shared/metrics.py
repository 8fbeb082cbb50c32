"""
Prometheus metrics for the cache strategy lab.

Collectors are registered on the registry handed in by the caller; exposing
them over HTTP is left to whatever hosts the strategy.
"""

from typing import Dict, Any, Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram


LATENCY_BUCKETS_MS = (5, 10, 20, 50, 100, 200, 500, 1000, 2000, 5000)


class MetricsCollector:
    """Prometheus mirror of strategy counters, labelled by service."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up strategy metrics."""
        for name, description in (
            ("cache_reads_total", "Total read operations"),
            ("cache_writes_total", "Total write operations"),
            ("cache_hits_total", "Total cache hits"),
            ("cache_misses_total", "Total cache misses"),
            ("cache_errors_total", "Total request errors"),
            ("cache_backend_errors_total", "Cache calls that failed open"),
            ("cache_dropped_writes_total", "Queued writes dropped during flush"),
        ):
            self._metrics[name] = Counter(name, description, ["service"], registry=self.registry)

        self._metrics["cache_queued_writes"] = Gauge(
            "cache_queued_writes",
            "Pending queued writes (write-behind)",
            ["service"],
            registry=self.registry
        )

        self._metrics["cache_flushed_writes"] = Gauge(
            "cache_flushed_writes",
            "Flushed writes (write-behind)",
            ["service"],
            registry=self.registry
        )

        self._metrics["cache_request_duration_ms"] = Histogram(
            "cache_request_duration_ms",
            "Strategy operation duration in milliseconds",
            ["service", "operation"],
            buckets=LATENCY_BUCKETS_MS,
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def increment_counter(self, metric_name: str, amount: float = 1.0):
        """Increment a counter metric for this service."""
        if metric_name in self._metrics:
            self._metrics[metric_name].labels(service=self.service_name).inc(amount)

    def set_gauge(self, metric_name: str, value: float):
        """Set a gauge metric value for this service."""
        if metric_name in self._metrics:
            self._metrics[metric_name].labels(service=self.service_name).set(value)

    def observe_duration(self, operation: str, duration_ms: float):
        """Record an operation duration."""
        self._metrics["cache_request_duration_ms"].labels(
            service=self.service_name,
            operation=operation
        ).observe(duration_ms)

    def sample(self, metric_name: str, **labels) -> Optional[float]:
        """Read the current value of a collector from the registry."""
        sample_name = metric_name
        if isinstance(self._metrics.get(metric_name), Counter) and not metric_name.endswith("_total"):
            sample_name = f"{metric_name}_total"
        return self.registry.get_sample_value(sample_name, {"service": self.service_name, **labels})


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
