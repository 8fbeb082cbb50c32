"""
Shared utilities for the cache strategy lab.

Common building blocks consumed by the strategy service:

- config: Settings via pydantic-settings
- logging: Structured logging with trace correlation
- errors: Canonical error types and responses
- metrics: Prometheus collectors mirrored from strategy stats

Keep this package free of imports from service_strategies.
"""
