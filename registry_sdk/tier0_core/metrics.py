"""
registry_sdk.tier0_core.metrics
─────────────────────────────────
Counters and histograms with standard naming and labels, plus the metrics
the resolver and registry client emit. Exported through the default
prometheus-client registry; mount it with start_metrics_server() or the
host application's own /metrics endpoint.

Minimal stack: prometheus-client
Configure via: REGISTRY_METRICS_PORT (default: 8001)
"""
from __future__ import annotations

import os
from typing import Callable

from prometheus_client import Counter, Histogram, start_http_server

# Standard labels applied to every metric
_DEFAULT_LABELS = ["service", "env"]
_SERVICE = os.getenv("APP_NAME", "registry_sdk")
_ENV = os.getenv("APP_ENV", "development")
_DEFAULT_LABEL_VALUES = {"service": _SERVICE, "env": _ENV}


def counter(name: str, description: str, labels: list[str] | None = None) -> Callable:
    """
    Create a counter with standard labels.

    Usage:
        lookups = counter("schema_cache_lookups", "Cache lookups", ["result"])
        lookups(result="hit").inc()
    """
    all_labels = _DEFAULT_LABELS + (labels or [])
    c = Counter(name, description, all_labels)

    def _counter(**extra_labels: str) -> Counter:
        return c.labels(**_DEFAULT_LABEL_VALUES, **extra_labels)

    return _counter


def histogram(
    name: str,
    description: str,
    labels: list[str] | None = None,
    buckets: tuple = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
) -> Callable:
    """
    Create a histogram with standard labels.

    Usage:
        duration = histogram("schema_registry_request_duration_seconds", "Latency", ["operation"])
        duration(operation="fetch_by_id").observe(elapsed)
    """
    all_labels = _DEFAULT_LABELS + (labels or [])
    h = Histogram(name, description, all_labels, buckets=buckets)

    def _histogram(**extra_labels: str) -> Histogram:
        return h.labels(**_DEFAULT_LABEL_VALUES, **extra_labels)

    return _histogram


def start_metrics_server(port: int | None = None) -> None:
    """
    Start the Prometheus HTTP metrics server on a dedicated port.
    Call once at application startup.
    """
    port = port or int(os.getenv("REGISTRY_METRICS_PORT", "8001"))
    start_http_server(port)


# ── registry_sdk metrics ──────────────────────────────────────────────────────

cache_lookups = counter(
    "schema_cache_lookups",
    "Schema cache lookups by result (hit|miss)",
    ["result"],
)
registry_requests = counter(
    "schema_registry_requests",
    "Schema registry HTTP calls by operation and outcome",
    ["operation", "outcome"],
)
registry_request_duration = histogram(
    "schema_registry_request_duration_seconds",
    "Schema registry HTTP call latency",
    ["operation"],
)


__all__ = [
    "counter",
    "histogram",
    "start_metrics_server",
    "cache_lookups",
    "registry_requests",
    "registry_request_duration",
]
