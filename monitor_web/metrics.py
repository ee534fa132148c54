"""Metrics facade.

Service code should ONLY call the semantic helpers here so the backend can
change freely. Counters live in the default Prometheus registry and are
exposed by ``GET /metrics``.
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger("metrics")

_ALERTS_RECEIVED = Counter(
    "alerts_received_total", "Alert events accepted for dispatch", ["module"]
)
_ALERTS_STORED = Counter(
    "alerts_stored_total", "Alert records committed", ["collection"]
)
_ALERTS_REJECTED = Counter(
    "alerts_rejected_total", "Alert events rejected before storage", ["reason"]
)
_ALERTS_STORE_FAILED = Counter(
    "alerts_store_failed_total", "Alert writes rolled back after a storage error", ["collection"]
)
_ALERTS_UNROUTED = Counter(
    "alerts_unrouted_total", "Alerts with an unrecognised module stored in the general collection"
)
_ALERT_STORE_LATENCY = Histogram(
    "alert_store_latency_seconds",
    "Time spent persisting a single alert",
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5),
)
_DASHBOARD_QUERIES = Counter(
    "dashboard_queries_total", "Module dashboard queries served", ["module"]
)


def alert_received(module: str) -> None:
    """``module`` is the resolved routing tag, never the raw client string."""
    _ALERTS_RECEIVED.labels(module=module).inc()


def alert_stored(collection: str, latency_seconds: float | None = None) -> None:
    _ALERTS_STORED.labels(collection=collection).inc()
    if latency_seconds is not None:
        _ALERT_STORE_LATENCY.observe(latency_seconds)


def alert_rejected(reason: str) -> None:
    _ALERTS_REJECTED.labels(reason=reason).inc()


def alert_store_failed(collection: str) -> None:
    _ALERTS_STORE_FAILED.labels(collection=collection).inc()
    logger.debug("metric alerts_store_failed_total{collection=%s} += 1", collection)


def alert_unrouted() -> None:
    _ALERTS_UNROUTED.inc()


def dashboard_query(module: str) -> None:
    _DASHBOARD_QUERIES.labels(module=module).inc()
