"""Metrics collector — Prometheus counters, gauges, histograms.

- ``proxy_correlations_total`` counter-vec (linked, matched, unmatched)
- ``proxy_subscription_decisions_total`` counter-vec (funded, claimed, forgotten)
- ``proxy_correlation_histogram``
- ``proxy_subscribed_addresses`` gauge
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterator


_PREFIX = "proxy"

OUTCOME_LINKED = "linked"
OUTCOME_MATCHED = "matched"
OUTCOME_UNMATCHED = "unmatched"

DECISION_FUNDED = "funded"
DECISION_CLAIMED = "claimed"
DECISION_FORGOTTEN = "forgotten"


class MetricsCollector:
    """Low-level Prometheus collector that owns the registry.

    Use :class:`DetectorMetrics` for the high-level tracking interface.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def gauge(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Gauge:
        """Register and return a Gauge."""
        return Gauge(name, doc, labels, registry=self._registry)

    def histogram(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Histogram:
        """Register and return a Histogram."""
        return Histogram(name, doc, labels, registry=self._registry)

    def counter(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Counter:
        """Register and return a Counter."""
        return Counter(name, doc, labels, registry=self._registry)


class DetectorMetrics:
    """High-level metrics of the proxy detector.

    The histogram tracks correlation duration in seconds.
    """

    def __init__(self, collector: MetricsCollector | None = None) -> None:
        self._collector = collector or MetricsCollector()

        self._correlations = self._collector.counter(
            f"{_PREFIX}_correlations",
            "Correlated proxy transactions by outcome",
            ("outcome",),
        )
        self._decisions = self._collector.counter(
            f"{_PREFIX}_subscription_decisions",
            "Proxy subscription decisions reported to the proxy store",
            ("decision",),
        )
        self._correlation_time = self._collector.histogram(
            f"{_PREFIX}_correlation_histogram",
            "Duration of proxy transaction correlation",
        )
        self._subscribed = self._collector.gauge(
            f"{_PREFIX}_subscribed_addresses",
            "Addresses currently subscribed for transaction updates",
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._collector.registry

    def record_correlation(self, outcome: str) -> None:
        """Count one correlation with the given outcome."""
        self._correlations.labels(outcome=outcome).inc()

    def record_decision(self, decision: str) -> None:
        """Count one subscription decision."""
        self._decisions.labels(decision=decision).inc()

    def set_subscribed_count(self, count: int) -> None:
        """Set the current number of subscribed addresses."""
        self._subscribed.set(count)

    @contextmanager
    def track_correlation(self) -> Iterator[None]:
        """Track the duration of a correlation."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._correlation_time.observe(time.monotonic() - start)
