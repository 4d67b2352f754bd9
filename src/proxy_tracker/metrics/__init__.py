"""Metrics — Prometheus metrics collection for the proxy detector."""

from __future__ import annotations

from proxy_tracker.metrics.collector import DetectorMetrics, MetricsCollector

__all__ = ["DetectorMetrics", "MetricsCollector"]
