"""Error hierarchy for proxy-tracker."""

from __future__ import annotations

from proxy_tracker.errors.tracker_errors import (
    InvalidProxyIdentifier,
    InvalidTransactionData,
    ProxyTrackerError,
)

__all__ = ["InvalidProxyIdentifier", "InvalidTransactionData", "ProxyTrackerError"]
