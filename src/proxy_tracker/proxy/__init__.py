"""Proxy transactions — tagging, classification and correlation."""

from __future__ import annotations

from proxy_tracker.proxy.classifier import get_direction, get_proxy_address, is_funding_transaction
from proxy_tracker.proxy.detector import ProxyDetector
from proxy_tracker.proxy.matcher import correlate, find_related_transaction, needs_subscription
from proxy_tracker.proxy.models import (
    CorrelationResult,
    ProxyTransactionDirection,
    ProxyType,
    Transaction,
    TransactionState,
)
from proxy_tracker.proxy.ordering import sort_for_correlation
from proxy_tracker.proxy.subscriptions import InMemoryProxyStore, SubscriptionTracker
from proxy_tracker.proxy.tags import decode_proxy_data, is_proxy_data, proxy_extra_data

__all__ = [
    "CorrelationResult",
    "InMemoryProxyStore",
    "ProxyDetector",
    "ProxyTransactionDirection",
    "ProxyType",
    "SubscriptionTracker",
    "Transaction",
    "TransactionState",
    "correlate",
    "decode_proxy_data",
    "find_related_transaction",
    "get_direction",
    "get_proxy_address",
    "is_funding_transaction",
    "is_proxy_data",
    "needs_subscription",
    "proxy_extra_data",
    "sort_for_correlation",
]
