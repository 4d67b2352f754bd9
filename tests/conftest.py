"""Shared test fixtures for proxy-tracker test suite."""

from __future__ import annotations

import pytest

OWN = "NQ01 OWN0 0000 0000 0000 0000 0000 0000 0000"
OWN_2 = "NQ02 OWN1 0000 0000 0000 0000 0000 0000 0000"


@pytest.fixture
def app_config():
    """Provide a test AppConfig with safe defaults."""
    from proxy_tracker.config.settings import AppConfig, MetricsConfig

    return AppConfig(debug=True, metrics=MetricsConfig(enabled=True))


@pytest.fixture
def is_owned():
    """Ownership lookup for the two local test addresses."""
    return {OWN, OWN_2}.__contains__


@pytest.fixture
def make_tx():
    """Factory for transactions with sensible defaults."""
    from proxy_tracker.proxy.models import Transaction, TransactionState

    def _make(tx_hash: str, sender: str, recipient: str, value: int = 100, **kwargs):
        kwargs.setdefault("validity_start_height", 0)
        kwargs.setdefault("state", TransactionState.CONFIRMED)
        return Transaction(
            transaction_hash=tx_hash,
            sender=sender,
            recipient=recipient,
            value=value,
            **kwargs,
        )

    return _make
