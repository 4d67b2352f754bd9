"""ProxyDetector — entry point for correlating incoming proxy transactions.

For every proxy transaction the store adds or updates:
1. Classify it as funding or redeeming and determine the proxy address
2. Correlate it with the transactions known at that proxy
3. Report the proxy as funded / claimed, or let it be forgotten
4. Return the related transaction for the store to link both sides
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from proxy_tracker.config.settings import AppConfig
from proxy_tracker.metrics.collector import (
    DECISION_CLAIMED,
    DECISION_FORGOTTEN,
    DECISION_FUNDED,
    OUTCOME_LINKED,
    OUTCOME_MATCHED,
    OUTCOME_UNMATCHED,
    DetectorMetrics,
)
from proxy_tracker.proxy.classifier import get_proxy_address
from proxy_tracker.proxy.matcher import correlate
from proxy_tracker.proxy.models import ProxyTransactionDirection

if TYPE_CHECKING:
    from collections.abc import Mapping

    from proxy_tracker.proxy.classifier import AddressPredicate
    from proxy_tracker.proxy.models import CorrelationResult, Transaction
    from proxy_tracker.proxy.subscriptions import ProxyStore

logger = logging.getLogger(__name__)


class ProxyDetector:
    """Correlates proxy transactions and drives the proxy subscription lifecycle.

    Not thread-safe. Calls for the same proxy address must not overlap, and
    since matching is greedy their order matters: feed transactions most
    recent first.

    Usage::

        store = InMemoryProxyStore()
        detector = ProxyDetector(store, wallet.owns, store.is_known_proxy)
        related = detector.handle_proxy_transaction(tx, known_proxy_transactions)
    """

    def __init__(
        self,
        proxy_store: ProxyStore,
        is_locally_owned: AddressPredicate,
        is_known_proxy: AddressPredicate,
        *,
        config: AppConfig | None = None,
        metrics: DetectorMetrics | None = None,
    ) -> None:
        self._store = proxy_store
        self._is_locally_owned = is_locally_owned
        self._is_known_proxy = is_known_proxy
        self._config = config or AppConfig()
        if metrics is None and self._config.metrics.enabled:
            metrics = DetectorMetrics()
        self._metrics = metrics

    @property
    def metrics(self) -> DetectorMetrics | None:
        """Metrics recorded by this detector, if enabled."""
        return self._metrics

    def proxy_address_of(self, tx: Transaction) -> str:
        """Return the proxy address *tx* funds or redeems."""
        return get_proxy_address(tx, self._is_locally_owned, self._is_known_proxy)

    def process(
        self,
        tx: Transaction,
        known_proxy_transactions: Mapping[str, Mapping[str, Transaction]],
    ) -> CorrelationResult:
        """Correlate *tx* and report the resulting proxy state to the store.

        Args:
            tx: A transaction already recognised as a proxy transaction.
            known_proxy_transactions: Known transactions per proxy address,
                keyed by transaction hash.

        Returns:
            The full correlation result.

        Raises:
            InvalidTransactionData: If the transaction does not touch the
                proxy address it was classified for.
        """
        proxy_address = self.proxy_address_of(tx)
        at_proxy = known_proxy_transactions.get(proxy_address)
        known = list(at_proxy.values()) if at_proxy else [tx]

        if self._metrics is not None:
            with self._metrics.track_correlation():
                result = self._correlate(tx, proxy_address, known)
        else:
            result = self._correlate(tx, proxy_address, known)

        self._record_outcome(tx, result)
        self._report(result)
        return result

    def handle_proxy_transaction(
        self,
        tx: Transaction,
        known_proxy_transactions: Mapping[str, Mapping[str, Transaction]],
    ) -> Transaction | None:
        """Correlate *tx* and return its related transaction, if any."""
        return self.process(tx, known_proxy_transactions).related

    # -- Internals --

    def _correlate(
        self,
        tx: Transaction,
        proxy_address: str,
        known: list[Transaction],
    ) -> CorrelationResult:
        return correlate(
            tx,
            proxy_address,
            known,
            self._is_locally_owned,
            inclusive_validity_fallback=self._config.correlation.inclusive_validity_fallback,
        )

    def _record_outcome(self, tx: Transaction, result: CorrelationResult) -> None:
        if tx.related_transaction_hash:
            outcome = OUTCOME_LINKED
        elif result.is_matched:
            outcome = OUTCOME_MATCHED
        else:
            outcome = OUTCOME_UNMATCHED
        logger.debug(
            "Proxy transaction %s (%s of %s): %s",
            tx.transaction_hash,
            result.direction,
            result.proxy_address,
            outcome,
        )
        if self._metrics is not None:
            self._metrics.record_correlation(outcome)

    def _report(self, result: CorrelationResult) -> None:
        if not result.needs_subscription:
            decision = DECISION_FORGOTTEN
            self._store.remove_proxy(result.proxy_address)
        elif result.direction == ProxyTransactionDirection.FUND:
            decision = DECISION_FUNDED
            self._store.add_funded_proxy(result.proxy_address)
        else:
            decision = DECISION_CLAIMED
            self._store.add_claimed_proxy(result.proxy_address)
        if self._metrics is not None:
            self._metrics.record_decision(decision)
