"""Correlation of funding and redeeming transactions at a proxy address.

Nothing on chain links the transaction that funds a proxy to the one that
redeems it, so the counterpart is searched among the transactions known at
the proxy address. Matching is greedy: every call binds at most one
relation from what is known right now and never reopens a relation the
store has already written. Feed transactions most recent first (see
:func:`~proxy_tracker.proxy.ordering.sort_for_correlation`).

Whether a related transaction exists or not, the result also says whether
the proxy address still has to be watched on the network.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from proxy_tracker.proxy.classifier import get_direction
from proxy_tracker.proxy.models import (
    CorrelationResult,
    ProxyTransactionDirection,
    ProxyType,
    Transaction,
)
from proxy_tracker.proxy.ordering import is_after, is_before, ordering_values
from proxy_tracker.proxy.tags import is_proxy_data

if TYPE_CHECKING:
    from collections.abc import Iterable

    from proxy_tracker.proxy.classifier import AddressPredicate

logger = logging.getLogger(__name__)


def _amounts_match(
    tx: Transaction,
    candidate: Transaction,
    *,
    is_funding: bool,
    is_cashlink: bool,
) -> bool:
    if is_funding:
        # candidate redeems what tx funded
        redeemed, funded = candidate.value + candidate.fee, tx.value
    else:
        redeemed, funded = tx.value + tx.fee, candidate.value
    # Cashlinks may be redeemed partially, other proxies only entirely.
    return redeemed <= funded if is_cashlink else redeemed == funded


def _is_candidate(
    tx: Transaction,
    candidate: Transaction,
    proxy_address: str,
    is_locally_owned: AddressPredicate,
    *,
    is_funding: bool,
    is_cashlink: bool,
    inclusive_fallback: bool,
) -> bool:
    if candidate.transaction_hash == tx.transaction_hash:
        return False
    if candidate.related_transaction_hash or candidate.state.is_dropped:
        return False
    # Unrelated third parties may reuse a proxy; one side must be ours.
    if not any(
        is_locally_owned(address)
        for address in (tx.sender, tx.recipient, candidate.sender, candidate.recipient)
    ):
        return False
    if is_funding:
        if candidate.sender != proxy_address:
            return False
        if not is_after(candidate, tx, inclusive_fallback=inclusive_fallback):
            return False
    else:
        if candidate.recipient != proxy_address:
            return False
        if not is_before(candidate, tx, inclusive_fallback=inclusive_fallback):
            return False
    return _amounts_match(tx, candidate, is_funding=is_funding, is_cashlink=is_cashlink)


def _is_closer(candidate: Transaction, best: Transaction, *, is_funding: bool) -> bool:
    """Earliest redeemer for a funding tx, latest funder for a redeeming tx."""
    checked, current = ordering_values(candidate, best)
    return checked < current if is_funding else checked > current


def find_related_transaction(
    tx: Transaction,
    proxy_address: str,
    known_txs_at_proxy: Iterable[Transaction],
    is_locally_owned: AddressPredicate,
    *,
    inclusive_validity_fallback: bool = False,
) -> Transaction | None:
    """Find the counterpart of *tx* among the transactions known at its proxy.

    Args:
        tx: The transaction to correlate.
        proxy_address: The proxy address *tx* funds or redeems.
        known_txs_at_proxy: All known transactions from or to the proxy.
        is_locally_owned: Address ownership lookup.
        inclusive_validity_fallback: Accept equal validity start heights as
            ordered when comparisons fall back to them.

    Returns:
        The related transaction, or None if no candidate qualifies.

    Raises:
        InvalidTransactionData: If the proxy is on neither side of *tx*.
    """
    is_funding = get_direction(tx, proxy_address) == ProxyTransactionDirection.FUND
    known = list(known_txs_at_proxy)

    if tx.related_transaction_hash:
        return next(
            (k for k in known if k.transaction_hash == tx.related_transaction_hash),
            None,
        )

    is_cashlink = is_proxy_data(tx.extra_data, ProxyType.CASHLINK)
    related: Transaction | None = None
    for candidate in known:
        if not _is_candidate(
            tx,
            candidate,
            proxy_address,
            is_locally_owned,
            is_funding=is_funding,
            is_cashlink=is_cashlink,
            inclusive_fallback=inclusive_validity_fallback,
        ):
            continue
        if related is None or _is_closer(candidate, related, is_funding=is_funding):
            related = candidate

    if related is not None:
        logger.debug(
            "Matched %s with %s at proxy %s",
            tx.transaction_hash,
            related.transaction_hash,
            proxy_address,
        )
    return related


def needs_subscription(
    tx: Transaction,
    related: Transaction | None,
    known_txs_at_proxy: Iterable[Transaction],
    is_locally_owned: AddressPredicate,
) -> bool:
    """Decide whether the proxy address still has to be watched on the network.

    That is the case while *tx* has no counterpart, while any other known
    transaction at the proxy is still unlinked, or while a transaction is
    unconfirmed and touches none of our own (already watched) addresses.
    *tx* and *related* are exempt from the unlinked check; the store writes
    their hashes only after this decision.
    """
    if related is None:
        return True
    pair = {tx.transaction_hash, related.transaction_hash}
    for known in known_txs_at_proxy:
        if not known.related_transaction_hash and known.transaction_hash not in pair:
            return True
        if (
            not known.is_confirmed
            and not is_locally_owned(known.sender)
            and not is_locally_owned(known.recipient)
        ):
            return True
    return False


def correlate(
    tx: Transaction,
    proxy_address: str,
    known_txs_at_proxy: Iterable[Transaction],
    is_locally_owned: AddressPredicate,
    *,
    inclusive_validity_fallback: bool = False,
) -> CorrelationResult:
    """Find the related transaction of *tx* and the subscription decision for its proxy.

    Raises:
        InvalidTransactionData: If the proxy is on neither side of *tx*.
    """
    known = list(known_txs_at_proxy)
    direction = get_direction(tx, proxy_address)
    related = find_related_transaction(
        tx,
        proxy_address,
        known,
        is_locally_owned,
        inclusive_validity_fallback=inclusive_validity_fallback,
    )
    return CorrelationResult(
        proxy_address=proxy_address,
        direction=direction,
        related=related,
        needs_subscription=needs_subscription(tx, related, known, is_locally_owned),
    )
