"""Direction classification of proxy transactions.

Decides whether a transaction funds or redeems a proxy address, and which of
its two addresses is the proxy. Address ownership and the set of known
proxies are passed in as read-only lookups.
"""

from __future__ import annotations

from collections.abc import Callable

from proxy_tracker.errors.tracker_errors import InvalidTransactionData
from proxy_tracker.proxy.models import ProxyTransactionDirection, Transaction
from proxy_tracker.proxy.tags import is_proxy_data

AddressPredicate = Callable[[str], bool]


def is_funding_transaction(
    tx: Transaction,
    is_locally_owned: AddressPredicate,
    is_known_proxy: AddressPredicate,
) -> bool:
    """Heuristically decide whether *tx* sends value into a proxy.

    Cashlink transactions always carry the proxy tag. HTLC creation
    transactions sent from a proxy carry HTLC data instead and have to be
    recognised by the caller. Without a tag, a transaction sent from one of
    our addresses or to an already known proxy counts as funding.

    Known limitation: an untagged transfer between two of our own addresses
    through a reused proxy is classified as funding, since the sender check
    wins over everything but the tag.
    """
    return (
        is_proxy_data(tx.extra_data, direction=ProxyTransactionDirection.FUND)
        or is_locally_owned(tx.sender)
        or is_known_proxy(tx.recipient)
    )


def get_proxy_address(
    tx: Transaction,
    is_locally_owned: AddressPredicate,
    is_known_proxy: AddressPredicate,
) -> str:
    """Return the proxy address of a transaction already known to be a proxy transaction."""
    if is_funding_transaction(tx, is_locally_owned, is_known_proxy):
        return tx.recipient
    return tx.sender


def get_direction(tx: Transaction, proxy_address: str) -> ProxyTransactionDirection:
    """Return the leg *tx* plays for *proxy_address*.

    Raises:
        InvalidTransactionData: If the proxy is on neither side of *tx*.
    """
    if proxy_address == tx.recipient:
        return ProxyTransactionDirection.FUND
    if proxy_address == tx.sender:
        return ProxyTransactionDirection.REDEEM
    raise InvalidTransactionData(
        f"proxy {proxy_address} is neither sender nor recipient of {tx.transaction_hash}"
    )
