"""Proxy subscription bookkeeping.

The detector never talks to the network. It reports proxy lifecycle
changes to a :class:`ProxyStore`; the in-memory implementation below turns
those into subscribe / unsubscribe requests, deduplicated by a
:class:`SubscriptionTracker` before they reach the network client.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable

    from proxy_tracker.metrics.collector import DetectorMetrics

logger = logging.getLogger(__name__)


class ProxyStore(Protocol):
    """Receiver of proxy lifecycle decisions. All methods are idempotent."""

    def add_funded_proxy(self, address: str) -> None: ...

    def add_claimed_proxy(self, address: str) -> None: ...

    def remove_proxy(self, address: str) -> None: ...


class TransactionListenerClient(Protocol):
    """Network client able to push transactions of watched addresses."""

    def add_transaction_listener(self, addresses: list[str]) -> None: ...

    def remove_transaction_listener(self, addresses: list[str]) -> None: ...


class SubscriptionTracker:
    """Set of addresses the network client has been asked to watch.

    Lives for the lifetime of the process. Addresses are only forwarded to
    the client when their subscription state actually changes.
    """

    def __init__(
        self,
        client: TransactionListenerClient | None = None,
        *,
        metrics: DetectorMetrics | None = None,
    ) -> None:
        self._client = client
        self._metrics = metrics
        self._subscribed: set[str] = set()

    @property
    def subscribed_addresses(self) -> frozenset[str]:
        """Addresses currently subscribed."""
        return frozenset(self._subscribed)

    def is_subscribed(self, address: str) -> bool:
        """Check whether *address* is subscribed."""
        return address in self._subscribed

    def subscribe(self, addresses: Iterable[str]) -> list[str]:
        """Subscribe to addresses not subscribed yet.

        Returns:
            The addresses that were newly subscribed.
        """
        new_addresses: list[str] = []
        for address in addresses:
            if address in self._subscribed:
                continue
            self._subscribed.add(address)
            new_addresses.append(address)
        if not new_addresses:
            return []

        logger.info("Subscribing to %d address(es)", len(new_addresses))
        if self._client is not None:
            self._client.add_transaction_listener(new_addresses)
        self._update_gauge()
        return new_addresses

    def unsubscribe(self, addresses: Iterable[str]) -> list[str]:
        """Drop subscriptions. Unknown addresses are ignored.

        Unlike a network client's own watch list, which only grows until
        restart, removed addresses leave the set and can be subscribed again.

        Returns:
            The addresses that were actually unsubscribed.
        """
        removed = [address for address in dict.fromkeys(addresses) if address in self._subscribed]
        if not removed:
            return []
        self._subscribed.difference_update(removed)

        logger.info("Unsubscribing from %d address(es)", len(removed))
        if self._client is not None:
            self._client.remove_transaction_listener(removed)
        self._update_gauge()
        return removed

    def clear(self) -> None:
        """Forget all subscriptions without telling the client (e.g. after a reconnect)."""
        self._subscribed.clear()
        self._update_gauge()

    def _update_gauge(self) -> None:
        if self._metrics is not None:
            self._metrics.set_subscribed_count(len(self._subscribed))


class InMemoryProxyStore:
    """Proxy registry keeping funded and claimed proxies in memory.

    Implements :class:`ProxyStore` and the known-proxy lookup used by the
    direction classifier. Every tracked proxy stays subscribed until it is
    removed.
    """

    def __init__(self, subscriptions: SubscriptionTracker | None = None) -> None:
        self._subscriptions = subscriptions or SubscriptionTracker()
        self._funded: set[str] = set()
        self._claimed: set[str] = set()

    @property
    def subscriptions(self) -> SubscriptionTracker:
        """The tracker receiving subscription requests."""
        return self._subscriptions

    @property
    def funded_proxies(self) -> frozenset[str]:
        """Proxies with a funding transaction whose redeemer is unknown or pending."""
        return frozenset(self._funded)

    @property
    def claimed_proxies(self) -> frozenset[str]:
        """Proxies with an observed redeeming transaction still being watched."""
        return frozenset(self._claimed)

    @property
    def all_proxies(self) -> frozenset[str]:
        """All tracked proxies."""
        return frozenset(self._funded | self._claimed)

    def is_known_proxy(self, address: str) -> bool:
        """Check whether *address* is a tracked proxy."""
        return address in self._funded or address in self._claimed

    def add_funded_proxy(self, address: str) -> None:
        """Track *address* as funded and watch it for the redeeming transaction."""
        if address not in self._funded:
            logger.info("Proxy %s funded", address)
        self._claimed.discard(address)
        self._funded.add(address)
        self._subscriptions.subscribe([address])

    def add_claimed_proxy(self, address: str) -> None:
        """Track *address* as claimed and keep watching it until resolved."""
        if address not in self._claimed:
            logger.info("Proxy %s claimed", address)
        self._funded.discard(address)
        self._claimed.add(address)
        self._subscriptions.subscribe([address])

    def remove_proxy(self, address: str) -> None:
        """Stop tracking *address*. Safe to call for untracked addresses."""
        if self.is_known_proxy(address):
            logger.info("Proxy %s resolved", address)
        self._funded.discard(address)
        self._claimed.discard(address)
        self._subscriptions.unsubscribe([address])
