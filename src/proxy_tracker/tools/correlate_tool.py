#!/usr/bin/env python3
"""Proxy Correlate Tool — inspect proxy tags and replay correlations.

A standalone CLI utility:

    # Print the extra data tag of a proxy kind and direction
    python -m proxy_tracker.tools.correlate_tool tag cashlink fund

    # Decode extra data into proxy kind and direction
    python -m proxy_tracker.tools.correlate_tool decode 0082809287

    # Replay a JSON fixture of transactions through the detector
    python -m proxy_tracker.tools.correlate_tool correlate <fixture.json> [config.yaml]

A fixture is a JSON object with ``owned_addresses`` (list of addresses)
and ``transactions`` (list of transaction records in the store's
camelCase format).
"""

from __future__ import annotations

import dataclasses
import json
import sys
from pathlib import Path
from typing import Any

from proxy_tracker.config.logging import configure_logging
from proxy_tracker.config.settings import AppConfig
from proxy_tracker.errors.tracker_errors import ProxyTrackerError
from proxy_tracker.metrics.collector import DetectorMetrics
from proxy_tracker.proxy.detector import ProxyDetector
from proxy_tracker.proxy.models import ProxyTransactionDirection, Transaction
from proxy_tracker.proxy.ordering import sort_for_correlation
from proxy_tracker.proxy.subscriptions import InMemoryProxyStore, SubscriptionTracker
from proxy_tracker.proxy.tags import decode_proxy_data, is_proxy_data, proxy_extra_data


@dataclasses.dataclass
class ReplayResult:
    """Outcome of replaying a fixture."""

    transactions: dict[str, Transaction]
    pairs: list[tuple[str, str]]
    store: InMemoryProxyStore
    metrics: DetectorMetrics | None = None


def replay(fixture: dict[str, Any], config: AppConfig | None = None) -> ReplayResult:
    """Feed a fixture's transactions through a detector, most recent first.

    Plays the part of the transaction store: every transaction is known at
    both of its addresses, and matched pairs get their related hashes
    written on both sides before the next transaction is processed.
    """
    owned = set(fixture.get("owned_addresses", []))
    records = {
        tx.transaction_hash: tx
        for tx in (Transaction.from_dict(d) for d in fixture.get("transactions", []))
    }
    by_address: dict[str, dict[str, Transaction]] = {}
    for tx in records.values():
        for address in (tx.sender, tx.recipient):
            by_address.setdefault(address, {})[tx.transaction_hash] = tx

    config = config or AppConfig()
    metrics = DetectorMetrics() if config.metrics.enabled else None
    store = InMemoryProxyStore(SubscriptionTracker(metrics=metrics))
    detector = ProxyDetector(
        store, owned.__contains__, store.is_known_proxy, config=config, metrics=metrics
    )

    def _write(tx: Transaction) -> None:
        records[tx.transaction_hash] = tx
        for address in (tx.sender, tx.recipient):
            by_address[address][tx.transaction_hash] = tx

    pairs: list[tuple[str, str]] = []
    for queued in sort_for_correlation(list(records.values())):
        tx = records[queued.transaction_hash]
        if not (
            is_proxy_data(tx.extra_data)
            or store.is_known_proxy(tx.sender)
            or store.is_known_proxy(tx.recipient)
        ):
            continue
        result = detector.process(tx, by_address)
        if result.related is None or tx.related_transaction_hash:
            continue
        _write(dataclasses.replace(tx, related_transaction_hash=result.related.transaction_hash))
        _write(
            dataclasses.replace(result.related, related_transaction_hash=tx.transaction_hash)
        )
        if result.direction == ProxyTransactionDirection.FUND:
            pairs.append((tx.transaction_hash, result.related.transaction_hash))
        else:
            pairs.append((result.related.transaction_hash, tx.transaction_hash))

    return ReplayResult(transactions=records, pairs=pairs, store=store, metrics=metrics)


def _cmd_tag(kind: str, direction: str) -> None:
    """Print the extra data tag for a proxy kind and direction."""
    print(proxy_extra_data(kind, direction))  # type: ignore[arg-type]


def _cmd_decode(data: str) -> None:
    """Print the proxy kind and direction a tag stands for."""
    decoded = decode_proxy_data(data)
    if decoded is None:
        print("not a proxy tag")
        return
    kind, direction = decoded
    print(f"{kind} {direction}")


def _cmd_correlate(fixture_path: str, config_path: str | None = None) -> None:
    """Replay a fixture file and print the matched pairs and tracked proxies."""
    config = AppConfig.from_yaml(config_path) if config_path else AppConfig()
    configure_logging(config)

    fixture = json.loads(Path(fixture_path).read_text(encoding="utf-8"))
    result = replay(fixture, config)

    print("Matched pairs (funding -> redeeming):")
    print("-" * 60)
    for funding, redeeming in result.pairs:
        print(f"  {funding} -> {redeeming}")
    if not result.pairs:
        print("  (none)")
    print()
    print("Tracked proxies:")
    print("-" * 60)
    for address in sorted(result.store.funded_proxies):
        print(f"  funded   {address}")
    for address in sorted(result.store.claimed_proxies):
        print(f"  claimed  {address}")


def main() -> None:
    """CLI entry point."""
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    cmd = sys.argv[1].lower()

    try:
        if cmd == "tag":
            if len(sys.argv) < 4:
                print("Usage: correlate_tool tag <cashlink|htlc-proxy> <fund|redeem>")
                sys.exit(1)
            _cmd_tag(sys.argv[2].lower(), sys.argv[3].lower())
        elif cmd == "decode":
            if len(sys.argv) < 3:
                print("Usage: correlate_tool decode <hex>")
                sys.exit(1)
            _cmd_decode(sys.argv[2])
        elif cmd == "correlate":
            if len(sys.argv) < 3:
                print("Usage: correlate_tool correlate <fixture.json> [config.yaml]")
                sys.exit(1)
            _cmd_correlate(sys.argv[2], sys.argv[3] if len(sys.argv) > 3 else None)
        else:
            print(f"Unknown command: {cmd}")
            print(__doc__)
            sys.exit(1)
    except (ProxyTrackerError, ValueError) as exc:
        print(f"Error: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
