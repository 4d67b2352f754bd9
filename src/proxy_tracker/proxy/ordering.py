"""Chronological ordering of transactions that may not be mined yet.

Two transactions are compared on the first field both of them carry:
timestamp, then block height, then validity start height (always set).
The field is chosen per pair, so comparisons are not a total order over a
mixed set of mined and unmined transactions.
"""

from __future__ import annotations

from functools import cmp_to_key
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from proxy_tracker.proxy.models import Transaction


def ordering_values(a: Transaction, b: Transaction) -> tuple[int, int]:
    """Return the values of the highest priority field both *a* and *b* carry."""
    if a.timestamp is not None and b.timestamp is not None:
        return a.timestamp, b.timestamp
    if a.block_height is not None and b.block_height is not None:
        return a.block_height, b.block_height
    return a.validity_start_height, b.validity_start_height


def _falls_back_to_validity(a: Transaction, b: Transaction) -> bool:
    return (a.timestamp is None or b.timestamp is None) and (
        a.block_height is None or b.block_height is None
    )


def is_before(a: Transaction, b: Transaction, *, inclusive_fallback: bool = False) -> bool:
    """Check whether *a* happened strictly before *b*.

    With *inclusive_fallback*, equal validity start heights count as before
    when the comparison falls back to them.
    """
    first, second = ordering_values(a, b)
    if inclusive_fallback and _falls_back_to_validity(a, b):
        return first <= second
    return first < second


def is_after(a: Transaction, b: Transaction, *, inclusive_fallback: bool = False) -> bool:
    """Check whether *a* happened strictly after *b*."""
    return is_before(b, a, inclusive_fallback=inclusive_fallback)


def _compare(a: Transaction, b: Transaction) -> int:
    first, second = ordering_values(a, b)
    return (first > second) - (first < second)


def sort_for_correlation(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Sort transactions most recent first.

    Correlation is greedy, so feeding it in this order gives the intended
    last-in-first-out pairing of funding transactions. The sort is stable;
    equal transactions keep their input order.
    """
    return sorted(transactions, key=cmp_to_key(_compare), reverse=True)
