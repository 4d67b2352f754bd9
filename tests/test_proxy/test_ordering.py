"""Tests for chronological ordering of mined and unmined transactions."""

from __future__ import annotations

from proxy_tracker.proxy.ordering import is_after, is_before, ordering_values, sort_for_correlation

A = "NQ01 AAAA"
B = "NQ02 BBBB"


class TestOrderingValues:
    def test_timestamps_first(self, make_tx) -> None:
        a = make_tx("a", A, B, timestamp=10, block_height=900, validity_start_height=5)
        b = make_tx("b", A, B, timestamp=20, block_height=100, validity_start_height=1)
        assert ordering_values(a, b) == (10, 20)

    def test_block_height_when_a_timestamp_is_missing(self, make_tx) -> None:
        a = make_tx("a", A, B, timestamp=10, block_height=900)
        b = make_tx("b", A, B, block_height=100)
        assert ordering_values(a, b) == (900, 100)

    def test_validity_start_height_fallback(self, make_tx) -> None:
        a = make_tx("a", A, B, timestamp=10, validity_start_height=7)
        b = make_tx("b", A, B, block_height=100, validity_start_height=3)
        assert ordering_values(a, b) == (7, 3)

    def test_zero_is_a_value(self, make_tx) -> None:
        a = make_tx("a", A, B, timestamp=0)
        b = make_tx("b", A, B, timestamp=5)
        assert ordering_values(a, b) == (0, 5)


class TestIsBefore:
    def test_strict(self, make_tx) -> None:
        a = make_tx("a", A, B, validity_start_height=10)
        b = make_tx("b", A, B, validity_start_height=10)
        assert not is_before(a, b)
        assert not is_after(a, b)

    def test_inclusive_fallback(self, make_tx) -> None:
        a = make_tx("a", A, B, validity_start_height=10)
        b = make_tx("b", A, B, validity_start_height=10)
        assert is_before(a, b, inclusive_fallback=True)
        assert is_after(a, b, inclusive_fallback=True)

    def test_inclusive_fallback_does_not_touch_timestamps(self, make_tx) -> None:
        a = make_tx("a", A, B, timestamp=50)
        b = make_tx("b", A, B, timestamp=50)
        assert not is_before(a, b, inclusive_fallback=True)

    def test_mixed_fields(self, make_tx) -> None:
        # b has the later timestamp but is compared on validity start height
        # against an unmined a.
        a = make_tx("a", A, B, validity_start_height=20)
        b = make_tx("b", A, B, timestamp=1000, block_height=5, validity_start_height=15)
        assert is_before(b, a)
        assert is_after(a, b)


class TestSortForCorrelation:
    def test_most_recent_first(self, make_tx) -> None:
        txs = [
            make_tx("t1", A, B, timestamp=100),
            make_tx("t3", A, B, timestamp=300),
            make_tx("t2", A, B, timestamp=200),
        ]
        assert [t.transaction_hash for t in sort_for_correlation(txs)] == ["t3", "t2", "t1"]

    def test_stable_for_equal_values(self, make_tx) -> None:
        txs = [
            make_tx("x", A, B, validity_start_height=5),
            make_tx("y", A, B, validity_start_height=5),
        ]
        assert [t.transaction_hash for t in sort_for_correlation(txs)] == ["x", "y"]

    def test_empty(self) -> None:
        assert sort_for_correlation([]) == []
