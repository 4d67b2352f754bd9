"""Tests for the proxy correlate CLI tool."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest

from proxy_tracker.config.settings import AppConfig, MetricsConfig
from proxy_tracker.tools.correlate_tool import main, replay

if TYPE_CHECKING:
    from pathlib import Path

OWN = "NQ01 OWN0"
PROXY = "NQ10 PRXY"
PROXY_2 = "NQ11 PRXY"
FRIEND = "NQ30 FRND"

CASH = "0082809287"
LINK = "008b888d8a"


def _tx(tx_hash, sender, recipient, value, timestamp, extra="", **extra_fields):
    return {
        "transactionHash": tx_hash,
        "sender": sender,
        "recipient": recipient,
        "value": value,
        "fee": 0,
        "validityStartHeight": timestamp,
        "state": "confirmed",
        "timestamp": timestamp,
        "blockHeight": timestamp,
        "data": {"raw": extra},
        **extra_fields,
    }


@pytest.fixture
def fixture() -> dict:
    return {
        "owned_addresses": [OWN],
        "transactions": [
            # Proxy funded twice, claimed once: the claim pairs with the latest funding.
            _tx("F1", OWN, PROXY, 500, 100, CASH),
            _tx("F2", OWN, PROXY, 500, 200, CASH),
            _tx("R1", PROXY, FRIEND, 500, 300, LINK),
            # Second proxy, funded and not yet claimed.
            _tx("F3", OWN, PROXY_2, 700, 400, CASH),
            # Unrelated transfer.
            _tx("X", OWN, FRIEND, 5, 50),
        ],
    }


def _config() -> AppConfig:
    return AppConfig(metrics=MetricsConfig(enabled=False))


class TestReplay:
    def test_pairs(self, fixture: dict) -> None:
        result = replay(fixture, _config())
        assert result.pairs == [("F2", "R1")]

    def test_related_hashes_written(self, fixture: dict) -> None:
        result = replay(fixture, _config())
        assert result.transactions["F2"].related_transaction_hash == "R1"
        assert result.transactions["R1"].related_transaction_hash == "F2"
        assert result.transactions["F1"].related_transaction_hash is None
        assert result.transactions["X"].related_transaction_hash is None

    def test_tracked_proxies(self, fixture: dict) -> None:
        result = replay(fixture, _config())
        # F1 is still open at PROXY, F3 waits for its claim.
        assert result.store.funded_proxies == {PROXY, PROXY_2}
        assert result.store.subscriptions.subscribed_addresses == {PROXY, PROXY_2}

    def test_resolved_proxy_forgotten(self) -> None:
        fixture = {
            "owned_addresses": [OWN],
            "transactions": [
                _tx("F", OWN, PROXY, 100, 10, CASH),
                _tx("R", PROXY, FRIEND, 90, 20, LINK),
            ],
        }
        result = replay(fixture, _config())
        assert result.pairs == [("F", "R")]
        assert result.store.all_proxies == frozenset()

    def test_empty_fixture(self) -> None:
        result = replay({}, _config())
        assert result.pairs == []
        assert result.transactions == {}

    def test_no_metrics_when_disabled(self, fixture: dict) -> None:
        assert replay(fixture, _config()).metrics is None

    def test_metrics_follow_subscriptions(self, fixture: dict) -> None:
        result = replay(fixture, AppConfig())
        assert result.metrics is not None
        registry = result.metrics.registry
        assert registry.get_sample_value("proxy_subscribed_addresses") == 2.0
        assert registry.get_sample_value(
            "proxy_correlations_total", {"outcome": "matched"}
        ) == 1.0

    def test_metrics_after_resolved_proxy(self) -> None:
        fixture = {
            "owned_addresses": [OWN],
            "transactions": [
                _tx("F", OWN, PROXY, 100, 10, CASH),
                _tx("R", PROXY, FRIEND, 90, 20, LINK),
            ],
        }
        result = replay(fixture, AppConfig())
        assert result.metrics.registry.get_sample_value("proxy_subscribed_addresses") == 0.0


class TestMain:
    def test_no_args(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("sys.argv", ["correlate_tool"]), pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
        assert "correlate_tool" in capsys.readouterr().out

    def test_tag(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("sys.argv", ["correlate_tool", "tag", "cashlink", "redeem"]):
            main()
        assert capsys.readouterr().out.strip() == LINK

    def test_tag_unknown_kind(self, capsys: pytest.CaptureFixture[str]) -> None:
        with (
            patch("sys.argv", ["correlate_tool", "tag", "swap", "fund"]),
            pytest.raises(SystemExit),
        ):
            main()
        assert capsys.readouterr().out.startswith("Error:")

    def test_decode(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("sys.argv", ["correlate_tool", "decode", "00878F8583"]):
            main()
        assert capsys.readouterr().out.strip() == "htlc-proxy fund"

    def test_decode_no_tag(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("sys.argv", ["correlate_tool", "decode", "beef"]):
            main()
        assert capsys.readouterr().out.strip() == "not a proxy tag"

    def test_correlate(
        self,
        fixture: dict,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("PROXYTRACKER_LOGGING__LEVEL", "ERROR")
        path = tmp_path / "fixture.json"
        path.write_text(json.dumps(fixture), encoding="utf-8")
        with patch("sys.argv", ["correlate_tool", "correlate", str(path)]):
            main()
        out = capsys.readouterr().out
        assert "F2 -> R1" in out
        assert f"funded   {PROXY_2}" in out

    def test_unknown_command(self) -> None:
        with patch("sys.argv", ["correlate_tool", "bogus"]), pytest.raises(SystemExit):
            main()
