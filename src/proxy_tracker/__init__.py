"""proxy-tracker — correlation of proxy (cashlink / HTLC-proxy) transactions."""

from __future__ import annotations

__version__ = "0.1.0"
