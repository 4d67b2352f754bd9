"""Proxy tags — identifiers embedded in transaction extra data.

A tag is a leading ``0x00`` byte followed by one byte per identifier
character, shifted by 63 to move it outside the printable ASCII range
used by ordinary memos. Tags are compared against transactions already on
chain, so the table below must never change.

    CASH -> 0082809287    (cashlink, fund)
    LINK -> 008b888d8a    (cashlink, redeem)
    HPFD -> 00878f8583    (htlc-proxy, fund)
    HPRD -> 00878f9183    (htlc-proxy, redeem)
"""

from __future__ import annotations

from proxy_tracker.errors.tracker_errors import InvalidProxyIdentifier
from proxy_tracker.proxy.models import ProxyTransactionDirection, ProxyType

_TAG_MARKER = 0x00
_CHAR_OFFSET = 63

PROXY_IDENTIFIERS: dict[ProxyType, dict[ProxyTransactionDirection, str]] = {
    ProxyType.CASHLINK: {
        ProxyTransactionDirection.FUND: "CASH",
        ProxyTransactionDirection.REDEEM: "LINK",
    },
    ProxyType.HTLC_PROXY: {
        ProxyTransactionDirection.FUND: "HPFD",  # HTLC Proxy Funding
        ProxyTransactionDirection.REDEEM: "HPRD",  # HTLC Proxy Redeeming
    },
}


def encode_identifier(identifier: str) -> str:
    """Encode an ASCII identifier into proxy extra data hex.

    Raises:
        InvalidProxyIdentifier: If the identifier is empty or not ASCII.
    """
    if not identifier or not identifier.isascii():
        raise InvalidProxyIdentifier(f"cannot encode proxy identifier {identifier!r}")
    payload = bytes([_TAG_MARKER, *(ord(c) + _CHAR_OFFSET for c in identifier)])
    return payload.hex()


PROXY_EXTRA_DATA: dict[ProxyType, dict[ProxyTransactionDirection, str]] = {
    kind: {direction: encode_identifier(ident) for direction, ident in identifiers.items()}
    for kind, identifiers in PROXY_IDENTIFIERS.items()
}


def proxy_extra_data(kind: ProxyType, direction: ProxyTransactionDirection) -> str:
    """Return the extra data hex tagging a proxy transaction of *kind* and *direction*."""
    return PROXY_EXTRA_DATA[ProxyType(kind)][ProxyTransactionDirection(direction)]


def _normalize(data: str | bytes | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes | bytearray):
        return bytes(data).hex()
    return data.lower()


def is_proxy_data(
    data: str | bytes | None,
    kind: ProxyType | None = None,
    direction: ProxyTransactionDirection | None = None,
) -> bool:
    """Check whether extra data is a proxy tag.

    Args:
        data: Hex extra data (any case) or raw bytes.
        kind: Only match tags of this proxy kind. All kinds if omitted.
        direction: Only match tags of this direction. Both if omitted.

    Returns:
        True if *data* equals one of the selected tags. Malformed data is
        simply not a tag.
    """
    normalized = _normalize(data)
    kinds = [kind] if kind else list(ProxyType)
    directions = [direction] if direction else list(ProxyTransactionDirection)
    return any(PROXY_EXTRA_DATA[k][d] == normalized for k in kinds for d in directions)


def decode_proxy_data(
    data: str | bytes | None,
) -> tuple[ProxyType, ProxyTransactionDirection] | None:
    """Return the (kind, direction) a proxy tag stands for, or None if it is no tag."""
    normalized = _normalize(data)
    for kind, tags in PROXY_EXTRA_DATA.items():
        for direction, tag in tags.items():
            if tag == normalized:
                return kind, direction
    return None
