"""Proxy transaction data models — Transaction, states, proxy kinds.

Data classes representing the transaction records the correlation engine
reads. The transaction store owns these records; the engine never mutates
them and only returns decisions about them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from proxy_tracker.errors.tracker_errors import InvalidTransactionData

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TransactionState(enum.StrEnum):
    """Transaction lifecycle states as delivered by the network layer.

    Lifecycle: NEW → PENDING → MINED → CONFIRMED, or NEW/PENDING →
               INVALIDATED / EXPIRED
    """

    NEW = "new"
    PENDING = "pending"
    MINED = "mined"
    CONFIRMED = "confirmed"
    INVALIDATED = "invalidated"
    EXPIRED = "expired"

    @classmethod
    def from_string(cls, value: str) -> TransactionState:
        """Parse a state string case-insensitively, returning NEW for unrecognised values."""
        try:
            return cls(value.lower())
        except ValueError:
            return cls.NEW

    @property
    def is_dropped(self) -> bool:
        """Whether the transaction can never be included in a block anymore."""
        return self in (TransactionState.INVALIDATED, TransactionState.EXPIRED)


class ProxyType(enum.StrEnum):
    """Kinds of proxy addresses."""

    CASHLINK = "cashlink"
    HTLC_PROXY = "htlc-proxy"


class ProxyTransactionDirection(enum.StrEnum):
    """Leg of a proxy transfer relative to the proxy address."""

    FUND = "fund"
    REDEEM = "redeem"


# ---------------------------------------------------------------------------
# Transaction
# ---------------------------------------------------------------------------


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


@dataclass(frozen=True)
class Transaction:
    """A transaction touching (possibly) a proxy address.

    Attributes:
        transaction_hash: Unique transaction identifier.
        sender: Sending address.
        recipient: Receiving address.
        value: Transferred amount in the smallest currency unit.
        validity_start_height: Height assigned at creation, always present.
        fee: Fee in the smallest currency unit.
        state: Current lifecycle state.
        timestamp: Block timestamp in seconds, once mined.
        block_height: Block height, once mined.
        related_transaction_hash: Counterpart hash written by the store.
        extra_data: Hex-encoded extra data, may carry a proxy tag.
    """

    transaction_hash: str
    sender: str
    recipient: str
    value: int
    validity_start_height: int
    fee: int = 0
    state: TransactionState = TransactionState.NEW
    timestamp: int | None = None
    block_height: int | None = None
    related_transaction_hash: str | None = None
    extra_data: str = ""

    def __post_init__(self) -> None:
        if self.value < 0 or self.fee < 0:
            raise InvalidTransactionData(
                f"transaction {self.transaction_hash} has a negative value or fee"
            )

    @property
    def is_confirmed(self) -> bool:
        """Check if the transaction has reached the CONFIRMED state."""
        return self.state == TransactionState.CONFIRMED

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Transaction:
        """Create a Transaction from a store/wire dict.

        Accepts camelCase wire keys (``transactionHash``, ``blockHeight``,
        ``data.raw`` ...) as well as the snake_case field names.

        Raises:
            InvalidTransactionData: If a required field is missing or a
                numeric field is not an integer.
        """
        tx_hash = data.get("transactionHash", data.get("transaction_hash", data.get("hash")))
        if not tx_hash:
            raise InvalidTransactionData("transaction record without a hash")
        try:
            sender = data["sender"]
            recipient = data["recipient"]
            value = int(data["value"])
            fee = int(data.get("fee", 0))
            validity_start_height = int(
                data["validityStartHeight"]
                if "validityStartHeight" in data
                else data["validity_start_height"]
            )
            timestamp = _optional_int(data.get("timestamp"))
            block_height = _optional_int(data.get("blockHeight", data.get("block_height")))
        except KeyError as exc:
            raise InvalidTransactionData(
                f"transaction {tx_hash} is missing field {exc.args[0]!r}"
            ) from exc
        except (TypeError, ValueError) as exc:
            raise InvalidTransactionData(
                f"transaction {tx_hash} has a malformed numeric field: {exc}"
            ) from exc

        raw = data.get("data")
        extra_data = raw.get("raw", "") if isinstance(raw, dict) else None
        if not extra_data:
            extra_data = data.get("extraData", data.get("extra_data", "")) or ""

        state = data.get("state", TransactionState.NEW)
        return cls(
            transaction_hash=tx_hash,
            sender=sender,
            recipient=recipient,
            value=value,
            validity_start_height=validity_start_height,
            fee=fee,
            state=TransactionState.from_string(str(state)),
            timestamp=timestamp,
            block_height=block_height,
            related_transaction_hash=data.get(
                "relatedTransactionHash", data.get("related_transaction_hash")
            ),
            extra_data=extra_data,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dict matching the store's camelCase format."""
        return {
            "transactionHash": self.transaction_hash,
            "sender": self.sender,
            "recipient": self.recipient,
            "value": self.value,
            "fee": self.fee,
            "validityStartHeight": self.validity_start_height,
            "state": str(self.state),
            "timestamp": self.timestamp,
            "blockHeight": self.block_height,
            "relatedTransactionHash": self.related_transaction_hash,
            "data": {"raw": self.extra_data},
        }


# ---------------------------------------------------------------------------
# Correlation result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CorrelationResult:
    """Outcome of correlating one transaction at its proxy address."""

    proxy_address: str
    direction: ProxyTransactionDirection
    related: Transaction | None
    needs_subscription: bool

    @property
    def is_matched(self) -> bool:
        """Whether a related transaction was found."""
        return self.related is not None
