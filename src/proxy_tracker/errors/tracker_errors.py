"""ProxyTrackerError — base exception class for all proxy-tracker errors."""

from __future__ import annotations


class ProxyTrackerError(Exception):
    """Base error for all proxy-tracker operations.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code string.
    """

    def __init__(self, message: str, *, code: str = "proxy-tracker-error") -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class InvalidTransactionData(ProxyTrackerError):
    """Transaction data that cannot be correlated at all.

    Raised when the proxy address is on neither side of a transaction, or
    when a transaction record carries negative amounts or missing fields.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, code="invalid-transaction-data")


class InvalidProxyIdentifier(ProxyTrackerError):
    """Identifier that cannot be encoded into proxy extra data."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="invalid-proxy-identifier")
