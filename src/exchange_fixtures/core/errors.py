"""
Error types raised by the exchange fixtures.

Only conditions detected locally get their own type. Errors raised by web3
or by the node (rejected transactions, connection failures) propagate
unchanged to the enclosing test.
"""

from datetime import datetime, timezone
from typing import Optional


class FixtureError(Exception):
    """Base exception for all exchange fixture errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


class ValidationError(FixtureError):
    """Input cannot be turned into a valid order or amount."""

    pass


class ClientNotConnectedError(FixtureError):
    """Client method called before connect()."""

    pass


class ChainConnectionError(FixtureError):
    """RPC endpoint could not be reached."""

    pass


class TransactionError(FixtureError):
    """A submitted transaction did not complete successfully."""

    def __init__(
        self,
        message: str,
        tx_hash: str,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, cause)
        self.tx_hash = tx_hash


class TransactionFailedError(TransactionError):
    """Transaction was mined but reverted (receipt status 0)."""

    pass


class TransactionTimeoutError(TransactionError):
    """No receipt appeared before the timeout elapsed."""

    pass
