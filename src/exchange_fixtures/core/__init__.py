"""Core infrastructure - errors, logging, config.

Import ConfigManager/NetworkSettings from exchange_fixtures.core.config
directly; they depend on the domain types.
"""

from exchange_fixtures.core.errors import (
    ChainConnectionError,
    ClientNotConnectedError,
    FixtureError,
    TransactionError,
    TransactionFailedError,
    TransactionTimeoutError,
    ValidationError,
)
from exchange_fixtures.core.logging import get_logger, setup_logging

__all__ = [
    # Errors
    "FixtureError",
    "ValidationError",
    "ClientNotConnectedError",
    "ChainConnectionError",
    "TransactionError",
    "TransactionFailedError",
    "TransactionTimeoutError",
    # Logging
    "setup_logging",
    "get_logger",
]
