"""External system adapters - chain interactions."""

from exchange_fixtures.integrations.chain.client import ExchangeClient

__all__ = [
    "ExchangeClient",
]
