"""Exchange Fixtures - on-chain test preconditions for exchange client tests."""

__version__ = "0.1.0"

from exchange_fixtures.domain.order import OrderOptions, SignedOrder, Token
from exchange_fixtures.integrations.chain.client import ExchangeClient
from exchange_fixtures.scenarios.fill_scenarios import FillScenarios

__all__ = [
    "__version__",
    "ExchangeClient",
    "FillScenarios",
    "OrderOptions",
    "SignedOrder",
    "Token",
]
