# Chain Interactions
# Web3 client for the exchange contracts on a development chain

from exchange_fixtures.integrations.chain.client import (
    ExchangeClient,
    TxReceipt,
)
from exchange_fixtures.integrations.chain.wrappers import (
    ExchangeWrapper,
    TestingAccessor,
    TokenWrapper,
)

__all__ = [
    # Client
    "ExchangeClient",
    "TxReceipt",
    # Contract wrappers
    "TokenWrapper",
    "ExchangeWrapper",
    "TestingAccessor",
]
