"""Shared pytest fixtures for exchange fixture tests.

This file provides common fixtures used across all test modules:
- Test accounts and token descriptors
- The in-memory exchange client double
- A FillScenarios builder wired to it
"""

import pytest

from exchange_fixtures.domain.order import Token
from exchange_fixtures.scenarios.fill_scenarios import FillScenarios
from tests.fixtures import FakeExchangeClient

COINBASE = "0x5409ed021d9299bf6814279a6a1411a7e866a631"
MAKER = "0x6ecbe1db9ef729cbe972c83fb886247691fb6beb"
TAKER = "0xe36ea790bc9d7ab70c55260c66d52b1eca985f84"
FEE_RECIPIENT = "0xe834ec434daba538cd1b9fe1582052b880bd7e63"

EXCHANGE_ADDRESS = "0x48bacb9266a570d521063ef5dd96e61686dbe788"
ZRX_ADDRESS = "0x34d402f14d58e001d8efbe6585051bf9706aa064"
WETH_ADDRESS = "0x0b1ba0af832d7c05fd64161e0db78e85978e8082"
TOKEN_A_ADDRESS = "0x25b8fe1de9daf8ba351890744ff28cf7dfa8f5e3"
TOKEN_B_ADDRESS = "0x1dc4c1cefef38a777b15aa20260a54e584b16c48"

# Enough of every token on the coinbase for any unit test
COINBASE_SUPPLY = 10**24


@pytest.fixture
def user_addresses():
    return [COINBASE, MAKER, TAKER, FEE_RECIPIENT]


@pytest.fixture
def tokens():
    return [
        Token(symbol="ZRX", address=ZRX_ADDRESS, decimals=18),
        Token(symbol="WETH", address=WETH_ADDRESS, decimals=18),
        Token(symbol="TKA", address=TOKEN_A_ADDRESS, decimals=18),
        Token(symbol="TKB", address=TOKEN_B_ADDRESS, decimals=6),
    ]


@pytest.fixture
def fake_client(tokens) -> FakeExchangeClient:
    """Fresh fake client with a well-funded coinbase."""
    client = FakeExchangeClient()
    for token in tokens:
        client.chain.set_balance(token.address, COINBASE, COINBASE_SUPPLY)
    return client


@pytest.fixture
def fill_scenarios(fake_client, user_addresses, tokens) -> FillScenarios:
    return FillScenarios(
        fake_client,
        user_addresses,
        tokens,
        ZRX_ADDRESS,
        EXCHANGE_ADDRESS,
    )
