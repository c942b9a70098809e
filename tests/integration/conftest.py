"""Fixtures for tests against a live development chain.

Point EXCHANGE_FIXTURES_CONFIG at a config file (see config/devnet.toml) or set
EXCHANGE_FIXTURES_NETWORK_RPC_URL plus the address overrides to enable them.
"""
import os

import pytest

from exchange_fixtures.core.config import ConfigManager, NetworkSettings
from exchange_fixtures.core.errors import ChainConnectionError, ValidationError
from exchange_fixtures.domain.order import RESERVED_TOKEN_SYMBOLS
from exchange_fixtures.integrations.chain.client import ExchangeClient
from exchange_fixtures.scenarios.fill_scenarios import FillScenarios

CHAIN_CONFIGURED = bool(
    os.environ.get("EXCHANGE_FIXTURES_CONFIG")
    or os.environ.get("EXCHANGE_FIXTURES_NETWORK_RPC_URL")
)


@pytest.fixture
def network_settings() -> NetworkSettings:
    try:
        return NetworkSettings.from_config(ConfigManager.from_env())
    except ValidationError as e:
        pytest.skip(f"Network not configured: {e}")


@pytest.fixture
async def chain_client(network_settings):
    """Connected client; skips the test when the node is unreachable."""
    client = ExchangeClient(
        rpc_url=network_settings.rpc_url,
        exchange_address=network_settings.exchange_address,
        token_transfer_proxy_address=network_settings.token_transfer_proxy_address,
        private_keys=network_settings.private_keys,
        receipt_timeout_seconds=network_settings.receipt_timeout_seconds,
        receipt_poll_interval_seconds=network_settings.receipt_poll_interval_seconds,
    )
    try:
        await client.connect()
    except ChainConnectionError as e:
        pytest.skip(f"Chain not available: {e}")

    yield client
    await client.close()


@pytest.fixture
async def chain_accounts(network_settings, chain_client) -> list[str]:
    accounts = list(network_settings.user_addresses) or await chain_client.get_accounts()
    if len(accounts) < 4:
        pytest.skip("Need at least four unlocked accounts")
    return accounts


@pytest.fixture
def dummy_tokens(network_settings):
    """Two configured tokens that support setBalance."""
    tokens = [
        token for token in network_settings.tokens
        if token.symbol not in RESERVED_TOKEN_SYMBOLS
    ]
    if len(tokens) < 2:
        pytest.skip("Need at least two dummy tokens in the config")
    return tokens[0], tokens[1]


@pytest.fixture
async def chain_scenarios(network_settings, chain_client, chain_accounts) -> FillScenarios:
    scenarios = FillScenarios(
        chain_client,
        chain_accounts,
        network_settings.tokens,
        network_settings.zrx_token_address,
        network_settings.exchange_address,
    )
    await scenarios.init_token_balances()
    return scenarios
