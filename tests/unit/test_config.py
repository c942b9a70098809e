"""
Unit tests for ConfigManager and NetworkSettings.

Tests verify:
- TOML loading
- Environment variable overrides
- Type-specific getters
- Network settings for the integration harness
"""
import os
import tempfile
from pathlib import Path

import pytest

from exchange_fixtures.core.config import (
    DEFAULT_RECEIPT_TIMEOUT_SECONDS,
    DEFAULT_RPC_URL,
    ConfigManager,
    NetworkSettings,
)
from exchange_fixtures.core.errors import ValidationError
from exchange_fixtures.domain.order import Token

NETWORK_TOML = """
[network]
rpc_url = "http://localhost:8545"
exchange_address = "0x48bacb9266a570d521063ef5dd96e61686dbe788"
zrx_token_address = "0x34d402f14d58e001d8efbe6585051bf9706aa064"
receipt_timeout_seconds = 5.0
user_addresses = [
    "0x5409ed021d9299bf6814279a6a1411a7e866a631",
    "0x6ecbe1db9ef729cbe972c83fb886247691fb6beb",
]

[[tokens]]
symbol = "ZRX"
address = "0x34d402f14d58e001d8efbe6585051bf9706aa064"
decimals = 18

[[tokens]]
symbol = "TKA"
name = "Token A"
address = "0x25b8fe1de9daf8ba351890744ff28cf7dfa8f5e3"
decimals = 6
"""


@pytest.fixture
def config_file():
    with tempfile.NamedTemporaryFile(mode="w", suffix=".toml", delete=False) as f:
        f.write(NETWORK_TOML)
        f.flush()
        config_path = Path(f.name)

    yield config_path
    os.unlink(config_path)


class TestConfigBasics:
    """Tests for basic ConfigManager functionality."""

    def test_empty_config(self):
        config = ConfigManager()
        assert config.get("any.key") is None
        assert config.get("any.key", "default") == "default"

    def test_load_toml_file(self, config_file):
        config = ConfigManager(config_path=config_file)

        assert config.get("network.rpc_url") == "http://localhost:8545"
        assert config.get_float("network.receipt_timeout_seconds") == 5.0
        assert len(config.get("tokens")) == 2

    def test_missing_file_is_empty(self):
        config = ConfigManager(config_path=Path("/nonexistent/config.toml"))

        assert config.raw_data == {}

    def test_has(self, config_file):
        config = ConfigManager(config_path=config_file)

        assert config.has("network.exchange_address")
        assert not config.has("network.missing")

    def test_get_list(self, config_file):
        config = ConfigManager(config_path=config_file)

        assert len(config.get_list("network.user_addresses")) == 2
        assert config.get_list("network.missing") == []

    def test_get_section(self, config_file):
        config = ConfigManager(config_path=config_file)

        assert "rpc_url" in config.get_section("network")
        assert config.get_section("missing") == {}


class TestEnvOverrides:
    """Tests for environment variable overrides."""

    def test_env_overrides_toml(self, config_file, monkeypatch):
        monkeypatch.setenv("EXCHANGE_FIXTURES_NETWORK_RPC_URL", "http://node:8545")

        config = ConfigManager(config_path=config_file)

        assert config.get("network.rpc_url") == "http://node:8545"

    def test_env_list_parsing(self, monkeypatch):
        monkeypatch.setenv("EXCHANGE_FIXTURES_NETWORK_USER_ADDRESSES", "0xaaa, 0xbbb")

        config = ConfigManager()

        assert config.get_list("network.user_addresses") == ["0xaaa", "0xbbb"]

    def test_env_boolean_parsing(self, monkeypatch):
        monkeypatch.setenv("EXCHANGE_FIXTURES_TEST_FLAG", "true")

        assert ConfigManager().get("test.flag") is True

    def test_env_hex_stays_string(self, monkeypatch):
        monkeypatch.setenv("EXCHANGE_FIXTURES_NETWORK_EXCHANGE_ADDRESS", "0x1234")

        assert ConfigManager().get_str("network.exchange_address") == "0x1234"

    def test_from_env_uses_config_path(self, config_file, monkeypatch):
        monkeypatch.setenv("EXCHANGE_FIXTURES_CONFIG", str(config_file))

        config = ConfigManager.from_env()

        assert config.config_path == config_file
        assert config.get("network.rpc_url") == "http://localhost:8545"


class TestNetworkSettings:
    """Tests for building NetworkSettings from config."""

    def test_from_config(self, config_file):
        settings = NetworkSettings.from_config(ConfigManager(config_path=config_file))

        assert settings.rpc_url == "http://localhost:8545"
        assert settings.exchange_address == "0x48bacb9266a570d521063ef5dd96e61686dbe788"
        assert settings.zrx_token_address == "0x34d402f14d58e001d8efbe6585051bf9706aa064"
        assert settings.receipt_timeout_seconds == 5.0
        assert settings.user_addresses[0] == "0x5409ed021d9299bf6814279a6a1411a7e866a631"
        assert settings.token_transfer_proxy_address is None

    def test_tokens_parsed(self, config_file):
        settings = NetworkSettings.from_config(ConfigManager(config_path=config_file))

        assert settings.tokens[1] == Token(
            symbol="TKA",
            address="0x25b8fe1de9daf8ba351890744ff28cf7dfa8f5e3",
            decimals=6,
            name="Token A",
        )
        assert settings.token_by_symbol("ZRX").decimals == 18

    def test_unknown_symbol(self, config_file):
        settings = NetworkSettings.from_config(ConfigManager(config_path=config_file))

        with pytest.raises(KeyError):
            settings.token_by_symbol("DAI")

    def test_defaults(self, monkeypatch):
        monkeypatch.setenv("EXCHANGE_FIXTURES_NETWORK_EXCHANGE_ADDRESS", "0xexchange")
        monkeypatch.setenv("EXCHANGE_FIXTURES_NETWORK_ZRX_TOKEN_ADDRESS", "0xzrx")

        settings = NetworkSettings.from_config(ConfigManager())

        assert settings.rpc_url == DEFAULT_RPC_URL
        assert settings.receipt_timeout_seconds == DEFAULT_RECEIPT_TIMEOUT_SECONDS
        assert settings.tokens == ()

    def test_missing_exchange_address(self):
        with pytest.raises(ValidationError):
            NetworkSettings.from_config(ConfigManager())

    def test_tokens_ignore_environment(self, config_file, monkeypatch):
        monkeypatch.setenv("EXCHANGE_FIXTURES_TOKENS", "ZRX,TKA")

        settings = NetworkSettings.from_config(ConfigManager(config_path=config_file))

        assert [token.symbol for token in settings.tokens] == ["ZRX", "TKA"]

    def test_tokens_must_be_tables(self, monkeypatch):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".toml", delete=False) as f:
            f.write('tokens = ["ZRX", "TKA"]\n')
            config_path = Path(f.name)
        monkeypatch.setenv("EXCHANGE_FIXTURES_NETWORK_EXCHANGE_ADDRESS", "0xexchange")
        monkeypatch.setenv("EXCHANGE_FIXTURES_NETWORK_ZRX_TOKEN_ADDRESS", "0xzrx")

        try:
            with pytest.raises(ValidationError, match="array of tables"):
                NetworkSettings.from_config(ConfigManager(config_path=config_path))
        finally:
            os.unlink(config_path)
