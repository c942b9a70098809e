"""
Settings for running fixtures against a development chain.

Values come from a TOML file and can be overridden per key through the
environment: "network.rpc_url" is read from EXCHANGE_FIXTURES_NETWORK_RPC_URL
when that variable is set.

Only the test harness reads configuration. FillScenarios and the order
factory take everything they need as arguments.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import tomllib

from exchange_fixtures.core.errors import ValidationError
from exchange_fixtures.domain.order import Token

ENV_PREFIX = "EXCHANGE_FIXTURES_"
CONFIG_PATH_ENV = "EXCHANGE_FIXTURES_CONFIG"

DEFAULT_RPC_URL = "http://127.0.0.1:8545"
DEFAULT_RECEIPT_TIMEOUT_SECONDS = 60.0
DEFAULT_RECEIPT_POLL_INTERVAL_SECONDS = 0.1

_TRUE_WORDS = ("true", "yes", "on")
_FALSE_WORDS = ("false", "no", "off")


class ConfigManager:
    """Dotted-key lookups over a TOML file with environment overrides.

    Usage:
        config = ConfigManager(Path("config/devnet.toml"))
        rpc_url = config.get("network.rpc_url")
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        env_prefix: str = ENV_PREFIX,
    ) -> None:
        """
        Args:
            config_path: TOML file; a missing file means no file values.
            env_prefix: Prefix of override variables.
        """
        self._config_path = config_path
        self._env_prefix = env_prefix
        self._data: dict[str, Any] = {}

        if config_path is not None and config_path.exists():
            with open(config_path, "rb") as f:
                self._data = tomllib.load(f)

    @classmethod
    def from_env(cls) -> "ConfigManager":
        """Load the file named by EXCHANGE_FIXTURES_CONFIG, if any."""
        path = os.environ.get(CONFIG_PATH_ENV)
        return cls(config_path=Path(path) if path else None)

    @property
    def config_path(self) -> Optional[Path]:
        return self._config_path

    @property
    def raw_data(self) -> dict[str, Any]:
        return self._data.copy()

    def _env_name(self, key: str) -> str:
        return self._env_prefix + key.upper().replace(".", "_")

    def _lookup_file(self, key: str) -> tuple[bool, Any]:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return False, None
            node = node[part]
        return True, node

    @staticmethod
    def _coerce(raw: str) -> Any:
        """Turn an environment string into a bool, number or list."""
        lowered = raw.lower()
        if lowered in _TRUE_WORDS:
            return True
        if lowered in _FALSE_WORDS:
            return False

        # int() without a base leaves 0x-prefixed addresses alone
        for number_type in (int, float):
            try:
                return number_type(raw)
            except ValueError:
                continue

        if "," in raw:
            return [item.strip() for item in raw.split(",")]
        return raw

    def has(self, key: str) -> bool:
        return self._env_name(key) in os.environ or self._lookup_file(key)[0]

    def get(self, key: str, default: Any = None) -> Any:
        """Value for a dotted key; the environment wins over the file."""
        env_name = self._env_name(key)
        if env_name in os.environ:
            return self._coerce(os.environ[env_name])

        found, value = self._lookup_file(key)
        return value if found else default

    def get_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.get(key)
        return default if value is None else str(value)

    def get_float(self, key: str, default: float = 0.0) -> float:
        value = self.get(key)
        return default if value is None else float(value)

    def get_list(self, key: str, default: Optional[list[Any]] = None) -> list[Any]:
        """List value; a plain string is split on commas."""
        value = self.get(key)
        if value is None:
            return [] if default is None else default
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            return [item.strip() for item in value.split(",")]
        return [value]

    def get_section(self, section: str) -> dict[str, Any]:
        """A whole TOML table from the file (no environment overrides)."""
        found, value = self._lookup_file(section)
        return value if found and isinstance(value, dict) else {}

    def get_table_list(self, key: str) -> list[dict[str, Any]]:
        """An array of tables ([[key]]) from the file.

        Environment variables cannot express tables, so they are not
        consulted.

        Raises:
            ValidationError: If the value is not a list of tables.
        """
        found, value = self._lookup_file(key)
        if not found:
            return []
        if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
            raise ValidationError(f"{key} must be an array of tables")
        return value


@dataclass(frozen=True)
class NetworkSettings:
    """Connection and deployment details of a development chain.

    Attributes:
        rpc_url: JSON-RPC endpoint of the test node.
        exchange_address: Deployed exchange contract.
        zrx_token_address: Fee token used for maker/taker fees.
        user_addresses: Unlocked test accounts; the first one is the coinbase.
        tokens: Token descriptors deployed on the chain.
        token_transfer_proxy_address: Allowance spender; read from the
            exchange contract when empty.
        receipt_timeout_seconds: How long to wait for a transaction receipt.
        receipt_poll_interval_seconds: Delay between receipt lookups.
    """

    rpc_url: str
    exchange_address: str
    zrx_token_address: str
    user_addresses: tuple[str, ...] = ()
    tokens: tuple[Token, ...] = ()
    token_transfer_proxy_address: Optional[str] = None
    receipt_timeout_seconds: float = DEFAULT_RECEIPT_TIMEOUT_SECONDS
    receipt_poll_interval_seconds: float = DEFAULT_RECEIPT_POLL_INTERVAL_SECONDS
    private_keys: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: ConfigManager) -> "NetworkSettings":
        """Build settings from the [network] and [[tokens]] config sections.

        Raises:
            ValidationError: If a required key is missing.
        """
        exchange_address = config.get_str("network.exchange_address")
        zrx_token_address = config.get_str("network.zrx_token_address")
        if not exchange_address:
            raise ValidationError("network.exchange_address is not configured")
        if not zrx_token_address:
            raise ValidationError("network.zrx_token_address is not configured")

        tokens = tuple(
            Token(
                symbol=entry["symbol"],
                address=entry["address"],
                decimals=int(entry["decimals"]),
                name=entry.get("name", ""),
            )
            for entry in config.get_table_list("tokens")
        )

        return cls(
            rpc_url=config.get_str("network.rpc_url", DEFAULT_RPC_URL),
            exchange_address=exchange_address,
            zrx_token_address=zrx_token_address,
            user_addresses=tuple(config.get_list("network.user_addresses")),
            tokens=tokens,
            token_transfer_proxy_address=config.get_str(
                "network.token_transfer_proxy_address"
            ),
            receipt_timeout_seconds=config.get_float(
                "network.receipt_timeout_seconds", DEFAULT_RECEIPT_TIMEOUT_SECONDS
            ),
            receipt_poll_interval_seconds=config.get_float(
                "network.receipt_poll_interval_seconds",
                DEFAULT_RECEIPT_POLL_INTERVAL_SECONDS,
            ),
            private_keys=dict(config.get_section("private_keys")),
        )

    def token_by_symbol(self, symbol: str) -> Token:
        """Look up a configured token.

        Raises:
            KeyError: If no token has this symbol.
        """
        for token in self.tokens:
            if token.symbol == symbol:
                return token
        raise KeyError(symbol)
