"""Domain types - tokens, orders, signatures."""

from exchange_fixtures.domain.order import (
    DEFAULT_EXPIRATION_UNIX_TIMESTAMP_SEC,
    INITIAL_COINBASE_TOKEN_SUPPLY_IN_UNITS,
    NULL_ADDRESS,
    RESERVED_TOKEN_SYMBOLS,
    WETH_SYMBOL,
    ZRX_SYMBOL,
    ECSignature,
    Order,
    OrderOptions,
    SignedOrder,
    Token,
    generate_pseudo_random_salt,
    get_order_hash_hex,
    is_null_address,
    to_base_unit_amount,
    to_unit_amount,
)

__all__ = [
    # Constants
    "DEFAULT_EXPIRATION_UNIX_TIMESTAMP_SEC",
    "INITIAL_COINBASE_TOKEN_SUPPLY_IN_UNITS",
    "NULL_ADDRESS",
    "RESERVED_TOKEN_SYMBOLS",
    "WETH_SYMBOL",
    "ZRX_SYMBOL",
    # Types
    "ECSignature",
    "Order",
    "OrderOptions",
    "SignedOrder",
    "Token",
    # Helpers
    "generate_pseudo_random_salt",
    "get_order_hash_hex",
    "is_null_address",
    "to_base_unit_amount",
    "to_unit_amount",
]
