"""Builds signed orders from explicit terms."""

from typing import Optional

import structlog

from exchange_fixtures.domain.order import (
    DEFAULT_EXPIRATION_UNIX_TIMESTAMP_SEC,
    Order,
    SignedOrder,
    generate_pseudo_random_salt,
    get_order_hash_hex,
)
from exchange_fixtures.integrations.chain.client import ExchangeClient

log = structlog.get_logger()


async def create_signed_order(
    client: ExchangeClient,
    maker: str,
    taker: str,
    maker_fee: int,
    taker_fee: int,
    maker_token_amount: int,
    maker_token_address: str,
    taker_token_amount: int,
    taker_token_address: str,
    exchange_contract_address: str,
    fee_recipient: str,
    expiration_unix_timestamp_sec: Optional[int] = None,
) -> SignedOrder:
    """Create an order with a fresh salt and have the maker sign it.

    Args:
        client: Connected exchange client used for signing.
        expiration_unix_timestamp_sec: Order expiry; defaults to
            DEFAULT_EXPIRATION_UNIX_TIMESTAMP_SEC.

    Returns:
        The signed order.
    """
    if expiration_unix_timestamp_sec is None:
        expiration_unix_timestamp_sec = DEFAULT_EXPIRATION_UNIX_TIMESTAMP_SEC

    order = Order(
        exchange_contract_address=exchange_contract_address,
        maker=maker,
        taker=taker,
        maker_token_address=maker_token_address,
        taker_token_address=taker_token_address,
        fee_recipient=fee_recipient,
        maker_token_amount=maker_token_amount,
        taker_token_amount=taker_token_amount,
        maker_fee=maker_fee,
        taker_fee=taker_fee,
        expiration_unix_timestamp_sec=expiration_unix_timestamp_sec,
        salt=generate_pseudo_random_salt(),
    )
    order_hash = get_order_hash_hex(order)
    ec_signature = await client.sign_order_hash(order_hash, maker)

    log.debug("order_signed", order_hash=order_hash, maker=maker)
    return SignedOrder.from_order(order, ec_signature)
