"""Fill scenarios for exchange integration tests.

FillScenarios arranges on-chain preconditions for tests: it funds makers
and takers with token balances and proxy allowances, signs orders with the
requested economics and, for partial-fill tests, fills part of an order.

All funds come from the coinbase account (the first test address).

Usage:
    scenarios = FillScenarios(client, addresses, tokens, zrx_address, exchange_address)
    await scenarios.init_token_balances()

    order = await scenarios.create_fillable_signed_order(
        maker_token, taker_token, maker, taker, fillable_amount=100,
    )
"""

import asyncio
from typing import Any, Coroutine, Optional, Sequence

import structlog

from exchange_fixtures.core.errors import ValidationError
from exchange_fixtures.domain.order import (
    INITIAL_COINBASE_TOKEN_SUPPLY_IN_UNITS,
    NULL_ADDRESS,
    RESERVED_TOKEN_SYMBOLS,
    OrderOptions,
    SignedOrder,
    Token,
    is_null_address,
    to_base_unit_amount,
)
from exchange_fixtures.integrations.chain.client import ExchangeClient
from exchange_fixtures.scenarios import order_factory

log = structlog.get_logger()


async def _run_wave(*steps: Coroutine[Any, Any, None]) -> None:
    """Run steps concurrently; the first failure cancels the rest.

    The failing step's own exception is raised, not the ExceptionGroup
    TaskGroup wraps it in.
    """
    try:
        async with asyncio.TaskGroup() as tg:
            for step in steps:
                tg.create_task(step)
    except BaseExceptionGroup as eg:
        error: BaseException = eg
        while isinstance(error, BaseExceptionGroup):
            error = error.exceptions[0]
        raise error from None


class FillScenarios:
    """Creates funded, signed orders for exchange tests.

    Each funding wave runs its transactions concurrently in a TaskGroup: the
    wave fails as soon as any transaction fails and nothing after it runs.
    Completed transfers are not rolled back.
    """

    def __init__(
        self,
        client: ExchangeClient,
        user_addresses: Sequence[str],
        tokens: Sequence[Token],
        zrx_token_address: str,
        exchange_contract_address: str,
    ):
        """Initialize the scenario builder. No chain calls are made here.

        Args:
            client: Connected exchange client.
            user_addresses: Test accounts; the first is the coinbase that
                funds everything.
            tokens: Tokens deployed on the test chain.
            zrx_token_address: Fee token.
            exchange_contract_address: Exchange the orders are signed for.
        """
        if not user_addresses:
            raise ValidationError("At least one user address is required")

        self._client = client
        self._user_addresses = list(user_addresses)
        self._tokens = list(tokens)
        self._coinbase = self._user_addresses[0]
        self._zrx_token_address = zrx_token_address
        self._exchange_contract_address = exchange_contract_address
        self._allowance_locks: dict[tuple[str, str], asyncio.Lock] = {}
        self._log = log.bind(component="fill_scenarios")

    @property
    def coinbase(self) -> str:
        return self._coinbase

    async def init_token_balances(self) -> None:
        """Give the coinbase the initial supply of every dummy token.

        ZRX and WETH are real token contracts without setBalance and are
        skipped.
        """
        for token in self._tokens:
            if token.symbol in RESERVED_TOKEN_SYMBOLS:
                continue

            token_supply = to_base_unit_amount(
                INITIAL_COINBASE_TOKEN_SUPPLY_IN_UNITS, token.decimals
            )
            tx_hash = await self._client.testing.set_dummy_token_balance(
                token.address,
                self._coinbase,
                token_supply,
                sender=self._coinbase,
            )
            await self._client.await_transaction_mined(tx_hash)

            self._log.info(
                "coinbase_balance_seeded",
                symbol=token.symbol,
                token=token.address,
                amount=token_supply,
            )

    async def create_fillable_signed_order(
        self,
        maker_token_address: str,
        taker_token_address: str,
        maker_address: str,
        taker_address: str,
        fillable_amount: int,
        options: Optional[OrderOptions] = None,
    ) -> SignedOrder:
        """Order with equal maker/taker amounts and no fees."""
        return await self.create_asymmetric_fillable_signed_order(
            maker_token_address,
            taker_token_address,
            maker_address,
            taker_address,
            fillable_amount,
            fillable_amount,
            options,
        )

    async def create_fillable_signed_order_with_fees(
        self,
        maker_token_address: str,
        taker_token_address: str,
        maker_fee: int,
        taker_fee: int,
        maker_address: str,
        taker_address: str,
        fillable_amount: int,
        fee_recipient: str,
        options: Optional[OrderOptions] = None,
    ) -> SignedOrder:
        """Order with equal maker/taker amounts and the given ZRX fees.

        Both parties also receive enough ZRX (and allowance) to pay their fee.
        """
        return await self._create_asymmetric_fillable_signed_order_with_fees(
            maker_token_address,
            taker_token_address,
            maker_fee,
            taker_fee,
            maker_address,
            taker_address,
            fillable_amount,
            fillable_amount,
            fee_recipient,
            options,
        )

    async def create_asymmetric_fillable_signed_order(
        self,
        maker_token_address: str,
        taker_token_address: str,
        maker_address: str,
        taker_address: str,
        maker_fillable_amount: int,
        taker_fillable_amount: int,
        options: Optional[OrderOptions] = None,
    ) -> SignedOrder:
        """Order with independent maker/taker amounts and no fees."""
        return await self._create_asymmetric_fillable_signed_order_with_fees(
            maker_token_address,
            taker_token_address,
            0,
            0,
            maker_address,
            taker_address,
            maker_fillable_amount,
            taker_fillable_amount,
            NULL_ADDRESS,
            options,
        )

    async def create_partially_filled_signed_order(
        self,
        maker_token_address: str,
        taker_token_address: str,
        taker_address: str,
        fillable_amount: int,
        partial_fill_amount: int,
    ) -> SignedOrder:
        """Create an order made by the coinbase and fill part of it.

        The fill is submitted with shouldThrowOnInsufficientBalanceOrAllowance
        disabled. Afterwards the exchange reports
        fillable_amount - partial_fill_amount as remaining.

        Returns:
            The signed order as created, before the fill.
        """
        maker_address = self._user_addresses[0]
        signed_order = await self.create_asymmetric_fillable_signed_order(
            maker_token_address,
            taker_token_address,
            maker_address,
            taker_address,
            fillable_amount,
            fillable_amount,
        )

        should_throw_on_insufficient_balance_or_allowance = False
        tx_hash = await self._client.exchange.fill_order(
            signed_order,
            partial_fill_amount,
            should_throw_on_insufficient_balance_or_allowance,
            taker_address,
        )
        await self._client.await_transaction_mined(tx_hash)

        self._log.info(
            "order_partially_filled",
            taker=taker_address,
            fillable_amount=fillable_amount,
            partial_fill_amount=partial_fill_amount,
        )
        return signed_order

    async def _create_asymmetric_fillable_signed_order_with_fees(
        self,
        maker_token_address: str,
        taker_token_address: str,
        maker_fee: int,
        taker_fee: int,
        maker_address: str,
        taker_address: str,
        maker_fillable_amount: int,
        taker_fillable_amount: int,
        fee_recipient: str,
        options: Optional[OrderOptions] = None,
    ) -> SignedOrder:
        options = options or OrderOptions()

        await _run_wave(
            self._increase_balance_and_allowance(
                maker_token_address, maker_address, maker_fillable_amount
            ),
            self._increase_balance_and_allowance(
                taker_token_address, taker_address, taker_fillable_amount
            ),
        )

        await _run_wave(
            self._increase_balance_and_allowance(
                self._zrx_token_address, maker_address, maker_fee
            ),
            self._increase_balance_and_allowance(
                self._zrx_token_address, taker_address, taker_fee
            ),
        )

        signed_order = await order_factory.create_signed_order(
            self._client,
            maker_address,
            taker_address,
            maker_fee,
            taker_fee,
            maker_fillable_amount,
            maker_token_address,
            taker_fillable_amount,
            taker_token_address,
            self._exchange_contract_address,
            fee_recipient,
            options.expiration_unix_timestamp_sec,
        )

        self._log.info(
            "fillable_order_created",
            maker=maker_address,
            taker=taker_address,
            maker_amount=maker_fillable_amount,
            taker_amount=taker_fillable_amount,
            maker_fee=maker_fee,
            taker_fee=taker_fee,
        )
        return signed_order

    async def _increase_balance_and_allowance(
        self,
        token_address: str,
        address: str,
        amount: int,
    ) -> None:
        if amount == 0 or is_null_address(address):
            return  # noop

        await _run_wave(
            self._increase_balance(token_address, address, amount),
            self._increase_allowance(token_address, address, amount),
        )

    async def _increase_balance(
        self,
        token_address: str,
        address: str,
        amount: int,
    ) -> None:
        tx_hash = await self._client.token.transfer(
            token_address, self._coinbase, address, amount
        )
        await self._client.await_transaction_mined(tx_hash)

    async def _increase_allowance(
        self,
        token_address: str,
        address: str,
        amount: int,
    ) -> None:
        # Read-modify-write; serialized per (token, owner) within this builder
        lock = self._allowance_locks.setdefault(
            (token_address.lower(), address.lower()), asyncio.Lock()
        )
        async with lock:
            old_allowance = await self._client.token.get_proxy_allowance(
                token_address, address
            )
            new_allowance = old_allowance + amount
            tx_hash = await self._client.token.set_proxy_allowance(
                token_address, address, new_allowance
            )
            await self._client.await_transaction_mined(tx_hash)
