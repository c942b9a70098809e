"""Contract wrappers exposed on ExchangeClient.

Each wrapper groups the calls for one contract family and delegates RPC
plumbing back to the owning client. Methods that change chain state return
the transaction hash; callers wait for it with
ExchangeClient.await_transaction_mined().
"""

from typing import TYPE_CHECKING

from exchange_fixtures.domain.order import MAX_UINT256, SignedOrder, get_order_hash_hex

if TYPE_CHECKING:
    from exchange_fixtures.integrations.chain.client import ExchangeClient


def _bytes32(hex_value: str) -> bytes:
    return bytes.fromhex(hex_value[2:] if hex_value.startswith("0x") else hex_value)


class TokenWrapper:
    """ERC20 calls, with allowances granted to the token transfer proxy."""

    def __init__(self, client: "ExchangeClient"):
        self._client = client

    async def get_balance(self, token_address: str, owner: str) -> int:
        client = self._client
        client._ensure_connected()
        contract = client._token_contract(token_address)
        return await client._call(
            contract.functions.balanceOf(client._checksum(owner))
        )

    async def transfer(
        self,
        token_address: str,
        from_address: str,
        to_address: str,
        amount: int,
    ) -> str:
        """Transfer `amount` base units from `from_address` to `to_address`."""
        client = self._client
        client._ensure_connected()
        contract = client._token_contract(token_address)
        return await client._transact(
            contract.functions.transfer(client._checksum(to_address), amount),
            sender=from_address,
        )

    async def get_proxy_allowance(self, token_address: str, owner: str) -> int:
        """Allowance `owner` has granted the token transfer proxy."""
        client = self._client
        client._ensure_connected()
        contract = client._token_contract(token_address)
        return await client._call(
            contract.functions.allowance(
                client._checksum(owner),
                client._checksum(client.token_transfer_proxy_address),
            )
        )

    async def set_proxy_allowance(
        self,
        token_address: str,
        owner: str,
        amount: int,
    ) -> str:
        """Set (not increase) the proxy allowance for `owner`."""
        client = self._client
        client._ensure_connected()
        contract = client._token_contract(token_address)
        return await client._transact(
            contract.functions.approve(
                client._checksum(client.token_transfer_proxy_address), amount
            ),
            sender=owner,
        )

    async def set_unlimited_proxy_allowance(self, token_address: str, owner: str) -> str:
        return await self.set_proxy_allowance(token_address, owner, MAX_UINT256)


class ExchangeWrapper:
    """Exchange contract fills and fill-state queries."""

    def __init__(self, client: "ExchangeClient"):
        self._client = client

    async def fill_order(
        self,
        signed_order: SignedOrder,
        fill_taker_token_amount: int,
        should_throw_on_insufficient_balance_or_allowance: bool,
        taker_address: str,
    ) -> str:
        """Fill up to `fill_taker_token_amount` of a signed order.

        No off-chain validation happens here; the exchange contract decides
        how much (if anything) gets filled.
        """
        client = self._client
        client._ensure_connected()
        signature = signed_order.ec_signature
        return await client._transact(
            client._exchange_contract.functions.fillOrder(
                signed_order.order_addresses,
                signed_order.order_values,
                fill_taker_token_amount,
                should_throw_on_insufficient_balance_or_allowance,
                signature.v,
                _bytes32(signature.r),
                _bytes32(signature.s),
            ),
            sender=taker_address,
        )

    async def get_filled_taker_amount(self, order_hash: str) -> int:
        client = self._client
        client._ensure_connected()
        return await client._call(
            client._exchange_contract.functions.filled(_bytes32(order_hash))
        )

    async def get_cancelled_taker_amount(self, order_hash: str) -> int:
        client = self._client
        client._ensure_connected()
        return await client._call(
            client._exchange_contract.functions.cancelled(_bytes32(order_hash))
        )

    async def get_unavailable_taker_amount(self, order_hash: str) -> int:
        """Filled plus cancelled taker amount for an order."""
        client = self._client
        client._ensure_connected()
        return await client._call(
            client._exchange_contract.functions.getUnavailableTakerTokenAmount(
                _bytes32(order_hash)
            )
        )

    async def get_remaining_fillable_taker_amount(self, signed_order: SignedOrder) -> int:
        unavailable = await self.get_unavailable_taker_amount(
            get_order_hash_hex(signed_order)
        )
        return max(signed_order.taker_token_amount - unavailable, 0)


class TestingAccessor:
    """Administrative calls that only exist on test deployments.

    The dummy tokens deployed to development chains let their owner set any
    balance directly. Production tokens have no such function.
    """

    # Not a test class, despite the name
    __test__ = False

    def __init__(self, client: "ExchangeClient"):
        self._client = client

    async def set_dummy_token_balance(
        self,
        token_address: str,
        target: str,
        amount: int,
        sender: str,
    ) -> str:
        """Overwrite `target`'s balance of a dummy token.

        Args:
            token_address: Dummy token contract.
            target: Account whose balance is set.
            amount: New balance in base units.
            sender: Token owner submitting the call.
        """
        client = self._client
        client._ensure_connected()
        contract = client._token_contract(token_address)
        return await client._transact(
            contract.functions.setBalance(client._checksum(target), amount),
            sender=sender,
        )
