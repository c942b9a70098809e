"""Exchange client for a development chain.

This client handles the chain interactions test fixtures need:
- ERC20 balance, transfer and proxy allowance calls
- Exchange fills and fill-state queries
- Order hash signing
- Waiting for transaction receipts

Transactions are sent from node-managed (unlocked) accounts, so the node
assigns nonces and concurrent sends from one account are safe.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Optional

import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_delay,
    wait_fixed,
)
from web3.exceptions import TransactionNotFound

from exchange_fixtures.core.errors import (
    ChainConnectionError,
    ClientNotConnectedError,
    TransactionFailedError,
    TransactionTimeoutError,
)
from exchange_fixtures.domain.order import ECSignature
from exchange_fixtures.integrations.chain.abi import EXCHANGE_ABI, TOKEN_ABI
from exchange_fixtures.integrations.chain.wrappers import (
    ExchangeWrapper,
    TestingAccessor,
    TokenWrapper,
)

log = structlog.get_logger()

DEFAULT_RECEIPT_TIMEOUT_SECONDS = 60.0
DEFAULT_RECEIPT_POLL_INTERVAL_SECONDS = 0.1


@dataclass
class TxReceipt:
    """Transaction receipt."""

    tx_hash: str
    block_number: int
    gas_used: int
    status: bool  # True = success


class ExchangeClient:
    """Async client for the exchange contracts on a test chain.

    Uses web3.py; blocking calls run in a thread pool so several
    requests can be in flight at once.

    Attributes:
        token: ERC20 operations (balances, transfers, proxy allowances).
        exchange: Exchange operations (fills, fill-state queries).
        testing: Administrative calls only test chains allow.
    """

    def __init__(
        self,
        rpc_url: str,
        exchange_address: str,
        token_transfer_proxy_address: Optional[str] = None,
        private_keys: Optional[dict[str, str]] = None,
        executor: Optional[ThreadPoolExecutor] = None,
        receipt_timeout_seconds: float = DEFAULT_RECEIPT_TIMEOUT_SECONDS,
        receipt_poll_interval_seconds: float = DEFAULT_RECEIPT_POLL_INTERVAL_SECONDS,
    ):
        """Initialize the exchange client.

        Args:
            rpc_url: JSON-RPC URL of the test node.
            exchange_address: Exchange contract address.
            token_transfer_proxy_address: Allowance spender. Read from the
                exchange contract on connect() when omitted.
            private_keys: Optional address -> key mapping. Order hashes for
                these signers are signed locally instead of via eth_sign.
            executor: Optional thread pool for async execution.
            receipt_timeout_seconds: Max wait for a transaction receipt.
            receipt_poll_interval_seconds: Delay between receipt lookups.
        """
        self._rpc_url = rpc_url
        self._exchange_address = exchange_address
        self._proxy_address = token_transfer_proxy_address
        self._private_keys = {
            address.lower(): key for address, key in (private_keys or {}).items()
        }
        self._executor = executor or ThreadPoolExecutor(max_workers=8)
        self._receipt_timeout = receipt_timeout_seconds
        self._poll_interval = receipt_poll_interval_seconds
        self._log = log.bind(component="exchange_client")

        self._w3 = None
        self._exchange_contract = None
        self._token_contracts: dict[str, Any] = {}
        self._connected = False

        self.token = TokenWrapper(self)
        self.exchange = ExchangeWrapper(self)
        self.testing = TestingAccessor(self)

    @property
    def is_connected(self) -> bool:
        """Whether connected to RPC."""
        return self._connected and self._w3 is not None

    @property
    def exchange_address(self) -> str:
        return self._exchange_address

    @property
    def token_transfer_proxy_address(self) -> Optional[str]:
        return self._proxy_address

    async def connect(self) -> None:
        """Connect to the RPC and resolve the exchange contracts."""
        if self._connected:
            return

        from web3 import Web3

        self._w3 = Web3(Web3.HTTPProvider(self._rpc_url))

        if not await self._run_sync(self._w3.is_connected):
            self._w3 = None
            raise ChainConnectionError(f"Failed to connect to {self._rpc_url}")

        self._exchange_contract = self._w3.eth.contract(
            address=Web3.to_checksum_address(self._exchange_address),
            abi=EXCHANGE_ABI,
        )

        if self._proxy_address is None:
            self._proxy_address = await self._run_sync(
                self._exchange_contract.functions.TOKEN_TRANSFER_PROXY_CONTRACT().call
            )

        self._connected = True
        self._log.info(
            "exchange_client_connected",
            rpc=self._rpc_url,
            exchange=self._exchange_address,
            proxy=self._proxy_address,
        )

    async def close(self) -> None:
        """Close the client."""
        self._w3 = None
        self._exchange_contract = None
        self._token_contracts.clear()
        self._connected = False
        self._log.debug("exchange_client_closed")

    async def __aenter__(self) -> "ExchangeClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _run_sync(self, func, *args, **kwargs):
        """Run a synchronous function in the thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor,
            lambda: func(*args, **kwargs)
        )

    def _ensure_connected(self) -> None:
        if not self._connected:
            raise ClientNotConnectedError(
                "Client not connected. Call connect() first."
            )

    def _checksum(self, address: str) -> str:
        return self._w3.to_checksum_address(address)

    def _token_contract(self, token_address: str):
        """Get (and cache) the contract object for a token."""
        key = token_address.lower()
        if key not in self._token_contracts:
            self._token_contracts[key] = self._w3.eth.contract(
                address=self._checksum(token_address),
                abi=TOKEN_ABI,
            )
        return self._token_contracts[key]

    async def _call(self, contract_function) -> Any:
        """Run a read-only contract call."""
        return await self._run_sync(contract_function.call)

    async def _transact(self, contract_function, sender: str) -> str:
        """Submit a transaction from an unlocked node account.

        Returns:
            Transaction hash as 0x-prefixed hex.
        """
        tx_hash = await self._run_sync(
            contract_function.transact, {"from": self._checksum(sender)}
        )
        tx_hash_hex = self._w3.to_hex(tx_hash)
        self._log.debug(
            "tx_submitted",
            tx_hash=tx_hash_hex,
            function=contract_function.fn_name,
            sender=sender,
        )
        return tx_hash_hex

    async def await_transaction_mined(self, tx_hash: str) -> TxReceipt:
        """Wait until a transaction is mined.

        Args:
            tx_hash: Hash returned by one of the transaction methods.

        Returns:
            TxReceipt for the mined transaction.

        Raises:
            TransactionTimeoutError: No receipt within the configured timeout.
            TransactionFailedError: The transaction reverted.
        """
        self._ensure_connected()

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_delay(self._receipt_timeout),
                wait=wait_fixed(self._poll_interval),
                retry=retry_if_exception_type(TransactionNotFound),
                reraise=True,
            ):
                with attempt:
                    receipt = await self._run_sync(
                        self._w3.eth.get_transaction_receipt, tx_hash
                    )
        except TransactionNotFound as e:
            raise TransactionTimeoutError(
                f"Transaction not mined after {self._receipt_timeout}s",
                tx_hash=tx_hash,
                cause=e,
            )

        result = TxReceipt(
            tx_hash=tx_hash,
            block_number=receipt["blockNumber"],
            gas_used=receipt["gasUsed"],
            status=receipt["status"] == 1,
        )

        if not result.status:
            self._log.warning("tx_reverted", tx_hash=tx_hash, gas_used=result.gas_used)
            raise TransactionFailedError("Transaction reverted", tx_hash=tx_hash)

        self._log.debug(
            "tx_mined",
            tx_hash=tx_hash,
            block_number=result.block_number,
            gas_used=result.gas_used,
        )
        return result

    async def sign_order_hash(self, order_hash: str, signer: str) -> ECSignature:
        """Sign an order hash as `signer`.

        The hash is signed as an Ethereum personal message, which is what
        the exchange contract verifies against. Signers with a configured
        private key sign locally, everyone else through eth_sign.

        Args:
            order_hash: 0x-prefixed 32-byte order hash.
            signer: Address that must produce the signature.

        Returns:
            ECSignature with v normalized to 27/28.
        """
        self._ensure_connected()

        private_key = self._private_keys.get(signer.lower())
        if private_key is not None:
            from eth_account import Account
            from eth_account.messages import encode_defunct

            signed = Account.sign_message(
                encode_defunct(hexstr=order_hash), private_key=private_key
            )
            signature = bytes(signed.signature)
        else:
            signature = bytes(
                await self._run_sync(
                    self._w3.eth.sign, self._checksum(signer), hexstr=order_hash
                )
            )

        return ECSignature.from_bytes(signature)

    async def get_block_number(self) -> int:
        self._ensure_connected()
        return await self._run_sync(lambda: self._w3.eth.block_number)

    async def get_accounts(self) -> list[str]:
        """Accounts the node manages (the unlocked test accounts)."""
        self._ensure_connected()
        return list(await self._run_sync(lambda: self._w3.eth.accounts))
