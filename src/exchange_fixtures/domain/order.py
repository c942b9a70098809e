"""Order and token types for the exchange fixtures.

Amounts on an Order are integers in token base units (the smallest
denomination, e.g. wei for 18-decimal tokens). Unit amounts (what a human
would call "100 tokens") are Decimals and only appear at the edges, when
seeding balances or printing.
"""

import secrets
from dataclasses import dataclass, field, fields
from decimal import Context, Decimal
from typing import Optional, Union

from eth_abi.packed import encode_packed
from eth_utils import keccak, to_checksum_address

from exchange_fixtures.core.errors import ValidationError

NULL_ADDRESS = "0x0000000000000000000000000000000000000000"

# Tokens that must not be seeded through setBalance (not dummy tokens)
ZRX_SYMBOL = "ZRX"
WETH_SYMBOL = "WETH"
RESERVED_TOKEN_SYMBOLS = frozenset({ZRX_SYMBOL, WETH_SYMBOL})

INITIAL_COINBASE_TOKEN_SUPPLY_IN_UNITS = Decimal(100)

# 2050-01-01, far enough out that test orders never expire
DEFAULT_EXPIRATION_UNIX_TIMESTAMP_SEC = 2524604400

MAX_UINT256 = 2**256 - 1

# Enough digits for any uint256 amount
_UINT256_CONTEXT = Context(prec=80)

_ORDER_HASH_TYPES = ["address"] * 6 + ["uint256"] * 6


@dataclass(frozen=True)
class Token:
    """A token known to the test network."""

    symbol: str
    address: str
    decimals: int
    name: str = ""


@dataclass(frozen=True)
class ECSignature:
    """Split secp256k1 signature.

    Attributes:
        v: Recovery id, 27 or 28.
        r: 0x-prefixed 32-byte hex.
        s: 0x-prefixed 32-byte hex.
    """

    v: int
    r: str
    s: str

    @classmethod
    def from_bytes(cls, signature: bytes) -> "ECSignature":
        """Split a 65-byte r||s||v signature.

        Raises:
            ValidationError: If the signature is not 65 bytes long.
        """
        if len(signature) != 65:
            raise ValidationError(
                f"Invalid signature length: {len(signature)}, expected 65"
            )
        v = signature[64]
        if v < 27:
            v += 27
        return cls(
            v=v,
            r="0x" + signature[0:32].hex(),
            s="0x" + signature[32:64].hex(),
        )


@dataclass(frozen=True)
class Order:
    """Unsigned exchange order."""

    exchange_contract_address: str
    maker: str
    taker: str
    maker_token_address: str
    taker_token_address: str
    fee_recipient: str
    maker_token_amount: int
    taker_token_amount: int
    maker_fee: int
    taker_fee: int
    expiration_unix_timestamp_sec: int
    salt: int

    @property
    def order_addresses(self) -> list[str]:
        """Address array in the order the exchange's fillOrder expects."""
        return [
            to_checksum_address(self.maker),
            to_checksum_address(self.taker),
            to_checksum_address(self.maker_token_address),
            to_checksum_address(self.taker_token_address),
            to_checksum_address(self.fee_recipient),
        ]

    @property
    def order_values(self) -> list[int]:
        """Value array in the order the exchange's fillOrder expects."""
        return [
            self.maker_token_amount,
            self.taker_token_amount,
            self.maker_fee,
            self.taker_fee,
            self.expiration_unix_timestamp_sec,
            self.salt,
        ]


@dataclass(frozen=True)
class SignedOrder(Order):
    """Order plus the maker's signature over its hash."""

    ec_signature: ECSignature = field(kw_only=True)

    @classmethod
    def from_order(cls, order: Order, ec_signature: ECSignature) -> "SignedOrder":
        terms = {f.name: getattr(order, f.name) for f in fields(Order)}
        return cls(**terms, ec_signature=ec_signature)


@dataclass(frozen=True)
class OrderOptions:
    """Optional order terms.

    Attributes:
        expiration_unix_timestamp_sec: Order expiry. None uses
            DEFAULT_EXPIRATION_UNIX_TIMESTAMP_SEC.
    """

    expiration_unix_timestamp_sec: Optional[int] = None


def is_null_address(address: str) -> bool:
    return address.lower() == NULL_ADDRESS


def to_base_unit_amount(amount: Union[Decimal, int, str], decimals: int) -> int:
    """Convert a unit amount to base units.

    Args:
        amount: Amount in whole token units.
        decimals: Token decimal precision.

    Returns:
        Integer amount in base units.

    Raises:
        ValidationError: If decimals is negative or the amount has more
            precision than the token supports.
    """
    if decimals < 0:
        raise ValidationError(f"Invalid decimals: {decimals}")
    base_units = Decimal(str(amount)).scaleb(decimals, _UINT256_CONTEXT)
    if base_units != base_units.to_integral_value():
        raise ValidationError(
            f"Amount {amount} has more than {decimals} decimal places"
        )
    return int(base_units)


def to_unit_amount(amount: int, decimals: int) -> Decimal:
    """Convert a base unit amount to whole token units."""
    if decimals < 0:
        raise ValidationError(f"Invalid decimals: {decimals}")
    return Decimal(amount).scaleb(-decimals, _UINT256_CONTEXT)


def generate_pseudo_random_salt() -> int:
    return secrets.randbits(256)


def get_order_hash_hex(order: Order) -> str:
    """Hash an order the way the exchange contract does.

    keccak256 over the tightly packed addresses followed by the uint256
    values.
    """
    values = [
        to_checksum_address(order.exchange_contract_address),
        *order.order_addresses,
        *order.order_values,
    ]
    for value in order.order_values:
        if not 0 <= value <= MAX_UINT256:
            raise ValidationError(f"Order value out of uint256 range: {value}")
    return "0x" + keccak(encode_packed(_ORDER_HASH_TYPES, values)).hex()
