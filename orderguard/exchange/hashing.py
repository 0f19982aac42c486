"""
Order hashing.

The order hash is the contract's primary key for fill/cancel state, the
digest the maker signs, and the correlation key for fill/cancel events, so
it has to match the contract bit for bit:

    keccak256(
        exchange ‖ maker ‖ taker ‖ makerToken ‖ takerToken ‖ feeRecipient   (20 bytes each)
        ‖ makerTokenAmount ‖ takerTokenAmount ‖ makerFee ‖ takerFee
        ‖ expirationUnixTimestampSec ‖ salt                                  (uint256, 32 bytes BE)
    )
"""

from typing import Union

from eth_abi.packed import encode_packed

from ..constants import VALID_ORDER_HASH_PATTERN
from ..crypto.address import normalize_address
from ..crypto.hashing import keccak256
from .order import Order, SignedOrder

ORDER_HASH_TYPES = ["address"] * 6 + ["uint256"] * 6


def encode_order(order: Union[Order, SignedOrder]) -> bytes:
    """Tightly packed byte layout of an order's fields (signature excluded)."""
    if isinstance(order, SignedOrder):
        order = order.order

    addresses = [
        order.exchange_contract_address,
        order.maker,
        order.taker,
        order.maker_token_address,
        order.taker_token_address,
        order.fee_recipient,
    ]
    values = [
        order.maker_token_amount,
        order.taker_token_amount,
        order.maker_fee,
        order.taker_fee,
        order.expiration_unix_timestamp_sec,
        order.salt,
    ]
    return encode_packed(ORDER_HASH_TYPES, [normalize_address(a) for a in addresses] + values)


def get_order_hash(order: Union[Order, SignedOrder]) -> bytes:
    """32-byte order hash."""
    return keccak256(encode_order(order))


def get_order_hash_hex(order: Union[Order, SignedOrder]) -> str:
    """Order hash as a 0x-prefixed hex string."""
    return '0x' + get_order_hash(order).hex()


def is_valid_order_hash(order_hash: str) -> bool:
    """
    Check that a string has the format of an order hash.

    Says nothing about whether such an order exists.
    """
    return isinstance(order_hash, str) and VALID_ORDER_HASH_PATTERN.match(order_hash) is not None
