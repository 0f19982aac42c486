"""
orderguard Crypto Hashing Module

Keccak-256, the hash the exchange contract uses for order hashes, function
selectors and signed-message digests.
"""

from typing import Union

from eth_hash.auto import keccak as _eth_keccak
from eth_utils import decode_hex

from ..constants import PERSONAL_MESSAGE_PREFIX


def keccak256(data: Union[bytes, str]) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum standard).

    Args:
        data: Input bytes or hex string

    Returns:
        32-byte hash
    """
    if isinstance(data, str):
        data = decode_hex(data)
    return _eth_keccak(data)


def personal_message_hash(msg_hash: bytes) -> bytes:
    """
    Hash a 32-byte digest the way ``eth_sign`` does before signing it.

    The exchange contract checks signatures against
    ``keccak256("\\x19Ethereum Signed Message:\\n32" || hash)``.
    """
    return keccak256(PERSONAL_MESSAGE_PREFIX + msg_hash)
