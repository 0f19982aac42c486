"""
orderguard Crypto Module

Cryptographic primitives used by order validation:
- secp256k1 keys and signatures
- Keccak-256 hashing
- Address normalization
"""

from .keys import PrivateKey, PublicKey, Signature, generate_keypair
from .signing import sign_message_hash, recover_public_key, ecrecover
from .hashing import keccak256, personal_message_hash
from .address import (
    is_valid_address,
    normalize_address,
    to_checksum_address,
    address_to_bytes,
    addresses_equal,
    is_null_address,
)

__all__ = [
    # Keys
    "PrivateKey",
    "PublicKey",
    "Signature",
    "generate_keypair",
    # Signing
    "sign_message_hash",
    "recover_public_key",
    "ecrecover",
    # Hashing
    "keccak256",
    "personal_message_hash",
    # Address
    "is_valid_address",
    "normalize_address",
    "to_checksum_address",
    "address_to_bytes",
    "addresses_equal",
    "is_null_address",
]
