"""
orderguard Crypto Keys Module

Thin secp256k1 wrappers over eth-keys that raise orderguard exceptions
instead of eth-keys ones.
"""

import secrets
from typing import Tuple

from eth_keys import keys as eth_keys
from eth_keys.exceptions import BadSignature, ValidationError
from eth_utils import decode_hex

from ..exceptions import InvalidKeyError, MalformedInputError


class Signature:
    """Recoverable ECDSA signature; ``v`` is the 0/1 recovery id."""

    def __init__(self, signature: eth_keys.Signature):
        self._signature = signature

    @classmethod
    def from_vrs(cls, v: int, r: int, s: int) -> "Signature":
        """
        Accepts ``v`` as 27/28 (as carried in orders) or as 0/1.

        Raises:
            BadSignature: If a component is out of range for secp256k1
        """
        recovery_id = v - 27 if v >= 27 else v
        try:
            return cls(eth_keys.Signature(vrs=(recovery_id, r, s)))
        except ValidationError as e:
            raise BadSignature(str(e)) from e

    @property
    def v(self) -> int:
        return self._signature.v

    @property
    def r(self) -> int:
        return self._signature.r

    @property
    def s(self) -> int:
        return self._signature.s

    def __repr__(self) -> str:
        return f"Signature(v={self.v}, r={self.r:#x}, s={self.s:#x})"


class PublicKey:
    def __init__(self, key: eth_keys.PublicKey):
        self._key = key

    @classmethod
    def recover_from_msg_hash(cls, msg_hash: bytes, signature: Signature) -> "PublicKey":
        """
        Raises:
            BadSignature: If the signature does not recover to a point
        """
        return cls(signature._signature.recover_public_key_from_msg_hash(msg_hash))

    def to_bytes(self) -> bytes:
        return self._key.to_bytes()

    def to_address(self) -> str:
        """EIP-55 checksum address."""
        return self._key.to_checksum_address()

    def __eq__(self, other) -> bool:
        return isinstance(other, PublicKey) and self._key == other._key

    def __hash__(self) -> int:
        return hash(self.to_bytes())

    def __repr__(self) -> str:
        return f"PublicKey({self.to_address()})"


class PrivateKey:
    """
    Signing key for order hashes. Used by tooling and tests; orderguard
    itself never stores keys.
    """

    def __init__(self, key_bytes: bytes):
        """
        Raises:
            InvalidKeyError: If ``key_bytes`` is not a valid 32-byte secp256k1 key
        """
        if len(key_bytes) != 32:
            raise InvalidKeyError(f"Private key must be 32 bytes, got {len(key_bytes)}")
        try:
            self._key = eth_keys.PrivateKey(key_bytes)
        except (ValidationError, ValueError) as e:
            raise InvalidKeyError(f"Invalid private key: {e}") from e

    @classmethod
    def from_hex(cls, hex_str: str) -> "PrivateKey":
        return cls(decode_hex(hex_str))

    @classmethod
    def from_int(cls, key_int: int) -> "PrivateKey":
        return cls(key_int.to_bytes(32, 'big'))

    @classmethod
    def generate(cls) -> "PrivateKey":
        return cls(secrets.token_bytes(32))

    @property
    def public_key(self) -> PublicKey:
        return PublicKey(self._key.public_key)

    @property
    def address(self) -> str:
        return self.public_key.to_address()

    def to_bytes(self) -> bytes:
        return self._key.to_bytes()

    def sign_msg_hash(self, msg_hash: bytes) -> Signature:
        """
        Sign a 32-byte digest as-is (no prefixing).

        Raises:
            MalformedInputError: If ``msg_hash`` is not 32 bytes
        """
        if len(msg_hash) != 32:
            raise MalformedInputError(f"Message hash must be 32 bytes, got {len(msg_hash)}")
        return Signature(self._key.sign_msg_hash(msg_hash))

    def __eq__(self, other) -> bool:
        return isinstance(other, PrivateKey) and self.to_bytes() == other.to_bytes()

    def __repr__(self) -> str:
        return f"PrivateKey({self.address})"


def generate_keypair() -> Tuple[PrivateKey, PublicKey]:
    private_key = PrivateKey.generate()
    return private_key, private_key.public_key
