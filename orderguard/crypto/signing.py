"""
orderguard Crypto Signing Module

Signing and signer recovery for order hashes, using the ``eth_sign``
personal-message convention the exchange contract verifies against.
"""

from .hashing import personal_message_hash
from .keys import PrivateKey, PublicKey, Signature


def sign_message_hash(private_key: PrivateKey, msg_hash: bytes) -> Signature:
    """
    Sign a 32-byte hash as ``eth_sign`` would.

    The hash is wrapped with the personal-message prefix before signing.

    Args:
        private_key: PrivateKey to sign with
        msg_hash: 32-byte hash to sign

    Returns:
        Signature
    """
    return private_key.sign_msg_hash(personal_message_hash(msg_hash))


def recover_public_key(msg_hash: bytes, signature: Signature) -> PublicKey:
    """
    Recover the public key that produced an ``eth_sign`` signature over
    ``msg_hash``.
    """
    return PublicKey.recover_from_msg_hash(personal_message_hash(msg_hash), signature)


def ecrecover(msg_hash: bytes, v: int, r: int, s: int) -> str:
    """
    Recover signer address from signature components.

    Mirrors the contract's ``ecrecover`` over the prefixed hash.

    Args:
        msg_hash: 32-byte message hash (unprefixed)
        v: Recovery parameter (27 or 28)
        r: R component
        s: S component

    Returns:
        Recovered checksum address

    Raises:
        BadSignature: If the components do not recover to a public key
    """
    signature = Signature.from_vrs(v, r, s)
    return recover_public_key(msg_hash, signature).to_address()
