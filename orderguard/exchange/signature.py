"""
Order signature verification.

Two strategies answer the same question, "did ``signer`` sign this order
hash?":

- ``LocalSignatureVerifier`` recovers the signer with secp256k1 locally.
- ``ContractSignatureVerifier`` asks the exchange contract, for signer
  setups whose signatures cannot be checked locally.

Both return False for a signature that does not match or does not recover,
and raise ``MalformedInputError`` only when the hash or a signature component
has the wrong length.
"""

from abc import ABC, abstractmethod

from eth_keys.exceptions import BadSignature
from eth_utils import decode_hex, is_hex

from ..constants import (
    ORDER_HASH_LENGTH,
    SIGNATURE_COMPONENT_LENGTH,
    VALID_V_VALUES,
)
from ..crypto.address import addresses_equal, normalize_address
from ..crypto.keys import PrivateKey
from ..crypto.signing import ecrecover, sign_message_hash
from ..exceptions import MalformedInputError
from ..logger import get_logger
from .order import ECSignature

logger = get_logger(__name__)

SIGNATURE_STRATEGY_LOCAL = "local"
SIGNATURE_STRATEGY_CONTRACT = "contract"


def _decode_fixed(name: str, value: str, length: int) -> bytes:
    if not isinstance(value, str) or not is_hex(value):
        raise MalformedInputError(f"{name} must be a hex string, got {value!r}")
    raw = decode_hex(value)
    if len(raw) != length:
        raise MalformedInputError(f"{name} must be {length} bytes, got {len(raw)}")
    return raw


def check_signature_inputs(order_hash: str, signature: ECSignature, signer: str) -> bytes:
    """
    Shape checks shared by both strategies.

    Returns:
        The decoded 32-byte order hash
    """
    hash_bytes = _decode_fixed("order_hash", order_hash, ORDER_HASH_LENGTH)
    _decode_fixed("signature.r", signature.r, SIGNATURE_COMPONENT_LENGTH)
    _decode_fixed("signature.s", signature.s, SIGNATURE_COMPONENT_LENGTH)
    normalize_address(signer)
    return hash_bytes


class SignatureVerifier(ABC):
    """Decides whether a signature over an order hash came from a signer."""

    @abstractmethod
    async def is_valid(self, order_hash: str, signature: ECSignature, signer: str) -> bool:
        pass


class LocalSignatureVerifier(SignatureVerifier):
    """Recovers the signer address locally and compares."""

    async def is_valid(self, order_hash: str, signature: ECSignature, signer: str) -> bool:
        return is_valid_signature(order_hash, signature, signer)


class ContractSignatureVerifier(SignatureVerifier):
    """Delegates to the exchange contract's ``isValidSignature``."""

    def __init__(self, contract):
        """
        Args:
            contract: A ``SignatureContract`` (e.g. ``rpc.ExchangeContract``)
        """
        self._contract = contract

    async def is_valid(self, order_hash: str, signature: ECSignature, signer: str) -> bool:
        check_signature_inputs(order_hash, signature, signer)
        # v also has to fit the contract's uint8 argument
        if signature.v not in VALID_V_VALUES:
            return False
        return await self._contract.is_valid_signature(
            signer, order_hash, signature.v, signature.r, signature.s
        )


def is_valid_signature(order_hash: str, signature: ECSignature, signer: str) -> bool:
    """
    Verify that ``signature`` was produced by ``signer`` over ``order_hash``.

    Raises:
        MalformedInputError: For a wrong-length hash or signature component
    """
    hash_bytes = check_signature_inputs(order_hash, signature, signer)

    if signature.v not in VALID_V_VALUES:
        return False

    try:
        recovered = ecrecover(
            hash_bytes,
            signature.v,
            int(signature.r, 16),
            int(signature.s, 16),
        )
    except BadSignature as e:
        logger.debug(f"Signature over {order_hash} does not recover: {e}")
        return False

    return addresses_equal(recovered, signer)


def sign_order_hash(private_key: PrivateKey, order_hash: str) -> ECSignature:
    """
    Sign an order hash the way ``eth_sign`` does.

    Raises:
        MalformedInputError: If the hash is not 32 bytes
    """
    hash_bytes = _decode_fixed("order_hash", order_hash, ORDER_HASH_LENGTH)
    signature = sign_message_hash(private_key, hash_bytes)
    return ECSignature(
        v=signature.v + 27,
        r='0x' + signature.r.to_bytes(32, 'big').hex(),
        s='0x' + signature.s.to_bytes(32, 'big').hex(),
    )


def create_signature_verifier(strategy: str, contract=None) -> SignatureVerifier:
    """
    Build the verifier named by configuration.

    Args:
        strategy: ``"local"`` or ``"contract"``
        contract: ``SignatureContract``, required for ``"contract"``
    """
    if strategy == SIGNATURE_STRATEGY_LOCAL:
        return LocalSignatureVerifier()
    if strategy == SIGNATURE_STRATEGY_CONTRACT:
        if contract is None:
            raise ValueError("Contract signature verification needs an exchange contract")
        return ContractSignatureVerifier(contract)
    raise ValueError(f"Unknown signature strategy: {strategy!r}")
