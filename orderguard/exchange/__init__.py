"""
orderguard Exchange Validation

Client-side mirror of the exchange contract's acceptance rules:
  - Order model and canonical order hashing
  - Signature verification (local recovery or contract-delegated)
  - Fill-state and balance/allowance oracle interfaces
  - Fill, fill-or-kill, cancel and batch validation
  - Base-unit arithmetic and the 0.1% rounding-error rule
"""

from .errors import (
    ExchangeContractErr,
    ExchangeContractErrCode,
    OrderValidationError,
    error_from_log_code,
    raise_log_errors,
)
from .order import (
    ECSignature,
    Order,
    SignedOrder,
    OrderFillRequest,
    OrderFillOrKillRequest,
    OrderCancellationRequest,
)
from .hashing import (
    encode_order,
    get_order_hash,
    get_order_hash_hex,
    is_valid_order_hash,
)
from .numeric import (
    is_rounding_error,
    rounding_error_ppm,
    get_partial_amount,
    to_unit_amount,
    to_base_unit_amount,
    generate_pseudo_random_salt,
)
from .oracles import (
    BlockTag,
    ExchangeStateOracle,
    TokenOracle,
    SignatureContract,
)
from .signature import (
    SignatureVerifier,
    LocalSignatureVerifier,
    ContractSignatureVerifier,
    create_signature_verifier,
    is_valid_signature,
    sign_order_hash,
)
from .validation import (
    OrderValidator,
    ValidationResult,
)

__all__ = [
    # Errors
    "ExchangeContractErr",
    "ExchangeContractErrCode",
    "OrderValidationError",
    "error_from_log_code",
    "raise_log_errors",
    # Orders
    "ECSignature",
    "Order",
    "SignedOrder",
    "OrderFillRequest",
    "OrderFillOrKillRequest",
    "OrderCancellationRequest",
    # Hashing
    "encode_order",
    "get_order_hash",
    "get_order_hash_hex",
    "is_valid_order_hash",
    # Numeric
    "is_rounding_error",
    "rounding_error_ppm",
    "get_partial_amount",
    "to_unit_amount",
    "to_base_unit_amount",
    "generate_pseudo_random_salt",
    # Oracles
    "BlockTag",
    "ExchangeStateOracle",
    "TokenOracle",
    "SignatureContract",
    # Signatures
    "SignatureVerifier",
    "LocalSignatureVerifier",
    "ContractSignatureVerifier",
    "create_signature_verifier",
    "is_valid_signature",
    "sign_order_hash",
    # Validation
    "OrderValidator",
    "ValidationResult",
]
