"""
orderguard

Client-side validation of signed exchange orders before they are sent
on-chain: order hashing, signature checks, fill-state and balance reads,
and the exchange contract's fill and cancel rules.
"""

__version__ = "0.1.0"

from .exchange import (
    ECSignature,
    ExchangeContractErr,
    Order,
    OrderCancellationRequest,
    OrderFillOrKillRequest,
    OrderFillRequest,
    OrderValidationError,
    OrderValidator,
    SignedOrder,
    ValidationResult,
    get_order_hash_hex,
)
from .factory import create_rpc_client, create_validator

__all__ = [
    "__version__",
    "ECSignature",
    "ExchangeContractErr",
    "Order",
    "OrderCancellationRequest",
    "OrderFillOrKillRequest",
    "OrderFillRequest",
    "OrderValidationError",
    "OrderValidator",
    "SignedOrder",
    "ValidationResult",
    "get_order_hash_hex",
    "create_rpc_client",
    "create_validator",
]
