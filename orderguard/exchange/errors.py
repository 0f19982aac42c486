"""
Exchange contract error taxonomy.

Every rejection the exchange contract can produce has a machine-checkable
kind here; the validator raises the same kind locally before submission.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any, Dict, Iterable, Mapping, Optional

from ..exceptions import OrderGuardException


class ExchangeContractErr(str, Enum):
    # Expiration
    OrderFillExpired = "ORDER_FILL_EXPIRED"
    OrderCancelExpired = "ORDER_CANCEL_EXPIRED"
    # Zero amounts
    OrderFillAmountZero = "ORDER_FILL_AMOUNT_ZERO"
    OrderRemainingFillAmountZero = "ORDER_REMAINING_FILL_AMOUNT_ZERO"
    OrderCancelAmountZero = "ORDER_CANCEL_AMOUNT_ZERO"
    # Already settled
    OrderAlreadyCancelledOrFilled = "ORDER_ALREADY_CANCELLED_OR_FILLED"
    InsufficientRemainingFillAmount = "INSUFFICIENT_REMAINING_FILL_AMOUNT"
    # Rounding
    OrderFillRoundingError = "ORDER_FILL_ROUNDING_ERROR"
    # Authenticity
    InvalidSignature = "INVALID_SIGNATURE"
    TransactionSenderIsNotFillOrderTaker = "TRANSACTION_SENDER_IS_NOT_FILL_ORDER_TAKER"
    # Insufficiency
    FillBalanceAllowanceError = "FILL_BALANCE_ALLOWANCE_ERROR"
    InsufficientMakerBalance = "INSUFFICIENT_MAKER_BALANCE"
    InsufficientMakerAllowance = "INSUFFICIENT_MAKER_ALLOWANCE"
    InsufficientMakerFeeBalance = "INSUFFICIENT_MAKER_FEE_BALANCE"
    InsufficientMakerFeeAllowance = "INSUFFICIENT_MAKER_FEE_ALLOWANCE"
    InsufficientTakerBalance = "INSUFFICIENT_TAKER_BALANCE"
    InsufficientTakerAllowance = "INSUFFICIENT_TAKER_ALLOWANCE"
    InsufficientTakerFeeBalance = "INSUFFICIENT_TAKER_FEE_BALANCE"
    InsufficientTakerFeeAllowance = "INSUFFICIENT_TAKER_FEE_ALLOWANCE"
    # Batch shape
    MultipleMakersInSingleCancelBatchDisallowed = "MULTIPLE_MAKERS_IN_SINGLE_CANCEL_BATCH_DISALLOWED"
    MultipleTakerTokensInFillUpToDisallowed = "MULTIPLE_TAKER_TOKENS_IN_FILL_UP_TO_DISALLOWED"
    BatchOrdersMustHaveSameExchangeAddress = "BATCH_ORDERS_MUST_HAVE_SAME_EXCHANGE_ADDRESS"
    BatchOrdersMustHaveAtLeastOneItem = "BATCH_ORDERS_MUST_HAVE_AT_LEAST_ONE_ITEM"


class ExchangeContractErrCode(IntEnum):
    """``errorId`` values carried by the contract's ``LogError`` event."""
    ERROR_FILL_EXPIRED = 0
    ERROR_FILL_NO_VALUE = 1
    ERROR_FILL_TRUNCATION = 2
    ERROR_FILL_BALANCE_ALLOWANCE = 3
    ERROR_CANCEL_EXPIRED = 4
    ERROR_CANCEL_NO_VALUE = 5


LOG_ERROR_CODE_TO_ERR: Dict[ExchangeContractErrCode, ExchangeContractErr] = {
    ExchangeContractErrCode.ERROR_FILL_EXPIRED: ExchangeContractErr.OrderFillExpired,
    ExchangeContractErrCode.ERROR_FILL_NO_VALUE: ExchangeContractErr.OrderRemainingFillAmountZero,
    ExchangeContractErrCode.ERROR_FILL_TRUNCATION: ExchangeContractErr.OrderFillRoundingError,
    ExchangeContractErrCode.ERROR_FILL_BALANCE_ALLOWANCE: ExchangeContractErr.FillBalanceAllowanceError,
    ExchangeContractErrCode.ERROR_CANCEL_EXPIRED: ExchangeContractErr.OrderCancelExpired,
    ExchangeContractErrCode.ERROR_CANCEL_NO_VALUE: ExchangeContractErr.OrderAlreadyCancelledOrFilled,
}


class OrderValidationError(OrderGuardException):
    """The exchange contract would reject this fill or cancel."""

    def __init__(self, kind: ExchangeContractErr, order_hash: Optional[str] = None):
        super().__init__(kind.value)
        self.kind = kind
        self.order_hash = order_hash

    def __repr__(self) -> str:
        return f"OrderValidationError({self.kind.value}, order_hash={self.order_hash})"


def error_from_log_code(code: int) -> ExchangeContractErr:
    """
    Translate a ``LogError.errorId`` into an error kind.

    Raises:
        ValueError: For an id the contract never emits
    """
    return LOG_ERROR_CODE_TO_ERR[ExchangeContractErrCode(code)]


def raise_log_errors(logs: Iterable[Mapping[str, Any]]) -> None:
    """
    Raise the first ``LogError`` found in a mined transaction's decoded logs.

    The contract does not revert on most fill/cancel failures; it emits
    ``LogError`` and returns zero, so a successful receipt can still carry a
    rejection.

    Args:
        logs: Decoded logs, each with ``event`` and ``args`` keys
    """
    for log in logs:
        if log.get("event") != "LogError":
            continue
        args = log.get("args", {})
        kind = error_from_log_code(int(args["errorId"]))
        raise OrderValidationError(kind, order_hash=args.get("orderHash"))
