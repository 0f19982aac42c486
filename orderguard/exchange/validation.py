"""
Order Validator

Reproduces the exchange contract's acceptance rules for fills and cancels so
a caller can fail fast, before paying gas for a transaction the contract
would reject.

Each check is a function of (order, oracle snapshot, requested amount) and
stops at the first failing rule. Rules run cheapest and most certain first:
signature and expiration before any oracle read, and pure arithmetic before
balance and allowance reads.

Guarantees hold only as of the snapshot read. Nothing here is atomic with
submission; balances, allowances and fill state can change between
validation and mining, and the contract remains the final authority.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, NoReturn, Optional, Sequence, Union

from ..crypto.address import addresses_equal, is_null_address, normalize_address
from ..logger import get_logger
from .errors import ExchangeContractErr, OrderValidationError
from .hashing import get_order_hash_hex
from .numeric import get_partial_amount, is_rounding_error, is_uint256
from .oracles import BlockTag, ExchangeStateOracle, TokenOracle
from .order import (
    Order,
    OrderCancellationRequest,
    OrderFillOrKillRequest,
    OrderFillRequest,
    SignedOrder,
)
from .signature import SignatureVerifier

logger = get_logger(__name__)

Err = ExchangeContractErr


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one order; ``amount`` is the effective fill or cancel amount."""
    order_hash: str
    error: Optional[ExchangeContractErr] = None
    amount: int = 0

    @property
    def is_valid(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class _Requirement:
    """A party must hold and have approved ``amount`` of ``token``."""
    token: str
    owner: str
    amount: int
    balance_error: ExchangeContractErr
    allowance_error: ExchangeContractErr


def _unwrap(order: Union[Order, SignedOrder]) -> Order:
    return order.order if isinstance(order, SignedOrder) else order


def _require_amount(name: str, value: int) -> None:
    if not is_uint256(value):
        raise ValueError(f"{name} must be a uint256 integer, got {value!r}")


class OrderValidator:
    """
    Local mirror of the exchange contract's fill and cancel rules.

    Holds no mutable state of its own; concurrent validations are
    independent.
    """

    def __init__(
        self,
        exchange_state: ExchangeStateOracle,
        token_oracle: TokenOracle,
        signature_verifier: SignatureVerifier,
        token_transfer_proxy_address: str,
        fee_token_address: str,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            exchange_state: Fill/cancel counter reads
            token_oracle: Balance/allowance reads
            signature_verifier: Local or contract-backed signature check
            token_transfer_proxy_address: Spender that allowances must be granted to
            fee_token_address: Token protocol fees are paid in
            clock: Returns the current unix time in seconds
        """
        self._exchange_state = exchange_state
        self._token_oracle = token_oracle
        self._signature_verifier = signature_verifier
        self.token_transfer_proxy_address = normalize_address(token_transfer_proxy_address)
        self.fee_token_address = normalize_address(fee_token_address)
        self._clock = clock

    # ------------------------------------------------------------------
    # Single order, raising
    # ------------------------------------------------------------------

    async def validate_fill_order(
        self,
        signed_order: SignedOrder,
        fill_taker_token_amount: int,
        taker_address: str,
        block_tag: Optional[BlockTag] = None,
    ) -> int:
        """
        Check that ``fillOrder`` would fill something.

        A request larger than what is left is capped to the remaining amount,
        as the contract does.

        Returns:
            The taker token amount that would actually be filled

        Raises:
            OrderValidationError: At the first rule the fill violates
        """
        return await self._validate_fill(
            signed_order, fill_taker_token_amount, taker_address, block_tag, fill_or_kill=False
        )

    async def validate_fill_or_kill_order(
        self,
        signed_order: SignedOrder,
        fill_taker_token_amount: int,
        taker_address: str,
        block_tag: Optional[BlockTag] = None,
    ) -> int:
        """
        Check that ``fillOrKillOrder`` would fill exactly the requested amount.

        Raises:
            OrderValidationError: ``InsufficientRemainingFillAmount`` when less
                than the requested amount is left, or any fill rule error
        """
        return await self._validate_fill(
            signed_order, fill_taker_token_amount, taker_address, block_tag, fill_or_kill=True
        )

    async def validate_cancel_order(
        self,
        order: Union[Order, SignedOrder],
        cancel_taker_token_amount: int,
        block_tag: Optional[BlockTag] = None,
    ) -> int:
        """
        Check that ``cancelOrder`` would cancel something.

        Cancellations are cumulative; the contract cancels at most what is
        left.

        Returns:
            The taker token amount that would actually be cancelled

        Raises:
            OrderValidationError: ``OrderCancelExpired``, ``OrderCancelAmountZero``
                or ``OrderAlreadyCancelledOrFilled``
        """
        _require_amount("cancel_taker_token_amount", cancel_taker_token_amount)
        order = _unwrap(order)
        order_hash = get_order_hash_hex(order)

        if order.expiration_unix_timestamp_sec < self._now():
            self._reject(Err.OrderCancelExpired, order_hash)
        if cancel_taker_token_amount == 0:
            self._reject(Err.OrderCancelAmountZero, order_hash)

        remaining = await self._get_remaining_taker_amount(order, order_hash, block_tag)
        if remaining <= 0:
            self._reject(Err.OrderAlreadyCancelledOrFilled, order_hash)

        return min(cancel_taker_token_amount, remaining)

    async def validate_fill_order_balances_allowances(
        self,
        signed_order: Union[Order, SignedOrder],
        fill_taker_token_amount: int,
        taker_address: str,
        block_tag: Optional[BlockTag] = None,
    ) -> None:
        """
        Check only that maker and taker can cover a fill of
        ``fill_taker_token_amount``, fees included.

        Raises:
            OrderValidationError: One of the eight insufficiency kinds, or
                ``OrderRemainingFillAmountZero`` for an order asking for no
                taker tokens at all
        """
        _require_amount("fill_taker_token_amount", fill_taker_token_amount)
        order = _unwrap(signed_order)
        order_hash = get_order_hash_hex(order)
        # fills are priced as a fraction of taker_token_amount
        if order.taker_token_amount == 0:
            self._reject(Err.OrderRemainingFillAmountZero, order_hash)
        await self._check_balances_allowances(
            order, order_hash, fill_taker_token_amount, taker_address, block_tag
        )

    # ------------------------------------------------------------------
    # Single order, result-returning
    # ------------------------------------------------------------------

    async def check_fill_order(
        self,
        signed_order: SignedOrder,
        fill_taker_token_amount: int,
        taker_address: str,
        block_tag: Optional[BlockTag] = None,
    ) -> ValidationResult:
        return await self._capture(
            signed_order,
            self.validate_fill_order(signed_order, fill_taker_token_amount, taker_address, block_tag),
        )

    async def check_fill_or_kill_order(
        self,
        signed_order: SignedOrder,
        fill_taker_token_amount: int,
        taker_address: str,
        block_tag: Optional[BlockTag] = None,
    ) -> ValidationResult:
        return await self._capture(
            signed_order,
            self.validate_fill_or_kill_order(
                signed_order, fill_taker_token_amount, taker_address, block_tag
            ),
        )

    async def check_cancel_order(
        self,
        order: Union[Order, SignedOrder],
        cancel_taker_token_amount: int,
        block_tag: Optional[BlockTag] = None,
    ) -> ValidationResult:
        return await self._capture(
            order, self.validate_cancel_order(order, cancel_taker_token_amount, block_tag)
        )

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    async def validate_batch_fill_orders(
        self,
        requests: Sequence[OrderFillRequest],
        taker_address: str,
        block_tag: Optional[BlockTag] = None,
    ) -> List[ValidationResult]:
        """
        Validate every fill of a ``batchFillOrders`` call.

        Each order is checked against the same snapshot; whether one failure
        aborts the whole batch is for the submitting caller to decide.

        Raises:
            OrderValidationError: For a malformed batch (empty, mixed exchanges)
        """
        self._check_batch_shape([_unwrap(r.signed_order) for r in requests])
        return list(await asyncio.gather(*(
            self.check_fill_order(r.signed_order, r.fill_taker_token_amount, taker_address, block_tag)
            for r in requests
        )))

    async def validate_batch_fill_or_kill_orders(
        self,
        requests: Sequence[OrderFillOrKillRequest],
        taker_address: str,
        block_tag: Optional[BlockTag] = None,
    ) -> List[ValidationResult]:
        """Validate every fill of a ``batchFillOrKillOrders`` call."""
        self._check_batch_shape([_unwrap(r.signed_order) for r in requests])
        return list(await asyncio.gather(*(
            self.check_fill_or_kill_order(
                r.signed_order, r.fill_taker_token_amount, taker_address, block_tag
            )
            for r in requests
        )))

    async def validate_batch_cancel_orders(
        self,
        requests: Sequence[OrderCancellationRequest],
        block_tag: Optional[BlockTag] = None,
    ) -> List[ValidationResult]:
        """
        Validate every cancel of a ``batchCancelOrders`` call.

        Raises:
            OrderValidationError: ``MultipleMakersInSingleCancelBatchDisallowed``
                when the orders do not share one maker, or a batch shape error
        """
        orders = [_unwrap(r.order) for r in requests]
        self._check_batch_shape(orders)
        if len({normalize_address(o.maker) for o in orders}) > 1:
            self._reject(Err.MultipleMakersInSingleCancelBatchDisallowed)

        return list(await asyncio.gather(*(
            self.check_cancel_order(r.order, r.cancel_taker_token_amount, block_tag)
            for r in requests
        )))

    async def validate_fill_orders_up_to(
        self,
        signed_orders: Sequence[SignedOrder],
        fill_taker_token_amount: int,
        taker_address: str,
        block_tag: Optional[BlockTag] = None,
    ) -> List[ValidationResult]:
        """
        Validate a ``fillOrdersUpTo`` call.

        The contract walks the orders in sequence, asking each for whatever
        part of the total is still unfilled, and stops once the total is
        reached. Results follow the same walk: orders after that point are
        not attempted and have no entry. An order listed twice only offers
        its later entries what the earlier ones left of it.

        Raises:
            OrderValidationError: ``MultipleTakerTokensInFillUpToDisallowed``,
                a batch shape error, or ``OrderFillAmountZero`` for a zero total
        """
        _require_amount("fill_taker_token_amount", fill_taker_token_amount)
        orders = [_unwrap(o) for o in signed_orders]
        self._check_batch_shape(orders)
        if len({normalize_address(o.taker_token_address) for o in orders}) > 1:
            self._reject(Err.MultipleTakerTokensInFillUpToDisallowed)
        if fill_taker_token_amount == 0:
            self._reject(Err.OrderFillAmountZero)

        results: List[ValidationResult] = []
        unallocated = fill_taker_token_amount
        # what earlier steps of this walk already took from each order
        allocated: Dict[str, int] = {}
        for signed_order in signed_orders:
            if unallocated == 0:
                break
            order_hash = get_order_hash_hex(signed_order.order)
            result = await self._capture(signed_order, self._validate_fill(
                signed_order, unallocated, taker_address, block_tag,
                fill_or_kill=False, allocated=allocated.get(order_hash, 0),
            ))
            if result.is_valid:
                unallocated -= result.amount
                allocated[order_hash] = allocated.get(order_hash, 0) + result.amount
            results.append(result)
        return results

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _validate_fill(
        self,
        signed_order: SignedOrder,
        fill_taker_token_amount: int,
        taker_address: str,
        block_tag: Optional[BlockTag],
        fill_or_kill: bool,
        allocated: int = 0,
    ) -> int:
        _require_amount("fill_taker_token_amount", fill_taker_token_amount)
        order = signed_order.order
        order_hash = get_order_hash_hex(order)

        if not await self._signature_verifier.is_valid(
            order_hash, signed_order.ec_signature, order.maker
        ):
            self._reject(Err.InvalidSignature, order_hash)

        if order.expiration_unix_timestamp_sec < self._now():
            self._reject(Err.OrderFillExpired, order_hash)

        if not is_null_address(order.taker) and not addresses_equal(order.taker, taker_address):
            self._reject(Err.TransactionSenderIsNotFillOrderTaker, order_hash)

        remaining = await self._get_remaining_taker_amount(order, order_hash, block_tag) - allocated
        if remaining <= 0:
            self._reject(Err.OrderRemainingFillAmountZero, order_hash)

        fill_amount = min(fill_taker_token_amount, remaining)
        if fill_amount == 0:
            self._reject(Err.OrderFillAmountZero, order_hash)

        if fill_or_kill and remaining < fill_taker_token_amount:
            self._reject(Err.InsufficientRemainingFillAmount, order_hash)

        if is_rounding_error(fill_amount, order.taker_token_amount, order.maker_token_amount):
            self._reject(Err.OrderFillRoundingError, order_hash)

        await self._check_balances_allowances(
            order, order_hash, fill_amount, taker_address, block_tag
        )
        return fill_amount

    async def _get_remaining_taker_amount(
        self, order: Order, order_hash: str, block_tag: Optional[BlockTag]
    ) -> int:
        unavailable = await self._exchange_state.get_unavailable_taker_amount(order_hash, block_tag)
        return order.taker_token_amount - unavailable

    def _requirements(self, order: Order, fill_amount: int, taker_address: str) -> List[_Requirement]:
        """
        What each side must hold and have approved to the proxy for a fill.

        Fees are charged pro rata to the filled fraction. When a side's
        token is itself the fee token, the fee is added to the base
        requirement instead of being checked separately.
        """
        fill_maker_amount = get_partial_amount(
            fill_amount, order.taker_token_amount, order.maker_token_amount
        )
        paid_maker_fee = get_partial_amount(fill_amount, order.taker_token_amount, order.maker_fee)
        paid_taker_fee = get_partial_amount(fill_amount, order.taker_token_amount, order.taker_fee)

        sides = (
            (order.maker, order.maker_token_address, fill_maker_amount, paid_maker_fee,
             Err.InsufficientMakerBalance, Err.InsufficientMakerAllowance,
             Err.InsufficientMakerFeeBalance, Err.InsufficientMakerFeeAllowance),
            (taker_address, order.taker_token_address, fill_amount, paid_taker_fee,
             Err.InsufficientTakerBalance, Err.InsufficientTakerAllowance,
             Err.InsufficientTakerFeeBalance, Err.InsufficientTakerFeeAllowance),
        )

        requirements = []
        for owner, token, amount, fee, bal_err, allow_err, fee_bal_err, fee_allow_err in sides:
            token = normalize_address(token)
            if token == self.fee_token_address:
                requirements.append(_Requirement(token, owner, amount + fee, bal_err, allow_err))
                continue
            requirements.append(_Requirement(token, owner, amount, bal_err, allow_err))
            if fee > 0:
                requirements.append(_Requirement(
                    self.fee_token_address, owner, fee, fee_bal_err, fee_allow_err
                ))
        return requirements

    async def _check_balances_allowances(
        self,
        order: Order,
        order_hash: str,
        fill_amount: int,
        taker_address: str,
        block_tag: Optional[BlockTag],
    ) -> None:
        requirements = self._requirements(order, fill_amount, taker_address)

        reads = []
        for req in requirements:
            reads.append(self._token_oracle.get_balance(req.token, req.owner, block_tag))
            reads.append(self._token_oracle.get_allowance(
                req.token, req.owner, self.token_transfer_proxy_address, block_tag
            ))
        snapshot = await asyncio.gather(*reads)

        for i, req in enumerate(requirements):
            balance, allowance = snapshot[2 * i], snapshot[2 * i + 1]
            if balance < req.amount:
                self._reject(req.balance_error, order_hash)
            if allowance < req.amount:
                self._reject(req.allowance_error, order_hash)

    def _check_batch_shape(self, orders: Sequence[Order]) -> None:
        if not orders:
            self._reject(Err.BatchOrdersMustHaveAtLeastOneItem)
        if len({normalize_address(o.exchange_contract_address) for o in orders}) > 1:
            self._reject(Err.BatchOrdersMustHaveSameExchangeAddress)

    async def _capture(
        self, order: Union[Order, SignedOrder], validation: Awaitable[int]
    ) -> ValidationResult:
        try:
            amount = await validation
        except OrderValidationError as e:
            return ValidationResult(order_hash=get_order_hash_hex(_unwrap(order)), error=e.kind)
        return ValidationResult(order_hash=get_order_hash_hex(_unwrap(order)), amount=amount)

    def _now(self) -> int:
        return int(self._clock())

    @staticmethod
    def _reject(kind: ExchangeContractErr, order_hash: Optional[str] = None) -> NoReturn:
        if order_hash is None:
            logger.info(f"Batch rejected: {kind.value}")
        else:
            logger.debug(f"Order {order_hash} rejected: {kind.value}")
        raise OrderValidationError(kind, order_hash=order_hash)
