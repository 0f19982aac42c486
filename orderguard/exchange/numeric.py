"""
Base-unit arithmetic.

All amounts are non-negative ints in a token's smallest unit. Division is
floor division, exactly as the EVM does it; floats never appear here.
"""

import secrets
from decimal import Context, Decimal
from typing import Union

from ..constants import (
    MAX_ROUNDING_ERROR_PPM,
    MAX_UINT256,
    ROUNDING_ERROR_SCALE,
    UINT256_BITS,
)

# Wide enough that no uint256 amount is rounded while rescaling
_CONTEXT = Context(prec=160)


def is_uint256(value: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= MAX_UINT256


def get_partial_amount(numerator: int, denominator: int, target: int) -> int:
    """
    ``floor(numerator * target / denominator)``.

    Used for the maker payout of a partial fill and for pro-rata fees.

    Raises:
        ZeroDivisionError: If denominator is zero
    """
    return (numerator * target) // denominator


def rounding_error_ppm(numerator: int, denominator: int, target: int) -> int:
    """
    Relative error of ``get_partial_amount`` in parts per million, truncated.

    The floored result loses ``(numerator * target) % denominator / denominator``
    against the exact quotient ``numerator * target / denominator``; relative
    to that quotient the loss is ``remainder / (numerator * target)``.

    Raises:
        ZeroDivisionError: If denominator is zero
    """
    remainder = (target * numerator) % denominator
    if remainder == 0:
        return 0
    return (remainder * ROUNDING_ERROR_SCALE) // (numerator * target)


def is_rounding_error(numerator: int, denominator: int, target: int) -> bool:
    """
    True when flooring ``numerator * target / denominator`` loses more than
    0.1% of the exact value.

    Called as ``is_rounding_error(fill_taker_amount, taker_token_amount,
    maker_token_amount)``. Same integer steps as the contract's
    ``isRoundingError`` so results agree at the boundary.
    """
    return rounding_error_ppm(numerator, denominator, target) > MAX_ROUNDING_ERROR_PPM


def to_unit_amount(amount: int, decimals: int) -> Decimal:
    """
    Base units to whole token units, e.g. ``10**18`` with 18 decimals -> ``1``.
    """
    if decimals < 0:
        raise ValueError("decimals must be non-negative")
    return Decimal(amount).scaleb(-decimals, context=_CONTEXT)


def to_base_unit_amount(amount: Union[Decimal, int, str], decimals: int) -> int:
    """
    Whole token units to base units.

    Raises:
        ValueError: If the amount has more decimal places than the token
    """
    if decimals < 0:
        raise ValueError("decimals must be non-negative")
    base = Decimal(amount).scaleb(decimals, context=_CONTEXT)
    if base != base.to_integral_value():
        raise ValueError(
            f"Invalid unit amount: {amount} - too many decimal places for a token with {decimals} decimals"
        )
    return int(base)


def generate_pseudo_random_salt() -> int:
    """
    Random 256-bit salt.

    Keeps hashes of otherwise identical orders distinct.
    """
    return secrets.randbits(UINT256_BITS)
