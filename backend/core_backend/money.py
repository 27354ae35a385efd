"""
Monetary precision helpers.

Key Principles:
1. NEVER use float for money
2. Quantize at the line level, then sum quantized values
3. Use ROUND_HALF_EVEN (banker's rounding) to prevent systematic bias
"""

from decimal import Decimal, ROUND_HALF_EVEN, ROUND_FLOOR
from typing import Iterable, Union

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Number = Union[Decimal, str, int, float]


def to_decimal(amount: Number) -> Decimal:
    """
    Convert any numeric input into a Decimal without float noise.

    Examples:
        >>> to_decimal(10.1)
        Decimal('10.1')
        >>> to_decimal("2.50")
        Decimal('2.50')
    """
    if amount is None:
        return Decimal("0")
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, float):
        # Convert float to string first to avoid precision issues
        amount = str(amount)
    return Decimal(amount)


def quantize(amount: Number) -> Decimal:
    """
    Round to cents using banker's rounding (ROUND_HALF_EVEN).

    Examples:
        >>> quantize("10.127")
        Decimal('10.13')
        >>> quantize("10.125")
        Decimal('10.12')
    """
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_EVEN)


def clamp_zero(amount: Number) -> Decimal:
    """Quantize and floor at zero (totals and discounted prices never go negative)."""
    value = quantize(amount)
    return value if value > ZERO else ZERO


def money_sum(amounts: Iterable[Number]) -> Decimal:
    """Sum an iterable of amounts, quantizing the result."""
    return quantize(sum((to_decimal(a) for a in amounts), Decimal("0")))


def floor_int(amount: Number) -> int:
    """Floor a non-negative amount to an integer (loyalty points)."""
    return int(to_decimal(amount).to_integral_value(rounding=ROUND_FLOOR))
