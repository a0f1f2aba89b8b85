"""
Decimal helpers shared by the report calculators.

Stored amounts arrive as decimal text. They are summed as Decimal and
only turned into floats at the response boundary.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Union

CENT = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """
    Parse a stored amount into a Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not its
    binary expansion. Empty text counts as zero.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return ZERO
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not a decimal amount: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not a finite amount: {value!r}")
    return result


def quantize_money(value: Decimal) -> Decimal:
    """Round to cents."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def sum_money(amounts: Iterable[Decimal]) -> Decimal:
    return quantize_money(sum(amounts, ZERO))


def percentage(part: Decimal, whole: Decimal) -> float:
    """
    part / whole * 100 as a float.

    A non-positive whole yields 0 instead of dividing, so NaN and
    Infinity can never reach a report.
    """
    if whole <= ZERO:
        return 0.0
    return float(part / whole * HUNDRED)
