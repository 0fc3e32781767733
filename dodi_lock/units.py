"""
Fixed-point helpers for token amounts.

Raw amounts are uint256 base units, up to 78 digits, so all arithmetic
runs under a context wide enough to stay exact.
"""

from decimal import Context, Decimal
from typing import Union


AMOUNT_CONTEXT = Context(prec=100)

ZERO = Decimal(0)


def format_units(raw: Union[int, str], decimals: int) -> Decimal:
    """
    Convert a base-unit integer amount to token units.

    Args:
        raw: Amount in base units, as int or decimal digit string
        decimals: Token decimal places

    Returns:
        Exact Decimal value of raw / 10**decimals

    Raises:
        ValueError: If decimals is negative or raw is not an integer
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    if isinstance(raw, bool):
        raise ValueError("raw amount must be an integer, got bool")
    value = int(raw)
    return AMOUNT_CONTEXT.scaleb(Decimal(value), -decimals)


def weighted(amount: Decimal, multiplier: Decimal) -> Decimal:
    """Multiply an amount by a pool multiplier without rounding."""
    return AMOUNT_CONTEXT.multiply(amount, multiplier)
