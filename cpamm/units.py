"""Conversion between human-readable token amounts and integer base units.

All conversions run in a 78-digit Decimal context, enough to represent any
uint256 exactly.
"""

from __future__ import annotations

import decimal
from decimal import Decimal, InvalidOperation

# 78 digits of precision, enough for uint256 values (up to ~10^77)
DECIMAL_HIGH_PREC_CONTEXT = decimal.Context(prec=78)


def parse_units(amount: str | int | Decimal, decimals: int) -> int:
    """Convert a decimal amount ("1.5") into base units (1.5 * 10**decimals).

    Raises:
        ValueError: If the amount is not a number, is negative, or has more
            fractional digits than the token supports
    """
    if decimals < 0:
        raise ValueError(f"decimals cannot be negative: {decimals}")
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation as err:
        raise ValueError(f"Invalid amount: {amount!r}") from err
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    if value < 0:
        raise ValueError(f"Amount cannot be negative: {amount}")

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        scaled = value.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise ValueError(f"Amount {amount} has more than {decimals} decimal places")
        return int(scaled)


def format_units(value: int, decimals: int) -> Decimal:
    """Convert base units into a Decimal amount of whole tokens, exactly."""
    if decimals < 0:
        raise ValueError(f"decimals cannot be negative: {decimals}")
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return Decimal(value).scaleb(-decimals)


__all__ = ["DECIMAL_HIGH_PREC_CONTEXT", "format_units", "parse_units"]
