"""Integer math helpers for the AMM core.

sqrt is used once, when the first liquidity deposit of a pair is minted.
"""

from __future__ import annotations

import math

from cpamm.math.safe_uint import (
    UINT112_MAX,
    UINT256_MAX,
    DivisionByZero,
    SafeUint,
    SafeUintError,
    U,
    UintOverflow,
    Underflow,
)


def sqrt(y: int) -> int:
    """Floor of the square root of a non-negative integer.

    Raises:
        Underflow: If y is negative
    """
    if y < 0:
        raise Underflow(f"Square root of negative value: {y}")
    return math.isqrt(y)


def min_(x: int, y: int) -> int:
    """Smaller of two integers."""
    return x if x < y else y


__all__ = [
    "UINT112_MAX",
    "UINT256_MAX",
    "DivisionByZero",
    "SafeUint",
    "SafeUintError",
    "U",
    "UintOverflow",
    "Underflow",
    "min_",
    "sqrt",
]
