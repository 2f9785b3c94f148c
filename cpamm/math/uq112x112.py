"""UQ112x112 binary fixed point, used by the pair's cumulative price accumulators.

A UQ112x112 value is an unsigned integer scaled by 2**112. Reserves are
uint112, so encoding one reserve and dividing by the other always fits in
224 bits.
"""

from __future__ import annotations

from cpamm.math.safe_uint import UINT112_MAX, DivisionByZero, UintOverflow

Q112 = 2**112


def encode(y: int) -> int:
    """Encode a uint112 as a UQ112x112."""
    if not 0 <= y <= UINT112_MAX:
        raise UintOverflow(f"Value does not fit uint112: {y}")
    return y * Q112


def uqdiv(x: int, y: int) -> int:
    """Divide a UQ112x112 by a uint112, returning a UQ112x112."""
    if y == 0:
        raise DivisionByZero("UQ112x112 division by zero")
    return x // y
