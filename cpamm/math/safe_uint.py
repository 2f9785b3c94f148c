"""Checked unsigned integer arithmetic for reserve and liquidity math.

SafeUint wraps a non-negative integer and makes the failure modes of
fixed-width unsigned arithmetic explicit:
- Division by zero raises DivisionByZero
- Subtraction below zero raises Underflow
- Values that do not fit a target width raise UintOverflow on to_uint()

Usage pattern:
    from cpamm.math.safe_uint import U

    def amount_out(amount_in: int, reserve_in: int, reserve_out: int) -> int:
        with_fee = U(amount_in) * 997
        return (with_fee * reserve_out // (U(reserve_in) * 1000 + with_fee)).value
"""

from __future__ import annotations

UINT112_MAX = 2**112 - 1
UINT256_MAX = 2**256 - 1


class SafeUintError(ArithmeticError):
    """Base class for SafeUint arithmetic errors."""

    pass


class DivisionByZero(SafeUintError):
    """Division by zero."""

    pass


class Underflow(SafeUintError):
    """Subtraction would produce a negative result."""

    pass


class UintOverflow(SafeUintError):
    """Value exceeds the maximum of the requested bit width."""

    pass


class SafeUint:
    """Non-negative integer with checked arithmetic.

    Construction rejects negative values, so every SafeUint in flight is a
    valid unsigned quantity. Width is only enforced on exit through
    to_uint(bits), matching how reserves (uint112) and balances (uint256)
    are stored.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeUint) -> None:
        """Create a SafeUint from an integer or another SafeUint.

        Raises:
            TypeError: If value is not an int or SafeUint
            Underflow: If value is negative
        """
        if isinstance(value, SafeUint):
            self._value = value._value
            return
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"SafeUint requires int, got {type(value).__name__}")
        if value < 0:
            raise Underflow(f"Negative value cannot be unsigned: {value}")
        self._value = value

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeUint({self._value})"

    def __hash__(self) -> int:
        return hash(self._value)

    def __add__(self, other: SafeUint | int) -> SafeUint:
        return SafeUint(self._value + _extract_value(other))

    __radd__ = __add__

    def __sub__(self, other: SafeUint | int) -> SafeUint:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        if other_val > self._value:
            raise Underflow(f"Underflow: {self._value} - {other_val}")
        return SafeUint(self._value - other_val)

    def __mul__(self, other: SafeUint | int) -> SafeUint:
        return SafeUint(self._value * _extract_value(other))

    __rmul__ = __mul__

    def __floordiv__(self, other: SafeUint | int) -> SafeUint:
        """Integer division, truncating toward zero.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeUint(self._value // other_val)

    def __mod__(self, other: SafeUint | int) -> SafeUint:
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Modulo by zero: {self._value} % 0")
        return SafeUint(self._value % other_val)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeUint):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: SafeUint | int) -> bool:
        return self._value < _extract_value(other)

    def __le__(self, other: SafeUint | int) -> bool:
        return self._value <= _extract_value(other)

    def __gt__(self, other: SafeUint | int) -> bool:
        return self._value > _extract_value(other)

    def __ge__(self, other: SafeUint | int) -> bool:
        return self._value >= _extract_value(other)

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def __index__(self) -> int:
        return self._value

    def saturating_sub(self, other: SafeUint | int) -> SafeUint:
        """Subtract, clamping the result to zero instead of raising."""
        return SafeUint(max(0, self._value - _extract_value(other)))

    def to_uint(self, bits: int = 256) -> int:
        """Convert to int, validating it fits in an unsigned `bits`-wide word.

        Raises:
            UintOverflow: If value exceeds 2**bits - 1
        """
        if self._value > (1 << bits) - 1:
            raise UintOverflow(f"Value exceeds uint{bits} max: {self._value}")
        return self._value

    @classmethod
    def zero(cls) -> SafeUint:
        return cls(0)


def _extract_value(x: SafeUint | int) -> int:
    if isinstance(x, SafeUint):
        return x._value
    return x


# Convenience alias for concise code
U = SafeUint
