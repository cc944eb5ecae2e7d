"""Checked non-negative integers for reserve and liquidity arithmetic.

Reserves, amounts and liquidity are never negative and must fit in uint256.
SafeInt enforces the first rule on every operation and the second on
to_uint256(), so a bad intermediate aborts the operation instead of reaching
the ledger:
- a negative result raises Underflow
- a zero divisor raises DivisionByZero
- a value above 2^256-1 raises Uint256Overflow on to_uint256()

All three are ArithmeticInvariant errors.

Usage pattern:
    from ammpool.safe_int import S

    def share(reserve: int, liquidity: int, total: int) -> int:
        # Wrap at entry, unwrap at exit
        return S(reserve).mul_div(liquidity, total).value
"""

from __future__ import annotations

from functools import total_ordering

from ammpool.errors import ArithmeticInvariant

UINT256_MAX = 2**256 - 1


class SafeIntError(ArithmeticInvariant):
    """Base class for SafeInt arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    pass


class Underflow(SafeIntError):
    """Result would be negative."""

    pass


class Uint256Overflow(SafeIntError):
    pass


def _as_int(x: SafeInt | int) -> int:
    if isinstance(x, SafeInt):
        return x._value
    if isinstance(x, bool) or not isinstance(x, int):
        raise TypeError(f"SafeInt requires int, got {type(x).__name__}")
    return x


@total_ordering
class SafeInt:
    """Non-negative integer with checked arithmetic.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        """Wrap an int or copy another SafeInt.

        Raises:
            TypeError: If value is not an int or SafeInt (bool is rejected)
            Underflow: If value is negative
        """
        v = _as_int(value)
        if v < 0:
            raise Underflow(f"Negative quantity: {v}")
        self._value = v

    @property
    def value(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _as_int(other))

    __radd__ = __add__

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        other_val = _as_int(other)
        if other_val > self._value:
            raise Underflow(f"Underflow: {self._value} - {other_val}")
        return SafeInt(self._value - other_val)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _as_int(other))

    __rmul__ = __mul__

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value // _divisor(other))

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Division rounded up."""
        return SafeInt(-(-self._value // _divisor(other)))

    def mul_div(
        self, numerator: SafeInt | int, denominator: SafeInt | int, round_up: bool = False
    ) -> SafeInt:
        """self * numerator / denominator, rounded down unless round_up.

        The product is exact, so this is the one place pro-rata shares are
        computed and rounded.
        """
        product = self * numerator
        if round_up:
            return product.ceiling_div(denominator)
        return product // denominator

    # --- Comparison ---

    def __eq__(self, other: object) -> bool:
        try:
            return self._value == _as_int(other)  # type: ignore[arg-type]
        except TypeError:
            return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _as_int(other)

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def to_uint256(self) -> int:
        """Unwrap, requiring the value to fit in uint256.

        Raises:
            Uint256Overflow: If value exceeds 2^256-1
        """
        if self._value > UINT256_MAX:
            raise Uint256Overflow(f"Value exceeds uint256 max: {self._value}")
        return self._value


def _divisor(x: SafeInt | int) -> int:
    value = _as_int(x)
    if value == 0:
        raise DivisionByZero("Division by zero")
    return value


# Convenience alias for concise code
S = SafeInt
