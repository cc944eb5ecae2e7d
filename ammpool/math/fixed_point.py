"""Binary fixed-point log2/exp2 library.

Values are signed integers scaled by 2^64 (64 fractional bits). The integer
part is unbounded, so the 64-bit integer ceiling of the classic 64.64
format does not cap deposit sizes.

Rounding is defined at every step:
- log_2 extracts one fractional bit per squaring and truncates the rest
- exp_2 multiplies 2^(2^-k) factors from the most significant fractional
  bit down, truncating after each product
- divisions truncate toward zero

The exp_2 factor table is derived at import time from exact integer square
roots, so results are identical on every interpreter.
"""

from __future__ import annotations

import math

from ammpool.errors import ArithmeticInvariant

__all__ = [
    # Errors
    "FixedPointError",
    "LogOfNonPositive",
    "ExponentOutOfBounds",
    # Functions
    "from_uint",
    "to_uint",
    "log_2",
    "exp_2",
    "div_trunc",
    "floor_geometric_mean",
    # Constants
    "FRACTIONAL_BITS",
    "ONE_64",
]

# =============================================================================
# Constants
# =============================================================================

FRACTIONAL_BITS = 64
ONE_64 = 1 << FRACTIONAL_BITS
FRACTION_MASK = ONE_64 - 1

# 2^x is defined for x < 256 (results up to uint256 scale)
MAX_EXPONENT = 256 << FRACTIONAL_BITS
# Below 2^-64 the result truncates to zero
MIN_EXPONENT = -(64 << FRACTIONAL_BITS)

# log_2 normalizes its mantissa into [2^127, 2^128)
_MANTISSA_BITS = 127


def _exp2_factors() -> tuple[int, ...]:
    """floor(2^(2^-k) * 2^128) for k = 1..64.

    Each factor is the square root of the previous one, computed with 256
    guard bits and truncated to 128 fractional bits.
    """
    factors = []
    root = 2 << 256  # 2.0 scaled by 2^256
    for _ in range(FRACTIONAL_BITS):
        root = math.isqrt(root << 256)
        factors.append(root >> 128)
    return tuple(factors)


_EXP2_FACTORS = _exp2_factors()


# =============================================================================
# Error classes
# =============================================================================


class FixedPointError(ArithmeticInvariant):
    """Base error for fixed-point operations."""

    pass


class LogOfNonPositive(FixedPointError):
    """log_2 input must be strictly positive."""

    pass


class ExponentOutOfBounds(FixedPointError):
    """exp_2 input is at or above MAX_EXPONENT."""

    pass


# =============================================================================
# Conversions
# =============================================================================


def from_uint(x: int) -> int:
    """Convert a non-negative integer to fixed point."""
    if x < 0:
        raise FixedPointError(f"from_uint requires non-negative input, got {x}")
    return x << FRACTIONAL_BITS


def to_uint(x: int) -> int:
    """Convert a non-negative fixed-point value to an integer, truncating."""
    if x < 0:
        raise FixedPointError(f"to_uint requires non-negative input, got {x}")
    return x >> FRACTIONAL_BITS


def div_trunc(a: int, b: int) -> int:
    """Integer division with truncation toward zero.

    Python's // floors toward negative infinity; a negative log sum must
    truncate toward zero to keep the mean rounding symmetric.
    """
    if b == 0:
        raise FixedPointError("Division by zero in div_trunc")
    if (a >= 0) == (b >= 0):
        return a // b
    return -(abs(a) // abs(b))


# =============================================================================
# Core functions
# =============================================================================


def log_2(x: int) -> int:
    """Binary logarithm of a fixed-point value.

    Args:
        x: Strictly positive fixed-point value.

    Returns:
        log2(x) as a signed fixed-point value, truncated toward -inf.

    Raises:
        LogOfNonPositive: If x <= 0
    """
    if x <= 0:
        raise LogOfNonPositive(f"log_2 of non-positive value {x}")

    msb = x.bit_length() - 1
    result = (msb - FRACTIONAL_BITS) << FRACTIONAL_BITS

    # Normalize mantissa to [1, 2) with 127 fractional bits
    if msb <= _MANTISSA_BITS:
        ux = x << (_MANTISSA_BITS - msb)
    else:
        ux = x >> (msb - _MANTISSA_BITS)

    # Each squaring doubles the log; the carry out of bit 255 is the next bit
    bit = 1 << (FRACTIONAL_BITS - 1)
    while bit > 0:
        ux *= ux
        b = ux >> 255
        ux >>= _MANTISSA_BITS + b
        result += bit * b
        bit >>= 1

    return result


def exp_2(x: int) -> int:
    """Binary exponent 2^x of a signed fixed-point value.

    Args:
        x: Fixed-point exponent, must be below MAX_EXPONENT.

    Returns:
        2^x as fixed point, truncated. Zero for x below MIN_EXPONENT.

    Raises:
        ExponentOutOfBounds: If x >= MAX_EXPONENT
    """
    if x >= MAX_EXPONENT:
        raise ExponentOutOfBounds(f"exp_2 exponent {x} outside valid range")
    if x < MIN_EXPONENT:
        return 0

    # Two's complement split: floor integer part, non-negative fraction
    fraction = x & FRACTION_MASK
    integer_part = x >> FRACTIONAL_BITS

    result = 1 << _MANTISSA_BITS
    for k, factor in enumerate(_EXP2_FACTORS, start=1):
        if fraction & (1 << (FRACTIONAL_BITS - k)):
            result = (result * factor) >> 128

    shift = (_MANTISSA_BITS - FRACTIONAL_BITS) - integer_part
    if shift >= 0:
        return result >> shift
    return result << -shift


# =============================================================================
# Geometric mean
# =============================================================================


def floor_geometric_mean(values: list[int]) -> int:
    """Integer geometric mean of positive integers, rounded down.

    The log-domain mean (sum of log_2, truncated division by the count,
    exp_2, truncation) gives an estimate within a few parts in 2^60.
    Integer Newton steps then refine the estimate, so equal inputs return
    themselves exactly.

    The result is always the exact integer root floor(prod(values) ** (1/n)).
    The fixed-point truncation only seeds the search; it never shows
    through in the returned value.

    Args:
        values: At least one strictly positive integer.

    Returns:
        The largest integer g with g ** len(values) <= prod(values).

    Raises:
        LogOfNonPositive: If any value is <= 0
        FixedPointError: If values is empty
    """
    n = len(values)
    if n == 0:
        raise FixedPointError("Geometric mean of empty sequence")

    log_sum = sum(log_2(from_uint(v)) for v in values)
    estimate = to_uint(exp_2(div_trunc(log_sum, n)))

    product = math.prod(values)

    # Start strictly above the root so Newton descends monotonically
    x = estimate + (estimate >> 40) + 2
    while x**n <= product:
        x *= 2

    while True:
        y = ((n - 1) * x + product // x ** (n - 1)) // n
        if y >= x:
            break
        x = y

    return x
