"""Tests for SafeInt checked arithmetic."""

import pytest

from ammpool.errors import ArithmeticInvariant
from ammpool.safe_int import (
    UINT256_MAX,
    DivisionByZero,
    S,
    SafeInt,
    SafeIntError,
    Uint256Overflow,
    Underflow,
)


class TestSafeIntConstruction:
    """Tests for SafeInt construction."""

    def test_from_int(self):
        assert SafeInt(42).value == 42

    def test_from_safeint(self):
        assert SafeInt(SafeInt(42)).value == 42

    def test_from_invalid_type_raises(self):
        """Strings, floats and bools are rejected."""
        with pytest.raises(TypeError):
            SafeInt("42")  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(3.14)  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(True)

    def test_negative_raises(self):
        with pytest.raises(Underflow):
            SafeInt(-1)

    def test_alias_s(self):
        assert S is SafeInt


class TestSafeIntArithmetic:
    """Tests for SafeInt arithmetic operations."""

    def test_add(self):
        assert (S(10) + S(5)).value == 15
        assert (S(10) + 5).value == 15
        assert (5 + S(10)).value == 15

    def test_sub(self):
        assert (S(10) - S(3)).value == 7
        assert (S(5) - S(5)).value == 0

    def test_sub_underflow_raises(self):
        with pytest.raises(Underflow) as exc_info:
            S(5) - S(10)
        assert "5 - 10" in str(exc_info.value)

    def test_mul(self):
        assert (S(6) * S(7)).value == 42
        assert (6 * S(7)).value == 42

    def test_floordiv(self):
        assert (S(10) // S(3)).value == 3

    def test_floordiv_by_zero_raises(self):
        with pytest.raises(DivisionByZero):
            S(10) // S(0)

    def test_ceiling_div(self):
        assert S(10).ceiling_div(3).value == 4
        assert S(9).ceiling_div(3).value == 3
        assert S(0).ceiling_div(3).value == 0

    def test_ceiling_div_by_zero_raises(self):
        with pytest.raises(DivisionByZero):
            S(10).ceiling_div(0)


class TestMulDiv:
    """Tests for pro-rata share computation."""

    def test_rounds_down_by_default(self):
        # 2000 * 141 / 1414 = 199.43...
        assert S(2000).mul_div(141, 1414).value == 199

    def test_round_up(self):
        assert S(2000).mul_div(141, 1414, round_up=True).value == 200

    def test_exact_share_unaffected_by_rounding(self):
        assert S(1000).mul_div(500, 1000).value == 500
        assert S(1000).mul_div(500, 1000, round_up=True).value == 500

    def test_no_intermediate_overflow(self):
        """The product may exceed uint256 as long as the result does not."""
        result = S(UINT256_MAX).mul_div(UINT256_MAX, UINT256_MAX)
        assert result.to_uint256() == UINT256_MAX

    def test_zero_denominator(self):
        with pytest.raises(DivisionByZero):
            S(1).mul_div(1, 0)


class TestSafeIntComparison:
    def test_comparisons_with_int_and_safeint(self):
        assert S(5) == 5
        assert S(5) == S(5)
        assert S(4) < S(5)
        assert S(5) <= 5
        assert S(6) > 5
        assert S(6) >= S(6)

    def test_not_equal_to_other_types(self):
        assert S(5) != "5"

    def test_bool(self):
        assert not S(0)
        assert S(1)


class TestSafeIntUint256:
    def test_to_uint256(self):
        assert S(UINT256_MAX).to_uint256() == UINT256_MAX

    def test_overflow(self):
        with pytest.raises(Uint256Overflow):
            S(UINT256_MAX + 1).to_uint256()


class TestErrorHierarchy:
    def test_errors_are_arithmetic_invariants(self):
        """SafeInt failures abort pool operations as invariant violations."""
        for err in (DivisionByZero, Underflow, Uint256Overflow):
            assert issubclass(err, SafeIntError)
            assert issubclass(err, ArithmeticInvariant)
