"""
Tests for the BigNum value type and the module-level operation set.

These cover what a caller sees: construction, the operators, the
diagnostic print, and release discipline.
"""
from __future__ import annotations

import io

import pytest

import bignum
from bignum import (
    DEFAULT_ENGINE,
    BigNum,
    add,
    construct,
    dump,
    equal,
    greater_or_equal,
    greater_than,
    less_or_equal,
    less_than,
    multiply,
    not_equal,
    power,
    release,
    render,
)
from digits import BLOCK_BASE, BLOCK_MASK, NATIVE_MAX, ReleasedValueError
from engine import Engine, ExponentPolicy, InvalidExponentError, PowerMethod


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    def test_default_is_zero(self):
        assert BigNum().digits == ()
        assert BigNum().is_zero

    def test_construct_matches_class(self):
        assert construct(12345) == BigNum(12345)

    def test_from_digits(self):
        num = BigNum.from_digits([1, 2, 3])
        assert num.digits == (1, 2, 3)
        assert int(num) == 1 + 2 * BLOCK_BASE + 3 * BLOCK_BASE ** 2

    def test_from_digits_rejects_leading_zero(self):
        with pytest.raises(ValueError):
            BigNum.from_digits([1, 0])

    def test_native_max(self):
        assert int(construct(NATIVE_MAX)) == NATIVE_MAX

    def test_too_large_for_native(self):
        with pytest.raises(ValueError):
            construct(NATIVE_MAX + 1)

    def test_negative(self):
        with pytest.raises(ValueError):
            construct(-1)


# ---------------------------------------------------------------------------
# Comparison operators and functions
# ---------------------------------------------------------------------------

class TestComparisons:
    small = construct(10)
    large = BigNum.from_digits([0, 0, 1])

    def test_operators(self):
        assert self.small < self.large
        assert self.small <= self.large
        assert self.large > self.small
        assert self.large >= self.small
        assert self.small != self.large
        assert not self.small == self.large

    def test_functions(self):
        assert less_than(self.small, self.large)
        assert less_or_equal(self.small, self.large)
        assert greater_than(self.large, self.small)
        assert greater_or_equal(self.large, self.small)
        assert not_equal(self.small, self.large)
        assert equal(self.small, construct(10))

    def test_compare_method(self):
        assert self.small.compare(self.large) == -1
        assert self.large.compare(self.small) == 1
        assert self.small.compare(construct(10)) == 0

    def test_sorting(self):
        nums = [construct(NATIVE_MAX), construct(0), self.large, construct(7)]
        assert [int(n) for n in sorted(nums)] == [0, 7, NATIVE_MAX, 2**64]

    def test_not_equal_to_int(self):
        # no implicit conversion from int
        assert construct(5) != 5
        assert not construct(5) == 5

    def test_ordering_against_int_raises(self):
        with pytest.raises(TypeError):
            construct(5) < 7


# ---------------------------------------------------------------------------
# Arithmetic operators and functions
# ---------------------------------------------------------------------------

class TestArithmetic:
    def test_add_operator(self):
        assert (construct(BLOCK_MASK) + construct(1)).digits == (0, 1)

    def test_mul_operator(self):
        result = construct(BLOCK_MASK) * construct(BLOCK_MASK)
        assert int(result) == BLOCK_MASK ** 2

    def test_pow_operator(self):
        assert int(construct(3) ** 40) == 3 ** 40

    def test_pow_operator_negative_exponent(self):
        with pytest.raises(InvalidExponentError):
            construct(3) ** -1

    def test_pow_with_modulo_unsupported(self):
        with pytest.raises(TypeError):
            pow(construct(3), 2, construct(5))

    def test_add_int_unsupported(self):
        with pytest.raises(TypeError):
            construct(3) + 1

    def test_mul_int_unsupported(self):
        with pytest.raises(TypeError):
            construct(3) * 2

    def test_results_are_fresh(self):
        a = construct(9)
        b = add(a, construct(0))
        assert b == a
        assert b is not a
        b.release()
        assert a.digits == (9,)

    def test_explicit_engine(self):
        lenient = Engine(ExponentPolicy.ONE, PowerMethod.REPEATED)
        assert power(construct(5), -2, lenient) == construct(1)
        assert multiply(construct(5), construct(6), lenient) == construct(30)

    def test_default_engine(self):
        assert DEFAULT_ENGINE.exponent_policy == ExponentPolicy.REJECT
        assert DEFAULT_ENGINE.power_method == PowerMethod.SQUARING

    def test_factorial_of_thirty(self):
        total = construct(1)
        for k in range(1, 31):
            total = total * construct(k)
        assert int(total) == 265252859812191058636308480000000

    def test_two_to_the_thousand(self):
        result = power(construct(2), 1000)
        assert result.count == 1000 // 32 + 1
        assert result.digits[-1] == 1 << (1000 % 32)
        assert all(d == 0 for d in result.digits[:-1])


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------

class TestConversions:
    def test_int(self):
        assert int(BigNum.from_digits([5, 1])) == BLOCK_BASE + 5

    def test_bool(self):
        assert not construct(0)
        assert construct(1)

    def test_repr_small(self):
        assert repr(construct(42)) == "BigNum(42)"
        assert repr(construct(NATIVE_MAX)) == f"BigNum({NATIVE_MAX})"

    def test_repr_large(self):
        assert repr(BigNum.from_digits([1, 2, 3])) == "BigNum.from_digits([1, 2, 3])"

    def test_repr_released(self):
        num = construct(1)
        num.release()
        assert repr(num) == "BigNum(<released>)"


# ---------------------------------------------------------------------------
# Diagnostic print
# ---------------------------------------------------------------------------

class TestDiagnostics:
    def test_render_zero(self):
        assert render(construct(0)) == " (blocks: 0)"

    def test_render_one_digit(self):
        assert render(construct(5)) == "0" * 29 + "101 (blocks: 1)"

    def test_render_most_significant_first(self):
        text = render(construct(BLOCK_BASE + 5))
        assert text == "0" * 31 + "1" + "0" * 29 + "101 (blocks: 2)"

    def test_render_max_digit(self):
        assert render(construct(BLOCK_MASK)) == "1" * 32 + " (blocks: 1)"

    def test_dump_to_stream(self):
        out = io.StringIO()
        dump(construct(1), file=out)
        assert out.getvalue() == "0" * 31 + "1 (blocks: 1)\n"

    def test_dump_defaults_to_stdout(self, capsys):
        dump(construct(0))
        assert capsys.readouterr().out == " (blocks: 0)\n"


# ---------------------------------------------------------------------------
# Release discipline
# ---------------------------------------------------------------------------

class TestRelease:
    def test_release_function(self):
        num = construct(3)
        release(num)
        assert num.released

    def test_release_twice_is_noop(self):
        num = construct(3)
        num.release()
        num.release()
        assert num.released

    def test_use_after_release_raises(self):
        num = construct(3)
        num.release()
        with pytest.raises(ReleasedValueError):
            num + construct(1)
        with pytest.raises(ReleasedValueError):
            num.digits
        with pytest.raises(ReleasedValueError):
            num == construct(3)

    def test_power_of_released_base_raises(self):
        num = construct(7)
        num.release()
        lenient = Engine(ExponentPolicy.ONE, PowerMethod.SQUARING)
        with pytest.raises(ReleasedValueError):
            power(num, 0)
        with pytest.raises(ReleasedValueError):
            power(num, 3)
        with pytest.raises(ReleasedValueError):
            power(num, -2, lenient)

    def test_context_manager_releases(self):
        with construct(NATIVE_MAX) as num:
            assert int(num) == NATIVE_MAX
        assert num.released

    def test_context_manager_releases_on_error(self):
        with pytest.raises(RuntimeError):
            with construct(1) as num:
                raise RuntimeError("boom")
        assert num.released

    def test_releasing_result_leaves_operands(self):
        a, b = construct(2), construct(3)
        with multiply(a, b) as product:
            assert int(product) == 6
        assert not a.released and not b.released


def test_operation_set_is_exported():
    for name in (
        "construct", "release", "equal", "not_equal", "less_than",
        "less_or_equal", "greater_than", "greater_or_equal", "add",
        "multiply", "power", "render", "dump",
    ):
        assert callable(getattr(bignum, name))
