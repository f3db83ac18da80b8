"""
Big non-negative integers in base 2**32.

BigNum is the caller-facing value type.  Each BigNum owns exactly one
DigitSequence and hands all arithmetic to an Engine.  The module-level
functions are the library's operation set; the Python operators on
BigNum are the same operations through DEFAULT_ENGINE.

    >>> a = construct(2**32 - 1)
    >>> b = a + construct(1)
    >>> b.digits
    (0, 1)
    >>> int(power(construct(2), 100)) == 2**100
    True
"""

from __future__ import annotations

import sys
from typing import Iterable, TextIO

from digits import BLOCK_SIZE, DigitSequence
from engine import Engine


DEFAULT_ENGINE = Engine()


class BigNum:
    """An exact non-negative integer of unbounded magnitude."""

    __slots__ = ("_digits",)

    def __init__(self, value: int = 0) -> None:
        self._digits = DigitSequence.from_native(value)

    @classmethod
    def from_digits(cls, digits: Iterable[int]) -> BigNum:
        """Build from base-2**32 digits, least significant first."""
        return cls._wrap(DigitSequence.from_digits(digits))

    @classmethod
    def _wrap(cls, seq: DigitSequence) -> BigNum:
        num = cls.__new__(cls)
        num._digits = seq
        return num

    # -- inspection -------------------------------------------------------

    @property
    def digits(self) -> tuple[int, ...]:
        return self._digits.to_tuple()

    @property
    def count(self) -> int:
        return self._digits.count

    @property
    def is_zero(self) -> bool:
        return self._digits.is_zero

    @property
    def released(self) -> bool:
        return self._digits.released

    # -- lifetime ---------------------------------------------------------

    def release(self) -> None:
        self._digits.release()

    def __enter__(self) -> BigNum:
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()

    # -- comparisons ------------------------------------------------------

    def compare(self, other: BigNum, engine: Engine | None = None) -> int:
        return (engine or DEFAULT_ENGINE).compare(self._digits, other._digits)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BigNum):
            return NotImplemented
        return DEFAULT_ENGINE.equal(self._digits, other._digits)

    def __ne__(self, other: object) -> bool:
        if not isinstance(other, BigNum):
            return NotImplemented
        return DEFAULT_ENGINE.not_equal(self._digits, other._digits)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, BigNum):
            return NotImplemented
        return DEFAULT_ENGINE.less_than(self._digits, other._digits)

    def __le__(self, other: object) -> bool:
        if not isinstance(other, BigNum):
            return NotImplemented
        return DEFAULT_ENGINE.less_or_equal(self._digits, other._digits)

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, BigNum):
            return NotImplemented
        return DEFAULT_ENGINE.greater_than(self._digits, other._digits)

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, BigNum):
            return NotImplemented
        return DEFAULT_ENGINE.greater_or_equal(self._digits, other._digits)

    def __hash__(self) -> int:
        return hash(self._digits.to_tuple())

    # -- arithmetic -------------------------------------------------------

    def __add__(self, other: object) -> BigNum:
        if not isinstance(other, BigNum):
            return NotImplemented
        return add(self, other)

    def __mul__(self, other: object) -> BigNum:
        if not isinstance(other, BigNum):
            return NotImplemented
        return multiply(self, other)

    def __pow__(self, n: int, modulo: None = None) -> BigNum:
        # no modular form: division is not supported
        if modulo is not None or isinstance(n, bool) or not isinstance(n, int):
            return NotImplemented
        return power(self, n)

    # -- conversions ------------------------------------------------------

    def __bool__(self) -> bool:
        return not self._digits.is_zero

    def __int__(self) -> int:
        value = 0
        for d in self._digits.most_to_least():
            value = (value << BLOCK_SIZE) | d
        return value

    def __repr__(self) -> str:
        if self._digits.released:
            return "BigNum(<released>)"
        if self._digits.count <= 2:
            return f"BigNum({int(self)})"
        return f"BigNum.from_digits({list(self._digits.least_to_most())!r})"


# ---------------------------------------------------------------------------
# Operation set
# ---------------------------------------------------------------------------

def construct(value: int) -> BigNum:
    """A BigNum holding the unsigned 64-bit ``value``."""
    return BigNum(value)


def release(num: BigNum) -> None:
    num.release()


def equal(a: BigNum, b: BigNum, engine: Engine | None = None) -> bool:
    return (engine or DEFAULT_ENGINE).equal(a._digits, b._digits)


def not_equal(a: BigNum, b: BigNum, engine: Engine | None = None) -> bool:
    return (engine or DEFAULT_ENGINE).not_equal(a._digits, b._digits)


def less_than(a: BigNum, b: BigNum, engine: Engine | None = None) -> bool:
    return (engine or DEFAULT_ENGINE).less_than(a._digits, b._digits)


def less_or_equal(a: BigNum, b: BigNum, engine: Engine | None = None) -> bool:
    return (engine or DEFAULT_ENGINE).less_or_equal(a._digits, b._digits)


def greater_than(a: BigNum, b: BigNum, engine: Engine | None = None) -> bool:
    return (engine or DEFAULT_ENGINE).greater_than(a._digits, b._digits)


def greater_or_equal(a: BigNum, b: BigNum, engine: Engine | None = None) -> bool:
    return (engine or DEFAULT_ENGINE).greater_or_equal(a._digits, b._digits)


def add(a: BigNum, b: BigNum, engine: Engine | None = None) -> BigNum:
    return BigNum._wrap((engine or DEFAULT_ENGINE).add(a._digits, b._digits))


def multiply(a: BigNum, b: BigNum, engine: Engine | None = None) -> BigNum:
    return BigNum._wrap((engine or DEFAULT_ENGINE).multiply(a._digits, b._digits))


def power(a: BigNum, n: int, engine: Engine | None = None) -> BigNum:
    return BigNum._wrap((engine or DEFAULT_ENGINE).power(a._digits, n))


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------

def render(num: BigNum) -> str:
    """Binary digits, most significant first, then the digit count.

    Each digit is zero-padded to 32 characters, so 2**32 + 5 renders as
    31 zeros, a 1, 29 zeros, 101, then " (blocks: 2)".  Zero renders as
    " (blocks: 0)".  A debugging aid, not an interchange format.
    """
    blocks = "".join(
        format(d, f"0{BLOCK_SIZE}b") for d in num._digits.most_to_least()
    )
    return f"{blocks} (blocks: {num._digits.count})"


def dump(num: BigNum, file: TextIO | None = None) -> None:
    """Write ``render(num)`` and a newline to ``file`` (stdout by default)."""
    print(render(num), file=file or sys.stdout)
