"""
Digit layer for the big-number engine.

A DigitSequence is the positional-notation representation of a
non-negative integer in base 2**32: an ordered run of 32-bit "blocks",
least significant first.

Two rules hold for every sequence this module hands out:
  - zero is the empty sequence, never a single zero digit
  - the most significant digit is never zero (canonical form)

The only mutation primitive is ``append_most_significant``.  Everything
the arithmetic engine builds, it builds one digit at a time from the
least significant end upward.
"""

from __future__ import annotations

from typing import Iterable, Iterator


BLOCK_SIZE = 32
BLOCK_BASE = 1 << BLOCK_SIZE
BLOCK_MASK = BLOCK_BASE - 1    # 2**32 - 1

NATIVE_BITS = 64
NATIVE_MAX = (1 << NATIVE_BITS) - 1


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class AllocationFailure(MemoryError):
    """Raised when digit storage cannot grow."""


class ReleasedValueError(ValueError):
    """Raised when a released sequence is used again."""


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def _check_int(value: object, what: str) -> int:
    # bool is an int subclass; a digit or a native value is never a truth value
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what} must be an int, not {type(value).__name__}")
    return value


def check_digit(digit: object) -> int:
    """Return ``digit`` if it is a valid base-2**32 digit, else raise.

    Branches: DIGIT-VALID, DIGIT-INVALID
    """
    d = _check_int(digit, "digit")
    if not 0 <= d <= BLOCK_MASK:                                  # DIGIT-INVALID
        raise ValueError(f"digit {d} is outside [0, {BLOCK_MASK}]")
    return d                                                      # DIGIT-VALID


def check_native(value: object) -> int:
    """Return ``value`` if it fits an unsigned 64-bit native, else raise."""
    v = _check_int(value, "value")
    if not 0 <= v <= NATIVE_MAX:
        raise ValueError(f"{v} is outside the native range [0, {NATIVE_MAX}]")
    return v


# ---------------------------------------------------------------------------
# The sequence
# ---------------------------------------------------------------------------

class DigitSequence:
    """
    An owned, growable run of 32-bit digits, least significant first.

    Indexing is by position: ``seq[0]`` is the least significant digit,
    ``seq[len(seq) - 1]`` the most significant.  ``len(seq)`` is the
    digit count and is always authoritative.
    """

    __slots__ = ("_blocks", "_released")

    def __init__(self) -> None:
        self._blocks: list[int] = []
        self._released = False

    # -- construction -----------------------------------------------------

    @classmethod
    def from_native(cls, value: int) -> DigitSequence:
        """Digits of an unsigned 64-bit value.

        Branches: CONSTRUCT-ZERO, CONSTRUCT-ONE-DIGIT, CONSTRUCT-TWO-DIGITS
        """
        v = check_native(value)
        seq = cls()
        # the loop never runs for 0                               # CONSTRUCT-ZERO
        while v > 0:
            seq.append_most_significant(v & BLOCK_MASK)
            v >>= BLOCK_SIZE
        return seq

    @classmethod
    def from_digits(cls, digits: Iterable[int]) -> DigitSequence:
        """Sequence holding exactly ``digits`` (least significant first).

        Rejects a most significant zero digit; the caller must pass a
        canonical digit list.
        """
        seq = cls()
        for d in digits:
            seq.append_most_significant(d)
        if seq._blocks and seq._blocks[-1] == 0:
            raise ValueError(
                f"most significant digit is zero in {seq._blocks!r}; "
                "digit lists must be canonical"
            )
        return seq

    def copy(self) -> DigitSequence:
        self._check_live()
        seq = DigitSequence()
        seq._blocks = list(self._blocks)
        return seq

    # -- mutation ---------------------------------------------------------

    def append_most_significant(self, digit: int) -> None:
        """Add ``digit`` as the new most significant position.

        CPython only raises MemoryError from ``list.append`` when the
        process is out of memory; there is no fixed digit limit.
        """
        self._check_live()
        digit = check_digit(digit)
        try:
            self._blocks.append(digit)
        except MemoryError as exc:
            raise AllocationFailure(
                f"cannot grow digit storage past {len(self._blocks)} digits"
            ) from exc

    def release(self) -> None:
        """Drop all digit storage.  A second call does nothing."""
        if self._released:
            return
        self._blocks = []
        self._released = True

    # -- inspection -------------------------------------------------------

    @property
    def released(self) -> bool:
        return self._released

    @property
    def count(self) -> int:
        self._check_live()
        return len(self._blocks)

    @property
    def is_zero(self) -> bool:
        return self.count == 0

    @property
    def is_canonical(self) -> bool:
        self._check_live()
        return not self._blocks or self._blocks[-1] != 0

    def least_to_most(self) -> Iterator[int]:
        self._check_live()
        return iter(self._blocks)

    def most_to_least(self) -> Iterator[int]:
        self._check_live()
        return reversed(self._blocks)

    def to_tuple(self) -> tuple[int, ...]:
        self._check_live()
        return tuple(self._blocks)

    def __len__(self) -> int:
        return self.count

    def __getitem__(self, position: int) -> int:
        self._check_live()
        return self._blocks[position]

    def __repr__(self) -> str:
        if self._released:
            return "DigitSequence(<released>)"
        return f"DigitSequence({self._blocks!r})"

    # -- internal ---------------------------------------------------------

    def _check_live(self) -> None:
        if self._released:
            raise ReleasedValueError("operation on a released digit sequence")
