"""Arithmetic engine over base-2**32 digit sequences.

Every operation consumes one or two DigitSequences and returns either a
fresh DigitSequence or a comparison result.  Operands are never mutated
and results never share storage with them.  Intermediates (partial
products, replaced accumulators) are released before an operation
returns.

Decision branches are annotated with their branch ids (see contract.py
BranchPoint) so white-box tests can trace coverage back to the contract.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from itertools import zip_longest

from digits import BLOCK_MASK, BLOCK_SIZE, DigitSequence

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Configuration enums
# ---------------------------------------------------------------------------

class ExponentPolicy(Enum):
    """What ``power`` does with a negative exponent."""

    REJECT = auto()      # Raise InvalidExponentError
    ONE = auto()         # Return 1, as a loop that never runs would


class PowerMethod(Enum):
    SQUARING = auto()    # Square-and-multiply, O(log n) multiplications
    REPEATED = auto()    # Multiply n times, O(n) multiplications


class InvalidExponentError(ValueError):
    """Raised for a negative exponent under ExponentPolicy.REJECT."""


# ---------------------------------------------------------------------------
# The engine
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Engine:
    exponent_policy: ExponentPolicy = ExponentPolicy.REJECT
    power_method: PowerMethod = PowerMethod.SQUARING

    # -- comparisons --------------------------------------------------------

    def compare(self, a: DigitSequence, b: DigitSequence) -> int:
        """Three-way comparison: -1 if a < b, 0 if equal, 1 if a > b.

        Canonical form makes the digit count decisive when counts differ.

        Branches: CMP-COUNT-LESS, CMP-COUNT-GREATER, CMP-DIGIT-LESS,
                  CMP-DIGIT-GREATER, CMP-EQUAL
        """
        if len(a) != len(b):
            if len(a) < len(b):                                   # CMP-COUNT-LESS
                return -1
            return 1                                              # CMP-COUNT-GREATER

        for da, db in zip(a.most_to_least(), b.most_to_least()):
            if da != db:
                if da < db:                                       # CMP-DIGIT-LESS
                    return -1
                return 1                                          # CMP-DIGIT-GREATER

        return 0                                                  # CMP-EQUAL

    def equal(self, a: DigitSequence, b: DigitSequence) -> bool:
        return self.compare(a, b) == 0

    def not_equal(self, a: DigitSequence, b: DigitSequence) -> bool:
        return self.compare(a, b) != 0

    def less_than(self, a: DigitSequence, b: DigitSequence) -> bool:
        return self.compare(a, b) < 0

    def less_or_equal(self, a: DigitSequence, b: DigitSequence) -> bool:
        return self.compare(a, b) <= 0

    def greater_than(self, a: DigitSequence, b: DigitSequence) -> bool:
        return self.compare(a, b) > 0

    def greater_or_equal(self, a: DigitSequence, b: DigitSequence) -> bool:
        return self.compare(a, b) >= 0

    # -- addition -----------------------------------------------------------

    def add(self, a: DigitSequence, b: DigitSequence) -> DigitSequence:
        """Sum of ``a`` and ``b`` in a new sequence.

        Each position sums two digits and the incoming carry; that fits
        in 33 bits, so the carry out is 0 or 1.  Once the shorter operand
        runs out its digits read as zero.

        Branches: ADD-CARRY-OUT, ADD-NO-CARRY-OUT, ADD-UNEVEN
        """
        logger.debug("add: %d + %d digits", len(a), len(b))
        total = DigitSequence()
        carry = 0

        # fillvalue pads the shorter operand                      # ADD-UNEVEN
        for da, db in zip_longest(a.least_to_most(), b.least_to_most(), fillvalue=0):
            block_sum = da + db + carry
            carry = block_sum >> BLOCK_SIZE
            total.append_most_significant(block_sum & BLOCK_MASK)

        if carry:                                                 # ADD-CARRY-OUT
            total.append_most_significant(carry)
        # (falls through) ADD-NO-CARRY-OUT
        return total

    # -- multiplication -----------------------------------------------------

    def multiply(self, a: DigitSequence, b: DigitSequence) -> DigitSequence:
        """Schoolbook product of ``a`` and ``b`` in a new sequence.

        One partial product per non-zero digit of ``a``, shifted into
        place and folded into the running total with ``add``.

        Branches: MUL-ZERO-OPERAND, MUL-SKIP-ZERO-DIGIT, MUL-PARTIAL
        """
        if a.is_zero or b.is_zero:                                # MUL-ZERO-OPERAND
            return DigitSequence()

        logger.debug("multiply: %d x %d digits", len(a), len(b))
        product = DigitSequence()

        for shift, digit in enumerate(a.least_to_most()):
            # A zero digit would only fold zeros into the total   # MUL-SKIP-ZERO-DIGIT
            if digit == 0:
                continue

            partial = self._partial_product(digit, b, shift)      # MUL-PARTIAL
            total = self.add(product, partial)
            product.release()
            partial.release()
            product = total

        return product

    def _partial_product(
        self, digit: int, b: DigitSequence, shift: int
    ) -> DigitSequence:
        """``digit * b`` shifted left by ``shift`` digit positions.

        Each position is a widened 32x32 -> 64 bit multiply plus carry,
        which never exceeds 2**64 - 1.

        Branches: MUL-PARTIAL-CARRY, MUL-PARTIAL-NO-CARRY
        """
        partial = DigitSequence()
        for _ in range(shift):
            partial.append_most_significant(0)

        carry = 0
        for db in b.least_to_most():
            block_product = digit * db + carry
            carry = block_product >> BLOCK_SIZE
            partial.append_most_significant(block_product & BLOCK_MASK)

        if carry:                                                 # MUL-PARTIAL-CARRY
            partial.append_most_significant(carry)
        # (falls through) MUL-PARTIAL-NO-CARRY
        return partial

    # -- exponentiation -----------------------------------------------------

    def power(self, a: DigitSequence, n: int) -> DigitSequence:
        """``a`` raised to the native integer exponent ``n``.

        ``n == 0`` gives 1 for every ``a``, zero included.

        Branches: POW-ZERO-EXP, POW-NEG-REJECT, POW-NEG-ONE,
                  POW-SQUARING, POW-REPEATED
        """
        if isinstance(n, bool) or not isinstance(n, int):
            raise TypeError(f"exponent must be an int, not {type(n).__name__}")
        # raises ReleasedValueError for a released base, even when n <= 0
        base_digits = len(a)

        if n < 0:
            if self.exponent_policy == ExponentPolicy.REJECT:     # POW-NEG-REJECT
                raise InvalidExponentError(
                    f"negative exponent {n} is not supported"
                )
            logger.debug("power: negative exponent %d gives 1", n)  # POW-NEG-ONE
            return DigitSequence.from_native(1)

        if n == 0:                                                # POW-ZERO-EXP
            return DigitSequence.from_native(1)

        logger.debug(
            "power: %d digits ** %d (%s)", base_digits, n, self.power_method.name
        )
        if self.power_method == PowerMethod.REPEATED:             # POW-REPEATED
            return self._power_repeated(a, n)
        return self._power_squaring(a, n)                         # POW-SQUARING

    def _power_repeated(self, a: DigitSequence, n: int) -> DigitSequence:
        result = DigitSequence.from_native(1)
        for _ in range(n):
            step = self.multiply(result, a)
            result.release()
            result = step
        return result

    def _power_squaring(self, a: DigitSequence, n: int) -> DigitSequence:
        result = DigitSequence.from_native(1)
        base = a.copy()

        while n:
            if n & 1:
                step = self.multiply(result, base)
                result.release()
                result = step
            n >>= 1
            if n:
                squared = self.multiply(base, base)
                base.release()
                base = squared

        base.release()
        return result
