"""Machine-readable contract for the big-number engine.

For every operation the contract records what a valid input looks like,
what the result must satisfy, which inputs must raise and which
algebraic laws hold across calls.  Python's own ``int`` is the
reference model: every postcondition compares a BigNum result against
the exact integer answer.

The contract is data.  The conformance tests and the
counterexample search iterate over it instead of restating it.

Layers
------
OperationContract   pre/post/error/properties of one operation
BranchPoint         a decision point white-box tests must reach
EngineContract      all operations plus branches for one configuration
build_contract()    builds the EngineContract for a configuration
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from bignum import (
    BigNum,
    add,
    equal,
    greater_or_equal,
    greater_than,
    less_or_equal,
    less_than,
    multiply,
    not_equal,
    power,
)
from digits import BLOCK_MASK, BLOCK_SIZE, NATIVE_MAX
from engine import Engine, ExponentPolicy, InvalidExponentError, PowerMethod


# ---------------------------------------------------------------------------
# Contract building blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Precondition:
    name: str
    description: str
    check: Callable[..., bool]


@dataclass(frozen=True)
class Postcondition:
    name: str
    description: str
    check: Callable[..., bool]


@dataclass(frozen=True)
class ErrorCondition:
    name: str
    description: str
    trigger: Callable[..., bool]
    exception: type


@dataclass(frozen=True)
class AlgebraicProperty:
    name: str
    description: str
    arity: int          # how many BigNum inputs the check needs
    check: Callable[..., bool]


@dataclass(frozen=True)
class OperationContract:
    name: str
    preconditions: list[Precondition]
    postconditions: list[Postcondition]
    error_conditions: list[ErrorCondition]
    properties: list[AlgebraicProperty]


@dataclass(frozen=True)
class BranchPoint:
    """A branch in digits/engine code that white-box tests must hit."""

    id: str
    description: str
    condition: str      # the branch condition, as readable text
    operation: str      # owning operation or helper


@dataclass(frozen=True)
class EngineContract:
    """Complete contract for a configured engine."""

    exponent_policy: ExponentPolicy
    power_method: PowerMethod
    operations: dict[str, OperationContract]
    branches: list[BranchPoint]

    @property
    def engine(self) -> Engine:
        return Engine(self.exponent_policy, self.power_method)

    @property
    def all_properties(self) -> list[tuple[str, AlgebraicProperty]]:
        """(operation name, property) for every operation."""
        return [
            (name, prop)
            for name, op in self.operations.items()
            for prop in op.properties
        ]

    @property
    def all_postconditions(self) -> list[tuple[str, Postcondition]]:
        return [
            (name, post)
            for name, op in self.operations.items()
            for post in op.postconditions
        ]

    def branch_ids(self) -> set[str]:
        return {b.id for b in self.branches}


# ---------------------------------------------------------------------------
# Helpers used inside the contract predicates
# ---------------------------------------------------------------------------

def is_canonical(num: BigNum) -> bool:
    """No most significant zero digit, and every digit in range."""
    digits = num.digits
    if digits and digits[-1] == 0:
        return False
    return all(0 <= d <= BLOCK_MASK for d in digits)


def sign(x: int) -> int:
    return (x > 0) - (x < 0)


def from_reference(value: int) -> BigNum:
    """BigNum equal to any non-negative ``int``, native range or not."""
    if value < 0:
        raise ValueError(f"{value} is negative")
    digits = []
    while value:
        digits.append(value & BLOCK_MASK)
        value >>= BLOCK_SIZE
    return BigNum.from_digits(digits)


# Exponent pairs used by the exponent-law property.
EXPONENT_PAIRS = ((0, 0), (0, 3), (1, 1), (2, 3), (4, 1))


# ---------------------------------------------------------------------------
# Contract builder
# ---------------------------------------------------------------------------

def build_contract(
    exponent_policy: ExponentPolicy = ExponentPolicy.REJECT,
    power_method: PowerMethod = PowerMethod.SQUARING,
) -> EngineContract:
    """Construct the full engine contract for a configuration."""

    canonical_operands = Precondition(
        "operands_canonical",
        "Both operands are canonical BigNums",
        lambda a, b: is_canonical(a) and is_canonical(b),
    )
    canonical_result = Postcondition(
        "result_canonical",
        "Result has no most significant zero digit",
        lambda a, b, result: is_canonical(result),
    )

    # ------------------------------------------------------------ construct
    construct_contract = OperationContract(
        name="construct",
        preconditions=[
            Precondition(
                "value_native",
                "Value fits an unsigned 64-bit native integer",
                lambda v: 0 <= v <= NATIVE_MAX,
            ),
        ],
        postconditions=[
            Postcondition(
                "round_trip",
                "int(construct(v)) == v",
                lambda v, result: int(result) == v,
            ),
            Postcondition(
                "zero_is_empty",
                "construct(0) has no digits; any other value has 1 or 2",
                lambda v, result: (
                    result.count == 0 if v == 0 else result.count in (1, 2)
                ),
            ),
            Postcondition(
                "result_canonical",
                "Result has no most significant zero digit",
                lambda v, result: is_canonical(result),
            ),
        ],
        error_conditions=[
            ErrorCondition(
                "out_of_native_range",
                "ValueError for values outside [0, 2**64 - 1]",
                lambda v: not 0 <= v <= NATIVE_MAX,
                ValueError,
            ),
        ],
        properties=[],
    )

    # -------------------------------------------------------------- compare
    comparisons = (
        ("equal", equal, lambda x, y: x == y),
        ("not_equal", not_equal, lambda x, y: x != y),
        ("less_than", less_than, lambda x, y: x < y),
        ("less_or_equal", less_or_equal, lambda x, y: x <= y),
        ("greater_than", greater_than, lambda x, y: x > y),
        ("greater_or_equal", greater_or_equal, lambda x, y: x >= y),
    )
    compare_contract = OperationContract(
        name="compare",
        preconditions=[canonical_operands],
        postconditions=[
            Postcondition(
                "three_way_correct",
                "compare(a, b) == sign(int(a) - int(b))",
                lambda a, b, result: result == sign(int(a) - int(b)),
            ),
        ],
        error_conditions=[],
        properties=[
            AlgebraicProperty(
                "relations_match_reference",
                "All six relations agree with int comparison", 2,
                lambda eng, a, b: all(
                    fn(a, b, eng) == ref(int(a), int(b))
                    for _, fn, ref in comparisons
                ),
            ),
            AlgebraicProperty(
                "trichotomy",
                "Exactly one of a < b, a == b, a > b", 2,
                lambda eng, a, b: [
                    less_than(a, b, eng),
                    equal(a, b, eng),
                    greater_than(a, b, eng),
                ].count(True) == 1,
            ),
            AlgebraicProperty(
                "le_is_lt_or_eq",
                "a <= b iff a < b or a == b", 2,
                lambda eng, a, b: less_or_equal(a, b, eng) == (
                    less_than(a, b, eng) or equal(a, b, eng)
                ),
            ),
            AlgebraicProperty(
                "antisymmetry",
                "compare(a, b) == -compare(b, a)", 2,
                lambda eng, a, b: a.compare(b, eng) == -b.compare(a, eng),
            ),
            AlgebraicProperty(
                "digit_count_ordering",
                "More digits always compares greater", 2,
                lambda eng, a, b: (
                    a.count == b.count
                    or greater_than(a, b, eng) == (a.count > b.count)
                ),
            ),
        ],
    )

    # ------------------------------------------------------------------ add
    add_contract = OperationContract(
        name="add",
        preconditions=[canonical_operands],
        postconditions=[
            Postcondition(
                "result_correct",
                "int(add(a, b)) == int(a) + int(b)",
                lambda a, b, result: int(result) == int(a) + int(b),
            ),
            canonical_result,
            Postcondition(
                "result_length",
                "len is max(len a, len b) or one more",
                lambda a, b, result: (
                    result.count - max(a.count, b.count) in (0, 1)
                ),
            ),
        ],
        error_conditions=[],
        properties=[
            AlgebraicProperty(
                "identity", "add(a, 0) == a", 1,
                lambda eng, a: add(a, BigNum(0), eng) == a,
            ),
            AlgebraicProperty(
                "commutativity", "add(a, b) == add(b, a)", 2,
                lambda eng, a, b: add(a, b, eng) == add(b, a, eng),
            ),
            AlgebraicProperty(
                "associativity", "add(add(a, b), c) == add(a, add(b, c))", 3,
                lambda eng, a, b, c: (
                    add(add(a, b, eng), c, eng) == add(a, add(b, c, eng), eng)
                ),
            ),
            AlgebraicProperty(
                "monotone", "add(a, b) >= a", 2,
                lambda eng, a, b: greater_or_equal(add(a, b, eng), a, eng),
            ),
        ],
    )

    # ------------------------------------------------------------- multiply
    multiply_contract = OperationContract(
        name="multiply",
        preconditions=[canonical_operands],
        postconditions=[
            Postcondition(
                "result_correct",
                "int(multiply(a, b)) == int(a) * int(b)",
                lambda a, b, result: int(result) == int(a) * int(b),
            ),
            canonical_result,
        ],
        error_conditions=[],
        properties=[
            AlgebraicProperty(
                "identity", "multiply(a, 1) == a", 1,
                lambda eng, a: multiply(a, BigNum(1), eng) == a,
            ),
            AlgebraicProperty(
                "zero", "multiply(a, 0) == 0", 1,
                lambda eng, a: multiply(a, BigNum(0), eng) == BigNum(0),
            ),
            AlgebraicProperty(
                "commutativity", "multiply(a, b) == multiply(b, a)", 2,
                lambda eng, a, b: multiply(a, b, eng) == multiply(b, a, eng),
            ),
            AlgebraicProperty(
                "distributivity",
                "multiply(a, add(b, c)) == add(multiply(a, b), multiply(a, c))", 3,
                lambda eng, a, b, c: (
                    multiply(a, add(b, c, eng), eng)
                    == add(multiply(a, b, eng), multiply(a, c, eng), eng)
                ),
            ),
        ],
    )

    # ---------------------------------------------------------------- power
    power_contract = OperationContract(
        name="power",
        preconditions=[
            Precondition(
                "base_canonical",
                "Base is a canonical BigNum",
                lambda a, n: is_canonical(a),
            ),
        ],
        postconditions=[
            Postcondition(
                "result_correct",
                "int(power(a, n)) == int(a) ** n, or 1 for negative n under ONE",
                lambda a, n, result: (
                    int(result) == (int(a) ** n if n >= 0 else 1)
                ),
            ),
            canonical_result,
        ],
        error_conditions=[
            ErrorCondition(
                "negative_exponent",
                "InvalidExponentError for n < 0 under REJECT",
                lambda a, n: (
                    n < 0 and exponent_policy == ExponentPolicy.REJECT
                ),
                InvalidExponentError,
            ),
        ],
        properties=[
            AlgebraicProperty(
                "zero_exponent", "power(a, 0) == 1, including a == 0", 1,
                lambda eng, a: power(a, 0, eng) == BigNum(1),
            ),
            AlgebraicProperty(
                "exponent_addition",
                "power(a, m + n) == multiply(power(a, m), power(a, n))", 1,
                lambda eng, a: all(
                    power(a, m + n, eng)
                    == multiply(power(a, m, eng), power(a, n, eng), eng)
                    for m, n in EXPONENT_PAIRS
                ),
            ),
        ],
    )

    # -------------------------------------------------------------- branches
    branches = [
        # Digit layer
        BranchPoint(
            "DIGIT-VALID",
            "Digit accepted",
            "0 <= d <= 2**32 - 1",
            "digits",
        ),
        BranchPoint(
            "DIGIT-INVALID",
            "ValueError for a digit out of range",
            "d < 0 or d > 2**32 - 1",
            "digits",
        ),
        BranchPoint(
            "CONSTRUCT-ZERO",
            "Zero constructs the empty sequence",
            "v == 0",
            "construct",
        ),
        BranchPoint(
            "CONSTRUCT-ONE-DIGIT",
            "Value fits one digit",
            "0 < v < 2**32",
            "construct",
        ),
        BranchPoint(
            "CONSTRUCT-TWO-DIGITS",
            "Value needs two digits",
            "v >= 2**32",
            "construct",
        ),
        # Comparison
        BranchPoint(
            "CMP-COUNT-LESS",
            "Fewer digits compares less",
            "len(a) < len(b)",
            "compare",
        ),
        BranchPoint(
            "CMP-COUNT-GREATER",
            "More digits compares greater",
            "len(a) > len(b)",
            "compare",
        ),
        BranchPoint(
            "CMP-DIGIT-LESS",
            "First differing digit (from the top) is smaller in a",
            "len(a) == len(b) and a[k] < b[k]",
            "compare",
        ),
        BranchPoint(
            "CMP-DIGIT-GREATER",
            "First differing digit (from the top) is larger in a",
            "len(a) == len(b) and a[k] > b[k]",
            "compare",
        ),
        BranchPoint(
            "CMP-EQUAL",
            "No digit differs",
            "a == b digit for digit",
            "compare",
        ),
        # Addition
        BranchPoint(
            "ADD-CARRY-OUT",
            "Final carry appended as a new most significant digit",
            "carry == 1 after the last position",
            "add",
        ),
        BranchPoint(
            "ADD-NO-CARRY-OUT",
            "No final carry",
            "carry == 0 after the last position",
            "add",
        ),
        BranchPoint(
            "ADD-UNEVEN",
            "Shorter operand padded with zero digits",
            "len(a) != len(b)",
            "add",
        ),
        # Multiplication
        BranchPoint(
            "MUL-ZERO-OPERAND",
            "Either operand is zero, result zero with no partials",
            "len(a) == 0 or len(b) == 0",
            "multiply",
        ),
        BranchPoint(
            "MUL-SKIP-ZERO-DIGIT",
            "Zero digit of a contributes no partial product",
            "a[i] == 0",
            "multiply",
        ),
        BranchPoint(
            "MUL-PARTIAL",
            "Partial product folded into the running total",
            "a[i] != 0",
            "multiply",
        ),
        BranchPoint(
            "MUL-PARTIAL-CARRY",
            "Partial product ends with a carry digit",
            "carry != 0 after the last digit of b",
            "multiply",
        ),
        BranchPoint(
            "MUL-PARTIAL-NO-CARRY",
            "Partial product ends without a carry digit",
            "carry == 0 after the last digit of b",
            "multiply",
        ),
        # Exponentiation
        BranchPoint(
            "POW-ZERO-EXP",
            "Zero exponent gives 1",
            "n == 0",
            "power",
        ),
        BranchPoint(
            "POW-NEG-REJECT",
            "InvalidExponentError on a negative exponent",
            "n < 0 and policy == REJECT",
            "power",
        ),
        BranchPoint(
            "POW-NEG-ONE",
            "Negative exponent gives 1",
            "n < 0 and policy == ONE",
            "power",
        ),
        BranchPoint(
            "POW-SQUARING",
            "Square-and-multiply",
            "n > 0 and method == SQUARING",
            "power",
        ),
        BranchPoint(
            "POW-REPEATED",
            "Repeated multiplication",
            "n > 0 and method == REPEATED",
            "power",
        ),
    ]

    return EngineContract(
        exponent_policy=exponent_policy,
        power_method=power_method,
        operations={
            "construct": construct_contract,
            "compare": compare_contract,
            "add": add_contract,
            "multiply": multiply_contract,
            "power": power_contract,
        },
        branches=branches,
    )
