"""Counterexample search over the engine contract.

Runs outside the test suite.  For one engine configuration it looks
for three kinds of failure:

1. postconditions: a result that disagrees with the reference ``int``
   answer or is not canonical;
2. error conditions: an input the contract says must raise that returns
   normally, or raises the wrong type;
3. algebraic properties: an input tuple for which a property is false.

Big numbers have no exhaustive domain, so inputs are a fixed set of
edge values (digit boundaries, carry triggers) plus seeded random
multi-digit samples.

Run directly::

    python -m validation.counterexample_search
"""
from __future__ import annotations

import itertools
import random
import sys
from dataclasses import dataclass, field
from typing import Any, Callable

sys.path.insert(0, ".")

from bignum import BigNum, add, construct, multiply, power
from contract import (
    EngineContract,
    ErrorCondition,
    Postcondition,
    build_contract,
    from_reference,
)
from digits import BLOCK_SIZE, NATIVE_MAX
from engine import Engine, ExponentPolicy, PowerMethod


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

@dataclass
class Counterexample:
    category: str
    operation: str
    inputs: tuple
    expected: str
    actual: str
    description: str

    def describe(self) -> str:
        return (
            f"{self.category} in {self.operation}{self.inputs}\n"
            f"    expected {self.expected}\n"
            f"    actual   {self.actual}\n"
            f"    {self.description}"
        )


@dataclass
class SearchReport:
    counterexamples: list[Counterexample] = field(default_factory=list)
    checks_run: int = 0

    @property
    def passed(self) -> bool:
        return not self.counterexamples

    def summary(self) -> str:
        head = (
            f"Total checks: {self.checks_run}, "
            f"counterexamples: {len(self.counterexamples)}"
        )
        if self.passed:
            return head + "\nNo counterexamples found."
        body = [f"[{i}] {cx.describe()}" for i, cx in enumerate(self.counterexamples, 1)]
        return "\n".join([head, *body])


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

B = 1 << BLOCK_SIZE

EDGE_VALUES = [
    0,
    1,
    2,
    B - 1,              # largest one-digit value
    B,                  # smallest two-digit value, digits [0, 1]
    B + 1,
    NATIVE_MAX,         # largest native value, digits [max, max]
    NATIVE_MAX + 1,     # digits [0, 0, 1]
    (B - 1) * B * B,    # digits [0, 0, max]
    B ** 3 - 1,         # digits [max, max, max]
]

NATIVE_EDGES = [0, 1, B - 1, B, NATIVE_MAX]
OUT_OF_RANGE = [-1, -B, NATIVE_MAX + 1, NATIVE_MAX * 3]
EXPONENTS = [-3, -1, 0, 1, 2, 3, 7]


def random_values(count: int, seed: int = 0, max_digits: int = 5) -> list[int]:
    """Random values with a random digit count, biased toward extreme digits."""
    rng = random.Random(seed)
    digit_choices = [0, 1, B - 1, B - 2]
    out = []
    for _ in range(count):
        value = 0
        for _ in range(rng.randint(0, max_digits)):
            if rng.random() < 0.3:
                digit = rng.choice(digit_choices)
            else:
                digit = rng.randrange(B)
            value = (value << BLOCK_SIZE) | digit
        out.append(value)
    return out


def sample_values(random_count: int = 20, seed: int = 0) -> list[int]:
    return EDGE_VALUES + random_values(random_count, seed)


# ---------------------------------------------------------------------------
# Operation table: maps contract operation names onto the engine
# ---------------------------------------------------------------------------

def binary_operations(engine: Engine) -> dict[str, Callable[[BigNum, BigNum], Any]]:
    return {
        "compare": lambda a, b: a.compare(b, engine),
        "add": lambda a, b: add(a, b, engine),
        "multiply": lambda a, b: multiply(a, b, engine),
    }


# ---------------------------------------------------------------------------
# Search functions
# ---------------------------------------------------------------------------

def _raised(op_name: str, inputs: tuple, exc: Exception, expected: str) -> Counterexample:
    return Counterexample(
        category="unexpected_error",
        operation=op_name,
        inputs=inputs,
        expected=expected,
        actual=f"{type(exc).__name__}: {exc}",
        description=f"{op_name} raised on valid inputs",
    )


def _failed_postconditions(
    op_name: str,
    inputs: tuple,
    posts: list[Postcondition],
    args: tuple,
    result: Any,
) -> list[Counterexample]:
    return [
        Counterexample(
            category="postcondition_violation",
            operation=op_name,
            inputs=inputs,
            expected=post.description,
            actual=f"got {result!r}",
            description=f"{op_name} breaks '{post.name}'",
        )
        for post in posts
        if not post.check(*args, result)
    ]


def search_postcondition_violations(
    engine: Engine,
    contract: EngineContract,
    values: list[int],
) -> tuple[list[Counterexample], int]:
    """Verify postconditions for every sampled input pair."""
    cxs: list[Counterexample] = []
    checks = 0

    construct_posts = contract.operations["construct"].postconditions
    for v in NATIVE_EDGES + values:
        if not 0 <= v <= NATIVE_MAX:
            continue
        checks += 1
        cxs += _failed_postconditions(
            "construct", (v,), construct_posts, (v,), construct(v)
        )

    for op_name, op in binary_operations(engine).items():
        posts = contract.operations[op_name].postconditions
        for a, b in itertools.product(values, repeat=2):
            checks += 1
            x, y = from_reference(a), from_reference(b)
            try:
                result = op(x, y)
            except Exception as e:
                cxs.append(_raised(op_name, (a, b), e, "a result"))
                continue
            cxs += _failed_postconditions(op_name, (a, b), posts, (x, y), result)

    power_contract = contract.operations["power"]
    for a, n in itertools.product(values, EXPONENTS):
        x = from_reference(a)
        if any(ec.trigger(x, n) for ec in power_contract.error_conditions):
            continue  # covered by the error-condition search
        checks += 1
        try:
            result = power(x, n, engine)
        except Exception as e:
            cxs.append(_raised("power", (a, n), e, "a result"))
            continue
        cxs += _failed_postconditions(
            "power", (a, n), power_contract.postconditions, (x, n), result
        )

    return cxs, checks


def _expect_error(
    op_name: str,
    inputs: tuple,
    ec: ErrorCondition,
    call: Callable[[], Any],
) -> Counterexample | None:
    wanted = ec.exception.__name__
    try:
        result = call()
    except ec.exception:
        return None
    except Exception as e:
        return Counterexample(
            category="wrong_error",
            operation=op_name,
            inputs=inputs,
            expected=wanted,
            actual=f"{type(e).__name__}: {e}",
            description=f"'{ec.name}' raised the wrong exception type",
        )
    return Counterexample(
        category="missing_error",
        operation=op_name,
        inputs=inputs,
        expected=wanted,
        actual=f"returned {result!r}",
        description=f"'{ec.name}' applies but nothing was raised",
    )


def search_error_condition_violations(
    engine: Engine,
    contract: EngineContract,
    values: list[int],
) -> tuple[list[Counterexample], int]:
    """Each triggered error condition must raise its declared exception."""
    found: list[Counterexample | None] = []

    for v in OUT_OF_RANGE:
        for ec in contract.operations["construct"].error_conditions:
            if ec.trigger(v):
                found.append(
                    _expect_error("construct", (v,), ec, lambda: construct(v))
                )

    for a, n in itertools.product(values, EXPONENTS):
        x = from_reference(a)
        for ec in contract.operations["power"].error_conditions:
            if ec.trigger(x, n):
                found.append(
                    _expect_error("power", (a, n), ec, lambda: power(x, n, engine))
                )

    return [cx for cx in found if cx is not None], len(found)


def search_property_violations(
    engine: Engine,
    contract: EngineContract,
    values: list[int],
) -> tuple[list[Counterexample], int]:
    """Check every algebraic property over all sampled input tuples."""
    cxs: list[Counterexample] = []
    checks = 0
    nums = {v: from_reference(v) for v in values}

    for op_name, prop in contract.all_properties:
        # triples grow fast; the edge values alone cover the carries
        domain = EDGE_VALUES if prop.arity == 3 else values
        for combo in itertools.product(domain, repeat=prop.arity):
            checks += 1
            try:
                holds = prop.check(engine, *(nums[v] for v in combo))
            except Exception as e:
                cxs.append(_raised(op_name, combo, e, prop.description))
                continue
            if not holds:
                cxs.append(Counterexample(
                    category="property_violation",
                    operation=op_name,
                    inputs=combo,
                    expected=prop.description,
                    actual="does not hold",
                    description=f"{op_name} breaks property '{prop.name}'",
                ))

    return cxs, checks


# ---------------------------------------------------------------------------
# Top-level runner
# ---------------------------------------------------------------------------

SEARCHES = (
    search_postcondition_violations,
    search_error_condition_violations,
    search_property_violations,
)


def run_search(
    exponent_policy: ExponentPolicy,
    power_method: PowerMethod,
    random_count: int = 20,
    seed: int = 0,
    engine: Engine | None = None,
) -> SearchReport:
    """Run the complete counterexample search for one configuration.

    ``engine`` overrides the engine under test; by default it is the one
    the configuration describes.
    """
    contract = build_contract(exponent_policy, power_method)
    engine = engine or contract.engine
    values = sample_values(random_count, seed)
    report = SearchReport()

    for search in SEARCHES:
        cxs, checks = search(engine, contract, values)
        report.counterexamples += cxs
        report.checks_run += checks

    return report


def main() -> None:
    """Search every exponent policy / power method combination."""
    failed = []
    for policy, method in itertools.product(ExponentPolicy, PowerMethod):
        name = f"{policy.name} / {method.name}"
        print(f"\n=== {name} ===")
        report = run_search(policy, method)
        print(report.summary())
        if not report.passed:
            failed.append(name)

    print("\n" + "=" * 40)
    if failed:
        print(f"Counterexamples under: {', '.join(failed)}")
        sys.exit(1)
    print("No counterexamples under any configuration")


if __name__ == "__main__":
    main()
