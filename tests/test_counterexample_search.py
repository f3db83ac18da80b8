"""Tests for the counterexample search tool.

A correct engine must come back clean under every configuration, and a
deliberately broken engine must be caught with a concrete counterexample.
"""
from __future__ import annotations

import pytest

from digits import BLOCK_MASK, BLOCK_SIZE, DigitSequence
from engine import Engine, ExponentPolicy, PowerMethod
from validation.counterexample_search import (
    EDGE_VALUES,
    SearchReport,
    random_values,
    run_search,
)


class DroppedCarryEngine(Engine):
    """Addition that forgets the final carry."""

    def add(self, a, b):
        total = super().add(a, b)
        if len(total) > max(len(a), len(b)):
            digits = list(total.least_to_most())[:-1]
            while digits and digits[-1] == 0:
                digits.pop()
            return DigitSequence.from_digits(digits)
        return total


class LenientEngine(Engine):
    """Returns 1 for negative exponents while claiming to reject them."""

    def power(self, a, n):
        if isinstance(n, int) and n < 0:
            return DigitSequence.from_native(1)
        return super().power(a, n)


class TestCleanSearch:

    @pytest.mark.parametrize("policy", list(ExponentPolicy))
    @pytest.mark.parametrize("method", list(PowerMethod))
    def test_no_counterexamples(self, policy, method):
        report = run_search(policy, method, random_count=4, seed=1)
        assert report.passed, report.summary()
        assert report.checks_run > 0

    def test_summary_when_clean(self):
        report = run_search(
            ExponentPolicy.REJECT, PowerMethod.SQUARING, random_count=0
        )
        assert "No counterexamples found" in report.summary()


class TestBrokenEngines:

    def test_dropped_carry_found(self):
        report = run_search(
            ExponentPolicy.REJECT,
            PowerMethod.SQUARING,
            random_count=0,
            engine=DroppedCarryEngine(),
        )
        assert not report.passed
        categories = {cx.category for cx in report.counterexamples}
        assert "postcondition_violation" in categories
        assert any(
            cx.operation == "add" and cx.inputs == (BLOCK_MASK, 1)
            for cx in report.counterexamples
        )

    def test_missing_error_found(self):
        report = run_search(
            ExponentPolicy.REJECT,
            PowerMethod.SQUARING,
            random_count=0,
            engine=LenientEngine(),
        )
        assert not report.passed
        missing = [
            cx for cx in report.counterexamples if cx.category == "missing_error"
        ]
        assert missing
        assert all(cx.operation == "power" for cx in missing)
        assert "InvalidExponentError" in report.summary()


class TestInputs:

    def test_random_values_are_seeded(self):
        assert random_values(10, seed=3) == random_values(10, seed=3)

    def test_random_values_bounded(self):
        for v in random_values(50, seed=0, max_digits=3):
            assert 0 <= v < 1 << (3 * BLOCK_SIZE)

    def test_edge_values_cover_digit_boundaries(self):
        assert 0 in EDGE_VALUES
        assert BLOCK_MASK in EDGE_VALUES
        assert BLOCK_MASK + 1 in EDGE_VALUES


def test_empty_report_passes():
    report = SearchReport()
    assert report.passed
    assert "Total checks: 0" in report.summary()
