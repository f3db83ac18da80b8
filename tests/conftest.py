"""Shared fixtures for big-number tests."""
from __future__ import annotations

import pytest

from engine import Engine, ExponentPolicy, PowerMethod


@pytest.fixture
def engine() -> Engine:
    return Engine()


@pytest.fixture
def engine_repeated() -> Engine:
    return Engine(ExponentPolicy.REJECT, PowerMethod.REPEATED)


@pytest.fixture
def engine_lenient() -> Engine:
    """Negative exponents give 1 instead of raising."""
    return Engine(ExponentPolicy.ONE, PowerMethod.SQUARING)
