"""Shared fixtures for the fieldelim test suite."""

import random

import numpy as np
import pytest

from fieldelim.field import QQ, PrimeField


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "perf: wall-clock checks on large eliminations (run with -m perf)",
    )


@pytest.fixture
def seeded_rng(request: pytest.FixtureRequest) -> int:
    """Make random matrix construction reproducible.

    Random test matrices are drawn with the stdlib ``random`` module; numpy is
    seeded as well so any array-level sampling repeats. Pass a seed through
    indirect parametrization to override the default of 42.
    """
    seed = getattr(request, "param", 42)
    random.seed(seed)
    np.random.seed(seed)
    return seed


@pytest.fixture
def qq():
    return QQ


@pytest.fixture
def gf7():
    return PrimeField(7)
