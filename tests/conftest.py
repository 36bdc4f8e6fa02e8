"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pylinmod.core.config import reset_options
from pylinmod.data import Dataset


@pytest.fixture(autouse=True)
def _clean_options(monkeypatch):
    """Every test starts from built-in defaults."""
    for var in ('PYLINMOD_RANK_POLICY', 'PYLINMOD_RANK_TOL', 'PYLINMOD_CONDITION_LIMIT'):
        monkeypatch.delenv(var, raising=False)
    reset_options()
    yield
    reset_options()


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def simple_regression_data(rng):
    """Simple regression dataset for basic tests."""
    n, p = 100, 3
    X = rng.standard_normal((n, p))
    beta_true = np.array([1.0, -2.0, 0.5])
    y = X @ beta_true + rng.standard_normal(n) * 0.1
    return X, y, beta_true


@pytest.fixture
def collinear_data(rng):
    """Dataset with perfect collinearity: x2 = x0 + x1."""
    n = 100
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)
    x3 = x1 + x2  # Perfect collinearity
    X = np.column_stack([x1, x2, x3])
    y = rng.standard_normal(n)
    return X, y


@pytest.fixture
def grouped_data(rng):
    """
    Unbalanced 3-level factor with two correlated covariates.

    group sizes 15/20/25; x depends on group, z is correlated with x, and
    the slope of x differs in group B.
    """
    sizes = {'A': 15, 'B': 20, 'C': 25}
    group = np.concatenate([[g] * k for g, k in sizes.items()])
    n = len(group)
    shift = np.select([group == 'B', group == 'C'], [1.0, -0.5], 0.0)
    x = rng.normal(5.0, 2.0, n) + shift
    z = 0.6 * x + rng.normal(0.0, 1.0, n)
    y = (
        3.0 + 2.0 * shift + 1.5 * x - 0.8 * z
        + 0.7 * x * (group == 'B')
        + rng.normal(0.0, 1.0, n)
    )
    return Dataset.from_columns(
        numeric={'y': y, 'x': x, 'z': z},
        categorical={'group': group},
    )
