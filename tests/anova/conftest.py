"""
Shared fixtures for ANOVA tests.
"""

import numpy as np
import pytest

from pylinmod.data import Dataset


@pytest.fixture
def twoway_balanced():
    """2x3 balanced factorial, 10 replicates per cell."""
    rng = np.random.default_rng(42)
    a = np.repeat(['a1', 'a2'], 30)
    b = np.tile(np.repeat(['b1', 'b2', 'b3'], 10), 2)
    effect = (
        np.where(a == 'a2', 2.0, 0.0)
        + np.select([b == 'b2', b == 'b3'], [1.0, 3.0], 0.0)
    )
    y = 10.0 + effect + rng.normal(0.0, 1.0, 60)
    return Dataset.from_columns(numeric={'y': y}, categorical={'A': a, 'B': b})


def make_slopes_data(seed: int, interaction: float = 0.0) -> Dataset:
    """Two-level factor and a covariate; the slope in B is shifted by ``interaction``."""
    rng = np.random.default_rng(seed)
    n = 40
    g = np.array(['A', 'B'] * (n // 2))
    x = rng.normal(0.0, 1.0, n)
    y = 1.0 + 0.5 * (g == 'B') + 1.2 * x + interaction * x * (g == 'B') + rng.normal(0.0, 1.0, n)
    return Dataset.from_columns(numeric={'y': y, 'x': x}, categorical={'g': g})


@pytest.fixture
def slopes_data():
    return make_slopes_data(7)


@pytest.fixture
def make_slopes():
    return make_slopes_data
