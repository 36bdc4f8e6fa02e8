"""
pylinmod: linear models with categorical predictors.

Declared datasets, programmatic term lists, R-compatible treatment coding,
rank-revealing least squares and sequential / single-term-deletion ANOVA.

Submodules:
    data: Typed variables and datasets
    design: Terms, factor coding and design matrices
    regression: Least squares fitting
    anova: Sequential ANOVA, drop1 and model comparison
"""

__version__ = "0.1.0"

from pylinmod.core import (
    get_option,
    set_option,
    reset_options,
    PyLinModError,
    ValidationError,
    DimensionError,
    ConfigError,
    NumericalError,
    SingularMatrixError,
    RankDeficiencyError,
    DistributionalError,
    DegenerateFactorWarning,
)
from pylinmod.data import Dataset, center
from pylinmod.design import TermList, build_design_matrix
from pylinmod.regression import fit, lm
from pylinmod.anova import anova, compare_models, drop1

__all__ = [
    "__version__",
    "Dataset",
    "center",
    "TermList",
    "build_design_matrix",
    "fit",
    "lm",
    "anova",
    "drop1",
    "compare_models",
    "get_option",
    "set_option",
    "reset_options",
    "PyLinModError",
    "ValidationError",
    "DimensionError",
    "ConfigError",
    "NumericalError",
    "SingularMatrixError",
    "RankDeficiencyError",
    "DistributionalError",
    "DegenerateFactorWarning",
]
