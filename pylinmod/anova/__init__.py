"""
Analysis of variance for fitted linear models.

Public API:
    anova(model, n_jobs=1) -> AnovaSolution
    drop1(model, scope='all', n_jobs=1) -> Drop1Solution
    compare_models(reduced, full) -> ModelComparison
"""

from pylinmod.anova._common import (
    AnovaTableRow,
    Drop1Row,
    ModelComparison,
)
from pylinmod.anova.solvers import anova, compare_models, drop1
from pylinmod.anova.solution import AnovaSolution, Drop1Solution

__all__ = [
    "anova",
    "drop1",
    "compare_models",
    "AnovaSolution",
    "Drop1Solution",
    "AnovaTableRow",
    "Drop1Row",
    "ModelComparison",
]
