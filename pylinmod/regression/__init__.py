"""
Linear regression.

Public API:
    fit(X, y, ...) -> LinearSolution
    lm(terms, dataset, response, ...) -> LinearSolution
"""

from pylinmod.regression.design import ModelSpec, RegressionDesign
from pylinmod.regression.solution import CoefficientRow, LinearParams, LinearSolution
from pylinmod.regression.solvers import fit, lm

__all__ = [
    "fit",
    "lm",
    "LinearSolution",
    "LinearParams",
    "CoefficientRow",
    "ModelSpec",
    "RegressionDesign",
]
