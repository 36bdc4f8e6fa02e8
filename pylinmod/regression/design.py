"""
Regression Design.

Pairs a design matrix with a response vector. Built either from raw
arrays (``fit(X, y)``) or from a DesignMatrix assembled from a TermList
and a Dataset (``lm(terms, dataset, 'y')``); in the second case the model
specification is kept so that ANOVA and deletion tests can refit
sub-models of it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence
import numpy as np
from numpy.typing import NDArray

from pylinmod.core.compute.linalg import QRResult, qr_limited_pivot
from pylinmod.core.exceptions import ConfigError
from pylinmod.core.validation import (
    check_2d,
    check_1d,
    check_consistent_length,
    check_finite,
)
from pylinmod.data.dataset import Dataset
from pylinmod.design.builder import DesignMatrix
from pylinmod.design.terms import TermList


@dataclass(frozen=True)
class ModelSpec:
    """
    Everything needed to rebuild a model from its parts.

    Attributes:
        terms: Ordered model terms
        dataset: Source dataset
        response: Name of the numeric response variable
        coding: Forced factor codings, if any
        tol: Rank tolerance used for the design
        condition_limit: Largest cond(R) the model was fitted under
    """
    terms: TermList
    dataset: Dataset
    response: str
    coding: Mapping[str, str] | None = None
    tol: float | None = None
    condition_limit: float | None = None


@dataclass(frozen=True, eq=False)
class RegressionDesign:
    """
    Validated regression inputs.

    Immutable after construction.

    Construction:
        RegressionDesign.build(X, y)                     # raw arrays
        RegressionDesign.from_model_matrix(mm, y, spec)  # term-based
    """
    X: NDArray[np.floating[Any]]
    y: NDArray[np.floating[Any]]
    n: int
    p: int
    column_names: tuple[str, ...]
    qr: QRResult
    has_intercept: bool
    model_matrix: DesignMatrix | None = None
    spec: ModelSpec | None = None

    @classmethod
    def build(
        cls,
        X: NDArray,
        y: NDArray,
        *,
        column_names: Sequence[str] | None = None,
        tol: float,
    ) -> RegressionDesign:
        """Build from arrays, computing the rank-revealing QR."""
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if y.ndim == 2 and y.shape[1] == 1:
            y = y.ravel()

        check_2d(X, 'X')
        check_1d(y, 'y')
        check_consistent_length(X, y, names=('X', 'y'))
        check_finite(X, 'X')
        check_finite(y, 'y')

        n, p = X.shape
        if column_names is None:
            column_names = tuple(f"x{j}" for j in range(p))
        elif len(column_names) != p:
            raise ConfigError(
                f"column_names has {len(column_names)} entries, X has {p} columns",
                identifier='column_names',
            )

        # A constant non-zero column means deviations are measured from the mean
        has_intercept = False
        if n and p:
            constant = np.all(X == X[0], axis=0) & (X[0] != 0)
            has_intercept = bool(np.any(constant))

        return cls(
            X=X,
            y=y,
            n=n,
            p=p,
            column_names=tuple(column_names),
            qr=qr_limited_pivot(X, tol),
            has_intercept=has_intercept,
        )

    @classmethod
    def from_model_matrix(
        cls,
        model_matrix: DesignMatrix,
        y: NDArray,
        spec: ModelSpec | None = None,
    ) -> RegressionDesign:
        """Build from an assembled DesignMatrix; reuses its QR."""
        check_1d(y, 'y')
        check_consistent_length(model_matrix.X, y, names=('X', 'y'))
        check_finite(y, 'y')
        return cls(
            X=model_matrix.X,
            y=y,
            n=model_matrix.n,
            p=model_matrix.p,
            column_names=model_matrix.column_names,
            qr=model_matrix.qr,
            has_intercept=model_matrix.has_intercept,
            model_matrix=model_matrix,
            spec=spec,
        )

    @property
    def rank(self) -> int:
        return self.qr.rank
