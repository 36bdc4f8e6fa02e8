"""
Fitted linear models.

LinearParams is what a backend computes; LinearSolution layers inference
(covariance, t and F tests, intervals, AIC) and printing on top of it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray
from scipy import stats

from pylinmod.core.result import Result
from pylinmod.core.exceptions import DistributionalError

if TYPE_CHECKING:
    from pylinmod.data.dataset import Dataset
    from pylinmod.design.builder import DesignMatrix
    from pylinmod.design.terms import TermList
    from pylinmod.regression.design import ModelSpec, RegressionDesign


@dataclass(frozen=True)
class LinearParams:
    """
    Backend output for one least squares fit. Inestimable
    coefficients are NaN and flagged in ``aliased``; their rows and columns
    of ``cov_unscaled`` are NaN as well.
    """
    coefficients: NDArray[np.floating[Any]]
    aliased: NDArray[np.bool_]
    residuals: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    cov_unscaled: NDArray[np.floating[Any]]
    rss: float
    tss: float
    rank: int
    df_residual: int


@dataclass(frozen=True)
class CoefficientRow:
    """One line of the coefficient table."""
    name: str
    estimate: float
    std_error: float
    t_value: float
    p_value: float
    estimable: bool


@dataclass
class LinearSolution:
    """
    A fitted linear model.

    Point estimates, fitted values and residuals are always available.
    Anything that needs the residual variance (covariance, standard errors,
    t and p values, confidence intervals, F test) raises
    DistributionalError when there are no residual degrees of freedom.
    """
    _result: Result[LinearParams]
    _design: RegressionDesign

    # Cached computations
    _standard_errors: NDArray[np.floating[Any]] | None = field(default=None, repr=False)
    _t_statistics: NDArray[np.floating[Any]] | None = field(default=None, repr=False)

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.coefficients

    @property
    def aliased(self) -> NDArray[np.bool_]:
        """Boolean mask of inestimable coefficients."""
        return self._result.params.aliased

    @property
    def aliased_names(self) -> tuple[str, ...]:
        return tuple(
            name for name, a in zip(self.column_names, self.aliased) if a
        )

    @property
    def column_names(self) -> tuple[str, ...]:
        return self._design.column_names

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        return self._result.params.residuals

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fitted_values

    @property
    def rss(self) -> float:
        return self._result.params.rss

    @property
    def tss(self) -> float:
        return self._result.params.tss

    @property
    def n(self) -> int:
        return self._design.n

    @property
    def p(self) -> int:
        return self._design.p

    @property
    def has_intercept(self) -> bool:
        return self._design.has_intercept

    @property
    def r_squared(self) -> float:
        if self.tss == 0:
            return 1.0 if self.rss == 0 else 0.0
        return 1.0 - (self.rss / self.tss)

    @property
    def adjusted_r_squared(self) -> float:
        n = self._design.n
        df = self.df_residual
        df_int = 1 if self.has_intercept else 0
        if df <= 0 or self.tss == 0:
            return self.r_squared
        return 1.0 - (1.0 - self.r_squared) * (n - df_int) / df

    def _require_df(self, what: str) -> int:
        df = self.df_residual
        if df <= 0:
            raise DistributionalError(
                f"Cannot compute {what}: residual degrees of freedom is {df}, "
                f"need at least 1 (n={self.n}, rank={self.rank})",
                df_residual=df,
            )
        return df

    @property
    def sigma(self) -> float:
        """Residual standard error, sqrt(RSS / (n - rank))."""
        df = self._require_df('residual standard error')
        return float(np.sqrt(self.rss / df))

    @property
    def residual_std_error(self) -> float:
        return self.sigma

    @property
    def covariance(self) -> NDArray[np.floating[Any]]:
        """
        Coefficient covariance matrix σ²·R⁻¹R⁻ᵀ.

        Rows and columns of aliased coefficients are NaN.
        """
        df = self._require_df('coefficient covariance')
        return (self.rss / df) * self._result.params.cov_unscaled

    @property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        """
        Coefficient standard errors.

        Computed as SE(β) = sqrt(diag(σ² R⁻¹R⁻ᵀ)). Aliased coefficients
        get NaN standard errors.
        """
        if self._standard_errors is None:
            self._standard_errors = np.sqrt(np.diag(self.covariance))
        return self._standard_errors

    @property
    def t_statistics(self) -> NDArray[np.floating[Any]]:
        """Estimate divided by standard error; NaN where inestimable."""
        if self._t_statistics is not None:
            return self._t_statistics

        se = self.standard_errors
        with np.errstate(divide='ignore', invalid='ignore'):
            t = self.coefficients / se
            t = np.where(np.isfinite(t), t, np.nan)
        self._t_statistics = t
        return self._t_statistics

    @property
    def p_values(self) -> NDArray[np.floating[Any]]:
        """Two-sided p-values against Student-t(n - rank)."""
        df = self._require_df('p-values')
        t = self.t_statistics
        return 2.0 * stats.t.sf(np.abs(t), df)

    def conf_int(self, level: float = 0.95) -> NDArray[np.floating[Any]]:
        """
        Confidence intervals for the coefficients.

        Returns:
            (p, 2) array of lower and upper bounds; NaN for aliased
            coefficients
        """
        if not 0.0 < level < 1.0:
            raise ValueError(f"level must be in (0, 1), got {level}")
        df = self._require_df('confidence intervals')
        q = stats.t.ppf(0.5 + level / 2.0, df)
        half = q * self.standard_errors
        return np.column_stack([self.coefficients - half, self.coefficients + half])

    @property
    def f_df(self) -> tuple[int, int]:
        """Numerator and denominator df of the overall F test."""
        df_int = 1 if self.has_intercept else 0
        return self.rank - df_int, self.df_residual

    @property
    def f_statistic(self) -> float | None:
        """
        Overall F statistic against the intercept-only model (or the empty
        model when there is no intercept). None when the model has no
        terms beyond the intercept.
        """
        df1, df2 = self.f_df
        self._require_df('F statistic')
        if df1 <= 0:
            return None
        mss = self.tss - self.rss
        return float((mss / df1) / (self.rss / df2))

    @property
    def f_p_value(self) -> float | None:
        f = self.f_statistic
        if f is None:
            return None
        df1, df2 = self.f_df
        return float(stats.f.sf(f, df1, df2))

    @property
    def aic(self) -> float:
        """AIC on the extractAIC scale: n log(RSS/n) + 2 rank."""
        return _extract_aic(self.n, self.rss, self.rank)

    def coefficient_table(self) -> list[CoefficientRow]:
        se = self.standard_errors
        t = self.t_statistics
        pv = self.p_values
        return [
            CoefficientRow(
                name=name,
                estimate=float(self.coefficients[j]),
                std_error=float(se[j]),
                t_value=float(t[j]),
                p_value=float(pv[j]),
                estimable=not bool(self.aliased[j]),
            )
            for j, name in enumerate(self.column_names)
        ]

    @property
    def rank(self) -> int:
        return self._result.params.rank

    @property
    def df_residual(self) -> int:
        return self._result.params.df_residual

    # Model specification, present when fitted through lm()

    @property
    def spec(self) -> ModelSpec | None:
        return self._design.spec

    @property
    def model_matrix(self) -> DesignMatrix | None:
        return self._design.model_matrix

    @property
    def terms(self) -> TermList | None:
        return self.spec.terms if self.spec is not None else None

    @property
    def dataset(self) -> Dataset | None:
        return self.spec.dataset if self.spec is not None else None

    @property
    def response(self) -> str | None:
        return self.spec.response if self.spec is not None else None

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        """Generate R-style summary output."""
        lines = [
            "Linear Regression Results",
            "=" * 72,
        ]
        if self.spec is not None:
            lines.append(f"Model: {self.spec.response} ~ {self.spec.terms!r}")
        lines += [
            f"Observations: {self.n}",
            f"Columns: {self.p}",
            f"Rank: {self.rank}",
            "",
        ]

        has_df = self.df_residual > 0
        width = max([len(c) for c in self.column_names] + [11])
        lines.append(
            f"{'':<{width}} {'Estimate':>12} {'Std.Error':>12} "
            f"{'t value':>9} {'Pr(>|t|)':>10}"
        )
        lines.append("-" * 72)
        se = self.standard_errors if has_df else None
        t = self.t_statistics if has_df else None
        pv = self.p_values if has_df else None
        for j, name in enumerate(self.column_names):
            if self.aliased[j]:
                lines.append(f"{name:<{width}} {'NA':>12} {'NA':>12} {'NA':>9} {'NA':>10}")
                continue
            coef = self.coefficients[j]
            if se is None:
                lines.append(f"{name:<{width}} {coef:12.6f} {'NaN':>12} {'NaN':>9} {'NaN':>10}")
            else:
                lines.append(
                    f"{name:<{width}} {coef:12.6f} {se[j]:12.6f} "
                    f"{t[j]:9.3f} {pv[j]:10.4g}"
                )
        lines.append("-" * 72)

        n_aliased = int(np.sum(self.aliased))
        if n_aliased:
            lines.append(
                f"Coefficients: ({n_aliased} not defined because of singularities)"
            )
        if has_df:
            lines.append(
                f"Residual standard error: {self.sigma:.6g} on {self.df_residual} DF"
            )
            lines.append(
                f"Multiple R-squared: {self.r_squared:.6f}, "
                f"Adjusted R-squared: {self.adjusted_r_squared:.6f}"
            )
            f = self.f_statistic
            if f is not None:
                df1, df2 = self.f_df
                lines.append(
                    f"F-statistic: {f:.6g} on {df1} and {df2} DF, "
                    f"p-value: {self.f_p_value:.4g}"
                )
        else:
            lines.append("Residual standard error: NaN on 0 DF")
        lines.append(f"Backend: {self.backend_name}")
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"LinearSolution(n={self._design.n}, p={self._design.p}, "
            f"rank={self.rank}, r_squared={self.r_squared:.4f})"
        )


def _extract_aic(n: int, rss: float, rank: int) -> float:
    with np.errstate(divide='ignore'):
        return float(n * np.log(rss / n) + 2 * rank)
