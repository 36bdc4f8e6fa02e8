"""
Common data types for ANOVA.

Contains the frozen parameter payloads that go inside Result[P] envelopes.
Each payload is a pure data container with no computation.
"""

from dataclasses import dataclass

from scipy import stats as sp_stats

RESIDUALS = 'Residuals'
NONE_ROW = '<none>'


@dataclass(frozen=True)
class AnovaTableRow:
    """One row of a sequential ANOVA table (one term or residuals)."""
    term: str
    df: int
    sum_sq: float
    mean_sq: float | None    # None when df == 0
    f_value: float | None    # None for Residuals and df == 0 rows
    p_value: float | None    # None for Residuals and df == 0 rows


@dataclass(frozen=True)
class AnovaParams:
    """Parameter payload for sequential (Type I) ANOVA."""
    table: tuple[AnovaTableRow, ...]
    n_obs: int
    response: str
    has_intercept: bool
    total_ss: float                 # around the mean, or Σy² without intercept
    residual_df: int
    residual_ss: float
    residual_ms: float


@dataclass(frozen=True)
class Drop1Row:
    """
    One row of a single-term deletion table.

    The ``<none>`` row describes the full model and carries no test.
    """
    term: str
    df: int | None
    sum_sq: float | None
    rss: float
    aic: float
    f_value: float | None
    p_value: float | None


@dataclass(frozen=True)
class Drop1Params:
    """Parameter payload for single-term deletion tests."""
    table: tuple[Drop1Row, ...]
    n_obs: int
    response: str
    scope: str                      # 'all' or 'marginal'
    residual_df: int
    residual_ss: float


@dataclass(frozen=True)
class ModelComparison:
    """F test of a reduced model against a full model that nests it."""
    df_reduced: int                 # residual df of the reduced model
    rss_reduced: float
    df_full: int
    rss_full: float
    df: int                         # rank(full) - rank(reduced)
    sum_sq: float                   # rss_reduced - rss_full
    f_value: float | None
    p_value: float | None


def f_test(
    ss: float,
    df: int,
    rss_error: float,
    df_error: int,
) -> tuple[float | None, float | None]:
    """F statistic and p-value of an extra sum of squares."""
    if df <= 0 or df_error <= 0 or rss_error <= 0:
        return None, None

    ms = ss / df
    ms_error = rss_error / df_error
    f_val = ms / ms_error
    p_val = float(sp_stats.f.sf(f_val, df, df_error))
    return float(f_val), p_val
