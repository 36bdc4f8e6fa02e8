"""
Sequential (Type I) sums of squares.

Terms enter one at a time in declared order. Each nested model
M0 ⊂ M1 ⊂ ... ⊂ Mk is rebuilt from its term prefix and fitted through
lm(), so rank, coding and aliasing of every step are exactly what a user
would get fitting that prefix directly:

    SS(term_i) = RSS(M_{i-1}) - RSS(M_i)
    df(term_i) = rank(M_i) - rank(M_{i-1})

M0 is the intercept-only model, or the empty model (RSS = Σy²) when the
full model has no intercept. The attribution depends on term order for
correlated terms; the partition Σ SS + RSS(Mk) = RSS(M0) does not.
"""

import logging

from pylinmod.anova._common import RESIDUALS, AnovaTableRow, f_test
from pylinmod.core.compute.parallel import parallel_map
from pylinmod.regression.solution import LinearSolution
from pylinmod.regression.solvers import refit, refit_warnings_silenced

logger = logging.getLogger(__name__)


def nested_fits(model: LinearSolution, n_jobs: int = 1) -> list[LinearSolution]:
    """
    Fit M0 .. M_{k-1}; the full model itself closes the sequence.

    The nested fits are independent and may run concurrently.
    """
    spec = model.spec
    terms = spec.terms

    def _fit(k: int) -> LinearSolution:
        return refit(spec, terms.prefix(k), rank_policy='mark')

    with refit_warnings_silenced():
        fits = parallel_map(_fit, range(len(terms)), n_jobs=n_jobs)
    logger.debug("anova: %d nested fits for %r (n_jobs=%d)", len(fits), terms, n_jobs)
    return fits + [model]


def compute_ss_sequential(
    model: LinearSolution,
    n_jobs: int = 1,
) -> list[AnovaTableRow]:
    """
    Sequential ANOVA table of a fitted model.

    Returns one row per term in declared order followed by the
    Residuals row. Rows with df == 0 carry no mean square, F or p.
    """
    fits = nested_fits(model, n_jobs=n_jobs)
    rss_full = model.rss
    df_full = model.df_residual

    rows: list[AnovaTableRow] = []
    for term, prev, cur in zip(model.spec.terms, fits[:-1], fits[1:]):
        ss = prev.rss - cur.rss
        df = cur.rank - prev.rank
        f_val, p_val = f_test(ss, df, rss_full, df_full)
        rows.append(AnovaTableRow(
            term=term.name,
            df=df,
            sum_sq=ss,
            mean_sq=ss / df if df > 0 else None,
            f_value=f_val,
            p_value=p_val,
        ))

    rows.append(AnovaTableRow(
        term=RESIDUALS,
        df=df_full,
        sum_sq=rss_full,
        mean_sq=rss_full / df_full,
        f_value=None,
        p_value=None,
    ))
    return rows
