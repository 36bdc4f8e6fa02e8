"""
Single-term deletion tests.

Every term is removed in turn and the reduced model is rebuilt from
scratch, so a factor that loses its margin picks up the coding it would
have in a model written without that term. Each reduced model is compared
with the same full model:

    df  = rank(full) - rank(reduced)
    SS  = RSS(reduced) - RSS(full)
    F   = (SS / df) / (RSS(full) / df_res(full))

Results depend only on the set of terms, not their order.
"""

import logging

from pylinmod.anova._common import NONE_ROW, Drop1Row, f_test
from pylinmod.core.compute.parallel import parallel_map
from pylinmod.core.exceptions import ConfigError
from pylinmod.design.terms import Term
from pylinmod.regression.solution import LinearSolution
from pylinmod.regression.solvers import refit, refit_warnings_silenced

logger = logging.getLogger(__name__)

SCOPES = ('all', 'marginal')


def drop_scope(model: LinearSolution, scope: str) -> list[Term]:
    """
    Terms eligible for deletion.

    'all' tests every term; 'marginal' only terms not contained in a
    higher-order term of the model.
    """
    terms = model.spec.terms
    if scope == 'all':
        return list(terms)
    if scope == 'marginal':
        return terms.marginal_terms()
    raise ConfigError(
        f"scope must be one of {list(SCOPES)}, got {scope!r}",
        identifier=str(scope),
    )


def compute_drop1(
    model: LinearSolution,
    scope: str = 'all',
    n_jobs: int = 1,
) -> list[Drop1Row]:
    """
    Deletion table: a ``<none>`` row for the full model, then one row per
    tested term in model order.
    """
    spec = model.spec
    tested = drop_scope(model, scope)

    def _fit(term: Term) -> LinearSolution:
        return refit(spec, spec.terms.remove(term), rank_policy='mark')

    with refit_warnings_silenced():
        reduced = parallel_map(_fit, tested, n_jobs=n_jobs)
    logger.debug("drop1: %d reduced fits, scope=%s (n_jobs=%d)", len(reduced), scope, n_jobs)

    rows = [Drop1Row(
        term=NONE_ROW,
        df=None,
        sum_sq=None,
        rss=model.rss,
        aic=model.aic,
        f_value=None,
        p_value=None,
    )]
    for term, red in zip(tested, reduced):
        df = model.rank - red.rank
        ss = red.rss - model.rss
        f_val, p_val = f_test(ss, df, model.rss, model.df_residual)
        rows.append(Drop1Row(
            term=term.name,
            df=df,
            sum_sq=ss,
            rss=red.rss,
            aic=red.aic,
            f_value=f_val,
            p_value=p_val,
        ))
    return rows
