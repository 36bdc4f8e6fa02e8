"""
Public API for ANOVA on fitted linear models.

    anova(model)                 sequential (Type I) table
    drop1(model, scope='all')    single-term deletion F tests
    compare_models(small, big)   F test between two nested models

All three work from models fitted with lm(), which keep the term list,
dataset and response needed to refit sub-models.
"""

import logging

import numpy as np

from pylinmod.core.result import Result
from pylinmod.core.compute.timing import timed
from pylinmod.core.exceptions import (
    ConfigError,
    DimensionError,
    DistributionalError,
)
from pylinmod.regression.solution import LinearSolution
from pylinmod.anova._common import (
    AnovaParams,
    Drop1Params,
    ModelComparison,
    f_test,
)
from pylinmod.anova._sequential import compute_ss_sequential
from pylinmod.anova._drop1 import compute_drop1
from pylinmod.anova.solution import AnovaSolution, Drop1Solution

logger = logging.getLogger(__name__)


def _check_model(model: LinearSolution, what: str) -> None:
    if model.spec is None:
        raise ConfigError(
            f"{what} needs a model fitted with lm(); this model was fitted "
            "from raw arrays and carries no term list",
            identifier='model',
        )
    _check_df(model, what)


def _check_df(model: LinearSolution, what: str) -> None:
    if model.df_residual <= 0:
        raise DistributionalError(
            f"Cannot compute {what}: residual degrees of freedom is "
            f"{model.df_residual}, need at least 1 (n={model.n}, rank={model.rank})",
            df_residual=model.df_residual,
        )


def _total_ss(model: LinearSolution) -> float:
    """SS of the response around its mean, or Σy² without an intercept."""
    y = model.dataset.response(model.response)
    if model.has_intercept:
        y = y - y.mean()
    return float(y @ y)


def anova(model: LinearSolution, *, n_jobs: int = 1) -> AnovaSolution:
    """
    Sequential analysis of variance.

    Adds the model's terms one at a time in declared order and attributes
    to each the drop in RSS it causes, tested against the full model's
    residual mean square.

    Args:
        model: Fitted model from lm()
        n_jobs: Concurrent nested fits (1 = sequential, -1 = all cores)

    Returns:
        AnovaSolution with one row per term plus a Residuals row

    Raises:
        ConfigError: Model was not fitted with lm()
        DistributionalError: Full model has no residual degrees of freedom

    Examples:
        >>> model = lm(TermList.intercept_only().cross('group', 'x'), data, 'y')
        >>> print(anova(model).summary())
    """
    _check_model(model, 'ANOVA')

    with timed() as timer:
        rows = compute_ss_sequential(model, n_jobs=n_jobs)

    params = AnovaParams(
        table=tuple(rows),
        n_obs=model.n,
        response=model.response,
        has_intercept=model.has_intercept,
        total_ss=_total_ss(model),
        residual_df=model.df_residual,
        residual_ss=model.rss,
        residual_ms=model.rss / model.df_residual,
    )
    result = Result(
        params=params,
        info={
            'ss_type': 1,
            'n_fits': len(model.spec.terms),
            'n_jobs': n_jobs,
        },
        timing=timer.result(),
        backend_name=model.backend_name,
        warnings=model.warnings,
    )
    return AnovaSolution(_result=result)


def drop1(
    model: LinearSolution,
    *,
    scope: str = 'all',
    n_jobs: int = 1,
) -> Drop1Solution:
    """
    Single-term deletion F tests.

    Each tested term is removed, the reduced model is rebuilt and refitted,
    and its RSS is compared with the full model. Unlike anova(), results do
    not depend on term order.

    Args:
        model: Fitted model from lm()
        scope: 'all' tests every term; 'marginal' only terms that are not
            contained in a higher-order term (R's drop.scope)
        n_jobs: Concurrent reduced fits

    Returns:
        Drop1Solution with a ``<none>`` row followed by one row per term

    Raises:
        ConfigError: Model not fitted with lm(), or unknown scope
        DistributionalError: Full model has no residual degrees of freedom
    """
    _check_model(model, 'drop1')

    with timed() as timer:
        rows = compute_drop1(model, scope=scope, n_jobs=n_jobs)

    params = Drop1Params(
        table=tuple(rows),
        n_obs=model.n,
        response=model.response,
        scope=scope,
        residual_df=model.df_residual,
        residual_ss=model.rss,
    )
    result = Result(
        params=params,
        info={'n_fits': len(rows) - 1, 'n_jobs': n_jobs},
        timing=timer.result(),
        backend_name=model.backend_name,
        warnings=model.warnings,
    )
    return Drop1Solution(_result=result)


def compare_models(
    reduced: LinearSolution,
    full: LinearSolution,
) -> ModelComparison:
    """
    F test of a reduced model against a larger model on the same response.

    The caller is responsible for the models being nested; only the
    response and rank ordering are checked.

    Raises:
        DimensionError: Models fitted on different numbers of observations
        ConfigError: Different responses, or reduced has larger rank
        DistributionalError: Full model has no residual degrees of freedom
    """
    if reduced.n != full.n:
        raise DimensionError(
            f"Models have different numbers of observations: {reduced.n} vs {full.n}"
        )
    if reduced.response is not None and full.response is not None:
        same = reduced.response == full.response
    else:
        y_red = reduced.fitted_values + reduced.residuals
        y_full = full.fitted_values + full.residuals
        same = np.allclose(y_red, y_full)
    if not same:
        raise ConfigError(
            "Models were fitted to different responses", identifier='response'
        )

    df = full.rank - reduced.rank
    if df < 0:
        raise ConfigError(
            f"reduced model has larger rank than full model "
            f"({reduced.rank} > {full.rank})",
            identifier='reduced',
        )
    _check_df(full, 'model comparison')

    ss = reduced.rss - full.rss
    f_val, p_val = f_test(ss, df, full.rss, full.df_residual)
    logger.debug("compare_models: df=%d, SS=%g, F=%s", df, ss, f_val)

    return ModelComparison(
        df_reduced=reduced.df_residual,
        rss_reduced=reduced.rss,
        df_full=full.df_residual,
        rss_full=full.rss,
        df=df,
        sum_sq=ss,
        f_value=f_val,
        p_value=p_val,
    )
