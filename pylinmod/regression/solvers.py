"""
Entry points for least squares: fit() on raw arrays, lm() on a term list
and a dataset, and refit() for the sub-models ANOVA needs.
"""

import warnings
from contextlib import contextmanager
from typing import Iterator, Literal, Mapping, Sequence
from numpy.typing import ArrayLike

from pylinmod.core.config import get_option
from pylinmod.core.exceptions import ConfigError, DegenerateFactorWarning
from pylinmod.core.validation import check_array
from pylinmod.data.dataset import Dataset
from pylinmod.design.builder import build_design_matrix
from pylinmod.design.terms import TermList
from pylinmod.regression.design import ModelSpec, RegressionDesign
from pylinmod.regression.solution import LinearSolution
from pylinmod.regression.backends.cpu import CPUQRBackend


BackendChoice = Literal['auto', 'cpu', 'cpu_qr']


def fit(
    X: ArrayLike,
    y: ArrayLike,
    *,
    column_names: Sequence[str] | None = None,
    backend: BackendChoice = 'auto',
    rank_policy: str | None = None,
    tol: float | None = None,
    condition_limit: float | None = None,
) -> LinearSolution:
    """
    Least squares fit of y on the columns of X, min_β ||y - Xβ||².

    No intercept is added; include a column of ones in X if one is wanted.

    Args:
        X: (n, p) numeric array-like
        y: (n,) numeric array-like
        column_names: Names of the columns of X (default x0, x1, ...)
        backend: 'auto', 'cpu' or 'cpu_qr' (all the QR backend)
        rank_policy: 'mark' keeps going with NaN coefficients for aliased
            columns; 'error' raises RankDeficiencyError
        tol: Relative rank tolerance of the limited-pivot QR
        condition_limit: Largest acceptable cond(R)

    Returns:
        LinearSolution

    Raises:
        ValidationError: Non-numeric input
        DimensionError: X not 2D, y not 1D, or row counts differ
        NumericalError: Non-finite inputs or cond(R) above the limit
        RankDeficiencyError: Rank-deficient X under rank_policy='error'

    Example:
        >>> X = np.column_stack([np.ones(50), rng.normal(size=50)])
        >>> fit(X, X @ [1.0, 2.0] + rng.normal(size=50)).coefficients
    """
    X_arr = check_array(X, 'X')
    y_arr = check_array(y, 'y')

    design = RegressionDesign.build(
        X_arr, y_arr,
        column_names=column_names,
        tol=get_option('rank_tol', tol),
    )

    backend_impl = _get_backend(backend, rank_policy, condition_limit)
    result = backend_impl.solve(design)
    return LinearSolution(_result=result, _design=design)


def lm(
    terms: TermList,
    dataset: Dataset,
    response: str,
    *,
    coding: Mapping[str, str] | None = None,
    backend: BackendChoice = 'auto',
    rank_policy: str | None = None,
    tol: float | None = None,
    condition_limit: float | None = None,
) -> LinearSolution:
    """
    Fit a linear model described by a term list.

    Builds the design matrix from ``terms`` and ``dataset`` and solves
    against the numeric variable ``response``. The returned solution keeps
    the term list, dataset and response so that anova() and drop1() can
    refit sub-models.

    Args:
        terms: Ordered model terms
        dataset: Declared variables
        response: Name of a numeric variable in ``dataset``
        coding: Optional {factor: 'treatment' | 'indicator'}
        backend, rank_policy, tol, condition_limit: as for fit()

    Raises:
        ConfigError: Undeclared or non-numeric response, response used as
            a predictor, undeclared variable, unknown coding
        NumericalError: Non-finite encoded values or cond(R) above the limit
        RankDeficiencyError: Rank-deficient design under rank_policy='error'

    Example:
        >>> terms = TermList.intercept_only().add_main('group').add_main('x')
        >>> model = lm(terms, data, 'y')
        >>> model.coefficient_table()
    """
    y = dataset.response(response)
    if response in terms.variables:
        raise ConfigError(
            f"Response {response!r} also appears among the predictors",
            identifier=response,
        )

    tol = get_option('rank_tol', tol)
    condition_limit = get_option('condition_limit', condition_limit)
    model_matrix = build_design_matrix(terms, dataset, coding=coding, tol=tol)
    spec = ModelSpec(
        terms=terms,
        dataset=dataset,
        response=response,
        coding=dict(coding) if coding else None,
        tol=tol,
        condition_limit=condition_limit,
    )
    design = RegressionDesign.from_model_matrix(model_matrix, y, spec)

    backend_impl = _get_backend(backend, rank_policy, condition_limit)
    result = backend_impl.solve(design)
    return LinearSolution(_result=result, _design=design)


def refit(spec: ModelSpec, terms: TermList, **kwargs) -> LinearSolution:
    """Fit ``terms`` with everything else taken from an existing model."""
    kwargs.setdefault('condition_limit', spec.condition_limit)
    return lm(
        terms, spec.dataset, spec.response,
        coding=spec.coding, tol=spec.tol, **kwargs,
    )


@contextmanager
def refit_warnings_silenced() -> Iterator[None]:
    """
    Ignore DegenerateFactorWarning for the duration of a batch of refits.

    The warning was already issued when the full model was fitted. Filters
    are process-wide, so enter this around the whole batch in the calling
    thread, not inside worker threads.
    """
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', DegenerateFactorWarning)
        yield


def _get_backend(
    choice: BackendChoice,
    rank_policy: str | None,
    condition_limit: float | None,
):
    """
    Resolve options and build the solver for ``choice``.

    Raises:
        ValueError: Unknown backend name
        ConfigError: Invalid rank_policy or condition_limit
    """
    rank_policy = get_option('rank_policy', rank_policy)
    condition_limit = get_option('condition_limit', condition_limit)

    if choice in ('auto', 'cpu', 'cpu_qr'):
        return CPUQRBackend(rank_policy, condition_limit)
    raise ValueError(f"Unknown backend: {choice!r}")
