"""
Parallel map over independent fits.

Nested fits of a sequential ANOVA and the reduced fits of a deletion test
share read-only inputs and never mutate shared state, so they can run
side by side. When ``n_jobs != 1`` the work is spread with
``joblib.Parallel(prefer="threads")``: LAPACK releases the GIL during the
factorizations, and threads avoid copying the dataset into worker
processes. Results always come back in input order.
"""

from typing import Callable, Iterable, TypeVar

from joblib import Parallel, delayed

T = TypeVar('T')
R = TypeVar('R')


def parallel_map(
    func: Callable[[T], R],
    items: Iterable[T],
    n_jobs: int = 1,
) -> list[R]:
    """
    Apply ``func`` to every item, optionally in parallel.

    Args:
        func: Pure function of one item
        items: Inputs
        n_jobs: 1 runs a plain loop; any other value is passed to joblib
            (-1 uses every core)

    Returns:
        List of results in the order of ``items``
    """
    items = list(items)
    if n_jobs == 1 or len(items) < 2:
        return [func(item) for item in items]
    return list(Parallel(n_jobs=n_jobs, prefer="threads")(
        delayed(func)(item) for item in items
    ))
