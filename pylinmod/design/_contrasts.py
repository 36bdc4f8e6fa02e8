"""
Factor coding.

Handles the translation from a categorical variable to numeric columns.

Key concepts:
    - Treatment coding: L-1 indicator columns, the reference level dropped
    - Indicator coding: all L indicator columns (no intercept, or forced)
    - Interaction: elementwise products of every column combination
    - CODINGS: registry of coding schemes; other contrast schemes
      (sum-to-zero, polynomial) plug in here
"""

import logging
import warnings
from dataclasses import dataclass
from typing import Any, Callable

import numpy as np
from numpy.typing import NDArray

from pylinmod.core.exceptions import ConfigError, DegenerateFactorWarning
from pylinmod.data.variables import CategoricalVariable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FactorEncoding:
    """
    Encoded columns of one factor.

    Attributes:
        columns: (n, k) float64 indicator matrix
        column_labels: one level label per column
        levels: active levels of the factor, in order
        reference: the suppressed level, or None for indicator coding
        degenerate: True when the factor has a single observed level and
            treatment coding left it without columns
    """
    columns: NDArray[np.floating[Any]]
    column_labels: tuple[str, ...]
    levels: tuple[str, ...]
    reference: str | None
    degenerate: bool = False

    @property
    def n_columns(self) -> int:
        return self.columns.shape[1]


def _indicators(variable: CategoricalVariable, levels: tuple[str, ...]) -> NDArray:
    X = np.zeros((variable.n, len(levels)), dtype=np.float64)
    for j, level in enumerate(levels):
        X[:, j] = (variable.labels == level).astype(np.float64)
    return X


def encode_treatment(
    variable: CategoricalVariable,
    reference: Any = None,
) -> FactorEncoding:
    """
    Treatment (dummy) coding for a single factor.

    Drops the reference level and creates L-1 indicator columns, one per
    other level, 1 where the observation has that level and 0 otherwise.

    Args:
        variable: The factor
        reference: Reference level label; defaults to the variable's own
            reference

    Returns:
        FactorEncoding with L-1 columns

    Raises:
        ConfigError: If reference is not an observed level
    """
    ref_idx = variable.reference if reference is None else variable.level_index(reference)
    baseline = variable.levels[ref_idx]
    contrasts = tuple(lev for lev in variable.levels if lev != baseline)

    degenerate = variable.n_levels == 1
    if degenerate:
        warnings.warn(
            f"{variable.name}: single observed level {baseline!r}; "
            f"its main effect has no columns",
            DegenerateFactorWarning,
            stacklevel=3,
        )

    return FactorEncoding(
        columns=_indicators(variable, contrasts),
        column_labels=contrasts,
        levels=variable.levels,
        reference=baseline,
        degenerate=degenerate,
    )


def encode_indicator(
    variable: CategoricalVariable,
    reference: Any = None,
) -> FactorEncoding:
    """
    Indicator coding: one column per active level.

    ``reference`` is accepted for signature compatibility and validated,
    but no level is dropped.
    """
    if reference is not None:
        variable.level_index(reference)
    return FactorEncoding(
        columns=_indicators(variable, variable.levels),
        column_labels=variable.levels,
        levels=variable.levels,
        reference=None,
    )


CODINGS: dict[str, Callable[..., FactorEncoding]] = {
    'treatment': encode_treatment,
    'indicator': encode_indicator,
}


def encode(
    variable: CategoricalVariable,
    coding: str = 'treatment',
    reference: Any = None,
) -> FactorEncoding:
    """
    Encode a factor with a registered coding scheme.

    Raises:
        ConfigError: Unknown coding or unobserved reference level
    """
    try:
        encoder = CODINGS[coding]
    except KeyError:
        raise ConfigError(
            f"Unknown coding {coding!r}; available: {sorted(CODINGS)}",
            identifier=coding,
        ) from None
    return encoder(variable, reference)


def relevel(variable: CategoricalVariable, new_reference: Any) -> CategoricalVariable:
    """
    Return the same factor with a different reference level.

    Observations keep their levels; only the suppressed level changes.

    Raises:
        ConfigError: If new_reference is not an observed level
    """
    idx = variable.level_index(new_reference)
    logger.debug("relevel %s: %r -> %r", variable.name,
                 variable.reference_level, variable.levels[idx])
    return CategoricalVariable(
        name=variable.name,
        labels=variable.labels,
        levels=variable.levels,
        reference=idx,
    )


def interaction_columns(
    X_a: NDArray, X_b: NDArray,
) -> NDArray:
    """
    Compute interaction columns as the element-wise product of all
    column pairs from X_a and X_b (columns of X_a vary slowest).

    Args:
        X_a: (n, p_a) columns for the first variable(s)
        X_b: (n, p_b) columns for the next variable

    Returns:
        (n, p_a * p_b) interaction columns
    """
    n = X_a.shape[0]
    return (X_a[:, :, None] * X_b[:, None, :]).reshape(n, X_a.shape[1] * X_b.shape[1])
