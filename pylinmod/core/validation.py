"""
Boundary checks for user input.

Public entry points (fit, lm, Dataset constructors) run these once;
everything downstream trusts its inputs. A check either passes silently or
raises with the offending name and the actual value in the message. Nothing
is coerced beyond turning array-likes into float64 arrays.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any

from pylinmod.core.exceptions import (
    ValidationError,
    DimensionError,
    NumericalError,
)


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Turn numeric input into a float64 array.

    Kinds are declared, so a string or boolean column handed in as numeric
    is an error rather than something to reinterpret.

    Raises:
        ValidationError: Input is not numeric
    """
    try:
        arr = np.asarray(array)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name}: not convertible to an array ({e})") from e

    if arr.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )
    if arr.dtype == np.bool_ or not np.issubdtype(arr.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {arr.dtype}, expected numbers"
        )
    return arr.astype(np.float64, copy=False)


def check_labels(labels: ArrayLike, name: str) -> NDArray[np.str_]:
    """
    Convert categorical labels to a 1D array of strings.

    Args:
        labels: Label sequence (strings, integers, anything with str())
        name: Variable name for error messages

    Raises:
        DimensionError: If labels are not 1-dimensional
    """
    arr = np.asarray(labels)
    if arr.ndim != 1:
        raise DimensionError(
            f"{name}: expected 1D labels, got {arr.ndim}D with shape {arr.shape}"
        )
    return np.array([str(v) for v in arr], dtype=str)


def check_finite(
    array: NDArray[np.floating[Any]],
    name: str,
    term: str | None = None,
) -> None:
    """
    Reject NaN and infinite entries.

    Args:
        array: Values to inspect
        name: Matrix or vector name ('X', 'y')
        term: Model term the values belong to, if any

    Raises:
        NumericalError: carrying ``matrix_name`` and ``term``
    """
    finite = np.isfinite(array)
    if finite.all():
        return
    nans = int(np.isnan(array).sum())
    infs = int(np.isinf(array).sum())
    where = f" (term {term!r})" if term is not None else ""
    raise NumericalError(
        f"{name}{where}: contains non-finite values ({nans} NaN, {infs} Inf)",
        matrix_name=name,
        term=term,
    )


def check_ndim(array: NDArray[np.floating[Any]], ndim: int, name: str) -> None:
    """
    Raises:
        DimensionError: ``array.ndim != ndim``
    """
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_1d(array: NDArray[np.floating[Any]], name: str) -> None:
    check_ndim(array, 1, name)


def check_2d(array: NDArray[np.floating[Any]], name: str) -> None:
    check_ndim(array, 2, name)


def check_consistent_length(
    *arrays: NDArray[np.floating[Any]],
    names: tuple[str, ...]
) -> None:
    """
    Require a common number of rows.

    Args:
        *arrays: Arrays to compare on their first axis
        names: One name per array, used in the message

    Raises:
        ValueError: ``names`` and ``arrays`` differ in length
        DimensionError: Row counts differ
    """
    if len(names) != len(arrays):
        raise ValueError(
            f"got {len(arrays)} arrays but {len(names)} names"
        )
    rows = {name: arr.shape[0] for name, arr in zip(names, arrays)}
    if len(set(rows.values())) > 1:
        details = ", ".join(f"{k}={v}" for k, v in rows.items())
        raise DimensionError(f"Inconsistent lengths: {details}")
