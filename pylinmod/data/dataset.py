"""
Dataset: named, typed columns of equal length.

Dataset is the "I have data" abstraction for model building. It knows
which variables are numeric and which are categorical because the caller
said so; it does not know which model will be built from it.

Usage:
    from pylinmod import Dataset

    ds = Dataset.from_columns(
        numeric={'y': y, 'age': age},
        categorical={'group': group},
        reference={'group': 'control'},
    )
    ds = Dataset.from_dataframe(df, numeric=['y', 'age'], categorical=['group'])

    ds['group'].levels       # ('control', 'drug')
    ds.relevel('group', 'drug')
    ds.center('age')
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Sequence, TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pylinmod.core.exceptions import ConfigError, DimensionError
from pylinmod.data.variables import (
    CategoricalVariable,
    NumericVariable,
    Variable,
)

if TYPE_CHECKING:
    import pandas as pd


@dataclass(frozen=True)
class Dataset:
    """
    Immutable collection of declared variables.

    Construct via factory classmethods, not directly. Transforms
    (relevel, center) return new datasets.
    """
    _variables: dict[str, Variable]
    n: int
    _metadata: dict[str, Any] = field(default_factory=dict)

    # === Construction ===

    @classmethod
    def from_variables(cls, variables: Sequence[Variable]) -> Dataset:
        """Build from already-declared variables."""
        vars_by_name: dict[str, Variable] = {}
        for var in variables:
            if var.name in vars_by_name:
                raise ConfigError(
                    f"Variable {var.name!r} declared twice", identifier=var.name
                )
            vars_by_name[var.name] = var

        lengths = {name: var.n for name, var in vars_by_name.items()}
        if len(set(lengths.values())) > 1:
            details = ", ".join(f"{k}={v}" for k, v in lengths.items())
            raise DimensionError(f"Inconsistent lengths: {details}")

        n = next(iter(lengths.values())) if lengths else 0
        return cls(_variables=vars_by_name, n=n)

    @classmethod
    def from_columns(
        cls,
        *,
        numeric: Mapping[str, ArrayLike] | None = None,
        categorical: Mapping[str, ArrayLike] | None = None,
        levels: Mapping[str, Sequence[Any]] | None = None,
        reference: Mapping[str, Any] | None = None,
    ) -> Dataset:
        """
        Build from raw columns with declared kinds.

        Args:
            numeric: {name: numeric values}
            categorical: {name: labels}
            levels: {categorical name: level order}
            reference: {categorical name: reference level label}

        Raises:
            ConfigError: levels/reference given for a variable that is not
                declared categorical, or invalid levels
            DimensionError: Columns of different lengths
        """
        numeric = dict(numeric or {})
        categorical = dict(categorical or {})
        levels = dict(levels or {})
        reference = dict(reference or {})

        for name in list(levels) + list(reference):
            if name not in categorical:
                raise ConfigError(
                    f"{name!r} has levels/reference but is not declared categorical",
                    identifier=name,
                )
        both = set(numeric).intersection(categorical)
        if both:
            name = sorted(both)[0]
            raise ConfigError(
                f"{name!r} declared both numeric and categorical", identifier=name
            )

        variables: list[Variable] = [
            NumericVariable.from_values(name, values)
            for name, values in numeric.items()
        ]
        variables.extend(
            CategoricalVariable.from_labels(
                name,
                labels,
                levels=levels.get(name),
                reference=reference.get(name),
            )
            for name, labels in categorical.items()
        )
        return cls.from_variables(variables)

    @classmethod
    def from_dataframe(
        cls,
        df: 'pd.DataFrame',
        *,
        numeric: Sequence[str] = (),
        categorical: Sequence[str] = (),
        reference: Mapping[str, Any] | None = None,
    ) -> Dataset:
        """
        Build from a pandas DataFrame.

        Only the listed columns are taken, with the listed kinds. For
        pandas Categorical columns the category order becomes the level
        order.

        Raises:
            ConfigError: A listed column is missing from the frame
        """
        for name in list(numeric) + list(categorical):
            if name not in df.columns:
                raise ConfigError(
                    f"Column {name!r} not found in DataFrame", identifier=name
                )

        levels: dict[str, list[Any]] = {}
        for name in categorical:
            cats = getattr(getattr(df[name], 'cat', None), 'categories', None)
            if cats is not None:
                levels[name] = list(cats)

        return cls.from_columns(
            numeric={name: df[name].to_numpy() for name in numeric},
            categorical={name: df[name].to_numpy() for name in categorical},
            levels=levels,
            reference=reference,
        )

    # === Access ===

    def keys(self) -> frozenset[str]:
        """Names of all declared variables."""
        return frozenset(self._variables)

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def __iter__(self) -> Iterator[str]:
        return iter(self._variables)

    def __len__(self) -> int:
        return len(self._variables)

    def __getitem__(self, name: str) -> Variable:
        try:
            return self._variables[name]
        except KeyError:
            raise ConfigError(
                f"Unknown variable {name!r}; declared: {sorted(self._variables)}",
                identifier=name,
            ) from None

    def numeric(self, name: str) -> NumericVariable:
        """Look up a variable that must be numeric."""
        var = self[name]
        if not isinstance(var, NumericVariable):
            raise ConfigError(
                f"{name!r} is declared {var.kind}, expected numeric",
                identifier=name,
            )
        return var

    def categorical(self, name: str) -> CategoricalVariable:
        """Look up a variable that must be categorical."""
        var = self[name]
        if not isinstance(var, CategoricalVariable):
            raise ConfigError(
                f"{name!r} is declared {var.kind}, expected categorical",
                identifier=name,
            )
        return var

    def response(self, name: str) -> NDArray[np.floating[Any]]:
        """Values of a numeric response variable."""
        return self.numeric(name).values

    # === Transforms ===

    def replace(self, variable: Variable) -> Dataset:
        """Return a copy with one existing variable swapped."""
        if variable.name not in self._variables:
            raise ConfigError(
                f"Unknown variable {variable.name!r}", identifier=variable.name
            )
        if variable.n != self.n:
            raise DimensionError(
                f"{variable.name}: length {variable.n} doesn't match dataset length {self.n}"
            )
        updated = dict(self._variables)
        updated[variable.name] = variable
        return Dataset(_variables=updated, n=self.n, _metadata=dict(self._metadata))

    def relevel(self, name: str, reference: Any) -> Dataset:
        """Return a copy where a factor has a different reference level."""
        from pylinmod.design._contrasts import relevel

        return self.replace(relevel(self.categorical(name), reference))

    def center(self, *names: str) -> Dataset:
        """Return a copy with the named numeric variables mean-centered."""
        return center(self, *names)

    def __repr__(self) -> str:
        kinds = ", ".join(f"{k}:{v.kind}" for k, v in self._variables.items())
        return f"Dataset(n={self.n}, variables=[{kinds}])"


def center(dataset: Dataset, *names: str) -> Dataset:
    """
    Mean-center numeric variables.

    Each value becomes value - mean; the mean is kept in the variable's
    ``offset`` so the intercept shift stays calculable. Only the intercept
    and each centered variable's main-effect coefficient change; fitted
    values, residuals and interaction coefficients do not.

    Args:
        dataset: Source dataset
        *names: Numeric variables to center

    Returns:
        New Dataset

    Raises:
        ConfigError: A name is unknown or refers to a categorical variable
    """
    result = dataset
    for name in names:
        var = dataset.numeric(name)
        mean = float(np.mean(var.values))
        result = result.replace(NumericVariable(
            name=name,
            values=var.values - mean,
            offset=var.offset + mean,
        ))
    return result
