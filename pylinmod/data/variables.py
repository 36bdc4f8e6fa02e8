"""
Typed variables.

A variable's kind is declared once, when the dataset is built, and is
never inferred from how its values look: integer codes declared
categorical stay categorical, strings declared numeric are an error.
Everything downstream dispatches on the two concrete classes here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pylinmod.core.exceptions import ConfigError
from pylinmod.core.validation import check_array, check_1d, check_labels

NUMERIC = 'numeric'
CATEGORICAL = 'categorical'


@dataclass(frozen=True)
class NumericVariable:
    """
    A numeric predictor or response.

    Attributes:
        name: Variable name
        values: float64 values (n,)
        offset: Mean subtracted by centering; 0.0 for raw values
    """
    name: str
    values: NDArray[np.floating[Any]]
    offset: float = 0.0

    @property
    def kind(self) -> str:
        return NUMERIC

    @property
    def n(self) -> int:
        return len(self.values)

    @classmethod
    def from_values(cls, name: str, values: ArrayLike) -> NumericVariable:
        arr = check_array(values, name)
        check_1d(arr, name)
        return cls(name=name, values=arr)


@dataclass(frozen=True)
class CategoricalVariable:
    """
    A categorical predictor (factor).

    Attributes:
        name: Variable name
        labels: Observed label per observation, as strings (n,)
        levels: Active levels in order. Only observed labels are active.
        reference: Index into levels of the reference (suppressed) level
    """
    name: str
    labels: NDArray[np.str_]
    levels: tuple[str, ...]
    reference: int = 0

    @property
    def kind(self) -> str:
        return CATEGORICAL

    @property
    def n(self) -> int:
        return len(self.labels)

    @property
    def n_levels(self) -> int:
        return len(self.levels)

    @property
    def reference_level(self) -> str:
        return self.levels[self.reference]

    def level_index(self, level: Any) -> int:
        """
        Position of a level label.

        Raises:
            ConfigError: If the label is not an observed level
        """
        label = str(level)
        if label not in self.levels:
            raise ConfigError(
                f"{self.name}: level {label!r} not observed; "
                f"available levels: {list(self.levels)}",
                identifier=label,
            )
        return self.levels.index(label)

    def counts(self) -> dict[str, int]:
        """Number of observations per active level."""
        return {lev: int(np.sum(self.labels == lev)) for lev in self.levels}

    @classmethod
    def from_labels(
        cls,
        name: str,
        labels: ArrayLike,
        *,
        levels: Sequence[Any] | None = None,
        reference: Any = None,
    ) -> CategoricalVariable:
        """
        Declare a categorical variable.

        Args:
            name: Variable name
            labels: One label per observation (converted with str())
            levels: Optional level order. Levels listed here but never
                observed are dropped; observed labels missing from the list
                are a ConfigError.
            reference: Reference level label; defaults to the first level

        Raises:
            ConfigError: Unknown labels, duplicate levels or a reference
                that is not an observed level
        """
        label_arr = check_labels(labels, name)
        observed = set(label_arr.tolist())

        if levels is None:
            active = tuple(sorted(observed))
        else:
            declared = [str(v) for v in levels]
            if len(set(declared)) != len(declared):
                raise ConfigError(
                    f"{name}: duplicate entries in declared levels {declared}",
                    identifier=name,
                )
            undeclared = observed.difference(declared)
            if undeclared:
                bad = sorted(undeclared)[0]
                raise ConfigError(
                    f"{name}: label {bad!r} is not among the declared levels {declared}",
                    identifier=bad,
                )
            active = tuple(lev for lev in declared if lev in observed)

        var = cls(name=name, labels=label_arr, levels=active, reference=0)
        if reference is not None:
            var = cls(
                name=name,
                labels=label_arr,
                levels=active,
                reference=var.level_index(reference),
            )
        return var


Variable = Union[NumericVariable, CategoricalVariable]
