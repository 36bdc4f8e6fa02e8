"""
Declared, typed data for model building.

Public API:
    Dataset.from_columns(numeric=..., categorical=...) -> Dataset
    Dataset.from_dataframe(df, numeric=[...], categorical=[...]) -> Dataset
    center(dataset, *names) -> Dataset
"""

from pylinmod.data.variables import (
    CATEGORICAL,
    NUMERIC,
    CategoricalVariable,
    NumericVariable,
    Variable,
)
from pylinmod.data.dataset import Dataset, center

__all__ = [
    "CATEGORICAL",
    "NUMERIC",
    "CategoricalVariable",
    "NumericVariable",
    "Variable",
    "Dataset",
    "center",
]
