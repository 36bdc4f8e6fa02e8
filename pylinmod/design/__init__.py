"""
Model terms, factor coding and design matrix assembly.

Public API:
    TermList.intercept_only().add_main('a').add_interaction('a', 'x')
    build_design_matrix(terms, dataset, ...) -> DesignMatrix
    encode(variable, coding='treatment', reference=None) -> FactorEncoding
    relevel(variable, new_reference) -> CategoricalVariable
"""

from pylinmod.design.terms import INTERCEPT, Term, TermList
from pylinmod.design._contrasts import (
    CODINGS,
    FactorEncoding,
    encode,
    encode_indicator,
    encode_treatment,
    relevel,
)
from pylinmod.design.builder import (
    INTERCEPT_COLUMN,
    DesignMatrix,
    build_design_matrix,
)

__all__ = [
    "INTERCEPT",
    "INTERCEPT_COLUMN",
    "Term",
    "TermList",
    "CODINGS",
    "FactorEncoding",
    "encode",
    "encode_indicator",
    "encode_treatment",
    "relevel",
    "DesignMatrix",
    "build_design_matrix",
]
