"""
Design matrix assembly.

Turns a TermList and a Dataset into the numeric matrix a least squares
solver consumes, with every column tagged by the term it belongs to and
the rank already computed.

Factor coding inside a term follows the marginality rule of R's
model.matrix(): a factor is treatment coded when the term with that
factor removed is also in the model (the empty margin counts as present
when the model has an intercept, or once a fully coded factor main effect
spans the constant); otherwise it gets one indicator per level. This gives
no-intercept models full coding of their first factor and keeps terms
like ``x + x:group`` identifiable.

Rank deficiency is a diagnostic, not a repair: aliased columns stay in
the matrix and are reported so the solver can mark their coefficients
inestimable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

import numpy as np
from numpy.typing import NDArray

from pylinmod.core.config import get_option
from pylinmod.core.compute.linalg import QRResult, qr_limited_pivot
from pylinmod.core.exceptions import ConfigError
from pylinmod.core.validation import check_finite
from pylinmod.data.dataset import Dataset
from pylinmod.data.variables import CategoricalVariable
from pylinmod.design._contrasts import CODINGS, encode, interaction_columns
from pylinmod.design.terms import INTERCEPT, Term, TermList

logger = logging.getLogger(__name__)

INTERCEPT_COLUMN = '(Intercept)'


@dataclass(frozen=True, eq=False)
class DesignMatrix:
    """
    Encoded design matrix with metadata.

    Attributes:
        X: (n, p) float64 design matrix
        column_names: one name per column, e.g. '(Intercept)', 'groupB:x'
        column_terms: name of the term owning each column
        term_slices: term name -> column slice in X
        terms: the TermList the matrix was built from
        qr: limited-pivot QR of X (rank, pivot, factors of the
            estimable columns)
        factor_levels: factor name -> active levels
        references: factor name -> reference level
        degenerate: factors with a single observed level
        n: number of observations
        p: number of columns
    """
    X: NDArray[np.floating[Any]]
    column_names: tuple[str, ...]
    column_terms: tuple[str, ...]
    term_slices: dict[str, slice]
    terms: TermList
    qr: QRResult
    factor_levels: dict[str, tuple[str, ...]]
    references: dict[str, str]
    degenerate: tuple[str, ...]
    n: int
    p: int

    @property
    def rank(self) -> int:
        return self.qr.rank

    @property
    def has_intercept(self) -> bool:
        return self.terms.intercept

    @property
    def is_full_rank(self) -> bool:
        return self.rank == self.p

    @property
    def aliased(self) -> tuple[int, ...]:
        """Indices of columns linearly dependent on earlier columns."""
        return tuple(sorted(int(j) for j in self.qr.aliased))

    @property
    def aliased_names(self) -> tuple[str, ...]:
        return tuple(self.column_names[j] for j in self.aliased)

    def term_columns(self, term: str | Term) -> NDArray[np.floating[Any]]:
        """Columns belonging to one term."""
        name = Term.parse(term).name
        if name not in self.term_slices:
            raise ConfigError(f"Term {name!r} not in design", identifier=name)
        return self.X[:, self.term_slices[name]]

    def __repr__(self) -> str:
        return (
            f"DesignMatrix(n={self.n}, p={self.p}, rank={self.rank}, "
            f"terms={self.terms!r})"
        )


def _check_coding(dataset: Dataset, coding: Mapping[str, str]) -> None:
    for name, scheme in coding.items():
        dataset.categorical(name)
        if scheme not in CODINGS:
            raise ConfigError(
                f"Unknown coding {scheme!r} for {name!r}; available: {sorted(CODINGS)}",
                identifier=scheme,
            )


def build_design_matrix(
    terms: TermList,
    dataset: Dataset,
    *,
    coding: Mapping[str, str] | None = None,
    tol: float | None = None,
) -> DesignMatrix:
    """
    Build the design matrix for a term list.

    Args:
        terms: Ordered model terms
        dataset: Declared variables
        coding: Optional {factor: 'treatment' | 'indicator'} forcing a
            coding scheme wherever that factor appears
        tol: Relative rank tolerance (default from config, 1e-7)

    Returns:
        DesignMatrix with rank and aliased columns computed

    Raises:
        ConfigError: Undeclared variable, unknown coding, coding forced on
            a numeric variable
        NumericalError: Non-finite values in a term's columns
    """
    terms.validate(dataset)
    coding = dict(coding or {})
    _check_coding(dataset, coding)
    tol = get_option('rank_tol', tol)

    n = dataset.n
    blocks: list[NDArray] = []
    column_names: list[str] = []
    column_terms: list[str] = []
    term_slices: dict[str, slice] = {}
    factor_levels: dict[str, tuple[str, ...]] = {}
    references: dict[str, str] = {}
    degenerate: list[str] = []
    offset = 0

    if terms.intercept:
        blocks.append(np.ones((n, 1), dtype=np.float64))
        column_names.append(INTERCEPT_COLUMN)
        column_terms.append(INTERCEPT)
        term_slices[INTERCEPT] = slice(0, 1)
        offset = 1

    present = {t.key for t in terms}
    spans_constant = terms.intercept

    for term in terms:
        cols = np.ones((n, 1), dtype=np.float64)
        labels = ['']
        full_factor = False

        for var_name in term.variables:
            var = dataset[var_name]
            if isinstance(var, CategoricalVariable):
                scheme = coding.get(var_name)
                if scheme is None:
                    margin = term.key - {var_name}
                    coded = (margin in present) if margin else spans_constant
                    scheme = 'treatment' if coded else 'indicator'
                enc = encode(var, scheme)
                block = enc.columns
                block_labels = [f"{var_name}{lab}" for lab in enc.column_labels]
                factor_levels[var_name] = var.levels
                references[var_name] = var.reference_level
                if enc.degenerate and var_name not in degenerate:
                    degenerate.append(var_name)
                full_factor = term.order == 1 and scheme == 'indicator'
            else:
                block = var.values.reshape(-1, 1)
                block_labels = [var_name]

            cols = interaction_columns(cols, block)
            labels = [
                f"{a}:{b}" if a else b
                for a in labels for b in block_labels
            ]

        check_finite(cols, 'X', term=term.name)
        if full_factor:
            spans_constant = True

        k = cols.shape[1]
        blocks.append(cols)
        column_names.extend(labels)
        column_terms.extend([term.name] * k)
        term_slices[term.name] = slice(offset, offset + k)
        offset += k

    X = np.hstack(blocks) if blocks else np.empty((n, 0), dtype=np.float64)
    qr = qr_limited_pivot(X, tol)

    if qr.rank < X.shape[1]:
        logger.debug(
            "design %r: rank %d < %d columns, aliased %s",
            terms, qr.rank, X.shape[1],
            [column_names[j] for j in sorted(qr.aliased)],
        )

    return DesignMatrix(
        X=X,
        column_names=tuple(column_names),
        column_terms=tuple(column_terms),
        term_slices=term_slices,
        terms=terms,
        qr=qr,
        factor_levels=factor_levels,
        references=references,
        degenerate=tuple(degenerate),
        n=n,
        p=X.shape[1],
    )
