"""
Tests for design matrix assembly.

Validates:
    - Column layout and naming for main effects and interactions
    - Marginality-aware coding (no-intercept models, x + x:g, g:x alone)
    - Forced codings and rank detection
    - Error reporting for undeclared variables and non-finite values
"""

import numpy as np
import pytest

from pylinmod.core.exceptions import (
    ConfigError,
    DegenerateFactorWarning,
    NumericalError,
)
from pylinmod.data import Dataset
from pylinmod.design import INTERCEPT_COLUMN, TermList, build_design_matrix


@pytest.fixture
def ds():
    return Dataset.from_columns(
        numeric={'x': [1.0, 2.0, 3.0, 4.0, 5.0, 6.0], 'z': [0.5, 0.1, 0.9, 0.3, 0.7, 0.2]},
        categorical={'g': ['a', 'b', 'c', 'a', 'b', 'c'], 'h': ['u', 'u', 'v', 'v', 'u', 'v']},
    )


class TestLayout:

    def test_intercept_only(self, ds):
        dm = build_design_matrix(TermList.intercept_only(), ds)
        assert dm.column_names == (INTERCEPT_COLUMN,)
        np.testing.assert_array_equal(dm.X, np.ones((6, 1)))

    def test_main_effects(self, ds):
        dm = build_design_matrix(TermList.of('g', 'x'), ds)
        assert dm.column_names == ('(Intercept)', 'gb', 'gc', 'x')
        assert dm.column_terms == ('Intercept', 'g', 'g', 'x')
        assert dm.term_slices['g'] == slice(1, 3)
        np.testing.assert_array_equal(dm.term_columns('x')[:, 0], ds.numeric('x').values)
        assert dm.rank == dm.p == 4
        assert dm.is_full_rank

    def test_factor_by_numeric(self, ds):
        dm = build_design_matrix(TermList.intercept_only().cross('g', 'x'), ds)
        assert dm.column_names == (
            '(Intercept)', 'gb', 'gc', 'x', 'gb:x', 'gc:x',
        )
        x = ds.numeric('x').values
        gb = np.array([0, 1, 0, 0, 1, 0], dtype=float)
        np.testing.assert_array_equal(dm.X[:, 4], gb * x)

    def test_factor_by_factor(self, ds):
        dm = build_design_matrix(TermList.intercept_only().cross('g', 'h'), ds)
        assert dm.column_names[-2:] == ('gb:hv', 'gc:hv')
        assert dm.p == 6

    def test_name_follows_declared_order(self, ds):
        dm = build_design_matrix(TermList.of('x', 'x:g'), ds)
        assert dm.column_names == ('(Intercept)', 'x', 'x:gb', 'x:gc')

    def test_levels_recorded(self, ds):
        dm = build_design_matrix(TermList.of('g'), ds.relevel('g', 'b'))
        assert dm.factor_levels == {'g': ('a', 'b', 'c')}
        assert dm.references == {'g': 'b'}
        assert dm.column_names == ('(Intercept)', 'ga', 'gc')

    def test_unknown_term(self, ds):
        dm = build_design_matrix(TermList.of('x'), ds)
        with pytest.raises(ConfigError):
            dm.term_columns('g')


class TestMarginality:

    def test_no_intercept_first_factor_gets_all_levels(self, ds):
        dm = build_design_matrix(TermList.of('g', 'h', intercept=False), ds)
        assert dm.column_names == ('ga', 'gb', 'gc', 'hv')
        assert dm.is_full_rank

    def test_no_intercept_numeric_first(self, ds):
        dm = build_design_matrix(TermList.of('x', 'g', intercept=False), ds)
        assert dm.column_names == ('x', 'ga', 'gb', 'gc')

    def test_interaction_without_factor_margin(self, ds):
        dm = build_design_matrix(TermList.of('g:x'), ds)
        assert dm.column_names == ('(Intercept)', 'ga:x', 'gb:x', 'gc:x')
        assert dm.is_full_rank

    def test_x_plus_x_by_g_identifiable(self, ds):
        dm = build_design_matrix(TermList.of('x', 'x:g'), ds)
        assert dm.is_full_rank


class TestRank:

    def test_forced_indicator_coding_is_aliased(self, ds):
        dm = build_design_matrix(TermList.of('g'), ds, coding={'g': 'indicator'})
        assert dm.p == 4
        assert dm.rank == 3
        assert dm.aliased == (3,)
        assert dm.aliased_names == ('gc',)

    def test_collinear_numeric(self):
        ds = Dataset.from_columns(numeric={
            'a': [1.0, 2.0, 3.0, 4.0], 'b': [2.0, 4.0, 6.0, 8.0],
        })
        dm = build_design_matrix(TermList.of('a', 'b'), ds)
        assert dm.rank == 2
        assert dm.aliased_names == ('b',)

    def test_tolerance_passed_through(self, ds):
        dm = build_design_matrix(TermList.of('x'), ds, tol=1e-3)
        assert dm.qr.rank == 2


class TestErrors:

    def test_undeclared_variable(self, ds):
        with pytest.raises(ConfigError) as exc:
            build_design_matrix(TermList.of('w'), ds)
        assert exc.value.identifier == 'w'

    def test_coding_for_numeric(self, ds):
        with pytest.raises(ConfigError):
            build_design_matrix(TermList.of('x'), ds, coding={'x': 'indicator'})

    def test_unknown_coding(self, ds):
        with pytest.raises(ConfigError) as exc:
            build_design_matrix(TermList.of('g'), ds, coding={'g': 'sum'})
        assert exc.value.identifier == 'sum'

    def test_nonfinite_names_term(self):
        ds = Dataset.from_columns(
            numeric={'x': [1.0, 2.0, 3.0], 'w': [1.0, np.nan, 3.0]},
            categorical={'g': ['a', 'b', 'a']},
        )
        with pytest.raises(NumericalError) as exc:
            build_design_matrix(TermList.of('x', 'g:w'), ds)
        assert exc.value.term == 'g:w'

    def test_degenerate_factor(self):
        ds = Dataset.from_columns(
            numeric={'x': [1.0, 2.0, 3.0]}, categorical={'g': ['a', 'a', 'a']},
        )
        with pytest.warns(DegenerateFactorWarning):
            dm = build_design_matrix(TermList.of('g', 'x'), ds)
        assert dm.degenerate == ('g',)
        assert dm.column_names == ('(Intercept)', 'x')
        assert dm.term_slices['g'] == slice(1, 1)
