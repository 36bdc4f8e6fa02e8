"""
End-to-end scenarios linking coefficient inference and ANOVA.
"""

import numpy as np
import pytest

from pylinmod import TermList, anova, drop1, lm


class TestInteractionConsistency:
    """A single-df interaction entered last: CI, t test and F test agree."""

    @pytest.mark.parametrize("seed", range(8))
    @pytest.mark.parametrize("interaction", [0.0, 0.35, 1.0])
    def test_ci_contains_zero_iff_not_significant(self, make_slopes, seed, interaction):
        ds = make_slopes(seed, interaction)
        model = lm(TermList.intercept_only().cross('g', 'x'), ds, 'y')
        j = model.column_names.index('gB:x')
        lo, hi = model.conf_int(0.95)[j]
        row = anova(model).row('g:x')

        np.testing.assert_allclose(row.f_value, model.t_statistics[j] ** 2, rtol=1e-8)
        if lo < 0.0 < hi:
            assert row.p_value > 0.05
        else:
            assert row.p_value < 0.05

    def test_drop1_agrees_for_last_term(self, slopes_data):
        model = lm(TermList.intercept_only().cross('g', 'x'), slopes_data, 'y')
        seq = anova(model).row('g:x')
        dele = drop1(model, scope='marginal').row('g:x')
        np.testing.assert_allclose(seq.f_value, dele.f_value, rtol=1e-10)
        np.testing.assert_allclose(seq.p_value, dele.p_value, rtol=1e-8)


class TestTwoWayFactorial:

    def test_degrees_of_freedom(self, twoway_balanced):
        result = anova(lm(TermList.intercept_only().cross('A', 'B'), twoway_balanced, 'y'))
        df = {row.term: row.df for row in result.table}
        assert df == {'A': 1, 'B': 2, 'A:B': 2, 'Residuals': 54}

    def test_main_effects_significant(self, twoway_balanced):
        result = anova(lm(TermList.intercept_only().cross('A', 'B'), twoway_balanced, 'y'))
        assert result.row('A').p_value < 0.001
        assert result.row('B').p_value < 0.001

    def test_no_intercept_cell_model_spans_same_space(self, twoway_balanced):
        with_int = lm(TermList.intercept_only().cross('A', 'B'), twoway_balanced, 'y')
        cells = lm(TermList.of('A:B', intercept=False), twoway_balanced, 'y')
        assert cells.p == 6 and cells.rank == 6
        np.testing.assert_allclose(cells.rss, with_int.rss, rtol=1e-10)
