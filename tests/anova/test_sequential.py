"""
Tests for sequential (Type I) ANOVA.

Validates:
    - Table structure and degrees of freedom
    - SS partition for every term ordering
    - Order dependence of attribution for correlated terms
    - Rows with zero df, no-intercept models, parallel fits
"""

from itertools import permutations

import numpy as np
import pytest

from pylinmod.anova import anova, AnovaSolution
from pylinmod.core.exceptions import ConfigError, DistributionalError
from pylinmod.data import Dataset
from pylinmod.design import TermList
from pylinmod.regression import fit, lm


def centered_tss(dataset, response='y'):
    y = dataset.response(response)
    return float(np.sum((y - y.mean()) ** 2))


class TestTableStructure:

    def test_rows_and_df(self, grouped_data):
        model = lm(TermList.intercept_only().cross('group', 'x'), grouped_data, 'y')
        result = anova(model)
        assert isinstance(result, AnovaSolution)
        assert [row.term for row in result.table] == ['group', 'x', 'group:x', 'Residuals']
        df = {row.term: row.df for row in result.table}
        assert df == {'group': 2, 'x': 1, 'group:x': 2, 'Residuals': 54}
        assert result.terms == ['group', 'x', 'group:x']

    def test_residual_row(self, grouped_data):
        model = lm(TermList.of('group', 'x'), grouped_data, 'y')
        result = anova(model)
        res = result.row('Residuals')
        np.testing.assert_allclose(res.sum_sq, model.rss)
        assert res.df == model.df_residual
        assert res.f_value is None and res.p_value is None
        assert result.residual_ms == res.mean_sq

    def test_f_uses_full_model_error(self, grouped_data):
        model = lm(TermList.of('group', 'x', 'z'), grouped_data, 'y')
        row = anova(model).row('group')
        expected = (row.sum_sq / 2) / (model.rss / model.df_residual)
        np.testing.assert_allclose(row.f_value, expected, rtol=1e-12)
        assert 0.0 <= row.p_value <= 1.0

    def test_first_term_against_intercept_only(self, grouped_data):
        full = lm(TermList.of('group', 'x'), grouped_data, 'y')
        group_only = lm(TermList.of('group'), grouped_data, 'y')
        row = anova(full).row('group')
        np.testing.assert_allclose(
            row.sum_sq, centered_tss(grouped_data) - group_only.rss, rtol=1e-10,
        )

    def test_last_single_df_term_matches_t(self, grouped_data):
        model = lm(TermList.of('group', 'z', 'x'), grouped_data, 'y')
        row = anova(model).row('x')
        j = model.column_names.index('x')
        np.testing.assert_allclose(row.f_value, model.t_statistics[j] ** 2, rtol=1e-8)
        np.testing.assert_allclose(row.p_value, model.p_values[j], rtol=1e-6)

    def test_summary(self, grouped_data):
        text = anova(lm(TermList.of('group', 'x'), grouped_data, 'y')).summary()
        assert "Analysis of Variance Table" in text
        assert "Residuals" in text
        assert "Response: y" in text


class TestPartition:

    @pytest.mark.parametrize("order", list(permutations(['group', 'x', 'z', 'group:x'])))
    def test_ss_sum_to_total(self, grouped_data, order):
        terms = TermList.of(*order)
        result = anova(lm(terms, grouped_data, 'y'))
        ss_sum = sum(row.sum_sq for row in result.table)
        np.testing.assert_allclose(ss_sum, centered_tss(grouped_data), rtol=1e-10)
        np.testing.assert_allclose(result.total_ss, centered_tss(grouped_data), rtol=1e-10)

    def test_no_intercept_sums_to_uncentered(self, grouped_data):
        model = lm(TermList.of('group', 'x', intercept=False), grouped_data, 'y')
        result = anova(model)
        y = grouped_data.response('y')
        assert result.row('group').df == 3
        ss_sum = sum(row.sum_sq for row in result.table)
        np.testing.assert_allclose(ss_sum, float(y @ y), rtol=1e-10)
        np.testing.assert_allclose(result.total_ss, float(y @ y), rtol=1e-10)

    def test_total_from_response_not_rows(self, grouped_data):
        model = lm(TermList.of('group', 'x', 'z'), grouped_data, 'y')
        result = anova(model)
        y = grouped_data.response('y')
        assert result.total_ss == pytest.approx(float(np.sum((y - y.mean()) ** 2)), rel=1e-12)
        assert result.total_ss == pytest.approx(model.tss, rel=1e-12)

    def test_balanced_order_free(self, twoway_balanced):
        ab = anova(lm(TermList.of('A', 'B'), twoway_balanced, 'y'))
        ba = anova(lm(TermList.of('B', 'A'), twoway_balanced, 'y'))
        for term in ('A', 'B'):
            np.testing.assert_allclose(ab.row(term).sum_sq, ba.row(term).sum_sq, rtol=1e-8)


class TestOrderDependence:

    def test_correlated_terms_change_attribution(self, grouped_data):
        xz = anova(lm(TermList.of('x', 'z'), grouped_data, 'y'))
        zx = anova(lm(TermList.of('z', 'x'), grouped_data, 'y'))
        assert not np.isclose(xz.row('x').sum_sq, zx.row('x').sum_sq, rtol=1e-3)
        np.testing.assert_allclose(xz.residual_ss, zx.residual_ss, rtol=1e-10)
        np.testing.assert_allclose(
            xz.row('x').sum_sq + xz.row('z').sum_sq,
            zx.row('x').sum_sq + zx.row('z').sum_sq,
            rtol=1e-10,
        )


class TestEdgeCases:

    def test_aliased_term_has_zero_df(self, grouped_data):
        x = grouped_data.numeric('x').values
        ds = Dataset.from_columns(
            numeric={'y': grouped_data.response('y'), 'x': x, 'w': 2.0 * x},
        )
        result = anova(lm(TermList.of('x', 'w'), ds, 'y'))
        row = result.row('w')
        assert row.df == 0
        assert row.f_value is None
        assert row.p_value is None
        assert row.mean_sq is None
        np.testing.assert_allclose(row.sum_sq, 0.0, atol=1e-8)

    def test_parallel_matches_sequential(self, grouped_data):
        model = lm(TermList.intercept_only().cross('group', 'x').add_main('z'), grouped_data, 'y')
        seq = anova(model)
        par = anova(model, n_jobs=2)
        for a, b in zip(seq.table, par.table):
            assert a.term == b.term
            assert a.df == b.df
            np.testing.assert_allclose(a.sum_sq, b.sum_sq, rtol=1e-12)

    def test_intercept_only_model(self, grouped_data):
        result = anova(lm(TermList.intercept_only(), grouped_data, 'y'))
        assert [row.term for row in result.table] == ['Residuals']

    def test_saturated_model(self):
        ds = Dataset.from_columns(numeric={'y': [1.0, 2.0, 4.0], 'x': [0.0, 1.0, 3.0]},
                                  categorical={'g': ['a', 'b', 'a']})
        model = lm(TermList.of('x', 'g'), ds, 'y')
        assert model.df_residual == 0
        with pytest.raises(DistributionalError):
            anova(model)

    def test_raw_array_model_rejected(self, simple_regression_data):
        X, y, _ = simple_regression_data
        with pytest.raises(ConfigError, match="lm"):
            anova(fit(X, y))

    def test_timing_and_info(self, grouped_data):
        result = anova(lm(TermList.of('group', 'x'), grouped_data, 'y'))
        assert result.info['n_fits'] == 2
        assert 'total_seconds' in result.timing
