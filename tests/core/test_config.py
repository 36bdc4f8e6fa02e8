"""
Tests for option resolution: keyword > set_option > environment > default.
"""

import pytest

from pylinmod.core.config import get_option, set_option, reset_options
from pylinmod.core.compute.tolerances import CONDITION_LIMIT, RANK_TOLERANCE
from pylinmod.core.exceptions import ConfigError


class TestDefaults:

    def test_builtin_defaults(self):
        assert get_option('rank_policy') == 'mark'
        assert get_option('rank_tol') == RANK_TOLERANCE
        assert get_option('condition_limit') == CONDITION_LIMIT

    def test_unknown_option(self):
        with pytest.raises(ConfigError) as exc:
            get_option('solver')
        assert exc.value.identifier == 'solver'


class TestResolutionOrder:

    def test_env_overrides_default(self, monkeypatch):
        monkeypatch.setenv('PYLINMOD_RANK_POLICY', 'error')
        assert get_option('rank_policy') == 'error'

    def test_env_numeric(self, monkeypatch):
        monkeypatch.setenv('PYLINMOD_RANK_TOL', '1e-9')
        assert get_option('rank_tol') == 1e-9

    def test_set_option_overrides_env(self, monkeypatch):
        monkeypatch.setenv('PYLINMOD_RANK_POLICY', 'error')
        set_option('rank_policy', 'mark')
        assert get_option('rank_policy') == 'mark'

    def test_keyword_overrides_everything(self, monkeypatch):
        monkeypatch.setenv('PYLINMOD_CONDITION_LIMIT', '1e6')
        set_option('condition_limit', 1e8)
        assert get_option('condition_limit', 1e10) == 1e10

    def test_set_none_removes_override(self):
        set_option('rank_tol', 1e-5)
        set_option('rank_tol', None)
        assert get_option('rank_tol') == RANK_TOLERANCE

    def test_reset(self):
        set_option('rank_policy', 'error')
        reset_options()
        assert get_option('rank_policy') == 'mark'


class TestValidation:

    def test_policy_normalised(self):
        assert get_option('rank_policy', ' ERROR ') == 'error'

    def test_bad_policy(self):
        with pytest.raises(ConfigError, match="rank_policy"):
            set_option('rank_policy', 'drop')

    @pytest.mark.parametrize("value", [0, -1.0, 'abc'])
    def test_bad_number(self, value):
        with pytest.raises(ConfigError):
            get_option('rank_tol', value)

    def test_bad_env_value(self, monkeypatch):
        monkeypatch.setenv('PYLINMOD_CONDITION_LIMIT', 'huge')
        with pytest.raises(ConfigError) as exc:
            get_option('condition_limit')
        assert exc.value.identifier == 'condition_limit'

    def test_unknown_set(self):
        with pytest.raises(ConfigError):
            set_option('verbosity', 2)
