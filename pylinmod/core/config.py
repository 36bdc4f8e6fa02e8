"""Process-wide defaults for fitting.

Resolution order (first match wins):
    1. Keyword argument passed to the call (``lm(..., rank_policy='error')``).
    2. Programmatic override via :func:`set_option`.
    3. The matching ``PYLINMOD_*`` environment variable.
    4. The built-in default.

Options:
    rank_policy
        ``"mark"`` reports aliased coefficients as inestimable and keeps
        going; ``"error"`` raises :class:`RankDeficiencyError`.
        Environment: ``PYLINMOD_RANK_POLICY``.
    rank_tol
        Relative tolerance of the limited-pivot QR used to detect columns
        that depend on earlier ones. Environment: ``PYLINMOD_RANK_TOL``.
    condition_limit
        Largest acceptable condition number of the triangular factor of
        the estimable columns. Environment: ``PYLINMOD_CONDITION_LIMIT``.

Examples:
    Fail on any rank deficiency from the shell::

        export PYLINMOD_RANK_POLICY=error

    Or programmatically::

        import pylinmod
        pylinmod.set_option("rank_policy", "error")
        pylinmod.reset_options()
"""

from __future__ import annotations

import os
from typing import Any

from pylinmod.core.compute.tolerances import CONDITION_LIMIT, RANK_TOLERANCE
from pylinmod.core.exceptions import ConfigError

_VALID_RANK_POLICIES = {"mark", "error"}

_DEFAULTS: dict[str, Any] = {
    "rank_policy": "mark",
    "rank_tol": RANK_TOLERANCE,
    "condition_limit": CONDITION_LIMIT,
}

_ENV_VARS = {
    "rank_policy": "PYLINMOD_RANK_POLICY",
    "rank_tol": "PYLINMOD_RANK_TOL",
    "condition_limit": "PYLINMOD_CONDITION_LIMIT",
}

_overrides: dict[str, Any] = {}


def _coerce(name: str, value: Any) -> Any:
    """Validate and normalise an option value."""
    if name == "rank_policy":
        policy = str(value).strip().lower()
        if policy not in _VALID_RANK_POLICIES:
            raise ConfigError(
                f"rank_policy must be one of {sorted(_VALID_RANK_POLICIES)}, "
                f"got {value!r}",
                identifier="rank_policy",
            )
        return policy

    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(
            f"{name} must be a positive number, got {value!r}",
            identifier=name,
        ) from e
    if not number > 0:
        raise ConfigError(
            f"{name} must be a positive number, got {value!r}",
            identifier=name,
        )
    return number


def get_option(name: str, value: Any = None) -> Any:
    """Return the effective value of an option.

    Args:
        name: Option name (``rank_policy``, ``rank_tol``, ``condition_limit``).
        value: Per-call value. Returned (validated) when not ``None``.

    Raises:
        ConfigError: Unknown option or invalid value.
    """
    if name not in _DEFAULTS:
        raise ConfigError(f"Unknown option {name!r}", identifier=name)

    if value is not None:
        return _coerce(name, value)
    if name in _overrides:
        return _overrides[name]

    env = os.environ.get(_ENV_VARS[name], "").strip()
    if env:
        return _coerce(name, env)

    return _DEFAULTS[name]


def set_option(name: str, value: Any) -> None:
    """Override an option for the rest of the process.

    Passing ``None`` removes the override.
    """
    if name not in _DEFAULTS:
        raise ConfigError(f"Unknown option {name!r}", identifier=name)
    if value is None:
        _overrides.pop(name, None)
    else:
        _overrides[name] = _coerce(name, value)


def reset_options() -> None:
    """Drop every programmatic override."""
    _overrides.clear()
