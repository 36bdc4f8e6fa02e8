"""
Core infrastructure for pylinmod.

Shared abstractions used by the data, design, regression and anova
sub-packages.

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    config: Process-wide fitting defaults
    compute: Timing, parallel map, linear algebra primitives
"""

from pylinmod.core.result import Result
from pylinmod.core.config import get_option, set_option, reset_options
from pylinmod.core.exceptions import (
    PyLinModError,
    ValidationError,
    DimensionError,
    ConfigError,
    NumericalError,
    SingularMatrixError,
    RankDeficiencyError,
    DistributionalError,
    DegenerateFactorWarning,
)

__all__ = [
    # Result
    "Result",
    # Config
    "get_option",
    "set_option",
    "reset_options",
    # Exceptions
    "PyLinModError",
    "ValidationError",
    "DimensionError",
    "ConfigError",
    "NumericalError",
    "SingularMatrixError",
    "RankDeficiencyError",
    "DistributionalError",
    "DegenerateFactorWarning",
]
