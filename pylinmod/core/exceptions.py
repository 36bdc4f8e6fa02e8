"""
Exception hierarchy for pylinmod.

All exceptions inherit from PyLinModError to allow catching any
library-specific error. Domain code raises the most specific class here.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyLinModError(Exception):
    """Base exception for all pylinmod errors."""
    pass


class ValidationError(PyLinModError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when array shapes don't match expected dimensions or
    when multiple arrays have inconsistent shapes.
    """
    pass


class ConfigError(ValidationError):
    """
    Model configuration refers to something that does not exist.

    Raised for unknown variables, unknown or unobserved levels, unknown
    coding schemes, malformed term lists and wrong variable kinds.

    Attributes:
        identifier: The offending variable, level, term or option name
    """

    def __init__(self, message: str, identifier: str | None = None):
        super().__init__(message)
        self.identifier = identifier


class NumericalError(PyLinModError):
    """
    Numerical computation failed.

    Raised for non-finite inputs and for factorizations whose conditioning
    exceeds the configured limit.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        term: Model term whose columns triggered the error, if known
        condition_number: Estimated condition number, if computed
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        term: str | None = None,
        condition_number: float | None = None,
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.term = term
        self.condition_number = condition_number


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or numerically rank-deficient.

    Attributes:
        rank: Numerical rank, if computed
        expected_rank: Expected rank (number of columns)
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        rank: int | None = None,
        expected_rank: int | None = None,
    ):
        super().__init__(message, matrix_name=matrix_name)
        self.rank = rank
        self.expected_rank = expected_rank


class RankDeficiencyError(SingularMatrixError):
    """
    Design matrix is rank-deficient and the rank policy is 'error'.

    Under the default 'mark' policy rank deficiency is not an error: the
    aliased coefficients are reported as inestimable instead.

    Attributes:
        aliased: Names of the columns that are linearly dependent on
            earlier columns
    """

    def __init__(
        self,
        message: str,
        rank: int,
        expected_rank: int,
        aliased: tuple[str, ...] = (),
    ):
        super().__init__(
            message, matrix_name='X', rank=rank, expected_rank=expected_rank,
        )
        self.aliased = aliased


class DistributionalError(PyLinModError):
    """
    Reference distribution is undefined.

    Raised when residual degrees of freedom are not positive (more
    parameters than observations, or a saturated model). Point estimates
    remain available; significance computations do not.

    Attributes:
        df_residual: The offending residual degrees of freedom
    """

    def __init__(self, message: str, df_residual: int):
        super().__init__(message)
        self.df_residual = df_residual


class DegenerateFactorWarning(UserWarning):
    """A categorical variable has a single observed level."""
    pass
