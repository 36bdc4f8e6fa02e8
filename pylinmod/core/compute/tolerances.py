"""
Tolerance tiers for numerical validation.

Defines precision expectations for comparisons in the test suite and the
default thresholds the solver uses:
- CPU FP64: well-conditioned problems, close to machine precision
- CPU FP64 ill-conditioned: relaxed, for cond(X) above ~1e4
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


CPU_FP64 = ToleranceTier(
    rtol=1e-10,
    atol=1e-10,
    name='cpu_fp64',
    description='CPU double precision, well conditioned',
)

CPU_FP64_ILL_CONDITIONED = ToleranceTier(
    rtol=1e-6,
    atol=1e-8,
    name='cpu_fp64_ill_conditioned',
    description='CPU double precision, ill-conditioned (cond > 1e4)',
)

# Relative threshold of the limited-pivot QR: a column whose component
# orthogonal to the earlier accepted columns is below RANK_TOLERANCE times
# its own norm is aliased. Same value R's lm() uses.
RANK_TOLERANCE = 1e-7

# Largest acceptable cond(R) for the estimable columns. At 1e12 the
# coefficients keep roughly four significant digits in float64.
CONDITION_LIMIT = 1e12


def select_tolerance(is_ill_conditioned: bool = False) -> ToleranceTier:
    """Select the comparison tier for a problem."""
    if is_ill_conditioned:
        return CPU_FP64_ILL_CONDITIONED
    return CPU_FP64
