"""
CPU reference backend for linear regression.

Uses the limited-pivot QR of the design (LAPACK Householder QR of the
estimable columns) to solve the least squares problem without forming
X'X. Aliased columns get NaN coefficients, never zero, mirroring the NA
coefficients of R's lm().
"""

import logging
from typing import Any
import numpy as np

from pylinmod.core.result import Result
from pylinmod.core.compute.timing import Timer
from pylinmod.core.compute.linalg import qr_solve_cpu, r_inverse
from pylinmod.core.exceptions import NumericalError, RankDeficiencyError
from pylinmod.regression.design import RegressionDesign
from pylinmod.regression.solution import LinearParams

logger = logging.getLogger(__name__)


class CPUQRBackend:
    """
    CPU backend using QR decomposition.

    Implements RegressionDesign -> Result[LinearParams].
    """

    def __init__(self, rank_policy: str, condition_limit: float):
        self._rank_policy = rank_policy
        self._condition_limit = condition_limit

    @property
    def name(self) -> str:
        return 'cpu_qr'

    def solve(self, design: RegressionDesign) -> Result[LinearParams]:
        """
        Solve OLS via QR decomposition.

        Algorithm:
            1. Take the limited-pivot QR of X: accepted columns Xa = QR
            2. Check cond(R) against the configured limit
            3. Solve R βa = Q'y; aliased coefficients are NaN
            4. Residuals, RSS, TSS and the unscaled covariance R⁻¹R⁻ᵀ

        Raises:
            RankDeficiencyError: rank < p and rank_policy == 'error'
            NumericalError: cond(R) above the limit
        """
        timer = Timer()
        timer.start()

        X = design.X
        y = design.y
        n, p = design.n, design.p
        qr = design.qr
        rank = qr.rank
        active = qr.active
        aliased_idx = np.sort(qr.aliased)
        aliased_names = tuple(design.column_names[j] for j in aliased_idx)

        if rank < p and self._rank_policy == 'error':
            raise RankDeficiencyError(
                f"Design matrix is rank-deficient: rank={rank}, expected={p}. "
                f"Aliased columns: {list(aliased_names)}",
                rank=rank,
                expected_rank=p,
                aliased=aliased_names,
            )

        # === Conditioning ===
        with timer.section('condition'):
            cond = float(np.linalg.cond(qr.R)) if rank else 1.0
        if not cond <= self._condition_limit:
            raise NumericalError(
                f"Design matrix is ill-conditioned: cond(R)={cond:.3e} "
                f"exceeds limit {self._condition_limit:.3e}",
                matrix_name='X',
                condition_number=cond,
            )

        # === Solve ===
        with timer.section('solve'):
            beta_active = qr_solve_cpu(qr, y)
            coefficients = np.full(p, np.nan, dtype=np.float64)
            coefficients[active] = beta_active

        # === Residuals and Fitted Values ===
        with timer.section('residuals'):
            fitted_values = X[:, active] @ beta_active if rank else np.zeros(n)
            residuals = y - fitted_values

        # === Summary Statistics ===
        with timer.section('statistics'):
            rss = float(residuals @ residuals)
            if design.has_intercept:
                tss = float(np.sum((y - np.mean(y)) ** 2))
            else:
                tss = float(y @ y)

            R_inv = r_inverse(qr.R)
            cov_unscaled = np.full((p, p), np.nan, dtype=np.float64)
            cov_unscaled[np.ix_(active, active)] = R_inv @ R_inv.T

        timer.stop()

        aliased_mask = np.zeros(p, dtype=bool)
        aliased_mask[aliased_idx] = True

        params = LinearParams(
            coefficients=coefficients,
            aliased=aliased_mask,
            residuals=residuals,
            fitted_values=fitted_values,
            cov_unscaled=cov_unscaled,
            rss=rss,
            tss=tss,
            rank=rank,
            df_residual=n - rank,
        )

        warnings: tuple[str, ...] = ()
        if rank < p:
            warnings = (
                f"{p - rank} coefficient(s) not defined because of "
                f"singularities: {', '.join(aliased_names)}",
            )
            logger.debug("fit: %s", warnings[0])

        info: dict[str, Any] = {
            'method': 'qr',
            'rank': rank,
            'pivot': qr.pivot.tolist(),
            'aliased': aliased_names,
            'condition_number': cond,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=warnings,
        )
