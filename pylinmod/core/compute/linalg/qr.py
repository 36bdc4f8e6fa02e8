"""
QR decomposition routines.

Householder QR comes from LAPACK via NumPy. Rank detection uses a
*limited pivoting* strategy: columns are visited in their original order
and a column is moved to the end (aliased) only when it is numerically a
linear combination of the columns accepted before it. Unlike full column
pivoting this keeps the surviving columns in model order, so the aliased
set names exactly the columns that add nothing to earlier ones.
"""

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy.linalg import solve_triangular

from pylinmod.core.compute.tolerances import RANK_TOLERANCE
from pylinmod.core.exceptions import SingularMatrixError


@dataclass(frozen=True)
class QRResult:
    """
    Result of QR decomposition.

    Attributes:
        Q: Orthonormal columns (n x r)
        R: Upper triangular factor (r x r) of the accepted columns
        rank: Numerical rank r
        pivot: Column order, accepted columns first (in model order)
            followed by aliased columns (in model order)
    """
    Q: NDArray[np.floating[Any]]
    R: NDArray[np.floating[Any]]
    rank: int
    pivot: NDArray[np.intp]

    @property
    def active(self) -> NDArray[np.intp]:
        """Indices of the accepted (estimable) columns."""
        return self.pivot[:self.rank]

    @property
    def aliased(self) -> NDArray[np.intp]:
        """Indices of columns dependent on earlier columns."""
        return self.pivot[self.rank:]


def _detect_aliased(
    X: NDArray[np.floating[Any]],
    tol: float,
) -> tuple[list[int], list[int]]:
    """
    Sequential orthogonalization with re-orthogonalization.

    Returns (accepted, aliased) column indices, both in original order.
    """
    n, p = X.shape
    basis = np.empty((n, min(n, p)), dtype=np.float64)
    k = 0
    accepted: list[int] = []
    aliased: list[int] = []

    for j in range(p):
        col = X[:, j]
        norm = float(np.linalg.norm(col))
        if norm == 0.0 or k == n:
            aliased.append(j)
            continue

        v = col.astype(np.float64, copy=True)
        # Two passes of classical Gram-Schmidt are enough to restore
        # orthogonality to working precision.
        for _ in range(2):
            if k:
                Qk = basis[:, :k]
                v -= Qk @ (Qk.T @ v)

        residual = float(np.linalg.norm(v))
        if residual <= tol * norm:
            aliased.append(j)
        else:
            basis[:, k] = v / residual
            k += 1
            accepted.append(j)

    return accepted, aliased


def qr_limited_pivot(
    X: NDArray[np.floating[Any]],
    tol: float = RANK_TOLERANCE,
) -> QRResult:
    """
    Rank-revealing QR with limited pivoting.

    Algorithm:
        1. Visit columns left to right; a column whose component orthogonal
           to the accepted columns has norm <= tol * ||column|| is aliased.
        2. Householder QR (LAPACK) of the accepted columns.

    Args:
        X: Matrix (n x p)
        tol: Relative tolerance for declaring a column dependent

    Returns:
        QRResult whose Q, R describe the accepted columns only
    """
    n, p = X.shape
    accepted, aliased = _detect_aliased(X, tol)
    pivot = np.array(accepted + aliased, dtype=np.intp)
    rank = len(accepted)

    if rank == 0:
        return QRResult(
            Q=np.empty((n, 0)), R=np.empty((0, 0)), rank=0, pivot=pivot,
        )

    Q, R = np.linalg.qr(X[:, accepted], mode='reduced')
    return QRResult(Q=Q, R=R, rank=rank, pivot=pivot)


def qr_solve_cpu(
    qr_result: QRResult,
    y: NDArray[np.floating[Any]],
) -> NDArray[np.floating[Any]]:
    """
    Least squares coefficients of the accepted columns.

    Solves R beta = Q'y by back substitution.

    Args:
        qr_result: Output of qr_limited_pivot()
        y: Response vector (n,)

    Returns:
        Coefficients for the accepted columns, in pivot order (rank,)

    Raises:
        SingularMatrixError: If the triangular factor has a zero pivot
    """
    r = qr_result.rank
    if r == 0:
        return np.empty(0, dtype=np.float64)
    R = qr_result.R[:r, :r]
    if np.any(np.diag(R) == 0):
        raise SingularMatrixError(
            "Triangular factor has a zero diagonal entry",
            matrix_name='R',
            rank=int(np.sum(np.diag(R) != 0)),
            expected_rank=r,
        )
    Qty = qr_result.Q[:, :r].T @ y
    return solve_triangular(R, Qty, lower=False)


def r_inverse(R: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    """Inverse of an upper triangular matrix by back substitution."""
    k = R.shape[0]
    if k == 0:
        return np.empty((0, 0), dtype=np.float64)
    return solve_triangular(R, np.eye(k), lower=False)
