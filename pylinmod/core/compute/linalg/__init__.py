"""
Linear algebra kernels for pylinmod.

All functions follow these conventions:
    - NumPy/SciPy (LAPACK under the hood)
    - Each decomposition returns a structured result dataclass
    - Errors are raised immediately with clear messages
"""

from pylinmod.core.compute.linalg.qr import (
    QRResult,
    qr_limited_pivot,
    qr_solve_cpu,
    r_inverse,
)

__all__ = [
    "QRResult",
    "qr_limited_pivot",
    "qr_solve_cpu",
    "r_inverse",
]
