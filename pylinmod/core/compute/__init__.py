"""
Shared compute infrastructure for pylinmod.

Timing utilities, tolerance constants, the parallel map used for batches of
independent fits, and linear algebra kernels.

IMPORTANT: This is NOT where domain-specific backends live. Those go in
{domain}/backends/. This module contains shared NUMERIC infrastructure.
"""

from pylinmod.core.compute.timing import Timer, timed
from pylinmod.core.compute.parallel import parallel_map

__all__ = [
    "Timer",
    "timed",
    "parallel_map",
]
