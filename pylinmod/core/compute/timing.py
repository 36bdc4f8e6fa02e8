"""
Wall-clock accounting for fits and tables.

A fit records how long rank detection, the triangular solve and the
statistics took; ANOVA and drop1 record the total over all refits. The
numbers end up in ``Result.timing``.
"""

import time
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Overall stopwatch plus named, accumulating sections.

    Usage:
        timer = Timer()
        timer.start()
        with timer.section('condition'):
            cond = np.linalg.cond(R)
        timer.stop()
        timer.result()   # {'total_seconds': ..., 'condition': ...}
    """

    def __init__(self):
        self._began: float | None = None
        self._elapsed: float | None = None
        self._spent: dict[str, float] = {}

    def start(self) -> None:
        self._began = time.perf_counter()
        self._elapsed = None

    def stop(self) -> None:
        if self._began is None:
            raise RuntimeError("Timer was stopped without being started")
        self._elapsed = time.perf_counter() - self._began

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Add the time spent in the block to section ``name``."""
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self._spent[name] = self._spent.get(name, 0.0) + (time.perf_counter() - t0)

    def result(self) -> dict[str, float]:
        """
        Seconds per section plus ``total_seconds``.

        Raises:
            RuntimeError: The timer is still running
        """
        if self._elapsed is None:
            raise RuntimeError("Timer has not been stopped")
        return {'total_seconds': self._elapsed, **self._spent}


@contextmanager
def timed() -> Iterator[Timer]:
    """
    Run a block under a started Timer and stop it on exit.

    Usage:
        with timed() as timer:
            rows = compute_drop1(model)
        timer.result()['total_seconds']
    """
    timer = Timer()
    timer.start()
    try:
        yield timer
    finally:
        timer.stop()
