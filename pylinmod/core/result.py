"""
The envelope every computation returns.

A least squares fit, an ANOVA table and a drop1 table all come back as a
Result around their own payload, so timing, the backend that did the work
and any non-fatal diagnostics sit in the same place for each of them.
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Frozen wrapper around a computation's payload.

    Attributes:
        params: The payload (LinearParams, AnovaParams, Drop1Params)
        info: Free-form metadata such as method, rank and aliased names
        timing: Seconds per section plus ``total_seconds``; None when the
            caller did not time the work
        backend_name: Which backend produced the payload
        warnings: Diagnostics that did not stop the computation, e.g. a
            rank deficiency tolerated under rank_policy='mark'
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        return any(substring in w for w in self.warnings)
