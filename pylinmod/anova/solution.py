"""
Printable ANOVA and drop1 tables.

Both wrap a Result whose params hold the rows plus the residual line of the
model they were computed from; ``row(term)`` looks a single line up by label.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import numpy as np

from pylinmod.core.result import Result
from pylinmod.anova._common import (
    NONE_ROW,
    RESIDUALS,
    AnovaParams,
    AnovaTableRow,
    Drop1Params,
    Drop1Row,
)

P = TypeVar('P', AnovaParams, Drop1Params)

SIGNIF_LEGEND = "Signif. codes:  0 '***' 0.001 '**' 0.01 '*' 0.05 '.' 0.1 ' ' 1"


@dataclass
class _TableView(Generic[P]):
    _result: Result[P]

    @property
    def table(self):
        return self._result.params.table

    @property
    def terms(self) -> list[str]:
        """Labels of the model-term rows, in table order."""
        return [r.term for r in self.table if r.term not in (RESIDUALS, NONE_ROW)]

    def row(self, term: str):
        found = [r for r in self.table if r.term == term]
        if not found:
            raise KeyError(term)
        return found[0]

    @property
    def n_obs(self) -> int:
        return self._result.params.n_obs

    @property
    def response(self) -> str:
        return self._result.params.response

    @property
    def residual_df(self) -> int:
        return self._result.params.residual_df

    @property
    def residual_ss(self) -> float:
        return self._result.params.residual_ss

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings


@dataclass(repr=False)
class AnovaSolution(_TableView[AnovaParams]):
    """
    Sequential (type I) ANOVA table returned by anova().

    ``table`` holds one AnovaTableRow per model term in fitting order and a
    final ``Residuals`` row without F or p.
    """

    @property
    def total_ss(self) -> float:
        """Sum of all row SS: around the mean, or Σy² without intercept."""
        return self._result.params.total_ss

    @property
    def residual_ms(self) -> float:
        return self._result.params.residual_ms

    def summary(self) -> str:
        width = 80
        out = [
            "Analysis of Variance Table (sequential SS)",
            "=" * width,
            f"Response: {self.response}",
            "",
            f"{'Source':<20} {'Df':>6} {'Sum Sq':>14} {'Mean Sq':>14} "
            f"{'F value':>10} {'Pr(>F)':>12}",
            "-" * width,
        ]
        for r in self.table:
            ms = f"{r.mean_sq:>14.4f}" if r.mean_sq is not None else " " * 14
            text = f"{r.term:<20} {r.df:>6} {r.sum_sq:>14.4f} {ms}"
            if r.f_value is not None:
                text += (
                    f" {r.f_value:>10.4f} {r.p_value:>12.4e} "
                    f"{_significance_stars(r.p_value)}"
                )
            out.append(text)
        out += ["-" * width, SIGNIF_LEGEND]
        return "\n".join(out)

    def __repr__(self) -> str:
        return f"AnovaSolution(n={self.n_obs}, terms={self.terms})"


@dataclass(repr=False)
class Drop1Solution(_TableView[Drop1Params]):
    """
    Single term deletions returned by drop1().

    The first row, ``<none>``, is the full model with only RSS and AIC;
    each later row removes one term from the model and refits.
    """

    @property
    def scope(self) -> str:
        return self._result.params.scope

    def summary(self) -> str:
        width = 88
        out = [
            "Single term deletions",
            "=" * width,
            f"Response: {self.response}",
            "",
            f"{'':<20} {'Df':>4} {'Sum of Sq':>12} {'RSS':>12} {'AIC':>10} "
            f"{'F value':>10} {'Pr(>F)':>12}",
            "-" * width,
        ]
        for r in self.table:
            df = f"{r.df:>4}" if r.df is not None else " " * 4
            ss = f"{r.sum_sq:>12.4f}" if r.sum_sq is not None else " " * 12
            text = f"{r.term:<20} {df} {ss} {r.rss:>12.4f} {r.aic:>10.4f}"
            if r.f_value is not None:
                text += (
                    f" {r.f_value:>10.4f} {r.p_value:>12.4e} "
                    f"{_significance_stars(r.p_value)}"
                )
            out.append(text)
        out += ["-" * width, SIGNIF_LEGEND]
        return "\n".join(out)

    def __repr__(self) -> str:
        return f"Drop1Solution(n={self.n_obs}, scope={self.scope!r}, terms={self.terms})"


_STARS = ((0.001, "***"), (0.01, "**"), (0.05, "*"), (0.1, "."))


def _significance_stars(p: float | None) -> str:
    if p is None or np.isnan(p):
        return ""
    for cutoff, stars in _STARS:
        if p < cutoff:
            return stars
    return ""
