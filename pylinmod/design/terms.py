"""
Model terms.

A TermList is the programmatic stand-in for a model formula: an intercept
flag plus an ordered sequence of main effects and interactions, built with
named operations instead of parsed from a string.

    terms = (TermList.intercept_only()
             .add_main('group')
             .add_main('x')
             .add_interaction('group', 'x'))

    TermList.intercept_only().cross('a', 'b')     # a + b + a:b
    terms.remove_intercept()                      # no intercept
    terms.remove('group:x')                       # drop a term

Order matters for sequential decomposition and is preserved; terms are
compared by their set of variables, so ``a:b`` and ``b:a`` are the same
term.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations
from typing import Iterable, Iterator, Union

from pylinmod.core.exceptions import ConfigError

INTERCEPT = 'Intercept'


@dataclass(frozen=True, eq=False)
class Term:
    """
    One model term.

    Attributes:
        variables: Variable names in declared order. Empty for the
            intercept, one name for a main effect, two or more for an
            interaction.
    """
    variables: tuple[str, ...]

    def __post_init__(self):
        if len(set(self.variables)) != len(self.variables):
            raise ConfigError(
                f"Term repeats a variable: {':'.join(self.variables)}",
                identifier=':'.join(self.variables),
            )

    @classmethod
    def parse(cls, spec: Union[str, Term]) -> Term:
        """Accept a Term or a colon-joined name such as ``'a:b'``."""
        if isinstance(spec, Term):
            return spec
        if spec == INTERCEPT:
            return cls(())
        parts = tuple(p.strip() for p in str(spec).split(':'))
        if any(not p for p in parts):
            raise ConfigError(f"Malformed term {spec!r}", identifier=str(spec))
        return cls(parts)

    @property
    def key(self) -> frozenset[str]:
        return frozenset(self.variables)

    @property
    def name(self) -> str:
        return ':'.join(self.variables) if self.variables else INTERCEPT

    @property
    def order(self) -> int:
        return len(self.variables)

    @property
    def is_intercept(self) -> bool:
        return not self.variables

    def contains(self, other: Term) -> bool:
        """True if ``other`` is a proper margin of this term."""
        return other.key < self.key and not other.is_intercept

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Term):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return f"Term({self.name!r})"


@dataclass(frozen=True)
class TermList:
    """
    Ordered, immutable list of model terms plus an intercept flag.

    Every operation returns a new TermList. Adding a term that is already
    present is a no-op; removing a term that is absent is a ConfigError.
    """
    terms: tuple[Term, ...] = ()
    intercept: bool = True

    # === Construction ===

    @classmethod
    def intercept_only(cls) -> TermList:
        return cls((), True)

    @classmethod
    def empty(cls) -> TermList:
        """No terms and no intercept."""
        return cls((), False)

    @classmethod
    def of(cls, *terms: Union[str, Term], intercept: bool = True) -> TermList:
        """Build from term names, e.g. ``TermList.of('a', 'x', 'a:x')``."""
        result = cls((), intercept)
        for spec in terms:
            result = result._add(Term.parse(spec))
        return result

    # === Named operations ===

    def _add(self, term: Term) -> TermList:
        if term.is_intercept:
            return self.add_intercept()
        if term in self.terms:
            return self
        return TermList(self.terms + (term,), self.intercept)

    def add_main(self, name: str) -> TermList:
        """Append a main effect."""
        return self._add(Term((name,)))

    def add_interaction(self, *names: str) -> TermList:
        """
        Append the interaction of two or more distinct variables.

        Raises:
            ConfigError: Fewer than two variables, or a repeated variable
        """
        if len(names) < 2:
            raise ConfigError(
                f"An interaction needs at least two variables, got {list(names)}",
                identifier=':'.join(names),
            )
        return self._add(Term(tuple(names)))

    def cross(self, *names: str) -> TermList:
        """
        Append all main effects and interactions of the variables, in
        increasing order (``a*b*c``: a, b, c, a:b, a:c, b:c, a:b:c).
        """
        result = self
        for k in range(1, len(names) + 1):
            for combo in combinations(names, k):
                result = result._add(Term(combo))
        return result

    def remove(self, term: Union[str, Term]) -> TermList:
        """
        Drop a term.

        Raises:
            ConfigError: The term is not in the list
        """
        target = Term.parse(term)
        if target.is_intercept:
            return self.remove_intercept()
        if target not in self.terms:
            raise ConfigError(
                f"Term {target.name!r} is not in the model; terms: {self.names}",
                identifier=target.name,
            )
        return TermList(tuple(t for t in self.terms if t != target), self.intercept)

    def remove_intercept(self) -> TermList:
        return TermList(self.terms, False)

    def add_intercept(self) -> TermList:
        return TermList(self.terms, True)

    def reorder(self, order: Iterable[Union[str, Term]]) -> TermList:
        """
        Same terms in a new order.

        Raises:
            ConfigError: ``order`` is not a permutation of the terms
        """
        new_terms = tuple(Term.parse(t) for t in order)
        if len(new_terms) != len(self.terms) or set(new_terms) != set(self.terms):
            raise ConfigError(
                f"Reorder must be a permutation of {self.names}",
                identifier=', '.join(t.name for t in new_terms),
            )
        return TermList(new_terms, self.intercept)

    def prefix(self, k: int) -> TermList:
        """The first k terms, same intercept flag."""
        return TermList(self.terms[:k], self.intercept)

    # === Queries ===

    @property
    def names(self) -> list[str]:
        return [t.name for t in self.terms]

    @property
    def variables(self) -> tuple[str, ...]:
        """Distinct variables referenced, in first-use order."""
        seen: dict[str, None] = {}
        for term in self.terms:
            for v in term.variables:
                seen.setdefault(v)
        return tuple(seen)

    def marginal_terms(self) -> list[Term]:
        """Terms not contained in any other term (R's drop.scope)."""
        return [
            t for t in self.terms
            if not any(other.contains(t) for other in self.terms)
        ]

    def validate(self, dataset) -> None:
        """
        Check every referenced variable is declared in the dataset.

        Raises:
            ConfigError: naming the first undeclared variable
        """
        for name in self.variables:
            if name not in dataset:
                raise ConfigError(
                    f"Term references undeclared variable {name!r}; "
                    f"declared: {sorted(dataset.keys())}",
                    identifier=name,
                )

    def __iter__(self) -> Iterator[Term]:
        return iter(self.terms)

    def __len__(self) -> int:
        return len(self.terms)

    def __contains__(self, term: object) -> bool:
        if isinstance(term, str):
            term = Term.parse(term)
        if isinstance(term, Term) and term.is_intercept:
            return self.intercept
        return term in self.terms

    def __repr__(self) -> str:
        parts = (['1'] if self.intercept else ['0']) + self.names
        return f"TermList({' + '.join(parts)})"
