"""
Constraint Checking

A ``Constraints`` scope collects named predicates without failing fast.
Leaving a ``constraints()`` block raises one CompositeError holding every
predicate that did not hold.

Usage:
    with constraints() as c:
        c.require("Population must not be empty", len(population) > 0)
        c.require("Count must not be negative", count >= 0, SelectionError)

Author: Helix Team
Python: 3.11+
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Hashable, Iterable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from .exceptions import CompositeError, ConstraintError


class Constraints:
    """Collects constraint violations for a single validation pass."""

    def __init__(self) -> None:
        self._violations: list[ConstraintError] = []

    def require(
        self,
        description: str,
        condition: bool,
        error: type[ConstraintError] = ConstraintError,
    ) -> bool:
        """
        Record ``description`` as violated unless ``condition`` holds.

        Returns:
            The condition, so callers can guard dependent checks.
        """
        if not condition:
            self._violations.append(error(description))
        return bool(condition)

    @property
    def violations(self) -> list[ConstraintError]:
        return list(self._violations)

    @property
    def is_valid(self) -> bool:
        return not self._violations

    def check(self) -> None:
        """Raise a CompositeError if anything was violated."""
        if self._violations:
            raise CompositeError(self._violations)


@contextmanager
def constraints() -> Iterator[Constraints]:
    """Open a constraint scope; raises CompositeError on exit when violated."""
    scope = Constraints()
    yield scope
    scope.check()


# =============================================================================
# Predicates
# =============================================================================


def in_range(value: float, low: float, high: float) -> bool:
    """Inclusive range membership."""
    return low <= value <= high


def is_index(index: Any, size: int) -> bool:
    """True for a non-negative integer position below ``size``; slices and negative indices are rejected."""
    return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < size


def is_permutation(values: Sequence[Hashable]) -> bool:
    """True when no element occurs twice."""
    return len(set(values)) == len(values)


def same_multiset(first: Iterable[Any], second: Iterable[Any]) -> bool:
    """True when both iterables hold the same elements with the same counts."""
    return Counter(first) == Counter(second)


__all__ = [
    "Constraints",
    "constraints",
    "in_range",
    "is_index",
    "is_permutation",
    "same_multiset",
]
