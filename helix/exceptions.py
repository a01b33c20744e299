"""
Helix Exception Hierarchy

Every failure raised by the framework derives from HelixError. Individual
violated predicates are ConstraintError instances; a validation pass that
finds one or more of them raises a single CompositeError carrying all of
them, so callers see every problem at once instead of the first.

Hierarchy:
- HelixError
  - ConstraintError
    - configuration errors (engine, selectors, crossovers, mutators, limits,
      genetic material factories)
    - invocation errors (selection, crossover, mutation, index access)
    - EvolutionStateError for invariant violations during evolution
  - CompositeError

Author: Helix Team
Python: 3.11+
"""

from __future__ import annotations

from collections.abc import Iterable


class HelixError(Exception):
    """Base exception for all Helix errors."""

    pass


# =============================================================================
# Single Constraint Violations
# =============================================================================


class ConstraintError(HelixError):
    """A single named predicate that did not hold."""

    def __init__(self, description: str):
        super().__init__(description)
        self.description = description

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.description == other.description

    def __hash__(self) -> int:
        return hash((type(self), self.description))


class EngineConfigError(ConstraintError):
    """Invalid engine configuration (population size, survival rate, limits)."""

    pass


class SelectorConfigError(ConstraintError):
    """Invalid selector parameters."""

    pass


class CrossoverConfigError(ConstraintError):
    """Invalid crossover parameters."""

    pass


class MutatorConfigError(ConstraintError):
    """Invalid mutator parameters."""

    pass


class LimitConfigError(ConstraintError):
    """Invalid limit parameters."""

    pass


class GeneticMaterialConfigError(ConstraintError):
    """Invalid gene or chromosome factory parameters."""

    pass


class SelectionError(ConstraintError):
    """Selector invoked with bad arguments or produced the wrong output size."""

    pass


class CrossoverError(ConstraintError):
    """Crossover invoked with incompatible parents."""

    pass


class MutationError(ConstraintError):
    """Mutator invoked with incompatible input or produced bad output."""

    pass


class InvalidIndexError(ConstraintError):
    """Index out of the valid range of a genotype or chromosome."""

    pass


class EvolutionStateError(ConstraintError):
    """An invariant of the evolution loop was broken."""

    pass


# =============================================================================
# Aggregated Violations
# =============================================================================


class CompositeError(HelixError, ValueError):
    """
    Aggregates every constraint violated during one validation pass.

    Attributes:
        violations: Violated constraints, in the order they were checked
    """

    def __init__(self, violations: Iterable[ConstraintError]):
        self.violations: list[ConstraintError] = list(violations)
        super().__init__(self._format(self.violations))

    @staticmethod
    def _format(violations: list[ConstraintError]) -> str:
        body = ", ".join(f"{{ {v.description} }}" for v in violations)
        return f"Unfulfilled constraints: {body}"

    @property
    def descriptions(self) -> list[str]:
        """Descriptions of all violations."""
        return [v.description for v in self.violations]

    def has(self, error_type: type[ConstraintError]) -> bool:
        """Whether any violation is an instance of ``error_type``."""
        return any(isinstance(v, error_type) for v in self.violations)

    def matches(self, fragment: str) -> bool:
        """Whether any violation description contains ``fragment``."""
        return any(fragment in v.description for v in self.violations)


__all__ = [
    "HelixError",
    "ConstraintError",
    "EngineConfigError",
    "SelectorConfigError",
    "CrossoverConfigError",
    "MutatorConfigError",
    "LimitConfigError",
    "GeneticMaterialConfigError",
    "SelectionError",
    "CrossoverError",
    "MutationError",
    "InvalidIndexError",
    "EvolutionStateError",
    "CompositeError",
]
