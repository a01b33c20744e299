"""
Evolution State

Immutable snapshot of one point of an evolutionary run: the generation
counter, the population and the ranker used to compare its individuals.
Every phase of a generation consumes a state and returns a new one.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any

from .constraints import constraints
from .exceptions import EvolutionStateError
from .genome.encoding import Individual, Population
from .ranking import IndividualRanker


@dataclass(frozen=True)
class EvolutionState:
    """Generation number, population and ranker."""

    generation: int
    population: Population
    ranker: IndividualRanker

    def __post_init__(self) -> None:
        if not isinstance(self.population, tuple):
            object.__setattr__(self, "population", tuple(self.population))
        with constraints() as c:
            c.require(
                f"Generation must not be negative, got {self.generation}",
                self.generation >= 0,
                EvolutionStateError,
            )

    @classmethod
    def empty(cls, ranker: IndividualRanker) -> EvolutionState:
        return cls(0, (), ranker)

    @property
    def size(self) -> int:
        return len(self.population)

    def is_empty(self) -> bool:
        return not self.population

    def copy(self, **changes: Any) -> EvolutionState:
        """New state with ``changes`` applied."""
        return replace(self, **changes)

    def with_population(self, population: Iterable[Individual]) -> EvolutionState:
        return replace(self, population=tuple(population))

    def best(self) -> Individual:
        return self.ranker.best(self.population)


__all__ = ["EvolutionState"]
