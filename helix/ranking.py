"""
Individual Rankers

A ranker is a stateless comparator deciding which of two individuals is
better. ``compare(a, b)`` is positive when ``a`` is better, negative when
``b`` is better and zero on ties. Unevaluated individuals rank below every
evaluated one.

Author: Helix Team
Python: 3.11+
"""

from __future__ import annotations

import functools
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from .genome.encoding import Individual, Population


class IndividualRanker(ABC):
    """Orders individuals from best to worst."""

    maximize: bool = True

    @abstractmethod
    def compare(self, first: Individual, second: Individual) -> int:
        """Positive if ``first`` is better, negative if worse, 0 on ties."""

    def __call__(self, first: Individual, second: Individual) -> int:
        return self.compare(first, second)

    @property
    def key(self) -> Callable[[Individual], Any]:
        """Sort key where larger means better."""
        return functools.cmp_to_key(self.compare)

    def sort(self, population: Iterable[Individual]) -> Population:
        """Population sorted best first (stable)."""
        return tuple(sorted(population, key=self.key, reverse=True))

    def best(self, population: Sequence[Individual]) -> Individual:
        """First best individual."""
        return max(population, key=self.key)

    def fitness_transform(self, fitness: Sequence[float]) -> list[float]:
        """Map raw fitness values so that larger means better."""
        return list(fitness)


def _compare_fitness(first: float | None, second: float | None) -> int:
    if first is None and second is None:
        return 0
    if first is None:
        return -1
    if second is None:
        return 1
    return (first > second) - (first < second)


class FitnessMaxRanker(IndividualRanker):
    """Higher fitness is better."""

    maximize = True

    def compare(self, first: Individual, second: Individual) -> int:
        return _compare_fitness(first.fitness, second.fitness)

    def __repr__(self) -> str:
        return "FitnessMaxRanker()"


class FitnessMinRanker(IndividualRanker):
    """Lower fitness is better."""

    maximize = False

    def compare(self, first: Individual, second: Individual) -> int:
        if first.fitness is None or second.fitness is None:
            return _compare_fitness(first.fitness, second.fitness)
        return _compare_fitness(second.fitness, first.fitness)

    def fitness_transform(self, fitness: Sequence[float]) -> list[float]:
        """Reflect each value about the total, so the worst keeps a nonzero share."""
        total = sum(fitness)
        return [total - value for value in fitness]

    def __repr__(self) -> str:
        return "FitnessMinRanker()"


__all__ = [
    "IndividualRanker",
    "FitnessMaxRanker",
    "FitnessMinRanker",
]
