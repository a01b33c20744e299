"""
Selection Operators

Selectors sample individuals from a population, with replacement, to act as
parents or survivors. All selectors share the same contract: the population
must not be empty, the count must not be negative, and the result holds
exactly ``count`` individuals.

Selectors:
- TournamentSelector: best of ``tournament_size`` random contestants
- RouletteWheelSelector: fitness-proportional sampling
- RandomSelector: uniform sampling

Author: Helix Team
Python: 3.11+
"""

from __future__ import annotations

import random
from abc import abstractmethod
from collections.abc import Sequence

import numpy as np
from loguru import logger

from ..constraints import constraints
from ..exceptions import SelectionError, SelectorConfigError
from ..genome.encoding import Individual, Population
from ..ranking import IndividualRanker
from ..state import EvolutionState
from .base import GeneticOperator


class Selector(GeneticOperator):
    """Base class for all selectors."""

    def __call__(
        self,
        state: EvolutionState,
        output_size: int,
        rng: random.Random,
    ) -> EvolutionState:
        with constraints() as c:
            c.require("Population must not be empty", not state.is_empty(), SelectionError)
            c.require(
                f"Selection count ({output_size}) must not be negative",
                output_size >= 0,
                SelectionError,
            )

        selected = self.select(state.population, output_size, state.ranker, rng)

        with constraints() as c:
            c.require(
                f"Expected output size ({output_size}) must be equal to "
                f"actual output size ({len(selected)})",
                len(selected) == output_size,
                SelectionError,
            )
        return state.with_population(selected)

    @abstractmethod
    def select(
        self,
        population: Sequence[Individual],
        count: int,
        ranker: IndividualRanker,
        rng: random.Random,
    ) -> Population:
        """Pick ``count`` individuals from ``population``."""


# =============================================================================
# Tournament
# =============================================================================


class TournamentSelector(Selector):
    """
    Tournament selection.

    Each pick draws ``tournament_size`` contestants uniformly with
    replacement and keeps the best one according to the ranker (the first
    one on ties).
    """

    DEFAULT_SIZE = 3

    def __init__(self, tournament_size: int = DEFAULT_SIZE):
        with constraints() as c:
            c.require(
                f"The tournament size ({tournament_size}) must be positive",
                tournament_size > 0,
                SelectorConfigError,
            )
        self.tournament_size = tournament_size

        logger.debug("Initialized TournamentSelector", tournament_size=tournament_size)

    def select(
        self,
        population: Sequence[Individual],
        count: int,
        ranker: IndividualRanker,
        rng: random.Random,
    ) -> Population:
        size = len(population)
        winners = []
        for _ in range(count):
            contestants = [population[rng.randrange(size)] for _ in range(self.tournament_size)]
            winners.append(ranker.best(contestants))
        return tuple(winners)

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, TournamentSelector)
            and self.tournament_size == other.tournament_size
        )

    def __hash__(self) -> int:
        return hash((TournamentSelector, self.tournament_size))

    def __repr__(self) -> str:
        return f"TournamentSelector(tournament_size={self.tournament_size})"


# =============================================================================
# Roulette Wheel
# =============================================================================


class RouletteWheelSelector(Selector):
    """
    Fitness-proportional (roulette wheel) selection.

    Fitness values are passed through the ranker's ``fitness_transform`` and
    shifted so the smallest is not negative. A population whose total
    fitness is zero is sampled uniformly.

    Args:
        sorted: Sort the population best-first before laying out the wheel
    """

    def __init__(self, sorted: bool = False):
        self.sorted = sorted

    def probabilities(
        self,
        population: Sequence[Individual],
        ranker: IndividualRanker,
    ) -> np.ndarray:
        """Selection probability of each individual, summing to 1."""
        raw = [ind.fitness if ind.is_evaluated() else 0.0 for ind in population]
        fitness = np.asarray(ranker.fitness_transform(raw), dtype=float)
        fitness = fitness - min(float(fitness.min()), 0.0)
        total = float(fitness.sum())
        if total == 0.0 or not np.isfinite(total):
            return np.full(len(population), 1.0 / len(population))
        return fitness / total

    def select(
        self,
        population: Sequence[Individual],
        count: int,
        ranker: IndividualRanker,
        rng: random.Random,
    ) -> Population:
        pool = ranker.sort(population) if self.sorted else tuple(population)
        wheel = np.cumsum(self.probabilities(pool, ranker))
        last = len(pool) - 1
        picks = []
        for _ in range(count):
            index = int(np.searchsorted(wheel, rng.random(), side="right"))
            picks.append(pool[min(index, last)])
        return tuple(picks)

    def __repr__(self) -> str:
        return f"RouletteWheelSelector(sorted={self.sorted})"


# =============================================================================
# Random
# =============================================================================


class RandomSelector(Selector):
    """Uniform selection with replacement."""

    def select(
        self,
        population: Sequence[Individual],
        count: int,
        ranker: IndividualRanker,
        rng: random.Random,
    ) -> Population:
        return tuple(rng.choice(population) for _ in range(count))

    def __repr__(self) -> str:
        return "RandomSelector()"


__all__ = [
    "Selector",
    "TournamentSelector",
    "RouletteWheelSelector",
    "RandomSelector",
]
