"""
Fitness Evaluators

An evaluator assigns fitness to the individuals of a state. Only
unevaluated individuals are evaluated unless ``force`` is set, and the
order of the population is always preserved.

- SequentialEvaluator: evaluates in the calling thread
- ParallelEvaluator: evaluates on a thread pool; with a ``seed`` each
  evaluation receives its own random substream

Author: Helix Team
Python: 3.11+
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

import numpy as np
from loguru import logger

from ..genome.encoding import Genotype
from ..rng import spawn_substreams
from ..state import EvolutionState

FitnessFunction = Callable[[Genotype], float]
StochasticFitnessFunction = Callable[[Genotype, random.Random], float]


class EvaluationExecutor(ABC):
    """Assigns fitness to the individuals of a state."""

    @abstractmethod
    def __call__(self, state: EvolutionState, force: bool = False) -> EvolutionState:
        """Evaluated copy of ``state``."""


class SequentialEvaluator(EvaluationExecutor):
    """Evaluates individuals one after another."""

    def __init__(self, function: FitnessFunction):
        self.function = function

    def __call__(self, state: EvolutionState, force: bool = False) -> EvolutionState:
        return state.with_population(
            individual.with_fitness(self.function(individual.genotype))
            if force or not individual.is_evaluated()
            else individual
            for individual in state.population
        )


class ParallelEvaluator(EvaluationExecutor):
    """
    Evaluates individuals concurrently on a thread pool.

    Without a ``seed`` the fitness function is called as ``function(genotype)``.
    With a ``seed`` it is called as ``function(genotype, rng)`` where ``rng``
    is a substream private to that evaluation; the streams are derived from
    the seed and the number of evaluations already performed, so a seeded run
    is reproducible regardless of thread scheduling.

    Args:
        function: Fitness function
        max_workers: Thread pool size (None lets the executor decide)
        seed: Root seed for per-evaluation substreams
    """

    def __init__(
        self,
        function: FitnessFunction | StochasticFitnessFunction,
        max_workers: int | None = None,
        seed: int | None = None,
    ):
        self.function = function
        self.max_workers = max_workers
        self.seed = seed
        self._batches = 0

        logger.debug("Initialized ParallelEvaluator", max_workers=max_workers, seeded=seed is not None)

    def __call__(self, state: EvolutionState, force: bool = False) -> EvolutionState:
        pending = [
            index
            for index, individual in enumerate(state.population)
            if force or not individual.is_evaluated()
        ]
        if not pending:
            return state

        if self.seed is None:
            jobs = [(self.function, (state.population[i].genotype,)) for i in pending]
        else:
            streams = spawn_substreams(_batch_seed(self.seed, self._batches), len(pending))
            jobs = [
                (self.function, (state.population[i].genotype, stream))
                for i, stream in zip(pending, streams)
            ]
        self._batches += 1

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(function, *args) for function, args in jobs]
            fitness = [future.result() for future in futures]

        population = list(state.population)
        for index, value in zip(pending, fitness):
            population[index] = population[index].with_fitness(value)
        return state.with_population(population)


def _batch_seed(seed: int, batch: int) -> np.random.SeedSequence:
    return np.random.SeedSequence(entropy=seed, spawn_key=(batch,))


__all__ = [
    "FitnessFunction",
    "EvaluationExecutor",
    "SequentialEvaluator",
    "ParallelEvaluator",
]
