"""
Evolutionary Engine

Runs the generational loop:

    interceptor.before
    -> initialize population (when empty)
    -> evaluate
    -> select parents  (floor((1 - survival_rate) * N))
    -> select survivors (ceil(survival_rate * N))
    -> alter parents (alterers applied in order)
    -> merge survivors and offspring
    -> evaluate
    -> interceptor.after, generation + 1

until any limit holds. Every stochastic step draws from the engine's single
random generator, so a seeded run is reproducible.

Author: Helix Team
Python: 3.11+
"""

from __future__ import annotations

import math
import random
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from fractions import Fraction
from typing import TYPE_CHECKING

from loguru import logger

from ..constraints import constraints
from ..exceptions import EngineConfigError, EvolutionStateError
from ..genome.encoding import GenotypeFactory, Individual
from ..operators.base import Alterer
from ..operators.selection import (
    RandomSelector,
    RouletteWheelSelector,
    Selector,
    TournamentSelector,
)
from ..ranking import FitnessMaxRanker, FitnessMinRanker, IndividualRanker
from ..rng import make_rng
from ..state import EvolutionState
from .evaluators import (
    EvaluationExecutor,
    FitnessFunction,
    ParallelEvaluator,
    SequentialEvaluator,
)
from .interceptor import EvolutionInterceptor
from .limits import Limit, MaxGenerations, SteadyGenerations, TargetFitness, TimeLimit
from .listeners import EvolutionListener, LoggingListener

if TYPE_CHECKING:
    from ..config import HelixConfig, SelectionConfig


def survivor_count(survival_rate: float, population_size: int) -> int:
    """``ceil(survival_rate * population_size)`` computed on the decimal value of the rate."""
    return math.ceil(Fraction(str(survival_rate)) * population_size)


def parent_count(survival_rate: float, population_size: int) -> int:
    """``floor((1 - survival_rate) * population_size)``; complements ``survivor_count``."""
    return math.floor((1 - Fraction(str(survival_rate))) * population_size)


# =============================================================================
# Abstract Engine
# =============================================================================


class AbstractEvolutionaryAlgorithm(ABC):
    """
    Generation loop with listeners, limits and an interceptor.

    Subclasses define what one generation does in ``iterate_generation``.
    """

    def __init__(
        self,
        limits: Sequence[Limit],
        ranker: IndividualRanker,
        evaluator: EvaluationExecutor,
        listeners: Sequence[EvolutionListener] = (),
        interceptor: EvolutionInterceptor | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.limits = list(limits)
        self.ranker = ranker
        self.evaluator = evaluator
        self.listeners = list(listeners)
        self.interceptor = interceptor or EvolutionInterceptor.identity()
        self.rng = rng or make_rng()
        self.clock = clock
        self.state = EvolutionState.empty(ranker)
        self._started_at: float | None = None

        for limit in self.limits:
            limit.engine = self
            if limit.listener is not None and limit.listener not in self.listeners:
                self.listeners.append(limit.listener)

    @property
    def elapsed_time(self) -> float:
        """Seconds since the current ``evolve`` call started (0 before any run)."""
        if self._started_at is None:
            return 0.0
        return self.clock() - self._started_at

    def _notify(self, hook: str, state: EvolutionState) -> None:
        for listener in self.listeners:
            getattr(listener, hook)(state)

    def evolve(self, state: EvolutionState | None = None) -> EvolutionState:
        """
        Run generations until a limit holds.

        Args:
            state: Starting state (defaults to the engine's current state)

        Returns:
            Final evolution state
        """
        state = self.state if state is None else state
        self._started_at = self.clock()
        self._notify("on_evolution_started", state)

        while True:
            self._notify("on_generation_started", state)
            state = self.iterate_generation(state)
            self.state = state
            self._notify("on_generation_ended", state)
            if any(limit(state) for limit in self.limits):
                break

        self._notify("on_evolution_ended", state)
        logger.info(
            "Evolution finished",
            generation=state.generation,
            elapsed=round(self.elapsed_time, 4),
        )
        return state

    @abstractmethod
    def iterate_generation(self, state: EvolutionState) -> EvolutionState:
        """Run one generation."""


# =============================================================================
# Genetic Algorithm
# =============================================================================


class GeneticAlgorithm(AbstractEvolutionaryAlgorithm):
    """
    Generational genetic algorithm.

    Args:
        genotype_factory: Creates the initial genotypes
        fitness_function: Fitness of a genotype (alternative to ``evaluator``)
        evaluator: Custom evaluation executor (alternative to ``fitness_function``)
        population_size: Individuals per generation
        survival_rate: Fraction of each generation drawn as survivors
        parent_selector: Selects the individuals to alter
        survivor_selector: Selects the individuals kept unchanged
        alterers: Crossovers and mutators, applied in order
        limits: Termination conditions (at least one)
        ranker: Orders individuals by fitness
        listeners: Observers of the run
        interceptor: Hooks around every generation
        rng: Random generator (alternative to ``seed``)
        seed: Seed for a fresh random generator
        clock: Monotonic clock used for ``elapsed_time``
    """

    def __init__(
        self,
        genotype_factory: GenotypeFactory,
        fitness_function: FitnessFunction | None = None,
        *,
        evaluator: EvaluationExecutor | None = None,
        population_size: int = 50,
        survival_rate: float = 0.4,
        parent_selector: Selector | None = None,
        survivor_selector: Selector | None = None,
        alterers: Sequence[Alterer] = (),
        limits: Sequence[Limit] = (),
        ranker: IndividualRanker | None = None,
        listeners: Sequence[EvolutionListener] = (),
        interceptor: EvolutionInterceptor | None = None,
        rng: random.Random | None = None,
        seed: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        with constraints() as c:
            c.require(
                f"Population size ({population_size}) must be positive",
                population_size > 0,
                EngineConfigError,
            )
            c.require(
                f"Survival rate ({survival_rate}) must be in [0.0, 1.0]",
                0.0 <= survival_rate <= 1.0,
                EngineConfigError,
            )
            c.require("At least one limit must be given", len(limits) > 0, EngineConfigError)
            c.require(
                "Exactly one of a fitness function or an evaluator must be given",
                (fitness_function is None) != (evaluator is None),
                EngineConfigError,
            )
            c.require(
                "A random generator and a seed cannot both be given",
                rng is None or seed is None,
                EngineConfigError,
            )

        super().__init__(
            limits=limits,
            ranker=ranker or FitnessMaxRanker(),
            evaluator=evaluator or SequentialEvaluator(fitness_function),
            listeners=listeners,
            interceptor=interceptor,
            rng=rng or make_rng(seed),
            clock=clock,
        )
        self.genotype_factory = genotype_factory
        self.population_size = population_size
        self.survival_rate = survival_rate
        self.parent_selector = parent_selector or TournamentSelector()
        self.survivor_selector = survivor_selector or TournamentSelector()
        self.alterers = list(alterers)

        logger.info(
            "Initialized GeneticAlgorithm",
            population_size=population_size,
            survival_rate=survival_rate,
            parent_selector=repr(self.parent_selector),
            survivor_selector=repr(self.survivor_selector),
            alterers=len(self.alterers),
            limits=len(self.limits),
        )

    @property
    def survivor_count(self) -> int:
        return survivor_count(self.survival_rate, self.population_size)

    @property
    def parent_count(self) -> int:
        return parent_count(self.survival_rate, self.population_size)

    def iterate_generation(self, state: EvolutionState) -> EvolutionState:
        state = self.interceptor.before(state)
        state = self.start_evolution(state)
        state = self.evaluate_population(state)
        parents = self.select_parents(state)
        survivors = self.select_survivors(state)
        offspring = self.alter(parents)
        merged = state.with_population(survivors.population + offspring.population)
        state = self.evaluate_population(merged)
        state = self.interceptor.after(state)

        logger.debug(
            "Generation complete",
            generation=state.generation,
            best=state.best().fitness,
        )
        return state.copy(generation=state.generation + 1)

    def start_evolution(self, state: EvolutionState) -> EvolutionState:
        """Create the initial population when ``state`` has none."""
        if not state.is_empty():
            return state

        self._notify("on_initialization_started", state)
        population = tuple(
            Individual(self.genotype_factory.make(self.rng))
            for _ in range(self.population_size)
        )
        state = state.with_population(population)
        self._notify("on_initialization_ended", state)
        return state

    def evaluate_population(self, state: EvolutionState, force: bool = False) -> EvolutionState:
        """Evaluate the individuals of ``state`` that have no fitness yet."""
        with constraints() as c:
            c.require(
                "Population size must be the same as the expected population size",
                state.size == self.population_size,
                EvolutionStateError,
            )

        self._notify("on_evaluation_started", state)
        evaluated = self.evaluator(state, force)

        with constraints() as c:
            c.require(
                "Evaluated population size must be the same as the expected population size",
                evaluated.size == self.population_size,
                EvolutionStateError,
            )
            c.require(
                "There are unevaluated individuals in the population",
                all(individual.is_evaluated() for individual in evaluated.population),
                EvolutionStateError,
            )

        self._notify("on_evaluation_ended", evaluated)
        return evaluated

    def select_parents(self, state: EvolutionState) -> EvolutionState:
        self._notify("on_parent_selection_started", state)
        parents = self.parent_selector(state, self.parent_count, self.rng)
        self._notify("on_parent_selection_ended", parents)
        return parents

    def select_survivors(self, state: EvolutionState) -> EvolutionState:
        self._notify("on_survivor_selection_started", state)
        survivors = self.survivor_selector(state, self.survivor_count, self.rng)
        self._notify("on_survivor_selection_ended", survivors)
        return survivors

    def alter(self, parents: EvolutionState) -> EvolutionState:
        """Apply every alterer in order to the parents."""
        self._notify("on_alteration_started", parents)
        offspring = parents
        for alterer in self.alterers:
            offspring = alterer(offspring, parents.size, self.rng)

        with constraints() as c:
            c.require(
                f"Alteration must produce {parents.size} individuals, produced {offspring.size}",
                offspring.size == parents.size,
                EvolutionStateError,
            )

        self._notify("on_alteration_ended", offspring)
        return offspring

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    @classmethod
    def from_config(
        cls,
        config: HelixConfig,
        genotype_factory: GenotypeFactory,
        fitness_function: FitnessFunction,
        alterers: Sequence[Alterer] = (),
        listeners: Sequence[EvolutionListener] = (),
    ) -> GeneticAlgorithm:
        """
        Build an engine from a HelixConfig.

        Args:
            config: Helix configuration
            genotype_factory: Creates the initial genotypes
            fitness_function: Fitness of a genotype
            alterers: Crossovers and mutators, applied in order
            listeners: Extra listeners

        Returns:
            Configured GeneticAlgorithm
        """
        evolution = config.evolution

        limits: list[Limit] = [MaxGenerations(evolution.max_generations)]
        if evolution.target_fitness is not None:
            limits.append(TargetFitness(evolution.target_fitness))
        if evolution.steady_generations is not None:
            limits.append(SteadyGenerations(evolution.steady_generations))
        if evolution.time_limit is not None:
            limits.append(TimeLimit(evolution.time_limit))

        ranker = FitnessMaxRanker() if evolution.objective == "maximize" else FitnessMinRanker()

        evaluator = None
        if config.evaluation.parallel:
            evaluator = ParallelEvaluator(
                fitness_function,
                max_workers=config.evaluation.max_workers,
                seed=config.evaluation.seed,
            )

        all_listeners = list(listeners)
        if config.logging.progress:
            all_listeners.append(LoggingListener(every=config.logging.progress_every))

        return cls(
            genotype_factory,
            None if evaluator is not None else fitness_function,
            evaluator=evaluator,
            population_size=evolution.population_size,
            survival_rate=evolution.survival_rate,
            parent_selector=_make_selector(config.selection.parent_selector, config.selection),
            survivor_selector=_make_selector(config.selection.survivor_selector, config.selection),
            alterers=alterers,
            limits=limits,
            ranker=ranker,
            listeners=all_listeners,
            seed=evolution.seed,
        )


def _make_selector(kind: str, selection: SelectionConfig) -> Selector:
    match kind:
        case "tournament":
            return TournamentSelector(selection.tournament_size)
        case "roulette":
            return RouletteWheelSelector(sorted=selection.sorted)
        case "random":
            return RandomSelector()
        case _:
            raise ValueError(f"Unknown selector: {kind}")


__all__ = [
    "survivor_count",
    "parent_count",
    "AbstractEvolutionaryAlgorithm",
    "GeneticAlgorithm",
]
