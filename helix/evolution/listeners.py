"""
Evolution Listeners

Listeners observe an evolutionary run through hooks called by the engine at
the start and end of every phase. All hooks are no-ops by default.

- EvolutionListener: no-op base
- EvolutionRecorder: builds an EvolutionRecord with timings and snapshots
- LoggingListener: reports progress through loguru

Author: Helix Team
Python: 3.11+
"""

from __future__ import annotations

import time
from collections.abc import Callable

from ..history import (
    EvolutionRecord,
    GenerationRecord,
    IndividualRecord,
    PopulationStatistics,
    compute_steady_generations,
)
from ..logging_config import (
    log_evolution_complete,
    log_evolution_generation,
    log_evolution_start,
)
from ..ranking import FitnessMaxRanker, IndividualRanker
from ..state import EvolutionState


class EvolutionListener:
    """Base listener; every hook does nothing."""

    def on_evolution_started(self, state: EvolutionState) -> None:
        pass

    def on_evolution_ended(self, state: EvolutionState) -> None:
        pass

    def on_generation_started(self, state: EvolutionState) -> None:
        pass

    def on_generation_ended(self, state: EvolutionState) -> None:
        pass

    def on_initialization_started(self, state: EvolutionState) -> None:
        pass

    def on_initialization_ended(self, state: EvolutionState) -> None:
        pass

    def on_evaluation_started(self, state: EvolutionState) -> None:
        pass

    def on_evaluation_ended(self, state: EvolutionState) -> None:
        pass

    def on_parent_selection_started(self, state: EvolutionState) -> None:
        pass

    def on_parent_selection_ended(self, state: EvolutionState) -> None:
        pass

    def on_survivor_selection_started(self, state: EvolutionState) -> None:
        pass

    def on_survivor_selection_ended(self, state: EvolutionState) -> None:
        pass

    def on_alteration_started(self, state: EvolutionState) -> None:
        pass

    def on_alteration_ended(self, state: EvolutionState) -> None:
        pass


# =============================================================================
# Recorder
# =============================================================================


class EvolutionRecorder(EvolutionListener):
    """
    Records every generation of a run.

    Phase durations are stored in ``GenerationRecord.timings`` under the keys
    ``generation``, ``evaluation``, ``parent_selection``,
    ``survivor_selection`` and ``alteration``. Evaluation time accumulates
    over both evaluations of a generation.

    Args:
        ranker: Ranker used for statistics and the steady counter; replaced
            by the state's ranker when a run starts
        clock: Monotonic clock returning seconds
        keep_populations: Store individual snapshots (disable for long runs)
    """

    def __init__(
        self,
        ranker: IndividualRanker | None = None,
        clock: Callable[[], float] = time.perf_counter,
        keep_populations: bool = True,
    ):
        self.ranker = ranker or FitnessMaxRanker()
        self.clock = clock
        self.keep_populations = keep_populations
        self.evolution = EvolutionRecord()
        self._current: GenerationRecord | None = None
        self._started: dict[str, float] = {}

    @property
    def generations(self) -> list[GenerationRecord]:
        return self.evolution.generations

    @property
    def current(self) -> GenerationRecord | None:
        return self._current

    def fittest(self) -> IndividualRecord | None:
        """Best individual of the latest recorded generation."""
        last = self.evolution.last
        return last.best(self.ranker) if last else None

    def _start(self, phase: str) -> None:
        self._started[phase] = self.clock()

    def _stop(self, phase: str) -> None:
        started = self._started.pop(phase, None)
        if started is None or self._current is None:
            return
        elapsed = self.clock() - started
        self._current.timings[phase] = self._current.timings.get(phase, 0.0) + elapsed

    def _snapshot(self, state: EvolutionState) -> list[IndividualRecord]:
        if not self.keep_populations:
            return []
        return [IndividualRecord.from_individual(ind) for ind in state.population]

    def on_evolution_started(self, state: EvolutionState) -> None:
        self.ranker = state.ranker
        self.evolution = EvolutionRecord()
        self._started = {"evolution": self.clock()}

    def on_evolution_ended(self, state: EvolutionState) -> None:
        started = self._started.pop("evolution", None)
        if started is not None:
            self.evolution.duration = self.clock() - started

    def on_initialization_started(self, state: EvolutionState) -> None:
        self._started["initialization"] = self.clock()

    def on_initialization_ended(self, state: EvolutionState) -> None:
        started = self._started.pop("initialization", None)
        if started is not None:
            self.evolution.initialization_time = self.clock() - started

    def on_generation_started(self, state: EvolutionState) -> None:
        self._current = GenerationRecord(state.generation, parents=self._snapshot(state))
        self.evolution.generations.append(self._current)
        self._start("generation")

    def on_generation_ended(self, state: EvolutionState) -> None:
        self._stop("generation")
        if self._current is None:
            return
        self._current.offspring = self._snapshot(state)
        self._current.statistics = PopulationStatistics.from_individuals(
            list(state.population), self.ranker
        )
        if not self.keep_populations:
            best = state.best() if state.population else None
            if best is not None and best.is_evaluated():
                self._current.offspring = [IndividualRecord.from_individual(best)]
        self._current.steady = compute_steady_generations(self.ranker, self.evolution)

    def on_evaluation_started(self, state: EvolutionState) -> None:
        self._start("evaluation")

    def on_evaluation_ended(self, state: EvolutionState) -> None:
        self._stop("evaluation")

    def on_parent_selection_started(self, state: EvolutionState) -> None:
        self._start("parent_selection")

    def on_parent_selection_ended(self, state: EvolutionState) -> None:
        self._stop("parent_selection")

    def on_survivor_selection_started(self, state: EvolutionState) -> None:
        self._start("survivor_selection")

    def on_survivor_selection_ended(self, state: EvolutionState) -> None:
        self._stop("survivor_selection")

    def on_alteration_started(self, state: EvolutionState) -> None:
        self._start("alteration")

    def on_alteration_ended(self, state: EvolutionState) -> None:
        self._stop("alteration")


# =============================================================================
# Logging
# =============================================================================


class LoggingListener(EvolutionListener):
    """
    Logs run start, every ``every`` generations, and run completion.

    Args:
        every: Log one line per this many generations
        clock: Monotonic clock returning seconds
    """

    def __init__(self, every: int = 1, clock: Callable[[], float] = time.perf_counter):
        self.every = max(1, every)
        self.clock = clock
        self._run_started = 0.0
        self._generation_started = 0.0
        self._generations = 0

    def on_evolution_started(self, state: EvolutionState) -> None:
        self._run_started = self.clock()
        self._generations = 0
        log_evolution_start(generation=state.generation, population_size=state.size)

    def on_generation_started(self, state: EvolutionState) -> None:
        self._generation_started = self.clock()

    def on_generation_ended(self, state: EvolutionState) -> None:
        self._generations += 1
        if state.is_empty() or self._generations % self.every:
            return
        fitness = [ind.fitness for ind in state.population if ind.is_evaluated()]
        if not fitness:
            return
        log_evolution_generation(
            generation=state.generation,
            best_fitness=state.best().fitness,
            avg_fitness=sum(fitness) / len(fitness),
            generation_time=self.clock() - self._generation_started,
        )

    def on_evolution_ended(self, state: EvolutionState) -> None:
        best = state.best() if state.population else None
        log_evolution_complete(
            best_fitness=best.fitness if best is not None else None,
            total_generations=state.generation,
            total_time=self.clock() - self._run_started,
        )


__all__ = [
    "EvolutionListener",
    "EvolutionRecorder",
    "LoggingListener",
]
