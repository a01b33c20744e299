"""
Evolution Limits

A limit is a predicate over the evolution state checked after every
generation; the run stops as soon as any limit holds. Limits keep a weak
reference to the engine that owns them.

Limits:
- MaxGenerations: stop after a number of generations
- TargetFitness: stop once an individual reaches a fitness
- SteadyGenerations: stop when the best fitness stalls
- TimeLimit: stop after a wall-clock budget
- ListenLimit: generic listener-backed limit

Author: Helix Team
Python: 3.11+
"""

from __future__ import annotations

import math
import weakref
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..constraints import constraints
from ..exceptions import LimitConfigError
from ..state import EvolutionState
from .listeners import EvolutionListener, EvolutionRecorder

if TYPE_CHECKING:
    from .engine import AbstractEvolutionaryAlgorithm


class Limit(ABC):
    """Termination predicate."""

    listener: EvolutionListener | None = None

    def __init__(self) -> None:
        self._engine: weakref.ReferenceType[Any] | None = None

    @property
    def engine(self) -> AbstractEvolutionaryAlgorithm | None:
        return self._engine() if self._engine is not None else None

    @engine.setter
    def engine(self, engine: AbstractEvolutionaryAlgorithm | None) -> None:
        self._engine = weakref.ref(engine) if engine is not None else None

    @abstractmethod
    def __call__(self, state: EvolutionState) -> bool:
        """True when evolution must stop."""


class MaxGenerations(Limit):
    """Stops once ``generation >= max_generations``."""

    def __init__(self, max_generations: int):
        super().__init__()
        with constraints() as c:
            c.require(
                f"The maximum number of generations ({max_generations}) must be positive",
                max_generations > 0,
                LimitConfigError,
            )
        self.max_generations = max_generations

    def __call__(self, state: EvolutionState) -> bool:
        return state.generation >= self.max_generations

    def __repr__(self) -> str:
        return f"MaxGenerations({self.max_generations})"


class TargetFitness(Limit):
    """
    Stops once any individual's fitness satisfies a predicate.

    Args:
        target: Exact fitness to reach, or a predicate over fitness values
    """

    def __init__(self, target: float | Callable[[float], bool]):
        super().__init__()
        if callable(target):
            self.predicate = target
        else:
            self.predicate = lambda fitness: fitness == target
        self.target = target

    def __call__(self, state: EvolutionState) -> bool:
        return any(
            individual.is_evaluated() and self.predicate(individual.fitness)
            for individual in state.population
        )


class ListenLimit(Limit):
    """Limit whose predicate inspects what a listener has observed."""

    def __init__(
        self,
        listener: EvolutionListener,
        predicate: Callable[[EvolutionListener, EvolutionState], bool],
    ):
        super().__init__()
        self.listener = listener
        self.predicate = predicate

    def __call__(self, state: EvolutionState) -> bool:
        return self.predicate(self.listener, state)


class SteadyGenerations(ListenLimit):
    """Stops once the best fitness has not changed for ``generations`` generations."""

    def __init__(self, generations: int):
        with constraints() as c:
            c.require(
                f"Number of steady generations ({generations}) must be a positive integer",
                generations > 0,
                LimitConfigError,
            )
        self.generations = generations
        super().__init__(
            EvolutionRecorder(keep_populations=False),
            lambda listener, state: _last_steady(listener) >= self.generations,
        )

    def __repr__(self) -> str:
        return f"SteadyGenerations({self.generations})"


def _last_steady(recorder: EvolutionRecorder) -> int:
    last = recorder.evolution.last
    return last.steady if last is not None else 0


class TimeLimit(Limit):
    """Stops once the owning engine has been evolving for ``seconds``."""

    def __init__(self, seconds: float):
        super().__init__()
        with constraints() as c:
            c.require(
                f"The time limit ({seconds}) must be positive",
                seconds > 0 and not math.isnan(seconds),
                LimitConfigError,
            )
        self.seconds = seconds

    def __call__(self, state: EvolutionState) -> bool:
        engine = self.engine
        if engine is None:
            return False
        return engine.elapsed_time >= self.seconds

    def __repr__(self) -> str:
        return f"TimeLimit({self.seconds})"


__all__ = [
    "Limit",
    "MaxGenerations",
    "TargetFitness",
    "ListenLimit",
    "SteadyGenerations",
    "TimeLimit",
]
