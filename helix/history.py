"""
Evolution History Tracking

Records what happened during an evolutionary run:
- Per-generation snapshots (population before and after the generation)
- Phase timings (initialization, evaluation, selection, alteration)
- Fitness statistics and the steady-generation counter
- JSON export for analysis

Author: Helix Team
Python: 3.11+
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import numpy as np
from loguru import logger

from .constraints import constraints
from .exceptions import EvolutionStateError
from .genome.encoding import Individual
from .ranking import IndividualRanker


# =============================================================================
# Individual & Statistics Records
# =============================================================================


@dataclass(frozen=True)
class IndividualRecord:
    """Flattened genotype values and fitness of one individual."""

    values: tuple[Any, ...]
    fitness: float | None

    @classmethod
    def from_individual(cls, individual: Individual) -> IndividualRecord:
        return cls(tuple(individual.flatten()), individual.fitness)

    def to_dict(self) -> dict[str, Any]:
        return {"values": list(self.values), "fitness": self.fitness}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IndividualRecord:
        return cls(tuple(data["values"]), data.get("fitness"))


@dataclass
class PopulationStatistics:
    """Fitness statistics of one population."""

    size: int
    best_fitness: float
    worst_fitness: float
    mean_fitness: float
    median_fitness: float
    std_fitness: float

    @classmethod
    def from_individuals(
        cls,
        individuals: list[Individual],
        ranker: IndividualRanker,
    ) -> PopulationStatistics | None:
        """Statistics of the evaluated individuals, or None if there are none."""
        evaluated = [ind for ind in individuals if ind.is_evaluated()]
        if not evaluated:
            return None
        fitness = np.array([ind.fitness for ind in evaluated], dtype=float)
        ranked = ranker.sort(evaluated)
        return cls(
            size=len(individuals),
            best_fitness=float(ranked[0].fitness),
            worst_fitness=float(ranked[-1].fitness),
            mean_fitness=float(np.mean(fitness)),
            median_fitness=float(np.median(fitness)),
            std_fitness=float(np.std(fitness)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "size": self.size,
            "best_fitness": self.best_fitness,
            "worst_fitness": self.worst_fitness,
            "mean_fitness": self.mean_fitness,
            "median_fitness": self.median_fitness,
            "std_fitness": self.std_fitness,
        }


# =============================================================================
# Generation Record
# =============================================================================


@dataclass
class GenerationRecord:
    """
    Record of a single generation.

    Captures:
    - Population entering the generation (parents) and leaving it (offspring)
    - Seconds spent in each phase
    - Statistics of the resulting population
    - Consecutive generations without change of the best fitness (steady)
    """

    generation: int
    steady: int = 0
    parents: list[IndividualRecord] = field(default_factory=list)
    offspring: list[IndividualRecord] = field(default_factory=list)
    timings: dict[str, float] = field(default_factory=dict)
    statistics: PopulationStatistics | None = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def __post_init__(self) -> None:
        with constraints() as c:
            c.require(
                f"The generation number ({self.generation}) must not be negative",
                self.generation >= 0,
                EvolutionStateError,
            )
            c.require(
                f"The steady counter ({self.steady}) must not be negative",
                self.steady >= 0,
                EvolutionStateError,
            )

    @property
    def duration(self) -> float:
        return self.timings.get("generation", 0.0)

    def best(self, ranker: IndividualRanker) -> IndividualRecord | None:
        """Best record of the resulting population."""
        evaluated = [r for r in self.offspring if r.fitness is not None]
        if not evaluated:
            return None
        pick = max if ranker.maximize else min
        return pick(evaluated, key=lambda r: r.fitness)

    def to_dict(self) -> dict[str, Any]:
        return {
            "generation": self.generation,
            "steady": self.steady,
            "timestamp": self.timestamp,
            "timings": dict(self.timings),
            "statistics": self.statistics.to_dict() if self.statistics else None,
            "parents": [r.to_dict() for r in self.parents],
            "offspring": [r.to_dict() for r in self.offspring],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GenerationRecord:
        stats_data = data.get("statistics")
        return cls(
            generation=data["generation"],
            steady=data.get("steady", 0),
            parents=[IndividualRecord.from_dict(r) for r in data.get("parents", [])],
            offspring=[IndividualRecord.from_dict(r) for r in data.get("offspring", [])],
            timings=dict(data.get("timings", {})),
            statistics=PopulationStatistics(**stats_data) if stats_data else None,
            timestamp=data.get("timestamp", ""),
        )


# =============================================================================
# Evolution Record
# =============================================================================


@dataclass
class EvolutionRecord:
    """Complete record of an evolutionary run."""

    generations: list[GenerationRecord] = field(default_factory=list)
    initialization_time: float = 0.0
    duration: float = 0.0
    start_time: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def last(self) -> GenerationRecord | None:
        return self.generations[-1] if self.generations else None

    def best_fitness_history(self) -> list[float | None]:
        return [g.statistics.best_fitness if g.statistics else None for g in self.generations]

    def mean_fitness_history(self) -> list[float | None]:
        return [g.statistics.mean_fitness if g.statistics else None for g in self.generations]

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_time": self.start_time,
            "initialization_time": self.initialization_time,
            "duration": self.duration,
            "generations": [g.to_dict() for g in self.generations],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EvolutionRecord:
        return cls(
            generations=[GenerationRecord.from_dict(g) for g in data.get("generations", [])],
            initialization_time=data.get("initialization_time", 0.0),
            duration=data.get("duration", 0.0),
            start_time=data.get("start_time", ""),
        )

    def to_json(self, path: str | Path) -> None:
        """Export the record to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)

        logger.info("Exported evolution record", path=str(path), generations=len(self.generations))

    @classmethod
    def from_json(cls, path: str | Path) -> EvolutionRecord:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Evolution record not found: {path}")

        with open(path, "r") as f:
            data = json.load(f)

        return cls.from_dict(data)


def compute_steady_generations(ranker: IndividualRanker, record: EvolutionRecord) -> int:
    """
    Steady counter of the latest generation.

    One more than the previous generation's counter when the best fitness
    did not change, zero otherwise.
    """
    if len(record.generations) < 2:
        return 0
    previous, current = record.generations[-2], record.generations[-1]
    previous_best = previous.best(ranker)
    current_best = current.best(ranker)
    if previous_best is None or current_best is None:
        return 0
    if previous_best.fitness == current_best.fitness:
        return previous.steady + 1
    return 0


__all__ = [
    "IndividualRecord",
    "PopulationStatistics",
    "GenerationRecord",
    "EvolutionRecord",
    "compute_steady_generations",
]
