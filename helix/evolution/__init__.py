"""
Helix Evolution - Engine, Evaluators, Limits & Listeners
"""

from .interceptor import EvolutionInterceptor
from .evaluators import (
    EvaluationExecutor,
    SequentialEvaluator,
    ParallelEvaluator,
)
from .listeners import (
    EvolutionListener,
    EvolutionRecorder,
    LoggingListener,
)
from .limits import (
    Limit,
    MaxGenerations,
    TargetFitness,
    ListenLimit,
    SteadyGenerations,
    TimeLimit,
)
from .engine import (
    AbstractEvolutionaryAlgorithm,
    GeneticAlgorithm,
    survivor_count,
    parent_count,
)

__all__ = [
    "EvolutionInterceptor",
    # Evaluators
    "EvaluationExecutor",
    "SequentialEvaluator",
    "ParallelEvaluator",
    # Listeners
    "EvolutionListener",
    "EvolutionRecorder",
    "LoggingListener",
    # Limits
    "Limit",
    "MaxGenerations",
    "TargetFitness",
    "ListenLimit",
    "SteadyGenerations",
    "TimeLimit",
    # Engine
    "AbstractEvolutionaryAlgorithm",
    "GeneticAlgorithm",
    "survivor_count",
    "parent_count",
]
