"""
Helix Operators - Selection, Crossover & Mutation
"""

from .base import GeneticOperator, Alterer
from .selection import (
    Selector,
    TournamentSelector,
    RouletteWheelSelector,
    RandomSelector,
)
from .crossover import (
    Crossover,
    SinglePointCrossover,
    CombineCrossover,
    UniformCrossover,
    AverageCrossover,
    PermutationCrossover,
    OrderedCrossover,
    PartiallyMappedCrossover,
    PositionBasedCrossover,
)
from .mutation import (
    Mutator,
    GeneMutator,
    RandomMutator,
    BitFlipMutator,
    SwapMutator,
    InversionMutator,
    PartialShuffleMutator,
)

__all__ = [
    "GeneticOperator",
    "Alterer",
    # Selection
    "Selector",
    "TournamentSelector",
    "RouletteWheelSelector",
    "RandomSelector",
    # Crossover
    "Crossover",
    "SinglePointCrossover",
    "CombineCrossover",
    "UniformCrossover",
    "AverageCrossover",
    "PermutationCrossover",
    "OrderedCrossover",
    "PartiallyMappedCrossover",
    "PositionBasedCrossover",
    # Mutation
    "Mutator",
    "GeneMutator",
    "RandomMutator",
    "BitFlipMutator",
    "SwapMutator",
    "InversionMutator",
    "PartialShuffleMutator",
]
