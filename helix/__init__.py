"""
Helix - Genetic Algorithm Framework

Evolves populations of genotypes with pluggable selection, crossover and
mutation operators, seedable randomness and structured constraint errors.

Components:
- Genome: genes, chromosomes, genotypes, individuals
- Operators: selectors, crossovers, mutators
- Evolution: engine, evaluators, limits, listeners
- Constraints: multi-violation validation (CompositeError)
- Configuration: pydantic settings with YAML/JSON/env loading

Author: Helix Team
Python: 3.11+
"""

__version__ = "0.1.0"

from .exceptions import (
    HelixError,
    ConstraintError,
    CompositeError,
    EngineConfigError,
    SelectorConfigError,
    CrossoverConfigError,
    MutatorConfigError,
    LimitConfigError,
    GeneticMaterialConfigError,
    SelectionError,
    CrossoverError,
    MutationError,
    InvalidIndexError,
    EvolutionStateError,
)
from .constraints import Constraints, constraints
from .rng import make_rng, spawn_substreams
from .genome import (
    Gene,
    IntGene,
    DoubleGene,
    BooleanGene,
    CharGene,
    AlleleGene,
    Chromosome,
    IntChromosome,
    DoubleChromosome,
    CharChromosome,
    BooleanChromosome,
    PermutationChromosome,
    IntChromosomeFactory,
    DoubleChromosomeFactory,
    CharChromosomeFactory,
    BooleanChromosomeFactory,
    PermutationChromosomeFactory,
    Genotype,
    GenotypeFactory,
    Individual,
)
from .ranking import IndividualRanker, FitnessMaxRanker, FitnessMinRanker
from .state import EvolutionState
from .operators import (
    TournamentSelector,
    RouletteWheelSelector,
    RandomSelector,
    SinglePointCrossover,
    CombineCrossover,
    UniformCrossover,
    AverageCrossover,
    OrderedCrossover,
    PartiallyMappedCrossover,
    PositionBasedCrossover,
    RandomMutator,
    BitFlipMutator,
    SwapMutator,
    InversionMutator,
    PartialShuffleMutator,
)
from .evolution import (
    GeneticAlgorithm,
    EvolutionInterceptor,
    SequentialEvaluator,
    ParallelEvaluator,
    EvolutionListener,
    EvolutionRecorder,
    LoggingListener,
    MaxGenerations,
    TargetFitness,
    SteadyGenerations,
    TimeLimit,
)
from .history import EvolutionRecord, GenerationRecord
from .config import HelixConfig, load_config
from .logging_config import configure_logging, get_logger

__all__ = [
    "__version__",
    # Errors
    "HelixError",
    "ConstraintError",
    "CompositeError",
    "EngineConfigError",
    "SelectorConfigError",
    "CrossoverConfigError",
    "MutatorConfigError",
    "LimitConfigError",
    "GeneticMaterialConfigError",
    "SelectionError",
    "CrossoverError",
    "MutationError",
    "InvalidIndexError",
    "EvolutionStateError",
    # Constraints & randomness
    "Constraints",
    "constraints",
    "make_rng",
    "spawn_substreams",
    # Genome
    "Gene",
    "IntGene",
    "DoubleGene",
    "BooleanGene",
    "CharGene",
    "AlleleGene",
    "Chromosome",
    "IntChromosome",
    "DoubleChromosome",
    "CharChromosome",
    "BooleanChromosome",
    "PermutationChromosome",
    "IntChromosomeFactory",
    "DoubleChromosomeFactory",
    "CharChromosomeFactory",
    "BooleanChromosomeFactory",
    "PermutationChromosomeFactory",
    "Genotype",
    "GenotypeFactory",
    "Individual",
    # Ranking & state
    "IndividualRanker",
    "FitnessMaxRanker",
    "FitnessMinRanker",
    "EvolutionState",
    # Operators
    "TournamentSelector",
    "RouletteWheelSelector",
    "RandomSelector",
    "SinglePointCrossover",
    "CombineCrossover",
    "UniformCrossover",
    "AverageCrossover",
    "OrderedCrossover",
    "PartiallyMappedCrossover",
    "PositionBasedCrossover",
    "RandomMutator",
    "BitFlipMutator",
    "SwapMutator",
    "InversionMutator",
    "PartialShuffleMutator",
    # Evolution
    "GeneticAlgorithm",
    "EvolutionInterceptor",
    "SequentialEvaluator",
    "ParallelEvaluator",
    "EvolutionListener",
    "EvolutionRecorder",
    "LoggingListener",
    "MaxGenerations",
    "TargetFitness",
    "SteadyGenerations",
    "TimeLimit",
    # History & configuration
    "EvolutionRecord",
    "GenerationRecord",
    "HelixConfig",
    "load_config",
    "configure_logging",
    "get_logger",
]
