"""
Mutation Operators

Mutators introduce random variation into individuals. Each individual is
mutated with probability ``individual_rate``; inside a mutated individual
each chromosome is mutated with probability ``chromosome_rate``. Mutated
individuals are new and unevaluated. Mutators never change chromosome length.

Mutators:
- RandomMutator: resample genes (``gene_rate`` per gene)
- BitFlipMutator: negate boolean genes
- SwapMutator: swap genes with random positions
- InversionMutator: reverse a random region
- PartialShuffleMutator: shuffle a random region

Author: Helix Team
Python: 3.11+
"""

from __future__ import annotations

import random
from abc import abstractmethod

from loguru import logger

from ..constraints import constraints
from ..exceptions import MutationError, MutatorConfigError
from ..genome.chromosomes import Chromosome
from ..genome.encoding import Individual
from ..genome.genes import BooleanGene, Gene
from ..rng import random_indices
from ..state import EvolutionState
from .base import Alterer


def _validate_rates(**rates: float) -> None:
    with constraints() as c:
        for name, rate in rates.items():
            c.require(
                f"The {name.replace('_', ' ')} ({rate}) must be in [0.0, 1.0]",
                0.0 <= rate <= 1.0,
                MutatorConfigError,
            )


def _region_boundaries(size: int, probability: float, rng: random.Random) -> tuple[int, int]:
    """Start at the first index passing a trial; end at the first one after it failing one."""
    start, end = 0, size - 1
    for i in range(size):
        if rng.random() < probability:
            start = i
            break
    for i in range(start, size):
        if rng.random() > probability:
            end = i
            break
    return start, end


class Mutator(Alterer):
    """Base class for all mutators."""

    DEFAULT_INDIVIDUAL_RATE = 0.5
    DEFAULT_CHROMOSOME_RATE = 0.5

    def __init__(
        self,
        individual_rate: float | None = None,
        chromosome_rate: float | None = None,
    ):
        self.individual_rate = (
            self.DEFAULT_INDIVIDUAL_RATE if individual_rate is None else individual_rate
        )
        self.chromosome_rate = (
            self.DEFAULT_CHROMOSOME_RATE if chromosome_rate is None else chromosome_rate
        )
        _validate_rates(
            individual_rate=self.individual_rate,
            chromosome_rate=self.chromosome_rate,
        )

    def __call__(
        self,
        state: EvolutionState,
        output_size: int,
        rng: random.Random,
    ) -> EvolutionState:
        if self.individual_rate == 0.0:
            result = state
        else:
            result = state.with_population(
                self.mutate_individual(individual, rng)
                if rng.random() < self.individual_rate
                else individual
                for individual in state.population
            )

        with constraints() as c:
            c.require(
                f"The size of the population after mutation ({result.size}) must be "
                f"equal to the output size ({output_size})",
                result.size == output_size,
                MutationError,
            )
        return result

    def mutate_individual(self, individual: Individual, rng: random.Random) -> Individual:
        """Unevaluated copy of ``individual`` with some chromosomes mutated."""
        genotype = individual.genotype
        chromosomes = []
        for chromosome in genotype:
            if rng.random() < self.chromosome_rate:
                mutated = self.mutate_chromosome(chromosome, rng)
                with constraints() as c:
                    c.require(
                        "Mutation must not change the chromosome length",
                        len(mutated) == len(chromosome),
                        MutationError,
                    )
                chromosomes.append(mutated)
            else:
                chromosomes.append(chromosome)
        return Individual(genotype.duplicate_with_chromosomes(chromosomes))

    @abstractmethod
    def mutate_chromosome(self, chromosome: Chromosome, rng: random.Random) -> Chromosome:
        """Mutated copy of ``chromosome``."""

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(individual_rate={self.individual_rate}, "
            f"chromosome_rate={self.chromosome_rate})"
        )


# =============================================================================
# Gene Mutators
# =============================================================================


class GeneMutator(Mutator):
    """Mutator acting gene by gene, each with probability ``gene_rate``."""

    DEFAULT_GENE_RATE = 0.5

    def __init__(
        self,
        individual_rate: float | None = None,
        chromosome_rate: float | None = None,
        gene_rate: float | None = None,
    ):
        super().__init__(individual_rate, chromosome_rate)
        self.gene_rate = self.DEFAULT_GENE_RATE if gene_rate is None else gene_rate
        _validate_rates(gene_rate=self.gene_rate)

        logger.debug(
            f"Initialized {type(self).__name__}",
            individual_rate=self.individual_rate,
            chromosome_rate=self.chromosome_rate,
            gene_rate=self.gene_rate,
        )

    def mutate_chromosome(self, chromosome: Chromosome, rng: random.Random) -> Chromosome:
        return chromosome.duplicate_with_genes(
            self.mutate_gene(gene, rng) if rng.random() < self.gene_rate else gene
            for gene in chromosome
        )

    @abstractmethod
    def mutate_gene(self, gene: Gene, rng: random.Random) -> Gene:
        """Mutated copy of ``gene``."""


class RandomMutator(GeneMutator):
    """Replaces genes with freshly generated values."""

    def mutate_gene(self, gene: Gene, rng: random.Random) -> Gene:
        return gene.mutate(rng)


class BitFlipMutator(GeneMutator):
    """Negates boolean genes."""

    def mutate_gene(self, gene: Gene, rng: random.Random) -> Gene:
        with constraints() as c:
            c.require(
                f"Bit flip mutation requires boolean genes, got {type(gene).__name__}",
                isinstance(gene, BooleanGene),
                MutationError,
            )
        return gene.flip()


# =============================================================================
# Order Mutators
# =============================================================================


class SwapMutator(Mutator):
    """Each gene picked with ``swap_rate`` swaps places with a random gene."""

    def __init__(
        self,
        individual_rate: float | None = None,
        chromosome_rate: float | None = None,
        swap_rate: float = 0.5,
    ):
        super().__init__(individual_rate, chromosome_rate)
        _validate_rates(swap_rate=swap_rate)
        self.swap_rate = swap_rate

    def mutate_chromosome(self, chromosome: Chromosome, rng: random.Random) -> Chromosome:
        genes = list(chromosome.genes)
        for i in random_indices(rng, self.swap_rate, len(genes)):
            j = rng.randrange(len(genes))
            genes[i], genes[j] = genes[j], genes[i]
        return chromosome.duplicate_with_genes(genes)


class InversionMutator(Mutator):
    """Reverses the genes of a randomly bounded region."""

    def __init__(
        self,
        individual_rate: float | None = None,
        chromosome_rate: float | None = None,
        inversion_boundary_probability: float = 0.5,
    ):
        super().__init__(individual_rate, chromosome_rate)
        _validate_rates(inversion_boundary_probability=inversion_boundary_probability)
        self.inversion_boundary_probability = inversion_boundary_probability

    def mutate_chromosome(self, chromosome: Chromosome, rng: random.Random) -> Chromosome:
        if len(chromosome) == 0:
            return chromosome
        start, end = _region_boundaries(len(chromosome), self.inversion_boundary_probability, rng)
        genes = list(chromosome.genes)
        genes[start:end + 1] = reversed(genes[start:end + 1])
        return chromosome.duplicate_with_genes(genes)


class PartialShuffleMutator(Mutator):
    """Shuffles the genes of a randomly bounded region."""

    DEFAULT_INDIVIDUAL_RATE = 1.0
    DEFAULT_CHROMOSOME_RATE = 1.0

    def __init__(
        self,
        individual_rate: float | None = None,
        chromosome_rate: float | None = None,
        shuffle_boundary_probability: float = 0.5,
    ):
        super().__init__(individual_rate, chromosome_rate)
        _validate_rates(shuffle_boundary_probability=shuffle_boundary_probability)
        self.shuffle_boundary_probability = shuffle_boundary_probability

    def mutate_chromosome(self, chromosome: Chromosome, rng: random.Random) -> Chromosome:
        if self.shuffle_boundary_probability == 0.0 or len(chromosome) == 0:
            return chromosome
        start, end = _region_boundaries(len(chromosome), self.shuffle_boundary_probability, rng)
        genes = list(chromosome.genes)
        region = genes[start:end + 1]
        rng.shuffle(region)
        genes[start:end + 1] = region
        return chromosome.duplicate_with_genes(genes)


__all__ = [
    "Mutator",
    "GeneMutator",
    "RandomMutator",
    "BitFlipMutator",
    "SwapMutator",
    "InversionMutator",
    "PartialShuffleMutator",
]
