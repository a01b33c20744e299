"""
Crossover Operators

Crossovers recombine the genotypes of several parents into offspring.

Invocation on a state:
1. Build random ``num_parents``-sized subsets of the population once
2. Repeatedly recombine a randomly chosen subset
3. Collect unevaluated offspring until ``output_size`` exist, then truncate

Within ``crossover`` the chromosome positions to recombine are chosen by
independent trials at ``chromosome_rate``; the remaining positions are
copied from the first parent.

Crossovers:
- SinglePointCrossover: exchange tails after one cut point
- CombineCrossover: merge genes position by position (Uniform, Average)
- OrderedCrossover, PartiallyMappedCrossover, PositionBasedCrossover:
  permutation-preserving recombination

Author: Helix Team
Python: 3.11+
"""

from __future__ import annotations

import random
from abc import abstractmethod
from collections.abc import Callable, Sequence

from loguru import logger

from ..constraints import constraints, same_multiset
from ..exceptions import CrossoverConfigError, CrossoverError
from ..genome.chromosomes import Chromosome
from ..genome.encoding import Genotype, Individual
from ..genome.genes import Gene
from ..rng import random_indices, sample_indices, subsets
from ..state import EvolutionState
from .base import Alterer


class Crossover(Alterer):
    """
    Base class for all crossovers.

    Attributes:
        num_parents: Parents consumed by one recombination
        num_offspring: Offspring produced by one recombination
        chromosome_rate: Probability of recombining each chromosome position
        exclusivity: Whether a parent may take part in only one subset
    """

    num_parents: int = 2
    num_offspring: int = 2

    def __init__(self, chromosome_rate: float = 1.0, exclusivity: bool = False):
        with constraints() as c:
            c.require(
                f"The chromosome rate ({chromosome_rate}) must be in [0.0, 1.0]",
                0.0 <= chromosome_rate <= 1.0,
                CrossoverConfigError,
            )
        self.chromosome_rate = chromosome_rate
        self.exclusivity = exclusivity

    def __call__(
        self,
        state: EvolutionState,
        output_size: int,
        rng: random.Random,
    ) -> EvolutionState:
        with constraints() as c:
            c.require(
                f"Output size ({output_size}) must not be negative",
                output_size >= 0,
                CrossoverError,
            )
        if output_size == 0:
            return state.with_population(())
        with constraints() as c:
            c.require("Population must not be empty", not state.is_empty(), CrossoverError)

        groups = subsets(rng, state.population, self.num_parents, self.exclusivity)
        offspring: list[Individual] = []
        while len(offspring) < output_size:
            parents = rng.choice(groups)
            children = self.crossover([parent.genotype for parent in parents], rng)
            with constraints() as c:
                c.require(
                    f"Crossover must produce {self.num_offspring} offspring, "
                    f"produced {len(children)}",
                    len(children) == self.num_offspring,
                    CrossoverError,
                )
            offspring.extend(Individual(genotype) for genotype in children)

        return state.with_population(offspring[:output_size])

    def crossover(self, parent_genotypes: Sequence[Genotype], rng: random.Random) -> list[Genotype]:
        """Recombine ``num_parents`` genotypes into ``num_offspring`` genotypes."""
        with constraints() as c:
            c.require(
                f"The number of inputs ({len(parent_genotypes)}) must be equal to "
                f"the number of parents ({self.num_parents})",
                len(parent_genotypes) == self.num_parents,
                CrossoverError,
            )
            c.require(
                "Genotypes must have the same number of chromosomes",
                len({len(genotype) for genotype in parent_genotypes}) <= 1,
                CrossoverError,
            )
            for index, genotype in enumerate(parent_genotypes):
                c.require(
                    f"The number of chromosomes in parent {index} must be greater than 0",
                    len(genotype) > 0,
                    CrossoverError,
                )

        first = parent_genotypes[0]
        indices = random_indices(rng, self.chromosome_rate, len(first))
        # crossed[i] holds the offspring chromosomes for position indices[i]
        crossed = {
            index: self.crossover_chromosomes([g.chromosomes[index] for g in parent_genotypes], rng)
            for index in indices
        }
        for index, chromosomes in crossed.items():
            with constraints() as c:
                c.require(
                    f"Chromosome crossover at position {index} must produce "
                    f"{self.num_offspring} chromosomes",
                    len(chromosomes) == self.num_offspring,
                    CrossoverError,
                )

        return [
            first.duplicate_with_chromosomes(
                crossed[index][k] if index in crossed else chromosome
                for index, chromosome in enumerate(first.chromosomes)
            )
            for k in range(self.num_offspring)
        ]

    @abstractmethod
    def crossover_chromosomes(
        self,
        chromosomes: Sequence[Chromosome],
        rng: random.Random,
    ) -> list[Chromosome]:
        """Recombine the parents' chromosomes found at one position."""


# =============================================================================
# Single Point
# =============================================================================


class SinglePointCrossover(Crossover):
    """
    Single-point crossover (2 parents, 2 offspring).

    A cut point in ``[0, len]`` splits both chromosomes; the offspring swap
    tails. Skipped (parents returned unchanged) with probability
    ``1 - chromosome_rate``.
    """

    num_parents = 2
    num_offspring = 2

    def __init__(self, chromosome_rate: float = 1.0, exclusivity: bool = False):
        super().__init__(chromosome_rate, exclusivity)
        logger.debug(
            "Initialized SinglePointCrossover",
            chromosome_rate=chromosome_rate,
            exclusivity=exclusivity,
        )

    def crossover_chromosomes(
        self,
        chromosomes: Sequence[Chromosome],
        rng: random.Random,
    ) -> list[Chromosome]:
        with constraints() as c:
            if c.require(
                "The number of parent chromosomes must be 2",
                len(chromosomes) == 2,
                CrossoverError,
            ):
                c.require(
                    "Both parents must have the same size",
                    len(chromosomes[0]) == len(chromosomes[1]),
                    CrossoverError,
                )

        if rng.random() > self.chromosome_rate:
            return list(chromosomes)

        first, second = (chromosome.genes for chromosome in chromosomes)
        point = rng.randint(0, len(first))
        crossed_first, crossed_second = self.crossover_at(point, (first, second))
        base = chromosomes[0]
        return [base.duplicate_with_genes(crossed_first), base.duplicate_with_genes(crossed_second)]

    def crossover_at(
        self,
        point: int,
        parents: tuple[Sequence[Gene], Sequence[Gene]],
    ) -> tuple[list[Gene], list[Gene]]:
        """Exchange the tails of both gene sequences at ``point``."""
        first, second = parents
        high = len(first)
        with constraints() as c:
            c.require(
                f"The crossover point ({point}) must be in the range [0, {high}]",
                0 <= point <= high,
                CrossoverError,
            )
            c.require("Parents must have the same size", len(first) == len(second), CrossoverError)

        return (
            list(first[:point]) + list(second[point:]),
            list(second[:point]) + list(first[point:]),
        )

    def __repr__(self) -> str:
        return (
            f"SinglePointCrossover(chromosome_rate={self.chromosome_rate}, "
            f"exclusivity={self.exclusivity})"
        )


# =============================================================================
# Combine
# =============================================================================


Combiner = Callable[[Sequence[Gene], random.Random], Gene]


class CombineCrossover(Crossover):
    """
    Position-wise combination of N parents into one offspring.

    At each gene position the ``combiner`` merges the parents' genes with
    probability ``gene_rate``; otherwise the first parent's gene is kept.
    """

    num_offspring = 1

    def __init__(
        self,
        combiner: Combiner,
        chromosome_rate: float = 1.0,
        gene_rate: float = 1.0,
        num_parents: int = 2,
        exclusivity: bool = False,
    ):
        super().__init__(chromosome_rate, exclusivity)
        with constraints() as c:
            c.require(
                f"The gene rate ({gene_rate}) must be in [0.0, 1.0]",
                0.0 <= gene_rate <= 1.0,
                CrossoverConfigError,
            )
            c.require(
                f"The number of parents ({num_parents}) must be greater than 1",
                num_parents >= 2,
                CrossoverConfigError,
            )
        self.combiner = combiner
        self.gene_rate = gene_rate
        self.num_parents = num_parents

        logger.debug(
            f"Initialized {type(self).__name__}",
            chromosome_rate=chromosome_rate,
            gene_rate=gene_rate,
            num_parents=num_parents,
        )

    def crossover_chromosomes(
        self,
        chromosomes: Sequence[Chromosome],
        rng: random.Random,
    ) -> list[Chromosome]:
        return [chromosomes[0].duplicate_with_genes(self.combine(chromosomes, rng))]

    def combine(self, chromosomes: Sequence[Chromosome], rng: random.Random) -> list[Gene]:
        with constraints() as c:
            c.require(
                f"Number of inputs ({len(chromosomes)}) must equal the number "
                f"of parents ({self.num_parents})",
                len(chromosomes) == self.num_parents,
                CrossoverError,
            )
            c.require(
                "All chromosomes must have the same length",
                len({len(chromosome) for chromosome in chromosomes}) <= 1,
                CrossoverError,
            )

        return [
            self.combiner([chromosome.genes[i] for chromosome in chromosomes], rng)
            if rng.random() < self.gene_rate
            else chromosomes[0].genes[i]
            for i in range(len(chromosomes[0]))
        ]


def _pick_one(genes: Sequence[Gene], rng: random.Random) -> Gene:
    return rng.choice(genes)


def _average(genes: Sequence[Gene], rng: random.Random) -> Gene:
    return genes[0].average(genes[1:])


class UniformCrossover(CombineCrossover):
    """Each gene is taken from a uniformly chosen parent."""

    def __init__(
        self,
        chromosome_rate: float = 1.0,
        gene_rate: float = 1.0,
        num_parents: int = 2,
        exclusivity: bool = False,
    ):
        super().__init__(_pick_one, chromosome_rate, gene_rate, num_parents, exclusivity)


class AverageCrossover(CombineCrossover):
    """Each gene is the mean of the parents' numeric genes."""

    def __init__(
        self,
        chromosome_rate: float = 1.0,
        gene_rate: float = 1.0,
        num_parents: int = 2,
        exclusivity: bool = False,
    ):
        super().__init__(_average, chromosome_rate, gene_rate, num_parents, exclusivity)


# =============================================================================
# Permutation Crossovers
# =============================================================================


class PermutationCrossover(Crossover):
    """
    Base for crossovers whose offspring stay permutations of the same alleles.

    Every parent chromosome must be free of duplicates and all of them must
    hold the same alleles.
    """

    num_parents = 2
    num_offspring = 2

    def crossover_chromosomes(
        self,
        chromosomes: Sequence[Chromosome],
        rng: random.Random,
    ) -> list[Chromosome]:
        with constraints() as c:
            for chromosome in chromosomes:
                c.require(
                    "A permutation crossover can only be applied to permutation chromosomes",
                    chromosome.is_permutation(),
                    CrossoverError,
                )
            c.require(
                "All parent chromosomes must hold the same alleles",
                all(same_multiset(chromosomes[0].genes, ch.genes) for ch in chromosomes[1:]),
                CrossoverError,
            )

        if rng.random() > self.chromosome_rate:
            return list(chromosomes)

        base = chromosomes[0]
        return [base.duplicate_with_genes(genes) for genes in self.permute_chromosomes(chromosomes, rng)]

    @abstractmethod
    def permute_chromosomes(
        self,
        chromosomes: Sequence[Chromosome],
        rng: random.Random,
    ) -> list[list[Gene]]:
        """Offspring gene lists, each a permutation of the parents' genes."""

    def _crossing_region(self, size: int, rng: random.Random) -> tuple[int, int] | None:
        if size < 2:
            return None
        start, end = sample_indices(rng, 2, size)
        return start, end


class OrderedCrossover(PermutationCrossover):
    """
    Ordered crossover (OX).

    Each child keeps one parent's genes inside a random region, in place, and
    fills the rest with the other parent's remaining genes in their order.
    """

    def __init__(self, chromosome_rate: float = 1.0, exclusivity: bool = False):
        super().__init__(chromosome_rate, exclusivity)
        logger.debug("Initialized OrderedCrossover", chromosome_rate=chromosome_rate)

    def permute_chromosomes(
        self,
        chromosomes: Sequence[Chromosome],
        rng: random.Random,
    ) -> list[list[Gene]]:
        first, second = (list(chromosome.genes) for chromosome in chromosomes)
        region = self._crossing_region(len(first), rng)
        if region is None:
            return [first, second]
        start, end = region
        return [
            self.exchange_crossing_regions((first, second), start, end),
            self.exchange_crossing_regions((second, first), start, end),
        ]

    def exchange_crossing_regions(
        self,
        parents: tuple[Sequence[Gene], Sequence[Gene]],
        start: int,
        end: int,
    ) -> list[Gene]:
        """Child keeping ``parents[0][start:end + 1]`` and ordering the rest like ``parents[1]``."""
        donor, filler = parents
        with constraints() as c:
            c.require("The start of the crossover region must be non-negative", start >= 0, CrossoverError)
            c.require(
                "The end of the crossover region must be less than the size of the parents",
                end <= len(donor) - 1,
                CrossoverError,
            )
            c.require("The crossover region must not be reversed", start <= end, CrossoverError)

        segment = list(donor[start:end + 1])
        kept = set(segment)
        remaining = [gene for gene in filler if gene not in kept]
        return remaining[:start] + segment + remaining[start:]


class PartiallyMappedCrossover(PermutationCrossover):
    """
    Partially mapped crossover (PMX).

    The parents swap a random region; genes outside the region that would
    repeat are replaced by following the mapping defined by the region.
    """

    def __init__(self, chromosome_rate: float = 1.0, exclusivity: bool = False):
        super().__init__(chromosome_rate, exclusivity)
        logger.debug("Initialized PartiallyMappedCrossover", chromosome_rate=chromosome_rate)

    def permute_chromosomes(
        self,
        chromosomes: Sequence[Chromosome],
        rng: random.Random,
    ) -> list[list[Gene]]:
        first, second = (list(chromosome.genes) for chromosome in chromosomes)
        region = self._crossing_region(len(first), rng)
        if region is None:
            return [first, second]
        start, end = region
        return [
            self.map_region(first, second, start, end),
            self.map_region(second, first, start, end),
        ]

    @staticmethod
    def map_region(
        receiver: Sequence[Gene],
        donor: Sequence[Gene],
        start: int,
        end: int,
    ) -> list[Gene]:
        """``receiver`` with ``donor[start:end + 1]`` swapped in and duplicates repaired."""
        child = list(receiver)
        child[start:end + 1] = donor[start:end + 1]
        mapping = {
            donor[i]: receiver[i] for i in range(start, end + 1) if donor[i] != receiver[i]
        }
        for i in [*range(start), *range(end + 1, len(child))]:
            gene = receiver[i]
            while gene in mapping:
                gene = mapping[gene]
            child[i] = gene
        return child


class PositionBasedCrossover(PermutationCrossover):
    """
    Position-based crossover (PBX).

    Positions are picked with ``position_rate``; a child takes the other
    parent's genes at those positions and fills the rest with its own
    remaining genes in order.
    """

    def __init__(
        self,
        chromosome_rate: float = 1.0,
        position_rate: float = 0.5,
        exclusivity: bool = False,
    ):
        super().__init__(chromosome_rate, exclusivity)
        with constraints() as c:
            c.require(
                f"The position rate ({position_rate}) must be in [0.0, 1.0]",
                0.0 <= position_rate <= 1.0,
                CrossoverConfigError,
            )
        self.position_rate = position_rate
        logger.debug(
            "Initialized PositionBasedCrossover",
            chromosome_rate=chromosome_rate,
            position_rate=position_rate,
        )

    def permute_chromosomes(
        self,
        chromosomes: Sequence[Chromosome],
        rng: random.Random,
    ) -> list[list[Gene]]:
        first, second = (list(chromosome.genes) for chromosome in chromosomes)
        positions = random_indices(rng, self.position_rate, len(first))
        return [
            self.fill_positions(first, second, positions),
            self.fill_positions(second, first, positions),
        ]

    @staticmethod
    def fill_positions(
        own: Sequence[Gene],
        other: Sequence[Gene],
        positions: Sequence[int],
    ) -> list[Gene]:
        fixed = {i: other[i] for i in positions}
        taken = set(fixed.values())
        remaining = iter(gene for gene in own if gene not in taken)
        return [fixed[i] if i in fixed else next(remaining) for i in range(len(own))]


__all__ = [
    "Crossover",
    "SinglePointCrossover",
    "CombineCrossover",
    "UniformCrossover",
    "AverageCrossover",
    "PermutationCrossover",
    "OrderedCrossover",
    "PartiallyMappedCrossover",
    "PositionBasedCrossover",
]
