"""
Chromosomes and Chromosome Factories

A chromosome is a fixed-length, immutable sequence of genes. Operators never
mutate a chromosome in place; they build new gene lists and wrap them with
``duplicate_with_genes``, which keeps the chromosome's structure.

Factories produce fresh random chromosomes and validate their parameters
eagerly. Numeric and character factories accept either one ``bounds`` pair for
every gene or one pair per gene (likewise for filters).

Author: Helix Team
Python: 3.11+
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from loguru import logger

from ..constraints import constraints, is_index, is_permutation
from ..exceptions import GeneticMaterialConfigError, InvalidIndexError
from .genes import (
    CHAR_BOUNDS,
    DOUBLE_BOUNDS,
    INT_BOUNDS,
    AlleleGene,
    BooleanGene,
    CharGene,
    DoubleGene,
    Gene,
    IntGene,
    accept_all,
)


# =============================================================================
# Chromosome
# =============================================================================


@dataclass(frozen=True)
class Chromosome:
    """Ordered, fixed-length tuple of genes."""

    genes: tuple[Gene, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.genes, tuple):
            object.__setattr__(self, "genes", tuple(self.genes))

    @property
    def size(self) -> int:
        return len(self.genes)

    def __len__(self) -> int:
        return len(self.genes)

    def __iter__(self) -> Iterator[Gene]:
        return iter(self.genes)

    def __getitem__(self, index: int) -> Gene:
        with constraints() as c:
            c.require(
                f"Gene index {index!r} out of range [0, {len(self.genes)})",
                is_index(index, len(self.genes)),
                InvalidIndexError,
            )
        return self.genes[index]

    def duplicate_with_genes(self, genes: Iterable[Gene]) -> Chromosome:
        """Chromosome of the same kind holding ``genes``."""
        return type(self)(tuple(genes))

    def verify(self) -> bool:
        return all(gene.verify() for gene in self.genes)

    def flatten(self) -> list[Any]:
        return [value for gene in self.genes for value in gene.flatten()]

    def is_permutation(self) -> bool:
        """True when no gene value is repeated."""
        return is_permutation([gene.value for gene in self.genes])


class IntChromosome(Chromosome):
    """Chromosome of IntGene."""


class DoubleChromosome(Chromosome):
    """Chromosome of DoubleGene."""

    def average(self) -> float:
        return sum(gene.value for gene in self.genes) / len(self.genes)


class CharChromosome(Chromosome):
    """Chromosome of CharGene."""

    def __str__(self) -> str:
        return "".join(gene.value for gene in self.genes)


class BooleanChromosome(Chromosome):
    """Chromosome of BooleanGene."""

    def true_count(self) -> int:
        return sum(1 for gene in self.genes if gene.value)


class PermutationChromosome(Chromosome):
    """Chromosome of AlleleGene holding each allele once."""


# =============================================================================
# Factories
# =============================================================================


class ChromosomeFactory(ABC):
    """Creates random chromosomes of a given shape."""

    @abstractmethod
    def make(self, rng: random.Random) -> Chromosome:
        """Create a fresh random chromosome."""


def _per_gene(value: Any, size: int, is_single: Callable[[Any], bool]) -> list[Any]:
    if is_single(value):
        return [value] * size
    return list(value)


def _is_bounds_pair(bounds: Any) -> bool:
    return (
        isinstance(bounds, tuple)
        and len(bounds) == 2
        and not isinstance(bounds[0], (tuple, list))
    )


class _RangedChromosomeFactory(ChromosomeFactory):
    """Shared validation for factories of bounded, filtered genes."""

    gene_type: type[Gene]
    chromosome_type: type[Chromosome]
    default_bounds: tuple[Any, Any]

    def __init__(
        self,
        size: int,
        bounds: tuple[Any, Any] | Sequence[tuple[Any, Any]] | None = None,
        filter: Callable[[Any], bool] | Sequence[Callable[[Any], bool]] = accept_all,
    ):
        bounds = self.default_bounds if bounds is None else bounds
        self.size = size
        self.bounds = _per_gene(bounds, size, _is_bounds_pair)
        self.filters = _per_gene(filter, size, callable)

        with constraints() as c:
            c.require(
                f"Chromosome size must be positive, got {size}",
                size > 0,
                GeneticMaterialConfigError,
            )
            c.require(
                f"Expected {size} bounds, got {len(self.bounds)}",
                len(self.bounds) == size,
                GeneticMaterialConfigError,
            )
            c.require(
                f"Expected {size} filters, got {len(self.filters)}",
                len(self.filters) == size,
                GeneticMaterialConfigError,
            )
            empty = [i for i, (low, high) in enumerate(self.bounds) if low > high]
            c.require(
                f"The bounds cannot be empty at indices: {empty}",
                not empty,
                GeneticMaterialConfigError,
            )

        logger.debug(
            f"Initialized {type(self).__name__}",
            size=size,
            bounds=self.bounds[0] if self.bounds else None,
        )

    def make(self, rng: random.Random) -> Chromosome:
        genes = []
        for low_high, gene_filter in zip(self.bounds, self.filters):
            template = self.gene_type(low_high[0], tuple(low_high), gene_filter)
            genes.append(template.mutate(rng))
        return self.chromosome_type(tuple(genes))


class IntChromosomeFactory(_RangedChromosomeFactory):
    gene_type = IntGene
    chromosome_type = IntChromosome
    default_bounds = INT_BOUNDS


class DoubleChromosomeFactory(_RangedChromosomeFactory):
    gene_type = DoubleGene
    chromosome_type = DoubleChromosome
    default_bounds = DOUBLE_BOUNDS


class CharChromosomeFactory(_RangedChromosomeFactory):
    gene_type = CharGene
    chromosome_type = CharChromosome
    default_bounds = CHAR_BOUNDS


class BooleanChromosomeFactory(ChromosomeFactory):
    """Boolean chromosomes where each gene is True with ``true_rate``."""

    def __init__(self, size: int, true_rate: float = 0.5):
        with constraints() as c:
            c.require(
                f"Chromosome size must be positive, got {size}",
                size > 0,
                GeneticMaterialConfigError,
            )
            c.require(
                f"True rate must be in [0, 1], got {true_rate}",
                0.0 <= true_rate <= 1.0,
                GeneticMaterialConfigError,
            )
        self.size = size
        self.true_rate = true_rate

    def make(self, rng: random.Random) -> Chromosome:
        return BooleanChromosome(
            tuple(BooleanGene(rng.random() < self.true_rate) for _ in range(self.size))
        )


class PermutationChromosomeFactory(ChromosomeFactory):
    """Random orderings of a fixed list of distinct alleles."""

    def __init__(self, alleles: Sequence[Any]):
        self.alleles = tuple(alleles)
        with constraints() as c:
            c.require(
                "Alleles must not be empty",
                len(self.alleles) > 0,
                GeneticMaterialConfigError,
            )
            c.require(
                "Alleles must be distinct",
                is_permutation(self.alleles),
                GeneticMaterialConfigError,
            )

    @property
    def size(self) -> int:
        return len(self.alleles)

    def make(self, rng: random.Random) -> Chromosome:
        order = list(self.alleles)
        rng.shuffle(order)
        return PermutationChromosome(tuple(AlleleGene(value, self.alleles) for value in order))


__all__ = [
    "Chromosome",
    "IntChromosome",
    "DoubleChromosome",
    "CharChromosome",
    "BooleanChromosome",
    "PermutationChromosome",
    "ChromosomeFactory",
    "IntChromosomeFactory",
    "DoubleChromosomeFactory",
    "CharChromosomeFactory",
    "BooleanChromosomeFactory",
    "PermutationChromosomeFactory",
]
