"""
Genotypes, Individuals and Populations

- Genotype: ordered tuple of chromosomes (lengths may differ)
- GenotypeFactory: builds fresh random genotypes from chromosome factories
- Individual: genotype plus fitness (``None`` until evaluated)
- Population: tuple of individuals

Author: Helix Team
Python: 3.11+
"""

from __future__ import annotations

import math
import random
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from ..constraints import constraints, is_index
from ..exceptions import GeneticMaterialConfigError, InvalidIndexError
from .chromosomes import Chromosome, ChromosomeFactory


@dataclass(frozen=True)
class Genotype:
    """Complete genetic description of one candidate solution."""

    chromosomes: tuple[Chromosome, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.chromosomes, tuple):
            object.__setattr__(self, "chromosomes", tuple(self.chromosomes))

    @property
    def size(self) -> int:
        return len(self.chromosomes)

    def __len__(self) -> int:
        return len(self.chromosomes)

    def __iter__(self) -> Iterator[Chromosome]:
        return iter(self.chromosomes)

    def __getitem__(self, index: int) -> Chromosome:
        with constraints() as c:
            c.require(
                f"Chromosome index {index!r} out of range [0, {len(self.chromosomes)})",
                is_index(index, len(self.chromosomes)),
                InvalidIndexError,
            )
        return self.chromosomes[index]

    def duplicate_with_chromosomes(self, chromosomes: Iterable[Chromosome]) -> Genotype:
        return type(self)(tuple(chromosomes))

    def verify(self) -> bool:
        return all(chromosome.verify() for chromosome in self.chromosomes)

    def flatten(self) -> list[Any]:
        return [value for chromosome in self.chromosomes for value in chromosome.flatten()]


class GenotypeFactory:
    """Creates random genotypes, one chromosome per chromosome factory."""

    def __init__(self, chromosome_factories: Sequence[ChromosomeFactory]):
        self.chromosome_factories = tuple(chromosome_factories)
        with constraints() as c:
            c.require(
                "A genotype factory needs at least one chromosome factory",
                len(self.chromosome_factories) > 0,
                GeneticMaterialConfigError,
            )

    def make(self, rng: random.Random) -> Genotype:
        return Genotype(tuple(factory.make(rng) for factory in self.chromosome_factories))


@dataclass(frozen=True)
class Individual:
    """A genotype together with its fitness; ``fitness is None`` means unevaluated."""

    genotype: Genotype
    fitness: float | None = None

    def is_evaluated(self) -> bool:
        return self.fitness is not None and not math.isnan(self.fitness)

    def with_fitness(self, fitness: float) -> Individual:
        return Individual(self.genotype, float(fitness))

    def verify(self) -> bool:
        return self.genotype.verify() and self.is_evaluated()

    def flatten(self) -> list[Any]:
        return self.genotype.flatten()


Population = tuple[Individual, ...]


__all__ = [
    "Genotype",
    "GenotypeFactory",
    "Individual",
    "Population",
]
