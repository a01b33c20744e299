"""
Helix Genome - Genetic Material

Genes, chromosomes, genotypes and individuals, plus the factories that
create random genetic material.
"""

from .genes import (
    Gene,
    IntGene,
    DoubleGene,
    BooleanGene,
    CharGene,
    AlleleGene,
    Verifiable,
    Flattenable,
)
from .chromosomes import (
    Chromosome,
    IntChromosome,
    DoubleChromosome,
    CharChromosome,
    BooleanChromosome,
    PermutationChromosome,
    ChromosomeFactory,
    IntChromosomeFactory,
    DoubleChromosomeFactory,
    CharChromosomeFactory,
    BooleanChromosomeFactory,
    PermutationChromosomeFactory,
)
from .encoding import (
    Genotype,
    GenotypeFactory,
    Individual,
    Population,
)

__all__ = [
    # Genes
    "Gene",
    "IntGene",
    "DoubleGene",
    "BooleanGene",
    "CharGene",
    "AlleleGene",
    "Verifiable",
    "Flattenable",
    # Chromosomes
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
    # Genotypes & individuals
    "Genotype",
    "GenotypeFactory",
    "Individual",
    "Population",
]
