"""
Test helpers for building genetic material by hand.
"""

from helix.genome import Genotype, Individual, IntChromosome, IntGene


def sum_fitness(genotype):
    """Fitness = sum of all gene values."""
    return float(sum(genotype.flatten()))


def int_chromosome(values, bounds=(0, 100)):
    """Chromosome of integer genes."""
    return IntChromosome(tuple(IntGene(v, bounds) for v in values))


def int_individual(values, fitness=None, bounds=(0, 100)):
    """Single-chromosome individual holding integer genes."""
    return Individual(Genotype((int_chromosome(values, bounds),)), fitness)


def fitness_individuals(fitness_values):
    """Individuals whose only gene equals their fitness."""
    return tuple(int_individual([int(f)], float(f), bounds=(-1000, 1000)) for f in fitness_values)
