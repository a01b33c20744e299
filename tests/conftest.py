"""
Pytest configuration and shared fixtures for Helix tests.

This module provides reusable test fixtures for:
- Temporary directories
- Seeded random generators
- Chromosome and genotype factories
- Evaluated populations and evolution states
- Rankers and fitness functions

Author: Helix Team
License: MIT
"""

import tempfile
from pathlib import Path

import pytest

from helix.genome import (
    BooleanChromosomeFactory,
    GenotypeFactory,
    Individual,
    IntChromosomeFactory,
    PermutationChromosomeFactory,
)
from helix.ranking import FitnessMaxRanker, FitnessMinRanker
from helix.rng import make_rng
from helix.state import EvolutionState

from helpers import sum_fitness


# ============================================================================
# Directory Fixtures
# ============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ============================================================================
# Randomness Fixtures
# ============================================================================

@pytest.fixture
def rng():
    """Seeded random generator."""
    return make_rng(42)


# ============================================================================
# Genetic Material Fixtures
# ============================================================================

@pytest.fixture
def int_factory():
    """Ten integer genes in [0, 100]."""
    return IntChromosomeFactory(size=10, bounds=(0, 100))


@pytest.fixture
def genotype_factory(int_factory):
    """Single-chromosome integer genotypes."""
    return GenotypeFactory([int_factory])


@pytest.fixture
def multi_genotype_factory():
    """Genotypes with three integer chromosomes and one boolean chromosome."""
    return GenotypeFactory([
        IntChromosomeFactory(size=5, bounds=(0, 9)),
        IntChromosomeFactory(size=5, bounds=(0, 9)),
        IntChromosomeFactory(size=5, bounds=(0, 9)),
        BooleanChromosomeFactory(size=8),
    ])


@pytest.fixture
def permutation_factory():
    """Single-chromosome permutations of 0..9."""
    return GenotypeFactory([PermutationChromosomeFactory(range(10))])


# ============================================================================
# Population Fixtures
# ============================================================================

@pytest.fixture
def ranker():
    """Maximizing ranker."""
    return FitnessMaxRanker()


@pytest.fixture
def min_ranker():
    """Minimizing ranker."""
    return FitnessMinRanker()


@pytest.fixture
def population(genotype_factory, rng):
    """Twenty evaluated individuals (fitness = sum of genes)."""
    individuals = []
    for _ in range(20):
        genotype = genotype_factory.make(rng)
        individuals.append(Individual(genotype, sum_fitness(genotype)))
    return tuple(individuals)


@pytest.fixture
def state(population, ranker):
    """Evolution state at generation 0 holding the evaluated population."""
    return EvolutionState(0, population, ranker)


@pytest.fixture
def permutation_state(permutation_factory, ranker, rng):
    """Evolution state of ten evaluated permutations."""
    individuals = tuple(
        Individual(permutation_factory.make(rng), float(i)) for i in range(10)
    )
    return EvolutionState(0, individuals, ranker)


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks end-to-end engine tests"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to handle markers."""
    skip_slow = pytest.mark.skip(reason="slow test (use --runslow to run)")

    for item in items:
        if "slow" in item.keywords and not config.getoption("--runslow", default=False):
            item.add_marker(skip_slow)


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--runslow", action="store_true", default=False, help="run slow tests"
    )
