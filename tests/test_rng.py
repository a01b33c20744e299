"""
Unit tests for the randomness service.

Tests cover:
- Seeded reproducibility and substreams
- Index sampling
- Random subsets (exclusive and non-exclusive)

Author: Helix Team
License: MIT
"""

import random

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from helix.exceptions import CompositeError
from helix.rng import make_rng, random_indices, sample_indices, spawn_substreams, subsets


# ============================================================================
# Generator Tests
# ============================================================================

class TestGenerators:
    """Test generator creation."""

    def test_same_seed_same_sequence(self):
        """Two generators with the same seed agree."""
        first, second = make_rng(7), make_rng(7)
        assert [first.random() for _ in range(5)] == [second.random() for _ in range(5)]

    def test_substreams_are_reproducible(self):
        """The same seed spawns the same substreams."""
        first = [s.random() for s in spawn_substreams(123, 4)]
        second = [s.random() for s in spawn_substreams(123, 4)]
        assert first == second

    def test_substreams_are_distinct(self):
        """Substreams of one seed do not repeat each other."""
        values = [s.random() for s in spawn_substreams(123, 8)]
        assert len(set(values)) == 8

    def test_substreams_from_seed_sequence(self):
        """A SeedSequence can be used as the root."""
        streams = spawn_substreams(np.random.SeedSequence(5), 3)
        assert len(streams) == 3
        assert all(isinstance(s, random.Random) for s in streams)

    def test_negative_count_rejected(self):
        """A negative substream count is rejected."""
        with pytest.raises(CompositeError):
            spawn_substreams(1, -1)


# ============================================================================
# Index Sampling Tests
# ============================================================================

class TestIndexSampling:
    """Test index helpers."""

    def test_probability_one_keeps_all(self, rng):
        """Probability one selects every index."""
        assert random_indices(rng, 1.0, 10) == list(range(10))

    def test_probability_zero_keeps_none(self, rng):
        """Probability zero selects no index."""
        assert random_indices(rng, 0.0, 10) == []

    def test_indices_respect_start(self, rng):
        """Indices start at the given offset."""
        assert random_indices(rng, 1.0, 8, start=5) == [5, 6, 7]

    def test_invalid_probability(self, rng):
        """Probabilities outside [0, 1] are rejected."""
        with pytest.raises(CompositeError) as exc_info:
            random_indices(rng, 1.5, 10, start=11)
        assert len(exc_info.value.violations) == 2

    def test_sample_indices_sorted_and_distinct(self, rng):
        """Sampled indices are sorted and distinct."""
        sample = sample_indices(rng, 4, 10)
        assert sample == sorted(set(sample))
        assert len(sample) == 4
        assert all(0 <= i < 10 for i in sample)

    def test_sample_too_large(self, rng):
        """Sampling more indices than available is rejected."""
        with pytest.raises(CompositeError):
            sample_indices(rng, 11, 10)


# ============================================================================
# Subset Tests
# ============================================================================

class TestSubsets:
    """Test random subsets."""

    def test_exclusive_partitions_elements(self, rng):
        """Exclusive subsets use every element exactly once."""
        elements = list(range(12))
        groups = subsets(rng, elements, 3, exclusive=True)
        assert len(groups) == 4
        assert all(len(group) == 3 for group in groups)
        assert sorted(e for group in groups for e in group) == elements

    def test_non_exclusive_covers_elements(self, rng):
        """Every element appears in at least one non-exclusive subset."""
        elements = list(range(10))
        groups = subsets(rng, elements, 2, exclusive=False)
        assert all(len(group) == 2 for group in groups)
        assert set(e for group in groups for e in group) == set(elements)

    def test_limit(self, rng):
        """limit caps the number of subsets."""
        groups = subsets(rng, list(range(10)), 2, exclusive=True, limit=2)
        assert len(groups) == 2

    def test_exclusive_requires_multiple(self, rng):
        """Exclusive subsets need an input that is a multiple of the subset size."""
        with pytest.raises(CompositeError) as exc_info:
            subsets(rng, list(range(10)), 3, exclusive=True)
        assert exc_info.value.matches("multiple of the subset size")

    def test_empty_input(self, rng):
        """Subsets of an empty input are rejected."""
        with pytest.raises(CompositeError) as exc_info:
            subsets(rng, [], 2, exclusive=False)
        assert exc_info.value.matches("must not be empty")

    @given(
        size=st.integers(min_value=1, max_value=5),
        groups=st.integers(min_value=1, max_value=6),
        seed=st.integers(min_value=0, max_value=2**32),
    )
    @settings(max_examples=50)
    def test_exclusive_property(self, size, groups, seed):
        """Exclusive subsets always partition the input."""
        elements = list(range(size * groups))
        result = subsets(make_rng(seed), elements, size, exclusive=True)
        assert sorted(e for group in result for e in group) == elements
