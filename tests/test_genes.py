"""
Unit tests for genes.

Tests cover:
- Bounds validation and verification
- Mutation within bounds and filters
- Averaging numeric genes
- Boolean, character and allele genes

Author: Helix Team
License: MIT
"""

import dataclasses

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from helix.exceptions import CompositeError, GeneticMaterialConfigError, MutationError
from helix.genome import (
    AlleleGene,
    BooleanGene,
    CharGene,
    DoubleGene,
    Flattenable,
    IntGene,
    Verifiable,
)
from helix.rng import make_rng


# ============================================================================
# Integer Gene Tests
# ============================================================================

class TestIntGene:
    """Test integer genes."""

    def test_verify_within_bounds(self):
        """Values inside the bounds verify; values outside do not."""
        assert IntGene(5, (0, 10)).verify()
        assert IntGene(0, (0, 10)).verify()
        assert not IntGene(11, (0, 10)).verify()

    def test_reversed_bounds_rejected(self):
        """Bounds with low above high are rejected."""
        with pytest.raises(CompositeError) as exc_info:
            IntGene(5, (10, 0))
        assert exc_info.value.has(GeneticMaterialConfigError)

    def test_genes_are_immutable(self):
        """Gene fields cannot be reassigned."""
        gene = IntGene(5, (0, 10))
        with pytest.raises(dataclasses.FrozenInstanceError):
            gene.value = 6

    def test_duplicate_keeps_metadata(self):
        """Duplicating with a new value keeps bounds and filter."""
        gene = IntGene(5, (0, 10), lambda v: v % 2 == 1)
        copy = gene.duplicate_with_value(7)
        assert copy.value == 7
        assert copy.bounds == (0, 10)
        assert copy.filter is gene.filter

    def test_filter_restricts_generation(self, rng):
        """Generated values satisfy the filter."""
        gene = IntGene(1, (0, 100), lambda v: v % 2 == 1)
        for _ in range(50):
            gene = gene.mutate(rng)
            assert gene.value % 2 == 1
            assert gene.verify()

    def test_unsatisfiable_filter(self, rng):
        """A filter nothing satisfies makes mutation fail."""
        gene = IntGene(0, (0, 10), lambda v: v > 100)
        with pytest.raises(CompositeError) as exc_info:
            gene.mutate(rng)
        assert exc_info.value.has(MutationError)

    def test_filter_failure_fails_verify(self):
        """A value rejected by the filter does not verify."""
        assert not IntGene(2, (0, 10), lambda v: v % 2 == 1).verify()

    def test_average_truncates(self):
        """Integer averages are truncated."""
        gene = IntGene(1, (0, 10))
        assert gene.average([IntGene(2, (0, 10))]).value == 1
        assert gene.average([IntGene(5, (0, 10)), IntGene(9, (0, 10))]).value == 5

    def test_average_requires_others(self):
        """Averaging needs at least one other gene."""
        with pytest.raises(CompositeError):
            IntGene(1, (0, 10)).average([])

    def test_conversions(self):
        """Integer genes convert to float and int."""
        gene = IntGene(3, (0, 10))
        assert gene.to_float() == 3.0
        assert gene.to_int() == 3

    @given(
        low=st.integers(min_value=-1000, max_value=1000),
        span=st.integers(min_value=0, max_value=1000),
        seed=st.integers(min_value=0, max_value=2**32),
    )
    @settings(max_examples=100)
    def test_mutation_stays_in_bounds(self, low, span, seed):
        """Mutated values always lie within the bounds."""
        gene = IntGene(low, (low, low + span))
        mutated = gene.mutate(make_rng(seed))
        assert low <= mutated.value <= low + span


# ============================================================================
# Double Gene Tests
# ============================================================================

class TestDoubleGene:
    """Test floating-point genes."""

    def test_mutation_within_bounds(self, rng):
        """Mutated values stay inside the bounds."""
        gene = DoubleGene(0.0, (-1.0, 1.0))
        for _ in range(100):
            gene = gene.mutate(rng)
            assert -1.0 <= gene.value <= 1.0

    def test_default_bounds_generate_finite_values(self, rng):
        """Default double bounds produce finite values."""
        gene = DoubleGene(0.0).mutate(rng)
        assert gene.verify()
        assert gene.value == gene.value

    def test_average(self):
        """Double genes average their values."""
        gene = DoubleGene(1.0, (0.0, 10.0))
        assert gene.average([DoubleGene(2.0, (0.0, 10.0))]).value == pytest.approx(1.5)

    def test_conversions(self):
        """Double genes truncate on conversion to int."""
        gene = DoubleGene(2.7, (0.0, 10.0))
        assert gene.to_float() == 2.7
        assert gene.to_int() == 2


# ============================================================================
# Other Gene Tests
# ============================================================================

class TestOtherGenes:
    """Test boolean, character and allele genes."""

    def test_boolean_flip(self):
        """Flipping negates a boolean gene."""
        assert BooleanGene(True).flip().value is False
        assert BooleanGene(False).flip().value is True

    def test_boolean_mutation_yields_bool(self, rng):
        """Boolean mutation yields a bool value."""
        values = {BooleanGene(True).mutate(rng).value for _ in range(50)}
        assert values == {True, False}

    def test_char_gene(self, rng):
        """Char genes generate characters within their bounds."""
        gene = CharGene("a", ("a", "e"))
        for _ in range(50):
            gene = gene.mutate(rng)
            assert gene.value in "abcde"
            assert gene.verify()

    def test_char_gene_rejects_multiple_characters(self):
        """Char genes hold exactly one character."""
        assert not CharGene("ab", ("a", "z")).verify()

    def test_allele_gene(self, rng):
        """Allele genes only take values from their allele set."""
        gene = AlleleGene("x", ("x", "y", "z"))
        assert gene.verify()
        assert gene.mutate(rng).value in ("x", "y", "z")
        assert not AlleleGene("w", ("x", "y", "z")).verify()

    def test_capabilities(self):
        """Genes satisfy the Verifiable and Flattenable protocols."""
        gene = IntGene(1, (0, 10))
        assert isinstance(gene, Verifiable)
        assert isinstance(gene, Flattenable)
        assert gene.flatten() == [1]

    def test_equality_ignores_filter(self):
        """Genes compare equal regardless of their filter."""
        assert IntGene(1, (0, 10)) == IntGene(1, (0, 10), lambda v: True)
        assert IntGene(1, (0, 10)) != IntGene(1, (0, 20))
