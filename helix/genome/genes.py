"""
Genes

The smallest unit of genetic material. A gene is immutable: it holds a value
plus the metadata it needs to validate and mutate itself (inclusive bounds and
an optional filter predicate). Every change produces a new gene through
``duplicate_with_value``.

Gene kinds:
- IntGene: integer within inclusive bounds
- DoubleGene: float within inclusive bounds
- BooleanGene: True/False
- CharGene: single character within inclusive bounds
- AlleleGene: one value out of a fixed allele set (permutations)

Author: Helix Team
Python: 3.11+
"""

from __future__ import annotations

import random
import sys
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from typing import Any, Protocol, runtime_checkable

from ..constraints import constraints
from ..exceptions import GeneticMaterialConfigError, MutationError

INT_BOUNDS: tuple[int, int] = (-(2**31), 2**31 - 1)
DOUBLE_BOUNDS: tuple[float, float] = (-sys.float_info.max, sys.float_info.max)
CHAR_BOUNDS: tuple[str, str] = (" ", "z")

# Upper bound on resampling when a filter rejects generated values
MAX_GENERATION_ATTEMPTS = 10_000


def accept_all(value: Any) -> bool:
    return True


# =============================================================================
# Capabilities
# =============================================================================


@runtime_checkable
class Verifiable(Protocol):
    """Anything that can check its own validity."""

    def verify(self) -> bool: ...


@runtime_checkable
class Flattenable(Protocol):
    """Anything that can be flattened into a list of gene values."""

    def flatten(self) -> list[Any]: ...


# =============================================================================
# Gene Base
# =============================================================================


class Gene(ABC):
    """Base class for all genes."""

    value: Any

    @abstractmethod
    def generate(self, rng: random.Random) -> Any:
        """Draw a fresh random value for this kind of gene."""

    def duplicate_with_value(self, value: Any) -> Gene:
        """New gene of the same kind and metadata holding ``value``."""
        return replace(self, value=value)

    def mutate(self, rng: random.Random) -> Gene:
        """New gene with a freshly generated value."""
        return self.duplicate_with_value(self.generate(rng))

    def verify(self) -> bool:
        return True

    def flatten(self) -> list[Any]:
        return [self.value]


class _FilteredGene(Gene):
    """Gene whose generated values must pass ``filter``."""

    filter: Callable[[Any], bool]

    @abstractmethod
    def _draw(self, rng: random.Random) -> Any:
        """Unfiltered draw within bounds."""

    def generate(self, rng: random.Random) -> Any:
        for _ in range(MAX_GENERATION_ATTEMPTS):
            candidate = self._draw(rng)
            if self.filter(candidate):
                return candidate
        with constraints() as c:
            c.require(
                f"No value accepted by the gene filter after {MAX_GENERATION_ATTEMPTS} attempts",
                False,
                MutationError,
            )


def _check_bounds(bounds: tuple[Any, Any], kind: str) -> None:
    with constraints() as c:
        c.require(
            f"{kind} bounds must be ordered (lower <= upper), got {bounds}",
            bounds[0] <= bounds[1],
            GeneticMaterialConfigError,
        )


# =============================================================================
# Numeric Genes
# =============================================================================


@dataclass(frozen=True)
class IntGene(_FilteredGene):
    """Integer gene within inclusive ``bounds``."""

    value: int
    bounds: tuple[int, int] = INT_BOUNDS
    filter: Callable[[int], bool] = field(default=accept_all, compare=False, repr=False)

    def __post_init__(self) -> None:
        _check_bounds(self.bounds, "Integer")

    def _draw(self, rng: random.Random) -> int:
        return rng.randint(*self.bounds)

    def verify(self) -> bool:
        low, high = self.bounds
        return low <= self.value <= high and bool(self.filter(self.value))

    def average(self, others: Sequence[IntGene]) -> IntGene:
        """Mean of this gene and ``others``, truncated towards zero."""
        with constraints() as c:
            c.require("The list of genes must not be empty", len(others) > 0)
        total = self.value + sum(g.value for g in others)
        return self.duplicate_with_value(int(total / (len(others) + 1)))

    def to_float(self) -> float:
        return float(self.value)

    def to_int(self) -> int:
        return self.value


@dataclass(frozen=True)
class DoubleGene(_FilteredGene):
    """Floating-point gene within inclusive ``bounds``."""

    value: float
    bounds: tuple[float, float] = DOUBLE_BOUNDS
    filter: Callable[[float], bool] = field(default=accept_all, compare=False, repr=False)

    def __post_init__(self) -> None:
        _check_bounds(self.bounds, "Double")

    def _draw(self, rng: random.Random) -> float:
        low, high = self.bounds
        r = rng.random()
        # Weighted form avoids overflow of (high - low) on extreme bounds
        return low * (1.0 - r) + high * r

    def verify(self) -> bool:
        low, high = self.bounds
        return low <= self.value <= high and bool(self.filter(self.value))

    def average(self, others: Sequence[DoubleGene]) -> DoubleGene:
        """Arithmetic mean of this gene and ``others``."""
        with constraints() as c:
            c.require("The list of genes must not be empty", len(others) > 0)
        total = self.value + sum(g.value for g in others)
        return self.duplicate_with_value(total / (len(others) + 1))

    def to_float(self) -> float:
        return self.value

    def to_int(self) -> int:
        return int(self.value)


# =============================================================================
# Other Genes
# =============================================================================


@dataclass(frozen=True)
class BooleanGene(Gene):
    value: bool

    def generate(self, rng: random.Random) -> bool:
        return rng.random() < 0.5

    def flip(self) -> BooleanGene:
        return self.duplicate_with_value(not self.value)


@dataclass(frozen=True)
class CharGene(_FilteredGene):
    """Single character within inclusive code-point ``bounds``."""

    value: str
    bounds: tuple[str, str] = CHAR_BOUNDS
    filter: Callable[[str], bool] = field(default=accept_all, compare=False, repr=False)

    def __post_init__(self) -> None:
        _check_bounds(self.bounds, "Character")

    def _draw(self, rng: random.Random) -> str:
        low, high = self.bounds
        return chr(rng.randint(ord(low), ord(high)))

    def verify(self) -> bool:
        low, high = self.bounds
        return (
            len(self.value) == 1
            and low <= self.value <= high
            and bool(self.filter(self.value))
        )


@dataclass(frozen=True)
class AlleleGene(Gene):
    """Gene taking one of a fixed, finite set of ``alleles``."""

    value: Any
    alleles: tuple[Any, ...] = ()

    def generate(self, rng: random.Random) -> Any:
        return rng.choice(self.alleles)

    def verify(self) -> bool:
        return self.value in self.alleles


__all__ = [
    "INT_BOUNDS",
    "DOUBLE_BOUNDS",
    "CHAR_BOUNDS",
    "accept_all",
    "Verifiable",
    "Flattenable",
    "Gene",
    "IntGene",
    "DoubleGene",
    "BooleanGene",
    "CharGene",
    "AlleleGene",
]
