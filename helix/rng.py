"""
Randomness Service

Seedable random number generation plus the sampling helpers used by the
operators. Every stochastic call in Helix receives a ``random.Random``
explicitly; nothing touches the module-level generator. Independent
substreams for parallel work are spawned from a ``numpy.random.SeedSequence``.

Author: Helix Team
Python: 3.11+
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import TypeVar

import numpy as np

from .constraints import constraints

T = TypeVar("T")


def make_rng(seed: int | None = None) -> random.Random:
    """Create a generator; ``None`` seeds from system entropy."""
    return random.Random(seed)


def spawn_substreams(seed: int | np.random.SeedSequence, count: int) -> list[random.Random]:
    """
    Spawn ``count`` statistically independent generators from one seed.

    The same seed always yields the same substreams, in the same order.

    Args:
        seed: Root seed or an existing SeedSequence
        count: Number of substreams

    Returns:
        List of independent ``random.Random`` instances
    """
    with constraints() as c:
        c.require("Substream count must not be negative", count >= 0)

    sequence = seed if isinstance(seed, np.random.SeedSequence) else np.random.SeedSequence(seed)
    return [
        random.Random(int(child.generate_state(2, dtype=np.uint64)[0]))
        for child in sequence.spawn(count)
    ]


# =============================================================================
# Index Sampling
# =============================================================================


def random_indices(
    rng: random.Random,
    pick_probability: float,
    end: int,
    start: int = 0,
) -> list[int]:
    """
    Indices in ``[start, end)`` each kept with probability ``pick_probability``.

    A probability of 1.0 keeps every index, 0.0 keeps none.
    """
    with constraints() as c:
        c.require(
            "Pick probability must be in [0, 1]",
            0.0 <= pick_probability <= 1.0,
        )
        c.require("Start index must not be greater than the end index", start <= end)

    return [i for i in range(start, end) if rng.random() < pick_probability]


def sample_indices(rng: random.Random, size: int, end: int, start: int = 0) -> list[int]:
    """``size`` distinct indices drawn from ``[start, end)``, sorted ascending."""
    with constraints() as c:
        c.require("Start index must not be greater than the end index", start <= end)
        c.require(
            "Sample size must be in [0, end - start]",
            0 <= size <= end - start,
        )

    return sorted(rng.sample(range(start, end), size))


# =============================================================================
# Subsets
# =============================================================================


def subsets(
    rng: random.Random,
    elements: Sequence[T],
    size: int,
    exclusive: bool,
    limit: int | None = None,
) -> list[list[T]]:
    """
    Split ``elements`` into random subsets of ``size``.

    The elements are shuffled first. In exclusive mode each element lands in
    exactly one subset, so ``len(elements)`` must be a multiple of ``size``.
    Otherwise every subset starts with the next unused element and is filled
    with random picks from all elements; every element still appears in at
    least one subset.

    Args:
        rng: Random generator
        elements: Elements to partition
        size: Size of each subset
        exclusive: Whether elements may appear in only one subset
        limit: Maximum number of subsets to produce

    Returns:
        List of subsets
    """
    with constraints() as c:
        c.require("The input list must not be empty", len(elements) > 0)
        c.require("The subset size must be positive", size >= 1)
        if limit is not None:
            c.require("The subset limit must be positive", limit >= 1)
        if exclusive:
            if c.require(
                "The subset size must not exceed the number of elements",
                size <= len(elements),
            ) and size >= 1:
                c.require(
                    "The number of elements must be a multiple of the subset size",
                    len(elements) % size == 0,
                )

    remaining = list(elements)
    rng.shuffle(remaining)
    result: list[list[T]] = []
    max_subsets = limit if limit is not None else len(elements)

    while remaining and len(result) < max_subsets:
        if exclusive:
            result.append(remaining[:size])
            del remaining[:size]
        else:
            subset = [remaining.pop(0)]
            for _ in range(size - 1):
                pick = rng.choice(elements)
                subset.append(pick)
                _remove_first(remaining, pick)
            result.append(subset)

    return result


def _remove_first(items: list[T], target: T) -> None:
    for i, item in enumerate(items):
        if item is target or item == target:
            del items[i]
            return


__all__ = [
    "make_rng",
    "spawn_substreams",
    "random_indices",
    "sample_indices",
    "subsets",
]
