"""
Operator Base Types

Every genetic operator maps an evolution state to a new state holding
exactly ``output_size`` individuals. Selectors pick individuals; alterers
(crossovers and mutators) produce modified copies of them.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod

from ..state import EvolutionState


class GeneticOperator(ABC):
    """State-to-state transformation producing ``output_size`` individuals."""

    @abstractmethod
    def __call__(
        self,
        state: EvolutionState,
        output_size: int,
        rng: random.Random,
    ) -> EvolutionState:
        """Apply the operator."""


class Alterer(GeneticOperator):
    """Operator that changes genetic material (crossover or mutation)."""

    pass


__all__ = ["GeneticOperator", "Alterer"]
