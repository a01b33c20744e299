"""
Evolution Interceptor

Hooks that may transform the state right before and right after each
generation. The default interceptor leaves the state untouched.
"""

from __future__ import annotations

from collections.abc import Callable

from ..state import EvolutionState

StateTransform = Callable[[EvolutionState], EvolutionState]


def _identity(state: EvolutionState) -> EvolutionState:
    return state


class EvolutionInterceptor:
    """Pair of state transforms applied around every generation."""

    def __init__(
        self,
        before: StateTransform = _identity,
        after: StateTransform = _identity,
    ):
        self._before = before
        self._after = after

    def before(self, state: EvolutionState) -> EvolutionState:
        return self._before(state)

    def after(self, state: EvolutionState) -> EvolutionState:
        return self._after(state)

    @classmethod
    def identity(cls) -> EvolutionInterceptor:
        return cls()

    @classmethod
    def before_only(cls, before: StateTransform) -> EvolutionInterceptor:
        return cls(before=before)

    @classmethod
    def after_only(cls, after: StateTransform) -> EvolutionInterceptor:
        return cls(after=after)


__all__ = ["EvolutionInterceptor"]
