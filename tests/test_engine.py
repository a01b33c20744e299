"""
Unit and integration tests for the evolutionary engine.

Tests cover:
- Configuration validation
- Survivor/parent split
- Phase invariants (population size, evaluation, alteration size)
- Interceptor hooks
- Seeded reproducibility of complete runs
- Building an engine from HelixConfig

Author: Helix Team
License: MIT
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from helix.config import HelixConfig
from helix.exceptions import CompositeError, EngineConfigError, EvolutionStateError
from helix.evolution import (
    EvaluationExecutor,
    EvolutionInterceptor,
    GeneticAlgorithm,
    LoggingListener,
    MaxGenerations,
    ParallelEvaluator,
    SequentialEvaluator,
    SteadyGenerations,
    TargetFitness,
    TimeLimit,
    parent_count,
    survivor_count,
)
from helix.operators import (
    Alterer,
    RandomMutator,
    RouletteWheelSelector,
    SinglePointCrossover,
    TournamentSelector,
)
from helix.ranking import FitnessMinRanker
from helix.rng import make_rng
from helix.state import EvolutionState

from helpers import sum_fitness


def make_engine(genotype_factory, **overrides):
    options = dict(
        population_size=20,
        survival_rate=0.4,
        alterers=[SinglePointCrossover(1.0), RandomMutator(0.3)],
        limits=[MaxGenerations(10)],
        seed=42,
    )
    options.update(overrides)
    return GeneticAlgorithm(genotype_factory, sum_fitness, **options)


# ============================================================================
# Configuration Tests
# ============================================================================

class TestEngineConfiguration:
    """Test constructor validation."""

    def test_defaults(self, genotype_factory):
        """Engine defaults match the documented options."""
        engine = GeneticAlgorithm(genotype_factory, sum_fitness, limits=[MaxGenerations(1)])
        assert engine.population_size == 50
        assert engine.survival_rate == 0.4
        assert engine.parent_selector == TournamentSelector(3)
        assert engine.ranker.maximize
        assert isinstance(engine.evaluator, SequentialEvaluator)

    def test_all_errors_reported(self, genotype_factory):
        """Every invalid option is reported in one error."""
        with pytest.raises(CompositeError) as exc_info:
            GeneticAlgorithm(genotype_factory, sum_fitness, population_size=0, survival_rate=1.5)
        error = exc_info.value
        assert error.has(EngineConfigError)
        assert error.matches("Population size (0) must be positive")
        assert error.matches("Survival rate (1.5) must be in [0.0, 1.0]")
        assert error.matches("At least one limit must be given")
        assert len(error.violations) == 3

    def test_fitness_function_or_evaluator(self, genotype_factory):
        """Exactly one of fitness function and evaluator is required."""
        limits = [MaxGenerations(1)]
        with pytest.raises(CompositeError) as exc_info:
            GeneticAlgorithm(genotype_factory, limits=limits)
        assert exc_info.value.matches("Exactly one of a fitness function or an evaluator")

        with pytest.raises(CompositeError):
            GeneticAlgorithm(
                genotype_factory,
                sum_fitness,
                evaluator=SequentialEvaluator(sum_fitness),
                limits=limits,
            )

    def test_rng_and_seed_are_exclusive(self, genotype_factory):
        """A generator and a seed cannot both be given."""
        with pytest.raises(CompositeError) as exc_info:
            GeneticAlgorithm(
                genotype_factory,
                sum_fitness,
                limits=[MaxGenerations(1)],
                rng=make_rng(1),
                seed=1,
            )
        assert exc_info.value.matches("cannot both be given")


# ============================================================================
# Survivor / Parent Split Tests
# ============================================================================

class TestPopulationSplit:
    """Test how a generation is split into survivors and parents."""

    def test_known_values(self):
        """Survivor and parent counts for common rates."""
        assert survivor_count(0.4, 50) == 20
        assert parent_count(0.4, 50) == 30
        assert survivor_count(0.0, 10) == 0
        assert parent_count(1.0, 10) == 0

    def test_decimal_rates_are_exact(self):
        """0.7 * 10 is 7, not 7.000000000000001."""
        assert survivor_count(0.7, 10) == 7
        assert parent_count(0.7, 10) == 3

    @given(
        rate=st.floats(min_value=0.0, max_value=1.0, allow_nan=False),
        size=st.integers(min_value=1, max_value=10_000),
    )
    @settings(max_examples=200)
    def test_split_covers_population(self, rate, size):
        """Survivors and parents always add up to the population size."""
        assert survivor_count(rate, size) + parent_count(rate, size) == size

    def test_engine_properties(self, genotype_factory):
        """The engine exposes its survivor and parent counts."""
        engine = make_engine(genotype_factory, population_size=15, survival_rate=0.3)
        assert engine.survivor_count == 5
        assert engine.parent_count == 10


# ============================================================================
# Phase Invariant Tests
# ============================================================================

class TestPhaseInvariants:
    """Test the checks performed between phases."""

    def test_wrong_population_size(self, genotype_factory, state):
        """Evaluating a wrongly sized population is an error."""
        engine = make_engine(genotype_factory, population_size=10)
        with pytest.raises(CompositeError) as exc_info:
            engine.evaluate_population(state)
        assert exc_info.value.matches("Population size")
        assert exc_info.value.has(EvolutionStateError)

    def test_evaluator_leaving_gaps(self, genotype_factory, state):
        """Evaluators must assign fitness to every individual."""
        class Lazy(EvaluationExecutor):
            def __call__(self, state, force=False):
                return state.with_population(type(ind)(ind.genotype) for ind in state.population)

        engine = GeneticAlgorithm(
            genotype_factory,
            evaluator=Lazy(),
            population_size=state.size,
            limits=[MaxGenerations(1)],
        )
        with pytest.raises(CompositeError) as exc_info:
            engine.evaluate_population(state)
        assert exc_info.value.matches("There are unevaluated individuals in the population")

    def test_evaluator_changing_size(self, genotype_factory, state):
        """Evaluators must not change the population size."""
        class Shrinking(EvaluationExecutor):
            def __call__(self, state, force=False):
                return state.with_population(state.population[1:])

        engine = GeneticAlgorithm(
            genotype_factory,
            evaluator=Shrinking(),
            population_size=state.size,
            limits=[MaxGenerations(1)],
        )
        with pytest.raises(CompositeError) as exc_info:
            engine.evaluate_population(state)
        assert exc_info.value.matches(
            "Evaluated population size must be the same as the expected population size"
        )

    def test_alterer_changing_size(self, genotype_factory):
        """Alterers must keep the offspring count."""
        class Dropping(Alterer):
            def __call__(self, state, output_size, rng):
                return state.with_population(state.population[:-1])

        engine = make_engine(genotype_factory, alterers=[Dropping()])
        with pytest.raises(CompositeError) as exc_info:
            engine.evolve()
        assert exc_info.value.matches("Alteration must produce 12 individuals, produced 11")

    def test_start_evolution_keeps_existing_population(self, genotype_factory, state):
        """An existing population is kept when evolution starts."""
        engine = make_engine(genotype_factory, population_size=state.size)
        assert engine.start_evolution(state) is state

    def test_start_evolution_creates_population(self, genotype_factory, ranker):
        """An empty state gets a fresh random population."""
        engine = make_engine(genotype_factory)
        started = engine.start_evolution(EvolutionState.empty(ranker))
        assert started.size == 20
        assert not any(ind.is_evaluated() for ind in started.population)


# ============================================================================
# Run Tests
# ============================================================================

class TestEvolution:
    """Test complete runs."""

    def test_run_reaches_generation_limit(self, genotype_factory):
        """A run stops at the generation limit."""
        engine = make_engine(genotype_factory, limits=[MaxGenerations(7)])
        final = engine.evolve()
        assert final.generation == 7
        assert final.size == 20
        assert all(ind.is_evaluated() for ind in final.population)
        assert all(ind.genotype.verify() for ind in final.population)
        assert engine.state is final

    def test_always_runs_one_generation(self, genotype_factory):
        """Limits are checked after each generation, never before the first."""
        engine = make_engine(genotype_factory, limits=[TargetFitness(lambda fitness: True)])
        assert engine.evolve().generation == 1

    def test_evolve_continues_from_state(self, genotype_factory):
        """Evolution resumes from a previous final state."""
        engine = make_engine(genotype_factory, limits=[MaxGenerations(5)])
        first = engine.evolve()
        engine.limits[0] = MaxGenerations(8)
        second = engine.evolve()
        assert first.generation == 5
        assert second.generation == 8

    def test_interceptor(self, genotype_factory):
        """Interceptors run before and after each generation."""
        seen = []

        def before(state):
            seen.append(("before", state.generation))
            return state

        def after(state):
            seen.append(("after", state.generation))
            return state

        engine = make_engine(
            genotype_factory,
            limits=[MaxGenerations(2)],
            interceptor=EvolutionInterceptor(before, after),
        )
        engine.evolve()
        assert seen == [("before", 0), ("after", 0), ("before", 1), ("after", 1)]

    def test_after_interceptor_can_replace_population(self, genotype_factory):
        """The after hook may replace the population."""
        def clamp_fitness(state):
            return state.with_population(ind.with_fitness(0.0) for ind in state.population)

        engine = make_engine(
            genotype_factory,
            limits=[MaxGenerations(1)],
            interceptor=EvolutionInterceptor.after_only(clamp_fitness),
        )
        assert all(ind.fitness == 0.0 for ind in engine.evolve().population)

    def test_minimization_lowers_fitness(self, genotype_factory):
        """Minimizing runs lower the mean fitness."""
        engine = make_engine(
            genotype_factory,
            ranker=FitnessMinRanker(),
            population_size=30,
            limits=[MaxGenerations(40)],
        )
        initial = engine.evaluate_population(engine.start_evolution(engine.state))
        final = engine.evolve(initial)
        mean = lambda s: sum(ind.fitness for ind in s.population) / s.size
        assert mean(final) < mean(initial)

    def test_maximization_raises_fitness(self, genotype_factory):
        """Maximizing runs raise the mean fitness."""
        engine = make_engine(
            genotype_factory,
            parent_selector=RouletteWheelSelector(),
            population_size=30,
            limits=[MaxGenerations(40)],
        )
        initial = engine.evaluate_population(engine.start_evolution(engine.state))
        final = engine.evolve(initial)
        mean = lambda s: sum(ind.fitness for ind in s.population) / s.size
        assert mean(final) > mean(initial)

    def test_parallel_evaluator_run(self, genotype_factory):
        """A run with the parallel evaluator completes."""
        engine = GeneticAlgorithm(
            genotype_factory,
            evaluator=ParallelEvaluator(sum_fitness, max_workers=4),
            population_size=20,
            alterers=[SinglePointCrossover(), RandomMutator(0.3)],
            limits=[MaxGenerations(5)],
            seed=3,
        )
        sequential = make_engine(
            genotype_factory,
            population_size=20,
            alterers=[SinglePointCrossover(), RandomMutator(0.3)],
            limits=[MaxGenerations(5)],
            seed=3,
        )
        assert engine.evolve().population == sequential.evolve().population


@pytest.mark.integration
class TestReproducibility:
    """Test that seeded runs are reproducible end to end."""

    @staticmethod
    def run(genotype_factory, seed):
        return GeneticAlgorithm(
            genotype_factory,
            sum_fitness,
            population_size=50,
            survival_rate=0.4,
            alterers=[SinglePointCrossover(chromosome_rate=1.0)],
            limits=[MaxGenerations(100)],
            seed=seed,
        ).evolve()

    def test_same_seed_same_final_population(self, genotype_factory):
        """The same seed gives the same final population."""
        first = self.run(genotype_factory, seed=2024)
        second = self.run(genotype_factory, seed=2024)
        assert first.generation == second.generation == 100
        assert first.population == second.population

    def test_different_seeds_differ(self, genotype_factory):
        """Different seeds give different final populations."""
        first = self.run(genotype_factory, seed=1)
        second = self.run(genotype_factory, seed=2)
        assert first.population != second.population

    def test_multi_chromosome_run(self, multi_genotype_factory):
        """Multi-chromosome genotypes evolve without losing shape."""
        def fitness(genotype):
            return float(sum(int(v) for v in genotype.flatten()))

        final = GeneticAlgorithm(
            multi_genotype_factory,
            fitness,
            population_size=30,
            alterers=[SinglePointCrossover(), RandomMutator(0.2)],
            limits=[MaxGenerations(20), TargetFitness(lambda f: f >= 3 * 5 * 9 + 8)],
            seed=9,
        ).evolve()
        assert final.size == 30
        assert all(ind.genotype.verify() for ind in final.population)


# ============================================================================
# Configuration Factory Tests
# ============================================================================

class TestFromConfig:
    """Test building engines from HelixConfig."""

    def test_defaults(self, genotype_factory):
        """A default configuration builds the default engine."""
        engine = GeneticAlgorithm.from_config(HelixConfig(), genotype_factory, sum_fitness)
        assert engine.population_size == 50
        assert engine.survival_rate == 0.4
        assert [type(limit) for limit in engine.limits] == [MaxGenerations]
        assert engine.limits[0].max_generations == 100
        assert any(isinstance(listener, LoggingListener) for listener in engine.listeners)

    def test_all_options(self, genotype_factory):
        """Every configuration option reaches the engine."""
        config = HelixConfig(
            evolution={
                "population_size": 12,
                "survival_rate": 0.25,
                "max_generations": 5,
                "target_fitness": 1000.0,
                "steady_generations": 4,
                "time_limit": 60.0,
                "objective": "minimize",
                "seed": 11,
            },
            selection={
                "parent_selector": "roulette",
                "survivor_selector": "random",
                "sorted": True,
            },
            evaluation={"parallel": True, "max_workers": 2, "seed": 5},
            logging={"progress": False},
        )
        engine = GeneticAlgorithm.from_config(config, genotype_factory, lambda g, rng: sum_fitness(g))

        assert engine.population_size == 12
        assert [type(limit) for limit in engine.limits] == [
            MaxGenerations,
            TargetFitness,
            SteadyGenerations,
            TimeLimit,
        ]
        assert not engine.ranker.maximize
        assert isinstance(engine.parent_selector, RouletteWheelSelector)
        assert engine.parent_selector.sorted
        assert isinstance(engine.evaluator, ParallelEvaluator)
        assert engine.evaluator.seed == 5
        assert not any(isinstance(listener, LoggingListener) for listener in engine.listeners)

    def test_configured_runs_are_reproducible(self, genotype_factory):
        """Configured seeds make runs reproducible."""
        config = HelixConfig(
            evolution={"population_size": 10, "max_generations": 5, "seed": 3},
            logging={"progress": False},
        )
        alterers = [SinglePointCrossover()]
        first = GeneticAlgorithm.from_config(config, genotype_factory, sum_fitness, alterers).evolve()
        second = GeneticAlgorithm.from_config(config, genotype_factory, sum_fitness, alterers).evolve()
        assert first.population == second.population


# ============================================================================
# Interceptor Tests
# ============================================================================

class TestEvolutionInterceptor:
    """Test interceptor construction helpers."""

    def test_identity(self, state):
        """The identity interceptor returns the state unchanged."""
        interceptor = EvolutionInterceptor.identity()
        assert interceptor.before(state) is state
        assert interceptor.after(state) is state

    def test_before_only(self, state):
        """before_only transforms only before a generation."""
        interceptor = EvolutionInterceptor.before_only(lambda s: s.copy(generation=9))
        assert interceptor.before(state).generation == 9
        assert interceptor.after(state) is state

    def test_after_only(self, state):
        """after_only transforms only after a generation."""
        interceptor = EvolutionInterceptor.after_only(lambda s: s.copy(generation=9))
        assert interceptor.before(state) is state
        assert interceptor.after(state).generation == 9
