"""Tests for restart.removal, restart.creation and restart.strategy."""

from __future__ import annotations

import itertools

import numpy as np
import pytest

from streaming_ga.config.constants import CreationOp, RemovalOp
from streaming_ga.config.schemas import RestartModel
from streaming_ga.errors import RestartPolicyError
from streaming_ga.genetic.population import Population
from streaming_ga.genetic.solution import Solution
from streaming_ga.restart.creation import CreateFromArchive, CreateNRandom
from streaming_ga.restart.removal import (
    RemoveFirstN,
    RemoveNByCrowdingDistance,
    RemoveNByHypervolumeContribution,
    RemoveNRandom,
)
from streaming_ga.restart.strategy import RestartStrategy, build_restart_strategy
from tests.helpers import ToyProblem, make_population


def _evaluated(problem: ToyProblem, rng: np.random.Generator, n: int) -> Population:
    population = Population(size=n, solutions=[problem.create_solution(rng) for _ in range(n)])
    for s in population:
        problem.evaluate(s)
    return population


@pytest.mark.parametrize(
    ("removal", "creation", "count"),
    list(itertools.product(list(RemovalOp), [CreationOp.RANDOM, CreationOp.ARCHIVE], [0, 3, 10, 25])),
)
def test_restart_preserves_size(
    removal: RemovalOp,
    creation: CreationOp,
    count: int,
    toy_problem: ToyProblem,
    rng: np.random.Generator,
) -> None:
    """Every policy pair returns a population of the pre-restart size."""
    population = _evaluated(toy_problem, rng, 10)
    archive = [toy_problem.create_solution(rng) for _ in range(2)]
    strategy = build_restart_strategy(
        RestartModel(removal=removal, count=count, creation=creation),
        rng,
        archive=archive,
    )

    repaired = strategy.restart(population, toy_problem, rng)

    assert len(repaired) == 10
    assert sum(not s.is_evaluated for s in repaired) == min(count, 10)


def test_remove_first_keeps_order() -> None:
    """RemoveFirstN drops the head and keeps the survivors in order."""
    population = make_population([[0, 0], [1, 1], [2, 2], [3, 3]])
    survivors = RemoveFirstN().remove(population, 2)
    assert [int(s.variables[0]) for s in survivors] == [2, 3]


def test_remove_random_is_seeded() -> None:
    """The same seed removes the same individuals."""
    population = make_population([[i, -i] for i in range(8)])
    a = RemoveNRandom(rng=np.random.default_rng(3)).remove(population, 3)
    b = RemoveNRandom(rng=np.random.default_rng(3)).remove(population, 3)
    assert [s.variables[0] for s in a] == [s.variables[0] for s in b]
    assert len(a) == 5


def test_crowding_removal_ties_remove_lowest_index() -> None:
    """Identical points tie on crowding; the lowest interior index goes first."""
    population = make_population([[1, 1], [1, 1], [1, 1], [1, 1]])
    survivors = RemoveNByCrowdingDistance().remove(population, 2)
    assert [int(s.variables[0]) for s in survivors] == [0, 3]


def test_hypervolume_removal_drops_dominated_first() -> None:
    """A dominated point contributes nothing and is removed first."""
    population = make_population([[0.0, 1.0], [0.9, 0.9], [1.0, 0.0], [0.5, 0.5]])
    survivors = RemoveNByHypervolumeContribution().remove(population, 1)
    assert [int(s.variables[0]) for s in survivors] == [0, 2, 3]


def test_hypervolume_removal_ties_remove_lowest_index() -> None:
    """Two dominated points both contribute nothing; the one with the lower index is removed."""
    population = make_population([[0.0, 1.0], [0.9, 0.9], [0.95, 0.8], [0.5, 0.5], [1.0, 0.0]])
    survivors = RemoveNByHypervolumeContribution().remove(population, 1)
    assert [int(s.variables[0]) for s in survivors] == [0, 2, 3, 4]


def test_count_larger_than_population_replaces_everything(
    toy_problem: ToyProblem,
    rng: np.random.Generator,
) -> None:
    """count > size replaces the whole population."""
    population = _evaluated(toy_problem, rng, 5)
    strategy = RestartStrategy(removal=RemoveFirstN(), creation=CreateNRandom(), count=50)
    repaired = strategy.restart(population, toy_problem, rng)
    assert len(repaired) == 5
    assert all(s.origin == "random" and not s.is_evaluated for s in repaired)


def test_empty_population_is_rejected(toy_problem: ToyProblem, rng: np.random.Generator) -> None:
    """Restarting an empty population is an error."""
    strategy = RestartStrategy(removal=RemoveFirstN(), creation=CreateNRandom(), count=1)
    with pytest.raises(RestartPolicyError):
        strategy.restart(Population(size=3), toy_problem, rng)


def test_empty_archive_is_rejected(toy_problem: ToyProblem, rng: np.random.Generator) -> None:
    """Creating from an empty archive is an error."""
    population = _evaluated(toy_problem, rng, 4)
    strategy = RestartStrategy(removal=RemoveFirstN(), creation=CreateFromArchive(), count=2)
    with pytest.raises(RestartPolicyError):
        strategy.restart(population, toy_problem, rng)


def test_archive_creation_cycles_through_copies(toy_problem: ToyProblem) -> None:
    """Archive members are reused in order as unevaluated copies."""
    archive = [Solution(variables=np.array([float(i)]), objectives=np.array([1.0, 1.0])) for i in range(2)]
    creation = CreateFromArchive(archive=archive)

    created = creation.create(toy_problem, 3, np.random.default_rng(0))

    assert [s.variables[0] for s in created] == [0.0, 1.0, 0.0]
    assert all(s.objectives is None and s.origin == "archive" for s in created)
    assert created[0] is not archive[0]


def test_policy_failure_is_wrapped(rng: np.random.Generator) -> None:
    """A policy raising an arbitrary error surfaces as RestartPolicyError."""
    problem = ToyProblem()
    population = make_population([[0, 1], [1, 0], [0.5, 0.5]])
    population.solutions[1].objectives = None
    strategy = RestartStrategy(removal=RemoveNByCrowdingDistance(), creation=CreateNRandom(), count=1)

    with pytest.raises(RestartPolicyError) as excinfo:
        strategy.restart(population, problem, rng)
    assert isinstance(excinfo.value.__cause__, ValueError)
