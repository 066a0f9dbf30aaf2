"""Evolution engines driven by the dynamic control loop."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

import numpy as np

from ..errors import EvaluationError
from ..operators.nsga2 import NSGA2
from .population import Population

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..operators.selection import Selection
    from ..operators.variation import Crossover, Mutation
    from ..problem.base import DynamicProblem
    from .solution import Solution

logger = getLogger(__name__)


@dataclass(slots=True)
class SequentialEvaluator:
    """Evaluate solutions one after another on the calling thread."""

    evaluations: int = 0

    def evaluate(self, solutions: Iterable[Solution], problem: DynamicProblem) -> None:
        """Evaluate every solution, wrapping any failure in an EvaluationError."""
        for solution in solutions:
            try:
                problem.evaluate(solution)
            except Exception as e:
                msg = f"Evaluation of a solution on {problem.name} failed: {e}"
                raise EvaluationError(msg, component=problem.name) from e

            objectives = solution.objectives
            if objectives is None or objectives.shape != (problem.n_objectives,) or not np.isfinite(objectives).all():
                msg = f"{problem.name} produced an invalid objective vector: {objectives!r}"
                raise EvaluationError(msg, component=problem.name)
            self.evaluations += 1


@dataclass(slots=True)
class EvolutionEngine(ABC):
    """Capability interface of the evaluation/variation engine."""

    name: str = "EvolutionEngine"

    @abstractmethod
    def advance(self, population: Population, problem: DynamicProblem) -> Population:
        """Produce the next generation from an evaluated population."""

    @abstractmethod
    def evaluate(self, population: Population, problem: DynamicProblem) -> Population:
        """Evaluate every solution of the population against the current problem."""

    def update_parameters(self, value: Any) -> None:  # noqa: B027
        """Receive a live parameter value. Engines without live parameters ignore it."""
        logger.debug("%s ignores live parameter %r.", self.name, value)

    @property
    def evaluations(self) -> int:
        """Return the number of evaluations performed so far."""
        return 0


@dataclass(slots=True)
class NSGA2Engine(EvolutionEngine):
    """Generational NSGA-II with an optional reference-point preference.

    When a reference point is set, the last front that does not fit is
    truncated by the achievement scalarizing function towards that point
    instead of by crowding distance.
    """

    name: str = "DynamicNSGAII"
    crossover: Crossover = None
    mutation: Mutation = None
    selection: Selection = None
    evaluator: SequentialEvaluator = field(default_factory=SequentialEvaluator)
    reference_point: np.ndarray | None = None

    @property
    def evaluations(self) -> int:
        """Return the number of evaluations performed so far."""
        return self.evaluator.evaluations

    def update_parameters(self, value: Any) -> None:
        """Set the reference point used to truncate the last front."""
        self.reference_point = np.asarray(value, dtype=float)
        logger.info("%s reference point set to %s.", self.name, self.reference_point)

    def evaluate(self, population: Population, problem: DynamicProblem) -> Population:
        """Evaluate the population and refresh rank and crowding of every solution."""
        self.evaluator.evaluate(population.solutions, problem)
        self._assign_ranking(population.solutions, population.objectives())
        return population

    def advance(self, population: Population, problem: DynamicProblem) -> Population:
        """Create offspring, evaluate them and select the survivors of parents + offspring."""
        n_pop = population.size
        parents = population.solutions
        ranks = np.array([s.rank for s in parents], dtype=int)
        crowding = np.array([s.crowding for s in parents], dtype=float)

        offspring: list[Solution] = []
        while len(offspring) < n_pop:
            i, j = self.selection.select(ranks, crowding, k=2)
            for child in self.crossover.cross(parents[i], parents[j], problem):
                offspring.append(self.mutation.mutate(child, problem))
                if len(offspring) >= n_pop:
                    break

        self.evaluator.evaluate(offspring, problem)
        merged = parents + offspring
        fits = np.vstack([s.objectives for s in merged])
        survivors = self._survivors(fits, n_pop)
        next_gen = [merged[k] for k in survivors]
        self._assign_ranking(next_gen, fits[survivors])
        return Population(size=n_pop, solutions=next_gen)

    def _survivors(self, fits: np.ndarray, n_pop: int) -> np.ndarray:
        """Return the indices of the n_pop best rows, best fronts first."""
        chosen: list[np.ndarray] = []
        remaining = n_pop
        for front in NSGA2.non_dominated_sort(fits):
            if front.shape[0] <= remaining:
                chosen.append(front)
                remaining -= front.shape[0]
            else:
                order = self._truncation_order(fits, front)
                chosen.append(front[order[:remaining]])
                remaining = 0
            if remaining == 0:
                break
        return np.concatenate(chosen)

    def _truncation_order(self, fits: np.ndarray, front: np.ndarray) -> np.ndarray:
        """Order a front from most to least preferred."""
        front_fits = fits[front]
        if self.reference_point is None:
            return np.argsort(-NSGA2.crowding_distance(front_fits), kind="stable")

        span = fits.max(axis=0) - fits.min(axis=0)
        span[span == 0] = 1.0
        asf = ((front_fits - self.reference_point) / span).max(axis=1)
        return np.argsort(asf, kind="stable")

    @staticmethod
    def _assign_ranking(solutions: list[Solution], fits: np.ndarray) -> None:
        for rank, front in enumerate(NSGA2.non_dominated_sort(fits)):
            crowding = NSGA2.crowding_distance(fits[front])
            for idx, dist in zip(front, crowding, strict=True):
                solutions[idx].rank = rank
                solutions[idx].crowding = float(dist)
