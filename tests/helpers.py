"""Test doubles shared by the streaming_ga tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

import numpy as np

from streaming_ga.config.constants import Encoding
from streaming_ga.errors import MalformedUpdateError
from streaming_ga.genetic.evolution import EvolutionEngine, SequentialEvaluator
from streaming_ga.genetic.population import Population
from streaming_ga.genetic.solution import Solution
from streaming_ga.observer.payload import TimestampedPayload
from streaming_ga.problem.base import DynamicProblem
from streaming_ga.problem.tsp import MultiobjectiveTSP
from streaming_ga.restart.strategy import RestartStrategy

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(slots=True)
class ToyProblem(DynamicProblem):
    """Two objectives on the first variable, shifted by the last update."""

    name: ClassVar[str] = "ToyProblem"
    encoding: ClassVar[Encoding] = Encoding.REAL

    variables: int = 3
    shift: float = 0.0
    fail_after: int | None = None
    calls: int = 0

    @property
    def n_variables(self) -> int:
        """Return the number of decision variables."""
        return self.variables

    @property
    def n_objectives(self) -> int:
        """Return the number of objectives."""
        return 2

    def create_solution(self, rng: np.random.Generator) -> Solution:
        """Create a random solution in the unit cube."""
        return Solution(variables=rng.random(self.variables), origin="random")

    def evaluate(self, solution: Solution) -> None:
        """Compute (x0 + shift, 1 - x0 + shift), failing after ``fail_after`` calls."""
        if self.fail_after is not None and self.calls >= self.fail_after:
            msg = "toy evaluation failure"
            raise RuntimeError(msg)
        self.calls += 1
        x0 = float(solution.variables[0])
        solution.objectives = np.array([x0 + self.shift, 1.0 - x0 + self.shift])

    def validate_update(self, value: Any) -> None:
        """Accept finite numbers only."""
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not np.isfinite(value):
            msg = f"bad shift {value!r}"
            raise MalformedUpdateError(msg)

    def update(self, value: Any) -> None:
        """Set the objective shift."""
        self.shift = float(value)


@dataclass(slots=True)
class RecordingEngine(EvolutionEngine):
    """Engine that re-evaluates copies of the population and records what it did.

    ``hooks`` maps an advance number (starting at 1) to a callable run inside
    that advance, which is how tests inject changes mid-cycle.
    """

    name: str = "RecordingEngine"
    events: list[str] = field(default_factory=list)
    hooks: dict[int, Callable[[], None]] = field(default_factory=dict)
    evaluator: SequentialEvaluator = field(default_factory=SequentialEvaluator)
    parameters: list[Any] = field(default_factory=list)
    sizes: list[int] = field(default_factory=list)
    advances: int = 0

    @property
    def evaluations(self) -> int:
        """Return the number of evaluations performed so far."""
        return self.evaluator.evaluations

    def advance(self, population: Population, problem: DynamicProblem) -> Population:
        """Record the advance, run its hook and return evaluated copies."""
        self.advances += 1
        self.events.append("advance")
        self.sizes.append(len(population))
        hook = self.hooks.get(self.advances)
        if hook is not None:
            hook()
        offspring = [s.clone() for s in population]
        self.evaluator.evaluate(offspring, problem)
        return Population(size=population.size, solutions=offspring)

    def evaluate(self, population: Population, problem: DynamicProblem) -> Population:
        """Record and evaluate the population."""
        self.events.append("evaluate")
        self.evaluator.evaluate(population.solutions, problem)
        return population

    def update_parameters(self, value: Any) -> None:
        """Record a live parameter."""
        self.events.append("parameters")
        self.parameters.append(value)


@dataclass(slots=True)
class RecordingStrategy(RestartStrategy):
    """Restart strategy that appends a label to a shared event list."""

    events: list[str] = field(default_factory=list)
    label: str = "restart"

    def restart(self, population: Population, problem: DynamicProblem, rng: np.random.Generator) -> Population:
        """Record the restart, then delegate."""
        self.events.append(self.label)
        return RestartStrategy.restart(self, population, problem, rng)


def make_payload(value: Any, sequence: int = 0) -> TimestampedPayload:
    """Wrap a value the way a streaming source would."""
    return TimestampedPayload(value=value, sequence=sequence, timestamp=0.0, source="test")


def make_population(fits: list[list[float]]) -> Population:
    """Build an evaluated population whose single variable is the row index."""
    solutions = [
        Solution(variables=np.array([float(i)]), objectives=np.array(f, dtype=float)) for i, f in enumerate(fits)
    ]
    return Population(size=len(solutions), solutions=solutions)
