"""Immutable snapshots of the running algorithm handed to data consumers."""

from __future__ import annotations

from dataclasses import dataclass, field
from time import time
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..genetic.population import Population
    from ..genetic.solution import Solution


@dataclass(slots=True, frozen=True)
class SolutionRecord:
    """Read-only copy of one solution inside a snapshot."""

    variables: np.ndarray
    objectives: np.ndarray | None
    rank: int
    crowding: float
    origin: str

    @classmethod
    def of(cls, solution: Solution) -> SolutionRecord:
        """Copy a live solution, making its arrays read-only."""
        variables = solution.variables.copy()
        variables.setflags(write=False)
        objectives = None
        if solution.objectives is not None:
            objectives = solution.objectives.copy()
            objectives.setflags(write=False)
        return cls(
            variables=variables,
            objectives=objectives,
            rank=solution.rank,
            crowding=solution.crowding,
            origin=solution.origin,
        )


@dataclass(slots=True, frozen=True)
class ObservedData:
    """Point-in-time copy of the population plus run metadata."""

    population: tuple[SolutionRecord, ...]
    iterations: int
    algorithm_name: str
    problem_name: str
    n_objectives: int
    extra: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    timestamp: float = field(default_factory=time)

    @classmethod
    def capture(
        cls,
        population: Population,
        iterations: int,
        algorithm_name: str,
        problem_name: str,
        n_objectives: int,
        **extra: Any,
    ) -> ObservedData:
        """Deep-copy the live population into a read-only snapshot."""
        return cls(
            population=tuple(SolutionRecord.of(s) for s in population),
            iterations=iterations,
            algorithm_name=algorithm_name,
            problem_name=problem_name,
            n_objectives=n_objectives,
            extra=MappingProxyType(dict(extra)),
        )

    def __len__(self) -> int:
        """Return the number of solutions in the snapshot."""
        return len(self.population)

    def objectives(self) -> np.ndarray:
        """Return the objective vectors as a new (n, m) array."""
        if not self.population:
            return np.empty((0, self.n_objectives))
        return np.vstack([s.objectives for s in self.population])

    def variables(self) -> np.ndarray:
        """Return the decision variables as a new (n, d) array."""
        if not self.population:
            return np.empty((0, 0))
        return np.vstack([s.variables for s in self.population])

    def as_dict(self) -> dict[str, Any]:
        """Return the metadata in the layout used by output consumers."""
        return {
            "numberOfIterations": self.iterations,
            "algorithmName": self.algorithm_name,
            "problemName": self.problem_name,
            "numberOfObjectives": self.n_objectives,
            **self.extra,
        }
