"""Bi-objective travelling salesman problem with streaming matrix updates."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from logging import getLogger
from typing import Any, ClassVar

import numpy as np

from ..config.constants import Encoding, TSPMatrix
from ..errors import MalformedUpdateError
from ..genetic.solution import Solution
from .base import DynamicProblem

logger = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class TSPMatrixData:
    """A single edge update for one of the TSP matrices."""

    matrix: str
    x: int
    y: int
    value: float


def as_updates(value: Any) -> tuple[TSPMatrixData, ...]:
    """Normalize a payload value into a tuple of edge updates."""
    if isinstance(value, TSPMatrixData):
        return (value,)
    if isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
        updates = tuple(value)
        if updates and all(isinstance(u, TSPMatrixData) for u in updates):
            return updates
    msg = f"Expected TSPMatrixData or a non-empty sequence of it, got {type(value).__name__}."
    raise MalformedUpdateError(msg)


@dataclass(slots=True)
class MultiobjectiveTSP(DynamicProblem):
    """TSP minimizing tour length under a distance matrix and a cost matrix."""

    name: ClassVar[str] = "MultiobjectiveTSP"
    encoding: ClassVar[Encoding] = Encoding.PERMUTATION

    distance: np.ndarray = field(default_factory=lambda: np.zeros((0, 0)))
    cost: np.ndarray = field(default_factory=lambda: np.zeros((0, 0)))

    def __post_init__(self) -> None:
        """Validate that both matrices are square and share a shape."""
        self.distance = np.asarray(self.distance, dtype=float)
        self.cost = np.asarray(self.cost, dtype=float)
        n = self.distance.shape[0]
        if self.distance.shape != (n, n) or self.cost.shape != (n, n):
            msg = f"Distance {self.distance.shape} and cost {self.cost.shape} must be equal square matrices."
            raise ValueError(msg)
        if n < 2:
            msg = "A TSP needs at least 2 cities."
            raise ValueError(msg)

    @classmethod
    def random(cls, n_cities: int, rng: np.random.Generator) -> MultiobjectiveTSP:
        """Build an instance from random city coordinates and random travel costs."""
        coords = rng.random((n_cities, 2)) * 1000.0
        distance = np.linalg.norm(coords[:, None, :] - coords[None, :, :], axis=2)
        cost = rng.integers(1, 100, size=(n_cities, n_cities)).astype(float)
        cost = np.triu(cost, 1)
        cost += cost.T
        return cls(distance=distance, cost=cost)

    @property
    def n_cities(self) -> int:
        """Return the number of cities."""
        return self.distance.shape[0]

    @property
    def n_variables(self) -> int:
        """Return the tour length in cities."""
        return self.n_cities

    @property
    def n_objectives(self) -> int:
        """Return the number of objectives."""
        return 2

    def matrix(self, name: str) -> np.ndarray:
        """Return the matrix with the given name."""
        if name == TSPMatrix.DISTANCE:
            return self.distance
        if name == TSPMatrix.COST:
            return self.cost
        msg = f"Unknown matrix: {name}"
        raise MalformedUpdateError(msg)

    def create_solution(self, rng: np.random.Generator) -> Solution:
        """Create a random tour."""
        return Solution(variables=rng.permutation(self.n_cities), origin="random")

    def evaluate(self, solution: Solution) -> None:
        """Compute the total distance and total cost of the closed tour."""
        tour = solution.variables
        nxt = np.roll(tour, -1)
        solution.objectives = np.array(
            [self.distance[tour, nxt].sum(), self.cost[tour, nxt].sum()],
            dtype=float,
        )

    def validate_update(self, value: Any) -> None:
        """Check every edge update of the batch before any of them is applied."""
        n = self.n_cities
        for u in as_updates(value):
            self.matrix(u.matrix)
            if not all(isinstance(i, (int, np.integer)) for i in (u.x, u.y)):
                msg = f"Edge ({u.x!r}, {u.y!r}) indices must be integers."
                raise MalformedUpdateError(msg)
            if not isinstance(u.value, (int, float, np.number)):
                msg = f"Edge ({u.x}, {u.y}) value must be numeric, got {u.value!r}."
                raise MalformedUpdateError(msg)
            if not (0 <= u.x < n and 0 <= u.y < n):
                msg = f"Edge ({u.x}, {u.y}) out of range for {n} cities."
                raise MalformedUpdateError(msg)
            if u.x == u.y:
                msg = f"Edge ({u.x}, {u.y}) is a self loop."
                raise MalformedUpdateError(msg)
            if not np.isfinite(u.value) or u.value < 0:
                msg = f"Edge ({u.x}, {u.y}) has invalid value {u.value}."
                raise MalformedUpdateError(msg)

    def update(self, value: Any) -> None:
        """Write the edge updates into both triangles of their matrix."""
        for u in as_updates(value):
            m = self.matrix(u.matrix)
            m[u.x, u.y] = u.value
            m[u.y, u.x] = u.value
