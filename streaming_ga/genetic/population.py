"""Population data module."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .solution import Solution

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Population:
    """Ordered collection of solutions with a target size."""

    size: int
    solutions: list[Solution] = field(default_factory=list)

    def __len__(self) -> int:
        """Return the number of solutions in the population."""
        return len(self.solutions)

    def __iter__(self) -> Iterator[Solution]:
        """Iterate over the solutions in order."""
        return iter(self.solutions)

    def __getitem__(self, idx: int) -> Solution:
        """Return the solution at a given position."""
        return self.solutions[idx]

    def extend(self, solutions: Iterable[Solution]) -> None:
        """Append several solutions to the population."""
        self.solutions.extend(solutions)

    def without(self, indices: Iterable[int]) -> Population:
        """Return a new population without the given positions, keeping the order of the rest."""
        drop = set(indices)
        kept = [s for i, s in enumerate(self.solutions) if i not in drop]
        return Population(size=self.size, solutions=kept)

    def objectives(self) -> np.ndarray:
        """Return the objective vectors as a (n, m) array."""
        if not self.solutions:
            return np.empty((0, 0), dtype=float)
        if any(s.objectives is None for s in self.solutions):
            msg = "Population contains unevaluated solutions."
            raise ValueError(msg)
        return np.vstack([s.objectives for s in self.solutions]).astype(float)

    def variables(self) -> np.ndarray:
        """Return the decision variables as a (n, d) array."""
        if not self.solutions:
            return np.empty((0, 0))
        return np.vstack([s.variables for s in self.solutions])
