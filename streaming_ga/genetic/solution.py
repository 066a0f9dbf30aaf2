"""Candidate solution data module."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(slots=True)
class Solution:
    """A candidate solution with its decision variables and objective vector."""

    variables: np.ndarray
    objectives: np.ndarray | None = None
    rank: int = -1
    crowding: float = 0.0
    origin: str = ""

    def __len__(self) -> int:
        """Return the number of decision variables."""
        return self.variables.shape[0]

    @property
    def is_evaluated(self) -> bool:
        """Return True if the solution has an objective vector."""
        return self.objectives is not None

    def clone(self) -> Solution:
        """Return a deep copy of the solution."""
        return Solution(
            variables=self.variables.copy(),
            objectives=None if self.objectives is None else self.objectives.copy(),
            rank=self.rank,
            crowding=self.crowding,
            origin=self.origin,
        )
