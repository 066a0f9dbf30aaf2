"""Selection operators for the evolution engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np


@dataclass(slots=True)
class Selection(ABC):
    """Abstract base class for selection operators."""

    rng: np.random.Generator

    @abstractmethod
    def select(self, ranks: np.ndarray, crowding: np.ndarray, k: int = 2) -> np.ndarray:
        """Select parents from the population.

        Args:
            ranks (np.ndarray): Front index of every individual (lower is better).
            crowding (np.ndarray): Crowding distance of every individual (higher is better).
            k (int): The number to select.

        Returns:
            np.ndarray: The indices of the selected individuals.

        """


@dataclass(slots=True)
class BinaryTournament(Selection):
    """Binary tournament on (rank, crowding distance)."""

    def __str__(self) -> str:
        """Return a string representation of the selection operator."""
        return "BinaryTournament"

    def select(self, ranks: np.ndarray, crowding: np.ndarray, k: int = 2) -> np.ndarray:
        """Run k independent tournaments between two random individuals."""
        n = ranks.shape[0]
        a = self.rng.integers(0, n, size=k)
        b = self.rng.integers(0, n, size=k)
        a_wins = (ranks[a] < ranks[b]) | ((ranks[a] == ranks[b]) & (crowding[a] >= crowding[b]))
        return np.where(a_wins, a, b)
