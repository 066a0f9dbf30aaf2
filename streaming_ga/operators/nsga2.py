"""Tools for Non-dominated Sorting Genetic Algorithm II (NSGA-II).

All objectives are minimized.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(slots=True)
class NSGA2:
    """Non-dominated sorting and crowding distance on objective matrices."""

    @staticmethod
    def dominance_matrix(fits: np.ndarray) -> np.ndarray:
        """Return dom where dom[i, j] is True if i dominates j."""
        all_le = (fits[:, None, :] <= fits[None, :, :]).all(axis=2)
        any_lt = (fits[:, None, :] < fits[None, :, :]).any(axis=2)
        return np.logical_and(all_le, any_lt)

    @staticmethod
    def non_dominated_sort(fits: np.ndarray) -> list[np.ndarray]:
        """Split the rows of an objective matrix into Pareto fronts.

        Args:
            fits (np.ndarray): (n, m) objective matrix.

        Returns:
            list[np.ndarray]: Index arrays, best front first, each in ascending index order.

        """
        n = fits.shape[0]
        if n == 0:
            return []

        dom = NSGA2.dominance_matrix(fits)
        dom_count = dom.sum(axis=0)
        fronts: list[np.ndarray] = []
        current = np.flatnonzero(dom_count == 0)
        while current.size:
            fronts.append(current)
            dom_count = dom_count - dom[current].sum(axis=0)
            dom_count[current] = -1
            current = np.flatnonzero(dom_count == 0)
        return fronts

    @staticmethod
    def ranks(fits: np.ndarray) -> np.ndarray:
        """Return the front index of every row."""
        ranks = np.zeros(fits.shape[0], dtype=int)
        for rank, front in enumerate(NSGA2.non_dominated_sort(fits)):
            ranks[front] = rank
        return ranks

    @staticmethod
    def crowding_distance(fits: np.ndarray) -> np.ndarray:
        """Calculate the crowding distance for each row of a front."""
        n, m = fits.shape
        dist = np.zeros(n, dtype=float)
        if n <= 2:
            dist[:] = np.inf
            return dist

        for k in range(m):
            order = np.argsort(fits[:, k], kind="stable")
            col = fits[order, k]
            dist[order[0]] = np.inf
            dist[order[-1]] = np.inf
            span = col[-1] - col[0]
            if span == 0:
                span = 1e-16
            dist[order[1:-1]] += (col[2:] - col[:-2]) / span
        return dist
