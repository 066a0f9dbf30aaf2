"""Removal policies used by restart strategies.

Every policy removes ``min(count, len(population))`` individuals and keeps
the relative order of the survivors. When a metric ties, the individual
with the lowest index is removed first.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

import numpy as np

from ..config.constants import RemovalOp
from ..operators.hypervolume import HypervolumeContribution
from ..operators.nsga2 import NSGA2

if TYPE_CHECKING:
    from ..genetic.population import Population

logger = getLogger(__name__)


@dataclass(slots=True)
class RemovalPolicy(ABC):
    """Abstract base class for removal policies."""

    def remove(self, population: Population, count: int) -> Population:
        """Return a new population without ``min(count, len(population))`` individuals."""
        k = min(max(count, 0), len(population))
        if k == 0:
            return population.without(())
        indices = self.choose(population, k)
        logger.debug("%s removing %d of %d individuals.", self, k, len(population))
        return population.without(indices)

    @abstractmethod
    def choose(self, population: Population, k: int) -> list[int]:
        """Return the positions of the k individuals to remove."""


@dataclass(slots=True)
class RemoveFirstN(RemovalPolicy):
    """Remove the first k individuals by insertion order."""

    def __str__(self) -> str:
        """Return a string representation of the removal policy."""
        return RemovalOp.FIRST

    def choose(self, population: Population, k: int) -> list[int]:
        """Pick positions 0..k-1."""
        return list(range(k))


@dataclass(slots=True)
class RemoveNRandom(RemovalPolicy):
    """Remove k individuals chosen uniformly at random."""

    rng: np.random.Generator

    def __str__(self) -> str:
        """Return a string representation of the removal policy."""
        return RemovalOp.RANDOM

    def choose(self, population: Population, k: int) -> list[int]:
        """Pick k distinct positions uniformly at random."""
        return sorted(int(i) for i in self.rng.choice(len(population), size=k, replace=False))


@dataclass(slots=True)
class MetricRemoval(RemovalPolicy):
    """Iteratively remove the individual with the lowest metric, recomputing it after each removal."""

    def choose(self, population: Population, k: int) -> list[int]:
        """Remove one by one, lowest metric first, lowest index on ties."""
        fits = population.objectives()
        alive = np.arange(len(population))
        removed: list[int] = []
        for _ in range(k):
            metric = self.metric(fits[alive])
            worst = int(np.argmin(metric))
            removed.append(int(alive[worst]))
            alive = np.delete(alive, worst)
        return removed

    @abstractmethod
    def metric(self, fits: np.ndarray) -> np.ndarray:
        """Return the metric of every row, lower means removed first."""


@dataclass(slots=True)
class RemoveNByHypervolumeContribution(MetricRemoval):
    """Remove the individuals whose exclusion least reduces the hypervolume."""

    def __str__(self) -> str:
        """Return a string representation of the removal policy."""
        return RemovalOp.HYPERVOLUME

    def metric(self, fits: np.ndarray) -> np.ndarray:
        """Return the exclusive hypervolume contribution of each row."""
        return HypervolumeContribution().contributions(fits)


@dataclass(slots=True)
class RemoveNByCrowdingDistance(MetricRemoval):
    """Remove the most crowded individuals of the population."""

    def __str__(self) -> str:
        """Return a string representation of the removal policy."""
        return RemovalOp.CROWDING

    def metric(self, fits: np.ndarray) -> np.ndarray:
        """Return the crowding distance of each row over the whole population."""
        return NSGA2.crowding_distance(fits)
