"""Creation policies used by restart strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from ..config.constants import CreationOp
from ..errors import RestartPolicyError

if TYPE_CHECKING:
    import numpy as np

    from ..genetic.solution import Solution
    from ..problem.base import DynamicProblem

logger = getLogger(__name__)


@dataclass(slots=True)
class CreationPolicy(ABC):
    """Abstract base class for creation policies."""

    @abstractmethod
    def create(self, problem: DynamicProblem, count: int, rng: np.random.Generator) -> list[Solution]:
        """Return ``count`` new, unevaluated solutions for the problem."""


@dataclass(slots=True)
class CreateNRandom(CreationPolicy):
    """Create random feasible solutions for the (possibly updated) problem."""

    def __str__(self) -> str:
        """Return a string representation of the creation policy."""
        return CreationOp.RANDOM

    def create(self, problem: DynamicProblem, count: int, rng: np.random.Generator) -> list[Solution]:
        """Delegate to the problem's random solution factory."""
        return [problem.create_solution(rng) for _ in range(count)]


@dataclass(slots=True)
class CreateFromArchive(CreationPolicy):
    """Seed new individuals by cycling through copies of a fixed archive."""

    archive: list[Solution] = field(default_factory=list)
    _next: int = field(default=0, init=False, repr=False)

    def __str__(self) -> str:
        """Return a string representation of the creation policy."""
        return CreationOp.ARCHIVE

    def create(self, problem: DynamicProblem, count: int, rng: np.random.Generator) -> list[Solution]:
        """Return copies of archived solutions, continuing where the last call stopped."""
        if count == 0:
            return []
        if not self.archive:
            msg = "Cannot create solutions from an empty archive."
            raise RestartPolicyError(msg, component=str(self))

        created = []
        for _ in range(count):
            solution = self.archive[self._next % len(self.archive)].clone()
            solution.objectives = None
            solution.origin = "archive"
            created.append(solution)
            self._next += 1
        return created
