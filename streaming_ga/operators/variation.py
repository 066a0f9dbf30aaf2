"""Crossover and mutation operators for real and permutation encodings."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

import numpy as np

from ..config.constants import Encoding
from ..genetic.solution import Solution

if TYPE_CHECKING:
    from ..problem.base import DynamicProblem

logger = getLogger(__name__)


@dataclass(slots=True)
class Crossover(ABC):
    """Abstract base class for crossover operators."""

    rng: np.random.Generator
    probability: float = 0.9

    def cross(self, p1: Solution, p2: Solution, problem: DynamicProblem) -> tuple[Solution, Solution]:
        """Produce two children, or clones of the parents if the roll fails."""
        if self.rng.random() >= self.probability:
            return p1.clone(), p2.clone()
        c1, c2 = self._cross(p1.variables, p2.variables, problem)
        origin = f"(C | {self!s})"
        return Solution(variables=c1, origin=origin), Solution(variables=c2, origin=origin)

    @abstractmethod
    def _cross(self, x1: np.ndarray, x2: np.ndarray, problem: DynamicProblem) -> tuple[np.ndarray, np.ndarray]:
        """Recombine two variable vectors."""


@dataclass(slots=True)
class Mutation(ABC):
    """Abstract base class for mutation operators."""

    rng: np.random.Generator
    probability: float | None = None

    def mutate(self, solution: Solution, problem: DynamicProblem) -> Solution:
        """Mutate a solution in place and return it."""
        p = self.probability if self.probability is not None else 1.0 / problem.n_variables
        self._mutate(solution.variables, p, problem)
        solution.objectives = None
        return solution

    @abstractmethod
    def _mutate(self, x: np.ndarray, probability: float, problem: DynamicProblem) -> None:
        """Mutate a variable vector in place."""


@dataclass(slots=True)
class SBXCrossover(Crossover):
    """Simulated binary crossover."""

    eta: float = 20.0

    def __str__(self) -> str:
        """Return a string representation of the crossover operator."""
        return "SBX"

    def _cross(self, x1: np.ndarray, x2: np.ndarray, problem: DynamicProblem) -> tuple[np.ndarray, np.ndarray]:
        """Recombine per variable with probability 0.5."""
        lo, hi = problem.lower_bounds, problem.upper_bounds
        u = self.rng.random(x1.shape[0])
        beta = np.where(
            u <= 0.5,
            (2.0 * u) ** (1.0 / (self.eta + 1.0)),
            (1.0 / (2.0 * (1.0 - u))) ** (1.0 / (self.eta + 1.0)),
        )
        b1 = 0.5 * ((1 + beta) * x1 + (1 - beta) * x2)
        b2 = 0.5 * ((1 - beta) * x1 + (1 + beta) * x2)
        swap = self.rng.random(x1.shape[0]) < 0.5
        keep = self.rng.random(x1.shape[0]) >= 0.5
        c1 = np.where(keep, x1, np.where(swap, b2, b1))
        c2 = np.where(keep, x2, np.where(swap, b1, b2))
        return np.clip(c1, lo, hi), np.clip(c2, lo, hi)


@dataclass(slots=True)
class PolynomialMutation(Mutation):
    """Polynomial mutation bounded by the problem limits."""

    eta: float = 20.0

    def __str__(self) -> str:
        """Return a string representation of the mutation operator."""
        return "Polynomial"

    def _mutate(self, x: np.ndarray, probability: float, problem: DynamicProblem) -> None:
        """Perturb each variable with the given probability."""
        lo, hi = problem.lower_bounds, problem.upper_bounds
        mask = self.rng.random(x.shape[0]) < probability
        if not mask.any():
            return
        span = np.where(hi - lo == 0, 1.0, hi - lo)
        d1 = (x - lo) / span
        d2 = (hi - x) / span
        u = self.rng.random(x.shape[0])
        power = 1.0 / (self.eta + 1.0)
        left = 2.0 * u + (1.0 - 2.0 * u) * (1.0 - d1) ** (self.eta + 1.0)
        right = 2.0 * (1.0 - u) + 2.0 * (u - 0.5) * (1.0 - d2) ** (self.eta + 1.0)
        delta = np.where(u <= 0.5, left**power - 1.0, 1.0 - right**power)
        x[mask] = np.clip(x[mask] + delta[mask] * span[mask], lo[mask], hi[mask])


@dataclass(slots=True)
class PMXCrossover(Crossover):
    """Partially mapped crossover for permutations."""

    def __str__(self) -> str:
        """Return a string representation of the crossover operator."""
        return "PMX"

    def _cross(self, x1: np.ndarray, x2: np.ndarray, problem: DynamicProblem) -> tuple[np.ndarray, np.ndarray]:
        """Swap a random segment and repair the rest through the segment mapping."""
        n = x1.shape[0]
        a, b = np.sort(self.rng.choice(n, size=2, replace=False))
        b += 1
        return self._child(x1, x2, a, b), self._child(x2, x1, a, b)

    @staticmethod
    def _child(donor: np.ndarray, other: np.ndarray, a: int, b: int) -> np.ndarray:
        child = np.full_like(other, -1)
        child[a:b] = donor[a:b]
        pos_in_other = np.empty_like(other)
        pos_in_other[other] = np.arange(other.shape[0])
        segment = set(donor[a:b].tolist())
        for i in range(a, b):
            gene = other[i]
            if gene in segment:
                continue
            j = i
            while a <= j < b:
                j = pos_in_other[donor[j]]
            child[j] = gene
        empty = child == -1
        child[empty] = other[empty]
        return child


@dataclass(slots=True)
class SwapMutation(Mutation):
    """Swap two random positions of a permutation."""

    def __str__(self) -> str:
        """Return a string representation of the mutation operator."""
        return "Swap"

    def _mutate(self, x: np.ndarray, probability: float, problem: DynamicProblem) -> None:
        """Swap two positions with the given probability."""
        if self.rng.random() >= probability:
            return
        i, j = self.rng.choice(x.shape[0], size=2, replace=False)
        x[i], x[j] = x[j], x[i]


def build_variation(
    encoding: Encoding,
    rng: np.random.Generator,
    crossover_probability: float,
    mutation_probability: float | None,
    distribution_index: float,
) -> tuple[Crossover, Mutation]:
    """Build the crossover and mutation pair for an encoding."""
    if encoding == Encoding.REAL:
        return (
            SBXCrossover(rng=rng, probability=crossover_probability, eta=distribution_index),
            PolynomialMutation(rng=rng, probability=mutation_probability, eta=distribution_index),
        )
    if encoding == Encoding.PERMUTATION:
        return (
            PMXCrossover(rng=rng, probability=crossover_probability),
            SwapMutation(rng=rng, probability=mutation_probability),
        )
    msg = f"Unknown encoding: {encoding}"
    raise ValueError(msg)
