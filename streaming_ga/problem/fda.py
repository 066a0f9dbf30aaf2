"""FDA2 dynamic multi-objective benchmark driven by a time counter."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import Any, ClassVar

import numpy as np

from ..config.constants import Encoding
from ..errors import MalformedUpdateError
from ..genetic.solution import Solution
from .base import DynamicProblem

logger = getLogger(__name__)


@dataclass(slots=True)
class FDA2(DynamicProblem):
    """FDA2 (Farina, Deb and Amato, 2004).

    The first variable lies in [0, 1]; the remaining ones in [-1, 1] and are
    split evenly into the xII and xIII groups. The shape of the Pareto front
    changes with ``time = floor(tau / tau_t) / n_t`` where ``tau`` is the
    counter received from a streaming source.
    """

    name: ClassVar[str] = "FDA2"
    encoding: ClassVar[Encoding] = Encoding.REAL

    variables: int = 31
    tau_t: int = 5
    n_t: int = 10
    tau: int = 0
    time: float = field(default=0.0, init=False)
    lower_bounds: np.ndarray = field(init=False, repr=False)
    upper_bounds: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Set the variable bounds and the initial time."""
        if self.variables < 3:
            msg = "FDA2 needs at least 3 variables."
            raise ValueError(msg)
        self.lower_bounds = np.full(self.variables, -1.0)
        self.lower_bounds[0] = 0.0
        self.upper_bounds = np.ones(self.variables)
        self.time = self.time_for(self.tau)

    @property
    def n_variables(self) -> int:
        """Return the number of decision variables."""
        return self.variables

    @property
    def n_objectives(self) -> int:
        """Return the number of objectives."""
        return 2

    def time_for(self, tau: int) -> float:
        """Return the problem time for a counter value."""
        return (1.0 / self.n_t) * np.floor(tau / self.tau_t)

    def create_solution(self, rng: np.random.Generator) -> Solution:
        """Create a solution uniformly inside the bounds."""
        x = rng.uniform(self.lower_bounds, self.upper_bounds)
        return Solution(variables=x, origin="random")

    def evaluate(self, solution: Solution) -> None:
        """Compute f1 = x1 and f2 = g * h."""
        x = solution.variables
        split = 1 + (self.variables - 1) // 2
        x_ii = x[1:split]
        x_iii = x[split:]

        f1 = x[0]
        g = 1.0 + np.sum(x_ii**2)
        big_h = 0.75 + 0.7 * np.sin(0.5 * np.pi * self.time)
        exponent = 1.0 / (big_h + np.sum((x_iii - big_h) ** 2))
        h = 1.0 - (f1 / g) ** exponent
        solution.objectives = np.array([f1, g * h], dtype=float)

    def validate_update(self, value: Any) -> None:
        """Accept only non-negative integer counters."""
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            msg = f"FDA2 expects an integer counter, got {value!r}."
            raise MalformedUpdateError(msg)
        if value < 0:
            msg = f"FDA2 counter must be non-negative, got {value}."
            raise MalformedUpdateError(msg)

    def update(self, value: Any) -> None:
        """Move the problem to the time given by the counter."""
        self.tau = int(value)
        self.time = self.time_for(self.tau)
        logger.debug("FDA2 time set to %.3f (tau=%d).", self.time, self.tau)
