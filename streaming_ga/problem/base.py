"""Dynamic problems whose definition can be changed by streaming updates."""

from __future__ import annotations

import threading
from abc import abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, ClassVar

from ..errors import MalformedUpdateError
from ..observer.bus import Subscriber

if TYPE_CHECKING:
    from collections.abc import Iterator

    import numpy as np

    from ..config.constants import Encoding
    from ..genetic.solution import Solution
    from ..observer.payload import TimestampedPayload

logger = getLogger(__name__)


@dataclass(slots=True)
class DynamicProblem(Subscriber["TimestampedPayload"]):
    """A problem definition guarded by an edge-triggered ``modified`` flag.

    The flag is set only by a successful ``apply`` and cleared only by
    ``consume_change``. Several updates between two consumes collapse into a
    single pending change; the problem always reflects the latest update.
    """

    name: ClassVar[str] = "DynamicProblem"
    encoding: ClassVar[Encoding]

    updates_applied: int = field(default=0, init=False)
    updates_rejected: int = field(default=0, init=False)
    _modified: bool = field(default=False, init=False, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    @property
    @abstractmethod
    def n_variables(self) -> int:
        """Return the number of decision variables."""

    @property
    @abstractmethod
    def n_objectives(self) -> int:
        """Return the number of objectives."""

    @property
    def structural_identity(self) -> tuple[int, int]:
        """Return the shape used to validate updates: (n_variables, n_objectives)."""
        return (self.n_variables, self.n_objectives)

    @abstractmethod
    def create_solution(self, rng: np.random.Generator) -> Solution:
        """Create a random feasible, unevaluated solution."""

    @abstractmethod
    def evaluate(self, solution: Solution) -> None:
        """Compute and attach the objective vector of a solution (minimization)."""

    @abstractmethod
    def validate_update(self, value: Any) -> None:
        """Raise MalformedUpdateError if the value does not fit this problem."""

    @abstractmethod
    def update(self, value: Any) -> None:
        """Change the problem definition. Called only with validated values."""

    def apply(self, payload: TimestampedPayload) -> None:
        """Validate and apply a payload, then flag the problem as modified.

        Raises:
            MalformedUpdateError: If the payload does not match the problem. The
                problem is left exactly as it was.

        """
        with self._lock:
            try:
                self.validate_update(payload.value)
            except MalformedUpdateError:
                self.updates_rejected += 1
                raise
            self.update(payload.value)
            self.updates_applied += 1
            self._modified = True
        logger.debug("%s: applied update #%d from %s.", self.name, payload.sequence, payload.source or "source")

    def receive(self, payload: TimestampedPayload) -> None:
        """Apply a payload delivered by a bus, discarding it if malformed."""
        try:
            self.apply(payload)
        except MalformedUpdateError as e:
            logger.warning("%s: discarded update #%d: %s", self.name, payload.sequence, e)

    def has_changed(self) -> bool:
        """Return True if the problem changed since the last consume. Does not clear the flag."""
        with self._lock:
            return self._modified

    def consume_change(self) -> bool:
        """Atomically read and clear the modified flag, returning its prior value."""
        with self._lock:
            changed = self._modified
            self._modified = False
            return changed

    @contextmanager
    def frozen(self) -> Iterator[DynamicProblem]:
        """Hold the problem lock so no update is applied inside the block."""
        with self._lock:
            yield self
