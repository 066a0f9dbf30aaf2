"""Module defining states for the dynamic GA using the State design pattern."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from ..config.constants import ChangeKind, RunState

if TYPE_CHECKING:
    from .dynamic_ga import DynamicGA


@dataclass(slots=True)
class GaState(ABC):
    """Abstract base class for GA states."""

    _context: DynamicGA
    kind: ClassVar[RunState]

    @abstractmethod
    def run(self) -> None:
        """Execute the logic for this state."""


@dataclass(slots=True)
class InitializingState(GaState):
    """State representing the initialization phase of the GA."""

    kind: ClassVar[RunState] = RunState.INITIALIZING

    def run(self) -> None:
        """Create and evaluate the initial population, then start evolving."""
        self._context.logger.info("GA is in Initializing state.")
        self._context.initialize_population()
        self._context.setstate(EvolvingState(self._context))


@dataclass(slots=True)
class EvolvingState(GaState):
    """State representing one generation cycle."""

    kind: ClassVar[RunState] = RunState.EVOLVING

    def run(self) -> None:
        """Advance one generation unless a stop was requested, then check for changes."""
        ctx = self._context
        if ctx.stop_requested:
            ctx.setstate(StoppingRequestedState(ctx))
            return
        ctx.run_generation()
        ctx.setstate(ctx.next_state())


@dataclass(slots=True)
class ChangeDetectedState(GaState):
    """State entered when the problem or a live parameter changed."""

    kind: ClassVar[RunState] = RunState.CHANGE_DETECTED

    change: ChangeKind
    value: Any = None

    def run(self) -> None:
        """Hand the change over to the restarting state."""
        self._context.logger.debug("GA detected a %s change at cycle %d.", self.change, self._context.cycles)
        self._context.setstate(RestartingState(self._context, self.change, self.value))


@dataclass(slots=True)
class RestartingState(GaState):
    """State repairing the population after a change."""

    kind: ClassVar[RunState] = RunState.RESTARTING

    change: ChangeKind
    value: Any = None

    def run(self) -> None:
        """Restart with the strategy matching the change, then return to evolving.

        Changes that arrive during the restart are picked up after the next cycle.
        """
        ctx = self._context
        ctx.restart_after_change(self.change, self.value)
        ctx.setstate(EvolvingState(ctx))


@dataclass(slots=True)
class EmittingState(GaState):
    """State reached when the iteration counter hits its maximum."""

    kind: ClassVar[RunState] = RunState.EMITTING

    def run(self) -> None:
        """Emit a snapshot, resample the population and reset the iteration counter."""
        ctx = self._context
        ctx.emit_snapshot()
        ctx.periodic_restart()
        ctx.setstate(EvolvingState(ctx))


@dataclass(slots=True)
class StoppingRequestedState(GaState):
    """State representing an accepted stop request."""

    kind: ClassVar[RunState] = RunState.STOPPING_REQUESTED

    def run(self) -> None:
        """Move to the terminated state without starting another cycle."""
        self._context.logger.info("GA stop requested after %d cycles.", self._context.cycles)
        self._context.setstate(TerminatedState(self._context))


@dataclass(slots=True)
class TerminatedState(GaState):
    """State representing the termination phase of the GA."""

    kind: ClassVar[RunState] = RunState.TERMINATED

    def run(self) -> None:
        """Finalize the GA and log the final summary."""
        self._context.logger.info("GA has terminated.")
        self._context.log_final_summary()
