"""Dynamic genetic algorithm control loop."""

from __future__ import annotations

import threading
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass, field
from logging import Logger, getLogger
from time import time
from typing import TYPE_CHECKING, Any

import numpy as np

from ..config.constants import ChangeKind, RunState
from ..errors import EvaluationError, FatalLoopError, MalformedUpdateError, RestartPolicyError
from ..observer.bus import NotificationBus, Subscriber
from ..observer.observed_data import ObservedData
from .parameters import ParameterChannel
from .population import Population
from .states import (
    ChangeDetectedState,
    EmittingState,
    EvolvingState,
    GaState,
    InitializingState,
    TerminatedState,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ..observer.payload import TimestampedPayload
    from ..problem.base import DynamicProblem
    from ..restart.strategy import RestartStrategy
    from .evolution import EvolutionEngine

logger = getLogger(__name__)


@dataclass(slots=True)
class DynamicGA(Subscriber["TimestampedPayload"]):
    """Drive an evolution engine on a problem that may change while it runs.

    The loop owns the population and its counters; nothing else touches them.
    Producers reach it only through the problem's modified flag and the
    live-parameter channel fed by ``receive``.
    """

    problem: DynamicProblem
    engine: EvolutionEngine
    rng: np.random.Generator
    population_size: int = 100
    max_iterations: int = 25_000
    restart_strategy: RestartStrategy | None = None
    parameter_restart_strategy: RestartStrategy | None = None
    max_snapshots: int | None = None
    observable: NotificationBus[ObservedData] = field(
        default_factory=lambda: NotificationBus(name="algorithm-observable")
    )
    parameters: ParameterChannel = field(default_factory=ParameterChannel)
    logger: Logger = field(default=logger, repr=False)

    population: Population = field(init=False, repr=False)
    iterations: int = field(default=0, init=False)
    cycles: int = field(default=0, init=False)
    completed_iterations: int = field(default=0, init=False)
    snapshots_emitted: int = field(default=0, init=False)
    restarts: Counter = field(default_factory=Counter, init=False)
    _state: GaState | None = field(default=None, init=False, repr=False)
    _stop: threading.Event = field(default_factory=threading.Event, init=False, repr=False)
    _start_time: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate the sizes and start with an empty population."""
        if self.population_size < 1:
            msg = f"Population size must be positive, got {self.population_size}."
            raise ValueError(msg)
        if self.max_iterations < self.population_size:
            msg = f"Max iterations ({self.max_iterations}) must be at least the population size."
            raise ValueError(msg)
        self.population = Population(size=self.population_size)

    @property
    def name(self) -> str:
        """Return the name of the wrapped engine."""
        return self.engine.name

    @property
    def state(self) -> RunState | None:
        """Return the current run state, or None before ``run`` is called."""
        return None if self._state is None else self._state.kind

    @property
    def stop_requested(self) -> bool:
        """Return True if a stop was requested."""
        return self._stop.is_set()

    def setstate(self, state: GaState) -> None:
        """Switch to a new state."""
        self._state = state

    def get_observable(self) -> NotificationBus[ObservedData]:
        """Return the bus snapshots are published on."""
        return self.observable

    def set_restart_strategy(self, strategy: RestartStrategy) -> None:
        """Set the strategy used on problem changes and on the periodic restart."""
        self.restart_strategy = strategy

    def set_restart_strategy_for_parameter_change(self, strategy: RestartStrategy) -> None:
        """Set the strategy used when a live parameter changes."""
        self.parameter_restart_strategy = strategy

    def request_stop(self) -> None:
        """Ask the loop to stop at the next cycle boundary. Safe from any thread."""
        self._stop.set()

    def receive(self, payload: TimestampedPayload) -> None:
        """Queue a live parameter (a reference point) delivered by a bus."""
        try:
            self.apply_parameter(payload)
        except MalformedUpdateError as e:
            logger.warning("%s: discarded parameter #%d: %s", self.name, payload.sequence, e)

    def apply_parameter(self, payload: TimestampedPayload) -> None:
        """Validate a reference point against the objective count and queue it.

        Raises:
            MalformedUpdateError: If the value is not a finite vector with one entry per objective.

        """
        try:
            point = np.asarray(payload.value, dtype=float)
        except (TypeError, ValueError) as e:
            msg = f"Reference point {payload.value!r} is not numeric."
            raise MalformedUpdateError(msg) from e
        if point.shape != (self.problem.n_objectives,) or not np.isfinite(point).all():
            msg = f"Reference point {payload.value!r} does not match {self.problem.n_objectives} objectives."
            raise MalformedUpdateError(msg)
        self.parameters.offer(point)

    def run(self) -> None:
        """Run the state machine until it terminates.

        Raises:
            EvaluationError: If the engine fails; the population can no longer be trusted.
            RestartPolicyError: If a restart fails or breaks the population size.

        """
        self._start_time = time()
        self.setstate(InitializingState(self))
        try:
            while True:
                state = self._state
                state.run()
                if state.kind is RunState.TERMINATED:
                    break
        except FatalLoopError as e:
            logger.critical(
                "%s failed after %d completed cycles in %s: %s",
                self.name,
                self.cycles,
                e.component or "unknown component",
                e,
            )
            raise

    def initialize_population(self) -> None:
        """Create and evaluate the initial population."""
        with self.problem.frozen():
            self.population = Population(
                size=self.population_size,
                solutions=[self.problem.create_solution(self.rng) for _ in range(self.population_size)],
            )
            with self._engine_failures("initial evaluation"):
                self.population = self.engine.evaluate(self.population, self.problem)
        self._check_size(self.engine.name)
        logger.debug("Initialized population with %d individuals.", len(self.population))

    def run_generation(self) -> None:
        """Advance the engine by one generation."""
        with self.problem.frozen(), self._engine_failures("generation"):
            self.population = self.engine.advance(self.population, self.problem)
        self._check_size(self.engine.name)
        self.iterations += self.population_size
        self.cycles += 1

    def next_state(self) -> GaState:
        """Return the state that follows a completed cycle."""
        if self.problem.consume_change():
            return ChangeDetectedState(self, ChangeKind.PROBLEM)
        pending, value = self.parameters.consume()
        if pending:
            return ChangeDetectedState(self, ChangeKind.PARAMETER, value)
        if self.iterations >= self.max_iterations:
            return EmittingState(self)
        return EvolvingState(self)

    def restart_after_change(self, change: ChangeKind, value: Any = None) -> None:
        """Restart with the strategy matching the kind of change."""
        strategy = self.restart_strategy
        if change is ChangeKind.PARAMETER:
            with self._engine_failures("parameter update"):
                self.engine.update_parameters(value)
            if self.parameter_restart_strategy is not None:
                strategy = self.parameter_restart_strategy
        logger.info("%s change at cycle %d: restarting with %s.", change, self.cycles, strategy)
        self.restart(strategy, reason=str(change))

    def periodic_restart(self) -> None:
        """Resample the population after an emission and start a new window."""
        self.restart(self.restart_strategy, reason="max_iterations")
        self.iterations = 0
        self.completed_iterations = self.cycles

    def restart(self, strategy: RestartStrategy | None, reason: str) -> None:
        """Repair the population with a restart strategy and re-evaluate it."""
        if strategy is None:
            msg = f"No restart strategy configured for a {reason} restart."
            raise RestartPolicyError(msg, component=self.name)
        with self.problem.frozen():
            self.population = strategy.restart(self.population, self.problem, self.rng)
            with self._engine_failures("re-evaluation"):
                self.population = self.engine.evaluate(self.population, self.problem)
        self._check_size(str(strategy))
        self.restarts[reason] += 1

    def emit_snapshot(self) -> ObservedData:
        """Publish a read-only copy of the population to the registered data consumers."""
        snapshot = ObservedData.capture(
            population=self.population,
            iterations=self.completed_iterations,
            algorithm_name=self.name,
            problem_name=self.problem.name,
            n_objectives=self.problem.n_objectives,
            cycles=self.cycles,
            evaluations=self.engine.evaluations,
            restarts=sum(self.restarts.values()),
            snapshot=self.snapshots_emitted,
        )
        self.observable.mark_changed()
        self.observable.notify(snapshot)
        self.snapshots_emitted += 1
        logger.debug("Emitted snapshot %d at cycle %d.", self.snapshots_emitted, self.cycles)

        if self.max_snapshots is not None and self.snapshots_emitted >= self.max_snapshots:
            logger.info("Reached %d snapshots, requesting stop.", self.max_snapshots)
            self.request_stop()
        return snapshot

    @contextmanager
    def _engine_failures(self, step: str) -> Iterator[None]:
        """Re-raise any unexpected engine failure as an EvaluationError."""
        try:
            yield
        except FatalLoopError:
            raise
        except Exception as e:
            msg = f"{self.engine.name} failed during {step}: {e!r}"
            raise EvaluationError(msg, component=self.engine.name) from e

    def _check_size(self, component: str) -> None:
        if len(self.population) != self.population_size:
            msg = f"Population has {len(self.population)} individuals instead of {self.population_size}."
            error = RestartPolicyError if component != self.engine.name else EvaluationError
            raise error(msg, component=component)

    def log_final_summary(self) -> None:
        """Log the counters of the run."""
        elapsed = time() - self._start_time if self._start_time else 0.0
        restarts = ", ".join(f"{k}={v}" for k, v in sorted(self.restarts.items())) or "none"
        logger.info(
            "%s on %s: %d cycles, %d snapshots, restarts: %s, %.2f seconds.",
            self.name,
            self.problem.name,
            self.cycles,
            self.snapshots_emitted,
            restarts,
            elapsed,
        )
