"""Wiring of streaming sources, problem, dynamic algorithm and data consumers."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from .config.constants import ProblemKind, SourceKind, SourceTarget
from .consumers.consumers import LocalDirectoryOutputConsumer, LoggingConsumer
from .genetic.dynamic_ga import DynamicGA
from .genetic.evolution import NSGA2Engine
from .operators.selection import BinaryTournament
from .operators.variation import build_variation
from .problem.fda import FDA2
from .problem.tsp import MultiobjectiveTSP
from .restart.strategy import build_restart_strategy
from .sources.simple import CounterSource, KeyboardSource
from .sources.tsp import TSPTrafficSource, UpdateFileSource

if TYPE_CHECKING:
    from .config.app_config import AppConfig
    from .config.schemas import SourceModel
    from .consumers.consumers import DataConsumer
    from .observer.bus import Subscriber
    from .observer.payload import TimestampedPayload
    from .problem.base import DynamicProblem
    from .sources.base import StreamingSource

logger = getLogger(__name__)


@dataclass(slots=True)
class StreamingApplication:
    """Runs a dynamic algorithm on a dedicated thread while sources feed it."""

    algorithm: DynamicGA
    sources: list[tuple[StreamingSource, Subscriber[TimestampedPayload]]] = field(default_factory=list)
    consumers: list[DataConsumer] = field(default_factory=list)
    source_join_timeout: float = 1.0
    _thread: threading.Thread | None = field(default=None, init=False, repr=False)
    _error: BaseException | None = field(default=None, init=False, repr=False)

    @property
    def problem(self) -> DynamicProblem:
        """Return the problem solved by the algorithm."""
        return self.algorithm.problem

    def add_streaming_source(self, source: StreamingSource, subscriber: Subscriber[TimestampedPayload]) -> None:
        """Connect a source to the problem or to the algorithm."""
        self.sources.append((source, subscriber))

    def add_data_consumer(self, consumer: DataConsumer) -> None:
        """Add a consumer of the algorithm's snapshots."""
        self.consumers.append(consumer)

    def _connect(self) -> None:
        for source, subscriber in self.sources:
            source.get_observable().register(subscriber)
        for consumer in self.consumers:
            self.algorithm.get_observable().register(consumer)

    def _start_sources(self) -> None:
        for source, _ in self.sources:
            source.start()

    def stop_sources(self) -> None:
        """Stop every source, waiting briefly for each thread."""
        for source, _ in self.sources:
            source.stop(self.source_join_timeout)

    def run(self) -> None:
        """Start the sources and run the algorithm on the calling thread until it terminates."""
        self._connect()
        self._start_sources()
        logger.info(
            "Running %s on %s with %d sources and %d consumers.",
            self.algorithm.name,
            self.problem.name,
            len(self.sources),
            len(self.consumers),
        )
        try:
            self.algorithm.run()
        finally:
            self.stop_sources()

    def start(self) -> None:
        """Run the application on a dedicated thread."""
        self._thread = threading.Thread(target=self._run_captured, name="dynamic-ga", daemon=True)
        self._thread.start()

    def _run_captured(self) -> None:
        try:
            self.run()
        except BaseException as e:
            self._error = e

    def is_running(self) -> bool:
        """Return True while a run started with ``start`` is in progress."""
        return self._thread is not None and self._thread.is_alive()

    def request_stop(self) -> None:
        """Ask the algorithm to stop at its next cycle boundary."""
        self.algorithm.request_stop()

    def join(self, timeout: float | None = None) -> None:
        """Wait for a run started with ``start`` and re-raise its fatal error, if any."""
        if self._thread is not None:
            self._thread.join(timeout)
        if self._error is not None:
            raise self._error


@dataclass(slots=True)
class ApplicationFactory(ABC):
    """Interface for application factories."""

    @abstractmethod
    def build(self, app_config: AppConfig) -> StreamingApplication:
        """Build and return an application."""


@dataclass(slots=True)
class StandardApplicationFactory(ApplicationFactory):
    """Build the problem, engine, algorithm, sources and consumers from the configuration."""

    def build(self, app_config: AppConfig) -> StreamingApplication:
        """Build and return an application."""
        rng = app_config.rng
        problem = self.build_problem(app_config, rng)
        params = app_config.algorithm

        crossover, mutation = build_variation(
            encoding=problem.encoding,
            rng=rng,
            crossover_probability=params.crossover_probability,
            mutation_probability=params.mutation_probability,
            distribution_index=params.distribution_index,
        )
        engine = NSGA2Engine(crossover=crossover, mutation=mutation, selection=BinaryTournament(rng=rng))
        if params.reference_point is not None:
            engine.update_parameters(params.reference_point)

        parameter_model = app_config.restart.parameter_change
        algorithm = DynamicGA(
            problem=problem,
            engine=engine,
            rng=rng,
            population_size=params.population_size,
            max_iterations=params.max_iterations,
            restart_strategy=build_restart_strategy(app_config.restart.problem_change, rng),
            parameter_restart_strategy=(
                None if parameter_model is None else build_restart_strategy(parameter_model, rng)
            ),
            max_snapshots=app_config.runtime.max_snapshots,
        )

        app = StreamingApplication(algorithm=algorithm, source_join_timeout=app_config.runtime.source_join_timeout)
        for source_model in app_config.sources:
            source = self.build_source(source_model, problem, rng)
            subscriber = algorithm if source_model.target == SourceTarget.ALGORITHM else problem
            app.add_streaming_source(source, subscriber)

        exports = app_config.exports
        if exports.log_snapshots:
            app.add_data_consumer(LoggingConsumer())
        if exports.write_files:
            app.add_data_consumer(LocalDirectoryOutputConsumer(output_dir=Path(exports.output_dir)))
        return app

    @staticmethod
    def build_problem(app_config: AppConfig, rng: np.random.Generator) -> DynamicProblem:
        """Build the configured problem."""
        model = app_config.problem
        if model.kind == ProblemKind.TSP:
            return MultiobjectiveTSP.random(model.n_cities, rng)
        if model.kind == ProblemKind.FDA2:
            return FDA2(variables=model.n_variables, tau_t=model.tau_t, n_t=model.n_t)
        msg = f"Unknown problem kind in config: {model.kind}"
        raise ValueError(msg)

    @staticmethod
    def build_source(model: SourceModel, problem: DynamicProblem, rng: np.random.Generator) -> StreamingSource:
        """Build one configured streaming source."""
        if model.kind == SourceKind.COUNTER:
            if not isinstance(problem, FDA2):
                msg = f"Source {model.kind} needs an FDA2 problem, got {problem.name}."
                raise ValueError(msg)
            return CounterSource(interval=model.interval)
        if model.kind == SourceKind.KEYBOARD:
            return KeyboardSource(interval=model.interval)
        if not isinstance(problem, MultiobjectiveTSP):
            msg = f"Source {model.kind} needs a TSP problem, got {problem.name}."
            raise ValueError(msg)
        if model.kind == SourceKind.TSP_TRAFFIC:
            return TSPTrafficSource(
                interval=model.interval,
                n_cities=problem.n_cities,
                rng=np.random.default_rng(rng.integers(2**32)),
                updates_per_tick=model.updates_per_tick,
                max_ticks=model.max_ticks,
            )
        if model.kind == SourceKind.UPDATE_FILES:
            return UpdateFileSource(interval=model.interval, directory=Path(model.directory))
        msg = f"Unknown source kind in config: {model.kind}"
        raise ValueError(msg)
