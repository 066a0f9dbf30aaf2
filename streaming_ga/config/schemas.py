"""Pydantic models for application configuration."""

import logging

import numpy as np
from pydantic import BaseModel, Field, model_validator

from .constants import (
    RANDOM_SEED_RANGE,
    CreationOp,
    ProblemKind,
    RemovalOp,
    SourceKind,
    SourceTarget,
)

logger = logging.getLogger(__name__)


class AlgorithmModel(BaseModel):
    """Parameters of the dynamic algorithm and its engine."""

    population_size: int = Field(default=100, ge=2)
    max_iterations: int = Field(default=25_000, ge=2)
    crossover_probability: float = Field(default=0.9, ge=0.0, le=1.0)
    mutation_probability: float | None = Field(default=None, ge=0.0, le=1.0)
    distribution_index: float = Field(default=20.0, gt=0.0)
    reference_point: list[float] | None = None
    rng_seed: int | str | None = None

    @model_validator(mode="after")
    def validate(self) -> "AlgorithmModel":
        """Validate that a window holds at least one generation."""
        if self.max_iterations < self.population_size:
            msg = f"max_iterations ({self.max_iterations}) must be >= population_size ({self.population_size})."
            raise ValueError(msg)
        return self

    def __str__(self) -> str:
        """Representation of algorithm parameters."""
        return (
            f"\n\tAlgorithmModel:"
            f"\n\t  population_size       : {self.population_size}"
            f"\n\t  max_iterations        : {self.max_iterations}"
            f"\n\t  crossover_probability : {self.crossover_probability:.2f}"
            f"\n\t  mutation_probability  : {self.mutation_probability}"
            f"\n\t  distribution_index    : {self.distribution_index}"
            f"\n\t  reference_point       : {self.reference_point}"
            f"\n\t  rng_seed              : {self.rng_seed}"
        )

    def get_rng_seed(self) -> int:
        """Return the RNG seed as an integer."""
        if isinstance(self.rng_seed, int):
            return self.rng_seed

        self.rng_seed = int(
            np.random.default_rng().integers(*RANDOM_SEED_RANGE)
            if self.rng_seed is None
            else abs(hash(self.rng_seed)) % (RANDOM_SEED_RANGE[1] + 1)
        )
        return self.rng_seed


class RestartModel(BaseModel):
    """Configuration of one restart strategy."""

    removal: RemovalOp = RemovalOp.RANDOM
    count: int = Field(default=50, ge=0)
    creation: CreationOp = CreationOp.RANDOM


class RestartConfig(BaseModel):
    """Restart strategies for the two kinds of change episodes."""

    problem_change: RestartModel = Field(default_factory=RestartModel)
    parameter_change: RestartModel | None = None


class ProblemModel(BaseModel):
    """Configuration of the dynamic problem."""

    kind: ProblemKind = ProblemKind.TSP
    n_cities: int = Field(default=100, ge=2)
    n_variables: int = Field(default=31, ge=3)
    tau_t: int = Field(default=5, ge=1)
    n_t: int = Field(default=10, ge=1)


class SourceModel(BaseModel):
    """Configuration of one streaming source."""

    kind: SourceKind
    target: SourceTarget = SourceTarget.PROBLEM
    interval: float = Field(default=1.0, ge=0.0)
    updates_per_tick: int = Field(default=1, ge=1)
    directory: str = ""
    max_ticks: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def validate(self) -> "SourceModel":
        """Validate source options that depend on the kind."""
        if self.kind == SourceKind.UPDATE_FILES and not self.directory:
            msg = "An update_files source needs a directory."
            raise ValueError(msg)
        if self.kind == SourceKind.KEYBOARD and self.target != SourceTarget.ALGORITHM:
            msg = "A keyboard source feeds reference points and must target the algorithm."
            raise ValueError(msg)
        if self.kind == SourceKind.COUNTER and self.target != SourceTarget.PROBLEM:
            msg = "A counter source advances the FDA2 time step and must target the problem."
            raise ValueError(msg)
        return self


class ExportModel(BaseModel):
    """Configuration for export options."""

    output_dir: str = Field(default="output", min_length=1)
    write_files: bool = True
    log_snapshots: bool = True


class RuntimeModel(BaseModel):
    """Configuration for runtime flags."""

    max_snapshots: int | None = Field(default=None, ge=1)
    source_join_timeout: float = Field(default=1.0, ge=0.0)


class LoggingModel(BaseModel):
    """Configuration for logging."""

    log_file: str = Field(default="streaming_ga.log", min_length=1)
    loglevel_file: str = "DEBUG"
    loglevel_console: str = "INFO"

    @model_validator(mode="after")
    def validate(self) -> "LoggingModel":
        """Validate log level names."""
        for level in (self.loglevel_file, self.loglevel_console):
            if not isinstance(logging.getLevelName(level.upper()), int):
                msg = f"Invalid log level: {level}"
                raise ValueError(msg)
        self.loglevel_file = self.loglevel_file.upper()
        self.loglevel_console = self.loglevel_console.upper()
        return self


class AppConfigModel(BaseModel):
    """Root model for the entire application configuration from JSON."""

    algorithm: AlgorithmModel = Field(default_factory=AlgorithmModel)
    restart: RestartConfig = Field(default_factory=RestartConfig)
    problem: ProblemModel = Field(default_factory=ProblemModel)
    sources: list[SourceModel] = Field(default_factory=list)
    exports: ExportModel = Field(default_factory=ExportModel)
    runtime: RuntimeModel = Field(default_factory=RuntimeModel)
    logging: LoggingModel = Field(default_factory=LoggingModel)

    @model_validator(mode="after")
    def validate(self) -> "AppConfigModel":
        """Validate that restart counts fit the population."""
        n_pop = self.algorithm.population_size
        strategies = {
            "problem_change": self.restart.problem_change,
            "parameter_change": self.restart.parameter_change,
        }
        for name, model in strategies.items():
            if model is not None and model.count > n_pop:
                logger.warning("%s restart count %d exceeds population size %d.", name, model.count, n_pop)
        return self
