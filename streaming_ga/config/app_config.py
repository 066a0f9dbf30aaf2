"""Configuration for the streaming GA application."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from .constants import CONFIG_FILE_DEFAULT
from .schemas import (
    AlgorithmModel,
    AppConfigModel,
    ExportModel,
    LoggingModel,
    ProblemModel,
    RestartConfig,
    RuntimeModel,
    SourceModel,
)

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AppConfig:
    """Configuration for the streaming GA application."""

    algorithm: AlgorithmModel
    restart: RestartConfig
    problem: ProblemModel
    sources: tuple[SourceModel, ...]
    exports: ExportModel
    runtime: RuntimeModel
    logging: LoggingModel
    rng: np.random.Generator

    @classmethod
    def build(cls, path: Path | None = None) -> AppConfig:
        """Create and return the application configuration."""
        if path is None:
            path = CONFIG_FILE_DEFAULT.resolve()

        if not path.exists():
            msg = f"Configuration file does not exist at: {path}"
            raise FileNotFoundError(msg)

        config_data = path.read_text(encoding="utf-8")
        config_model = AppConfigModel.model_validate_json(config_data)
        return cls.build_from_model(config_model)

    @classmethod
    def build_from_model(cls, model: AppConfigModel) -> AppConfig:
        """Create and return the application configuration from a Pydantic model."""
        seed = model.algorithm.get_rng_seed()
        return cls(
            algorithm=model.algorithm,
            restart=model.restart,
            problem=model.problem,
            sources=tuple(model.sources),
            exports=model.exports,
            runtime=model.runtime,
            logging=model.logging,
            rng=np.random.default_rng(seed),
        )

    def log_creation_info(self) -> None:
        """Log the configuration the run was built from."""
        logger.debug("Loaded configuration:%s", self.algorithm)
        logger.debug("Problem: %s", self.problem)
        logger.debug("Restart on problem change: %s", self.restart.problem_change)
        logger.debug("Restart on parameter change: %s", self.restart.parameter_change)
        for source in self.sources:
            logger.debug("Source: %s", source)
