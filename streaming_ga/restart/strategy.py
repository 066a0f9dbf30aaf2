"""Restart strategies: size-preserving repair of a population."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from ..config.constants import CreationOp, RemovalOp
from ..errors import RestartPolicyError
from .creation import CreateFromArchive, CreateNRandom
from .removal import RemoveFirstN, RemoveNByCrowdingDistance, RemoveNByHypervolumeContribution, RemoveNRandom

if TYPE_CHECKING:
    import numpy as np

    from ..config.schemas import RestartModel
    from ..genetic.population import Population
    from ..genetic.solution import Solution
    from ..problem.base import DynamicProblem
    from .creation import CreationPolicy
    from .removal import RemovalPolicy

logger = getLogger(__name__)


@dataclass(slots=True)
class RestartStrategy:
    """Remove up to ``count`` individuals, then create as many as were removed."""

    removal: RemovalPolicy
    creation: CreationPolicy
    count: int

    def __str__(self) -> str:
        """Return a string representation of the restart strategy."""
        return f"RestartStrategy({self.removal!s}, {self.creation!s}, {self.count})"

    def restart(self, population: Population, problem: DynamicProblem, rng: np.random.Generator) -> Population:
        """Return a repaired population of exactly the pre-restart size.

        Raises:
            RestartPolicyError: If the population is empty, a policy fails, or
                the repaired population does not have the pre-restart size.

        """
        before = len(population)
        if before == 0:
            msg = "Cannot restart an empty population."
            raise RestartPolicyError(msg, component=str(self))

        try:
            survivors = self.removal.remove(population, self.count)
            created = self.creation.create(problem, before - len(survivors), rng)
        except RestartPolicyError:
            raise
        except Exception as e:
            msg = f"{self!s} failed: {e}"
            raise RestartPolicyError(msg, component=str(self)) from e

        survivors.extend(created)
        if len(survivors) != before:
            msg = f"{self!s} produced {len(survivors)} individuals instead of {before}."
            raise RestartPolicyError(msg, component=str(self))

        logger.debug("%s replaced %d of %d individuals.", self, len(created), before)
        return survivors


def build_restart_strategy(
    model: RestartModel,
    rng: np.random.Generator,
    archive: list[Solution] | None = None,
) -> RestartStrategy:
    """Build a restart strategy from its configuration."""
    removal_factory = {
        RemovalOp.FIRST: RemoveFirstN,
        RemovalOp.RANDOM: lambda: RemoveNRandom(rng=rng),
        RemovalOp.HYPERVOLUME: RemoveNByHypervolumeContribution,
        RemovalOp.CROWDING: RemoveNByCrowdingDistance,
    }
    creation_factory = {
        CreationOp.RANDOM: CreateNRandom,
        CreationOp.ARCHIVE: lambda: CreateFromArchive(archive=list(archive or ())),
    }
    if model.removal not in removal_factory:
        msg = f"Unknown removal policy in config: {model.removal}"
        raise ValueError(msg)
    if model.creation not in creation_factory:
        msg = f"Unknown creation policy in config: {model.creation}"
        raise ValueError(msg)

    return RestartStrategy(
        removal=removal_factory[model.removal](),
        creation=creation_factory[model.creation](),
        count=model.count,
    )
