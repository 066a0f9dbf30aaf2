"""Module to hold constants for the streaming GA."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

MAIN_PACKAGE_DIR = Path(__file__).resolve().parent.parent
CONFIG_FILE_DEFAULT = MAIN_PACKAGE_DIR / "config" / "config.json"
RANDOM_SEED_RANGE = (1, 2**32 - 1)
HV_REFERENCE_OFFSET = 0.1


class RunState(StrEnum):
    """States of the dynamic algorithm control loop."""

    INITIALIZING = "initializing"
    EVOLVING = "evolving"
    CHANGE_DETECTED = "change_detected"
    RESTARTING = "restarting"
    EMITTING = "emitting"
    STOPPING_REQUESTED = "stopping_requested"
    TERMINATED = "terminated"


class ChangeKind(StrEnum):
    """Kinds of change episodes the control loop distinguishes."""

    PROBLEM = "problem"
    PARAMETER = "parameter"


class RemovalOp(StrEnum):
    """Enum for removal policy keys."""

    FIRST = "RemoveFirstN"
    RANDOM = "RemoveNRandom"
    HYPERVOLUME = "RemoveNByHypervolumeContribution"
    CROWDING = "RemoveNByCrowdingDistance"


class CreationOp(StrEnum):
    """Enum for creation policy keys."""

    RANDOM = "CreateNRandom"
    ARCHIVE = "CreateFromArchive"


class ProblemKind(StrEnum):
    """Enum for the bundled dynamic problems."""

    TSP = "tsp"
    FDA2 = "fda2"


class Encoding(StrEnum):
    """Decision variable encodings understood by the default engine."""

    REAL = "real"
    PERMUTATION = "permutation"


class SourceKind(StrEnum):
    """Enum for streaming source keys."""

    COUNTER = "counter"
    TSP_TRAFFIC = "tsp_traffic"
    KEYBOARD = "keyboard"
    UPDATE_FILES = "update_files"


class SourceTarget(StrEnum):
    """Channel a streaming source feeds."""

    PROBLEM = "problem"
    ALGORITHM = "algorithm"


class TSPMatrix(StrEnum):
    """Matrices of the multi-objective TSP that updates can touch."""

    DISTANCE = "distance"
    COST = "cost"
