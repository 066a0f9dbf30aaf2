"""Fixtures for testing the streaming_ga package."""

from __future__ import annotations

import numpy as np
import pytest

from streaming_ga.problem.tsp import MultiobjectiveTSP
from tests.helpers import RecordingEngine, ToyProblem


@pytest.fixture
def rng() -> np.random.Generator:
    """Create a seeded random generator."""
    return np.random.default_rng(42)


@pytest.fixture
def toy_problem() -> ToyProblem:
    """Create a toy dynamic problem."""
    return ToyProblem()


@pytest.fixture
def engine() -> RecordingEngine:
    """Create a recording engine."""
    return RecordingEngine()


@pytest.fixture
def tsp(rng: np.random.Generator) -> MultiobjectiveTSP:
    """Create a small random TSP instance."""
    return MultiobjectiveTSP.random(6, rng)
