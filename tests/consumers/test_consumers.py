"""Tests for consumers.consumers."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import numpy as np

from streaming_ga.consumers.consumers import LocalDirectoryOutputConsumer, LoggingConsumer, SnapshotRecorder
from streaming_ga.genetic.population import Population
from streaming_ga.genetic.solution import Solution
from streaming_ga.observer.bus import NotificationBus
from streaming_ga.observer.observed_data import ObservedData

if TYPE_CHECKING:
    from pathlib import Path

    import pytest


def _snapshot(iterations: int = 0) -> ObservedData:
    population = Population(
        size=2,
        solutions=[
            Solution(variables=np.array([0, 1, 2]), objectives=np.array([3.0, 1.0])),
            Solution(variables=np.array([2, 1, 0]), objectives=np.array([1.0, 2.0])),
        ],
    )
    return ObservedData.capture(
        population=population,
        iterations=iterations,
        algorithm_name="DynamicNSGAII",
        problem_name="MultiobjectiveTSP",
        n_objectives=2,
        snapshot=0,
    )


def test_local_directory_output(tmp_path: Path) -> None:
    """Each snapshot writes numbered FUN, VAR and META files."""
    consumer = LocalDirectoryOutputConsumer(output_dir=tmp_path / "out")

    consumer.receive(_snapshot(0))
    consumer.receive(_snapshot(250))

    out = tmp_path / "out"
    assert sorted(p.name for p in out.iterdir()) == [
        "FUN0.csv",
        "FUN1.csv",
        "META0.json",
        "META1.json",
        "VAR0.csv",
        "VAR1.csv",
    ]
    np.testing.assert_allclose(np.loadtxt(out / "FUN1.csv", delimiter=","), [[3.0, 1.0], [1.0, 2.0]])
    meta = json.loads((out / "META1.json").read_text(encoding="utf-8"))
    assert meta["numberOfIterations"] == 250
    assert meta["algorithmName"] == "DynamicNSGAII"
    assert meta["numberOfObjectives"] == 2


def test_logging_consumer_reports_best(caplog: pytest.LogCaptureFixture) -> None:
    """The log line carries the best value of each objective."""
    caplog.set_level("INFO")
    LoggingConsumer().receive(_snapshot(500))
    assert "iterations 500" in caplog.text
    assert "best 1.000, 1.000" in caplog.text


def test_consumers_share_one_snapshot() -> None:
    """All consumers registered on a bus receive the same immutable snapshot."""
    bus = NotificationBus[ObservedData](name="algorithm-observable")
    first, second = SnapshotRecorder(), SnapshotRecorder()
    bus.register(first)
    bus.register(second)
    snapshot = _snapshot()

    bus.mark_changed()
    bus.notify(snapshot)

    assert first.snapshots[0] is second.snapshots[0] is snapshot
