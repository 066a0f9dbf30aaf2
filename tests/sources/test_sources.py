"""Tests for the streaming sources."""

from __future__ import annotations

import io
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np
import pytest

from streaming_ga.config.constants import TSPMatrix
from streaming_ga.consumers.consumers import SnapshotRecorder
from streaming_ga.errors import SourceExhaustedError
from streaming_ga.problem.tsp import MultiobjectiveTSP, TSPMatrixData
from streaming_ga.sources.base import StreamingSource
from streaming_ga.sources.simple import CounterSource, IterableSource, KeyboardSource, parse_reference_point
from streaming_ga.sources.tsp import TSPTrafficSource, UpdateFileSource, parse_update_lines
from tests.helpers import ToyProblem


@dataclass(slots=True)
class FlakySource(StreamingSource):
    """Fails on the listed ticks, publishes the tick number otherwise, stops after ``ticks``."""

    interval: float = 0.0
    fail_on: tuple[int, ...] = ()
    ticks: int = 3
    _tick: int = field(default=0, init=False)

    def next_value(self) -> Any:
        """Return the tick number or raise."""
        tick = self._tick
        self._tick += 1
        if tick >= self.ticks:
            msg = "done"
            raise SourceExhaustedError(msg)
        if tick in self.fail_on:
            msg = f"transient failure on tick {tick}"
            raise OSError(msg)
        return tick


def _recorded(source: StreamingSource) -> list[Any]:
    recorder = SnapshotRecorder()
    source.get_observable().register(recorder)
    source.run()
    return [p.value for p in recorder.snapshots]


def test_publish_stamps_increasing_sequence() -> None:
    """Payloads carry the source name and a sequence starting at zero."""
    source = IterableSource(interval=0.0, values=["a", "b", "c"])
    recorder = SnapshotRecorder()
    source.get_observable().register(recorder)

    source.run()

    assert [p.value for p in recorder.snapshots] == ["a", "b", "c"]
    assert [p.sequence for p in recorder.snapshots] == [0, 1, 2]
    assert {p.source for p in recorder.snapshots} == {"IterableSource"}
    assert source.exhausted


def test_transient_failure_continues() -> None:
    """A failed tick is counted and the source keeps producing."""
    source = FlakySource(fail_on=(1,), ticks=4)

    values = _recorded(source)

    assert values == [0, 2, 3]
    assert source.failures == 1
    assert source.exhausted


def test_started_source_stops_on_request() -> None:
    """A running source thread ends after stop."""
    source = CounterSource(interval=0.01)
    recorder = SnapshotRecorder()
    source.get_observable().register(recorder)

    source.start()
    deadline = time.time() + 2.0
    while len(recorder) < 3 and time.time() < deadline:
        time.sleep(0.01)
    source.stop(timeout=2.0)

    assert not source.is_alive()
    values = [p.value for p in recorder.snapshots]
    assert values[:3] == [0, 1, 2]


def test_counter_drives_problem(toy_problem: ToyProblem) -> None:
    """Each published counter value is applied to a subscribed problem."""
    source = IterableSource(interval=0.0, values=[1, 2, 3])
    source.get_observable().register(toy_problem)

    source.run()

    assert toy_problem.updates_applied == 3
    assert toy_problem.shift == 3.0
    assert toy_problem.consume_change()


def test_keyboard_source_parses_lines() -> None:
    """Blank lines are skipped, bad lines are transient and EOF exhausts the source."""
    source = KeyboardSource(stream=io.StringIO("1, 2\n\nnot numbers\n3 4\n"))

    values = _recorded(source)

    assert values == [[1.0, 2.0], [3.0, 4.0]]
    assert source.failures == 1
    assert source.exhausted


def test_parse_reference_point_rejects_empty() -> None:
    """An empty line is not a reference point."""
    assert parse_reference_point("0.5;0.25") == [0.5, 0.25]
    with pytest.raises(ValueError, match="empty"):
        parse_reference_point("   ")


def test_traffic_source_updates_tsp(tsp: MultiobjectiveTSP) -> None:
    """Random traffic updates are valid edge updates for the instance."""
    source = TSPTrafficSource(
        interval=0.0,
        n_cities=tsp.n_cities,
        rng=np.random.default_rng(7),
        updates_per_tick=2,
        max_ticks=3,
    )
    source.get_observable().register(tsp)

    source.run()

    assert source.published == 3
    assert tsp.updates_applied == 3
    assert tsp.updates_rejected == 0
    np.testing.assert_array_equal(tsp.cost, tsp.cost.T)


def test_parse_update_lines() -> None:
    """Update files list one edge per line with comments allowed."""
    updates = parse_update_lines(["# header", "c 0 1 5.5", "", "d 2 3 7"])
    assert updates == (
        TSPMatrixData(matrix=TSPMatrix.COST, x=0, y=1, value=5.5),
        TSPMatrixData(matrix=TSPMatrix.DISTANCE, x=2, y=3, value=7.0),
    )
    with pytest.raises(ValueError, match="Line 1"):
        parse_update_lines(["x 0 1 2"])


def test_update_file_source_reads_files_in_order(tmp_path: Path) -> None:
    """Each file is published once, sorted by name."""
    (tmp_path / "002.txt").write_text("d 0 1 9\n", encoding="utf-8")
    (tmp_path / "001.txt").write_text("c 0 1 3\nc 1 2 4\n", encoding="utf-8")
    source = UpdateFileSource(directory=tmp_path)

    first = source.next_value()
    second = source.next_value()

    assert [u.matrix for u in first] == [TSPMatrix.COST, TSPMatrix.COST]
    assert second == (TSPMatrixData(matrix=TSPMatrix.DISTANCE, x=0, y=1, value=9.0),)
    assert source.next_value() is None


def test_update_file_source_missing_directory(tmp_path: Path) -> None:
    """A missing directory is a transient I/O failure."""
    source = UpdateFileSource(directory=tmp_path / "missing")
    with pytest.raises(FileNotFoundError):
        source.next_value()


def test_update_file_source_exhausts_after_max_files(tmp_path: Path) -> None:
    """max_files ends the source once that many files were read."""
    (tmp_path / "a.txt").write_text("c 0 1 3\n", encoding="utf-8")
    source = UpdateFileSource(interval=0.0, directory=tmp_path, max_files=1)

    values = _recorded(source)

    assert len(values) == 1
    assert source.exhausted
