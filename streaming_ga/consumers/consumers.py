"""Data consumers receiving snapshots from the dynamic GA."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from ..observer.bus import Subscriber

if TYPE_CHECKING:
    from rich.progress import Progress, TaskID

    from ..observer.observed_data import ObservedData

logger = getLogger(__name__)


class DataConsumer(Subscriber["ObservedData"]):
    """Abstract base class for consumers of observed data snapshots."""


@dataclass(slots=True)
class LoggingConsumer(DataConsumer):
    """Consumer that logs a one-line summary of each snapshot."""

    def receive(self, payload: ObservedData) -> None:
        """Log the front size and the best value of every objective."""
        fits = payload.objectives()
        best = ", ".join(f"{v:.3f}" for v in fits.min(axis=0)) if fits.size else "N/A"
        logger.info(
            "%s on %s | iterations %d | population %d | best %s",
            payload.algorithm_name,
            payload.problem_name,
            payload.iterations,
            len(payload),
            best,
        )


@dataclass(slots=True)
class SnapshotRecorder(DataConsumer):
    """Consumer that keeps every snapshot it receives, in order."""

    snapshots: list[ObservedData] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __len__(self) -> int:
        """Return the number of snapshots received."""
        with self._lock:
            return len(self.snapshots)

    def receive(self, payload: ObservedData) -> None:
        """Store the snapshot."""
        with self._lock:
            self.snapshots.append(payload)


@dataclass(slots=True)
class LocalDirectoryOutputConsumer(DataConsumer):
    """Write the objectives and variables of each snapshot to a directory.

    Snapshot ``n`` produces ``FUN{n}.csv``, ``VAR{n}.csv`` and ``META{n}.json``.
    """

    output_dir: Path
    counter: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        """Create the output directory."""
        self.output_dir = Path(self.output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def receive(self, payload: ObservedData) -> None:
        """Write the snapshot files."""
        n = self.counter
        np.savetxt(self.output_dir / f"FUN{n}.csv", payload.objectives(), delimiter=",", fmt="%.6f")
        np.savetxt(self.output_dir / f"VAR{n}.csv", payload.variables(), delimiter=",", fmt="%s")
        with (self.output_dir / f"META{n}.json").open("w", encoding="utf-8") as f:
            json.dump(payload.as_dict(), f, indent=2)
        self.counter += 1
        logger.debug("Wrote snapshot %d to %s.", n, self.output_dir)


@dataclass(slots=True)
class RichConsumer(DataConsumer):
    """Connects snapshots to a Rich Progress Task."""

    progress: Progress
    task_id: TaskID
    max_snapshots: int | None = None

    def receive(self, payload: ObservedData) -> None:
        """Update the progress task with the latest snapshot."""
        fits = payload.objectives()
        if fits.size:
            fit_str = ", ".join(f"{v:.3f}" for v in fits.min(axis=0))
        else:
            fit_str = "N/A"
        self.progress.update(
            self.task_id,
            total=self.max_snapshots,
            completed=payload.extra.get("snapshot", 0) + 1,
            description=(
                f"[cyan]{payload.algorithm_name}[/cyan] | "
                f"[magenta]cycle {payload.extra.get('cycles', payload.iterations)}[/magenta] | "
                f"[green]best: {fit_str}[/green]"
            ),
        )
