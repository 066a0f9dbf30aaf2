"""Streaming sources producing TSP matrix updates."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from pathlib import Path

import numpy as np

from ..config.constants import TSPMatrix
from ..errors import SourceExhaustedError
from ..problem.tsp import TSPMatrixData
from .base import StreamingSource

logger = getLogger(__name__)

UPDATE_CODES = {"c": TSPMatrix.COST, "d": TSPMatrix.DISTANCE}


@dataclass(slots=True)
class TSPTrafficSource(StreamingSource):
    """Simulate traffic by publishing random edge updates for a TSP instance."""

    n_cities: int = 2
    rng: np.random.Generator = field(default_factory=np.random.default_rng)
    updates_per_tick: int = 1
    low: float = 1.0
    high: float = 100.0
    max_ticks: int | None = None
    _ticks: int = field(default=0, init=False, repr=False)

    def next_value(self) -> tuple[TSPMatrixData, ...]:
        """Return a batch of random cost or distance updates."""
        if self.max_ticks is not None and self._ticks >= self.max_ticks:
            msg = f"reached {self.max_ticks} ticks"
            raise SourceExhaustedError(msg)
        self._ticks += 1

        batch = []
        for _ in range(self.updates_per_tick):
            x, y = self.rng.choice(self.n_cities, size=2, replace=False)
            matrix = TSPMatrix.COST if self.rng.random() < 0.5 else TSPMatrix.DISTANCE
            value = float(self.rng.uniform(self.low, self.high))
            batch.append(TSPMatrixData(matrix=matrix, x=int(x), y=int(y), value=value))
        return tuple(batch)


def parse_update_lines(lines: list[str]) -> tuple[TSPMatrixData, ...]:
    """Parse ``c|d x y value`` lines into edge updates.

    Raises:
        ValueError: If a line is not of that form.

    """
    updates = []
    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        fields = line.split()
        if len(fields) != 4 or fields[0] not in UPDATE_CODES:
            msg = f"Line {lineno}: expected 'c|d x y value', got {line!r}."
            raise ValueError(msg)
        code, x, y, value = fields
        updates.append(TSPMatrixData(matrix=UPDATE_CODES[code], x=int(x), y=int(y), value=float(value)))
    return tuple(updates)


@dataclass(slots=True)
class UpdateFileSource(StreamingSource):
    """Poll a directory and publish the updates of every new file, oldest name first."""

    directory: Path = field(default_factory=Path)
    pattern: str = "*.txt"
    max_files: int | None = None
    _seen: set[str] = field(default_factory=set, init=False, repr=False)

    def next_value(self) -> tuple[TSPMatrixData, ...] | None:
        """Return the updates of the next unseen file, or None if there is none."""
        if self.max_files is not None and len(self._seen) >= self.max_files:
            msg = f"processed {self.max_files} files"
            raise SourceExhaustedError(msg)
        if not self.directory.is_dir():
            msg = f"Update directory {self.directory} does not exist."
            raise FileNotFoundError(msg)

        pending = sorted(p for p in self.directory.glob(self.pattern) if p.name not in self._seen)
        if not pending:
            return None

        path = pending[0]
        self._seen.add(path.name)
        updates = parse_update_lines(path.read_text(encoding="utf-8").splitlines())
        logger.debug("%s read %d updates from %s.", self.name, len(updates), path.name)
        return updates or None
