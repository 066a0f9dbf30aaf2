"""Generic streaming sources: counters, iterables and keyboard input."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, TextIO

from ..errors import SourceExhaustedError
from .base import StreamingSource

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

logger = getLogger(__name__)

NUMBER_SEPARATORS = re.compile(r"[,\s;]+")


@dataclass(slots=True)
class CounterSource(StreamingSource):
    """Publish an increasing integer every ``interval`` seconds."""

    start_value: int = 0
    _counter: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        """Start counting at ``start_value``."""
        StreamingSource.__post_init__(self)
        self._counter = self.start_value

    def next_value(self) -> int:
        """Return the current counter and increment it."""
        value = self._counter
        self._counter += 1
        return value


@dataclass(slots=True)
class IterableSource(StreamingSource):
    """Publish the values of a finite iterable, one per tick."""

    values: Iterable[Any] = ()
    _iterator: Iterator[Any] | None = field(default=None, init=False, repr=False)

    def next_value(self) -> Any:
        """Return the next value of the iterable."""
        if self._iterator is None:
            self._iterator = iter(self.values)
        try:
            return next(self._iterator)
        except StopIteration:
            msg = "no more values"
            raise SourceExhaustedError(msg) from None


def parse_reference_point(line: str) -> list[float]:
    """Parse a line of comma, semicolon or space separated numbers."""
    tokens = [t for t in NUMBER_SEPARATORS.split(line.strip()) if t]
    if not tokens:
        msg = "empty reference point"
        raise ValueError(msg)
    return [float(t) for t in tokens]


@dataclass(slots=True)
class KeyboardSource(StreamingSource):
    """Read reference points, one per line, from a text stream.

    Blank lines are skipped and unparsable lines are transient failures. End of
    input is not retried: a closed stream keeps returning EOF, so it exhausts
    the source instead.
    """

    interval: float = 0.0
    stream: TextIO = field(default_factory=lambda: sys.stdin)
    prompt: str = ""

    def next_value(self) -> list[float]:
        """Block until a non-blank line arrives and parse it."""
        while True:
            if self.prompt:
                print(self.prompt, end="", flush=True)
            line = self.stream.readline()
            if not line:
                msg = "end of input"
                raise SourceExhaustedError(msg)
            if line.strip():
                return parse_reference_point(line)
