"""Timestamped payloads pushed by streaming sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True, frozen=True)
class TimestampedPayload:
    """An opaque value stamped with its producer's sequence number and wall-clock time."""

    value: Any
    sequence: int
    timestamp: float
    source: str = ""
