"""Holder for live algorithm parameters pushed by streaming sources."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from logging import getLogger
from typing import Any

logger = getLogger(__name__)


@dataclass(slots=True)
class ParameterChannel:
    """Latest-value-wins mailbox with a pending marker.

    Written by producer threads through ``offer`` and drained by the control
    loop through ``consume``.
    """

    _value: Any = field(default=None, repr=False)
    _pending: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def offer(self, value: Any) -> None:
        """Store a new value and mark it pending, replacing any unconsumed one."""
        with self._lock:
            if self._pending:
                logger.debug("Replacing unconsumed parameter %r with %r.", self._value, value)
            self._value = value
            self._pending = True

    def has_pending(self) -> bool:
        """Return True if a value is waiting to be consumed."""
        with self._lock:
            return self._pending

    def peek(self) -> Any:
        """Return the latest value without consuming it."""
        with self._lock:
            return self._value

    def consume(self) -> tuple[bool, Any]:
        """Atomically clear the pending marker and return (was_pending, value)."""
        with self._lock:
            pending = self._pending
            self._pending = False
            return pending, self._value
