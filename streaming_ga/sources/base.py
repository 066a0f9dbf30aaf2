"""Self-clocked producers that push timestamped payloads into a notification bus."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from logging import getLogger
from time import time
from typing import Any

from ..errors import SourceExhaustedError
from ..observer.bus import NotificationBus
from ..observer.payload import TimestampedPayload

logger = getLogger(__name__)


@dataclass(slots=True)
class StreamingSource(ABC):
    """A producer running on its own thread and schedule.

    Each tick the source obtains a value and publishes it on its bus. An
    ``OSError`` or ``ValueError`` while obtaining a value is logged and the
    source waits for the next tick. ``SourceExhaustedError`` ends the source.
    A ``None`` value means there is nothing to publish this tick.
    """

    interval: float = 1.0
    name: str = ""
    observable: NotificationBus[TimestampedPayload] = field(default=None)
    published: int = field(default=0, init=False)
    failures: int = field(default=0, init=False)
    exhausted: bool = field(default=False, init=False)
    _stop: threading.Event = field(default_factory=threading.Event, init=False, repr=False)
    _thread: threading.Thread | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        """Name the source and give it a bus if none was provided."""
        if not self.name:
            self.name = type(self).__name__
        if self.observable is None:
            self.observable = NotificationBus(name=f"{self.name}-observable")

    def get_observable(self) -> NotificationBus[TimestampedPayload]:
        """Return the bus payloads are published on."""
        return self.observable

    @abstractmethod
    def next_value(self) -> Any:
        """Return the next value, or None if there is nothing to publish this tick."""

    def start(self) -> None:
        """Start producing on a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 1.0) -> None:
        """Ask the source to stop and wait for its thread."""
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def is_alive(self) -> bool:
        """Return True if the source thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def run(self) -> None:
        """Produce values until stopped or exhausted."""
        logger.info("%s started.", self.name)
        while not self._stop.is_set():
            try:
                value = self.next_value()
            except SourceExhaustedError as e:
                self.exhausted = True
                logger.info("%s exhausted: %s", self.name, e)
                break
            except (OSError, ValueError) as e:
                self.failures += 1
                logger.warning("%s failed to produce a value: %s", self.name, e)
            else:
                if value is not None:
                    self.publish(value)
            self._stop.wait(self.interval)
        logger.info("%s stopped after %d payloads.", self.name, self.published)

    def publish(self, value: Any) -> TimestampedPayload:
        """Stamp a value and deliver it to the subscribers of the bus."""
        payload = TimestampedPayload(value=value, sequence=self.published, timestamp=time(), source=self.name)
        self.published += 1
        self.observable.mark_changed()
        self.observable.notify(payload)
        return payload
