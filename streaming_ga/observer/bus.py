"""Publish/subscribe notification bus.

A bus connects one producer to many subscribers. Delivery is a direct,
synchronous call into each subscriber on the producer's thread, in
registration order. A failing subscriber never stops delivery to the others.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from logging import getLogger
from typing import Generic, TypeVar

from ..errors import SubscriberDeliveryError

logger = getLogger(__name__)

T = TypeVar("T")


class Subscriber(ABC, Generic[T]):
    """Abstract base class for anything that can receive notifications."""

    @abstractmethod
    def receive(self, payload: T) -> None:
        """Handle a payload delivered by a notification bus."""


@dataclass(slots=True)
class NotificationBus(Generic[T]):
    """Ordered fan-out of payloads to registered subscribers."""

    name: str = "bus"
    _subscribers: list[Subscriber[T]] = field(default_factory=list, repr=False)
    _changed: bool = field(default=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __len__(self) -> int:
        """Return the number of registered subscribers."""
        with self._lock:
            return len(self._subscribers)

    def __contains__(self, subscriber: object) -> bool:
        """Return True if the subscriber is registered."""
        with self._lock:
            return any(s is subscriber for s in self._subscribers)

    @property
    def subscribers(self) -> tuple[Subscriber[T], ...]:
        """Return the registered subscribers in delivery order."""
        with self._lock:
            return tuple(self._subscribers)

    def register(self, subscriber: Subscriber[T]) -> None:
        """Add a subscriber. Registering the same subscriber twice is a no-op."""
        with self._lock:
            if any(s is subscriber for s in self._subscribers):
                logger.debug("%s: %r already registered.", self.name, subscriber)
                return
            self._subscribers.append(subscriber)
        logger.debug("%s: registered %r.", self.name, subscriber)

    def deregister(self, subscriber: Subscriber[T]) -> None:
        """Remove a subscriber if it is registered."""
        with self._lock:
            self._subscribers = [s for s in self._subscribers if s is not subscriber]
        logger.debug("%s: deregistered %r.", self.name, subscriber)

    def mark_changed(self) -> None:
        """Flag that a notification is pending."""
        with self._lock:
            self._changed = True

    def has_changed(self) -> bool:
        """Return True if a notification is pending."""
        with self._lock:
            return self._changed

    def notify(self, payload: T) -> tuple[SubscriberDeliveryError, ...]:
        """Deliver a payload to every registered subscriber, then clear the pending flag.

        Args:
            payload (T): The value handed to each subscriber's ``receive``.

        Returns:
            tuple[SubscriberDeliveryError, ...]: One error per subscriber that raised.

        """
        with self._lock:
            targets = tuple(self._subscribers)

        errors: list[SubscriberDeliveryError] = []
        for subscriber in targets:
            try:
                subscriber.receive(payload)
            except Exception as e:
                error = SubscriberDeliveryError(subscriber, e)
                logger.exception("%s: %s", self.name, error)
                errors.append(error)

        with self._lock:
            self._changed = False
        return tuple(errors)
