"""Tests for observer.bus and observer.observed_data."""

from __future__ import annotations

from dataclasses import FrozenInstanceError, dataclass, field
from typing import Any

import numpy as np
import pytest

from streaming_ga.errors import SubscriberDeliveryError
from streaming_ga.genetic.population import Population
from streaming_ga.genetic.solution import Solution
from streaming_ga.observer.bus import NotificationBus, Subscriber
from streaming_ga.observer.observed_data import ObservedData


@dataclass(slots=True)
class Collector(Subscriber[Any]):
    """Subscriber that stores what it receives in a shared log."""

    tag: str
    log: list[tuple[str, Any]] = field(default_factory=list)

    def receive(self, payload: Any) -> None:
        """Record the payload."""
        self.log.append((self.tag, payload))


@dataclass(slots=True)
class Failing(Subscriber[Any]):
    """Subscriber that always raises."""

    def receive(self, payload: Any) -> None:
        """Raise on every payload."""
        msg = f"cannot handle {payload}"
        raise RuntimeError(msg)


def test_register_is_idempotent() -> None:
    """Registering the same subscriber twice delivers once."""
    bus = NotificationBus[int]()
    sub = Collector("a")
    bus.register(sub)
    bus.register(sub)

    bus.notify(1)

    assert len(bus) == 1
    assert sub.log == [("a", 1)]


def test_delivery_in_registration_order() -> None:
    """Subscribers are called in the order they registered."""
    log: list[tuple[str, Any]] = []
    bus = NotificationBus[str]()
    for tag in ("first", "second", "third"):
        bus.register(Collector(tag, log))

    bus.mark_changed()
    bus.notify("x")

    assert [tag for tag, _ in log] == ["first", "second", "third"]


def test_failing_subscriber_does_not_stop_delivery() -> None:
    """A raising subscriber is reported and the others still receive the payload."""
    log: list[tuple[str, Any]] = []
    bus = NotificationBus[int]()
    first, failing, third = Collector("first", log), Failing(), Collector("third", log)
    for sub in (first, failing, third):
        bus.register(sub)

    bus.mark_changed()
    errors = bus.notify(7)

    assert log == [("first", 7), ("third", 7)]
    assert len(errors) == 1
    assert isinstance(errors[0], SubscriberDeliveryError)
    assert errors[0].subscriber is failing
    assert isinstance(errors[0].cause, RuntimeError)
    assert not bus.has_changed()


def test_deregister_and_contains() -> None:
    """A deregistered subscriber no longer receives payloads."""
    bus = NotificationBus[int]()
    sub = Collector("a")
    bus.register(sub)
    assert sub in bus

    bus.deregister(sub)
    bus.notify(1)

    assert sub not in bus
    assert sub.log == []


def test_changed_flag_lifecycle() -> None:
    """The changed flag is set by mark_changed and cleared by notify."""
    bus = NotificationBus[int]()
    assert not bus.has_changed()
    bus.mark_changed()
    assert bus.has_changed()
    bus.notify(0)
    assert not bus.has_changed()


def test_each_payload_delivered_once() -> None:
    """N notifications reach a subscriber exactly N times, in order."""
    bus = NotificationBus[int]()
    sub = Collector("a")
    bus.register(sub)

    for i in range(5):
        bus.mark_changed()
        bus.notify(i)

    assert [p for _, p in sub.log] == [0, 1, 2, 3, 4]


def test_observed_data_is_a_deep_read_only_copy() -> None:
    """Changing the live population after capture does not change the snapshot."""
    live = Population(
        size=2,
        solutions=[
            Solution(variables=np.array([1.0, 2.0]), objectives=np.array([0.5, 0.5])),
            Solution(variables=np.array([3.0, 4.0]), objectives=np.array([0.1, 0.9])),
        ],
    )
    snapshot = ObservedData.capture(
        population=live,
        iterations=250,
        algorithm_name="Algo",
        problem_name="Problem",
        n_objectives=2,
        cycles=500,
    )

    live.solutions[0].variables[0] = 99.0
    live.solutions[0].objectives[0] = 99.0

    assert snapshot.variables()[0, 0] == 1.0
    assert snapshot.objectives()[0, 0] == 0.5
    with pytest.raises(ValueError, match="read-only"):
        snapshot.population[0].variables[0] = 5.0
    with pytest.raises(FrozenInstanceError):
        snapshot.population[0].rank = 3
    with pytest.raises(FrozenInstanceError):
        snapshot.population[0].objectives = np.zeros(2)
    assert snapshot.as_dict() == {
        "numberOfIterations": 250,
        "algorithmName": "Algo",
        "problemName": "Problem",
        "numberOfObjectives": 2,
        "cycles": 500,
    }
