"""Exceptions raised by the streaming GA coordination layer."""

from __future__ import annotations


class StreamingGaError(Exception):
    """Base class for all streaming GA errors."""


class MalformedUpdateError(StreamingGaError):
    """A payload does not match the shape of the problem it was sent to.

    The payload is discarded and the problem keeps its previous state.
    """


class SubscriberDeliveryError(StreamingGaError):
    """A subscriber raised while receiving a notification."""

    def __init__(self, subscriber: object, cause: BaseException) -> None:
        """Initialize with the failing subscriber and the original exception."""
        super().__init__(f"Delivery to {subscriber!r} failed: {cause!r}")
        self.subscriber = subscriber
        self.cause = cause


class FatalLoopError(StreamingGaError):
    """Base class for errors that terminate the control loop."""

    def __init__(self, message: str, component: str = "") -> None:
        """Initialize with a message and the name of the offending component."""
        super().__init__(message)
        self.component = component


class EvaluationError(FatalLoopError):
    """The evaluation engine failed; population validity can no longer be trusted."""


class RestartPolicyError(FatalLoopError):
    """A restart policy failed or broke the population size invariant."""


class SourceExhaustedError(StreamingGaError):
    """A streaming source has no more values to produce."""
