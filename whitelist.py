"""Whitelist for vulture to avoid false positives."""

from pydantic import BaseModel

from streaming_ga.config.constants import RunState
from streaming_ga.observer.observed_data import SolutionRecord

RunState.CHANGE_DETECTED  # noqa: B018
RunState.RESTARTING  # noqa: B018
RunState.STOPPING_REQUESTED  # noqa: B018

SolutionRecord.rank  # noqa: B018
SolutionRecord.crowding  # noqa: B018
SolutionRecord.origin  # noqa: B018

BaseModel.validate  # noqa: B018  # ty:ignore[deprecated]
