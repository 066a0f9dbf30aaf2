"""Hypervolume contribution of the members of a minimization front."""

from __future__ import annotations

from dataclasses import dataclass

import moocore
import numpy as np

from ..config.constants import HV_REFERENCE_OFFSET


def normalize(fits: np.ndarray) -> np.ndarray:
    """Scale every objective to [0, 1] over the given rows."""
    lo = fits.min(axis=0)
    span = fits.max(axis=0) - lo
    span[span == 0] = 1.0
    return (fits - lo) / span


@dataclass(slots=True)
class HypervolumeContribution:
    """Exclusive hypervolume contribution of each row of an objective matrix.

    Objectives are normalized to [0, 1] and measured against a reference point
    at ``1 + offset`` on every axis. Dominated and duplicated rows contribute 0.
    """

    offset: float = HV_REFERENCE_OFFSET

    def contributions(self, fits: np.ndarray) -> np.ndarray:
        """Return the contribution of every row."""
        n, m = fits.shape
        if n == 0:
            return np.zeros(0)
        points = normalize(np.asarray(fits, dtype=float))
        ref = np.full(m, 1.0 + self.offset)
        return np.asarray(moocore.hv_contributions(points, ref=ref), dtype=float)
