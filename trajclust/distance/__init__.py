"""Pairwise distance engines.

- SlopeDistanceEngine: shape evolution, invariant to vertical offset
- FrechetDistanceEngine: physical location via discrete Fréchet distance
"""

from trajclust.distance.frechet import FrechetDistanceEngine, discrete_frechet
from trajclust.distance.slope import (
    SLOPE_WEIGHTINGS,
    SlopeDistanceEngine,
    SlopeWeighting,
    slope_distance,
)

__all__ = [
    "SlopeDistanceEngine",
    "SlopeWeighting",
    "SLOPE_WEIGHTINGS",
    "slope_distance",
    "FrechetDistanceEngine",
    "discrete_frechet",
]
