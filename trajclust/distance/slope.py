"""Slope distance: similarity of shape evolution.

Each trajectory is reduced to its vector of segment slopes
``(value[k+1] - value[k]) / (time[k+1] - time[k])``. Two trajectories are
compared by the Euclidean norm of the difference of their slope vectors, so
vertical offsets cancel out entirely: parallel trajectories have distance 0.

Weighting conventions:
- "none": every segment counts equally.
- "duration": squared slope differences are weighted by segment duration
  relative to the mean duration. On a uniform time grid both conventions agree.
"""

import logging
from typing import Literal

import numpy as np
from numpy.typing import NDArray
from scipy.spatial.distance import cdist

from trajclust.errors import ConfigError
from trajclust.models.schemas import DistanceMatrix, TrajectoryDataset
from trajclust.utils.parallel import batch_slices, parallel_map

logger = logging.getLogger(__name__)

SlopeWeighting = Literal["none", "duration"]

SLOPE_WEIGHTINGS: tuple[str, ...] = ("none", "duration")


class SlopeDistanceEngine:
    """Pairwise slope distance between all trajectories of a dataset.

    Example:
        >>> dataset = TrajectoryDataset.from_arrays(
        ...     [[10, 15, 17, 25], [-19, -14, -12, -4]], [1, 2, 3, 4]
        ... )
        >>> SlopeDistanceEngine().compute(dataset)[0, 1]
        0.0
    """

    metric = "slope"

    def __init__(
        self,
        weighting: SlopeWeighting = "none",
        max_workers: int = 1,
        batch_size: int = 512,
    ) -> None:
        """Initialize the engine.

        Args:
            weighting: Segment weighting convention ("none" or "duration").
            max_workers: Threads used for row blocks of the matrix.
            batch_size: Rows per block.
        """
        if weighting not in SLOPE_WEIGHTINGS:
            raise ConfigError(
                f"Unknown slope weighting {weighting!r}, expected one of {SLOPE_WEIGHTINGS}"
            )
        if max_workers < 1:
            raise ConfigError(f"max_workers must be >= 1, got {max_workers}")
        self.weighting = weighting
        self.max_workers = max_workers
        self.batch_size = batch_size

    def slopes(self, dataset: TrajectoryDataset) -> NDArray[np.float64]:
        """Return the (n, m-1) matrix of segment slopes.

        Raises:
            DataError: If the time vector is not strictly increasing.
        """
        dataset.require_increasing_times()
        return np.diff(dataset.values, axis=1) / np.diff(dataset.times)

    def segment_weights(self, dataset: TrajectoryDataset) -> NDArray[np.float64]:
        """Return the per-segment weights for the configured convention."""
        durations = np.diff(dataset.times)
        if self.weighting == "duration":
            return durations / durations.mean()
        return np.ones_like(durations)

    def compute(self, dataset: TrajectoryDataset) -> DistanceMatrix:
        """Compute the n×n slope distance matrix.

        Args:
            dataset: Trajectories to compare.

        Returns:
            DistanceMatrix with metric "slope".

        Raises:
            DataError: If the time vector is not strictly increasing.
        """
        slopes = self.slopes(dataset)
        # Weighted Euclidean distance == plain Euclidean on sqrt-weighted slopes
        scaled = slopes * np.sqrt(self.segment_weights(dataset))
        n = dataset.n_trajectories

        logger.debug(
            f"Computing slope distances for {n} trajectories "
            f"({self.weighting} weighting, {self.max_workers} worker(s))"
        )

        blocks = parallel_map(
            list(batch_slices(n, self.batch_size)),
            lambda rows: cdist(scaled[rows], scaled, metric="euclidean"),
            max_concurrency=self.max_workers,
        )
        upper = np.triu(np.vstack(blocks), k=1)
        return DistanceMatrix(values=upper + upper.T, metric=self.metric)


def slope_distance(
    a: NDArray[np.float64],
    b: NDArray[np.float64],
    times: NDArray[np.float64],
) -> float:
    """Unweighted slope distance between two trajectories sampled on ``times``."""
    dataset = TrajectoryDataset.from_arrays([a, b], times)
    return SlopeDistanceEngine().compute(dataset)[0, 1]
