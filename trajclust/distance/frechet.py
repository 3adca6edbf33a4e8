"""Discrete Fréchet distance: similarity of physical location.

Trajectories are viewed as ordered point sequences ``(time, value)`` in the
plane. The discrete Fréchet distance is the smallest achievable "worst
matched pair" distance over all monotone couplings of the two sequences,
computed by dynamic programming over the coupling table:

    M[0][0] = d[0][0]
    M[i][0] = max(M[i-1][0], d[i][0])
    M[0][j] = max(M[0][j-1], d[0][j])
    M[i][j] = max(d[i][j], min(M[i-1][j], M[i-1][j-1], M[i][j-1]))

Cost is O(m²) per pair and O(n²·m²) per dataset, which is why large datasets
go through the senator reduction first.
"""

import logging

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.spatial.distance import cdist

from trajclust.errors import ConfigError, DataError
from trajclust.models.schemas import DistanceMatrix, TrajectoryDataset
from trajclust.utils.parallel import parallel_map

logger = logging.getLogger(__name__)


def _as_points(curve: ArrayLike, name: str) -> NDArray[np.float64]:
    points = np.asarray(curve, dtype=np.float64)
    if points.ndim == 1:
        points = points[:, np.newaxis]
    if points.ndim != 2 or len(points) == 0:
        raise DataError(
            f"Curve {name} must be a non-empty (length, dims) array, got shape {points.shape}"
        )
    if not np.all(np.isfinite(points)):
        raise DataError(f"Curve {name} contains non-finite coordinates")
    return points


def discrete_frechet(p: ArrayLike, q: ArrayLike) -> float:
    """Discrete Fréchet distance between two point sequences.

    Args:
        p: (len_p, dims) array of points. A 1-D array is read as 1-D points.
        q: (len_q, dims) array of points with the same dims.

    Returns:
        The distance. It is 0 exactly when both sequences are pointwise equal
        (for sequences of equal length).
    """
    p_points = _as_points(p, "p")
    q_points = _as_points(q, "q")
    if p_points.shape[1] != q_points.shape[1]:
        raise DataError(
            f"Curves must share a dimension, got {p_points.shape[1]} and {q_points.shape[1]}"
        )

    d = cdist(p_points, q_points, metric="euclidean")

    # Row-by-row wavefront: up/diagonal minima vectorize, the left neighbour does not
    previous = np.maximum.accumulate(d[0]).tolist()
    for i in range(1, d.shape[0]):
        d_row = d[i].tolist()
        reach = np.minimum(previous[1:], previous[:-1]).tolist()
        row = [max(previous[0], d_row[0])]
        for j in range(1, len(d_row)):
            row.append(max(d_row[j], min(reach[j - 1], row[j - 1])))
        previous = row

    return float(previous[-1])


class FrechetDistanceEngine:
    """Pairwise discrete Fréchet distance between all trajectories of a dataset.

    Rows of the upper triangle are independent work items; with
    ``max_workers > 1`` they are spread over a thread pool. Each item writes
    only its own cells, then the matrix is mirrored.
    """

    metric = "frechet"

    def __init__(self, max_workers: int = 1) -> None:
        if max_workers < 1:
            raise ConfigError(f"max_workers must be >= 1, got {max_workers}")
        self.max_workers = max_workers

    def compute(self, dataset: TrajectoryDataset) -> DistanceMatrix:
        """Compute the n×n discrete Fréchet distance matrix.

        The time vector only supplies point coordinates and need not be
        increasing.

        Args:
            dataset: Trajectories to compare.

        Returns:
            DistanceMatrix with metric "frechet".
        """
        n = dataset.n_trajectories
        points = [dataset.points(i) for i in range(n)]
        n_pairs = n * (n - 1) // 2
        logger.debug(
            f"Computing Fréchet distances for {n_pairs} pairs "
            f"({dataset.n_times} points each, {self.max_workers} worker(s))"
        )

        def upper_row(i: int) -> list[float]:
            return [discrete_frechet(points[i], points[j]) for j in range(i + 1, n)]

        def log_progress(done: int, total: int) -> None:
            if done == total or done % max(1, total // 10) == 0:
                logger.debug(f"Fréchet rows completed: {done}/{total}")

        rows = parallel_map(
            list(range(n - 1)),
            upper_row,
            max_concurrency=self.max_workers,
            on_progress=log_progress,
        )

        matrix = np.zeros((n, n), dtype=np.float64)
        for i, row in enumerate(rows):
            matrix[i, i + 1 :] = row
        matrix = matrix + matrix.T
        return DistanceMatrix(values=matrix, metric=self.metric)
