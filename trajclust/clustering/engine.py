"""Hierarchical clustering of a precomputed distance matrix.

The merge tree is built by agglomerative clustering directly on the matrix
and cut at exactly k groups. Labels are then renumbered 1..k in order of
first appearance over ids 0..n-1, so identical inputs always give identical
labels, not just identical groupings.
"""

import logging
from typing import Literal

from sklearn.cluster import AgglomerativeClustering

from trajclust.errors import ConfigError
from trajclust.models.schemas import DistanceMatrix, Partition

logger = logging.getLogger(__name__)

Linkage = Literal["complete", "average", "single"]

# Ward needs raw feature vectors, so only these work on a precomputed matrix
LINKAGES: tuple[str, ...] = ("complete", "average", "single")


class ClusterEngine:
    """Cut a distance matrix into exactly k clusters.

    Example:
        >>> engine = ClusterEngine(linkage="complete")
        >>> partition = engine.cluster(distance_matrix, k=3)
        >>> partition.n_clusters
        3
    """

    def __init__(self, linkage: Linkage = "complete") -> None:
        """Initialize the engine.

        Args:
            linkage: Linkage criterion for merging clusters.
        """
        if linkage not in LINKAGES:
            raise ConfigError(f"Unknown linkage {linkage!r}, expected one of {LINKAGES}")
        self.linkage = linkage

    @staticmethod
    def check_cluster_count(k: int, n: int) -> None:
        """Raise ConfigError unless 2 <= k <= n-1."""
        if not 2 <= k <= n - 1:
            raise ConfigError(
                f"Cluster count k must lie in [2, {n - 1}] for {n} trajectories, got {k}"
            )

    def cluster(self, distance: DistanceMatrix, k: int) -> Partition:
        """Partition the ids of ``distance`` into k clusters.

        Args:
            distance: Square, symmetric, zero-diagonal distance matrix.
            k: Number of clusters, 2 <= k <= n-1.

        Returns:
            Partition with labels 1..k.

        Raises:
            ShapeError: If the matrix is invalid.
            ConfigError: If k is out of range.
        """
        distance.validate()
        n = distance.size
        self.check_cluster_count(k, n)

        logger.debug(f"Cutting {n}×{n} {distance.metric} matrix into {k} clusters")

        model = AgglomerativeClustering(
            n_clusters=k,
            metric="precomputed",
            linkage=self.linkage,
        )
        labels = model.fit_predict(distance.to_numpy())
        return Partition.from_labels(int(label) for label in labels)
