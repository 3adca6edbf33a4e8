"""Main trajclust pipeline.

Wires the distance engines, the cluster engine, the combiner and the senator
sampler together:

- Slope:    dataset -> slope distances -> k clusters
- Fréchet:  dataset -> Fréchet distances -> k clusters
- Combined: slope partition × Fréchet partition -> product partition
- Senators: dataset -> N senators -> any of the above on the senators ->
            senator labels propagated to every trajectory
"""

import logging
from typing import Literal

from trajclust.clustering.combiner import combine_partitions
from trajclust.clustering.engine import ClusterEngine
from trajclust.config import Config
from trajclust.distance.frechet import FrechetDistanceEngine
from trajclust.distance.slope import SlopeDistanceEngine
from trajclust.errors import ConfigError
from trajclust.models.schemas import (
    ClusterKind,
    ClusterResult,
    DistanceMatrix,
    TrajectoryDataset,
)
from trajclust.sampling.senators import RepresentativeSampler

logger = logging.getLogger(__name__)

Method = Literal["slope", "frechet", "combined"]

METHODS: tuple[str, ...] = ("slope", "frechet", "combined")


class TrajectoryClusterer:
    """Cluster trajectories by shape, by location, or both.

    Example:
        >>> clusterer = TrajectoryClusterer()
        >>> by_shape = clusterer.cluster_slope(dataset, k=3)
        >>> by_both = clusterer.cluster_combined(dataset, k_slope=3, k_frechet=2)
        >>> big = clusterer.cluster_senators(large_dataset, k=4, n_senators=200, seed=1)
    """

    def __init__(self, config: Config | None = None) -> None:
        """Initialize the clusterer.

        Args:
            config: Configuration object. If None, uses defaults.
        """
        self.config = config or Config()
        self.slope_engine = SlopeDistanceEngine(weighting=self.config.slope.weighting)
        self.frechet_engine = FrechetDistanceEngine(
            max_workers=self.config.frechet.max_workers
        )
        self.cluster_engine = ClusterEngine(linkage=self.config.clustering.linkage)

    def distance(
        self, dataset: TrajectoryDataset, metric: Literal["slope", "frechet"]
    ) -> DistanceMatrix:
        """Compute the distance matrix for ``metric``."""
        if metric == "slope":
            return self.slope_engine.compute(dataset)
        elif metric == "frechet":
            return self.frechet_engine.compute(dataset)
        else:
            raise ConfigError(f"Unknown distance metric: {metric!r}")

    def cluster_slope(self, dataset: TrajectoryDataset, k: int | None = None) -> ClusterResult:
        """Cluster by similarity of slope evolution."""
        return self._cluster_distance(dataset, ClusterKind.SLOPE, k)

    def cluster_frechet(self, dataset: TrajectoryDataset, k: int | None = None) -> ClusterResult:
        """Cluster by similarity of location (discrete Fréchet distance)."""
        return self._cluster_distance(dataset, ClusterKind.FRECHET, k)

    def cluster_combined(
        self,
        dataset: TrajectoryDataset,
        k_slope: int | None = None,
        k_frechet: int | None = None,
    ) -> ClusterResult:
        """Cluster by both criteria and return the product partition.

        Args:
            dataset: Trajectories to cluster.
            k_slope: Cluster count for the slope partition.
            k_frechet: Cluster count for the Fréchet partition (defaults to k_slope).
        """
        k_slope = k_slope if k_slope is not None else self.config.clustering.n_clusters
        k_frechet = k_frechet if k_frechet is not None else k_slope
        ClusterEngine.check_cluster_count(k_slope, dataset.n_trajectories)
        ClusterEngine.check_cluster_count(k_frechet, dataset.n_trajectories)

        by_slope = self.cluster_slope(dataset, k_slope)
        by_frechet = self.cluster_frechet(dataset, k_frechet)
        partition = combine_partitions(by_slope.partition, by_frechet.partition)

        logger.info(
            f"Combined {k_slope} slope clusters and {k_frechet} Fréchet clusters "
            f"into {partition.n_clusters} clusters"
        )
        return ClusterResult(
            kind=ClusterKind.COMBINED,
            dataset=dataset,
            partition=partition,
            components=(by_slope, by_frechet),
        )

    def cluster_senators(
        self,
        dataset: TrajectoryDataset,
        k: int | None = None,
        n_senators: int | None = None,
        method: Method = "frechet",
        seed: int | None = None,
        k_frechet: int | None = None,
    ) -> ClusterResult:
        """Cluster a large dataset through its senators.

        Args:
            dataset: Trajectories to cluster.
            k: Cluster count on the senators (slope count for "combined").
            n_senators: Number of senators (defaults to config).
            method: Clustering applied to the senators.
            seed: Seed for the senator search (defaults to config; one is required).
            k_frechet: Fréchet cluster count when method is "combined".

        Returns:
            ClusterResult of kind SENATOR whose partition covers every
            original trajectory.

        Raises:
            ConfigError: If no seed is available, the method is unknown, or k or
                N is out of range. All of these are checked before the reduction.
        """
        senator_config = self.config.senators
        seed = seed if seed is not None else senator_config.seed
        if seed is None:
            raise ConfigError(
                "Senator clustering needs an explicit seed (argument or senators.seed)"
            )
        if method not in METHODS:
            raise ConfigError(
                f"Unknown clustering method: {method!r}, expected one of {METHODS}"
            )
        n_senators = n_senators if n_senators is not None else senator_config.n_senators
        if not 2 <= n_senators < dataset.n_trajectories:
            raise ConfigError(
                f"Number of senators must lie in [2, {dataset.n_trajectories - 1}] for "
                f"{dataset.n_trajectories} trajectories, got {n_senators}"
            )
        k = k if k is not None else self.config.clustering.n_clusters
        ClusterEngine.check_cluster_count(k, n_senators)
        if method == "combined" and k_frechet is not None:
            ClusterEngine.check_cluster_count(k_frechet, n_senators)

        sampler = RepresentativeSampler(
            seed=seed,
            n_samples=senator_config.n_samples,
            sample_size=senator_config.sample_size,
            max_iter=senator_config.max_iter,
            max_workers=senator_config.max_workers,
        )
        logger.info(
            f"Reducing {dataset.n_trajectories} trajectories to {n_senators} senators"
        )
        bundle = sampler.reduce(dataset, n_senators)

        if method == "slope":
            senator_result = self.cluster_slope(bundle.senators, k)
        elif method == "frechet":
            senator_result = self.cluster_frechet(bundle.senators, k)
        elif method == "combined":
            senator_result = self.cluster_combined(bundle.senators, k, k_frechet)
        else:
            raise ConfigError(f"Unknown clustering method: {method!r}")

        end_cluster = sampler.propagate_end_cluster(
            dataset, bundle, senator_result.partition
        )
        return ClusterResult(
            kind=ClusterKind.SENATOR,
            dataset=dataset,
            partition=end_cluster.partition,
            distance=senator_result.distance,
            components=(senator_result,),
            end_cluster=end_cluster,
            senators=bundle,
            method=ClusterKind(method),
        )

    def cluster(
        self,
        dataset: TrajectoryDataset,
        method: Method = "frechet",
        k: int | None = None,
        k_frechet: int | None = None,
        n_senators: int | None = None,
        seed: int | None = None,
    ) -> ClusterResult:
        """Dispatch to one clustering path; senators are used when ``n_senators`` is set."""
        if n_senators is not None:
            return self.cluster_senators(
                dataset, k, n_senators, method=method, seed=seed, k_frechet=k_frechet
            )
        if method == "slope":
            return self.cluster_slope(dataset, k)
        elif method == "frechet":
            return self.cluster_frechet(dataset, k)
        elif method == "combined":
            return self.cluster_combined(dataset, k, k_frechet)
        else:
            raise ConfigError(f"Unknown clustering method: {method!r}")

    def _cluster_distance(
        self, dataset: TrajectoryDataset, kind: ClusterKind, k: int | None
    ) -> ClusterResult:
        k = k if k is not None else self.config.clustering.n_clusters
        ClusterEngine.check_cluster_count(k, dataset.n_trajectories)
        logger.info(
            f"Clustering {dataset.n_trajectories} trajectories by {kind.value} distance "
            f"into {k} clusters"
        )
        distance = self.distance(dataset, kind.value)  # type: ignore[arg-type]
        partition = self.cluster_engine.cluster(distance, k)
        return ClusterResult(
            kind=kind, dataset=dataset, partition=partition, distance=distance
        )
