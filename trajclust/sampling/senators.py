"""Representative ("senator") reduction for large datasets.

Clustering n trajectories with a pairwise engine costs O(n²) distances, and
O(n²·m²) for Fréchet. The sampler replaces the n trajectories with N ≪ n
senators, the senators are clustered, and the senator labels are copied back
to every original trajectory.

Reduction is CLARA-style:
1. Draw ``n_samples`` random subsamples (size 40 + 2N by default).
2. Run FasterPAM (``kmedoids.fasterpam``) on each subsample under Euclidean
   distance on the raw rows.
3. Assign every trajectory to its nearest candidate medoid and keep the
   candidate set with the lowest total dissimilarity.
4. For each group, the senator is the observed member trajectory closest to
   the group centroid, never a synthetic average.

Only subsample-sized matrices and n×N assignment blocks are materialized.
"""

import logging

import kmedoids
import numpy as np
from numpy.typing import NDArray
from scipy.spatial.distance import cdist

from trajclust.errors import ConfigError, MismatchError
from trajclust.models.schemas import (
    EndCluster,
    Partition,
    SenatorBundle,
    SenatorMap,
    TrajectoryDataset,
)
from trajclust.utils.parallel import batch_slices, parallel_map

logger = logging.getLogger(__name__)


def _medoids(
    distances: NDArray[np.float64], k: int, max_iter: int, seed: int
) -> NDArray[np.intp]:
    """k medoids of a small square distance matrix, as row positions."""
    result = kmedoids.fasterpam(
        distances, k, max_iter=max_iter, random_state=seed, n_cpu=1
    )
    return np.asarray(result.medoids, dtype=np.intp)


class RepresentativeSampler:
    """Reduce a dataset to N senators and propagate senator labels back.

    The random search is driven only by the explicit ``seed``: the same seed
    on the same dataset always yields the same senator map and senators.

    Example:
        >>> sampler = RepresentativeSampler(seed=7)
        >>> bundle = sampler.reduce(dataset, n_senators=50)
        >>> senator_partition = engine.cluster(frechet.compute(bundle.senators), k=4)
        >>> end = sampler.propagate_end_cluster(dataset, bundle, senator_partition)
    """

    def __init__(
        self,
        seed: int,
        n_samples: int = 5,
        sample_size: int | None = None,
        max_iter: int = 100,
        max_workers: int = 1,
        batch_size: int = 4096,
    ) -> None:
        """Initialize the sampler.

        Args:
            seed: Seed for the subsample draws. Required.
            n_samples: Number of CLARA subsamples.
            sample_size: Subsample size; defaults to 40 + 2N.
            max_iter: Maximum FasterPAM iterations per subsample.
            max_workers: Threads for the nearest-medoid assignment.
            batch_size: Trajectories per assignment block.
        """
        if seed is None or isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
            raise ConfigError(f"An explicit integer seed is required, got {seed!r}")
        if n_samples < 1:
            raise ConfigError(f"n_samples must be >= 1, got {n_samples}")
        if max_iter < 1:
            raise ConfigError(f"max_iter must be >= 1, got {max_iter}")
        if max_workers < 1:
            raise ConfigError(f"max_workers must be >= 1, got {max_workers}")
        self.seed = int(seed)
        self.n_samples = n_samples
        self.sample_size = sample_size
        self.max_iter = max_iter
        self.max_workers = max_workers
        self.batch_size = batch_size

    def reduce(self, dataset: TrajectoryDataset, n_senators: int) -> SenatorBundle:
        """Partition the dataset into ``n_senators`` groups and pick their senators.

        Args:
            dataset: Trajectories to reduce.
            n_senators: Number of senators N, 2 <= N < n.

        Returns:
            SenatorBundle with the senator map (ids 1..N, ordered by medoid
            row id) and the N senator trajectories.

        Raises:
            ConfigError: If N is out of range or the subsample is too small.
        """
        n = dataset.n_trajectories
        if not 2 <= n_senators < n:
            raise ConfigError(
                f"Number of senators must lie in [2, {n - 1}] for {n} trajectories, "
                f"got {n_senators}"
            )
        requested = self.sample_size if self.sample_size is not None else 40 + 2 * n_senators
        if requested < n_senators:
            raise ConfigError(
                f"sample_size ({requested}) must be at least the number of senators "
                f"({n_senators})"
            )
        size = min(n, requested)

        values = np.asarray(dataset.values)
        rng = np.random.default_rng(self.seed)

        # The whole dataset in one sample leaves nothing for further draws to add
        n_draws = 1 if size == n else self.n_samples
        best_assignment, best_cost = self._draw(values, rng, size, n_senators)
        logger.debug(f"CLARA draw 1/{n_draws}: cost {best_cost:.6g}")

        for draw in range(1, n_draws):
            assignment, cost = self._draw(values, rng, size, n_senators)
            logger.debug(f"CLARA draw {draw + 1}/{n_draws}: cost {cost:.6g}")
            if cost < best_cost:
                best_assignment, best_cost = assignment, cost

        senator_ids = self._closest_to_centroids(values, best_assignment, n_senators)
        senator_map = SenatorMap(
            assignments=tuple(int(g) + 1 for g in best_assignment),
            n_senators=n_senators,
        )
        logger.info(
            f"Reduced {n} trajectories to {n_senators} senators (cost {best_cost:.6g})"
        )
        return SenatorBundle(
            senator_map=senator_map,
            senators=dataset.subset(senator_ids),
            senator_ids=tuple(senator_ids),
            cost=float(best_cost),
        )

    def _draw(
        self,
        values: NDArray[np.float64],
        rng: np.random.Generator,
        size: int,
        n_senators: int,
    ) -> tuple[NDArray[np.intp], float]:
        """One CLARA round: subsample, FasterPAM, assign the whole dataset."""
        sample = np.sort(rng.choice(len(values), size=size, replace=False))
        seed = int(rng.integers(2**31 - 1))
        local = _medoids(
            cdist(values[sample], values[sample]), n_senators, self.max_iter, seed
        )
        return self._assign(values, np.sort(sample[local]))

    def _assign(
        self, values: NDArray[np.float64], medoids: NDArray[np.intp]
    ) -> tuple[NDArray[np.intp], float]:
        """Nearest-medoid group for every row, and the total dissimilarity."""
        medoid_rows = values[medoids]

        def assign_block(rows: slice) -> tuple[NDArray[np.intp], float]:
            distances = cdist(values[rows], medoid_rows)
            nearest = np.argmin(distances, axis=1)
            return nearest, float(distances[np.arange(len(nearest)), nearest].sum())

        blocks = parallel_map(
            list(batch_slices(len(values), self.batch_size)),
            assign_block,
            max_concurrency=self.max_workers,
        )
        assignment = np.concatenate([block for block, _ in blocks])
        assignment[medoids] = np.arange(len(medoids))
        return assignment, sum(cost for _, cost in blocks)

    @staticmethod
    def _closest_to_centroids(
        values: NDArray[np.float64], assignment: NDArray[np.intp], n_groups: int
    ) -> list[int]:
        senator_ids: list[int] = []
        for group in range(n_groups):
            members = np.flatnonzero(assignment == group)
            centroid = values[members].mean(axis=0)
            offsets = np.linalg.norm(values[members] - centroid, axis=1)
            senator_ids.append(int(members[int(np.argmin(offsets))]))
        return senator_ids

    @staticmethod
    def propagate(senator_map: SenatorMap, senator_partition: Partition) -> Partition:
        """Copy senator labels to every original id.

        ``result[i] == senator_partition[senator_map[i] - 1]`` for every id i.

        Raises:
            MismatchError: If the senator partition does not cover every
                senator used by the map, or leaves a label without members.
        """
        used = senator_map.used_senators()
        if used[-1] > len(senator_partition):
            missing = [s for s in used if s > len(senator_partition)]
            raise MismatchError(
                f"Senator partition covers senators 1..{len(senator_partition)} "
                f"but the senator map uses {missing}"
            )

        labels = tuple(senator_partition[s - 1] for s in senator_map.assignments)
        empty = set(senator_partition.labels) - set(labels)
        if empty:
            raise MismatchError(
                f"Senator partition labels {sorted(empty)} only belong to senators "
                "without members"
            )
        return Partition(labels)

    def propagate_end_cluster(
        self,
        dataset: TrajectoryDataset,
        bundle: SenatorBundle,
        senator_partition: Partition,
    ) -> EndCluster:
        """Propagate senator labels and bundle them with the original dataset."""
        if len(bundle.senator_map) != dataset.n_trajectories:
            raise MismatchError(
                f"Senator map covers {len(bundle.senator_map)} ids but the dataset "
                f"has {dataset.n_trajectories} trajectories"
            )
        return EndCluster(
            dataset=dataset,
            senator_map=bundle.senator_map,
            senator_partition=senator_partition,
            partition=self.propagate(bundle.senator_map, senator_partition),
        )
