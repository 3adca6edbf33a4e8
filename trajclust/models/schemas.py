"""Data records for the trajclust pipeline.

This module defines the value objects passed between pipeline stages:
- TrajectoryDataset: n trajectories sampled on one shared time vector
- DistanceMatrix: symmetric pairwise dissimilarities with zero diagonal
- Partition: id -> cluster label, labels contiguous from 1
- SenatorMap / SenatorBundle: representative ("senator") reduction of a dataset
- EndCluster: senator-level labels propagated back to every original id
- ClusterResult: the record every clustering path returns, tagged by ClusterKind

All records are frozen; numpy arrays are copied on construction and marked
read-only. Trajectory ids are 0-based row positions. Cluster labels and
senator ids start at 1.
"""

from collections.abc import Hashable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray
from pydantic import BaseModel, Field
from scipy.spatial.distance import squareform

from trajclust.errors import DataError, MismatchError, ShapeError

# Absolute tolerance for symmetry and zero-diagonal checks
SYMMETRY_TOLERANCE = 1e-8


def _read_only(array: NDArray[Any]) -> NDArray[Any]:
    array = np.array(array, copy=True)
    array.setflags(write=False)
    return array


# =============================================================================
# Dataset
# =============================================================================


@dataclass(frozen=True, eq=False)
class TrajectoryDataset:
    """n trajectories of length m aligned on one shared time vector.

    Invariants: m >= 2, n >= 2, every value and time finite, one name per row.
    The time vector is not required to be increasing here; engines that need
    it call ``require_increasing_times``.
    """

    values: NDArray[np.float64]
    times: NDArray[np.float64]
    names: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        try:
            values = np.asarray(self.values, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise DataError(
                f"Trajectory values must form a rectangular numeric matrix: {e}"
            ) from e
        try:
            times = np.asarray(self.times, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise DataError(f"Time vector must be numeric: {e}") from e

        if values.ndim != 2:
            raise DataError(
                f"Trajectory values must be a 2-D matrix, got {values.ndim} dimension(s)"
            )
        if times.ndim != 1:
            raise DataError(
                f"Time vector must be 1-D, got {times.ndim} dimension(s)"
            )

        n, m = values.shape
        if len(times) != m:
            raise DataError(
                f"Every trajectory must have one value per time point: "
                f"expected length {len(times)}, got rows of length {m}"
            )
        if m < 2:
            raise DataError(f"At least 2 time points are required, got {m}")
        if n < 2:
            raise DataError(f"At least 2 trajectories are required, got {n}")
        if not np.all(np.isfinite(values)):
            bad = sorted({int(i) for i in np.argwhere(~np.isfinite(values))[:, 0]})
            raise DataError(f"Trajectories contain non-finite values at rows {bad}")
        if not np.all(np.isfinite(times)):
            raise DataError("Time vector contains non-finite values")

        names = tuple(str(name) for name in self.names) or tuple(
            str(i) for i in range(n)
        )
        if len(names) != n:
            raise DataError(f"Expected {n} trajectory names, got {len(names)}")

        object.__setattr__(self, "values", _read_only(values))
        object.__setattr__(self, "times", _read_only(times))
        object.__setattr__(self, "names", names)

    @classmethod
    def from_arrays(
        cls,
        values: ArrayLike,
        times: ArrayLike,
        names: Sequence[str] | None = None,
    ) -> "TrajectoryDataset":
        """Build a validated dataset from array-likes.

        Args:
            values: n×m matrix, one row per trajectory.
            times: Time vector of length m.
            names: Optional row names (defaults to "0".."n-1").

        Returns:
            TrajectoryDataset.

        Raises:
            DataError: If the input violates any dataset invariant.
        """
        return cls(
            values=values,  # type: ignore[arg-type]
            times=times,  # type: ignore[arg-type]
            names=tuple(names) if names is not None else (),
        )

    @property
    def n_trajectories(self) -> int:
        return int(self.values.shape[0])

    @property
    def n_times(self) -> int:
        return int(self.values.shape[1])

    def __len__(self) -> int:
        return self.n_trajectories

    def require_increasing_times(self) -> None:
        """Raise DataError unless the time vector is strictly increasing."""
        steps = np.diff(self.times)
        if np.any(steps <= 0):
            first = int(np.argmax(steps <= 0))
            raise DataError(
                "Time vector must be strictly increasing: "
                f"times[{first}]={self.times[first]} >= times[{first + 1}]={self.times[first + 1]}"
            )

    def points(self, trajectory_id: int) -> NDArray[np.float64]:
        """Return trajectory ``trajectory_id`` as an (m, 2) array of (time, value)."""
        return np.column_stack((self.times, self.values[trajectory_id]))

    def subset(self, ids: Sequence[int]) -> "TrajectoryDataset":
        """Return a new dataset holding the given rows, in the given order."""
        index = np.asarray(ids, dtype=np.intp)
        return TrajectoryDataset(
            values=self.values[index],
            times=self.times,
            names=tuple(self.names[i] for i in index),
        )


# =============================================================================
# Distance matrix
# =============================================================================


@dataclass(frozen=True, eq=False)
class DistanceMatrix:
    """Pairwise dissimilarities indexed by trajectory id.

    Engines always produce valid matrices. Matrices built by hand are checked
    by ``validate`` when a consumer needs the invariants.
    """

    values: NDArray[np.float64]
    metric: str = "custom"

    def __post_init__(self) -> None:
        try:
            values = np.asarray(self.values, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise ShapeError(f"Distance matrix must be numeric: {e}") from e
        object.__setattr__(self, "values", _read_only(values))

    @property
    def size(self) -> int:
        return int(self.values.shape[0])

    def __len__(self) -> int:
        return self.size

    def __getitem__(self, key: tuple[int, int]) -> float:
        i, j = key
        return float(self.values[i, j])

    def validate(self, tolerance: float = SYMMETRY_TOLERANCE) -> None:
        """Check square shape, symmetry, zero diagonal and non-negativity.

        Raises:
            ShapeError: On the first violated invariant.
        """
        v = self.values
        if v.ndim != 2 or v.shape[0] != v.shape[1]:
            raise ShapeError(f"Distance matrix must be square, got shape {v.shape}")
        if not np.all(np.isfinite(v)):
            raise ShapeError("Distance matrix contains non-finite entries")
        if np.any(v < 0):
            raise ShapeError(
                f"Distance matrix must be non-negative, minimum entry is {v.min()}"
            )
        diagonal = np.abs(np.diag(v))
        if np.any(diagonal > tolerance):
            raise ShapeError(
                f"Distance matrix diagonal must be zero, found {diagonal.max()} "
                f"at index {int(np.argmax(diagonal))}"
            )
        asymmetry = np.abs(v - v.T)
        if np.any(asymmetry > tolerance * max(1.0, float(np.abs(v).max()))):
            i, j = np.unravel_index(int(np.argmax(asymmetry)), v.shape)
            raise ShapeError(
                f"Distance matrix must be symmetric: entry ({i}, {j})={v[i, j]} "
                f"but ({j}, {i})={v[j, i]}"
            )

    def condensed(self) -> NDArray[np.float64]:
        """Export the upper triangle as a condensed vector (scipy ordering)."""
        self.validate()
        return squareform(self.values, checks=False)

    def to_numpy(self) -> NDArray[np.float64]:
        """Return a writable copy of the square matrix."""
        return np.array(self.values, copy=True)


# =============================================================================
# Partitions
# =============================================================================


@dataclass(frozen=True)
class Partition:
    """Total id -> label mapping; ``labels[i]`` is the cluster of id ``i``.

    Labels are exactly 1..k, so no cluster is empty.
    """

    labels: tuple[int, ...]

    def __post_init__(self) -> None:
        labels = tuple(int(label) for label in self.labels)
        if not labels:
            raise DataError("A partition must cover at least one id")
        used = set(labels)
        if used != set(range(1, len(used) + 1)):
            raise DataError(
                f"Partition labels must be contiguous from 1, got {sorted(used)}"
            )
        object.__setattr__(self, "labels", labels)

    @classmethod
    def from_labels(cls, labels: Iterable[Hashable]) -> "Partition":
        """Relabel arbitrary hashable labels to 1..k by order of first appearance."""
        mapping: dict[Hashable, int] = {}
        relabeled: list[int] = []
        for label in labels:
            if label not in mapping:
                mapping[label] = len(mapping) + 1
            relabeled.append(mapping[label])
        return cls(tuple(relabeled))

    def __len__(self) -> int:
        return len(self.labels)

    def __getitem__(self, trajectory_id: int) -> int:
        return self.labels[trajectory_id]

    @property
    def n_clusters(self) -> int:
        return max(self.labels)

    def label_of(self, trajectory_id: int) -> int:
        return self.labels[trajectory_id]

    def members(self, label: int) -> tuple[int, ...]:
        """Ids assigned to ``label``, in increasing order."""
        return tuple(i for i, value in enumerate(self.labels) if value == label)

    def sizes(self) -> dict[int, int]:
        sizes = {label: 0 for label in range(1, self.n_clusters + 1)}
        for label in self.labels:
            sizes[label] += 1
        return sizes

    def to_numpy(self) -> NDArray[np.int64]:
        return np.asarray(self.labels, dtype=np.int64)


@dataclass(frozen=True)
class SenatorMap:
    """Map from every original id to its senator id in 1..n_senators."""

    assignments: tuple[int, ...]
    n_senators: int

    def __post_init__(self) -> None:
        assignments = tuple(int(s) for s in self.assignments)
        if not assignments:
            raise DataError("A senator map must cover at least one id")
        if self.n_senators < 1:
            raise DataError(f"n_senators must be positive, got {self.n_senators}")
        out_of_range = sorted({s for s in assignments if not 1 <= s <= self.n_senators})
        if out_of_range:
            raise DataError(
                f"Senator ids must lie in [1, {self.n_senators}], got {out_of_range}"
            )
        object.__setattr__(self, "assignments", assignments)

    def __len__(self) -> int:
        return len(self.assignments)

    def __getitem__(self, trajectory_id: int) -> int:
        return self.assignments[trajectory_id]

    def used_senators(self) -> tuple[int, ...]:
        """Senator ids owning at least one member."""
        return tuple(sorted(set(self.assignments)))

    def members(self, senator: int) -> tuple[int, ...]:
        return tuple(i for i, s in enumerate(self.assignments) if s == senator)

    def sizes(self) -> dict[int, int]:
        sizes: dict[int, int] = {}
        for senator in self.assignments:
            sizes[senator] = sizes.get(senator, 0) + 1
        return dict(sorted(sizes.items()))


@dataclass(frozen=True, eq=False)
class SenatorBundle:
    """Senator dataset and senator map, kept together for rendering.

    ``senators`` row ``s - 1`` is senator ``s``; ``senator_ids[s - 1]`` is its
    row id in the original dataset.
    """

    senator_map: SenatorMap
    senators: TrajectoryDataset
    senator_ids: tuple[int, ...]
    cost: float

    def __post_init__(self) -> None:
        n = self.senator_map.n_senators
        if self.senators.n_trajectories != n or len(self.senator_ids) != n:
            raise MismatchError(
                f"Senator map declares {n} senators but the bundle holds "
                f"{self.senators.n_trajectories} rows and {len(self.senator_ids)} ids"
            )

    @property
    def n_senators(self) -> int:
        return self.senator_map.n_senators


@dataclass(frozen=True, eq=False)
class EndCluster:
    """Final per-id labels derived from a senator-level partition.

    ``partition[i] == senator_partition[senator_map[i] - 1]`` for every id.
    """

    dataset: TrajectoryDataset
    senator_map: SenatorMap
    senator_partition: Partition
    partition: Partition

    def __post_init__(self) -> None:
        if len(self.senator_map) != self.dataset.n_trajectories:
            raise MismatchError(
                f"Senator map covers {len(self.senator_map)} ids but the dataset "
                f"has {self.dataset.n_trajectories} trajectories"
            )
        if len(self.partition) != len(self.senator_map):
            raise MismatchError(
                f"Final partition covers {len(self.partition)} ids, expected "
                f"{len(self.senator_map)}"
            )
        for i, senator in enumerate(self.senator_map.assignments):
            if senator > len(self.senator_partition):
                raise MismatchError(
                    f"Senator {senator} of id {i} has no label in the senator partition"
                )
            if self.partition[i] != self.senator_partition[senator - 1]:
                raise MismatchError(
                    f"Id {i} has label {self.partition[i]} but its senator {senator} "
                    f"has label {self.senator_partition[senator - 1]}"
                )

    def cluster_members(self) -> dict[int, list[int]]:
        """Cluster label -> original ids, without recomputation."""
        return {
            label: list(self.partition.members(label))
            for label in range(1, self.partition.n_clusters + 1)
        }


# =============================================================================
# Cluster results
# =============================================================================


class ClusterKind(str, Enum):
    """How a ClusterResult was produced."""

    SLOPE = "slope"
    FRECHET = "frechet"
    COMBINED = "combined"
    SENATOR = "senator"


class ClusterSummary(BaseModel):
    """Serializable view of a ClusterResult."""

    kind: ClusterKind = Field(description="How the partition was produced")
    method: ClusterKind | None = Field(
        default=None, description="Distance used on senators (senator results only)"
    )
    n_clusters: int = Field(description="Number of clusters")
    labels: list[int] = Field(description="Cluster label for each trajectory")
    names: list[str] = Field(description="Trajectory names, aligned with labels")
    cluster_sizes: dict[str, int] = Field(
        default_factory=dict, description="Number of trajectories per cluster"
    )
    n_senators: int | None = Field(
        default=None, description="Number of senators (senator results only)"
    )
    senator_labels: list[int] | None = Field(
        default=None, description="Senator id for each trajectory"
    )


@dataclass(frozen=True, eq=False)
class ClusterResult:
    """Outcome of one clustering path, discriminated by ``kind``.

    - SLOPE / FRECHET: ``distance`` holds the matrix the partition was cut from.
    - COMBINED: ``components`` holds the two results that were combined.
    - SENATOR: ``end_cluster`` and ``senators`` hold the reduction and
      propagation; ``method`` names the distance used on the senators.
    """

    kind: ClusterKind
    dataset: TrajectoryDataset
    partition: Partition
    distance: DistanceMatrix | None = None
    components: tuple["ClusterResult", ...] = ()
    end_cluster: EndCluster | None = None
    senators: SenatorBundle | None = None
    method: ClusterKind | None = None

    def __post_init__(self) -> None:
        if len(self.partition) != self.dataset.n_trajectories:
            raise MismatchError(
                f"Partition covers {len(self.partition)} ids but the dataset has "
                f"{self.dataset.n_trajectories} trajectories"
            )
        if self.kind in (ClusterKind.SLOPE, ClusterKind.FRECHET) and self.distance is None:
            raise ValueError(f"{self.kind.value} results require a distance matrix")
        if self.kind == ClusterKind.COMBINED and len(self.components) != 2:
            raise ValueError("Combined results require exactly two components")
        if self.kind == ClusterKind.SENATOR and (
            self.end_cluster is None or self.senators is None
        ):
            raise ValueError("Senator results require an end cluster and senators")

    @property
    def labels(self) -> tuple[int, ...]:
        return self.partition.labels

    @property
    def n_clusters(self) -> int:
        return self.partition.n_clusters

    def cluster_members(self) -> dict[int, list[str]]:
        """Cluster label -> names of the member trajectories."""
        members: dict[int, list[str]] = {}
        for name, label in zip(self.dataset.names, self.partition.labels):
            members.setdefault(label, []).append(name)
        return dict(sorted(members.items()))

    def summary(self) -> ClusterSummary:
        senator_labels: list[int] | None = None
        n_senators: int | None = None
        if self.end_cluster is not None:
            senator_labels = list(self.end_cluster.senator_map.assignments)
            n_senators = self.end_cluster.senator_map.n_senators

        return ClusterSummary(
            kind=self.kind,
            method=self.method,
            n_clusters=self.n_clusters,
            labels=list(self.partition.labels),
            names=list(self.dataset.names),
            cluster_sizes={
                f"Cluster {label}": size
                for label, size in self.partition.sizes().items()
            },
            n_senators=n_senators,
            senator_labels=senator_labels,
        )
