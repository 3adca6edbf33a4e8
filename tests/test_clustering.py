"""Tests for the cluster engine and the partition combiner."""

import numpy as np
import pytest

from trajclust.clustering.combiner import combine_partitions, is_refinement
from trajclust.clustering.engine import ClusterEngine
from trajclust.distance.frechet import FrechetDistanceEngine
from trajclust.distance.slope import SlopeDistanceEngine
from trajclust.errors import ConfigError, MismatchError, ShapeError
from trajclust.models.schemas import DistanceMatrix, Partition, TrajectoryDataset


def _groupings(partition: Partition) -> set[frozenset[int]]:
    return {frozenset(partition.members(label)) for label in range(1, partition.n_clusters + 1)}


class TestClusterEngine:
    """Tests for ClusterEngine."""

    def test_reference_frechet(self, reference_dataset: TrajectoryDataset) -> None:
        """Test that the two closest trajectories are merged first (n=3, k=n-1)."""
        matrix = FrechetDistanceEngine().compute(reference_dataset)
        partition = ClusterEngine().cluster(matrix, k=2)
        assert partition.labels == (1, 1, 2)

    def test_slope_families(self, shape_dataset: TrajectoryDataset) -> None:
        """Test that slope clustering recovers the three shape families."""
        matrix = SlopeDistanceEngine().compute(shape_dataset)
        partition = ClusterEngine().cluster(matrix, k=3)
        assert partition.labels == (1, 1, 1, 2, 2, 2, 3, 3, 3)

    @pytest.mark.parametrize("k", range(2, 9))
    def test_exactly_k_clusters(self, shape_dataset: TrajectoryDataset, k: int) -> None:
        """Test that every k in [2, n-1] yields k non-empty clusters."""
        matrix = FrechetDistanceEngine().compute(shape_dataset)
        partition = ClusterEngine().cluster(matrix, k=k)
        assert len(partition) == shape_dataset.n_trajectories
        assert set(partition.labels) == set(range(1, k + 1))
        assert partition.labels[0] == 1

    @pytest.mark.parametrize("linkage", ["complete", "average", "single"])
    def test_deterministic(self, large_dataset: TrajectoryDataset, linkage: str) -> None:
        """Test that re-running reproduces identical labels."""
        matrix = SlopeDistanceEngine().compute(large_dataset)
        engine = ClusterEngine(linkage=linkage)  # type: ignore[arg-type]
        assert engine.cluster(matrix, k=5).labels == engine.cluster(matrix, k=5).labels

    @pytest.mark.parametrize("k", [1, 3, 0, -1])
    def test_k_out_of_range(self, reference_dataset: TrajectoryDataset, k: int) -> None:
        """Test that k outside [2, n-1] is a configuration error."""
        matrix = FrechetDistanceEngine().compute(reference_dataset)
        with pytest.raises(ConfigError):
            ClusterEngine().cluster(matrix, k=k)

    def test_invalid_matrix(self) -> None:
        """Test that an asymmetric matrix is rejected before clustering."""
        matrix = DistanceMatrix(np.array([[0.0, 1.0, 2.0], [1.0, 0.0, 1.0], [5.0, 1.0, 0.0]]))
        with pytest.raises(ShapeError):
            ClusterEngine().cluster(matrix, k=2)

    def test_unknown_linkage(self) -> None:
        """Test that ward (needs raw features) is not accepted."""
        with pytest.raises(ConfigError):
            ClusterEngine(linkage="ward")  # type: ignore[arg-type]


class TestCombinePartitions:
    """Tests for combine_partitions."""

    def test_product_partition(self) -> None:
        """Test labels of the finest common refinement."""
        a = Partition((1, 1, 2, 2, 1))
        b = Partition((1, 2, 1, 1, 1))
        combined = combine_partitions(a, b)
        assert combined.labels == (1, 2, 3, 3, 1)

    def test_unobserved_pairs_get_no_label(self) -> None:
        """Test that k' is below |A| × |B| when a pair never occurs."""
        a = Partition((1, 1, 2, 2))
        b = Partition((1, 1, 2, 2))
        assert combine_partitions(a, b).n_clusters == 2

    def test_refines_both(self) -> None:
        """Test the refinement property on random partitions."""
        rng = np.random.default_rng(7)
        a = Partition.from_labels(rng.integers(0, 4, size=50).tolist())
        b = Partition.from_labels(rng.integers(0, 3, size=50).tolist())
        combined = combine_partitions(a, b)
        assert is_refinement(combined, a)
        assert is_refinement(combined, b)
        for i in range(50):
            for j in range(50):
                if combined[i] == combined[j]:
                    assert a[i] == a[j] and b[i] == b[j]

    def test_commutative_grouping(self) -> None:
        """Test that swapping the arguments gives the same grouping."""
        a = Partition((1, 2, 2, 3, 1, 3))
        b = Partition((1, 1, 2, 2, 2, 1))
        ab = combine_partitions(a, b)
        ba = combine_partitions(b, a)
        assert _groupings(ab) == _groupings(ba)
        assert ab.labels == ba.labels

    def test_mismatched_sizes(self) -> None:
        """Test that partitions over different id sets are rejected."""
        with pytest.raises(MismatchError):
            combine_partitions(Partition((1, 2)), Partition((1, 2, 1)))

    def test_is_refinement_false(self) -> None:
        """Test detection of a non-refinement."""
        assert not is_refinement(Partition((1, 1, 2)), Partition((1, 2, 2)))
