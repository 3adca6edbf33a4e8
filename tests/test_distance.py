"""Tests for the slope and Fréchet distance engines."""

import math

import numpy as np
import pytest

from trajclust.distance.frechet import FrechetDistanceEngine, discrete_frechet
from trajclust.distance.slope import SlopeDistanceEngine, slope_distance
from trajclust.errors import ConfigError, DataError
from trajclust.models.schemas import TrajectoryDataset


def _assert_valid_matrix(values: np.ndarray, n: int) -> None:
    assert values.shape == (n, n)
    np.testing.assert_array_equal(values, values.T)
    np.testing.assert_array_equal(np.diag(values), np.zeros(n))
    assert np.all(values >= 0)


class TestSlopeDistanceEngine:
    """Tests for SlopeDistanceEngine."""

    def test_slopes(self, reference_dataset: TrajectoryDataset) -> None:
        """Test segment slope computation."""
        slopes = SlopeDistanceEngine().slopes(reference_dataset)
        np.testing.assert_array_equal(slopes[0], [5, 2, 8])
        np.testing.assert_array_equal(slopes[1], [3, -2, 3])

    def test_parallel_trajectories_have_zero_distance(
        self, reference_dataset: TrajectoryDataset
    ) -> None:
        """Test that a vertical offset does not change the slope distance."""
        matrix = SlopeDistanceEngine().compute(reference_dataset)
        assert matrix[0, 2] == 0.0
        assert matrix.metric == "slope"

    def test_known_value(self, reference_dataset: TrajectoryDataset) -> None:
        """Test distance between a and b: sqrt(2² + 4² + 5²)."""
        matrix = SlopeDistanceEngine().compute(reference_dataset)
        assert matrix[0, 1] == pytest.approx(math.sqrt(45))
        assert matrix[1, 2] == pytest.approx(math.sqrt(45))

    def test_matrix_is_valid(self, shape_dataset: TrajectoryDataset) -> None:
        """Test symmetry, zero diagonal and non-negativity."""
        matrix = SlopeDistanceEngine().compute(shape_dataset)
        _assert_valid_matrix(matrix.to_numpy(), shape_dataset.n_trajectories)
        matrix.validate()

    def test_opposite_evolution_is_far(self, shape_dataset: TrajectoryDataset) -> None:
        """Test that rising and falling trajectories are far apart."""
        matrix = SlopeDistanceEngine().compute(shape_dataset)
        # slopes [2, 2, 2, 2] vs [-2, -2, -2, -2]
        assert matrix[0, 3] == pytest.approx(8.0)
        assert matrix[0, 1] == 0.0

    def test_unsorted_times_rejected(self) -> None:
        """Test that a non-increasing time vector raises DataError."""
        dataset = TrajectoryDataset.from_arrays([[1, 2, 3], [2, 3, 4]], [0, 2, 1])
        with pytest.raises(DataError):
            SlopeDistanceEngine().compute(dataset)

    def test_duration_weighting_uniform_grid(self, shape_dataset: TrajectoryDataset) -> None:
        """Test that weighting has no effect on an evenly spaced grid."""
        plain = SlopeDistanceEngine().compute(shape_dataset).to_numpy()
        weighted = SlopeDistanceEngine(weighting="duration").compute(shape_dataset).to_numpy()
        np.testing.assert_allclose(plain, weighted)

    def test_duration_weighting_uneven_grid(self) -> None:
        """Test that longer segments count more under duration weighting."""
        dataset = TrajectoryDataset.from_arrays([[0, 1, 2], [0, 2, 2]], [0, 1, 4])
        # slopes: [1, 1/3] vs [2, 0]; durations [1, 3] -> weights [0.5, 1.5]
        plain = SlopeDistanceEngine().compute(dataset)[0, 1]
        weighted = SlopeDistanceEngine(weighting="duration").compute(dataset)[0, 1]
        assert plain == pytest.approx(math.sqrt(1 + 1 / 9))
        assert weighted == pytest.approx(math.sqrt(0.5 * 1 + 1.5 / 9))

    def test_unknown_weighting(self) -> None:
        """Test that an unknown weighting is a configuration error."""
        with pytest.raises(ConfigError):
            SlopeDistanceEngine(weighting="area")  # type: ignore[arg-type]

    def test_workers_do_not_change_result(self, large_dataset: TrajectoryDataset) -> None:
        """Test that block-parallel computation matches sequential output."""
        sequential = SlopeDistanceEngine(batch_size=1000).compute(large_dataset)
        parallel = SlopeDistanceEngine(max_workers=4, batch_size=17).compute(large_dataset)
        np.testing.assert_array_equal(sequential.to_numpy(), parallel.to_numpy())

    def test_slope_distance_helper(self) -> None:
        """Test the two-trajectory convenience function."""
        assert slope_distance(
            np.array([10, 15, 17, 25]), np.array([-19, -14, -12, -4]), np.array([1, 2, 3, 4])
        ) == 0.0


class TestDiscreteFrechet:
    """Tests for the discrete Fréchet dynamic program."""

    def test_identical_curves(self) -> None:
        """Test that identical curves have distance 0."""
        curve = np.array([[0, 0], [1, 1], [2, 0]])
        assert discrete_frechet(curve, curve) == 0.0

    def test_different_curves_positive(self) -> None:
        """Test that a single differing point gives a positive distance."""
        p = np.array([[0, 0], [1, 1], [2, 0]])
        q = np.array([[0, 0], [1, 1.5], [2, 0]])
        assert discrete_frechet(p, q) == pytest.approx(0.5)

    def test_order_matters(self) -> None:
        """Test that reversing traversal order is penalized."""
        p = np.array([[0, 0], [1, 0], [2, 0]])
        assert discrete_frechet(p, p[::-1]) == pytest.approx(2.0)

    def test_coupling_may_pause(self) -> None:
        """Test that one curve may wait while the other advances."""
        p = np.array([[0.0], [1.0], [2.0]])
        q = np.array([[0.0], [0.0], [1.0], [1.0], [2.0]])
        assert discrete_frechet(p, q) == 0.0

    def test_symmetric(self) -> None:
        """Test symmetry in the argument order."""
        rng = np.random.default_rng(3)
        p = rng.normal(size=(7, 2))
        q = rng.normal(size=(5, 2))
        assert discrete_frechet(p, q) == pytest.approx(discrete_frechet(q, p))

    def test_dimension_mismatch(self) -> None:
        """Test that curves in different dimensions are rejected."""
        with pytest.raises(DataError):
            discrete_frechet(np.zeros((3, 2)), np.zeros((3, 3)))


class TestFrechetDistanceEngine:
    """Tests for FrechetDistanceEngine."""

    def test_reference_values(self, reference_dataset: TrajectoryDataset) -> None:
        """Test known pairwise distances of the reference trajectories."""
        matrix = FrechetDistanceEngine().compute(reference_dataset)
        assert matrix[0, 1] == pytest.approx(16.0)
        assert matrix[0, 2] == pytest.approx(29.0)
        assert matrix[1, 2] == pytest.approx(24.0)
        assert matrix.metric == "frechet"

    def test_repeatable(self, reference_dataset: TrajectoryDataset) -> None:
        """Test that repeated runs give identical matrices."""
        engine = FrechetDistanceEngine()
        first = engine.compute(reference_dataset).to_numpy()
        second = engine.compute(reference_dataset).to_numpy()
        np.testing.assert_array_equal(first, second)

    def test_matrix_is_valid(self, shape_dataset: TrajectoryDataset) -> None:
        """Test symmetry, zero diagonal and non-negativity."""
        matrix = FrechetDistanceEngine().compute(shape_dataset)
        _assert_valid_matrix(matrix.to_numpy(), shape_dataset.n_trajectories)

    def test_zero_only_for_identical(self) -> None:
        """Test that distance is 0 only between identical trajectories."""
        dataset = TrajectoryDataset.from_arrays(
            [[1, 2, 3], [1, 2, 3], [1, 2, 3.5]], [0, 1, 2]
        )
        matrix = FrechetDistanceEngine().compute(dataset)
        assert matrix[0, 1] == 0.0
        assert matrix[0, 2] > 0.0

    def test_unsorted_times_allowed(self) -> None:
        """Test that times only need to be finite."""
        dataset = TrajectoryDataset.from_arrays([[1, 2, 3], [2, 3, 4]], [0, 2, 1])
        matrix = FrechetDistanceEngine().compute(dataset)
        assert matrix[0, 1] == pytest.approx(1.0)

    def test_workers_do_not_change_result(self, shape_dataset: TrajectoryDataset) -> None:
        """Test that threaded computation matches sequential output."""
        sequential = FrechetDistanceEngine().compute(shape_dataset)
        parallel = FrechetDistanceEngine(max_workers=3).compute(shape_dataset)
        np.testing.assert_array_equal(sequential.to_numpy(), parallel.to_numpy())

    def test_invalid_workers(self) -> None:
        """Test that max_workers must be positive."""
        with pytest.raises(ConfigError):
            FrechetDistanceEngine(max_workers=0)
