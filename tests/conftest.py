"""Shared pytest fixtures for trajclust tests."""

import matplotlib
import numpy as np
import pytest

matplotlib.use("Agg")

from trajclust.config import Config
from trajclust.models.schemas import TrajectoryDataset


@pytest.fixture
def sample_config() -> Config:
    """Create a sample configuration."""
    return Config()


@pytest.fixture
def reference_dataset() -> TrajectoryDataset:
    """Three trajectories: a and c are parallel, b is elsewhere.

    Fréchet distances: a-b 16, a-c 29, b-c 24. Slope distance a-c is 0.
    """
    return TrajectoryDataset.from_arrays(
        [
            [10, 15, 17, 25],
            [5, 8, 6, 9],
            [-19, -14, -12, -4],
        ],
        [1, 2, 3, 4],
        names=["a", "b", "c"],
    )


@pytest.fixture
def shape_dataset() -> TrajectoryDataset:
    """Nine trajectories in three slope families, each at three offsets.

    Rows 0-2 rise, rows 3-5 fall, rows 6-8 peak in the middle.
    """
    times = np.array([0.0, 1.0, 2.0, 3.0, 4.0])
    rising = np.array([0.0, 2.0, 4.0, 6.0, 8.0])
    falling = -rising
    peaked = np.array([0.0, 5.0, 8.0, 5.0, 0.0])
    rows = []
    for profile in (rising, falling, peaked):
        for offset in (0.0, 50.0, -30.0):
            rows.append(profile + offset)
    names = [f"{family}_{i}" for family in ("rise", "fall", "peak") for i in range(3)]
    return TrajectoryDataset.from_arrays(rows, times, names=names)


@pytest.fixture
def large_dataset() -> TrajectoryDataset:
    """240 noisy trajectories around four well separated levels."""
    rng = np.random.default_rng(12345)
    times = np.linspace(0.0, 10.0, 6)
    levels = [0.0, 40.0, 80.0, 120.0]
    rows = []
    for level in levels:
        base = level + np.sin(times / 2.0) * 3.0
        rows.append(base + rng.normal(scale=1.0, size=(60, len(times))))
    return TrajectoryDataset.from_arrays(np.vstack(rows), times)
