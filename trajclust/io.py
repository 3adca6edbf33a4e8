"""CSV import and export for trajclust.

Input layout: the first column holds trajectory names, every other column
header is a numeric time point, and each row holds one trajectory.

    name,0,1,2.5,4
    gene_a,10,15,17,25
    gene_b,5,8,6,9
"""

import logging
from pathlib import Path

import numpy as np
import pandas as pd

from trajclust.errors import DataError
from trajclust.models.schemas import ClusterResult, DistanceMatrix, TrajectoryDataset

logger = logging.getLogger(__name__)


def load_csv(path: str | Path) -> TrajectoryDataset:
    """Load a trajectory matrix from CSV.

    Args:
        path: CSV file in the layout described above.

    Returns:
        Validated TrajectoryDataset.

    Raises:
        DataError: If headers are not numeric times or cells are not numeric.
    """
    path = Path(path)
    # Read everything as text so duplicate time headers are not renamed by pandas
    raw = pd.read_csv(path, header=None, dtype=str, keep_default_na=False)
    if raw.shape[0] < 2 or raw.shape[1] < 2:
        raise DataError(
            f"{path.name} needs a header row, a name column and at least one "
            f"trajectory, got shape {raw.shape}"
        )

    try:
        times = np.array([float(column) for column in raw.iloc[0, 1:]], dtype=np.float64)
    except ValueError as e:
        raise DataError(
            f"Column headers of {path.name} must be numeric time points: {e}"
        ) from e

    names = [str(name) for name in raw.iloc[1:, 0]]
    values = raw.iloc[1:, 1:].apply(pd.to_numeric, errors="coerce")
    missing = values.isna().any(axis=1).to_numpy()
    if missing.any():
        bad_rows = [name for name, bad in zip(names, missing) if bad]
        raise DataError(
            f"{path.name} has missing or non-numeric values in rows {bad_rows[:10]}"
        )

    logger.info(f"Loaded {len(names)} trajectories × {len(times)} time points from {path}")
    return TrajectoryDataset.from_arrays(
        values.to_numpy(dtype=np.float64), times, names=names
    )


def export_partition(result: ClusterResult, output_path: str | Path) -> None:
    """Write one row per trajectory: name, cluster (and senator when present)."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, list] = {
        "name": list(result.dataset.names),
        "cluster": list(result.partition.labels),
    }
    if result.end_cluster is not None:
        data["senator"] = list(result.end_cluster.senator_map.assignments)

    pd.DataFrame(data).to_csv(output_path, index=False)


def export_distance(
    distance: DistanceMatrix,
    output_path: str | Path,
    names: list[str] | tuple[str, ...] | None = None,
) -> None:
    """Write the square distance matrix with row and column labels."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    labels = list(names) if names is not None else [str(i) for i in range(distance.size)]
    pd.DataFrame(distance.to_numpy(), index=labels, columns=labels).to_csv(output_path)
