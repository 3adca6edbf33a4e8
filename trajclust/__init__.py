"""trajclust - clustering of short time series by shape and by location.

Trajectories sharing one time axis are compared by slope distance (shape
evolution, offset-invariant) and by discrete Fréchet distance (physical
location). Either criterion, or both combined, yields a partition; large
collections are first reduced to representative "senator" trajectories.
"""

from trajclust.clusterer import TrajectoryClusterer
from trajclust.clustering import ClusterEngine, combine_partitions
from trajclust.config import Config, load_config
from trajclust.distance import FrechetDistanceEngine, SlopeDistanceEngine
from trajclust.errors import (
    ConfigError,
    DataError,
    MismatchError,
    ShapeError,
    TrajclustError,
)
from trajclust.models.schemas import (
    ClusterKind,
    ClusterResult,
    DistanceMatrix,
    EndCluster,
    Partition,
    SenatorBundle,
    SenatorMap,
    TrajectoryDataset,
)
from trajclust.sampling import RepresentativeSampler

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "TrajectoryClusterer",
    "SlopeDistanceEngine",
    "FrechetDistanceEngine",
    "ClusterEngine",
    "combine_partitions",
    "RepresentativeSampler",
    "Config",
    "load_config",
    "TrajectoryDataset",
    "DistanceMatrix",
    "Partition",
    "SenatorMap",
    "SenatorBundle",
    "EndCluster",
    "ClusterKind",
    "ClusterResult",
    "TrajclustError",
    "DataError",
    "ShapeError",
    "ConfigError",
    "MismatchError",
]
