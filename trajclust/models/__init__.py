"""Data records shared across trajclust stages."""

from trajclust.models.schemas import (
    ClusterKind,
    ClusterResult,
    ClusterSummary,
    DistanceMatrix,
    EndCluster,
    Partition,
    SenatorBundle,
    SenatorMap,
    TrajectoryDataset,
)

__all__ = [
    "TrajectoryDataset",
    "DistanceMatrix",
    "Partition",
    "SenatorMap",
    "SenatorBundle",
    "EndCluster",
    "ClusterKind",
    "ClusterResult",
    "ClusterSummary",
]
