"""Distance-matrix clustering and partition combination."""

from trajclust.clustering.combiner import combine_partitions, is_refinement
from trajclust.clustering.engine import LINKAGES, ClusterEngine, Linkage

__all__ = [
    "ClusterEngine",
    "Linkage",
    "LINKAGES",
    "combine_partitions",
    "is_refinement",
]
