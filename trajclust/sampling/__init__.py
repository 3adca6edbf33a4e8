"""Senator sampling for clustering large trajectory collections."""

from trajclust.sampling.senators import RepresentativeSampler

__all__ = ["RepresentativeSampler"]
