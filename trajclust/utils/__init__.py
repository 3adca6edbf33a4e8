"""Utility helpers for trajclust."""

from trajclust.utils.parallel import (
    ParallelProcessor,
    ProcessingResult,
    batch_slices,
    parallel_map,
)

__all__ = [
    "ParallelProcessor",
    "ProcessingResult",
    "parallel_map",
    "batch_slices",
]
