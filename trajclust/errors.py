"""Exceptions raised by trajclust.

Every operation validates its inputs before doing any work, so a failure
never leaves a partially computed matrix or partition behind.
"""


class TrajclustError(Exception):
    """Base exception for trajclust errors."""

    pass


class DataError(TrajclustError):
    """Raised when a dataset is malformed (shape, non-finite values, time axis)."""

    pass


class ShapeError(TrajclustError):
    """Raised when a distance matrix is not square, symmetric or zero-diagonal."""

    pass


class ConfigError(TrajclustError):
    """Raised when a requested cluster or senator count is out of range."""

    pass


class MismatchError(TrajclustError):
    """Raised when two partitions, or a map and a partition, cover different ids."""

    pass
