"""Combination of two partitions into their finest common refinement.

Two ids share a combined label exactly when they share both their A-label
and their B-label. Combined labels are numbered by first appearance of each
observed (A, B) pair while scanning ids in order, so only observed pairs get
a label.
"""

import logging

from trajclust.errors import MismatchError
from trajclust.models.schemas import Partition

logger = logging.getLogger(__name__)


def combine_partitions(a: Partition, b: Partition) -> Partition:
    """Return the product partition of ``a`` and ``b``.

    ``combine_partitions(a, b)`` and ``combine_partitions(b, a)`` group ids
    identically; with first-appearance numbering they also carry the same
    label numbers.

    Args:
        a: First partition.
        b: Second partition over the same ids.

    Returns:
        Partition refining both inputs.

    Raises:
        MismatchError: If the partitions cover different numbers of ids.
    """
    if len(a) != len(b):
        raise MismatchError(
            f"Cannot combine partitions over different id sets: "
            f"{len(a)} ids vs {len(b)} ids"
        )

    combined = Partition.from_labels(zip(a.labels, b.labels))
    logger.debug(
        f"Combined {a.n_clusters} × {b.n_clusters} clusters into {combined.n_clusters}"
    )
    return combined


def is_refinement(fine: Partition, coarse: Partition) -> bool:
    """Check that every cluster of ``fine`` lies inside one cluster of ``coarse``."""
    if len(fine) != len(coarse):
        raise MismatchError(
            f"Partitions cover different id sets: {len(fine)} ids vs {len(coarse)} ids"
        )
    parent: dict[int, int] = {}
    for fine_label, coarse_label in zip(fine.labels, coarse.labels):
        if parent.setdefault(fine_label, coarse_label) != coarse_label:
            return False
    return True
