"""Parallel processing utilities for trajclust.

Pairwise distance work items are independent, so they can be fanned out over
a thread pool. Results are always returned in submission order, which keeps
the numeric output identical to a sequential run.
"""

import logging
import threading
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class ProcessingResult(Generic[R]):
    """Result of processing a single item."""

    index: int
    result: R | None
    error: Exception | None
    success: bool


class ParallelProcessor(Generic[T, R]):
    """Process items in parallel with concurrency control.

    With ``fail_fast`` (the default) the first failing item, in submission
    order, re-raises its exception and pending items are cancelled. Otherwise
    failures are reported in the returned ProcessingResult list.
    """

    def __init__(
        self,
        process_fn: Callable[[T], R],
        max_concurrency: int = 1,
        on_progress: Callable[[int, int], None] | None = None,
        fail_fast: bool = True,
    ) -> None:
        """Initialize parallel processor.

        Args:
            process_fn: Function to process each item.
            max_concurrency: Maximum number of concurrent workers. 1 runs inline.
            on_progress: Callback for progress updates (completed, total).
            fail_fast: Re-raise the first error instead of collecting it.
        """
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self.process_fn = process_fn
        self.max_concurrency = max_concurrency
        self.on_progress = on_progress
        self.fail_fast = fail_fast

    def process(self, items: list[T]) -> list[ProcessingResult[R]]:
        """Process all items.

        Args:
            items: List of items to process.

        Returns:
            List of processing results in original order.
        """
        total = len(items)
        completed = 0
        lock = threading.Lock()

        def process_with_index(index: int, item: T) -> ProcessingResult[R]:
            nonlocal completed
            try:
                processing_result = ProcessingResult(
                    index=index,
                    result=self.process_fn(item),
                    error=None,
                    success=True,
                )
            except Exception as e:
                if self.fail_fast:
                    raise
                logger.error(f"Error processing item {index}: {e}")
                processing_result = ProcessingResult(
                    index=index, result=None, error=e, success=False
                )

            with lock:
                completed += 1
                done = completed
            if self.on_progress:
                self.on_progress(done, total)

            return processing_result

        if self.max_concurrency == 1 or total <= 1:
            return [process_with_index(i, item) for i, item in enumerate(items)]

        with ThreadPoolExecutor(max_workers=self.max_concurrency) as executor:
            futures = [
                executor.submit(process_with_index, i, item)
                for i, item in enumerate(items)
            ]
            try:
                return [future.result() for future in futures]
            except Exception:
                executor.shutdown(wait=True, cancel_futures=True)
                raise


def parallel_map(
    items: list[T],
    process_fn: Callable[[T], R],
    max_concurrency: int = 1,
    on_progress: Callable[[int, int], None] | None = None,
) -> list[R]:
    """Apply ``process_fn`` to every item and return results in order.

    Any worker exception propagates to the caller.
    """
    processor: ParallelProcessor[T, R] = ParallelProcessor(
        process_fn=process_fn,
        max_concurrency=max_concurrency,
        on_progress=on_progress,
    )
    return [r.result for r in processor.process(items)]  # type: ignore[misc]


def batch_slices(total: int, batch_size: int) -> Iterator[slice]:
    """Yield consecutive slices covering ``range(total)`` in blocks of ``batch_size``."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    for start in range(0, total, batch_size):
        yield slice(start, min(start + batch_size, total))
