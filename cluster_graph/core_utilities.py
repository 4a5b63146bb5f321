"""
Core utilities for the cluster_graph package.
Contains shared timing and batching helpers used across modules.
"""
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass


@dataclass
class OperationTiming:
    """Accumulated wall time of one named operation."""
    total: float = 0.0
    calls: int = 0
    last: float = 0.0


class PerformanceMonitor:
    """
    Wall-clock timing of named operations.

    `Clustering.from_dataframe` and `ClusteringSubset.compute_statistics` time
    themselves here; `ClusteringStats.elapsed` is read back from it.
    """

    def __init__(self, enabled=True):
        self.enabled = enabled
        self._lock = threading.Lock()
        self.reset()

    def reset(self):
        """Forget every recorded timing."""
        self.timings = {}

    @contextmanager
    def timed_operation(self, operation_name, verbose=False):
        """Time the enclosed block under `operation_name`, printing the result when verbose."""
        if not self.enabled:
            yield
            return

        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            with self._lock:
                timing = self.timings.setdefault(operation_name, OperationTiming())
                timing.total += elapsed
                timing.calls += 1
                timing.last = elapsed
            if verbose:
                print(f"  [{operation_name}] completed in {elapsed:.2f} seconds")

    def get_operation_total(self, operation):
        """Total seconds spent in `operation` since the last reset."""
        timing = self.timings.get(operation)
        return timing.total if timing is not None else 0.0

    def last_elapsed(self, operation):
        """Seconds taken by the most recent run of `operation`."""
        timing = self.timings.get(operation)
        return timing.last if timing is not None else 0.0


# Global performance monitor
perf_monitor = PerformanceMonitor(enabled=True)


def split_batches(items, n_batches):
    """
    Split a sequence into at most `n_batches` contiguous, near-equal batches.

    Parameters:
    -----------
    items : sequence
        Items to split
    n_batches : int
        Upper bound on the number of batches

    Returns:
    --------
    list of lists
        Non-empty batches whose concatenation is `items`
    """
    items = list(items)
    if not items:
        return []
    n_batches = max(1, min(int(n_batches), len(items)))
    size, extra = divmod(len(items), n_batches)
    batches = []
    start = 0
    for b in range(n_batches):
        end = start + size + (1 if b < extra else 0)
        batches.append(items[start:end])
        start = end
    return batches
