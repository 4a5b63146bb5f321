"""
Process-wide worker pool configuration.

The core holds exactly one piece of global state: how many workers heavy
operations may use. `configure` sets it for both the numba `prange` kernels and
the thread pool that runs column-wide bitmap unions. Call it once at start-up;
calling it again only affects work scheduled afterwards.
"""
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass

import numba

_lock = threading.Lock()
_parallelism = None
_pool = None
# pool -> number of parallel_map calls currently running on it
_leases = {}


@dataclass(frozen=True)
class ParallelConfig:
    parallelism: int        # worker threads for the bitmap-union pool
    numba_threads: int      # threads used by prange kernels (capped by NUMBA_NUM_THREADS)


def _default_parallelism():
    return max(1, os.cpu_count() or 1)


def configure(parallelism=None):
    """
    Set the number of workers used by heavy computations.

    A pool replaced here keeps serving the calls that already hold it and is
    shut down once the last of them returns.

    Parameters:
    -----------
    parallelism : int, optional
        Worker count. None uses every logical CPU.

    Returns:
    --------
    ParallelConfig
        The configuration now in effect.
    """
    global _parallelism, _pool

    if parallelism is None:
        parallelism = _default_parallelism()
    parallelism = int(parallelism)
    if parallelism < 1:
        raise ValueError(f"parallelism must be at least 1, got {parallelism}")

    with _lock:
        if _pool is not None and _parallelism == parallelism:
            return _current_config()
        retired = _pool
        _pool = ThreadPoolExecutor(max_workers=parallelism, thread_name_prefix="cluster_graph")
        _parallelism = parallelism
        numba.set_num_threads(min(parallelism, numba.config.NUMBA_NUM_THREADS))
        config = _current_config()
        # A leased pool is shut down by its last user instead
        idle = retired is not None and retired not in _leases

    if idle:
        retired.shutdown(wait=False)
    return config


def _current_config():
    return ParallelConfig(parallelism=_parallelism, numba_threads=numba.get_num_threads())


def get_parallelism():
    """Return the configured worker count, configuring defaults on first use."""
    if _parallelism is None:
        configure()
    return _parallelism


def get_executor():
    """Return the current shared thread pool, configuring defaults on first use."""
    get_parallelism()
    with _lock:
        return _pool


@contextmanager
def _leased_pool():
    """Hold the current pool so a concurrent `configure` cannot shut it down under us."""
    get_parallelism()
    with _lock:
        pool = _pool
        _leases[pool] = _leases.get(pool, 0) + 1
    try:
        yield pool
    finally:
        with _lock:
            _leases[pool] -= 1
            retired = _leases[pool] == 0 and pool is not _pool
            if _leases[pool] == 0:
                del _leases[pool]
        if retired:
            pool.shutdown(wait=False)


def parallel_map(func, items):
    """Map `func` over `items` on the shared pool, preserving input order."""
    items = list(items)
    if len(items) <= 1 or get_parallelism() == 1:
        return [func(item) for item in items]
    with _leased_pool() as pool:
        return list(pool.map(func, items))
