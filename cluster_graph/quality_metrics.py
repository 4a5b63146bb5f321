"""
Per-cluster quality metrics (modularity, CPM) evaluated over cluster tables.

A cluster table is a pandas DataFrame with one row per cluster and at least the
statistics columns a metric needs (`n`, `m`, `c`).
"""
import warnings

import numpy as np
import pandas as pd
from numba import njit, prange

from .errors import MissingColumnError
from .set_column import SetColumn


@njit(cache=True)
def modularity_score(m, vol, total_edges, resolution=1.0):
    """m / L - resolution * (vol / 2L)^2 for a single cluster."""
    frac = vol / (2.0 * total_edges)
    return m / total_edges - resolution * frac * frac


@njit(cache=True)
def cpm_score(m, n, resolution=1.0):
    """m - resolution * n(n-1)/2 for a single cluster; clusters with n <= 1 have no pairs."""
    pairs = 0.0
    if n > 1:
        pairs = n * (n - 1.0) / 2.0
    return m - resolution * pairs


@njit(parallel=True, cache=True, nogil=True)
def _modularity_kernel(m, c, total_edges, resolution):
    out = np.empty(m.shape[0], dtype=np.float64)
    for i in prange(m.shape[0]):
        out[i] = modularity_score(m[i], 2.0 * m[i] + c[i], total_edges, resolution)
    return out


@njit(parallel=True, cache=True, nogil=True)
def _cpm_kernel(n, m, resolution):
    out = np.empty(n.shape[0], dtype=np.float64)
    for i in prange(n.shape[0]):
        out[i] = cpm_score(m[i], n[i], resolution)
    return out


def require_column(table, name, dtype=np.float64):
    """
    Fetch a statistics column as a numpy array, failing on absence or nulls.

    Raises:
    -------
    MissingColumnError
        If the column is absent or any row holds a null.
    """
    if name not in table.columns:
        raise MissingColumnError(name)
    col = table[name]
    nulls = col.isna().to_numpy()
    if nulls.any():
        raise MissingColumnError(name, rows=np.flatnonzero(nulls).tolist())
    return col.to_numpy(dtype=dtype)


def _total_edges(graph_or_total_edges):
    total = getattr(graph_or_total_edges, "m", graph_or_total_edges)
    total = float(total)
    if total <= 0:
        raise ValueError(f"Modularity needs a graph with at least one edge, got {total:g}")
    return total


def modularity(table, graph_or_total_edges, resolution=1.0):
    """
    Modularity of every cluster in a table.

    Parameters:
    -----------
    table : pandas.DataFrame
        Cluster table with `m` and `c` columns
    graph_or_total_edges : Graph or int
        The graph the clusters live in, or its edge count
    resolution : float, default=1.0
        Resolution parameter; 1.0 gives classical modularity

    Returns:
    --------
    pandas.Series
        float64 scores aligned with `table`
    """
    m = require_column(table, "m")
    c = require_column(table, "c")
    total = _total_edges(graph_or_total_edges)
    scores = _modularity_kernel(m, c, total, float(resolution))
    return pd.Series(scores, index=table.index, name="modularity")


def cpm(table, resolution=1.0):
    """
    CPM score of every cluster in a table.

    Parameters:
    -----------
    table : pandas.DataFrame
        Cluster table with `n` and `m` columns
    resolution : float, default=1.0

    Returns:
    --------
    pandas.Series
        float64 scores aligned with `table`
    """
    n = require_column(table, "n")
    m = require_column(table, "m")
    scores = _cpm_kernel(n, m, float(resolution))
    return pd.Series(scores, index=table.index, name="cpm")


def covered_num_nodes(table, disjoint=False):
    """
    Number of distinct nodes touched by the clusters of a table.

    Uses the union of the `nodes` column when it exists, which is exact under
    overlap. Without it, falls back to summing `n`, which is only exact when the
    clusters are disjoint; pass ``disjoint=True`` to assert that and silence
    the warning.

    Returns:
    --------
    int
    """
    if "nodes" in table.columns:
        return len(SetColumn.from_series(table["nodes"]).union_set())

    n = require_column(table, "n")
    if not disjoint:
        warnings.warn(
            "covered_num_nodes: no 'nodes' column, summing 'n' instead; "
            "the result over-counts if clusters overlap",
            RuntimeWarning,
            stacklevel=2,
        )
    return int(n.sum())
