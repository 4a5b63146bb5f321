"""
Edge induction: map a node subset to the indices of the undirected edges it induces.

Every undirected edge {u, v} with u < v is owned by u. Its global index is
acc_num_edges[u] plus the zero-based rank of v among u's neighbors larger than u.
"""
import numpy as np
from numba import njit, prange

from .bitmap_set import BitmapSet


@njit(cache=True, nogil=True)
def accumulate_upper_degrees(indptr, indices):
    """
    Running count of canonical (u < v) edges per node.

    Returns an int64 array of length n + 1 with out[0] == 0 and out[n] == m.
    """
    n = indptr.shape[0] - 1
    acc = np.zeros(n + 1, dtype=np.int64)
    for u in range(n):
        upper = 0
        for p in range(indptr[u], indptr[u + 1]):
            if indices[p] > u:
                upper += 1
        acc[u + 1] = acc[u] + upper
    return acc


@njit(parallel=True, cache=True, nogil=True)
def _induced_edge_indices(indptr, indices, acc_num_edges, members, mask):
    k = members.shape[0]

    # Pass 1: how many induced edges each member owns
    counts = np.zeros(k + 1, dtype=np.int64)
    for i in prange(k):
        u = members[i]
        c = 0
        for p in range(indptr[u], indptr[u + 1]):
            v = indices[p]
            if v > u and mask[v]:
                c += 1
        counts[i + 1] = c
    starts = np.cumsum(counts)

    # Pass 2: write global indices; members ascend, so the output is sorted
    out = np.empty(starts[k], dtype=np.int64)
    for i in prange(k):
        u = members[i]
        pos = starts[i]
        rank = 0
        for p in range(indptr[u], indptr[u + 1]):
            v = indices[p]
            if v > u:
                if mask[v]:
                    out[pos] = acc_num_edges[u] + rank
                    pos += 1
                rank += 1
    return out


def induced_edge_array(indptr, indices, acc_num_edges, nodes):
    """
    Sorted int64 edge indices induced by `nodes` on a CSR adjacency.

    Parameters:
    -----------
    indptr, indices : numpy.ndarray
        CSR structure with each row sorted ascending
    acc_num_edges : numpy.ndarray
        Edge offset table of length n + 1
    nodes : BitmapSet
        Node subset

    Returns:
    --------
    numpy.ndarray
        Edge indices whose both endpoints are in `nodes`
    """
    n = indptr.shape[0] - 1
    members = nodes.to_array().astype(np.int64)
    if members.size == 0:
        return np.empty(0, dtype=np.int64)
    if members[-1] >= n:
        raise ValueError(f"Node id {members[-1]} out of range [0, {n - 1}]")

    mask = np.zeros(n, dtype=np.bool_)
    mask[members] = True
    return _induced_edge_indices(indptr, indices, acc_num_edges, members, mask)


def induced_edges(graph, nodes):
    """
    Induced edge set of a node subset.

    Parameters:
    -----------
    graph : Graph
        Graph providing the CSR adjacency and its edge offset table
    nodes : BitmapSet
        Node subset

    Returns:
    --------
    BitmapSet
        Always the wide (64-bit) representation, even when empty
    """
    edges = induced_edge_array(graph.indptr, graph.indices, graph.acc_num_edges, nodes)
    return BitmapSet(edges, wide=True)
