"""
Graph - immutable undirected graph in CSR form with a canonical edge numbering.
"""
import numpy as np
from scipy import sparse
from scipy.sparse import csr_matrix, coo_matrix

from .edge_indexer import accumulate_upper_degrees, induced_edges
from .set_column import SetColumn, as_set_column


class Graph:
    """
    Undirected graph whose adjacency lists are the sorted rows of a CSR matrix.

    Node ids run 0..n-1. Each undirected edge {u, v} with u < v gets the
    global index ``acc_num_edges[u] + rank`` where ``rank`` counts u's
    neighbors larger than u that come before v.

    Parameters:
    -----------
    adjacency : scipy.sparse matrix
        Square, symmetric adjacency matrix. Only the sparsity pattern is used;
        weights are ignored.
    """

    def __init__(self, adjacency):
        if adjacency.shape[0] != adjacency.shape[1]:
            raise ValueError(f"Adjacency must be square, got shape {adjacency.shape}")

        A = csr_matrix(adjacency, copy=True)
        A.sum_duplicates()
        A.eliminate_zeros()
        A.data = np.ones_like(A.data, dtype=np.int8)
        A.sort_indices()
        if (A != A.T).nnz != 0:
            raise ValueError("Adjacency must be symmetric")

        self.n_nodes = A.shape[0]
        self.indptr = A.indptr.astype(np.int64)
        self.indices = A.indices.astype(np.int64)
        self.indptr.setflags(write=False)
        self.indices.setflags(write=False)

        self.acc_num_edges = accumulate_upper_degrees(self.indptr, self.indices)
        self.acc_num_edges.setflags(write=False)
        self.n_edges = int(self.acc_num_edges[-1])

    @classmethod
    def from_csr(cls, matrix):
        """Build a graph from an existing symmetric sparse matrix."""
        return cls(matrix)

    @classmethod
    def from_edges(cls, sources, targets, n_nodes=None):
        """
        Build a graph from an undirected edge list.

        Parameters:
        -----------
        sources, targets : array-like
            Edge endpoints. Each pair is added in both directions; duplicates collapse.
        n_nodes : int, optional
            Number of nodes. Defaults to one more than the largest endpoint.
        """
        sources = np.asarray(sources, dtype=np.int64).ravel()
        targets = np.asarray(targets, dtype=np.int64).ravel()
        if sources.shape != targets.shape:
            raise ValueError("sources and targets must have the same length")
        if sources.size and min(sources.min(), targets.min()) < 0:
            raise ValueError("Node ids must be non-negative")

        if n_nodes is None:
            n_nodes = int(max(sources.max(), targets.max())) + 1 if sources.size else 0

        rows = np.concatenate([sources, targets])
        cols = np.concatenate([targets, sources])
        data = np.ones(rows.size, dtype=np.int32)
        A = coo_matrix((data, (rows, cols)), shape=(n_nodes, n_nodes)).tocsr()
        return cls(A)

    @property
    def n(self):
        return self.n_nodes

    @property
    def m(self):
        return self.n_edges

    def get_neighbors(self, node_idx):
        """Sorted neighbor ids of a node."""
        if node_idx < 0 or node_idx >= self.n_nodes:
            raise ValueError(f"Node index {node_idx} out of range [0, {self.n_nodes-1}]")
        return self.indices[self.indptr[node_idx]:self.indptr[node_idx + 1]]

    def edge_index(self, u, v):
        """
        Global index of the undirected edge {u, v}.

        Raises:
        -------
        KeyError
            If the edge is not in the graph.
        """
        u, v = (u, v) if u < v else (v, u)
        row = self.get_neighbors(u)
        upper = row[np.searchsorted(row, u, side="right"):]
        rank = np.searchsorted(upper, v)
        if u == v or rank >= upper.size or upper[rank] != v:
            raise KeyError(f"Edge ({u}, {v}) not in graph")
        return int(self.acc_num_edges[u] + rank)

    def get_adjacency_matrix(self):
        """Rebuild the CSR adjacency matrix (pattern only)."""
        data = np.ones(self.indices.size, dtype=np.int8)
        return sparse.csr_matrix((data, self.indices, self.indptr), shape=(self.n_nodes, self.n_nodes))

    def edgeset(self, nodes):
        """Induced edge set of a node subset, as a wide BitmapSet."""
        return induced_edges(self, nodes)

    def covered_edges(self, column):
        """
        Induced edge set of every row of a node set column.

        Parameters:
        -----------
        column : SetColumn or pandas.Series
            Node sets, or their encoded representation

        Returns:
        --------
        SetColumn
            One wide edge set per input row
        """
        node_sets = as_set_column(column)
        return SetColumn([induced_edges(self, s) for s in node_sets], name="edges")

    def __str__(self):
        return f"Graph(n={self.n_nodes}, m={self.n_edges})"

    def __repr__(self):
        return self.__str__()
