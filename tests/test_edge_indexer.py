"""Unit tests for Graph construction and induced edge sets."""

import numpy as np
import pytest
from scipy.sparse import csr_matrix

from cluster_graph import BitmapSet, Graph, SetColumn, induced_edges


class TestGraph:
    def test_ring_counts(self, ring_graph):
        assert ring_graph.n == 4
        assert ring_graph.m == 4
        assert str(ring_graph) == "Graph(n=4, m=4)"

    def test_edge_offset_table(self, ring_graph):
        acc = ring_graph.acc_num_edges
        assert acc.tolist() == [0, 2, 3, 4, 4]
        assert acc[0] == 0
        assert acc[-1] == ring_graph.m
        assert np.all(np.diff(acc) >= 0)

    def test_edge_index_numbering(self, ring_graph):
        assert ring_graph.edge_index(0, 1) == 0
        assert ring_graph.edge_index(3, 0) == 1
        assert ring_graph.edge_index(1, 2) == 2
        assert ring_graph.edge_index(2, 3) == 3
        with pytest.raises(KeyError):
            ring_graph.edge_index(0, 2)

    def test_duplicate_edges_collapse(self):
        g = Graph.from_edges([0, 1, 0], [1, 0, 1])
        assert g.m == 1

    def test_asymmetric_adjacency_rejected(self):
        A = csr_matrix(np.array([[0, 1], [0, 0]]))
        with pytest.raises(ValueError):
            Graph.from_csr(A)

    def test_adjacency_round_trip(self, bridged_graph):
        g = Graph.from_csr(bridged_graph.get_adjacency_matrix())
        assert g.m == bridged_graph.m
        assert g.acc_num_edges.tolist() == bridged_graph.acc_num_edges.tolist()


class TestInducedEdges:
    def test_full_node_set_yields_every_edge(self, bridged_graph):
        edges = induced_edges(bridged_graph, BitmapSet(range(bridged_graph.n)))
        assert edges.is_wide
        assert list(edges) == list(range(bridged_graph.m))

    def test_empty_set(self, ring_graph):
        edges = induced_edges(ring_graph, BitmapSet())
        assert len(edges) == 0
        assert edges.is_wide

    def test_single_node(self, ring_graph):
        assert len(induced_edges(ring_graph, BitmapSet([2]))) == 0

    def test_path_in_ring(self, ring_graph):
        edges = ring_graph.edgeset(BitmapSet([0, 1, 2]))
        assert list(edges) == [ring_graph.edge_index(0, 1), ring_graph.edge_index(1, 2)]

    def test_triangle(self, bridged_graph):
        edges = induced_edges(bridged_graph, BitmapSet([3, 4, 5]))
        expected = sorted(bridged_graph.edge_index(u, v) for u, v in [(3, 4), (3, 5), (4, 5)])
        assert list(edges) == expected

    def test_isolated_nodes_contribute_nothing(self, bridged_graph):
        assert len(induced_edges(bridged_graph, BitmapSet([6, 7]))) == 0

    def test_out_of_range_node(self, ring_graph):
        with pytest.raises(ValueError):
            induced_edges(ring_graph, BitmapSet([9]))

    def test_covered_edges_column(self, bridged_graph):
        nodes = SetColumn([BitmapSet([0, 1, 2]), BitmapSet([2, 3]), BitmapSet([])])
        edges = bridged_graph.covered_edges(nodes.to_series())
        assert edges.popcnt().tolist() == [3, 1, 0]
        assert all(s.is_wide for s in edges)
        assert list(edges[1]) == [bridged_graph.edge_index(2, 3)]
