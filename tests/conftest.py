"""Shared graphs and cluster tables for the cluster_graph tests."""

import pandas as pd
import pytest

from cluster_graph import BitmapSet, Clustering, Graph, SetColumn


def make_table(rows):
    """Build a cluster table from (label, nodes, n, m, c, mcd) tuples."""
    return pd.DataFrame({
        "label": [r[0] for r in rows],
        "n": [r[2] for r in rows],
        "m": [r[3] for r in rows],
        "c": [r[4] for r in rows],
        "mcd": [r[5] for r in rows],
        "nodes": SetColumn([BitmapSet(r[1]) for r in rows]).to_series(),
    })


@pytest.fixture
def ring_graph():
    """4-node ring 0-1-2-3-0."""
    return Graph.from_edges([0, 1, 2, 3], [1, 2, 3, 0])


@pytest.fixture
def bridged_graph():
    """Triangles {0,1,2} and {3,4,5} joined by the bridge 2-3, plus isolated nodes 6 and 7."""
    sources = [0, 0, 1, 3, 3, 4, 2]
    targets = [1, 2, 2, 4, 5, 5, 3]
    return Graph.from_edges(sources, targets, n_nodes=8)


@pytest.fixture
def bridged_table():
    """Both triangles, an overlapping cluster on the bridge, and two singletons."""
    return make_table([
        (0, [0, 1, 2], 3, 3, 1, 2),
        (1, [3, 4, 5], 3, 3, 1, 2),
        (2, [2, 3], 2, 1, 4, 1),
        (10, [6], 1, 0, 0, 0),
        (11, [7], 1, 0, 0, 0),
    ])


@pytest.fixture
def bridged_clustering(bridged_graph, bridged_table):
    return Clustering.from_dataframe(bridged_graph, bridged_table)
