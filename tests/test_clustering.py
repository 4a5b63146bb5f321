"""Unit tests for packing and listing clusterings."""

import numpy as np
import pandas as pd
import pytest

from cluster_graph import (
    BitmapSet,
    Cluster,
    ClusterNotFoundError,
    ClusterSkeleton,
    Clustering,
    ClusteringSource,
    DecodeError,
    MissingColumnError,
    read_clusters,
)
from cluster_graph.clustering import TABLE_COLUMNS


class TestPacking:
    def test_singletons_tracked_separately(self, bridged_clustering):
        assert bridged_clustering.size() == 3
        assert list(bridged_clustering) == [0, 1, 2]
        assert dict(bridged_clustering.singleton_clusters) == {10: 6, 11: 7}
        assert len(bridged_clustering.cover) == 8

    def test_singletons_as_regular_clusters(self, bridged_graph, bridged_table):
        clustering = Clustering.from_dataframe(bridged_graph, bridged_table, with_singletons=False)
        assert clustering.size() == 5
        assert len(clustering.singleton_clusters) == 0
        assert 10 in clustering

    def test_source_tag(self, bridged_graph, bridged_table):
        tagged = Clustering.from_dataframe(bridged_graph, bridged_table, cpm=0.01)
        assert tagged.source == ClusteringSource.cpm(0.01)
        assert str(tagged.source) == "cpm(0.01)"
        untagged = Clustering.from_dataframe(bridged_graph, bridged_table)
        assert untagged.source.kind == "unknown"

    def test_str(self, bridged_clustering):
        assert str(bridged_clustering) == "Clustering(covered_nodes=8, size=3)"

    def test_verbose_packing_prints(self, bridged_graph, bridged_table, capsys):
        Clustering.from_dataframe(bridged_graph, bridged_table, verbose=True)
        out = capsys.readouterr().out
        assert "Packing clustering" in out
        assert "Clusters: 3" in out

    def test_missing_column(self, bridged_graph, bridged_table):
        with pytest.raises(MissingColumnError):
            Clustering.from_dataframe(bridged_graph, bridged_table.drop(columns=["mcd"]))
        with pytest.raises(MissingColumnError):
            Clustering.from_dataframe(bridged_graph, bridged_table.drop(columns=["nodes"]))

    def test_bad_bitmap(self, bridged_graph, bridged_table):
        table = bridged_table.copy()
        table.loc[0, "nodes"] = b"\x40nope"
        with pytest.raises(DecodeError):
            Clustering.from_dataframe(bridged_graph, table)

    def test_node_count_mismatch(self):
        with pytest.raises(ValueError):
            Cluster(label=0, nodes=BitmapSet([1, 2]), n=3, m=1, c=0, mcd=1)

    def test_nodes_outside_graph(self, ring_graph):
        cluster = Cluster(label=0, nodes=BitmapSet([2, 9]), n=2, m=0, c=0, mcd=0)
        with pytest.raises(ValueError):
            Clustering(ring_graph, [cluster])

    def test_duplicate_labels(self, ring_graph):
        a = Cluster(label=0, nodes=BitmapSet([0, 1]), n=2, m=1, c=2, mcd=1)
        b = Cluster(label=0, nodes=BitmapSet([2, 3]), n=2, m=1, c=2, mcd=1)
        with pytest.raises(ValueError):
            Clustering(ring_graph, [a, b])

    def test_clusters_are_read_only(self, bridged_clustering):
        with pytest.raises(TypeError):
            bridged_clustering.clusters[5] = None


class TestListing:
    def test_to_dataframe(self, bridged_clustering):
        table = bridged_clustering.to_dataframe()
        assert list(table.columns) == TABLE_COLUMNS
        assert table["label"].tolist() == [0, 1, 2]
        assert table["n"].dtype == np.uint32
        assert table["m"].tolist() == [3, 3, 1]
        assert BitmapSet.decode(table["nodes"].iloc[2]) == BitmapSet([2, 3])

    def test_read_clusters(self, bridged_graph, bridged_table):
        table = read_clusters(bridged_graph, bridged_table)
        assert table["label"].tolist() == [0, 1, 2]
        full = read_clusters(bridged_graph, bridged_table, with_singletons=False)
        assert full["label"].tolist() == [0, 1, 2, 10, 11]
        pd.testing.assert_series_equal(full["c"], pd.Series([1, 1, 4, 0, 0], dtype=np.uint64, name="c"))

    def test_skeleton_lookup(self, bridged_clustering):
        assert bridged_clustering[2] == ClusterSkeleton(n=2, m=1, c=4, mcd=1, vol=6)
        assert str(bridged_clustering.skeleton(0)) == "ClusterSkeleton(n=3, m=3, c=1)"
        with pytest.raises(ClusterNotFoundError):
            bridged_clustering.skeleton(42)

    def test_non_integer_label_not_found(self, bridged_clustering):
        with pytest.raises(ClusterNotFoundError) as excinfo:
            bridged_clustering["a"]
        assert excinfo.value.label == "a"
        with pytest.raises(ClusterNotFoundError):
            bridged_clustering[None]
        with pytest.raises(ClusterNotFoundError):
            bridged_clustering[[0, "a"]]
