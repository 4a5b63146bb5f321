"""Unit tests for modularity, CPM and covered-node counting."""

import warnings

import numpy as np
import pandas as pd
import pytest

from cluster_graph import (
    MissingColumnError,
    covered_num_nodes,
    cpm,
    cpm_score,
    modularity,
    modularity_score,
)
from tests.conftest import make_table


class TestScalarFormulas:
    def test_whole_ring_has_zero_modularity(self):
        assert modularity_score(4, 8, 4, 1.0) == pytest.approx(0.0)

    def test_modularity_resolution(self):
        # 3/7 - 0.5 * (7/14)^2
        assert modularity_score(3, 7, 7, 0.5) == pytest.approx(3 / 7 - 0.125)

    def test_cpm_four_nodes(self):
        assert cpm_score(3, 4, 1.0) == pytest.approx(-3.0)

    @pytest.mark.parametrize("n", [0, 1])
    def test_cpm_degenerate_sizes(self, n):
        assert cpm_score(0, n, 1.0) == 0.0
        assert cpm_score(2, n, 5.0) == 2.0


class TestTableMetrics:
    def test_ring_single_cluster(self, ring_graph):
        table = make_table([(0, [0, 1, 2, 3], 4, 4, 0, 2)])
        scores = modularity(table, ring_graph)
        assert scores.name == "modularity"
        assert scores.iloc[0] == pytest.approx(0.0)

    def test_modularity_per_row(self, bridged_graph, bridged_table):
        scores = modularity(bridged_table, bridged_graph)
        assert len(scores) == len(bridged_table)
        assert scores.iloc[0] == pytest.approx(3 / 7 - (7 / 14) ** 2)
        assert scores.iloc[2] == pytest.approx(1 / 7 - (6 / 14) ** 2)
        assert scores.iloc[3] == pytest.approx(0.0)

    def test_modularity_accepts_edge_count(self, bridged_graph, bridged_table):
        by_graph = modularity(bridged_table, bridged_graph, resolution=2.0)
        by_count = modularity(bridged_table, 7, resolution=2.0)
        pd.testing.assert_series_equal(by_graph, by_count)

    def test_cpm_per_row(self, bridged_table):
        scores = cpm(bridged_table, resolution=0.5)
        assert scores.tolist() == pytest.approx([1.5, 1.5, 0.5, 0.0, 0.0])

    def test_result_keeps_table_index(self):
        table = pd.DataFrame({"n": [4, 2], "m": [3, 1]}, index=["a", "b"])
        scores = cpm(table)
        assert scores.index.tolist() == ["a", "b"]
        assert scores.dtype == np.float64

    def test_missing_column(self):
        table = pd.DataFrame({"n": [4], "m": [3]})
        with pytest.raises(MissingColumnError) as excinfo:
            modularity(table, 10)
        assert excinfo.value.column == "c"

    def test_null_value_fails_fast(self):
        table = pd.DataFrame({"n": [4, 5, 6], "m": [3.0, None, 1.0]})
        with pytest.raises(MissingColumnError) as excinfo:
            cpm(table)
        assert excinfo.value.column == "m"
        assert excinfo.value.rows == [1]

    def test_modularity_needs_edges(self):
        table = pd.DataFrame({"m": [0], "c": [0]})
        with pytest.raises(ValueError):
            modularity(table, 0)


class TestCoveredNumNodes:
    def test_bitmap_path_counts_overlap_once(self, bridged_table):
        assert covered_num_nodes(bridged_table) == 8

    def test_scalar_fallback_warns(self, bridged_table):
        table = bridged_table.drop(columns=["nodes"])
        with pytest.warns(RuntimeWarning):
            total = covered_num_nodes(table)
        # over-counts the two nodes shared by clusters 0/1 and 2
        assert total == 10

    def test_scalar_fallback_for_disjoint(self):
        table = pd.DataFrame({"n": [3, 4, 1]})
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert covered_num_nodes(table, disjoint=True) == 8

    def test_nothing_to_count(self):
        with pytest.raises(MissingColumnError):
            covered_num_nodes(pd.DataFrame({"m": [1]}))
