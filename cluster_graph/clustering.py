"""
Clustering - an immutable, possibly overlapping labelled clustering of a Graph.

Per-cluster statistics (n, m, c, mcd) are consumed precomputed; this module
packs them together with the member sets and hands out subset views.
"""
from collections.abc import Iterable, Mapping
from types import MappingProxyType

import numpy as np
import pandas as pd

from .bitmap_set import BitmapSet, union_all
from .cluster import Cluster, ClusteringSource, SINGLETON_SKELETON
from .core_utilities import perf_monitor
from .errors import ClusterNotFoundError, FilterError, MissingColumnError
from .quality_metrics import require_column
from .set_column import SetColumn
from .subset import ClusteringSubset

TABLE_COLUMNS = ["label", "n", "m", "c", "mcd", "nodes"]


class Clustering:
    """
    Labelled clusters over one graph, plus separately tracked singleton clusters.

    Parameters:
    -----------
    graph : Graph
        The graph the clusters live in. Shared, never copied.
    clusters : iterable of Cluster or mapping of label -> Cluster
        Regular clusters. Labels must be unique.
    singleton_clusters : mapping of label -> node id, optional
        One-node clusters tracked outside the main mapping.
    source : ClusteringSource, optional
        Provenance tag. Defaults to unknown.
    """

    def __init__(self, graph, clusters, singleton_clusters=None, source=None):
        if isinstance(clusters, Mapping):
            clusters = clusters.values()

        by_label = {}
        for cluster in clusters:
            if cluster.label in by_label:
                raise ValueError(f"Duplicate cluster label {cluster.label}")
            self._check_nodes(graph, cluster.label, cluster.nodes)
            by_label[int(cluster.label)] = cluster

        singletons = {int(k): int(v) for k, v in (singleton_clusters or {}).items()}
        clashing = sorted(set(singletons) & set(by_label))
        if clashing:
            raise ValueError(f"Singleton labels also used by regular clusters: {clashing[:5]}")
        singleton_nodes = BitmapSet(list(singletons.values()))
        self._check_nodes(graph, "singletons", singleton_nodes)

        self.graph = graph
        self.clusters = MappingProxyType(dict(sorted(by_label.items())))
        self.singleton_clusters = MappingProxyType(dict(sorted(singletons.items())))
        self.singleton_nodes = singleton_nodes
        self.cover = union_all([c.nodes for c in self.clusters.values()] + [singleton_nodes])
        self.source = source if source is not None else ClusteringSource.unknown()

    @staticmethod
    def _check_nodes(graph, label, nodes):
        if len(nodes) and nodes.to_array()[-1] >= graph.n:
            raise ValueError(f"Cluster {label} has node ids outside [0, {graph.n - 1}]")

    @classmethod
    def from_dataframe(cls, graph, table, cpm=None, with_singletons=True, verbose=False):
        """
        Pack a cluster table into a Clustering.

        Parameters:
        -----------
        graph : Graph
        table : pandas.DataFrame
            Columns `label, n, m, c, mcd, nodes`; `nodes` holds encoded bitmaps
        cpm : float, optional
            Tag the clustering as CPM-derived at this resolution
        with_singletons : bool, default=True
            Track one-node clusters separately instead of as regular entries
        verbose : bool, default=False
            Print progress and timing

        Raises:
        -------
        MissingColumnError
            If a required column is absent or has nulls
        DecodeError
            If a `nodes` cell is not a valid encoded bitmap
        """
        if verbose:
            print(f"Packing clustering with {len(table):,} rows...")

        with perf_monitor.timed_operation("Clustering packing", verbose=verbose):
            columns = {name: require_column(table, name, dtype=np.int64) for name in TABLE_COLUMNS[:-1]}
            if "nodes" not in table.columns:
                raise MissingColumnError("nodes")
            node_sets = SetColumn.from_series(table["nodes"])

            clusters = []
            singletons = {}
            rows = zip(columns["label"], columns["n"], columns["m"], columns["c"], columns["mcd"], node_sets)
            for label, n, m, c, mcd, nodes in rows:
                if with_singletons and n == 1 and len(nodes) == 1:
                    singletons[int(label)] = int(next(iter(nodes)))
                    continue
                clusters.append(Cluster(label=int(label), nodes=nodes, n=int(n), m=int(m), c=int(c), mcd=int(mcd)))

            source = ClusteringSource.cpm(cpm) if cpm is not None else ClusteringSource.unknown()
            clustering = cls(graph, clusters, singleton_clusters=singletons, source=source)

        if verbose:
            print(f"  Clusters: {clustering.size():,}")
            print(f"  Singletons: {len(clustering.singleton_clusters):,}")
            print(f"  Covered nodes: {len(clustering.cover):,} / {graph.n:,}")
        return clustering

    def to_dataframe(self, labels=None):
        """
        The canonical cluster listing table.

        Parameters:
        -----------
        labels : iterable of int, optional
            Restrict to these labels (in the given order). Defaults to every
            regular cluster; singleton clusters are not listed.

        Returns:
        --------
        pandas.DataFrame
            Columns `label, n, m, c, mcd, nodes`
        """
        if labels is None:
            labels = list(self.clusters.keys())
        clusters = [self._cluster(label) for label in labels]
        return pd.DataFrame({
            "label": np.array([cl.label for cl in clusters], dtype=np.int64),
            "n": np.array([cl.n for cl in clusters], dtype=np.uint32),
            "m": np.array([cl.m for cl in clusters], dtype=np.uint64),
            "c": np.array([cl.c for cl in clusters], dtype=np.uint64),
            "mcd": np.array([cl.mcd for cl in clusters], dtype=np.uint64),
            "nodes": SetColumn([cl.nodes for cl in clusters]).to_series(),
        }, columns=TABLE_COLUMNS)

    def _cluster(self, label):
        try:
            return self.clusters[int(label)]
        except (KeyError, TypeError, ValueError):
            raise ClusterNotFoundError(label) from None

    def skeleton(self, label):
        """Statistics of one regular cluster; raises ClusterNotFoundError if absent."""
        return self._cluster(label).skeleton()

    def __getitem__(self, labels):
        """
        ``clustering[label]`` returns a ClusterSkeleton;
        ``clustering[[l1, l2, ...]]`` returns a ClusteringSubset of those labels.
        """
        if isinstance(labels, (str, bytes)) or not isinstance(labels, Iterable):
            return self.skeleton(labels)
        return ClusteringSubset(self, labels, has_singletons=False)

    def filter(self, predicate):
        """
        Select the clusters whose skeleton satisfies `predicate`.

        The predicate is also probed once with the singleton skeleton
        (n=1, m=0, c=0, mcd=0, vol=0) to decide whether singleton clusters
        belong to the view.

        Parameters:
        -----------
        predicate : callable
            ``(ClusterSkeleton) -> bool``

        Raises:
        -------
        FilterError
            If the predicate raises for any cluster or for the singleton probe
        """
        selected = []
        for label, cluster in self.clusters.items():
            try:
                keep = bool(predicate(cluster.skeleton()))
            except Exception as e:
                raise FilterError(label, e) from e
            if keep:
                selected.append(label)

        try:
            has_singletons = bool(predicate(SINGLETON_SKELETON))
        except Exception as e:
            raise FilterError(None, e) from e

        return ClusteringSubset(self, selected, has_singletons=has_singletons)

    def full_view(self):
        """A view selecting every regular cluster and the singletons."""
        return ClusteringSubset(self, self.clusters.keys(), has_singletons=True)

    def size(self):
        return len(self.clusters)

    def __len__(self):
        return len(self.clusters)

    def __contains__(self, label):
        return label in self.clusters

    def __iter__(self):
        return iter(self.clusters)

    def __str__(self):
        return f"Clustering(covered_nodes={len(self.cover)}, size={len(self.clusters)})"

    def __repr__(self):
        return self.__str__()


def read_clusters(graph, table, with_singletons=True):
    """
    Normalize a cluster table through a Clustering and list it back.

    With ``with_singletons=True`` one-node clusters are tracked separately and
    therefore left out of the returned listing.
    """
    return Clustering.from_dataframe(graph, table, with_singletons=with_singletons).to_dataframe()
