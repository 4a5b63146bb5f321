"""
ClusteringSubset - a read-only selection of clusters from a Clustering.

Covered nodes, per-node multiplicities and the overlap flag are computed once
at construction; every query afterwards reads those cached values.
"""
from dataclasses import dataclass, field
from typing import Dict

import numpy as np

from .bitmap_set import union_all
from .cluster import SINGLETON_SKELETON, ClusterSkeleton
from .core_utilities import perf_monitor
from .distribution import SummarizedDistribution
from .edge_indexer import induced_edges
from .errors import ClusterNotFoundError
from .set_column import SetColumn

STAT_FIELDS = ("n", "m", "c", "mcd", "vol")


@dataclass(frozen=True)
class ClusteringStats:
    """Aggregate statistics of a clustering subset."""
    num_clusters: int
    covered_nodes: int
    covered_edges: int
    total_nodes: int
    total_edges: int
    distributions: Dict[str, SummarizedDistribution] = field(default_factory=dict)
    elapsed: float = 0.0    # wall time of the computation, in seconds


class ClusteringSubset:
    """
    A selection of clusters from a parent Clustering.

    Parameters:
    -----------
    clustering : Clustering
        Parent clustering. Held by reference and never modified.
    cluster_ids : iterable of int
        Labels of the selected regular clusters. Every label must exist in the parent.
    has_singletons : bool, default=False
        Whether the parent's singleton clusters belong to the view.
    """

    def __init__(self, clustering, cluster_ids, has_singletons=False):
        clusters = clustering.clusters
        ids = set()
        for label in cluster_ids:
            try:
                ids.add(int(label))
            except (TypeError, ValueError):
                raise ClusterNotFoundError(label) from None
        ids = sorted(ids)
        for label in ids:
            if label not in clusters:
                raise ClusterNotFoundError(label)

        self.clustering = clustering
        self.graph = clustering.graph
        self.cluster_ids = tuple(ids)
        self.has_singletons = bool(has_singletons)

        member_sets = [clusters[label].nodes for label in ids]
        multiplicity = np.zeros(self.graph.n, dtype=np.uint32)
        for nodes in member_sets:
            # members of one set are distinct, so plain fancy-index increment is safe
            multiplicity[nodes.to_array()] += 1
        multiplicity.setflags(write=False)

        self.node_multiplicity = multiplicity
        self.covered_nodes = union_all(member_sets)
        self.is_overlapping = bool(sum(len(s) for s in member_sets) > len(self.covered_nodes))

    def keys(self):
        """Selected cluster labels, ascending."""
        return list(self.cluster_ids)

    def size(self):
        return len(self.cluster_ids)

    def __len__(self):
        return len(self.cluster_ids)

    def __contains__(self, label):
        return label in self.cluster_ids

    def _cluster(self, label):
        if label not in self.cluster_ids:
            raise ClusterNotFoundError(label)
        return self.clustering.clusters[int(label)]

    def lookup(self, label) -> ClusterSkeleton:
        """
        Statistics of one selected cluster.

        Raises:
        -------
        ClusterNotFoundError
            If `label` is not part of this view
        """
        return self._cluster(label).skeleton()

    def __getitem__(self, label):
        return self.lookup(label)

    @property
    def cluster_sizes(self):
        """Member counts of the selected clusters, in label order."""
        clusters = self.clustering.clusters
        return [len(clusters[label].nodes) for label in self.cluster_ids]

    @property
    def num_singletons(self):
        """
        Number of singleton clusters in the view; 0 unless singletons are included.

        A property, like `node_coverage`, so read it as ``view.num_singletons``.
        """
        if not self.has_singletons:
            return 0
        return len(self.clustering.singleton_clusters)

    def _covered_with_singletons(self):
        if self.has_singletons:
            return self.covered_nodes | self.clustering.singleton_nodes
        return self.covered_nodes

    @property
    def node_coverage(self):
        """Fraction of graph nodes in at least one selected cluster (singletons included when enabled)."""
        total = self.graph.n
        if total == 0:
            return 0.0
        return len(self._covered_with_singletons()) / total

    def coverage(self):
        return self.node_coverage

    def node_multiplicities(self):
        """
        Number of selected clusters containing each covered node.

        Returns:
        --------
        numpy.ndarray
            uint32 counts for the covered nodes in ascending node order,
            followed by a 1 for every singleton cluster when singletons are included
        """
        mults = self.node_multiplicity[self.covered_nodes.to_array()]
        if self.has_singletons:
            mults = np.concatenate([mults, np.ones(self.num_singletons, dtype=np.uint32)])
        return mults

    def node_multiplicity_of(self, node):
        """Multiplicity of a single node among the selected regular clusters."""
        return int(self.node_multiplicity[node])

    @property
    def node_multiplicities_dist(self):
        return SummarizedDistribution(self.node_multiplicities())

    def compute_size_diff(self, other):
        """
        Compare cluster sizes against another view or clustering, pairing clusters by label.

        Every label selected on either side takes part. A label missing on one
        side counts as size 0 there. Singleton clusters are not compared.

        Parameters:
        -----------
        other : ClusteringSubset or Clustering
            A Clustering is compared as if every one of its clusters were selected.

        Returns:
        --------
        (int, SummarizedDistribution)
            Number of labels whose sizes differ, and the distribution of
            per-label deltas (this view's size minus the other's)
        """
        if isinstance(other, ClusteringSubset):
            other_clusters = other.clustering.clusters
            other_ids = other.cluster_ids
        else:
            other_clusters = other.clusters
            other_ids = tuple(other_clusters.keys())

        mine = {label: len(self.clustering.clusters[label].nodes) for label in self.cluster_ids}
        theirs = {label: len(other_clusters[label].nodes) for label in other_ids}
        labels = sorted(set(mine) | set(theirs))

        deltas = np.array([mine.get(l, 0) - theirs.get(l, 0) for l in labels], dtype=np.int64)
        diff = int(np.count_nonzero(deltas))
        return diff, SummarizedDistribution(deltas)

    def size_diff(self, other):
        return self.compute_size_diff(other)

    def to_dataframe(self):
        """The cluster listing table restricted to this view."""
        return self.clustering.to_dataframe(self.cluster_ids)

    def edge_sets(self):
        """Induced edge set of every selected cluster, in label order."""
        clusters = self.clustering.clusters
        return SetColumn([induced_edges(self.graph, clusters[label].nodes) for label in self.cluster_ids],
                         name="edges")

    def compute_statistics(self, verbose=False):
        """
        Aggregate statistics over the selected clusters.

        When the view includes singletons they count as clusters, their nodes
        count as covered, and each adds a singleton skeleton to every
        distribution, in line with `coverage()` and `node_multiplicities()`.

        Returns:
        --------
        ClusteringStats
            Counts plus a SummarizedDistribution for each of n, m, c, mcd, vol,
            and the wall time the computation took
        """
        with perf_monitor.timed_operation("Subset statistics", verbose=verbose):
            skeletons = [self.lookup(label) for label in self.cluster_ids]
            skeletons += [SINGLETON_SKELETON] * self.num_singletons
            distributions = {
                name: SummarizedDistribution([getattr(s, name) for s in skeletons])
                for name in STAT_FIELDS
            }
            covered_nodes = len(self._covered_with_singletons())
            covered_edges = len(self.edge_sets().union_set())

        stats = ClusteringStats(
            num_clusters=len(skeletons),
            covered_nodes=covered_nodes,
            covered_edges=covered_edges,
            total_nodes=self.graph.n,
            total_edges=self.graph.m,
            distributions=distributions,
            elapsed=perf_monitor.last_elapsed("Subset statistics"),
        )

        if verbose:
            print(f"  Clusters: {stats.num_clusters:,}")
            print(f"  Covered nodes: {stats.covered_nodes:,} / {stats.total_nodes:,}")
            print(f"  Covered edges: {stats.covered_edges:,} / {stats.total_edges:,}")
        return stats

    def __str__(self):
        return (f"ClusteringSubset(size={len(self.cluster_ids)}, "
                f"node_coverage={self.node_coverage * 100.0:.1f}%, "
                f"is_overlapping={self.is_overlapping})")

    def __repr__(self):
        return self.__str__()
