"""
Per-cluster records: statistics skeletons, member sets and clustering provenance.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .bitmap_set import BitmapSet


@dataclass(frozen=True)
class ClusterSkeleton:
    """Read-only statistics of one cluster, as handed to filter predicates."""
    n: int      # member count
    m: int      # internal edges
    c: int      # cut (boundary) edges
    mcd: int    # minimum internal degree among members
    vol: int    # sum of member degrees, 2m + c

    def __str__(self):
        return f"ClusterSkeleton(n={self.n}, m={self.m}, c={self.c})"


# Statistics every singleton cluster shares; filters are probed with it once
SINGLETON_SKELETON = ClusterSkeleton(n=1, m=0, c=0, mcd=0, vol=0)


@dataclass(frozen=True)
class ClusteringSource:
    """How a clustering was produced."""
    kind: str = "unknown"               # "unknown" | "cpm"
    resolution: Optional[float] = None  # set for CPM-derived clusterings

    @classmethod
    def unknown(cls) -> ClusteringSource:
        return cls()

    @classmethod
    def cpm(cls, resolution: float) -> ClusteringSource:
        return cls(kind="cpm", resolution=float(resolution))

    def __str__(self):
        if self.kind == "cpm":
            return f"cpm({self.resolution:g})"
        return self.kind


@dataclass(frozen=True, eq=False)
class Cluster:
    """A labelled cluster with its member set and precomputed statistics."""
    label: int
    nodes: BitmapSet
    n: int
    m: int
    c: int
    mcd: int

    def __post_init__(self):
        if self.n != len(self.nodes):
            raise ValueError(
                f"Cluster {self.label}: n={self.n} does not match {len(self.nodes)} member nodes"
            )
        if min(self.m, self.c, self.mcd) < 0:
            raise ValueError(f"Cluster {self.label}: statistics must be non-negative")

    @property
    def vol(self) -> int:
        return 2 * self.m + self.c

    def skeleton(self) -> ClusterSkeleton:
        return ClusterSkeleton(n=self.n, m=self.m, c=self.c, mcd=self.mcd, vol=self.vol)
