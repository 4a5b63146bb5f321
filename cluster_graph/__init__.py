"""
Cluster Graph Package - Bitmap-backed scoring and inspection of graph clusterings.
"""

# Import main classes for easy access
from .bitmap_set import BitmapSet, union_all
from .set_column import SetColumn, popcnt, union
from .graph import Graph
from .edge_indexer import induced_edges
from .cluster import Cluster, ClusterSkeleton, ClusteringSource
from .clustering import Clustering, read_clusters
from .subset import ClusteringSubset, ClusteringStats
from .distribution import SummarizedDistribution
from .quality_metrics import modularity, cpm, covered_num_nodes, modularity_score, cpm_score
from .parallel import configure, get_parallelism, ParallelConfig
from .errors import DecodeError, MissingColumnError, FilterError, ClusterNotFoundError

# Import core utilities that might be directly useful
from .core_utilities import PerformanceMonitor, perf_monitor

# Define what gets imported with `from cluster_graph import *`
__all__ = [
    # Main classes
    'BitmapSet',
    'SetColumn',
    'Graph',
    'Cluster',
    'ClusterSkeleton',
    'ClusteringSource',
    'Clustering',
    'ClusteringSubset',
    'ClusteringStats',
    'SummarizedDistribution',
    'ParallelConfig',

    # Column and metric functions
    'union_all',
    'popcnt',
    'union',
    'induced_edges',
    'read_clusters',
    'modularity',
    'cpm',
    'covered_num_nodes',
    'modularity_score',
    'cpm_score',
    'configure',
    'get_parallelism',

    # Errors
    'DecodeError',
    'MissingColumnError',
    'FilterError',
    'ClusterNotFoundError',

    # Utility classes
    'PerformanceMonitor',
    'perf_monitor',
]

# Package metadata
__version__ = '1.0.0'
__author__ = 'Connor Frankston'
