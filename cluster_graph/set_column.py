"""
SetColumn - a column of BitmapSets, one per table row.

The external (tabular) representation of a set column is a pandas Series whose
cells hold the bytes produced by `BitmapSet.encode`.
"""
import numpy as np
import pandas as pd

from .bitmap_set import BitmapSet, union_all
from .core_utilities import split_batches
from .errors import DecodeError
from .parallel import get_parallelism, parallel_map

# Below this many sets a column union runs on the calling thread
PARALLEL_UNION_MIN_SETS = 256


class SetColumn:
    """
    Columnar sequence of BitmapSets.

    Parameters:
    -----------
    sets : iterable of BitmapSet
        One set per row.
    name : str, default="nodes"
        Column name used when converting back to a pandas Series.
    """

    def __init__(self, sets=(), name="nodes"):
        self.sets = list(sets)
        for i, s in enumerate(self.sets):
            if not isinstance(s, BitmapSet):
                raise TypeError(f"Row {i} holds {type(s).__name__}, expected BitmapSet")
        self.name = name

    @classmethod
    def from_series(cls, series):
        """
        Decode a pandas Series of encoded bitmaps.

        Raises:
        -------
        DecodeError
            If any cell is missing or not a valid encoded bitmap.
        """
        sets = []
        for pos, cell in enumerate(series.to_numpy(dtype=object)):
            if cell is None or (isinstance(cell, float) and np.isnan(cell)):
                raise DecodeError(f"Row {pos} of column '{series.name}' has no bitmap")
            try:
                sets.append(BitmapSet.decode(cell))
            except DecodeError as e:
                raise DecodeError(f"Row {pos} of column '{series.name}': {e}") from e
        return cls(sets, name=series.name if series.name is not None else "nodes")

    def to_series(self, index=None, name=None):
        """Encode the column as a pandas Series of bytes."""
        encoded = np.empty(len(self.sets), dtype=object)
        for i, s in enumerate(self.sets):
            encoded[i] = s.encode()
        return pd.Series(encoded, index=index, name=name or self.name, dtype=object)

    def __len__(self):
        return len(self.sets)

    def __getitem__(self, i):
        return self.sets[i]

    def __iter__(self):
        return iter(self.sets)

    def popcnt(self):
        """Per-row cardinality as a uint32 array."""
        return np.fromiter((len(s) for s in self.sets), dtype=np.uint32, count=len(self.sets))

    def union_set(self):
        """Reduce the whole column to one BitmapSet."""
        n_workers = get_parallelism()
        if len(self.sets) < PARALLEL_UNION_MIN_SETS or n_workers == 1:
            return union_all(self.sets)
        # union_all is associative and commutative, so batch partials merge to the same set
        partials = parallel_map(union_all, split_batches(self.sets, n_workers))
        return union_all(partials)

    def union(self):
        """Reduce the column to a single-row SetColumn."""
        return SetColumn([self.union_set()], name=self.name)

    def __repr__(self):
        return f"SetColumn(name={self.name!r}, rows={len(self.sets)})"


def as_set_column(column):
    """Accept either a SetColumn or its pandas representation."""
    if isinstance(column, SetColumn):
        return column
    if isinstance(column, pd.Series):
        return SetColumn.from_series(column)
    raise TypeError(f"Expected SetColumn or pandas.Series, got {type(column).__name__}")


def popcnt(series):
    """
    Per-row cardinality of an encoded bitmap column.

    Parameters:
    -----------
    series : pandas.Series
        Encoded bitmaps

    Returns:
    --------
    pandas.Series
        uint32 counts aligned with `series`
    """
    counts = SetColumn.from_series(series).popcnt()
    return pd.Series(counts, index=series.index, name=series.name, dtype=np.uint32)


def union(series):
    """
    Union of every bitmap in an encoded column.

    Returns:
    --------
    pandas.Series
        A single-row Series holding the encoded union
    """
    return SetColumn.from_series(series).union().to_series(name=series.name)
