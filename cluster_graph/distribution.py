"""
SummarizedDistribution - a fixed percentile table standing in for a sample.
"""
import numpy as np

# p0, p5, ..., p100
PERCENTILE_POINTS = np.linspace(0.0, 100.0, 21)
_MEDIAN_POS = 10


class SummarizedDistribution:
    """
    Immutable percentile summary of a numeric sample.

    The raw samples are discarded once the cut points are computed. An empty
    sample summarizes to a table of NaNs.

    Parameters:
    -----------
    samples : array-like
        Numeric samples to summarize
    """
    __slots__ = ("_percentiles",)

    def __init__(self, samples=()):
        arr = np.asarray(samples, dtype=np.float64).ravel()
        if arr.size == 0:
            table = np.full(PERCENTILE_POINTS.size, np.nan)
        else:
            table = np.percentile(arr, PERCENTILE_POINTS)
        table.setflags(write=False)
        self._percentiles = table

    @property
    def percentiles(self):
        """The cut points p0, p5, ..., p100 as a list of floats."""
        return self._percentiles.tolist()

    @property
    def minimum(self):
        return float(self._percentiles[0])

    @property
    def maximum(self):
        return float(self._percentiles[-1])

    @property
    def median(self):
        return float(self._percentiles[_MEDIAN_POS])

    def __eq__(self, other):
        if not isinstance(other, SummarizedDistribution):
            return NotImplemented
        return np.array_equal(self._percentiles, other._percentiles, equal_nan=True)

    __hash__ = None

    def __repr__(self):
        return (f"SummarizedDistribution(min={self.minimum:.3g}, "
                f"median={self.median:.3g}, max={self.maximum:.3g})")
