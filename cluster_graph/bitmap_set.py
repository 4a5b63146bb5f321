"""
BitmapSet - finite sets of non-negative integers backed by roaring bitmaps.

Two representations live behind the same class: a compact one for members
that fit in 32 bits (node ids) and a wide one for 64-bit members (edge
indices on large graphs). The representation is picked from the value range
at construction time; callers never branch on it.
"""
import numpy as np
from pyroaring import BitMap, BitMap64

from .errors import DecodeError

COMPACT_MAX = 2**32 - 1
WIDE_MAX = 2**64 - 1

# One-byte header in front of the serialized roaring payload
_COMPACT_TAG = b"\x20"
_WIDE_TAG = b"\x40"


def _validated_members(values):
    """Return `values` as a flat uint64 array, rejecting anything outside the domain."""
    if isinstance(values, np.ndarray):
        arr = values.ravel()
    else:
        members = list(values)
        arr = np.asarray(members)
        if arr.dtype == object:
            # Python ints that straddle the int64/uint64 boundary land here
            if not all(isinstance(v, (int, np.integer)) and 0 <= v <= WIDE_MAX for v in members):
                raise DecodeError("Set members must be integers in [0, 2**64)")
            arr = np.array(members, dtype=np.uint64)
    if arr.size == 0:
        return np.empty(0, dtype=np.uint64)
    if arr.dtype.kind not in "iu":
        raise DecodeError(f"Set members must be unsigned integers below 2**64, got dtype {arr.dtype}")
    if arr.dtype.kind == "i" and arr.min() < 0:
        raise DecodeError(f"Set members must be non-negative, got {arr.min()}")
    return arr.astype(np.uint64, copy=False)


class BitmapSet:
    """
    Immutable set of non-negative integers.

    Parameters:
    -----------
    values : iterable of int or numpy.ndarray, optional
        Members of the set. Duplicates are collapsed.
    wide : bool, default=False
        Force the 64-bit representation even when every member fits in 32 bits.
        The wide representation is always used when any member exceeds 2**32 - 1.
    """
    __slots__ = ("_bitmap",)

    def __init__(self, values=(), wide=False):
        members = _validated_members(values)
        if wide or (members.size and members.max() > COMPACT_MAX):
            self._bitmap = BitMap64(members.tolist())
        else:
            self._bitmap = BitMap(members.astype(np.uint32).tolist())

    @classmethod
    def _wrap(cls, bitmap):
        obj = cls.__new__(cls)
        obj._bitmap = bitmap
        return obj

    @property
    def is_wide(self):
        """True when the set uses the 64-bit representation."""
        return isinstance(self._bitmap, BitMap64)

    def cardinality(self):
        return len(self._bitmap)

    def __len__(self):
        return len(self._bitmap)

    def __bool__(self):
        return len(self._bitmap) > 0

    def __contains__(self, value):
        if not isinstance(value, (int, np.integer)):
            return False
        value = int(value)
        limit = WIDE_MAX if self.is_wide else COMPACT_MAX
        if value < 0 or value > limit:
            return False
        return value in self._bitmap

    def __iter__(self):
        return iter(self._bitmap)

    def to_array(self):
        """Return the members as a sorted numpy array (uint32 or uint64)."""
        dtype = np.uint64 if self.is_wide else np.uint32
        return np.fromiter(self._bitmap, dtype=dtype, count=len(self._bitmap))

    def widened(self):
        """Return this set in the 64-bit representation."""
        if self.is_wide:
            return self
        return BitmapSet._wrap(BitMap64(self._bitmap))

    def union(self, *others):
        return union_all((self,) + others)

    def __or__(self, other):
        if not isinstance(other, BitmapSet):
            return NotImplemented
        return union_all((self, other))

    def __eq__(self, other):
        if not isinstance(other, BitmapSet):
            return NotImplemented
        if len(self) != len(other):
            return False
        if not self.is_wide and not other.is_wide:
            return self._bitmap == other._bitmap
        return np.array_equal(self.to_array().astype(np.uint64), other.to_array().astype(np.uint64))

    __hash__ = None

    def encode(self):
        """
        Serialize to the external bytes representation.

        Returns:
        --------
        bytes
            A one-byte width tag followed by the portable roaring payload.
        """
        tag = _WIDE_TAG if self.is_wide else _COMPACT_TAG
        return tag + self._bitmap.serialize()

    @classmethod
    def decode(cls, data):
        """
        Rebuild a BitmapSet from bytes produced by `encode`.

        Raises:
        -------
        DecodeError
            If the input is not bytes, has an unknown width tag, or the payload is malformed.
        """
        if isinstance(data, (bytearray, memoryview)):
            data = bytes(data)
        if not isinstance(data, bytes):
            raise DecodeError(f"Expected encoded bitmap bytes, got {type(data).__name__}")
        if len(data) < 1:
            raise DecodeError("Encoded bitmap is empty")

        tag, payload = data[:1], data[1:]
        if tag == _COMPACT_TAG:
            bitmap_cls = BitMap
        elif tag == _WIDE_TAG:
            bitmap_cls = BitMap64
        else:
            raise DecodeError(f"Unknown bitmap width tag {tag!r}")

        try:
            bitmap = bitmap_cls.deserialize(payload)
        except (ValueError, TypeError, OverflowError, MemoryError) as e:
            raise DecodeError(f"Malformed {bitmap_cls.__name__} payload: {e}") from e
        return cls._wrap(bitmap)

    def __repr__(self):
        kind = "wide" if self.is_wide else "compact"
        n = len(self._bitmap)
        if n <= 8:
            body = ", ".join(str(v) for v in self._bitmap)
        else:
            head = self.to_array()[:4]
            body = ", ".join(str(v) for v in head) + f", ... ({n} members)"
        return f"BitmapSet[{kind}]({{{body}}})"


def union_all(sets):
    """
    Union an arbitrary sequence of BitmapSets.

    The reduction is a balanced pairwise merge, so the result does not depend on
    how the input is ordered or partitioned. An empty sequence yields the empty set.
    If any input is wide, the result is wide.

    Parameters:
    -----------
    sets : iterable of BitmapSet

    Returns:
    --------
    BitmapSet
    """
    sets = list(sets)
    if not sets:
        return BitmapSet()

    if any(s.is_wide for s in sets):
        bitmaps = [s.widened()._bitmap for s in sets]
    else:
        bitmaps = [s._bitmap for s in sets]

    while len(bitmaps) > 1:
        merged = [bitmaps[i] | bitmaps[i + 1] for i in range(0, len(bitmaps) - 1, 2)]
        if len(bitmaps) % 2:
            merged.append(bitmaps[-1])
        bitmaps = merged

    # Single input still gets copied so the result never aliases an operand
    result = bitmaps[0]
    if len(sets) == 1:
        result = type(result)(result)
    return BitmapSet._wrap(result)
