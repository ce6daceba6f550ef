"""Backing stores: the local containers an MPIArray wraps.

A store does plain local reads and writes by an already-checked tuple index,
reports shape and dtype, copies itself, and (one-dimensional stores only)
grows and shrinks. Nothing here communicates.
"""
import copy
from math import prod

import numpy as np


class Store:
    """Common surface of the stores. ``index`` arguments are tuples of in-range, non-negative ints."""

    @property
    def ndim(self):
        return len(self.shape)

    @property
    def size(self):
        return prod(self.shape)

    @property
    def growable(self):
        return self.ndim == 1

    def _require_growable(self):
        if not self.growable:
            raise TypeError(f"only one-dimensional stores can grow, this one has shape {self.shape}")


class NDArrayStore(Store):
    """Store over a numpy array.

    A one-dimensional store keeps a capacity buffer: ``array`` is a view of its
    first ``len`` slots, so ``reserve`` preallocates and appends are amortised.
    Growing reallocates, after which the array originally wrapped is no longer
    the one being written to.
    """

    def __init__(self, array):
        self._buf = array
        self._n = len(array) if array.ndim == 1 else None

    @property
    def array(self):
        if self._n is None or self._n == len(self._buf):
            return self._buf
        return self._buf[:self._n]

    @property
    def shape(self):
        return self.array.shape

    @property
    def dtype(self):
        return self._buf.dtype

    @property
    def capacity(self):
        return len(self._buf) if self._n is not None else self.size

    def getitem(self, index):
        return self._buf[index]

    def setitem(self, index, value):
        self._buf[index] = value

    def flat(self):
        return iter(self.array.flat)

    def as_numpy(self):
        return self.array

    def copy(self):
        if self.dtype == object:
            return NDArrayStore(copy.deepcopy(self.array))
        return NDArrayStore(self.array.copy())

    def similar(self, dtype=None, shape=None):
        return NDArrayStore(np.empty(self.shape if shape is None else shape,
                                     dtype=self.dtype if dtype is None else dtype))

    # Growth, one-dimensional only

    def reserve(self, n):
        self._require_growable()
        if n <= len(self._buf): return
        buf = np.empty(n, dtype=self.dtype)
        buf[:self._n] = self._buf[:self._n]
        self._buf = buf

    def extend(self, items):
        self._require_growable()
        items = list(items)
        needed = self._n + len(items)
        if needed > len(self._buf):
            self.reserve(max(needed, 2 * len(self._buf)))
        # One at a time, so sequence items land in single object slots
        for i, item in enumerate(items):
            self._buf[self._n + i] = item
        self._n = needed

    def insert(self, i, item):
        self._require_growable()
        if self._n == len(self._buf):
            self.reserve(max(1, 2 * len(self._buf)))
        self._buf[i + 1:self._n + 1] = self._buf[i:self._n]
        self._buf[i] = item
        self._n += 1

    def delete(self, positions):
        self._require_growable()
        kept = np.delete(self.array, positions)
        self._buf[:len(kept)] = kept
        self._blank(len(kept), self._n)
        self._n = len(kept)

    def clear(self):
        self._require_growable()
        self._blank(0, self._n)
        self._n = 0

    def resize(self, n):
        self._require_growable()
        if n < self._n:
            self._blank(n, self._n)
        else:
            self.reserve(n)
            self._buf[self._n:n] = None if self.dtype == object else 0
        self._n = n

    def pop(self):
        self._require_growable()
        item = self._buf[self._n - 1]
        self._blank(self._n - 1, self._n)
        self._n -= 1
        return item

    def _blank(self, start, stop):
        # drop references held past the end
        if self.dtype == object:
            self._buf[start:stop] = None


class ListStore(Store):
    """Store over a Python list. Always one-dimensional and growable."""

    def __init__(self, data, element_type=None):
        self._data = data
        self._dtype = np.dtype(object if element_type is None else element_type)

    @property
    def array(self):
        return self._data

    @property
    def shape(self):
        return (len(self._data),)

    @property
    def dtype(self):
        return self._dtype

    @property
    def capacity(self):
        return len(self._data)

    def getitem(self, index):
        return self._data[index[0]]

    def setitem(self, index, value):
        self._data[index[0]] = value

    def flat(self):
        return iter(self._data)

    def as_numpy(self):
        if self._dtype != object:
            return np.asarray(self._data, dtype=self._dtype)
        out = np.empty(len(self._data), dtype=object)
        for i, item in enumerate(self._data):
            out[i] = item
        return out

    def copy(self):
        return ListStore(copy.deepcopy(self._data), self._dtype)

    def similar(self, dtype=None, shape=None):
        dtype = np.dtype(self._dtype if dtype is None else dtype)
        shape = self.shape if shape is None else tuple(shape)
        # a list of None slots is only honest about an object element type
        if len(shape) != 1 or dtype != object:
            return NDArrayStore(np.empty(shape, dtype=dtype))
        return ListStore([None] * shape[0])

    def reserve(self, n):
        pass  # lists manage their own capacity

    def extend(self, items):
        self._data.extend(items)

    def insert(self, i, item):
        self._data.insert(i, item)

    def delete(self, positions):
        for p in sorted(set(positions), reverse=True):
            del self._data[p]

    def clear(self):
        self._data.clear()

    def resize(self, n):
        if n < len(self._data):
            del self._data[n:]
        else:
            self._data.extend([None] * (n - len(self._data)))

    def pop(self):
        return self._data.pop()


def as_store(data):
    """Bind ``data`` to a store. Stores pass through; nothing is copied."""
    if isinstance(data, Store):
        return data
    if isinstance(data, np.ndarray):
        return NDArrayStore(data)
    if isinstance(data, list):
        return ListStore(data)
    raise TypeError(f"cannot back an MPIArray with {type(data).__name__}; "
                    "use a numpy array, a list, or a store")
