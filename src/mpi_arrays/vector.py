"""One-dimensional MPIArray that can change size.

Size-changing operations are applied locally on each rank, with no broadcast.
Ranks stay identical only if every one of them calls the same operations with
the same arguments in the same order. A rank that pushes a different item keeps
its own item.
"""
from collections.abc import Iterable

from mpi_arrays.array import MPIArray, _as_int
from mpi_arrays.errors import BoundsError
from mpi_arrays.utils import loga


class MPIVector(MPIArray):
    """One-dimensional MPIArray with linear indexing and local growth."""

    ndims = 1
    index_style = "linear"

    def _trace(self, *args):
        loga(self.context.rank, *args)

    def _position(self, i):
        return self._to_index(i)[0]

    def empty(self, element_type=None):
        """New empty vector of the same store kind and context."""
        return MPIVector(self._store.similar(element_type, (0,)), context=self.context)

    def push(self, *items):
        self._trace("push", items)
        self._store.extend(items)

    def append(self, items):
        items = list(items)
        self._trace("append", items)
        self._store.extend(items)

    def insert(self, i, item):
        n = len(self)
        i = _as_int(i)
        if not -n <= i <= n:
            raise BoundsError(self, i)
        self._trace("insert", i, item)
        self._store.insert(i + n if i < 0 else i, item)

    def delete(self, index):
        """Remove the item at an int position, a slice, or an iterable of positions."""
        if isinstance(index, slice):
            positions = list(range(*index.indices(len(self))))
        elif isinstance(index, Iterable):
            positions = [self._position(i) for i in index]
        else:
            positions = [self._position(index)]
        self._trace("delete", positions)
        self._store.delete(positions)

    def clear(self):
        self._trace("clear")
        self._store.clear()

    def resize(self, n):
        if n < 0:
            raise ValueError(f"new length must be non-negative, got {n}")
        self._trace("resize", n)
        self._store.resize(n)

    def reserve(self, n):
        self._store.reserve(n)

    def pop(self):
        if len(self) == 0:
            raise BoundsError(self, -1)
        self._trace("pop")
        return self._store.pop()
