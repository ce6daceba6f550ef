"""
Arrays with fixed size and MPI-safe indexing.

An ``MPIArray`` wraps a local backing store. Reads go straight to the store and
never communicate. Every point write ``a[i] = v`` is settled by rank 0: its
value is written and broadcast, and every other rank's ``v`` is thrown away.

All ranks must perform the same writes, and the same size-changing operations,
in the same order. A rank that skips or reorders one blocks in a broadcast
that the others never reach.
"""
import copy
import operator

import numpy as np

from mpi_arrays.broadcaster import RootBroadcaster
from mpi_arrays.context import default_context
from mpi_arrays.errors import BoundsError
from mpi_arrays.store import as_store

_NUMERIC = (bool, int, float, complex, np.bool_, np.number)


def _bind(data):
    if isinstance(data, MPIArray):
        return data._store
    return as_store(data)

def _as_int(i):
    try:
        return operator.index(i)
    except TypeError:
        raise TypeError(f"MPIArray indices must be integers, not {type(i).__name__}") from None

def _equal(a, b):
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        return np.array_equal(a, b)
    return bool(a == b)


class MPIArray:
    """
    N-dimensional array over a backing store, with MPI-safe point writes.
    ``MPIArray(data)`` picks ``MPIVector`` for 1-D data and ``MPIMatrix`` for 2-D data.
    :param data: numpy array, list, store, or another MPIArray (whose store is shared)
    :param context: Process context; ``default_context()`` when omitted
    """

    ndims = None  # dimensionality a subclass accepts, None for any
    index_style = "cartesian"
    _variants = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if cls.ndims is not None:
            MPIArray._variants[cls.ndims] = cls

    def __new__(cls, data=None, context=None):
        if cls is MPIArray and data is not None:
            cls = MPIArray._variants.get(_bind(data).ndim, MPIArray)
        return super().__new__(cls)

    def __init__(self, data, context=None):
        store = _bind(data)
        if self.ndims is not None and store.ndim != self.ndims:
            raise ValueError(f"{type(self).__name__} needs {self.ndims}-dimensional data, "
                             f"got shape {store.shape}")
        self._store = store
        self._broadcaster = RootBroadcaster(default_context() if context is None else context)

    @classmethod
    def full(cls, default, shape, context=None):
        """
        New array of ``shape`` with every slot set to ``default``. Local only: ranks
        that pass different defaults start out different.
        """
        shape = (shape,) if isinstance(shape, int) else tuple(shape)
        if isinstance(default, _NUMERIC):
            data = np.full(shape, default)
        else:
            data = np.empty(shape, dtype=object)
            for idx in np.ndindex(shape):
                data[idx] = default
        return cls(data, context=context)

    @property
    def store(self):
        return self._store

    @property
    def parent(self):
        return self._store.array

    @property
    def context(self):
        return self._broadcaster.context

    @property
    def shape(self):
        return self._store.shape

    @property
    def ndim(self):
        return self._store.ndim

    @property
    def size(self):
        return self._store.size

    @property
    def axes(self):
        return tuple(range(n) for n in self.shape)

    @property
    def element_type(self):
        return self._store.dtype

    def _to_index(self, index):
        # One int on an N-D array is a row-major linear index
        shape, requested = self.shape, index
        if not isinstance(index, tuple):
            i = _as_int(index)
            if len(shape) != 1:
                n = self.size
                if not -n <= i < n:
                    raise BoundsError(self, requested)
                return tuple(int(j) for j in np.unravel_index(i % n, shape))
            index = (i,)

        if len(index) != len(shape):
            raise BoundsError(self, requested)
        out = []
        for i, n in zip(index, shape):
            i = _as_int(i)
            if not -n <= i < n:
                raise BoundsError(self, requested)
            out.append(i % n)
        return tuple(out)

    def __getitem__(self, index):
        return self._store.getitem(self._to_index(index))

    def __setitem__(self, index, value):
        # checked on every rank before the broadcast, so a bad index fails everywhere
        self._broadcaster.write(self._store, self._to_index(index), value)

    def __len__(self):
        return self.size

    def __iter__(self):
        return self._store.flat()

    def __contains__(self, x):
        return any(_equal(item, x) for item in self)

    def __eq__(self, other):
        if isinstance(other, (np.ndarray, list)):
            other = MPIArray(other, context=self.context)
        if not isinstance(other, MPIArray):
            return NotImplemented
        return self.shape == other.shape and all(_equal(a, b) for a, b in zip(self, other))

    __hash__ = None

    def copy(self):
        """Deep copy of the store. No communication: the source is already consistent."""
        return MPIArray(self._store.copy(), context=self.context)

    def similar(self, element_type=None, shape=None):
        """
        Uninitialised array of the same store kind. A list-backed array asked for a
        typed element gets a numpy store. It is only consistent across ranks once
        every rank has written the same values into it.
        """
        if isinstance(shape, int): shape = (shape,)
        return MPIArray(self._store.similar(element_type, shape), context=self.context)

    def __deepcopy__(self, memo):
        return type(self)(copy.deepcopy(self._store, memo), context=self.context)

    # Communicators don't pickle, so an unpickled array binds to the default context
    def __getstate__(self):
        return {"store": self._store}

    def __setstate__(self, state):
        self._store = state["store"]
        self._broadcaster = RootBroadcaster(default_context())

    def __array__(self, dtype=None, copy=None):
        out = self._store.as_numpy()
        if dtype is not None:
            out = out.astype(dtype, copy=False)
        return out.copy() if copy else out

    def __array_ufunc__(self, ufunc, method, *inputs, **kwargs):
        if kwargs.get("out"):
            return NotImplemented
        args = [np.asarray(x) if isinstance(x, MPIArray) else x for x in inputs]
        result = getattr(ufunc, method)(*args, **kwargs)
        if isinstance(result, np.ndarray) and result.ndim:
            return MPIArray(result, context=self.context)
        return result

    def __repr__(self):
        return f"{type(self).__name__}({self.parent!r})"


class MPIMatrix(MPIArray):
    """Two-dimensional MPIArray."""

    ndims = 2
