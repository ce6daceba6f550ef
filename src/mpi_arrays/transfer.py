# Broadcast of values of any size or structure, nested MPIArrays included
import pickle

import numpy as np

from mpi_arrays import config
from mpi_arrays.errors import RootRejectedError
from mpi_arrays.utils import auto_gc, log

# Kinds that go through Bcast as a raw buffer without conversion
_BUFFER_KINDS = "biufc"

def _fixed_layout(value):
    if not (type(value) is np.ndarray or isinstance(value, np.generic)):
        return False
    return value.dtype.kind in _BUFFER_KINDS and value.dtype.isnative

def _header(value):
    if _fixed_layout(value):
        return ("array", np.shape(value), value.dtype.str, isinstance(value, np.generic)), None
    payload = pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
    return ("pickle", len(payload)), payload

def large_bcast(value, comm, root=config.ROOT, failure=None):
    """
    Broadcast ``value`` from ``root`` to every rank of ``comm``.
    Every rank must call this. Only root's ``value`` is read; the others may pass anything.
    If root cannot send its value, every rank raises: root its own exception,
    the others RootRejectedError.
    :param value: Value to send (ignored on non-root ranks)
    :param comm: mpi4py communicator
    :param root: Rank whose value is sent
    :param failure: Exception root hit while producing ``value``; sent in its place (root only)
    :return: root's value, on every rank (root gets its own object back)
    """
    rank = comm.Get_rank()
    header, payload = None, None
    if rank == root:
        if failure is None:
            try:
                header, payload = _header(value)
            except Exception as e:  # unpicklable value
                failure = e
        if failure is not None:
            header = ("error", repr(failure))

    # Root picks the path; everyone follows it
    header = comm.bcast(header, root=root)
    log(rank, "large_bcast", header)

    if header[0] == "error":
        if rank == root:
            raise failure
        raise RootRejectedError(root, header[1])
    if header[0] == "array":
        return _bcast_array(value, header, comm, rank, root)
    return _bcast_pickled(value, payload, header[1], comm, rank, root)

def _bcast_array(value, header, comm, rank, root):
    _, shape, dtype, scalar = header
    if rank == root:
        data = np.ascontiguousarray(value)
    else:
        data = np.empty(shape, dtype=dtype)

    comm.Bcast(data.reshape(-1), root=root)

    if rank == root: return value
    return data[()] if scalar else data

@auto_gc()
def _bcast_pickled(value, payload, nbytes, comm, rank, root):
    if rank == root:
        buf = np.frombuffer(bytearray(payload), dtype=np.uint8)
    else:
        buf = np.empty(nbytes, dtype=np.uint8)

    # MPI counts are C ints, so anything past 2 GiB has to go in pieces
    for start in range(0, nbytes, config.CHUNK_BYTES):
        comm.Bcast(buf[start:start + config.CHUNK_BYTES], root=root)

    if rank == root: return value
    return pickle.loads(buf.tobytes())
