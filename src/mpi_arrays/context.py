"""Process contexts: who am I in the group, and is the group running at all.

The broadcaster never touches ``MPI.COMM_WORLD`` directly; it asks a context.
Code that runs under ``mpiexec`` uses ``default_context()``. Tests and
single-process tools pass their own.
"""
from mpi4py import MPI

from mpi_arrays.config import ROOT


class ProcessContext:
    """Context backed by an mpi4py communicator (``MPI.COMM_WORLD`` by default)."""

    root = ROOT

    def __init__(self, comm=None):
        self.comm = MPI.COMM_WORLD if comm is None else comm

    def is_active(self):
        return MPI.Is_initialized() and not MPI.Is_finalized()

    @property
    def rank(self):
        return self.comm.Get_rank()

    @property
    def size(self):
        return self.comm.Get_size()

    def __repr__(self):
        return f"ProcessContext(rank={self.rank}, size={self.size})"


class SerialContext:
    """Never active: every write is a plain local write."""

    root = ROOT
    comm = None
    rank = ROOT
    size = 1

    def is_active(self):
        return False

    def __repr__(self):
        return "SerialContext()"


_default = None

def default_context():
    global _default
    if _default is None: _default = ProcessContext()
    return _default
