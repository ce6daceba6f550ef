"""
Arrays with fixed size and MPI-safe indexing.

Not meant for allocation in hot loops: a convenience wrapper for running code
under MPI without rewriting its array accesses. Every point write is decided
by rank 0 and broadcast, so all ranks must perform the same writes and the
same size changes, in the same order.
"""
from mpi_arrays.array import MPIArray, MPIMatrix
from mpi_arrays.config import ROOT
from mpi_arrays.context import ProcessContext, SerialContext, default_context
from mpi_arrays.errors import BoundsError, CommunicationError, MPIArrayError, RootRejectedError
from mpi_arrays.transfer import large_bcast
from mpi_arrays.vector import MPIVector

__all__ = [
    "MPIArray", "MPIVector", "MPIMatrix",
    "ProcessContext", "SerialContext", "default_context",
    "large_bcast",
    "MPIArrayError", "BoundsError", "CommunicationError", "RootRejectedError",
    "ROOT",
]
