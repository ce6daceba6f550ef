class MPIArrayError(Exception):
    """Base class for errors raised by mpi_arrays."""


class BoundsError(MPIArrayError, IndexError):
    """Index outside the array's shape. Detected locally, before any communication."""

    def __init__(self, array, index):
        self.array = array
        self.index = index
        super().__init__(f"index {index!r} out of bounds for array of shape {array.shape}")


class CommunicationError(MPIArrayError):
    """The broadcast collective failed. The group state for that write is undefined."""

    def __init__(self, rank, reason):
        self.rank = rank
        super().__init__(f"broadcast failed on rank {rank}: {reason}")


class RootRejectedError(MPIArrayError):
    """Root could not store or send its value, so the write was abandoned on every rank.

    Raised on the other ranks. Root raises its own exception instead.
    """

    def __init__(self, root, reason):
        self.root = root
        self.reason = reason
        super().__init__(f"rank {root} rejected the write: {reason}")
