"""Root-authoritative point writes.

Every rank calls ``write`` for the same index in the same order. Root applies
its proposal, then root's post-write value is broadcast and stored by every
rank, root included. Whatever the other ranks proposed is dropped.

Ranks that issue different sequences of writes meet at different broadcasts
and hang there; nothing here can detect that.
"""
from mpi4py import MPI

from mpi_arrays.errors import CommunicationError
from mpi_arrays.transfer import large_bcast
from mpi_arrays.utils import loga


class RootBroadcaster:

    def __init__(self, context):
        self.context = context

    def write(self, store, index, value):
        """
        Write ``value`` at ``index`` so that every rank ends up holding root's value.
        :param store: Backing store of the array being written
        :param index: Checked tuple index
        :param value: This rank's proposal (only root's is used)
        :return: The value now stored at ``index``
        """
        ctx = self.context
        if not ctx.is_active():
            store.setitem(index, value)
            return value

        rank = ctx.rank
        failure = None
        if rank == ctx.root:
            previous = store.getitem(index)
            try:
                store.setitem(index, value)
            except Exception as e:
                # still has to reach the broadcast, or the other ranks wait forever
                failure = e

        try:
            result = large_bcast(store.getitem(index), ctx.comm, root=ctx.root, failure=failure)
        except MPI.Exception as e:
            raise CommunicationError(rank, e) from e
        except Exception:
            # the group rejected root's value, so root drops it as well
            if rank == ctx.root:
                store.setitem(index, previous)
            raise

        loga(rank, "write", index, result)
        # root stores its own value again so every rank takes the same path
        store.setitem(index, result)
        return result
