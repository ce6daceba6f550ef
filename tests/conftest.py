"""In-process stand-ins for an MPI group.

Each rank runs on its own thread with its own communicator. Collectives meet
on a shared barrier; non-root ranks receive deep copies, so no rank ever
shares an object with root the way it would not under real MPI.
"""
from __future__ import annotations

import copy
import threading

import numpy as np
import pytest
from mpi4py import MPI

from mpi_arrays import ROOT, SerialContext


class FakeGroup:
    def __init__(self, size, broken=False):
        self.size = size
        self.broken = broken
        self.barrier = threading.Barrier(size, timeout=10)
        self.slot = None
        self.calls = []  # (kind, root) per collective, recorded by the root rank

    def context(self, rank):
        return FakeContext(FakeComm(self, rank))


class FakeComm:
    def __init__(self, group, rank):
        self.group = group
        self.rank = rank

    def Get_rank(self):
        return self.rank

    def Get_size(self):
        return self.group.size

    def _collective(self, kind, value, root, receive):
        g = self.group
        if g.broken:
            raise MPI.Exception(MPI.ERR_OTHER)
        if self.rank == root:
            g.calls.append((kind, root))
            g.slot = value
        g.barrier.wait()
        result = receive(g.slot)
        g.barrier.wait()
        return result

    def bcast(self, obj, root=0):
        if self.rank == root:
            return self._collective("bcast", obj, root, lambda v: v)
        return self._collective("bcast", None, root, copy.deepcopy)

    def Bcast(self, buf, root=0):
        def receive(v):
            if self.rank != root:
                buf[...] = v
        self._collective("Bcast", np.array(buf, copy=True) if self.rank == root else None,
                         root, receive)


class FakeContext:
    root = ROOT

    def __init__(self, comm):
        self.comm = comm

    def is_active(self):
        return True

    @property
    def rank(self):
        return self.comm.rank

    @property
    def size(self):
        return self.comm.group.size


def run_spmd(size, fn, group=None):
    """Run ``fn(context)`` once per rank, concurrently. Returns the per-rank results."""
    group = FakeGroup(size) if group is None else group
    results = [None] * size
    errors = [None] * size

    def worker(rank):
        try:
            results[rank] = fn(group.context(rank))
        except BaseException as e:
            errors[rank] = e
            group.barrier.abort()

    threads = [threading.Thread(target=worker, args=(rank,)) for rank in range(size)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    raised = [e for e in errors if e is not None]
    if raised:
        # A failing rank breaks the barrier for the rest; report the real cause
        real = [e for e in raised if not isinstance(e, threading.BrokenBarrierError)]
        raise (real or raised)[0]
    return results


@pytest.fixture
def spmd():
    return run_spmd


@pytest.fixture
def group():
    return FakeGroup


@pytest.fixture
def serial():
    return SerialContext()
