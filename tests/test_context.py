from __future__ import annotations

import numpy as np
import pytest
from mpi4py import MPI

from mpi_arrays import ROOT, MPIVector, ProcessContext, SerialContext, default_context


class TestSerialContext:
    def test_never_active(self):
        ctx = SerialContext()
        assert not ctx.is_active()
        assert ctx.rank == ROOT
        assert ctx.size == 1
        assert ctx.root == 0


class TestProcessContext:
    def test_reports_world(self):
        ctx = ProcessContext()
        assert ctx.comm is MPI.COMM_WORLD
        assert ctx.rank == MPI.COMM_WORLD.Get_rank()
        assert ctx.size == MPI.COMM_WORLD.Get_size()
        assert ctx.root == 0
        assert ctx.is_active()

    def test_custom_communicator(self):
        ctx = ProcessContext(MPI.COMM_SELF)
        assert ctx.size == 1
        assert ctx.rank == 0

    def test_default_is_shared(self):
        assert default_context() is default_context()
        assert isinstance(default_context(), ProcessContext)

    def test_writes_through_a_real_communicator(self):
        if MPI.COMM_WORLD.Get_size() != 1:
            pytest.skip("single-process check")
        a = MPIVector(np.zeros(3), context=ProcessContext())
        a[1] = 2.5
        assert a == [0.0, 2.5, 0.0]

    def test_nested_write_through_comm_self(self):
        ctx = ProcessContext(MPI.COMM_SELF)
        a = MPIVector([None, None], context=ctx)
        a[0] = MPIVector(np.arange(2), context=ctx)
        assert a[0] == [0, 1]
