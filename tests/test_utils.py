from __future__ import annotations

import numpy as np

from mpi_arrays import MPIVector, config
from mpi_arrays.utils import auto_gc, log, loga


class TestTracing:
    def test_silent_by_default(self, capsys, monkeypatch):
        monkeypatch.setattr(config, "DEBUG", False)
        log(0, "hello")
        loga(3, "hello")
        assert capsys.readouterr().out == ""

    def test_log_prints_on_root_only(self, capsys, monkeypatch):
        monkeypatch.setattr(config, "DEBUG", True)
        log(1, "not me")
        log(0, "me")
        out = capsys.readouterr().out
        assert "me" in out and "not me" not in out

    def test_loga_tags_the_rank(self, capsys, monkeypatch):
        monkeypatch.setattr(config, "DEBUG", True)
        loga(2, "push", (5,))
        assert capsys.readouterr().out.startswith("Rank 2:")

    def test_growth_is_traced(self, capsys, monkeypatch, serial):
        monkeypatch.setattr(config, "DEBUG", True)
        MPIVector(np.zeros(0), context=serial).push(1.0)
        assert "push" in capsys.readouterr().out


def test_auto_gc_returns_result():
    @auto_gc()
    def add(a, b):
        return a + b

    assert add(2, 3) == 5
    assert add.__name__ == "add"
