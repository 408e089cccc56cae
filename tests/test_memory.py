import threading

import numpy as np
import pytest

from pytpfem.errors import AllocationError
from pytpfem.memory import GradientWorkspace, HostAllocator, allocate


class FailingAllocator:
    def empty(self, size, dtype=np.float64):
        raise MemoryError("out of device memory")


class CountingAllocator(HostAllocator):
    def __init__(self):
        self.calls = []

    def empty(self, size, dtype=np.float64):
        self.calls.append(size)
        return super().empty(size, dtype)


def test_buffers_reused_while_sizes_match():
    alloc = CountingAllocator()
    ws = GradientWorkspace(alloc)
    local, out = ws.ensure(36, 64)
    local2, out2 = ws.ensure(36, 64)
    assert local is local2 and out is out2
    assert ws.n_allocations == 2
    assert alloc.calls == [36, 64]


def test_buffers_reallocated_when_sizes_change():
    ws = GradientWorkspace()
    local, out = ws.ensure(36, 64)
    local2, out2 = ws.ensure(72, 64)
    assert local2.size == 72 and local2 is not local
    assert out2 is out
    local3, _ = ws.ensure(18, 64)
    assert local3.size == 18
    assert ws.n_allocations == 4


def test_release_drops_buffers():
    ws = GradientWorkspace()
    ws.ensure(4, 4)
    ws.release()
    assert ws.local is None and ws.out is None


def test_allocation_failure_is_reported():
    ws = GradientWorkspace(FailingAllocator())
    with pytest.raises(AllocationError) as excinfo:
        ws.ensure(10, 10)
    assert excinfo.value.size == 10
    assert isinstance(excinfo.value, MemoryError)


def test_short_buffer_is_reported():
    class ShortAllocator:
        def empty(self, size, dtype=np.float64):
            return np.empty(max(size - 1, 0), dtype=dtype)

    with pytest.raises(AllocationError):
        allocate(ShortAllocator(), "out", 8)


def test_acquire_serialises_users():
    ws = GradientWorkspace()
    order = []

    def worker(tag):
        with ws.acquire():
            order.append(("in", tag))
            order.append(("out", tag))

    with ws.acquire():
        t = threading.Thread(target=worker, args=("t",))
        t.start()
        t.join(timeout=0.05)
        order.append(("main", None))
    t.join()
    assert order[0] == ("main", None)
    assert order[1:] == [("in", "t"), ("out", "t")]


def test_ensure_local_leaves_output_untouched():
    alloc = CountingAllocator()
    ws = GradientWorkspace(alloc)
    local = ws.ensure_local(36)
    assert local.size == 36 and ws.out is None
    assert ws.ensure_local(36) is local
    assert ws.n_allocations == 1
    assert alloc.calls == [36]
