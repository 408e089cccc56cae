"""pytpfem.memory

Buffer provider for the gradient pipeline.

An *allocator* is any object with ``empty(size, dtype) -> ndarray-like``.
:class:`HostAllocator` hands out NumPy arrays; an accelerator-backed
allocator only has to honour the same call.
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Protocol

import numpy as np

from pytpfem.errors import AllocationError

logger = logging.getLogger(__name__)


class Allocator(Protocol):
    def empty(self, size: int, dtype=np.float64) -> np.ndarray: ...


class HostAllocator:
    def empty(self, size: int, dtype=np.float64) -> np.ndarray:
        return np.empty(int(size), dtype=dtype)


def allocate(allocator: Allocator, what: str, size: int, dtype=np.float64) -> np.ndarray:
    """Call ``allocator.empty`` and report failures as :class:`AllocationError`."""
    try:
        buf = allocator.empty(size, dtype)
    except (MemoryError, ValueError) as exc:
        raise AllocationError(what, size, exc) from exc
    if buf is None or buf.size != size:
        raise AllocationError(what, size)
    return buf


class GradientWorkspace:
    """
    Scratch (local field) and output (gradient) buffers owned by one
    gradient pipeline.

    Buffers are sized on demand by :meth:`ensure` (or :meth:`ensure_local`
    when the output is owned by the caller) and reallocated whenever the
    requested size changes.  The lock serialises calls sharing the workspace;
    a call must hold it (``with ws.acquire(): ...``) from resizing until it is
    done writing the output.
    """

    def __init__(self, allocator: Allocator | None = None):
        self.allocator = allocator if allocator is not None else HostAllocator()
        self.local: np.ndarray | None = None
        self.out: np.ndarray | None = None
        self.n_allocations = 0
        self._lock = threading.RLock()

    @contextmanager
    def acquire(self):
        with self._lock:
            yield self

    def _resize(self, attr: str, size: int) -> np.ndarray:
        buf = getattr(self, attr)
        if buf is None or buf.size != size:
            logger.debug(f"Workspace: allocating {attr} buffer of {size} entries "
                         f"(previous: {None if buf is None else buf.size})")
            buf = allocate(self.allocator, attr, size)
            setattr(self, attr, buf)
            self.n_allocations += 1
        return buf

    def ensure(self, local_size: int, out_size: int):
        """Return ``(local, out)`` buffers of exactly the requested sizes."""
        with self._lock:
            return self._resize("local", local_size), self._resize("out", out_size)

    def ensure_local(self, local_size: int) -> np.ndarray:
        """Scratch buffer only, for calls that write into caller-owned output."""
        with self._lock:
            return self._resize("local", local_size)

    def release(self) -> None:
        with self._lock:
            self.local = None
            self.out = None

    def __repr__(self):
        sizes = tuple(None if b is None else b.size for b in (self.local, self.out))
        return f"GradientWorkspace(local={sizes[0]}, out={sizes[1]}, allocations={self.n_allocations})"
