# conftest.py
import logging

import numpy as np
import pytest

from pytpfem.jit.registry import KernelRegistry


@pytest.fixture(scope="session")
def serial_registry():
    """Registry compiling serial kernels with generic fallback; keeps test-time JIT cheap."""
    return KernelRegistry(parallel=False, allow_generic=True)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture(autouse=True)
def quiet_numba_logs():
    """numba is chatty at DEBUG; keep captured logs to our own loggers."""
    logging.getLogger("numba").setLevel(logging.WARNING)
