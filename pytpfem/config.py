"""pytpfem.config

Environment toggles.  Explicit constructor arguments always win over these.

PYTPFEM_GENERIC_KERNEL=1   Fall back to the runtime-sized kernel for
                           (D1D, Q1D) pairs that are not registered.
PYTPFEM_SERIAL=1           Compile kernels without ``parallel=True``.
PYTPFEM_DEBUG=1            Log kernel argument shapes on every dispatch.
"""
import os


def _flag(name: str) -> bool:
    return os.getenv(name, "").lower() in {"1", "true", "yes"}


def allow_generic_kernel() -> bool:
    return _flag("PYTPFEM_GENERIC_KERNEL")


def parallel_kernels() -> bool:
    return not _flag("PYTPFEM_SERIAL")


def debug() -> bool:
    return _flag("PYTPFEM_DEBUG")
