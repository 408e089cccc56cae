# pytpfem/jit/registry.py
import logging
import threading
from typing import Callable, Dict, Optional, Tuple

from pytpfem import config
from pytpfem.errors import UnsupportedSpecializationError
from pytpfem.jit.kernels import (
    grad_sum_factorized,
    grad_sum_factorized_serial,
    make_specialized_kernel,
)

logger = logging.getLogger(__name__)

Pair = Tuple[int, int]

# orders 1..4 with Q1D in {D1D, D1D+1, D1D+2}; (3, 4) is Q2 with a 4-point rule
DEFAULT_SPECIALIZATIONS: Tuple[Pair, ...] = tuple(
    (d1d, q1d) for d1d in range(2, 6) for q1d in (d1d, d1d + 1, d1d + 2)
)


class KernelRegistry:
    """
    Dispatch table from ``(D1D, Q1D)`` to a compiled gradient kernel.

    Registered pairs get a specialized kernel (loop bounds frozen at compile
    time), compiled on first use and kept for the registry's lifetime.
    Unregistered pairs raise :class:`UnsupportedSpecializationError`, or,
    with ``allow_generic``, resolve to the runtime-sized kernel.

    Example:
        registry = KernelRegistry()
        kernel = registry.get(3, 4)
        kernel(num_elements, tables.B, tables.G, local, out)
    """

    def __init__(self, specializations=DEFAULT_SPECIALIZATIONS, *,
                 allow_generic: Optional[bool] = None,
                 parallel: Optional[bool] = None):
        self.allow_generic = config.allow_generic_kernel() if allow_generic is None else bool(allow_generic)
        self.parallel = config.parallel_kernels() if parallel is None else bool(parallel)
        self._pairs = set()
        self._compiled: Dict[Pair, Callable] = {}
        self._lock = threading.Lock()
        for d1d, q1d in specializations:
            self.register(d1d, q1d)

    def register(self, d1d: int, q1d: int) -> None:
        if d1d < 1 or q1d < 1:
            raise ValueError(f"D1D and Q1D must be positive, got ({d1d}, {q1d}).")
        self._pairs.add((int(d1d), int(q1d)))

    def is_supported(self, d1d: int, q1d: int) -> bool:
        return (d1d, q1d) in self._pairs or self.allow_generic

    def supported(self) -> Tuple[Pair, ...]:
        return tuple(sorted(self._pairs))

    def get(self, d1d: int, q1d: int) -> Callable:
        """
        Return the kernel for ``(d1d, q1d)``.

        Raises:
            UnsupportedSpecializationError: if the pair is not registered and
            the generic fallback is disabled.
        """
        key = (int(d1d), int(q1d))
        if key in self._pairs:
            with self._lock:
                kernel = self._compiled.get(key)
                if kernel is None:
                    logger.debug(f"Building gradient kernel for (D1D={d1d}, Q1D={q1d}), "
                                 f"parallel={self.parallel}")
                    kernel = make_specialized_kernel(d1d, q1d, parallel=self.parallel)
                    self._compiled[key] = kernel
            return kernel
        if self.allow_generic:
            logger.warning(f"No specialized gradient kernel for (D1D={d1d}, Q1D={q1d}); "
                           f"using the runtime-sized kernel.")
            return grad_sum_factorized if self.parallel else grad_sum_factorized_serial
        raise UnsupportedSpecializationError(d1d, q1d, self.supported())

    def __contains__(self, pair) -> bool:
        return tuple(pair) in self._pairs

    def __repr__(self):
        return (f"KernelRegistry(pairs={len(self._pairs)}, compiled={len(self._compiled)}, "
                f"allow_generic={self.allow_generic}, parallel={self.parallel})")
