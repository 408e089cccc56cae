"""pytpfem.errors

Exception types raised at the invocation boundary.  Every check runs once
per call, before the element loop starts; kernels themselves never raise.
"""


class PyTpFemError(Exception):
    """Base class for all pytpfem errors."""


class ConfigurationError(PyTpFemError, ValueError):
    """A precondition on the space, rule or basis is violated."""


class UnsupportedDimensionError(ConfigurationError):
    def __init__(self, dim: int):
        self.dim = dim
        super().__init__(f"Only 2D meshes are supported, got spatial dimension {dim}.")


class UnsupportedVDimError(ConfigurationError):
    def __init__(self, vdim: int):
        self.vdim = vdim
        super().__init__(f"Only 2-component fields are supported, got vdim={vdim}.")


class UnsupportedGeometryError(ConfigurationError):
    def __init__(self, geometry: str):
        self.geometry = geometry
        super().__init__(f"Only tensor-product 'quad' elements are supported, got '{geometry}'.")


class UnsupportedSpecializationError(ConfigurationError):
    def __init__(self, d1d: int, q1d: int, available=()):
        self.d1d = d1d
        self.q1d = q1d
        self.available = tuple(available)
        super().__init__(
            f"No gradient kernel registered for (D1D={d1d}, Q1D={q1d}). "
            f"Available: {list(self.available)}. Register the pair or set "
            f"PYTPFEM_GENERIC_KERNEL=1 to allow the runtime-sized kernel."
        )


class BasisTableMismatchError(ConfigurationError):
    """Basis value/derivative tables disagree with each other or with D1D/Q1D."""


class AllocationError(PyTpFemError, MemoryError):
    def __init__(self, what: str, size: int, cause: BaseException = None):
        self.what = what
        self.size = size
        msg = f"Could not allocate {what} buffer of {size} entries"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)
