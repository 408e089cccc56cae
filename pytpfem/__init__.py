"""pytpfem

Sum-factorized evaluation of vector-field gradients at quadrature points on
tensor-product quadrilateral meshes.
"""
from .errors import (
    PyTpFemError,
    ConfigurationError,
    UnsupportedDimensionError,
    UnsupportedVDimError,
    UnsupportedGeometryError,
    UnsupportedSpecializationError,
    BasisTableMismatchError,
    AllocationError,
)
from .integration.quadrature import IntegrationRule
from .core.mesh import QuadMesh
from .core.fespace import FiniteElementSpace
from .fem.basis_tables import BasisTables, get_basis_tables
from .memory import HostAllocator, GradientWorkspace
from .jit.registry import KernelRegistry
from .fem.operators.grad import QuadratureGradient, dof_to_quad_grad, physical_gradient

__all__ = [
    'PyTpFemError', 'ConfigurationError', 'UnsupportedDimensionError',
    'UnsupportedVDimError', 'UnsupportedGeometryError',
    'UnsupportedSpecializationError', 'BasisTableMismatchError', 'AllocationError',
    'IntegrationRule', 'QuadMesh', 'FiniteElementSpace',
    'BasisTables', 'get_basis_tables', 'HostAllocator', 'GradientWorkspace',
    'KernelRegistry', 'QuadratureGradient', 'dof_to_quad_grad', 'physical_gradient',
]
