"""pytpfem.fem.operators.grad

Gradient of a 2-component H1 field at the quadrature points of every
element, in reference coordinates.

    grad = QuadratureGradient(space, rule)
    G = grad(x)            # G[row, col, q, e] = d u_row / d xi_col
    grad(x, out=G)         # overwrite G in place

``row`` is the field component, ``col`` the reference direction, ``q`` the
quadrature point (``qx + Q1D*qy``) and ``e`` the element.

Results are caller-owned: each call returns fresh memory unless ``out`` is
given.  An operator built with ``reuse_output=True`` returns views of its
workspace output buffer instead, which the next call on that workspace
overwrites.
"""
from __future__ import annotations

import logging
import threading

import numpy as np

from pytpfem import config
from pytpfem.core.fespace import FiniteElementSpace
from pytpfem.core.layout import VDIM, grad_size, grad_view, local_size
from pytpfem.errors import (
    ConfigurationError,
    UnsupportedDimensionError,
    UnsupportedGeometryError,
    UnsupportedVDimError,
)
from pytpfem.fem.basis_tables import BasisTables, get_basis_tables
from pytpfem.integration.quadrature import IntegrationRule
from pytpfem.jit.registry import KernelRegistry
from pytpfem.memory import GradientWorkspace, allocate

logger = logging.getLogger(__name__)

_DEFAULT_REGISTRY: KernelRegistry | None = None
_DEFAULT_REGISTRY_LOCK = threading.Lock()


def default_registry() -> KernelRegistry:
    """Registry shared by operators that were not handed one explicitly."""
    global _DEFAULT_REGISTRY
    with _DEFAULT_REGISTRY_LOCK:
        if _DEFAULT_REGISTRY is None:
            _DEFAULT_REGISTRY = KernelRegistry()
        return _DEFAULT_REGISTRY


def check_space(space: FiniteElementSpace) -> None:
    if space.dim != 2:
        raise UnsupportedDimensionError(space.dim)
    if space.vdim != VDIM:
        raise UnsupportedVDimError(space.vdim)
    if space.element_type != "quad":
        raise UnsupportedGeometryError(space.element_type)


def flat_output(out: np.ndarray, nq: int, ne: int) -> np.ndarray:
    """
    Flat kernel view of a caller-supplied output.  ``out`` is either a flat
    contiguous buffer of ``grad_size(nq, ne)`` entries or a ``[row, col, q, e]``
    array laid out like the operator's own results (e.g. a previous result).
    """
    size = grad_size(nq, ne)
    if not isinstance(out, np.ndarray) or out.dtype != np.float64:
        raise ConfigurationError(f"Output buffer must be a float64 ndarray, got "
                                 f"{getattr(out, 'dtype', type(out).__name__)}.")
    if not out.flags.writeable:
        raise ConfigurationError("Output buffer is read-only.")
    if out.ndim == 1:
        if out.size != size:
            raise ConfigurationError(f"Output buffer has {out.size} entries, "
                                     f"expected grad_size={size}.")
        if not out.flags.c_contiguous:
            raise ConfigurationError("Flat output buffer must be contiguous.")
        return out
    if out.shape != (VDIM, VDIM, nq, ne):
        raise ConfigurationError(f"Output shape {out.shape} does not match "
                                 f"{(VDIM, VDIM, nq, ne)}.")
    # [row, col, q, e] with row fastest in memory
    if not out.T.flags.c_contiguous:
        raise ConfigurationError("Output array is not laid out element-major "
                                 "(row fastest); pass a flat buffer instead.")
    return out.T.reshape(-1)


class QuadratureGradient:
    """
    Dof-to-quadrature gradient operator for one (space, rule) pair.

    All preconditions are checked here, once: dimension, number of
    components, element geometry, basis table sizes and kernel availability.
    Calls only re-check the input length, the output buffer and the element
    count.

    :meth:`apply` writes into ``out`` when given, otherwise into freshly
    allocated memory.  With ``reuse_output=True`` it writes into the
    workspace output buffer and the returned view is overwritten by the next
    call on the same workspace.
    """

    def __init__(self, space: FiniteElementSpace, rule: IntegrationRule, *,
                 registry: KernelRegistry | None = None,
                 workspace: GradientWorkspace | None = None,
                 tables: BasisTables | None = None,
                 basis_kind: str | None = None,
                 reuse_output: bool = False):
        check_space(space)
        if rule.geometry != space.element_type:
            raise UnsupportedGeometryError(rule.geometry)
        self.space = space
        self.rule = rule
        self.d1d = space.dofs_1d
        self.q1d = rule.n_points_1d
        self.tables = tables if tables is not None else get_basis_tables(
            space.element_type, space.order, rule,
            basis_kind if basis_kind is not None else space.basis_kind)
        self.tables.validate(self.d1d, self.q1d)
        self.registry = registry if registry is not None else default_registry()
        self.kernel = self.registry.get(self.d1d, self.q1d)
        self.workspace = workspace if workspace is not None else GradientWorkspace()
        self.reuse_output = bool(reuse_output)

    @property
    def n_points(self) -> int:
        return self.q1d * self.q1d

    @property
    def output_shape(self):
        return (VDIM, VDIM, self.n_points, self.space.n_elements)

    def apply(self, x: np.ndarray, out: np.ndarray | None = None) -> np.ndarray:
        space = self.space
        ne = space.n_elements
        nq = self.n_points
        ws = self.workspace
        if out is not None:
            flat = flat_output(out, nq, ne)
        with ws.acquire():
            if out is not None:
                local = ws.ensure_local(local_size(self.d1d, ne))
            elif self.reuse_output:
                local, flat = ws.ensure(local_size(self.d1d, ne), grad_size(nq, ne))
            else:
                local = ws.ensure_local(local_size(self.d1d, ne))
                flat = allocate(ws.allocator, "out", grad_size(nq, ne))
            space.global_to_local(x, out=local)
            if config.debug():
                logger.debug(f"grad kernel (D1D={self.d1d}, Q1D={self.q1d}): ne={ne}, "
                             f"B{self.tables.B.shape}, local{local.shape}, out{flat.shape}")
            if ne > 0:
                self.kernel(ne, self.tables.B, self.tables.G, local, flat)
            return grad_view(flat, nq, ne)

    __call__ = apply

    def __repr__(self):
        return (f"QuadratureGradient(D1D={self.d1d}, Q1D={self.q1d}, "
                f"n_elements={self.space.n_elements}, reuse_output={self.reuse_output})")


def dof_to_quad_grad(space: FiniteElementSpace, rule: IntegrationRule, x: np.ndarray, *,
                     out: np.ndarray | None = None,
                     workspace: GradientWorkspace | None = None,
                     registry: KernelRegistry | None = None) -> np.ndarray:
    """
    Gradient of the field ``x`` at the points of ``rule``, indexed
    ``[row, col, q, e]``.  Written into ``out`` when given, otherwise into
    fresh memory; ``workspace`` only supplies the gather scratch.
    """
    op = QuadratureGradient(space, rule, registry=registry, workspace=workspace)
    return op(x, out=out)


def physical_gradient(grad: np.ndarray, space: FiniteElementSpace) -> np.ndarray:
    """
    Map reference gradients ``[row, col, q, e]`` to physical ones on
    axis-aligned rectangular elements (d/dx = d/dxi / hx, d/dy = d/deta / hy).
    """
    mesh = space.mesh
    ne = mesh.n_elements
    if grad.shape[3] != ne:
        raise ValueError(f"Gradient covers {grad.shape[3]} elements, mesh has {ne}.")
    if ne == 0:
        return np.array(grad, copy=True)
    corners = mesh.corner_connectivity
    if corners is None:
        d1d = space.dofs_1d
        corners = mesh.elements_connectivity[:, [0, d1d - 1, d1d * d1d - 1, d1d * (d1d - 1)]]
    xy = mesh.nodes_x_y_pos[corners]                  # (ne, 4, 2)
    h = xy.max(axis=1) - xy.min(axis=1)               # (ne, 2)
    if np.any(h <= 0.0):
        raise ValueError("Degenerate element with zero extent.")
    return grad / h.T[None, :, None, :]
