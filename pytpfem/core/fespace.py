"""pytpfem.core.fespace

Vector-valued H1 space on a :class:`QuadMesh` and its element restriction.

Global vector layout is controlled by ``ordering``:

* ``"nodes"``  – all nodal values of component 0, then component 1
  (``index = c*n_scalar_dofs + node``);
* ``"vdim"``   – components interleaved per node (``index = node*vdim + c``).

The local (element) layout is the flat component-major array documented in
:mod:`pytpfem.core.layout`.
"""
from __future__ import annotations

import logging
from typing import Callable

import numpy as np

from pytpfem.core.layout import local_size, local_view
from pytpfem.core.mesh import QuadMesh
from pytpfem.errors import ConfigurationError

logger = logging.getLogger(__name__)

_ORDERINGS = ("nodes", "vdim")


class FiniteElementSpace:
    def __init__(self, mesh: QuadMesh, vdim: int = 2, ordering: str = "nodes"):
        if ordering not in _ORDERINGS:
            raise ConfigurationError(f"Unknown ordering '{ordering}'. Use one of {_ORDERINGS}.")
        if vdim < 1:
            raise ConfigurationError(f"vdim must be positive, got {vdim}.")
        self.mesh = mesh
        self.vdim = int(vdim)
        self.ordering = ordering
        self._gather_map = None

    # ------------------------------------------------------------------
    # metadata
    # ------------------------------------------------------------------
    @property
    def dim(self) -> int:
        return self.mesh.spatial_dim

    @property
    def element_type(self) -> str:
        return self.mesh.element_type

    @property
    def order(self) -> int:
        return self.mesh.poly_order

    @property
    def basis_kind(self) -> str:
        """1D node family of the nodal basis (follows the mesh nodes)."""
        return self.mesh.node_kind

    @property
    def dofs_1d(self) -> int:
        return self.order + 1

    @property
    def n_dofs(self) -> int:
        """Scalar dofs per element."""
        return self.dofs_1d ** 2

    @property
    def n_elements(self) -> int:
        return self.mesh.n_elements

    @property
    def n_scalar_dofs(self) -> int:
        return self.mesh.n_nodes

    @property
    def vsize(self) -> int:
        return self.vdim * self.n_scalar_dofs

    @property
    def local_size(self) -> int:
        return local_size(self.dofs_1d, self.n_elements, self.vdim)

    def global_index(self, c, node):
        if self.ordering == "nodes":
            return c * self.n_scalar_dofs + node
        return node * self.vdim + c

    def element_dofs(self, eid: int) -> np.ndarray:
        """Global vector indices of element ``eid``, shape (vdim, n_dofs)."""
        nodes = self.mesh.elements_connectivity[eid]
        return np.stack([self.global_index(c, nodes) for c in range(self.vdim)])

    @property
    def gather_map(self) -> np.ndarray:
        """
        Flat int array ``g`` with ``local[i] = x[g[i]]`` in the component-major
        local layout (component, element, dof_y, dof_x).
        """
        if self._gather_map is None:
            conn = self.mesh.elements_connectivity          # (ne, d1d*d1d), dx fastest
            g = np.stack([self.global_index(c, conn) for c in range(self.vdim)])
            self._gather_map = np.ascontiguousarray(g.reshape(-1), dtype=np.int64)
            logger.debug(f"Built gather map: {self._gather_map.size} entries, "
                         f"{self.n_elements} elements, ordering={self.ordering}")
        return self._gather_map

    # ------------------------------------------------------------------
    # element restriction
    # ------------------------------------------------------------------
    def _check_vector(self, x: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64)
        if x.ndim != 1 or x.size != self.vsize:
            raise ConfigurationError(
                f"Global vector has shape {x.shape}, expected ({self.vsize},)."
            )
        return x

    def global_to_local(self, x: np.ndarray, out: np.ndarray | None = None) -> np.ndarray:
        """Gather the global vector into the flat per-element local array."""
        x = self._check_vector(x)
        if out is None:
            return x[self.gather_map]
        if out.size != self.local_size:
            raise ConfigurationError(
                f"Local buffer has {out.size} entries, expected {self.local_size}."
            )
        np.take(x, self.gather_map, out=out)
        return out

    def local_to_global(self, local: np.ndarray, out: np.ndarray | None = None) -> np.ndarray:
        """Transpose of :meth:`global_to_local`: sum element contributions."""
        local = np.asarray(local, dtype=np.float64).reshape(-1)
        if local.size != self.local_size:
            raise ConfigurationError(
                f"Local array has {local.size} entries, expected {self.local_size}."
            )
        if out is None:
            out = np.zeros(self.vsize)
        else:
            out[:] = 0.0
        np.add.at(out, self.gather_map, local)
        return out

    def local_view(self, local: np.ndarray) -> np.ndarray:
        return local_view(local, self.dofs_1d, self.n_elements)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def interpolate(self, func: Callable) -> np.ndarray:
        """
        Nodal interpolant of ``func(x, y) -> (u_0, ..., u_{vdim-1})``.
        ``func`` receives coordinate arrays and must broadcast.
        """
        xy = self.mesh.nodes_x_y_pos
        vals = func(xy[:, 0], xy[:, 1])
        out = np.empty(self.vsize)
        for c in range(self.vdim):
            out[self.global_index(c, np.arange(self.n_scalar_dofs))] = np.broadcast_to(
                np.asarray(vals[c], dtype=float), (self.n_scalar_dofs,))
        return out

    def __repr__(self):
        return (f"FiniteElementSpace(order={self.order}, vdim={self.vdim}, "
                f"n_elements={self.n_elements}, ordering='{self.ordering}')")
