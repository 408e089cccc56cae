"""pytpfem.fem.basis_tables

1D dof-to-quadrature maps of a tensor-product element.

``B[q, d]`` is the value of the ``d``-th 1D nodal basis function at the
``q``-th 1D quadrature point, ``G[q, d]`` its derivative.  Both are shared by
every element of the mesh.
"""
import logging
from dataclasses import dataclass
from functools import lru_cache

import numpy as np

from pytpfem.errors import (
    BasisTableMismatchError,
    ConfigurationError,
    UnsupportedGeometryError,
)
from pytpfem.fem.reference import eval_1d
from pytpfem.fem.reference.quad_qn import _NODE_KINDS
from pytpfem.integration.quadrature import IntegrationRule

logger = logging.getLogger(__name__)


def _as_table(name: str, arr) -> np.ndarray:
    a = np.ascontiguousarray(arr, dtype=np.float64)
    if a.ndim != 2:
        raise BasisTableMismatchError(f"{name} must be a 2D (Q1D, D1D) array, got shape {a.shape}.")
    if a.shape[0] < 1 or a.shape[1] < 1:
        raise BasisTableMismatchError(f"{name} has an empty dimension: {a.shape}.")
    if not np.all(np.isfinite(a)):
        raise BasisTableMismatchError(f"{name} contains non-finite entries.")
    if a is arr:
        a = a.copy()
    a.setflags(write=False)
    return a


@dataclass(frozen=True, eq=False)
class BasisTables:
    B: np.ndarray
    G: np.ndarray

    def __post_init__(self):
        B = _as_table("basis value table", self.B)
        G = _as_table("basis derivative table", self.G)
        if B.shape != G.shape:
            raise BasisTableMismatchError(
                f"Value table {B.shape} and derivative table {G.shape} differ in shape."
            )
        object.__setattr__(self, "B", B)
        object.__setattr__(self, "G", G)

    @property
    def q1d(self) -> int:
        return self.B.shape[0]

    @property
    def d1d(self) -> int:
        return self.B.shape[1]

    def validate(self, d1d: int, q1d: int) -> None:
        if (self.d1d, self.q1d) != (d1d, q1d):
            raise BasisTableMismatchError(
                f"Tables are sized for (D1D={self.d1d}, Q1D={self.q1d}) "
                f"but (D1D={d1d}, Q1D={q1d}) was declared."
            )


@lru_cache(maxsize=None)
def _build(order: int, n_points_1d: int, kind: str) -> BasisTables:
    logger.debug(f"Tabulating 1D basis: order={order}, Q1D={n_points_1d}, kind={kind}")
    rule = IntegrationRule.from_points_1d(n_points_1d)
    z = rule.points_1d
    return BasisTables(B=eval_1d(order, z, kind, 0), G=eval_1d(order, z, kind, 1))


def get_basis_tables(geometry: str, order: int, rule: IntegrationRule,
                     kind: str = "equispaced") -> BasisTables:
    """
    Return the (cached) value/derivative tables for a ``(geometry, order, rule)``
    triple.  Only ``geometry == "quad"`` is supported.
    """
    if geometry != "quad":
        raise UnsupportedGeometryError(geometry)
    if not isinstance(order, (int, np.integer)) or order < 1:
        raise ConfigurationError(f"Polynomial order must be a positive integer, got {order!r}.")
    if rule.geometry != geometry:
        raise UnsupportedGeometryError(rule.geometry)
    if kind not in _NODE_KINDS:
        raise ConfigurationError(f"Unknown basis node family '{kind}'; expected one of {_NODE_KINDS}.")
    tables = _build(int(order), rule.n_points_1d, kind)
    tables.validate(int(order) + 1, rule.n_points_1d)
    return tables
