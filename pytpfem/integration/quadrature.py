"""pytpfem.integration.quadrature
Tensor-product Gauss–Legendre rules on the unit square [0,1]^2.
"""
# pytpfem.integration.quadrature
from dataclasses import dataclass
from functools import lru_cache

import numpy as np
from numpy.polynomial.legendre import leggauss

from pytpfem.errors import UnsupportedGeometryError


# -------------------------------------------------------------------------
# 1‑D Gauss–Legendre
# -------------------------------------------------------------------------
def gauss_legendre(n_points: int):
    if n_points < 1:
        raise ValueError(n_points)
    return leggauss(n_points)  # (points, weights)


@lru_cache(maxsize=None)
def gauss_legendre_01(n_points: int):
    """Gauss–Legendre nodes and weights mapped to [0,1]."""
    xi, w = gauss_legendre(int(n_points))
    lam = 0.5*(xi + 1.0)
    wl  = 0.5*w
    lam.setflags(write=False)
    wl.setflags(write=False)
    return lam, wl


# -------------------------------------------------------------------------
# Tensor‑product rule
# -------------------------------------------------------------------------
@dataclass(frozen=True)
class IntegrationRule:
    """
    Gauss–Legendre rule on the reference quadrilateral.

    ``order`` is the polynomial degree integrated exactly along each
    reference direction, so ``n_points_1d = order // 2 + 1``.  Quadrature
    points are numbered ``q = qx + n_points_1d * qy`` (x fastest).
    """
    order: int
    geometry: str = "quad"

    def __post_init__(self):
        if self.geometry != "quad":
            raise UnsupportedGeometryError(self.geometry)
        if self.order < 0:
            raise ValueError(f"Quadrature order must be non-negative, got {self.order}.")

    @classmethod
    def from_points_1d(cls, n_points_1d: int) -> "IntegrationRule":
        if n_points_1d < 1:
            raise ValueError(n_points_1d)
        return cls(order=2 * n_points_1d - 1)

    @property
    def n_points_1d(self) -> int:
        return self.order // 2 + 1

    @property
    def n_points(self) -> int:
        return self.n_points_1d ** 2

    @property
    def points_1d(self) -> np.ndarray:
        return gauss_legendre_01(self.n_points_1d)[0]

    @property
    def weights_1d(self) -> np.ndarray:
        return gauss_legendre_01(self.n_points_1d)[1]

    @property
    def points(self) -> np.ndarray:
        x = self.points_1d
        # qy outer, qx inner
        return np.array([[xq, yq] for yq in x for xq in x])

    @property
    def weights(self) -> np.ndarray:
        w = self.weights_1d
        return np.outer(w, w).reshape(-1)
