"""pytpfem.core.layout

Flat-array layouts shared by the gather, the kernels and the callers.

Local field  (component, dof_x, dof_y, element), ``dx`` fastest, component
slowest::

    local_index(c, dx, dy, e, d1d, ne) = dx + d1d*(dy + d1d*(e + ne*c))

Gradient     (row, col, quad, element), ``row`` fastest, element slowest::

    grad_index(row, col, q, e, nq) = row + 2*(col + 2*(q + nq*e))

``row`` is the field component, ``col`` the reference direction
(0 = d/dx, 1 = d/dy).  ``q = qx + q1d*qy``.
"""
import numba
import numpy as np

VDIM = 2


@numba.njit(cache=True, inline="always")
def local_index(c, dx, dy, e, d1d, ne):
    """Offset of ``LocalField[c, dx, dy, e]``; valid for 0<=c<2, 0<=dx,dy<d1d, 0<=e<ne."""
    return dx + d1d*(dy + d1d*(e + ne*c))


@numba.njit(cache=True, inline="always")
def grad_index(row, col, q, e, nq):
    """Offset of ``GradientField[row, col, q, e]``; valid for 0<=row,col<2, 0<=q<nq, 0<=e<ne."""
    return row + VDIM*(col + VDIM*(q + nq*e))


@numba.njit(cache=True, inline="always")
def quad_index(qx, qy, q1d):
    return qx + q1d*qy


def local_size(d1d: int, ne: int, vdim: int = VDIM) -> int:
    return vdim * d1d * d1d * ne


def grad_size(nq: int, ne: int, vdim: int = VDIM) -> int:
    return vdim * vdim * nq * ne


def local_view(flat: np.ndarray, d1d: int, ne: int) -> np.ndarray:
    """Strided view of a flat local array indexed ``[c, dx, dy, e]``."""
    if flat.size != local_size(d1d, ne):
        raise ValueError(f"Local array has {flat.size} entries, expected {local_size(d1d, ne)}.")
    # C-order (c, e, dy, dx) -> (c, dx, dy, e)
    return flat.reshape(VDIM, ne, d1d, d1d).transpose(0, 3, 2, 1)


def grad_view(flat: np.ndarray, nq: int, ne: int) -> np.ndarray:
    """Strided view of a flat gradient array indexed ``[row, col, q, e]``."""
    if flat.size != grad_size(nq, ne):
        raise ValueError(f"Gradient array has {flat.size} entries, expected {grad_size(nq, ne)}.")
    # C-order (e, q, col, row) -> (row, col, q, e)
    return flat.reshape(ne, nq, VDIM, VDIM).transpose(3, 2, 1, 0)
