"""pytpfem.jit.kernels

Gradient of a 2-component field at the quadrature points of tensor-product
quadrilaterals.

Sum factorization: for every nodal row ``dy`` the nodal values are first
contracted along x with the value and derivative tables (``vx``, ``vDx``),
then the two partial sums are spread along y.  Accumulation runs over ``dx``
innermost and ``dy`` outermost; no ``fastmath`` so that order is kept.

The per-element work lives in :func:`_element_gradient` only.  The
runtime-sized kernels and the specialized ones are thin ``prange`` drivers
that inline it, passing either the table shape or compile-time constants.

All kernels share the signature ``kernel(num_elements, B, G, local, out)``
on flat arrays laid out as in :mod:`pytpfem.core.layout`.
"""
import numba
import numpy as np

from pytpfem.core.layout import VDIM, grad_index, local_index, quad_index


@numba.njit(cache=True, inline="always")
def _element_gradient(e, num_elements, D1D, Q1D, B, G, local, out):
    NQ = Q1D * Q1D
    s_gradv = np.zeros((VDIM, VDIM, NQ))
    vDx = np.empty((VDIM, Q1D))
    vx = np.empty((VDIM, Q1D))
    for dy in range(D1D):
        for c in range(VDIM):
            for qx in range(Q1D):
                vDx[c, qx] = 0.0
                vx[c, qx] = 0.0
        for dx in range(D1D):
            for qx in range(Q1D):
                wDx = G[qx, dx]
                wx = B[qx, dx]
                for c in range(VDIM):
                    u = local[local_index(c, dx, dy, e, D1D, num_elements)]
                    vDx[c, qx] += u * wDx
                    vx[c, qx] += u * wx
        for qy in range(Q1D):
            vy = B[qy, dy]
            vDy = G[qy, dy]
            for qx in range(Q1D):
                q = quad_index(qx, qy, Q1D)
                for c in range(VDIM):
                    s_gradv[c, 0, q] += vy * vDx[c, qx]
                    s_gradv[c, 1, q] += vDy * vx[c, qx]
    for q in range(NQ):
        for col in range(VDIM):
            for row in range(VDIM):
                out[grad_index(row, col, q, e, NQ)] = s_gradv[row, col, q]


def _sum_factorized(num_elements, B, G, local, out):
    """Runtime-sized variant: D1D and Q1D are read from the table shape."""
    Q1D, D1D = B.shape
    for e in numba.prange(num_elements):
        _element_gradient(e, num_elements, D1D, Q1D, B, G, local, out)


grad_sum_factorized = numba.njit(cache=True, parallel=True)(_sum_factorized)

grad_sum_factorized_serial = numba.njit(_sum_factorized)


def make_specialized_kernel(d1d: int, q1d: int, parallel: bool = True):
    """
    Return a gradient kernel with ``D1D=d1d`` and ``Q1D=q1d`` frozen into the
    compiled code, so every loop bound is a compile-time constant.  The
    caller guarantees ``B.shape == G.shape == (q1d, d1d)``.
    """
    D1D = int(d1d)
    Q1D = int(q1d)

    @numba.njit(parallel=parallel)
    def kernel(num_elements, B, G, local, out):
        for e in numba.prange(num_elements):
            _element_gradient(e, num_elements, D1D, Q1D, B, G, local, out)

    return kernel


def grad_direct(num_elements, B, G, local):
    """
    Reference evaluation through the full 2D tensor-product matrices,
    O(D1D^2 * Q1D^2) per element.  Returns a new flat gradient array.
    """
    B = np.asarray(B, dtype=float)
    G = np.asarray(G, dtype=float)
    Q1D, D1D = B.shape
    NQ = Q1D * Q1D
    u = np.asarray(local, dtype=float).reshape(VDIM, num_elements, D1D * D1D)
    # kron(A, C)[qy*Q1D+qx, dy*D1D+dx] = A[qy,dy] * C[qx,dx]
    dphi_dx = np.kron(B, G)
    dphi_dy = np.kron(G, B)
    out = np.empty((num_elements, NQ, VDIM, VDIM))   # (e, q, col, row)
    out[:, :, 0, :] = np.einsum('qk,cek->eqc', dphi_dx, u)
    out[:, :, 1, :] = np.einsum('qk,cek->eqc', dphi_dy, u)
    return out.reshape(-1)
