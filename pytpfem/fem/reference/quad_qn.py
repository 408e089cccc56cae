from functools import lru_cache

import numpy as np
import sympy as sp

_NODE_KINDS = ("equispaced", "gauss_lobatto")


def nodes_1d(n: int, kind: str = "equispaced") -> np.ndarray:
    """Nodal points of the degree-``n`` Lagrange basis on [0,1]."""
    if n < 1:
        raise ValueError("Polynomial order must be a positive integer.")
    if kind == "equispaced":
        return np.linspace(0.0, 1.0, n+1)
    if kind == "gauss_lobatto":
        interior = np.sort(np.polynomial.legendre.Legendre.basis(n).deriv().roots().real)
        return np.concatenate(([0.0], 0.5*(interior + 1.0), [1.0]))
    raise KeyError(kind)


@lru_cache(maxsize=None)
def _lagrange_basis_1d(n: int, kind: str = "equispaced", max_deriv_order: int = 1):
    """Return 1D Lagrange basis + derivatives as NUMPY-callable lambdas."""
    x = sp.symbols('x')
    nodes = nodes_1d(n, kind)
    L = []
    dL = {k: [] for k in range(max_deriv_order+1)}
    for i, xi in enumerate(nodes):
        num = 1
        den = 1.0
        for j, xj in enumerate(nodes):
            if i == j:
                continue
            num *= (x - float(xj))
            den *= (float(xi) - float(xj))
        Li = sp.expand(num/den)
        L.append(sp.lambdify(x, Li, 'numpy'))
        for k in range(max_deriv_order+1):
            dL[k].append(sp.lambdify(x, sp.diff(Li, x, k), 'numpy'))
    return nodes, L, dL


def eval_1d(n: int, z, kind: str = "equispaced", deriv: int = 0) -> np.ndarray:
    """
    Values (``deriv=0``) or first derivatives (``deriv=1``) of the 1D basis at
    the points ``z``.  Returns shape ``(len(z), n+1)``.
    """
    _, _, dL = _lagrange_basis_1d(n, kind, max(deriv, 1))
    z = np.atleast_1d(np.asarray(z, dtype=float))
    return np.array([[float(f(zq)) for f in dL[deriv]] for zq in z], dtype=float)


@lru_cache(maxsize=None)
def quad_qn(n: int, kind: str = "equispaced"):
    """
    Tensor-product Q_n on [0,1]^2.
    Returns: (shape_fn, deriv_fns) where
      shape_fn(xi,eta) -> ( (n+1)^2, )
      deriv_fns[(ax,ay)](xi,eta) -> ( (n+1)^2, ), ax+ay<=1
    Stacking order is (eta outer, xi inner): index = j*(n+1) + i
    """
    def shape(xi, eta):
        lx = eval_1d(n, xi, kind)[0]
        ly = eval_1d(n, eta, kind)[0]
        # eta outer, xi inner
        return np.outer(ly, lx).reshape(-1)

    derivs = {}
    for ax, ay in ((0, 0), (1, 0), (0, 1)):
        def make(ax=ax, ay=ay):
            def d(xi, eta):
                dx = eval_1d(n, xi, kind, ax)[0]
                dy = eval_1d(n, eta, kind, ay)[0]
                return np.outer(dy, dx).reshape(-1)
            return d
        derivs[(ax, ay)] = make()
    return shape, derivs
