"""pytpfem.utils.meshgen

Structured meshes of Q_n quadrilaterals on a rectangle.
"""
from typing import List, Optional, Tuple

import numba
import numpy as np

from pytpfem.core.topology import Node
from pytpfem.fem.reference.quad_qn import nodes_1d


def _translate_coords(coords: np.ndarray, offset: np.ndarray):
    return coords + offset


def _axis_coords(L: float, n_el: int, order: int, t: np.ndarray) -> np.ndarray:
    """Global node coordinates along one axis; ``t`` are the 1D nodes on [0,1]."""
    if n_el == 0:
        return np.zeros(1)
    idx = np.arange(order * n_el + 1)
    el = np.minimum(idx // order, n_el - 1)
    return (el + t[idx - el * order]) * (L / n_el)


def structured_quad(Lx: float, Ly: float, *, nx: int, ny: int, poly_order: int,
                    offset: Optional[Tuple[float, float]] = None, numba_path=True,
                    node_kind: str = "equispaced"):
    """
    Main wrapper for generating structured quadrilateral meshes.
    Returns raw data: node objects, element connectivity and corner node
    connectivity for each element.  Element connectivity is lexicographic
    (local x index fastest), which is the layout the gradient kernels expect.
    Inside each element nodes sit at the ``node_kind`` points of
    :func:`pytpfem.fem.reference.nodes_1d`.
    """
    if not isinstance(poly_order, (int, np.integer)) or poly_order < 1:
        raise ValueError("Polynomial order must be a positive integer.")
    if nx < 0 or ny < 0:
        raise ValueError("Element counts must be non-negative.")
    order = int(poly_order)
    t = nodes_1d(order, node_kind)
    x_coords = _axis_coords(Lx, nx, order, t)
    y_coords = _axis_coords(Ly, ny, order, t)
    if not numba_path:
        return _structured_qn(x_coords, y_coords, nx, ny, order, offset)

    nodes_coords, elements, elements_corner_nodes = _structured_qn_numba(
        x_coords, y_coords, nx, ny, order
    )
    if offset is not None:
        nodes_coords = _translate_coords(nodes_coords, np.array(offset, dtype=np.float64))

    node_objects = [
        Node(id=i, x=coord[0], y=coord[1])
        for i, coord in enumerate(nodes_coords)
    ]
    return node_objects, elements, elements_corner_nodes


@numba.jit(nopython=True, parallel=True, cache=True)
def _structured_qn_numba(x_coords, y_coords, nx: int, ny: int, order: int):
    """
    Generates raw data for a structured Qn quadrilateral mesh using Numba.
    """
    # --- 1. Node coordinates ---
    num_global_nodes_x = x_coords.shape[0]
    num_global_nodes_y = y_coords.shape[0]
    num_total_nodes = num_global_nodes_x * num_global_nodes_y
    nodes_coords = np.zeros((num_total_nodes, 2), dtype=np.float64)

    for j_glob in numba.prange(num_global_nodes_y):
        for i_glob in range(num_global_nodes_x):
            node_id = j_glob * num_global_nodes_x + i_glob
            nodes_coords[node_id, 0] = x_coords[i_glob]
            nodes_coords[node_id, 1] = y_coords[j_glob]

    # --- 2. Element connectivity ---
    num_elements = nx * ny
    nodes_per_edge_1d = order + 1
    elements = np.empty((num_elements, nodes_per_edge_1d**2), dtype=np.int64)
    elements_corner_nodes = np.empty((num_elements, 4), dtype=np.int64)

    for el_idx in numba.prange(num_elements):
        el_j = el_idx // nx
        el_i = el_idx % nx

        start_ix, start_iy = order * el_i, order * el_j

        local_node_idx = 0
        for local_ny in range(nodes_per_edge_1d):
            for local_nx in range(nodes_per_edge_1d):
                gid = (start_iy + local_ny) * num_global_nodes_x + (start_ix + local_nx)
                elements[el_idx, local_node_idx] = gid
                local_node_idx += 1

        # corners in CCW order
        elements_corner_nodes[el_idx, 0] = start_iy * num_global_nodes_x + start_ix
        elements_corner_nodes[el_idx, 1] = start_iy * num_global_nodes_x + (start_ix + order)
        elements_corner_nodes[el_idx, 2] = (start_iy + order) * num_global_nodes_x + (start_ix + order)
        elements_corner_nodes[el_idx, 3] = (start_iy + order) * num_global_nodes_x + start_ix

    return nodes_coords, elements, elements_corner_nodes


def _structured_qn(x_coords: np.ndarray, y_coords: np.ndarray, nx: int, ny: int, order: int,
                   offset: Optional[Tuple[float, float]] = None) -> Tuple[List[Node], np.ndarray, np.ndarray]:
    """
    Pure-Python twin of :func:`_structured_qn_numba`.

    Returns:
        tuple: (nodes, elements, elements_corner_nodes)
    """
    nodes_per_edge_1d = order + 1
    num_global_nodes_x = len(x_coords)
    num_global_nodes_y = len(y_coords)

    nodes: List[Node] = []
    for j_glob in range(num_global_nodes_y):
        for i_glob in range(num_global_nodes_x):
            nodes.append(Node(id=len(nodes), x=x_coords[i_glob], y=y_coords[j_glob]))

    num_elements = nx * ny
    elements = np.empty((num_elements, nodes_per_edge_1d**2), dtype=np.int64)
    elements_corner_nodes = np.empty((num_elements, 4), dtype=np.int64)

    get_node_id = lambda ix, iy: iy * num_global_nodes_x + ix

    for el_j in range(ny):
        for el_i in range(nx):
            eid = el_j * nx + el_i
            start_ix, start_iy = order * el_i, order * el_j

            local_node_idx = 0
            for local_ny in range(nodes_per_edge_1d):
                for local_nx in range(nodes_per_edge_1d):
                    elements[eid, local_node_idx] = get_node_id(start_ix + local_nx, start_iy + local_ny)
                    local_node_idx += 1

            elements_corner_nodes[eid] = [
                get_node_id(start_ix, start_iy),
                get_node_id(start_ix + order, start_iy),
                get_node_id(start_ix + order, start_iy + order),
                get_node_id(start_ix, start_iy + order),
            ]

    if offset is not None:
        for n in nodes:
            n.x += offset[0]
            n.y += offset[1]
    return nodes, elements, elements_corner_nodes
