from typing import List, Optional

import numpy as np

from pytpfem.core.topology import Node
from pytpfem.utils.meshgen import structured_quad


class QuadMesh:
    """
    Node coordinates and element connectivity of a 2D mesh of Q_n elements.

    ``element_connectivity[e]`` lists the ``(n+1)**2`` node ids of element
    ``e`` in lexicographic order (local x index fastest).  ``node_kind`` names the
    1D node family the nodes sit on inside each element.  The mesh is only
    metadata for the gradient kernels: element count, dimension, order.
    """

    def __init__(self,
                 nodes: List[Node],
                 element_connectivity: np.ndarray,
                 elements_corner_nodes: Optional[np.ndarray] = None,
                 *,
                 element_type: str = 'quad',
                 poly_order: int = 1,
                 spatial_dim: int = 2,
                 node_kind: str = "equispaced"):
        self.element_type = element_type
        self.node_kind = node_kind
        self.poly_order = int(poly_order)
        self.spatial_dim = int(spatial_dim)
        self.nodes_list: List[Node] = list(nodes)
        self.nodes_x_y_pos = np.array([[n.x, n.y] for n in self.nodes_list], dtype=float).reshape(-1, 2)
        self.elements_connectivity = np.asarray(element_connectivity, dtype=np.int64)
        if self.elements_connectivity.size == 0:
            self.elements_connectivity = self.elements_connectivity.reshape(0, (self.poly_order + 1) ** 2)
        self.corner_connectivity = (
            None if elements_corner_nodes is None
            else np.asarray(elements_corner_nodes, dtype=np.int64)
        )
        self.n_elements = len(self.elements_connectivity)

        if self.n_elements and self.elements_connectivity.shape[1] != (self.poly_order + 1) ** 2:
            raise ValueError(
                f"Elements carry {self.elements_connectivity.shape[1]} nodes, "
                f"expected {(self.poly_order + 1) ** 2} for order {self.poly_order}."
            )
        if self.n_elements and self.elements_connectivity.max() >= self.n_nodes:
            raise ValueError("Element connectivity references a node id outside the mesh.")

    @classmethod
    def structured(cls, Lx: float, Ly: float, *, nx: int, ny: int, poly_order: int,
                   offset=None, node_kind: str = "equispaced") -> "QuadMesh":
        nodes, elems, corners = structured_quad(Lx, Ly, nx=nx, ny=ny, poly_order=poly_order,
                                                offset=offset, node_kind=node_kind)
        return cls(nodes, elems, corners, element_type='quad', poly_order=poly_order,
                   node_kind=node_kind)

    @property
    def n_nodes(self) -> int:
        return len(self.nodes_list)

    def element_node_coords(self, eid: int) -> np.ndarray:
        """Coordinates of all nodes of element ``eid``, shape ((n+1)**2, 2)."""
        return self.nodes_x_y_pos[self.elements_connectivity[eid]]

    def element_bounding_box(self, eid: int):
        """``(x0, y0, hx, hy)`` of an axis-aligned element."""
        xy = self.nodes_x_y_pos[self.corner_connectivity[eid]] if self.corner_connectivity is not None \
            else self.element_node_coords(eid)
        lo = xy.min(axis=0)
        hi = xy.max(axis=0)
        return lo[0], lo[1], hi[0] - lo[0], hi[1] - lo[1]

    def __repr__(self):
        return (f"QuadMesh(n_elements={self.n_elements}, n_nodes={self.n_nodes}, "
                f"poly_order={self.poly_order}, element_type='{self.element_type}')")
