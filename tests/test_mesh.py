import numpy as np
import pytest

from pytpfem.core import QuadMesh
from pytpfem.fem.reference import nodes_1d
from pytpfem.utils.meshgen import structured_quad


def test_structured_counts():
    mesh = QuadMesh.structured(2.0, 1.0, nx=3, ny=2, poly_order=2)
    assert mesh.n_elements == 6
    assert mesh.n_nodes == (2 * 3 + 1) * (2 * 2 + 1)
    assert mesh.elements_connectivity.shape == (6, 9)
    assert mesh.spatial_dim == 2 and mesh.element_type == 'quad'


def test_connectivity_is_lexicographic():
    mesh = QuadMesh.structured(1.0, 1.0, nx=2, ny=2, poly_order=2)
    xy = mesh.element_node_coords(3)
    # x fastest within a row, rows bottom to top
    np.testing.assert_allclose(xy[:3, 1], 0.5)
    np.testing.assert_allclose(xy[:3, 0], [0.5, 0.75, 1.0])
    np.testing.assert_allclose(xy[::3, 0], 0.5)
    np.testing.assert_allclose(xy[::3, 1], [0.5, 0.75, 1.0])


def test_numba_and_python_paths_agree():
    n1, e1, c1 = structured_quad(1.5, 1.0, nx=3, ny=2, poly_order=3, numba_path=True)
    n2, e2, c2 = structured_quad(1.5, 1.0, nx=3, ny=2, poly_order=3, numba_path=False)
    assert n1 == n2
    np.testing.assert_array_equal(e1, e2)
    np.testing.assert_array_equal(c1, c2)


def test_python_path_applies_offset():
    n1, e1, c1 = structured_quad(1.0, 1.0, nx=2, ny=1, poly_order=2, offset=(0.5, 2.0), numba_path=True)
    n2, e2, c2 = structured_quad(1.0, 1.0, nx=2, ny=1, poly_order=2, offset=(0.5, 2.0), numba_path=False)
    assert n1 == n2
    assert (n2[0].x, n2[0].y) == pytest.approx((0.5, 2.0))
    assert (n2[-1].x, n2[-1].y) == pytest.approx((1.5, 3.0))
    np.testing.assert_array_equal(e1, e2)


def test_offset_and_bounding_box():
    mesh = QuadMesh.structured(2.0, 1.0, nx=4, ny=2, poly_order=1, offset=(1.0, -1.0))
    x0, y0, hx, hy = mesh.element_bounding_box(0)
    assert (x0, y0) == pytest.approx((1.0, -1.0))
    assert (hx, hy) == pytest.approx((0.5, 0.5))


def test_empty_mesh():
    mesh = QuadMesh.structured(1.0, 1.0, nx=0, ny=0, poly_order=2)
    assert mesh.n_elements == 0
    assert mesh.elements_connectivity.shape == (0, 9)


def test_invalid_meshes():
    with pytest.raises(ValueError):
        structured_quad(1.0, 1.0, nx=1, ny=1, poly_order=0)
    nodes, elems, corners = structured_quad(1.0, 1.0, nx=1, ny=1, poly_order=1)
    with pytest.raises(ValueError):
        QuadMesh(nodes, elems, corners, poly_order=2)
    with pytest.raises(ValueError):
        QuadMesh(nodes[:2], elems, corners, poly_order=1)


def test_gauss_lobatto_node_placement():
    mesh = QuadMesh.structured(2.0, 1.0, nx=2, ny=1, poly_order=3, node_kind="gauss_lobatto")
    assert mesh.node_kind == "gauss_lobatto"
    xy = mesh.element_node_coords(1)
    expected = 1.0 + 1.0 * nodes_1d(3, "gauss_lobatto")
    np.testing.assert_allclose(xy[:4, 0], expected)
    # shared edge between the two elements is a single set of nodes
    assert mesh.n_nodes == (3 * 2 + 1) * (3 * 1 + 1)
