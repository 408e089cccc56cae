import numpy as np
import pytest

from pytpfem.errors import UnsupportedGeometryError
from pytpfem.integration import quadrature as q
from pytpfem.integration.quadrature import IntegrationRule


def integrate_ref_quad(func, rule):
    fvals = np.array([func(xy) for xy in rule.points])
    return (fvals * rule.weights).sum()


def test_constant_volume():
    for order in (0, 1, 3, 6):
        rule = IntegrationRule(order)
        assert np.isclose(rule.weights.sum(), 1.0, rtol=1e-12)


def test_points_per_direction_follow_order():
    assert IntegrationRule(0).n_points_1d == 1
    assert IntegrationRule(3).n_points_1d == 2
    assert IntegrationRule(6).n_points_1d == 4
    assert IntegrationRule(7).n_points == 16
    assert IntegrationRule.from_points_1d(4) == IntegrationRule(7)


def test_points_on_unit_square_x_fastest():
    rule = IntegrationRule.from_points_1d(3)
    pts = rule.points
    assert pts.shape == (9, 2)
    assert np.all((pts > 0.0) & (pts < 1.0))
    x1d = rule.points_1d
    np.testing.assert_allclose(pts[:3, 0], x1d)
    np.testing.assert_allclose(pts[:3, 1], x1d[0])
    np.testing.assert_allclose(pts[3, 1], x1d[1])


@pytest.mark.parametrize("n", [1, 2, 3, 5])
def test_polynomial_exactness(n):
    rule = IntegrationRule.from_points_1d(n)
    deg = 2 * n - 1
    # ∫_[0,1]^2 x^deg y^(deg-1) = 1/((deg+1) deg)  (deg>=1)
    val = integrate_ref_quad(lambda xy: xy[0]**deg * xy[1]**max(deg - 1, 0), rule)
    exact = 1.0 / ((deg + 1) * (max(deg - 1, 0) + 1))
    assert np.isclose(val, exact, rtol=1e-12)


def test_gauss_legendre_01_maps_interval():
    x, w = q.gauss_legendre_01(4)
    assert np.isclose(w.sum(), 1.0)
    np.testing.assert_allclose(x + x[::-1], 1.0)


def test_invalid_rules():
    with pytest.raises(ValueError):
        q.gauss_legendre(0)
    with pytest.raises(ValueError):
        IntegrationRule.from_points_1d(0)
    with pytest.raises(UnsupportedGeometryError):
        IntegrationRule(3, geometry="tri")


def test_rule_is_hashable():
    assert len({IntegrationRule(3), IntegrationRule(3), IntegrationRule(5)}) == 2
