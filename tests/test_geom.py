import math

import numpy as np
import pytest

import gradmesh.geom as geom


def test_tri_area_orientation():
    a, b, c = (0, 0), (1, 0), (0, 1)

    assert geom.tri_area(a, b, c) == 1.0
    assert geom.tri_area(a, c, b) == -1.0
    assert geom.ccw(a, b, c)
    assert not geom.ccw(a, c, b)

    assert geom.left_of(c, a, b)
    assert geom.right_of(c, b, a)
    assert not geom.left_of((2, 0), a, b)
    assert not geom.right_of((2, 0), a, b)


def test_in_circle():
    a, b, c = (1, 0), (0, 1), (-1, 0)

    assert geom.in_circle(a, b, c, (0, 0))
    assert geom.in_circle(a, b, c, (0, -0.99))
    assert not geom.in_circle(a, b, c, (0, -1.01))
    assert not geom.in_circle(a, b, c, (3, 3))


def test_in_circle_far_from_origin():
    offset = np.array([1e6, -1e6])
    a, b, c = (np.array(p) + offset for p in [(1, 0), (0, 1), (-1, 0)])

    assert geom.in_circle(a, b, c, offset + (0.0, -0.9))
    assert not geom.in_circle(a, b, c, offset + (0.0, -1.1))


def test_circumcircle():
    center, radius = geom.circumcircle((0, 0), (2, 0), (0, 2))

    assert np.allclose(center, (1, 1))
    assert radius == pytest.approx(math.sqrt(2))


def test_circumcircle_degenerate():
    center, radius = geom.circumcircle((0, 0), (1, 0), (4, 0))

    assert np.allclose(center, (2, 0))
    assert radius == pytest.approx(2.0)


def test_incircle():
    center, radius = geom.incircle((0, 0), (3, 0), (0, 4))

    assert np.allclose(center, (1, 1))
    assert radius == pytest.approx(1.0)

    center, radius = geom.incircle((1, 1), (1, 1), (1, 1))

    assert np.allclose(center, (1, 1))
    assert radius == 0.0


def test_tri_quality():
    h = 0.5 * math.sqrt(3.0)

    assert geom.tri_quality((0, 0), (1, 0), (0.5, h)) == pytest.approx(0.5)
    assert geom.tri_quality((0, 0), (0.5, h), (1, 0)) == pytest.approx(-0.5)
    assert geom.tri_quality((0, 0), (1, 0), (2, 0)) == 0.0

    assert 0.0 < geom.tri_quality((0, 0), (1, 0), (0.5, 0.1)) < 0.5


def test_normal_versor():
    assert np.allclose(geom.normal_versor((2, 0)), (0, 1))
    assert np.allclose(geom.normal_versor((0, -3)), (1, 0))


@pytest.mark.parametrize('d, expected', [
    ((1, 1), True),
    ((1, -1), False),
    ((-1, 1), False),
    ((1, 0), False),
])
def test_is_inside_convex_wedge(d, expected):
    assert geom.is_inside(d, (1, 0), (0, 1)) is expected


def test_is_inside_reflex_wedge():
    a, b = (0, 1), (1, 0)

    assert geom.is_inside((-1, -1), a, b)
    assert geom.is_inside((-1, 0), a, b)
    assert not geom.is_inside((1, 1), a, b)


def test_is_inside_full_turn():
    assert geom.is_inside((-1, 0), (1, 0), (1, 0))
    assert not geom.is_inside((2, 0), (1, 0), (1, 0))


def test_swappable():
    a, b = (0, 0), (2, 0)

    # Convex quadrilateral
    assert geom.swappable(a, b, (1, 1), (1, -1), 1e-4)

    # Reflex corner at b
    assert not geom.swappable(a, b, (3, 1), (3, -0.1), 1e-4)


def test_barycentric():
    la, lb, lc = geom.barycentric((0.25, 0.25), (0, 0), (1, 0), (0, 1))

    assert (la, lb, lc) == pytest.approx((0.5, 0.25, 0.25))
    assert geom.barycentric((0, 0), (0, 0), (1, 1), (2, 2)) == \
        pytest.approx((1/3, 1/3, 1/3))


def test_interpolation():
    assert geom.interp_linear(0.25, 2.0, 4.0) == 2.5

    assert geom.interp_parabolic(-1.0, 2.0, 4.0) == 2.0
    assert geom.interp_parabolic(2.0, 2.0, 4.0) == 4.0
    assert geom.interp_parabolic(0.5, 2.0, 4.0) == pytest.approx(3.5)


def test_segment_tests():
    a, b = (0, 0), (4, 0)

    assert geom.segment_param((1, 3), a, b) == pytest.approx(0.25)
    assert geom.segment_distance((1, 3), a, b) == pytest.approx(3.0)
    assert geom.segment_distance((-3, 4), a, b) == pytest.approx(5.0)

    assert geom.on_segment((2, 1e-9), a, b, 1e-7)
    assert not geom.on_segment((2, 1e-3), a, b, 1e-7)
    assert not geom.on_segment((0, 0), a, b, 1e-7)
    assert not geom.on_segment((5, 0), a, b, 1e-7)


def test_affine_frame():
    frame = geom.AffineFrame((1, 1), (0, 2))

    assert np.allclose(frame.origin, (1, 1))
    assert np.allclose(frame.to_local((1, 3)), (2, 0))
    assert np.allclose(frame.to_local((0, 1)), (0, 1))

    q = frame.to_local((3.5, -2.0))
    assert np.allclose(frame.to_global(q), (3.5, -2.0))

    with pytest.raises(ValueError):
        geom.AffineFrame((0, 0), (0, 0))
