import logging

import numpy as np
import pytest

import gradmesh.traits as traits

from gradmesh.boundary import Boundary
from gradmesh.config import Parameters
from gradmesh.delaunay import Triangulation
from gradmesh.region import Region


def loop(points, spacing):
    return Boundary(np.array(points, dtype=float), spacing, closed=True)


def box(lo, hi, spacing):
    return loop([[lo, lo], [hi, lo], [hi, hi], [lo, hi]], spacing)


def assert_conforming(mesh, boundary):
    vertices = boundary.vertices

    for i, j in boundary.segments():
        e = mesh.find_edge(vertices[i], vertices[j])

        assert e is not None
        assert e.boundary and e.symm.boundary


def test_region_setup(square):
    region = Region([square], [((0.5, 0.5), 0.1)], name='square')

    assert region.boundaries == [square]
    assert len(region.weights) == 1
    assert region.mesh is None
    assert region.params == Parameters()
    assert repr(region) == 'Region(1 boundaries, 1 weights)'

    with pytest.raises(TypeError):
        region.add_boundary([[0, 0], [1, 0], [1, 1]])

    with pytest.raises(ValueError):
        region.add_weight((0.5, 0.5), 0.0)

    with pytest.raises(ValueError):
        region.add_weight((0.5, 0.5, 0.5), 0.1)

    with pytest.raises(ValueError):
        Region().build()


def test_contains(square):
    hole = box(0.25, 0.75, 0.1)
    slit = Boundary([[0.1, 0.1], [0.2, 0.2]], 0.1)

    region = Region([square, hole, slit])

    assert region.contains((0.1, 0.5))
    assert not region.contains((0.5, 0.5))
    assert not region.contains((2.0, 0.5))

    # Without closed loops everything belongs to the domain
    assert Region([slit]).contains((5.0, 5.0))


def test_unit_square(square):
    region = Region([square])
    mesh = region.build()

    assert region.mesh is mesh
    assert mesh.init_vertices == ()
    assert mesh.classification is False
    assert not mesh.active_faces

    # Boundary edges trace the input segments
    boundary = [e for e in mesh.edges if e.boundary]
    corners = {tuple(p) for p in square.points}

    assert len(boundary) == 4
    assert_conforming(mesh, square)

    for e in boundary:
        assert tuple(e.origin.point) in corners
        assert tuple(e.dest.point) in corners

    # No holes in the interior
    for e in mesh.edges:
        if e.boundary:
            assert (e.face is None) != (e.symm.face is None)
        else:
            assert e.face is not None and e.symm.face is not None

    assert traits.total_area(mesh) == pytest.approx(1.0)
    assert len(mesh.faces) > 2


def test_center_weight(square_points, is_delaunay):
    square = Boundary(square_points, 1.0, closed=True)
    region = Region([square], [((0.5, 0.5), 1.0)])

    mesh = region.build()
    center = mesh.find_vertex((0.5, 0.5))

    assert center is not None and center.fixed
    assert mesh.size == (5, 8, 4)

    for f in mesh.faces:
        assert center in f
        assert f.circumradius == pytest.approx(0.5)

    assert is_delaunay(mesh)


def test_orientation(square_points):
    # Clockwise input is turned around
    square = Boundary(square_points[::-1], 0.5, closed=True)
    mesh = Region([square]).build()

    assert square.area() == pytest.approx(1.0)
    assert all(traits.face_area(f) > 0.0 for f in mesh.faces)


def test_hole():
    outer = box(0.0, 4.0, 1.0)
    inner = box(1.5, 2.5, 0.5)

    region = Region([outer, inner])
    mesh = region.build()

    assert inner.area() == pytest.approx(-1.0)
    assert traits.total_area(mesh) == pytest.approx(15.0)

    assert_conforming(mesh, outer)
    assert_conforming(mesh, inner)

    for f in mesh.faces:
        x, y = f.centroid
        assert not (1.5 < x < 2.5 and 1.5 < y < 2.5)


def test_slit():
    outer = box(0.0, 2.0, 0.5)
    slit = Boundary([[0.5, 1.0], [1.0, 1.0], [1.5, 1.0]], 0.5)

    mesh = Region([outer, slit]).build()

    assert_conforming(mesh, outer)
    assert_conforming(mesh, slit)
    assert traits.total_area(mesh) == pytest.approx(4.0)

    # Both sides of the slit are meshed
    for i, j in slit.segments():
        e = mesh.find_edge(slit.vertices[i], slit.vertices[j])
        assert e.face is not None and e.symm.face is not None


@pytest.mark.parametrize('recovery', ['midpoint', 'swap'])
def test_concave(recovery):
    ell = loop([[0, 0], [2, 0], [2, 1], [1, 1], [1, 2], [0, 2]], 0.4)
    params = Parameters(recovery=recovery)

    mesh = Region([ell], params=params).build()

    assert mesh.params is params
    assert_conforming(mesh, ell)
    assert traits.total_area(mesh) == pytest.approx(3.0)

    for f in mesh.faces:
        x, y = f.centroid
        assert not (x > 1.0 and y > 1.0)


def test_weights(square_points, caplog):
    square = Boundary(square_points, 0.5, closed=True)
    region = Region([square])

    region.add_weight((0.5, 0.5), 0.05)
    region.add_weight((3.0, 3.0), 0.05)

    with caplog.at_level(logging.WARNING, logger='gradmesh.region'):
        mesh = region.build()

    assert '1 weight points outside the domain' in caplog.text
    assert mesh.find_vertex((3.0, 3.0)) is None

    center = mesh.find_vertex((0.5, 0.5))
    assert center is not None and center.fixed

    # Grading around the weight point
    near = [v for v in mesh.vertices
            if np.hypot(*(v.point - 0.5)) < 0.2]
    assert len(near) > 4

    lo, hi = traits.bounds([v.point for v in mesh.vertices])
    assert np.allclose(lo, (0.0, 0.0))
    assert np.allclose(hi, (1.0, 1.0))


def test_size_mesh(discretized_square):
    square = discretized_square(8, 0.125)
    size = Triangulation.from_samples(
        [(0, 0), (1, 0), (1, 1), (0, 1)], [0.05, 0.25, 0.25, 0.05])

    region = Region([square], size_mesh=size)
    mesh = region.build()

    left = sum(v.point[0] < 0.5 for v in mesh.vertices)
    right = sum(v.point[0] > 0.5 for v in mesh.vertices)

    assert mesh.size_mesh is size
    assert left > 2 * right


def test_relax(discretized_square):
    square = discretized_square(5, 0.2)
    params = Parameters(relax=True)

    mesh = Region([square], params=params).build()

    assert_conforming(mesh, square)
    assert traits.total_area(mesh) == pytest.approx(1.0)


def test_verbose(square_points, capsys):
    square = Boundary(square_points, 0.5, closed=True)
    region = Region([square], [((4.0, 4.0), 0.1)])

    region.build(quiet=False)
    out = capsys.readouterr().out

    assert 'meshing' in out
    assert 'weight points outside the domain dropped' in out
    assert 'quality min' in out

    region.build()
    assert capsys.readouterr().out == ''


def test_chain_from_loop_vertex(square_points):
    square = Boundary(square_points, 0.5, closed=True)
    chain = Boundary([[0.0, 0.0], [0.5, 0.5]], 0.25)

    mesh = Region([square, chain]).build()

    assert chain.vertices[0] is square.vertices[0]
    assert_conforming(mesh, square)
    assert_conforming(mesh, chain)
    assert traits.total_area(mesh) == pytest.approx(1.0)
