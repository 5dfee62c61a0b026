import numpy as np
import pytest

import gradmesh.geom as geom
import gradmesh.refine as refine

from gradmesh.boundary import Boundary
from gradmesh.config import Parameters
from gradmesh.delaunay import Triangulation
from gradmesh.flags import FaceState
from gradmesh.hds import ConvergenceError


def test_space_function(square, domain):
    tri = domain(square)
    face = next(iter(tri))

    assert refine.space_function(tri, face, face.centroid) == \
        pytest.approx(0.5)

    tri.size_mesh = Triangulation.from_samples(
        [(-1, -1), (2, -1), (2, 2), (-1, 2)], [0.1, 0.1, 0.3, 0.3])

    assert refine.space_function(tri, face, (0.5, 0.5)) == \
        pytest.approx(0.2)

    # Outside of the size mesh
    assert refine.space_function(tri, face, (5.0, 5.0)) == \
        pytest.approx(0.5)


def test_set_parameters(square, domain):
    tri = domain(square)

    for f in tri:
        refine.set_parameters(tri, f)

        assert f.circumradius == pytest.approx(np.sqrt(0.5))
        assert f.state is FaceState.NONE

    coarse = Boundary([(0, 0), (1, 0), (1, 1), (0, 1)], 2.0, closed=True)
    tri = domain(coarse)

    for f in tri:
        refine.set_parameters(tri, f)
        assert f.state is FaceState.ACCEPTED


def test_first_classification(square, domain):
    tri = domain(square)

    refine.first_classification(tri)

    assert tri.classification
    assert len(tri.active_faces) == len(tri) == 2
    assert tri.active_faces.top[1] == pytest.approx(np.sqrt(0.5))


def test_classify_frontier(discretized_square, domain):
    tri = domain(discretized_square(4, 0.25))

    refine.first_classification(tri)

    for f in tri:
        if f.state is FaceState.ACCEPTED:
            assert not f.active
        elif f.active:
            assert any(g is None or g.state is FaceState.ACCEPTED
                       for g in f.neighbors)
        else:
            assert f.state is FaceState.WAITING


def test_insertion_point(square, domain):
    tri = domain(square)
    refine.first_classification(tri)

    face, _ = tri.active_faces.top
    point = refine.insertion_point(tri, face)

    # The reference edge is the first boundary edge of the face.
    ref = next(e for e in face.edges if e.cw_face is None)
    a, b = ref.origin.point, ref.dest.point

    assert geom.distance(point, a) == pytest.approx(geom.distance(point, b))
    assert geom.left_of(point, a, b)
    assert geom.distance(point, face.circumcenter) <= face.circumradius


def test_spacing_test(square, domain):
    tri = domain(square)
    face = next(iter(tri))
    corner = face[0].point

    assert refine.spacing_test(face, (0.5, 0.5), 0.5, 0.5)
    assert not refine.spacing_test(face, corner + 0.1, 0.5, 0.5)


def test_refine(discretized_square, domain, is_delaunay):
    tri = domain(discretized_square(4, 0.25))
    nv = len(tri.vertices)

    inserted = refine.refine(tri)

    assert inserted > 0
    assert len(tri.vertices) == nv + inserted
    assert not tri.active_faces

    pending = sum(f.state is not FaceState.ACCEPTED for f in tri)
    assert pending <= 2

    tri.validate()
    assert is_delaunay(tri)


def test_refine_graded(discretized_square, domain):
    tri = domain(discretized_square(8, 0.125))
    size = Triangulation.from_samples(
        [(0, 0), (1, 0), (1, 1), (0, 1)], [0.05, 0.25, 0.25, 0.05])

    refine.refine(tri, size)

    left = sum(v.point[0] < 0.5 for v in tri.vertices)
    right = sum(v.point[0] > 0.5 for v in tri.vertices)

    assert tri.size_mesh is size
    assert left > 2 * right


def test_refine_cap(discretized_square, domain):
    params = Parameters(max_refine_steps=1)
    tri = domain(discretized_square(4, 0.25), params=params)

    with pytest.raises(ConvergenceError):
        refine.refine(tri)
