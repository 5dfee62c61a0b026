import numpy as np
import pytest

import gradmesh.geom as geom

from gradmesh.boundary import Boundary
from gradmesh.delaunay import Triangulation


@pytest.fixture
def square_points():
    return np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])


@pytest.fixture
def square(square_points):
    return Boundary(square_points, 0.5, closed=True)


@pytest.fixture
def random_points():
    rng = np.random.default_rng(7)
    return rng.random((60, 2))


@pytest.fixture
def triangulation(random_points):
    tri = Triangulation()
    tri.init(([0.0, 0.0], [1.0, 1.0]))

    for p in random_points:
        tri.insert_point(p, 0.1)

    return tri


@pytest.fixture
def is_delaunay():
    """ Empty circumcircle test over all interior, unconstrained edges.
    """
    def check(mesh, rtol=1e-9):
        for e in mesh.edges:
            if e.boundary or e.face is None or e.cw_face is None:
                continue

            a, b = e.origin.point, e.dest.point
            c = e.ccw_edge.dest.point
            d = e.symm.ccw_edge.dest.point

            center, radius = geom.circumcircle(a, b, c)

            if geom.distance(center, d) < radius * (1.0 - rtol):
                return False

        return True

    return check


@pytest.fixture
def discretized_square():
    """ Factory of unit square loops with `n` points per side.
    """
    def make(n, spacing):
        t = np.arange(n) / n
        zero, one = np.zeros(n), np.ones(n)

        points = np.vstack([np.column_stack([t, zero]),
                            np.column_stack([one, t]),
                            np.column_stack([1.0 - t, one]),
                            np.column_stack([zero, 1.0 - t])])

        return Boundary(points, spacing, closed=True,
                        generating=[0, n, 2*n, 3*n])

    return make


@pytest.fixture
def domain():
    """ Factory of triangulated domains without refinement.
    """
    def make(*boundaries, params=None):
        tri = Triangulation(params)
        tri.init(([0.0, 0.0], [1.0, 1.0]))

        for b in boundaries:
            b.insert_into(tri)

        for b in boundaries:
            b.recover(tri)

        tri.delete_init()

        for b in boundaries:
            b.set_boundary(tri)

        tri.delete_isolated()

        return tri

    return make
