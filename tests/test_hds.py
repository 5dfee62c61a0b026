import numpy as np
import pytest

import gradmesh.iterators as iterators

from gradmesh.flags import EdgeFlag
from gradmesh.hds import Mesh
from gradmesh.hds import MeshError
from gradmesh.hds import NonManifoldError


@pytest.fixture
def quad_mesh():
    """ Unit square split along its diagonal, plus a wing triangle.
    """
    mesh = Mesh()
    p = [mesh.add_vertex(x) for x in
         [(0, 0), (1, 0), (1, 1), (0, 1), (2, 0.5)]]

    mesh.add_face([p[0], p[1], p[2]])
    mesh.add_face([p[0], p[2], p[3]])
    mesh.add_face([p[1], p[4], p[2]])

    return mesh, p


@pytest.fixture
def fan_mesh():
    """ Interior vertex surrounded by four triangles.
    """
    mesh = Mesh()
    c = mesh.add_vertex((0, 0))
    ring = [mesh.add_vertex(x) for x in [(1, 0), (0, 1), (-1, 0), (0, -1)]]

    for i in range(4):
        mesh.add_face([c, ring[i], ring[(i+1) % 4]])

    return mesh, c, ring


def test_add_vertex_dedupe():
    mesh = Mesh()
    v = mesh.add_vertex((0.25, 0.75), 0.1, z=2.0)

    assert mesh.add_vertex((0.25, 0.75 + 1e-8)) is v
    assert mesh.add_vertex((0.25, 0.75), check=False) is not v
    assert v.space == 0.1 and v.z == 2.0
    assert v.isolated

    with pytest.raises(ValueError):
        mesh.add_vertex((1.0, 2.0, 3.0))


def test_add_face_topology(quad_mesh):
    mesh, p = quad_mesh

    assert mesh.size == (5, 7, 3)
    mesh.validate()

    e = mesh.find_edge(p[0], p[2])
    assert e.face is not None and e.cw_face is not None
    assert e.symm.symm is e
    assert e.next.prev is e

    for f in mesh:
        assert all(e.face is f for e in f.edges)
        assert [e.ccw_edge for e in f.edges] == list(f.edges[1:] + f.edges[:1])

    assert p[2].degree == 4
    assert p[2].face_count == 3
    assert p[0].boundary and p[2].boundary


def test_add_face_rejects_malformed(quad_mesh):
    mesh, p = quad_mesh

    with pytest.raises(ValueError):
        mesh.add_face([p[0], p[1]])

    with pytest.raises(ValueError):
        mesh.add_face([p[0], p[0], p[1]])

    # Clockwise
    with pytest.raises(ValueError):
        mesh.add_face([p[1], p[3], p[4]])

    # Edge p0 -> p1 already bounds a face
    q = mesh.add_vertex((0.5, 0.25))
    with pytest.raises(NonManifoldError):
        mesh.add_face([p[0], p[1], q])

    assert mesh.size == (6, 7, 3)


def test_add_face_leaves_mesh_untouched(fan_mesh):
    mesh, c, ring = fan_mesh
    before = mesh.size

    x = mesh.add_vertex((5, 5))
    y = mesh.add_vertex((4, 6))

    # The fan center has no free sector, the corners x and y come first.
    with pytest.raises(NonManifoldError):
        mesh.add_face([x, y, c])

    assert mesh.size == (before[0] + 2, before[1], before[2])
    assert x.isolated and y.isolated
    assert c.degree == 4
    mesh.validate()


def test_add_face_closes_fan():
    mesh = Mesh()
    c = mesh.add_vertex((0, 0))
    ring = [mesh.add_vertex(x) for x in [(1, 0), (0, 1), (-1, 0), (0, -1)]]

    # Insert in an order that forces splicing into free sectors.
    for i in (0, 2, 1, 3):
        mesh.add_face([c, ring[i], ring[(i+1) % 4]])

    mesh.validate()

    assert c.degree == 4
    assert not c.boundary
    assert [int(v) for v in iterators.verts(c)] == [1, 2, 3, 4]


def test_swap_edge(quad_mesh):
    mesh, p = quad_mesh
    e = mesh.find_edge(p[0], p[2])

    left, right, wing = e.face, e.cw_face, mesh.find_edge(p[1], p[4]).face
    wing_cycle = wing.vertices
    before = mesh.size

    assert mesh.swap_edge(e) is e

    assert mesh.size == before
    assert mesh.find_edge(p[0], p[2]) is None
    assert e.origin is p[1] and e.dest is p[3]

    assert set(left.vertices) == {p[1], p[3], p[0]}
    assert set(right.vertices) == {p[3], p[1], p[2]}
    assert wing.vertices == wing_cycle

    mesh.validate()


def test_swap_edge_refused(quad_mesh):
    mesh, p = quad_mesh

    # Hull edge without a right face
    assert mesh.swap_edge(mesh.find_edge(p[0], p[1])) is None

    e = mesh.find_edge(p[1], p[2])
    e.flags |= EdgeFlag.BOUNDARY
    assert mesh.swap_edge(e) is None


def test_delete_face(quad_mesh):
    mesh, p = quad_mesh
    wing = mesh.find_edge(p[1], p[4]).face
    handle = wing.handle

    mesh.delete_face(wing)

    assert wing.deleted
    assert mesh.size == (5, 7, 2)

    with pytest.raises(KeyError):
        mesh.face(handle)

    # The freed slot is reused under a new generation.
    f = mesh.add_face([p[1], p[4], p[2]])
    assert f.handle.index == handle.index
    assert f.handle != handle


def test_delete_face_cascade(quad_mesh):
    mesh, p = quad_mesh
    wing = mesh.find_edge(p[1], p[4]).face

    mesh.delete_face(wing, del_isolated=True)

    assert p[4].deleted
    assert mesh.size == (4, 5, 2)
    mesh.validate()


def test_delete_vertex(quad_mesh):
    mesh, p = quad_mesh

    mesh.delete_vertex((0.0, 1.0))

    assert p[3].deleted
    assert mesh.size == (4, 5, 2)

    with pytest.raises(KeyError):
        mesh.delete_vertex((7.0, 7.0))

    mesh.delete_vertex(p[2].handle)
    assert mesh.size == (3, 2, 0)

    assert mesh.delete_isolated() == (2, 3)
    assert mesh.size == (0, 0, 0)


def test_handles(quad_mesh):
    mesh, p = quad_mesh
    e = mesh.find_edge(p[2], p[0])

    assert mesh.vertex(p[2].handle) is p[2]
    assert mesh.edge(e.handle) is e
    assert mesh.edge(e.symm.handle) is e.symm
    assert e.handle.index ^ 1 == e.symm.handle.index
    assert mesh.face(e.face.handle) is e.face


def test_validate_detects_orientation(quad_mesh):
    mesh, p = quad_mesh

    p[4].point = (0.5, 0.5)

    with pytest.raises(MeshError):
        mesh.validate()


def test_angular_degree(fan_mesh):
    mesh, c, ring = fan_mesh

    assert c.angular_degree() == pytest.approx(4.0)

    # Three faces covering 270 degrees
    mesh.delete_face(mesh.find_edge(c, ring[3]).face)
    assert ring[0].find_edge(c) is not None
    assert c.angular_degree() == pytest.approx(4 * 360 / 270)


def test_arrays_and_write(quad_mesh, tmp_path):
    mesh, p = quad_mesh
    mesh.delete_vertex(p[3])

    e = mesh.find_edge(p[0], p[1])
    e.flags |= EdgeFlag.BOUNDARY
    e.symm.flags |= EdgeFlag.BOUNDARY

    data = mesh.arrays()

    assert data.points.shape == (4, 2)
    assert np.allclose(data.points[3], (2, 0.5))
    assert sorted(map(sorted, data.faces)) == [[0, 1, 2], [1, 2, 3]]
    assert data.edges.shape == (5, 2)
    assert data.edge_boundary.sum() == 1

    filename = tmp_path / 'quad.obj'
    mesh.write(filename)

    lines = filename.read_text().splitlines()
    tags = [line.split()[0] for line in lines]

    assert tags.count('v') == 4
    assert tags.count('l') == 1
    assert tags.count('f') == 2
    assert 'l 1 2' in lines or 'l 2 1' in lines
