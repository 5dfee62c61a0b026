import numpy as np

from gradmesh.hds import Mesh
from gradmesh.tree import VertexTree


def test_search_within_tolerance(random_points):
    mesh = Mesh(tree=False)
    tree = VertexTree(eps=1e-6)

    verts = [mesh.add_vertex(p) for p in random_points]

    for v in verts:
        assert tree.insert(v)

    assert len(tree) == len(verts)

    for v in verts:
        assert tree.search(v.point + 5e-7) is v

    assert tree.search((2.0, 2.0)) is None


def test_insert_duplicate():
    mesh = Mesh(tree=False)
    tree = VertexTree(eps=1e-3)

    a = mesh.add_vertex((0.5, 0.5))
    b = mesh.add_vertex((0.5005, 0.4995), check=False)

    assert tree.insert(a)
    assert not tree.insert(b)
    assert len(tree) == 1


def test_tolerance_across_split():
    mesh = Mesh(tree=False)
    tree = VertexTree(eps=1e-3)

    # Root splits on y, the query falls just below the split value.
    root = mesh.add_vertex((0.0, 1.0))
    right = mesh.add_vertex((5.0, 1.0002), check=False)

    tree.insert(root)
    tree.insert(right)

    assert tree.search((5.0, 0.9999)) is right


def test_deleted_vertices_skipped():
    mesh = Mesh()
    v = mesh.add_vertex((1.0, 2.0))

    mesh.delete_vertex(v)

    assert mesh.tree.search((1.0, 2.0)) is None
    assert mesh.add_vertex((1.0, 2.0)) is not v


def test_rebuild_after_move():
    mesh = Mesh()
    v = mesh.add_vertex((0.0, 0.0))

    v.point = (1.0, 1.0)
    mesh.tree.rebuild(mesh.vertices)

    assert mesh.find_vertex((1.0, 1.0)) is v
    assert mesh.find_vertex((0.0, 0.0)) is None
    assert np.allclose(mesh.points[v], (1.0, 1.0))
