# Copyright 2024, m3shware
#
# Permission is hereby granted, free of charge, to any person obtaining a
# copy of this software and associated documentation files (the "Software"),
# to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense,
# and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING
# FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS
# IN THE SOFTWARE.

""" Winged-edge data structure.

A planar mesh of triangles (and transient quadrilaterals) is described by
three slot arenas:

    - an arena of :class:`Vertex` objects,
    - an arena of :class:`EdgePair` objects, each owning two mutually
      symmetric :class:`Edge` objects (half-edges),
    - and an arena of :class:`Face` objects.

These containers and the relations between their items are managed by the
:class:`Mesh` class. Every edge belongs to a doubly linked ring of edges
around its origin: :attr:`Edge.next` is the next edge in counter-clockwise
order, :attr:`Edge.prev` the next edge in clockwise order. The face to the
left of an edge is the face between the edge and its ring successor.

Items reference each other directly. Their stable identity is a
:class:`~gradmesh.arena.Handle`; the twin of an edge is derived from the
parity of its handle index.

Note
----
To ease debugging, this module relies on assertions which can slow down
script execution. You can disable assertions by running in optimized mode
via the "-O" command line argument.
"""

import logging

from pathlib import Path
from time import perf_counter
from typing import NamedTuple

import numpy as np

import gradmesh.obj as obj
import gradmesh.geom as geom
import gradmesh.flags as flags
import gradmesh.config as config

from gradmesh.arena import Arena
from gradmesh.arena import Handle
from gradmesh.heap import MaxHeap
from gradmesh.tree import VertexTree


logger = logging.getLogger(__name__)


class MeshArrays(NamedTuple):
    """ Compacted mesh data.

    All indices are 0-based and refer to the compacted vertex numbering.
    """

    points: np.ndarray
    """ Vertex coordinates, shape (n, 2). """

    elevation: np.ndarray
    """ Out of plane vertex values, shape (n, ). """

    spacing: np.ndarray
    """ Target spacing per vertex, shape (n, ). """

    boundary: np.ndarray
    """ Boolean boundary membership per vertex, shape (n, ). """

    faces: list
    """ Counter-clockwise vertex index lists of length 3 or 4. """

    edges: np.ndarray
    """ Vertex index pairs, one row per edge pair, shape (m, 2). """

    edge_boundary: np.ndarray
    """ Boolean boundary classification per edge pair, shape (m, ). """


class Mesh:
    """ Mesh kernel.

    Parameters
    ----------
    name : str, optional
        Name tag.
    eps : float, optional
        Tolerance used to detect coincident vertices.
    tree : bool, optional
        Maintain a spatial index for duplicate detection. A linear scan
        over all vertices is used otherwise.


    Faces are added by vertex lists in counter-clockwise order:

    .. code-block:: python
       :linenos:

       mesh = Mesh()
       a = mesh.add_vertex((0.0, 0.0))
       b = mesh.add_vertex((1.0, 0.0))
       c = mesh.add_vertex((0.0, 1.0))
       f = mesh.add_face([a, b, c])
    """

    def __init__(self, *, name=None, eps=config.EPSILON, tree=True):
        self._points = np.empty((0, 2))

        self._verts = Arena()
        self._pairs = Arena()
        self._faces = Arena()

        self._eps = eps
        self._tree = VertexTree(eps) if tree else None

        # Refinement candidates, keyed by circumradius.
        self._active = MaxHeap()

        # Seed of point location, may refer to a deleted edge.
        self._starting_edge = None

        self.name = name

    def __iter__(self):
        """ Face iterator.

        Yields
        ------
        Face
            Next live face in ascending slot order.
        """
        return iter(self._faces)

    def __bool__(self):
        return True

    def __len__(self):
        """ Number of live faces.
        """
        return len(self._faces)

    @property
    def name(self):
        """ Name tag.

        :type: str
        """
        return self._name

    @name.setter
    def name(self, value):
        self._name = value if value is None else Path(value).stem

    @property
    def eps(self):
        """ Vertex coincidence tolerance.

        :type: float
        """
        return self._eps

    @property
    def points(self):
        """ Vertex coordinate array.

        One row per vertex slot. Rows of free slots and trailing rows
        reserved for growth hold stale data.

        :type: ~numpy.ndarray
        """
        return self._points

    @property
    def vertices(self):
        """ Live vertices in slot order.

        :type: list[Vertex]
        """
        return list(self._verts)

    @property
    def faces(self):
        """ Live faces in slot order.

        :type: list[Face]
        """
        return list(self._faces)

    @property
    def edges(self):
        """ One half-edge per live edge pair, in slot order.

        :type: list[Edge]
        """
        return [pair._edges[0] for pair in self._pairs]

    @property
    def size(self):
        """ Mesh size.

        The number of live vertices, edge pairs, and faces.

        :type: (int, int, int)
        """
        return len(self._verts), len(self._pairs), len(self._faces)

    @property
    def active_faces(self):
        """ Refinement candidates.

        A priority queue of ``(face, circumradius)`` pairs. The :attr:`top`
        element is the active face of largest circumradius.

        :type: ~gradmesh.heap.MaxHeap
        """
        return self._active

    @property
    def tree(self):
        """ Spatial vertex index.

        :type: ~gradmesh.tree.VertexTree or None
        """
        return self._tree

    def vertex(self, handle):
        """ Resolve vertex handle.

        Raises
        ------
        KeyError
            For stale handles.
        """
        return self._verts[handle]

    def edge(self, handle):
        """ Resolve half-edge handle.

        The handle index of a half-edge is twice the slot index of its
        edge pair plus its side (0 or 1).

        Raises
        ------
        KeyError
            For stale handles.
        """
        index, generation = handle
        pair = self._pairs[Handle(index >> 1, generation)]

        return pair._edges[index & 1]

    def face(self, handle):
        """ Resolve face handle.

        Raises
        ------
        KeyError
            For stale handles.
        """
        return self._faces[handle]

    def clear(self):
        """ Remove all mesh items.
        """
        for item in self._verts:
            item._deleted = True

        for item in self._pairs:
            item._deleted = True

        for item in self._faces:
            item._deleted = True

        self._verts.clear()
        self._pairs.clear()
        self._faces.clear()

        self._active = MaxHeap()
        self._starting_edge = None
        self._points = np.empty((0, 2))

        if self._tree is not None:
            self._tree.clear()

    def add_vertex(self, point, space=0.0, *, z=0.0, check=True):
        """ Create and add new vertex.

        Parameters
        ----------
        point : array_like, shape (2, )
            Vertex coordinates.
        space : float, optional
            Target spacing at the vertex.
        z : float, optional
            Elevation value.
        check : bool, optional
            Return an existing vertex within tolerance of `point`
            instead of creating a duplicate.

        Raises
        ------
        ValueError
            If `point` has the wrong shape.

        Returns
        -------
        Vertex
            The new vertex or the existing duplicate.
        """
        if np.shape(point) != (2, ):
            raise ValueError(f'expected a 2d point, got {point!r}')

        if check:
            v = self.find_vertex(point)

            if v is not None:
                return v

        v = Vertex(self, space, z)
        self._verts.insert(v)

        self._points = obj._array_grow(self._points, v._idx + 1)
        self._points[v._idx] = point

        if self._tree is not None:
            self._tree.insert(v)

        return v

    def find_vertex(self, point):
        """ Vertex at a position.

        Parameters
        ----------
        point : array_like, shape (2, )
            Query position.

        Returns
        -------
        Vertex
            A vertex whose coordinates differ by less than :attr:`eps`
            from `point`, or :obj:`None`.
        """
        if self._tree is not None:
            return self._tree.search(point)

        for v in self._verts:
            p = v.point

            if (abs(p[0] - point[0]) < self._eps and
                    abs(p[1] - point[1]) < self._eps):
                return v

        return None

    def find_edge(self, u, v):
        """ Half-edge connecting two vertices.

        Parameters
        ----------
        u, v : Vertex
            Origin and destination.

        Returns
        -------
        Edge
            The half-edge from `u` to `v` or :obj:`None`.
        """
        return u.find_edge(v)

    def add_face(self, vertices):
        """ Create and add new face.

        Missing edges are created and spliced into the vertex rings. All
        preconditions are verified before the mesh is modified, a failed
        call leaves the mesh untouched.

        Parameters
        ----------
        vertices : sequence of Vertex
            Three or four vertices in counter-clockwise order.

        Raises
        ------
        ValueError
            If the face definition is malformed, degenerate, or not in
            counter-clockwise order.
        NonManifoldError
            If an edge of the face already bounds a face on its left or
            the new face cannot be spliced into a vertex ring.

        Returns
        -------
        Face
            The newly created face.
        """
        verts = list(vertices)
        n = len(verts)

        if n not in (3, 4):
            raise ValueError(f'faces have 3 or 4 vertices, got {n}')

        if len(set(verts)) != n:
            raise ValueError('duplicate face vertices')

        for v in verts:
            if v._deleted or v._mesh is not self:
                raise ValueError(f'{v!r} is not a vertex of this mesh')

        points = [v.point for v in verts]

        for i in range(n):
            if geom.tri_area(points[i-1], points[i], points[(i+1) % n]) <= 0:
                raise ValueError('face is degenerate or not ' +
                                 'counter-clockwise')

        edges = [verts[i].find_edge(verts[(i+1) % n]) for i in range(n)]

        for e in edges:
            if e is not None and e._face is not None:
                raise NonManifoldError(f'{e!r} already bounds a face')

        # Dry run: decide for each corner how the two face edges at that
        # corner are spliced into its ring.
        plan = []

        for i, v in enumerate(verts):
            out, inc = edges[i], edges[i-1]

            if out is not None and inc is not None:
                if out._next is not inc.symm:
                    raise NonManifoldError(f'{v!r} cannot be spliced')
                plan.append(None)
            elif out is not None:
                plan.append(('after', out))
            elif inc is not None:
                plan.append(('before', inc.symm))
            elif v._edge is None:
                plan.append(('isolated', None))
            else:
                gap = self._free_gap(v, points[(i+1) % n], points[i-1])

                if gap is None:
                    raise NonManifoldError(f'{v!r} has no free sector')
                plan.append(('gap', gap))

        # Commit.
        for i in range(n):
            if edges[i] is None:
                edges[i] = self._new_pair(verts[i], verts[(i+1) % n])

        for i, step in enumerate(plan):
            if step is None:
                continue

            kind, ref = step
            out, ins = edges[i], edges[i-1].symm

            if kind == 'after':
                self._ring_insert(ref, ins)
            elif kind == 'before':
                self._ring_insert(ref._prev, out)
            elif kind == 'isolated':
                out._next = out._prev = ins
                ins._next = ins._prev = out
                verts[i]._edge = out
            else:
                self._ring_insert(ref, out)
                self._ring_insert(out, ins)

        f = Face(self, edges)
        self._faces.insert(f)

        for e in edges:
            e._face = f

        self._starting_edge = edges[0]

        return f

    def delete_face(self, face, del_isolated=False):
        """ Delete face.

        Edges of the face are kept unless `del_isolated` is set, in which
        case edges left without any adjacent face and vertices left
        without any edge are deleted as well.

        Parameters
        ----------
        face : Face
            A live face.
        del_isolated : bool, optional
            Cascade deletion of faceless edges and isolated vertices.
        """
        assert not face._deleted

        self.deactivate(face)

        for e in face._edges:
            e._face = None

        self._faces.remove(face.handle)
        face._deleted = True

        if del_isolated:
            for e in face._edges:
                if not e._deleted and e.symm._face is None:
                    self.delete_edge(e, del_isolated_verts=True)

    def delete_edge(self, edge, del_isolated_verts=False):
        """ Delete an edge pair.

        Both adjacent faces are deleted first.

        Parameters
        ----------
        edge : Edge
            Either half of the edge pair.
        del_isolated_verts : bool, optional
            Delete end points that become isolated.
        """
        assert not edge._deleted

        for half in (edge, edge.symm):
            if half._face is not None:
                self.delete_face(half._face)

        u, v = edge._origin, edge.symm._origin

        self._ring_remove(edge)
        self._ring_remove(edge.symm)

        pair = edge._pair
        self._pairs.remove(pair.handle)
        pair._deleted = True

        if self._starting_edge is not None and self._starting_edge._deleted:
            self._starting_edge = None

        if del_isolated_verts:
            for w in (u, v):
                if w._edge is None:
                    self.delete_vertex(w)

    def delete_vertex(self, vertex):
        """ Delete vertex.

        All incident edges and faces are deleted.

        Parameters
        ----------
        vertex : Vertex or Handle or array_like
            The vertex, its handle, or its position.

        Raises
        ------
        KeyError
            If no matching vertex exists.
        """
        if isinstance(vertex, Handle):
            v = self._verts[vertex]
        elif isinstance(vertex, Vertex):
            v = vertex
        else:
            v = self.find_vertex(vertex)

            if v is None:
                raise KeyError(f'no vertex at {vertex!r}')

        assert not v._deleted

        while v._edge is not None:
            self.delete_edge(v._edge)

        self._verts.remove(v.handle)
        v._deleted = True

    def delete_isolated(self):
        """ Remove faceless edges and isolated vertices.

        Returns
        -------
        int
            Number of deleted edge pairs.
        int
            Number of deleted vertices.
        """
        edges = [e for e in self.edges
                 if e._face is None and e.symm._face is None]

        for e in edges:
            self.delete_edge(e)

        verts = [v for v in self._verts if v._edge is None]

        for v in verts:
            self.delete_vertex(v)

        return len(edges), len(verts)

    def swap_edge(self, edge, *, check=True):
        """ Swap the diagonal of two adjacent triangles.

        The edge from `a` to `b` with left apex `c` and right apex `d`
        becomes the edge from `d` to `c`. The two faces keep their identity
        but get new vertex cycles: the former left face becomes
        ``(d, c, a)``, the former right face ``(c, d, b)``.

        Parameters
        ----------
        edge : Edge
            The half-edge to swap.
        check : bool, optional
            Pass :obj:`False` to skip the topological swappability test.

        Returns
        -------
        Edge
            The swapped half-edge (same object as `edge`) or :obj:`None`
            if the edge cannot be swapped.

        Note
        ----
        Geometric validity (convexity of the quadrilateral) is the
        caller's responsibility, see :func:`~gradmesh.geom.swappable`.
        Both faces are removed from the set of active faces.
        """
        if check and not edge.swappable:
            return None

        sym = edge.symm
        left, right = edge._face, sym._face

        l1 = edge.ccw_edge                  # b -> c
        l2 = l1.ccw_edge                    # c -> a
        r1 = sym.ccw_edge                   # a -> d
        r2 = r1.ccw_edge                    # d -> b

        c, d = l2._origin, r2._origin

        self.deactivate(left)
        self.deactivate(right)

        self._ring_remove(edge)
        self._ring_remove(sym)

        edge._origin = d
        sym._origin = c

        self._ring_insert(r2, edge)
        self._ring_insert(l2, sym)

        left._edges = [edge, l2, r1]
        right._edges = [sym, r2, l1]

        for f in (left, right):
            f._invalidate()

            for e in f._edges:
                e._face = f

        return edge

    def activate(self, face):
        """ Add face to the set of refinement candidates.

        The priority of an active face is its circumradius.
        """
        self._active.push(face, face.circumradius)

    def deactivate(self, face):
        """ Remove face from the set of refinement candidates.

        Nothing happens for inactive faces.
        """
        if face in self._active:
            self._active.remove(face)

    def validate(self):
        """ Verify mesh invariants.

        Checks ring and twin consistency of every edge, the closed edge
        cycle of every face, and the strict counter-clockwise orientation
        of every face.

        Raises
        ------
        NonManifoldError
            On a violated topological invariant.
        MeshError
            On a face that is not strictly counter-clockwise.
        """
        nhalf = 2 * len(self._pairs)

        for pair in self._pairs:
            for e in pair._edges:
                if e.symm.symm is not e or e.symm is e:
                    raise NonManifoldError(f'broken twin of {e!r}')

                if e._next is None or e._next._prev is not e:
                    raise NonManifoldError(f'broken ring at {e!r}')

                if e._prev._next is not e:
                    raise NonManifoldError(f'broken ring at {e!r}')

                if e._next._origin is not e._origin:
                    raise NonManifoldError(f'ring of {e!r} leaves origin')

                if e._origin._deleted or e._origin._edge is None:
                    raise NonManifoldError(f'invalid origin of {e!r}')

                if e._face is not None and e._face._deleted:
                    raise NonManifoldError(f'{e!r} refers to deleted face')

        for v in self._verts:
            if v._edge is None:
                continue

            if v._edge._deleted or v._edge._origin is not v:
                raise NonManifoldError(f'invalid anchor of {v!r}')

            e, steps = v._edge._next, 1

            while e is not v._edge:
                e, steps = e._next, steps + 1

                if steps > nhalf:
                    raise NonManifoldError(f'ring of {v!r} does not close')

        for f in self._faces:
            n = len(f._edges)

            for i, e in enumerate(f._edges):
                if e._deleted or e._face is not f:
                    raise NonManifoldError(f'{f!r} has a foreign edge')

                if e.ccw_edge is not f._edges[(i+1) % n]:
                    raise NonManifoldError(f'edge cycle of {f!r} is open')

            points = [v.point for v in f]

            for i in range(n):
                if geom.tri_area(points[i-1], points[i],
                                 points[(i+1) % n]) <= 0.0:
                    raise MeshError(f'{f!r} is not counter-clockwise')

    def arrays(self):
        """ Compacted mesh data.

        Returns
        -------
        MeshArrays
            Vertex, face and edge data with dense 0-based numbering in
            ascending slot order.
        """
        verts = list(self._verts)
        vmap = {v: i for i, v in enumerate(verts)}
        edges = self.edges

        points = np.array([v.point for v in verts]).reshape(-1, 2)
        elevation = np.array([v._z for v in verts], dtype=float)
        spacing = np.array([v._space for v in verts], dtype=float)
        boundary = np.array([bool(v._flags & flags.VertexFlag.BOUNDARY)
                             for v in verts], dtype=bool)

        faces = [[vmap[v] for v in f] for f in self._faces]

        edge_idx = np.array([[vmap[e._origin], vmap[e.dest]]
                             for e in edges], dtype=int).reshape(-1, 2)
        edge_boundary = np.array([e.boundary for e in edges], dtype=bool)

        return MeshArrays(points, elevation, spacing, boundary, faces,
                          edge_idx, edge_boundary)

    def write(self, filename, quiet=True):
        """ Write mesh to file.

        Vertices are written with their elevation as third coordinate,
        boundary edges as line elements.

        Parameters
        ----------
        filename : str
            Name of an OBJ file.
        quiet : bool, optional
            Suppress console output.
        """
        CBOLD = '\33[1m'                    # bold text, white on black
        CEND = '\33[0m'

        data = self.arrays()
        verts = np.column_stack([data.points, data.elevation])
        lines = data.edges[data.edge_boundary]

        if not quiet:
            start = perf_counter()
            print(f'writing {CBOLD}{Path(filename).name}{CEND}', end=' ...')

        obj.write(filename, v=verts, l=lines, f=data.faces)

        if not quiet:
            print(f' done ({perf_counter()-start:.3} sec)')

    def _new_pair(self, u, v):
        """ Allocate an unlinked edge pair from `u` to `v`.
        """
        pair = EdgePair()
        self._pairs.insert(pair)

        pair._edges[0]._origin = u
        pair._edges[1]._origin = v

        return pair._edges[0]

    def _free_gap(self, v, p, q):
        """ Ring edge opening a free sector that contains two directions.

        Parameters
        ----------
        v : Vertex
            A non-isolated vertex.
        p, q : array_like, shape (2, )
            Positions whose directions, seen from `v`, must lie in the
            sector, with `p` reached before `q` in counter-clockwise
            order.

        Returns
        -------
        Edge
            A ring edge `g` without face such that the sector from `g`
            to ``g.next`` contains both directions, or :obj:`None`.
        """
        o = v.point
        dp = (p[0] - o[0], p[1] - o[1])
        dq = (q[0] - o[0], q[1] - o[1])

        for g in v._hiter():
            if g._face is not None:
                continue

            a, b = g.vector, g._next.vector

            if not geom.is_inside(dp, a, b):
                continue

            if dq == dp or geom.is_inside(dq, dp, b):
                return g

        return None

    def _ring_insert(self, g, e):
        """ Splice `e` into the ring of its origin right after `g`.
        """
        e._prev = g
        e._next = g._next
        g._next._prev = e
        g._next = e

    def _ring_remove(self, e):
        """ Unlink `e` from the ring of its origin.
        """
        v = e._origin

        if e._next is e:
            v._edge = None
        else:
            e._prev._next = e._next
            e._next._prev = e._prev

            if v._edge is e:
                v._edge = e._next

        e._next = e._prev = None

    def _check(self):
        """ Perform sanity checks.
        """
        for v in self._verts:
            assert self._verts.slot(v._idx) is v
            v._check()

        for pair in self._pairs:
            assert self._pairs.slot(pair._idx) is pair

            for e in pair._edges:
                e._check()

        for f in self._faces:
            assert self._faces.slot(f._idx) is f
            f._check()

        for f, _ in self._active:
            assert not f._deleted

    def _viter(self):
        """ Live vertex iterator.
        """
        return iter(self._verts)

    def _fiter(self):
        """ Live face iterator.
        """
        return iter(self._faces)

    def _hiter(self):
        """ Half-edge iterator, both halves of every live pair.
        """
        return (e for pair in self._pairs for e in pair._edges)

    def _eiter(self):
        """ Edge iterator, one half-edge per live pair.
        """
        return (pair._edges[0] for pair in self._pairs)


class Vertex:
    """ Vertex base class.

    Vertices are created by :meth:`Mesh.add_vertex`. Coordinates live in
    the parent mesh's coordinate array and can be accessed via the
    :attr:`point` property.

    Parameters
    ----------
    parent : Mesh
        The parent mesh object.
    space : float, optional
        Target spacing.
    z : float, optional
        Elevation value.

    Note
    ----
    In addition to :attr:`index`, implementations of the special functions
    :meth:`~object.__int__` and :meth:`~object.__index__` are provided.
    The latter makes it possible to use vertex instances as indices into
    :attr:`Mesh.points`.
    """

    def __init__(self, parent, space=0.0, z=0.0):
        self._mesh = parent
        self._edge = None

        self._space = float(space)
        self._z = float(z)

        # Set by the arena on insertion.
        self._idx = None
        self._gen = None

        self._deleted = False
        self._flags = flags.VertexFlag(0)

    def __repr__(self):
        return f'Vertex({self._idx})'

    def __str__(self):
        if self._flags:
            return f'v {self._idx} {self.point} {self._flags}'

        return f'v {self._idx} {self.point}'

    def __index__(self):
        """ Slot index.

        Returns
        -------
        int
        """
        return self._idx

    def __int__(self):
        return self._idx

    def __bool__(self):
        return True

    @property
    def handle(self):
        """ Stable identity.

        :type: ~gradmesh.arena.Handle
        """
        return Handle(self._idx, self._gen)

    @property
    def index(self):
        """ Slot index.

        Row of the vertex in :attr:`Mesh.points`. Slot indices of deleted
        vertices are recycled.

        :type: int
        """
        return self._idx

    @property
    def point(self):
        """ Vertex coordinates.

        View of the corresponding row of the parent mesh's coordinate
        array. Assignment moves the vertex.

        :type: ~numpy.ndarray
        """
        return self._mesh._points[self._idx]

    @point.setter
    def point(self, value):
        self._mesh._points[self._idx] = value

    @property
    def space(self):
        """ Target spacing.

        :type: float
        """
        return self._space

    @space.setter
    def space(self, value):
        self._space = float(value)

    @property
    def z(self):
        """ Elevation value.

        :type: float
        """
        return self._z

    @z.setter
    def z(self, value):
        self._z = float(value)

    @property
    def flags(self):
        """ Vertex flags.

        :type: VertexFlag
        """
        return self._flags

    @flags.setter
    def flags(self, value):
        self._flags = value

    @property
    def fixed(self):
        """ Position may not be changed by smoothing.

        :type: bool
        """
        return bool(self._flags & (flags.VertexFlag.FIXED |
                                   flags.VertexFlag.BOUNDARY))

    @property
    def edge(self):
        """ Anchor edge.

        An edge that starts at the vertex or :obj:`None` for isolated
        vertices.

        :type: Edge
        """
        assert not self._deleted
        return self._edge

    @property
    def degree(self):
        """ Number of incident edges.

        :type: int
        """
        assert not self._deleted
        return sum(1 for _ in self._hiter())

    @property
    def face_count(self):
        """ Number of incident faces.

        :type: int
        """
        return sum(1 for _ in self._fiter())

    @property
    def deleted(self):
        """ Internal state.

        :type: bool
        """
        return self._deleted

    @property
    def isolated(self):
        """ Topological state.

        :type: bool
        """
        return self._edge is None

    @property
    def boundary(self):
        """ Topological state.

        A vertex is a boundary vertex if one of its sectors is not
        covered by a face.

        :type: bool
        """
        assert not self._deleted
        return any(e._face is None for e in self._hiter())

    def angular_degree(self):
        """ Degree normalized by the covered angle.

        The number of incident edges scaled by :math:`2\\pi` over the sum
        of incident face angles at the vertex. Equal to :attr:`degree` for
        interior vertices.

        Returns
        -------
        float
            Zero for a vertex without incident faces.
        """
        angle = 0.0

        for e in self._hiter():
            if e._face is not None:
                a, b = e.vector, e._next.vector
                angle += np.arctan2(a[0]*b[1] - a[1]*b[0],
                                    a[0]*b[0] + a[1]*b[1])

        if angle <= 0.0:
            return 0.0

        return self.degree * 2.0 * np.pi / angle

    def find_edge(self, dest):
        """ Outgoing edge to a vertex.

        Returns
        -------
        Edge
            The half-edge from this vertex to `dest` or :obj:`None`.
        """
        for e in self._hiter():
            if e.symm._origin is dest:
                return e

        return None

    def _check(self):
        assert not self._deleted

        if self._edge is not None:
            assert not self._edge._deleted
            assert self._edge._origin is self

    def _hiter(self):
        """ Outgoing edges in counter-clockwise order.
        """
        first = self._edge

        if first is None:
            return

        e = first

        while True:
            yield e
            e = e._next

            if e is first:
                return

    def _viter(self):
        """ Adjacent vertices in counter-clockwise order.
        """
        return (e.symm._origin for e in self._hiter())

    def _fiter(self):
        """ Incident faces in counter-clockwise order.
        """
        return (e._face for e in self._hiter() if e._face is not None)


class EdgePair:
    """ Edge pair.

    Owns two mutually symmetric half-edges. The half-edge on side ``s``
    has the handle index ``2*pair.index + s``.
    """

    def __init__(self):
        self._idx = None
        self._gen = None
        self._deleted = False
        self._edges = (Edge(self, 0), Edge(self, 1))

    def __repr__(self):
        return f'EdgePair({self._idx})'

    @property
    def handle(self):
        """ Stable identity.

        :type: ~gradmesh.arena.Handle
        """
        return Handle(self._idx, self._gen)

    @property
    def edges(self):
        """ Both half-edges.

        :type: (Edge, Edge)
        """
        return self._edges


class Edge:
    """ Half-edge base class.

    A half-edge stores its origin, the face to its left, and the ring
    successor and predecessor around its origin. Its destination is the
    origin of its twin.

    Parameters
    ----------
    pair : EdgePair
        Owning edge pair.
    side : int
        Side within the pair, 0 or 1.
    """

    def __init__(self, pair, side):
        self._pair = pair
        self._side = side

        self._origin = None
        self._face = None
        self._next = None
        self._prev = None

        self._flags = flags.EdgeFlag(0)

    def __repr__(self):
        return f'Edge({self._origin!r}, {self.dest!r})'

    def __str__(self):
        if self._flags:
            return (f'e ({self._origin._idx}, {self.dest._idx})' +
                    f' {self._flags}')

        return f'e ({self._origin._idx}, {self.dest._idx})'

    def __bool__(self):
        return True

    def __contains__(self, vertex):
        """ Incidence test.
        """
        return vertex is self._origin or vertex is self.dest

    def __iter__(self):
        """ Origin and destination.
        """
        yield self._origin
        yield self.dest

    @property
    def handle(self):
        """ Stable identity.

        :type: ~gradmesh.arena.Handle
        """
        return Handle(2*self._pair._idx + self._side, self._pair._gen)

    @property
    def symm(self):
        """ Symmetric twin.

        :type: Edge
        """
        return self._pair._edges[self._side ^ 1]

    @property
    def origin(self):
        """ Origin vertex.

        :type: Vertex
        """
        return self._origin

    @property
    def dest(self):
        """ Destination vertex.

        :type: Vertex
        """
        return self._pair._edges[self._side ^ 1]._origin

    @property
    def next(self):
        """ Next edge counter-clockwise around the origin.

        :type: Edge
        """
        return self._next

    @property
    def prev(self):
        """ Next edge clockwise around the origin.

        :type: Edge
        """
        return self._prev

    @property
    def ccw_edge(self):
        """ Successor in the boundary cycle of the left face.

        :type: Edge
        """
        return self.symm._prev

    @property
    def cw_edge(self):
        """ Predecessor in the boundary cycle of the left face.

        :type: Edge
        """
        return self._next.symm

    @property
    def face(self):
        """ Face to the left.

        :type: Face
        """
        return self._face

    @property
    def cw_face(self):
        """ Face to the right.

        :type: Face
        """
        return self.symm._face

    @property
    def flags(self):
        """ Edge flags of this half.

        :type: EdgeFlag
        """
        return self._flags

    @flags.setter
    def flags(self, value):
        self._flags = value

    @property
    def boundary(self):
        """ Boundary flag state.

        :type: bool
        """
        return bool(self._flags & flags.EdgeFlag.BOUNDARY)

    @property
    def deleted(self):
        """ Internal state.

        :type: bool
        """
        return self._pair._deleted

    @property
    def _deleted(self):
        return self._pair._deleted

    @property
    def vector(self):
        """ Edge vector, destination minus origin.

        :type: ~numpy.ndarray
        """
        return self.dest.point - self._origin.point

    @property
    def versor(self):
        """ Unit edge vector.

        :type: ~numpy.ndarray
        """
        v = self.vector
        return v / np.hypot(v[0], v[1])

    @property
    def length(self):
        """ Edge length.

        :type: float
        """
        return geom.distance(self._origin.point, self.dest.point)

    @property
    def midpoint(self):
        """ Edge midpoint.

        :type: ~numpy.ndarray
        """
        return geom.midpoint(self._origin.point, self.dest.point)

    @property
    def swappable(self):
        """ Topological swap test.

        An edge can be swapped if it is not a boundary edge, both adjacent
        faces are triangles, and the opposite apexes are not adjacent.

        :type: bool
        """
        if self._deleted or self.boundary:
            return False

        left, right = self._face, self.symm._face

        if left is None or right is None:
            return False

        if len(left) != 3 or len(right) != 3:
            return False

        c = self.ccw_edge.dest
        d = self.symm.ccw_edge.dest

        return c is not d and c.find_edge(d) is None

    def contains(self, point, tol=config.BELONG_TOL):
        """ Point on edge test.

        Parameters
        ----------
        point : array_like, shape (2, )
            Query position.
        tol : float, optional
            Distance tolerance.

        Returns
        -------
        bool
            :obj:`True` if `point` lies within `tol` of the open segment.
        """
        return geom.on_segment(point, self._origin.point, self.dest.point,
                               tol)

    def _check(self):
        assert not self._deleted
        assert self.symm.symm is self
        assert self._next._prev is self
        assert self._prev._next is self
        assert self._next._origin is self._origin

        if self._face is not None:
            assert self in self._face._edges


class Face:
    """ Face base class.

    A face is the closed cycle of 3 (or 4) half-edges stored in
    :attr:`edges`. The origin of the i-th edge is the i-th vertex, all
    vertices are in counter-clockwise order.

    Parameters
    ----------
    parent : Mesh
        The parent mesh object.
    edges : list[Edge]
        Boundary cycle.


    The refinement scheduler caches the circumcircle and a classification
    state on each face:

    .. code-block:: python

       center, radius = f.circumcenter, f.circumradius
       f.state is FaceState.ACCEPTED
    """

    def __init__(self, parent, edges):
        self._mesh = parent
        self._edges = list(edges)

        self._idx = None
        self._gen = None
        self._deleted = False

        # Lazy circumcircle and refinement state.
        self._center = None
        self._radius = None
        self._state = flags.FaceState.NONE

    def __repr__(self):
        return f'Face({self._idx})'

    def __str__(self):
        face = '[None]' if self._deleted else str([int(v) for v in self])

        return f'f {self._idx} {face} {self._state.name}'

    def __index__(self):
        return self._idx

    def __int__(self):
        return self._idx

    def __len__(self):
        """ Number of vertices.
        """
        return len(self._edges)

    def __bool__(self):
        return True

    def __iter__(self):
        """ Vertices in counter-clockwise order.
        """
        return (e._origin for e in self._edges)

    def __getitem__(self, index):
        return self._edges[index]._origin

    def __contains__(self, item):
        """ Incidence test for vertices and half-edges.
        """
        if isinstance(item, Edge):
            return item in self._edges

        return any(e._origin is item for e in self._edges)

    @property
    def handle(self):
        """ Stable identity.

        :type: ~gradmesh.arena.Handle
        """
        return Handle(self._idx, self._gen)

    @property
    def index(self):
        """ Slot index.

        :type: int
        """
        return self._idx

    @property
    def edges(self):
        """ Boundary cycle.

        :type: tuple[Edge]
        """
        return tuple(self._edges)

    @property
    def vertices(self):
        """ Corner vertices.

        :type: tuple[Vertex]
        """
        return tuple(e._origin for e in self._edges)

    @property
    def points(self):
        """ Corner coordinates.

        :type: ~numpy.ndarray
        """
        return np.array([e._origin.point for e in self._edges])

    @property
    def deleted(self):
        """ Internal state.

        :type: bool
        """
        return self._deleted

    @property
    def state(self):
        """ Refinement state.

        :type: FaceState
        """
        return self._state

    @state.setter
    def state(self, value):
        self._state = value

    @property
    def active(self):
        """ Membership in the set of active faces.

        :type: bool
        """
        return self in self._mesh._active

    @property
    def circumcenter(self):
        """ Circumcenter of the first three corners.

        :type: ~numpy.ndarray
        """
        if self._center is None:
            self.update()
        return self._center

    @property
    def circumradius(self):
        """ Circumradius of the first three corners.

        :type: float
        """
        if self._radius is None:
            self.update()
        return self._radius

    @property
    def centroid(self):
        """ Average of the corner positions.

        :type: ~numpy.ndarray
        """
        return np.mean(self.points, axis=0)

    @property
    def neighbors(self):
        """ Faces across the edges of the boundary cycle.

        Entries are :obj:`None` where an edge has no face on its right.

        :type: list[Face]
        """
        return [e.symm._face for e in self._edges]

    def update(self):
        """ Recompute the cached circumcircle.
        """
        a, b, c = (self._edges[i]._origin.point for i in range(3))
        self._center, self._radius = geom.circumcircle(a, b, c)

    def _invalidate(self):
        self._center = None
        self._radius = None

    def _check(self):
        assert not self._deleted
        assert len(self._edges) in (3, 4)

        n = len(self._edges)

        for i, e in enumerate(self._edges):
            assert e._face is self
            assert e.ccw_edge is self._edges[(i+1) % n]

    def _viter(self):
        return (e._origin for e in self._edges)

    def _hiter(self):
        return iter(self._edges)

    def _fiter(self):
        """ Adjacent faces, skipping missing neighbors.
        """
        return (e.symm._face for e in self._edges
                if e.symm._face is not None)


class MeshError(Exception):
    """ Mesh exception base class.
    """

    pass


class NonManifoldError(MeshError):
    """ Manifold exception.

    Raised if an operation would result in a topological configuration
    that violates the manifold condition. The mesh is left unchanged.
    """

    pass


class ConvergenceError(MeshError):
    """ Iteration cap exceeded.

    Raised by bounded loops (point location, legalization, boundary
    recovery, refinement) that did not terminate within their cap. This
    indicates malformed input geometry or a defect and aborts the build.
    """

    pass


class ConstrainedEdgeError(MeshError):
    """ Insertion onto a boundary edge.

    Raised when a point to be inserted lies on a boundary edge, i.e., an
    edge flagged as boundary or an edge with a single adjoining face.
    """

    pass
