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

""" Boundary conformity.

A :class:`Boundary` is an ordered chain (open) or loop (closed) of points
with target spacing. Once its points are inserted into a triangulation,
missing segments are recovered as mesh edges, either by inserting
midpoints or by a chain of edge swaps. Finally all segments are flagged as
boundary edges and, for closed loops, material to the right of the loop is
deleted.

Note
----
Closed loops are expected in counter-clockwise order if they enclose the
domain and in clockwise order if they bound a hole, i.e., the domain is
always to the left. :class:`~gradmesh.region.Region` orients loops
accordingly.
"""

import logging

import numpy as np

import gradmesh.geom as geom
import gradmesh.config as config

from gradmesh.flags import EdgeFlag
from gradmesh.flags import VertexFlag
from gradmesh.hds import MeshError
from gradmesh.hds import ConvergenceError


logger = logging.getLogger(__name__)


class Boundary:
    """ Boundary chain or loop.

    Parameters
    ----------
    points : array_like, shape (n, 2)
        Ordered boundary points. The closing segment of a loop is
        implicit, the last point must not repeat the first one.
    spacing : float or array_like, shape (n, )
        Target spacing, per point or for all points.
    closed : bool, optional
        Loop flag.
    generating : sequence of int, optional
        Indices of the caller specified points, all points by default.

    Raises
    ------
    ValueError
        On malformed input.


    Points realized as mesh vertices are available via :attr:`vertices`
    after :meth:`insert_into`. Recovery may splice additional points into
    the boundary, generating indices are shifted accordingly.
    """

    def __init__(self, points, spacing, *, closed=False, generating=None):
        points = np.array(points, dtype=float)

        if points.ndim != 2 or points.shape[1] != 2:
            raise ValueError('boundary points must have shape (n, 2)')

        if len(points) < (3 if closed else 2):
            raise ValueError('too few boundary points')

        spacing = np.broadcast_to(np.asarray(spacing, dtype=float),
                                  (len(points), )).copy()

        if np.any(spacing <= 0.0):
            raise ValueError('boundary spacing must be positive')

        if generating is None:
            generating = range(len(points))

        generating = sorted(int(i) for i in generating)

        if any(i < 0 or i >= len(points) for i in generating):
            raise ValueError('generating index out of range')

        self._points = points
        self._spacing = spacing
        self._closed = bool(closed)
        self._generating = generating
        self._vertices = []

    def __len__(self):
        """ Number of boundary points.
        """
        return len(self._points)

    def __repr__(self):
        kind = 'loop' if self._closed else 'chain'
        return f'Boundary({len(self)} points, {kind})'

    @property
    def points(self):
        """ Boundary point coordinates.

        :type: ~numpy.ndarray
        """
        return self._points

    @property
    def spacing(self):
        """ Target spacing per point.

        :type: ~numpy.ndarray
        """
        return self._spacing

    @property
    def closed(self):
        """ Loop flag.

        :type: bool
        """
        return self._closed

    @property
    def generating(self):
        """ Indices of the caller specified points.

        :type: list[int]
        """
        return list(self._generating)

    @property
    def vertices(self):
        """ Mesh vertices realizing the points, empty before insertion.

        :type: list[Vertex]
        """
        return list(self._vertices)

    def area(self):
        """ Signed area enclosed by the loop.

        Returns
        -------
        float
            Positive for counter-clockwise loops, zero for chains.
        """
        if not self._closed:
            return 0.0

        x, y = self._points[:, 0], self._points[:, 1]
        return 0.5 * float(np.dot(x, np.roll(y, -1)) -
                           np.dot(y, np.roll(x, -1)))

    def contains(self, point):
        """ Point in loop test (crossing number).

        Returns
        -------
        bool
            :obj:`False` for chains.
        """
        if not self._closed:
            return False

        x, y = float(point[0]), float(point[1])
        inside = False

        for i in range(len(self._points)):
            (x1, y1), (x2, y2) = self._points[i-1], self._points[i]

            if (y1 > y) != (y2 > y):
                if x < x1 + (y - y1) * (x2 - x1) / (y2 - y1):
                    inside = not inside

        return inside

    def reverse(self):
        """ Reverse the point order.

        Realized vertices are forgotten, the boundary has to be inserted
        again.
        """
        n = len(self._points)

        self._points = self._points[::-1].copy()
        self._spacing = self._spacing[::-1].copy()
        self._generating = sorted(n - 1 - i for i in self._generating)
        self._vertices = []

    def segments(self):
        """ Index pairs of consecutive points.

        Yields
        ------
        tuple(int, int)
        """
        n = len(self._points)
        count = n if self._closed else n - 1

        for i in range(count):
            yield i, (i + 1) % n

    def generating_edge(self, k):
        """ Point index range of a generating segment.

        Parameters
        ----------
        k : int
            Index into :attr:`generating`.

        Raises
        ------
        IndexError
            If `k` does not refer to a generating segment.

        Returns
        -------
        tuple(int, int)
            Indices of the first and last point of the segment. For the
            closing segment of a loop the second index exceeds the number
            of points, indices have to be taken modulo :func:`len`.
        """
        gen = self._generating
        count = len(gen) if self._closed else len(gen) - 1

        if not 0 <= k < count:
            raise IndexError(f'no generating segment {k}')

        i, j = gen[k], gen[(k + 1) % len(gen)]

        if j <= i:
            j += len(self._points)

        return i, j

    def insert_into(self, mesh):
        """ Insert all points into a triangulation.

        Realized vertices are flagged as boundary and fixed vertices.

        Parameters
        ----------
        mesh : Triangulation
            An initialized triangulation covering all points.

        Raises
        ------
        MeshError
            If a point is outside the triangulation or consecutive points
            coincide.
        """
        self._vertices = []

        for p, s in zip(self._points, self._spacing):
            v = mesh.insert_point(p, s)

            if v is None:
                raise MeshError(f'boundary point {p} outside of the mesh')

            v.flags |= VertexFlag.BOUNDARY | VertexFlag.FIXED
            self._vertices.append(v)

        for i, j in self.segments():
            if self._vertices[i] is self._vertices[j]:
                raise MeshError(f'boundary points {i} and {j} coincide')

    def insert_vertex(self, index, vertex):
        """ Splice a mesh vertex into the boundary.

        The vertex position and spacing are taken from `vertex`.
        Generating indices at or after `index` are shifted.

        Parameters
        ----------
        index : int
            Position of the new point.
        vertex : Vertex
            Vertex realizing the new point.
        """
        self._points = np.insert(self._points, index, vertex.point, axis=0)
        self._spacing = np.insert(self._spacing, index, vertex.space)
        self._vertices.insert(index, vertex)

        self._generating = [i + 1 if i >= index else i
                            for i in self._generating]

        vertex.flags |= VertexFlag.BOUNDARY | VertexFlag.FIXED

    def split_at(self, mesh, point, tol=config.BELONG_TOL):
        """ Insert a point lying on a boundary segment.

        The spacing of the new point is interpolated linearly along the
        segment.

        Parameters
        ----------
        mesh : Triangulation
            Mesh the boundary has been inserted into.
        point : array_like, shape (2, )
            Position on the boundary.
        tol : float, optional
            Distance tolerance of the segment test.

        Raises
        ------
        MeshError
            If the point cannot be inserted. The segment edge keeps its
            boundary flag.

        Returns
        -------
        Vertex
            The realized vertex or :obj:`None` if `point` is not on
            any segment.
        """
        for i, j in self.segments():
            a, b = self._points[i], self._points[j]

            if not geom.on_segment(point, a, b, tol):
                continue

            t = geom.segment_param(point, a, b)
            space = geom.interp_linear(t, self._spacing[i], self._spacing[j])

            # The segment edge is a constraint once flagged, lift the
            # flag while splitting it.
            edge = mesh.find_edge(self._vertices[i], self._vertices[j])

            if edge is not None:
                _set_flag(edge, False)

            v = None

            try:
                v, _ = mesh._insert_point(point, space)
            finally:
                if edge is not None and not edge._deleted:
                    _set_flag(edge, True)

            if v is None:
                raise MeshError(f'{point} lies outside of the mesh')

            if v is self._vertices[i] or v is self._vertices[j]:
                return v

            self.insert_vertex(i + 1, v)

            for k in (i, i + 1):
                e = mesh.find_edge(self._vertices[k],
                                   self._vertices[(k + 1) % len(self)])

                if e is not None:
                    _set_flag(e, True)

            return v

        return None

    def recover(self, mesh, policy=None):
        """ Force all segments to exist as mesh edges.

        Recovered segment edges are flagged as boundary right away, later
        insertions and swaps keep them.

        Parameters
        ----------
        mesh : Triangulation
            Mesh the boundary has been inserted into.
        policy : str, optional
            Either 'midpoint' or 'swap', parameter `recovery` by default.

        Raises
        ------
        ConvergenceError
            If a segment could not be recovered within the parameter
            `max_recover_steps`.

        Returns
        -------
        int
            Number of inserted vertices (midpoint policy) or performed
            swaps (swap policy).
        """
        policy = mesh.params.recovery if policy is None else policy

        if policy == 'midpoint':
            recover_segment = self._recover_midpoint
        elif policy == 'swap':
            recover_segment = self._recover_swap
        else:
            raise ValueError(f'unknown recovery policy {policy!r}')

        changes = 0
        i = 0

        while i < (len(self) if self._closed else len(self) - 1):
            changes += recover_segment(mesh, i)

            e = mesh.find_edge(self._vertices[i],
                               self._vertices[(i + 1) % len(self)])

            if e is not None:
                _set_flag(e, True)
                i += 1

        return changes

    def set_boundary(self, mesh):
        """ Flag segment edges and prune the exterior of a loop.

        For every segment edge, the edges between its predecessor and the
        edge itself, walking clockwise around the common vertex, lie to
        the right of the loop and are deleted unless flagged.

        Raises
        ------
        MeshError
            If a segment is not realized as mesh edge.
        """
        n = len(self)
        edges = []

        for i, j in self.segments():
            e = mesh.find_edge(self._vertices[i], self._vertices[j])

            if e is None:
                raise MeshError(f'boundary segment ({i}, {j}) is missing')

            _set_flag(e, True)
            edges.append(e)

        if not self._closed:
            return 0

        deleted = 0
        bound = n + len(mesh.edges)

        for k, e in enumerate(edges):
            sentinel = edges[k-1].symm
            g = e.prev
            steps = 0

            while g is not sentinel:
                prev = g.prev

                if not g.boundary:
                    mesh.delete_edge(g)
                    deleted += 1

                g = prev
                steps += 1

                if steps > bound:
                    raise ConvergenceError('exterior pruning did not ' +
                                           'reach the previous segment')

        return deleted

    def _recover_midpoint(self, mesh, i):
        """ Recover segment i by repeated midpoint insertion.
        """
        inserted = 0
        cap = mesh.params.max_recover_steps

        while True:
            u = self._vertices[i]
            w = self._vertices[(i + 1) % len(self)]

            if mesh.find_edge(u, w) is not None:
                return inserted

            if inserted >= cap:
                raise ConvergenceError(f'segment {i} of {self!r} not ' +
                                       f'recovered after {cap} insertions')

            mid = geom.midpoint(u.point, w.point)
            space = 0.5 * (u.space + w.space)

            v, _ = mesh._insert_point(mid, space)

            if v is None or v is u or v is w:
                raise MeshError(f'segment {i} of {self!r} is degenerate')

            logger.debug('[recover] midpoint %s spliced into segment %d',
                         mid, i)

            self.insert_vertex(i + 1, v)
            inserted += 1

    def _recover_swap(self, mesh, i):
        """ Recover segment i by swapping crossing edges.
        """
        swaps = 0
        cap = mesh.params.max_recover_steps

        for _ in range(cap):
            u = self._vertices[i]
            w = self._vertices[(i + 1) % len(self)]

            if mesh.find_edge(u, w) is not None:
                return swaps

            crossing = _crossing_edges(mesh, u, w)

            # A vertex on the segment splits it.
            if not isinstance(crossing, list):
                logger.debug('[recover] vertex %r spliced into segment %d',
                             crossing, i)
                self.insert_vertex(i + 1, crossing)
                return swaps

            count = 0

            for c in crossing:
                a, b = c.origin.point, c.dest.point

                if not _crosses(a, b, u.point, w.point):
                    continue

                if mesh.swap(c) is not None:
                    count += 1

            if count == 0:
                raise ConvergenceError(f'swap recovery of segment {i} ' +
                                       f'of {self!r} stalled')

            swaps += count

        raise ConvergenceError(f'segment {i} of {self!r} not recovered ' +
                               f'after {cap} swap passes')


def _set_flag(edge, value):
    """ Set or clear the boundary flag of both halves of an edge.
    """
    for e in (edge, edge.symm):
        if value:
            e.flags |= EdgeFlag.BOUNDARY
        else:
            e.flags &= ~EdgeFlag.BOUNDARY


def _crosses(a, b, p, q):
    """ Proper intersection of segments a-b and p-q.
    """
    return (geom.tri_area(p, q, a) * geom.tri_area(p, q, b) < 0.0 and
            geom.tri_area(a, b, p) * geom.tri_area(a, b, q) < 0.0)


def _crossing_edges(mesh, u, w):
    """ Edges crossed by the segment from `u` to `w`.

    Walks from `u` towards `w` in an affine frame aligned with the
    segment. Each crossing edge is oriented from its end point right of
    the segment to its end point left of it.

    Returns
    -------
    list[Edge] or Vertex
        The crossing edges in order, or a vertex lying on the open
        segment.

    Raises
    ------
    MeshError
        If the segment leaves the triangulated area.
    """
    frame = geom.AffineFrame(u.point, w.point - u.point)
    length = geom.distance(u.point, w.point)
    tol = mesh.params.belong_tol * max(length, 1.0)

    direction = w.point - u.point
    start = None

    for g in u._hiter():
        x, y = frame.to_local(g.dest.point)

        if abs(y) <= tol and 0.0 < x < length:
            return g.dest

        if g.face is not None and geom.is_inside(direction, g.vector,
                                                 g.next.vector):
            start = g

    if start is None:
        raise MeshError(f'no triangle at {u!r} towards {w!r}')

    c = start.ccw_edge
    crossing = []

    for _ in range(2*len(mesh.edges) + 1):
        crossing.append(c)
        s = c.symm

        if s.face is None:
            raise MeshError(f'segment {u!r} to {w!r} leaves the mesh')

        apex = s.ccw_edge.dest

        if apex is w:
            return crossing

        x, y = frame.to_local(apex.point)

        if abs(y) <= tol:
            return apex

        c = s.ccw_edge if y > 0.0 else s.ccw_edge.ccw_edge

    raise ConvergenceError(f'crossing walk from {u!r} to {w!r} ' +
                           'did not terminate')
