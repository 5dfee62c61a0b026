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

""" Incremental Delaunay triangulation.

Points are inserted one at a time into a triangulation of a bounding
super triangle. The triangle (or edge) containing a new point is found by
an oriented walk, the point is connected to the corners of the removed
region, and the Delaunay property is restored by Lawson's edge swaps.

Note
----
Edges flagged as boundary are constraints: legalization never swaps them
and points are never inserted onto them.
"""

import logging

import numpy as np

import gradmesh.geom as geom
import gradmesh.refine as refine

from gradmesh.config import Parameters
from gradmesh.hds import Mesh
from gradmesh.hds import NonManifoldError
from gradmesh.hds import ConvergenceError
from gradmesh.hds import ConstrainedEdgeError


logger = logging.getLogger(__name__)


class Triangulation(Mesh):
    """ Delaunay triangulation kernel.

    Parameters
    ----------
    params : Parameters, optional
        Meshing parameters, defaults are used if omitted.
    name : str, optional
        Name tag.
    tree : bool, optional
        Maintain a spatial index for duplicate detection.


    A triangulation has to be initialized with a bounding box before
    points can be inserted:

    .. code-block:: python
       :linenos:

       tri = Triangulation()
       tri.init(([0.0, 0.0], [1.0, 1.0]))

       for p in points:
           tri.insert_point(p, 0.1)

       tri.delete_init()
    """

    def __init__(self, params=None, *, name=None, tree=True):
        self._params = Parameters() if params is None else params

        super().__init__(name=name, eps=self._params.epsilon, tree=tree)

        self._init_verts = ()
        self._classify = False
        self._size_mesh = None

    @property
    def params(self):
        """ Meshing parameters.

        :type: ~gradmesh.config.Parameters
        """
        return self._params

    @property
    def classification(self):
        """ Refinement classification of new faces.

        While enabled, faces created or modified by insertions and swaps
        are scored against the size function and classified.

        :type: bool
        """
        return self._classify

    @classification.setter
    def classification(self, value):
        self._classify = bool(value)

    @property
    def size_mesh(self):
        """ External size function.

        A triangulation whose vertex elevations sample the target
        spacing, or :obj:`None` to interpolate vertex spacing values.

        :type: Triangulation
        """
        return self._size_mesh

    @size_mesh.setter
    def size_mesh(self, value):
        self._size_mesh = value

    @property
    def init_vertices(self):
        """ Corners of the super triangle, empty after :meth:`delete_init`.

        :type: tuple[Vertex]
        """
        return self._init_verts

    @classmethod
    def from_samples(cls, points, values, params=None):
        """ Triangulate scattered samples.

        The result is meant to be used as :attr:`size_mesh`: the sample
        values are stored as vertex elevations and recovered by
        :meth:`sample_elevation`.

        Parameters
        ----------
        points : array_like, shape (n, 2)
            Sample positions.
        values : array_like, shape (n, )
            Sample values.
        params : Parameters, optional
            Meshing parameters.

        Raises
        ------
        ValueError
            If fewer than three samples are given or the array shapes
            do not agree.

        Returns
        -------
        Triangulation
            Delaunay triangulation of the samples without super triangle.
        """
        points = np.asarray(points, dtype=float)
        values = np.asarray(values, dtype=float)

        if points.ndim != 2 or points.shape[1] != 2 or len(points) < 3:
            raise ValueError('at least three 2d sample points required')

        if values.shape != (len(points), ):
            raise ValueError('one value per sample point required')

        mesh = cls(params)
        mesh.init((points.min(axis=0), points.max(axis=0)))

        for p, value in zip(points, values):
            v = mesh.insert_point(p, value, z=value)
            v.z = value

        mesh.delete_init()

        return mesh

    def init(self, bbox):
        """ Build the super triangle.

        The bounding box is inflated by a quarter of its diagonal in each
        direction, the super triangle is built around the inflated box.
        Any previous content is removed.

        Parameters
        ----------
        bbox : (array_like, array_like)
            Lower left and upper right corner of the region to cover.

        Returns
        -------
        Face
            The super triangle.
        """
        self.clear()

        lo = np.array(bbox[0], dtype=float)
        hi = np.array(bbox[1], dtype=float)

        diag = np.hypot(*(hi - lo))

        if diag == 0.0:
            diag = 1.0

        lo -= 0.25*diag
        hi += 0.25*diag

        dx, dy = hi - lo

        a = self.add_vertex((lo[0] - 0.5*dx, lo[1]), check=False)
        b = self.add_vertex((lo[0] + 1.5*dx, lo[1]), check=False)
        c = self.add_vertex((lo[0] + 0.5*dx, hi[1] + dy), check=False)

        self._init_verts = (a, b, c)

        return self.add_face([a, b, c])

    def delete_init(self):
        """ Delete the super triangle corners with incident items.
        """
        for v in self._init_verts:
            if not v._deleted:
                self.delete_vertex(v)

        self._init_verts = ()

    def locate(self, point, start=None):
        """ Point location.

        Oriented walk from `start` (or the cached starting edge) towards
        `point`. The walk is bounded by the number of half-edges.

        Parameters
        ----------
        point : array_like, shape (2, )
            Query position.
        start : Edge, optional
            Seed of the walk.

        Raises
        ------
        ConvergenceError
            If the walk does not terminate within its bound.

        Returns
        -------
        Edge
            An edge whose left face contains `point` (possibly on its
            boundary) or an edge with an end point equal to `point`.
            :obj:`None` if the walk leaves the triangulated area.
        """
        e = self._seed(start)

        if e is None:
            return None

        x = (float(point[0]), float(point[1]))

        for _ in range(2*len(self._pairs) + 3):
            o, d = e._origin.point, e.dest.point

            if self._close(x, o) or self._close(x, d):
                return e

            if geom.right_of(x, o, d):
                e = e.symm

                if e._face is None:
                    return None
                continue

            if e._face is None:
                return None

            # Points on the closed triangle stay here.
            onext = e._next

            if geom.left_of(x, o, onext.dest.point):
                e = onext
                continue

            dprev = e.ccw_edge.symm

            if geom.left_of(x, dprev._origin.point, d):
                e = dprev
                continue

            self._starting_edge = e

            return e

        raise ConvergenceError(f'point location of {x} did not terminate')

    def insert_point(self, point, space=0.0, *, z=0.0):
        """ Insert point.

        Parameters
        ----------
        point : array_like, shape (2, )
            Position of the new vertex.
        space : float, optional
            Target spacing at the new vertex.
        z : float, optional
            Elevation of the new vertex.

        Raises
        ------
        ConstrainedEdgeError
            If `point` lies on a boundary edge.
        ConvergenceError
            If point location or legalization does not terminate.

        Returns
        -------
        Vertex
            The new vertex, an existing vertex that coincides with
            `point`, or :obj:`None` if `point` is outside the
            triangulated area.
        """
        v, _ = self._insert_point(point, space, z)
        return v

    def _insert_point(self, point, space=0.0, z=0.0):
        """ Insert point and report whether a vertex was created.

        Returns
        -------
        Vertex or None
            See :meth:`insert_point`.
        bool
            :obj:`True` iff the mesh was modified.
        """
        x = (float(point[0]), float(point[1]))
        e = self.locate(x)

        if e is None:
            return None, False

        face = e._face

        # The walk may also stop on the apex of the left face.
        for v in face if face is not None else (e._origin, e.dest):
            if self._close(x, v.point):
                return v, False

        eps = self._params.on_edge_eps

        on_edge = None

        for h in face._edges:
            a, b = h._origin.point, h.dest.point

            if (geom.tri_area(x, a, b) <= 0.0 or
                    geom.segment_distance(x, a, b) < eps):
                on_edge = h
                break

        if on_edge is not None:
            if on_edge.boundary or on_edge.symm._face is None:
                raise ConstrainedEdgeError(f'{x} lies on boundary ' +
                                           f'edge {on_edge!r}')

            star = self._cycle_after(on_edge) + self._cycle_after(on_edge.symm)
        else:
            star = list(face._edges)

        # All fan triangles must be proper before anything is deleted.
        for s in star:
            if geom.tri_area(x, s._origin.point, s.dest.point) <= 0.0:
                raise NonManifoldError(f'cannot connect {x} to {s!r}')

        if on_edge is not None:
            self.delete_edge(on_edge)
        else:
            self.delete_face(face)

        v = self.add_vertex(x, space, z=z, check=False)
        faces = [self.add_face([v, s._origin, s.dest]) for s in star]

        touched = self._legalize(v, star)
        touched.update(faces)

        if self._classify:
            self._reclassify(touched)

        return v, True

    def swap(self, edge):
        """ Swap edge and update classification.

        Parameters
        ----------
        edge : Edge
            A swappable edge.

        Returns
        -------
        Edge
            The swapped edge or :obj:`None` if the edge is not swappable
            (topologically or because the quadrilateral is not convex).
        """
        if not edge.swappable:
            return None

        a, b = edge._origin.point, edge.dest.point
        c = edge.ccw_edge.dest.point
        d = edge.symm.ccw_edge.dest.point

        if not geom.swappable(a, b, c, d, self._params.swap_eps):
            return None

        self.swap_edge(edge, check=False)

        if self._classify:
            self._reclassify((edge._face, edge.symm._face))

        return edge

    def sample_elevation(self, point):
        """ Interpolated elevation.

        Parameters
        ----------
        point : array_like, shape (2, )
            Query position.

        Returns
        -------
        float
            Barycentric interpolation of the vertex elevations of the
            triangle containing `point`, or :obj:`None` if `point` is
            outside the triangulated area.
        """
        e = self.locate(point)

        if e is None:
            return None

        for v in (e._origin, e.dest):
            if self._close(point, v.point):
                return v._z

        if e._face is None:
            return None

        a, b, c = e._face.vertices[:3]
        la, lb, lc = geom.barycentric(point, a.point, b.point, c.point)

        return la*a._z + lb*b._z + lc*c._z

    def _legalize(self, vertex, edges):
        """ Lawson's legalization around a new vertex.

        Parameters
        ----------
        vertex : Vertex
            The inserted vertex.
        edges : list[Edge]
            Edges opposite to `vertex`, each with `vertex` as the apex of
            its left face.

        Raises
        ------
        ConvergenceError
            If the number of swaps exceeds its cap.

        Returns
        -------
        set[Face]
            Faces modified by swaps.
        """
        touched = set()
        stack = list(edges)
        swaps, cap = 0, 4*len(self._pairs) + 16
        eps = self._params.epsilon

        while stack:
            e = stack.pop()

            if e._deleted or e.boundary or not e.swappable:
                continue

            # Only edges opposite to the new vertex are candidates.
            if e.ccw_edge.dest is not vertex:
                continue

            a, b = e._origin.point, e.dest.point
            p = vertex.point
            d = e.symm.ccw_edge.dest.point

            if not geom.in_circle(a, b, p, d):
                continue

            if not geom.swappable(a, b, p, d, eps):
                continue

            r1 = e.symm.ccw_edge
            r2 = r1.ccw_edge

            self.swap_edge(e, check=False)
            touched.update((e._face, e.symm._face))
            stack.extend((r1, r2))

            swaps += 1

            if swaps > cap:
                raise ConvergenceError('legalization did not terminate')

        return touched

    def _reclassify(self, faces):
        """ Score and classify live faces.
        """
        faces = [f for f in faces if f is not None and not f._deleted]

        for f in faces:
            refine.set_parameters(self, f)

        for f in faces:
            refine.classify(self, f)

    def _seed(self, start):
        """ Edge with a left face to start a walk from.
        """
        for e in (start, self._starting_edge):
            if e is not None and not e._deleted:
                if e._face is not None:
                    return e

                if e.symm._face is not None:
                    return e.symm

        for f in self._faces:
            return f._edges[0]

        return None

    def _close(self, p, q):
        """ Coincidence test with coordinate tolerance.
        """
        return (abs(p[0] - q[0]) < self._eps and
                abs(p[1] - q[1]) < self._eps)

    @staticmethod
    def _cycle_after(edge):
        """ Edges of the left face cycle of `edge`, excluding `edge`.
        """
        cycle = []
        e = edge.ccw_edge

        while e is not edge:
            cycle.append(e)
            e = e.ccw_edge

        return cycle
