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

""" Meshing pipeline.

A :class:`Region` collects boundary chains and loops, interior weight
points and an optional size function, and builds a graded triangle mesh
in a fixed order of stages: point insertion, boundary recovery, exterior
pruning, refinement and smoothing.

.. code-block:: python
   :linenos:

   square = Boundary([[0, 0], [1, 0], [1, 1], [0, 1]], 0.1, closed=True)

   region = Region([square])
   region.add_weight([0.5, 0.5], 0.02)

   mesh = region.build(quiet=False)
   mesh.write('square.obj')
"""

import logging

from time import perf_counter

import numpy as np

import gradmesh.refine as refine
import gradmesh.smooth as smooth
import gradmesh.traits as traits

from gradmesh.boundary import Boundary
from gradmesh.config import Parameters
from gradmesh.delaunay import Triangulation
from gradmesh.flags import VertexFlag
from gradmesh.hds import MeshError
from gradmesh.hds import ConvergenceError


logger = logging.getLogger(__name__)


class Region:
    """ Planar meshing region.

    Parameters
    ----------
    boundaries : iterable of Boundary, optional
        Boundary chains and loops.
    weights : iterable, optional
        Sequence of `(point, spacing)` pairs.
    params : Parameters, optional
        Meshing parameters, defaults are used if omitted.
    size_mesh : Triangulation, optional
        External size function, see
        :meth:`~gradmesh.delaunay.Triangulation.from_samples`.
    name : str, optional
        Name tag of the resulting mesh.


    The domain consists of all points enclosed by an odd number of closed
    loops. If there are no closed loops, the domain is the area
    triangulated by the input points.
    """

    def __init__(self, boundaries=(), weights=(), params=None,
                 size_mesh=None, *, name=None):
        self._params = Parameters() if params is None else params
        self._size_mesh = size_mesh
        self._name = name

        self._boundaries = []
        self._weights = []
        self._mesh = None

        for b in boundaries:
            self.add_boundary(b)

        for point, spacing in weights:
            self.add_weight(point, spacing)

    def __repr__(self):
        return (f'Region({len(self._boundaries)} boundaries, ' +
                f'{len(self._weights)} weights)')

    @property
    def params(self):
        """ Meshing parameters.

        :type: ~gradmesh.config.Parameters
        """
        return self._params

    @property
    def boundaries(self):
        """ Boundary chains and loops.

        :type: list[Boundary]
        """
        return list(self._boundaries)

    @property
    def weights(self):
        """ Interior weight points.

        :type: list[tuple(~numpy.ndarray, float)]
        """
        return list(self._weights)

    @property
    def size_mesh(self):
        """ External size function.

        :type: ~gradmesh.delaunay.Triangulation
        """
        return self._size_mesh

    @size_mesh.setter
    def size_mesh(self, value):
        self._size_mesh = value

    @property
    def mesh(self):
        """ Result of the last build, :obj:`None` before.

        :type: ~gradmesh.delaunay.Triangulation
        """
        return self._mesh

    def add_boundary(self, boundary):
        """ Add a boundary chain or loop.

        Raises
        ------
        TypeError
            If `boundary` is not a :class:`~gradmesh.boundary.Boundary`.

        Returns
        -------
        Boundary
            The added boundary.
        """
        if not isinstance(boundary, Boundary):
            raise TypeError(f'expected Boundary, got {type(boundary)}')

        self._boundaries.append(boundary)

        return boundary

    def add_weight(self, point, spacing):
        """ Add an interior weight point.

        Weight points are inserted as fixed vertices carrying their
        target spacing. Points outside the domain are dropped at build
        time.

        Raises
        ------
        ValueError
            If `spacing` is not positive or `point` is malformed.
        """
        point = np.array(point, dtype=float)

        if point.shape != (2, ):
            raise ValueError('weight point must have shape (2, )')

        if spacing <= 0.0:
            raise ValueError('weight spacing must be positive')

        self._weights.append((point, float(spacing)))

    def contains(self, point):
        """ Domain membership test.

        Returns
        -------
        bool
            :obj:`True` if `point` is enclosed by an odd number of closed
            loops, or if there are no closed loops at all.
        """
        loops = [b for b in self._boundaries if b.closed]

        if not loops:
            return True

        return sum(b.contains(point) for b in loops) % 2 == 1

    def build(self, quiet=True):
        """ Build the mesh.

        Parameters
        ----------
        quiet : bool, optional
            Suppress console output.

        Raises
        ------
        ValueError
            If there are no boundaries.
        MeshError
            If the input cannot be meshed, e.g., because boundaries
            intersect.
        ConvergenceError
            If a bounded stage exceeds its cap.

        Returns
        -------
        Triangulation
            The resulting mesh, also available as :attr:`mesh`.
        """
        CBOLD = '\33[1m'                    # bold text, white on black
        CWHITERED = '\33[41m'               # white on red background
        CEND = '\33[0m'

        if not self._boundaries:
            raise ValueError('region has no boundaries')

        start = perf_counter()

        if not quiet:
            print(f'meshing {CBOLD}{self!r}{CEND}', end=' ...')

        self._orient()

        mesh = Triangulation(self._params, name=self._name)
        mesh.size_mesh = self._size_mesh
        mesh.init(self._bbox())

        for b in self._boundaries:
            b.insert_into(mesh)

        dropped = 0

        for point, spacing in self._weights:
            if not self.contains(point):
                dropped += 1
                continue

            v = mesh.insert_point(point, spacing)

            if v is None:
                raise MeshError(f'weight point {point} outside of the mesh')

            v.flags |= VertexFlag.FIXED

        if dropped:
            logger.warning('[region] %d weight points outside the domain',
                           dropped)

            if not quiet:
                print(f'\n{CWHITERED}{dropped} weight points outside ' +
                      f'the domain dropped{CEND}', end=' ...')

        recovered = self._recover(mesh)

        mesh.delete_init()

        pruned = sum(b.set_boundary(mesh) for b in self._boundaries)
        mesh.delete_isolated()

        logger.debug('[region] %d recovery changes, %d edges pruned',
                     recovered, pruned)

        refine.first_classification(mesh)
        inserted = refine.refine(mesh)
        mesh.classification = False

        moves = smooth.smooth(mesh)

        if self._params.relax:
            smooth.relax(mesh)

        mesh.validate()

        self._mesh = mesh

        if not quiet:
            nv, ne, nf = mesh.size
            qmin, qavg = traits.quality(mesh)

            print(f' done ({perf_counter()-start:.3} sec)')
            print(f'  {nv} vertices, {ne} edges, {nf} faces')
            print(f'  {inserted} refinement points, {moves} smoothing moves')
            print(f'  quality min {qmin:.3f}, avg {qavg:.3f}')

        return mesh

    def _orient(self):
        """ Orient closed loops by nesting depth.

        Loops at even depth enclose the domain and run counter-clockwise,
        loops at odd depth bound holes and run clockwise.
        """
        loops = [b for b in self._boundaries if b.closed]

        for b in loops:
            p = b.points[0]
            depth = sum(other.contains(p) for other in loops
                        if other is not b)

            if (b.area() > 0.0) != (depth % 2 == 0):
                b.reverse()

    def _bbox(self):
        points = [b.points for b in self._boundaries]
        points.extend(p.reshape(1, 2) for p, _ in self._weights
                      if self.contains(p))

        return traits.bounds(np.vstack(points))

    def _recover(self, mesh):
        """ Recover all boundaries until a pass changes nothing.
        """
        total = 0
        policy = self._params.recovery

        for _ in range(self._params.max_recover_steps):
            changes = sum(b.recover(mesh, policy) for b in self._boundaries)
            total += changes

            if changes == 0:
                return total

        raise ConvergenceError('boundary recovery did not settle')
