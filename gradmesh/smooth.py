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

""" Mesh smoothing.

Vertex relocation towards the average apex of ideal equilateral triangles
over the link edges of a vertex (Borouchaki and George). A move is only
accepted if it strictly improves the worst quality of the incident
triangles and produces no inverted triangle. Optional degree relaxation
swaps edges to drive vertex degrees towards six.
"""

import logging
import math

import gradmesh.geom as geom
import gradmesh.iterators as iterators


logger = logging.getLogger(__name__)


def _link(vertex):
    """ Link edges of an interior vertex.

    Returns
    -------
    list[tuple]
        Consecutive pairs of adjacent vertex positions, one pair per
        incident triangle, as tuples of floats.
    """
    ring = [tuple(float(c) for c in w.point) for w in iterators.verts(vertex)]

    return [(ring[i], ring[(i+1) % len(ring)]) for i in range(len(ring))]


def _worst_quality(p, link):
    return min(geom.tri_quality(p, p1, p2) for p1, p2 in link)


def optimal_position(vertex, weight):
    """ Candidate position of a smoothing move.

    Parameters
    ----------
    vertex : Vertex
        An interior vertex.
    weight : float
        Relaxation weight, 1 moves the vertex all the way to the length
        weighted average of the ideal apexes.

    Returns
    -------
    tuple(float, float)
        Candidate position.
    """
    p = vertex.point
    link = _link(vertex)

    sx, sy, total = 0.0, 0.0, 0.0
    height = 0.5 * math.sqrt(3.0)

    for p1, p2 in link:
        v = (p2[0] - p1[0], p2[1] - p1[1])
        length = math.hypot(*v)

        if length == 0.0:
            continue

        n = geom.normal_versor(v)
        mx, my = 0.5*(p1[0] + p2[0]), 0.5*(p1[1] + p2[1])

        sx += length * (mx + height*length*n[0])
        sy += length * (my + height*length*n[1])
        total += length

    if total == 0.0:
        return float(p[0]), float(p[1])

    return (float(p[0]) + weight*(sx/total - p[0]),
            float(p[1]) + weight*(sy/total - p[1]))


def smooth_vertex(vertex, weight):
    """ Quality monotone vertex move.

    Returns
    -------
    bool
        :obj:`True` if the vertex was moved.
    """
    link = _link(vertex)
    old = _worst_quality(vertex.point, link)

    candidate = optimal_position(vertex, weight)
    new = _worst_quality(candidate, link)

    if new > 0.0 and new > old:
        vertex.point = candidate
        return True

    return False


def smooth(mesh, passes=None, weight=None):
    """ Smooth interior vertices.

    Vertices that are fixed, lie on the mesh boundary, or have fewer than
    two neighbors are never moved.

    Parameters
    ----------
    mesh : Triangulation
        Mesh to be smoothed in place.
    passes : int, optional
        Number of sweeps, parameter `smooth_passes` by default.
    weight : float, optional
        Relaxation weight, parameter `smooth_weight` by default.

    Returns
    -------
    int
        Number of accepted moves.
    """
    passes = mesh.params.smooth_passes if passes is None else passes
    weight = mesh.params.smooth_weight if weight is None else weight

    moves = 0

    for _ in range(passes):
        for v in mesh.vertices:
            if v.fixed or v.degree < 2 or v.boundary:
                continue

            if smooth_vertex(v, weight):
                moves += 1

    for f in mesh:
        f.update()

    if mesh.tree is not None:
        mesh.tree.rebuild(mesh.vertices)

    logger.debug('[smooth] %d moves in %d passes', moves, passes)

    return moves


def _deviation(vertex, delta):
    """ Squared deviation from degree six after a degree change.
    """
    degree = vertex.angular_degree()

    if degree == 0.0:
        return 0.0

    scale = degree / vertex.degree

    return (degree + delta*scale - 6.0)**2


def relax(mesh, passes=None):
    """ Degree driven edge relaxation.

    An interior edge is swapped if this lowers the summed squared
    deviation of the four involved vertex degrees from six and the
    enclosing quadrilateral is convex. Boundary edges are never swapped.

    Parameters
    ----------
    mesh : Triangulation
        Mesh to be relaxed in place.
    passes : int, optional
        Maximal number of sweeps, parameter `smooth_passes` by default.

    Returns
    -------
    int
        Number of swaps.
    """
    passes = mesh.params.smooth_passes if passes is None else passes
    swaps = 0

    for _ in range(passes):
        count = 0

        for e in mesh.edges:
            if not e.swappable:
                continue

            a, b = e.origin, e.dest
            c, d = e.ccw_edge.dest, e.symm.ccw_edge.dest

            before = sum(_deviation(v, 0) for v in (a, b, c, d))
            after = (_deviation(a, -1) + _deviation(b, -1) +
                     _deviation(c, +1) + _deviation(d, +1))

            if after < before and mesh.swap(e) is not None:
                count += 1

        swaps += count

        if count == 0:
            break

    logger.debug('[relax] %d swaps', swaps)

    return swaps
