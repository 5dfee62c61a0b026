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

""" Geometric mesh traits.

Convenience functions to compute common geometric traits of planar
meshes, like face areas, shape quality, and edge length statistics.
"""

import numpy as np

import gradmesh.geom as geom


def bounds(points):
    r""" Bounding box vertices.

    Corner vertices of the axis-aligned bounding box.

    Parameters
    ----------
    points : array_like, shape (n, 2)
        Coordinates of :math:`n` points in :math:`\mathbb{R}^2`,
        one point per row.

    Returns
    -------
    a : ~numpy.ndarray
        Holds the minimum value for each dimension.
    b : ~numpy.ndarray
        Holds the maximum value for each dimension.
    """
    points = np.asarray(points, dtype=float).reshape(-1, 2)
    return np.min(points, axis=0), np.max(points, axis=0)


def face_area(face):
    """ Signed face area.

    Parameters
    ----------
    face : Face
        Triangle or quadrilateral.

    Returns
    -------
    float
        Shoelace area, positive for counter-clockwise faces.
    """
    points = [v.point for v in face]
    area = 0.0

    for i in range(len(points)):
        p, q = points[i-1], points[i]
        area += p[0]*q[1] - p[1]*q[0]

    return 0.5 * area


def face_quality(face):
    """ Signed shape quality of a triangle.

    Ratio of inradius and circumradius, see
    :func:`~gradmesh.geom.tri_quality`.

    Raises
    ------
    NotImplementedError
        For non-triangular faces.
    """
    if len(face) != 3:
        raise NotImplementedError('triangular face required')

    a, b, c = (v.point for v in face)
    return geom.tri_quality(a, b, c)


def quality(mesh):
    """ Shape quality statistics.

    Returns
    -------
    min : float
        Worst triangle quality.
    avg : float
        Average triangle quality.
    """
    values = [face_quality(f) for f in mesh if len(f) == 3]

    if not values:
        return np.nan, np.nan

    return min(values), sum(values) / len(values)


def edge_length(item):
    """ Edge length statistics.

    Minimal, maximal, and average edge length for a mesh or an
    individual face.

    Parameters
    ----------
    item : Face or Mesh
        Mesh or face of a mesh.

    Returns
    -------
    min : float
        Minimal edge length.
    max : float
        Maximal edge length.
    avg : float
        Average edge length.
    """
    min, max = np.inf, -np.inf
    avg, cnt = 0.0, 0

    for e in item._hiter():
        length = e.length

        avg += length
        cnt += 1

        min = length if length < min else min
        max = length if length > max else max

    return min, max, avg / cnt


def total_area(mesh):
    """ Sum of all face areas.
    """
    return sum(face_area(f) for f in mesh)
