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

""" Planar geometric kernel.

Predicates and constructions on points of the plane. All functions accept
any indexable 2-sequence (tuples, lists, rows of a NumPy array) and operate
on Python floats. For the small fixed-size computations needed here this
is considerably faster than vectorized NumPy calls.

Note
----
Predicates are evaluated in floating point arithmetic. Near degenerate
configurations are resolved by epsilon thresholds where it matters, not by
exact arithmetic.
"""

import math
import numpy as np


def tri_area(a, b, c):
    r""" Twice the signed triangle area.

    Parameters
    ----------
    a, b, c : array_like, shape (2, )
        Triangle corners.

    Returns
    -------
    float
        The value :math:`(b - a) \times (c - a)`, positive iff the
        corners are in counter-clockwise order.
    """
    return (b[0] - a[0])*(c[1] - a[1]) - (b[1] - a[1])*(c[0] - a[0])


def ccw(a, b, c):
    """ Counter-clockwise orientation test.

    Returns
    -------
    bool
        :obj:`True` iff the signed area of `a`, `b`, `c` is positive.
    """
    return tri_area(a, b, c) > 0.0


def left_of(x, org, dest):
    """ Strictly left of the directed line `org` to `dest`.
    """
    return tri_area(x, org, dest) > 0.0


def right_of(x, org, dest):
    """ Strictly right of the directed line `org` to `dest`.
    """
    return tri_area(x, dest, org) > 0.0


def in_circle(a, b, c, d):
    """ In-circle test.

    Parameters
    ----------
    a, b, c : array_like, shape (2, )
        Corners of a counter-clockwise triangle.
    d : array_like, shape (2, )
        Query point.

    Returns
    -------
    bool
        :obj:`True` iff `d` lies strictly inside the circumcircle of the
        triangle.

    Note
    ----
    Coordinates are taken relative to `d` which reduces cancellation for
    points far away from the origin.
    """
    adx, ady = a[0] - d[0], a[1] - d[1]
    bdx, bdy = b[0] - d[0], b[1] - d[1]
    cdx, cdy = c[0] - d[0], c[1] - d[1]

    det = ((adx*adx + ady*ady) * (bdx*cdy - cdx*bdy) +
           (bdx*bdx + bdy*bdy) * (cdx*ady - adx*cdy) +
           (cdx*cdx + cdy*cdy) * (adx*bdy - bdx*ady))

    return det > 0.0


def distance(p, q):
    """ Euclidean distance of two points.
    """
    return math.hypot(q[0] - p[0], q[1] - p[1])


def midpoint(p, q):
    """ Midpoint of a segment.

    Returns
    -------
    ~numpy.ndarray, shape (2, )
    """
    return np.array([0.5*(p[0] + q[0]), 0.5*(p[1] + q[1])])


def centroid(a, b, c):
    """ Triangle centroid.

    Returns
    -------
    ~numpy.ndarray, shape (2, )
    """
    return np.array([(a[0] + b[0] + c[0]) / 3.0,
                     (a[1] + b[1] + c[1]) / 3.0])


def circumcircle(a, b, c):
    """ Circumscribed circle.

    Parameters
    ----------
    a, b, c : array_like, shape (2, )
        Triangle corners.

    Returns
    -------
    center : ~numpy.ndarray, shape (2, )
        Circumcenter.
    radius : float
        Circumradius.

    Note
    ----
    For collinear (or coincident) corners the circle over the longest
    side is returned: its midpoint and half its length.
    """
    bx, by = b[0] - a[0], b[1] - a[1]
    cx, cy = c[0] - a[0], c[1] - a[1]

    det = 2.0 * (bx*cy - by*cx)

    if det == 0.0:
        sides = [(distance(a, b), a, b),
                 (distance(b, c), b, c),
                 (distance(c, a), c, a)]
        length, p, q = max(sides, key=lambda side: side[0])

        return midpoint(p, q), 0.5*length

    b2 = bx*bx + by*by
    c2 = cx*cx + cy*cy

    ux = (cy*b2 - by*c2) / det
    uy = (bx*c2 - cx*b2) / det

    return np.array([a[0] + ux, a[1] + uy]), math.hypot(ux, uy)


def incircle(a, b, c):
    """ Inscribed circle.

    Parameters
    ----------
    a, b, c : array_like, shape (2, )
        Triangle corners.

    Returns
    -------
    center : ~numpy.ndarray, shape (2, )
        Incenter, the side length weighted average of the corners.
    radius : float
        Inradius, non-negative.

    Note
    ----
    If all corners coincide, the centroid and a vanishing radius are
    returned.
    """
    la = distance(b, c)
    lb = distance(c, a)
    lc = distance(a, b)
    perimeter = la + lb + lc

    if perimeter == 0.0:
        return centroid(a, b, c), 0.0

    center = np.array([(la*a[0] + lb*b[0] + lc*c[0]) / perimeter,
                       (la*a[1] + lb*b[1] + lc*c[1]) / perimeter])

    return center, abs(tri_area(a, b, c)) / perimeter


def tri_quality(a, b, c):
    """ Signed shape quality.

    Ratio of inradius and circumradius, negative for clockwise triangles.
    The maximal value 0.5 is attained by equilateral triangles.

    Returns
    -------
    float
        Quality value in [-0.5, 0.5], zero for degenerate triangles.
    """
    area2 = tri_area(a, b, c)

    if area2 == 0.0:
        return 0.0

    la = distance(b, c)
    lb = distance(c, a)
    lc = distance(a, b)

    # r = |2A| / perimeter and R = la*lb*lc / (2 |2A|)
    quality = 2.0 * area2 * area2 / ((la + lb + lc) * la * lb * lc)

    return quality if area2 > 0.0 else -quality


def normal_versor(v):
    """ Left unit normal.

    Parameters
    ----------
    v : array_like, shape (2, )
        Non-zero vector.

    Returns
    -------
    ~numpy.ndarray, shape (2, )
        The vector `v` rotated by 90 degrees counter-clockwise and
        normalized.
    """
    length = math.hypot(v[0], v[1])
    return np.array([-v[1] / length, v[0] / length])


def is_inside(d, a, b):
    """ Angular wedge test.

    Decide whether direction `d` lies strictly inside the wedge swept
    counter-clockwise from direction `a` to direction `b`.

    Parameters
    ----------
    d, a, b : array_like, shape (2, )
        Non-zero direction vectors.

    Returns
    -------
    bool

    Note
    ----
    Equal directions `a` and `b` describe the full turn, i.e., every
    direction except `a` itself is inside.
    """
    ab = a[0]*b[1] - a[1]*b[0]
    ad = a[0]*d[1] - a[1]*d[0]
    db = d[0]*b[1] - d[1]*b[0]

    if ab == 0.0 and a[0]*b[0] + a[1]*b[1] > 0.0:
        return not (ad == 0.0 and a[0]*d[0] + a[1]*d[1] > 0.0)

    if ab > 0.0:
        return ad > 0.0 and db > 0.0

    # Reflex (or straight) wedge
    return ad > 0.0 or db > 0.0


def swappable(a, b, c, d, eps):
    """ Edge swap convexity test.

    The edge from `a` to `b` separates the triangle with apex `c` (to its
    left) from the triangle with apex `d` (to its right). Swapping the
    edge is admissible if the quadrilateral `a`, `d`, `b`, `c` is
    strictly convex at `a` and at `b`.

    Parameters
    ----------
    a, b, c, d : array_like, shape (2, )
        Quadrilateral corners.
    eps : float
        Lower bound for the sine of the corner angles at `a` and `b`.

    Returns
    -------
    bool
    """
    def sine(o, p, q):
        lp = distance(o, p)
        lq = distance(o, q)

        if lp == 0.0 or lq == 0.0:
            return 0.0

        return tri_area(o, p, q) / (lp * lq)

    return sine(a, d, c) >= eps and sine(b, c, d) >= eps


def barycentric(p, a, b, c):
    """ Barycentric coordinates.

    Returns
    -------
    tuple(float, float, float)
        Coordinates of `p` with respect to the triangle `a`, `b`, `c`.
        Equal weights are returned for a degenerate triangle.
    """
    area = tri_area(a, b, c)

    if area == 0.0:
        return 1/3, 1/3, 1/3

    la = tri_area(p, b, c) / area
    lb = tri_area(a, p, c) / area

    return la, lb, 1.0 - la - lb


def interp_linear(t, y0, y1):
    """ Linear interpolation.

    Returns
    -------
    float
        The value at parameter `t` of the line through ``(0, y0)``
        and ``(1, y1)``.
    """
    return y0 + t*(y1 - y0)


def interp_parabolic(t, y0, y1):
    """ Parabolic easing between two values.

    The parameter is clamped to the unit interval. The slope vanishes
    at ``t = 1``.

    Returns
    -------
    float
    """
    if t <= 0.0:
        return y0

    if t >= 1.0:
        return y1

    return y0 + t*(2.0 - t)*(y1 - y0)


def segment_param(p, a, b):
    """ Parameter of the orthogonal projection onto a line.

    Returns
    -------
    float
        Parameter `t` of the point ``a + t*(b - a)`` closest to `p`,
        zero if `a` and `b` coincide.
    """
    vx, vy = b[0] - a[0], b[1] - a[1]
    length2 = vx*vx + vy*vy

    if length2 == 0.0:
        return 0.0

    return ((p[0] - a[0])*vx + (p[1] - a[1])*vy) / length2


def segment_distance(p, a, b):
    """ Distance of a point to a closed segment.
    """
    t = min(max(segment_param(p, a, b), 0.0), 1.0)

    return math.hypot(a[0] + t*(b[0] - a[0]) - p[0],
                      a[1] + t*(b[1] - a[1]) - p[1])


def on_segment(p, a, b, tol):
    """ Point on segment test.

    Parameters
    ----------
    p : array_like, shape (2, )
        Query point.
    a, b : array_like, shape (2, )
        Segment end points.
    tol : float
        Distance tolerance.

    Returns
    -------
    bool
        :obj:`True` if `p` is within distance `tol` of the segment and
        its projection falls strictly between the end points.
    """
    t = segment_param(p, a, b)

    return 0.0 < t < 1.0 and segment_distance(p, a, b) < tol


class AffineFrame:
    """ Orthonormal frame of the plane.

    The x-axis of the local system points along `direction`, the y-axis
    is its left normal.

    Parameters
    ----------
    origin : array_like, shape (2, )
        Origin of the local system.
    direction : array_like, shape (2, )
        Non-zero direction of the local x-axis.

    Raises
    ------
    ValueError
        If `direction` vanishes.
    """

    def __init__(self, origin, direction):
        length = math.hypot(direction[0], direction[1])

        if length == 0.0:
            raise ValueError('frame direction must not vanish')

        self._origin = (float(origin[0]), float(origin[1]))
        self._ex = (direction[0] / length, direction[1] / length)
        self._ey = (-self._ex[1], self._ex[0])

    @property
    def origin(self):
        """ Frame origin.

        :type: ~numpy.ndarray
        """
        return np.array(self._origin)

    def to_local(self, p):
        """ Global to local coordinates.

        Returns
        -------
        ~numpy.ndarray, shape (2, )
        """
        dx = p[0] - self._origin[0]
        dy = p[1] - self._origin[1]

        return np.array([dx*self._ex[0] + dy*self._ex[1],
                         dx*self._ey[0] + dy*self._ey[1]])

    def to_global(self, q):
        """ Local to global coordinates.

        Returns
        -------
        ~numpy.ndarray, shape (2, )
        """
        return np.array([self._origin[0] + q[0]*self._ex[0] + q[1]*self._ey[0],
                         self._origin[1] + q[0]*self._ex[1] + q[1]*self._ey[1]])
