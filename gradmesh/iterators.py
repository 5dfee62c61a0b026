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

""" Combinatorial mesh item neighborhood iterators.

Adjacent/incident mesh items are visited in counter-clockwise order as
determined by the mesh orientation (whenever it makes sense to consider
oriented item traversal).

Note
----
When applied to a :class:`~gradmesh.hds.Mesh` instance, the iterators
visit live items in ascending slot order.
"""

from collections import deque


def verts(obj):
    """ Vertex iterator.

    The returned iterator traverses adjacent/incident vertices
    of `obj` depending on its type:

    .. table::
       :width: 100%
       :widths: 20, 80

       =============== ================================================
       :class:`Vertex` ↺ traversal of adjacent vertices
       --------------- ------------------------------------------------
       :class:`Face`   ↺ traversal of incident vertices
       --------------- ------------------------------------------------
       :class:`Mesh`   slot order traversal of live vertices
       =============== ================================================

    Parameters
    ----------
    obj : Vertex or Face or Mesh
        The base object.

    Yields
    ------
    Vertex
    """
    return obj._viter()


def edges(obj):
    """ Half-edge iterator.

    Outgoing edges of a vertex, the boundary cycle of a face, or both
    halves of every edge pair of a mesh.

    Parameters
    ----------
    obj : Vertex or Face or Mesh
        The base object.

    Yields
    ------
    Edge
    """
    return obj._hiter()


def faces(obj):
    """ Face iterator.

    Incident faces of a vertex, adjacent faces of a face, or all faces
    of a mesh. Missing neighbors are skipped.

    Parameters
    ----------
    obj : Vertex or Face or Mesh
        The base object.

    Yields
    ------
    Face
    """
    return obj._fiter()


def faces_bfs(seed, blocked=None):
    """ Breadth-first face traversal.

    Visits the edge-connected component of `seed`. An explicit queue is
    used, the traversal depth is not limited by the interpreter's
    recursion limit.

    Parameters
    ----------
    seed : Face
        Start face.
    blocked : callable, optional
        Predicate on half-edges. Faces are not entered across edges for
        which it returns :obj:`True`.

    Yields
    ------
    Face
        Next face in breadth-first order.
    int
        Number of edges crossed to reach the face.
    """
    queue = deque([seed])
    level = {seed: 0}

    while queue:
        f = queue.popleft()
        d = level[f]

        yield f, d

        for e in f._hiter():
            if blocked is not None and blocked(e):
                continue

            g = e.symm._face

            if g is not None and g not in level:
                level[g] = d + 1
                queue.append(g)
