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

""" Spatial vertex index.

A 2-d tree over inserted vertices used to detect duplicate points. Split
axes alternate with tree depth, even levels split on the y-coordinate and
odd levels on the x-coordinate. Two points are considered equal if both
coordinate differences are below a tolerance.

Note
----
The tree stores a copy of the vertex position taken at insertion time.
Moving vertices invalidates the index; call :meth:`VertexTree.rebuild`
afterwards. Deleted vertices are skipped by queries but stay in the tree
until the next rebuild.
"""

import gradmesh.config as config


class _Node:
    """ Tree node.
    """

    __slots__ = ('vertex', 'x', 'y', 'left', 'right')

    def __init__(self, vertex, point):
        self.vertex = vertex
        self.x = float(point[0])
        self.y = float(point[1])
        self.left = None
        self.right = None


class VertexTree:
    """ Alternating axis binary search tree.

    Parameters
    ----------
    eps : float, optional
        Coordinate tolerance for point equality.
    """

    def __init__(self, eps=config.EPSILON):
        self._eps = eps
        self._root = None
        self._size = 0

    def __len__(self):
        """ Number of stored nodes, including nodes of deleted vertices.
        """
        return self._size

    def __bool__(self):
        return self._root is not None

    @property
    def eps(self):
        """ Coordinate tolerance.

        :type: float
        """
        return self._eps

    def clear(self):
        """ Remove all nodes.
        """
        self._root = None
        self._size = 0

    def rebuild(self, vertices):
        """ Rebuild from vertices at their current positions.

        Parameters
        ----------
        vertices : iterable
            Live :class:`~gradmesh.hds.Vertex` instances.
        """
        self.clear()

        for v in vertices:
            self.insert(v)

    def search(self, point):
        """ Find a vertex close to a point.

        Parameters
        ----------
        point : array_like, shape (2, )
            Query position.

        Returns
        -------
        Vertex
            A live vertex whose position equals `point` within tolerance,
            or :obj:`None`.
        """
        eps = self._eps
        x, y = float(point[0]), float(point[1])

        # Both subtrees are visited if the query is within tolerance of
        # the splitting coordinate.
        stack = [(self._root, 0)]

        while stack:
            node, level = stack.pop()

            if node is None:
                continue

            if (abs(node.x - x) < eps and abs(node.y - y) < eps and
                    not node.vertex.deleted):
                return node.vertex

            delta = y - node.y if level % 2 == 0 else x - node.x

            if delta < eps:
                stack.append((node.left, level + 1))

            if delta > -eps:
                stack.append((node.right, level + 1))

        return None

    def insert(self, vertex):
        """ Add vertex.

        Parameters
        ----------
        vertex : Vertex
            Vertex with valid coordinates.

        Returns
        -------
        bool
            :obj:`False` if an equal live vertex is already stored, in
            which case the tree remains unchanged.
        """
        point = vertex.point

        if self.search(point) is not None:
            return False

        node = _Node(vertex, point)
        self._size += 1

        if self._root is None:
            self._root = node
            return True

        parent, level = self._root, 0

        while True:
            if level % 2 == 0:
                go_left = node.y < parent.y
            else:
                go_left = node.x < parent.x

            child = parent.left if go_left else parent.right

            if child is None:
                if go_left:
                    parent.left = node
                else:
                    parent.right = node

                return True

            parent, level = child, level + 1
