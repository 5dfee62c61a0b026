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

""" Mesh item flags.

Note
----
Bit flags are orthogonal to the refinement state of a face, which is an
ordinary enumeration. Membership in the set of active faces is tracked by
the mesh, not by a flag.
"""

from enum import Enum
from enum import Flag
from enum import auto


class VertexFlag(Flag):
    """ Vertex flags enumeration.
    """

    BOUNDARY = auto()
    """ Boundary flag.

    Set for vertices realized from a boundary point."""

    FIXED = auto()
    """ Fixed flag.

    Indicates that algorithms should not change vertex coordinates
    when this flag is set. Boundary vertices and interior weight points
    are fixed."""


class EdgeFlag(Flag):
    """ Edge flags enumeration.
    """

    BOUNDARY = auto()
    """ Boundary flag.

    Set for both halves of an edge that realizes a boundary segment.
    Flagged edges are never swapped or split."""


class FaceState(Enum):
    """ Refinement state of a face.
    """

    NONE = 0
    """ Unclassified or undersized face. """

    WAITING = 1
    """ Undersized face surrounded by undersized faces. """

    ACCEPTED = 2
    """ Face whose circumradius matches the local target size. """
