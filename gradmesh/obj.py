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

""" OBJ file output.

Low-level helpers to grow coordinate arrays and to write meshes as OBJ
files. Only vertex ('v'), line ('l') and face ('f') statements are
produced. Complete specifications can be found in the `Advanced
Visualizer Manual`.
"""

import numpy as np


def _array_grow(array, size):
    """ Enlarge first axis of array.

    The capacity is at least doubled so that repeated growth by single
    rows has amortized constant cost. Existing rows are copied into a new
    array; views of the old array stay valid but are no longer updated.

    Parameters
    ----------
    array : ~numpy.ndarray
        Array object to be enlarged.
    size : int
        Minimal length of the first axis.

    Returns
    -------
    ~numpy.ndarray
        The input array if it is large enough, a new array otherwise.
    """
    if len(array) >= size:
        return array

    capacity = max(size, 2*len(array), 16)

    grown = np.empty((capacity, *array.shape[1:]), dtype=array.dtype)
    grown[:len(array)] = array

    return grown


def write(filename, *, f=None, l=None, **data):
    """ Write to file.

    Parameters
    ----------
    filename : str
        Name of output file.
    f : list, optional
        Face definitions, 0-based vertex indices.
    l : array_like, optional
        Line elements, 0-based vertex index rows.
    **data
        Data blocks keyed by line tag, written before any element.


    Vertices are passed as a data block:

    >>> write('mesh.obj', v=points, f=faces)

    Each row of a data block is written to a line that starts with the
    given tag.
    """
    faces = [] if f is None else f
    lines = [] if l is None else l

    with open(filename, 'w') as file:
        for key, value in data.items():
            for row in value:
                file.write(key)

                for element in row:
                    file.write(f' {element}')

                file.write('\n')

        # Element statements use 1-based indexing.
        for line in lines:
            file.write('l ' + ' '.join(str(int(i) + 1) for i in line) + '\n')

        for face in faces:
            file.write('f ' + ' '.join(str(int(v) + 1) for v in face) + '\n')
