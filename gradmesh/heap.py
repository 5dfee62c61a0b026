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

""" Heap based priority queue.

See **Algorithms in C**, *Parts 1--4* by Robert Sedgewick for the array
based heap layout used in this module. Item positions are tracked in a
dictionary so that arbitrary items can be re-prioritized or removed in
logarithmic time, which :py:mod:`heapq` does not offer.

The queue backs the set of active faces of a mesh: faces are keyed by
their circumradius, the largest face is served first.
"""

from itertools import count


class MaxHeap:
    """ Max-priority queue with addressable items.

    Larger priority values signify higher priority. Among items of equal
    priority the one queued first is served first.

    Parameters
    ----------
    items : iterable, optional
        A sequence of `(object, priority)` pairs.

    Note
    ----
    Only `hashable <https://docs.python.org/3/glossary.html#term-hashable>`_
    objects can be queued. All user defined types are hashable.
    """

    def __init__(self, items=None):
        # Binary tree stored in a list. Slot 0 is unused so that the
        # children of slot k are 2k and 2k+1. Entries are lists
        # [priority, sequence number, item].
        self._heap = [None]
        self._hpos = dict()
        self._seq = count()

        if items is not None:
            for item, priority in items:
                self.push(item, priority)

    def __bool__(self):
        return len(self._heap) > 1

    def __len__(self):
        return len(self._heap) - 1

    def __contains__(self, item):
        return item in self._hpos

    def __iter__(self):
        """ Queued `(item, priority)` pairs in storage order.
        """
        return ((entry[2], entry[0]) for entry in self._heap[1:])

    @property
    def top(self):
        """ Item of highest priority.

        :type: 2-tuple of `object` and `priority`.

        Raises
        ------
        IndexError
            If the queue is empty.
        """
        if len(self._heap) == 1:
            raise IndexError('top of empty heap')

        entry = self._heap[1]
        return entry[2], entry[0]

    def push(self, item, priority):
        """ Queue an item.

        Queuing an item that is already present updates its priority.

        Parameters
        ----------
        item : object
            Hashable object.
        priority : float
            Priority of the object.
        """
        if item in self._hpos:
            self.update(item, priority)
            return

        self._heap.append([priority, next(self._seq), item])
        self._hpos[item] = len(self._heap) - 1
        self._fixup(len(self._heap) - 1)

    def pop(self):
        """ Remove the item of highest priority.

        Raises
        ------
        IndexError
            If the queue is empty.

        Returns
        -------
        item : object
            Object of highest priority.
        priority : float
            Its priority.
        """
        item, priority = self.top
        self.remove(item)

        return item, priority

    def update(self, item, priority):
        """ Change the priority of a queued item.

        Raises
        ------
        KeyError
            If `item` is not queued.
        """
        k = self._hpos[item]
        self._heap[k][0] = priority

        self._fixup(k)
        self._fixdown(self._hpos[item])

    def remove(self, item):
        """ Remove a queued item.

        Raises
        ------
        KeyError
            If `item` is not queued.

        Returns
        -------
        float
            Priority of the removed item.
        """
        k = self._hpos.pop(item)
        removed = self._heap[k]
        last = self._heap.pop()

        if k < len(self._heap):
            # Fill the hole with the former last entry and let it float
            # to its proper position.
            self._heap[k] = last
            self._hpos[last[2]] = k
            self._fixup(k)
            self._fixdown(self._hpos[last[2]])

        return removed[0]

    def discard(self, item):
        """ Remove an item if it is queued.
        """
        if item in self._hpos:
            self.remove(item)

    def _higher(self, i, j):
        """ Entry at position i is served before entry at position j.
        """
        a, b = self._heap[i], self._heap[j]
        return a[0] > b[0] or (a[0] == b[0] and a[1] < b[1])

    def _swap(self, i, j):
        heap = self._heap
        heap[i], heap[j] = heap[j], heap[i]

        self._hpos[heap[i][2]] = i
        self._hpos[heap[j][2]] = j

    def _fixup(self, k):
        while k > 1 and self._higher(k, k // 2):
            self._swap(k, k // 2)
            k //= 2

    def _fixdown(self, k):
        n = len(self._heap) - 1

        while 2*k <= n:
            j = 2*k

            if j < n and self._higher(j + 1, j):
                j += 1

            if not self._higher(j, k):
                break

            self._swap(j, k)
            k = j
