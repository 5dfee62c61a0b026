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

""" Slot arena with stable handles.

Mesh items are stored in slots of an :class:`Arena`. Released slots are
recycled through a free list, a per-slot generation counter detects stale
handles. A :class:`Handle` therefore remains a valid identity of a mesh
item for its whole lifetime, regardless of any deletions that happen in
the meantime.
"""

from typing import NamedTuple


class Handle(NamedTuple):
    """ Stable item identity.
    """

    index: int
    """ Slot index. """

    generation: int
    """ Slot generation at the time of allocation. """


class Arena:
    """ Slot arena.

    Items must allow attribute assignment: the arena sets the private
    attributes ``_idx`` (slot index) and ``_gen`` (slot generation) of
    every inserted item.


    Iteration visits live items in ascending slot order:

    .. code-block:: python

       arena = Arena()
       h = arena.insert(item)
       assert arena[h] is item

       arena.remove(h)
       h in arena                           # False, handle is stale
    """

    def __init__(self):
        self._items = []
        self._gens = []
        self._free = []

    def __len__(self):
        """ Number of live items.
        """
        return len(self._items) - len(self._free)

    def __bool__(self):
        return len(self) > 0

    def __iter__(self):
        """ Live item iterator.

        Yields
        ------
        object
            Next live item in ascending slot order.
        """
        return (item for item in self._items if item is not None)

    def __contains__(self, handle):
        index, generation = handle

        return (0 <= index < len(self._items) and
                self._gens[index] == generation and
                self._items[index] is not None)

    def __getitem__(self, handle):
        """ Resolve handle.

        Parameters
        ----------
        handle : Handle
            Item handle.

        Raises
        ------
        KeyError
            If `handle` is stale or was never allocated.

        Returns
        -------
        object
            The item stored under `handle`.
        """
        if handle not in self:
            raise KeyError(f'stale or invalid handle {tuple(handle)}')

        return self._items[handle[0]]

    @property
    def capacity(self):
        """ Number of slots, live or free.

        :type: int
        """
        return len(self._items)

    def slot(self, index):
        """ Item stored in a slot.

        Parameters
        ----------
        index : int
            Slot index.

        Returns
        -------
        object
            Live item or :obj:`None` for a free slot.
        """
        return self._items[index]

    def insert(self, item):
        """ Store item.

        The most recently released slot is reused first.

        Parameters
        ----------
        item : object
            The item to be stored.

        Returns
        -------
        Handle
            Stable handle of the stored item.
        """
        if self._free:
            index = self._free.pop()
            self._items[index] = item
        else:
            index = len(self._items)
            self._items.append(item)
            self._gens.append(0)

        item._idx = index
        item._gen = self._gens[index]

        return Handle(index, self._gens[index])

    def remove(self, handle):
        """ Release slot.

        Parameters
        ----------
        handle : Handle
            Handle of a live item.

        Raises
        ------
        KeyError
            If `handle` is stale.

        Returns
        -------
        object
            The removed item.
        """
        item = self[handle]
        index = handle[0]

        self._items[index] = None
        self._gens[index] += 1
        self._free.append(index)

        return item

    def clear(self):
        """ Remove all items.

        Generations keep counting so handles of removed items remain
        stale.
        """
        for index, item in enumerate(self._items):
            if item is not None:
                self._gens[index] += 1
                self._items[index] = None
                self._free.append(index)

    def compact(self):
        """ Dense numbering of live items.

        Returns
        -------
        dict
            Maps each live item to its position in ascending slot order.
        """
        return {item: i for i, item in enumerate(self)}
