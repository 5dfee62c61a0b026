import pytest

from gradmesh.arena import Arena
from gradmesh.arena import Handle


class Item:
    pass


def test_insert_and_resolve():
    arena = Arena()
    items = [Item() for _ in range(3)]
    handles = [arena.insert(item) for item in items]

    assert handles == [Handle(0, 0), Handle(1, 0), Handle(2, 0)]
    assert len(arena) == 3
    assert list(arena) == items

    for h, item in zip(handles, items):
        assert h in arena
        assert arena[h] is item
        assert item._idx == h.index


def test_stale_handle():
    arena = Arena()
    h = arena.insert(Item())

    arena.remove(h)

    assert h not in arena
    assert len(arena) == 0

    with pytest.raises(KeyError):
        arena[h]

    with pytest.raises(KeyError):
        arena.remove(h)


def test_slot_reuse_bumps_generation():
    arena = Arena()
    a, b, c = (arena.insert(Item()) for _ in range(3))

    arena.remove(a)
    arena.remove(c)

    # Most recently released slot first
    d = arena.insert(Item())
    e = arena.insert(Item())

    assert d == Handle(2, 1)
    assert e == Handle(0, 1)
    assert a not in arena and c not in arena
    assert arena.capacity == 3
    assert arena.slot(1) is arena[b]


def test_clear_and_compact():
    arena = Arena()
    handles = [arena.insert(Item()) for _ in range(4)]

    arena.remove(handles[1])
    numbering = arena.compact()

    assert sorted(numbering.values()) == [0, 1, 2]
    assert numbering[arena[handles[3]]] == 2

    arena.clear()

    assert len(arena) == 0
    assert not arena
    assert all(h not in arena for h in handles)
