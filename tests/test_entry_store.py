from __future__ import annotations

import pytest

from arcade_catalog.database.entry_store import EntryStore
from arcade_catalog.errors import StoreFullError
from arcade_catalog.models.entry import Entry


def _entry(name: str, station_id: int = 0) -> Entry:
    return Entry(name=name, filename=f"{name}.nes", path=f"/roms/{name}.nes", station_id=station_id)


def test_append_returns_index_and_doubles_capacity() -> None:
    store = EntryStore(initial_capacity=2)
    assert store.append(_entry("a")) == 0
    assert store.append(_entry("b")) == 1
    assert store.capacity == 2
    assert store.append(_entry("c")) == 2
    assert store.capacity == 4
    assert store.count() == 3


def test_remove_where_keeps_relative_order() -> None:
    store = EntryStore()
    for name, sid in [("a", 0), ("b", 1), ("c", 0), ("d", 2), ("e", 1)]:
        store.append(_entry(name, sid))

    assert store.remove_where(lambda e: e.station_id == 1) == 3
    assert [e.name for e in store] == ["a", "c", "d"]


def test_get_out_of_range() -> None:
    store = EntryStore()
    store.append(_entry("a"))
    assert store.get(0).name == "a"
    assert store.get(1) is None
    assert store.get(-1) is None


def test_full_store_raises_without_corrupting_data() -> None:
    store = EntryStore(initial_capacity=2, max_total=3)
    for name in "abc":
        store.append(_entry(name))

    with pytest.raises(StoreFullError):
        store.append(_entry("d"))
    assert [e.name for e in store] == ["a", "b", "c"]


def test_count_for_station() -> None:
    store = EntryStore()
    store.append(_entry("a", 0))
    store.append(_entry("b", 3))
    store.append(_entry("c", 3))
    assert store.count_for_station(3) == 2
    assert store.count_for_station(1) == 0


def test_entries_are_immutable() -> None:
    entry = _entry("a")
    with pytest.raises(Exception):
        entry.name = "b"
