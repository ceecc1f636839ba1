from typing import Callable, Iterator, List, Optional
from ..errors import StoreFullError
from ..models.entry import Entry

INITIAL_CAPACITY = 1024
MAX_TOTAL = 32768


class EntryStore:
    """
    Ordered, growable collection of scanned entries.

    Owned exclusively by the catalog. Indices are only meaningful until the
    next mutation; callers re-resolve by index after an append or a purge.
    """
    def __init__(self, initial_capacity: int = INITIAL_CAPACITY, max_total: int = MAX_TOTAL):
        self._entries: List[Entry] = []
        self.capacity = max(1, initial_capacity)
        self.max_total = max_total

    def append(self, entry: Entry) -> int:
        """Adds an entry at the end and returns its index."""
        if len(self._entries) >= self.capacity:
            new_capacity = self.capacity * 2
            if new_capacity > self.max_total:
                if self.capacity >= self.max_total:
                    raise StoreFullError(f"Entry store is full ({self.max_total} entries)")
                new_capacity = self.max_total
            self.capacity = new_capacity

        self._entries.append(entry)
        return len(self._entries) - 1

    def remove_where(self, predicate: Callable[[Entry], bool]) -> int:
        """
        Drops every entry matching ``predicate`` in a single forward pass,
        keeping the relative order of the rest. Returns the new count.
        """
        write_idx = 0
        for entry in self._entries:
            if predicate(entry):
                continue
            self._entries[write_idx] = entry
            write_idx += 1
        del self._entries[write_idx:]
        return write_idx

    def get(self, index: int) -> Optional[Entry]:
        if index < 0 or index >= len(self._entries):
            return None
        return self._entries[index]

    def count(self) -> int:
        return len(self._entries)

    def count_for_station(self, station_id: int) -> int:
        return sum(1 for e in self._entries if e.station_id == station_id)

    def clear(self) -> None:
        self._entries = []

    def __iter__(self) -> Iterator[Entry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
