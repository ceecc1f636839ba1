from enum import Enum
from functools import cmp_to_key
from typing import Callable, Dict, List

from ..models.entry import Entry


class SortMode(str, Enum):
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    STATION_ASC = "station_asc"
    STATION_DESC = "station_desc"
    DATE_ASC = "date_asc"
    DATE_DESC = "date_desc"
    SIZE_ASC = "size_asc"
    SIZE_DESC = "size_desc"


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _cmp_name(a: Entry, b: Entry) -> int:
    return _cmp(a.name.lower(), b.name.lower())


def _cmp_station(descending: bool) -> Callable[[Entry, Entry], int]:
    # Direction applies to the station id only; the name tie-break is always ascending.
    def compare(a: Entry, b: Entry) -> int:
        if a.station_id != b.station_id:
            result = _cmp(a.station_id, b.station_id)
            return -result if descending else result
        return _cmp_name(a, b)
    return compare


COMPARATORS: Dict[SortMode, Callable[[Entry, Entry], int]] = {
    SortMode.NAME_ASC: _cmp_name,
    SortMode.NAME_DESC: lambda a, b: _cmp_name(b, a),
    SortMode.STATION_ASC: _cmp_station(False),
    SortMode.STATION_DESC: _cmp_station(True),
    SortMode.DATE_ASC: lambda a, b: _cmp(a.date, b.date),
    SortMode.DATE_DESC: lambda a, b: _cmp(b.date, a.date),
    SortMode.SIZE_ASC: lambda a, b: _cmp(a.size, b.size),
    SortMode.SIZE_DESC: lambda a, b: _cmp(b.size, a.size),
}


def sort_entries(entries: List[Entry], mode: SortMode) -> List[Entry]:
    """Returns a new list ordered by ``mode``."""
    return sorted(entries, key=cmp_to_key(COMPARATORS[SortMode(mode)]))
