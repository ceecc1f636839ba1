from .entry_store import EntryStore, MAX_TOTAL
from .station_registry import StationRegistry, MAX_STATIONS

__all__ = ["EntryStore", "StationRegistry", "MAX_TOTAL", "MAX_STATIONS"]
