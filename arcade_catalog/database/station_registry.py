import json
from typing import Any, Iterator, List, Optional
from pydantic import ValidationError

from ..config import ConfigManager, STATIONS_CONFIG_NAME
from ..errors import RegistryFullError, StationNotFoundError
from ..models.station import Station, find_template
from .entry_store import EntryStore

MAX_STATIONS = 32


class StationRegistry:
    """
    Fixed set of station slots, persisted through the config manager.

    A slot is free when its station is disabled. Disabling a station always
    purges its entries first, so a free slot is never referenced by an entry.
    """
    def __init__(self, config: ConfigManager, store: EntryStore, max_stations: int = MAX_STATIONS):
        self.config = config
        self.store = store
        self.max_stations = max_stations
        self._slots: List[Station] = [Station(id=i) for i in range(max_stations)]

    # --- Persistence ----------------------------------------------------------

    def load(self) -> int:
        """Restores the slots from the config store. Returns the enabled count."""
        self._slots = [Station(id=i) for i in range(self.max_stations)]
        raw = self.config.load_config(STATIONS_CONFIG_NAME)
        if not raw:
            return 0

        try:
            records = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            print(f"❌ Error loading stations: {e}")
            return 0

        for record in records if isinstance(records, list) else []:
            try:
                station = Station(**record)
            except (TypeError, ValidationError) as e:
                print(f"⚠️ Skipping corrupted station record: {e}")
                continue
            if station.id >= self.max_stations:
                print(f"⚠️ Skipping station with out-of-range id {station.id}")
                continue
            # Entry counts are rebuilt by the next scan
            self._slots[station.id] = station.model_copy(update={"rom_count": 0})

        return self.count()

    def save(self) -> None:
        records = [s.model_dump(exclude={"rom_count"}) for s in self._slots]
        payload = json.dumps(records, indent=2, ensure_ascii=False).encode("utf-8")
        try:
            self.config.save_config(STATIONS_CONFIG_NAME, payload)
        except OSError as e:
            print(f"❌ Error saving stations: {e}")

    # --- Mutations ------------------------------------------------------------

    def add(self, name: str, short_name: str, rom_path: str, launcher: str = "", extensions: str = "") -> int:
        """Claims the first free slot and returns its id."""
        slot = next((s.id for s in self._slots if not s.enabled), None)
        if slot is None:
            raise RegistryFullError(f"All {self.max_stations} station slots are in use")

        self._slots[slot] = Station(
            id=slot,
            name=name,
            short_name=short_name,
            rom_path=rom_path,
            launcher=launcher,
            extensions=extensions,
            enabled=True,
        )
        self.save()
        return slot

    def add_from_template(self, short_name: str, rom_path: Optional[str] = None) -> int:
        template = find_template(short_name)
        if template is None:
            raise KeyError(f"No station template named {short_name!r}")
        return self.add(
            template.name,
            template.short_name,
            rom_path or template.default_path,
            template.launcher,
            template.extensions,
        )

    def remove(self, station_id: int) -> None:
        """Purges the station's entries, then frees its slot."""
        if self.get(station_id) is None:
            raise StationNotFoundError(station_id)

        self.store.remove_where(lambda e: e.station_id == station_id)
        self._slots[station_id] = self._slots[station_id].model_copy(update={"enabled": False, "rom_count": 0})
        self.save()

    def update(self, station_id: int, **fields: Any) -> Station:
        """Updates a slot in place. The id field cannot be changed."""
        if not 0 <= station_id < self.max_stations:
            raise StationNotFoundError(station_id)

        fields.pop("id", None)
        current = self._slots[station_id]
        updated = Station(**{**current.model_dump(), **fields, "id": station_id})

        if current.enabled and not updated.enabled:
            self.store.remove_where(lambda e: e.station_id == station_id)
            updated = updated.model_copy(update={"rom_count": 0})

        self._slots[station_id] = updated
        self.save()
        return updated

    def set_rom_count(self, station_id: int, rom_count: int) -> None:
        """Scan bookkeeping. Not persisted."""
        if 0 <= station_id < self.max_stations:
            self._slots[station_id] = self._slots[station_id].model_copy(update={"rom_count": rom_count})

    # --- Lookups --------------------------------------------------------------

    def get(self, station_id: int) -> Optional[Station]:
        if not isinstance(station_id, int) or not 0 <= station_id < self.max_stations:
            return None
        station = self._slots[station_id]
        return station if station.enabled else None

    def get_by_index(self, index: int) -> Optional[Station]:
        """Returns the index-th enabled station, in slot order."""
        if index < 0:
            return None
        for i, station in enumerate(self.stations()):
            if i == index:
                return station
        return None

    def stations(self) -> Iterator[Station]:
        return (s for s in list(self._slots) if s.enabled)

    def count(self) -> int:
        return sum(1 for s in self._slots if s.enabled)

    def station_name(self, station_id: int) -> str:
        station = self.get(station_id)
        return station.name if station else "Unknown"
