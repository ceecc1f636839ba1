import os
import threading
import time
from typing import Callable, List, Optional

from ..config import ConfigManager
from ..database.entry_store import EntryStore
from ..database.station_registry import StationRegistry
from ..errors import StationNotFoundError, StoreFullError
from ..models.entry import Entry
from ..models.station import Station
from .file_system import StationWalker, extract_display_name, probe_preview


class _StopScan(Exception):
    pass


class ScannerManager:
    """
    Orchestrates station scans:
    1. Purge the station's previous entries
    2. Walk every storage root holding the station folder
    3. Append matching files as entries (with a preview existence probe)

    Scans run to completion on the calling thread and are not re-entrant.
    ``cancel()`` may be called from any thread.
    """
    def __init__(self, config: ConfigManager, registry: StationRegistry, store: EntryStore):
        self.config = config
        self.registry = registry
        self.store = store
        self._cancel_event = threading.Event()
        self.walker = StationWalker(self._cancel_event, max_depth=config.settings.max_scan_depth)

        self.is_scanning = False
        self.progress = 0
        self.status = ""

    def _station_roots(self, station: Station) -> List[str]:
        """Existing folders for the station, in storage priority order, without duplicates."""
        roots = []
        seen = set()
        for storage in self.config.storage_roots:
            candidate = os.path.join(storage, station.rom_path)
            if not os.path.isdir(candidate):
                continue
            real = os.path.realpath(candidate)
            if real in seen:
                continue
            seen.add(real)
            roots.append(candidate)
        return roots

    def scan_station(self, station_id: int, progress_callback: Optional[Callable[[str], None]] = None) -> int:
        """
        Re-scans one station and returns the number of entries found.
        Entries appended before a cancel stay in the store.
        """
        self._cancel_event.clear()
        return self._scan_station(station_id, progress_callback)

    def _scan_station(self, station_id: int, progress_callback: Optional[Callable[[str], None]]) -> int:
        station = self.registry.get(station_id)
        if station is None:
            raise StationNotFoundError(station_id)

        self.is_scanning = True
        self.status = f"Scanning {station.short_name}..."
        if progress_callback:
            progress_callback(self.status)

        self.store.remove_where(lambda e: e.station_id == station_id)
        found = 0
        games_dir = self.config.games_dir
        preview_dir_name = self.config.settings.preview_dir_name

        def _add(full_path: str, filename: str, st: os.stat_result):
            nonlocal found
            name = extract_display_name(filename)
            preview = probe_preview(games_dir, station.short_name, name, preview_dir_name)
            entry = Entry(
                name=name,
                filename=filename,
                path=os.path.abspath(full_path),
                station_id=station_id,
                size=st.st_size,
                date=int(st.st_mtime),
                has_preview=preview is not None,
                preview_path=preview or "",
            )
            try:
                self.store.append(entry)
            except StoreFullError as e:
                print(f"❌ {e}; stopping scan of {station.short_name}")
                raise _StopScan()
            found += 1

        start_time = time.time()
        try:
            for root in self._station_roots(station):
                if self._cancel_event.is_set():
                    break
                self.walker.walk(root, station.extensions, _add)
        except _StopScan:
            pass
        finally:
            self.registry.set_rom_count(station_id, found)
            self.is_scanning = False

        if self._cancel_event.is_set():
            print(f"⚠️ Scan of {station.short_name} cancelled after {found} entries.")
        else:
            duration = time.time() - start_time
            print(f"✅ Scanned {station.short_name} in {duration:.2f}s. Found {found} entries.")
        return found

    def scan_all(self, progress_callback: Optional[Callable[[str], None]] = None) -> int:
        """Scans every enabled station in slot order. Returns the total entry count."""
        self._cancel_event.clear()
        self.is_scanning = True
        self.progress = 0
        total = 0
        completed = 0

        print(f"🚀 Starting scan of {self.registry.count()} stations")
        for station in self.registry.stations():
            if self._cancel_event.is_set():
                break

            # Live count: stations disabled mid-scan shrink the denominator
            enabled = self.registry.count()
            self.progress = min(100, (completed * 100) // enabled) if enabled else 0
            try:
                total += self._scan_station(station.id, progress_callback)
            except StationNotFoundError:
                print(f"⚠️ Station {station.id} disappeared during scan, skipping.")
            except OSError as e:
                print(f"❌ Scan of {station.short_name} failed: {e}")
            completed += 1

        self.is_scanning = False
        self.progress = 100
        self.status = "Scan complete"
        if progress_callback:
            progress_callback(self.status)
        return total

    def cancel(self) -> None:
        self._cancel_event.set()
