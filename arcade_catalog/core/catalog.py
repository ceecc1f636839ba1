from typing import Any, Callable, Optional

from ..browse.sorting import SortMode
from ..browse.view import BrowseView, ScrollDirection, Selection
from ..config import ConfigManager, get_config
from ..database.entry_store import EntryStore
from ..database.station_registry import StationRegistry
from ..errors import StationNotFoundError
from ..models.entry import Entry
from ..models.station import Station
from ..preview.fetcher import FetchController, ProgressCallback
from ..preview.remote import RemoteThumbnailSource
from ..preview.resolver import PreviewResolver
from ..preview.slot import PreviewSlot, PreviewStatus
from ..scanner.manager import ScannerManager
from . import maintenance


class Catalog:
    """
    Process-scoped context owning every piece of catalog state: the station
    registry, the entry store, the browse view, the scanner and the preview
    slot with its resolver and fetch controller.

    Each instance is independent, so tests can run several side by side.
    """
    def __init__(self, config: Optional[ConfigManager] = None, source: Optional[RemoteThumbnailSource] = None):
        self.config = config or get_config()
        self.store = EntryStore()
        self.registry = StationRegistry(self.config, self.store)
        self.view = BrowseView(self.store, self.registry)
        self.scanner = ScannerManager(self.config, self.registry, self.store)
        self.slot = PreviewSlot()
        self.resolver = PreviewResolver(self.config, self.registry, self.slot, source=source)
        self.fetcher = FetchController(self.resolver, self.store, batch_delay=self.config.settings.batch_delay)

    def load(self) -> int:
        count = self.registry.load()
        print(f"ℹ️  Loaded {count} stations")
        return count

    # --- Stations -------------------------------------------------------------

    def add_station(self, name: str, short_name: str, rom_path: str, launcher: str = "", extensions: str = "") -> int:
        return self.registry.add(name, short_name, rom_path, launcher, extensions)

    def remove_station(self, station_id: int) -> None:
        self.registry.remove(station_id)
        if self.view.station_filter == station_id:
            self.view.init(None)
        else:
            self.view.refresh()

    def update_station(self, station_id: int, **fields: Any) -> Station:
        station = self.registry.update(station_id, **fields)
        self.view.refresh()
        return station

    def get_station(self, station_id: int) -> Optional[Station]:
        return self.registry.get(station_id)

    # --- Scanning -------------------------------------------------------------

    def scan_station(self, station_id: int, progress_callback: Optional[Callable[[str], None]] = None) -> int:
        try:
            return self.scanner.scan_station(station_id, progress_callback)
        finally:
            self.view.refresh()

    def scan_all(self, progress_callback: Optional[Callable[[str], None]] = None) -> int:
        try:
            return self.scanner.scan_all(progress_callback)
        finally:
            self.view.refresh()

    def scan_cancel(self) -> None:
        self.scanner.cancel()

    # --- Browsing -------------------------------------------------------------

    def browse(self, station_filter: Optional[int] = None) -> None:
        self.view.init(station_filter)

    def set_filter(self, text: str) -> None:
        self.view.set_filter(text)

    def clear_filter(self) -> None:
        self.view.clear_filter()

    def sort(self, mode: SortMode) -> None:
        self.view.sort(mode)

    def scroll(self, direction: ScrollDirection, page_size: int) -> None:
        self.view.scroll(direction, page_size)

    def select(self) -> Optional[Selection]:
        return self.view.select()

    def entry(self, index: int) -> Optional[Entry]:
        return self.store.get(index)

    # --- Previews -------------------------------------------------------------

    def load_preview(self, entry: Entry) -> PreviewStatus:
        return self.resolver.load_local(entry)

    def fetch_preview(self, entry: Entry) -> PreviewStatus:
        return self.resolver.fetch_online(entry)

    def fetch_preview_async(self, entry: Entry) -> bool:
        return self.fetcher.fetch_async(entry)

    def fetch_poll(self) -> bool:
        return self.fetcher.fetch_poll()

    def batch_fetch(self, station_id: int, on_progress: Optional[ProgressCallback] = None) -> int:
        return self.fetcher.batch_fetch(station_id, on_progress)

    def batch_cancel(self) -> None:
        self.fetcher.batch_cancel()

    def cache_clear(self) -> int:
        return maintenance.purge_preview_cache(self.config)

    def cache_clear_station(self, station_id: int) -> int:
        if self.registry.get(station_id) is None:
            raise StationNotFoundError(station_id)
        return maintenance.purge_station_previews(self.config, self.registry, station_id)

    def close(self) -> None:
        """Stops background work and releases the current preview."""
        self.fetcher.batch_cancel()
        self.fetcher.wait()
        self.slot.clear()
