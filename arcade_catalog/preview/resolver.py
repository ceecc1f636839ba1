import os
from typing import Callable, List, Optional

from PIL import Image

from ..config import ConfigManager
from ..database.station_registry import StationRegistry
from ..errors import DecodeFailedError
from ..models.entry import Entry
from ..models.station import Station
from .remote import THUMBNAIL_CATEGORIES, RemoteThumbnailSource, thumbnail_url
from .slot import PreviewImage, PreviewSlot, PreviewStatus


class PreviewResolver:
    """
    Resolves the preview for one entry into the shared slot: first from
    local files, otherwise from the remote thumbnail source, saving the
    download into the preview cache.

    Cache layout: <games_dir>/previews/<station short name>/<entry name>.png
    """
    def __init__(
        self,
        config: ConfigManager,
        registry: StationRegistry,
        slot: PreviewSlot,
        source: Optional[RemoteThumbnailSource] = None,
        image_loader: Callable[[str], PreviewImage] = PreviewImage.open,
    ):
        self.config = config
        self.registry = registry
        self.slot = slot
        self.source = source or RemoteThumbnailSource(
            timeout=config.settings.fetch_timeout,
            probe_host=config.settings.probe_host,
            probe_port=config.settings.probe_port,
            probe_timeout=config.settings.probe_timeout,
        )
        self.image_loader = image_loader

    # --- Paths ----------------------------------------------------------------

    @property
    def cache_root(self) -> str:
        return self.config.preview_cache_dir

    def station_cache_dir(self, station: Station) -> str:
        return os.path.join(self.cache_root, station.short_name)

    def cache_path(self, entry: Entry, station: Station) -> str:
        return os.path.join(self.station_cache_dir(station), f"{entry.name}.png")

    def _local_candidates(self, entry: Entry) -> List[str]:
        candidates = []
        if entry.has_preview and entry.preview_path:
            candidates.append(entry.preview_path)

        station = self.registry.get(entry.station_id)
        short_name = station.short_name if station else "unknown"
        cache_dir = os.path.join(self.cache_root, short_name)
        candidates.extend([
            os.path.join(cache_dir, f"{entry.name}.png"),
            os.path.join(cache_dir, f"{entry.name}.jpg"),
            os.path.join(self.config.games_dir, short_name, self.config.settings.preview_dir_name, f"{entry.name}.png"),
        ])
        return candidates

    # --- Local ----------------------------------------------------------------

    def load_local(self, entry: Entry) -> PreviewStatus:
        """Loads the first decodable local preview into the slot."""
        self.slot.clear()

        for path in self._local_candidates(entry):
            if not os.path.isfile(path):
                continue
            try:
                image = self.image_loader(path)
            except DecodeFailedError as e:
                print(f"⚠️ {e}")
                continue
            self.slot.set_image(image, entry.name, entry.station_id)
            return PreviewStatus.READY

        self.slot.set_status(PreviewStatus.NOT_FOUND)
        return PreviewStatus.NOT_FOUND

    # --- Online ---------------------------------------------------------------

    def check_internet(self) -> bool:
        return self.source.check_internet()

    def fetch_online(self, entry: Entry) -> PreviewStatus:
        """
        Downloads a thumbnail for ``entry`` (boxart, then snapshot, then title
        screen) and loads it. Nothing is downloaded when the probe fails.
        """
        station = self.registry.get(entry.station_id)
        if station is None:
            self.slot.set_status(PreviewStatus.ERROR)
            return PreviewStatus.ERROR

        if not self.source.check_internet():
            self.slot.set_status(PreviewStatus.NO_INTERNET)
            return PreviewStatus.NO_INTERNET

        self.slot.set_status(PreviewStatus.LOADING)

        save_dir = self.station_cache_dir(station)
        try:
            os.makedirs(save_dir, exist_ok=True)
        except OSError as e:
            print(f"❌ Cannot create preview cache {save_dir}: {e}")
            self.slot.set_status(PreviewStatus.ERROR)
            return PreviewStatus.ERROR
        save_path = self.cache_path(entry, station)

        base_url = self.config.settings.thumbnail_base_url
        for category in THUMBNAIL_CATEGORIES:
            url = thumbnail_url(base_url, station.short_name, category, entry.name)
            if not self.source.download(url, save_path):
                continue

            if self.load_local(entry) is PreviewStatus.READY:
                return PreviewStatus.READY

            # Keep undecodable downloads out of the cache
            print(f"⚠️ Discarding unreadable {category} image for {entry.name}")
            if os.path.exists(save_path):
                os.remove(save_path)
            self.slot.set_status(PreviewStatus.LOADING)

        if os.path.exists(save_path):
            os.remove(save_path)
        self.slot.set_status(PreviewStatus.NOT_FOUND)
        return PreviewStatus.NOT_FOUND

    # --- Cache ----------------------------------------------------------------

    def cache_exists(self, entry: Entry) -> bool:
        station = self.registry.get(entry.station_id)
        if station is None:
            return False
        return os.path.isfile(self.cache_path(entry, station))

    def cache_save(self, entry: Entry, image: Image.Image) -> bool:
        """Writes ``image`` as PNG into the cache slot for ``entry``."""
        station = self.registry.get(entry.station_id)
        if station is None:
            return False

        os.makedirs(self.station_cache_dir(station), exist_ok=True)
        try:
            image.save(self.cache_path(entry, station), "PNG")
        except (OSError, ValueError) as e:
            print(f"❌ Error saving preview for {entry.name}: {e}")
            return False
        return True

    @property
    def status(self) -> PreviewStatus:
        return self.slot.status

    def clear(self) -> None:
        self.slot.clear()
