from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest
from PIL import Image

from arcade_catalog.config import AppSettings, ConfigManager
from arcade_catalog.core.catalog import Catalog


def write_png(path: Path, size=(4, 3), color=(200, 30, 30)) -> Path:
    """Write a tiny real PNG so Pillow can decode it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path, "PNG")
    return path


def touch(path: Path, data: bytes = b"rom") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


class FakeSource:
    """Stand-in for RemoteThumbnailSource that never touches the network.

    ``responses`` maps a URL substring (e.g. "Named_Snaps") to True when the
    download should succeed. Successful downloads write a real PNG.
    """

    def __init__(self, online: bool = True, responses: Optional[Dict[str, bool]] = None,
                 gate: Optional[threading.Event] = None):
        self.online = online
        self.responses = responses or {}
        self.gate = gate
        self.entered = threading.Event()
        self.probe_calls = 0
        self.urls: List[str] = []
        self.on_download: Optional[Callable[[str], None]] = None

    def check_internet(self) -> bool:
        self.probe_calls += 1
        return self.online

    def download(self, url: str, save_path: str) -> bool:
        self.urls.append(url)
        if self.on_download:
            self.on_download(url)
        self.entered.set()
        if self.gate is not None:
            self.gate.wait(5)
        for needle, ok in self.responses.items():
            if needle in url and ok:
                write_png(Path(save_path))
                return True
        return False


@pytest.fixture
def games_dir(tmp_path: Path) -> Path:
    d = tmp_path / "media" / "games"
    d.mkdir(parents=True)
    return d


@pytest.fixture
def config(tmp_path: Path, games_dir: Path) -> ConfigManager:
    settings = AppSettings(
        games_dir=str(games_dir),
        base_dir=str(tmp_path / "media"),
        config_dir=str(tmp_path / "config"),
        batch_delay=0,
    )
    return ConfigManager(settings)


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def catalog(config: ConfigManager, source: FakeSource) -> Catalog:
    cat = Catalog(config, source=source)
    yield cat
    cat.close()


@pytest.fixture
def nes_catalog(catalog: Catalog, games_dir: Path) -> Catalog:
    """Catalog with an NES station holding Super_Mario.nes, readme.txt and sub/Zelda.nes."""
    touch(games_dir / "NES" / "Super_Mario.nes", b"x" * 40)
    touch(games_dir / "NES" / "readme.txt")
    touch(games_dir / "NES" / "sub" / "Zelda.nes", b"x" * 10)
    catalog.add_station("Nintendo Entertainment System", "NES", "NES", "NES", "nes")
    return catalog
