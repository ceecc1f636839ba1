import os
import re
import socket
import threading
from typing import Optional
from urllib.parse import quote

import requests

from ..errors import DownloadFailedError

# Station short code -> libretro-thumbnails system folder
LIBRETRO_SYSTEMS = {
    "NES": "Nintendo_-_Nintendo_Entertainment_System",
    "SNES": "Nintendo_-_Super_Nintendo_Entertainment_System",
    "Genesis": "Sega_-_Mega_Drive_-_Genesis",
    "SMS": "Sega_-_Master_System_-_Mark_III",
    "GB": "Nintendo_-_Game_Boy",
    "GBC": "Nintendo_-_Game_Boy_Color",
    "GBA": "Nintendo_-_Game_Boy_Advance",
    "N64": "Nintendo_-_Nintendo_64",
    "A2600": "Atari_-_2600",
    "A7800": "Atari_-_7800",
    "A5200": "Atari_-_5200",
    "TG16": "NEC_-_PC_Engine_-_TurboGrafx_16",
    "NeoGeo": "SNK_-_Neo_Geo",
    "Arcade": "MAME",
    "PS1": "Sony_-_PlayStation",
    "PSX": "Sony_-_PlayStation",
    "SegaCD": "Sega_-_Mega-CD_-_Sega_CD",
    "Saturn": "Sega_-_Saturn",
    "S32X": "Sega_-_32X",
    "C64": "Commodore_-_64",
    "Amiga": "Commodore_-_Amiga",
    "AtariST": "Atari_-_ST",
    "MSX": "Microsoft_-_MSX",
    "Spectrum": "Sinclair_-_ZX_Spectrum",
    "CPC": "Amstrad_-_CPC",
    "Coleco": "Coleco_-_ColecoVision",
    "Intv": "Mattel_-_Intellivision",
    "Vectrex": "GCE_-_Vectrex",
    "WS": "Bandai_-_WonderSwan",
    "NGP": "SNK_-_Neo_Geo_Pocket",
}
_LIBRETRO_SYSTEMS_LOWER = {k.lower(): v for k, v in LIBRETRO_SYSTEMS.items()}

# Tried in this order
THUMBNAIL_CATEGORIES = ("Named_Boxarts", "Named_Snaps", "Named_Titles")

# Characters the thumbnail server stores as underscores
_FORBIDDEN_CHARS = re.compile(r'[&*/:`<>?\\|"]')


def libretro_system_name(short_name: str) -> str:
    """Maps a station short code to a remote collection; unknown codes pass through."""
    return _LIBRETRO_SYSTEMS_LOWER.get(short_name.lower(), short_name)


def thumbnail_url(base_url: str, short_name: str, category: str, rom_name: str) -> str:
    system = libretro_system_name(short_name)
    safe_name = _FORBIDDEN_CHARS.sub("_", rom_name)
    return f"{base_url.rstrip('/')}/{quote(system)}/{category}/{quote(safe_name)}.png"


class RemoteThumbnailSource:
    """
    Blocking HTTP(S) downloads and the internet reachability probe.
    """
    CHUNK_SIZE = 64 * 1024

    def __init__(self, timeout: float = 10, probe_host: str = "github.com", probe_port: int = 443,
                 probe_timeout: float = 3, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.probe_host = probe_host
        self.probe_port = probe_port
        self.probe_timeout = probe_timeout
        self._shared_session = session
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        """The injected session, or one private to the calling thread."""
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
        return session

    def check_internet(self) -> bool:
        """DNS lookup plus TCP connect to a well-known host."""
        try:
            infos = socket.getaddrinfo(self.probe_host, self.probe_port, socket.AF_INET, socket.SOCK_STREAM)
        except (socket.gaierror, OSError):
            return False
        if not infos:
            return False

        address = infos[0][4]
        try:
            with socket.create_connection(address, timeout=self.probe_timeout):
                return True
        except OSError:
            return False

    def fetch(self, url: str, save_path: str) -> None:
        """
        Streams ``url`` into ``save_path``. Raises DownloadFailedError for a
        non-200 status or an empty body.
        """
        with self.session.get(url, timeout=self.timeout, stream=True) as response:
            if response.status_code != 200:
                raise DownloadFailedError(f"HTTP {response.status_code} for {url}")
            with open(save_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=self.CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)

        if os.path.getsize(save_path) == 0:
            raise DownloadFailedError(f"Empty response for {url}")

    def download(self, url: str, save_path: str) -> bool:
        """
        Downloads ``url`` to ``save_path``. Returns False on any failure, after
        removing the partial file.
        """
        try:
            self.fetch(url, save_path)
        except DownloadFailedError:
            _remove_quietly(save_path)
            return False
        except (requests.RequestException, OSError) as e:
            print(f"⚠️ Download failed for {url}: {e}")
            _remove_quietly(save_path)
            return False
        return True


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        print(f"  [Error] Failed to delete {path}: {e}")
