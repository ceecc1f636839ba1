import os
import json
import shutil
import tempfile
from typing import Any, Dict, Optional
from pydantic import Field
from pydantic_settings import BaseSettings

# ==============================================================================
# CONSTANTS & PATHS
# ==============================================================================

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Support Docker volume mounts via environment variables
_CONFIG_DIR_OVERRIDE = os.getenv("CONFIG_DIR")
_GAMES_DIR_OVERRIDE = os.getenv("GAMES_DIR")

if _CONFIG_DIR_OVERRIDE:
    HIDDEN_DATA_DIR = _CONFIG_DIR_OVERRIDE
else:
    HIDDEN_DATA_DIR = os.path.join(PROJECT_ROOT, "arcade_data")

DEFAULT_GAMES_DIR = _GAMES_DIR_OVERRIDE or os.path.join(HIDDEN_DATA_DIR, "games")
SETTINGS_FILE_NAME = "settings.json"
STATIONS_CONFIG_NAME = "rom_stations.json"

# Default Settings (with documentation keys)
DEFAULT_SETTINGS_JSON = {
    "_comment_games_dir": "Root folder holding one sub folder per station.",
    "games_dir": "",
    "_comment_base_dir": "Secondary storage root, tried after games_dir.",
    "base_dir": "",
    "_comment_fetch_timeout": "Seconds before a thumbnail download is abandoned.",
    "fetch_timeout": 10,
    "_comment_batch_delay": "Pause (seconds) between downloads in batch mode.",
    "batch_delay": 0.1,
    "_comment_max_scan_depth": "How many folder levels below a station root are scanned.",
    "max_scan_depth": 5,
}

# ==============================================================================
# SETTINGS MODEL
# ==============================================================================

class AppSettings(BaseSettings):
    """
    Pydantic model for user settings.
    Loads from env vars (ARCADE_*) or defaults.
    File loading is handled manually to preserve JSON comments.
    """
    games_dir: str = Field("")
    base_dir: str = Field("")
    config_dir: str = Field("")

    preview_dir_name: str = Field("previews")
    fetch_timeout: float = Field(10)
    batch_delay: float = Field(0.1)
    max_scan_depth: int = Field(5)

    probe_host: str = Field("github.com")
    probe_port: int = Field(443)
    probe_timeout: float = Field(3)
    thumbnail_base_url: str = Field("https://thumbnails.libretro.com")

    class Config:
        env_prefix = "ARCADE_"
        extra = "ignore"

# ==============================================================================
# CONFIG MANAGER
# ==============================================================================

class ConfigManager:
    """
    Resolves data directories and persists named config blobs.

    ``load_config`` / ``save_config`` are the byte-level persistence
    collaborator used by the station registry.
    """
    def __init__(self, settings: Optional[AppSettings] = None, config_dir: Optional[str] = None):
        self.config_dir = os.path.abspath(config_dir or (settings.config_dir if settings and settings.config_dir else HIDDEN_DATA_DIR))
        self._ensure_directories()
        self.settings = settings if settings is not None else self._load_settings()

    def _ensure_directories(self):
        if not os.path.exists(self.config_dir):
            os.makedirs(self.config_dir)

    @property
    def settings_file(self) -> str:
        return os.path.join(self.config_dir, SETTINGS_FILE_NAME)

    def _load_settings(self) -> AppSettings:
        file_data = {}
        if os.path.exists(self.settings_file):
            try:
                with open(self.settings_file, "r", encoding="utf-8") as f:
                    file_data = json.load(f)

                # Check for missing defaults and update file if needed
                dirty = False
                for k, v in DEFAULT_SETTINGS_JSON.items():
                    if k not in file_data:
                        file_data[k] = v
                        dirty = True

                if dirty:
                    self._save_json_raw(file_data)

            except (OSError, ValueError) as e:
                print(f"⚠️ Warning: Could not read {SETTINGS_FILE_NAME}: {e}")
                file_data = {}

        # Empty strings in the file mean "use the default location"
        file_data = {k: v for k, v in file_data.items() if not k.startswith("_") and v != ""}
        return AppSettings(**file_data)

    def _save_json_raw(self, data: Dict[str, Any]):
        try:
            with open(self.settings_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            print(f"❌ Error saving settings: {e}")

    def save(self, updates: Dict[str, Any]) -> bool:
        """
        Updates current settings with new values and saves to disk.
        Preserves existing keys (like comments).
        """
        try:
            current_raw = {}
            if os.path.exists(self.settings_file):
                with open(self.settings_file, "r", encoding="utf-8") as f:
                    current_raw = json.load(f)

            current_raw.update(updates)
            self._save_json_raw(current_raw)

            clean = {k: v for k, v in current_raw.items() if not k.startswith("_") and v != ""}
            self.settings = AppSettings(**clean)
            return True
        except (OSError, ValueError) as e:
            print(f"❌ Save failed: {e}")
            return False

    # --- Named config blobs -------------------------------------------------

    def config_path(self, name: str) -> str:
        return os.path.join(self.config_dir, name)

    def load_config(self, name: str) -> Optional[bytes]:
        """Returns the raw bytes stored under ``name`` or None if absent."""
        path = self.config_path(name)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            print(f"⚠️ Could not read config {name}: {e}")
            return None

    def save_config(self, name: str, data: bytes) -> None:
        """
        Persists ``data`` under ``name`` using an atomic write pattern
        (temp file in the same directory, then rename).
        """
        self._ensure_directories()
        temp_fd, temp_path = tempfile.mkstemp(dir=self.config_dir, prefix=".cfg_tmp_")
        try:
            with os.fdopen(temp_fd, "wb") as f:
                f.write(data)
            shutil.move(temp_path, self.config_path(name))
        except OSError:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise

    # --- Resolved paths -----------------------------------------------------

    @property
    def games_dir(self) -> str:
        return os.path.abspath(os.path.expanduser(self.settings.games_dir or DEFAULT_GAMES_DIR))

    @property
    def base_dir(self) -> str:
        """Secondary storage root. Defaults to the parent of the games folder."""
        if self.settings.base_dir:
            return os.path.abspath(os.path.expanduser(self.settings.base_dir))
        return os.path.dirname(self.games_dir)

    @property
    def preview_cache_dir(self) -> str:
        return os.path.join(self.games_dir, self.settings.preview_dir_name)

    @property
    def storage_roots(self):
        """Storage locations tried, in priority order, when resolving a station path."""
        return [self.games_dir, self.base_dir]


_config_instance = None
def get_config() -> ConfigManager:
    global _config_instance
    if _config_instance is None:
        _config_instance = ConfigManager()
    return _config_instance
