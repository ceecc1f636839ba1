import os
import shutil

from ..config import ConfigManager
from ..database.station_registry import StationRegistry


def is_safe_to_delete(path: str, expected_parent: str) -> bool:
    """Strict check that ``path`` lies inside ``expected_parent`` and is not the parent itself."""
    abs_path = os.path.abspath(path)
    abs_parent = os.path.abspath(expected_parent)
    if abs_path == abs_parent:
        return False
    return abs_path.startswith(abs_parent + os.sep)


def _cache_root_looks_sane(config: ConfigManager) -> bool:
    cache_root = os.path.abspath(config.preview_cache_dir)
    if os.path.basename(cache_root) != config.settings.preview_dir_name:
        return False
    return is_safe_to_delete(cache_root, config.games_dir)


def _purge_tree(folder: str) -> int:
    removed = 0
    if not os.path.isdir(folder):
        return removed

    for name in os.listdir(folder):
        path = os.path.join(folder, name)
        if not is_safe_to_delete(path, folder):
            print(f"  ⚠️ [Safety] Skipping unexpected path: {name}")
            continue
        try:
            if os.path.isdir(path) and not os.path.islink(path):
                shutil.rmtree(path)
            else:
                os.remove(path)
            removed += 1
        except OSError as e:
            print(f"  [Error] Failed to delete {path}: {e}")
    return removed


def purge_preview_cache(config: ConfigManager) -> int:
    """
    Deletes everything below the preview cache folder.
    Entry ``has_preview`` flags are left alone; re-scan to refresh them.
    """
    print(f"🧹 Purging preview cache in {config.preview_cache_dir}...")
    if not _cache_root_looks_sane(config):
        print("❌ [Safety] Preview cache folder looks suspicious. Aborting purge.")
        return 0

    removed = _purge_tree(config.preview_cache_dir)
    print(f"✅ Preview cache purge complete. Removed {removed} items.")
    return removed


def purge_station_previews(config: ConfigManager, registry: StationRegistry, station_id: int) -> int:
    """Deletes the cached previews of one station."""
    station = registry.get(station_id)
    if station is None or not station.short_name:
        return 0
    if not _cache_root_looks_sane(config):
        print("❌ [Safety] Preview cache folder looks suspicious. Aborting purge.")
        return 0

    folder = os.path.join(config.preview_cache_dir, station.short_name)
    if not is_safe_to_delete(folder, config.preview_cache_dir):
        print(f"❌ [Safety] Refusing to purge {folder}.")
        return 0

    print(f"🧹 Purging previews for {station.short_name}...")
    removed = _purge_tree(folder)
    print(f"✅ Removed {removed} cached previews for {station.short_name}.")
    return removed


def purge_broken_previews(config: ConfigManager) -> int:
    """Removes zero-byte files left behind by interrupted downloads."""
    removed_count = 0
    cache_root = config.preview_cache_dir
    if not os.path.isdir(cache_root):
        return 0

    for root, _, files in os.walk(cache_root):
        for filename in files:
            file_path = os.path.join(root, filename)
            try:
                if os.path.getsize(file_path) == 0:
                    os.remove(file_path)
                    removed_count += 1
            except OSError as e:
                print(f"  [Error] Failed to delete {file_path}: {e}")

    if removed_count > 0:
        print(f"🧹 Cleaned up {removed_count} failed preview download(s)")
    return removed_count
