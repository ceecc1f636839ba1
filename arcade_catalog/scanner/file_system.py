import os
import threading
from typing import Callable, Optional

# Extensions longer than this are compared on their first 8 characters only
MAX_EXT_LEN = 8


def match_extension(filename: str, extensions: str) -> bool:
    """
    True if ``filename`` ends in one of the space separated ``extensions``.
    An empty allow-list accepts every file. A whitespace-only one holds no
    tokens and accepts nothing, and a file without a dot never matches.
    """
    if not extensions:
        return True

    dot = filename.rfind(".")
    if dot < 0:
        return False

    ext = filename[dot + 1:][:MAX_EXT_LEN].lower()
    for token in extensions.split():
        if len(token) > MAX_EXT_LEN:
            continue
        if token.lower() == ext:
            return True
    return False


def extract_display_name(filename: str) -> str:
    """'Super_Mario.nes' -> 'Super Mario'"""
    dot = filename.rfind(".")
    stem = filename[:dot] if dot >= 0 else filename
    return stem.replace("_", " ")


class StationWalker:
    """
    Synchronous recursive walk of one station folder.

    Hidden (dot-prefixed) names are skipped and names are visited in sorted
    order so repeated scans of an unchanged tree produce the same entry order.
    The shared cancel event is checked at every directory and every file.
    """
    def __init__(self, cancel_event: threading.Event, max_depth: int = 5):
        self.cancel_event = cancel_event
        self.max_depth = max_depth

    def walk(self, root_dir: str, extensions: str, on_file: Callable[[str, str, os.stat_result], None]) -> None:
        self._walk(root_dir, extensions, on_file, 0)

    def _walk(self, dir_path: str, extensions: str, on_file, depth: int) -> None:
        if depth > self.max_depth or self.cancel_event.is_set():
            return

        try:
            with os.scandir(dir_path) as it:
                names = sorted(e.name for e in it)
        except OSError as e:
            print(f"⚠️ Cannot read {dir_path}: {e}")
            return

        for name in names:
            if self.cancel_event.is_set():
                return
            if name.startswith("."):
                continue

            full_path = os.path.join(dir_path, name)
            try:
                st = os.stat(full_path)
            except OSError:
                continue

            if os.path.isdir(full_path):
                self._walk(full_path, extensions, on_file, depth + 1)
            elif os.path.isfile(full_path) and match_extension(name, extensions):
                on_file(full_path, name, st)


def probe_preview(games_dir: str, short_name: str, display_name: str, preview_dir_name: str = "previews") -> Optional[str]:
    """
    Existence check for a pre-made preview image: the collection-wide preview
    folder first, then the station's own preview folder.
    """
    candidates = [
        os.path.join(games_dir, preview_dir_name, f"{display_name}.png"),
        os.path.join(games_dir, short_name, preview_dir_name, f"{display_name}.png"),
    ]
    for path in candidates:
        if os.path.isfile(path):
            return path
    return None
