from enum import Enum
from typing import List, NamedTuple, Optional

from ..database.entry_store import EntryStore
from ..database.station_registry import StationRegistry
from ..models.entry import Entry
from .sorting import SortMode, sort_entries

ROW_WIDTH = 28
CONTINUATION_MARK = "…"


class ScrollDirection(str, Enum):
    INIT = "init"
    FIRST = "first"
    LAST = "last"
    NEXT = "next"
    PREV = "prev"
    NEXT_PAGE = "next_page"
    PREV_PAGE = "prev_page"


class Selection(NamedTuple):
    path: str
    launcher: str
    label: str


class BrowseRow(NamedTuple):
    text: str
    selected: bool
    marker: str  # "up", "down" or ""


class BrowseView:
    """
    Filtered, optionally sorted projection over the entry store with a
    cursor (first visible row, selected row).

    The view is rebuilt from store order after every scan and every filter
    change; a previous ``sort`` does not survive a rebuild.
    """
    def __init__(self, store: EntryStore, registry: StationRegistry):
        self.store = store
        self.registry = registry
        self.station_filter: Optional[int] = None
        self.search_text = ""
        self.entries: List[Entry] = []
        self.first = 0
        self.selected = 0
        self.sort_mode: Optional[SortMode] = None

    # --- Rebuilding -----------------------------------------------------------

    def rebuild(self, station_filter: Optional[int], search_text: str) -> List[Entry]:
        """Re-derives the visible list in store order."""
        self.station_filter = station_filter
        self.search_text = search_text or ""
        needle = self.search_text.lower()

        self.entries = [
            e for e in self.store
            if (station_filter is None or e.station_id == station_filter)
            and (not needle or needle in e.name.lower())
        ]
        self.sort_mode = None
        return self.entries

    def init(self, station_filter: Optional[int] = None) -> None:
        """Starts browsing one station (or all with None) with no search text."""
        self.rebuild(station_filter, "")
        self.reset_cursor()

    def set_filter(self, search_text: str) -> None:
        self.rebuild(self.station_filter, search_text)
        self.reset_cursor()

    def clear_filter(self) -> None:
        self.rebuild(self.station_filter, "")
        self.reset_cursor()

    def refresh(self) -> None:
        """Rebuild with the current filters; the cursor is kept but clamped."""
        self.rebuild(self.station_filter, self.search_text)
        self._clamp_cursor()

    def filter_active(self) -> bool:
        return bool(self.search_text)

    def sort(self, mode: SortMode) -> None:
        self.entries = sort_entries(self.entries, mode)
        self.sort_mode = SortMode(mode)

    # --- Cursor ---------------------------------------------------------------

    def reset_cursor(self) -> None:
        self.first = 0
        self.selected = 0

    def _clamp_cursor(self) -> None:
        count = len(self.entries)
        if not count:
            self.reset_cursor()
            return
        self.selected = min(max(self.selected, 0), count - 1)
        self.first = min(max(self.first, 0), self.selected)

    def available(self) -> int:
        return len(self.entries)

    def scroll(self, direction: ScrollDirection, page_size: int) -> None:
        """
        Moves the cursor. NEXT on the last row wraps to the first; PREV on the
        first row jumps to the last. Paging keeps the selection inside the
        window [first, first + page_size).
        """
        direction = ScrollDirection(direction)
        if direction is ScrollDirection.INIT:
            self.reset_cursor()
            return

        count = len(self.entries)
        if not count:
            return
        page_size = max(1, page_size)

        if direction is ScrollDirection.FIRST:
            self.reset_cursor()

        elif direction is ScrollDirection.LAST or (direction is ScrollDirection.PREV and self.selected <= 0):
            self.selected = count - 1
            self.first = max(0, self.selected - page_size + 1)

        elif direction is ScrollDirection.NEXT:
            if self.selected + 1 < count:
                self.selected += 1
                if self.selected > self.first + page_size - 1:
                    self.first = self.selected - page_size + 1
            else:
                self.reset_cursor()

        elif direction is ScrollDirection.PREV:
            self.selected -= 1
            if self.selected < self.first:
                self.first = self.selected

        elif direction is ScrollDirection.NEXT_PAGE:
            if self.selected < self.first + page_size - 1:
                self.selected = min(self.first + page_size - 1, count - 1)
            else:
                self.selected += page_size
                self.first += page_size
                if self.selected >= count:
                    self.selected = count - 1
                    self.first = max(0, self.selected - page_size + 1)
                elif self.first + page_size > count:
                    self.first = max(0, count - page_size)

        elif direction is ScrollDirection.PREV_PAGE:
            if self.selected != self.first:
                self.selected = self.first
            else:
                self.first = max(0, self.first - page_size)
                self.selected = self.first

    # --- Selection ------------------------------------------------------------

    def selected_entry(self) -> Optional[Entry]:
        if 0 <= self.selected < len(self.entries):
            return self.entries[self.selected]
        return None

    def select(self) -> Optional[Selection]:
        """Path, launcher reference and label of the selected entry."""
        entry = self.selected_entry()
        if entry is None:
            return None
        station = self.registry.get(entry.station_id)
        launcher = station.launcher if station else ""
        return Selection(path=entry.path, launcher=launcher, label=entry.name)

    # --- Display rows ---------------------------------------------------------

    def row_label(self, entry: Entry) -> str:
        station = self.registry.get(entry.station_id)
        if station and self.station_filter is None:
            return f"[{station.short_name[:4]}] {entry.name}"
        return f" {entry.name}"

    def rows(self, page_size: int) -> List[BrowseRow]:
        """
        The visible window as display rows. The first row carries an "up"
        marker when rows are hidden above, the last a "down" marker when rows
        are hidden below. A single-row window prefers "down".
        """
        count = len(self.entries)
        rows = []
        for i in range(page_size):
            k = self.first + i
            if k >= count:
                rows.append(BrowseRow(text="", selected=False, marker=""))
                continue

            text = self.row_label(self.entries[k])
            if len(text) > ROW_WIDTH:
                text = text[:ROW_WIDTH - 1] + CONTINUATION_MARK

            marker = ""
            if i == page_size - 1 and k < count - 1:
                marker = "down"
            elif i == 0 and k > 0:
                marker = "up"
            rows.append(BrowseRow(text=text, selected=(k == self.selected), marker=marker))
        return rows
