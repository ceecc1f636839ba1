from .sorting import SortMode, sort_entries
from .view import BrowseView, BrowseRow, ScrollDirection, Selection

__all__ = ["BrowseView", "BrowseRow", "ScrollDirection", "Selection", "SortMode", "sort_entries"]
