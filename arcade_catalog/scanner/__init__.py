from .file_system import StationWalker, match_extension, extract_display_name, probe_preview
from .manager import ScannerManager

__all__ = ["ScannerManager", "StationWalker", "match_extension", "extract_display_name", "probe_preview"]
