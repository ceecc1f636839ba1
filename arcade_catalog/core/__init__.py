# Arcade Catalog Core Package

from .catalog import Catalog
from .formatting import format_size
from .maintenance import purge_preview_cache, purge_station_previews, purge_broken_previews
