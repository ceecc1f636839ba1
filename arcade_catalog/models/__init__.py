from .station import Station, StationTemplate, STATION_TEMPLATES, find_template
from .entry import Entry

__all__ = ["Station", "StationTemplate", "STATION_TEMPLATES", "find_template", "Entry"]
