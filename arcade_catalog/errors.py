"""
Error types for the catalog and preview subsystems.

Scan and fetch failures never escape as process-terminating errors: the
scanner and the preview resolver catch these at their boundaries and turn
them into return codes or a preview status.
"""


class CatalogError(Exception):
    """Base class for catalog errors."""
    pass


class StationNotFoundError(CatalogError, LookupError):
    """Raised when a station id does not refer to an enabled slot."""

    def __init__(self, station_id):
        super().__init__(f"Station not found: {station_id}")
        self.station_id = station_id


class RegistryFullError(CatalogError):
    """Raised when every station slot is already in use."""
    pass


class StoreFullError(CatalogError):
    """Raised when the entry store cannot grow any further."""
    pass


class NetworkUnavailableError(CatalogError):
    """Raised when the reachability probe fails."""
    pass


class DownloadFailedError(CatalogError):
    """Raised when a thumbnail could not be downloaded."""
    pass


class DecodeFailedError(CatalogError):
    """Raised when an image file exists but cannot be decoded."""
    pass
