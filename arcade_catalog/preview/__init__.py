from .slot import PreviewImage, PreviewSlot, PreviewStatus
from .remote import RemoteThumbnailSource, libretro_system_name, thumbnail_url, THUMBNAIL_CATEGORIES
from .resolver import PreviewResolver
from .fetcher import FetchController

__all__ = [
    "PreviewImage",
    "PreviewSlot",
    "PreviewStatus",
    "RemoteThumbnailSource",
    "libretro_system_name",
    "thumbnail_url",
    "THUMBNAIL_CATEGORIES",
    "PreviewResolver",
    "FetchController",
]
