import threading
from enum import Enum
from typing import Callable, Optional

from PIL import Image

from ..errors import DecodeFailedError


class PreviewStatus(str, Enum):
    NONE = "none"
    LOADING = "loading"
    READY = "ready"
    NOT_FOUND = "not_found"
    ERROR = "error"
    NO_INTERNET = "no_internet"


class PreviewImage:
    """
    Single-owner handle around a decoded Pillow image.
    ``release`` closes the image; releasing twice is a bug and raises.
    """
    def __init__(self, image: Image.Image, source_path: str = ""):
        self._image: Optional[Image.Image] = image
        self.source_path = source_path
        self.width, self.height = image.size

    @classmethod
    def open(cls, path: str) -> "PreviewImage":
        """Decodes ``path`` fully; raises DecodeFailedError if it is not a readable image."""
        try:
            image = Image.open(path)
        except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
            raise DecodeFailedError(f"Cannot decode {path}: {e}") from e
        try:
            image.load()
        except (OSError, ValueError, SyntaxError) as e:
            image.close()
            raise DecodeFailedError(f"Cannot decode {path}: {e}") from e
        return cls(image, source_path=path)

    @property
    def released(self) -> bool:
        return self._image is None

    @property
    def image(self) -> Image.Image:
        if self._image is None:
            raise RuntimeError("Preview image used after release")
        return self._image

    def release(self) -> None:
        if self._image is None:
            raise RuntimeError("Preview image released twice")
        image, self._image = self._image, None
        image.close()


class PreviewSlot:
    """
    The single shared holder of the current preview.

    Only the resolver and the fetch controller write to it; display code
    reads it and treats ``loading`` as transient. An image is held only
    while the status is ``ready``: replacing it, clearing the slot or moving
    to any other status releases the previous one exactly once.
    """
    def __init__(self, listener: Optional[Callable[[PreviewStatus], None]] = None):
        self._lock = threading.RLock()
        self._status = PreviewStatus.NONE
        self._image: Optional[PreviewImage] = None
        self.rom_name = ""
        self.station_id: Optional[int] = None
        self.listener = listener

    @property
    def status(self) -> PreviewStatus:
        with self._lock:
            return self._status

    @property
    def image(self) -> Optional[PreviewImage]:
        with self._lock:
            return self._image

    @property
    def width(self) -> int:
        with self._lock:
            return self._image.width if self._image else 0

    @property
    def height(self) -> int:
        with self._lock:
            return self._image.height if self._image else 0

    def set_status(self, status: PreviewStatus) -> None:
        status = PreviewStatus(status)
        with self._lock:
            if status is not PreviewStatus.READY:
                self._drop_owner_locked()
            self._status = status
        if self.listener:
            self.listener(status)

    def set_image(self, image: PreviewImage, rom_name: str, station_id: int) -> None:
        """Takes ownership of ``image`` and marks the slot ready."""
        with self._lock:
            self._release_locked()
            self._image = image
            self.rom_name = rom_name
            self.station_id = station_id
            self._status = PreviewStatus.READY
        if self.listener:
            self.listener(PreviewStatus.READY)

    def clear(self) -> None:
        self.set_status(PreviewStatus.NONE)

    def _drop_owner_locked(self) -> None:
        self._release_locked()
        self.rom_name = ""
        self.station_id = None

    def _release_locked(self) -> None:
        if self._image is not None:
            image, self._image = self._image, None
            image.release()
