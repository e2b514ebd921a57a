"""
Photo intake and the in-session photo list
"""

import logging
import re
from typing import Callable

from .errors import ConversionError, UnsupportedInput
from .metadata import MetadataResolver
from .models import Photo
from .renderer import decode_image

logger = logging.getLogger(__name__)

CONVERTIBLE_EXTENSIONS = ('.heic', '.heif')
CONVERTIBLE_MEDIA_TYPES = ('image/heic', 'image/heif')

_CONVERTIBLE_SUFFIX_RE = re.compile(r"\.hei[cf]$", re.IGNORECASE)


def is_convertible(filename: str, media_type: str = "") -> bool:
    """HEIC/HEIF input that must be converted to JPEG before decoding"""
    return filename.lower().endswith(CONVERTIBLE_EXTENSIONS) or media_type in CONVERTIBLE_MEDIA_TYPES


def converted_filename(filename: str) -> str:
    """``IMG_0001.HEIC`` -> ``IMG_0001.jpg``"""
    return _CONVERTIBLE_SUFFIX_RE.sub(".jpg", filename)


def intake_photo(data: bytes, filename: str, media_type: str = "",
                 converter: Callable[[bytes], bytes] | None = None,
                 resolver: MetadataResolver | None = None) -> Photo:
    """
    Turn uploaded bytes into a Photo with dimensions and a capture date.

    Raises UnsupportedInput for non-images, ConversionError when the HEIC
    converter fails and DecodeError for undecodable bytes. Unreadable
    metadata never fails intake; the date defaults to now.
    """
    if not media_type.startswith('image/') and not filename.lower().endswith(CONVERTIBLE_EXTENSIONS):
        raise UnsupportedInput(f"Not an image file: {filename}")

    if is_convertible(filename, media_type):
        if converter is None:
            raise UnsupportedInput(f"No converter available for {filename}")
        try:
            data = converter(data)
        except Exception as e:
            raise ConversionError(f"Cannot convert {filename}: {e}") from e
        filename = converted_filename(filename)
        media_type = 'image/jpeg'
        logger.info(f"Converted to JPEG: {filename}")

    image = decode_image(data)
    resolver = resolver or MetadataResolver()
    date, source = resolver.resolve_or_now(data)

    photo = Photo(data=data, filename=filename, media_type=media_type)
    photo = photo.with_dimensions(image.width, image.height).with_capture_date(date, source)
    logger.info(f"Photo added: {filename} ({image.width}x{image.height}, date from {source})")
    return photo


class PhotoLibrary:
    """Ordered photo list with a selection index"""

    def __init__(self):
        self.photos: list[Photo] = []
        self.selected_index: int | None = None

    def __len__(self) -> int:
        return len(self.photos)

    def __iter__(self):
        return iter(self.photos)

    @property
    def selected(self) -> Photo | None:
        if self.selected_index is None:
            return None
        return self.photos[self.selected_index]

    def add(self, photo: Photo) -> int:
        """Append ``photo`` and select it"""
        self.photos.append(photo)
        self.selected_index = len(self.photos) - 1
        return self.selected_index

    def select(self, index: int) -> Photo:
        if not 0 <= index < len(self.photos):
            raise IndexError(f"No photo at index {index}")
        self.selected_index = index
        return self.photos[index]

    def remove(self, index: int) -> Photo:
        """
        Remove the photo at ``index`` and keep the selection on the same photo.

        Removing a photo before the selection shifts the index down; removing
        one after it leaves the index alone. Removing the selected photo keeps
        the index (now the next photo) unless it was the last one, in which
        case the new last photo is selected.
        """
        if not 0 <= index < len(self.photos):
            raise IndexError(f"No photo at index {index}")

        removed = self.photos.pop(index)
        if not self.photos:
            self.selected_index = None
        elif self.selected_index is not None:
            if index < self.selected_index:
                self.selected_index -= 1
            elif index == self.selected_index and self.selected_index >= len(self.photos):
                self.selected_index = len(self.photos) - 1

        logger.info(f"Photo removed: {removed.filename}")
        return removed

    def clear(self):
        self.photos.clear()
        self.selected_index = None
        logger.info("Photo list cleared")
