"""
Capture-date extraction from embedded image metadata
"""

import logging
import re
from datetime import datetime
from io import BytesIO
from typing import Callable

import piexif
from PIL import Image, UnidentifiedImageError

from .errors import MetadataReadError

logger = logging.getLogger(__name__)

CREATE_DATE_TAG = "CreateDate"
DATE_TIME_ORIGINAL_TAG = "DateTimeOriginal"

# piexif IFD key -> name table in piexif.TAGS
_IFD_TAG_TABLES = {"0th": "Image", "Exif": "Exif", "GPS": "GPS", "1st": "Image"}

_XMP_PACKET_RE = re.compile(rb"<x:xmpmeta.*?</x:xmpmeta>", re.DOTALL)
_XMP_FIELD_RE = re.compile(
    r"""(?:\w+:)?(\w+)\s*=\s*["']([^"']*)["']|<(?:\w+:)?(\w+)>([^<]*)</(?:\w+:)?\3>"""
)


def read_tags(data: bytes) -> dict[str, str]:
    """
    Read tag descriptions from raw image bytes.

    EXIF tags come from piexif (keyed by their EXIF names), XMP properties from
    the embedded packet (keyed by local name, e.g. ``CreateDate``). EXIF values
    win over XMP ones with the same name except for ``CreateDate``, which only
    exists in XMP.

    Raises MetadataReadError when the bytes are not a recognizable image.
    """
    try:
        with Image.open(BytesIO(data)) as image:
            exif_bytes = image.info.get("exif")
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise MetadataReadError(f"Unreadable image container: {e}") from e

    tags = _read_xmp(data)
    if exif_bytes:
        tags.update(_read_exif(exif_bytes))
    return tags


def _read_exif(exif_bytes: bytes) -> dict[str, str]:
    """Flatten a piexif dict into {tag name: description}"""
    try:
        exif_dict = piexif.load(exif_bytes)
    except Exception as e:
        logger.debug(f"Failed to parse EXIF block: {e}")
        return {}

    tags = {}
    for ifd, table in _IFD_TAG_TABLES.items():
        for tag_id, value in exif_dict.get(ifd, {}).items():
            info = piexif.TAGS[table].get(tag_id)
            if info is None:
                continue
            if isinstance(value, bytes):
                value = value.decode("utf-8", errors="replace").rstrip("\x00")
            tags[info["name"]] = str(value)
    return tags


def _read_xmp(data: bytes) -> dict[str, str]:
    match = _XMP_PACKET_RE.search(data)
    if not match:
        return {}

    packet = match.group(0).decode("utf-8", errors="replace")
    tags = {}
    for attr_name, attr_value, elem_name, elem_value in _XMP_FIELD_RE.findall(packet):
        name = attr_name or elem_name
        value = attr_value if attr_name else elem_value
        if name and value.strip():
            tags.setdefault(name, value.strip())
    return tags


def parse_date(value: str | None) -> datetime | None:
    """
    Parse an ISO-like date-time string, returning None when it is not a valid date.

    Aware values are converted to local wall-clock time.
    """
    if not value:
        return None
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def convert_exif_date(value: str) -> str:
    """Rewrite ``YYYY:MM:DD HH:MM:SS`` as ``YYYY-MM-DDTHH:MM:SS``"""
    date_part, _, time_part = value.strip().partition(" ")
    return f"{date_part.replace(':', '-')}T{time_part}"


class MetadataResolver:
    """Resolve a photo's capture date through the tag fallback chain"""

    def __init__(self, tag_reader: Callable[[bytes], dict[str, str]] = read_tags,
                 clock: Callable[[], datetime] = datetime.now):
        self.tag_reader = tag_reader
        self.clock = clock

    def resolve(self, data: bytes) -> datetime:
        """Capture date for ``data``; raises MetadataReadError if the container is unreadable"""
        return self.resolve_with_source(data)[0]

    def resolve_with_source(self, data: bytes) -> tuple[datetime, str]:
        tags = self.tag_reader(data)

        created = parse_date(tags.get(CREATE_DATE_TAG))
        if created is not None:
            return created, "create_date"

        original = tags.get(DATE_TIME_ORIGINAL_TAG)
        if original:
            converted = parse_date(convert_exif_date(original))
            if converted is not None:
                return converted, "date_time_original"
            logger.debug(f"Malformed {DATE_TIME_ORIGINAL_TAG} tag: {original!r}")

        logger.info("No usable capture date in metadata, using current time")
        return self.clock(), "fallback"

    def resolve_or_now(self, data: bytes) -> tuple[datetime, str]:
        """Like resolve_with_source, but recovers from unreadable metadata"""
        try:
            return self.resolve_with_source(data)
        except MetadataReadError as e:
            logger.warning(f"Metadata unreadable, using current time: {e}")
            return self.clock(), "fallback"
