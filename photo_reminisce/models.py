"""Value objects shared by the renderer, positioner and exporter."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime
from pathlib import PurePath

COLOR_HEX = {
    "orange": "#FF9800",
    "white": "#FFFFFF",
    "yellow": "#FFEB3B",
}
FORMATS = ("standard", "dateOnly")
FILE_TYPES = ("jpeg", "png")
FILE_EXTENSIONS = {"jpeg": "jpg", "png": "png"}

FONT_SIZE_RANGE = (64, 256)
QUALITY_RANGE = (50, 100)

EXPORT_SUFFIX = "-photo-reminisce"


def _clamp(value: int, bounds: tuple[int, int]) -> int:
    low, high = bounds
    return max(low, min(int(value), high))


@dataclass(frozen=True)
class StyleSettings:
    """
    Session-wide timestamp style.

    Instances are immutable; use :meth:`replace` to derive an updated copy.
    Out-of-range numbers are clamped, unknown enum values raise ``ValueError``.
    """

    color: str = "orange"
    format: str = "standard"
    font_size: int = 96
    shadow: bool = True
    fixed_to_bottom_right: bool = True
    file_type: str = "jpeg"
    quality: int = 92

    def __post_init__(self):
        if self.color not in COLOR_HEX:
            raise ValueError(f"Unknown timestamp color: {self.color}")
        if self.format not in FORMATS:
            raise ValueError(f"Unknown timestamp format: {self.format}")
        if self.file_type not in FILE_TYPES:
            raise ValueError(f"Unknown export file type: {self.file_type}")
        object.__setattr__(self, "font_size", _clamp(self.font_size, FONT_SIZE_RANGE))
        object.__setattr__(self, "quality", _clamp(self.quality, QUALITY_RANGE))

    @property
    def hex_color(self) -> str:
        return COLOR_HEX[self.color]

    def replace(self, **changes) -> "StyleSettings":
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_config(cls, config: dict) -> "StyleSettings":
        """Build settings from the ``style`` and ``export`` sections of a loaded config"""
        style = config.get("style", {})
        export = config.get("export", {})
        defaults = cls()
        return cls(
            color=style.get("color", defaults.color),
            format=style.get("format", defaults.format),
            font_size=style.get("font_size", defaults.font_size),
            shadow=style.get("shadow", defaults.shadow),
            fixed_to_bottom_right=style.get("fixed_to_bottom_right", defaults.fixed_to_bottom_right),
            file_type=export.get("file_type", defaults.file_type),
            quality=export.get("quality", defaults.quality),
        )


@dataclass(frozen=True)
class Position:
    """Baseline anchor of the timestamp in source-image pixels."""

    x: float
    y: float

    def __iter__(self):
        return iter((self.x, self.y))


@dataclass(frozen=True)
class TextGeometry:
    """Measured size of the last rendered timestamp; height is the font size."""

    text: str
    width: float
    height: int

    def bounding_box(self, position: Position, margin: float = 0) -> tuple[float, float, float, float]:
        """(left, top, right, bottom) of the text around its baseline anchor"""
        return (
            position.x - margin,
            position.y - self.height - margin,
            position.x + self.width + margin,
            position.y + margin,
        )


@dataclass(frozen=True)
class Photo:
    """
    An uploaded image plus derived data.

    Attributes:
        data: Encoded, directly decodable image bytes.
        filename: Original (or post-conversion) filename.
        media_type: Declared media type, e.g. ``image/jpeg``.
        width: Decoded pixel width, ``None`` until first decode.
        height: Decoded pixel height, ``None`` until first decode.
        capture_date: Resolved capture date, ``None`` until resolution.
        date_source: Which step of the fallback chain produced the date.
    """

    data: bytes = dataclasses.field(repr=False)
    filename: str
    media_type: str = "image/jpeg"
    width: int | None = None
    height: int | None = None
    capture_date: datetime | None = None
    date_source: str = "unresolved"

    @property
    def date_is_default(self) -> bool:
        return self.date_source in ("fallback", "unresolved")

    def with_capture_date(self, date: datetime, source: str) -> "Photo":
        return dataclasses.replace(self, capture_date=date, date_source=source)

    def with_dimensions(self, width: int, height: int) -> "Photo":
        return dataclasses.replace(self, width=width, height=height)


def export_filename(original_name: str, file_type: str) -> str:
    """
    ``IMG_0001.jpg`` -> ``IMG_0001-photo-reminisce.png`` for a PNG export.

    Only the last dot-delimited suffix is stripped.
    """
    name = PurePath(original_name).name
    stem = name.rsplit(".", 1)[0] if "." in name else name
    return f"{stem}{EXPORT_SUFFIX}.{FILE_EXTENSIONS[file_type]}"
