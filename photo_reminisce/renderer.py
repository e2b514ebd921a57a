"""
Timestamp compositing onto a raster surface
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO

from PIL import Image, ImageDraw, ImageFilter, ImageFont, ImageOps

from .core import StyleManager
from .errors import DecodeError, EncodeError
from .formatting import format_date, template_for
from .models import Position, StyleSettings, TextGeometry

logger = logging.getLogger(__name__)

# Distance of the auto-anchored text from the right and bottom edges, in source pixels
ANCHOR_PADDING = 30

OUTLINE_PADDING = 5
OUTLINE_WIDTH = 2
OUTLINE_COLOR = "#FFFFFF"


@dataclass(frozen=True)
class Shadow:
    color: tuple[int, int, int, int] = (0, 0, 0, 128)
    blur: float = 4
    offset: tuple[int, int] = (2, 2)


DROP_SHADOW = Shadow()


def decode_image(data: bytes) -> Image.Image:
    """Decode image bytes, honouring the EXIF orientation like a browser would"""
    try:
        with Image.open(BytesIO(data)) as image:
            image.load()
            return ImageOps.exif_transpose(image)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Cannot decode image: {e}") from e


class RasterSurface:
    """
    A 2-D RGBA drawing target.

    Mirrors the small slice of a canvas API the compositor needs: resizing
    clears the surface, shadow is a piece of state applied to subsequent
    text draws until cleared.
    """

    def __init__(self, width: int = 1, height: int = 1):
        self.shadow: Shadow | None = None
        self.set_size(width, height)

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def set_size(self, width: int, height: int):
        self.image = Image.new("RGBA", (max(1, width), max(1, height)), (0, 0, 0, 0))
        self._draw = ImageDraw.Draw(self.image)

    def draw_image(self, image: Image.Image, offset: tuple[int, int] = (0, 0)):
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        self.image.paste(image, offset)

    def measure_text(self, text: str, font: ImageFont.FreeTypeFont) -> float:
        return self._draw.textlength(text, font=font)

    def draw_text(self, text: str, position: Position, font: ImageFont.FreeTypeFont, fill: str):
        """Draw ``text`` with its left baseline at ``position``"""
        if self.shadow is not None:
            self._draw_shadow(text, position, font)
        self._draw.text((position.x, position.y), text, font=font, fill=fill, anchor="ls")

    def _draw_shadow(self, text: str, position: Position, font: ImageFont.FreeTypeFont):
        shadow = self.shadow
        x = position.x + shadow.offset[0]
        y = position.y + shadow.offset[1]
        left, top, right, bottom = font.getbbox(text, anchor="ls")
        pad = int(shadow.blur * 3) + 1

        # Blur only the region around the glyphs
        x0 = max(0, int(x + left) - pad)
        y0 = max(0, int(y + top) - pad)
        x1 = min(self.width, int(x + right) + pad + 1)
        y1 = min(self.height, int(y + bottom) + pad + 1)
        if x1 <= x0 or y1 <= y0:
            return

        layer = Image.new("RGBA", (x1 - x0, y1 - y0), (0, 0, 0, 0))
        ImageDraw.Draw(layer).text((x - x0, y - y0), text, font=font, fill=shadow.color, anchor="ls")
        if shadow.blur:
            layer = layer.filter(ImageFilter.GaussianBlur(shadow.blur))
        self.image.alpha_composite(layer, dest=(x0, y0))

    def stroke_rect(self, box: tuple[float, float, float, float], color: str, width: int = 1):
        self._draw.rectangle(box, outline=color, width=width)

    def snapshot(self) -> Image.Image:
        return self.image.copy()

    def encode(self, file_type: str, quality: int = 92) -> bytes:
        """Serialize the surface as JPEG or PNG bytes"""
        buffer = BytesIO()
        try:
            if file_type == "jpeg":
                self.image.convert("RGB").save(buffer, "JPEG", quality=quality, optimize=True)
            elif file_type == "png":
                self.image.save(buffer, "PNG")
            else:
                raise ValueError(f"Unsupported export format: {file_type}")
        except (OSError, ValueError) as e:
            raise EncodeError(f"Cannot encode surface as {file_type}: {e}") from e
        return buffer.getvalue()


def anchor_position(image_size: tuple[int, int], geometry: TextGeometry,
                    padding: int = ANCHOR_PADDING) -> Position:
    """Bottom-right anchor: ``(W - textWidth - padding, H - padding)``"""
    width, height = image_size
    return Position(width - geometry.width - padding, height - padding)


def clamp_position(position: Position, image_size: tuple[int, int], geometry: TextGeometry) -> Position:
    """
    Keep the text inside the image.

    x is clamped to ``[0, W - textWidth]`` and y (the baseline) to
    ``[fontSize, H]``. When the text is wider or taller than the image the
    lower bound wins.
    """
    width, height = image_size
    x = max(0, min(position.x, width - geometry.width))
    y = max(geometry.height, min(position.y, height))
    return Position(x, y)


class TimestampRenderer:
    """Timestamp compositor shared by the editor and the exporter"""

    def __init__(self, style_manager: StyleManager | None = None):
        self.style_manager = style_manager or StyleManager()

    def format_text(self, date: datetime, style: StyleSettings) -> str:
        return format_date(date, template_for(style.format))

    def measure(self, surface: RasterSurface, date: datetime, style: StyleSettings) -> TextGeometry:
        """Geometry of the timestamp text without drawing anything"""
        text = self.format_text(date, style)
        font = self.style_manager.get_font(style.font_size)
        return TextGeometry(text=text, width=surface.measure_text(text, font), height=style.font_size)

    def place(self, image_size: tuple[int, int], geometry: TextGeometry, style: StyleSettings,
              position: Position | None, dragging: bool = False) -> Position:
        """
        Final baseline anchor for a render.

        Auto-anchor overrides ``position`` unless a drag is in progress; a
        missing position also falls back to the anchor. Manual positions are
        clamped to the image.
        """
        if position is None or (style.fixed_to_bottom_right and not dragging):
            return anchor_position(image_size, geometry)
        return clamp_position(position, image_size, geometry)

    def render(self, surface: RasterSurface, image: Image.Image, date: datetime,
               style: StyleSettings, position: Position, dragging: bool = False) -> TextGeometry:
        """
        Draw ``image`` and the timestamp onto ``surface``.

        The surface is resized to the image's own pixel size and the text is
        drawn with its baseline at ``position``. Returns the measured text
        geometry, which hit-testing and clamping rely on.
        """
        surface.set_size(image.width, image.height)
        surface.draw_image(image, (0, 0))

        text = self.format_text(date, style)
        font = self.style_manager.get_font(style.font_size)

        if style.shadow:
            surface.shadow = DROP_SHADOW
        try:
            surface.draw_text(text, position, font, style.hex_color)
        finally:
            surface.shadow = None

        geometry = TextGeometry(text=text, width=surface.measure_text(text, font), height=style.font_size)

        if dragging:
            left, top, right, bottom = geometry.bounding_box(position, OUTLINE_PADDING)
            surface.stroke_rect((left, top, right, bottom), OUTLINE_COLOR, OUTLINE_WIDTH)

        return geometry

    def render_placed(self, surface: RasterSurface, image: Image.Image, date: datetime,
                      style: StyleSettings, position: Position | None,
                      dragging: bool = False) -> tuple[TextGeometry, Position]:
        """Measure, resolve the anchor, then render; returns geometry and the position used"""
        geometry = self.measure(surface, date, style)
        placed = self.place(image.size, geometry, style, position, dragging)
        return self.render(surface, image, date, style, placed, dragging), placed
