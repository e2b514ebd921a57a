"""
Interactive editing session: the visible surface, style and timestamp position.

Nothing re-renders implicitly. Every mutating method ends with an explicit
:meth:`TimestampEditor.render` call, so the surface always reflects the
current photo, date, style and position.
"""

from __future__ import annotations

import logging
from datetime import datetime

from PIL import Image

from .export import BatchExporter
from .library import PhotoLibrary
from .models import Photo, Position, StyleSettings, TextGeometry
from .positioner import DisplayRect, PointerEvent, TimestampPositioner
from .renderer import RasterSurface, TimestampRenderer, decode_image

logger = logging.getLogger(__name__)


class TimestampEditor:
    """Ties the library, renderer and positioner to one visible surface."""

    def __init__(self, library: PhotoLibrary | None = None, style: StyleSettings | None = None,
                 renderer: TimestampRenderer | None = None):
        self.library = library or PhotoLibrary()
        self.style = style or StyleSettings()
        self.renderer = renderer or TimestampRenderer()
        self.positioner = TimestampPositioner()
        self.surface = RasterSurface()
        self.position: Position | None = None
        self.geometry: TextGeometry | None = None
        self._decoded: tuple[Photo, Image.Image] | None = None

    @property
    def dragging(self) -> bool:
        return self.positioner.dragging

    def render(self) -> TextGeometry | None:
        """Redraw the selected photo; returns the timestamp geometry"""
        photo = self.library.selected
        if photo is None:
            self.geometry = None
            return None

        image = self._image_for(photo)
        date = photo.capture_date or datetime.now()
        self.geometry, self.position = self.renderer.render_placed(
            self.surface, image, date, self.style, self.position, self.dragging
        )
        return self.geometry

    def set_style(self, style: StyleSettings) -> TextGeometry | None:
        self.style = style
        return self.render()

    def update_style(self, **changes) -> TextGeometry | None:
        return self.set_style(self.style.replace(**changes))

    def set_position(self, position: Position) -> TextGeometry | None:
        self.position = position
        return self.render()

    def select(self, index: int) -> TextGeometry | None:
        self.library.select(index)
        return self.render()

    def add_photo(self, photo: Photo) -> TextGeometry | None:
        self.library.add(photo)
        return self.render()

    def remove_photo(self, index: int) -> TextGeometry | None:
        self.library.remove(index)
        return self.render()

    def clear(self):
        self.library.clear()
        self._decoded = None
        self.render()

    def press(self, event: PointerEvent, rect: DisplayRect) -> bool:
        """Begin dragging if the press hits the timestamp"""
        if self.geometry is None or self.position is None:
            return False
        grabbed = self.positioner.press(event, rect, self.surface.size, self.position, self.geometry)
        if grabbed:
            self.render()
        return grabbed

    def move(self, event: PointerEvent, rect: DisplayRect) -> Position | None:
        if self.geometry is None:
            return None
        position = self.positioner.move(event, rect, self.surface.size, self.geometry)
        if position is not None:
            self.position = position
            self.render()
        return position

    def release(self):
        """End the drag and redraw without the drag outline"""
        if self.positioner.release():
            self.render()

    def export_selected(self, exporter: BatchExporter) -> str | None:
        """Export the selected photo with the current style and position"""
        photo = self.library.selected
        if photo is None:
            return None
        return exporter.export_one(photo, self.style, self.position)

    def _image_for(self, photo: Photo) -> Image.Image:
        if self._decoded is None or self._decoded[0] is not photo:
            self._decoded = (photo, decode_image(photo.data))
        return self._decoded[1]
