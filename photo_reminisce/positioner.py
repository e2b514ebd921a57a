"""
Pointer/touch repositioning of the timestamp.

Events arrive in the host display's coordinate space (CSS-like pixels of the
on-screen surface). They are converted to source-image pixels with a
per-axis scale of ``intrinsic size / displayed size`` before hit-testing or
moving the timestamp.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .models import Position, TextGeometry
from .renderer import clamp_position

logger = logging.getLogger(__name__)

MOUSE_HIT_MARGIN = 10
TOUCH_HIT_MARGIN = 20


@dataclass(frozen=True)
class DisplayRect:
    """On-screen rectangle of the rendered surface."""

    left: float
    top: float
    width: float
    height: float


@dataclass(frozen=True)
class PointerEvent:
    """
    A press/move in display coordinates.

    Attributes:
        client_x: Horizontal position in display pixels.
        client_y: Vertical position in display pixels.
        kind: ``mouse``, ``pen`` or ``touch``.
        touch_count: Number of simultaneous touch points (touch only).
    """

    client_x: float
    client_y: float
    kind: str = "mouse"
    touch_count: int = 1

    @property
    def is_touch(self) -> bool:
        return self.kind == "touch"

    @property
    def is_multi_touch(self) -> bool:
        return self.is_touch and self.touch_count > 1


@dataclass
class DragSession:
    """Offset between the grab point and the position at drag start."""

    offset_x: float
    offset_y: float
    active: bool = True


class TimestampPositioner:
    """
    Hit-testing and drag handling for the timestamp overlay.

    The positioner does not render; callers re-render after every call that
    returns a new position and after :meth:`release`.
    """

    def __init__(self):
        self.drag: DragSession | None = None

    @property
    def dragging(self) -> bool:
        return self.drag is not None and self.drag.active

    @staticmethod
    def to_source(event: PointerEvent, rect: DisplayRect,
                  intrinsic_size: tuple[int, int]) -> tuple[float, float]:
        """Display coordinates -> source-image pixels"""
        width, height = intrinsic_size
        scale_x = width / rect.width if rect.width else 1.0
        scale_y = height / rect.height if rect.height else 1.0
        return (
            (event.client_x - rect.left) * scale_x,
            (event.client_y - rect.top) * scale_y,
        )

    @staticmethod
    def hit_test(point: tuple[float, float], position: Position,
                 geometry: TextGeometry, margin: float) -> bool:
        left, top, right, bottom = geometry.bounding_box(position, margin)
        x, y = point
        return left <= x <= right and top <= y <= bottom

    @staticmethod
    def clamp(position: Position, image_size: tuple[int, int], geometry: TextGeometry) -> Position:
        return clamp_position(position, image_size, geometry)

    def press(self, event: PointerEvent, rect: DisplayRect, intrinsic_size: tuple[int, int],
              position: Position, geometry: TextGeometry) -> bool:
        """Start a drag if the press lands on the timestamp; returns whether it did"""
        if event.is_multi_touch:
            return False

        point = self.to_source(event, rect, intrinsic_size)
        margin = TOUCH_HIT_MARGIN if event.is_touch else MOUSE_HIT_MARGIN
        if not self.hit_test(point, position, geometry, margin):
            return False

        self.drag = DragSession(offset_x=point[0] - position.x, offset_y=point[1] - position.y)
        logger.debug(f"Drag started at {point[0]:.1f},{point[1]:.1f}")
        return True

    def move(self, event: PointerEvent, rect: DisplayRect, intrinsic_size: tuple[int, int],
             geometry: TextGeometry) -> Position | None:
        """New clamped position while dragging, ``None`` when the event is ignored"""
        if not self.dragging or event.is_multi_touch:
            return None

        x, y = self.to_source(event, rect, intrinsic_size)
        candidate = Position(x - self.drag.offset_x, y - self.drag.offset_y)
        return self.clamp(candidate, intrinsic_size, geometry)

    def release(self) -> bool:
        """End the drag; returns True if one was active (caller must re-render)"""
        was_dragging = self.dragging
        self.drag = None
        return was_dragging
