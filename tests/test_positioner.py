"""
Tests for pointer/touch repositioning
"""
import pytest

from photo_reminisce.models import Position, TextGeometry
from photo_reminisce.positioner import (
    MOUSE_HIT_MARGIN,
    TOUCH_HIT_MARGIN,
    DisplayRect,
    PointerEvent,
    TimestampPositioner,
)

IMAGE_SIZE = (4000, 3000)
# Surface shown at a quarter of its size, offset on the page
RECT = DisplayRect(left=100, top=50, width=1000, height=750)
GEOMETRY = TextGeometry(text="'24 03 05", width=800, height=128)
POSITION = Position(1000, 2000)


def _event_at(x, y, kind="mouse", touch_count=1):
    """Display-space event for a source-space point"""
    return PointerEvent(client_x=RECT.left + x / 4, client_y=RECT.top + y / 4, kind=kind, touch_count=touch_count)


@pytest.fixture
def positioner():
    return TimestampPositioner()


class TestCoordinates:

    def test_to_source_scales_per_axis(self):
        rect = DisplayRect(left=10, top=20, width=200, height=50)
        event = PointerEvent(client_x=110, client_y=45)
        assert TimestampPositioner.to_source(event, rect, (400, 300)) == (200, 150)


class TestHitTest:

    def test_center_of_box_hits(self, positioner):
        center = _event_at(POSITION.x + GEOMETRY.width / 2, POSITION.y - GEOMETRY.height / 2)
        assert positioner.press(center, RECT, IMAGE_SIZE, POSITION, GEOMETRY)
        assert positioner.dragging

    def test_within_mouse_margin_hits(self, positioner):
        event = _event_at(POSITION.x - MOUSE_HIT_MARGIN + 4, POSITION.y)
        assert positioner.press(event, RECT, IMAGE_SIZE, POSITION, GEOMETRY)

    def test_outside_margin_misses(self, positioner):
        event = _event_at(POSITION.x - MOUSE_HIT_MARGIN - 8, POSITION.y - 10)
        assert not positioner.press(event, RECT, IMAGE_SIZE, POSITION, GEOMETRY)
        assert not positioner.dragging

    def test_touch_margin_is_wider(self, positioner):
        x = POSITION.x + GEOMETRY.width + MOUSE_HIT_MARGIN + 4
        assert x <= POSITION.x + GEOMETRY.width + TOUCH_HIT_MARGIN
        assert not positioner.press(_event_at(x, POSITION.y), RECT, IMAGE_SIZE, POSITION, GEOMETRY)
        assert positioner.press(_event_at(x, POSITION.y, kind="touch"), RECT, IMAGE_SIZE, POSITION, GEOMETRY)

    def test_multi_touch_never_grabs(self, positioner):
        center = _event_at(POSITION.x + 10, POSITION.y - 10, kind="touch", touch_count=2)
        assert not positioner.press(center, RECT, IMAGE_SIZE, POSITION, GEOMETRY)


class TestDrag:

    def _grab(self, positioner, dx=40, dy=-20):
        event = _event_at(POSITION.x + dx, POSITION.y + dy)
        assert positioner.press(event, RECT, IMAGE_SIZE, POSITION, GEOMETRY)

    def test_move_keeps_grab_offset(self, positioner):
        self._grab(positioner)
        moved = positioner.move(_event_at(POSITION.x + 40 + 400, POSITION.y - 20 - 200), RECT, IMAGE_SIZE, GEOMETRY)
        assert moved == Position(POSITION.x + 400, POSITION.y - 200)

    @pytest.mark.parametrize("dx, dy", [
        (-10000, 0), (10000, 0), (0, -10000), (0, 10000), (10000, 10000), (-3, 7), (2999, -1999),
    ])
    def test_move_is_clamped(self, positioner, dx, dy):
        self._grab(positioner)
        # display events may land outside the surface itself
        event = PointerEvent(client_x=RECT.left + (POSITION.x + dx) / 4, client_y=RECT.top + (POSITION.y + dy) / 4)
        moved = positioner.move(event, RECT, IMAGE_SIZE, GEOMETRY)
        assert 0 <= moved.x
        assert moved.x + GEOMETRY.width <= IMAGE_SIZE[0]
        assert GEOMETRY.height <= moved.y <= IMAGE_SIZE[1]

    def test_move_without_drag_is_ignored(self, positioner):
        assert positioner.move(_event_at(10, 10), RECT, IMAGE_SIZE, GEOMETRY) is None

    def test_multi_touch_move_is_ignored(self, positioner):
        self._grab(positioner)
        event = _event_at(500, 500, kind="touch", touch_count=2)
        assert positioner.move(event, RECT, IMAGE_SIZE, GEOMETRY) is None
        assert positioner.dragging

    def test_release(self, positioner):
        self._grab(positioner)
        assert positioner.release()
        assert not positioner.dragging
        assert not positioner.release()
