"""Tests for window-relative coordinate mapping and crop rectangles."""

import pytest

from desktop_control.geometry import Rect, clamp_rect, is_normalized, padded_rect, scale_rect, to_screen
from desktop_control.models import WindowBounds


class TestToScreen:
    """Test normalized point to absolute pixel mapping."""

    def test_centre_of_window(self):
        bounds = WindowBounds(x=100, y=50, width=800, height=600)
        point = to_screen(0.5, 0.5, bounds)
        assert (point.x, point.y) == (500, 350)

    def test_corners_map_to_window_edges(self):
        bounds = WindowBounds(x=100, y=50, width=800, height=600)
        assert to_screen(0.0, 0.0, bounds).model_dump() == {"x": 100, "y": 50}
        assert to_screen(1.0, 1.0, bounds).model_dump() == {"x": 900, "y": 650}

    @pytest.mark.parametrize("x,y", [(0.0, 1.0), (0.333, 0.667), (0.999, 0.001), (0.25, 0.75)])
    def test_points_stay_inside_bounds(self, x, y):
        bounds = WindowBounds(x=-1280, y=37, width=1277, height=719)
        point = to_screen(x, y, bounds)
        assert bounds.x <= point.x <= bounds.x + bounds.width
        assert bounds.y <= point.y <= bounds.y + bounds.height

    def test_negative_origin_second_monitor(self):
        bounds = WindowBounds(x=-1920, y=0, width=1920, height=1080)
        point = to_screen(0.5, 0.5, bounds)
        assert (point.x, point.y) == (-960, 540)

    def test_no_clamping_outside_unit_square(self):
        bounds = WindowBounds(x=0, y=0, width=100, height=100)
        point = to_screen(1.5, -0.5, bounds)
        assert (point.x, point.y) == (150, -50)


def test_is_normalized():
    assert is_normalized(0.0)
    assert is_normalized(1.0)
    assert not is_normalized(-0.01)
    assert not is_normalized(1.01)


class TestPaddedRect:
    def test_padding_on_every_side(self):
        rect = padded_rect(WindowBounds(x=100, y=50, width=800, height=600), 10)
        assert rect == Rect(90, 40, 820, 620)

    def test_top_left_clamped_to_origin(self):
        rect = padded_rect(WindowBounds(x=5, y=0, width=100, height=100), 10)
        assert (rect.left, rect.top) == (0, 0)
        # Far edges are not clamped here
        assert rect.width == 120
        assert rect.height == 120

    def test_virtual_screen_origin(self):
        rect = padded_rect(WindowBounds(x=-1915, y=0, width=100, height=100), 10, -1920, 0)
        assert (rect.left, rect.top) == (-1920, 0)


class TestScaleRect:
    def test_identity(self):
        rect = Rect(10, 20, 30, 40)
        assert scale_rect(rect, 1.0) is rect

    def test_retina_scale(self):
        assert scale_rect(Rect(10, 20, 30, 40), 2.0) == Rect(20, 40, 60, 80)

    def test_origin_translation(self):
        assert scale_rect(Rect(-1920, 0, 100, 100), 1.0, -1920, 0) == Rect(0, 0, 100, 100)


class TestClampRect:
    def test_inside_unchanged(self):
        assert clamp_rect(Rect(10, 10, 100, 100), 1920, 1080) == Rect(10, 10, 100, 100)

    def test_trims_far_edges(self):
        assert clamp_rect(Rect(1900, 1000, 100, 100), 1920, 1080) == Rect(1900, 1000, 20, 80)

    def test_trims_negative_edges(self):
        assert clamp_rect(Rect(-50, -50, 100, 100), 1920, 1080) == Rect(0, 0, 50, 50)

    def test_fully_outside(self):
        assert clamp_rect(Rect(2000, 0, 100, 100), 1920, 1080) is None
