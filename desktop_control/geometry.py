"""Pure coordinate math: normalized window points and crop rectangles."""

from typing import NamedTuple, Optional

from .models import ScreenPoint, WindowBounds


class Rect(NamedTuple):
    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height


def to_screen(x: float, y: float, bounds: WindowBounds) -> ScreenPoint:
    """Map a window-relative normalized point to absolute screen pixels.

    No clamping: (0, 0) is the window's top-left corner and (1, 1) its
    bottom-right corner; values outside [0, 1] land outside the window.
    """
    return ScreenPoint(
        x=int(round(bounds.x + x * bounds.width)),
        y=int(round(bounds.y + y * bounds.height)),
    )


def is_normalized(value: float) -> bool:
    return 0.0 <= value <= 1.0


def padded_rect(bounds: WindowBounds, padding: int, min_left: int = 0, min_top: int = 0) -> Rect:
    """Expand ``bounds`` by ``padding`` on every side.

    The top-left corner is kept at or beyond the virtual screen origin
    (``min_left``, ``min_top``); the far edges are left for ``clamp_rect``
    to trim against the actual raster.
    """
    return Rect(
        left=max(min_left, bounds.x - padding),
        top=max(min_top, bounds.y - padding),
        width=bounds.width + padding * 2,
        height=bounds.height + padding * 2,
    )


def scale_rect(rect: Rect, factor: float, origin_x: int = 0, origin_y: int = 0) -> Rect:
    """Translate a logical screen rectangle into raster pixel space."""
    if factor == 1.0 and origin_x == 0 and origin_y == 0:
        return rect
    return Rect(
        left=int(round((rect.left - origin_x) * factor)),
        top=int(round((rect.top - origin_y) * factor)),
        width=int(round(rect.width * factor)),
        height=int(round(rect.height * factor)),
    )


def clamp_rect(rect: Rect, extent_width: int, extent_height: int) -> Optional[Rect]:
    """Intersect ``rect`` with ``(0, 0, extent_width, extent_height)``.

    Returns None when nothing of the rectangle is on the raster.
    """
    left = max(0, rect.left)
    top = max(0, rect.top)
    right = min(extent_width, rect.right)
    bottom = min(extent_height, rect.bottom)
    if right <= left or bottom <= top:
        return None
    return Rect(left, top, right - left, bottom - top)
