"""
InteractionController: the one owner of "which window are we driving".

Every operation validates its arguments and then clears the permission gate.
Pointer operations map a normalized window-relative point through the focused
window's bounds, which come from the BoundsCache while fresh and from the
backend once expired. Bounds are cached per window, not per process.
"""

import logging
import math
from typing import List, Optional, Tuple

from . import pointer
from .backends import WindowBackend
from .cache import BoundsCache
from .capture import (
    ScreenCapture,
    normalize_format,
    validate_padding,
    validate_quality,
    validate_size,
)
from .config import Settings
from .errors import (
    BackendExecutionFailure,
    InvalidArgument,
    InvalidButton,
    InvalidCoordinate,
    InvalidDirection,
    NoWindowFocused,
)
from .geometry import is_normalized, to_screen
from .models import Application, CaptureResult, FocusedWindow, Platform, ScreenPoint, WindowBounds
from .permissions import PermissionGate


logger = logging.getLogger(__name__)

BUTTONS = ("left", "right", "middle")
DIRECTIONS = ("up", "down", "left", "right")


def _validate_button(button: str) -> str:
    if button not in BUTTONS:
        raise InvalidButton(button, BUTTONS)
    return button


def _validate_point(x: float, y: float) -> None:
    for axis, value in (("x", x), ("y", y)):
        if value is None or not math.isfinite(value) or not is_normalized(value):
            raise InvalidCoordinate(
                f"Coordinate {axis}={value} is outside the window; use values between 0.0 and 1.0"
            )


def _same_application(a: Application, b: Application) -> bool:
    # Window references are unique; pids are shared by sibling windows
    if a.reference and b.reference:
        return a.reference == b.reference
    return a.pid > 0 and a.pid == b.pid


class InteractionController:
    """Owns FocusedWindowState and the bounds cache for one server process."""

    def __init__(
        self,
        backend: WindowBackend,
        gate: PermissionGate,
        cache: Optional[BoundsCache] = None,
        capture: Optional[ScreenCapture] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or Settings()
        self.backend = backend
        self.gate = gate
        self.cache = cache if cache is not None else BoundsCache(ttl=self.settings.bounds_ttl)
        self.capture = capture or ScreenCapture()
        self._focused: Optional[FocusedWindow] = None

    @property
    def platform(self) -> Platform:
        return self.backend.platform

    @property
    def focused(self) -> Optional[FocusedWindow]:
        return self._focused

    def _require_focus(self) -> FocusedWindow:
        if self._focused is None:
            raise NoWindowFocused()
        return self._focused

    async def _lookup_bounds(
        self, app: Application, fallback: Optional[WindowBounds] = None
    ) -> Optional[WindowBounds]:
        """Fresh cache entry, else a backend query, else the last known value."""
        cached = self.cache.get(app.pid, app.reference)
        if cached is not None:
            return cached

        try:
            bounds = await self.backend.get_bounds(app)
        except BackendExecutionFailure as exc:
            logger.warning("Bounds query failed for %s (pid %d): %s", app.name, app.pid, exc)
            bounds = None

        if bounds is not None and not bounds.is_empty:
            self.cache.put(app.pid, bounds, app.reference)
            return bounds
        return fallback or self.cache.peek(app.pid, app.reference)

    async def _focused_bounds(self) -> Tuple[FocusedWindow, WindowBounds]:
        focused = self._require_focus()
        bounds = await self._lookup_bounds(focused.application, fallback=focused.bounds)
        if bounds is None:
            raise BackendExecutionFailure(
                f"Window bounds unavailable for {focused.application.name}; is the window visible?"
            )
        focused.bounds = bounds
        return focused, bounds

    async def list_applications(self) -> List[Application]:
        await self.gate.check()
        apps = await self.backend.list_applications()
        for app in apps:
            if app.bounds is not None and not app.bounds.is_empty:
                self.cache.put(app.pid, app.bounds, app.reference)
        return apps

    async def focus_application(self, identifier: str) -> FocusedWindow:
        await self.gate.check()
        app = await self.backend.focus_application(identifier)
        bounds = self.cache.get(app.pid, app.reference)
        if bounds is None and app.bounds is not None and not app.bounds.is_empty:
            # The enumeration that resolved the identifier already measured the window
            bounds = app.bounds
            self.cache.put(app.pid, bounds, app.reference)
        if bounds is None:
            bounds = await self._lookup_bounds(app)
        app.bounds = bounds
        self._focused = FocusedWindow(application=app, bounds=bounds)
        logger.info("Focused %s (pid %d) with bounds %s", app.name, app.pid, bounds)
        return self._focused

    async def click(self, x: float, y: float, button: str = "left") -> ScreenPoint:
        _validate_button(button)
        _validate_point(x, y)
        await self.gate.check()
        _, bounds = await self._focused_bounds()
        point = to_screen(x, y, bounds)
        pointer.click(point, button)
        return point

    async def move_mouse(self, x: float, y: float) -> ScreenPoint:
        _validate_point(x, y)
        await self.gate.check()
        _, bounds = await self._focused_bounds()
        point = to_screen(x, y, bounds)
        pointer.move_to(point)
        return point

    async def drag_mouse(
        self,
        start_x: float,
        start_y: float,
        end_x: float,
        end_y: float,
        button: str = "left",
        duration: float = 0.5,
    ) -> Tuple[ScreenPoint, ScreenPoint]:
        _validate_button(button)
        _validate_point(start_x, start_y)
        _validate_point(end_x, end_y)
        if duration < 0:
            raise InvalidArgument(f"Duration must not be negative, got {duration}")
        await self.gate.check()
        _, bounds = await self._focused_bounds()
        start = to_screen(start_x, start_y, bounds)
        end = to_screen(end_x, end_y, bounds)
        pointer.drag(start, end, button, duration)
        return start, end

    async def scroll(self, direction: str, amount: int = 3) -> ScreenPoint:
        """Scroll inside the focused window, with the pointer at its centre."""
        if direction not in DIRECTIONS:
            raise InvalidDirection(direction, DIRECTIONS)
        amount = int(amount)
        if amount < 1:
            raise InvalidArgument(f"Scroll amount must be at least 1, got {amount}")
        await self.gate.check()
        _, bounds = await self._focused_bounds()
        point = to_screen(0.5, 0.5, bounds)
        pointer.scroll(point, direction, amount)
        return point

    async def close_application(self, identifier: str, force: bool = False) -> Application:
        await self.gate.check()
        app = await self.backend.find_application(identifier)
        if force:
            await self.backend.kill(app)
        else:
            await self.backend.close(app)

        # A kill takes every window of the process with it
        self.cache.invalidate(app.pid, None if force else app.reference)
        focused = self._focused
        if focused is not None and (
            _same_application(app, focused.application)
            or (force and app.pid > 0 and app.pid == focused.application.pid)
        ):
            logger.info("Closed the focused application %s; clearing focus", app.name)
            self._focused = None
        return app

    async def list_windows(self) -> List[Application]:
        await self.gate.check()
        return await self.backend.list_windows()

    async def active_window(self) -> Optional[Application]:
        await self.gate.check()
        return await self.backend.active_window()

    async def _target_window(self, window_title: Optional[str]) -> Application:
        if window_title:
            return await self.backend.find_window(window_title)
        return self._require_focus().application

    async def _apply_geometry(self, window_title: Optional[str], **geometry: int) -> Application:
        target = await self._target_window(window_title)
        await self.backend.set_geometry(target, **geometry)
        self.cache.invalidate(target.pid, target.reference)

        focused = self._focused
        if focused is not None and _same_application(target, focused.application):
            focused.application.bounds = None
            focused.bounds = await self._lookup_bounds(focused.application)
            logger.info("Focused window %s now at %s", focused.application.name, focused.bounds)
        return target

    async def move_window(self, x: int, y: int, window_title: Optional[str] = None) -> Application:
        """Move a window's top-left corner to absolute screen pixels (x, y)."""
        x, y = int(x), int(y)
        await self.gate.check()
        return await self._apply_geometry(window_title, x=x, y=y)

    async def resize_window(
        self, width: int, height: int, window_title: Optional[str] = None
    ) -> Application:
        width, height = int(width), int(height)
        if width <= 0 or height <= 0:
            raise InvalidArgument(f"Window size must be positive, got {width}x{height}")
        await self.gate.check()
        return await self._apply_geometry(window_title, width=width, height=height)

    async def screen_color(self, x: int, y: int) -> Tuple[int, int, int]:
        await self.gate.check()
        return await self.capture.color_at(x, y)

    async def screenshot(self, padding: int = 10) -> CaptureResult:
        padding = validate_padding(padding)
        await self.gate.check()
        _, bounds = await self._focused_bounds()
        return await self.capture.window(bounds, padding)

    async def screenshot_full_screen(self, image_format: str = "png", quality: int = 90) -> CaptureResult:
        image_format = normalize_format(image_format)
        quality = validate_quality(quality)
        await self.gate.check()
        return await self.capture.full(image_format, quality)

    async def screenshot_region(
        self,
        x: int,
        y: int,
        width: int,
        height: int,
        image_format: str = "png",
        quality: int = 90,
    ) -> CaptureResult:
        width, height = validate_size(width, height)
        image_format = normalize_format(image_format)
        quality = validate_quality(quality)
        await self.gate.check()
        return await self.capture.region(x, y, width, height, image_format, quality)
