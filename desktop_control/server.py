#!/usr/bin/env python3
"""
Desktop Control MCP Server

Lets an LLM target one application window at a time on macOS, Windows or
Linux: list applications, focus one, then click, move, scroll, drag and take
screenshots using coordinates normalized to that window (0.0 = left/top edge,
1.0 = right/bottom edge). Windows can also be listed, moved and resized, and
single screen pixels sampled.

Requirements:
- Python 3.10+
- macOS: Screen Recording and Accessibility permission for the host process
- Windows: PowerShell
- Linux: X11 (or XWayland), wmctrl and xprop
"""

import asyncio
import functools
import json
import logging
import sys
import textwrap
from typing import Any, Awaitable, Callable, Optional

from mcp.server.fastmcp import FastMCP, Image
from mcp.server.fastmcp.exceptions import ToolError

from .backends import create_backend
from .cache import BoundsCache
from .capture import ScreenCapture
from .config import Settings, configure_logging
from .controller import InteractionController
from .errors import DesktopControlError, UnsupportedPlatform
from .host import detect_platform
from .models import CaptureResult
from .permissions import PermissionGate


logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("desktop-control")

# One controller per server process. Built on first use so importing this
# module never touches the host.
_controller: Optional[InteractionController] = None
_dispatch_lock: Optional[asyncio.Lock] = None


def build_controller(settings: Optional[Settings] = None) -> InteractionController:
    """Detect the platform once and wire the backend, gate, cache and capture together."""
    settings = settings or Settings.from_env()
    platform = detect_platform()
    return InteractionController(
        backend=create_backend(platform, settings=settings),
        gate=PermissionGate(platform, settings=settings),
        cache=BoundsCache(ttl=settings.bounds_ttl),
        capture=ScreenCapture(),
        settings=settings,
    )


def _get_controller() -> InteractionController:
    global _controller
    if _controller is None:
        _controller = build_controller()
    return _controller


def _get_dispatch_lock() -> asyncio.Lock:
    global _dispatch_lock
    if _dispatch_lock is None:
        _dispatch_lock = asyncio.Lock()
    return _dispatch_lock


def _tool_errors(operation: str) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Awaitable[Any]]]:
    """Serialize a tool call and turn every failure into a ToolError."""

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            async with _get_dispatch_lock():
                try:
                    return await func(*args, **kwargs)
                except ToolError:
                    raise
                except DesktopControlError as exc:
                    logger.info("%s failed: %s", operation, exc)
                    raise ToolError(str(exc)) from exc
                except Exception as exc:  # noqa: BLE001 - never let a tool crash the server
                    logger.exception("Unexpected failure in %s", operation)
                    raise ToolError(f"{operation} failed: {exc}") from exc

        return wrapper

    return decorator


def _prompt_text(template: str) -> str:
    """Dedent and strip prompt template text for registration."""
    return textwrap.dedent(template).strip()


def _image(result: CaptureResult) -> Image:
    return Image(data=result.data, format=result.format)


@mcp.tool(name="listApplications")
@_tool_errors("listApplications")
async def list_applications() -> str:
    """
    List running applications that own a visible window, with their window bounds.

    Returns:
        JSON array of {name, pid, reference, title, bounds}. reference is the
        bundle id (macOS), window handle (Windows) or X11 window id (Linux).
    """
    apps = await _get_controller().list_applications()
    return json.dumps([app.model_dump(mode="json") for app in apps], indent=2)


@mcp.tool(name="focusApplication")
@_tool_errors("focusApplication")
async def focus_application(identifier: str) -> str:
    """
    Focus an application by name, bundle id / window id, or PID.

    Matching order: exact bundle id or window id, then numeric PID, then a
    case-insensitive substring of the application name. All later click,
    moveMouse, scrollMouse, dragMouse and screenshot calls act on this window.

    Args:
        identifier: Application name, bundle id, window id or PID

    Examples:
        - focusApplication("com.apple.Safari")
        - focusApplication("1234")
        - focusApplication("firefox")
    """
    controller = _get_controller()
    focused = await controller.focus_application(identifier)
    app = focused.application
    ref = f", {app.reference}" if app.reference else ""
    text = f"Focused on {controller.platform.value} application: {app.name} (PID: {app.pid}{ref})"
    if app.title:
        text += f' - "{app.title}"'
    if focused.bounds is not None:
        b = focused.bounds
        text += f" at ({b.x}, {b.y}) {b.width}x{b.height}"
    return text


@mcp.tool(name="click")
@_tool_errors("click")
async def click(x: float, y: float, button: str = "left") -> str:
    """
    Click at a point relative to the focused application window.

    Args:
        x: X coordinate relative to the window (0.0 = left edge, 1.0 = right edge)
        y: Y coordinate relative to the window (0.0 = top edge, 1.0 = bottom edge)
        button: Mouse button: "left", "right", or "middle"

    Examples:
        - click(0.5, 0.5) - Click the centre of the window
        - click(0.02, 0.3, button="right") - Right click near the left edge
    """
    controller = _get_controller()
    point = await controller.click(x, y, button)
    name = controller.focused.application.name
    return f"Clicked {button} button at ({x:.3f}, {y:.3f}) relative to {name} (screen {point.x}, {point.y})"


@mcp.tool(name="moveMouse")
@_tool_errors("moveMouse")
async def move_mouse(x: float, y: float) -> str:
    """
    Move the mouse cursor to a point relative to the focused window without clicking.

    Args:
        x: X coordinate relative to the window (0.0 = left edge, 1.0 = right edge)
        y: Y coordinate relative to the window (0.0 = top edge, 1.0 = bottom edge)
    """
    controller = _get_controller()
    point = await controller.move_mouse(x, y)
    name = controller.focused.application.name
    return f"Moved mouse to ({x:.3f}, {y:.3f}) relative to {name} (screen {point.x}, {point.y})"


@mcp.tool(name="scrollMouse")
@_tool_errors("scrollMouse")
async def scroll_mouse(direction: str, amount: int = 3) -> str:
    """
    Scroll inside the focused window. The pointer is moved to the window centre first.

    Args:
        direction: "up", "down", "left", or "right"
        amount: Number of wheel clicks (at least 1)
    """
    controller = _get_controller()
    await controller.scroll(direction, amount)
    name = controller.focused.application.name
    return f"Scrolled {direction} by {amount} in {name}"


@mcp.tool(name="dragMouse")
@_tool_errors("dragMouse")
async def drag_mouse(
    start_x: float,
    start_y: float,
    end_x: float,
    end_y: float,
    button: str = "left",
    duration: float = 0.5,
) -> str:
    """
    Drag between two points relative to the focused window.

    Args:
        start_x: Start X (0.0 - 1.0)
        start_y: Start Y (0.0 - 1.0)
        end_x: End X (0.0 - 1.0)
        end_y: End Y (0.0 - 1.0)
        button: Mouse button to hold: "left", "right", or "middle"
        duration: Seconds the drag takes
    """
    controller = _get_controller()
    start, end = await controller.drag_mouse(start_x, start_y, end_x, end_y, button, duration)
    name = controller.focused.application.name
    return (
        f"Dragged {button} button from ({start_x:.3f}, {start_y:.3f}) to ({end_x:.3f}, {end_y:.3f}) "
        f"relative to {name} (screen {start.x},{start.y} -> {end.x},{end.y})"
    )


@mcp.tool(name="closeApp")
@_tool_errors("closeApp")
async def close_app(identifier: str, force: bool = False) -> str:
    """
    Close an application by name, bundle id / window id, or PID.

    Args:
        identifier: Same matching rules as focusApplication
        force: Kill the process instead of asking it to quit
    """
    app = await _get_controller().close_application(identifier, force)
    verb = "Force-closed" if force else "Closed"
    return f"{verb} {app.name} (PID: {app.pid})"


@mcp.tool(name="listWindows")
@_tool_errors("listWindows")
async def list_windows() -> str:
    """
    List every visible top-level window, including several windows of one application.

    Returns:
        JSON array of {name, pid, reference, title, bounds}, one entry per window.
    """
    windows = await _get_controller().list_windows()
    return json.dumps([window.model_dump(mode="json") for window in windows], indent=2)


@mcp.tool(name="getActiveWindow")
@_tool_errors("getActiveWindow")
async def get_active_window() -> str:
    """
    Report the window that currently has keyboard focus on the desktop.

    This is the operating system's foreground window, which can differ from the
    window chosen with focusApplication if the user switched windows since.
    """
    window = await _get_controller().active_window()
    if window is None:
        return "No active window"
    return json.dumps(window.model_dump(mode="json"), indent=2)


@mcp.tool(name="moveWindow")
@_tool_errors("moveWindow")
async def move_window(x: int, y: int, window_title: Optional[str] = None) -> str:
    """
    Move a window so its top-left corner sits at absolute screen pixels (x, y).

    Args:
        x: New left edge in screen pixels
        y: New top edge in screen pixels
        window_title: Case-insensitive part of the window title (default: the focused window)
    """
    window = await _get_controller().move_window(x, y, window_title)
    return f'Moved window "{window.title or window.name}" to position ({x}, {y})'


@mcp.tool(name="resizeWindow")
@_tool_errors("resizeWindow")
async def resize_window(width: int, height: int, window_title: Optional[str] = None) -> str:
    """
    Resize a window, keeping its top-left corner in place.

    Args:
        width: New width in pixels (must be positive)
        height: New height in pixels (must be positive)
        window_title: Case-insensitive part of the window title (default: the focused window)
    """
    window = await _get_controller().resize_window(width, height, window_title)
    return f'Resized window "{window.title or window.name}" to {width}x{height}'


@mcp.tool(name="getScreenColor")
@_tool_errors("getScreenColor")
async def get_screen_color(x: int, y: int) -> str:
    """
    Read the colour of one screen pixel.

    Args:
        x: X coordinate in absolute screen pixels
        y: Y coordinate in absolute screen pixels
    """
    r, g, b = await _get_controller().screen_color(x, y)
    return f"Color at ({x}, {y}): #{r:02x}{g:02x}{b:02x} (RGB {r}, {g}, {b})"


@mcp.tool(name="screenshot")
@_tool_errors("screenshot")
async def screenshot(padding: Optional[int] = None):
    """
    Take a PNG screenshot of the focused application window.

    Args:
        padding: Extra pixels captured around the window on every side (default 10)
    """
    controller = _get_controller()
    if padding is None:
        padding = controller.settings.default_padding
    result = await controller.screenshot(padding)
    name = controller.focused.application.name
    text = f"Screenshot of {name} window ({result.width}x{result.height}px with {padding}px padding)"
    return [text, _image(result)]


@mcp.tool(name="screenshotFullScreen")
@_tool_errors("screenshotFullScreen")
async def screenshot_full_screen(format: str = "png", quality: Optional[int] = None):
    """
    Take a screenshot of the entire (virtual) screen.

    Args:
        format: "png" or "jpg"
        quality: JPEG quality 1-100 (default 90, ignored for PNG)
    """
    controller = _get_controller()
    if quality is None:
        quality = controller.settings.default_quality
    result = await controller.screenshot_full_screen(format, quality)
    text = f"Full screen screenshot ({format.upper()}, {result.width}x{result.height}px)"
    return [text, _image(result)]


@mcp.tool(name="screenshotRegion")
@_tool_errors("screenshotRegion")
async def screenshot_region(
    x: int,
    y: int,
    width: int,
    height: int,
    format: str = "png",
    quality: Optional[int] = None,
):
    """
    Take a screenshot of a rectangle given in absolute screen pixels.

    Args:
        x: Left edge of the region
        y: Top edge of the region
        width: Width of the region (must be positive)
        height: Height of the region (must be positive)
        format: "png" or "jpg"
        quality: JPEG quality 1-100 (default 90, ignored for PNG)
    """
    controller = _get_controller()
    if quality is None:
        quality = controller.settings.default_quality
    result = await controller.screenshot_region(x, y, width, height, format, quality)
    text = f"Region screenshot ({result.width}x{result.height}px at {result.x},{result.y})"
    return [text, _image(result)]


@mcp.prompt(
    name="focus_and_click",
    title="Focus an application and click inside it",
    description="Focus a window by name or PID, inspect it, then click with window-relative coordinates.",
)
def prompt_focus_and_click(application: str, target: Optional[str] = None) -> str:
    """Prompt template for a focus, look, click sequence."""
    target_text = target or "the control you need"
    return _prompt_text(
        f"""
        Call `listApplications` if you are unsure of the exact name, then `focusApplication("{application}")`.
        Call `screenshot` to see the window and locate {target_text}.
        Convert its position to fractions of the screenshot (0.0-1.0 on each axis) and call `click(x, y)`.
        Take another `screenshot` to confirm the result before continuing.
        """
    )


@mcp.prompt(
    name="capture_focused_window",
    title="Capture the focused window",
    description="Capture the currently focused window and summarize what is visible.",
)
def prompt_capture_focused_window(goal: str, padding: Optional[int] = None) -> str:
    """Prompt template for window capture."""
    padding_hint = f"padding={padding}" if padding is not None else "the default padding"
    return _prompt_text(
        f"""
        Goal: {goal}. Call `screenshot` ({padding_hint}) for the focused window.
        If it fails with "No application focused", call `focusApplication` first.
        List 2-3 observations relevant to the goal and suggest the next action as window-relative coordinates.
        """
    )


def main():
    """Entry point for the MCP server."""
    global _controller

    settings = Settings.from_env()
    configure_logging(settings.log)
    try:
        _controller = build_controller(settings)
    except UnsupportedPlatform as exc:
        logger.error("%s", exc)
        sys.exit(1)

    logger.info("Starting desktop-control MCP server (%s backend)", _controller.platform.value)
    mcp.run()


if __name__ == "__main__":
    main()
