"""Native mouse dispatch through PyAutoGUI."""

import logging
from typing import Optional

from .errors import BackendExecutionFailure
from .models import ScreenPoint


logger = logging.getLogger(__name__)

# pyautogui tries to connect to the display at import time. On headless systems
# or when permissions are restricted, that import can raise before the MCP
# server finishes initializing. We lazily import it on first use instead so
# the server can start and report a clear error to the caller.
_pyautogui = None
_pyautogui_error: Optional[str] = None


def _get_pyautogui():
    """Load pyautogui lazily and capture any import/display errors."""
    global _pyautogui, _pyautogui_error

    if _pyautogui or _pyautogui_error:
        return _pyautogui

    try:
        import pyautogui as _pyautogui_module

        _pyautogui = _pyautogui_module
        return _pyautogui
    except Exception as exc:  # noqa: BLE001 - surface any startup issue
        _pyautogui_error = (
            "PyAutoGUI unavailable. Ensure a desktop session is accessible: "
            f"{exc}"
        )
        return None


def require_pyautogui():
    pyautogui = _get_pyautogui()
    if pyautogui is None:
        raise BackendExecutionFailure(_pyautogui_error or "PyAutoGUI not installed")
    return pyautogui


def move_to(point: ScreenPoint, duration: float = 0.0) -> None:
    logger.debug("Moving pointer to (%d, %d)", point.x, point.y)
    require_pyautogui().moveTo(point.x, point.y, duration=duration)


def click(point: ScreenPoint, button: str) -> None:
    pyautogui = require_pyautogui()
    pyautogui.moveTo(point.x, point.y, duration=0.0)
    pyautogui.click(button=button)


def drag(start: ScreenPoint, end: ScreenPoint, button: str, duration: float) -> None:
    pyautogui = require_pyautogui()
    pyautogui.moveTo(start.x, start.y, duration=0.0)
    pyautogui.dragTo(end.x, end.y, duration=duration, button=button)


def scroll(point: ScreenPoint, direction: str, amount: int) -> None:
    pyautogui = require_pyautogui()
    pyautogui.moveTo(point.x, point.y, duration=0.0)
    if direction == "up":
        pyautogui.scroll(amount, x=point.x, y=point.y)
    elif direction == "down":
        pyautogui.scroll(-amount, x=point.x, y=point.y)
    elif direction == "left":
        pyautogui.hscroll(-amount, x=point.x, y=point.y)
    else:
        pyautogui.hscroll(amount, x=point.x, y=point.y)
