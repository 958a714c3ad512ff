"""Data model shared by the backends, the controller and the MCP tools."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Platform(str, Enum):
    """Host operating system families with a window backend."""
    MACOS = "macos"
    WINDOWS = "windows"
    LINUX = "linux"


class WindowBounds(BaseModel):
    """Window rectangle in absolute screen pixels (logical points on HiDPI displays)."""
    x: int = Field(description="Left edge in absolute screen coordinates")
    y: int = Field(description="Top edge in absolute screen coordinates")
    width: int = Field(ge=0, description="Width in pixels")
    height: int = Field(ge=0, description="Height in pixels")

    @property
    def is_empty(self) -> bool:
        """True for the all-zero placeholder some native APIs return for hidden windows."""
        return self.width == 0 or self.height == 0

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height


class Application(BaseModel):
    """A running application (or, on Linux, one of its top-level windows)."""
    name: str = Field(description="Display name of the application")
    pid: int = Field(description="Process id; 0 when the native tool cannot report it")
    reference: Optional[str] = Field(
        None,
        description="Bundle id (macOS), main window handle (Windows) or X11 window id (Linux)",
    )
    title: Optional[str] = Field(None, description="Main window title when known")
    bounds: Optional[WindowBounds] = Field(None, description="Main window bounds, if measurable")


class FocusedWindow(BaseModel):
    """The single window that click/move/screenshot calls act upon."""
    application: Application
    bounds: Optional[WindowBounds] = Field(None, description="Last known bounds of the window")


class ScreenPoint(BaseModel):
    """Absolute pixel position the pointer is sent to."""
    x: int
    y: int


class CaptureResult(BaseModel):
    """Encoded image plus the rectangle it covers."""
    data: bytes = Field(repr=False)
    width: int
    height: int
    format: str = Field(description="'png' or 'jpeg'")
    x: int = Field(0, description="Left edge of the captured rectangle in screen pixels")
    y: int = Field(0, description="Top edge of the captured rectangle in screen pixels")

    @property
    def mime_type(self) -> str:
        return f"image/{self.format}"
