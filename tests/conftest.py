"""Pytest configuration and shared fixtures."""

import os
import sys
from typing import Dict, List, Optional
from unittest.mock import Mock

import pytest
from PIL import Image

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from desktop_control.backends import WindowBackend
from desktop_control.cache import BoundsCache
from desktop_control.capture import Raster, ScreenCapture
from desktop_control.config import Settings
from desktop_control.controller import InteractionController
from desktop_control.errors import PermissionDenied
from desktop_control.models import Application, Platform, WindowBounds


SAFARI_BOUNDS = WindowBounds(x=100, y=50, width=800, height=600)
NOTES_BOUNDS = WindowBounds(x=0, y=0, width=400, height=300)


def sample_applications() -> List[Application]:
    return [
        Application(name="Safari", pid=123, reference="com.apple.Safari"),
        Application(name="Notes", pid=456),
    ]


class FakeBackend(WindowBackend):
    """In-memory backend that records every native call it would have made."""

    platform = Platform.MACOS

    def __init__(self, apps: Optional[List[Application]] = None, bounds: Optional[Dict] = None):
        super().__init__()
        self.apps = apps if apps is not None else sample_applications()
        # pid -> WindowBounds, None, or an exception to raise
        self.bounds = bounds if bounds is not None else {123: SAFARI_BOUNDS, 456: NOTES_BOUNDS}
        self.calls: List[tuple] = []
        self.windows: Optional[List[Application]] = None
        self.active: Optional[Application] = None

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    async def enumerate_applications(self) -> List[Application]:
        self.calls.append(("enumerate",))
        return [app.model_copy(deep=True) for app in self.apps]

    async def activate(self, app: Application) -> None:
        self.calls.append(("activate", app.pid))

    async def get_bounds(self, app: Application) -> Optional[WindowBounds]:
        self.calls.append(("get_bounds", app.pid))
        value = self.bounds.get(app.pid)
        if isinstance(value, Exception):
            raise value
        return value

    async def list_windows(self) -> List[Application]:
        self.calls.append(("list_windows",))
        windows = self.windows if self.windows is not None else self.apps
        return [window.model_copy(deep=True) for window in windows]

    async def active_window(self) -> Optional[Application]:
        self.calls.append(("active_window",))
        return self.active.model_copy(deep=True) if self.active is not None else None

    async def set_geometry(self, app, x=None, y=None, width=None, height=None) -> None:
        self.calls.append(("set_geometry", app.pid, app.title, x, y, width, height))
        current = self.bounds.get(app.pid)
        if isinstance(current, WindowBounds):
            self.bounds[app.pid] = WindowBounds(
                x=current.x if x is None else x,
                y=current.y if y is None else y,
                width=current.width if width is None else width,
                height=current.height if height is None else height,
            )

    async def close(self, app: Application) -> None:
        self.calls.append(("close", app.pid))

    async def kill(self, app: Application) -> None:
        self.calls.append(("kill", app.pid))


class RecordingRunner:
    """Async runner returning queued outputs and recording argv."""

    def __init__(self, *outputs):
        self.outputs = list(outputs)
        self.calls = []

    async def __call__(self, *argv, timeout=None):
        self.calls.append(argv)
        output = self.outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return output


class AllowGate:
    """Permission gate that always passes and counts how often it was asked."""

    def __init__(self):
        self.checks = 0

    async def check(self) -> None:
        self.checks += 1


class DenyGate:
    async def check(self) -> None:
        raise PermissionDenied(
            "Screen Recording permission is required. Please grant permission in "
            "System Settings > Privacy & Security > Screen Recording."
        )


class FakeClock:
    """Deterministic monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def mock_pyautogui():
    """Mock PyAutoGUI to avoid display dependencies."""
    mock_pag = Mock()
    mock_pag.size.return_value = (1920, 1080)
    mock_pag.position.return_value = (960, 540)
    mock_pag.screenshot.return_value = Image.new('RGB', (1920, 1080), color='white')

    # Inject into the module's lazy loader
    import desktop_control.pointer as pointer
    pointer._pyautogui = mock_pag
    pointer._pyautogui_error = None

    yield mock_pag

    pointer._pyautogui = None
    pointer._pyautogui_error = None


@pytest.fixture
def sample_screenshot():
    """Create a sample screenshot image for testing."""
    return Image.new('RGB', (1920, 1080), color='white')


@pytest.fixture
def raster(sample_screenshot):
    return Raster(sample_screenshot)


@pytest.fixture
def capture(raster):
    return ScreenCapture(grabber=lambda: raster)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def gate():
    return AllowGate()


@pytest.fixture
def controller(backend, gate, clock, capture):
    return InteractionController(
        backend=backend,
        gate=gate,
        cache=BoundsCache(ttl=5.0, clock=clock),
        capture=capture,
        settings=Settings(),
    )


@pytest.fixture
def server_controller(controller):
    """Install ``controller`` as the MCP server's process-wide controller."""
    import desktop_control.server as server
    server._controller = controller
    server._dispatch_lock = None

    yield controller

    server._controller = None
    server._dispatch_lock = None
