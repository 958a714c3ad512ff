"""
Per-platform precondition checks run before every interaction call.

The gate fails closed: any missing privilege raises PermissionDenied with the
remediation path, and nothing is cached between calls, so a privilege revoked
while the server runs is noticed on the next request.
"""

import asyncio
import logging
import os
import shutil
from typing import Awaitable, Callable, List, Optional, Tuple

from .config import Settings
from .errors import BackendExecutionFailure, PermissionDenied
from .models import Platform
from .shell import run_command


logger = logging.getLogger(__name__)

Runner = Callable[..., Awaitable[str]]

_SCREEN_RECORDING_HINT = (
    "Screen Recording permission is required. Please grant permission in "
    "System Settings > Privacy & Security > Screen Recording."
)
_ACCESSIBILITY_HINT = (
    "Accessibility permission is required. Please grant permission in "
    "System Settings > Privacy & Security > Accessibility."
)
_WMCTRL_HINT = "Linux requires wmctrl. Install with: sudo apt-get install wmctrl"


def _macos_authorization() -> Tuple[bool, bool]:
    """Return (screen_recording, accessibility) authorization flags."""
    try:
        import Quartz  # type: ignore
        from ApplicationServices import AXIsProcessTrusted  # type: ignore
    except ImportError as exc:
        raise PermissionDenied(
            "Cannot verify macOS privileges because pyobjc is unavailable. Install with: "
            "pip install pyobjc-framework-Quartz pyobjc-framework-ApplicationServices"
        ) from exc

    return bool(Quartz.CGPreflightScreenCaptureAccess()), bool(AXIsProcessTrusted())


def _safe_display_server() -> str:
    """Return the display server name with a sane default."""
    return os.environ.get("XDG_SESSION_TYPE", "unknown").lower()


class PermissionGate:
    """Verify the host grants what window control and capture need."""

    def __init__(
        self,
        platform: Platform,
        settings: Optional[Settings] = None,
        runner: Runner = run_command,
        which: Callable[[str], Optional[str]] = shutil.which,
        macos_authorization_check: Callable[[], Tuple[bool, bool]] = _macos_authorization,
    ):
        self.platform = platform
        self.settings = settings or Settings()
        self._run = runner
        self._which = which
        self._macos_authorization_check = macos_authorization_check
        # Windows only: whether HKLM is readable. Informational, never fatal.
        self.elevated: Optional[bool] = None
        self.warnings: List[str] = []

    async def check(self) -> None:
        """Raise PermissionDenied unless the current platform's preconditions hold."""
        if self.platform is Platform.MACOS:
            await self._check_macos()
        elif self.platform is Platform.WINDOWS:
            await self._check_windows()
        else:
            await self._check_linux()

    async def _check_macos(self) -> None:
        screen_recording, accessibility = await asyncio.to_thread(self._macos_authorization_check)
        if not screen_recording:
            raise PermissionDenied(_SCREEN_RECORDING_HINT)
        if not accessibility:
            raise PermissionDenied(_ACCESSIBILITY_HINT)

    async def _check_windows(self) -> None:
        powershell = self.settings.powershell
        timeout = self.settings.command_timeout
        warnings: List[str] = []

        try:
            out = await self._run(
                powershell, "-NoProfile", "-NonInteractive", "-Command",
                "Test-Path 'HKLM:\\SOFTWARE'",
                timeout=timeout,
            )
            self.elevated = out.strip().lower() == "true"
        except BackendExecutionFailure as exc:
            self.elevated = False
            warnings.append(f"Registry access check failed: {exc}")

        if not self.elevated:
            warnings.append(
                "HKLM is not accessible; windows of elevated processes may not accept focus or input."
            )

        try:
            await self._run(
                powershell, "-NoProfile", "-NonInteractive", "-Command",
                "Get-Process | Select-Object -First 1",
                timeout=timeout,
            )
        except BackendExecutionFailure as exc:
            raise PermissionDenied(
                "Windows permissions check failed. Make sure you have access to run PowerShell commands."
            ) from exc

        self._record_warnings(warnings)

    async def _check_linux(self) -> None:
        if not self._which("wmctrl"):
            raise PermissionDenied(_WMCTRL_HINT)

        warnings: List[str] = []
        display_server = _safe_display_server()
        if display_server == "wayland":
            warnings.append(
                "Display server is 'wayland'. wmctrl and PyAutoGUI need X11 (or XWayland) windows."
            )
        if not os.environ.get("DISPLAY"):
            warnings.append("DISPLAY is not set; X11 window control will fail.")
        self._record_warnings(warnings)

    def _record_warnings(self, warnings: List[str]) -> None:
        # Log only when the set changes so polling clients do not flood stderr
        if warnings != self.warnings:
            for warning in warnings:
                logger.warning(warning)
        self.warnings = warnings
