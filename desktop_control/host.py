"""Host platform detection, resolved once when the server starts."""

import sys
from typing import Optional

from .errors import UnsupportedPlatform
from .models import Platform


_SYS_PLATFORMS = {
    "darwin": Platform.MACOS,
    "win32": Platform.WINDOWS,
    "cygwin": Platform.WINDOWS,
    "linux": Platform.LINUX,
}


def detect_platform(system: Optional[str] = None) -> Platform:
    """Map ``sys.platform`` (or an explicit value) to a supported Platform.

    Raises UnsupportedPlatform for anything else; callers treat that as fatal.
    """
    system = system if system is not None else sys.platform
    for prefix, platform in _SYS_PLATFORMS.items():
        if system.startswith(prefix):
            return platform
    raise UnsupportedPlatform(system)
