"""Error taxonomy for the desktop control engine.

Components raise these; only the MCP tool wrapper in ``server.py`` turns
them into protocol error results.
"""

from typing import Iterable, Optional


class DesktopControlError(Exception):
    """Base class for every failure the engine reports to callers."""


class UnsupportedPlatform(DesktopControlError):
    """The host operating system has no window backend."""

    def __init__(self, system: str):
        super().__init__(f"Unsupported platform: {system}")
        self.system = system


class PermissionDenied(DesktopControlError):
    """A platform precondition failed; the message carries remediation text."""


class ApplicationNotFound(DesktopControlError):
    def __init__(self, identifier: str):
        super().__init__(f"Application not found: {identifier}")
        self.identifier = identifier


class WindowNotFound(DesktopControlError):
    def __init__(self, title: str):
        super().__init__(f'Window with title containing "{title}" not found')
        self.title = title


class NoWindowFocused(DesktopControlError):
    def __init__(self) -> None:
        super().__init__("No application focused. Use focusApplication first.")


class BackendExecutionFailure(DesktopControlError):
    """A native command failed, timed out, or produced unusable output."""

    def __init__(self, message: str, stderr: Optional[str] = None):
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)
        self.stderr = stderr


class InvalidArgument(DesktopControlError, ValueError):
    """A caller-supplied argument is outside its accepted domain."""


def _choices(valid: Iterable[str]) -> str:
    return ", ".join(sorted(valid))


class InvalidButton(InvalidArgument):
    def __init__(self, button: str, valid: Iterable[str]):
        super().__init__(f"Invalid button: {button}. Must be one of: {_choices(valid)}")
        self.button = button


class InvalidDirection(InvalidArgument):
    def __init__(self, direction: str, valid: Iterable[str]):
        super().__init__(
            f"Invalid scroll direction: {direction}. Must be one of: {_choices(valid)}"
        )
        self.direction = direction


class InvalidCoordinate(InvalidArgument):
    pass


class InvalidRegion(InvalidArgument):
    pass


class InvalidFormat(InvalidArgument):
    def __init__(self, image_format: str, valid: Iterable[str]):
        super().__init__(
            f"Invalid image format: {image_format}. Must be one of: {_choices(valid)}"
        )
        self.image_format = image_format
