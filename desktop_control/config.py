"""
Runtime configuration for the desktop control server.

Defaults live on the dataclasses below; ``Settings.from_env()`` applies the
``DESKTOP_CONTROL_*`` environment overrides used when the server is launched
by an MCP client.
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Callable, TypeVar


logger = logging.getLogger(__name__)

_ENV_PREFIX = "DESKTOP_CONTROL_"

T = TypeVar("T")


def _env(name: str, default: T, cast: Callable[[str], T]) -> T:
    """Read ``DESKTOP_CONTROL_<name>`` and cast it, keeping the default on bad input."""
    raw = os.environ.get(_ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        logger.warning("Ignoring %s%s=%r: expected %s", _ENV_PREFIX, name, raw, cast.__name__)
        return default


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class Settings:
    """Master configuration for the engine and the MCP surface."""
    # Window geometry is re-queried from the OS once a cache entry is older than this
    bounds_ttl_ms: int = 5000

    # Upper bound for any single native subprocess (osascript, powershell, wmctrl)
    command_timeout: float = 10.0

    default_padding: int = 10
    default_quality: int = 90

    powershell: str = "powershell.exe"

    log: LogConfig = field(default_factory=LogConfig)

    @property
    def bounds_ttl(self) -> float:
        """TTL in seconds, matching the monotonic clock used by the cache."""
        return self.bounds_ttl_ms / 1000.0

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            bounds_ttl_ms=_env("BOUNDS_TTL_MS", defaults.bounds_ttl_ms, int),
            command_timeout=_env("COMMAND_TIMEOUT", defaults.command_timeout, float),
            powershell=_env("POWERSHELL", defaults.powershell, str),
            log=LogConfig(level=_env("LOG_LEVEL", defaults.log.level, str).upper()),
        )


def configure_logging(log_config: LogConfig) -> None:
    """Send log records to stderr; stdout is reserved for the MCP stream."""
    logging.basicConfig(
        level=getattr(logging, log_config.level, logging.INFO),
        format=log_config.format,
        stream=sys.stderr,
    )
