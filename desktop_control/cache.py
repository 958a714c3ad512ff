"""Time-to-live cache for window bounds, keyed by process id and window reference."""

import logging
import time
from typing import Callable, Dict, Optional, Tuple

from .models import WindowBounds


logger = logging.getLogger(__name__)

Key = Tuple[int, str]


def _key(pid: int, reference: Optional[str]) -> Key:
    return pid, reference or ""


class BoundsCache:
    """
    Remember the last successful geometry query per window for ``ttl`` seconds.

    A window is identified by its pid plus its native reference (bundle id,
    window handle or X11 window id), since one process can own several
    top-level windows. Entries are only written after a successful backend
    query, so a failed refresh never disturbs a previous value. Callers that
    want a stale-but-known value after expiry use ``peek``.
    """

    def __init__(self, ttl: float = 5.0, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[Key, Tuple[WindowBounds, float]] = {}

    def get(
        self, pid: int, reference: Optional[str] = None, now: Optional[float] = None
    ) -> Optional[WindowBounds]:
        """Return cached bounds if the entry is younger than the TTL."""
        entry = self._entries.get(_key(pid, reference))
        if entry is None:
            return None
        bounds, stamp = entry
        now = self._clock() if now is None else now
        if now - stamp < self.ttl:
            return bounds
        return None

    def peek(self, pid: int, reference: Optional[str] = None) -> Optional[WindowBounds]:
        """Return the last stored bounds regardless of age."""
        entry = self._entries.get(_key(pid, reference))
        return entry[0] if entry else None

    def put(
        self,
        pid: int,
        bounds: WindowBounds,
        reference: Optional[str] = None,
        now: Optional[float] = None,
    ) -> None:
        # pid 0 means "unknown process"; caching it would alias unrelated windows
        if pid <= 0:
            return
        self._entries[_key(pid, reference)] = (bounds, self._clock() if now is None else now)
        logger.debug("Cached bounds for pid %d (%s): %s", pid, reference, bounds)

    def invalidate(self, pid: int, reference: Optional[str] = None) -> None:
        """Drop one window's entry, or every entry of ``pid`` when no reference is given."""
        if reference is not None:
            self._entries.pop(_key(pid, reference), None)
            return
        for key in [key for key in self._entries if key[0] == pid]:
            del self._entries[key]

    def invalidate_all(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, pid: object) -> bool:
        return any(key[0] == pid for key in self._entries)
