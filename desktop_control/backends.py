"""
Window backends: one implementation per supported platform.

Each backend enumerates applications, brings one to the front, measures its
main window and closes it, by shelling out to the platform's own tooling.
Backends also list individual top-level windows and move or resize them.

- macOS: JavaScript for Automation through ``osascript`` (System Events)
- Windows: PowerShell with a small user32 P/Invoke shim
- Linux: ``wmctrl`` and ``xprop`` on X11, with ``psutil`` for process names

The backend is chosen once at startup by ``create_backend``.
"""

import asyncio
import base64
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import psutil

from .config import Settings
from .errors import ApplicationNotFound, BackendExecutionFailure, InvalidArgument, WindowNotFound
from .models import Application, Platform, WindowBounds
from .shell import run_command


logger = logging.getLogger(__name__)

Runner = Callable[..., Awaitable[str]]


def make_bounds(x: Any, y: Any, width: Any, height: Any) -> Optional[WindowBounds]:
    """Build WindowBounds from native numbers; empty or negative sizes mean unknown."""
    try:
        width = int(round(float(width)))
        height = int(round(float(height)))
        if width <= 0 or height <= 0:
            return None
        return WindowBounds(x=int(round(float(x))), y=int(round(float(y))), width=width, height=height)
    except (TypeError, ValueError):
        return None


def resolve_application(apps: Sequence[Application], identifier: str) -> Application:
    """
    Pick the application ``identifier`` refers to.

    Resolution order, first match wins:
    1. exact match on the native reference (bundle id, window handle, window id)
    2. process id, when the identifier parses as an integer
    3. case-insensitive substring of the display name
    """
    if identifier is None or not str(identifier).strip():
        raise InvalidArgument("identifier is required")
    identifier = str(identifier).strip()

    for app in apps:
        if app.reference is not None and app.reference == identifier:
            return app

    try:
        pid: Optional[int] = int(identifier)
    except ValueError:
        pid = None
    if pid is not None:
        for app in apps:
            if app.pid == pid:
                return app

    needle = identifier.lower()
    for app in apps:
        if needle in app.name.lower():
            return app

    raise ApplicationNotFound(identifier)


def _parse_json(output: str, what: str) -> Any:
    text = output.strip()
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise BackendExecutionFailure(f"Malformed {what} output: {exc}") from exc


def _process_name(pid: int) -> Optional[str]:
    if pid <= 0:
        return None
    try:
        return psutil.Process(pid).name()
    except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
        return None


def _kill_process(pid: int, timeout: float) -> None:
    try:
        proc = psutil.Process(pid)
        proc.kill()
        proc.wait(timeout=timeout)
    except psutil.NoSuchProcess:
        return
    except (psutil.AccessDenied, psutil.TimeoutExpired) as exc:
        raise BackendExecutionFailure(f"Failed to kill process {pid}: {exc}") from exc


class WindowBackend(ABC):
    """Capability interface over one platform's window system."""

    platform: Platform

    def __init__(self, settings: Optional[Settings] = None, runner: Runner = run_command):
        self.settings = settings or Settings()
        self._runner = runner

    async def _run(self, *argv: str) -> str:
        return await self._runner(*argv, timeout=self.settings.command_timeout)

    @abstractmethod
    async def enumerate_applications(self) -> List[Application]:
        """Return running applications; bounds may be filled when cheap to obtain."""

    @abstractmethod
    async def activate(self, app: Application) -> None:
        """Bring ``app``'s main window to the front."""

    @abstractmethod
    async def get_bounds(self, app: Application) -> Optional[WindowBounds]:
        """Measure ``app``'s main window. None means the geometry is unknown."""

    @abstractmethod
    async def close(self, app: Application) -> None:
        """Ask ``app`` to quit or close its main window."""

    @abstractmethod
    async def list_windows(self) -> List[Application]:
        """Return one entry per visible top-level window."""

    @abstractmethod
    async def active_window(self) -> Optional[Application]:
        """Return the window the OS currently considers active, if any."""

    @abstractmethod
    async def set_geometry(
        self,
        app: Application,
        x: Optional[int] = None,
        y: Optional[int] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> None:
        """Move and/or resize ``app``'s window. None leaves that value unchanged."""

    async def list_applications(self) -> List[Application]:
        apps = await self.enumerate_applications()
        for app in apps:
            if app.bounds is not None:
                continue
            try:
                app.bounds = await self.get_bounds(app)
            except BackendExecutionFailure as exc:
                logger.debug("Bounds lookup failed for %s (pid %d): %s", app.name, app.pid, exc)
        return apps

    async def find_application(self, identifier: str) -> Application:
        return resolve_application(await self.enumerate_applications(), identifier)

    async def focus_application(self, identifier: str) -> Application:
        app = await self.find_application(identifier)
        await self.activate(app)
        logger.info("Activated %s (pid %d)", app.name, app.pid)
        return app

    async def find_window(self, title: str) -> Application:
        """First window whose title contains ``title``, ignoring case."""
        if title is None or not str(title).strip():
            raise InvalidArgument("window title is required")
        needle = str(title).strip().lower()
        for window in await self.list_windows():
            if window.title and needle in window.title.lower():
                return window
        raise WindowNotFound(title)

    async def kill(self, app: Application) -> None:
        """Terminate ``app``'s process outright."""
        if app.pid <= 0:
            raise BackendExecutionFailure(f"Cannot force close {app.name}: process id unknown")
        await asyncio.to_thread(_kill_process, app.pid, self.settings.command_timeout)


# ---------------------------------------------------------------------------
# macOS
# ---------------------------------------------------------------------------

_JXA_LIST = """
function run(argv) {
  const se = Application("System Events");
  const procs = se.applicationProcesses.whose({backgroundOnly: false})();
  const out = [];
  for (const p of procs) {
    const item = {name: p.name(), pid: p.unixId(), bundleId: null, title: null, bounds: null};
    try { item.bundleId = p.bundleIdentifier(); } catch (e) {}
    try {
      const wins = p.windows();
      if (wins.length > 0) {
        const pos = wins[0].position();
        const size = wins[0].size();
        item.title = wins[0].name();
        item.bounds = {x: pos[0], y: pos[1], width: size[0], height: size[1]};
      }
    } catch (e) {}
    out.push(item);
  }
  return JSON.stringify(out);
}
"""

_JXA_BOUNDS = """
function run(argv) {
  const se = Application("System Events");
  const procs = se.processes.whose({unixId: parseInt(argv[0], 10)})();
  if (procs.length === 0) { return "null"; }
  const wins = procs[0].windows();
  if (wins.length === 0) { return "null"; }
  const pos = wins[0].position();
  const size = wins[0].size();
  return JSON.stringify({x: pos[0], y: pos[1], width: size[0], height: size[1]});
}
"""

_JXA_ACTIVATE = """
function run(argv) {
  if (argv[1]) {
    Application(argv[1]).activate();
    return "ok";
  }
  const se = Application("System Events");
  const procs = se.processes.whose({unixId: parseInt(argv[0], 10)})();
  if (procs.length === 0) { throw new Error("No process with pid " + argv[0]); }
  procs[0].frontmost = true;
  return "ok";
}
"""

_JXA_QUIT = """
function run(argv) {
  Application(argv[0]).quit();
  return "ok";
}
"""

_JXA_WINDOWS = """
function run(argv) {
  const se = Application("System Events");
  const procs = se.applicationProcesses.whose({backgroundOnly: false})();
  const out = [];
  for (const p of procs) {
    let wins = [];
    try { wins = p.windows(); } catch (e) { continue; }
    let bundleId = null;
    try { bundleId = p.bundleIdentifier(); } catch (e) {}
    for (const w of wins) {
      const item = {name: p.name(), pid: p.unixId(), bundleId: bundleId, title: null, bounds: null};
      try {
        const pos = w.position();
        const size = w.size();
        item.title = w.name();
        item.bounds = {x: pos[0], y: pos[1], width: size[0], height: size[1]};
      } catch (e) {}
      out.push(item);
    }
  }
  return JSON.stringify(out);
}
"""

_JXA_ACTIVE = """
function run(argv) {
  const se = Application("System Events");
  const procs = se.applicationProcesses.whose({frontmost: true})();
  if (procs.length === 0) { return "null"; }
  const p = procs[0];
  const item = {name: p.name(), pid: p.unixId(), bundleId: null, title: null, bounds: null};
  try { item.bundleId = p.bundleIdentifier(); } catch (e) {}
  try {
    const wins = p.windows();
    if (wins.length > 0) {
      const pos = wins[0].position();
      const size = wins[0].size();
      item.title = wins[0].name();
      item.bounds = {x: pos[0], y: pos[1], width: size[0], height: size[1]};
    }
  } catch (e) {}
  return JSON.stringify(item);
}
"""

# argv: pid, window title ("" = first window), x, y, width, height ("" = unchanged)
_JXA_SET_GEOMETRY = """
function run(argv) {
  const se = Application("System Events");
  const procs = se.processes.whose({unixId: parseInt(argv[0], 10)})();
  if (procs.length === 0) { throw new Error("No process with pid " + argv[0]); }
  let wins = procs[0].windows();
  if (argv[1]) { wins = wins.filter(w => w.name() === argv[1]); }
  if (wins.length === 0) { throw new Error("No matching window for pid " + argv[0]); }
  const w = wins[0];
  if (argv[2] !== "" && argv[3] !== "") { w.position = [parseInt(argv[2], 10), parseInt(argv[3], 10)]; }
  if (argv[4] !== "" && argv[5] !== "") { w.size = [parseInt(argv[4], 10), parseInt(argv[5], 10)]; }
  return "ok";
}
"""


def _mac_application(item: Any) -> Application:
    if not isinstance(item, dict):
        raise BackendExecutionFailure(f"Unexpected entry from System Events: {item!r}")
    bounds = item.get("bounds")
    if not isinstance(bounds, dict):
        bounds = {}
    try:
        pid = int(item.get("pid") or 0)
    except (TypeError, ValueError) as exc:
        raise BackendExecutionFailure(f"Unexpected pid from System Events: {item.get('pid')!r}") from exc
    return Application(
        name=str(item.get("name") or ""),
        pid=pid,
        reference=item.get("bundleId") or None,
        title=item.get("title") or None,
        bounds=make_bounds(bounds.get("x"), bounds.get("y"), bounds.get("width"), bounds.get("height")),
    )


def _optional_arg(value: Optional[int]) -> str:
    return "" if value is None else str(int(value))


class MacOSBackend(WindowBackend):
    platform = Platform.MACOS

    async def _jxa(self, script: str, *args: str) -> str:
        return await self._run("osascript", "-l", "JavaScript", "-e", script, *args)

    async def _jxa_list(self, script: str, what: str) -> List[Application]:
        raw = _parse_json(await self._jxa(script), what)
        if not isinstance(raw, list):
            raise BackendExecutionFailure(f"Unexpected {what} from System Events")
        return [_mac_application(item) for item in raw]

    async def enumerate_applications(self) -> List[Application]:
        return await self._jxa_list(_JXA_LIST, "application list")

    async def list_windows(self) -> List[Application]:
        return await self._jxa_list(_JXA_WINDOWS, "window list")

    async def active_window(self) -> Optional[Application]:
        raw = _parse_json(await self._jxa(_JXA_ACTIVE), "active window")
        if raw is None:
            return None
        return _mac_application(raw)

    async def activate(self, app: Application) -> None:
        await self._jxa(_JXA_ACTIVATE, str(app.pid), app.reference or "")

    async def get_bounds(self, app: Application) -> Optional[WindowBounds]:
        raw = _parse_json(await self._jxa(_JXA_BOUNDS, str(app.pid)), "window bounds")
        if not raw:
            return None
        if not isinstance(raw, dict):
            raise BackendExecutionFailure(f"Unexpected window bounds from System Events: {raw!r}")
        return make_bounds(raw.get("x"), raw.get("y"), raw.get("width"), raw.get("height"))

    async def set_geometry(
        self,
        app: Application,
        x: Optional[int] = None,
        y: Optional[int] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> None:
        await self._jxa(
            _JXA_SET_GEOMETRY,
            str(app.pid),
            app.title or "",
            _optional_arg(x),
            _optional_arg(y),
            _optional_arg(width),
            _optional_arg(height),
        )

    async def close(self, app: Application) -> None:
        await self._jxa(_JXA_QUIT, app.reference or app.name)


# ---------------------------------------------------------------------------
# Windows
# ---------------------------------------------------------------------------

_PS_USER32 = """
$ErrorActionPreference = 'Stop'
Add-Type @'
using System;
using System.Collections.Generic;
using System.Runtime.InteropServices;
using System.Text;
public struct DcRect { public int Left; public int Top; public int Right; public int Bottom; }
public delegate bool DcEnumProc(IntPtr hWnd, IntPtr lParam);
public static class DcUser32 {
  [DllImport("user32.dll")] public static extern bool GetWindowRect(IntPtr hWnd, out DcRect rect);
  [DllImport("user32.dll")] public static extern bool SetForegroundWindow(IntPtr hWnd);
  [DllImport("user32.dll")] public static extern bool ShowWindow(IntPtr hWnd, int nCmdShow);
  [DllImport("user32.dll")] public static extern bool IsIconic(IntPtr hWnd);
  [DllImport("user32.dll")] public static extern IntPtr GetForegroundWindow();
  [DllImport("user32.dll")] public static extern uint GetWindowThreadProcessId(IntPtr hWnd, out uint pid);
  [DllImport("user32.dll")] public static extern bool MoveWindow(IntPtr hWnd, int x, int y, int width, int height, bool repaint);
  [DllImport("user32.dll")] public static extern bool EnumWindows(DcEnumProc proc, IntPtr lParam);
  [DllImport("user32.dll")] public static extern bool IsWindowVisible(IntPtr hWnd);
  [DllImport("user32.dll")] public static extern int GetWindowTextLength(IntPtr hWnd);
  [DllImport("user32.dll", CharSet = CharSet.Unicode)] public static extern int GetWindowText(IntPtr hWnd, StringBuilder text, int count);
  public static string Title(IntPtr hWnd) {
    int length = GetWindowTextLength(hWnd);
    if (length == 0) { return ""; }
    StringBuilder text = new StringBuilder(length + 1);
    GetWindowText(hWnd, text, text.Capacity);
    return text.ToString();
  }
  public static int Pid(IntPtr hWnd) {
    uint pid;
    GetWindowThreadProcessId(hWnd, out pid);
    return (int)pid;
  }
  public static List<IntPtr> TopLevel() {
    List<IntPtr> found = new List<IntPtr>();
    EnumWindows((hWnd, lParam) => {
      if (IsWindowVisible(hWnd) && GetWindowTextLength(hWnd) > 0) { found.Add(hWnd); }
      return true;
    }, IntPtr.Zero);
    return found;
  }
}
'@
function Describe-Window([IntPtr]$hwnd) {
  $procId = [DcUser32]::Pid($hwnd)
  $name = ''
  $proc = Get-Process -Id $procId -ErrorAction SilentlyContinue
  if ($proc) { $name = $proc.ProcessName }
  $rect = New-Object DcRect
  $measured = [DcUser32]::GetWindowRect($hwnd, [ref]$rect)
  [pscustomobject]@{
    Name = $name
    PID = $procId
    Title = [DcUser32]::Title($hwnd)
    Handle = [int64]$hwnd
    Measured = $measured
    Iconic = [DcUser32]::IsIconic($hwnd)
    Left = $rect.Left
    Top = $rect.Top
    Right = $rect.Right
    Bottom = $rect.Bottom
  }
}
"""

_PS_LIST = _PS_USER32 + """
@(Get-Process | Where-Object { $_.MainWindowHandle -ne 0 -and $_.MainWindowTitle } | ForEach-Object {
  $rect = New-Object DcRect
  $measured = [DcUser32]::GetWindowRect($_.MainWindowHandle, [ref]$rect)
  [pscustomobject]@{
    Name = $_.ProcessName
    PID = $_.Id
    Title = $_.MainWindowTitle
    Handle = [int64]$_.MainWindowHandle
    Measured = $measured
    Iconic = [DcUser32]::IsIconic($_.MainWindowHandle)
    Left = $rect.Left
    Top = $rect.Top
    Right = $rect.Right
    Bottom = $rect.Bottom
  }
}) | ConvertTo-Json -Depth 2 -Compress
"""

_PS_WINDOWS = _PS_USER32 + """
@([DcUser32]::TopLevel() | ForEach-Object { Describe-Window $_ }) | ConvertTo-Json -Depth 2 -Compress
"""

_PS_ACTIVE = _PS_USER32 + """
$hwnd = [DcUser32]::GetForegroundWindow()
if ($hwnd -eq [IntPtr]::Zero) { 'null' }
else { Describe-Window $hwnd | ConvertTo-Json -Depth 2 -Compress }
"""

_PS_BOUNDS = _PS_USER32 + """
$hwnd = [IntPtr][int64]__HWND__
$rect = New-Object DcRect
if ([DcUser32]::IsIconic($hwnd) -or -not [DcUser32]::GetWindowRect($hwnd, [ref]$rect)) { 'null' }
else { [pscustomobject]@{ Left = $rect.Left; Top = $rect.Top; Right = $rect.Right; Bottom = $rect.Bottom } | ConvertTo-Json -Compress }
"""

_PS_ACTIVATE = _PS_USER32 + """
$hwnd = [IntPtr][int64]__HWND__
if ([DcUser32]::IsIconic($hwnd)) { [void][DcUser32]::ShowWindow($hwnd, 9) }
[DcUser32]::SetForegroundWindow($hwnd)
"""

# $null placeholders keep the current value
_PS_GEOMETRY = _PS_USER32 + """
$hwnd = [IntPtr][int64]__HWND__
$rect = New-Object DcRect
if (-not [DcUser32]::GetWindowRect($hwnd, [ref]$rect)) { throw 'GetWindowRect failed' }
$left = __X__
$top = __Y__
$width = __W__
$height = __H__
if ($null -eq $left) { $left = $rect.Left }
if ($null -eq $top) { $top = $rect.Top }
if ($null -eq $width) { $width = $rect.Right - $rect.Left }
if ($null -eq $height) { $height = $rect.Bottom - $rect.Top }
if ([DcUser32]::IsIconic($hwnd)) { [void][DcUser32]::ShowWindow($hwnd, 9) }
[DcUser32]::MoveWindow($hwnd, $left, $top, $width, $height, $true)
"""

_PS_CLOSE = """
$ErrorActionPreference = 'Stop'
(Get-Process -Id __PID__).CloseMainWindow()
"""


def _rect_bounds(item: Dict[str, Any]) -> Optional[WindowBounds]:
    left, top = item.get("Left"), item.get("Top")
    right, bottom = item.get("Right"), item.get("Bottom")
    if None in (left, top, right, bottom):
        return None
    return make_bounds(left, top, int(right) - int(left), int(bottom) - int(top))


def _windows_application(item: Any) -> Application:
    if not isinstance(item, dict):
        raise BackendExecutionFailure(f"Unexpected entry from PowerShell: {item!r}")
    bounds = None
    if item.get("Measured") and not item.get("Iconic"):
        bounds = _rect_bounds(item)
    try:
        pid = int(item.get("PID") or 0)
    except (TypeError, ValueError) as exc:
        raise BackendExecutionFailure(f"Unexpected pid from PowerShell: {item.get('PID')!r}") from exc
    return Application(
        name=str(item.get("Name") or ""),
        pid=pid,
        reference=str(item["Handle"]) if item.get("Handle") else None,
        title=item.get("Title") or None,
        bounds=bounds,
    )


def _ps_optional(value: Optional[int]) -> str:
    return "$null" if value is None else str(int(value))


class WindowsBackend(WindowBackend):
    platform = Platform.WINDOWS

    async def _powershell(self, script: str) -> str:
        # -EncodedCommand sidesteps command-line quoting of the embedded C# and quotes
        encoded = base64.b64encode(script.encode("utf-16-le")).decode("ascii")
        return await self._run(
            self.settings.powershell, "-NoProfile", "-NonInteractive", "-EncodedCommand", encoded
        )

    @staticmethod
    def _handle(app: Application) -> int:
        try:
            return int(app.reference or "")
        except ValueError as exc:
            raise BackendExecutionFailure(f"{app.name} has no main window handle") from exc

    async def _window_list(self, script: str, what: str) -> List[Application]:
        raw = _parse_json(await self._powershell(script), what)
        if raw is None:
            return []
        # ConvertTo-Json emits a bare object for a single result
        if isinstance(raw, dict):
            raw = [raw]
        if not isinstance(raw, list):
            raise BackendExecutionFailure(f"Unexpected {what} output from PowerShell")
        return [_windows_application(item) for item in raw]

    async def enumerate_applications(self) -> List[Application]:
        return await self._window_list(_PS_LIST, "Get-Process")

    async def list_windows(self) -> List[Application]:
        return await self._window_list(_PS_WINDOWS, "EnumWindows")

    async def active_window(self) -> Optional[Application]:
        raw = _parse_json(await self._powershell(_PS_ACTIVE), "GetForegroundWindow")
        if raw is None:
            return None
        return _windows_application(raw)

    async def activate(self, app: Application) -> None:
        script = _PS_ACTIVATE.replace("__HWND__", str(self._handle(app)))
        if (await self._powershell(script)).strip().lower() != "true":
            raise BackendExecutionFailure(f"SetForegroundWindow refused to focus {app.name}")

    async def get_bounds(self, app: Application) -> Optional[WindowBounds]:
        if not app.reference:
            return None
        script = _PS_BOUNDS.replace("__HWND__", str(self._handle(app)))
        raw = _parse_json(await self._powershell(script), "GetWindowRect")
        if not raw:
            return None
        if not isinstance(raw, dict):
            raise BackendExecutionFailure(f"Unexpected GetWindowRect output: {raw!r}")
        return _rect_bounds(raw)

    async def set_geometry(
        self,
        app: Application,
        x: Optional[int] = None,
        y: Optional[int] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> None:
        script = (
            _PS_GEOMETRY.replace("__HWND__", str(self._handle(app)))
            .replace("__X__", _ps_optional(x))
            .replace("__Y__", _ps_optional(y))
            .replace("__W__", _ps_optional(width))
            .replace("__H__", _ps_optional(height))
        )
        if (await self._powershell(script)).strip().lower() != "true":
            raise BackendExecutionFailure(f"MoveWindow failed for {app.name}")

    async def close(self, app: Application) -> None:
        out = await self._powershell(_PS_CLOSE.replace("__PID__", str(int(app.pid))))
        if out.strip().lower() != "true":
            raise BackendExecutionFailure(f"{app.name} did not accept the close request")


# ---------------------------------------------------------------------------
# Linux (X11)
# ---------------------------------------------------------------------------

def parse_wmctrl(output: str) -> List[Application]:
    """Parse ``wmctrl -lpG``: id, desktop, pid, x, y, width, height, host, title."""
    apps = []
    for line in output.splitlines():
        parts = line.split(None, 8)
        if len(parts) < 8:
            continue
        window_id, desktop, pid_text = parts[0], parts[1], parts[2]
        # Sticky windows (desktop -1) are panels, docks and the desktop itself
        if desktop == "-1":
            continue
        try:
            pid = int(pid_text)
        except ValueError:
            pid = 0
        title = parts[8].strip() if len(parts) > 8 else ""
        apps.append(
            Application(
                name=_process_name(pid) or title or window_id,
                pid=pid,
                reference=window_id,
                title=title or None,
                bounds=make_bounds(parts[3], parts[4], parts[5], parts[6]),
            )
        )
    return apps


def parse_active_window(output: str) -> Optional[int]:
    """Parse ``xprop -root _NET_ACTIVE_WINDOW`` into a window id, or None when nothing is active."""
    token = output.strip().split()[-1] if output.strip() else ""
    try:
        window_id = int(token, 16)
    except ValueError:
        return None
    return window_id or None


class LinuxBackend(WindowBackend):
    platform = Platform.LINUX

    async def enumerate_applications(self) -> List[Application]:
        return parse_wmctrl(await self._run("wmctrl", "-lpG"))

    async def list_windows(self) -> List[Application]:
        return await self.enumerate_applications()

    async def active_window(self) -> Optional[Application]:
        window_id = parse_active_window(await self._run("xprop", "-root", "_NET_ACTIVE_WINDOW"))
        if window_id is None:
            return None
        for window in await self.enumerate_applications():
            try:
                if int(window.reference or "", 16) == window_id:
                    return window
            except ValueError:
                continue
        return None

    async def activate(self, app: Application) -> None:
        if app.reference:
            await self._run("wmctrl", "-i", "-a", app.reference)
        else:
            await self._run("wmctrl", "-a", app.name)

    async def get_bounds(self, app: Application) -> Optional[WindowBounds]:
        windows = await self.enumerate_applications()
        # A window id pins one window; the pid only identifies it when no id is known
        if app.reference:
            for window in windows:
                if window.reference == app.reference:
                    return window.bounds
            return None
        for window in windows:
            if app.pid > 0 and window.pid == app.pid:
                return window.bounds
        return None

    async def set_geometry(
        self,
        app: Application,
        x: Optional[int] = None,
        y: Optional[int] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> None:
        if not app.reference:
            raise BackendExecutionFailure(f"{app.name} has no X11 window id")
        # gravity 0 keeps the window's own gravity; -1 leaves a value unchanged
        values = [-1 if value is None else int(value) for value in (x, y, width, height)]
        await self._run("wmctrl", "-i", "-r", app.reference, "-e", ",".join(map(str, [0] + values)))

    async def close(self, app: Application) -> None:
        if not app.reference:
            raise BackendExecutionFailure(f"{app.name} has no X11 window id")
        await self._run("wmctrl", "-i", "-c", app.reference)


_BACKENDS = {
    Platform.MACOS: MacOSBackend,
    Platform.WINDOWS: WindowsBackend,
    Platform.LINUX: LinuxBackend,
}


def create_backend(
    platform: Platform, settings: Optional[Settings] = None, runner: Runner = run_command
) -> WindowBackend:
    return _BACKENDS[platform](settings=settings, runner=runner)
