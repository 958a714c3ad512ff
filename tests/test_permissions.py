"""Tests for the per-platform permission gate."""

import pytest

from desktop_control.config import Settings
from desktop_control.errors import BackendExecutionFailure, PermissionDenied
from desktop_control.models import Platform
from desktop_control.permissions import PermissionGate


class ScriptedRunner:
    """Async command runner returning canned output keyed by a substring of the command."""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    async def __call__(self, *argv, timeout=None):
        self.calls.append(argv)
        command = argv[-1]
        for needle, response in self.responses.items():
            if needle in command:
                if isinstance(response, Exception):
                    raise response
                return response
        raise AssertionError(f"unexpected command: {argv}")


class TestMacOS:
    @pytest.mark.asyncio
    async def test_all_granted(self):
        gate = PermissionGate(Platform.MACOS, macos_authorization_check=lambda: (True, True))
        await gate.check()

    @pytest.mark.asyncio
    async def test_screen_recording_missing(self):
        gate = PermissionGate(Platform.MACOS, macos_authorization_check=lambda: (False, True))
        with pytest.raises(PermissionDenied, match="Privacy & Security > Screen Recording"):
            await gate.check()

    @pytest.mark.asyncio
    async def test_accessibility_missing(self):
        gate = PermissionGate(Platform.MACOS, macos_authorization_check=lambda: (True, False))
        with pytest.raises(PermissionDenied, match="Privacy & Security > Accessibility"):
            await gate.check()

    @pytest.mark.asyncio
    async def test_rechecked_every_call(self):
        granted = [True]
        gate = PermissionGate(Platform.MACOS, macos_authorization_check=lambda: (granted[0], True))
        await gate.check()
        granted[0] = False
        with pytest.raises(PermissionDenied):
            await gate.check()


class TestWindows:
    @pytest.mark.asyncio
    async def test_elevated(self):
        runner = ScriptedRunner({"Test-Path": "True\r\n", "Get-Process": "Handles ...\r\n"})
        gate = PermissionGate(Platform.WINDOWS, settings=Settings(powershell="pwsh"), runner=runner)

        await gate.check()

        assert gate.elevated is True
        assert gate.warnings == []
        assert runner.calls[0][:4] == ("pwsh", "-NoProfile", "-NonInteractive", "-Command")

    @pytest.mark.asyncio
    async def test_not_elevated_is_only_a_warning(self):
        runner = ScriptedRunner({"Test-Path": "False", "Get-Process": "ok"})
        gate = PermissionGate(Platform.WINDOWS, runner=runner)

        await gate.check()

        assert gate.elevated is False
        assert any("HKLM" in warning for warning in gate.warnings)

    @pytest.mark.asyncio
    async def test_registry_check_failure_is_not_fatal(self):
        runner = ScriptedRunner({
            "Test-Path": BackendExecutionFailure("powershell.exe exited with status 1"),
            "Get-Process": "ok",
        })
        gate = PermissionGate(Platform.WINDOWS, runner=runner)
        await gate.check()
        assert gate.elevated is False

    @pytest.mark.asyncio
    async def test_powershell_unusable(self):
        runner = ScriptedRunner({
            "Test-Path": "True",
            "Get-Process": BackendExecutionFailure("Cannot execute powershell.exe"),
        })
        gate = PermissionGate(Platform.WINDOWS, runner=runner)
        with pytest.raises(PermissionDenied, match="Windows permissions check failed"):
            await gate.check()


class TestLinux:
    @pytest.mark.asyncio
    async def test_wmctrl_missing(self):
        gate = PermissionGate(Platform.LINUX, which=lambda name: None)
        with pytest.raises(PermissionDenied, match="sudo apt-get install wmctrl"):
            await gate.check()

    @pytest.mark.asyncio
    async def test_x11_session(self, monkeypatch):
        monkeypatch.setenv("DISPLAY", ":0")
        monkeypatch.setenv("XDG_SESSION_TYPE", "x11")
        gate = PermissionGate(Platform.LINUX, which=lambda name: "/usr/bin/" + name)
        await gate.check()
        assert gate.warnings == []

    @pytest.mark.asyncio
    async def test_wayland_warns_but_passes(self, monkeypatch):
        monkeypatch.setenv("DISPLAY", ":0")
        monkeypatch.setenv("XDG_SESSION_TYPE", "wayland")
        gate = PermissionGate(Platform.LINUX, which=lambda name: "/usr/bin/" + name)
        await gate.check()
        assert len(gate.warnings) == 1
        assert "wayland" in gate.warnings[0]

    @pytest.mark.asyncio
    async def test_missing_display_warns(self, monkeypatch):
        monkeypatch.delenv("DISPLAY", raising=False)
        monkeypatch.setenv("XDG_SESSION_TYPE", "x11")
        gate = PermissionGate(Platform.LINUX, which=lambda name: "/usr/bin/" + name)
        await gate.check()
        assert any("DISPLAY" in warning for warning in gate.warnings)
