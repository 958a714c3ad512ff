"""Tests for resolving a caller identifier to an application."""

import pytest

from desktop_control.backends import resolve_application
from desktop_control.errors import ApplicationNotFound, InvalidArgument
from desktop_control.models import Application

from conftest import sample_applications


@pytest.fixture
def apps():
    return sample_applications()


def test_numeric_pid_match(apps):
    assert resolve_application(apps, "123").name == "Safari"


def test_case_insensitive_substring(apps):
    assert resolve_application(apps, "notes").name == "Notes"
    assert resolve_application(apps, "SAF").name == "Safari"


def test_exact_reference(apps):
    assert resolve_application(apps, "com.apple.Safari").pid == 123


def test_not_found(apps):
    with pytest.raises(ApplicationNotFound, match="Application not found: zzz"):
        resolve_application(apps, "zzz")


@pytest.mark.parametrize("identifier", ["", "   ", None])
def test_empty_identifier(apps, identifier):
    with pytest.raises(InvalidArgument):
        resolve_application(apps, identifier)


def test_reference_beats_pid():
    apps = [
        Application(name="Terminal", pid=4242),
        Application(name="Editor", pid=7, reference="4242"),
    ]
    assert resolve_application(apps, "4242").name == "Editor"


def test_pid_beats_name():
    apps = [
        Application(name="app123", pid=1),
        Application(name="Other", pid=123),
    ]
    assert resolve_application(apps, "123").name == "Other"


def test_first_substring_match_wins():
    apps = [
        Application(name="Google Chrome Helper", pid=10),
        Application(name="Google Chrome", pid=11),
    ]
    assert resolve_application(apps, "chrome").pid == 10
