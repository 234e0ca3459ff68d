"""Pytest fixtures for sticky_checklist tests."""

from datetime import datetime, timedelta

import pytest

from sticky_checklist.config import AppConfig
from sticky_checklist.geometry import ScreenBounds
from sticky_checklist.manager import NoteManager, WindowLayer
from sticky_checklist.store import NoteStore


class FakeClock:
    """Clock that moves one second forward on every call."""

    def __init__(self, start=datetime(2024, 1, 1, 12, 0, 0)):
        self.now = start

    def __call__(self):
        current = self.now
        self.now += timedelta(seconds=1)
        return current


class FakeWindow:
    def __init__(self, note):
        self.note_id = note.id
        self.visible = True
        self.closed = False
        self.maximized = False
        self.geometry = (note.x, note.y, note.width, note.height)


class RecordingWindowLayer(WindowLayer):
    """Window layer that keeps fake windows and logs every request."""

    def __init__(self, bounds=ScreenBounds(0, 0, 1920, 1080)):
        self.bounds = bounds
        self.calls = []
        self.created = []

    def create_window(self, note):
        window = FakeWindow(note)
        self.created.append(window)
        self.calls.append(("create", note.id))
        return window

    def show_window(self, handle):
        handle.visible = True
        self.calls.append(("show", handle.note_id))

    def hide_window(self, handle):
        handle.visible = False
        self.calls.append(("hide", handle.note_id))

    def close_window(self, handle):
        handle.closed = True
        handle.visible = False
        self.calls.append(("close", handle.note_id))

    def set_window_geometry(self, handle, x, y, width, height):
        handle.geometry = (x, y, width, height)
        self.calls.append(("geometry", handle.note_id))

    def restore_window(self, handle):
        handle.maximized = False
        self.calls.append(("restore", handle.note_id))

    def screen_bounds(self):
        return self.bounds


@pytest.fixture
def config(tmp_path):
    """Provide a config rooted in a temporary data directory."""
    return AppConfig(data_dir=tmp_path / "data")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(config, clock):
    """Provide a store whose backups get distinct timestamps."""
    return NoteStore(config, clock=clock)


@pytest.fixture
def windows():
    return RecordingWindowLayer()


@pytest.fixture
def manager(store, windows):
    return NoteManager(store, windows)
