import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6 import QtWidgets  # noqa: E402

from water_reminder.service import ReminderService  # noqa: E402
from water_reminder.storage import SettingsStore  # noqa: E402

START = 1_700_000_000_000


class FakeClock:
    def __init__(self, now: int = START) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class RecordingNotifier:
    def __init__(self, available: bool = True) -> None:
        self.available = available
        self.shown = []

    def show(self, title: str, body: str) -> bool:
        if not self.available:
            return False
        self.shown.append((title, body))
        return True


class RecordingAutostart:
    def __init__(self, enabled: bool = False) -> None:
        self.enabled = enabled
        self.calls = []

    def __call__(self, enabled: bool) -> bool:
        self.calls.append(enabled)
        self.enabled = enabled
        return True

    def is_enabled(self) -> bool:
        return self.enabled


@pytest.fixture(scope="session")
def qapp():
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    app.setQuitOnLastWindowClosed(False)
    yield app


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def silent_notifier():
    return RecordingNotifier(available=False)


@pytest.fixture
def autostart():
    return RecordingAutostart()


@pytest.fixture
def store(tmp_path):
    return SettingsStore(tmp_path / "settings.json")


@pytest.fixture
def service(qapp, store, notifier, clock, autostart):
    service = ReminderService(store, notifier, clock=clock, autostart=autostart,
                              autostart_state=autostart.is_enabled)
    yield service
    service.stop()
