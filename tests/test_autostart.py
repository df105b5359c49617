import sys

import pytest

from water_reminder import autostart

pytestmark = pytest.mark.skipif(
    sys.platform in ("win32", "darwin"), reason="XDG autostart is used on Linux desktops"
)


@pytest.fixture(autouse=True)
def xdg_home(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    return tmp_path


def test_enable_writes_desktop_entry(xdg_home):
    assert autostart.update_autostart(True) is True

    entry = xdg_home / "autostart" / "WaterReminder.desktop"
    text = entry.read_text(encoding="utf-8")
    assert text.startswith("[Desktop Entry]")
    assert "-m water_reminder" in text
    assert autostart.is_autostart_enabled()


def test_disable_removes_entry_and_tolerates_missing_file(xdg_home):
    autostart.update_autostart(True)

    assert autostart.update_autostart(False) is True
    assert autostart.update_autostart(False) is True
    assert not autostart.is_autostart_enabled()


def test_write_failure_is_reported(xdg_home):
    (xdg_home / "autostart").write_text("not a directory", encoding="utf-8")

    assert autostart.update_autostart(True) is False
