"""Open-at-login registration for Windows, Linux (XDG) and macOS."""

from __future__ import annotations

import logging
import os
import plistlib
import shlex
import sys
from pathlib import Path
from typing import List

from . import APP_NAME, DISPLAY_NAME

if sys.platform == "win32":
    import winreg

logger = logging.getLogger(__name__)


RUN_REGISTRY_PATH = r"Software\Microsoft\Windows\CurrentVersion\Run"
LAUNCH_AGENT_LABEL = "com.waterreminder.app"


def get_launch_arguments() -> List[str]:
    if getattr(sys, "frozen", False):
        return [str(Path(sys.executable).resolve())]
    return [str(Path(sys.executable).resolve()), "-m", "water_reminder"]


def get_launch_command() -> str:
    return " ".join(f'"{arg}"' for arg in get_launch_arguments())


def xdg_autostart_file() -> Path:
    config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(config_home) / "autostart" / f"{APP_NAME}.desktop"


def launch_agent_file() -> Path:
    return Path.home() / "Library" / "LaunchAgents" / f"{LAUNCH_AGENT_LABEL}.plist"


# ===== Windows ==============================================================


def _windows_is_enabled() -> bool:
    command = get_launch_command()
    try:
        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, RUN_REGISTRY_PATH, 0, winreg.KEY_READ) as key:
            value, _ = winreg.QueryValueEx(key, APP_NAME)
            return value == command
    except OSError:
        return False


def _windows_update(enabled: bool) -> None:
    command = get_launch_command()
    try:
        key = winreg.OpenKey(winreg.HKEY_CURRENT_USER, RUN_REGISTRY_PATH, 0, winreg.KEY_SET_VALUE)
    except FileNotFoundError:
        key = winreg.CreateKey(winreg.HKEY_CURRENT_USER, RUN_REGISTRY_PATH)

    with key:
        try:
            if enabled:
                winreg.SetValueEx(key, APP_NAME, 0, winreg.REG_SZ, command)
            else:
                winreg.DeleteValue(key, APP_NAME)
        except FileNotFoundError:
            pass


# ===== Linux ================================================================


def render_desktop_entry() -> str:
    return "\n".join([
        "[Desktop Entry]",
        "Type=Application",
        f"Name={DISPLAY_NAME}",
        "Comment=Reminds you to drink water",
        f"Exec={shlex.join(get_launch_arguments())}",
        "Terminal=false",
        "X-GNOME-Autostart-enabled=true",
        "",
    ])


def _xdg_update(enabled: bool) -> None:
    entry = xdg_autostart_file()
    if enabled:
        entry.parent.mkdir(parents=True, exist_ok=True)
        entry.write_text(render_desktop_entry(), encoding="utf-8")
    elif entry.exists():
        entry.unlink()


# ===== macOS ================================================================


def _launch_agent_update(enabled: bool) -> None:
    agent = launch_agent_file()
    if enabled:
        agent.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "Label": LAUNCH_AGENT_LABEL,
            "ProgramArguments": get_launch_arguments(),
            "RunAtLoad": True,
        }
        with agent.open("wb") as handle:
            plistlib.dump(payload, handle)
    elif agent.exists():
        agent.unlink()


# ===== Public API ===========================================================


def is_autostart_enabled() -> bool:
    if sys.platform == "win32":
        return _windows_is_enabled()
    if sys.platform == "darwin":
        return launch_agent_file().exists()
    return xdg_autostart_file().exists()


def update_autostart(enabled: bool) -> bool:
    """Register or unregister the app with the OS login items.

    Returns False when the change could not be applied; the failure is logged.
    """
    try:
        if sys.platform == "win32":
            _windows_update(enabled)
        elif sys.platform == "darwin":
            _launch_agent_update(enabled)
        else:
            _xdg_update(enabled)
    except OSError as exc:
        logger.error("Failed to update open-at-login setting: %s", exc)
        return False
    logger.info("Open at login set to %s", enabled)
    return True
