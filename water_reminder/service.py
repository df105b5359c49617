"""
Application-lifecycle object.

Owns the settings store and the reminder scheduler, and exposes the three
request/response handlers the settings window talks to: ``get_settings``,
``save_settings`` and ``test_notification``.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Mapping, Optional

from PySide6 import QtCore

from .autostart import is_autostart_enabled, update_autostart
from .scheduler import Notifier, ReminderScheduler, current_time_ms
from .storage import SettingsStore

logger = logging.getLogger(__name__)


SAVED_TITLE = "✅ Settings Saved"
SAVED_BODY = "Your water reminder settings have been updated."

BOOLEAN_KEYS = ("open_at_login", "open_settings_on_launch")


class InvalidSettingsError(ValueError):
    """Raised when a settings update is rejected before it reaches the store."""


def validate_settings_update(partial: Mapping[str, object]) -> Dict[str, object]:
    allowed = ("interval_minutes",) + BOOLEAN_KEYS
    unknown = [key for key in partial if key not in allowed]
    if unknown:
        raise InvalidSettingsError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

    cleaned: Dict[str, object] = {}
    if partial.get("interval_minutes") is not None:
        interval = partial["interval_minutes"]
        if isinstance(interval, bool) or not isinstance(interval, int):
            raise InvalidSettingsError(f"Interval must be a whole number of minutes, got {interval!r}")
        if interval <= 0:
            raise InvalidSettingsError(f"Interval must be positive, got {interval}")
        cleaned["interval_minutes"] = interval

    for key in BOOLEAN_KEYS:
        value = partial.get(key)
        if value is None:
            continue
        if not isinstance(value, bool):
            raise InvalidSettingsError(f"{key} must be true or false, got {value!r}")
        cleaned[key] = value
    return cleaned


class ReminderService(QtCore.QObject):
    """Single owner of the settings store and scheduler for one process."""

    settingsChanged = QtCore.Signal()

    def __init__(self, store: Optional[SettingsStore], notifier: Optional[Notifier],
                 clock: Callable[[], int] = current_time_ms,
                 autostart: Callable[[bool], bool] = update_autostart,
                 autostart_state: Callable[[], bool] = is_autostart_enabled,
                 parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self.store = store
        self.notifier = notifier
        self.autostart = autostart
        self.autostart_state = autostart_state
        self.scheduler = ReminderScheduler(store, notifier, clock=clock, parent=self)
        self.started = False

    def start(self) -> None:
        if self.started:
            return
        self.scheduler.initialize()
        self.apply_autostart()
        self.started = True

    def stop(self) -> None:
        self.scheduler.shutdown()
        self.started = False

    def apply_autostart(self) -> None:
        if self.store is None:
            return
        open_at_login = bool(self.store.get("open_at_login"))
        if self.autostart_state() == open_at_login:
            logger.info("Auto-launch already %s", "enabled" if open_at_login else "disabled")
            return
        logger.info("Configuring auto-launch: %s", open_at_login)
        self.autostart(open_at_login)

    # ----- request/response handlers -----

    def get_settings(self) -> Dict[str, object]:
        if self.store is None:
            logger.warning("Settings store unavailable, returning no settings")
            return {}
        return self.store.get_all().to_dict()

    def save_settings(self, partial: Mapping[str, object]) -> Dict[str, bool]:
        logger.info("Saving settings %s", dict(partial))
        try:
            cleaned = validate_settings_update(partial)
        except InvalidSettingsError as exc:
            logger.warning("Rejected settings update: %s", exc)
            return {"success": False}

        if self.store is None:
            logger.warning("Settings store unavailable, settings not saved")
            return {"success": False}

        interval = cleaned.pop("interval_minutes", None)
        if interval is not None:
            logger.info("Interval updated to %s minutes", interval)

        if cleaned:
            self.store.update(**cleaned)
        if "open_at_login" in cleaned:
            self.autostart(bool(cleaned["open_at_login"]))

        self.scheduler.on_settings_saved(interval)

        if self.notifier is not None:
            self.notifier.show(SAVED_TITLE, SAVED_BODY)
        logger.info("Settings saved successfully")
        self.settingsChanged.emit()
        return {"success": True}

    def test_notification(self) -> Dict[str, bool]:
        shown = self.scheduler.trigger_test_notification()
        if shown:
            self.settingsChanged.emit()
        return {"success": shown}
