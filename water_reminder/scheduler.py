"""
Reminder scheduling.

A one-minute tick compares wall-clock time against the ``last_sent`` stamp
in the settings record and shows a water notification once the configured
interval has elapsed. All handlers run on the Qt GUI thread.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from PySide6 import QtCore

from .storage import SettingsStore

logger = logging.getLogger(__name__)


TICK_INTERVAL_MS = 60_000
MS_PER_MINUTE = 60_000

REMINDER_TITLE = "\U0001F4A7 Time to Drink Water!"
REMINDER_BODY = "Stay hydrated! Take a moment to drink some water."


class Notifier(Protocol):
    def show(self, title: str, body: str) -> bool:
        """Display a notification; False when nothing could be shown."""


def current_time_ms() -> int:
    return QtCore.QDateTime.currentMSecsSinceEpoch()


class ReminderScheduler(QtCore.QObject):
    """Decides once per tick whether a reminder is due and keeps ``last_sent`` current."""

    notificationShown = QtCore.Signal(object)  # epoch ms overflows a C++ int

    def __init__(self, store: Optional[SettingsStore], notifier: Optional[Notifier],
                 clock: Callable[[], int] = current_time_ms,
                 parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self.store = store
        self.notifier = notifier
        self.clock = clock

        self.tick_timer = QtCore.QTimer(self)
        self.tick_timer.setInterval(TICK_INTERVAL_MS)
        self.tick_timer.timeout.connect(self.on_tick)

    @property
    def running(self) -> bool:
        return self.tick_timer.isActive()

    def initialize(self) -> None:
        logger.info("Initializing notification scheduler")
        if self.store is None:
            logger.warning("Settings store unavailable, scheduler starts without a baseline")
        else:
            # Fresh waiting window: a stale stamp from a previous session never fires immediately.
            self.store.set("last_sent", self.clock())
        self.tick_timer.start()
        logger.info("Scheduler initialized and running")

    def shutdown(self) -> None:
        if not self.tick_timer.isActive():
            return
        self.tick_timer.stop()
        logger.info("Scheduler stopped")

    def on_tick(self) -> None:
        if self.store is None:
            logger.debug("Settings store unavailable, skipping reminder check")
            return

        settings = self.store.get_all()
        if settings.last_sent == 0:
            return

        elapsed = self.clock() - settings.last_sent
        if elapsed >= settings.interval_minutes * MS_PER_MINUTE:
            self.fire_notification()

    def fire_notification(self) -> bool:
        return self._show_and_stamp()

    def trigger_test_notification(self) -> bool:
        logger.info("Test notification requested")
        # Shares the stamping primitive, so a test reminder also restarts the window.
        return self._show_and_stamp()

    def on_settings_saved(self, interval_minutes: Optional[int] = None) -> None:
        if self.store is None:
            logger.warning("Settings store unavailable, cannot apply saved settings")
            return
        values = {"last_sent": self.clock()}
        if interval_minutes is not None:
            values["interval_minutes"] = interval_minutes
        self.store.update(**values)

    def remaining_ms(self) -> Optional[int]:
        """Milliseconds until the next reminder is due, or None while suppressed."""
        if self.store is None:
            return None
        settings = self.store.get_all()
        if settings.last_sent == 0:
            return None
        due_at = settings.last_sent + settings.interval_minutes * MS_PER_MINUTE
        return max(0, due_at - self.clock())

    def _show_and_stamp(self) -> bool:
        if self.notifier is None:
            logger.warning("Notifier unavailable, reminder not shown")
            return False

        logger.info("Showing water reminder notification")
        if not self.notifier.show(REMINDER_TITLE, REMINDER_BODY):
            logger.warning("Reminder could not be displayed, last sent timestamp not updated")
            return False

        now = self.clock()
        if self.store is None:
            logger.warning("Settings store unavailable, last sent timestamp not updated")
        else:
            self.store.set("last_sent", now)
            logger.info("Notification sent and timestamp updated")
        self.notificationShown.emit(now)
        return True
