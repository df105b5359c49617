"""Qt application bootstrap, command line parsing and logging setup."""

from __future__ import annotations

import argparse
import ctypes
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, List, Optional

from PySide6 import QtCore, QtWidgets

from . import APP_NAME, DISPLAY_NAME, __version__
from .autostart import is_autostart_enabled, update_autostart
from .scheduler import current_time_ms
from .service import ReminderService
from .storage import INTERVAL_CHOICES, SettingsStore, determine_storage_root, open_settings_store
from .ui import SettingsWindow, TrayController

logger = logging.getLogger(__name__)


LOG_FILENAME = "water_reminder.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
COUNTDOWN_REFRESH_MS = 30_000


# ===== Logging ==============================================================


def configure_logging(storage_root: Path, level: str = "INFO") -> Path:
    """Log to a rotating file under the storage directory and to stderr."""
    log_dir = storage_root / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILENAME

    formatter = logging.Formatter(LOG_FORMAT)
    file_handler = RotatingFileHandler(log_file, maxBytes=1024 * 1024, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(formatter)
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level.upper())
    root.addHandler(file_handler)
    root.addHandler(stream_handler)
    return log_file


def set_app_user_model_id() -> None:
    """Attribute Windows toast notifications to this app instead of python.exe."""
    if sys.platform != "win32":
        return
    try:
        ctypes.windll.shell32.SetCurrentProcessExplicitAppUserModelID(APP_NAME)
    except (AttributeError, OSError) as exc:
        logger.debug("Could not set AppUserModelID: %s", exc)


# ===== Application bootstrap ===============================================


class ReminderController(QtCore.QObject):
    """Owns the service, tray icon and settings window for one process."""

    def __init__(self, store: SettingsStore,
                 clock: Callable[[], int] = current_time_ms,
                 autostart: Callable[[bool], bool] = update_autostart,
                 autostart_state: Callable[[], bool] = is_autostart_enabled,
                 parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self.store = store
        self.tray = TrayController(self)
        self.service = ReminderService(store, self.tray, clock=clock, autostart=autostart,
                                       autostart_state=autostart_state, parent=self)
        self.settings_window: Optional[SettingsWindow] = None

        self.tray.remind_action.triggered.connect(self.service.test_notification)
        self.tray.settings_action.triggered.connect(self.show_settings)
        self.tray.tray.activated.connect(self._handle_tray_activated)

        self.service.settingsChanged.connect(self.refresh_countdown)
        self.service.scheduler.notificationShown.connect(self.refresh_countdown)
        self.countdown_timer = QtCore.QTimer(self)
        self.countdown_timer.setInterval(COUNTDOWN_REFRESH_MS)
        self.countdown_timer.timeout.connect(self.refresh_countdown)

    def start(self, open_settings: bool = False) -> None:
        self.service.start()
        self.countdown_timer.start()
        self.refresh_countdown()

        if open_settings or self.store.get("open_settings_on_launch"):
            QtCore.QTimer.singleShot(300, self.show_settings)
        logger.info("All components initialized successfully")

    def show_settings(self) -> None:
        if self.settings_window is not None and self.settings_window.isVisible():
            logger.info("Settings window already exists, focusing")
        else:
            if self.settings_window is None:
                logger.info("Creating settings window")
                self.settings_window = SettingsWindow(self.service)
            self.settings_window.show()
        self.settings_window.raise_()
        self.settings_window.activateWindow()

    def refresh_countdown(self) -> None:
        self.tray.update_remaining_display(self.service.scheduler.remaining_ms())

    def _handle_tray_activated(self, reason: QtWidgets.QSystemTrayIcon.ActivationReason) -> None:
        if reason == QtWidgets.QSystemTrayIcon.ActivationReason.Trigger:
            self.show_settings()

    def shutdown(self) -> None:
        logger.info("App is quitting, cleaning up")
        self.countdown_timer.stop()
        self.service.stop()
        if self.settings_window is not None:
            self.settings_window.close()
        self.tray.hide()


class ReminderApplication(QtWidgets.QApplication):
    """Main application wrapper; keeps running in the tray when windows close."""

    def __init__(self, argv: List[str], store: SettingsStore, open_settings: bool = False) -> None:
        super().__init__(argv)
        self.setApplicationName(APP_NAME)
        self.setApplicationDisplayName(DISPLAY_NAME)
        self.setApplicationVersion(__version__)
        self.setQuitOnLastWindowClosed(False)

        self.controller = ReminderController(store, parent=self)
        self.aboutToQuit.connect(self.controller.shutdown)
        self.controller.start(open_settings)


# ===== CLI argument parsing ================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tray app that reminds you to drink water.")
    parser.add_argument("--interval", type=int, choices=INTERVAL_CHOICES,
                        help="Reminder interval in minutes (saved for future runs).")
    parser.add_argument("--open-settings", action="store_true", help="Open the settings window on launch.")
    parser.add_argument("--config-dir", type=Path, help="Directory holding settings.json and logs.")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity (default: INFO).")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: List[str]) -> int:
    args = build_parser().parse_args(argv)

    storage_root = determine_storage_root(args.config_dir)
    configure_logging(storage_root, args.log_level)
    logger.info("%s %s starting", DISPLAY_NAME, __version__)
    set_app_user_model_id()

    store = open_settings_store(storage_root)
    first_run = not store.existed
    if args.interval:
        store.set("interval_minutes", args.interval)

    app = ReminderApplication(sys.argv[:1], store, open_settings=args.open_settings or first_run)
    return app.exec()


def run() -> None:
    sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
