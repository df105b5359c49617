"""Tray icon, notification display and the settings window."""

from __future__ import annotations

import logging
from typing import List, Optional

from PySide6 import QtCore, QtGui, QtWidgets

from . import DISPLAY_NAME
from .service import ReminderService
from .storage import INTERVAL_CHOICES, get_resource_root

logger = logging.getLogger(__name__)


NOTIFICATION_TIMEOUT_MS = 10_000


# ===== Utility helpers ======================================================


def format_interval(minutes: int) -> str:
    """Format an interval in minutes (e.g. 120) into a readable string."""
    hours, minutes = divmod(max(0, minutes), 60)

    parts: List[str] = []
    if hours:
        parts.append(f"{hours} hour{'s' if hours != 1 else ''}")
    if minutes:
        parts.append(f"{minutes} minute{'s' if minutes != 1 else ''}")

    if not parts:
        return "less than a minute"
    return " ".join(parts)


def format_short_duration(milliseconds: Optional[int]) -> str:
    """Return a short h/m text for the tray countdown entry."""
    if milliseconds is None:
        return "--"
    if milliseconds <= 0:
        return "now"

    minutes_total = -(-milliseconds // 60_000)  # round up to whole minutes
    hours, minutes = divmod(minutes_total, 60)
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def create_fallback_pixmap(size: int = 64) -> QtGui.QPixmap:
    """Draw a simple water droplet when no icon is bundled."""
    pixmap = QtGui.QPixmap(size, size)
    pixmap.fill(QtCore.Qt.transparent)

    painter = QtGui.QPainter(pixmap)
    painter.setRenderHint(QtGui.QPainter.Antialiasing)

    gradient = QtGui.QLinearGradient(0, 0, 0, size)
    gradient.setColorAt(0.0, QtGui.QColor(54, 178, 255))
    gradient.setColorAt(1.0, QtGui.QColor(28, 120, 240))

    path = QtGui.QPainterPath()
    path.moveTo(size / 2, size * 0.05)
    path.cubicTo(size * 0.1, size * 0.35, size * 0.2, size * 0.75, size / 2, size * 0.95)
    path.cubicTo(size * 0.8, size * 0.75, size * 0.9, size * 0.35, size / 2, size * 0.05)

    painter.fillPath(path, gradient)
    pen = QtGui.QPen(QtGui.QColor(20, 70, 160), 2)
    pen.setCosmetic(True)
    painter.setPen(pen)
    painter.drawPath(path)
    painter.end()

    return pixmap


ICON_FILENAMES = ("icon.png", "icon.svg")


def load_app_icon() -> QtGui.QIcon:
    for name in ICON_FILENAMES:
        icon_path = get_resource_root() / name
        if not icon_path.exists():
            continue
        pixmap = QtGui.QPixmap(str(icon_path))
        if not pixmap.isNull():
            return QtGui.QIcon(pixmap)
    return QtGui.QIcon(create_fallback_pixmap())


# ===== Settings window ======================================================


class WheelBlocker(QtCore.QObject):
    """Prevents wheel events from changing widget values."""

    def eventFilter(self, obj: QtCore.QObject, event: QtCore.QEvent) -> bool:  # type: ignore[override]
        if event.type() == QtCore.QEvent.Type.Wheel and isinstance(obj, QtWidgets.QWidget):
            event.ignore()
            return True
        return super().eventFilter(obj, event)


class SettingsWindow(QtWidgets.QDialog):
    """Settings form: interval, login behaviour, save and test buttons."""

    def __init__(self, service: ReminderService, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle(f"{DISPLAY_NAME} Settings")
        self.setWindowIcon(load_app_icon())
        self.setFixedWidth(400)
        self.setStyleSheet(
            """
            QDialog {
                background-color: #EEF6FF;
                color: #1F2937;
            }
            QLabel#titleLabel {
                font-size: 20px;
                font-weight: 700;
            }
            QLabel#hintLabel, QLabel#footerLabel {
                color: #6B7280;
                font-size: 11px;
            }
            QComboBox {
                background-color: #FFFFFF;
                border: 1px solid #D1D5DB;
                border-radius: 6px;
                padding: 6px 8px;
            }
            QPushButton {
                border-radius: 8px;
                padding: 10px 16px;
                font-weight: 600;
            }
            QPushButton#primaryButton {
                background-color: #2563EB;
                color: #FFFFFF;
            }
            QPushButton#primaryButton:hover {
                background-color: #1D4ED8;
            }
            QPushButton#primaryButton:disabled {
                background-color: #93C5FD;
            }
            QPushButton#secondaryButton {
                background-color: #F3F4F6;
                border: 1px solid #D1D5DB;
                color: #374151;
            }
            """
        )
        self.setWindowModality(QtCore.Qt.NonModal)
        self.service = service

        self._wheel_blocker = WheelBlocker(self)

        title_label = QtWidgets.QLabel(f"\U0001F4A7 {DISPLAY_NAME}")
        title_label.setObjectName("titleLabel")
        title_label.setAlignment(QtCore.Qt.AlignCenter)
        subtitle_label = QtWidgets.QLabel("Stay hydrated and healthy")
        subtitle_label.setAlignment(QtCore.Qt.AlignCenter)

        self.interval_combo = QtWidgets.QComboBox()
        for minutes in INTERVAL_CHOICES:
            self.interval_combo.addItem(format_interval(minutes), minutes)
        self.interval_combo.installEventFilter(self._wheel_blocker)

        self.hint_label = QtWidgets.QLabel()
        self.hint_label.setObjectName("hintLabel")
        self.hint_label.setWordWrap(True)

        self.open_at_login_check = QtWidgets.QCheckBox("Run on login")
        self.open_on_launch_check = QtWidgets.QCheckBox("Open settings on launch")

        form = QtWidgets.QFormLayout()
        form.setVerticalSpacing(6)
        form.addRow("Reminder interval", self.interval_combo)
        form.addRow("", self.hint_label)

        self.save_button = QtWidgets.QPushButton("Save Settings")
        self.save_button.setObjectName("primaryButton")
        self.save_button.clicked.connect(self.save)

        self.test_button = QtWidgets.QPushButton("Test Notification")
        self.test_button.setObjectName("secondaryButton")
        self.test_button.clicked.connect(self.service.test_notification)

        footer_label = QtWidgets.QLabel(
            "This app runs in your system tray. Right-click the tray icon to access settings or quit."
        )
        footer_label.setObjectName("footerLabel")
        footer_label.setWordWrap(True)
        footer_label.setAlignment(QtCore.Qt.AlignCenter)

        outer_layout = QtWidgets.QVBoxLayout(self)
        outer_layout.setContentsMargins(28, 24, 28, 20)
        outer_layout.setSpacing(12)
        outer_layout.addWidget(title_label)
        outer_layout.addWidget(subtitle_label)
        outer_layout.addSpacing(12)
        outer_layout.addLayout(form)
        outer_layout.addWidget(self.open_at_login_check)
        outer_layout.addWidget(self.open_on_launch_check)
        outer_layout.addStretch()
        outer_layout.addWidget(self.save_button)
        outer_layout.addWidget(self.test_button)
        outer_layout.addWidget(footer_label)

        self.interval_combo.currentIndexChanged.connect(self._update_hint)
        self.load_settings()

    def load_settings(self) -> None:
        settings = self.service.get_settings()
        interval = settings.get("interval_minutes")
        index = self.interval_combo.findData(interval)
        if index < 0 and isinstance(interval, int):
            self.interval_combo.addItem(format_interval(interval), interval)
            index = self.interval_combo.count() - 1
        self.interval_combo.setCurrentIndex(max(0, index))
        self.open_at_login_check.setChecked(bool(settings.get("open_at_login", False)))
        self.open_on_launch_check.setChecked(bool(settings.get("open_settings_on_launch", False)))
        self._update_hint()

    def _update_hint(self) -> None:
        minutes = self.interval_combo.currentData()
        self.hint_label.setText(f"You'll be reminded every {format_interval(minutes or 0)} to drink water")

    def save(self) -> None:
        self.save_button.setEnabled(False)
        self.save_button.setText("Saving...")
        try:
            result = self.service.save_settings({
                "interval_minutes": self.interval_combo.currentData(),
                "open_at_login": self.open_at_login_check.isChecked(),
                "open_settings_on_launch": self.open_on_launch_check.isChecked(),
            })
        finally:
            self.save_button.setText("Save Settings")
            self.save_button.setEnabled(True)
        if not result["success"]:
            logger.error("Failed to save settings")

    def showEvent(self, event: QtGui.QShowEvent) -> None:  # type: ignore[override]
        self.load_settings()
        super().showEvent(event)


# ===== System tray integration =============================================


class TrayController(QtCore.QObject):
    """System-tray icon with quick commands; doubles as the notification display."""

    def __init__(self, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        logger.info("Creating system tray")
        self.tray = QtWidgets.QSystemTrayIcon(load_app_icon(), self)
        self.tray.setToolTip(DISPLAY_NAME)

        self.menu = QtWidgets.QMenu()
        self.remaining_action = self.menu.addAction("Next reminder in --")
        self.remaining_action.setEnabled(False)
        self.menu.addSeparator()
        self.remind_action = self.menu.addAction("Remind me now")
        self.settings_action = self.menu.addAction("Open Settings")
        self.menu.addSeparator()
        self.quit_action = self.menu.addAction("Quit")
        self.quit_action.triggered.connect(QtWidgets.QApplication.instance().quit)

        self.tray.setContextMenu(self.menu)
        self.tray.show()
        if not QtWidgets.QSystemTrayIcon.isSystemTrayAvailable():
            logger.warning("No system tray available on this desktop")
        logger.info("System tray created successfully")

    def show(self, title: str, body: str) -> bool:
        if not QtWidgets.QSystemTrayIcon.supportsMessages():
            logger.warning("Desktop does not support tray notifications: %s", title)
            return False
        self.tray.showMessage(title, body, QtWidgets.QSystemTrayIcon.Information, NOTIFICATION_TIMEOUT_MS)
        return True

    def update_remaining_display(self, remaining_ms: Optional[int]) -> None:
        self.remaining_action.setText(f"Next reminder in {format_short_duration(remaining_ms)}")

    def hide(self) -> None:
        self.tray.hide()
