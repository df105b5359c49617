"""
Water reminder tray application written in Python with Qt (PySide6).

Runs in the system tray and shows a desktop notification every few
minutes reminding the user to drink water.
"""

APP_NAME = "WaterReminder"
DISPLAY_NAME = "Water Reminder"

__version__ = "1.0.0"
