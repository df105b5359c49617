"""Storage paths and the persisted settings record."""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Dict, Optional, Tuple

from PySide6 import QtCore

from . import APP_NAME

logger = logging.getLogger(__name__)


# ===== Storage + resource helpers ==========================================


STORAGE_ENV_VAR = "WATER_REMINDER_HOME"
SETTINGS_FILENAME = "settings.json"

DEFAULT_INTERVAL_MINUTES = 15
INTERVAL_CHOICES: Tuple[int, ...] = (5, 10, 15, 30, 60, 120, 240)


def get_resource_root() -> Path:
    """Return path that contains bundled resources (PyInstaller-safe)."""
    base = getattr(sys, "_MEIPASS", None)
    if base:
        return Path(base)
    return Path(__file__).resolve().parent / "resources"


def determine_storage_root(override: Optional[Path] = None) -> Path:
    """Ensure preferred storage directory exists, fallback to HOME if needed."""
    if override is not None:
        preferred = Path(override)
    elif os.environ.get(STORAGE_ENV_VAR):
        preferred = Path(os.environ[STORAGE_ENV_VAR])
    else:
        location = QtCore.QStandardPaths.writableLocation(
            QtCore.QStandardPaths.StandardLocation.GenericConfigLocation
        )
        preferred = (Path(location) if location else Path.home()) / APP_NAME

    try:
        preferred.mkdir(parents=True, exist_ok=True)
        return preferred
    except OSError as exc:
        fallback = Path.home() / f".{APP_NAME}"
        fallback.mkdir(parents=True, exist_ok=True)
        logger.warning("Could not use %s (%s), falling back to %s", preferred, exc, fallback)
        return fallback


# ===== Settings record ======================================================


@dataclass
class Settings:
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES
    last_sent: int = 0  # epoch ms, 0 = no baseline yet
    open_at_login: bool = False
    open_settings_on_launch: bool = False

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: object) -> "Settings":
        settings = cls()
        if not isinstance(data, dict):
            return settings

        def get_int(key: str, default: int) -> int:
            value = data.get(key, default)
            if isinstance(value, bool):
                return default
            try:
                return int(value)
            except (TypeError, ValueError, OverflowError):
                return default

        def get_bool(key: str, default: bool) -> bool:
            value = data.get(key, default)
            return value if isinstance(value, bool) else default

        interval = get_int("interval_minutes", settings.interval_minutes)
        settings.interval_minutes = interval if interval > 0 else DEFAULT_INTERVAL_MINUTES
        settings.last_sent = max(0, get_int("last_sent", settings.last_sent))
        settings.open_at_login = get_bool("open_at_login", settings.open_at_login)
        settings.open_settings_on_launch = get_bool(
            "open_settings_on_launch", settings.open_settings_on_launch
        )
        return settings

    @classmethod
    def keys(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))


# ===== Settings store =======================================================


class SettingsStore:
    """Single settings record kept in memory and written through to a JSON file.

    The in-memory record is authoritative. Every mutation is flushed to disk
    immediately; a failed write is logged and retried implicitly by the next
    mutation.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.existed = self.path.exists()
        self._settings = self._load()
        if not self.existed:
            self.save()

    def _load(self) -> Settings:
        if not self.path.exists():
            logger.info("No settings file at %s, using defaults", self.path)
            return Settings()
        try:
            raw = self.path.read_text(encoding="utf-8")
            data = json.loads(raw)
        except (OSError, ValueError) as exc:
            logger.warning("Could not read settings from %s (%s), using defaults", self.path, exc)
            data = {}
        return Settings.from_dict(data)

    def save(self) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._settings.to_dict(), indent=2), encoding="utf-8")
        except OSError as exc:
            logger.error("Failed to save settings to %s: %s", self.path, exc)
            return False
        return True

    def get(self, key: str) -> object:
        if key not in Settings.keys():
            raise KeyError(key)
        return getattr(self._settings, key)

    def set(self, key: str, value: object) -> None:
        if key not in Settings.keys():
            raise KeyError(key)
        setattr(self._settings, key, value)
        self.save()

    def update(self, **values: object) -> None:
        unknown = set(values) - set(Settings.keys())
        if unknown:
            raise KeyError(", ".join(sorted(unknown)))
        for key, value in values.items():
            setattr(self._settings, key, value)
        self.save()

    def get_all(self) -> Settings:
        """Return a snapshot copy of the record."""
        return Settings(**self._settings.to_dict())


def open_settings_store(storage_root: Path) -> SettingsStore:
    return SettingsStore(storage_root / SETTINGS_FILENAME)
