import json

import pytest

from water_reminder.storage import (
    DEFAULT_INTERVAL_MINUTES,
    Settings,
    SettingsStore,
    determine_storage_root,
    get_resource_root,
    open_settings_store,
)


def test_first_run_creates_file_with_defaults(tmp_path):
    path = tmp_path / "settings.json"

    store = SettingsStore(path)

    assert not store.existed
    assert path.exists()
    assert store.get_all() == Settings(interval_minutes=15, last_sent=0, open_at_login=False)


def test_values_survive_reload(tmp_path):
    path = tmp_path / "settings.json"
    store = SettingsStore(path)
    store.update(interval_minutes=60, open_at_login=True)
    store.set("last_sent", 1234)

    reloaded = SettingsStore(path)

    assert reloaded.existed
    assert reloaded.get("interval_minutes") == 60
    assert reloaded.get("open_at_login") is True
    assert reloaded.get("last_sent") == 1234


def test_corrupt_file_loads_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    store = SettingsStore(path)

    assert store.get_all() == Settings()


def test_from_dict_ignores_bad_values():
    settings = Settings.from_dict({
        "interval_minutes": -5,
        "last_sent": "soon",
        "open_at_login": "yes",
        "extra": 1,
    })

    assert settings.interval_minutes == DEFAULT_INTERVAL_MINUTES
    assert settings.last_sent == 0
    assert settings.open_at_login is False


def test_from_dict_non_mapping_gives_defaults():
    assert Settings.from_dict(["interval_minutes", 30]) == Settings()


def test_unknown_keys_are_rejected(store):
    with pytest.raises(KeyError):
        store.get("volume")
    with pytest.raises(KeyError):
        store.set("volume", 3)
    with pytest.raises(KeyError):
        store.update(interval_minutes=5, volume=3)
    assert store.get("interval_minutes") == DEFAULT_INTERVAL_MINUTES


def test_get_all_returns_snapshot(store):
    snapshot = store.get_all()
    snapshot.interval_minutes = 240

    assert store.get("interval_minutes") == DEFAULT_INTERVAL_MINUTES


def test_file_is_plain_json(store):
    store.set("interval_minutes", 30)

    data = json.loads(store.path.read_text(encoding="utf-8"))

    assert data["interval_minutes"] == 30
    assert set(data) == set(Settings.keys())


def test_storage_root_honours_override_and_env(tmp_path, monkeypatch):
    assert determine_storage_root(tmp_path / "a") == tmp_path / "a"
    assert (tmp_path / "a").is_dir()

    monkeypatch.setenv("WATER_REMINDER_HOME", str(tmp_path / "b"))
    root = determine_storage_root()

    assert root == tmp_path / "b"
    assert open_settings_store(root).path == tmp_path / "b" / "settings.json"


def test_overflowing_number_falls_back_per_field(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text('{"interval_minutes": 30, "last_sent": 1e400}', encoding="utf-8")

    store = SettingsStore(path)

    assert store.get("interval_minutes") == 30
    assert store.get("last_sent") == 0


def test_undecodable_file_loads_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_bytes(b"\xff\xfe\x00garbage")

    assert SettingsStore(path).get_all() == Settings()


def test_bundled_icon_is_shipped():
    assert (get_resource_root() / "icon.svg").is_file()
