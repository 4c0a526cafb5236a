"""Tests for SettingsStore (runtime settings persisted as a YAML blob)."""

from unittest.mock import MagicMock

import pytest

from prmonitor.integrations.storage import FileBlobStore, MemoryBlobStore
from prmonitor.services.settings_store import SETTINGS_KEY, AppSettings, SettingsStore


def test_defaults_without_blob() -> None:
    settings = SettingsStore(MemoryBlobStore()).settings

    assert settings.poll_interval == 300
    assert settings.notifications_enabled is True
    assert settings.launch_at_login is False


def test_config_defaults_used() -> None:
    defaults = AppSettings(poll_interval=60, notifications_enabled=False)

    assert SettingsStore(MemoryBlobStore(), defaults=defaults).settings.poll_interval == 60


def test_update_persists() -> None:
    blobs = MemoryBlobStore()
    SettingsStore(blobs).update(poll_interval=1800, notifications_enabled=False)

    reloaded = SettingsStore(blobs).settings

    assert reloaded.poll_interval == 1800
    assert reloaded.notifications_enabled is False


def test_stored_values_override_defaults_per_field() -> None:
    blobs = MemoryBlobStore()
    blobs.persist_blob(SETTINGS_KEY, b"notifications_enabled: false\n")

    settings = SettingsStore(blobs, defaults=AppSettings(poll_interval=900)).settings

    assert settings.poll_interval == 900
    assert settings.notifications_enabled is False


def test_invalid_interval_rejected_and_unchanged() -> None:
    store = SettingsStore(MemoryBlobStore())

    with pytest.raises(ValueError):
        store.update(poll_interval=10)

    assert store.settings.poll_interval == 300


def test_corrupt_blob_falls_back_to_defaults() -> None:
    blobs = MemoryBlobStore()
    blobs.persist_blob(SETTINGS_KEY, b"poll_interval: 7\n")

    assert SettingsStore(blobs).settings.poll_interval == 300


def test_launch_at_login_registered_on_change() -> None:
    hook = MagicMock()
    store = SettingsStore(MemoryBlobStore(), launch_at_login=hook)

    store.update(launch_at_login=True)
    store.update(launch_at_login=True)
    store.update(poll_interval=60)

    hook.register.assert_called_once_with(True)


def test_reload_sees_changes_from_another_store(tmp_path) -> None:
    """A second process saving settings is visible after reload()."""
    daemon_store = SettingsStore(FileBlobStore(tmp_path))
    SettingsStore(FileBlobStore(tmp_path)).update(poll_interval=900, notifications_enabled=False)

    assert daemon_store.settings.poll_interval == 300

    reloaded = daemon_store.reload()

    assert reloaded.poll_interval == 900
    assert daemon_store.settings.notifications_enabled is False
