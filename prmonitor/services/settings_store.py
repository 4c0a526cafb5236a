"""User settings changed at runtime, stored as one YAML blob (key settings).

Defaults come from config; a missing or unreadable blob means defaults.
"""

import logging
import threading

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from prmonitor.config import DEFAULT_POLL_INTERVAL, validate_poll_interval
from prmonitor.integrations.storage import BlobStore
from prmonitor.integrations.system import LaunchAtLogin, NoopLaunchAtLogin

SETTINGS_KEY = "settings"

LOG = logging.getLogger("prmonitor.services.settings_store")


class AppSettings(BaseModel):
    """Settings the user can change without editing config."""

    poll_interval: int = Field(default=DEFAULT_POLL_INTERVAL, description="Seconds between polls")
    notifications_enabled: bool = True
    launch_at_login: bool = False

    model_config = {"extra": "ignore"}

    @field_validator("poll_interval")
    @classmethod
    def _check_interval(cls, value: int) -> int:
        return validate_poll_interval(value)


class SettingsStore:
    """Loads AppSettings once and writes them back on every change."""

    def __init__(
        self,
        store: BlobStore,
        defaults: AppSettings | None = None,
        launch_at_login: LaunchAtLogin | None = None,
    ) -> None:
        self._store = store
        self._defaults = defaults or AppSettings()
        self._launch_at_login = launch_at_login or NoopLaunchAtLogin()
        self._lock = threading.Lock()
        self._settings = self._load()

    @property
    def settings(self) -> AppSettings:
        with self._lock:
            return self._settings

    def reload(self) -> AppSettings:
        """Re-read the blob, picking up changes saved by another process."""
        settings = self._load()
        with self._lock:
            self._settings = settings
        return settings

    def update(
        self,
        poll_interval: int | None = None,
        notifications_enabled: bool | None = None,
        launch_at_login: bool | None = None,
    ) -> AppSettings:
        """Apply the given changes and persist. Raises ValueError on a bad interval."""
        with self._lock:
            data = self._settings.model_dump()
            if poll_interval is not None:
                data["poll_interval"] = poll_interval
            if notifications_enabled is not None:
                data["notifications_enabled"] = notifications_enabled
            if launch_at_login is not None:
                data["launch_at_login"] = launch_at_login
            try:
                updated = AppSettings(**data)
            except ValidationError as e:
                raise ValueError(str(e)) from e
            login_changed = updated.launch_at_login != self._settings.launch_at_login
            self._settings = updated
            self._save()
        if login_changed:
            self._launch_at_login.register(updated.launch_at_login)
        return updated

    def _save(self) -> None:
        raw = yaml.dump(self._settings.model_dump(mode="json"), default_flow_style=False, sort_keys=False)
        self._store.persist_blob(SETTINGS_KEY, raw.encode("utf-8"))

    def _load(self) -> AppSettings:
        raw = self._store.load_blob(SETTINGS_KEY)
        if not raw:
            return self._defaults
        try:
            data = yaml.safe_load(raw.decode("utf-8"))
            if not isinstance(data, dict):
                raise ValueError("settings blob is not a mapping")
            return AppSettings(**{**self._defaults.model_dump(), **data})
        except (UnicodeDecodeError, yaml.YAMLError, ValidationError, ValueError) as e:
            LOG.warning("Failed to load settings, using defaults: %s", e)
            return self._defaults
