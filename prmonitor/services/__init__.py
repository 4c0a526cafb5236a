"""Classification, snoozing, settings and change detection."""

from prmonitor.services.classifier import classify
from prmonitor.services.notifications import NotificationTracker
from prmonitor.services.settings_store import AppSettings, SettingsStore
from prmonitor.services.snooze_manager import SnoozeManager

__all__ = [
    "AppSettings",
    "NotificationTracker",
    "SettingsStore",
    "SnoozeManager",
    "classify",
]
