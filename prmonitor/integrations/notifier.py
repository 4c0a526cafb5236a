"""Delivery of notifications to the user."""

import logging
from abc import ABC, abstractmethod

from prmonitor.models import Notification

LOG = logging.getLogger("prmonitor.integrations.notifier")


class Notifier(ABC):
    """Shows a notification to the user."""

    @abstractmethod
    def show_notification(self, notification: Notification) -> None:
        ...


class LogNotifier(Notifier):
    """Writes notifications to the log (headless daemon)."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or LOG

    def show_notification(self, notification: Notification) -> None:
        parts = [notification.title]
        if notification.subtitle:
            parts.append(notification.subtitle)
        parts.append(notification.body)
        if notification.click_url:
            parts.append(notification.click_url)
        self._log.info("Notification: %s", " | ".join(parts))
