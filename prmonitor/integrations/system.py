"""System hooks: opening URLs and launch-at-login registration."""

import logging
import webbrowser
from abc import ABC, abstractmethod

LOG = logging.getLogger("prmonitor.integrations.system")


def open_url(url: str) -> bool:
    """Open url in the default browser. Returns False if no browser ran."""
    opened = webbrowser.open(url)
    if not opened:
        LOG.warning("Could not open %s", url)
    return opened


class LaunchAtLogin(ABC):
    """Registers or unregisters the app to start at login."""

    @abstractmethod
    def register(self, enabled: bool) -> None:
        ...


class NoopLaunchAtLogin(LaunchAtLogin):
    """Records the request only; autostart is managed by the host."""

    def register(self, enabled: bool) -> None:
        LOG.info("Launch at login %s (not managed on this platform)", "enabled" if enabled else "disabled")
