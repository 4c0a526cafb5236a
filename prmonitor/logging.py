"""Logging setup for the daemon and CLI.

What each level shows:
- ERROR: crashed scheduler ticks and fatal CLI errors
- WARNING: failed polls, unreadable stores, undeliverable notifications
- INFO: one summary line per poll, notifications, snooze changes
- DEBUG: dropped search nodes, blob writes

Set via config.yaml (logging.level, logging.format, logging.file) or env
(LOGGING_LEVEL, LOGGING_FORMAT, LOGGING_FILE).
"""

import logging
from pathlib import Path

from prmonitor.config import LoggingConfig

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_LEVEL = "INFO"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Library loggers kept at WARNING or above whatever the configured level
QUIET_LOGGERS = ("urllib3", "requests")


def _resolve_level(level: str) -> int:
    """Level name to logging constant; INFO if unknown."""
    return LEVELS.get(level.upper().strip(), logging.INFO)


class PRMonitorLogging:
    """Applies LoggingConfig to the root logger."""

    def __init__(self, config: LoggingConfig) -> None:
        self._level = _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT
        self._file = Path(config.file).expanduser() if config.file else None

    def setup(self) -> None:
        """Log to stderr, and to logging.file when set."""
        handlers: list[logging.Handler] = [logging.StreamHandler()]
        if self._file is not None:
            self._file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(self._file, encoding="utf-8"))
        logging.basicConfig(
            level=self._level,
            format=self._format,
            handlers=handlers,
            force=True,
        )
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(max(self._level, logging.WARNING))
