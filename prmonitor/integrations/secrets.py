"""Storage of the GitHub token.

A token from config or the environment (see AppConfig.github_token_resolved)
wins; otherwise the token saved with 'prmonitor token set' is used. The saved
token file is created with owner-only permissions.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

LOG = logging.getLogger("prmonitor.integrations.secrets")

TOKEN_FILE = "token"


class SecretStore(ABC):
    """Get, set and delete one secret string."""

    @abstractmethod
    def get_secret(self) -> str | None:
        ...

    @abstractmethod
    def set_secret(self, value: str) -> None:
        ...

    @abstractmethod
    def delete_secret(self) -> None:
        ...


class FileSecretStore(SecretStore):
    """Token from an override (config/env) or {data_dir}/token."""

    def __init__(self, data_dir: Path, override: str | None = None) -> None:
        self._path = Path(data_dir) / TOKEN_FILE
        self._override = override

    @property
    def path(self) -> Path:
        return self._path

    def get_secret(self) -> str | None:
        if self._override:
            return self._override
        if not self._path.is_file():
            return None
        try:
            return self._path.read_text(encoding="utf-8").strip() or None
        except OSError as e:
            LOG.warning("Failed to read token file %s: %s", self._path, e)
            return None

    def set_secret(self, value: str) -> None:
        value = value.strip()
        if not value:
            raise ValueError("Token must not be empty")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(value)
        LOG.info("Saved GitHub token to %s", self._path)

    def delete_secret(self) -> None:
        if self._path.is_file():
            self._path.unlink()
            LOG.info("Deleted GitHub token %s", self._path)
