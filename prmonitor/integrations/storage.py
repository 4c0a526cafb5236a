"""Key-value blob storage for snoozed PRs and settings.

FileBlobStore keeps one file per key: {data_dir}/{key}.yaml.
"""

import logging
import os
import re
import threading
from abc import ABC, abstractmethod
from pathlib import Path

LOG = logging.getLogger("prmonitor.integrations.storage")

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class BlobStore(ABC):
    """Persists opaque blobs by key."""

    @abstractmethod
    def persist_blob(self, key: str, data: bytes) -> None:
        """Store data under key, replacing any previous blob."""
        ...

    @abstractmethod
    def load_blob(self, key: str) -> bytes | None:
        """Return the blob stored under key, or None."""
        ...


class FileBlobStore(BlobStore):
    """Blobs as files in a data directory, written atomically."""

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = Path(data_dir)

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid blob key: {key!r}")
        return self._data_dir / f"{key}.yaml"

    def persist_blob(self, key: str, data: bytes) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_bytes(data)
        os.replace(tmp, path)
        LOG.debug("Saved blob %s (%d bytes) to %s", key, len(data), path)

    def load_blob(self, key: str) -> bytes | None:
        path = self._path(key)
        if not path.is_file():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            LOG.warning("Failed to read blob %s: %s", key, e)
            return None


class MemoryBlobStore(BlobStore):
    """In-process blobs (one-shot CLI runs and tests)."""

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def persist_blob(self, key: str, data: bytes) -> None:
        with self._lock:
            self._blobs[key] = bytes(data)

    def load_blob(self, key: str) -> bytes | None:
        with self._lock:
            return self._blobs.get(key)
