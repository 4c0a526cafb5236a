"""Interfaces to the host: storage, secrets, notifications, system hooks."""

from prmonitor.integrations.notifier import LogNotifier, Notifier
from prmonitor.integrations.secrets import FileSecretStore, SecretStore
from prmonitor.integrations.storage import BlobStore, FileBlobStore, MemoryBlobStore
from prmonitor.integrations.system import LaunchAtLogin, NoopLaunchAtLogin, open_url

__all__ = [
    "BlobStore",
    "FileBlobStore",
    "FileSecretStore",
    "LaunchAtLogin",
    "LogNotifier",
    "MemoryBlobStore",
    "NoopLaunchAtLogin",
    "Notifier",
    "SecretStore",
    "open_url",
]
