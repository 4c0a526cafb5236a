"""Snoozed PRs, stored as one YAML list in the blob store (key snoozed_prs).

The whole list is rewritten on every change and read once at startup. A
missing or unreadable blob means nothing is snoozed.
"""

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime

import yaml
from pydantic import ValidationError

from prmonitor.integrations.storage import BlobStore
from prmonitor.models import PullRequest, SnoozeDuration, SnoozeEntry

SNOOZE_KEY = "snoozed_prs"

LOG = logging.getLogger("prmonitor.services.snooze_manager")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SnoozeManager:
    """Set of snoozed PR ids with expiry."""

    def __init__(self, store: BlobStore, clock: Callable[[], datetime] = _utcnow) -> None:
        self._store = store
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: list[SnoozeEntry] = self._load()

    @property
    def entries(self) -> list[SnoozeEntry]:
        with self._lock:
            return list(self._entries)

    @property
    def snoozed_ids(self) -> set[str]:
        with self._lock:
            return {e.pr_id for e in self._entries}

    @property
    def sorted_entries(self) -> list[SnoozeEntry]:
        """Entries ordered by title, ignoring case."""
        with self._lock:
            return sorted(self._entries, key=lambda e: e.pr_title.casefold())

    def snooze(self, pr: PullRequest, duration: SnoozeDuration) -> SnoozeEntry:
        """Snooze pr from now on; re-snoozing replaces the previous entry."""
        entry = SnoozeEntry(
            pr_id=pr.id,
            pr_title=pr.title,
            pr_repository=pr.repository,
            pr_number=pr.number,
            pr_url=pr.url,
            snoozed_at=self._clock(),
            duration=duration,
        )
        with self._lock:
            self._entries = [e for e in self._entries if e.pr_id != pr.id]
            self._entries.append(entry)
            self._save()
        LOG.info("Snoozed %s for %s", pr.reference, duration.display_name)
        return entry

    def unsnooze(self, pr_id: str) -> None:
        with self._lock:
            self._entries = [e for e in self._entries if e.pr_id != pr_id]
            self._save()
        LOG.info("Unsnoozed %s", pr_id)

    def clean_expired(self) -> int:
        """Drop expired entries; saves only when something was removed."""
        now = self._clock()
        with self._lock:
            kept = [e for e in self._entries if not e.is_expired_at(now)]
            removed = len(self._entries) - len(kept)
            if removed:
                self._entries = kept
                self._save()
        if removed:
            LOG.info("Removed %d expired snooze(s)", removed)
        return removed

    def _save(self) -> None:
        payload = [e.model_dump(mode="json") for e in self._entries]
        raw = yaml.dump(
            payload,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=1000,
        )
        self._store.persist_blob(SNOOZE_KEY, raw.encode("utf-8"))
        LOG.debug("Saved %d snooze entries", len(payload))

    def _load(self) -> list[SnoozeEntry]:
        raw = self._store.load_blob(SNOOZE_KEY)
        if not raw:
            return []
        try:
            data = yaml.safe_load(raw.decode("utf-8"))
            if not data:
                return []
            if not isinstance(data, list):
                raise ValueError("snooze blob is not a list")
            return [SnoozeEntry.model_validate(item) for item in data]
        except (UnicodeDecodeError, yaml.YAMLError, ValidationError, ValueError) as e:
            LOG.warning("Failed to load snoozed PRs: %s", e)
            return []
