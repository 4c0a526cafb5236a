"""Poll controller: owns the PR buckets and decides what to notify.

refresh() is the only writer of the buckets. It is safe to call from the
scheduler thread, a wake hook and the CLI at the same time: a call made while
another refresh is running returns immediately without touching anything.
"""

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime

import requests

from prmonitor.adapters.base import GitHubError, PRService
from prmonitor.integrations.notifier import LogNotifier, Notifier
from prmonitor.integrations.secrets import SecretStore
from prmonitor.integrations.storage import MemoryBlobStore
from prmonitor.integrations.system import open_url
from prmonitor.models import Notification, PRFetchResults, PullRequest
from prmonitor.models.pull_request import BUCKET_NAMES
from prmonitor.services.notifications import (
    NotificationTracker,
    approved_notification,
    changes_requested_notification,
    review_requested_notification,
)
from prmonitor.services.settings_store import SettingsStore
from prmonitor.services.snooze_manager import SnoozeManager

LOG = logging.getLogger("prmonitor.app_state")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AppState:
    """Buckets of the last successful poll plus loading and error state."""

    def __init__(
        self,
        service: PRService,
        secrets: SecretStore,
        notifier: Notifier | None = None,
        snoozes: SnoozeManager | None = None,
        settings: SettingsStore | None = None,
        url_opener: Callable[[str], bool] = open_url,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._service = service
        self._secrets = secrets
        self._notifier = notifier or LogNotifier()
        self.snoozes = snoozes or SnoozeManager(MemoryBlobStore(), clock=clock)
        self.settings = settings or SettingsStore(MemoryBlobStore())
        self._url_opener = url_opener
        self._clock = clock
        self._lock = threading.Lock()
        self._tracker = NotificationTracker()

        self.results = PRFetchResults()
        self.is_loading = False
        self.is_first_load = True
        self.last_updated: datetime | None = None
        self.error: str | None = None

    @property
    def service(self) -> PRService:
        return self._service

    @property
    def needs_review(self) -> list[PullRequest]:
        return self.results.needs_review

    @property
    def waiting_for_reviewers(self) -> list[PullRequest]:
        return self.results.waiting_for_reviewers

    @property
    def approved(self) -> list[PullRequest]:
        return self.results.approved

    @property
    def changes_requested(self) -> list[PullRequest]:
        return self.results.changes_requested

    @property
    def my_changes_requested(self) -> list[PullRequest]:
        return self.results.my_changes_requested

    @property
    def drafts(self) -> list[PullRequest]:
        return self.results.drafts

    @property
    def notifications_enabled(self) -> bool:
        return self.settings.settings.notifications_enabled

    def set_notifications_enabled(self, enabled: bool) -> None:
        self.settings.update(notifications_enabled=enabled)

    def refresh(self) -> None:
        """Fetch PRs, notify about new ones and replace the buckets.

        On failure the error message is kept in self.error and the previous
        buckets stay as they are.
        """
        with self._lock:
            if self.is_loading:
                LOG.debug("Refresh already running, skipped")
                return
            self.is_loading = True
            self.error = None

        try:
            results = self._service.fetch_all_prs(self._secrets.get_secret())
        except (GitHubError, requests.RequestException) as e:
            LOG.warning("Refresh failed: %s", e)
            with self._lock:
                self.error = str(e)
                self.is_loading = False
            return
        except Exception:
            with self._lock:
                self.is_loading = False
            raise

        with self._lock:
            notifications: list[Notification] = []
            if not self.is_first_load and self.notifications_enabled:
                notifications = self._tracker.diff(results)
            self._tracker.update(results)
            self.results = results
            self.last_updated = self._clock()
            self.is_first_load = False
            self.is_loading = False

        LOG.info(
            "Refreshed: %d need review, %d waiting, %d approved, %d returned, %d reviewed, %d drafts",
            len(results.needs_review),
            len(results.waiting_for_reviewers),
            len(results.approved),
            len(results.changes_requested),
            len(results.my_changes_requested),
            len(results.drafts),
        )
        for notification in notifications:
            self._deliver(notification)

    def visible_results(self) -> PRFetchResults:
        """Buckets without snoozed PRs (expired snoozes are cleaned first)."""
        self.snoozes.clean_expired()
        return self.results.without(self.snoozes.snoozed_ids)

    @property
    def needs_review_count(self) -> int:
        return len(self.visible_results().needs_review)

    def find_pr(self, ref: str) -> PullRequest | None:
        """Find a PR in the current buckets by id, URL or owner/repo#number."""
        for name in BUCKET_NAMES:
            for pr in getattr(self.results, name):
                if ref in (pr.id, pr.url, f"{pr.repository}#{pr.number}"):
                    return pr
        return None

    def open_pr(self, pr: PullRequest) -> bool:
        return self._url_opener(pr.url)

    def reset_notification_tracking(self) -> None:
        """Forget seen PRs; the next refresh notifies about every tracked PR."""
        with self._lock:
            self._tracker.reset()
        LOG.info("Notification tracking reset")

    def send_test_notification(self, kind: str) -> Notification:
        """Show a sample notification of kind review, approved or changes."""
        sample = PullRequest(
            id="test",
            number=1,
            title="Test pull request",
            url="https://github.com/owner/repo/pull/1",
            repository="owner/repo",
            author="octocat",
            created_at=self._clock(),
            updated_at=self._clock(),
        )
        builders = {
            "review": lambda: review_requested_notification([sample]),
            "approved": lambda: approved_notification(sample),
            "changes": lambda: changes_requested_notification(sample),
        }
        if kind not in builders:
            raise ValueError(f"Unknown notification kind: {kind}")
        notification = builders[kind]()
        self._deliver(notification)
        return notification

    def _deliver(self, notification: Notification) -> None:
        try:
            self._notifier.show_notification(notification)
        except Exception as e:
            LOG.warning("Failed to show notification %r: %s", notification.title, e)
