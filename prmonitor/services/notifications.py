"""Decide which PRs trigger a notification by diffing successive polls.

Only three buckets are tracked: needs_review, approved and
changes_requested. After each poll the tracked ids are replaced by the
bucket's current ids, so a PR that leaves a bucket and comes back later
notifies again.
"""

from collections.abc import Sequence

from prmonitor.models import Notification, PRFetchResults, PullRequest

REVIEW_REQUESTED_URL = "https://github.com/pulls/review-requested"

ICON_REVIEW_REQUESTED = "review-requested"
ICON_APPROVED = "approved"
ICON_CHANGES_REQUESTED = "changes-requested"

TRACKED_BUCKETS = ("needs_review", "approved", "changes_requested")


def new_prs(current: Sequence[PullRequest], seen_ids: set[str]) -> list[PullRequest]:
    """PRs of current whose id is not in seen_ids, in bucket order."""
    return [pr for pr in current if pr.id not in seen_ids]


def review_requested_notification(prs: Sequence[PullRequest]) -> Notification | None:
    """One notification for a single new review request, a summary for more."""
    if not prs:
        return None
    if len(prs) == 1:
        pr = prs[0]
        return Notification(
            title="Review requested",
            subtitle=pr.reference,
            body=pr.title,
            icon_asset=ICON_REVIEW_REQUESTED,
            click_url=pr.url,
        )
    return Notification(
        title="Review requested",
        body=f"{len(prs)} pull requests need your review",
        icon_asset=ICON_REVIEW_REQUESTED,
        click_url=REVIEW_REQUESTED_URL,
    )


def approved_notification(pr: PullRequest) -> Notification:
    return Notification(
        title="PR approved",
        subtitle=pr.reference,
        body=pr.title,
        icon_asset=ICON_APPROVED,
        click_url=pr.url,
    )


def changes_requested_notification(pr: PullRequest) -> Notification:
    return Notification(
        title="Changes requested",
        subtitle=pr.reference,
        body=pr.title,
        icon_asset=ICON_CHANGES_REQUESTED,
        click_url=pr.url,
    )


class NotificationTracker:
    """Ids seen in the tracked buckets on the previous poll."""

    def __init__(self) -> None:
        self._seen: dict[str, set[str]] = {name: set() for name in TRACKED_BUCKETS}

    def seen_ids(self, bucket: str) -> set[str]:
        return set(self._seen[bucket])

    def reset(self) -> None:
        """Forget everything; the next poll treats all tracked PRs as new."""
        for ids in self._seen.values():
            ids.clear()

    def diff(self, results: PRFetchResults) -> list[Notification]:
        """Notifications for PRs that appeared since the previous poll."""
        notifications = []
        review = review_requested_notification(new_prs(results.needs_review, self._seen["needs_review"]))
        if review is not None:
            notifications.append(review)
        notifications += [
            approved_notification(pr) for pr in new_prs(results.approved, self._seen["approved"])
        ]
        notifications += [
            changes_requested_notification(pr)
            for pr in new_prs(results.changes_requested, self._seen["changes_requested"])
        ]
        return notifications

    def update(self, results: PRFetchResults) -> None:
        """Replace the tracked ids with the ids of this poll."""
        for name in TRACKED_BUCKETS:
            self._seen[name] = {pr.id for pr in getattr(results, name)}
