"""Tests for notification texts and NotificationTracker."""

from prmonitor.models import PRFetchResults
from prmonitor.services.notifications import (
    REVIEW_REQUESTED_URL,
    NotificationTracker,
    approved_notification,
    changes_requested_notification,
    new_prs,
    review_requested_notification,
)


def test_new_prs_keeps_bucket_order(make_pr) -> None:
    prs = [make_pr("a"), make_pr("b"), make_pr("c")]

    assert [pr.id for pr in new_prs(prs, {"b"})] == ["a", "c"]


def test_single_review_request(make_pr) -> None:
    pr = make_pr("pr-1", number=12, title="Add cache")

    n = review_requested_notification([pr])

    assert n.title == "Review requested"
    assert n.subtitle == "owner/repo #12"
    assert n.body == "Add cache"
    assert n.click_url == pr.url


def test_many_review_requests_summarized(make_pr) -> None:
    n = review_requested_notification([make_pr("a"), make_pr("b"), make_pr("c")])

    assert n.title == "Review requested"
    assert n.body == "3 pull requests need your review"
    assert n.subtitle is None
    assert n.click_url == REVIEW_REQUESTED_URL


def test_no_review_requests_no_notification() -> None:
    assert review_requested_notification([]) is None


def test_approved_and_changes_texts(make_pr) -> None:
    pr = make_pr("pr-1", number=3, title="Refactor")

    approved = approved_notification(pr)
    changes = changes_requested_notification(pr)

    assert (approved.title, approved.subtitle, approved.body) == ("PR approved", "owner/repo #3", "Refactor")
    assert (changes.title, changes.subtitle, changes.body) == ("Changes requested", "owner/repo #3", "Refactor")


class TestNotificationTracker:
    """diff() notifies about ids not seen in the previous poll."""

    def test_only_new_ids_notify(self, make_pr) -> None:
        tracker = NotificationTracker()
        tracker.update(PRFetchResults(needs_review=[make_pr("a")]))

        notes = tracker.diff(PRFetchResults(needs_review=[make_pr("a"), make_pr("b", title="New one")]))

        assert len(notes) == 1
        assert notes[0].body == "New one"

    def test_one_notification_per_approved_and_returned(self, make_pr) -> None:
        tracker = NotificationTracker()
        results = PRFetchResults(
            approved=[make_pr("a1"), make_pr("a2")],
            changes_requested=[make_pr("c1")],
        )

        notes = tracker.diff(results)

        assert [n.title for n in notes] == ["PR approved", "PR approved", "Changes requested"]

    def test_untracked_buckets_never_notify(self, make_pr) -> None:
        tracker = NotificationTracker()
        results = PRFetchResults(
            waiting_for_reviewers=[make_pr("w")],
            my_changes_requested=[make_pr("m")],
            drafts=[make_pr("d")],
        )

        assert tracker.diff(results) == []

    def test_update_replaces_seen_ids(self, make_pr) -> None:
        """A PR that leaves a bucket and comes back notifies again."""
        tracker = NotificationTracker()
        tracker.update(PRFetchResults(approved=[make_pr("a")]))
        tracker.update(PRFetchResults())

        notes = tracker.diff(PRFetchResults(approved=[make_pr("a")]))

        assert tracker.seen_ids("approved") == set()
        assert [n.title for n in notes] == ["PR approved"]

    def test_reset_forgets_everything(self, make_pr) -> None:
        tracker = NotificationTracker()
        results = PRFetchResults(needs_review=[make_pr("a")], approved=[make_pr("b")])
        tracker.update(results)

        tracker.reset()

        assert len(tracker.diff(results)) == 2
