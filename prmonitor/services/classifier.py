"""Merge the three search results into the six PR buckets.

- needs_review: review requested from me, not a draft, and not already
  approved or returned with changes (GitHub keeps listing me as a requested
  reviewer in those cases).
- authored PRs: draft, else approved, else changes requested, else waiting.
- my_changes_requested: PRs I reviewed plus review requests with changes
  requested, deduplicated by id, minus anything in needs_review (a PR
  re-requested after my review needs action again).
"""

from collections.abc import Iterable

from prmonitor.models import PRFetchResults, PullRequest, ReviewDecision

_HANDLED_DECISIONS = (ReviewDecision.APPROVED, ReviewDecision.CHANGES_REQUESTED)


def _dedupe(prs: Iterable[PullRequest], exclude: set[str]) -> list[PullRequest]:
    """Keep the first PR per id, skipping ids in exclude."""
    seen: set[str] = set()
    result: list[PullRequest] = []
    for pr in prs:
        if pr.id in seen:
            continue
        seen.add(pr.id)
        if pr.id not in exclude:
            result.append(pr)
    return result


def classify(
    review_requested: list[PullRequest],
    authored: list[PullRequest],
    reviewed: list[PullRequest],
) -> PRFetchResults:
    """Build PRFetchResults from review-requested, authored and reviewed PRs."""
    results = PRFetchResults()

    results.needs_review = [
        pr for pr in review_requested if not pr.is_draft and pr.review_decision not in _HANDLED_DECISIONS
    ]

    for pr in authored:
        if pr.is_draft:
            results.drafts.append(pr)
        elif pr.review_decision == ReviewDecision.APPROVED:
            results.approved.append(pr)
        elif pr.review_decision == ReviewDecision.CHANGES_REQUESTED:
            results.changes_requested.append(pr)
        else:
            results.waiting_for_reviewers.append(pr)

    requested_with_changes = [
        pr for pr in review_requested if pr.review_decision == ReviewDecision.CHANGES_REQUESTED
    ]
    needs_review_ids = {pr.id for pr in results.needs_review}
    results.my_changes_requested = _dedupe(reviewed + requested_with_changes, exclude=needs_review_ids)

    return results
