"""Shared text helpers for printing PRs (relative times, one-line summaries)."""

from datetime import UTC, datetime

from prmonitor.models import PullRequest


def relative_time(when: datetime, now: datetime | None = None) -> str:
    """Short age of a timestamp: now, 5m ago, 3h ago, 2d ago, or a date.

    Args:
        when: Timestamp to describe (timezone-aware).
        now: Reference time (default: current UTC time).

    Returns:
        "now" under a minute, minutes under an hour, hours under a day,
        days under a week, else the month and day (e.g. "Jan 5").
    """
    now = now or datetime.now(UTC)
    seconds = (now - when).total_seconds()
    if seconds < 60:
        return "now"
    if seconds < 3600:
        return f"{int(seconds // 60)}m ago"
    if seconds < 86_400:
        return f"{int(seconds // 3600)}h ago"
    if seconds < 604_800:
        return f"{int(seconds // 86_400)}d ago"
    return f"{when:%b} {when.day}"


def format_pr_line(pr: PullRequest, now: datetime | None = None) -> str:
    """One line per PR: repo #n title (+adds -dels, comments, age, reviewers)."""
    details = [f"+{pr.additions} -{pr.deletions}"]
    if pr.total_comments:
        details.append(f"{pr.total_comments} comments")
    details.append(f"updated {relative_time(pr.updated_at, now)}")
    if pr.reviewers:
        details.append("reviewers: " + ", ".join(r.login for r in pr.reviewers))
    return f"{pr.reference} {pr.title} ({'; '.join(details)})"
