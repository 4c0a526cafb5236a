"""Data models for pull requests, snoozes and notifications (Pydantic)."""

from prmonitor.models.notification import Notification
from prmonitor.models.pull_request import PRFetchResults, PullRequest, ReviewDecision, Reviewer
from prmonitor.models.snooze import SnoozeDuration, SnoozeEntry

__all__ = [
    "Notification",
    "PRFetchResults",
    "PullRequest",
    "ReviewDecision",
    "Reviewer",
    "SnoozeDuration",
    "SnoozeEntry",
]
