"""Shared fixtures."""

from datetime import UTC, datetime
from typing import Callable

import pytest

from prmonitor.models import PullRequest, ReviewDecision


@pytest.fixture
def make_pr() -> Callable[..., PullRequest]:
    """Factory for PullRequest with sensible defaults."""

    def _make(
        id: str,
        number: int = 1,
        title: str = "Test PR",
        is_draft: bool = False,
        review_decision: ReviewDecision | None = None,
        repository: str = "owner/repo",
    ) -> PullRequest:
        created = datetime(2025, 1, 15, 10, 0, tzinfo=UTC)
        return PullRequest(
            id=id,
            number=number,
            title=title,
            url=f"https://github.com/{repository}/pull/{number}",
            repository=repository,
            author="alice",
            created_at=created,
            updated_at=created,
            is_draft=is_draft,
            review_decision=review_decision,
        )

    return _make
