"""Pull request model and the six-bucket fetch result."""

from collections.abc import Iterable
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

BUCKET_NAMES = (
    "needs_review",
    "waiting_for_reviewers",
    "approved",
    "changes_requested",
    "my_changes_requested",
    "drafts",
)


class ReviewDecision(str, Enum):
    """Aggregate review state computed by GitHub (GraphQL wire values)."""

    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    REVIEW_REQUIRED = "REVIEW_REQUIRED"

    @classmethod
    def parse(cls, value: str | None) -> "ReviewDecision | None":
        """Map a wire value to a decision; None or unknown values give None."""
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class Reviewer(BaseModel):
    """Requested reviewer or author of a latest review."""

    login: str
    avatar_url: str | None = None

    model_config = {"frozen": True}


class PullRequest(BaseModel):
    """Open pull request as returned by the search API."""

    id: str = Field(..., description="GraphQL node id, unique across GitHub")
    number: int
    title: str
    url: str
    repository: str = Field(..., description="owner/name")
    author: str
    author_avatar_url: str | None = None
    created_at: datetime
    updated_at: datetime
    is_draft: bool = False
    review_decision: ReviewDecision | None = None
    additions: int = Field(default=0, ge=0)
    deletions: int = Field(default=0, ge=0)
    changed_files: int = Field(default=0, ge=0)
    total_comments: int = Field(default=0, ge=0)
    reviewers: tuple[Reviewer, ...] = ()

    model_config = {"frozen": True}

    @property
    def reference(self) -> str:
        """Short human reference, e.g. owner/repo #42."""
        return f"{self.repository} #{self.number}"


class PRFetchResults(BaseModel):
    """PRs of one poll, split into buckets.

    waiting_for_reviewers, approved, changes_requested and drafts partition
    the authored PRs. needs_review and my_changes_requested never share an
    id, but a PR may be in an authored bucket and my_changes_requested.
    """

    needs_review: list[PullRequest] = Field(default_factory=list)
    waiting_for_reviewers: list[PullRequest] = Field(default_factory=list)
    approved: list[PullRequest] = Field(default_factory=list)
    changes_requested: list[PullRequest] = Field(default_factory=list)
    my_changes_requested: list[PullRequest] = Field(default_factory=list)
    drafts: list[PullRequest] = Field(default_factory=list)

    def without(self, ids: Iterable[str]) -> "PRFetchResults":
        """Return a copy with every PR whose id is in ids removed."""
        excluded = set(ids)
        return PRFetchResults(
            **{name: [pr for pr in getattr(self, name) if pr.id not in excluded] for name in BUCKET_NAMES}
        )

    @property
    def total_count(self) -> int:
        return sum(len(getattr(self, name)) for name in BUCKET_NAMES)
