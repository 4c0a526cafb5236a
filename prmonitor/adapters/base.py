"""Abstract base for PR sources and the fetch error taxonomy."""

from abc import ABC, abstractmethod

from prmonitor.models import PRFetchResults


class GitHubError(Exception):
    """Raised when fetching pull requests fails."""

    pass


class NoTokenError(GitHubError):
    """No credential is configured; the user has to add one."""

    def __init__(self) -> None:
        super().__init__("No GitHub token configured. Add your token with 'prmonitor token set'.")


class InvalidResponseError(GitHubError):
    """HTTP status other than 200."""

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"GitHub API returned status {status_code}")


class ApiError(GitHubError):
    """GraphQL response carried an errors array (e.g. bad credentials)."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"GitHub API error: {message}")


class DecodingError(GitHubError):
    """Response body could not be parsed into the expected shape."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Failed to parse response: {message}")


class PRService(ABC):
    """Source of the categorized pull requests of the token's user."""

    @abstractmethod
    def fetch_all_prs(self, token: str | None) -> PRFetchResults:
        """Fetch and classify open PRs. Raises GitHubError subclasses."""
        ...

    def fetch_latest_release(self) -> str | None:
        """Latest released version without a leading 'v'. Override if needed."""
        return None
