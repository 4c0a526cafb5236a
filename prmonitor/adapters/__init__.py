"""Pull request sources (GitHub GraphQL)."""

from prmonitor.adapters.base import (
    ApiError,
    DecodingError,
    GitHubError,
    InvalidResponseError,
    NoTokenError,
    PRService,
)

__all__ = [
    "ApiError",
    "DecodingError",
    "GitHubError",
    "InvalidResponseError",
    "NoTokenError",
    "PRService",
]
