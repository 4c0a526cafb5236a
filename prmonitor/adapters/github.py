"""GitHub GraphQL adapter.

Runs the three PR searches concurrently and hands the parsed nodes to the
classifier. Each search returns at most 50 PRs; there is no pagination.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Dict, List

import requests
from pydantic import ValidationError

from prmonitor.adapters.base import (
    ApiError,
    DecodingError,
    InvalidResponseError,
    NoTokenError,
    PRService,
)
from prmonitor.models import PRFetchResults, PullRequest, ReviewDecision, Reviewer
from prmonitor.services.classifier import classify

LOG = logging.getLogger("prmonitor.adapters.github")

REVIEW_REQUESTED_QUERY = "is:pr is:open -is:draft review-requested:@me"
AUTHORED_QUERY = "is:pr is:open author:@me"
REVIEWED_QUERY = "is:pr is:open -is:draft reviewed-by:@me -author:@me -review:approved"

SEARCH_LIMIT = 50

_SEARCH_TEMPLATE = """\
{
  search(query: "%(query)s", type: ISSUE, first: %(limit)d) {
    nodes {
      ... on PullRequest {
        id
        number
        title
        url
        isDraft
        createdAt
        updatedAt
        author {
          login
          avatarUrl(size: 64)
        }
        repository {
          nameWithOwner
        }
        reviewDecision
        additions
        deletions
        changedFiles
        totalCommentsCount
        reviewRequests(first: 5) {
          nodes {
            requestedReviewer {
              ... on User {
                login
                avatarUrl(size: 64)
              }
            }
          }
        }
        latestReviews(first: 5) {
          nodes {
            author {
              login
              avatarUrl(size: 64)
            }
          }
        }
      }
    }
  }
}"""


def build_search_query(query: str, limit: int = SEARCH_LIMIT) -> str:
    """GraphQL document for one PR search."""
    return _SEARCH_TEMPLATE % {"query": query, "limit": limit}


def _parse_iso(s: Any) -> datetime | None:
    if not isinstance(s, str):
        return None
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None


def _non_negative(value: Any) -> int:
    return value if isinstance(value, int) and value >= 0 else 0


def _connection_nodes(node: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    conn = node.get(key) or {}
    return [n for n in (conn.get("nodes") or []) if isinstance(n, dict)]


def merge_reviewers(node: Dict[str, Any]) -> tuple[Reviewer, ...]:
    """Requested reviewers, then latest reviewers, first occurrence per login."""
    people = [(n.get("requestedReviewer") or {}) for n in _connection_nodes(node, "reviewRequests")]
    people += [(n.get("author") or {}) for n in _connection_nodes(node, "latestReviews")]
    seen: set[str] = set()
    reviewers: list[Reviewer] = []
    for person in people:
        login = person.get("login")
        # Team review requests have no login
        if not login or login in seen:
            continue
        seen.add(login)
        reviewers.append(Reviewer(login=login, avatar_url=person.get("avatarUrl")))
    return tuple(reviewers)


def _pr_from_node(node: Any) -> PullRequest | None:
    """Build PullRequest from a search node; None if a required field is missing."""
    if not isinstance(node, dict):
        return None
    author = node.get("author") or {}
    repository = node.get("repository") or {}
    created_at = _parse_iso(node.get("createdAt"))
    required = (
        node.get("id"),
        node.get("number"),
        node.get("title"),
        repository.get("nameWithOwner"),
        author.get("login"),
        created_at,
    )
    if any(value is None for value in required) or not node.get("url"):
        return None
    try:
        return _build_pr(node, author, repository, created_at)
    except ValidationError:
        return None


def _build_pr(
    node: Dict[str, Any],
    author: Dict[str, Any],
    repository: Dict[str, Any],
    created_at: datetime,
) -> PullRequest:
    return PullRequest(
        id=node["id"],
        number=node["number"],
        title=node["title"],
        url=node["url"],
        repository=repository["nameWithOwner"],
        author=author["login"],
        author_avatar_url=author.get("avatarUrl"),
        created_at=created_at,
        updated_at=_parse_iso(node.get("updatedAt")) or created_at,
        is_draft=bool(node.get("isDraft")),
        review_decision=ReviewDecision.parse(node.get("reviewDecision")),
        additions=_non_negative(node.get("additions")),
        deletions=_non_negative(node.get("deletions")),
        changed_files=_non_negative(node.get("changedFiles")),
        total_comments=_non_negative(node.get("totalCommentsCount")),
        reviewers=merge_reviewers(node),
    )


def parse_search_response(payload: Any) -> List[PullRequest]:
    """Turn a decoded GraphQL response into PRs.

    Raises ApiError when the response carries errors and DecodingError when
    the search result is not where it should be. Malformed nodes are dropped.
    """
    if not isinstance(payload, dict):
        raise DecodingError("response is not a JSON object")
    errors = payload.get("errors")
    if errors:
        first = errors[0] if isinstance(errors, list) else None
        message = first.get("message") if isinstance(first, dict) else None
        raise ApiError(message or "Unknown error")
    data = payload.get("data")
    if data is None:
        return []
    search = data.get("search") if isinstance(data, dict) else None
    nodes = search.get("nodes") if isinstance(search, dict) else None
    if not isinstance(nodes, list):
        raise DecodingError("missing data.search.nodes")
    prs = []
    for node in nodes:
        pr = _pr_from_node(node)
        if pr is None:
            LOG.debug("Dropped search node without required fields: %r", node)
            continue
        prs.append(pr)
    return prs


def _strip_version_prefix(tag: str) -> str:
    return tag[1:] if tag.startswith("v") else tag


def _version_tuple(version: str) -> tuple[int, ...]:
    parts = []
    for part in _strip_version_prefix(version.strip()).split("."):
        digits = "".join(ch for ch in part if ch.isdigit())
        parts.append(int(digits) if digits else 0)
    return tuple(parts)


def is_newer_version(current: str, latest: str | None) -> bool:
    """True when latest is a higher dotted version than current."""
    if not latest:
        return False
    return _version_tuple(latest) > _version_tuple(current)


class GitHubService(PRService):
    """GitHub GraphQL implementation."""

    def __init__(
        self,
        graphql_url: str = "https://api.github.com/graphql",
        api_url: str = "https://api.github.com",
        release_repo: str = "prmonitor/prmonitor",
        timeout: int = 30,
    ) -> None:
        self._graphql_url = graphql_url
        self._api_url = api_url.rstrip("/")
        self._release_repo = release_repo
        self._timeout = timeout
        self._session = requests.Session()

    def fetch_all_prs(self, token: str | None) -> PRFetchResults:
        if not token:
            raise NoTokenError()
        queries = (REVIEW_REQUESTED_QUERY, AUTHORED_QUERY, REVIEWED_QUERY)
        with ThreadPoolExecutor(max_workers=len(queries), thread_name_prefix="prmonitor-search") as pool:
            futures = [pool.submit(self.fetch_prs, query, token) for query in queries]
            # result() re-raises the failure of the first failed search
            review_requested, authored, reviewed = (f.result() for f in futures)
        LOG.debug(
            "Fetched %d review-requested, %d authored, %d reviewed PRs",
            len(review_requested),
            len(authored),
            len(reviewed),
        )
        return classify(review_requested, authored, reviewed)

    def fetch_prs(self, query: str, token: str) -> List[PullRequest]:
        """Run one search query and parse its nodes."""
        resp = self._session.request(
            "POST",
            self._graphql_url,
            json={"query": build_search_query(query)},
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
            timeout=self._timeout,
        )
        if resp.status_code != 200:
            raise InvalidResponseError(resp.status_code)
        try:
            payload = resp.json()
        except ValueError as e:
            raise DecodingError(str(e)) from e
        return parse_search_response(payload)

    def fetch_latest_release(self) -> str | None:
        url = f"{self._api_url}/repos/{self._release_repo}/releases/latest"
        resp = self._session.request(
            "GET",
            url,
            headers={"Accept": "application/vnd.github+json"},
            timeout=self._timeout,
        )
        # 404: the repo has no releases yet
        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            LOG.warning("Release check failed: %s %s", resp.status_code, resp.reason)
            return None
        try:
            tag = resp.json().get("tag_name")
        except (ValueError, AttributeError):
            return None
        if not isinstance(tag, str) or not tag:
            return None
        return _strip_version_prefix(tag)
