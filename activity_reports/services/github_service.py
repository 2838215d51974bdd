"""GitHub REST client: commits, contributors, org members, repo metadata.

Every non-2xx response is raised as a GitHubError subclass so callers can
skip the failing repository or week and keep going.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from activity_reports.models import CommitSummary, Contributor, RepoMetadata

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
COMMITS_TIMEOUT_SECONDS = 30
DEFAULT_TIMEOUT_SECONDS = 15
PAGE_SIZE = 100


class GitHubError(RuntimeError):
    """Base class for upstream failures."""


class NotFound(GitHubError):
    pass


class AccessDenied(GitHubError):
    pass


class Unavailable(GitHubError):
    """Network error or timeout talking to GitHub."""


class UpstreamError(GitHubError):
    def __init__(self, status: int, body: str = ""):
        self.status = status
        self.body = body
        super().__init__(f"GitHub API error {status}: {body[:200]}")


def _format_timestamp(value) -> str:
    if isinstance(value, str):
        return value
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


class GitHubClient:
    """Thin authenticated wrapper around the GitHub REST API."""

    def __init__(self, token: str, timeout: float = DEFAULT_TIMEOUT_SECONDS,
                 base_url: str = GITHUB_API_URL, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        })

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None):
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.get(url, params=params, timeout=timeout or self.timeout)
        except requests.exceptions.RequestException as e:
            raise Unavailable(f"Failed to reach GitHub for {path}: {e}") from e

        if response.headers.get("X-RateLimit-Remaining") == "0":
            logger.warning(
                f"GitHub rate limit exhausted (reset at {response.headers.get('X-RateLimit-Reset')})"
            )

        status = response.status_code
        if status == 404:
            raise NotFound(f"{path} not found")
        if status in (401, 403):
            raise AccessDenied(f"No access to {path} ({status})")
        if not 200 <= status < 300:
            raise UpstreamError(status, response.text)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(status, f"invalid JSON: {e}") from e

    def _get_list(self, path: str, params: Optional[Dict[str, Any]] = None,
                  timeout: Optional[float] = None) -> List[Dict[str, Any]]:
        data = self._get(path, params=params, timeout=timeout)
        if not isinstance(data, list):
            raise UpstreamError(200, f"expected a list from {path}")
        return [item for item in data if isinstance(item, dict)]

    def list_commits(self, repo: str, since=None, until=None, per_page: int = PAGE_SIZE) -> List[CommitSummary]:
        """One page of commits in [since, until), newest first.

        Only the first page is fetched. Windows holding more than `per_page`
        commits are undercounted.
        """
        params: Dict[str, Any] = {"per_page": per_page}
        if since is not None:
            params["since"] = _format_timestamp(since)
        if until is not None:
            params["until"] = _format_timestamp(until)
        items = self._get_list(f"repos/{repo}/commits", params=params, timeout=COMMITS_TIMEOUT_SECONDS)
        return [CommitSummary.from_api(item) for item in items]

    def list_contributors(self, repo: str) -> List[Contributor]:
        items = self._get_list(f"repos/{repo}/contributors", params={"per_page": PAGE_SIZE})
        return [Contributor.from_api(item) for item in items]

    def list_org_members(self, org: str) -> List[Contributor]:
        items = self._get_list(f"orgs/{org}/members", params={"per_page": PAGE_SIZE})
        return [Contributor.from_api(item) for item in items]

    def get_repo_metadata(self, repo: str) -> RepoMetadata:
        data = self._get(f"repos/{repo}")
        if not isinstance(data, dict):
            raise UpstreamError(200, f"expected an object from repos/{repo}")
        return RepoMetadata.from_api(data)
