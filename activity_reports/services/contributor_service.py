"""Contributor directory for the mapping editor: contributors, org members, recent commits."""

import logging
from typing import Any, Dict, List

from activity_reports.models import CommitSummary, Contributor, short_repo_name
from activity_reports.services.github_service import GitHubClient, GitHubError

logger = logging.getLogger(__name__)

RECENT_COMMITS_PER_REPO = 100
COMMITS_PER_CONTRIBUTOR = 3
MESSAGE_MAX_LENGTH = 80


def _org_of(repo: str) -> str:
    return repo.split("/", 1)[0].strip()


def list_repo_contributors(client: GitHubClient, repos: List[str]) -> List[Contributor]:
    """Contributors across repositories, deduplicated by login (last write wins)."""
    contributors: Dict[str, Contributor] = {}
    for repo in repos:
        try:
            for contributor in client.list_contributors(repo):
                if contributor.login:
                    contributors[contributor.login] = contributor
        except GitHubError as e:
            logger.warning(f"Failed to fetch contributors for {repo}: {e}")
    return list(contributors.values())


def list_all_contributors(client: GitHubClient, repos: List[str]) -> List[Contributor]:
    """Repository contributors plus members of every organization the repos belong to."""
    contributors = {c.login: c for c in list_repo_contributors(client, repos)}

    orgs_checked = set()
    for repo in repos:
        org = _org_of(repo)
        if not org or org in orgs_checked:
            continue
        orgs_checked.add(org)
        try:
            for member in client.list_org_members(org):
                if member.login:
                    contributors[member.login] = member
        except GitHubError as e:
            logger.warning(f"Failed to fetch members of org {org}: {e}")

    return list(contributors.values())


def summarize_commit(commit: CommitSummary) -> Dict[str, str]:
    """Short sha, first message line (ellipsized past 80 chars), YYYY-MM-DD date."""
    message = commit.message.split("\n", 1)[0]
    if len(message) > MESSAGE_MAX_LENGTH:
        message = message[:MESSAGE_MAX_LENGTH - 3] + "..."
    return {
        "sha": commit.sha[:7],
        "message": message,
        "date": commit.author_date[:10],
    }


def list_contributors_with_recent_commits(client: GitHubClient, repos: List[str]) -> List[Dict[str, Any]]:
    """Contributors with up to three of their most recent commits per repository.

    For forks, commits before the fork was created are ignored so upstream
    history is not attributed to the fork's contributors.
    """
    contributors: Dict[str, Dict[str, Any]] = {}

    for repo in repos:
        since = None
        try:
            metadata = client.get_repo_metadata(repo)
            if metadata.fork and metadata.created_at:
                since = metadata.created_at
        except GitHubError as e:
            logger.warning(f"Failed to fetch metadata for {repo}, listing commits unbounded: {e}")

        try:
            commits = client.list_commits(repo, since=since, per_page=RECENT_COMMITS_PER_REPO)
        except GitHubError as e:
            logger.warning(f"Failed to fetch recent commits for {repo}: {e}")
            continue

        short_repo = short_repo_name(repo)
        for commit in commits:
            login = commit.author_login
            if not login:
                continue
            entry = contributors.setdefault(login, {
                "login": login,
                "avatar_url": commit.author_avatar_url,
                "repos": {},
            })
            repo_commits = entry["repos"].setdefault(short_repo, [])
            if len(repo_commits) < COMMITS_PER_CONTRIBUTOR:
                repo_commits.append(summarize_commit(commit))

    return list(contributors.values())
