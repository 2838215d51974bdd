"""Weekly commit stats aggregation across repositories.

Each (repository, ISO week) cell is read from the week cache when the week is
completed, otherwise fetched from GitHub. Completed, non-empty weeks are
written back. Cells that fail upstream are logged and skipped.
"""

import logging
import sqlite3
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Dict, List, Optional

from activity_reports.config import ConfigurationError
from activity_reports.models import (
    ContributorStat, RepoWeekRecord, StatsSummary, UserStats, merge_stats, short_repo_name,
)
from activity_reports.services.github_service import (
    DEFAULT_TIMEOUT_SECONDS, GitHubClient, GitHubError,
)
from activity_reports.services.identity_service import IdentityLookup, resolve_identity
from activity_reports.utils.weeks import (
    FormatError, ISOWeek, current_week, is_completed, parse, to_monday, weeks_before, week_range,
    window,
)

logger = logging.getLogger(__name__)

DEFAULT_WEEKS_BACK = 4
# Upper bound on the weeks one request may span (two years)
MAX_WEEKS = 105


def _timestamp(now: datetime) -> str:
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def fetch_week_from_github(client: GitHubClient, repo: str, week: ISOWeek,
                           now: Optional[datetime] = None) -> RepoWeekRecord:
    """Count commits per author login for one repository and week.

    Line totals are not fetched (that would take one request per commit), so
    added/removed stay at zero. Only the first page (100 commits) is read.
    Commits without a linked GitHub account are skipped.
    """
    since, until = window(week)
    commits = client.list_commits(repo, since=since, until=until)

    users: Dict[str, ContributorStat] = {}
    for commit in commits:
        if not commit.author_login:
            continue
        stat = users.setdefault(commit.author_login, ContributorStat())
        stat.commits += 1

    return RepoWeekRecord(
        repo=repo,
        week=week.label,
        users=users,
        fetched_at=_timestamp(now or datetime.now(timezone.utc)),
    )


def get_weekly_stats(client: GitHubClient, week_cache, repo: str, week: ISOWeek,
                     completed: bool, now: Optional[datetime] = None) -> Optional[RepoWeekRecord]:
    """Stats for one cell, read through the cache for completed weeks.

    The current week is always fetched fresh. Returns None when the upstream
    fetch fails.
    """
    if completed and week_cache is not None:
        cached = week_cache.get(repo, week.label)
        if cached is not None:
            return cached

    try:
        record = fetch_week_from_github(client, repo, week, now)
    except GitHubError as e:
        logger.warning(f"Skipping {repo} {week.label}: {e}")
        return None

    if completed and week_cache is not None and record.total_commits > 0:
        try:
            week_cache.put(repo, week.label, record)
        except sqlite3.Error as e:
            logger.error(f"Failed to cache {repo} {week.label}: {e}")

    return record


def resolve_week_window(week_start: Optional[str], week_end: Optional[str],
                        now: Optional[datetime] = None):
    """Fill in the default window (four weeks back through the current week).

    Returns canonical labels. Raises FormatError for a malformed label.
    """
    this_week = current_week(now)
    if week_start and week_start.strip():
        start = parse(week_start)
    else:
        start = weeks_before(this_week, DEFAULT_WEEKS_BACK)
    end = parse(week_end) if week_end and week_end.strip() else this_week
    return start.label, end.label


def check_range_size(week_start: str, week_end: str, limit: int = MAX_WEEKS) -> None:
    """Raise FormatError when the range spans more than `limit` calendar weeks."""
    span = (to_monday(parse(week_end)) - to_monday(parse(week_start))).days // 7 + 1
    if span > limit:
        raise FormatError(f"Week range {week_start}..{week_end} spans {span} weeks; at most {limit} allowed")


def compute_stats(repos: List[str], week_start: Optional[str], week_end: Optional[str],
                  token: str, mappings: Dict[str, str], client: Optional[GitHubClient] = None,
                  week_cache=None, identity_lookup: Optional[IdentityLookup] = None,
                  now: Optional[datetime] = None, max_workers: int = 1,
                  timeout: Optional[float] = None) -> StatsSummary:
    """Aggregate per-user commit stats for the repositories and week range.

    Raises:
        ConfigurationError: no GitHub token (raised before any request is made).
        FormatError: a week label is malformed, or the range is too long.
    """
    if not token or not token.strip():
        raise ConfigurationError("GitHub token not configured")

    now = now or datetime.now(timezone.utc)
    week_start, week_end = resolve_week_window(week_start, week_end, now)
    check_range_size(week_start, week_end)
    weeks = week_range(week_start, week_end)

    repos = [repo.strip() for repo in repos if repo and repo.strip()]
    cells = [(repo, week) for repo in repos for week in weeks]

    owns_client = client is None
    if owns_client:
        client = GitHubClient(token, timeout=timeout or DEFAULT_TIMEOUT_SECONDS)

    def fetch_cell(cell):
        repo, week = cell
        return get_weekly_stats(client, week_cache, repo, week, is_completed(week, now), now)

    try:
        if max_workers > 1 and len(cells) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                records = list(executor.map(fetch_cell, cells))
        else:
            records = [fetch_cell(cell) for cell in cells]
    finally:
        if owns_client:
            client.close()

    totals: Dict[str, ContributorStat] = {}
    by_repo: Dict[str, Dict[str, int]] = {}
    active_repos: List[str] = []

    for (repo, _week), record in zip(cells, records):
        if record is None:
            continue
        short_repo = short_repo_name(repo)
        totals = merge_stats(totals, record.users)
        for login, stat in record.users.items():
            if stat.commits > 0:
                if short_repo not in active_repos:
                    active_repos.append(short_repo)
                repo_counts = by_repo.setdefault(login, {})
                repo_counts[short_repo] = repo_counts.get(short_repo, 0) + stat.commits

    users = []
    for login, stat in totals.items():
        if stat.commits == 0:
            continue
        identity = resolve_identity(login, mappings, identity_lookup)
        users.append(UserStats(
            id=identity.id,
            username=identity.username,
            name=identity.display_name,
            login=login,
            commits=stat.commits,
            added=stat.added,
            removed=stat.removed,
            by_repo=by_repo.get(login, {}),
        ))

    users.sort(key=lambda u: u.commits, reverse=True)

    logger.info(f"Computed stats for {len(repos)} repos over {len(weeks)} weeks "
                f"({week_start}..{week_end}): {len(users)} active users")

    return StatsSummary(
        users=users,
        repos=active_repos,
        week_start=week_start,
        week_end=week_end,
        last_updated=_timestamp(now),
    )
