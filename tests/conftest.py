"""Shared fixtures: isolated configuration, SQLite file and Flask client."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from activity_reports import create_app
from activity_reports.config import Configuration, set_config
from activity_reports.database import Database, WeekCacheDB, reset_databases
from activity_reports.extensions import cache, local_user_cache
from activity_reports.models import CommitSummary
from activity_reports.services.github_service import GitHubClient
from activity_reports.utils.weeks import week_of

# Wednesday of 2026-W03; 2026-W01 and 2026-W02 are completed weeks.
NOW = datetime(2026, 1, 14, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("MATTERMOST_TOKEN", raising=False)
    reset_databases()
    config = set_config(Configuration(db_path=str(tmp_path / "test.db")))
    yield config
    reset_databases()
    cache.clear()
    local_user_cache.clear()


@pytest.fixture
def week_cache(tmp_path):
    return WeekCacheDB(Database(tmp_path / "weeks.db"))


@pytest.fixture
def app_config(tmp_path):
    return set_config(Configuration(
        github_token="test-token",
        repositories="acme/app, acme/api",
        user_mappings={"alice": "u1"},
        admin_user_ids=("admin1",),
        db_path=str(tmp_path / "test.db"),
    ))


@pytest.fixture
def client(app_config):
    app = create_app(load_config=False)
    app.config["TESTING"] = True
    return app.test_client()


def commit(login, sha="0123456789abcdef", message="Fix things", date="2026-01-06T10:00:00Z", avatar=""):
    return CommitSummary(
        sha=sha, message=message, author_date=date, author_login=login, author_avatar_url=avatar,
    )


def make_github_client(commits_by_cell):
    """GitHubClient mock whose list_commits answers per (repo, week label).

    A value may be a list of CommitSummary or an exception to raise.
    """
    client = MagicMock(spec=GitHubClient)

    def list_commits(repo, since=None, until=None, per_page=100):
        value = commits_by_cell.get((repo, week_of(since.date()).label), [])
        if isinstance(value, Exception):
            raise value
        return list(value)

    client.list_commits.side_effect = list_commits
    return client
