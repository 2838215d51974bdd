"""Tests for the HTTP API."""

from __future__ import annotations

from dataclasses import replace
from unittest.mock import MagicMock, patch

import pytest

from activity_reports.config import get_config, set_config
from activity_reports.database import get_settings_db
from activity_reports.models import Contributor, RepoMetadata, StatsSummary, UserStats
from activity_reports.services.github_service import AccessDenied, NotFound, Unavailable, UpstreamError

AUTH = {"Mattermost-User-Id": "user1"}
ADMIN = {"Mattermost-User-Id": "admin1"}


def _summary():
    return StatsSummary(
        users=[UserStats(id="u1", username="alice.a", name="Alice A", login="alice",
                         commits=3, by_repo={"app": 3})],
        repos=["app"],
        week_start="2026-W01",
        week_end="2026-W02",
        last_updated="2026-01-14T12:00:00Z",
    )


def test_requests_without_identity_are_rejected(client):
    response = client.get("/api/v1/config")
    assert response.status_code == 401
    assert response.get_json() == {"error": "unauthorized"}


def test_custom_identity_header(client):
    set_config(replace(get_config(), identity_header="X-User"))
    assert client.get("/api/v1/config", headers=AUTH).status_code == 401
    assert client.get("/api/v1/config", headers={"X-User": "u"}).status_code == 200


def test_get_config(client):
    response = client.get("/api/v1/config", headers=AUTH)
    assert response.status_code == 200
    assert response.get_json() == {"repositories": "acme/app, acme/api", "mappings": {"alice": "u1"}}


def test_stats_returns_summary(client):
    with patch("activity_reports.routes.stats_routes.compute_stats", return_value=_summary()) as mock_compute:
        response = client.get("/api/v1/stats?week_start=2026-W01&week_end=2026-W02", headers=AUTH)

    assert response.status_code == 200
    body = response.get_json()
    assert body["users"][0] == {
        "id": "u1", "username": "alice.a", "name": "Alice A", "login": "alice",
        "commits": 3, "added": 0, "removed": 0, "by_repo": {"app": 3},
    }
    assert body["repos"] == ["app"]
    assert body["last_updated"] == "2026-01-14T12:00:00Z"

    args = mock_compute.call_args.args
    assert args[0] == ["acme/app", "acme/api"]
    assert args[1:5] == ("2026-W01", "2026-W02", "test-token", {"alice": "u1"})
    assert mock_compute.call_args.kwargs["identity_lookup"] is None


def test_stats_repo_filter(client):
    with patch("activity_reports.routes.stats_routes.compute_stats", return_value=_summary()) as mock_compute:
        client.get("/api/v1/stats?repos=api,acme/unknown", headers=AUTH)
    assert mock_compute.call_args.args[0] == ["acme/api"]


def test_stats_without_token_is_400(client):
    set_config(replace(get_config(), github_token=""))
    response = client.get("/api/v1/stats", headers=AUTH)
    assert response.status_code == 400
    assert "token" in response.get_json()["error"]


def test_stats_bad_week_label_is_400(client):
    response = client.get("/api/v1/stats?week_start=yesterday&week_end=2026-W02", headers=AUTH)
    assert response.status_code == 400


@pytest.mark.parametrize("week", ["0000-W01", "9999-W52"])
def test_stats_year_outside_calendar_is_400(client, week):
    response = client.get(f"/api/v1/stats?week_start={week}&week_end={week}", headers=AUTH)
    assert response.status_code == 400
    assert "Year out of range" in response.get_json()["error"]


def test_stats_overlong_range_is_400(client):
    with patch("activity_reports.services.stats_service.GitHubClient") as mock_cls:
        response = client.get("/api/v1/stats?week_start=2000-W01&week_end=2026-W02", headers=AUTH)
    assert response.status_code == 400
    assert "at most" in response.get_json()["error"]
    mock_cls.assert_not_called()


def test_stats_unexpected_error_is_500(client):
    with patch("activity_reports.routes.stats_routes.compute_stats", side_effect=KeyError("x")):
        response = client.get("/api/v1/stats", headers=AUTH)
    assert response.status_code == 500
    assert response.get_json() == {"error": "Internal server error"}


def test_get_mappings(client):
    response = client.get("/api/v1/mappings", headers=AUTH)
    assert response.get_json() == {"alice": "u1"}


def test_save_mappings_requires_admin(client):
    response = client.post("/api/v1/mappings", json={"bob": "u2"}, headers=AUTH)
    assert response.status_code == 403
    assert get_config().mappings() == {"alice": "u1"}


def test_save_mappings_as_admin(client):
    response = client.post("/api/v1/mappings", json={"bob": "u2"}, headers=ADMIN)

    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}
    assert client.get("/api/v1/mappings", headers=AUTH).get_json() == {"bob": "u2"}
    assert get_settings_db().get_mappings() == {"bob": "u2"}


def test_save_mappings_rejects_invalid_body(client):
    assert client.post("/api/v1/mappings", data="nope", headers=ADMIN).status_code == 400
    assert client.post("/api/v1/mappings", json=["bob"], headers=ADMIN).status_code == 400
    assert client.post("/api/v1/mappings", json={"bob": 2}, headers=ADMIN).status_code == 400


def test_users_without_directory_is_empty(client):
    assert client.get("/api/v1/users", headers=AUTH).get_json() == []


def test_mattermost_users_without_directory_is_400(client):
    assert client.get("/api/v1/mattermost/users", headers=AUTH).status_code == 400


def test_mattermost_users_lists_directory(client):
    from activity_reports.services.mattermost_service import LocalUser

    directory = MagicMock()
    directory.list_users.return_value = [LocalUser(id="u1", username="jdoe", is_bot=True)]
    with patch("activity_reports.routes.mapping_routes.get_directory_client", return_value=directory):
        response = client.get("/api/v1/mattermost/users", headers=AUTH)

    assert response.status_code == 200
    assert response.get_json()[0]["username"] == "jdoe"
    assert response.get_json()[0]["is_bot"] is True
    directory.close.assert_called_once()


def _patched_github_client():
    gh = MagicMock()
    patcher = patch("activity_reports.routes.github_routes.GitHubClient")
    mock_cls = patcher.start()
    mock_cls.return_value.__enter__.return_value = gh
    return patcher, gh


def test_validate_repo(client):
    patcher, gh = _patched_github_client()
    try:
        gh.get_repo_metadata.return_value = RepoMetadata(full_name="acme/app", private=True)
        response = client.get("/api/v1/github/repo/validate?repo=acme/app", headers=AUTH)
    finally:
        patcher.stop()
    assert response.get_json() == {"name": "acme/app", "private": True}


def test_validate_repo_errors(client):
    cases = [
        (NotFound("x"), "Repository not found"),
        (AccessDenied("x"), "No access to repository"),
        (Unavailable("x"), "Failed to connect to GitHub"),
        (UpstreamError(500, "boom"), "GitHub API error: boom"),
    ]
    patcher, gh = _patched_github_client()
    try:
        for error, message in cases:
            gh.get_repo_metadata.side_effect = error
            response = client.get("/api/v1/github/repo/validate?repo=acme/app", headers=AUTH)
            assert response.get_json() == {"error": message}
    finally:
        patcher.stop()


def test_validate_repo_requires_param(client):
    response = client.get("/api/v1/github/repo/validate", headers=AUTH)
    assert response.get_json() == {"error": "repo parameter required"}


def test_directory_endpoints_without_token(client):
    set_config(replace(get_config(), github_token=""))
    for path in ("contributors", "all-contributors", "contributors-with-commits"):
        assert client.get(f"/api/v1/github/{path}", headers=AUTH).status_code == 400


def test_all_contributors_are_cached(client):
    patcher, _gh = _patched_github_client()
    try:
        with patch("activity_reports.routes.github_routes.list_all_contributors",
                   return_value=[Contributor("alice", "a.png")]) as mock_list:
            first = client.get("/api/v1/github/all-contributors", headers=AUTH)
            second = client.get("/api/v1/github/all-contributors", headers=AUTH)
    finally:
        patcher.stop()

    assert first.get_json() == [{"login": "alice", "avatar_url": "a.png", "name": "", "email": ""}]
    assert second.get_json() == first.get_json()
    assert mock_list.call_count == 1
    assert mock_list.call_args.args[1] == ["acme/app", "acme/api"]


def test_contributors_with_commits(client):
    payload = [{"login": "alice", "avatar_url": "", "repos": {"app": []}}]
    patcher, _gh = _patched_github_client()
    try:
        with patch("activity_reports.routes.github_routes.list_contributors_with_recent_commits",
                   return_value=payload):
            response = client.get("/api/v1/github/contributors-with-commits", headers=AUTH)
    finally:
        patcher.stop()
    assert response.get_json() == payload


def test_clear_cache(client):
    from activity_reports.extensions import cache

    cache["key"] = ("value", 0)
    response = client.post("/api/v1/clear-cache", headers=AUTH)
    assert response.status_code == 200
    assert "key" not in cache
