"""GitHub directory routes: contributors, org members, recent commits, repo validation."""

from flask import Blueprint, jsonify, request

from activity_reports.cache.memory_cache import cached
from activity_reports.config import ConfigurationError, get_config
from activity_reports.services.contributor_service import (
    list_all_contributors, list_contributors_with_recent_commits, list_repo_contributors,
)
from activity_reports.services.github_service import (
    AccessDenied, GitHubClient, NotFound, Unavailable, UpstreamError,
)
from activity_reports.routes.common import error_response

github_bp = Blueprint("github", __name__, url_prefix="/api/v1/github")

TOKEN_MISSING = "GitHub token not configured"


def _client(config):
    return GitHubClient(config.require_token(), timeout=config.request_timeout_seconds)


@cached()
def _contributors(repos):
    config = get_config()
    with _client(config) as client:
        return [c.to_dict() for c in list_repo_contributors(client, list(repos))]


@cached()
def _all_contributors(repos):
    config = get_config()
    with _client(config) as client:
        return [c.to_dict() for c in list_all_contributors(client, list(repos))]


@cached()
def _contributors_with_commits(repos):
    config = get_config()
    with _client(config) as client:
        return list_contributors_with_recent_commits(client, list(repos))


def _directory_response(loader):
    config = get_config()
    try:
        return jsonify(loader(tuple(config.repository_list())))
    except ConfigurationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        return error_response("Internal server error", 500, f"{loader.__name__} failed: {e}")


@github_bp.route("/contributors")
def get_contributors():
    """Contributors of the configured repositories."""
    return _directory_response(_contributors)


@github_bp.route("/all-contributors")
def get_all_contributors():
    """Contributors plus organization members."""
    return _directory_response(_all_contributors)


@github_bp.route("/contributors-with-commits")
def get_contributors_with_commits():
    """Contributors with their latest commits per repository."""
    return _directory_response(_contributors_with_commits)


@github_bp.route("/repo/validate")
def validate_repo():
    """Check that a repository exists and the token can read it."""
    config = get_config()
    if not config.github_token:
        return jsonify({"error": TOKEN_MISSING})

    repo = (request.args.get("repo") or "").strip()
    if not repo:
        return jsonify({"error": "repo parameter required"})

    try:
        with _client(config) as client:
            metadata = client.get_repo_metadata(repo)
    except NotFound:
        return jsonify({"error": "Repository not found"})
    except AccessDenied:
        return jsonify({"error": "No access to repository"})
    except Unavailable:
        return jsonify({"error": "Failed to connect to GitHub"})
    except UpstreamError as e:
        return jsonify({"error": f"GitHub API error: {e.body}"})

    return jsonify({"name": metadata.full_name, "private": metadata.private})
