"""Stats routes: dashboard configuration and weekly commit stats."""

from flask import Blueprint, jsonify, request

from activity_reports.config import ConfigurationError, get_config, parse_repositories
from activity_reports.database import get_week_cache_db
from activity_reports.models import short_repo_name
from activity_reports.services.identity_service import get_directory_client
from activity_reports.services.stats_service import compute_stats
from activity_reports.utils.weeks import FormatError
from activity_reports.routes.common import error_response

stats_bp = Blueprint("stats", __name__, url_prefix="/api/v1")


def _select_repos(configured, requested):
    """Restrict the configured repositories to those named in ?repos= (full or short names)."""
    if not requested:
        return configured
    wanted = set(parse_repositories(requested))
    return [repo for repo in configured if repo in wanted or short_repo_name(repo) in wanted]


@stats_bp.route("/config")
def get_dashboard_config():
    """Repositories and login mappings for the dashboard."""
    config = get_config()
    return jsonify({
        "repositories": config.repositories,
        "mappings": config.mappings(),
    })


@stats_bp.route("/stats")
def get_stats():
    """Per-user commit stats for the configured repositories over a week range."""
    config = get_config()
    repos = _select_repos(config.repository_list(), request.args.get("repos"))
    directory = get_directory_client(config)

    try:
        summary = compute_stats(
            repos,
            request.args.get("week_start"),
            request.args.get("week_end"),
            config.github_token,
            config.mappings(),
            week_cache=get_week_cache_db(),
            identity_lookup=directory.get_user if directory else None,
            max_workers=config.max_workers,
            timeout=config.request_timeout_seconds,
        )
        return jsonify(summary.to_dict())
    except ConfigurationError as e:
        return jsonify({"error": str(e)}), 400
    except FormatError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        return error_response("Internal server error", 500, f"Failed to compute stats: {e}")
    finally:
        if directory is not None:
            directory.close()
