"""Route blueprints registration."""

from activity_reports.routes.common import check_caller_identity, error_response
from activity_reports.routes.stats_routes import stats_bp
from activity_reports.routes.mapping_routes import mapping_bp
from activity_reports.routes.github_routes import github_bp
from activity_reports.routes.cache_routes import cache_bp


def register_blueprints(app):
    """Register all route blueprints with the Flask app."""
    app.before_request(check_caller_identity)
    app.register_blueprint(stats_bp)
    app.register_blueprint(mapping_bp)
    app.register_blueprint(github_bp)
    app.register_blueprint(cache_bp)


__all__ = ["register_blueprints", "error_response"]
