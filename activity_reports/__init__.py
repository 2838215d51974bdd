"""GitHub Activity Reports - Backend Package.

Provides the Flask application factory for the weekly commit stats API.
"""

from flask import Flask

from activity_reports.config import get_config, reload_config
from activity_reports.extensions import logger
from activity_reports.routes import register_blueprints


def create_app(load_config=True):
    """Create and configure the Flask application.

    With load_config=False the current configuration snapshot is used as is
    (tests install one with set_config()).
    """
    app = Flask(__name__)
    if load_config:
        config = reload_config()
    else:
        config = get_config()
    if not config.github_token:
        logger.warning("No GitHub token configured; /api/v1/stats will answer 400")
    register_blueprints(app)
    return app
