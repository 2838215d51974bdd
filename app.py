#!/usr/bin/env python3
"""GitHub Activity Reports - Flask Backend

Serves weekly GitHub commit activity, attributed to Mattermost users,
to the activity dashboard.
"""

from activity_reports import create_app
from activity_reports.config import get_config

app = create_app()


if __name__ == "__main__":
    config = get_config()
    app.run(
        host=config.get("host", "127.0.0.1"),
        port=config.get("port", 5050),
        debug=config.get("debug", False),
        threaded=True,
    )
