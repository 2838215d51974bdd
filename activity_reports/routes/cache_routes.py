"""Cache management routes."""

from flask import Blueprint, jsonify

from activity_reports.extensions import cache, local_user_cache, logger

cache_bp = Blueprint("cache", __name__, url_prefix="/api/v1")


@cache_bp.route("/clear-cache", methods=["POST"])
def clear_cache():
    """Clear the in-memory caches. Completed weeks stay cached in SQLite."""
    cache.clear()
    local_user_cache.clear()
    logger.info("In-memory caches cleared")
    return jsonify({"message": "Cache cleared"})
