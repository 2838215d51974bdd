"""Helpers shared by the route blueprints."""

from flask import g, jsonify, request

from activity_reports.config import get_config
from activity_reports.extensions import logger


def error_response(message, status, log_message=None):
    """Log (when given a log message) and return a JSON error response."""
    if log_message:
        logger.error(log_message)
    return jsonify({"error": message}), status


def check_caller_identity():
    """Reject API requests that arrive without the caller identity header."""
    if not request.path.startswith("/api/"):
        return None
    header = get_config().identity_header
    user_id = request.headers.get(header, "").strip()
    if not user_id:
        return jsonify({"error": "unauthorized"}), 401
    g.user_id = user_id
    return None
