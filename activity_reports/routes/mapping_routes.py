"""Identity mapping routes: GitHub login -> Mattermost user table, local user directory."""

from flask import Blueprint, g, jsonify, request

from activity_reports.config import get_config, update_mappings
from activity_reports.database import get_settings_db
from activity_reports.extensions import logger
from activity_reports.services.identity_service import get_directory_client, is_admin
from activity_reports.services.mattermost_service import IdentityDirectoryError
from activity_reports.routes.common import error_response

mapping_bp = Blueprint("mappings", __name__, url_prefix="/api/v1")


@mapping_bp.route("/mappings", methods=["GET"])
def get_mappings():
    """Current login -> local user id mappings."""
    return jsonify(get_config().mappings())


@mapping_bp.route("/mappings", methods=["POST"])
def save_mappings():
    """Replace the mapping table (system admins only)."""
    config = get_config()
    directory = get_directory_client(config)
    try:
        if not is_admin(g.user_id, config, directory):
            return jsonify({"error": "admin only"}), 403
    finally:
        if directory is not None:
            directory.close()

    mappings = request.get_json(silent=True)
    if not isinstance(mappings, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in mappings.items()
    ):
        return jsonify({"error": "invalid json"}), 400

    try:
        get_settings_db().save_mappings(mappings)
    except Exception as e:
        return error_response("failed to save", 500, f"Failed to save mappings: {e}")

    update_mappings(mappings)
    logger.info(f"User mappings updated by {g.user_id}: {len(mappings)} entries")
    return jsonify({"status": "ok"})


@mapping_bp.route("/users")
def get_mapped_users():
    """Local users referenced by the mapping table."""
    config = get_config()
    directory = get_directory_client(config)
    if directory is None:
        return jsonify([])

    users = []
    try:
        for user_id in dict.fromkeys(config.mappings().values()):
            try:
                user = directory.get_user(user_id)
            except IdentityDirectoryError as e:
                logger.warning(f"Failed to look up mapped user {user_id}: {e}")
                continue
            if user is not None:
                users.append({
                    "id": user.id,
                    "username": user.username,
                    "nickname": user.nickname,
                    "email": user.email,
                })
    finally:
        directory.close()
    return jsonify(users)


@mapping_bp.route("/mattermost/users")
def get_mattermost_users():
    """Every Mattermost user (active, inactive and bots) for the mapping editor."""
    config = get_config()
    directory = get_directory_client(config)
    if directory is None:
        return jsonify({"error": "Mattermost directory not configured"}), 400

    try:
        users = directory.list_users()
        return jsonify([user.to_dict() for user in users])
    except IdentityDirectoryError as e:
        return error_response("Failed to get users", 502, f"Failed to list Mattermost users: {e}")
    finally:
        directory.close()
