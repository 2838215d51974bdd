"""Map GitHub logins to local (Mattermost) identities."""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from activity_reports.services.mattermost_service import (
    IdentityDirectoryError, LocalUser, MattermostClient,
)

logger = logging.getLogger(__name__)

IdentityLookup = Callable[[str], Optional[LocalUser]]


@dataclass(frozen=True)
class ResolvedIdentity:
    id: str
    display_name: str
    username: str


def display_name_for(user: LocalUser) -> str:
    full_name = f"{user.first_name} {user.last_name}".strip()
    if full_name:
        return full_name
    return user.nickname or user.username or user.id


def resolve_identity(login: str, mappings: Dict[str, str],
                     lookup: Optional[IdentityLookup] = None) -> ResolvedIdentity:
    """Resolve a login through the mapping table and the local directory.

    Unmapped logins, and mapped ids the directory cannot find, fall back to
    the raw login with empty id and username.
    """
    local_id = mappings.get(login)
    if local_id and lookup is not None:
        try:
            user = lookup(local_id)
        except IdentityDirectoryError as e:
            logger.warning(f"Identity lookup failed for {login} -> {local_id}: {e}")
            user = None
        if user is not None:
            return ResolvedIdentity(
                id=user.id or local_id,
                display_name=display_name_for(user),
                username=user.username,
            )
    return ResolvedIdentity(id="", display_name=login, username="")


def get_directory_client(config) -> Optional[MattermostClient]:
    """Directory client for the configured Mattermost server, if any."""
    if not config.mattermost_url or not config.mattermost_token:
        return None
    return MattermostClient(
        config.mattermost_url,
        config.mattermost_token,
        timeout=config.request_timeout_seconds,
    )


def is_admin(user_id: str, config, directory: Optional[MattermostClient] = None) -> bool:
    if user_id in config.admin_user_ids:
        return True
    if directory is None:
        return False
    try:
        user = directory.get_user(user_id)
    except IdentityDirectoryError as e:
        logger.warning(f"Admin check failed for {user_id}: {e}")
        return False
    return user is not None and user.is_system_admin
