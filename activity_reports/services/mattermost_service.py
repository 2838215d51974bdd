"""Mattermost REST client for the local user directory."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from activity_reports.extensions import local_user_cache

logger = logging.getLogger(__name__)

USERS_PAGE_SIZE = 200


class IdentityDirectoryError(RuntimeError):
    """The local user directory could not be queried."""


@dataclass
class LocalUser:
    id: str
    username: str = ""
    first_name: str = ""
    last_name: str = ""
    nickname: str = ""
    email: str = ""
    is_bot: bool = False
    delete_at: int = 0
    roles: List[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "LocalUser":
        return cls(
            id=payload.get("id") or "",
            username=payload.get("username") or "",
            first_name=payload.get("first_name") or "",
            last_name=payload.get("last_name") or "",
            nickname=payload.get("nickname") or "",
            email=payload.get("email") or "",
            is_bot=bool(payload.get("is_bot", False)),
            delete_at=int(payload.get("delete_at") or 0),
            roles=(payload.get("roles") or "").split(),
        )

    @property
    def is_system_admin(self) -> bool:
        return "system_admin" in self.roles

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "nickname": self.nickname,
            "email": self.email,
            "is_bot": self.is_bot,
            "delete_at": self.delete_at,
        }


class MattermostClient:
    """Read-only access to Mattermost users."""

    def __init__(self, base_url: str, token: str, timeout: float = 15,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    def close(self):
        self.session.close()

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None):
        url = f"{self.base_url}/api/v4/{path.lstrip('/')}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise IdentityDirectoryError(f"Failed to reach Mattermost: {e}") from e
        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise IdentityDirectoryError(
                f"Mattermost API error {response.status_code} for {path}: {response.text[:200]}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise IdentityDirectoryError(f"Invalid JSON from Mattermost for {path}") from e

    def get_user(self, user_id: str) -> Optional[LocalUser]:
        """Look up a user by id. Returns None when the user does not exist."""
        if user_id in local_user_cache:
            return local_user_cache[user_id]
        data = self._get(f"users/{user_id}")
        user = LocalUser.from_api(data) if isinstance(data, dict) else None
        local_user_cache[user_id] = user
        return user

    def list_users(self) -> List[LocalUser]:
        """All users, including inactive ones and bots."""
        users = []
        page = 0
        while True:
            batch = self._get("users", params={"page": page, "per_page": USERS_PAGE_SIZE})
            if not batch:
                break
            users.extend(LocalUser.from_api(item) for item in batch if isinstance(item, dict))
            if len(batch) < USERS_PAGE_SIZE:
                break
            page += 1
        return users
