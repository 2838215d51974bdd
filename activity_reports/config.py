"""Application configuration loaded from config.json.

The active configuration is an immutable snapshot. Readers call get_config();
writers swap in a new snapshot with set_config() under a lock.
"""

import json
import logging
import os
import threading
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Project root is one level up from activity_reports/
PROJECT_ROOT = Path(__file__).parent.parent

CONFIG_ENV_VAR = "ACTIVITY_REPORTS_CONFIG"

# Database file path
DB_PATH = PROJECT_ROOT / "activity_reports.db"

DEFAULT_IDENTITY_HEADER = "Mattermost-User-Id"


class ConfigurationError(RuntimeError):
    """Required configuration (such as the GitHub token) is missing."""


def parse_repositories(value: Any) -> List[str]:
    """Split a comma-separated "org/repo" list, dropping blanks."""
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [repo.strip() for repo in value if isinstance(repo, str) and repo.strip()]


def parse_mappings(value: Any) -> Dict[str, str]:
    """Decode the login -> local user id table from a JSON string or dict."""
    if not value:
        return {}
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            logger.warning("Ignoring user_mappings: not valid JSON")
            return {}
    if not isinstance(value, dict):
        logger.warning("Ignoring user_mappings: expected a JSON object")
        return {}
    return {str(login): str(user_id) for login, user_id in value.items() if login and user_id}


@dataclass(frozen=True)
class Configuration:
    github_token: str = ""
    repositories: str = ""
    user_mappings: Dict[str, str] = field(default_factory=dict)
    mattermost_url: str = ""
    mattermost_token: str = ""
    admin_user_ids: tuple = ()
    identity_header: str = DEFAULT_IDENTITY_HEADER
    request_timeout_seconds: float = 15
    max_workers: int = 1
    cache_ttl_seconds: int = 300
    db_path: str = ""
    host: str = "127.0.0.1"
    port: int = 5050
    debug: bool = False

    def repository_list(self) -> List[str]:
        return parse_repositories(self.repositories)

    def mappings(self) -> Dict[str, str]:
        return dict(self.user_mappings)

    def require_token(self) -> str:
        if not self.github_token:
            raise ConfigurationError("GitHub token not configured")
        return self.github_token

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Configuration":
        repositories = data.get("repositories", "")
        if isinstance(repositories, list):
            repositories = ",".join(parse_repositories(repositories))
        return cls(
            github_token=os.environ.get("GITHUB_TOKEN") or data.get("github_token", ""),
            repositories=repositories or "",
            user_mappings=parse_mappings(data.get("user_mappings")),
            mattermost_url=data.get("mattermost_url", ""),
            mattermost_token=os.environ.get("MATTERMOST_TOKEN") or data.get("mattermost_token", ""),
            admin_user_ids=tuple(data.get("admin_user_ids", ())),
            identity_header=data.get("identity_header", DEFAULT_IDENTITY_HEADER),
            request_timeout_seconds=data.get("request_timeout_seconds", 15),
            max_workers=data.get("max_workers", 1),
            cache_ttl_seconds=data.get("cache_ttl_seconds", 300),
            db_path=data.get("db_path", ""),
            host=data.get("host", "127.0.0.1"),
            port=data.get("port", 5050),
            debug=data.get("debug", False),
        )


def get_config_path() -> Path:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return PROJECT_ROOT / "config.json"


def load_config(config_path: Path = None) -> Dict[str, Any]:
    """Load configuration from config.json.

    Args:
        config_path: Optional path to config file. Defaults to $ACTIVITY_REPORTS_CONFIG
            or PROJECT_ROOT/config.json.

    Returns:
        Configuration dictionary (empty when the file does not exist).
    """
    if config_path is None:
        config_path = get_config_path()
    if not config_path.exists():
        logger.warning(f"Config file {config_path} not found, using defaults")
        return {}
    with open(config_path) as f:
        return json.load(f)


def get_db_path(config: Optional[Configuration] = None) -> Path:
    config = config or get_config()
    if config.db_path:
        return Path(config.db_path)
    return DB_PATH


# Singleton config snapshot; swapped whole, never mutated
_config: Optional[Configuration] = None
_config_lock = threading.Lock()


def _on_config_swap():
    from activity_reports.extensions import cache, local_user_cache

    cache.clear()
    local_user_cache.clear()


def get_config() -> Configuration:
    """Get the current configuration snapshot."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = Configuration.from_dict(load_config())
    return _config


def set_config(config: Configuration) -> Configuration:
    """Atomically replace the configuration snapshot."""
    global _config
    with _config_lock:
        _config = config
    _on_config_swap()
    return config


def reload_config(config_path: Path = None) -> Configuration:
    """Re-read the config file, keeping mappings saved through the API."""
    config = Configuration.from_dict(load_config(config_path))
    from activity_reports.database import get_settings_db

    saved = get_settings_db().get_mappings()
    if saved:
        config = replace(config, user_mappings=parse_mappings(saved))
    logger.info(f"Configuration loaded: {len(config.repository_list())} repositories, "
                f"{len(config.user_mappings)} mappings")
    return set_config(config)


def update_mappings(mappings: Dict[str, str]) -> Configuration:
    """Swap in a new mapping table on top of the current configuration."""
    global _config
    with _config_lock:
        current = _config or Configuration.from_dict(load_config())
        _config = replace(current, user_mappings=parse_mappings(mappings))
        config = _config
    _on_config_swap()
    return config
