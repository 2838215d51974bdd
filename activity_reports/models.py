"""Data models: upstream payload shapes, weekly records and stats summaries."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def short_repo_name(repo: str) -> str:
    """Repository segment of an "org/repo" identifier."""
    return repo.rsplit("/", 1)[-1]


# --- Upstream payloads (only the fields we read) ---

@dataclass
class CommitSummary:
    sha: str
    message: str = ""
    author_date: str = ""
    author_login: Optional[str] = None
    author_avatar_url: str = ""

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "CommitSummary":
        commit = payload.get("commit") or {}
        git_author = commit.get("author") or {}
        author = payload.get("author") or {}
        return cls(
            sha=payload.get("sha") or "",
            message=commit.get("message") or "",
            author_date=git_author.get("date") or "",
            author_login=author.get("login") or None,
            author_avatar_url=author.get("avatar_url") or "",
        )


@dataclass
class Contributor:
    login: str
    avatar_url: str = ""
    name: str = ""
    email: str = ""

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Contributor":
        return cls(
            login=payload.get("login") or "",
            avatar_url=payload.get("avatar_url") or "",
            name=payload.get("name") or "",
            email=payload.get("email") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "login": self.login,
            "avatar_url": self.avatar_url,
            "name": self.name,
            "email": self.email,
        }


@dataclass
class RepoMetadata:
    full_name: str
    name: str = ""
    private: bool = False
    fork: bool = False
    created_at: str = ""

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "RepoMetadata":
        return cls(
            full_name=payload.get("full_name") or "",
            name=payload.get("name") or "",
            private=bool(payload.get("private", False)),
            fork=bool(payload.get("fork", False)),
            created_at=payload.get("created_at") or "",
        )


# --- Weekly aggregation ---

@dataclass
class ContributorStat:
    commits: int = 0
    added: int = 0
    removed: int = 0

    def __add__(self, other: "ContributorStat") -> "ContributorStat":
        return ContributorStat(
            commits=self.commits + other.commits,
            added=self.added + other.added,
            removed=self.removed + other.removed,
        )

    def to_dict(self) -> Dict[str, int]:
        return {"commits": self.commits, "added": self.added, "removed": self.removed}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContributorStat":
        return cls(
            commits=int(data.get("commits", 0)),
            added=int(data.get("added", 0)),
            removed=int(data.get("removed", 0)),
        )


def merge_stats(*groups: Dict[str, ContributorStat]) -> Dict[str, ContributorStat]:
    """Pointwise sum of per-login stats. Keys keep first-seen order."""
    merged: Dict[str, ContributorStat] = {}
    for group in groups:
        for login, stat in group.items():
            merged[login] = merged.get(login, ContributorStat()) + stat
    return merged


@dataclass
class RepoWeekRecord:
    """Per-login commit stats of one repository in one ISO week."""

    repo: str
    week: str
    users: Dict[str, ContributorStat] = field(default_factory=dict)
    fetched_at: str = ""

    @property
    def total_commits(self) -> int:
        return sum(stat.commits for stat in self.users.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week": self.week,
            "repo": self.repo,
            "users": {login: stat.to_dict() for login, stat in self.users.items()},
            "fetched_at": self.fetched_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RepoWeekRecord":
        users = data.get("users") or {}
        return cls(
            repo=data["repo"],
            week=data["week"],
            users={login: ContributorStat.from_dict(stat) for login, stat in users.items()},
            fetched_at=data.get("fetched_at", ""),
        )


# --- Response shapes ---

@dataclass
class UserStats:
    id: str
    username: str
    name: str
    login: str
    commits: int = 0
    added: int = 0
    removed: int = 0
    by_repo: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "name": self.name,
            "login": self.login,
            "commits": self.commits,
            "added": self.added,
            "removed": self.removed,
            "by_repo": dict(self.by_repo),
        }


@dataclass
class StatsSummary:
    users: List[UserStats]
    repos: List[str]
    week_start: str
    week_end: str
    last_updated: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "users": [user.to_dict() for user in self.users],
            "repos": list(self.repos),
            "week_start": self.week_start,
            "week_end": self.week_end,
            "last_updated": self.last_updated,
        }
