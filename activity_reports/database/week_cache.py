"""WeekCacheDB - per-(repository, ISO week) commit stats for completed weeks.

Completed weeks cannot change, so rows never expire and are never invalidated.
"""

import json
import sqlite3
import logging
from typing import List, Optional

from activity_reports.models import RepoWeekRecord

logger = logging.getLogger(__name__)


def week_cache_key(repo: str, week: str) -> str:
    return f"gh_stats_{repo.replace('/', '_')}_{week}"


class WeekCacheDB:
    """Read-through store of RepoWeekRecords in SQLite."""

    def __init__(self, db):
        self.db = db
        self._get_connection = db._get_connection

    def get(self, repo: str, week: str) -> Optional[RepoWeekRecord]:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT data FROM week_stats_cache WHERE cache_key = ?",
                (week_cache_key(repo, week),)
            )
            row = cursor.fetchone()
            if not row:
                return None
            try:
                return RepoWeekRecord.from_dict(json.loads(row["data"]))
            except (json.JSONDecodeError, KeyError, TypeError, ValueError):
                logger.warning(f"Corrupt week cache entry for {repo} {week}, treating as miss")
                return None
        finally:
            conn.close()

    def put(self, repo: str, week: str, record: RepoWeekRecord) -> bool:
        """Store a record. Records without any commits are not stored."""
        if record.total_commits <= 0:
            logger.warning(f"Skipping week cache write for {repo} {week}: no commits")
            return False

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """INSERT INTO week_stats_cache (cache_key, repo, week, data, updated_at)
                   VALUES (?, ?, ?, ?, CURRENT_TIMESTAMP)
                   ON CONFLICT(cache_key) DO UPDATE SET
                   data = excluded.data, updated_at = CURRENT_TIMESTAMP""",
                (week_cache_key(repo, week), repo, week, json.dumps(record.to_dict()))
            )
            conn.commit()
            return True
        finally:
            conn.close()

    def keys(self, repo: Optional[str] = None) -> List[str]:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            if repo is None:
                cursor.execute("SELECT cache_key FROM week_stats_cache ORDER BY cache_key")
            else:
                cursor.execute(
                    "SELECT cache_key FROM week_stats_cache WHERE repo = ? ORDER BY week",
                    (repo,)
                )
            return [row["cache_key"] for row in cursor.fetchall()]
        finally:
            conn.close()

    def count(self) -> int:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS n FROM week_stats_cache")
            return cursor.fetchone()["n"]
        finally:
            conn.close()
