"""Database base class - connection management and schema init."""

import sqlite3
import logging
from pathlib import Path
from typing import Optional

from activity_reports.config import get_db_path

logger = logging.getLogger(__name__)


class Database:
    """SQLite database manager for the activity reports service."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path or get_db_path()
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with row factory."""
        conn = sqlite3.connect(self.db_path, timeout=10)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self):
        """Initialize database schema."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            # One row per (repository, completed ISO week)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS week_stats_cache (
                    cache_key TEXT PRIMARY KEY,
                    repo TEXT NOT NULL,
                    week TEXT NOT NULL,
                    data TEXT NOT NULL,
                    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_week_stats_repo
                ON week_stats_cache(repo, week)
            """)

            # Create user_settings table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS user_settings (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    key TEXT NOT NULL UNIQUE,
                    value TEXT,
                    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            """)

            conn.commit()
            logger.info(f"Database initialized at {self.db_path}")
        finally:
            conn.close()
