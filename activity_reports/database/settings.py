"""SettingsDB - JSON key/value settings, including the saved user mappings."""

import json
import sqlite3
import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)

MAPPINGS_KEY = "user_mappings"


class SettingsDB:
    """Database operations for persisted settings."""

    def __init__(self, db):
        self.db = db

    def _get_connection(self) -> sqlite3.Connection:
        return self.db._get_connection()

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get a setting value (JSON parsed) or default."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT value FROM user_settings WHERE key = ?", (key,))
            row = cursor.fetchone()
            if row and row["value"]:
                try:
                    return json.loads(row["value"])
                except json.JSONDecodeError:
                    return row["value"]
            return default
        finally:
            conn.close()

    def set_setting(self, key: str, value: Any) -> None:
        """Set a setting value (JSON encoded)."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO user_settings (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
            """, (key, json.dumps(value)))
            conn.commit()
        finally:
            conn.close()

    def get_mappings(self) -> Dict[str, str]:
        mappings = self.get_setting(MAPPINGS_KEY, {})
        return mappings if isinstance(mappings, dict) else {}

    def save_mappings(self, mappings: Dict[str, str]) -> None:
        self.set_setting(MAPPINGS_KEY, mappings)
        logger.info(f"Saved {len(mappings)} user mappings")
