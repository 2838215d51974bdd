"""Database package - re-exports DB classes and factory functions."""

import threading
from typing import Optional

from activity_reports.database.base import Database
from activity_reports.database.settings import SettingsDB
from activity_reports.database.week_cache import WeekCacheDB, week_cache_key

# Thread-safe singleton instances
_db_lock = threading.Lock()

_db_instance: Optional[Database] = None
_settings_db: Optional[SettingsDB] = None
_week_cache_db: Optional[WeekCacheDB] = None


def get_database() -> Database:
    global _db_instance
    if _db_instance is None:
        with _db_lock:
            if _db_instance is None:
                _db_instance = Database()
    return _db_instance


def get_settings_db() -> SettingsDB:
    global _settings_db
    if _settings_db is None:
        db = get_database()
        with _db_lock:
            if _settings_db is None:
                _settings_db = SettingsDB(db)
    return _settings_db


def get_week_cache_db() -> WeekCacheDB:
    global _week_cache_db
    if _week_cache_db is None:
        db = get_database()
        with _db_lock:
            if _week_cache_db is None:
                _week_cache_db = WeekCacheDB(db)
    return _week_cache_db


def reset_databases() -> None:
    """Drop the singletons so the next access reopens the configured db_path."""
    global _db_instance, _settings_db, _week_cache_db
    with _db_lock:
        _db_instance = None
        _settings_db = None
        _week_cache_db = None


__all__ = [
    "Database", "SettingsDB", "WeekCacheDB", "week_cache_key",
    "get_database", "get_settings_db", "get_week_cache_db", "reset_databases",
]
