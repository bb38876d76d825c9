"""
Persistence adapters for store snapshots.
Snapshots are whole JSON text values under fixed keys; there are no partial updates.
"""

import sqlite3
from abc import ABC, abstractmethod
from typing import Dict, Optional

from .db import get_db, init_db
from .errors import StorageError
from ..util.logging import logger


class KeyValueStorage(ABC):
    """Abstract interface for durable snapshot storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored text for key, or None when absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Replace the stored text for key."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove key. Removing an absent key is not an error."""
        pass


class InMemoryStorage(KeyValueStorage):
    """Dictionary-backed storage for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data.keys())


class SQLiteStorage(KeyValueStorage):
    """SQLite-backed storage using a single kv table."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        init_db(db_path)

    def get(self, key: str) -> Optional[str]:
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT value FROM kv WHERE key = ?", (key,))
                row = cursor.fetchone()
                return row[0] if row else None
        except sqlite3.Error as e:
            logger.error(f"Failed to read key '{key}' from {self.db_path}: {e}")
            raise StorageError(f"Failed to read key '{key}': {e}") from e

    def set(self, key: str, value: str) -> None:
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "INSERT INTO kv (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP",
                    (key, value)
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.log_storage_operation("set", key, status="failed")
            raise StorageError(f"Failed to write key '{key}': {e}") from e

        logger.log_storage_operation("set", key, size=len(value))

    def remove(self, key: str) -> None:
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM kv WHERE key = ?", (key,))
                conn.commit()
        except sqlite3.Error as e:
            logger.log_storage_operation("remove", key, status="failed")
            raise StorageError(f"Failed to remove key '{key}': {e}") from e

        logger.log_storage_operation("remove", key)
