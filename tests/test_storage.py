"""
Tests for the persistence adapters and database setup.
"""

import sqlite3
from unittest.mock import patch

import pytest

from chronos.core.db import health_check, init_db
from chronos.core.errors import StorageError
from chronos.core.storage import InMemoryStorage, SQLiteStorage


class TestInMemoryStorage:
    """Test the dictionary-backed adapter."""

    def test_get_set_remove(self):
        storage = InMemoryStorage()
        assert storage.get('k') is None

        storage.set('k', 'v')
        assert storage.get('k') == 'v'

        storage.remove('k')
        assert storage.get('k') is None

    def test_remove_absent_key(self):
        InMemoryStorage().remove('missing')

    def test_initial_values_are_copied(self):
        initial = {'k': 'v'}
        storage = InMemoryStorage(initial)
        storage.set('k', 'changed')
        assert initial['k'] == 'v'


class TestSQLiteStorage:
    """Test the SQLite-backed adapter."""

    def test_creates_database_directory(self, tmp_path):
        db_path = tmp_path / 'nested' / 'dir' / 'chronos.db'
        SQLiteStorage(str(db_path))
        assert db_path.exists()
        assert health_check(str(db_path)) is True

    def test_get_set_remove(self, sqlite_storage):
        assert sqlite_storage.get('chronos_meta') is None

        sqlite_storage.set('chronos_meta', '{"title": "Дело"}')
        assert sqlite_storage.get('chronos_meta') == '{"title": "Дело"}'

        sqlite_storage.set('chronos_meta', '{}')
        assert sqlite_storage.get('chronos_meta') == '{}'

        sqlite_storage.remove('chronos_meta')
        assert sqlite_storage.get('chronos_meta') is None

    def test_values_survive_new_adapter(self, tmp_path):
        db_path = str(tmp_path / 'chronos.db')
        SQLiteStorage(db_path).set('k', 'v')
        assert SQLiteStorage(db_path).get('k') == 'v'

    def test_write_failure_raises_storage_error(self, sqlite_storage):
        with patch('chronos.core.storage.get_db', side_effect=sqlite3.OperationalError("disk I/O error")):
            with pytest.raises(StorageError):
                sqlite_storage.set('k', 'v')

    def test_read_failure_raises_storage_error(self, sqlite_storage):
        with patch('chronos.core.storage.get_db', side_effect=sqlite3.OperationalError("locked")):
            with pytest.raises(StorageError):
                sqlite_storage.get('k')


def test_health_check_without_table(tmp_path):
    db_path = str(tmp_path / 'empty.db')
    sqlite3.connect(db_path).close()
    assert health_check(db_path) is False

    init_db(db_path)
    assert health_check(db_path) is True
