"""
Shared fixtures for chronology tests.
"""

import pytest

from chronos.core.schema import RecordDraft
from chronos.core.storage import InMemoryStorage, SQLiteStorage
from chronos.core.store import RecordStore


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage):
    return RecordStore(storage)


@pytest.fixture
def sqlite_storage(tmp_path):
    return SQLiteStorage(str(tmp_path / "chronos.db"))


@pytest.fixture
def make_draft():
    def _make(**overrides):
        fields = dict(
            date="2024-03-01",
            reg_no="",
            name="Ходатайство",
            correspondent="Суд",
            status="created",
            note=""
        )
        fields.update(overrides)
        return RecordDraft(**fields)
    return _make


@pytest.fixture
def populated_store(store, make_draft):
    store.update_meta(title="Иванов против ООО", case_id="А40-1234/2024", applicant="Иванов И.И.", addressee="Арбитражный суд")
    store.create(make_draft(date="2024-01-10", reg_no="ВХ-1", name="Исковое заявление", correspondent="Арбитражный суд", status="registered"))
    store.create(make_draft(date="2024-02-05", name="Ходатайство", correspondent="Иванова", status="satisfied", note='Текст "в кавычках"'))
    store.create(make_draft(date="2024-02-20", name="Жалоба; дополнение", correspondent="Прокуратура", status="rejected", note="Ответ; повторно"))
    return store
