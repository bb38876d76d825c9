"""
Chronology core: status catalog, record store, query engine and CSV codec.
"""

from .actions import ConfirmationFlow, PendingAction
from .csv_codec import ImportReport, export_csv, export_filename, parse_csv, read_import_file
from .errors import ChronologyError, ImportFileError, StorageError
from .query import SortConfig, ViewState, filter_records, query_records, sort_records
from .schema import CaseMeta, ChronologyRecord, RecordDraft, Stats
from .statuses import STATUS_OPTIONS, StatusOption, get_status, find_status, resolve_status_code
from .storage import KeyValueStorage, InMemoryStorage, SQLiteStorage
from .store import RecordStore

__all__ = [
    'ConfirmationFlow',
    'PendingAction',
    'ImportReport',
    'export_csv',
    'export_filename',
    'parse_csv',
    'read_import_file',
    'ChronologyError',
    'ImportFileError',
    'StorageError',
    'SortConfig',
    'ViewState',
    'filter_records',
    'query_records',
    'sort_records',
    'CaseMeta',
    'ChronologyRecord',
    'RecordDraft',
    'Stats',
    'STATUS_OPTIONS',
    'StatusOption',
    'get_status',
    'find_status',
    'resolve_status_code',
    'KeyValueStorage',
    'InMemoryStorage',
    'SQLiteStorage',
    'RecordStore',
]
