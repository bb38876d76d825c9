"""
Record store: owns the chronology records and case metadata.

Every mutation is followed by a full snapshot write to the persistence
adapter and then by observer notification, all under the store lock.
Unknown ids on update/delete are silent no-ops.
"""

import json
import threading
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, List, Optional

from .config import META_KEY, RECORDS_KEY, WARNING_DISMISSED_KEY
from .csv_codec import ImportReport, export_csv, export_filename, parse_csv
from .query import SortConfig, query_records
from .schema import CaseMeta, ChronologyRecord, RecordDraft, Stats, generate_id
from .statuses import FAILURE_STATUSES, SUCCESS_STATUSES
from .storage import KeyValueStorage, InMemoryStorage
from ..util.logging import logger

Observer = Callable[[str, Dict[str, Any]], None]

_META_FIELDS = ('title', 'applicant', 'addressee', 'case_id')


def efficiency_percent(success: int, closed: int) -> int:
    """Integer percent of success over closed, rounding halves away from zero."""
    if closed <= 0:
        return 0
    ratio = Decimal(success) * 100 / Decimal(closed)
    return int(ratio.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


class RecordStore:
    """Single-user chronology store backed by a key-value snapshot adapter.

    The API serves requests from a thread pool, so reads and mutations share
    one re-entrant lock; a mutation and its snapshot write never interleave
    with another.
    """

    def __init__(self, storage: Optional[KeyValueStorage] = None, autoload: bool = True):
        self.storage = storage if storage is not None else InMemoryStorage()
        self._lock = threading.RLock()
        self._meta = CaseMeta()
        self._records: List[ChronologyRecord] = []
        self._observers: List[Observer] = []
        if autoload:
            self.load()

    # ------------------------------------------------------------------
    # Loading and persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Read meta and record snapshots. Corrupt snapshots degrade to empty state."""
        with self._lock:
            self._meta = self._load_meta()
            self._records = self._load_records()
        logger.log_operation("store.load", "success", {"records": len(self._records)})

    def _load_meta(self) -> CaseMeta:
        raw_meta = self.storage.get(META_KEY)
        if not raw_meta:
            return CaseMeta()
        try:
            data = json.loads(raw_meta)
        except ValueError as e:
            logger.warning(f"Ignoring corrupt meta snapshot: {e}")
            return CaseMeta()
        if not isinstance(data, dict):
            logger.warning(f"Ignoring meta snapshot of type {type(data).__name__}")
            return CaseMeta()
        return CaseMeta.from_dict(data)

    def _load_records(self) -> List[ChronologyRecord]:
        raw_records = self.storage.get(RECORDS_KEY)
        if not raw_records:
            return []
        try:
            data = json.loads(raw_records)
        except ValueError as e:
            logger.warning(f"Ignoring corrupt records snapshot: {e}")
            return []
        if not isinstance(data, list):
            logger.warning(f"Ignoring records snapshot of type {type(data).__name__}")
            return []

        records = []
        seen = set()
        for item in data:
            if not isinstance(item, dict):
                continue
            record = ChronologyRecord.from_dict(item)
            if not record.id or record.id in seen:
                continue
            seen.add(record.id)
            records.append(record)
        return records

    def _persist(self) -> None:
        self.storage.set(META_KEY, json.dumps(self._meta.to_dict(), ensure_ascii=False))
        self.storage.set(RECORDS_KEY, json.dumps([r.to_dict() for r in self._records], ensure_ascii=False))

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer; returns a callable that unregisters it."""
        self._observers.append(observer)

        def unsubscribe():
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self, event: str, payload: Dict[str, Any]) -> None:
        for observer in list(self._observers):
            try:
                observer(event, payload)
            except Exception as e:
                # Observers are presentation code; they never roll back a mutation
                logger.error(f"Observer failed on '{event}': {e}")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def meta(self) -> CaseMeta:
        with self._lock:
            return CaseMeta(**{name: getattr(self._meta, name) for name in _META_FIELDS})

    def list_records(self) -> List[ChronologyRecord]:
        with self._lock:
            return [record.copy() for record in self._records]

    def get(self, record_id: str) -> Optional[ChronologyRecord]:
        with self._lock:
            index = self._index_of(record_id)
            return self._records[index].copy() if index is not None else None

    def ids(self) -> List[str]:
        with self._lock:
            return [record.id for record in self._records]

    def __len__(self) -> int:
        return len(self._records)

    def query(self, search: str = '', sort: Optional[SortConfig] = None) -> List[ChronologyRecord]:
        return query_records(self.list_records(), search, sort)

    def stats(self) -> Stats:
        """Derived statistics, recomputed on every call."""
        records = self.list_records()
        total = len(records)
        final_success = sum(1 for r in records if r.status in SUCCESS_STATUSES)
        fail = sum(1 for r in records if r.status in FAILURE_STATUSES)
        closed = final_success + fail
        return Stats(
            total=total,
            final_success=final_success,
            fail=fail,
            closed=closed,
            efficiency=efficiency_percent(final_success, closed),
        )

    def _index_of(self, record_id: str) -> Optional[int]:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        return None

    # ------------------------------------------------------------------
    # Record mutations
    # ------------------------------------------------------------------

    def create(self, draft: RecordDraft) -> ChronologyRecord:
        with self._lock:
            record = ChronologyRecord.from_draft(generate_id(self.ids()), draft)
            self._records.append(record)
            self._persist()

            logger.log_record_operation("create", record.id, record.name)
            self._notify("created", {"id": record.id})
            return record.copy()

    def update(self, record_id: str, draft: RecordDraft) -> Optional[ChronologyRecord]:
        """Replace all fields of a record, keeping its id. Returns None for unknown ids."""
        with self._lock:
            index = self._index_of(record_id)
            if index is None:
                logger.debug(f"Update ignored for unknown record {record_id}")
                return None

            record = ChronologyRecord.from_draft(record_id, draft)
            self._records[index] = record
            self._persist()

            logger.log_record_operation("update", record_id, record.name)
            self._notify("updated", {"id": record_id})
            return record.copy()

    def delete(self, record_id: str) -> bool:
        with self._lock:
            index = self._index_of(record_id)
            if index is None:
                logger.debug(f"Delete ignored for unknown record {record_id}")
                return False

            del self._records[index]
            self._persist()

            logger.log_record_operation("delete", record_id)
            self._notify("deleted", {"id": record_id})
            return True

    def submit(self, draft: RecordDraft, editing_id: Optional[str] = None) -> Optional[ChronologyRecord]:
        """Form submission: update when editing an existing record, create otherwise."""
        if editing_id:
            return self.update(editing_id, draft)
        return self.create(draft)

    def reset(self) -> None:
        """Drop all records and metadata, and clear the durable snapshot."""
        with self._lock:
            removed = len(self._records)
            self._records = []
            self._meta = CaseMeta()
            self.storage.remove(RECORDS_KEY)
            self.storage.remove(META_KEY)

            logger.log_operation("store.reset", "success", {"removed": removed})
            self._notify("reset", {"removed": removed})

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def update_meta(self, **fields: str) -> CaseMeta:
        unknown = set(fields) - set(_META_FIELDS)
        if unknown:
            raise ValueError(f"Unknown case meta fields: {sorted(unknown)}")

        with self._lock:
            for name, value in fields.items():
                setattr(self._meta, name, '' if value is None else str(value))
            self._persist()

            self._notify("meta_updated", {"fields": sorted(fields)})
            return self.meta

    def merge_meta(self, fields: Dict[str, str]) -> bool:
        """Merge parsed meta fields; applied only when at least one value is non-empty."""
        fields = {name: value for name, value in fields.items() if name in _META_FIELDS}
        if not any(fields.values()):
            return False
        with self._lock:
            for name, value in fields.items():
                setattr(self._meta, name, value)
        return True

    # ------------------------------------------------------------------
    # Warning flag
    # ------------------------------------------------------------------

    def is_warning_dismissed(self) -> bool:
        return bool(self.storage.get(WARNING_DISMISSED_KEY))

    def dismiss_warning(self) -> None:
        self.storage.set(WARNING_DISMISSED_KEY, 'true')

    # ------------------------------------------------------------------
    # CSV
    # ------------------------------------------------------------------

    def export_csv(self, on_date: Optional[date] = None):
        """Return (filename, text) for the current dataset."""
        with self._lock:
            filename = export_filename(self._meta, on_date)
            text = export_csv(self._meta, self._records)
            count = len(self._records)
        logger.log_export(filename, count)
        return filename, text

    def import_csv(self, text: str, today: Optional[str] = None) -> ImportReport:
        """Merge an import file into the store. The whole text is parsed before any change."""
        with self._lock:
            parsed = parse_csv(text, existing_ids=self.ids(), today=today)

            meta_applied = self.merge_meta(parsed.meta_fields)
            self._records.extend(parsed.records)
            if parsed.records or meta_applied:
                self._persist()

            report = ImportReport(
                added=len(parsed.records),
                malformed=parsed.malformed,
                duplicates=parsed.duplicates,
                meta_applied=meta_applied,
            )
            logger.log_import(report.added, report.malformed, report.duplicates, report.meta_applied)
            if parsed.records or meta_applied:
                self._notify("imported", report.to_dict())
            return report
