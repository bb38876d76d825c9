"""
CSV codec for chronology backups.

Export writes a semicolon-delimited, UTF-8 file with a byte-order mark:
four metadata lines, a blank line, a header row, then one fully quoted
row per record with the status rendered as its display label.

Import is lenient so that files re-saved by spreadsheet editors can be
loaded again: the header row is located by scanning, metadata above it is
optional, short rows are skipped, statuses are resolved by code or label,
and rows whose id is already known are dropped.
"""

import csv
import io
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .errors import ImportFileError
from .schema import CaseMeta, ChronologyRecord, generate_id, today_iso
from .statuses import resolve_status_code, status_label

BOM = '\ufeff'
DELIMITER = ';'
QUOTE = '"'

# (label, CaseMeta attribute) in file order
META_LABELS = [
    ('Дело', 'title'),
    ('Номер', 'case_id'),
    ('Заявитель', 'applicant'),
    ('Адресат', 'addressee'),
]
_META_ATTRS = {label.lower(): attr for label, attr in META_LABELS}

HEADER = ['ID', 'Дата', 'Номер', 'Наименование', 'Корреспондент', 'Статус', 'Примечание']
HEADER_MARKERS = ('ID', 'Дата', 'Статус')
HEADER_SCAN_LIMIT = 20

MIN_ROW_FIELDS = 5
MIN_REUSABLE_ID_LENGTH = 3
IMPORTED_NAME_PLACEHOLDER = 'Импорт'
DEFAULT_FILENAME_TOKEN = 'Export'


@dataclass
class ParsedImport:
    """Result of parsing an import file against a set of known ids."""
    meta_fields: Dict[str, str] = field(default_factory=dict)
    records: List[ChronologyRecord] = field(default_factory=list)
    malformed: int = 0
    duplicates: int = 0

    @property
    def has_meta(self) -> bool:
        return any(self.meta_fields.values())


@dataclass
class ImportReport:
    added: int = 0
    malformed: int = 0
    duplicates: int = 0
    meta_applied: bool = False

    def to_dict(self) -> Dict[str, object]:
        return {
            'added': self.added,
            'malformed': self.malformed,
            'duplicates': self.duplicates,
            'meta_applied': self.meta_applied,
        }


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def export_csv(meta: CaseMeta, records: Sequence[ChronologyRecord]) -> str:
    """Serialize metadata and records; the returned text starts with a BOM."""
    lines = [f"{label}:{DELIMITER}{getattr(meta, attr)}" for label, attr in META_LABELS]
    lines.append('')
    lines.append(DELIMITER.join(HEADER))

    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=DELIMITER, quoting=csv.QUOTE_ALL, lineterminator='\n')
    for record in records:
        writer.writerow([
            record.id,
            record.date,
            record.reg_no,
            record.name,
            record.correspondent,
            status_label(record.status),
            record.note,
        ])
    rows = buffer.getvalue()
    if rows:
        lines.append(rows.rstrip('\n'))

    return BOM + '\n'.join(lines)


def export_filename(meta: CaseMeta, on_date: Optional[date] = None) -> str:
    token = meta.case_id or DEFAULT_FILENAME_TOKEN
    token = re.sub(r'[\\/]', '_', token)
    stamp = (on_date or date.today()).isoformat()
    return f"Chronology_{token}_{stamp}.csv"


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------

def read_import_file(path) -> str:
    """Read an import file as text. A BOM is dropped and undecodable bytes are replaced."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ImportFileError(f"Cannot read import file {path}: {e}") from e
    return data.decode('utf-8-sig', errors='replace')


def split_lines(text: str) -> List[str]:
    """Split on line feeds only; other Unicode line breaks stay inside fields."""
    if text.startswith(BOM):
        text = text[len(BOM):]
    lines = [line.rstrip('\r') for line in text.split('\n')]
    return [line for line in lines if line.strip()]


def find_header_index(lines: Sequence[str]) -> int:
    """Index of the header row within the scan window, or -1."""
    for index, line in enumerate(lines[:HEADER_SCAN_LIMIT]):
        if all(marker in line for marker in HEADER_MARKERS):
            return index
    return -1


def parse_meta_lines(lines: Iterable[str]) -> Dict[str, str]:
    """Map 'Label:;value' lines to CaseMeta attributes. Unknown labels are ignored."""
    fields = {}
    for line in lines:
        parts = line.split(DELIMITER)
        if len(parts) < 2:
            continue
        label = parts[0].strip().lower()
        if label.endswith(':'):
            label = label[:-1].strip()
        attr = _META_ATTRS.get(label)
        if attr is None:
            continue
        fields[attr] = DELIMITER.join(parts[1:]).strip()
    return fields


def _raw_segments(line: str) -> List[str]:
    segments = []
    start = 0
    in_quotes = False
    for index, char in enumerate(line):
        if char == QUOTE:
            in_quotes = not in_quotes
        elif char == DELIMITER and not in_quotes:
            segments.append(line[start:index])
            start = index + 1
    segments.append(line[start:])
    return segments


def _unquote(segment: str) -> str:
    # Whitespace outside the quotes is dropped, whitespace inside is kept
    token = segment.strip()
    if token.startswith(QUOTE):
        token = token[1:]
    if token.endswith(QUOTE):
        token = token[:-1]
    return token.replace(QUOTE * 2, QUOTE)


def split_row(line: str) -> List[str]:
    """Tokenize one data line. Quoted fields may contain the delimiter."""
    return [_unquote(segment) for segment in _raw_segments(line)]



def parse_csv(text: str, existing_ids: Iterable[str] = (), today: Optional[str] = None,
              id_factory: Callable[[Iterable[str]], str] = generate_id) -> ParsedImport:
    """Parse import text into metadata fields and new records.

    Rows are dropped when their id is in existing_ids or appeared earlier in the
    same file. Nothing here touches a store.
    """
    result = ParsedImport()
    lines = split_lines(text or '')
    if not lines:
        return result

    header_index = find_header_index(lines)
    if header_index > 0:
        result.meta_fields = parse_meta_lines(lines[:header_index])

    known_ids = set(existing_ids)
    batch_ids = set()
    default_date = today or today_iso()

    for line in lines[header_index + 1:]:
        cols = split_row(line)
        if len(cols) < MIN_ROW_FIELDS:
            result.malformed += 1
            continue

        cols = (cols + [''] * 7)[:7]
        row_id, row_date, reg_no, name, correspondent, status_raw, note = cols

        if len(row_id) >= MIN_REUSABLE_ID_LENGTH:
            record_id = row_id
        else:
            record_id = id_factory(known_ids | batch_ids)

        if record_id in known_ids or record_id in batch_ids:
            result.duplicates += 1
            continue
        batch_ids.add(record_id)

        result.records.append(ChronologyRecord(
            id=record_id,
            date=row_date or default_date,
            reg_no=reg_no,
            name=name or IMPORTED_NAME_PLACEHOLDER,
            correspondent=correspondent,
            status=resolve_status_code(status_raw),
            note=note,
        ))

    return result
