"""
Core data model: case metadata, chronology records, drafts and derived statistics.
Snapshot dictionaries use camelCase keys (regNo, caseId).
"""

import string
import secrets
from dataclasses import dataclass, field, asdict, replace
from datetime import date
from typing import Any, Dict, Iterable, Optional

from .statuses import DEFAULT_STATUS, resolve_status_code

RECORD_FIELDS = ['id', 'date', 'reg_no', 'name', 'correspondent', 'status', 'note']

_ID_ALPHABET = string.digits + string.ascii_lowercase


def today_iso() -> str:
    return date.today().isoformat()


def generate_id(existing: Optional[Iterable[str]] = None) -> str:
    """Generate an opaque record id of the form '_' + 9 base-36 characters."""
    taken = set(existing or ())
    while True:
        candidate = '_' + ''.join(secrets.choice(_ID_ALPHABET) for _ in range(9))
        if candidate not in taken:
            return candidate


def _text(value: Any) -> str:
    return '' if value is None else str(value)


@dataclass
class CaseMeta:
    title: str = ''
    applicant: str = ''
    addressee: str = ''
    case_id: str = ''

    def is_empty(self) -> bool:
        return not (self.title or self.applicant or self.addressee or self.case_id)

    def to_dict(self) -> Dict[str, str]:
        return {
            'title': self.title,
            'applicant': self.applicant,
            'addressee': self.addressee,
            'caseId': self.case_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CaseMeta':
        return cls(
            title=_text(data.get('title')),
            applicant=_text(data.get('applicant')),
            addressee=_text(data.get('addressee')),
            case_id=_text(data.get('caseId', data.get('case_id'))),
        )


@dataclass
class RecordDraft:
    """A pending record value, submitted to the store only when complete."""
    date: str = field(default_factory=today_iso)
    reg_no: str = ''
    name: str = ''
    correspondent: str = ''
    status: str = DEFAULT_STATUS
    note: str = ''


@dataclass
class ChronologyRecord:
    id: str
    date: str
    reg_no: str = ''
    name: str = ''
    correspondent: str = ''
    status: str = DEFAULT_STATUS
    note: str = ''

    @classmethod
    def from_draft(cls, record_id: str, draft: RecordDraft) -> 'ChronologyRecord':
        return cls(id=record_id, **asdict(draft))

    def to_draft(self) -> RecordDraft:
        """Draft pre-filled with this record, for editing."""
        data = asdict(self)
        data.pop('id')
        return RecordDraft(**data)

    def copy(self) -> 'ChronologyRecord':
        return replace(self)

    def to_dict(self) -> Dict[str, str]:
        return {
            'id': self.id,
            'date': self.date,
            'regNo': self.reg_no,
            'name': self.name,
            'correspondent': self.correspondent,
            'status': self.status,
            'note': self.note,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChronologyRecord':
        """Build a record from a snapshot dict; unknown statuses fall back to the default."""
        return cls(
            id=_text(data.get('id')),
            date=_text(data.get('date')),
            reg_no=_text(data.get('regNo', data.get('reg_no'))),
            name=_text(data.get('name')),
            correspondent=_text(data.get('correspondent')),
            status=resolve_status_code(_text(data.get('status'))),
            note=_text(data.get('note')),
        )


@dataclass
class Stats:
    total: int
    final_success: int
    fail: int
    closed: int
    efficiency: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)
