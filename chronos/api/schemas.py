"""
Request/response models for the chronology API.
Record requests are the form boundary: date, name and correspondent must be present here.
"""

import re
from datetime import date as date_type
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.schema import CaseMeta, ChronologyRecord, RecordDraft
from ..core.statuses import DEFAULT_STATUS, status_codes

ISO_DATE_PATTERN = re.compile(r'^[0-9]{4}-[0-9]{2}-[0-9]{2}$')


class RecordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: str
    reg_no: str = Field(default='', alias='regNo')
    name: str
    correspondent: str
    status: str = DEFAULT_STATUS
    note: str = ''

    @field_validator('date')
    @classmethod
    def date_must_be_iso(cls, v):
        v = v.strip()
        if not ISO_DATE_PATTERN.match(v):
            raise ValueError('date must be an ISO date (YYYY-MM-DD)')
        try:
            date_type.fromisoformat(v)
        except ValueError:
            raise ValueError(f'date is not a calendar date: {v}')
        return v

    @field_validator('name')
    @classmethod
    def name_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('name cannot be empty')
        return v

    @field_validator('correspondent')
    @classmethod
    def correspondent_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('correspondent cannot be empty')
        return v

    @field_validator('status')
    @classmethod
    def status_must_be_valid(cls, v):
        valid_statuses = status_codes()
        if v not in valid_statuses:
            raise ValueError(f'status must be one of: {valid_statuses}')
        return v

    def to_draft(self) -> RecordDraft:
        return RecordDraft(
            date=self.date,
            reg_no=self.reg_no,
            name=self.name,
            correspondent=self.correspondent,
            status=self.status,
            note=self.note
        )


class RecordResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    date: str
    reg_no: str = Field(alias='regNo')
    name: str
    correspondent: str
    status: str
    status_label: str
    note: str

    @classmethod
    def from_record(cls, record: ChronologyRecord, label: str) -> 'RecordResponse':
        return cls(
            id=record.id,
            date=record.date,
            reg_no=record.reg_no,
            name=record.name,
            correspondent=record.correspondent,
            status=record.status,
            status_label=label,
            note=record.note
        )


class RecordListResponse(BaseModel):
    records: List[RecordResponse]
    search: str
    sort_key: str
    sort_direction: str


class MetaModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = ''
    applicant: str = ''
    addressee: str = ''
    case_id: str = Field(default='', alias='caseId')

    @classmethod
    def from_meta(cls, meta: CaseMeta) -> 'MetaModel':
        return cls(title=meta.title, applicant=meta.applicant, addressee=meta.addressee, case_id=meta.case_id)


class MetaUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    applicant: Optional[str] = None
    addressee: Optional[str] = None
    case_id: Optional[str] = Field(default=None, alias='caseId')

    def changed_fields(self) -> Dict[str, str]:
        return {name: value for name, value in self.model_dump().items() if value is not None}


class StatsResponse(BaseModel):
    total: int
    final_success: int
    fail: int
    closed: int
    efficiency: int


class SearchRequest(BaseModel):
    search: str = ''


class ViewResponse(BaseModel):
    search: str
    sort_key: str
    sort_direction: str


class PendingActionResponse(BaseModel):
    kind: str
    target_id: Optional[str] = None
    title: str
    message: str


class ConfirmationResponse(BaseModel):
    executed: bool
    action: Optional[PendingActionResponse] = None


class ImportResponse(BaseModel):
    added: int
    malformed: int
    duplicates: int
    meta_applied: bool


class WarningResponse(BaseModel):
    dismissed: bool


class HealthResponse(BaseModel):
    status: str
    version: str
    storage: str
    record_count: int
