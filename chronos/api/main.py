"""
Local HTTP surface for the chronology store.
Thin presentation layer: every endpoint delegates to RecordStore, ConfirmationFlow or the view state.
"""

from datetime import date
from typing import Optional
from urllib.parse import quote

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import Response

from .schemas import (
    ConfirmationResponse,
    HealthResponse,
    ImportResponse,
    MetaModel,
    MetaUpdateRequest,
    PendingActionResponse,
    RecordListResponse,
    RecordRequest,
    RecordResponse,
    SearchRequest,
    StatsResponse,
    ViewResponse,
    WarningResponse,
)
from ..core.actions import ConfirmationFlow
from ..core.config import STORAGE_BACKEND, VERSION, debug_enabled, get_storage
from ..core.query import SortConfig, ViewState
from ..core.statuses import status_label
from ..core.store import RecordStore
from ..util.logging import logger


class ChronologySession:
    """Store, pending confirmation and view state shared by all requests."""

    def __init__(self, store: RecordStore):
        self.store = store
        self.flow = ConfirmationFlow(store)
        self.view = ViewState()


_session: Optional[ChronologySession] = None


def get_session() -> ChronologySession:
    global _session
    if _session is None:
        _session = ChronologySession(RecordStore(get_storage()))
        logger.info(f"Chronology session started with {len(_session.store)} records")
    return _session


app = FastAPI(
    title="Case Chronology API",
    version=VERSION,
    description="Local single-user case chronology tracker",
    docs_url="/docs" if debug_enabled() else None,
    redoc_url="/redoc" if debug_enabled() else None
)


def _record_response(record) -> RecordResponse:
    return RecordResponse.from_record(record, status_label(record.status))


def _view_response(view: ViewState) -> ViewResponse:
    return ViewResponse(search=view.search, sort_key=view.sort.key, sort_direction=view.sort.direction)


def _sort_or_400(key: str, direction: str) -> SortConfig:
    try:
        return SortConfig(key, direction)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint(session: ChronologySession = Depends(get_session)):
    """Check system health."""
    return HealthResponse(
        status="healthy",
        version=VERSION,
        storage=STORAGE_BACKEND,
        record_count=len(session.store)
    )


# Meta

@app.get("/meta", response_model=MetaModel)
def get_meta(session: ChronologySession = Depends(get_session)):
    return MetaModel.from_meta(session.store.meta)


@app.put("/meta", response_model=MetaModel)
def put_meta(req: MetaUpdateRequest, session: ChronologySession = Depends(get_session)):
    meta = session.store.update_meta(**req.changed_fields())
    return MetaModel.from_meta(meta)


# Records

@app.get("/records", response_model=RecordListResponse)
def list_records(
    q: Optional[str] = None,
    sort: Optional[str] = None,
    direction: Optional[str] = None,
    session: ChronologySession = Depends(get_session)
):
    """List records through the query engine. Missing parameters fall back to the session view."""
    view = session.view
    search = view.search if q is None else q
    if sort is None:
        sort_config = _sort_or_400(view.sort.key, direction or view.sort.direction)
    else:
        sort_config = _sort_or_400(sort, direction or "asc")

    records = session.store.query(search, sort_config)
    return RecordListResponse(
        records=[_record_response(r) for r in records],
        search=search,
        sort_key=sort_config.key,
        sort_direction=sort_config.direction
    )


@app.get("/records/{record_id}", response_model=RecordResponse)
def get_record(record_id: str, session: ChronologySession = Depends(get_session)):
    record = session.store.get(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Record not found: {record_id}")
    return _record_response(record)


@app.post("/records", response_model=RecordResponse, status_code=201)
def create_record(req: RecordRequest, session: ChronologySession = Depends(get_session)):
    record = session.store.create(req.to_draft())
    return _record_response(record)


@app.put("/records/{record_id}", response_model=RecordResponse)
def update_record(record_id: str, req: RecordRequest, session: ChronologySession = Depends(get_session)):
    record = session.store.update(record_id, req.to_draft())
    if record is None:
        raise HTTPException(status_code=404, detail=f"Record not found: {record_id}")
    return _record_response(record)


# Confirmation flow

@app.post("/records/{record_id}/delete-request", response_model=PendingActionResponse)
def request_delete(record_id: str, session: ChronologySession = Depends(get_session)):
    return PendingActionResponse(**session.flow.request_delete(record_id).to_dict())


@app.post("/reset-request", response_model=PendingActionResponse)
def request_reset(session: ChronologySession = Depends(get_session)):
    return PendingActionResponse(**session.flow.request_reset().to_dict())


@app.get("/pending", response_model=Optional[PendingActionResponse])
def get_pending(session: ChronologySession = Depends(get_session)):
    pending = session.flow.pending
    return PendingActionResponse(**pending.to_dict()) if pending else None


@app.post("/pending/confirm", response_model=ConfirmationResponse)
def confirm_pending(session: ChronologySession = Depends(get_session)):
    action = session.flow.confirm()
    return ConfirmationResponse(
        executed=action is not None,
        action=PendingActionResponse(**action.to_dict()) if action else None
    )


@app.post("/pending/cancel", response_model=ConfirmationResponse)
def cancel_pending(session: ChronologySession = Depends(get_session)):
    action = session.flow.cancel()
    return ConfirmationResponse(
        executed=False,
        action=PendingActionResponse(**action.to_dict()) if action else None
    )


# View state

@app.get("/view", response_model=ViewResponse)
def get_view(session: ChronologySession = Depends(get_session)):
    return _view_response(session.view)


@app.post("/view/sort/{key}", response_model=ViewResponse)
def toggle_sort(key: str, session: ChronologySession = Depends(get_session)):
    try:
        session.view = session.view.toggle_sort(key)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _view_response(session.view)


@app.put("/view/search", response_model=ViewResponse)
def set_search(req: SearchRequest, session: ChronologySession = Depends(get_session)):
    session.view = session.view.with_search(req.search)
    return _view_response(session.view)


# Stats

@app.get("/stats", response_model=StatsResponse)
def get_stats(session: ChronologySession = Depends(get_session)):
    return StatsResponse(**session.store.stats().to_dict())


# CSV

@app.get("/export")
def export_records(session: ChronologySession = Depends(get_session)):
    filename, text = session.store.export_csv(date.today())
    return Response(
        content=text.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"}
    )


@app.post("/import", response_model=ImportResponse)
async def import_records(request: Request, session: ChronologySession = Depends(get_session)):
    """Import CSV text sent as the raw request body."""
    body = await request.body()
    text = body.decode("utf-8-sig", errors="replace")
    report = session.store.import_csv(text)
    return ImportResponse(**report.to_dict())


# Local data warning

@app.get("/warning", response_model=WarningResponse)
def get_warning(session: ChronologySession = Depends(get_session)):
    return WarningResponse(dismissed=session.store.is_warning_dismissed())


@app.post("/warning/dismiss", response_model=WarningResponse)
def dismiss_warning(session: ChronologySession = Depends(get_session)):
    session.store.dismiss_warning()
    return WarningResponse(dismissed=True)
