from __future__ import annotations

from datetime import date
import json

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData, UploadFile

from app.salesdesk.core.context import RequestContext
from app.salesdesk.core.deps import get_attachment_store, require_request_context
from app.salesdesk.core.error_catalog import AppError, ErrorCatalog
from app.salesdesk.db.session import get_db
from app.salesdesk.schemas.errors import error_responses
from app.salesdesk.schemas.sales_entries import (
    SalesEntryAmendRequest,
    SalesEntryAmendResponse,
    SalesEntryDetailView,
    SalesEntryEditResponse,
    SalesEntryEditView,
    SalesEntryLine,
    SalesEntrySubmitResponse,
    SalesEntryViewResponse,
)
from app.salesdesk.services.attachments import AttachmentUpload, LocalAttachmentStore
from app.salesdesk.services.sales_ledger import EntryProjection, SalesLedger

router = APIRouter()

ATTACHMENT_FIELD_PREFIX = "attachment_"


def _required_field(form: FormData, field: str) -> str:
    value = form.get(field)
    if value is None or isinstance(value, UploadFile) or not str(value).strip():
        raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": f"{field} is required", "field": field})
    return str(value).strip()


def _parse_pos_id(form: FormData) -> int:
    raw = _required_field(form, "pos_id")
    try:
        return int(raw)
    except ValueError as exc:
        raise AppError(
            ErrorCatalog.VALIDATION_ERROR,
            details={"message": "pos_id must be an integer", "field": "pos_id"},
        ) from exc


def _parse_entry_date(form: FormData) -> date:
    raw = _required_field(form, "entry_date")
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise AppError(
            ErrorCatalog.VALIDATION_ERROR,
            details={"message": "entry_date must be YYYY-MM-DD", "field": "entry_date"},
        ) from exc


def _parse_entries(form: FormData) -> dict:
    raw = _required_field(form, "entries")
    try:
        entries = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise AppError(
            ErrorCatalog.VALIDATION_ERROR,
            details={"message": "entries must be a JSON object", "field": "entries"},
        ) from exc
    if not isinstance(entries, dict):
        raise AppError(
            ErrorCatalog.VALIDATION_ERROR,
            details={"message": "entries must be a JSON object", "field": "entries"},
        )
    return entries


async def _collect_attachments(form: FormData, *, max_bytes: int) -> dict[int, AttachmentUpload]:
    attachments: dict[int, AttachmentUpload] = {}
    for key, value in form.multi_items():
        if not key.startswith(ATTACHMENT_FIELD_PREFIX) or not isinstance(value, UploadFile):
            continue
        try:
            sales_type_id = int(key[len(ATTACHMENT_FIELD_PREFIX):])
        except ValueError as exc:
            raise AppError(
                ErrorCatalog.VALIDATION_ERROR,
                details={"message": "attachment field must name a sales type id", "field": key},
            ) from exc
        # One byte past the cap is enough to tell an oversize part apart.
        content = await value.read(max_bytes + 1)
        if len(content) > max_bytes:
            raise AppError(
                ErrorCatalog.VALIDATION_ERROR,
                details={
                    "message": f"file exceeds max size of {max_bytes} bytes",
                    "field": key,
                    "sales_type_id": sales_type_id,
                },
            )
        attachments[sales_type_id] = AttachmentUpload(
            content=content,
            filename=value.filename,
            content_type=value.content_type,
        )
    return attachments


def _lines(projection: EntryProjection) -> list[SalesEntryLine]:
    return [
        SalesEntryLine(
            sales_type_id=line.sales_type_id,
            sales_type_name=line.sales_type_name,
            amount=line.amount,
            attachment_ref=line.attachment_ref,
            attachment_url=line.attachment_url,
        )
        for line in projection.lines
    ]


@router.post(
    "/submit",
    response_model=SalesEntrySubmitResponse,
    responses=error_responses(400, 401, 403, 404, 500),
)
async def submit_sales_entry(
    request: Request,
    context: RequestContext = Depends(require_request_context),
    db=Depends(get_db),
    store: LocalAttachmentStore = Depends(get_attachment_store),
):
    form = await request.form()
    try:
        pos_id = _parse_pos_id(form)
        entry_date = _parse_entry_date(form)
        entries = _parse_entries(form)
        attachments = await _collect_attachments(form, max_bytes=store.max_bytes)
    finally:
        await form.close()

    ledger = SalesLedger(db, store=store)
    entry_id = await run_in_threadpool(
        ledger.submit,
        context,
        pos_id=pos_id,
        entry_date=entry_date,
        line_amounts=entries,
        attachments=attachments,
    )
    return SalesEntrySubmitResponse(
        entry_id=entry_id,
        message="Sales entry submitted",
        trace_id=getattr(request.state, "trace_id", ""),
    )


@router.get("/entry/{entry_id}", response_model=SalesEntryEditResponse)
def get_entry_for_edit(
    request: Request,
    entry_id: int,
    context: RequestContext = Depends(require_request_context),
    db=Depends(get_db),
    store: LocalAttachmentStore = Depends(get_attachment_store),
):
    projection = SalesLedger(db, store=store).fetch_for_edit(context, entry_id)
    return SalesEntryEditResponse(
        entry=SalesEntryEditView(
            id=projection.id,
            pos_id=projection.pos_id,
            pos_name=projection.pos_name,
            entry_date=projection.entry_date,
            user_id=projection.user_id,
            user_name=projection.user_name,
            status=projection.status,
            lines=_lines(projection),
        ),
        trace_id=getattr(request.state, "trace_id", ""),
    )


@router.get("/view/{entry_id}", response_model=SalesEntryViewResponse)
def get_entry_for_view(
    request: Request,
    entry_id: int,
    context: RequestContext = Depends(require_request_context),
    db=Depends(get_db),
    store: LocalAttachmentStore = Depends(get_attachment_store),
):
    projection = SalesLedger(db, store=store).fetch_for_view(context, entry_id)
    return SalesEntryViewResponse(
        entry=SalesEntryDetailView(
            id=projection.id,
            pos_id=projection.pos_id,
            pos_name=projection.pos_name,
            entry_date=projection.entry_date,
            user_id=projection.user_id,
            user_name=projection.user_name,
            status=projection.status,
            submitted_at=projection.submitted_at,
            lines=_lines(projection),
        ),
        trace_id=getattr(request.state, "trace_id", ""),
    )


@router.put(
    "/update/{entry_id}",
    response_model=SalesEntryAmendResponse,
    responses=error_responses(400, 401, 403, 404),
)
def amend_sales_entry(
    request: Request,
    entry_id: int,
    payload: SalesEntryAmendRequest,
    context: RequestContext = Depends(require_request_context),
    db=Depends(get_db),
    store: LocalAttachmentStore = Depends(get_attachment_store),
):
    SalesLedger(db, store=store).amend(context, entry_id, payload.entries)
    return SalesEntryAmendResponse(
        entry_id=entry_id,
        message="Sales entry updated",
        trace_id=getattr(request.state, "trace_id", ""),
    )
