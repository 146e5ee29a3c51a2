from fastapi import APIRouter, Body, Depends, Request

from app.salesdesk.core.context import RequestContext
from app.salesdesk.core.deps import require_request_context
from app.salesdesk.db.session import get_db
from app.salesdesk.schemas.errors import error_responses
from app.salesdesk.schemas.reference_data import (
    ReferenceDeleteResponse,
    ReferenceListResponse,
    ReferenceRecordResponse,
)
from app.salesdesk.services.reference_data import ReferenceDataService

router = APIRouter()


@router.get("/{kind}", response_model=ReferenceListResponse)
def list_reference_records(
    request: Request,
    kind: str,
    context: RequestContext = Depends(require_request_context),
    db=Depends(get_db),
):
    records = ReferenceDataService(db).list(context, kind)
    return ReferenceListResponse(kind=kind, records=records, trace_id=getattr(request.state, "trace_id", ""))


@router.post(
    "/{kind}",
    response_model=ReferenceRecordResponse,
    status_code=201,
    responses=error_responses(400, 401, 403, 404, 409),
)
def create_reference_record(
    request: Request,
    kind: str,
    payload: dict = Body(...),
    context: RequestContext = Depends(require_request_context),
    db=Depends(get_db),
):
    record = ReferenceDataService(db).create(context, kind, payload)
    return ReferenceRecordResponse(kind=kind, record=record, trace_id=getattr(request.state, "trace_id", ""))


@router.get("/{kind}/{record_id}", response_model=ReferenceRecordResponse)
def get_reference_record(
    request: Request,
    kind: str,
    record_id: int,
    context: RequestContext = Depends(require_request_context),
    db=Depends(get_db),
):
    record = ReferenceDataService(db).get(context, kind, record_id)
    return ReferenceRecordResponse(kind=kind, record=record, trace_id=getattr(request.state, "trace_id", ""))


@router.put("/{kind}/{record_id}", response_model=ReferenceRecordResponse)
def update_reference_record(
    request: Request,
    kind: str,
    record_id: int,
    payload: dict = Body(...),
    context: RequestContext = Depends(require_request_context),
    db=Depends(get_db),
):
    record = ReferenceDataService(db).update(context, kind, record_id, payload)
    return ReferenceRecordResponse(kind=kind, record=record, trace_id=getattr(request.state, "trace_id", ""))


@router.delete(
    "/{kind}/{record_id}",
    response_model=ReferenceDeleteResponse,
    responses=error_responses(401, 403, 404, 409),
)
def delete_reference_record(
    request: Request,
    kind: str,
    record_id: int,
    context: RequestContext = Depends(require_request_context),
    db=Depends(get_db),
):
    ReferenceDataService(db).delete(context, kind, record_id)
    return ReferenceDeleteResponse(
        kind=kind,
        resource_id=record_id,
        deleted=True,
        trace_id=getattr(request.state, "trace_id", ""),
    )
