from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends, Query, Request

from app.salesdesk.core.deps import require_capability
from app.salesdesk.db.session import get_db
from app.salesdesk.schemas.submissions import TrackerItem, TrackerResponse, TrackerSummary
from app.salesdesk.services.access_policy import Capability
from app.salesdesk.services.tracker import TrackerReconciler

router = APIRouter()


@router.get("/tracker", response_model=TrackerResponse)
def submission_tracker(
    request: Request,
    entry_date: date | None = Query(default=None, alias="date"),
    _permission=Depends(require_capability(Capability.SALES_ENTRY_VIEW_OTHERS)),
    db=Depends(get_db),
):
    target = entry_date or date.today()
    reconciler = TrackerReconciler(db)
    rows = reconciler.status_for_date(target)
    return TrackerResponse(
        date=target,
        rows=[TrackerItem(**asdict(row)) for row in rows],
        summary=TrackerSummary(**reconciler.summarize(rows)),
        trace_id=getattr(request.state, "trace_id", ""),
    )
