from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends, Query, Request

from app.salesdesk.core.context import RequestContext
from app.salesdesk.core.deps import require_request_context
from app.salesdesk.db.session import get_db
from app.salesdesk.schemas.dashboard import DashboardStatsResponse, RecentEntriesResponse, RecentEntryItem
from app.salesdesk.services.access_policy import data_scope
from app.salesdesk.services.dashboard import DashboardAggregator

router = APIRouter()


@router.get("/stats", response_model=DashboardStatsResponse)
def dashboard_stats(
    request: Request,
    context: RequestContext = Depends(require_request_context),
    db=Depends(get_db),
):
    today = date.today()
    stats = DashboardAggregator(db).stats_for(context, today)
    return DashboardStatsResponse(
        date=today,
        today_total=stats.today_total,
        week_to_date_total=stats.week_to_date_total,
        month_to_date_total=stats.month_to_date_total,
        pending_count=stats.pending_count,
        scope=data_scope(context.role),
        trace_id=getattr(request.state, "trace_id", ""),
    )


@router.get("/recent-entries", response_model=RecentEntriesResponse)
def dashboard_recent_entries(
    request: Request,
    limit: int | None = Query(default=None, ge=1, le=100),
    context: RequestContext = Depends(require_request_context),
    db=Depends(get_db),
):
    rows = DashboardAggregator(db).recent_entries(context, limit)
    return RecentEntriesResponse(
        entries=[RecentEntryItem(**asdict(row)) for row in rows],
        trace_id=getattr(request.state, "trace_id", ""),
    )
