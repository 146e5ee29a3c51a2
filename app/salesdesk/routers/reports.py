from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends, Query, Request

from app.salesdesk.core.deps import require_capability
from app.salesdesk.db.session import get_db
from app.salesdesk.schemas.reports import SalesDataMeta, SalesDataResponse, SalesDataRow, SalesDataTotals
from app.salesdesk.services.access_policy import Capability
from app.salesdesk.services.reports import SalesReportService, resolve_date_range

router = APIRouter()


@router.get("/sales-data", response_model=SalesDataResponse)
def sales_data(
    request: Request,
    from_value: str | None = Query(default=None, alias="from"),
    to_value: str | None = Query(default=None, alias="to"),
    _permission=Depends(require_capability(Capability.REPORTS_VIEW)),
    db=Depends(get_db),
):
    date_range = resolve_date_range(from_value, to_value, today=date.today())
    report = SalesReportService(db).sales_data(date_range)
    return SalesDataResponse(
        meta=SalesDataMeta(
            from_date=report.date_range.start_date,
            to_date=report.date_range.end_date,
            row_count=len(report.rows),
        ),
        rows=[SalesDataRow(**asdict(row)) for row in report.rows],
        totals=SalesDataTotals(by_type=report.totals_by_type, grand_total=report.grand_total),
        trace_id=getattr(request.state, "trace_id", ""),
    )
