from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from app.salesdesk.core.config import settings
from app.salesdesk.core.error_catalog import AppError, ErrorCatalog
from app.salesdesk.repos.sales_entries import DailyTypeTotalRow, SalesEntryRepository


@dataclass(frozen=True)
class ReportDateRange:
    start_date: date
    end_date: date

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1


@dataclass(frozen=True)
class SalesReport:
    date_range: ReportDateRange
    rows: list[DailyTypeTotalRow]
    totals_by_type: dict[str, Decimal]
    grand_total: Decimal


def _parse_date(value: str | None, *, field: str, default: date) -> date:
    if not value:
        return default
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": f"invalid {field} date"}) from exc


def resolve_date_range(from_value: str | None, to_value: str | None, *, today: date) -> ReportDateRange:
    end_date = _parse_date(to_value, field="to", default=today)
    start_date = _parse_date(from_value, field="from", default=end_date.replace(day=1))
    if end_date < start_date:
        raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": "to must be after from"})
    return ReportDateRange(start_date=start_date, end_date=end_date)


def validate_date_range(date_range: ReportDateRange, *, max_days: int) -> None:
    if max_days <= 0:
        return
    if date_range.days > max_days:
        raise AppError(
            ErrorCatalog.VALIDATION_ERROR,
            details={
                "message": "date range exceeds limit",
                "reason_code": "REPORT_DATE_RANGE_LIMIT_EXCEEDED",
                "max_days": max_days,
            },
        )


class SalesReportService:
    def __init__(self, db):
        self.entries = SalesEntryRepository(db)

    def sales_data(self, date_range: ReportDateRange) -> SalesReport:
        validate_date_range(date_range, max_days=settings.REPORTS_MAX_DATE_RANGE_DAYS)
        rows = self.entries.totals_by_day_and_type(
            date_range.start_date,
            date_range.end_date,
            limit=settings.REPORTS_MAX_ROWS,
        )
        totals: dict[str, Decimal] = defaultdict(lambda: Decimal("0.00"))
        for row in rows:
            totals[row.sales_type_name or str(row.sales_type_id)] += row.total_amount
        return SalesReport(
            date_range=date_range,
            rows=rows,
            totals_by_type=dict(totals),
            grand_total=sum(totals.values(), Decimal("0.00")),
        )
