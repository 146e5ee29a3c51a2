from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel


class DashboardStatsResponse(BaseModel):
    date: date
    today_total: Decimal
    week_to_date_total: Decimal
    month_to_date_total: Decimal
    pending_count: int
    scope: str
    trace_id: str


class RecentEntryItem(BaseModel):
    id: int
    entry_date: date
    submitted_at: datetime
    status: str
    pos_id: int
    pos_name: str | None
    location_name: str | None
    city_name: str | None
    user_id: int
    user_name: str | None
    total_amount: Decimal


class RecentEntriesResponse(BaseModel):
    entries: list[RecentEntryItem]
    trace_id: str
