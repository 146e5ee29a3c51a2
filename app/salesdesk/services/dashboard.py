from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from app.salesdesk.core.config import settings
from app.salesdesk.core.context import RequestContext
from app.salesdesk.repos.sales_entries import RecentEntryRow, SalesEntryRepository
from app.salesdesk.services.access_policy import SCOPE_ALL, data_scope


@dataclass(frozen=True)
class DashboardStats:
    today_total: Decimal
    week_to_date_total: Decimal
    month_to_date_total: Decimal
    pending_count: int


class DashboardAggregator:
    def __init__(self, db):
        self.entries = SalesEntryRepository(db)

    @staticmethod
    def _owner_filter(context: RequestContext) -> int | None:
        if data_scope(context.role) == SCOPE_ALL:
            return None
        return context.user_id

    def stats_for(self, context: RequestContext, today: date) -> DashboardStats:
        owner = self._owner_filter(context)
        week_start = today - timedelta(days=6)
        month_start = today.replace(day=1)
        pending = self.entries.count_unreported_terminals(today) if owner is None else 0
        return DashboardStats(
            today_total=self.entries.sum_amounts(today, today, user_id=owner),
            week_to_date_total=self.entries.sum_amounts(week_start, today, user_id=owner),
            month_to_date_total=self.entries.sum_amounts(month_start, today, user_id=owner),
            pending_count=pending,
        )

    def recent_entries(self, context: RequestContext, limit: int | None = None) -> list[RecentEntryRow]:
        limit = limit or settings.DASHBOARD_RECENT_LIMIT
        return self.entries.list_recent(limit=limit, user_id=self._owner_filter(context))
