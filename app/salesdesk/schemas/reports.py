from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel


class SalesDataRow(BaseModel):
    entry_date: date
    sales_type_id: int
    sales_type_name: str | None
    entry_count: int
    total_amount: Decimal


class SalesDataMeta(BaseModel):
    from_date: date
    to_date: date
    row_count: int


class SalesDataTotals(BaseModel):
    by_type: dict[str, Decimal]
    grand_total: Decimal


class SalesDataResponse(BaseModel):
    meta: SalesDataMeta
    rows: list[SalesDataRow]
    totals: SalesDataTotals
    trace_id: str
